from __future__ import annotations

from dataclasses import dataclass


GENRES: tuple[str, ...] = (
    "Pop",
    "Rock",
    "EDM",
    "Hip-Hop",
    "Jazz",
    "Country",
    "R&B",
    "Metal",
    "Folk",
    "Synthwave",
)

THEMES: tuple[str, ...] = (
    "Love",
    "Heartbreak",
    "Freedom",
    "Party",
    "Rebellion",
    "Nostalgia",
    "Adventure",
    "Dreams",
    "Empowerment",
    "Melancholy",
)

DEFAULT_GENRE = GENRES[0]
DEFAULT_THEME = THEMES[0]
SONG_NAME_MAX_LENGTH = 60


def normalize_genre(raw: str | None) -> str | None:
    candidate = str(raw or "").strip().lower()
    for genre in GENRES:
        if genre.lower() == candidate:
            return genre
    return None


def normalize_theme(raw: str | None) -> str | None:
    candidate = str(raw or "").strip().lower()
    for theme in THEMES:
        if theme.lower() == candidate:
            return theme
    return None


def normalize_song_name(raw: str | None) -> str:
    return " ".join(str(raw or "").split())[:SONG_NAME_MAX_LENGTH]


@dataclass(frozen=True)
class SongConcept:
    genre: str = DEFAULT_GENRE
    theme: str = DEFAULT_THEME
    name: str = ""

    def __post_init__(self) -> None:
        if self.genre not in GENRES:
            raise ValueError(f"Unsupported genre: {self.genre}")
        if self.theme not in THEMES:
            raise ValueError(f"Unsupported theme: {self.theme}")
        object.__setattr__(self, "name", normalize_song_name(self.name))

    @property
    def display_name(self) -> str:
        return self.name or "Untitled"
