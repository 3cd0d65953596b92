from __future__ import annotations

from dataclasses import dataclass, field, replace


GRADES: tuple[str, ...] = ("S", "A", "B", "C", "D")


def release_ref(release_week: int, song_name: str) -> str:
    return f"{int(release_week)}:{song_name}"


@dataclass(frozen=True)
class GigEvent:
    week: int
    venue: str
    money_gain: int
    fans_gain: int


@dataclass(frozen=True)
class ReleaseRecord:
    week: int
    release_week: int
    song_name: str
    genre: str
    theme: str
    venue: str
    score: float
    grade: str
    chart_pos: int
    money_gain: int
    fans_gain: int
    feedback: tuple[str, ...] = ()
    review: str = ""
    fan_comments: tuple[str, ...] = ()
    gigs: tuple[GigEvent, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if self.grade not in GRADES:
            raise ValueError(f"Unsupported grade: {self.grade}")
        if not 0 <= float(self.score) <= 100:
            raise ValueError("Release score must be within 0..100")
        if not 1 <= int(self.chart_pos) <= 100:
            raise ValueError("Chart position must be within 1..100")

    @property
    def ref(self) -> str:
        return release_ref(self.release_week, self.song_name)

    @property
    def gig_money(self) -> int:
        return sum(int(gig.money_gain) for gig in self.gigs)

    @property
    def gig_fans(self) -> int:
        return sum(int(gig.fans_gain) for gig in self.gigs)

    def with_gig(self, gig: GigEvent) -> "ReleaseRecord":
        return replace(self, gigs=tuple(self.gigs) + (gig,))
