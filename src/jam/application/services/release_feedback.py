from __future__ import annotations

from collections.abc import Sequence

from jam.application.services.seed_policy import RandomSource, derive_rng, roll_between
from jam.domain.models.release import ReleaseRecord
from jam.domain.models.stats import PerformerStats
from jam.domain.models.week_plan import WeekPlan


FAN_COMMENT_COUNT = 5
TOP_CHART_NOTE_LIMIT = 10
MIN_FOCUS_DAYS = 3

REVIEW_LINES = {
    "S": ("Instant classic!", "A career-defining hit!", "You owned the stage."),
    "A": ("Strong release - fans will love it.", "A big step up!", "This one has real sparkle."),
    "B": ("Solid track with potential.", "Good, but could be sharper.", "Nice vibe - keep going."),
    "C": ("Decent effort, needs polish.", "Some good ideas, uneven execution.", "Not bad - practice will help."),
    "D": ("Rough around the edges.", "This didn't land with critics.", "Back to the drawing board."),
}

_FILLER_COMMENT = "Loving the growth each week!"


def build_feedback(
    *,
    stats: PerformerStats,
    plan: WeekPlan,
    genre: str,
    theme: str,
    previous: ReleaseRecord | None,
) -> list[str]:
    practice_days = plan.count("practice")
    write_days = plan.count("write")
    perform_days = plan.count("perform")

    melody = practice_days * (1 + stats.vocals / 12) * 8
    lyrics = write_days * (1 + stats.writing / 12) * 8
    performance = perform_days * (1 + stats.stage / 12) * 8
    weakest = min(melody, lyrics, performance)

    tips: list[str] = []
    if weakest == melody:
        tips.append("Improve singing & spend more days composing (melody).")
    if weakest == lyrics:
        tips.append("Improve writing & spend more days on lyrics.")
    if weakest == performance:
        tips.append("Improve stage presence & spend more days rehearsing.")
    if write_days < MIN_FOCUS_DAYS:
        tips.append("Dedicate more time to writing this week.")
    if perform_days < MIN_FOCUS_DAYS:
        tips.append("Dedicate more time to performance this week.")
    if previous is not None and previous.genre == genre and previous.theme == theme:
        tips.append("Too similar to last release - try varying genre or theme.")
    return tips


def pick_review(grade: str, rng: RandomSource) -> str:
    lines = REVIEW_LINES.get(grade)
    if not lines:
        return "..."
    return lines[roll_between(rng, 0, len(lines) - 1)]


def _comment_pool(record: ReleaseRecord, performer_name: str) -> Sequence[str]:
    if record.grade in {"S", "A"}:
        return (
            f"On repeat! {record.song_name or 'This song'} is unreal.",
            f"Chills. {performer_name} absolutely delivered.",
            "That hook is living rent-free in my head.",
            f"Peak {record.genre}! Chef's kiss.",
            "Instant fave - can't stop humming it.",
        )
    if record.grade == "B":
        return (
            "Big step up - love the vibe.",
            "This chorus hits just right.",
            f"Such a cool {record.theme.lower()} energy.",
            "Solid track - more please!",
            "Clever lyrics and a catchy groove.",
        )
    return (
        "I like this direction!",
        "Can't wait to hear it live.",
        "Nice blend of styles.",
        "This will grow on people.",
        "Proud of the grind - keep going!",
    )


def fan_comments(record: ReleaseRecord, performer_name: str, rng: RandomSource) -> list[str]:
    name = str(performer_name or "").strip() or "You"
    notes: list[str] = []
    if record.chart_pos <= TOP_CHART_NOTE_LIMIT:
        notes.append(f"Top {record.chart_pos}! Legends in the making.")

    pool = list(_comment_pool(record, name))
    wanted = (FAN_COMMENT_COUNT - 1) - len(notes)
    while wanted > 0 and pool:
        index = roll_between(rng, 0, len(pool) - 1)
        notes.append(pool.pop(index))
        wanted -= 1
    while len(notes) < FAN_COMMENT_COUNT:
        notes.append(_FILLER_COMMENT)
    return notes[:FAN_COMMENT_COUNT]


def flavour_rng(calendar_seed: int, week: int, song_name: str):
    return derive_rng("release.flavour", {"seed": int(calendar_seed), "week": int(week), "song": str(song_name)})
