from __future__ import annotations

from dataclasses import dataclass

from jam.domain.models.stats import STAT_NAMES


TRAINING_ACTIVITIES: tuple[str, ...] = ("practice", "write", "perform")
DAY_ACTIVITIES: tuple[str, ...] = TRAINING_ACTIVITIES + ("gig",)

DAYS_PER_WEEK = 7
MAX_GIGS_PER_WEEK = 3


def normalize_activity(raw: str | None) -> str | None:
    candidate = str(raw or "").strip().lower()
    aliases = {"sing": "practice", "dance": "perform"}
    candidate = aliases.get(candidate, candidate)
    if candidate in DAY_ACTIVITIES:
        return candidate
    return None


@dataclass(frozen=True)
class DayEntry:
    activity: str
    gains: tuple[tuple[str, float], ...] = ()
    triad: float = 0.0
    song_ref: str | None = None

    def __post_init__(self) -> None:
        if self.activity not in DAY_ACTIVITIES:
            raise ValueError(f"Unsupported day activity: {self.activity}")
        for stat_name, _ in self.gains:
            if stat_name not in STAT_NAMES:
                raise ValueError(f"Unknown performer stat: {stat_name}")

    @property
    def delta(self) -> float:
        return sum(float(value) for _, value in self.gains)

    def gain_for(self, stat_name: str) -> float:
        return sum(float(value) for name, value in self.gains if name == stat_name)


@dataclass(frozen=True)
class WeekPlan:
    """Ordered log of the week's day entries.

    Counters shown to the player (days used, gigs booked, gains this week) are
    always derived from the log.
    """

    entries: tuple[DayEntry, ...] = ()

    def append(self, entry: DayEntry) -> "WeekPlan":
        return WeekPlan(entries=tuple(self.entries) + (entry,))

    @property
    def days_used(self) -> int:
        return len(self.entries)

    @property
    def days_remaining(self) -> int:
        return max(0, DAYS_PER_WEEK - self.days_used)

    @property
    def gigs_this_week(self) -> int:
        return self.count("gig")

    def count(self, activity: str) -> int:
        return sum(1 for entry in self.entries if entry.activity == activity)

    def gig_count_for(self, song_ref: str) -> int:
        return sum(1 for entry in self.entries if entry.activity == "gig" and entry.song_ref == song_ref)

    def gains(self) -> dict[str, float]:
        totals = {name: 0.0 for name in STAT_NAMES}
        for entry in self.entries:
            for name, value in entry.gains:
                totals[name] += float(value)
        return totals

    def triad_total(self) -> float:
        return sum(float(entry.triad) for entry in self.entries if entry.activity != "gig")
