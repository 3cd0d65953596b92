from __future__ import annotations

from dataclasses import dataclass

from jam.application.services.balance_tables import training_delta, triad_contribution
from jam.domain.models.stats import PerformerStats
from jam.domain.models.week_plan import TRAINING_ACTIVITIES, DayEntry, WeekPlan


ACTIVITY_STAT = {
    "practice": "vocals",
    "write": "writing",
    "perform": "stage",
}


@dataclass(frozen=True)
class TrainingOutcome:
    activity: str
    nth: int
    delta: float
    stats: PerformerStats
    plan: WeekPlan

    @property
    def stat_name(self) -> str:
        return ACTIVITY_STAT[self.activity]


def apply_training(activity: str, stats: PerformerStats, plan: WeekPlan) -> TrainingOutcome:
    """Apply one training day and log it on the week plan.

    The ordinal is taken from the plan, so the n-th day of the same activity
    this week yields ``0.15 * diminish_factor(n)``. The triad contribution is
    measured from the stat before the gain.
    """

    if activity not in TRAINING_ACTIVITIES:
        raise ValueError(f"Unsupported training activity: {activity}")

    stat_name = ACTIVITY_STAT[activity]
    nth = plan.count(activity) + 1
    delta = training_delta(nth)
    before = stats.get(stat_name)
    after_stats = stats.with_gains({stat_name: delta})
    applied = after_stats.get(stat_name) - before

    entry = DayEntry(
        activity=activity,
        gains=((stat_name, applied),),
        triad=triad_contribution(before),
    )
    return TrainingOutcome(
        activity=activity,
        nth=nth,
        delta=delta,
        stats=after_stats,
        plan=plan.append(entry),
    )
