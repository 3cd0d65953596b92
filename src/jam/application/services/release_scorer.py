from __future__ import annotations

from dataclasses import dataclass

from jam.application.services.balance_tables import (
    CHART_BASE,
    CHART_NOISE,
    DICE_QUALITY_SCALE,
    LEGACY_TRIAD_SCALE,
    SCORE_NOISE,
    SKILL_WEIGHTS,
    chart_fan_boost,
    grade_from_score,
    legacy_early_factor,
    round_half_up,
)
from jam.application.services.compatibility import forecast_bonus, realized_bonus
from jam.application.services.seed_policy import RandomSource, roll_between
from jam.domain.models.dice import DiceTable
from jam.domain.models.venue import Venue
from jam.domain.models.week_plan import WeekPlan


SCORING_MODE_DICE = "dice"
SCORING_MODE_LEGACY = "legacy"
SCORING_MODES: tuple[str, ...] = (SCORING_MODE_DICE, SCORING_MODE_LEGACY)


@dataclass(frozen=True)
class ReleaseScore:
    quality: float
    compatibility_bonus: int
    noise: int
    score: float
    grade: str
    chart_pos: int


def clamp_score(value: float) -> float:
    return max(0.0, min(100.0, float(value)))


def dice_quality(dice: DiceTable) -> float:
    total = 0.0
    for skill, result in dice.items():
        if result is None:
            continue
        total += SKILL_WEIGHTS[skill] * result.quality
    return total * DICE_QUALITY_SCALE


def legacy_quality(plan: WeekPlan, week: int) -> float:
    return plan.triad_total() * LEGACY_TRIAD_SCALE * legacy_early_factor(week)


def quality_base(mode: str, dice: DiceTable, plan: WeekPlan, week: int) -> float:
    if mode == SCORING_MODE_LEGACY:
        return legacy_quality(plan, week)
    return dice_quality(dice)


def chart_position(score: float, fans: int, rng: RandomSource) -> int:
    raw = (CHART_BASE - float(score)) - chart_fan_boost(fans) + roll_between(rng, -CHART_NOISE, CHART_NOISE)
    return max(1, min(100, round_half_up(raw)))


def score_release(
    *,
    mode: str,
    dice: DiceTable,
    plan: WeekPlan,
    week: int,
    genre: str,
    theme: str,
    venue: Venue,
    fans: int,
    rng: RandomSource,
) -> ReleaseScore:
    """Score one release.

    Draw order is fixed so a scripted RNG can replay it: the risky-pair roll
    (only when the pairing is risky), base noise, venue noise, chart noise.
    """

    quality = quality_base(mode, dice, plan, week)
    bonus = realized_bonus(genre, theme, rng)
    noise = roll_between(rng, -SCORE_NOISE, SCORE_NOISE) + roll_between(rng, -venue.variance, venue.variance)
    score = clamp_score(quality + bonus + noise)
    return ReleaseScore(
        quality=quality,
        compatibility_bonus=bonus,
        noise=noise,
        score=score,
        grade=grade_from_score(score),
        chart_pos=chart_position(score, fans, rng),
    )


def forecast_score(*, mode: str, dice: DiceTable, plan: WeekPlan, week: int, genre: str, theme: str) -> float:
    return clamp_score(quality_base(mode, dice, plan, week) + forecast_bonus(genre, theme))
