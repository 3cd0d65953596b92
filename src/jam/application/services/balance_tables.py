from __future__ import annotations

import math

from jam.domain.models.venue import Venue


BASE_TRAINING_GAIN = 0.15
DIMINISH_RATE = 0.85
DIMINISH_FLOOR = 0.3

DIE_TIERS: tuple[tuple[float, int], ...] = (
    (9.5, 6),
    (9.0, 8),
    (7.0, 10),
    (5.0, 12),
)
WORST_DIE_FACES = 20

SKILL_WEIGHTS = {
    "sing": 0.34,
    "write": 0.33,
    "perform": 0.33,
}
DICE_QUALITY_SCALE = 100

LEGACY_TRIAD_SCALE = 5
LEGACY_EARLY_FACTOR_START = 0.75
LEGACY_EARLY_FACTOR_STEP = 0.05
TRIAD_STAT_DIVISOR = 8

COMPAT_BONUS_GOOD = 8
RISKY_BIG_BOOST = 12
RISKY_PENALTY = 8
RISKY_BOOST_ODDS = 4

SCORE_NOISE = 5
CHART_NOISE = 3
CHART_BASE = 120
CHART_FAN_BOOST_CAP = 40
CHART_FAN_BOOST_SCALE = 14

GRADE_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (90, "S"),
    (80, "A"),
    (70, "B"),
    (60, "C"),
)
LOWEST_GRADE = "D"

FANS_GAIN_BY_GRADE = {"S": 60, "A": 40, "B": 25, "C": 12, "D": 5}
FAN_BONUS_RATE = 0.05

EARLY_GUARDRAIL_WEEKS = 3
EARLY_GUARDRAIL_FLOOR = -20
DEFAULT_TIP_FLOOR = 5
BUSKING_STAGE_BONUS = 0.2

GIG_FRESHNESS_DECAY = 0.1
GIG_FRESHNESS_FLOOR = 0.5
GIG_REPETITION_FACTORS: tuple[float, ...] = (1.0, 0.8, 0.6)
GIG_REPETITION_FLOOR = 0.5
GIG_SOFT_CAP_THRESHOLD = 3
GIG_SOFT_CAP_FACTOR = 0.5
GIG_STAGE_GAIN = 0.25
GIG_VOCALS_GAIN = 0.12
GIG_NO_RISK_BOOST = 1.1

NO_RISK_VENUE_KEY = "busking"

VENUES: dict[str, Venue] = {
    "busking": Venue(
        key="busking",
        name="Busking",
        cost=0,
        break_even=45,
        payout_per_point=0.8,
        fan_multiplier=0.6,
        variance=1,
        fan_requirement=0,
        tip_floor=5,
        description="Free, safe and humble. Great to learn and earn a little.",
    ),
    "ozdustball": Venue(
        key="ozdustball",
        name="Ozdust Ball",
        cost=20,
        break_even=60,
        payout_per_point=1.3,
        fan_multiplier=1.1,
        variance=2,
        fan_requirement=50,
        description="Lively hall. Profitable with solid songs.",
    ),
    "stadium": Venue(
        key="stadium",
        name="Stadium",
        cost=500,
        break_even=85,
        payout_per_point=2.2,
        fan_multiplier=2.2,
        variance=4,
        fan_requirement=1000,
        description="Massive scale. All or nothing.",
    ),
}


def round_half_up(value: float) -> int:
    return math.floor(float(value) + 0.5)


def diminish_factor(nth: int) -> float:
    safe_nth = max(1, int(nth))
    return max(DIMINISH_FLOOR, DIMINISH_RATE ** (safe_nth - 1))


def training_delta(nth: int) -> float:
    return BASE_TRAINING_GAIN * diminish_factor(nth)


def triad_contribution(stat: float) -> float:
    return 1 + float(stat) / TRIAD_STAT_DIVISOR


def legacy_early_factor(week: int) -> float:
    safe_week = max(1, int(week))
    return min(1.0, LEGACY_EARLY_FACTOR_START + LEGACY_EARLY_FACTOR_STEP * (safe_week - 1))


def grade_from_score(score: float) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return LOWEST_GRADE


def chart_fan_boost(fans: int) -> int:
    safe_fans = max(0, int(fans or 0))
    return min(CHART_FAN_BOOST_CAP, math.floor(math.log10(safe_fans + 10) * CHART_FAN_BOOST_SCALE))


def fan_bonus(fans: int) -> int:
    return math.floor(max(0, int(fans or 0)) * FAN_BONUS_RATE)


def gig_freshness(weeks_since_release: int) -> float:
    elapsed = max(0, int(weeks_since_release))
    return max(GIG_FRESHNESS_FLOOR, 1 - GIG_FRESHNESS_DECAY * elapsed)


def gig_repetition_factor(prior_gigs_of_song: int) -> float:
    index = max(0, int(prior_gigs_of_song))
    if index < len(GIG_REPETITION_FACTORS):
        return GIG_REPETITION_FACTORS[index]
    return GIG_REPETITION_FLOOR


def gig_soft_cap(gigs_this_week: int) -> float:
    if int(gigs_this_week) >= GIG_SOFT_CAP_THRESHOLD:
        return GIG_SOFT_CAP_FACTOR
    return 1.0


def venue_for_key(venue_key: str | None) -> Venue | None:
    return VENUES.get(str(venue_key or "").strip().lower())
