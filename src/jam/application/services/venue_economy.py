from __future__ import annotations

import math
from dataclasses import dataclass

from jam.application.services.balance_tables import (
    DEFAULT_TIP_FLOOR,
    EARLY_GUARDRAIL_FLOOR,
    EARLY_GUARDRAIL_WEEKS,
    FANS_GAIN_BY_GRADE,
    fan_bonus,
    round_half_up,
)
from jam.domain.models.calendar import EventEffect
from jam.domain.models.venue import Venue


@dataclass(frozen=True)
class VenueOutcome:
    margin: float
    gross: float
    net: int
    fans_gain: int


def apply_money_guardrails(net: int, venue: Venue, week: int) -> int:
    guarded = int(net)
    if venue.is_no_risk:
        tip_floor = venue.tip_floor if venue.tip_floor is not None else DEFAULT_TIP_FLOOR
        guarded = max(int(tip_floor), guarded)
    if int(week) <= EARLY_GUARDRAIL_WEEKS:
        guarded = max(guarded, EARLY_GUARDRAIL_FLOOR)
    return guarded


def fans_gain_for(grade: str, fans: int, venue: Venue, *, fan_mult: float = 1.0, decay: float = 1.0) -> int:
    base = FANS_GAIN_BY_GRADE.get(grade, FANS_GAIN_BY_GRADE["D"]) + fan_bonus(fans)
    gain = round_half_up(base * venue.fan_multiplier * decay)
    if fan_mult != 1.0:
        gain = round_half_up(gain * fan_mult)
    return max(0, gain)


def settle_performance(
    *,
    score: float,
    grade: str,
    venue: Venue,
    fans: int,
    week: int,
    effect: EventEffect | None = None,
    decay: float = 1.0,
) -> VenueOutcome:
    """Turn a score into money and fans at a venue.

    ``decay`` is 1.0 for a fresh release and below 1.0 for replayed gigs; it
    scales gross money and fan gain before the tip floor and early-week floor.
    """

    active = effect or EventEffect()
    margin = float(score) - float(venue.break_even)
    gross = max(0.0, margin) * venue.payout_per_point * active.payout_mult * decay
    net = math.floor(gross - venue.cost)
    return VenueOutcome(
        margin=margin,
        gross=gross,
        net=apply_money_guardrails(net, venue, week),
        fans_gain=fans_gain_for(grade, fans, venue, fan_mult=active.fan_mult, decay=decay),
    )


def risk_label(venue: Venue, expected_score: float) -> str:
    if venue.is_no_risk:
        return "None"
    margin = float(expected_score) - float(venue.break_even)
    if margin >= 5:
        return "Low"
    if margin >= 0:
        return "Edge"
    return "High"


def turnout_label(venue: Venue) -> str:
    if venue.fan_multiplier >= 2:
        return "Huge"
    if venue.fan_multiplier >= 1.4:
        return "High"
    if venue.fan_multiplier >= 1:
        return "Medium"
    return "Low"
