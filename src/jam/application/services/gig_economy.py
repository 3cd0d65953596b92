from __future__ import annotations

from dataclasses import dataclass

from jam.application.services.balance_tables import (
    GIG_NO_RISK_BOOST,
    GIG_STAGE_GAIN,
    GIG_VOCALS_GAIN,
    diminish_factor,
    gig_freshness,
    gig_repetition_factor,
    gig_soft_cap,
)
from jam.application.services.venue_economy import VenueOutcome, settle_performance
from jam.domain.models.calendar import EventEffect
from jam.domain.models.release import GigEvent, ReleaseRecord
from jam.domain.models.venue import Venue
from jam.domain.models.week_plan import DayEntry, WeekPlan


@dataclass(frozen=True)
class GigDecay:
    freshness: float
    repetition: float
    soft_cap: float

    @property
    def factor(self) -> float:
        return self.freshness * self.repetition * self.soft_cap


@dataclass(frozen=True)
class GigOutcome:
    decay: GigDecay
    economics: VenueOutcome
    gains: dict[str, float]
    gig: GigEvent
    entry: DayEntry


def gig_decay(record: ReleaseRecord, *, week: int, plan: WeekPlan) -> GigDecay:
    weeks_since_release = max(0, int(week) - int(record.release_week))
    return GigDecay(
        freshness=gig_freshness(weeks_since_release),
        repetition=gig_repetition_factor(plan.gig_count_for(record.ref)),
        # The gig being booked counts toward the weekly total.
        soft_cap=gig_soft_cap(plan.gigs_this_week + 1),
    )


def gig_training_gains(venue: Venue, nth: int) -> dict[str, float]:
    boost = GIG_NO_RISK_BOOST if venue.is_no_risk else 1.0
    factor = diminish_factor(nth)
    return {
        "stage": GIG_STAGE_GAIN * boost * factor,
        "vocals": GIG_VOCALS_GAIN * boost * factor,
    }


def settle_gig(
    record: ReleaseRecord,
    venue: Venue,
    *,
    week: int,
    fans: int,
    plan: WeekPlan,
    effect: EventEffect | None = None,
) -> GigOutcome:
    decay = gig_decay(record, week=week, plan=plan)
    economics = settle_performance(
        score=record.score,
        grade=record.grade,
        venue=venue,
        fans=fans,
        week=week,
        effect=effect,
        decay=decay.factor,
    )
    gains = gig_training_gains(venue, plan.gigs_this_week + 1)
    gig = GigEvent(week=int(week), venue=venue.name, money_gain=economics.net, fans_gain=economics.fans_gain)
    entry = DayEntry(
        activity="gig",
        gains=tuple(sorted(gains.items())),
        song_ref=record.ref,
    )
    return GigOutcome(decay=decay, economics=economics, gains=gains, gig=gig, entry=entry)
