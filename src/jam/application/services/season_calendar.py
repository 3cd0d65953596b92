from __future__ import annotations

from collections.abc import Iterable, Sequence

from jam.application.services.seed_policy import derive_rng
from jam.domain.models.calendar import CalendarEvent, EventChoice, EventEffect, EventResolution
from jam.domain.models.career import SEASON_LENGTH


OFF_WEEK_FIRST = 16
OFF_WEEK_SPAN = 12


def _event(week: int, key: str, title: str, short: str, details: str, kind: str, effect=None, choices=()) -> CalendarEvent:
    return CalendarEvent(
        id=f"{key}-{week}",
        week=week,
        key=key,
        title=title,
        short=short,
        details=details,
        kind=kind,
        effect=effect,
        choices=tuple(choices),
    )


def build_season_schedule(calendar_seed: int) -> tuple[CalendarEvent, ...]:
    """Build the run's calendar. The same seed always yields the same schedule."""

    rng = derive_rng("season.calendar", {"seed": int(calendar_seed)})
    off_week = OFF_WEEK_FIRST + rng.randint(0, OFF_WEEK_SPAN - 1)

    events = [
        _event(3, "grant", "Arts Council Grant", "Small grant awarded",
               "You receive a small grant to support your music.", "bonus",
               EventEffect(grant_money=100)),
        _event(6, "festival", "Local Festival Week", "Crowds are buzzing",
               "Local festival boosts turnout and payouts.", "bonus",
               EventEffect(fan_mult=1.2, payout_mult=1.2)),
        _event(20, "festival", "Summer Fest", "Big crowds in town",
               "Major festival boosts turnout and payouts.", "bonus",
               EventEffect(fan_mult=1.25, payout_mult=1.25)),
        _event(24, "openmic", "Open Mic Marathon", "Pick your focus",
               "Choose between quick cash or fan hype.", "choice",
               choices=(
                   EventChoice(label="Take tips (+£60 now)", effect=EventEffect(grant_money=60)),
                   EventChoice(label="Hype it (fans x1.2 this week)", effect=EventEffect(fan_mult=1.2)),
               )),
        _event(34, "festival", "City Spotlight", "Music week",
               "Citywide spotlight increases turnout and payouts.", "bonus",
               EventEffect(fan_mult=1.3, payout_mult=1.2)),
        _event(off_week, "offweek", "Off-Week", "Crowds feel quiet",
               "Lower than usual interest this week.", "penalty",
               EventEffect(fan_mult=0.9, payout_mult=0.9)),
        _event(SEASON_LENGTH - 1, "finalchance", "Final Chance", "Last song before the finale",
               "This is your final chance to make a song before the season finale.", "info"),
        _event(SEASON_LENGTH, "finale", "Season Finale", "Finale",
               "Your last release of the season.", "info"),
    ]
    events.sort(key=lambda event: (event.week, event.id))
    return tuple(events)


def events_for_week(schedule: Iterable[CalendarEvent], week: int) -> list[CalendarEvent]:
    return [event for event in schedule if event.week == int(week)]


def find_event(schedule: Iterable[CalendarEvent], event_id: str) -> CalendarEvent | None:
    for event in schedule:
        if event.id == event_id:
            return event
    return None


def _resolution(resolved: Sequence[EventResolution], event_id: str) -> EventResolution | None:
    for row in resolved:
        if row.event_id == event_id:
            return row
    return None


def effect_for_event(event: CalendarEvent, resolved: Sequence[EventResolution]) -> EventEffect:
    if event.choices:
        row = _resolution(resolved, event.id)
        if row is None or row.choice_index is None:
            return EventEffect()
        if not 0 <= row.choice_index < len(event.choices):
            return EventEffect()
        return event.choices[row.choice_index].effect
    return event.effect or EventEffect()


def effects_for_week(
    schedule: Iterable[CalendarEvent],
    week: int,
    resolved: Sequence[EventResolution],
) -> EventEffect:
    merged = EventEffect()
    for event in events_for_week(schedule, week):
        merged = merged.merge(effect_for_event(event, resolved))
    return merged


def performance_effect(schedule: Iterable[CalendarEvent], week: int, resolved: Sequence[EventResolution]) -> EventEffect:
    """Multipliers that apply to performances this week; grants are paid separately."""

    merged = effects_for_week(schedule, week, resolved)
    return EventEffect(fan_mult=merged.fan_mult, payout_mult=merged.payout_mult)


def pending_grants(
    schedule: Iterable[CalendarEvent],
    week: int,
    resolved: Sequence[EventResolution],
) -> list[CalendarEvent]:
    """Non-choice events of ``week`` that grant money and have not been paid yet."""

    pending: list[CalendarEvent] = []
    for event in events_for_week(schedule, week):
        if event.choices or event.effect is None or event.effect.grant_money <= 0:
            continue
        if _resolution(resolved, event.id) is not None:
            continue
        pending.append(event)
    return pending
