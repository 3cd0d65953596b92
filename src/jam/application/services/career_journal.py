from __future__ import annotations

import logging
from collections import deque
from typing import Deque, List

from jam.application.services.event_bus import EventBus
from jam.domain.events import (
    CalendarGrantApplied,
    GigCompleted,
    Notification,
    ReleaseCompleted,
    SeasonEnded,
    VenueUnlocked,
    WeekAdvanced,
)


logger = logging.getLogger(__name__)

JOURNAL_MAX = 50


class CareerJournal:
    """Collects toast lines for the shell and logs lifecycle events."""

    def __init__(self, event_bus: EventBus, *, max_entries: int = JOURNAL_MAX) -> None:
        self.event_bus = event_bus
        self._toasts: Deque[str] = deque(maxlen=max(1, int(max_entries)))

    def register_handlers(self) -> None:
        self.event_bus.subscribe(VenueUnlocked, self.on_venue_unlocked, priority=10)
        self.event_bus.subscribe(SeasonEnded, self.on_season_ended, priority=10)
        self.event_bus.subscribe(CalendarGrantApplied, self.on_grant, priority=50)
        self.event_bus.subscribe_all(self.on_any_event, priority=200)

    def on_venue_unlocked(self, event: VenueUnlocked) -> None:
        self._toasts.append(f"New venue unlocked: {event.venue_name}!")

    def on_season_ended(self, event: SeasonEnded) -> None:
        self._toasts.append(
            f"Season complete: {event.releases} releases, £{event.money}, {event.fans} fans."
        )

    def on_grant(self, event: CalendarGrantApplied) -> None:
        logger.info("Calendar grant %s paid £%d in week %d", event.event_id, event.amount, event.week)

    def on_any_event(self, event: object) -> None:
        # Notification text already reaches the shell through ActionResult messages.
        if isinstance(event, Notification):
            logger.debug("Toast: %s", event.text)
        elif isinstance(event, ReleaseCompleted):
            logger.info("Release revealed: %s (%s)", event.record.ref, event.record.grade)
        elif isinstance(event, GigCompleted):
            logger.info("Gig settled for %s: £%d", event.record.ref, event.gig.money_gain)
        elif isinstance(event, WeekAdvanced):
            logger.info("Week %d -> %d", event.week_before, event.week_after)

    def drain(self) -> List[str]:
        lines = list(self._toasts)
        self._toasts.clear()
        return lines


def register_career_journal(event_bus: EventBus) -> CareerJournal:
    journal = CareerJournal(event_bus)
    journal.register_handlers()
    return journal
