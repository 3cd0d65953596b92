from __future__ import annotations

import logging
import time
from typing import Callable, List, Protocol


logger = logging.getLogger(__name__)

Callback = Callable[[], None]


class Scheduler(Protocol):
    def schedule_after(self, delay_s: float, callback: Callback) -> None:
        ...


class ImmediateScheduler:
    """Runs the callback straight away; used by tests and headless runs."""

    def schedule_after(self, delay_s: float, callback: Callback) -> None:
        callback()


class ManualScheduler:
    """Queues callbacks until ``advance`` moves the clock past their due time."""

    def __init__(self) -> None:
        self._now = 0.0
        self._pending: List[tuple[float, int, Callback]] = []
        self._order = 0

    @property
    def pending(self) -> int:
        return len(self._pending)

    def schedule_after(self, delay_s: float, callback: Callback) -> None:
        due = self._now + max(0.0, float(delay_s))
        self._pending.append((due, self._order, callback))
        self._order += 1
        self._pending.sort(key=lambda row: (row[0], row[1]))

    def advance(self, seconds: float = 0.0) -> int:
        self._now += max(0.0, float(seconds))
        fired = 0
        while self._pending and self._pending[0][0] <= self._now:
            _, _, callback = self._pending.pop(0)
            callback()
            fired += 1
        return fired


class BlockingScheduler:
    """Sleeps for the delay, then calls back. The CLI uses this for the performance pause."""

    def __init__(self, sleep: Callable[[float], None] = time.sleep) -> None:
        self._sleep = sleep

    def schedule_after(self, delay_s: float, callback: Callback) -> None:
        delay = max(0.0, float(delay_s))
        if delay:
            logger.debug("Waiting %.2fs before revealing the performance", delay)
            self._sleep(delay)
        callback()
