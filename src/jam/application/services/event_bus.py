from collections import defaultdict
import logging
from typing import Callable, DefaultDict, List, Optional, Type


Handler = Callable[[object], None]


class EventBus:
    """Synchronous publish/subscribe for career events.

    Handlers run in (priority, subscription order). A failing handler is
    logged and skipped so the remaining handlers and the publisher carry on.
    """

    def __init__(self) -> None:
        self._subscribers: DefaultDict[Optional[Type[object]], List[tuple[int, int, Handler]]] = defaultdict(list)
        self._next_order = 0
        self._last_publish_errors: List[Exception] = []
        self._logger = logging.getLogger(__name__)

    def subscribe(self, event_type: Type[object], handler: Handler, *, priority: int = 100) -> None:
        self._add(event_type, handler, priority)

    def subscribe_all(self, handler: Handler, *, priority: int = 100) -> None:
        """Receive every published event, whatever its type."""

        self._add(None, handler, priority)

    def _add(self, key: Optional[Type[object]], handler: Handler, priority: int) -> None:
        self._subscribers[key].append((int(priority), self._next_order, handler))
        self._next_order += 1

    def _handlers_for(self, event_type: Type[object]) -> List[tuple[int, int, Handler]]:
        rows = list(self._subscribers.get(event_type, ())) + list(self._subscribers.get(None, ()))
        rows.sort(key=lambda row: (row[0], row[1]))
        return rows

    def publish(self, event: object) -> None:
        self._last_publish_errors = []
        event_type = type(event)
        for priority, _, handler in self._handlers_for(event_type):
            try:
                handler(event)
            except Exception as exc:
                self._last_publish_errors.append(exc)
                handler_name = getattr(handler, "__qualname__", getattr(handler, "__name__", repr(handler)))
                self._logger.exception(
                    "Career event handler failed and was isolated",
                    extra={
                        "event_type": event_type.__name__,
                        "handler": handler_name,
                        "priority": priority,
                    },
                )

    def publish_all(self, events) -> List[Exception]:
        errors: List[Exception] = []
        for event in events:
            self.publish(event)
            errors.extend(self._last_publish_errors)
        self._last_publish_errors = errors
        return list(errors)

    def last_publish_errors(self) -> List[Exception]:
        return list(self._last_publish_errors)
