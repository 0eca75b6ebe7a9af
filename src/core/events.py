"""Minimal synchronous observer used to publish session state changes.

Presentation layers subscribe and re-render; core logic never depends on
who is listening.
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List

from core.log import get_logger

logger = get_logger("events")

Listener = Callable[[str, Dict[str, Any]], None]


class EventEmitter:
    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a function that unsubscribes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def emit(self, event: str, **data: Any) -> None:
        """Call every listener; a listener that raises is logged and skipped."""
        # Iterate over a copy so listeners may unsubscribe while handling
        for listener in list(self._listeners):
            try:
                listener(event, dict(data))
            except Exception:
                logger.exception("Listener for %r event failed", event)
