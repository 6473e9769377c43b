"""
Lifecycle events emitted by the module registry.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

BEFORE_RELOAD = "before_reload"
AFTER_RELOAD = "after_reload"
MODULE_UPDATE = "module_update"
ERROR = "error"

EVENTS = (BEFORE_RELOAD, AFTER_RELOAD, MODULE_UPDATE, ERROR)


class EventEmitter:
    """Synchronous listener lists keyed by event name."""

    def __init__(self, events: tuple[str, ...] = EVENTS):
        self._listeners: dict[str, list[Callable[[dict[str, Any]], Any]]] = {
            event: [] for event in events
        }

    def on(self, event: str, callback: Callable[[dict[str, Any]], Any]) -> None:
        """Add a listener. Unknown event names raise ValueError."""
        if event not in self._listeners:
            raise ValueError(f"Unknown event: {event}")
        self._listeners[event].append(callback)

    def off(self, event: str, callback: Callable[[dict[str, Any]], Any]) -> None:
        listeners = self._listeners.get(event, [])
        if callback in listeners:
            listeners.remove(callback)

    def emit(self, event: str, data: dict[str, Any]) -> None:
        """Call every listener; a failing listener is logged and skipped."""
        for callback in list(self._listeners.get(event, [])):
            try:
                callback(data)
            except Exception:
                logger.exception(f"Error in {event} listener")

    def clear(self) -> None:
        for listeners in self._listeners.values():
            listeners.clear()
