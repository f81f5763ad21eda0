"""
Event bus module for Butterflow.

The diagram controller announces layout, hover and selection changes here,
and the file monitor announces source file changes. Subscribers are the
viewer and the tests. Watchdog delivers file events from its observer
thread, so the handler tables are guarded by a lock.
"""

import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional
import logging


# Published by the diagram controller
NODE_SELECTED = "node_selected"
HOVER_CHANGED = "hover_changed"
POSITIONS_CHANGED = "positions_changed"
LAYOUT_ERROR = "layout_error"
GRAPH_ERROR = "graph_error"

Handler = Callable[['Event'], None]


@dataclass
class Event:
    """
    Notification carried by the bus.

    ``data`` holds the event payload, e.g. ``{'node_id': ..., 'node': ...}``
    for ``node_selected`` or ``{'request_id': ..., 'phase': ...}`` for
    ``positions_changed``.
    """
    type: str
    data: Dict[str, Any] = field(default_factory=dict)
    source: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)


class DiagramEvent(Event):
    """Event raised by the diagram controller."""


class FileEvent(Event):
    """Event raised when a watched workflow or task file changes."""


class EventBus:
    """
    Publish/subscribe hub between the diagram controller and its views.
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = {}
        self._lock = threading.RLock()
        self.logger = logging.getLogger(__name__)

    def subscribe(self, event_type: str, handler: Handler) -> None:
        """
        Call handler for every event of the given type.

        Args:
            event_type: Event type, e.g. ``POSITIONS_CHANGED``
            handler: Callable receiving the event
        """
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
        self.logger.debug(f"Subscribed to {event_type}")

    def unsubscribe(self, event_type: str, handler: Handler) -> None:
        with self._lock:
            handlers = self._handlers.get(event_type, [])
            if handler in handlers:
                handlers.remove(handler)
                self.logger.debug(f"Unsubscribed from {event_type}")

    def subscribe_all(self, handlers: Mapping[str, Handler]) -> None:
        """Subscribe each handler of an ``{event_type: handler}`` mapping."""
        for event_type, handler in handlers.items():
            self.subscribe(event_type, handler)

    def unsubscribe_all(self, handlers: Mapping[str, Handler]) -> None:
        for event_type, handler in handlers.items():
            self.unsubscribe(event_type, handler)

    def publish(self, event: Event) -> None:
        """
        Deliver an event to the handlers subscribed to its type.

        A failing handler is logged and does not stop delivery to the rest.

        Args:
            event: Event to deliver
        """
        self.logger.debug(f"Publishing {event.type} from {event.source or 'unknown'}")

        with self._lock:
            handlers = list(self._handlers.get(event.type, []))

        # Handlers run outside the lock so they may (un)subscribe
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                self.logger.error(f"Error in {event.type} handler: {e}")


_global_event_bus: Optional[EventBus] = None
_bus_lock = threading.Lock()


def get_event_bus() -> EventBus:
    """
    Get the process-wide event bus, creating it on first use.

    Returns:
        Global event bus instance
    """
    global _global_event_bus

    with _bus_lock:
        if _global_event_bus is None:
            _global_event_bus = EventBus()

    return _global_event_bus
