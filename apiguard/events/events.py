"""
Event publishing for apiguard.

A small in-process pub-sub channel. The health monitor broadcasts
``server-status-change`` here; UI banners, loggers and tests subscribe to it.
Dispatch is synchronous so that an emit has reached every listener by the time
the emitting call returns.
"""

import asyncio
import inspect
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, List, Set

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Event names broadcast on the bus."""

    SERVER_STATUS_CHANGE = "server-status-change"
    SESSION_CHANGED = "session-changed"


@dataclass
class Event:
    """
    Event structure.

    Attributes:
        type: Event type from EventType enum
        payload: Event-specific data, e.g. ``{"is_down": True}``
        id: Unique event identifier
        timestamp: When the event occurred
        source: Component that generated the event
    """

    type: EventType
    payload: Dict[str, Any] = field(default_factory=dict)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)
    source: str = "apiguard"

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary representation."""
        return {
            "id": self.id,
            "type": self.type.value,
            "payload": self.payload,
            "timestamp": self.timestamp.isoformat(),
            "source": self.source,
        }


Listener = Callable[[Event], Any]


class EventBus:
    """
    Event bus for publishing and subscribing to events.

    Listeners are called in subscription order. A listener that raises is
    logged and skipped; the remaining listeners still run. Listeners returning
    a coroutine have it scheduled on the running loop.
    """

    def __init__(self):
        self._subscribers: Dict[EventType, List[Listener]] = {}
        self._pending: Set[asyncio.Future] = set()

    def subscribe(self, event_type: EventType, callback: Listener) -> Callable[[], None]:
        """Subscribe a function to an event type. Returns an unsubscribe callable."""
        self._subscribers.setdefault(event_type, []).append(callback)

        def unsubscribe() -> None:
            self.unsubscribe(event_type, callback)

        return unsubscribe

    def unsubscribe(self, event_type: EventType, callback: Listener) -> None:
        """Unsubscribe a function from an event type."""
        if event_type in self._subscribers:
            try:
                self._subscribers[event_type].remove(callback)
            except ValueError:
                pass

    def listener_count(self, event_type: EventType) -> int:
        return len(self._subscribers.get(event_type, []))

    def clear(self) -> None:
        self._subscribers.clear()

    def emit(self, event: Event) -> None:
        """Dispatch an event to every current subscriber of its type."""
        for callback in list(self._subscribers.get(event.type, [])):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    task = asyncio.ensure_future(result)
                    self._pending.add(task)
                    task.add_done_callback(self._listener_done)
            except Exception as e:
                logger.error(f"Error in event subscriber for {event.type.value}: {e}")

    def _listener_done(self, task: "asyncio.Future") -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Error in async event subscriber: {error}")


def create_status_event(is_down: bool, source: str = "health_monitor") -> Event:
    """Create a server status change event."""
    return Event(
        type=EventType.SERVER_STATUS_CHANGE,
        payload={"is_down": is_down},
        source=source,
    )
