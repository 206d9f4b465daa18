"""
Event system for apiguard.
"""

from .events import (
    Event,
    EventType,
    EventBus,
    Listener,
    create_status_event,
)

__all__ = [
    "Event",
    "EventType",
    "EventBus",
    "Listener",
    "create_status_event",
]
