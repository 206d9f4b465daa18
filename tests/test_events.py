"""
Tests for the event bus and toast notifications.
"""

import asyncio
import logging

import pytest

from apiguard.events import Event, EventBus, EventType, create_status_event
from apiguard.notify import LoggingNotifier, Severity, notify

from conftest import RecordingNotifier


class TestEventBus:
    """Test synchronous pub-sub dispatch"""

    def test_emit_reaches_all_subscribers_in_order(self):
        bus = EventBus()
        order = []
        bus.subscribe(EventType.SERVER_STATUS_CHANGE, lambda e: order.append("first"))
        bus.subscribe(EventType.SERVER_STATUS_CHANGE, lambda e: order.append("second"))

        bus.emit(create_status_event(True))

        assert order == ["first", "second"]

    def test_other_event_types_not_delivered(self):
        bus = EventBus()
        received = []
        bus.subscribe(EventType.SESSION_CHANGED, received.append)

        bus.emit(create_status_event(False))

        assert received == []

    def test_unsubscribe_callable(self):
        bus = EventBus()
        received = []
        unsubscribe = bus.subscribe(EventType.SERVER_STATUS_CHANGE, received.append)

        unsubscribe()
        unsubscribe()
        bus.emit(create_status_event(True))

        assert received == []
        assert bus.listener_count(EventType.SERVER_STATUS_CHANGE) == 0

    def test_raising_listener_is_isolated(self, caplog):
        bus = EventBus()
        received = []

        def broken(event):
            raise RuntimeError("subscriber bug")

        bus.subscribe(EventType.SERVER_STATUS_CHANGE, broken)
        bus.subscribe(EventType.SERVER_STATUS_CHANGE, received.append)

        with caplog.at_level(logging.ERROR, logger="apiguard.events.events"):
            bus.emit(create_status_event(True))

        assert len(received) == 1
        assert "subscriber bug" in caplog.text

    @pytest.mark.asyncio
    async def test_async_listener_scheduled(self):
        bus = EventBus()
        received = []

        async def listener(event):
            received.append(event.payload)

        bus.subscribe(EventType.SERVER_STATUS_CHANGE, listener)
        bus.emit(create_status_event(False))

        for _ in range(3):
            if received:
                break
            await asyncio.sleep(0)

        assert received == [{"is_down": False}]

    @pytest.mark.asyncio
    async def test_raising_async_listener_logged(self, caplog):
        bus = EventBus()

        async def broken(event):
            raise RuntimeError("async subscriber bug")

        bus.subscribe(EventType.SERVER_STATUS_CHANGE, broken)

        with caplog.at_level(logging.ERROR, logger="apiguard.events.events"):
            bus.emit(create_status_event(True))
            assert len(bus._pending) == 1
            for _ in range(5):
                if not bus._pending:
                    break
                await asyncio.sleep(0)

        assert bus._pending == set()
        assert "async subscriber bug" in caplog.text

    def test_clear(self):
        bus = EventBus()
        bus.subscribe(EventType.SERVER_STATUS_CHANGE, lambda e: None)
        bus.clear()
        assert bus.listener_count(EventType.SERVER_STATUS_CHANGE) == 0

    def test_status_event_shape(self):
        event = create_status_event(True)
        data = event.to_dict()

        assert data["type"] == "server-status-change"
        assert data["payload"] == {"is_down": True}
        assert data["source"] == "health_monitor"

    def test_event_ids_unique(self):
        assert Event(EventType.SESSION_CHANGED).id != Event(EventType.SESSION_CHANGED).id


class TestNotify:
    """Test the optional notifier hook"""

    def test_missing_notifier_is_noop(self):
        notify(None, Severity.ERROR, "Error", "ignored")

    def test_calls_notifier_with_severity_value(self):
        notifier = RecordingNotifier()
        notify(notifier, Severity.WARN, "Conflict", "Name taken")
        assert notifier.calls == [("warn", "Conflict", "Name taken")]

    def test_raising_notifier_swallowed(self, caplog):
        def broken(severity, title, message=None):
            raise RuntimeError("toast down")

        with caplog.at_level(logging.ERROR, logger="apiguard.notify"):
            notify(broken, Severity.SUCCESS, "Server Reconnected")

        assert "toast down" in caplog.text

    def test_logging_notifier_levels(self, caplog):
        notifier = LoggingNotifier()

        with caplog.at_level(logging.INFO, logger="apiguard.toast"):
            notifier("success", "Server Reconnected", "Connection restored.")
            notifier("error", "Access Denied")

        records = [(r.levelno, r.getMessage()) for r in caplog.records]
        assert records == [
            (logging.INFO, "Server Reconnected: Connection restored."),
            (logging.ERROR, "Access Denied"),
        ]
