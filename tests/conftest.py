"""
Shared fakes and fixtures for apiguard tests.
"""

import asyncio
from typing import Any, List, Optional, Tuple

import pytest

from apiguard.core.types import ApiRequest, ApiResponse
from apiguard.events import EventBus, EventType
from apiguard.health import ComponentHealth, HealthCheck, HealthMonitor, HealthStatus
from apiguard.http import Transport
from apiguard.session import SessionProvider

POLL_INTERVAL = 0.01


def healthy(code: int = 200) -> ComponentHealth:
    return ComponentHealth(name="api", status=HealthStatus.HEALTHY, details={"response_code": code})


def unhealthy() -> ComponentHealth:
    return ComponentHealth(name="api", status=HealthStatus.UNHEALTHY, message="refused")


async def wait_until(predicate, timeout: float = 2.0) -> None:
    """Poll ``predicate`` until it is true or fail after ``timeout`` seconds."""
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.005)


class FakeProbe(HealthCheck):
    """Probe returning scripted results; the last result repeats."""

    def __init__(self, *results):
        super().__init__("fake")
        self.results = list(results) or [unhealthy()]
        self.checks = 0
        self.closed = False

    async def check(self) -> ComponentHealth:
        self.checks += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self) -> None:
        self.closed = True


class RecordingTransport(Transport):
    """Transport returning scripted responses and recording every request."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls: List[ApiRequest] = []
        self.closed = False

    async def send(self, request: ApiRequest) -> ApiResponse:
        self.calls.append(request)
        result = self.responses.pop(0) if self.responses else ApiResponse(status=200, data={})
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self) -> None:
        self.closed = True


class RecordingNotifier:
    def __init__(self):
        self.calls: List[Tuple[str, str, Optional[str]]] = []

    def __call__(self, severity: str, title: str, message: Optional[str] = None) -> None:
        self.calls.append((severity, title, message))


class StubSession(SessionProvider):
    def __init__(self, token: Optional[str] = "token-123", authenticated: bool = True):
        self.token = token
        self.authenticated = authenticated
        self.invalidations = 0

    def get_token(self) -> Optional[str]:
        return self.token

    def is_authenticated(self) -> bool:
        return self.authenticated

    def invalidate(self) -> None:
        self.invalidations += 1
        self.token = None
        self.authenticated = False


class AsyncStubSession(StubSession):
    async def get_token(self) -> Optional[str]:
        await asyncio.sleep(0)
        return self.token

    async def is_authenticated(self) -> bool:
        return self.authenticated

    async def invalidate(self) -> None:
        StubSession.invalidate(self)


@pytest.fixture
def events():
    return EventBus()


@pytest.fixture
def status_events(events):
    """Payloads of every server-status-change event, in order."""
    received: List[Any] = []
    events.subscribe(EventType.SERVER_STATUS_CHANGE, lambda event: received.append(event.payload))
    return received


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def probe():
    return FakeProbe(unhealthy())


@pytest.fixture
async def monitor(probe, events, notifier):
    instance = HealthMonitor(probe, events=events, notifier=notifier, poll_interval=POLL_INTERVAL)
    yield instance
    await instance.stop()
