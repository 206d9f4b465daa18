"""
apiguard Python Package

Client-side HTTP resilience layer: auth injection, failure classification and
an API server circuit breaker with self-healing health polling.
"""

__version__ = "0.1.0"

from .core.config import Config
from .core.guard import ApiGuard
from .core.types import ApiRequest, ApiResponse
from .errors import (
    ApiGuardError,
    ApiResponseError,
    ClassifiedError,
    ErrorKind,
    NetworkError,
    ServerUnreachableError,
    SERVER_UNREACHABLE,
)
from .events import Event, EventBus, EventType
from .health import CircuitState, HealthMonitor, HttpHealthProbe
from .http import ApiClient, create_api_client, create_public_client
from .notify import LoggingNotifier, Severity
from .session import MemorySessionProvider, SessionProvider

__all__ = [
    "ApiGuard",
    "Config",
    "ApiRequest",
    "ApiResponse",
    "ApiGuardError",
    "ApiResponseError",
    "ClassifiedError",
    "ErrorKind",
    "NetworkError",
    "ServerUnreachableError",
    "SERVER_UNREACHABLE",
    "Event",
    "EventBus",
    "EventType",
    "CircuitState",
    "HealthMonitor",
    "HttpHealthProbe",
    "ApiClient",
    "create_api_client",
    "create_public_client",
    "LoggingNotifier",
    "Severity",
    "MemorySessionProvider",
    "SessionProvider",
]
