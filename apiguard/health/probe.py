"""
Health probing for apiguard.

The probe is deliberately bare: its own aiohttp session, its own timeout, and
no interceptors, so it can never re-enter the breaker it is reporting to.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

import aiohttp

logger = logging.getLogger(__name__)


class HealthStatus(Enum):
    """Health status levels."""
    HEALTHY = "healthy"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    """Result of a single health check."""
    name: str
    status: HealthStatus
    last_checked: datetime = field(default_factory=datetime.now)
    message: str = ""
    details: Dict[str, Any] = field(default_factory=dict)
    duration_ms: float = 0.0

    @property
    def healthy(self) -> bool:
        return self.status == HealthStatus.HEALTHY

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'name': self.name,
            'status': self.status.value,
            'last_checked': self.last_checked.isoformat(),
            'message': self.message,
            'details': self.details,
            'duration_ms': self.duration_ms
        }


class HealthCheck(ABC):
    """Abstract base class for health checks."""

    def __init__(self, name: str, timeout_seconds: float = 5.0):
        self.name = name
        self.timeout_seconds = timeout_seconds

    @abstractmethod
    async def check(self) -> ComponentHealth:
        """Perform the health check."""
        pass

    async def close(self) -> None:
        """Release resources held by the check."""
        pass


class HttpHealthProbe(HealthCheck):
    """
    Reachability probe for the API server.

    Any HTTP response counts as reachable, including 404 from a backend that
    has no health route. Only a transport failure (timeout, DNS, refused
    connection) counts as unreachable.
    """

    def __init__(self, url: str, timeout_seconds: float = 5.0, name: str = "api"):
        super().__init__(name, timeout_seconds)
        self.url = url
        self._session: Optional[aiohttp.ClientSession] = None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
            )
        return self._session

    async def check(self) -> ComponentHealth:
        """Check whether the API server answers at all."""
        start_time = time.time()

        try:
            async with self._get_session().get(self.url, allow_redirects=False) as response:
                status = response.status

            duration_ms = (time.time() - start_time) * 1000

            return ComponentHealth(
                name=self.name,
                status=HealthStatus.HEALTHY,
                message=f"Server responded with HTTP {status}",
                duration_ms=duration_ms,
                details={"url": self.url, "response_code": status}
            )

        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            duration_ms = (time.time() - start_time) * 1000

            return ComponentHealth(
                name=self.name,
                status=HealthStatus.UNHEALTHY,
                message=f"Server unreachable: {e!r}",
                duration_ms=duration_ms,
                details={"url": self.url, "error": type(e).__name__}
            )

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
