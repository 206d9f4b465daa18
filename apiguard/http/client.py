"""
API clients wired through the interceptor pipeline.

caller -> RequestInterceptor -> Transport -> ResponseClassifier -> caller
"""

import logging
from typing import Any, Dict, Optional

from ..core.config import Config
from ..core.types import ApiRequest, ApiResponse
from ..errors import ApiResponseError, ErrorContext
from ..health import HealthMonitor
from ..metrics import MetricsCollector
from ..notify import Notifier
from ..session import SessionProvider
from .classifier import ResponseClassifier
from .interceptors import RequestInterceptor
from .transport import AiohttpTransport, Transport

logger = logging.getLogger(__name__)

DEFAULT_HEADERS = {"Accept": "application/json"}


class ApiClient:
    """
    HTTP client protected by the shared health monitor.

    The authenticated variant has a session provider: it attaches the bearer
    token and invalidates the session on 401. The public variant
    (``public=True``) has none but is still refused while the server is down.
    """

    def __init__(
        self,
        config: Config,
        health_monitor: HealthMonitor,
        transport: Optional[Transport] = None,
        session: Optional[SessionProvider] = None,
        notifier: Optional[Notifier] = None,
        metrics: Optional[MetricsCollector] = None,
        public: bool = False,
    ):
        """
        Initialize the client.

        Args:
            config: Client configuration, read once here
            health_monitor: Breaker shared with the other client variant
            transport: Wire transport (aiohttp by default)
            session: Session provider; ignored for public clients
            notifier: Optional toast callable
            metrics: Optional metrics collector
            public: Build the unauthenticated variant
        """
        self.config = config
        self.public = public
        self.health_monitor = health_monitor
        self.session = None if public else session
        self._owns_transport = transport is None
        self.transport = transport or AiohttpTransport(
            config.api_base_url, timeout=config.api_timeout_seconds
        )
        self.request_interceptor = RequestInterceptor(
            health_monitor,
            session=self.session,
            auth_exempt_paths=config.auth_exempt_paths,
            metrics=metrics,
        )
        self.response_classifier = ResponseClassifier(
            health_monitor,
            session=self.session,
            notifier=notifier,
            metrics=metrics,
        )

    async def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        data: Any = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> ApiResponse:
        """
        Send a request through the pipeline.

        Raises:
            ServerUnreachableError: The breaker is open; nothing was sent
            NetworkError: No response was received
            ApiResponseError: The server answered with status >= 400
        """
        request = ApiRequest(
            method=method.upper(),
            url=url,
            headers={**DEFAULT_HEADERS, **(headers or {})},
            params=params,
            data=data,
            timeout=timeout,
            public=self.public,
        )

        try:
            request = await self.request_interceptor.before_request(request)
            response = await self.transport.send(request)
            if not response.ok:
                raise ApiResponseError(response, ErrorContext(
                    request_url=response.url or request.url,
                    request_method=request.method,
                ))
        except Exception as e:
            await self.response_classifier.after_error(e, request)

        return self.response_classifier.after_response(response)

    async def get(self, url: str, **kwargs) -> ApiResponse:
        return await self.request("GET", url, **kwargs)

    async def post(self, url: str, data: Any = None, **kwargs) -> ApiResponse:
        return await self.request("POST", url, data=data, **kwargs)

    async def put(self, url: str, data: Any = None, **kwargs) -> ApiResponse:
        return await self.request("PUT", url, data=data, **kwargs)

    async def patch(self, url: str, data: Any = None, **kwargs) -> ApiResponse:
        return await self.request("PATCH", url, data=data, **kwargs)

    async def delete(self, url: str, **kwargs) -> ApiResponse:
        return await self.request("DELETE", url, **kwargs)

    async def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            await self.transport.close()

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


def create_api_client(
    config: Config,
    health_monitor: HealthMonitor,
    session: SessionProvider,
    notifier: Optional[Notifier] = None,
    transport: Optional[Transport] = None,
    metrics: Optional[MetricsCollector] = None,
) -> ApiClient:
    """Create the authenticated client."""
    return ApiClient(config, health_monitor, transport=transport, session=session,
                     notifier=notifier, metrics=metrics)


def create_public_client(
    config: Config,
    health_monitor: HealthMonitor,
    notifier: Optional[Notifier] = None,
    transport: Optional[Transport] = None,
    metrics: Optional[MetricsCollector] = None,
) -> ApiClient:
    """Create the public client: no token, still breaker-protected."""
    return ApiClient(config, health_monitor, transport=transport,
                     notifier=notifier, metrics=metrics, public=True)
