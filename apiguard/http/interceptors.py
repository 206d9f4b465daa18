"""
Request interceptor: the gate every outbound call passes before the network.
"""

import logging
from typing import Iterable, Optional

from ..core.types import ApiRequest, is_multipart, is_structured
from ..errors import ErrorContext, ServerUnreachableError
from ..health import HealthMonitor
from ..metrics import MetricsCollector
from ..session import SessionProvider
from ..util import maybe_await

logger = logging.getLogger(__name__)

JSON_CONTENT_TYPE = "application/json"


class RequestInterceptor:
    """
    Runs before every outbound call:

    1. refuse the call with the sentinel error while the server is down
    2. attach the bearer token, when a session provider is configured
    3. fix up Content-Type from the payload shape

    A public client passes ``session=None``; steps 1 and 3 still apply.
    """

    def __init__(
        self,
        health_monitor: HealthMonitor,
        session: Optional[SessionProvider] = None,
        auth_exempt_paths: Iterable[str] = (),
        metrics: Optional[MetricsCollector] = None,
    ):
        self.health_monitor = health_monitor
        self.session = session
        self.auth_exempt_paths = tuple(auth_exempt_paths)
        self.metrics = metrics

    async def before_request(self, request: ApiRequest) -> ApiRequest:
        if self.health_monitor.is_server_down():
            logger.debug(f"Refusing {request.method} {request.url}: server is down")
            if self.metrics is not None:
                self.metrics.record_short_circuit()
            raise ServerUnreachableError(ErrorContext(
                request_url=request.url,
                request_method=request.method,
            ))

        if self.session is not None and not self._is_auth_exempt(request.url):
            token = await maybe_await(self.session.get_token())
            if token:
                request.set_header("Authorization", f"Bearer {token}")

        self._negotiate_content_type(request)
        return request

    def _is_auth_exempt(self, url: str) -> bool:
        return any(path in url for path in self.auth_exempt_paths)

    @staticmethod
    def _negotiate_content_type(request: ApiRequest) -> None:
        # A JSON content type on a multipart body breaks the upload; the
        # transport must be left to write the multipart boundary.
        if is_multipart(request.data):
            request.remove_header("Content-Type")
        elif is_structured(request.data):
            request.set_header("Content-Type", JSON_CONTENT_TYPE)
