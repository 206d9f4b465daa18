"""
Response classifier: maps failures onto the error taxonomy and runs the
matching side effect.

| kind                | trigger                              | action                              |
|---------------------|--------------------------------------|-------------------------------------|
| UNAUTHORIZED        | 401                                  | invalidate session; warn if active  |
| FORBIDDEN           | 403                                  | error toast                         |
| NOT_FOUND           | 404                                  | nothing                             |
| CONFLICT            | 409, or a conflict-shaped message    | warn toast                          |
| OTHER_API_ERROR     | any other HTTP error                 | error toast                         |
| NETWORK_UNREACHABLE | no response, or the breaker sentinel | report to the health monitor        |

The classifier never swallows an error: after the side effect the original
exception is raised again.
"""

import asyncio
import logging
from typing import NoReturn, Optional

import aiohttp

from ..core.types import ApiRequest, ApiResponse
from ..errors import ApiGuardError, ClassifiedError, ErrorKind, is_sentinel
from ..health import HealthMonitor
from ..metrics import MetricsCollector
from ..notify import Notifier, Severity, notify
from ..session import SessionProvider
from ..util import maybe_await

logger = logging.getLogger(__name__)

CONFLICT_PHRASES = ("conflict", "already exists")

DEFAULT_MESSAGES = {
    ErrorKind.UNAUTHORIZED: "Your session has expired. Please sign in again.",
    ErrorKind.FORBIDDEN: "You do not have permission to perform this action.",
    ErrorKind.NOT_FOUND: "The requested resource was not found.",
    ErrorKind.CONFLICT: "This resource conflicts with existing data.",
    ErrorKind.OTHER_API_ERROR: "An unexpected error occurred. Please try again.",
    ErrorKind.NETWORK_UNREACHABLE: "Unable to reach the server.",
}

STATUS_KINDS = {
    401: ErrorKind.UNAUTHORIZED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
}

TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)


def is_conflict_message(message: Optional[str]) -> bool:
    """Case-insensitive check for conflict-indicating phrases."""
    if not message:
        return False
    lowered = message.lower()
    return any(phrase in lowered for phrase in CONFLICT_PHRASES)


def classify_error(error: BaseException, request: Optional[ApiRequest] = None) -> Optional[ClassifiedError]:
    """
    Classify a failed call.

    Returns None for exceptions that are neither an HTTP error response nor a
    transport failure; those are not the network layer's concern.

    Conflict phrases in the server message only decide the kind for statuses
    outside STATUS_KINDS: a 401, 403 or 404 saying "already exists" keeps its
    status kind.
    """
    request_url = request.url if request is not None else None
    request_method = request.method if request is not None else None
    response: Optional[ApiResponse] = getattr(error, "response", None)

    if response is None:
        if is_sentinel(error) or isinstance(error, ApiGuardError) or isinstance(error, TRANSPORT_ERRORS):
            return ClassifiedError(
                kind=ErrorKind.NETWORK_UNREACHABLE,
                status=None,
                message=str(error) or DEFAULT_MESSAGES[ErrorKind.NETWORK_UNREACHABLE],
                request_url=request_url,
                request_method=request_method,
            )
        return None

    server_message = response.message
    kind = STATUS_KINDS.get(response.status)
    if kind is None:
        kind = ErrorKind.CONFLICT if is_conflict_message(server_message) else ErrorKind.OTHER_API_ERROR

    return ClassifiedError(
        kind=kind,
        status=response.status,
        message=server_message or DEFAULT_MESSAGES[kind],
        request_url=request_url or response.url or None,
        request_method=request_method or response.method or None,
    )


class ResponseClassifier:
    """Runs after every settled call, as the last step before the caller."""

    def __init__(
        self,
        health_monitor: HealthMonitor,
        session: Optional[SessionProvider] = None,
        notifier: Optional[Notifier] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.health_monitor = health_monitor
        self.session = session
        self.notifier = notifier
        self.metrics = metrics

    def after_response(self, response: ApiResponse) -> ApiResponse:
        """Success path: pass through unchanged."""
        return response

    async def after_error(self, error: BaseException, request: Optional[ApiRequest] = None) -> NoReturn:
        """Run the policy action for ``error``, then raise it again."""
        classified = classify_error(error, request)

        if classified is not None:
            if isinstance(error, ApiGuardError):
                error.classification = classified
            if self.metrics is not None:
                self.metrics.record_classified(classified.kind.value)
            try:
                await self.handle(classified)
            except Exception as e:
                logger.error(f"Policy action for {classified.kind.value} failed: {e}")

        raise error

    async def handle(self, classified: ClassifiedError) -> None:
        """Dispatch the side effect for one classified failure."""
        kind = classified.kind
        logger.debug(
            f"{classified.request_method} {classified.request_url} failed: "
            f"{kind.value} ({classified.status})"
        )

        if kind == ErrorKind.UNAUTHORIZED:
            await self._handle_unauthorized()

        elif kind == ErrorKind.FORBIDDEN:
            notify(self.notifier, Severity.ERROR, "Access Denied", DEFAULT_MESSAGES[kind])

        elif kind == ErrorKind.NOT_FOUND:
            pass

        elif kind == ErrorKind.CONFLICT:
            notify(self.notifier, Severity.WARN, "Conflict", classified.message)

        elif kind == ErrorKind.OTHER_API_ERROR:
            logger.warning(f"API error {classified.status}: {classified.message}")
            notify(self.notifier, Severity.ERROR, "Error", classified.message)

        elif kind == ErrorKind.NETWORK_UNREACHABLE:
            # The status-change banner covers this; no per-request toast.
            self.health_monitor.report_network_error()

    async def _handle_unauthorized(self) -> None:
        if self.session is None:
            return

        was_active = await maybe_await(self.session.is_authenticated())
        await maybe_await(self.session.invalidate())

        # Anonymous 401s must not tell the user they were logged out.
        if was_active:
            logger.info("Session expired, session invalidated")
            notify(self.notifier, Severity.WARN, "Session Expired",
                   DEFAULT_MESSAGES[ErrorKind.UNAUTHORIZED])
