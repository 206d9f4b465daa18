"""
Error taxonomy and exceptions for apiguard.

Every failure that reaches the response classifier is one of:
  - ServerUnreachableError: rejected locally because the breaker is open
  - NetworkError: the transport failed before any HTTP response arrived
  - ApiResponseError: the server answered with an HTTP error status

The classifier maps these onto ErrorKind and records the result on the
exception as ``classification``; the exception itself is always re-raised.
"""

from enum import Enum
from datetime import datetime
from typing import Dict, Any, Optional
from dataclasses import dataclass, field

from ..core.types import ApiResponse

SERVER_UNREACHABLE = "SERVER_UNREACHABLE"


class ErrorKind(Enum):
    """Closed set of failure categories, each routed to one policy action."""

    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    OTHER_API_ERROR = "other_api_error"
    NETWORK_UNREACHABLE = "network_unreachable"


@dataclass
class ErrorContext:
    """Diagnostic context for errors."""

    request_url: Optional[str] = None
    request_method: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ClassifiedError:
    """Per-failure classification result. Not persisted."""

    kind: ErrorKind
    status: Optional[int]
    message: str
    request_url: Optional[str] = None
    request_method: Optional[str] = None

    @property
    def is_network_failure(self) -> bool:
        return self.kind == ErrorKind.NETWORK_UNREACHABLE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "kind": self.kind.value,
            "status": self.status,
            "message": self.message,
            "request_url": self.request_url,
            "request_method": self.request_method,
        }


class ApiGuardError(Exception):
    """
    Base exception class for all apiguard errors.

    ``response`` is None for failures that never produced an HTTP response.
    ``classification`` is filled in by the response classifier.
    """

    def __init__(
        self,
        message: str,
        context: Optional[ErrorContext] = None,
        cause: Optional[BaseException] = None,
        response: Optional[ApiResponse] = None,
    ):
        self.message = message
        self.context = context or ErrorContext()
        self.cause = cause
        self.response = response
        self.classification: Optional[ClassifiedError] = None

        super().__init__(self.message)

    @property
    def status(self) -> Optional[int]:
        return self.response.status if self.response is not None else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            "error": type(self).__name__,
            "error_description": self.message,
            "timestamp": self.context.timestamp.isoformat(),
        }

        if self.status is not None:
            result["status"] = self.status

        if self.context.request_url:
            result["request_url"] = self.context.request_url

        if self.context.request_method:
            result["request_method"] = self.context.request_method

        if self.context.metadata:
            result["metadata"] = self.context.metadata

        if self.cause:
            result["caused_by"] = str(self.cause)

        if self.classification:
            result["kind"] = self.classification.kind.value

        return result


class ServerUnreachableError(ApiGuardError):
    """Sentinel raised when a request is refused locally by the open breaker."""

    def __init__(self, context: Optional[ErrorContext] = None):
        super().__init__(SERVER_UNREACHABLE, context=context)


class NetworkError(ApiGuardError):
    """Transport-level failure: timeout, DNS, refused connection."""

    def __init__(self, message: str, context: Optional[ErrorContext] = None,
                 cause: Optional[BaseException] = None):
        super().__init__(message or "Network Error", context=context, cause=cause)


class ApiResponseError(ApiGuardError):
    """The server answered with an HTTP error status."""

    def __init__(self, response: ApiResponse, context: Optional[ErrorContext] = None):
        message = response.message or f"HTTP {response.status}: {response.reason}".rstrip(": ")
        super().__init__(message, context=context, response=response)


def is_sentinel(error: BaseException) -> bool:
    """Check whether an error is the breaker's local rejection."""
    return isinstance(error, ServerUnreachableError) or str(error) == SERVER_UNREACHABLE


__all__ = [
    "SERVER_UNREACHABLE",
    "ErrorKind",
    "ErrorContext",
    "ClassifiedError",
    "ApiGuardError",
    "ServerUnreachableError",
    "NetworkError",
    "ApiResponseError",
    "is_sentinel",
]
