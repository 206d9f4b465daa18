"""
Core types and data structures for apiguard.

Requests and responses are transient in-flight values; nothing here is
shared between requests.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import aiohttp


@dataclass
class ApiRequest:
    """An outbound call as seen by the interceptor pipeline"""
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Optional[Dict[str, Any]] = None
    data: Any = None
    timeout: Optional[float] = None
    public: bool = False

    def get_header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        for key, value in self.headers.items():
            if key.lower() == name.lower():
                return value
        return None

    def set_header(self, name: str, value: str) -> None:
        self.remove_header(name)
        self.headers[name] = value

    def remove_header(self, name: str) -> None:
        for key in [k for k in self.headers if k.lower() == name.lower()]:
            del self.headers[key]


@dataclass
class ApiResponse:
    """A settled HTTP response, whatever its status"""
    status: int
    reason: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    data: Any = None
    text: str = ""
    url: str = ""
    method: str = ""

    @property
    def ok(self) -> bool:
        return self.status < 400

    @property
    def message(self) -> Optional[str]:
        """
        Human-readable message from the response body.

        Looks at the ``message``, ``detail`` and ``error`` keys of a JSON
        object body, in that order. Returns None when none is a non-empty
        string.
        """
        if isinstance(self.data, dict):
            for key in ("message", "detail", "error"):
                value = self.data.get(key)
                if isinstance(value, str) and value.strip():
                    return value
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "reason": self.reason,
            "url": self.url,
            "method": self.method,
            "data": self.data,
        }


def is_multipart(payload: Any) -> bool:
    """True for multipart/binary form payloads."""
    return isinstance(payload, (aiohttp.FormData, aiohttp.MultipartWriter))


def is_structured(payload: Any) -> bool:
    """True for payloads that are sent as JSON."""
    return isinstance(payload, (dict, list))
