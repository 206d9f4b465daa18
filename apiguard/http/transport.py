"""
Transports carry an ApiRequest over the wire.

A transport returns every HTTP response, whatever its status, and raises
NetworkError only when no response could be obtained.
"""

import asyncio
import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

import aiohttp

from ..core.types import ApiRequest, ApiResponse, is_multipart, is_structured
from ..errors import ErrorContext, NetworkError

logger = logging.getLogger(__name__)


def _decode(raw: bytes, charset: Optional[str]) -> str:
    try:
        return raw.decode(charset or "utf-8", errors="replace")
    except LookupError:
        return raw.decode("utf-8", errors="replace")


class Transport(ABC):
    """Abstract base class for transports."""

    @abstractmethod
    async def send(self, request: ApiRequest) -> ApiResponse:
        """Send the request and return the response."""
        pass

    async def close(self) -> None:
        """Release connections."""
        pass


class AiohttpTransport(Transport):
    """Transport backed by an aiohttp ClientSession."""

    def __init__(self, base_url: str, timeout: float = 10.0,
                 session: Optional[aiohttp.ClientSession] = None):
        """
        Initialize the transport.

        Args:
            base_url: Prefix for relative request URLs
            timeout: Default total timeout in seconds
            session: Existing session to use; it is not closed by this transport
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session
        self._owns_session = session is None

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    def build_url(self, url: str) -> str:
        if url.startswith(("http://", "https://")):
            return url
        if not url:
            return self.base_url
        return f"{self.base_url}/{url.lstrip('/')}"

    @staticmethod
    def _encode_body(request: ApiRequest) -> Any:
        payload = request.data
        if payload is None or is_multipart(payload):
            return payload
        if is_structured(payload):
            return json.dumps(payload)
        return payload

    async def send(self, request: ApiRequest) -> ApiResponse:
        url = self.build_url(request.url)
        timeout = aiohttp.ClientTimeout(total=request.timeout or self.timeout)

        logger.debug(f"{request.method} {url}")
        try:
            async with self._get_session().request(
                request.method,
                url,
                headers=request.headers,
                params=request.params,
                data=self._encode_body(request),
                timeout=timeout,
            ) as response:
                raw = await response.read()
                return self._build_response(request, url, response, _decode(raw, response.charset))

        except (aiohttp.ClientError, asyncio.TimeoutError, OSError) as e:
            logger.debug(f"Transport failure for {request.method} {url}: {e!r}")
            raise NetworkError(
                str(e) or type(e).__name__,
                context=ErrorContext(request_url=url, request_method=request.method),
                cause=e,
            ) from e

    @staticmethod
    def _build_response(request: ApiRequest, url: str,
                        response: aiohttp.ClientResponse, text: str) -> ApiResponse:
        data = None
        if text:
            try:
                data = json.loads(text)
            except ValueError:
                data = None

        return ApiResponse(
            status=response.status,
            reason=response.reason or "",
            headers=dict(response.headers),
            data=data,
            text=text,
            url=url,
            method=request.method,
        )

    async def close(self) -> None:
        if self._owns_session and self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
