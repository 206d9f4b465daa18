"""
Session provider boundary for apiguard.

The request interceptor asks the provider for a bearer token; the response
classifier asks whether a session is active and invalidates it on 401.
Implementations may be synchronous or return awaitables.
"""

import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

import jwt

from ..events import Event, EventBus, EventType

logger = logging.getLogger(__name__)

UserData = Dict[str, Any]
SessionListener = Callable[[Optional[UserData]], None]


class SessionProvider(ABC):
    """Abstract source of the current bearer token."""

    @abstractmethod
    def get_token(self) -> Optional[str]:
        """Return the current token, or None when signed out."""
        pass

    @abstractmethod
    def is_authenticated(self) -> bool:
        """Return True when a session is active."""
        pass

    @abstractmethod
    def invalidate(self) -> None:
        """Drop the current session."""
        pass


def is_token_expired(token: str, leeway: float = 0.0) -> bool:
    """
    Check the ``exp`` claim of a JWT without verifying its signature.

    Tokens without ``exp`` never expire. Tokens that cannot be decoded count
    as expired.
    """
    try:
        payload = jwt.decode(token, options={"verify_signature": False})
    except jwt.InvalidTokenError:
        return True

    exp = payload.get("exp")
    if exp is None:
        return False
    try:
        return float(exp) < time.time() - leeway
    except (TypeError, ValueError):
        return True


class MemorySessionProvider(SessionProvider):
    """
    In-memory session holder.

    Authenticated iff both a token and user data are present. With
    ``check_expiry`` on, an expired or malformed JWT is cleared the next time
    the session is read.
    """

    def __init__(self, token: Optional[str] = None, user: Optional[UserData] = None,
                 check_expiry: bool = True, events: Optional[EventBus] = None):
        """
        Initialize session provider.

        Args:
            token: Initial bearer token
            user: Initial user data
            check_expiry: Clear expired JWTs on access
            events: Optional bus receiving session-changed events
        """
        self._token = token
        self._user = user
        self.check_expiry = check_expiry
        self.events = events
        self._listeners: List[SessionListener] = []

    @property
    def user(self) -> Optional[UserData]:
        self._expire_if_needed()
        return self._user

    def set_session(self, token: str, user: UserData) -> None:
        self._token = token
        self._user = user
        logger.debug("Session established")
        self._notify_listeners()

    def logout(self) -> None:
        self._clear()

    def get_token(self) -> Optional[str]:
        self._expire_if_needed()
        return self._token

    def is_authenticated(self) -> bool:
        self._expire_if_needed()
        return bool(self._token and self._user)

    def invalidate(self) -> None:
        self._clear()

    def add_listener(self, listener: SessionListener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: SessionListener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _expire_if_needed(self) -> None:
        if self.check_expiry and self._token and is_token_expired(self._token):
            logger.info("Stored token expired, clearing session")
            self._clear()

    def _clear(self) -> None:
        had_session = self._token is not None or self._user is not None
        self._token = None
        self._user = None
        if had_session:
            logger.debug("Session cleared")
            self._notify_listeners()

    def _notify_listeners(self) -> None:
        user = self._user
        for listener in list(self._listeners):
            try:
                listener(user)
            except Exception as e:
                logger.error(f"Session listener failed: {e}")

        if self.events is not None:
            self.events.emit(Event(
                type=EventType.SESSION_CHANGED,
                payload={"authenticated": bool(self._token and self._user)},
                source="session",
            ))
