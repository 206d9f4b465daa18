"""
Session handling for apiguard.
"""

from .provider import (
    SessionProvider,
    MemorySessionProvider,
    SessionListener,
    UserData,
    is_token_expired,
)

__all__ = [
    "SessionProvider",
    "MemorySessionProvider",
    "SessionListener",
    "UserData",
    "is_token_expired",
]
