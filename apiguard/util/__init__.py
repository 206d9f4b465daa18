"""
Utility helpers for apiguard.
"""

from .config import (
    get_config_value,
    get_int_config,
    get_list_config,
    load_config_file,
)
from .aio import maybe_await

__all__ = [
    "maybe_await",
    "get_config_value",
    "get_int_config",
    "get_list_config",
    "load_config_file",
]
