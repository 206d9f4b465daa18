# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package core provides configuration and the request/response value types.

The ApiGuard facade lives in ``apiguard.core.guard`` and is re-exported from
the top-level package.
"""

from .config import (
    Config,
    DEFAULT_API_BASE_URL,
    DEFAULT_API_TIMEOUT_MS,
    DEFAULT_POLL_INTERVAL_MS,
    DEFAULT_HEALTH_CHECK_TIMEOUT_MS,
    DEFAULT_HEALTH_CHECK_PATH,
)
from .types import ApiRequest, ApiResponse, is_multipart, is_structured

__all__ = [
    'Config',
    'DEFAULT_API_BASE_URL',
    'DEFAULT_API_TIMEOUT_MS',
    'DEFAULT_POLL_INTERVAL_MS',
    'DEFAULT_HEALTH_CHECK_TIMEOUT_MS',
    'DEFAULT_HEALTH_CHECK_PATH',
    'ApiRequest',
    'ApiResponse',
    'is_multipart',
    'is_structured',
]
