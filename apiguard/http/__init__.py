# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package http provides the breaker-protected API clients:
- Request interceptor (breaker gate, bearer token, content type)
- Response classifier (error taxonomy and side effects)
- aiohttp transport
- Authenticated and public client variants
"""

from .interceptors import RequestInterceptor, JSON_CONTENT_TYPE
from .classifier import (
    ResponseClassifier,
    classify_error,
    is_conflict_message,
    CONFLICT_PHRASES,
    DEFAULT_MESSAGES,
)
from .transport import Transport, AiohttpTransport
from .client import ApiClient, create_api_client, create_public_client

__all__ = [
    # Interceptors
    'RequestInterceptor',
    'JSON_CONTENT_TYPE',
    'ResponseClassifier',
    'classify_error',
    'is_conflict_message',
    'CONFLICT_PHRASES',
    'DEFAULT_MESSAGES',

    # Transport
    'Transport',
    'AiohttpTransport',

    # Clients
    'ApiClient',
    'create_api_client',
    'create_public_client',
]
