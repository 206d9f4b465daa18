# Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
# All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
# See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
# Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.

"""
Package health provides the API server circuit breaker:
- Two-state breaker (up, down) with a single source of truth
- Self-healing recovery polling while down
- Bare HTTP reachability probe
- State change events and transition history
"""

from .probe import (
    HealthStatus,
    ComponentHealth,
    HealthCheck,
    HttpHealthProbe,
)
from .monitor import (
    CircuitState,
    StateTransition,
    HealthMonitor,
    DEFAULT_POLL_INTERVAL,
)

__all__ = [
    # Probing
    'HealthStatus',
    'ComponentHealth',
    'HealthCheck',
    'HttpHealthProbe',

    # Breaker
    'CircuitState',
    'StateTransition',
    'HealthMonitor',
    'DEFAULT_POLL_INTERVAL',
]
