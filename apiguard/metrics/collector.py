"""
Prometheus metrics for apiguard.

Counts classified failures, requests refused by the open breaker and breaker
transitions, and exposes the current breaker position as a gauge.
"""

import logging
from typing import Optional

from prometheus_client import (
    CollectorRegistry, Counter, Gauge, generate_latest, CONTENT_TYPE_LATEST,
)

logger = logging.getLogger(__name__)


class MetricsCollector:
    """Metrics collector for the resilience layer."""

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: Optional[CollectorRegistry] = None, namespace: str = "apiguard"):
        """
        Initialize metrics collector.

        Args:
            registry: Registry to register into (a private one by default)
            namespace: Metric name prefix
        """
        self.registry = registry or CollectorRegistry()

        self.classified_errors = Counter(
            f'{namespace}_classified_errors_total',
            'Total number of failed requests by error category',
            ['kind'],
            registry=self.registry
        )

        self.short_circuited = Counter(
            f'{namespace}_short_circuited_requests_total',
            'Total number of requests refused locally while the server was down',
            registry=self.registry
        )

        self.breaker_transitions = Counter(
            f'{namespace}_breaker_transitions_total',
            'Total number of circuit breaker transitions by target state',
            ['state'],
            registry=self.registry
        )

        self.server_down = Gauge(
            f'{namespace}_server_down',
            '1 while the API server is considered unreachable, else 0',
            registry=self.registry
        )

        logger.debug("Metrics collector initialized")

    def record_classified(self, kind: str) -> None:
        self.classified_errors.labels(kind=kind).inc()

    def record_short_circuit(self) -> None:
        self.short_circuited.inc()

    def record_transition(self, is_down: bool) -> None:
        self.breaker_transitions.labels(state="down" if is_down else "up").inc()
        self.server_down.set(1 if is_down else 0)

    def export(self) -> bytes:
        """Prometheus text exposition of all metrics."""
        return generate_latest(self.registry)
