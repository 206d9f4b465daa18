"""
Metrics for apiguard.
"""

from .collector import MetricsCollector

__all__ = [
    "MetricsCollector",
]
