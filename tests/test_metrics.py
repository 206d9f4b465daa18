"""
Tests for the Prometheus metrics collector.
"""

from prometheus_client import CollectorRegistry

from apiguard.metrics import MetricsCollector


class TestMetricsCollector:
    """Test counters and the breaker gauge"""

    def test_private_registries_do_not_collide(self):
        first = MetricsCollector()
        second = MetricsCollector()
        first.record_short_circuit()

        assert first.registry.get_sample_value("apiguard_short_circuited_requests_total") == 1.0
        assert second.registry.get_sample_value("apiguard_short_circuited_requests_total") == 0.0

    def test_classified_by_kind(self):
        metrics = MetricsCollector()
        metrics.record_classified("forbidden")
        metrics.record_classified("forbidden")

        assert metrics.registry.get_sample_value(
            "apiguard_classified_errors_total", {"kind": "forbidden"}
        ) == 2.0

    def test_transitions_drive_gauge(self):
        metrics = MetricsCollector()
        metrics.record_transition(True)
        assert metrics.registry.get_sample_value("apiguard_server_down") == 1.0

        metrics.record_transition(False)
        assert metrics.registry.get_sample_value("apiguard_server_down") == 0.0
        assert metrics.registry.get_sample_value(
            "apiguard_breaker_transitions_total", {"state": "up"}
        ) == 1.0

    def test_custom_registry_and_namespace(self):
        registry = CollectorRegistry()
        metrics = MetricsCollector(registry=registry, namespace="frontend")
        metrics.record_short_circuit()

        assert registry.get_sample_value("frontend_short_circuited_requests_total") == 1.0

    def test_export(self):
        metrics = MetricsCollector()
        metrics.record_transition(True)

        output = metrics.export().decode()

        assert "apiguard_server_down 1.0" in output
        assert metrics.content_type.startswith("text/plain")
