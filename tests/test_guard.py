"""
Tests for the ApiGuard facade.
"""

import pytest

from apiguard import ApiGuard, Config, ServerUnreachableError
from apiguard.core.types import ApiResponse
from apiguard.errors import NetworkError
from apiguard.health import HttpHealthProbe
from apiguard.metrics import MetricsCollector

from conftest import FakeProbe, RecordingNotifier, RecordingTransport, StubSession, healthy, wait_until


@pytest.fixture
def config():
    return Config(api_base_url="https://api.example.com", poll_interval_ms=10)


class TestApiGuardCreation:
    """Test construction and validation"""

    @pytest.mark.asyncio
    async def test_new_validates(self):
        with pytest.raises(ValueError):
            ApiGuard.new(Config(api_base_url=""))

    @pytest.mark.asyncio
    async def test_new_reads_environment(self, monkeypatch):
        monkeypatch.setenv("API_BASE_URL", "https://env.example.com")
        guard = ApiGuard.new()

        assert guard.config.api_base_url == "https://env.example.com"
        assert isinstance(guard.probe, HttpHealthProbe)
        assert guard.probe.url == "https://env.example.com/health"
        await guard.close()

    @pytest.mark.asyncio
    async def test_clients_share_monitor(self, config):
        guard = ApiGuard.new(config, session=StubSession())

        assert guard.client.health_monitor is guard.health_monitor
        assert guard.public_client.health_monitor is guard.health_monitor
        assert guard.client.session is not None
        assert guard.public_client.session is None
        await guard.close()


class TestApiGuardBehaviour:
    """Test the shared breaker through the facade"""

    @pytest.mark.asyncio
    async def test_outage_blocks_public_client(self, config):
        metrics = MetricsCollector()
        public_transport = RecordingTransport(ApiResponse(status=200))
        probe = FakeProbe(healthy())
        notifier = RecordingNotifier()
        statuses = []

        async with ApiGuard.new(
            config,
            session=StubSession(),
            notifier=notifier,
            transport=RecordingTransport(NetworkError("timeout")),
            public_transport=public_transport,
            probe=probe,
            metrics=metrics,
        ) as guard:
            unsubscribe = guard.on_status_change(lambda event: statuses.append(event.payload["is_down"]))

            with pytest.raises(NetworkError):
                await guard.client.get("/me")
            with pytest.raises(ServerUnreachableError):
                await guard.public_client.get("/status")

            assert guard.is_server_down() is True
            assert public_transport.calls == []

            await wait_until(lambda: not guard.is_server_down())
            response = await guard.public_client.get("/status")
            unsubscribe()

        assert response.status == 200
        assert statuses == [True, False]
        assert notifier.calls[-1][1] == "Server Reconnected"
        assert metrics.registry.get_sample_value("apiguard_short_circuited_requests_total") == 1.0
        assert probe.closed is True

    @pytest.mark.asyncio
    async def test_close_leaves_injected_transports_open(self, config):
        transport = RecordingTransport()
        guard = ApiGuard.new(config, transport=transport, probe=FakeProbe())
        await guard.close()

        assert transport.closed is False
