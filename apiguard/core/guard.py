"""
Main apiguard facade.

Copyright (c) 2025 Gimel Foundation and the persons identified as the document authors.
All rights reserved. This file is subject to the Gimel Foundation's Legal Provisions Relating to GiFo Documents.
See http://GimelFoundation.com or https://github.com/Gimel-Foundation for details.
Code Components extracted from GiFo-RfC 0111 must include this license text and are provided without warranty.
"""

import logging
from typing import Callable, Optional

from .config import Config
from ..events import EventBus, EventType, Listener
from ..health import HealthCheck, HealthMonitor, HttpHealthProbe
from ..http import ApiClient, Transport
from ..metrics import MetricsCollector
from ..notify import Notifier
from ..session import SessionProvider

logger = logging.getLogger(__name__)


class ApiGuard:
    """
    One health monitor shared by an authenticated and a public client.
    Use ApiGuard.new() to construct an instance.
    """

    def __init__(
        self,
        config: Config,
        session: Optional[SessionProvider] = None,
        notifier: Optional[Notifier] = None,
        transport: Optional[Transport] = None,
        public_transport: Optional[Transport] = None,
        probe: Optional[HealthCheck] = None,
        events: Optional[EventBus] = None,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Initialize the guard.

        Args:
            config: Configuration shared by both clients
            session: Session provider for the authenticated client
            notifier: Optional toast callable
            transport: Transport for the authenticated client (aiohttp by default)
            public_transport: Transport for the public client (aiohttp by default)
            probe: Recovery probe (bare HTTP GET on the health URL by default)
            events: Event bus (a new one by default)
            metrics: Optional metrics collector
        """
        self.config = config
        self.events = events or EventBus()
        self.metrics = metrics
        self.probe = probe or HttpHealthProbe(
            config.health_check_url,
            timeout_seconds=config.health_check_timeout_seconds,
        )
        self.health_monitor = HealthMonitor(
            self.probe,
            events=self.events,
            notifier=notifier,
            poll_interval=config.poll_interval_seconds,
            metrics=metrics,
        )
        self.client = ApiClient(
            config,
            self.health_monitor,
            transport=transport,
            session=session,
            notifier=notifier,
            metrics=metrics,
        )
        self.public_client = ApiClient(
            config,
            self.health_monitor,
            transport=public_transport,
            notifier=notifier,
            metrics=metrics,
            public=True,
        )

    @classmethod
    def new(cls, config: Optional[Config] = None, **kwargs) -> "ApiGuard":
        """
        Create a new ApiGuard with validated configuration.

        Args:
            config: Configuration (read from the environment when omitted)
            **kwargs: Optional collaborators, see __init__

        Raises:
            ValueError: If configuration is invalid

        Example:
            guard = ApiGuard.new(Config(api_base_url="https://api.example.com"),
                                 session=MemorySessionProvider())
        """
        config = config or Config.from_env()
        config.validate()
        return cls(config, **kwargs)

    def is_server_down(self) -> bool:
        return self.health_monitor.is_server_down()

    def on_status_change(self, callback: Listener) -> Callable[[], None]:
        """Subscribe to server-status-change. Returns an unsubscribe callable."""
        return self.events.subscribe(EventType.SERVER_STATUS_CHANGE, callback)

    async def start(self) -> None:
        await self.health_monitor.start()
        logger.info(f"apiguard started for {self.config.api_base_url}")

    async def close(self) -> None:
        """Stop recovery polling and close all connections."""
        await self.health_monitor.stop()
        await self.client.close()
        await self.public_client.close()
        logger.info("apiguard closed")

    async def __aenter__(self) -> "ApiGuard":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
