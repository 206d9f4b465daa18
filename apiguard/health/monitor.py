"""
Circuit breaker for the API server.

States:
- UP: requests are allowed to reach the network
- DOWN: requests are refused locally; a recovery task polls the health probe

A network failure reported by the response classifier opens the breaker. The
recovery task closes it again as soon as the probe sees any HTTP response.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import List, Optional

from ..events import EventBus, create_status_event
from ..metrics import MetricsCollector
from ..notify import Notifier, Severity, notify
from .probe import HealthCheck

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 30.0
MAX_TRANSITIONS = 100


class CircuitState(Enum):
    """Breaker positions."""
    UP = "up"
    DOWN = "down"


@dataclass
class StateTransition:
    """Breaker state transition."""
    from_state: CircuitState
    to_state: CircuitState
    reason: str
    timestamp: datetime = field(default_factory=datetime.now)


class HealthMonitor:
    """
    Owns the breaker state. Everything else only reads ``is_server_down()``
    or calls ``report_network_error()``.

    The recovery task exists exactly while the state is DOWN.
    """

    def __init__(
        self,
        probe: HealthCheck,
        events: Optional[EventBus] = None,
        notifier: Optional[Notifier] = None,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        metrics: Optional[MetricsCollector] = None,
    ):
        """
        Initialize the health monitor.

        Args:
            probe: Reachability check run while the server is down
            events: Bus receiving server-status-change events
            notifier: Optional toast callable
            poll_interval: Seconds between recovery probes
            metrics: Optional metrics collector
        """
        self.probe = probe
        self.events = events or EventBus()
        self.notifier = notifier
        self.poll_interval = poll_interval
        self.metrics = metrics
        self._is_down = False
        self._recovery_task: Optional[asyncio.Task] = None
        self._transitions: List[StateTransition] = []

    @property
    def state(self) -> CircuitState:
        return CircuitState.DOWN if self._is_down else CircuitState.UP

    @property
    def is_recovering(self) -> bool:
        """True while a recovery task is active."""
        return self._recovery_task is not None

    def is_server_down(self) -> bool:
        """Returns True if the server is known to be unreachable."""
        return self._is_down

    async def start(self) -> None:
        """
        Resume recovery polling on the running loop if the monitor is down
        but has no live recovery task, e.g. after dispose() or after the loop
        that owned the previous task was closed.
        """
        if self._is_down:
            self._start_recovery_polling()

    def report_network_error(self) -> None:
        """
        Open the breaker after a network failure.

        No-op while already down: no second event, no second recovery task.
        Must be called from within the event loop.
        """
        if self._is_down:
            return

        loop = asyncio.get_running_loop()

        self._is_down = True
        logger.error("Server is unreachable. Entering circuit breaker mode.")
        self._record_transition(CircuitState.UP, CircuitState.DOWN, "Network error reported")

        self.events.emit(create_status_event(True))
        self._start_recovery_polling(loop)

    def _set_server_up(self) -> None:
        if not self._is_down:
            return

        self._is_down = False
        self._stop_recovery_polling()
        logger.info("Server is back online. Circuit breaker reset.")
        self._record_transition(CircuitState.DOWN, CircuitState.UP, "Health probe succeeded")

        self.events.emit(create_status_event(False))
        notify(self.notifier, Severity.SUCCESS, "Server Reconnected",
               "Connection to the server has been restored.")

    def _start_recovery_polling(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        loop = loop or asyncio.get_running_loop()
        task = self._recovery_task
        if task is not None and not task.done() and task.get_loop() is loop:
            return
        self._recovery_task = loop.create_task(self._poll_for_recovery())

    def _stop_recovery_polling(self) -> None:
        # cancel-then-null
        task = self._recovery_task
        self._recovery_task = None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    async def _poll_for_recovery(self) -> None:
        """Probe the server every poll interval until it answers."""
        while self._is_down:
            await asyncio.sleep(self.poll_interval)
            if not self._is_down:
                break

            try:
                health = await self.probe.check()
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Health probe raised unexpectedly: {e}")
                continue

            if health.healthy:
                self._set_server_up()
                break

            logger.debug("Health check failed, server still unreachable.")

    def dispose(self) -> None:
        """Cancel the recovery task. Safe to call repeatedly and in any state."""
        self._stop_recovery_polling()

    async def stop(self) -> None:
        """Dispose, wait for the recovery task to finish and close the probe."""
        task = self._recovery_task
        self.dispose()
        if (task is not None and task is not asyncio.current_task()
                and task.get_loop() is asyncio.get_running_loop()):
            try:
                await task
            except asyncio.CancelledError:
                pass
        await self.probe.close()

    async def __aenter__(self) -> "HealthMonitor":
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.stop()

    def _record_transition(self, from_state: CircuitState, to_state: CircuitState, reason: str) -> None:
        self._transitions.append(StateTransition(from_state, to_state, reason))

        # Keep only recent transitions
        if len(self._transitions) > MAX_TRANSITIONS:
            self._transitions = self._transitions[-MAX_TRANSITIONS // 2:]

        if self.metrics is not None:
            self.metrics.record_transition(to_state == CircuitState.DOWN)

    def get_transitions(self) -> List[StateTransition]:
        """Get state transition history."""
        return self._transitions.copy()
