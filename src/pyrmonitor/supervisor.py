"""Connection health supervisor.

Arms a single-shot liveness deadline when the upstream connects and pushes
it back every time a packet parses. If the deadline passes first the
expiry callback runs once and the supervisor goes idle.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from pyrmonitor.state.connection import ConnectionState

_logger = logging.getLogger(__name__)


class LivenessSupervisor:
    def __init__(
        self,
        state: ConnectionState,
        *,
        timeout: float,
        on_expired: Callable[[], None],
    ) -> None:
        self._state = state
        self._timeout = timeout
        self._on_expired = on_expired

    @property
    def timeout(self) -> float:
        return self._timeout

    @property
    def armed(self) -> bool:
        return self._state.timer is not None

    def arm(self) -> None:
        """Start (or restart) the deadline at now + timeout."""
        self.cancel()
        loop = asyncio.get_running_loop()
        self._state.timer = loop.call_later(self._timeout, self._expire)

    def packet_received(self) -> None:
        """Record a parsed packet and push the deadline back if armed."""
        self._state.touch()
        if self.armed:
            self.arm()

    def cancel(self) -> None:
        timer = self._state.timer
        self._state.timer = None
        if timer is not None:
            timer.cancel()

    def _expire(self) -> None:
        self._state.timer = None
        _logger.warning(
            "No data received from %s:%s within %g seconds",
            self._state.host,
            self._state.port,
            self._timeout,
        )
        self._on_expired()
