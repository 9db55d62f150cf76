"""Upstream connection state.

There is exactly one upstream feed per relay, so the relay owns exactly one
:class:`ConnectionState` for its whole lifetime and resets it in place.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass
from enum import StrEnum


class TransportKind(StrEnum):
    UDP = "udp"
    TCP = "tcp"


class ConnectionPhase(StrEnum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


@dataclass(slots=True)
class ConnectionState:
    """Mutable state of the single upstream link.

    ``last_packet_at`` is a ``time.monotonic()`` reading taken when the
    last packet was successfully parsed; ``timer`` is the pending liveness
    deadline, if armed.
    """

    phase: ConnectionPhase = ConnectionPhase.DISCONNECTED
    host: str | None = None
    port: int | None = None
    last_packet_at: float | None = None
    timer: asyncio.TimerHandle | None = None

    @property
    def is_connected(self) -> bool:
        return self.phase == ConnectionPhase.CONNECTED

    def begin(self, host: str, port: int) -> None:
        self.phase = ConnectionPhase.CONNECTING
        self.host = host
        self.port = port
        self.last_packet_at = None

    def mark_connected(self) -> None:
        self.phase = ConnectionPhase.CONNECTED

    def mark_disconnected(self) -> None:
        """Drop to Disconnected but keep the last target for status reports."""
        self.phase = ConnectionPhase.DISCONNECTED

    def touch(self) -> None:
        self.last_packet_at = time.monotonic()

    def seconds_since_last_packet(self) -> float | None:
        if self.last_packet_at is None:
            return None
        return time.monotonic() - self.last_packet_at

    def reset(self) -> None:
        """Return to the empty, disconnected state."""
        self.phase = ConnectionPhase.DISCONNECTED
        self.host = None
        self.port = None
        self.last_packet_at = None
        self.timer = None
