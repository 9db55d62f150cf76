"""Custom exception hierarchy for pyrmonitor."""

from __future__ import annotations


class RMonitorError(Exception):
    """Base exception for all pyrmonitor errors."""


class RMonitorConfigError(RMonitorError):
    """Invalid or missing configuration."""


class RMonitorTransportError(RMonitorError):
    """Upstream link failure (refused, unreachable, DNS, socket error)."""

    def __init__(
        self,
        message: str,
        *,
        host: str = "",
        port: int | None = None,
        kind: str = "",
    ) -> None:
        self.host = host
        self.port = port
        self.kind = kind
        super().__init__(message)
