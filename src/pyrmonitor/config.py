"""Relay configuration for pyrmonitor."""

from __future__ import annotations

import dataclasses
import os
from typing import Any

from pyrmonitor._constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_LIVENESS_TIMEOUT,
    DEFAULT_SUBSCRIBER_QUEUE_SIZE,
    DEFAULT_UDP_BIND_HOST,
    DEFAULT_UPSTREAM_HOST,
    DEFAULT_UPSTREAM_PORT,
    DEFAULT_WS_HOST,
    DEFAULT_WS_PATH,
    DEFAULT_WS_PORT,
)
from pyrmonitor.exceptions import RMonitorConfigError
from pyrmonitor.state.connection import TransportKind


def _env_bool(value: str | None, default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "y", "on"}:
        return True
    if normalized in {"0", "false", "no", "n", "off"}:
        return False
    return default


def _valid_port(value: int, *, allow_zero: bool = False) -> bool:
    low = 0 if allow_zero else 1
    return low <= value <= 65535


@dataclasses.dataclass(frozen=True)
class RelayConfig:
    """Relay configuration.

    Parameters
    ----------
    upstream_host : str
        Default RMonitor host used when a CONNECT request omits ``host``.
    upstream_port : int
        Default RMonitor port used when a CONNECT request omits ``port``.
    transport : TransportKind
        ``udp`` binds locally to the feed port and receives datagrams;
        ``tcp`` opens a stream to ``host:port`` and frames on line breaks.
    udp_bind_host : str
        Local interface the datagram socket binds to.
    ws_host : str
        Interface the subscriber WebSocket server listens on.
    ws_port : int
        Port the subscriber WebSocket server listens on.
    ws_path : str
        HTTP path of the WebSocket route.
    liveness_timeout : float
        Seconds without a parsed packet before the upstream is force-reset.
    connect_timeout : float
        Seconds allowed for binding or dialing the upstream socket.
    subscriber_queue_size : int
        Outbound messages buffered per subscriber. A subscriber whose
        buffer fills is dropped.
    auto_connect : bool
        Connect to the default upstream when the server starts.
    """

    upstream_host: str = DEFAULT_UPSTREAM_HOST
    upstream_port: int = DEFAULT_UPSTREAM_PORT
    transport: TransportKind = TransportKind.UDP
    udp_bind_host: str = DEFAULT_UDP_BIND_HOST
    ws_host: str = DEFAULT_WS_HOST
    ws_port: int = DEFAULT_WS_PORT
    ws_path: str = DEFAULT_WS_PATH
    liveness_timeout: float = DEFAULT_LIVENESS_TIMEOUT
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    subscriber_queue_size: int = DEFAULT_SUBSCRIBER_QUEUE_SIZE
    auto_connect: bool = False

    def __post_init__(self) -> None:
        try:
            object.__setattr__(self, "transport", TransportKind(str(self.transport).lower()))
        except ValueError as exc:
            raise RMonitorConfigError(f"transport must be 'udp' or 'tcp', got {self.transport!r}") from exc
        if not self.upstream_host:
            raise RMonitorConfigError("upstream_host must be non-empty")
        # Port 0 lets the OS pick; only useful for the local datagram bind.
        if not _valid_port(self.upstream_port, allow_zero=True):
            raise RMonitorConfigError(f"upstream_port out of range: {self.upstream_port}")
        if not _valid_port(self.ws_port, allow_zero=True):
            raise RMonitorConfigError(f"ws_port out of range: {self.ws_port}")
        if not self.ws_path.startswith("/"):
            raise RMonitorConfigError(f"ws_path must start with '/', got {self.ws_path!r}")
        if self.liveness_timeout <= 0:
            raise RMonitorConfigError(f"liveness_timeout must be positive, got {self.liveness_timeout}")
        if self.connect_timeout <= 0:
            raise RMonitorConfigError(f"connect_timeout must be positive, got {self.connect_timeout}")
        if self.subscriber_queue_size <= 0:
            raise RMonitorConfigError(f"subscriber_queue_size must be positive, got {self.subscriber_queue_size}")

    @classmethod
    def from_env(cls, **overrides: Any) -> RelayConfig:
        """Create configuration from environment variables.

        Reads ``RMONITOR_*`` variables. Explicit keyword arguments
        override environment values.

        Raises
        ------
        RMonitorConfigError
            When a numeric variable cannot be parsed or a value is out of range.
        """
        env = os.environ

        _ENV_STR_MAP = {
            "RMONITOR_HOST": "upstream_host",
            "RMONITOR_TRANSPORT": "transport",
            "RMONITOR_UDP_BIND_HOST": "udp_bind_host",
            "RMONITOR_WS_HOST": "ws_host",
            "RMONITOR_WS_PATH": "ws_path",
        }
        _ENV_INT_MAP = {
            "RMONITOR_PORT": "upstream_port",
            "RMONITOR_WS_PORT": "ws_port",
            "RMONITOR_SUBSCRIBER_QUEUE_SIZE": "subscriber_queue_size",
        }

        config_kwargs: dict[str, Any] = {}
        for env_key, field_name in _ENV_STR_MAP.items():
            val = env.get(env_key)
            if val is not None and val.strip():
                config_kwargs[field_name] = val.strip()

        for env_key, field_name in _ENV_INT_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = int(val)
            except ValueError as exc:
                raise RMonitorConfigError(f"{env_key} must be an integer, got {val!r}") from exc

        _ENV_FLOAT_MAP = {
            "RMONITOR_LIVENESS_TIMEOUT": "liveness_timeout",
            "RMONITOR_CONNECT_TIMEOUT": "connect_timeout",
        }
        for env_key, field_name in _ENV_FLOAT_MAP.items():
            val = env.get(env_key)
            if val is None or field_name in overrides:
                continue
            try:
                config_kwargs[field_name] = float(val)
            except ValueError as exc:
                raise RMonitorConfigError(f"{env_key} must be a number, got {val!r}") from exc

        if "auto_connect" not in overrides:
            config_kwargs["auto_connect"] = _env_bool(env.get("RMONITOR_AUTO_CONNECT"), False)

        config_kwargs.update(overrides)

        return cls(**config_kwargs)
