"""pyrmonitor - relay an RMonitor timing feed to real-time subscribers."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyrmonitor")
except PackageNotFoundError:
    __version__ = "0+local"
from pyrmonitor.config import RelayConfig
from pyrmonitor.exceptions import (
    RMonitorConfigError,
    RMonitorError,
    RMonitorTransportError,
)
from pyrmonitor.ingestion import parse_line
from pyrmonitor.models import (
    CompetitorRecord,
    ConnectionStatusEvent,
    HeartbeatEvent,
    OutboundEvent,
    PassingEvent,
    RaceInfoEvent,
    RaceStatusEvent,
    RaceStatusRecord,
)
from pyrmonitor.relay import RelaySession
from pyrmonitor.server import create_app
from pyrmonitor.state.connection import ConnectionPhase, TransportKind
from pyrmonitor.state.store import RaceStateStore

__all__ = [
    "__version__",
    "CompetitorRecord",
    "ConnectionPhase",
    "ConnectionStatusEvent",
    "HeartbeatEvent",
    "OutboundEvent",
    "PassingEvent",
    "RMonitorConfigError",
    "RMonitorError",
    "RMonitorTransportError",
    "RaceInfoEvent",
    "RaceStateStore",
    "RaceStatusEvent",
    "RaceStatusRecord",
    "RelayConfig",
    "RelaySession",
    "TransportKind",
    "create_app",
    "parse_line",
]
