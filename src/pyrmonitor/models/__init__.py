"""Data models for relay state and the subscriber wire format."""

from pyrmonitor.models._base import RMonitorBaseModel, WireEvent
from pyrmonitor.models.control import (
    ConnectRequest,
    ControlMessage,
    DisconnectRequest,
    parse_control_message,
)
from pyrmonitor.models.events import (
    ConnectionStatusEvent,
    HeartbeatEvent,
    OutboundEvent,
    PassingEvent,
    RaceInfoEvent,
    RaceStatusEvent,
    parse_outbound_event,
)
from pyrmonitor.models.records import CompetitorRecord, RaceStatusRecord

__all__ = [
    "CompetitorRecord",
    "ConnectRequest",
    "ConnectionStatusEvent",
    "ControlMessage",
    "DisconnectRequest",
    "HeartbeatEvent",
    "OutboundEvent",
    "PassingEvent",
    "RMonitorBaseModel",
    "RaceInfoEvent",
    "RaceStatusEvent",
    "RaceStatusRecord",
    "WireEvent",
    "parse_control_message",
    "parse_outbound_event",
]
