"""Ingestion layer.

Turns raw RMonitor lines into typed packets and applies them to the race
state store, producing the events the hub fans out.
"""

from pyrmonitor.ingestion.apply import apply_packet
from pyrmonitor.ingestion.parse import (
    CompetitionPacket,
    HeartbeatPacket,
    Packet,
    PassingPacket,
    StatusPacket,
    parse_line,
)

__all__ = [
    "CompetitionPacket",
    "HeartbeatPacket",
    "Packet",
    "PassingPacket",
    "StatusPacket",
    "apply_packet",
    "parse_line",
]
