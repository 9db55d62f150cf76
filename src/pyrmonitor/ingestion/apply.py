"""Apply decoded packets to the race state store.

This is the only place packets turn into store mutations and outbound
events, so every packet type must be handled here.
"""

from __future__ import annotations

from typing import assert_never

from pyrmonitor.ingestion.parse import (
    CompetitionPacket,
    HeartbeatPacket,
    Packet,
    PassingPacket,
    StatusPacket,
)
from pyrmonitor.models.events import (
    HeartbeatEvent,
    OutboundEvent,
    PassingEvent,
    RaceInfoEvent,
    RaceStatusEvent,
)
from pyrmonitor.state.store import RaceStateStore


def apply_packet(store: RaceStateStore, packet: Packet) -> OutboundEvent:
    """Mutate *store* for *packet* and return the event to publish."""
    match packet:
        case CompetitionPacket():
            return RaceInfoEvent(
                description=packet.description,
                race_type=packet.race_type,
                session=packet.session,
                session_time=packet.session_time,
            )
        case StatusPacket():
            store.replace_status(packet.record)
            return RaceStatusEvent.from_record(packet.record)
        case PassingPacket():
            store.upsert_passing(
                packet.number,
                lap=packet.lap,
                position=packet.position,
                time=packet.time,
            )
            return PassingEvent(
                time=packet.time,
                number=packet.number,
                lap=packet.lap,
                position=packet.position,
                all_laps=store.competitors(),
            )
        case HeartbeatPacket():
            return HeartbeatEvent()
        case _:
            assert_never(packet)
