"""Outbound events sent to subscribers.

The event set is a tagged union discriminated on ``type``; every variant
serialises to exactly one JSON message.
"""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import Field, TypeAdapter

from pyrmonitor.models._base import WireEvent
from pyrmonitor.models.records import CompetitorRecord, RaceStatusRecord


class RaceInfoEvent(WireEvent):
    """Session metadata from a competition packet. Not retained by the store."""

    type: Literal["RACE_INFO"] = "RACE_INFO"
    description: str = ""
    race_type: str = ""
    session: str = ""
    session_time: str = ""


class RaceStatusEvent(WireEvent):
    type: Literal["RACE_STATUS"] = "RACE_STATUS"
    time: str = ""
    total_laps: str = ""
    flag: str = "GREEN"
    time_to_go: str | None = None
    time_of_day: str | None = None

    @classmethod
    def from_record(cls, record: RaceStatusRecord) -> RaceStatusEvent:
        return cls(**record.model_dump())


class PassingEvent(WireEvent):
    """A competitor passing, or a table snapshot when the passing fields are unset."""

    type: Literal["PASSING"] = "PASSING"
    time: str | None = None
    number: str | None = None
    lap: int | None = None
    position: int | None = None
    all_laps: dict[str, CompetitorRecord] = Field(default_factory=dict)


class HeartbeatEvent(WireEvent):
    type: Literal["HEARTBEAT"] = "HEARTBEAT"


class ConnectionStatusEvent(WireEvent):
    type: Literal["CONNECTION_STATUS"] = "CONNECTION_STATUS"
    connected: bool
    host: str | None = None
    port: int | None = None
    error: str | None = None


OutboundEvent = Annotated[
    RaceInfoEvent | RaceStatusEvent | PassingEvent | HeartbeatEvent | ConnectionStatusEvent,
    Field(discriminator="type"),
]

OUTBOUND_EVENT_ADAPTER: TypeAdapter[OutboundEvent] = TypeAdapter(OutboundEvent)


def parse_outbound_event(text: str | bytes) -> OutboundEvent:
    """Decode a subscriber-side JSON frame back into its event variant."""
    return OUTBOUND_EVENT_ADAPTER.validate_json(text)
