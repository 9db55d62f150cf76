"""RMonitor line decoder.

A line looks like ``$TAG,field1,field2,...``. Decoding is deliberately
permissive: anything that is not a recognized packet yields ``None``
instead of an error, and short packets get ``""`` for missing fields.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from pyrmonitor._constants import (
    DELIMITER,
    SENTINEL,
    TAG_COMPETITION,
    TAG_FLAG_SUMMARY,
    TAG_HEARTBEAT,
    TAG_PASSING,
    TAG_RACE_STATUS,
)
from pyrmonitor.ingestion.normalize import count_or_zero, field_at, normalize_flag, strip_quotes
from pyrmonitor.models.records import RaceStatusRecord


@dataclass(frozen=True)
class CompetitionPacket:
    description: str
    race_type: str
    session: str
    session_time: str


@dataclass(frozen=True)
class StatusPacket:
    """Race status from either a ``RACE`` packet or an ``F`` flag summary."""

    tag: str
    record: RaceStatusRecord


@dataclass(frozen=True)
class PassingPacket:
    time: str
    number: str
    lap: int
    position: int


@dataclass(frozen=True)
class HeartbeatPacket:
    pass


Packet = CompetitionPacket | StatusPacket | PassingPacket | HeartbeatPacket


def _competition(fields: list[str]) -> CompetitionPacket:
    # $COMP,<description>,<race type>,<session>,<session time>
    return CompetitionPacket(
        description=field_at(fields, 0),
        race_type=field_at(fields, 1),
        session=field_at(fields, 2),
        session_time=field_at(fields, 3),
    )


def _race_status(fields: list[str]) -> StatusPacket:
    # $RACE,<time>,<total laps>,<flag>
    record = RaceStatusRecord(
        time=field_at(fields, 0),
        total_laps=field_at(fields, 1),
        flag=normalize_flag(field_at(fields, 2)),
    )
    return StatusPacket(tag=TAG_RACE_STATUS, record=record)


def _passing(fields: list[str]) -> PassingPacket | None:
    # $PASSING,<time>,<competitor number>,<lap>,<position>
    number = field_at(fields, 1).strip()
    if not number:
        return None
    return PassingPacket(
        time=field_at(fields, 0),
        number=number,
        lap=count_or_zero(field_at(fields, 2)),
        position=count_or_zero(field_at(fields, 3)),
    )


def _heartbeat(fields: list[str]) -> HeartbeatPacket:
    return HeartbeatPacket()


def _flag_summary(fields: list[str]) -> StatusPacket:
    # $F,<laps to go>,"<time to go>","<time of day>","<race time>","<flag>"
    values = [strip_quotes(value) for value in fields]
    record = RaceStatusRecord(
        time=field_at(values, 3),
        total_laps=field_at(values, 0),
        flag=normalize_flag(field_at(values, 4)),
        time_to_go=field_at(values, 1),
        time_of_day=field_at(values, 2),
    )
    return StatusPacket(tag=TAG_FLAG_SUMMARY, record=record)


_HANDLERS: dict[str, Callable[[list[str]], Packet | None]] = {
    TAG_COMPETITION: _competition,
    TAG_RACE_STATUS: _race_status,
    TAG_PASSING: _passing,
    TAG_HEARTBEAT: _heartbeat,
    TAG_FLAG_SUMMARY: _flag_summary,
}


def split_line(line: str | bytes) -> tuple[str, list[str]] | None:
    """Split a line into ``(tag, fields)``, or ``None`` without the sentinel."""
    if isinstance(line, bytes):
        line = line.decode("utf-8", errors="replace")
    message = line.strip()
    if not message.startswith(SENTINEL):
        return None
    tag, *fields = message[len(SENTINEL) :].split(DELIMITER)
    return tag.strip(), fields


def parse_line(line: str | bytes) -> Packet | None:
    """Decode one line into a packet, or ``None`` if it is not recognized."""
    split = split_line(line)
    if split is None:
        return None
    tag, fields = split
    handler = _HANDLERS.get(tag)
    if handler is None:
        return None
    return handler(fields)
