from __future__ import annotations

from pyrmonitor.ingestion.apply import apply_packet
from pyrmonitor.ingestion.parse import parse_line
from pyrmonitor.models.events import (
    HeartbeatEvent,
    PassingEvent,
    RaceInfoEvent,
    RaceStatusEvent,
)
from pyrmonitor.models.records import RaceStatusRecord
from pyrmonitor.state.store import RaceStateStore


def _apply(store: RaceStateStore, line: str):
    packet = parse_line(line)
    assert packet is not None, line
    return apply_packet(store, packet)


def test_passing_last_write_wins() -> None:
    store = RaceStateStore()

    _apply(store, "$PASSING,12:01:00,44,3,1")
    event = _apply(store, "$PASSING,12:01:05,44,4,1")

    record = store.competitor("44")
    assert record is not None
    assert (record.laps, record.position, record.last_time) == (4, 1, "12:01:05")
    assert isinstance(event, PassingEvent)
    assert event.all_laps["44"].laps == 4


def test_passing_order_matters() -> None:
    store = RaceStateStore()

    _apply(store, "$PASSING,12:01:05,44,4,1")
    _apply(store, "$PASSING,12:01:00,44,3,2")

    record = store.competitor("44")
    assert record is not None
    assert (record.laps, record.position) == (3, 2)


def test_passing_event_carries_full_table() -> None:
    store = RaceStateStore()

    _apply(store, "$PASSING,12:01:00,44,3,1")
    _apply(store, "$PASSING,12:01:01,7,3,2")
    event = _apply(store, "$PASSING,12:01:02,12X,2,3")

    assert isinstance(event, PassingEvent)
    assert list(event.all_laps) == ["44", "7", "12X"]
    assert event.number == "12X"
    assert event.lap == 2
    assert event.position == 3


def test_repeated_passing_is_idempotent() -> None:
    store = RaceStateStore()
    line = "$PASSING,12:01:00,44,3,1"

    _apply(store, line)
    before = store.competitors()
    _apply(store, line)

    assert store.competitors() == before
    assert len(store) == 1


def test_snapshots_are_copies() -> None:
    store = RaceStateStore()
    event = _apply(store, "$PASSING,12:01:00,44,3,1")
    assert isinstance(event, PassingEvent)

    _apply(store, "$PASSING,12:01:05,44,4,1")

    assert event.all_laps["44"].laps == 3
    table = store.competitors()
    table["44"].laps = 99
    record = store.competitor("44")
    assert record is not None
    assert record.laps == 4


def test_status_is_replaced_not_merged() -> None:
    store = RaceStateStore()

    _apply(store, '$F,5,"00:02:10","12:30:00","01:15:33","Green"')
    event = _apply(store, "$RACE,01:16:00,20,yellow")

    assert store.status == RaceStatusRecord(time="01:16:00", total_laps="20", flag="YELLOW")
    assert store.status is not None
    assert store.status.time_to_go is None
    assert isinstance(event, RaceStatusEvent)
    assert event.flag == "YELLOW"


def test_competition_and_heartbeat_do_not_mutate() -> None:
    store = RaceStateStore()

    info = _apply(store, "$COMP,Club Championship,Sprint,Race 1,00:20:00")
    beat = _apply(store, "$HEARTBEAT")

    assert isinstance(info, RaceInfoEvent)
    assert info.description == "Club Championship"
    assert isinstance(beat, HeartbeatEvent)
    assert store.is_empty


def test_clear_empties_everything() -> None:
    store = RaceStateStore()
    _apply(store, "$PASSING,12:01:00,44,3,1")
    _apply(store, "$RACE,01:16:00,20,green")

    store.clear()

    assert store.is_empty
    assert store.competitors() == {}
    assert store.status is None
