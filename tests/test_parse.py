"""Tests for the RMonitor line decoder."""

from __future__ import annotations

import pytest

from pyrmonitor.ingestion.normalize import count_or_zero, safe_int, strip_quotes
from pyrmonitor.ingestion.parse import (
    CompetitionPacket,
    HeartbeatPacket,
    PassingPacket,
    StatusPacket,
    parse_line,
    split_line,
)

# ------------------------------------------------------------------
# Sentinel and unknown input
# ------------------------------------------------------------------


@pytest.mark.parametrize(
    "line",
    [
        "",
        "   ",
        "PASSING,12:01:00,44,3,1",
        "#PASSING,12:01:00,44,3,1",
        " x$RACE,1,2,GREEN",
        "$",
        "$UNKNOWN,1,2,3",
        "$G,1,\"44\",3,\"00:01:02\"",
    ],
)
def test_unrecognized_lines_yield_nothing(line: str) -> None:
    assert parse_line(line) is None


def test_split_line_keeps_fields_as_strings() -> None:
    assert split_line("$PASSING,12:01:00,44,03,1\r\n") == ("PASSING", ["12:01:00", "44", "03", "1"])


def test_bytes_input_is_decoded() -> None:
    packet = parse_line(b"$PASSING,12:01:00,44,3,1\r\n")
    assert isinstance(packet, PassingPacket)
    assert packet.number == "44"


# ------------------------------------------------------------------
# Tags
# ------------------------------------------------------------------


def test_competition_packet() -> None:
    packet = parse_line("$COMP,Club Championship,Sprint,Race 1,00:20:00")
    assert packet == CompetitionPacket(
        description="Club Championship",
        race_type="Sprint",
        session="Race 1",
        session_time="00:20:00",
    )


def test_competition_missing_fields_default_to_empty() -> None:
    packet = parse_line("$COMP,Club Championship")
    assert isinstance(packet, CompetitionPacket)
    assert packet.race_type == ""
    assert packet.session == ""
    assert packet.session_time == ""


def test_race_status_packet_uppercases_flag() -> None:
    packet = parse_line("$RACE,00:12:30,20,yellow")
    assert isinstance(packet, StatusPacket)
    assert packet.record.time == "00:12:30"
    assert packet.record.total_laps == "20"
    assert packet.record.flag == "YELLOW"
    assert packet.record.time_to_go is None


def test_race_status_flag_defaults_to_green() -> None:
    packet = parse_line("$RACE,00:12:30,20")
    assert isinstance(packet, StatusPacket)
    assert packet.record.flag == "GREEN"

    blank = parse_line("$RACE,00:12:30,20,")
    assert isinstance(blank, StatusPacket)
    assert blank.record.flag == "GREEN"


def test_passing_packet() -> None:
    packet = parse_line("$PASSING,12:01:00,44,3,1")
    assert packet == PassingPacket(time="12:01:00", number="44", lap=3, position=1)


def test_passing_competitor_number_may_contain_letters() -> None:
    packet = parse_line("$PASSING,12:01:00,12X,3,1")
    assert isinstance(packet, PassingPacket)
    assert packet.number == "12X"


@pytest.mark.parametrize(
    ("lap", "position", "expected"),
    [
        ("abc", "", (0, 0)),
        ("-4", "2", (0, 2)),
        ("7.0", "x1", (0, 0)),
        ("1e3", " 3 ", (0, 3)),
        ("nan", "inf", (0, 0)),
    ],
)
def test_passing_numeric_fields_default_to_zero(lap: str, position: str, expected: tuple[int, int]) -> None:
    packet = parse_line(f"$PASSING,12:01:00,44,{lap},{position}")
    assert isinstance(packet, PassingPacket)
    assert (packet.lap, packet.position) == expected


def test_passing_short_packet_defaults() -> None:
    packet = parse_line("$PASSING,12:01:00,44")
    assert packet == PassingPacket(time="12:01:00", number="44", lap=0, position=0)


def test_passing_without_competitor_number_is_ignored() -> None:
    assert parse_line("$PASSING,12:01:00") is None
    assert parse_line("$PASSING,12:01:00, ,3,1") is None


def test_heartbeat_has_no_fields() -> None:
    assert parse_line("$HEARTBEAT") == HeartbeatPacket()
    assert parse_line("$HEARTBEAT,extra") == HeartbeatPacket()


def test_flag_summary_strips_quotes_and_uppercases_flag() -> None:
    packet = parse_line('$F,5,"00:02:10","12:30:00","01:15:33","green "')
    assert isinstance(packet, StatusPacket)
    record = packet.record
    assert record.flag == "GREEN"
    assert record.time == "01:15:33"
    assert record.total_laps == "5"
    assert record.time_to_go == "00:02:10"
    assert record.time_of_day == "12:30:00"


@pytest.mark.parametrize("flag", ['"Yellow"', "yellow", '"YELLOW  "', "  yElLoW"])
def test_flag_summary_flag_case_insensitive(flag: str) -> None:
    packet = parse_line(f'$F,5,"00:02:10","12:30:00","01:15:33",{flag}')
    assert isinstance(packet, StatusPacket)
    assert packet.record.flag == "YELLOW"


def test_flag_summary_missing_flag_defaults_to_green() -> None:
    packet = parse_line('$F,9999,"00:00:00","12:30:00","00:00:00"')
    assert isinstance(packet, StatusPacket)
    assert packet.record.flag == "GREEN"

    quoted_blank = parse_line('$F,9999,"00:00:00","12:30:00","00:00:00","      "')
    assert isinstance(quoted_blank, StatusPacket)
    assert quoted_blank.record.flag == "GREEN"


# ------------------------------------------------------------------
# Normalization helpers
# ------------------------------------------------------------------


def test_strip_quotes_only_removes_one_surrounding_pair() -> None:
    assert strip_quotes('"00:02:10"') == "00:02:10"
    assert strip_quotes('""quoted""') == '"quoted"'
    assert strip_quotes('"unbalanced') == '"unbalanced'
    assert strip_quotes('"') == '"'


def test_safe_int_and_count_or_zero() -> None:
    assert safe_int(" 12 ") == 12
    assert safe_int("") is None
    assert safe_int(None) is None
    assert count_or_zero("7") == 7
    assert count_or_zero("3.9") == 0
    assert count_or_zero("1e3") == 0
    assert count_or_zero("-1") == 0
    assert count_or_zero("1e999") == 0
