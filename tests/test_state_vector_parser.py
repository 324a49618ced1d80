from datetime import datetime, timezone

import pytest

from factories import make_state
from overhead.ingestors.state_vectors import (
    NULL,
    NumberValue,
    StateVectorParser,
    StringValue,
    decode_value,
    parse_state_vector,
)


def test_parser_reads_full_state_vector():
    track = parse_state_vector(make_state("ABC123", 10.0, 20.0))

    assert track.id == "abc123"
    assert track.label == "TEST123"
    assert track.position is not None
    assert track.position.latitude == 10.0
    assert track.position.longitude == 20.0
    assert track.altitude == pytest.approx(3657.6)
    assert track.speed == pytest.approx(164.6)
    assert track.heading == 90
    assert track.vertical_rate == pytest.approx(2.0)
    assert track.on_ground is False
    assert track.origin_country == "United States"
    assert track.squawk == "7000"
    assert track.last_contact == datetime(2024, 5, 3, 19, 40, tzinfo=timezone.utc)


def test_decode_prefers_string_then_number():
    assert decode_value("12.5") == StringValue("12.5")
    assert decode_value(12) == NumberValue(12.0)
    assert decode_value(12.5) == NumberValue(12.5)
    assert decode_value(True) == NumberValue(1.0)
    assert decode_value(None) is NULL
    assert decode_value([1, 2]) is NULL
    assert decode_value(float("nan")) is NULL


def test_parser_coerces_numbers_sent_as_strings():
    record = make_state("abc123", "10.25", "20.5", altitude="1000", on_ground="false")

    track = parse_state_vector(record)

    assert track.position is not None
    assert track.position.latitude == 10.25
    assert track.position.longitude == 20.5
    assert track.altitude == 1000.0
    assert track.on_ground is False


def test_parser_accepts_integer_ground_flag():
    assert parse_state_vector(make_state("abc123", 1.0, 2.0, on_ground=1)).on_ground is True
    assert parse_state_vector(make_state("abc123", 1.0, 2.0, on_ground=True)).on_ground is True


def test_parser_falls_back_to_geometric_altitude():
    record = make_state("abc123", 1.0, 2.0, altitude=None)

    assert parse_state_vector(record).altitude == 3700.0


@pytest.mark.parametrize(
    "record",
    [
        [],
        None,
        {"icao24": "abc123"},
        "abc123",
        [None],
        [object(), object()],
        ["abc123"],
        ["", None, None, None, None, "x", "y"],
    ],
)
def test_parser_is_total(record):
    track = parse_state_vector(record)

    assert track.id
    assert track.on_ground is False
    assert track.position is None


def test_short_record_keeps_only_id_and_ground_flag():
    track = parse_state_vector(["abc123", "CALL1"])

    assert track.id == "abc123"
    assert track.label == "CALL1"
    assert track.position is None
    assert track.altitude is None
    assert track.speed is None
    assert track.heading is None


def test_parser_drops_out_of_range_position():
    track = parse_state_vector(make_state("abc123", 95.0, 20.0))

    assert track.position is None


def test_blank_callsign_is_absent():
    assert parse_state_vector(make_state("abc123", 1.0, 2.0, callsign="   ")).label is None


def test_fallback_id_is_stable_for_same_callsign_across_ticks():
    first = parse_state_vector(make_state(None, 10.0, 20.0, callsign="NOID1"))
    second = parse_state_vector(make_state(None, 10.3, 20.4, callsign="NOID1 "))
    other = parse_state_vector(make_state(None, 10.0, 20.0, callsign="NOID2"))

    assert first.id.startswith("anon-")
    assert first.id == second.id
    assert first.id != other.id


def test_fallback_id_uses_position_cell_without_callsign():
    parser = StateVectorParser(fallback_grid_degrees=0.01)

    first = parser.parse(make_state(None, 10.0012, 20.0031, callsign=None))
    same_cell = parser.parse(make_state(None, 10.0049, 20.0049, callsign=None))
    next_cell = parser.parse(make_state(None, 10.0212, 20.0031, callsign=None))

    assert first.id == same_cell.id
    assert first.id != next_cell.id
