"""Decode OpenSky-style positional state vectors into tracks.

A state vector is a JSON array whose element types vary by position and by
vendor: numbers can arrive as integers, floats or strings. Each element is
first tagged as a ``StringValue``, ``NumberValue`` or ``NullValue`` and the
track fields are then read through typed accessors. Parsing never raises; a
malformed element only makes the corresponding field absent.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import hashlib
import logging
import math
from typing import Any, Iterable, Optional, Union

from overhead.models.positions import Position
from overhead.models.tracks import Track

logger = logging.getLogger("overhead.ingestors.state_vectors")

# Positional schema of an OpenSky state vector
ICAO24 = 0
CALLSIGN = 1
ORIGIN_COUNTRY = 2
TIME_POSITION = 3
LAST_CONTACT = 4
LONGITUDE = 5
LATITUDE = 6
BARO_ALTITUDE = 7
ON_GROUND = 8
VELOCITY = 9
TRUE_TRACK = 10
VERTICAL_RATE = 11
SENSORS = 12
GEO_ALTITUDE = 13
SQUAWK = 14

FALLBACK_ID_PREFIX = "anon-"
DEFAULT_FALLBACK_GRID_DEGREES = 0.01


@dataclass(frozen=True)
class StringValue:
    value: str


@dataclass(frozen=True)
class NumberValue:
    value: float


@dataclass(frozen=True)
class NullValue:
    pass


FeedValue = Union[StringValue, NumberValue, NullValue]

NULL = NullValue()


def decode_value(raw: Any) -> FeedValue:
    """Tag a raw element, trying string, then floating point, then integer."""

    if raw is None:
        return NULL
    if isinstance(raw, str):
        return StringValue(raw)
    if isinstance(raw, bool):
        return NumberValue(1.0 if raw else 0.0)

    try:
        number = float(raw)
    except (TypeError, ValueError, OverflowError):
        try:
            number = float(int(raw))
        except (TypeError, ValueError, OverflowError):
            return NULL

    if not math.isfinite(number):
        return NULL
    return NumberValue(number)


def as_string(value: FeedValue) -> Optional[str]:
    if isinstance(value, StringValue):
        text = value.value.strip()
        return text or None
    return None


def as_float(value: FeedValue) -> Optional[float]:
    if isinstance(value, NumberValue):
        return value.value
    if isinstance(value, StringValue):
        try:
            number = float(value.value.strip())
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def as_bool(value: FeedValue) -> Optional[bool]:
    if isinstance(value, NumberValue):
        return value.value != 0
    if isinstance(value, StringValue):
        text = value.value.strip().lower()
        if text in {"true", "1", "yes"}:
            return True
        if text in {"false", "0", "no"}:
            return False
    return None


def as_timestamp(value: FeedValue) -> Optional[datetime]:
    seconds = as_float(value)
    if seconds is None:
        return None
    try:
        # OpenSky reports seconds since epoch
        return datetime.fromtimestamp(seconds, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):
        logger.debug("Failed to parse state vector timestamp: %s", seconds)
        return None


def _as_position(latitude: Optional[float], longitude: Optional[float]) -> Optional[Position]:
    if latitude is None or longitude is None:
        return None
    if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
        return None
    return Position(latitude=latitude, longitude=longitude)


class StateVectorParser:
    """Turn raw feed records into ``Track`` values."""

    def __init__(self, *, fallback_grid_degrees: float = DEFAULT_FALLBACK_GRID_DEGREES) -> None:
        self.fallback_grid_degrees = fallback_grid_degrees

    def parse(self, raw_record: Any) -> Track:
        if isinstance(raw_record, (list, tuple)):
            fields = [decode_value(element) for element in raw_record]
        else:
            logger.debug("Ignoring non-array state vector: %r", raw_record)
            fields = []

        def at(index: int) -> FeedValue:
            return fields[index] if index < len(fields) else NULL

        label = as_string(at(CALLSIGN))
        position = _as_position(as_float(at(LATITUDE)), as_float(at(LONGITUDE)))

        icao24 = as_string(at(ICAO24))
        track_id = icao24.lower() if icao24 else self.fallback_id(label, position)

        altitude = as_float(at(BARO_ALTITUDE))
        if altitude is None:
            altitude = as_float(at(GEO_ALTITUDE))

        last_contact = as_timestamp(at(LAST_CONTACT)) or as_timestamp(at(TIME_POSITION))

        return Track(
            id=track_id,
            label=label,
            position=position,
            altitude=altitude,
            speed=as_float(at(VELOCITY)),
            heading=as_float(at(TRUE_TRACK)),
            vertical_rate=as_float(at(VERTICAL_RATE)),
            on_ground=bool(as_bool(at(ON_GROUND))),
            origin_country=as_string(at(ORIGIN_COUNTRY)),
            squawk=as_string(at(SQUAWK)),
            last_contact=last_contact,
        )

    def parse_all(self, raw_records: Iterable[Any]) -> list[Track]:
        return [self.parse(record) for record in raw_records]

    def fallback_id(self, label: Optional[str], position: Optional[Position]) -> str:
        """Identifier for a record without an ICAO24 address.

        The key is the callsign when there is one, otherwise the grid cell the
        position falls in, so the same unidentified aircraft keeps its id
        between ticks as long as it keeps its callsign or stays in its cell.
        """

        if label:
            key = f"callsign:{label.upper()}"
        elif position is not None:
            cell_lat = math.floor(position.latitude / self.fallback_grid_degrees)
            cell_lon = math.floor(position.longitude / self.fallback_grid_degrees)
            key = f"cell:{cell_lat}:{cell_lon}"
        else:
            key = "unknown"
        digest = hashlib.sha1(key.encode()).hexdigest()[:12]
        return f"{FALLBACK_ID_PREFIX}{digest}"


_default_parser = StateVectorParser()


def parse_state_vector(raw_record: Any) -> Track:
    """Parse one record with the default parser."""

    return _default_parser.parse(raw_record)


__all__ = [
    "FeedValue",
    "NullValue",
    "NumberValue",
    "StateVectorParser",
    "StringValue",
    "as_bool",
    "as_float",
    "as_string",
    "as_timestamp",
    "decode_value",
    "parse_state_vector",
]
