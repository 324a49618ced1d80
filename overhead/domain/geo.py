"""Great-circle geometry helpers."""

from __future__ import annotations

from dataclasses import dataclass
import math

from overhead.models.positions import Position

EARTH_RADIUS_M = 6_371_000.0

_COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


@dataclass(frozen=True)
class BoundingBox:
    """Latitude/longitude box used to bound a feed query."""

    min_lat: float
    max_lat: float
    min_lon: float
    max_lon: float

    def as_query_params(self) -> dict[str, float]:
        return {
            "lamin": self.min_lat,
            "lamax": self.max_lat,
            "lomin": self.min_lon,
            "lomax": self.max_lon,
        }


def haversine_m(a: Position, b: Position) -> float:
    """Great-circle distance between two positions in meters."""

    lat1 = math.radians(a.latitude)
    lat2 = math.radians(b.latitude)
    dlat = lat2 - lat1
    dlon = math.radians(b.longitude - a.longitude)
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_M * math.asin(min(1.0, math.sqrt(h)))


def bounding_boxes(center: Position, radius_m: float) -> tuple[BoundingBox, ...]:
    """Equirectangular boxes that together contain the circle of ``radius_m`` around ``center``.

    A single box is returned unless the circle crosses the antimeridian, in
    which case the longitude span is split into one box on each side of it.
    Circles reaching a pole span every longitude.
    """

    lat_delta = math.degrees(radius_m / EARTH_RADIUS_M)
    min_lat = max(center.latitude - lat_delta, -90.0)
    max_lat = min(center.latitude + lat_delta, 90.0)
    if min_lat <= -90.0 or max_lat >= 90.0:
        return (BoundingBox(min_lat, max_lat, -180.0, 180.0),)

    lon_delta = lat_delta / max(math.cos(math.radians(center.latitude)), 0.0001)
    if lon_delta >= 180.0:
        return (BoundingBox(min_lat, max_lat, -180.0, 180.0),)

    min_lon = center.longitude - lon_delta
    max_lon = center.longitude + lon_delta
    if min_lon < -180.0:
        return (
            BoundingBox(min_lat, max_lat, -180.0, max_lon),
            BoundingBox(min_lat, max_lat, min_lon + 360.0, 180.0),
        )
    if max_lon > 180.0:
        return (
            BoundingBox(min_lat, max_lat, min_lon, 180.0),
            BoundingBox(min_lat, max_lat, -180.0, max_lon - 360.0),
        )
    return (BoundingBox(min_lat, max_lat, min_lon, max_lon),)


def compass_heading(heading: float) -> str:
    """Render a heading as degrees plus a 16-point compass direction."""

    normalized = heading % 360.0
    index = int((normalized + 11.25) / 22.5) % 16
    return f"{int(normalized)}° {_COMPASS_POINTS[index]}"


def format_distance(distance_m: float) -> str:
    if distance_m < 1000:
        return f"{int(distance_m)} meters"
    return f"{distance_m / 1000:.1f} km"


__all__ = [
    "BoundingBox",
    "EARTH_RADIUS_M",
    "bounding_boxes",
    "compass_heading",
    "format_distance",
    "haversine_m",
]
