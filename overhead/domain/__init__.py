"""Domain helpers shared by ingestors and services."""

from .geo import (
    BoundingBox,
    EARTH_RADIUS_M,
    bounding_boxes,
    compass_heading,
    format_distance,
    haversine_m,
)

__all__ = [
    "BoundingBox",
    "EARTH_RADIUS_M",
    "bounding_boxes",
    "compass_heading",
    "format_distance",
    "haversine_m",
]
