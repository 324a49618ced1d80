"""Partition tracks into acquisition and alert windows around a reference point."""

from __future__ import annotations

from dataclasses import dataclass, field
import logging
from typing import Iterable, Optional

from overhead.domain.geo import haversine_m
from overhead.models.positions import Position
from overhead.models.tracks import Track

logger = logging.getLogger("overhead.geo_filter")


@dataclass(frozen=True)
class RangedTrack:
    """A track with its distance from the reference point."""

    track: Track
    distance_m: float


@dataclass(frozen=True)
class GeoPartition:
    """Both windows, each ordered by ascending distance then id."""

    acquisition: tuple[RangedTrack, ...] = field(default=())
    alert: tuple[RangedTrack, ...] = field(default=())


class GeoFilter:
    """Haversine distance filter with a wide acquisition and a narrow alert radius."""

    def __init__(self, acquisition_radius_m: float, alert_radius_m: float) -> None:
        self.acquisition_radius_m = acquisition_radius_m
        self.alert_radius_m = alert_radius_m

    def filter(
        self, tracks: Iterable[Track], reference: Optional[Position]
    ) -> GeoPartition:
        return filter_tracks(
            tracks, reference, self.acquisition_radius_m, self.alert_radius_m
        )


def filter_tracks(
    tracks: Iterable[Track],
    reference: Optional[Position],
    acquisition_radius_m: float,
    alert_radius_m: float,
) -> GeoPartition:
    """Split ``tracks`` into the acquisition and alert windows.

    Tracks without a position and tracks reported on the ground are left out
    of both windows. A track inside the alert radius is only reported in the
    alert window if it is also inside the acquisition radius.
    """

    if reference is None:
        return GeoPartition()

    ranged: list[RangedTrack] = []
    for track in tracks:
        if track.on_ground or track.position is None:
            continue
        distance = haversine_m(reference, track.position)
        if distance <= acquisition_radius_m:
            ranged.append(RangedTrack(track=track, distance_m=distance))

    ranged.sort(key=lambda item: (item.distance_m, item.track.id))
    alert = tuple(item for item in ranged if item.distance_m <= alert_radius_m)
    logger.debug(
        "Geo filter kept %s tracks in acquisition window, %s in alert window",
        len(ranged),
        len(alert),
    )
    return GeoPartition(acquisition=tuple(ranged), alert=alert)


__all__ = ["GeoFilter", "GeoPartition", "RangedTrack", "filter_tracks"]
