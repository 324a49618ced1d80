"""Keep ids of anonymous tracks stable while the aircraft moves."""

from __future__ import annotations

from datetime import datetime
import logging
from typing import Optional, Sequence

from overhead.domain.geo import haversine_m
from overhead.ingestors.state_vectors import FALLBACK_ID_PREFIX
from overhead.models.positions import Position
from overhead.models.tracks import Track

logger = logging.getLogger("overhead.track_linker")

# Roughly Mach 1 at cruise altitude
DEFAULT_MAX_SPEED_MPS = 340.0


def is_anonymous(track: Track) -> bool:
    """True for records that had neither an ICAO24 address nor a callsign."""

    return track.label is None and track.id.startswith(FALLBACK_ID_PREFIX)


class AnonymousTrackLinker:
    """Carry fallback ids of anonymous tracks from one tick to the next.

    The parser derives an anonymous track's id from the grid cell it is in,
    so the id changes as soon as the aircraft crosses into the next cell.
    Each anonymous track is matched to the nearest anonymous track of the
    previous tick that it could have reached flying at ``max_speed_mps`` and
    takes over that id. Matching is greedy by distance and one-to-one.
    """

    def __init__(self, *, max_speed_mps: float = DEFAULT_MAX_SPEED_MPS) -> None:
        self.max_speed_mps = max_speed_mps
        self._previous: dict[str, Position] = {}
        self._previous_at: Optional[datetime] = None

    def link(self, tracks: Sequence[Track], now: datetime) -> list[Track]:
        linked = list(tracks)
        anonymous = [index for index, track in enumerate(linked) if is_anonymous(track)]

        assigned: dict[int, str] = {}
        if self._previous and self._previous_at is not None:
            elapsed = max(abs((now - self._previous_at).total_seconds()), 1.0)
            reach_m = self.max_speed_mps * elapsed
            candidates = sorted(
                (haversine_m(position, linked[index].position), index, previous_id)
                for index in anonymous
                if linked[index].position is not None
                for previous_id, position in self._previous.items()
            )
            used: set[str] = set()
            for distance, index, previous_id in candidates:
                if distance > reach_m:
                    break
                if index in assigned or previous_id in used:
                    continue
                assigned[index] = previous_id
                used.add(previous_id)

        taken = {track.id for track in linked if not is_anonymous(track)}
        taken.update(assigned.values())
        current: dict[str, Position] = {}
        for index in anonymous:
            track = linked[index]
            track_id = assigned.get(index)
            if track_id is None:
                # A fresh cell id may collide with an id carried over by another track
                track_id = track.id
                suffix = 1
                while track_id in taken:
                    track_id = f"{track.id}-{suffix}"
                    suffix += 1
                taken.add(track_id)
            if track_id != track.id:
                linked[index] = track.model_copy(update={"id": track_id})
            if track.position is not None:
                current[track_id] = track.position

        if assigned:
            logger.debug("Linked %s anonymous tracks to previous ids", len(assigned))
        self._previous = current
        self._previous_at = now
        return linked

    def reset(self) -> None:
        self._previous = {}
        self._previous_at = None


__all__ = ["AnonymousTrackLinker", "is_anonymous"]
