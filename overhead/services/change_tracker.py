"""Track which ids are inside the alert window from one tick to the next."""

from __future__ import annotations

import logging
from typing import Iterable

from overhead.services.geo_filter import RangedTrack

logger = logging.getLogger("overhead.change_tracker")


class ChangeTracker:
    """Set-difference tracker over the alert-window membership set.

    Only call ``advance`` for ticks that actually produced feed data; a failed
    fetch must leave the previous membership in place.
    """

    def __init__(self) -> None:
        self._previous_ids: frozenset[str] = frozenset()

    @property
    def members(self) -> frozenset[str]:
        return self._previous_ids

    def advance(
        self,
        alert_window: Iterable[RangedTrack],
        *,
        retain: Iterable[RangedTrack] = (),
    ) -> list[RangedTrack]:
        """Replace the membership set and return the entries that are new.

        Entering tracks come back in the order of ``alert_window``. A duplicated
        id is reported once. Ids in ``retain`` that are already members stay
        members without entering, which lets a narrower window run without
        dropping tracks a wider one already reported.
        """

        window = list(alert_window)
        kept = frozenset(item.track.id for item in retain) & self._previous_ids
        current_ids = frozenset(item.track.id for item in window) | kept

        entering: list[RangedTrack] = []
        seen: set[str] = set()
        for item in window:
            track_id = item.track.id
            if track_id in self._previous_ids or track_id in seen:
                continue
            seen.add(track_id)
            entering.append(item)

        left = len(self._previous_ids - current_ids)
        self._previous_ids = current_ids
        if entering or left:
            logger.info(
                "Alert window now holds %s tracks: %s entered, %s left",
                len(current_ids),
                len(entering),
                left,
            )
        return entering

    def reset(self) -> None:
        self._previous_ids = frozenset()


__all__ = ["ChangeTracker"]
