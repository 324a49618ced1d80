"""In-process position source fed by location updates."""

from __future__ import annotations

import logging
from typing import Optional

from overhead.config import settings
from overhead.models.positions import ReferenceLocation

logger = logging.getLogger("overhead.positions")


class PositionStore:
    """Keep the latest acceptable fix.

    Updates whose accuracy radius is at or above ``max_accuracy_m`` are
    ignored and the previous fix is kept.
    """

    def __init__(self, *, max_accuracy_m: Optional[float] = None) -> None:
        self.max_accuracy_m = (
            settings.position_max_accuracy_m if max_accuracy_m is None else max_accuracy_m
        )
        self._current: Optional[ReferenceLocation] = None

    def update(self, location: ReferenceLocation) -> bool:
        """Store ``location`` and return True if it was accepted."""

        if location.accuracy_m is not None and location.accuracy_m >= self.max_accuracy_m:
            logger.debug(
                "Ignoring location update with accuracy %.0f m", location.accuracy_m
            )
            return False
        if self._current is not None and location.timestamp < self._current.timestamp:
            logger.debug("Ignoring location update older than the current fix")
            return False
        self._current = location
        return True

    def current_position(self) -> Optional[ReferenceLocation]:
        return self._current


__all__ = ["PositionStore"]
