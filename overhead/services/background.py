"""Periodic background wake that ticks the engine with the last known fix."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Optional

from overhead.models.detection import TickMode, TickOutcome
from overhead.models.positions import utc_now
from overhead.services.engine import DetectionEngine
from overhead.services.positions import PositionStore

logger = logging.getLogger("overhead.background")


@dataclass
class BackgroundStatus:
    last_check: Optional[datetime] = None
    check_count: int = 0
    last_outcome: Optional[str] = None


class BackgroundChecker:
    """Drive background ticks at a fixed interval until cancelled."""

    def __init__(
        self,
        *,
        engine: DetectionEngine,
        positions: PositionStore,
        interval_seconds: float,
    ) -> None:
        self.engine = engine
        self.positions = positions
        self.interval_seconds = interval_seconds
        self.status = BackgroundStatus()

    async def run(self) -> None:
        """Run background checks until cancelled."""

        while True:
            try:
                await asyncio.sleep(self.interval_seconds)
                await self.check()
            except asyncio.CancelledError:
                logger.info("Background checker cancelled")
                raise
            except Exception as exc:  # pragma: no cover - defensive logging
                logger.warning("Background check error: %s", exc)

    async def check(self) -> TickOutcome:
        """Perform one background tick now."""

        self.status.last_check = utc_now()
        self.status.check_count += 1
        outcome = await self.engine.tick(
            self.positions.current_position(), mode=TickMode.BACKGROUND
        )
        self.status.last_outcome = outcome.status
        logger.info(
            "Background check %s finished: %s", self.status.check_count, outcome.status
        )
        return outcome


__all__ = ["BackgroundChecker", "BackgroundStatus"]
