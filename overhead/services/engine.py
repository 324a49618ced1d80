"""Engine facade: the only entry point schedulers and presentation touch."""

from __future__ import annotations

import asyncio
from datetime import datetime
import logging
from typing import Iterable, Optional, Protocol

from overhead.config import settings
from overhead.domain.geo import bounding_boxes
from overhead.ingestors.opensky import OpenSkyFeed
from overhead.ingestors.state_vectors import StateVectorParser
from overhead.models.detection import (
    ArrivalEvent,
    Completed,
    DetectionResult,
    SkipReason,
    Skipped,
    TickMode,
    TickOutcome,
)
from overhead.models.positions import Position, ReferenceLocation, ensure_utc, utc_now
from overhead.services.change_tracker import ChangeTracker
from overhead.services.geo_filter import GeoFilter, RangedTrack
from overhead.services.poll_scheduler import FeedSource, PollScheduler, fetch_boxes
from overhead.services.throttle import ThrottleGuard
from overhead.services.track_linker import AnonymousTrackLinker

logger = logging.getLogger("overhead.engine")


class AlertNotifier(Protocol):
    async def notify(self, event: ArrivalEvent) -> None:
        """Surface an allowed arrival to the user."""


class DetectionEngine:
    """Serialize ticks and own all mutable detection state.

    Foreground and background timelines both call ``tick``. A single lock
    covers the whole cycle, so results and events are published in tick
    order. ``close`` abandons an in-flight fetch: its data is discarded and no
    state is touched.
    """

    def __init__(
        self,
        *,
        feed: Optional[FeedSource] = None,
        parser: Optional[StateVectorParser] = None,
        acquisition_radius_m: Optional[float] = None,
        alert_radius_m: Optional[float] = None,
        background_alert_radius_m: Optional[float] = None,
        feed_poll_interval: Optional[float] = None,
        alert_interval: Optional[float] = None,
        foreground_max_position_age: Optional[float] = None,
        background_max_position_age: Optional[float] = None,
        foreground_timeout: Optional[float] = None,
        background_timeout: Optional[float] = None,
        anonymous_max_speed_mps: Optional[float] = None,
        notifiers: Iterable[AlertNotifier] = (),
        subscriber_queue_size: int = 100,
    ) -> None:
        self.feed = feed or OpenSkyFeed()
        self.parser = parser or StateVectorParser()
        self.geo_filter = GeoFilter(
            acquisition_radius_m=_pick(acquisition_radius_m, settings.acquisition_radius_m),
            alert_radius_m=_pick(alert_radius_m, settings.alert_radius_m),
        )
        self.tracker = ChangeTracker()
        self.throttle = ThrottleGuard(
            feed_interval_seconds=_pick(feed_poll_interval, settings.feed_poll_interval),
            alert_interval_seconds=_pick(alert_interval, settings.alert_interval),
        )
        self.scheduler = PollScheduler(
            feed=self.feed,
            parser=self.parser,
            geo_filter=self.geo_filter,
            tracker=self.tracker,
            throttle=self.throttle,
            linker=AnonymousTrackLinker(
                max_speed_mps=_pick(anonymous_max_speed_mps, settings.anonymous_max_speed_mps)
            ),
            background_alert_radius_m=_pick(
                background_alert_radius_m, settings.background_alert_radius_m
            ),
            foreground_timeout=_pick(foreground_timeout, settings.feed_timeout),
            background_timeout=_pick(background_timeout, settings.feed_background_timeout),
        )
        self.max_position_age = {
            TickMode.FOREGROUND: _pick(
                foreground_max_position_age, settings.foreground_max_position_age
            ),
            TickMode.BACKGROUND: _pick(
                background_max_position_age, settings.background_max_position_age
            ),
        }
        self.notifiers = list(notifiers)
        self.subscriber_queue_size = subscriber_queue_size

        self._lock = asyncio.Lock()
        self._generation = 0
        self._closed = False
        self._current: Optional[DetectionResult] = None
        self._subscribers: set[asyncio.Queue[ArrivalEvent]] = set()

    @property
    def closed(self) -> bool:
        return self._closed

    def current_result(self) -> Optional[DetectionResult]:
        """Point-in-time snapshot of the last completed tick."""

        return self._current

    async def tick(
        self,
        reference: Optional[ReferenceLocation],
        now: Optional[datetime] = None,
        *,
        mode: TickMode = TickMode.FOREGROUND,
    ) -> TickOutcome:
        now = ensure_utc(now) if now is not None else utc_now()

        async with self._lock:
            if self._closed:
                return Skipped(reason=SkipReason.ENGINE_CLOSED)
            if not self._is_usable(reference, now, mode):
                return Skipped(reason=SkipReason.NO_REFERENCE)

            generation = self._generation
            outcome = await self.scheduler.run_cycle(
                reference.position,
                now,
                mode=mode,
                is_current=lambda: generation == self._generation and not self._closed,
            )

            if isinstance(outcome, Completed):
                self._current = outcome.result
                self._publish(outcome.arrivals)
                await self._deliver(outcome.events)
            else:
                logger.info("%s tick %s: %s", mode.value, outcome.status, outcome.reason.value)
            return outcome

    async def search(self, center: Position) -> list[RangedTrack]:
        """One-off lookup around ``center`` that leaves engine state untouched.

        Raises ``FeedError`` when the feed query fails.
        """

        boxes = bounding_boxes(center, self.geo_filter.acquisition_radius_m)
        payload = await fetch_boxes(
            self.feed, boxes, timeout=self.scheduler.foreground_timeout
        )
        tracks = self.parser.parse_all(payload.states)
        return list(self.geo_filter.filter(tracks, center).acquisition)

    def subscribe(self) -> asyncio.Queue[ArrivalEvent]:
        """Register a queue that receives every arrival, throttled or not."""

        queue: asyncio.Queue[ArrivalEvent] = asyncio.Queue(maxsize=self.subscriber_queue_size)
        self._subscribers.add(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue[ArrivalEvent]) -> None:
        self._subscribers.discard(queue)

    def close(self) -> None:
        """Stop accepting ticks and abandon any tick still fetching."""

        self._closed = True
        self._generation += 1
        self._subscribers.clear()
        logger.info("Detection engine closed")

    def _is_usable(
        self, reference: Optional[ReferenceLocation], now: datetime, mode: TickMode
    ) -> bool:
        if reference is None:
            logger.debug("No reference position for %s tick", mode.value)
            return False
        age = reference.age_seconds(now)
        limit = self.max_position_age[mode]
        if age > limit:
            logger.debug(
                "Reference position is %.0fs old, limit for %s ticks is %.0fs",
                age,
                mode.value,
                limit,
            )
            return False
        return True

    def _publish(self, events: Iterable[ArrivalEvent]) -> None:
        for queue in list(self._subscribers):
            for event in events:
                try:
                    queue.put_nowait(event)
                except asyncio.QueueFull:
                    logger.warning("Subscriber queue full; dropping arrival of %s", event.track_id)

    async def _deliver(self, events: Iterable[ArrivalEvent]) -> None:
        for event in events:
            for notifier in self.notifiers:
                try:
                    await notifier.notify(event)
                except Exception as exc:
                    logger.warning(
                        "Alert delivery via %s failed for %s: %s",
                        type(notifier).__name__,
                        event.track_id,
                        exc,
                    )


def _pick(value: Optional[float], default: float) -> float:
    return default if value is None else value


__all__ = ["AlertNotifier", "DetectionEngine"]
