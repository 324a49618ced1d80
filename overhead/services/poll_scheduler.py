"""One detection cycle: feed gate, fetch, parse, filter, track, alert gate."""

from __future__ import annotations

import asyncio
from datetime import datetime
import logging
from typing import Callable, Optional, Protocol, Sequence

from overhead.domain.geo import BoundingBox, bounding_boxes
from overhead.ingestors.opensky import FeedError, FeedPayload
from overhead.ingestors.state_vectors import ICAO24, StateVectorParser
from overhead.models.detection import (
    ArrivalEvent,
    Completed,
    DetectionResult,
    Failed,
    FailureReason,
    SkipReason,
    Skipped,
    TickMode,
    TickOutcome,
)
from overhead.models.positions import Position
from overhead.services.change_tracker import ChangeTracker
from overhead.services.geo_filter import GeoFilter
from overhead.services.throttle import ThrottleGuard
from overhead.services.track_linker import AnonymousTrackLinker

logger = logging.getLogger("overhead.poll_scheduler")


class FeedSource(Protocol):
    async def fetch(self, box: BoundingBox, *, timeout: float | None = None) -> FeedPayload:
        """Return raw records inside ``box`` or raise ``FeedError``."""


async def fetch_boxes(
    feed: FeedSource, boxes: Sequence[BoundingBox], *, timeout: float | None = None
) -> FeedPayload:
    """Query every box and merge the records into one payload.

    Boxes are queried concurrently and any failing box fails the whole fetch.
    A record reported in more than one box is kept once.
    """

    if len(boxes) == 1:
        return await feed.fetch(boxes[0], timeout=timeout)

    results = await asyncio.gather(
        *(feed.fetch(box, timeout=timeout) for box in boxes), return_exceptions=True
    )
    for result in results:
        if isinstance(result, BaseException):
            raise result

    states: list = []
    seen: set[str] = set()
    for payload in results:
        for state in payload.states:
            icao24 = state[ICAO24] if isinstance(state, list) and state else None
            if isinstance(icao24, str) and icao24:
                if icao24 in seen:
                    continue
                seen.add(icao24)
            states.append(state)

    return FeedPayload(
        states=states,
        fetched_at=max(payload.fetched_at for payload in results),
        feed_time=results[0].feed_time,
        params=results[0].params,
    )


class PollScheduler:
    """Run detection cycles against shared tracker and throttle state.

    The caller is responsible for serializing calls to ``run_cycle``.
    """

    def __init__(
        self,
        *,
        feed: FeedSource,
        parser: StateVectorParser,
        geo_filter: GeoFilter,
        tracker: ChangeTracker,
        throttle: ThrottleGuard,
        linker: Optional[AnonymousTrackLinker] = None,
        background_alert_radius_m: Optional[float] = None,
        foreground_timeout: Optional[float] = None,
        background_timeout: Optional[float] = None,
    ) -> None:
        self.feed = feed
        self.parser = parser
        self.geo_filter = geo_filter
        self.tracker = tracker
        self.throttle = throttle
        self.linker = linker or AnonymousTrackLinker()
        self.background_alert_radius_m = background_alert_radius_m
        self.foreground_timeout = foreground_timeout
        self.background_timeout = background_timeout

    async def run_cycle(
        self,
        reference: Position,
        now: datetime,
        *,
        mode: TickMode = TickMode.FOREGROUND,
        is_current: Callable[[], bool] = lambda: True,
    ) -> TickOutcome:
        background = mode is TickMode.BACKGROUND
        if not self.throttle.feed_gate_for(background).allow(now):
            return Skipped(reason=SkipReason.THROTTLED_FEED)

        # The gate stays consumed from here on, even if the fetch fails.
        boxes = bounding_boxes(reference, self.geo_filter.acquisition_radius_m)
        timeout = self.background_timeout if background else self.foreground_timeout
        try:
            payload = await fetch_boxes(self.feed, boxes, timeout=timeout)
        except FeedError as exc:
            return Failed(reason=exc.reason, detail=str(exc))
        except Exception as exc:  # pragma: no cover - defensive logging
            logger.exception("Unexpected feed failure")
            return Failed(reason=FailureReason.FETCH_ERROR, detail=str(exc))

        if not is_current():
            logger.info("Discarding feed data fetched for an abandoned tick")
            return Skipped(reason=SkipReason.ENGINE_CLOSED)

        tracks = self.linker.link(self.parser.parse_all(payload.states), now)
        partition = self.geo_filter.filter(tracks, reference)
        if background and self.background_alert_radius_m is not None:
            # Tracks between the two radii neither enter nor leave in background mode
            window = tuple(
                item
                for item in partition.alert
                if item.distance_m <= self.background_alert_radius_m
            )
            entering = self.tracker.advance(window, retain=partition.alert)
        else:
            entering = self.tracker.advance(partition.alert)

        arrivals = tuple(
            ArrivalEvent(
                track_id=item.track.id,
                distance_m=item.distance_m,
                track=item.track,
                observed_at=payload.fetched_at,
            )
            for item in entering
        )
        allowed: list[ArrivalEvent] = []
        for event in arrivals:
            if self.throttle.alert_gate.allow(now):
                allowed.append(event)
            else:
                logger.info(
                    "Arrival of %s at %.0f m suppressed by alert throttle",
                    event.track_id,
                    event.distance_m,
                )

        result = DetectionResult(
            tracks=tuple(item.track for item in partition.acquisition),
            reference=reference,
            timestamp=payload.fetched_at,
        )
        logger.debug(
            "%s tick: %s records, %s nearby, %s arrivals, %s alerts",
            mode.value,
            len(tracks),
            len(result.tracks),
            len(arrivals),
            len(allowed),
        )
        return Completed(result=result, events=tuple(allowed), arrivals=arrivals)


__all__ = ["FeedSource", "PollScheduler", "fetch_boxes"]
