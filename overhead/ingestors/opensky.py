"""State-vector feed client for the OpenSky REST API."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import datetime, timezone
import logging
from typing import Any, Optional

import httpx

from overhead.config import settings
from overhead.domain.geo import BoundingBox
from overhead.models.detection import FailureReason

logger = logging.getLogger("overhead.ingestors.opensky")


class FeedError(Exception):
    """Base error for a feed query that produced no usable data."""

    reason: FailureReason = FailureReason.FETCH_ERROR


class FeedFetchError(FeedError):
    """Network failure, timeout or non-2xx status."""


class FeedDecodeError(FeedError):
    """The response envelope was not the expected JSON object."""

    reason = FailureReason.DECODE_ERROR


@dataclass
class FeedPayload:
    """Raw records from one successful feed query."""

    states: list[Any]
    fetched_at: datetime
    feed_time: Optional[datetime] = None
    params: dict[str, float] = field(default_factory=dict)


def _parse_feed_time(raw_time: Any) -> datetime | None:
    if isinstance(raw_time, bool) or not isinstance(raw_time, (int, float)):
        return None
    try:
        return datetime.fromtimestamp(raw_time, tz=timezone.utc)
    except (OverflowError, OSError, ValueError):  # pragma: no cover - defensive conversion
        logger.debug("Failed to parse feed time: %s", raw_time)
        return None


class OpenSkyFeed:
    """Query a state-vector endpoint for everything inside a bounding box."""

    def __init__(
        self,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url or settings.feed_base_url
        self.timeout = timeout or settings.feed_timeout
        self.transport = transport

    async def fetch(self, box: BoundingBox, *, timeout: float | None = None) -> FeedPayload:
        """Fetch raw state vectors, raising ``FeedError`` on any failure."""

        limit = timeout or self.timeout
        params = box.as_query_params()

        try:
            response = await asyncio.wait_for(self._get(params, limit), timeout=limit)
        except (httpx.TimeoutException, asyncio.TimeoutError) as exc:
            logger.warning("Feed request timed out after %.1fs: %s", limit, exc)
            raise FeedFetchError("feed request timed out") from exc
        except httpx.RequestError as exc:
            logger.warning("Feed request failed: %s", exc)
            raise FeedFetchError(f"feed request failed: {exc}") from exc

        if response.status_code == 429:
            logger.warning("Feed rate limit encountered: %s", response.text)
            raise FeedFetchError("feed rate limit exceeded")
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "Feed returned HTTP %s: %s", exc.response.status_code, exc
            )
            raise FeedFetchError(f"feed returned HTTP {exc.response.status_code}") from exc

        try:
            payload = response.json()
        except ValueError as exc:
            logger.warning("Failed to parse feed JSON response: %s", exc)
            raise FeedDecodeError("feed response is not JSON") from exc

        if not isinstance(payload, dict):
            logger.warning("Unexpected feed envelope type: %s", type(payload).__name__)
            raise FeedDecodeError("feed response is not a JSON object")

        # OpenSky sends "states": null when the box is empty
        states = payload.get("states")
        if states is None:
            states = []
        if not isinstance(states, list):
            logger.warning("Unexpected feed states type: %s", type(states).__name__)
            raise FeedDecodeError("feed states field is not an array")

        logger.debug("Fetched %s state vectors", len(states))
        return FeedPayload(
            states=states,
            fetched_at=datetime.now(tz=timezone.utc),
            feed_time=_parse_feed_time(payload.get("time")),
            params=params,
        )

    async def _get(self, params: dict[str, float], timeout: float) -> httpx.Response:
        async with httpx.AsyncClient(timeout=timeout, transport=self.transport) as client:
            return await client.get(self.base_url, params=params)


__all__ = [
    "FeedDecodeError",
    "FeedError",
    "FeedFetchError",
    "FeedPayload",
    "OpenSkyFeed",
]
