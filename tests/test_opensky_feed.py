from datetime import datetime, timezone

import httpx
import pytest

from factories import make_state
from overhead.domain.geo import BoundingBox
from overhead.ingestors.opensky import FeedDecodeError, FeedFetchError, OpenSkyFeed
from overhead.models import FailureReason

BOX = BoundingBox(min_lat=9.8, max_lat=10.2, min_lon=19.8, max_lon=20.2)


@pytest.mark.anyio
async def test_feed_returns_raw_states_and_sends_box():
    payload = {"time": 1714765200, "states": [make_state("abc123", 10.0, 20.0)]}
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(200, json=payload)

    feed = OpenSkyFeed(base_url="https://example.test", transport=httpx.MockTransport(handler))

    result = await feed.fetch(BOX)

    assert len(result.states) == 1
    assert result.states[0][0] == "abc123"
    assert result.feed_time == datetime(2024, 5, 3, 19, 40, tzinfo=timezone.utc)
    params = seen[0].url.params
    assert float(params["lamin"]) == pytest.approx(9.8)
    assert float(params["lamax"]) == pytest.approx(10.2)
    assert float(params["lomin"]) == pytest.approx(19.8)
    assert float(params["lomax"]) == pytest.approx(20.2)


@pytest.mark.anyio
async def test_feed_treats_null_states_as_empty():
    transport = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"time": 1714765200, "states": None})
    )
    feed = OpenSkyFeed(base_url="https://example.test", transport=transport)

    result = await feed.fetch(BOX)

    assert result.states == []


@pytest.mark.anyio
async def test_feed_handles_rate_limit():
    transport = httpx.MockTransport(lambda request: httpx.Response(429, text="rate limited"))
    feed = OpenSkyFeed(base_url="https://example.test", transport=transport)

    with pytest.raises(FeedFetchError) as exc_info:
        await feed.fetch(BOX)

    assert exc_info.value.reason == FailureReason.FETCH_ERROR


@pytest.mark.anyio
async def test_feed_handles_error_response():
    transport = httpx.MockTransport(lambda request: httpx.Response(503, text="unavailable"))
    feed = OpenSkyFeed(base_url="https://example.test", transport=transport)

    with pytest.raises(FeedFetchError):
        await feed.fetch(BOX)


@pytest.mark.anyio
async def test_feed_handles_timeout():
    def handler(request: httpx.Request):
        raise httpx.ReadTimeout("timeout", request=request)

    feed = OpenSkyFeed(base_url="https://example.test", transport=httpx.MockTransport(handler))

    with pytest.raises(FeedFetchError):
        await feed.fetch(BOX, timeout=2.0)


@pytest.mark.anyio
async def test_feed_rejects_malformed_envelope():
    not_json = httpx.MockTransport(lambda request: httpx.Response(200, text="<html>"))
    wrong_shape = httpx.MockTransport(lambda request: httpx.Response(200, json=[1, 2, 3]))
    bad_states = httpx.MockTransport(
        lambda request: httpx.Response(200, json={"states": "nope"})
    )

    for transport in (not_json, wrong_shape, bad_states):
        feed = OpenSkyFeed(base_url="https://example.test", transport=transport)
        with pytest.raises(FeedDecodeError) as exc_info:
            await feed.fetch(BOX)
        assert exc_info.value.reason == FailureReason.DECODE_ERROR
