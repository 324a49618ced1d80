"""Location updates, current detections and manual search."""

from __future__ import annotations

import logging
from typing import Iterable

from fastapi import APIRouter, Depends, HTTPException, Query, status

from overhead.api.dependencies import get_engine, get_positions
from overhead.domain.geo import compass_heading, format_distance, haversine_m
from overhead.ingestors import FeedError
from overhead.models import (
    Completed,
    DetectionsResponse,
    NearbyTrack,
    Position,
    ReferenceLocation,
    TickOutcome,
    TickOutcomeResponse,
    Track,
)
from overhead.models.positions import utc_now
from overhead.services import DetectionEngine, PositionStore

router = APIRouter(prefix="/api/v1", tags=["detections"])

logger = logging.getLogger("overhead.api.detections")


def _nearby(tracks: Iterable[tuple[Track, float]]) -> list[NearbyTrack]:
    return [
        NearbyTrack(
            track=track,
            distance_m=distance,
            distance_text=format_distance(distance),
            heading_text=compass_heading(track.heading) if track.heading is not None else None,
        )
        for track, distance in tracks
    ]


def _outcome_response(outcome: TickOutcome) -> TickOutcomeResponse:
    if isinstance(outcome, Completed):
        return TickOutcomeResponse(
            status=outcome.status,
            track_count=len(outcome.result.tracks),
            events=list(outcome.events),
        )
    return TickOutcomeResponse(status=outcome.status, reason=outcome.reason.value)


@router.post(
    "/position",
    response_model=TickOutcomeResponse,
    summary="Submit a location update and run a foreground tick",
)
async def update_position(
    location: ReferenceLocation,
    engine: DetectionEngine = Depends(get_engine),
    positions: PositionStore = Depends(get_positions),
) -> TickOutcomeResponse:
    if not positions.update(location):
        return TickOutcomeResponse(status="skipped", reason="position_rejected")

    outcome = await engine.tick(positions.current_position())
    return _outcome_response(outcome)


@router.get(
    "/detections",
    response_model=DetectionsResponse,
    summary="Tracks inside the acquisition radius as of the last completed tick",
)
def get_detections(engine: DetectionEngine = Depends(get_engine)) -> DetectionsResponse:
    result = engine.current_result()
    if result is None:
        return DetectionsResponse()

    # Every track in a result has a position; the geo filter drops the rest.
    tracks = _nearby(
        (track, haversine_m(result.reference, track.position)) for track in result.tracks
    )
    return DetectionsResponse(
        reference=result.reference,
        timestamp=result.timestamp,
        age_seconds=(utc_now() - result.timestamp).total_seconds(),
        tracks=tracks,
    )


@router.get(
    "/search",
    response_model=list[NearbyTrack],
    summary="One-off lookup around an arbitrary point",
)
async def search(
    latitude: float = Query(..., ge=-90.0, le=90.0, description="Latitude in decimal degrees"),
    longitude: float = Query(
        ..., ge=-180.0, le=180.0, description="Longitude in decimal degrees"
    ),
    engine: DetectionEngine = Depends(get_engine),
) -> list[NearbyTrack]:
    try:
        ranged = await engine.search(Position(latitude=latitude, longitude=longitude))
    except FeedError as exc:
        logger.warning("Manual search failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"code": exc.reason.value, "message": str(exc)},
        ) from exc
    return _nearby((item.track, item.distance_m) for item in ranged)
