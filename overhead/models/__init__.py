"""Pydantic models for the Overhead backend."""

from .detection import (
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
from .positions import Position, ReferenceLocation
from .responses import AlertNotification, DetectionsResponse, NearbyTrack, TickOutcomeResponse
from .tracks import Track

__all__ = [
    "AlertNotification",
    "ArrivalEvent",
    "Completed",
    "DetectionResult",
    "DetectionsResponse",
    "Failed",
    "FailureReason",
    "NearbyTrack",
    "Position",
    "ReferenceLocation",
    "SkipReason",
    "Skipped",
    "TickMode",
    "TickOutcome",
    "TickOutcomeResponse",
    "Track",
]
