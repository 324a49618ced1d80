"""Engine outputs: detection results, arrival events and tick outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from .positions import Position
from .tracks import Track


class DetectionResult(BaseModel):
    """Tracks inside the acquisition radius as of one successful tick."""

    tracks: tuple[Track, ...] = Field(
        default=(), description="Tracks ordered by ascending distance from the reference"
    )
    reference: Position = Field(..., description="Reference point the tick was run for")
    timestamp: datetime = Field(..., description="When the feed data was fetched (UTC)")

    model_config = ConfigDict(frozen=True)


class ArrivalEvent(BaseModel):
    """A track id newly inside the alert radius."""

    track_id: str = Field(..., description="Identifier of the arriving track")
    distance_m: float = Field(..., description="Great-circle distance at arrival")
    track: Track = Field(..., description="Track snapshot at arrival")
    observed_at: datetime = Field(..., description="Fetch time of the arrival tick (UTC)")

    model_config = ConfigDict(frozen=True)


class SkipReason(str, Enum):
    """Why a tick did no work."""

    THROTTLED_FEED = "throttled_feed"
    NO_REFERENCE = "no_reference"
    ENGINE_CLOSED = "engine_closed"


class FailureReason(str, Enum):
    """Why a tick's fetch produced no data."""

    FETCH_ERROR = "fetch_error"
    DECODE_ERROR = "decode_error"


class TickMode(str, Enum):
    """Which timeline a tick belongs to."""

    FOREGROUND = "foreground"
    BACKGROUND = "background"


@dataclass(frozen=True)
class Skipped:
    reason: SkipReason

    status = "skipped"


@dataclass(frozen=True)
class Failed:
    reason: FailureReason
    detail: Optional[str] = None

    status = "failed"


@dataclass(frozen=True)
class Completed:
    """A tick that fetched, filtered and tracked successfully.

    ``events`` holds the arrivals the alert gate let through; ``arrivals`` holds
    every arrival of the tick, throttled or not.
    """

    result: DetectionResult
    events: tuple[ArrivalEvent, ...] = ()
    arrivals: tuple[ArrivalEvent, ...] = field(default=())

    status = "completed"


TickOutcome = Union[Skipped, Failed, Completed]


__all__ = [
    "ArrivalEvent",
    "Completed",
    "DetectionResult",
    "Failed",
    "FailureReason",
    "SkipReason",
    "Skipped",
    "TickMode",
    "TickOutcome",
]
