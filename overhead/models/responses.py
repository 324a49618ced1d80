"""Request and response models for the HTTP surface."""

from __future__ import annotations

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from .detection import ArrivalEvent
from .positions import Position
from .tracks import Track


class NearbyTrack(BaseModel):
    """A track together with its distance from the reference point."""

    track: Track = Field(..., description="Parsed track")
    distance_m: float = Field(..., description="Great-circle distance in meters")
    distance_text: str = Field(..., description="Human-readable distance")
    heading_text: Optional[str] = Field(
        default=None, description="Heading with 16-point compass direction"
    )


class DetectionsResponse(BaseModel):
    """Current detection snapshot."""

    reference: Optional[Position] = Field(
        default=None, description="Reference point of the snapshot"
    )
    timestamp: Optional[datetime] = Field(
        default=None, description="When the underlying feed data was fetched"
    )
    age_seconds: Optional[float] = Field(
        default=None, description="Seconds since the snapshot's fetch"
    )
    tracks: list[NearbyTrack] = Field(
        default_factory=list, description="Tracks ordered by ascending distance"
    )


class TickOutcomeResponse(BaseModel):
    """Summary of a tick triggered over HTTP."""

    status: Literal["skipped", "failed", "completed"] = Field(
        ..., description="Outcome kind"
    )
    reason: Optional[str] = Field(
        default=None, description="Skip or failure reason"
    )
    track_count: int = Field(default=0, description="Tracks inside the acquisition radius")
    events: list[ArrivalEvent] = Field(
        default_factory=list, description="Arrivals allowed through the alert gate"
    )


class AlertNotification(BaseModel):
    """A delivered alert, as kept in the alert history."""

    id: str = Field(..., description="Alert identifier")
    title: str = Field(..., description="Alert title")
    body: str = Field(..., description="Alert body")
    track_id: str = Field(..., description="Identifier of the track that arrived")
    callsign: str = Field(..., description="Display name of the track")
    distance_m: float = Field(..., description="Distance at arrival in meters")
    timestamp: datetime = Field(..., description="When the alert was delivered")

    model_config = ConfigDict(from_attributes=True)


__all__ = [
    "AlertNotification",
    "DetectionsResponse",
    "NearbyTrack",
    "TickOutcomeResponse",
]
