"""Models for aircraft tracks parsed from state-vector feeds."""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .positions import Position


class Track(BaseModel):
    """One observed aircraft at one instant, in feed-native units."""

    id: str = Field(..., min_length=1, description="Stable feed identifier (ICAO24 hex)")
    label: Optional[str] = Field(default=None, description="Callsign, trimmed")
    position: Optional[Position] = Field(
        default=None, description="Current fix, absent when the feed has none"
    )
    altitude: Optional[float] = Field(default=None, description="Altitude in meters")
    speed: Optional[float] = Field(
        default=None, description="Ground speed in meters per second"
    )
    heading: Optional[float] = Field(
        default=None, description="True track in degrees clockwise from north"
    )
    vertical_rate: Optional[float] = Field(
        default=None, description="Vertical rate in meters per second"
    )
    on_ground: bool = Field(
        default=False, description="Aircraft reported as on the surface"
    )
    origin_country: Optional[str] = Field(default=None, description="Country of registration")
    squawk: Optional[str] = Field(default=None, description="Transponder code")
    last_contact: Optional[datetime] = Field(
        default=None, description="Last time the feed heard from the aircraft"
    )

    model_config = ConfigDict(frozen=True, extra="ignore")

    @property
    def display_name(self) -> str:
        return self.label or "Unknown Flight"


__all__ = ["Track"]
