"""Reference positions supplied by the position source."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


def ensure_utc(value: datetime) -> datetime:
    """Return ``value`` as an aware UTC datetime; naive values are taken as UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def utc_now() -> datetime:
    return datetime.now(tz=timezone.utc)


class Position(BaseModel):
    """A latitude/longitude pair in decimal degrees."""

    latitude: float = Field(..., ge=-90.0, le=90.0, description="Latitude in decimal degrees")
    longitude: float = Field(
        ..., ge=-180.0, le=180.0, description="Longitude in decimal degrees"
    )

    model_config = ConfigDict(frozen=True)


class ReferenceLocation(BaseModel):
    """A fix reported by the position source."""

    latitude: float = Field(..., ge=-90.0, le=90.0, description="Latitude in decimal degrees")
    longitude: float = Field(
        ..., ge=-180.0, le=180.0, description="Longitude in decimal degrees"
    )
    timestamp: datetime = Field(
        default_factory=utc_now, description="When the fix was taken (UTC)"
    )
    accuracy_m: Optional[float] = Field(
        default=None, ge=0.0, description="Horizontal accuracy radius in meters"
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("timestamp")
    @classmethod
    def _normalize_timestamp(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @property
    def position(self) -> Position:
        return Position(latitude=self.latitude, longitude=self.longitude)

    def age_seconds(self, now: datetime) -> float:
        """Seconds elapsed between the fix and ``now``."""

        return (ensure_utc(now) - self.timestamp).total_seconds()


__all__ = ["Position", "ReferenceLocation", "ensure_utc", "utc_now"]
