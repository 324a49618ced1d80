"""SQLAlchemy ORM models for the Overhead backend."""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from overhead.db import Base

TITLE_MAX_LENGTH = 255
TRACK_ID_MAX_LENGTH = 64
CALLSIGN_MAX_LENGTH = 128


class AlertRecord(Base):
    """An alert that was delivered for a track arrival."""

    __tablename__ = "alerts"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    title: Mapped[str] = mapped_column(String(TITLE_MAX_LENGTH), nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    track_id: Mapped[str] = mapped_column(
        String(TRACK_ID_MAX_LENGTH), index=True, nullable=False
    )
    callsign: Mapped[str] = mapped_column(String(CALLSIGN_MAX_LENGTH), nullable=False)
    distance_m: Mapped[float] = mapped_column(Float, nullable=False)
    timestamp: Mapped[datetime] = mapped_column(
        DateTime,
        default=lambda: datetime.now(timezone.utc).replace(tzinfo=None),
        index=True,
        nullable=False,
    )
