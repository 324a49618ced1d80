"""Alert delivery: formatting, logging and the persisted alert history."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
from typing import Callable, Optional
from uuid import uuid4

from sqlalchemy.orm import Session

from overhead import db_models
from overhead.db import SessionLocal, maybe_cleanup_old_records
from overhead.domain.geo import format_distance
from overhead.models.detection import ArrivalEvent
from overhead.models.responses import AlertNotification

logger = logging.getLogger("overhead.notifier")

METERS_TO_FEET = 3.28084


@dataclass(frozen=True)
class AlertMessage:
    title: str
    body: str


def format_alert(event: ArrivalEvent) -> AlertMessage:
    """Build the user-facing text for an arrival."""

    callsign = event.track.display_name
    body = f"{callsign} is passing {format_distance(event.distance_m)} away"
    if event.track.altitude is not None:
        body += f" at {int(event.track.altitude * METERS_TO_FEET)} ft"
    return AlertMessage(title=f"{callsign} flying overhead", body=body)


class LoggingNotifier:
    """Deliver alerts to the application log."""

    async def notify(self, event: ArrivalEvent) -> None:
        message = format_alert(event)
        logger.info("ALERT %s: %s", message.title, message.body)


class AlertHistory:
    """Delivered alerts stored through SQLAlchemy."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self.session_factory = session_factory

    def record(self, event: ArrivalEvent, message: Optional[AlertMessage] = None) -> AlertNotification:
        message = message or format_alert(event)
        record = db_models.AlertRecord(
            id=str(uuid4()),
            # Feed values are unbounded; the columns are not
            title=message.title[: db_models.TITLE_MAX_LENGTH],
            body=message.body,
            track_id=event.track_id[: db_models.TRACK_ID_MAX_LENGTH],
            callsign=event.track.display_name[: db_models.CALLSIGN_MAX_LENGTH],
            distance_m=event.distance_m,
            timestamp=datetime.now(timezone.utc).replace(tzinfo=None),
        )
        db = self.session_factory()
        try:
            db.add(record)
            db.commit()
            notification = AlertNotification.model_validate(record)
            maybe_cleanup_old_records(db)
        finally:
            db.close()
        return notification

    def recent(self, limit: int = 10) -> list[AlertNotification]:
        """Most recent alerts first."""

        db = self.session_factory()
        try:
            records = (
                db.query(db_models.AlertRecord)
                .order_by(db_models.AlertRecord.timestamp.desc())
                .limit(limit)
                .all()
            )
            return [AlertNotification.model_validate(record) for record in records]
        finally:
            db.close()

    def clear(self) -> int:
        db = self.session_factory()
        try:
            deleted = db.query(db_models.AlertRecord).delete(synchronize_session=False)
            db.commit()
            return deleted
        finally:
            db.close()


class AlertHistoryNotifier:
    """Deliver alerts by appending them to the alert history."""

    def __init__(self, history: AlertHistory) -> None:
        self.history = history

    async def notify(self, event: ArrivalEvent) -> None:
        notification = self.history.record(event)
        logger.debug("Recorded alert %s for %s", notification.id, event.track_id)


__all__ = [
    "AlertHistory",
    "AlertHistoryNotifier",
    "AlertMessage",
    "LoggingNotifier",
    "format_alert",
]
