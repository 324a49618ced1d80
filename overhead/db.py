"""Database configuration and helpers for the alert history."""

from __future__ import annotations

import logging
import os
from datetime import date, timedelta
from pathlib import Path

from sqlalchemy import create_engine, func
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from overhead.config import settings

DATABASE_URL = os.getenv("OVERHEAD_DB_URL", "sqlite:///./overhead.db")
CLEANUP_STATE_FILE = Path(
    os.getenv(
        "OVERHEAD_RETENTION_STATE_FILE", "/var/lib/overhead/retention_cleanup_state"
    )
)

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
Base = declarative_base()

logger = logging.getLogger("overhead.db")


def _load_last_cleanup_date() -> date | None:
    """Load the last cleanup date from disk if present."""

    try:
        if not CLEANUP_STATE_FILE.exists():
            return None

        stored = CLEANUP_STATE_FILE.read_text().strip()
        if not stored:
            return None

        return date.fromisoformat(stored)
    except Exception as exc:  # pragma: no cover - defensive logging
        logger.warning(
            "Failed to load last cleanup date from %s: %s", CLEANUP_STATE_FILE, exc
        )
        return None


def _persist_last_cleanup_date(value: date) -> None:
    try:
        CLEANUP_STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
        CLEANUP_STATE_FILE.write_text(value.isoformat())
    except Exception as exc:  # pragma: no cover - defensive logging
        logger.warning(
            "Failed to persist cleanup date to %s: %s", CLEANUP_STATE_FILE, exc
        )


_last_cleanup_date: date | None = _load_last_cleanup_date()


def init_db() -> None:
    """Create database tables if they do not exist."""

    import overhead.db_models  # noqa: F401 - models are imported for side effects

    Base.metadata.create_all(bind=engine)


def maybe_cleanup_old_records(db: Session) -> None:
    """
    Delete alert history older than the retention window.

    - Only run at most once per UTC day.
    - Use date-based comparison, ignoring time-of-day.
    - Fail-soft: log on error but never break the caller's normal write.
    """

    global _last_cleanup_date

    try:
        today = date.today()
        if _last_cleanup_date == today:
            return

        retention_days = max(settings.retention_days, 1)
        cutoff_str = (today - timedelta(days=retention_days)).isoformat()

        import overhead.db_models as models

        deleted = (
            db.query(models.AlertRecord)
            .filter(func.date(models.AlertRecord.timestamp) < cutoff_str)
            .delete(synchronize_session=False)
        )
        db.commit()
        if deleted:
            logger.info("Retention cleanup removed %s alerts", deleted)

        _last_cleanup_date = today
        _persist_last_cleanup_date(today)
    except Exception as exc:  # pragma: no cover - defensive logging
        db.rollback()
        logger.warning("Retention cleanup failed: %s", exc)
