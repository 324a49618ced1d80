from datetime import date, datetime, timedelta

import pytest

import overhead.db as db
from overhead import db_models
from overhead.config import settings
from overhead.models import ArrivalEvent, Position, Track
from overhead.services.notifier import AlertHistory, AlertHistoryNotifier, format_alert

from factories import at


def _event(track_id: str = "abc123", *, label="TEST123", altitude=3657.6, distance=850.0):
    track = Track(
        id=track_id,
        label=label,
        position=Position(latitude=0.0, longitude=0.0077),
        altitude=altitude,
    )
    return ArrivalEvent(track_id=track_id, distance_m=distance, track=track, observed_at=at(0))


@pytest.fixture
def history(tmp_path, monkeypatch):
    monkeypatch.setattr(db, "CLEANUP_STATE_FILE", tmp_path / "cleanup_state")
    monkeypatch.setattr(db, "_last_cleanup_date", None)
    session = db.SessionLocal()
    try:
        session.query(db_models.AlertRecord).delete()
        session.commit()
    finally:
        session.close()
    return AlertHistory()


def _add_record(session, record_id: str, timestamp: datetime) -> None:
    session.add(
        db_models.AlertRecord(
            id=record_id,
            title="TEST123 flying overhead",
            body="TEST123 is passing 850 meters away",
            track_id="abc123",
            callsign="TEST123",
            distance_m=850.0,
            timestamp=timestamp,
        )
    )


def test_format_alert_includes_distance_and_altitude():
    message = format_alert(_event())

    assert message.title == "TEST123 flying overhead"
    assert message.body == "TEST123 is passing 850 meters away at 12000 ft"


def test_format_alert_without_label_or_altitude():
    message = format_alert(_event(label=None, altitude=None, distance=2500.0))

    assert message.title == "Unknown Flight flying overhead"
    assert message.body == "Unknown Flight is passing 2.5 km away"


def test_record_and_list_recent_alerts(history):
    first = history.record(_event("aaa"))
    second = history.record(_event("bbb"))

    recent = history.recent(limit=10)

    assert {alert.id for alert in recent} == {first.id, second.id}
    assert recent[0].timestamp >= recent[1].timestamp
    assert first.callsign == "TEST123"
    assert first.title == "TEST123 flying overhead"
    assert history.recent(limit=1)[0].id in {first.id, second.id}


def test_record_truncates_values_to_column_sizes(history):
    long_label = "X" * 300
    long_id = "anon-" + "f" * 200

    notification = history.record(_event(long_id, label=long_label))

    assert len(notification.callsign) == db_models.CALLSIGN_MAX_LENGTH
    assert len(notification.track_id) == db_models.TRACK_ID_MAX_LENGTH
    assert len(notification.title) == db_models.TITLE_MAX_LENGTH
    assert notification.body.startswith(long_label)


def test_clear_removes_all_alerts(history):
    history.record(_event("aaa"))
    history.record(_event("bbb"))

    assert history.clear() == 2
    assert history.recent() == []


@pytest.mark.anyio
async def test_history_notifier_records_alert(history):
    await AlertHistoryNotifier(history).notify(_event("ccc"))

    assert [alert.track_id for alert in history.recent()] == ["ccc"]


def test_cleanup_deletes_only_old_alerts(history, monkeypatch):
    monkeypatch.setattr(settings, "retention_days", 3)
    now = datetime.utcnow()

    session = db.SessionLocal()
    try:
        _add_record(session, "old", now - timedelta(days=5))
        _add_record(session, "new", now)
        session.commit()

        db.maybe_cleanup_old_records(session)

        remaining = session.query(db_models.AlertRecord).all()
        assert [record.id for record in remaining] == ["new"]
    finally:
        session.close()


def test_cleanup_runs_only_once_per_day(history, monkeypatch):
    monkeypatch.setattr(settings, "retention_days", 2)
    old_timestamp = datetime.utcnow() - timedelta(days=5)

    session = db.SessionLocal()
    try:
        _add_record(session, "old-1", old_timestamp)
        session.commit()
        db.maybe_cleanup_old_records(session)
        assert session.query(db_models.AlertRecord).count() == 0

        _add_record(session, "old-2", old_timestamp)
        session.commit()
        db.maybe_cleanup_old_records(session)
        assert session.query(db_models.AlertRecord).count() == 1
    finally:
        session.close()


def test_cleanup_date_persists_across_restart(history, monkeypatch):
    monkeypatch.setattr(settings, "retention_days", 2)

    session = db.SessionLocal()
    try:
        db.maybe_cleanup_old_records(session)
    finally:
        session.close()

    assert db.CLEANUP_STATE_FILE.read_text() == date.today().isoformat()
    assert db._load_last_cleanup_date() == date.today()
