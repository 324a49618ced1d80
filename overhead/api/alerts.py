"""Alert history endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query

from overhead.api.dependencies import get_alert_history
from overhead.models import AlertNotification
from overhead.services import AlertHistory

router = APIRouter(prefix="/api/v1", tags=["alerts"])

logger = logging.getLogger("overhead.api.alerts")


@router.get(
    "/alerts",
    response_model=list[AlertNotification],
    summary="List delivered alerts, newest first",
)
def list_alerts(
    limit: int = Query(default=10, ge=1, le=500, description="Maximum alerts to return"),
    history: AlertHistory = Depends(get_alert_history),
) -> list[AlertNotification]:
    return history.recent(limit=limit)


@router.delete("/alerts", summary="Clear the alert history")
def clear_alerts(history: AlertHistory = Depends(get_alert_history)) -> dict[str, int]:
    deleted = history.clear()
    logger.info("Cleared %s alerts from history", deleted)
    return {"deleted": deleted}
