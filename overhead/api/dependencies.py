"""Accessors for the components wired onto ``app.state`` at startup."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from overhead.services import AlertHistory, BackgroundChecker, DetectionEngine, PositionStore


def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"{name} is not initialized",
        )
    return value


def get_engine(request: Request) -> DetectionEngine:
    return _state(request, "engine")


def get_positions(request: Request) -> PositionStore:
    return _state(request, "positions")


def get_alert_history(request: Request) -> AlertHistory:
    return _state(request, "alert_history")


def get_background_checker(request: Request) -> BackgroundChecker | None:
    return getattr(request.app.state, "background_checker", None)
