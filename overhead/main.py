from __future__ import annotations

import asyncio
import contextlib
import logging
import time

from fastapi import FastAPI, Request

from overhead.api import api_router
from overhead.config import settings
from overhead.db import init_db
from overhead.services import (
    AlertHistory,
    AlertHistoryNotifier,
    BackgroundChecker,
    DetectionEngine,
    LoggingNotifier,
    PositionStore,
)

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("overhead")


def build_engine(alert_history: AlertHistory) -> DetectionEngine:
    """Construct the detection engine from settings."""

    notifiers = [LoggingNotifier()]
    if settings.alert_history_enabled:
        notifiers.append(AlertHistoryNotifier(alert_history))
    return DetectionEngine(notifiers=notifiers)


@contextlib.asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application startup and shutdown lifecycle."""

    # ----- Startup -----
    init_db()
    logger.info("Database initialized")

    if getattr(app.state, "alert_history", None) is None:
        app.state.alert_history = AlertHistory()
    if getattr(app.state, "positions", None) is None:
        app.state.positions = PositionStore()
    if getattr(app.state, "engine", None) is None:
        app.state.engine = build_engine(app.state.alert_history)
    logger.info(
        "Detection engine ready: alert radius %.0f m, acquisition radius %.0f m",
        app.state.engine.geo_filter.alert_radius_m,
        app.state.engine.geo_filter.acquisition_radius_m,
    )

    if settings.enable_background_checks:
        checker = BackgroundChecker(
            engine=app.state.engine,
            positions=app.state.positions,
            interval_seconds=settings.background_check_interval,
        )
        app.state.background_checker = checker
        app.state.background_task = asyncio.create_task(checker.run())
        logger.info(
            "Background checks started every %.0fs", settings.background_check_interval
        )

    try:
        yield
    finally:
        # ----- Shutdown -----
        app.state.engine.close()

        task = getattr(app.state, "background_task", None)
        if task:
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task

        app.state.engine = None
        app.state.positions = None
        app.state.background_checker = None
        app.state.background_task = None


app = FastAPI(title="Overhead Backend", lifespan=lifespan)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log basic request information for observability."""

    start_time = time.time()
    response = await call_next(request)
    duration_ms = (time.time() - start_time) * 1000
    logger.info(
        "HTTP %s %s -> %s (%.2f ms)",
        request.method,
        request.url.path,
        response.status_code,
        duration_ms,
    )
    return response


app.include_router(api_router)


@app.get("/", summary="Root")
def read_root() -> dict[str, str]:
    """Basic root endpoint for quick verification."""

    return {"message": "Overhead backend is running"}
