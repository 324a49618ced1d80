"""Health check endpoint."""

from fastapi import APIRouter, Depends

from overhead.api.dependencies import get_background_checker
from overhead.config import settings
from overhead.services import BackgroundChecker

router = APIRouter()


@router.get("/healthz", summary="Health check")
def health_check(
    checker: BackgroundChecker | None = Depends(get_background_checker),
) -> dict:
    """Service status plus background checker counters."""

    background = None
    if checker is not None:
        background = {
            "last_check": checker.status.last_check.isoformat()
            if checker.status.last_check
            else None,
            "check_count": checker.status.check_count,
            "last_outcome": checker.status.last_outcome,
        }
    return {"status": "ok", "env": settings.overhead_env, "background": background}
