"""API routers for the Overhead backend."""

from fastapi import APIRouter

from .alerts import router as alerts_router
from .detections import router as detections_router
from .health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(detections_router)
api_router.include_router(alerts_router)

__all__ = ["api_router"]
