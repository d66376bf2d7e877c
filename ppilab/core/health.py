"""Health check endpoints."""

from typing import Literal

from fastapi import APIRouter, Request
from pydantic import BaseModel

from ppilab.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: Literal["ok", "degraded"]
    models_loaded: bool | None = None


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness probe.

    Returns:
        Health status response.
    """
    return HealthResponse(status="ok")


@router.get("/health/ready", response_model=HealthResponse)
async def readiness_check(request: Request) -> HealthResponse:
    """Readiness probe: the fitted model bundle must be loaded.

    Args:
        request: Incoming request (used to reach application state).

    Returns:
        Health status with model-bundle state.
    """
    loaded = getattr(request.app.state, "fitted_models", None) is not None
    if not loaded:
        logger.warning("health.models_not_loaded")
    return HealthResponse(status="ok" if loaded else "degraded", models_loaded=loaded)
