"""Health check endpoint.

Provides the liveness probe for load balancers and orchestrators.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from authnz_jwt.core.config import Settings, get_settings
from authnz_jwt.schemas.health import HealthResponse


router = APIRouter(tags=["health"])


def _app_settings(request: Request) -> Settings:
    settings = getattr(request.app.state, "settings", None)
    return settings if isinstance(settings, Settings) else get_settings()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Basic health check to verify the service is running.",
)
async def health_check(
    request: Request,
    settings: Annotated[Settings, Depends(_app_settings)],
) -> HealthResponse:
    """Check if the service is alive.

    Reports ``degraded`` when the authentication engine is not available.
    """
    engine = getattr(request.app.state, "auth_engine", None)
    return HealthResponse(
        status="healthy" if engine is not None else "degraded",
        version=settings.app.version,
        environment=settings.APP_ENV,
    )
