"""Application factory for creating FastAPI instances.

This module provides the create_app factory function that:
- Configures the FastAPI application with appropriate settings
- Sets up the middleware stack in the correct order
- Registers exception handlers
- Mounts API routers
"""

from __future__ import annotations

from fastapi import FastAPI

from authnz_jwt.api.v1.endpoints import health
from authnz_jwt.api.v1.router import router as v1_router
from authnz_jwt.core.config import Settings, get_settings
from authnz_jwt.core.events import lifespan
from authnz_jwt.core.exceptions import setup_exception_handlers
from authnz_jwt.core.middleware import LoggingMiddleware, RequestIDMiddleware


def create_app(settings: Settings | None = None) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Args:
        settings: Optional settings override. If not provided, uses get_settings().

    Returns:
        Configured FastAPI application instance.
    """
    if settings is None:
        settings = get_settings()

    app = FastAPI(
        title=settings.app.name,
        version=settings.app.version,
        description="Bearer token issuing and verification service",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_development else None,
        redoc_url=None,
        openapi_url="/openapi.json" if settings.is_development else None,
        debug=settings.app.debug,
    )

    # Read by the lifespan and by dependencies
    app.state.settings = settings

    setup_exception_handlers(app)
    _setup_middleware(app)
    _setup_routers(app, settings)

    return app


def _setup_middleware(app: FastAPI) -> None:
    """Configure middleware stack.

    Middleware is executed in reverse order of addition. From the request's
    perspective RequestIDMiddleware runs first so the request ID is bound
    before LoggingMiddleware emits anything.
    """
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)


def _setup_routers(app: FastAPI, settings: Settings) -> None:
    """Mount API routers.

    Args:
        app: FastAPI application instance.
        settings: Application settings.
    """
    app.include_router(v1_router, prefix=settings.api.v1_prefix)

    # Unprefixed liveness probe for load balancers
    app.include_router(health.router)
