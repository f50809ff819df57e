"""Application lifespan event handlers.

Startup configures logging and builds the authentication engine once:
configuration is resolved and every directory's provider chain is created
before the first request is served. Nothing is mutated afterwards.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import TYPE_CHECKING

from authnz_jwt.auth.engine import build_engine
from authnz_jwt.core.config import Settings, get_settings
from authnz_jwt.observability.logging import get_logger, setup_logging


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator

    from fastapi import FastAPI

logger = get_logger(__name__)


def _get_app_settings(app: FastAPI) -> Settings:
    settings = getattr(app.state, "settings", None)
    if isinstance(settings, Settings):
        return settings
    return get_settings()


async def _startup(app: FastAPI, settings: Settings) -> None:
    """Initialize application services during startup.

    Args:
        app: The FastAPI application instance.
        settings: Application settings.

    Raises:
        ConfigurationError: If a directory names an unknown credential
            provider. The service does not start with a broken chain.
    """
    setup_logging(
        log_level=settings.logging.level,
        log_format=settings.logging.format,
        is_development=settings.is_development,
    )

    logger.info(
        "Starting application",
        app_name=settings.app.name,
        environment=settings.APP_ENV,
        debug=settings.app.debug,
    )

    try:
        app.state.auth_engine = build_engine(settings)
    except Exception:
        logger.exception("Failed to initialize authentication engine")
        raise

    logger.info("Application startup complete")


async def _shutdown(app: FastAPI) -> None:
    """Release application services.

    Args:
        app: The FastAPI application instance.
    """
    logger.info("Shutting down application")
    app.state.auth_engine = None
    logger.info("Application shutdown complete")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifespan events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None - control returns to the application to handle requests.
    """
    settings = _get_app_settings(app)
    await _startup(app, settings)
    yield
    await _shutdown(app)
