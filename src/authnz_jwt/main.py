"""Application entry point.

Usage:
    # Development with auto-reload
    uvicorn authnz_jwt.main:app --reload

    # Or directly
    python -m authnz_jwt.main
"""

from authnz_jwt.factory import create_app


app = create_app()

if __name__ == "__main__":
    import uvicorn

    from authnz_jwt.core.config import get_settings

    settings = get_settings()

    uvicorn.run(
        "authnz_jwt.main:app",
        host=settings.server.host,
        port=settings.server.port,
        reload=settings.is_development,
        log_level=settings.logging.level.lower(),
    )
