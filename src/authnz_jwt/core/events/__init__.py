"""Application lifecycle events."""

from authnz_jwt.core.events.lifespan import lifespan


__all__ = ["lifespan"]
