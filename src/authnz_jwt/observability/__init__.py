"""Observability components: structured logging."""

from authnz_jwt.observability.logging import (
    bind_context,
    clear_context,
    get_context,
    get_logger,
    logger,
    mask_sensitive,
    setup_logging,
    unbind_context,
)


__all__ = [
    "bind_context",
    "clear_context",
    "get_context",
    "get_logger",
    "logger",
    "mask_sensitive",
    "setup_logging",
    "unbind_context",
]
