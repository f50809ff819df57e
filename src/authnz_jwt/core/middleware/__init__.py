"""Custom middleware components."""

from authnz_jwt.core.middleware.logging import LoggingMiddleware
from authnz_jwt.core.middleware.request_id import RequestIDMiddleware


__all__ = [
    "LoggingMiddleware",
    "RequestIDMiddleware",
]
