"""Pydantic schemas for API responses."""

from authnz_jwt.schemas.auth import IdentityResponse, LoginResponse
from authnz_jwt.schemas.base import APIResponse
from authnz_jwt.schemas.health import HealthResponse


__all__ = [
    "APIResponse",
    "HealthResponse",
    "IdentityResponse",
    "LoginResponse",
]
