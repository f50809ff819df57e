"""Authentication schemas."""

from __future__ import annotations

from typing import Any

from pydantic import Field

from authnz_jwt.schemas.base import APIResponse


class LoginResponse(APIResponse):
    """Body returned by a successful login."""

    token: str = Field(..., description="Signed bearer token")


class IdentityResponse(APIResponse):
    """Identity resolved from a verified bearer token."""

    username: str = Field(..., description="Value of the token's user claim")
    claims: dict[str, Any] = Field(
        default_factory=dict,
        description="All verified claims",
    )
