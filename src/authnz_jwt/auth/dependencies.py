"""FastAPI security dependencies.

This module provides reusable dependencies for protecting route handlers
with the authentication engine stored on ``app.state.auth_engine``.

The request path selects the directory scope, so a handler mounted under
a configured prefix is verified with that directory's directives.
"""

from __future__ import annotations

from typing import Annotated, Any, Final

from fastapi import Depends, HTTPException, Request
from pydantic import BaseModel

from authnz_jwt.auth.engine import AccessDecision, AuthEngine, Outcome


AUTHORIZATION_HEADER: Final[str] = "Authorization"
WWW_AUTHENTICATE_HEADER: Final[str] = "WWW-Authenticate"

_DETAILS: Final[dict[Outcome, str]] = {
    Outcome.UNAUTHORIZED: "Not authenticated",
    Outcome.BAD_REQUEST: "Authentication type must be Bearer",
    Outcome.INTERNAL_ERROR: "Internal server error",
}


class CurrentUser(BaseModel):
    """Representation of the current authenticated user.

    This model is created from the verified token claims.
    """

    username: str
    claims: dict[str, Any] = {}

    @classmethod
    def from_decision(cls, decision: AccessDecision) -> CurrentUser:
        """Create CurrentUser from a granted AccessDecision."""
        return cls(username=decision.user or "", claims=decision.claims)


def get_auth_engine(request: Request) -> AuthEngine:
    """Return the engine created at startup.

    Raises:
        RuntimeError: If the application lifespan has not run.
    """
    engine: AuthEngine | None = getattr(request.app.state, "auth_engine", None)
    if engine is None:
        msg = "Auth engine not initialized. Call build_engine() during startup."
        raise RuntimeError(msg)
    return engine


def raise_for_decision(decision: AccessDecision) -> None:
    """Raise the HTTPException matching a rejected decision.

    Args:
        decision: Decision returned by ``AuthEngine.authenticate``.

    Raises:
        HTTPException: For every outcome other than GRANTED.
    """
    if decision.outcome is Outcome.GRANTED:
        return

    detail = _DETAILS.get(decision.outcome, "Request rejected")
    headers = None
    if decision.challenge is not None:
        if decision.challenge.error_description:
            detail = decision.challenge.error_description
        headers = {WWW_AUTHENTICATE_HEADER: decision.challenge.to_header()}

    raise HTTPException(
        status_code=decision.outcome.status_code,
        detail=detail,
        headers=headers,
    )


async def get_access_decision(
    request: Request,
    engine: Annotated[AuthEngine, Depends(get_auth_engine)],
) -> AccessDecision:
    """Authenticate the request and reject it unless access is granted.

    Args:
        request: The incoming request.
        engine: Authentication engine.

    Returns:
        The granted AccessDecision.

    Raises:
        HTTPException: 401, 400 or 500 with the challenge header when present.
    """
    decision = engine.authenticate(
        request.url.path,
        request.headers.get(AUTHORIZATION_HEADER),
    )
    raise_for_decision(decision)
    return decision


async def require_user(
    decision: Annotated[AccessDecision, Depends(get_access_decision)],
) -> CurrentUser:
    """Get the current authenticated user.

    This is the primary dependency for protected routes.
    """
    return CurrentUser.from_decision(decision)
