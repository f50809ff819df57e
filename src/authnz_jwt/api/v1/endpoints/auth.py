"""Authentication endpoints.

- Login: form credentials checked by the directory's provider chain,
  answered with a signed token
- Me: identity of the bearer of a valid token
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Annotated, Final

from fastapi import APIRouter, Depends, HTTPException, Request, status
from starlette.concurrency import run_in_threadpool

from authnz_jwt.auth.dependencies import CurrentUser, get_auth_engine, require_user
from authnz_jwt.auth.engine import AuthEngine, Outcome
from authnz_jwt.auth.exceptions import CredentialError
from authnz_jwt.schemas.auth import IdentityResponse, LoginResponse


if TYPE_CHECKING:
    from starlette.datastructures import FormData


USER_FIELD: Final[str] = "user"
PASSWORD_FIELD: Final[str] = "password"  # noqa: S105

# Non-POST verbs are routed here so the engine can answer 405
_LOGIN_METHODS: Final[list[str]] = ["GET", "POST", "PUT", "PATCH", "DELETE"]


router = APIRouter(prefix="/auth", tags=["auth"])


def _form_value(form: FormData | None, name: str) -> str | None:
    if form is None:
        return None
    value = form.get(name)
    return value if isinstance(value, str) else None


@router.api_route(
    "/login",
    methods=_LOGIN_METHODS,
    response_model=LoginResponse,
    summary="Login for a bearer token",
    description="Check form credentials (user, password) and issue a signed token.",
)
async def login(
    request: Request,
    engine: Annotated[AuthEngine, Depends(get_auth_engine)],
) -> LoginResponse:
    """Authenticate form credentials and return a token."""
    form = await request.form() if request.method == "POST" else None

    # Password hashing is CPU bound
    decision = await run_in_threadpool(
        engine.login,
        request.url.path,
        _form_value(form, USER_FIELD),
        _form_value(form, PASSWORD_FIELD),
        method=request.method,
    )

    if decision.outcome is Outcome.GRANTED and decision.token is not None:
        return LoginResponse(token=decision.token)

    if decision.outcome is Outcome.METHOD_NOT_ALLOWED:
        raise HTTPException(
            status_code=status.HTTP_405_METHOD_NOT_ALLOWED,
            detail="Login only supports the POST method",
            headers={"Allow": "POST"},
        )
    if decision.outcome is Outcome.UNAUTHORIZED:
        raise CredentialError
    raise HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="Internal server error",
    )


@router.get(
    "/me",
    response_model=IdentityResponse,
    summary="Current identity",
    description="Return the user and claims of the presented bearer token.",
)
async def me(
    current_user: Annotated[CurrentUser, Depends(require_user)],
) -> IdentityResponse:
    """Return the identity carried by the bearer token."""
    return IdentityResponse(
        username=current_user.username,
        claims=current_user.claims,
    )
