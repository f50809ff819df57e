"""Unit tests for authentication dependencies.

Tests cover:
- CurrentUser model
- Translation of access decisions into HTTP exceptions
- Engine lookup on application state
- The require_user dependency chain
"""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from authnz_jwt.auth.dependencies import (
    CurrentUser,
    get_access_decision,
    get_auth_engine,
    raise_for_decision,
    require_user,
)
from authnz_jwt.auth.engine import AccessDecision, Challenge, Outcome


pytestmark = pytest.mark.unit


def _request(path: str = "/api/items", authorization: str | None = None) -> MagicMock:
    request = MagicMock()
    request.url.path = path
    request.headers = {"Authorization": authorization} if authorization else {}
    return request


class TestCurrentUser:
    """Tests for CurrentUser model."""

    def test_from_decision(self) -> None:
        """Should copy the user and claims."""
        decision = AccessDecision(
            outcome=Outcome.GRANTED,
            user="alice",
            claims={"user": "alice", "exp": 1},
        )

        user = CurrentUser.from_decision(decision)

        assert user.username == "alice"
        assert user.claims == {"user": "alice", "exp": 1}


class TestRaiseForDecision:
    """Tests for raise_for_decision function."""

    def test_granted_does_not_raise(self) -> None:
        """Should let granted decisions through."""
        raise_for_decision(AccessDecision(outcome=Outcome.GRANTED, user="alice"))

    def test_unauthorized_with_challenge(self) -> None:
        """Should raise 401 carrying the challenge header."""
        decision = AccessDecision(
            outcome=Outcome.UNAUTHORIZED,
            challenge=Challenge(
                realm="staff",
                error="invalid_token",
                error_description="Token expired",
            ),
        )

        with pytest.raises(HTTPException) as exc_info:
            raise_for_decision(decision)

        assert exc_info.value.status_code == 401
        assert exc_info.value.detail == "Token expired"
        assert exc_info.value.headers == {
            "WWW-Authenticate": (
                'Bearer realm="staff", error="invalid_token", error_description="Token expired"'
            ),
        }

    def test_realm_only_challenge(self) -> None:
        """Should use a generic detail when the challenge has no description."""
        decision = AccessDecision(outcome=Outcome.UNAUTHORIZED, challenge=Challenge(realm="staff"))

        with pytest.raises(HTTPException) as exc_info:
            raise_for_decision(decision)

        assert exc_info.value.detail == "Not authenticated"
        assert exc_info.value.headers == {"WWW-Authenticate": 'Bearer realm="staff"'}

    def test_internal_error_has_no_challenge(self) -> None:
        """Should raise 500 without WWW-Authenticate."""
        with pytest.raises(HTTPException) as exc_info:
            raise_for_decision(AccessDecision(outcome=Outcome.INTERNAL_ERROR))

        assert exc_info.value.status_code == 500
        assert exc_info.value.headers is None


class TestGetAuthEngine:
    """Tests for get_auth_engine function."""

    def test_returns_engine(self) -> None:
        """Should read the engine from application state."""
        request = MagicMock()
        engine = MagicMock()
        request.app.state.auth_engine = engine

        assert get_auth_engine(request) is engine

    def test_raises_when_missing(self) -> None:
        """Should fail loudly when the lifespan has not run."""
        request = MagicMock()
        request.app.state.auth_engine = None

        with pytest.raises(RuntimeError, match="not initialized"):
            get_auth_engine(request)


class TestRequireUser:
    """Tests for the async dependencies."""

    @pytest.mark.asyncio
    async def test_granted(self) -> None:
        """Should pass path and header to the engine and return the user."""
        engine = MagicMock()
        engine.authenticate.return_value = AccessDecision(
            outcome=Outcome.GRANTED,
            user="alice",
            claims={"user": "alice"},
        )

        decision = await get_access_decision(_request(authorization="Bearer t"), engine)
        user = await require_user(decision)

        engine.authenticate.assert_called_once_with("/api/items", "Bearer t")
        assert user == CurrentUser(username="alice", claims={"user": "alice"})

    @pytest.mark.asyncio
    async def test_rejected(self) -> None:
        """Should raise when the engine rejects the request."""
        engine = MagicMock()
        engine.authenticate.return_value = AccessDecision(
            outcome=Outcome.UNAUTHORIZED,
            challenge=Challenge(realm="staff"),
        )

        with pytest.raises(HTTPException) as exc_info:
            await get_access_decision(_request(), engine)

        engine.authenticate.assert_called_once_with("/api/items", None)
        assert exc_info.value.status_code == 401
