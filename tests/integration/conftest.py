"""Integration test fixtures.

Runs the real application, lifespan included, against explicit settings.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from pydantic import SecretStr

from authnz_jwt.auth.scope import DirectoryScope, ScopeConfig
from authnz_jwt.core.config import AuthSettings, Settings
from authnz_jwt.core.config.settings import AppSettings, LoggingSettings
from authnz_jwt.factory import create_app


if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Callable

    from fastapi import FastAPI


pytestmark = pytest.mark.integration


@pytest.fixture
def auth_settings(hash_password: Callable[[str], str]) -> AuthSettings:
    """Auth section protecting the API with the static provider."""
    return AuthSettings(
        realm="staff",
        server=ScopeConfig(
            signature_algorithm="HS256",
            issuer="authnz-jwt",
            exp_delay=300,
        ),
        directories=[DirectoryScope(path="/api/v1", providers=("static",))],
        users={"alice": hash_password("wonderland")},
    )


@pytest.fixture
def test_settings(secret32: str, auth_settings: AuthSettings) -> Settings:
    """Create test settings."""
    return Settings(
        APP_ENV="test",
        JWT_SIGNATURE_SECRET=SecretStr(secret32),
        app=AppSettings(name="authnz-jwt-test", version="0.0.1-test"),
        logging=LoggingSettings(level="DEBUG", format="text"),
        auth=auth_settings,
    )


@pytest.fixture
def app(test_settings: Settings) -> FastAPI:
    """Create FastAPI app with test settings."""
    return create_app(test_settings)


@pytest.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client with the application lifespan running.

    ASGITransport does not send lifespan events, so the lifespan context is
    entered here.
    """
    async with (
        app.router.lifespan_context(app),
        AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac,
    ):
        yield ac


@pytest.fixture
async def token(client: AsyncClient) -> str:
    """Log in as alice and return the issued token."""
    response = await client.post(
        "/api/v1/auth/login",
        data={"user": "alice", "password": "wonderland"},
    )
    assert response.status_code == 200
    return response.json()["token"]
