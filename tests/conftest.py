"""Shared test fixtures for the authnz-jwt service tests.

Every test runs against an empty configuration directory so YAML files in
the working tree never leak into assertions.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from argon2 import PasswordHasher

from authnz_jwt.core.config import get_settings
from authnz_jwt.core.config.yaml_source import CONFIG_DIR_ENV


if TYPE_CHECKING:
    from collections.abc import Callable, Generator
    from pathlib import Path


SECRET_32 = "0123456789abcdef0123456789abcdef"
SECRET_64 = SECRET_32 * 2


@pytest.fixture(autouse=True)
def isolated_config(
    tmp_path_factory: pytest.TempPathFactory,
    monkeypatch: pytest.MonkeyPatch,
) -> Generator[Path]:
    """Point the YAML source at an empty directory and reset cached settings."""
    config_dir = tmp_path_factory.mktemp("config")
    monkeypatch.setenv(CONFIG_DIR_ENV, str(config_dir))
    monkeypatch.setenv("APP_ENV", "test")
    monkeypatch.delenv("JWT_SIGNATURE_SECRET", raising=False)
    get_settings.cache_clear()
    yield config_dir
    get_settings.cache_clear()


@pytest.fixture
def secret32() -> str:
    """A secret valid for HS256 and HS384."""
    return SECRET_32


@pytest.fixture
def secret64() -> str:
    """A secret valid for HS512."""
    return SECRET_64


@pytest.fixture(scope="session")
def password_hasher() -> PasswordHasher:
    """Cheap Argon2 parameters; verification reads them from the hash."""
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture(scope="session")
def hash_password(password_hasher: PasswordHasher) -> Callable[[str], str]:
    """Return a function hashing a password with the test hasher."""
    return password_hasher.hash
