"""Unit tests for the credential checker registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from authnz_jwt.auth.exceptions import ConfigurationError, UnknownProviderError
from authnz_jwt.auth.providers import (
    CheckerRegistry,
    Decision,
    FileCredentialChecker,
    StaticCredentialChecker,
    create_default_registry,
)
from authnz_jwt.core.config import AuthSettings, Settings


if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


pytestmark = pytest.mark.unit


class TestCheckerRegistry:
    """Tests for CheckerRegistry."""

    def test_build_chain_in_order(self) -> None:
        """Should build a chain following the listed order."""
        registry = CheckerRegistry()
        registry.register("a", lambda: StaticCredentialChecker({}, name="a"))
        registry.register("b", lambda: StaticCredentialChecker({}, name="b"))

        chain = registry.build_chain(["b", "a"])

        assert chain.names == ("b", "a")

    def test_unknown_provider(self) -> None:
        """Should fail on names nothing is registered under."""
        registry = CheckerRegistry()

        with pytest.raises(UnknownProviderError, match="Unknown credential provider: ldap"):
            registry.build_chain(["ldap"])

    def test_duplicate_registration(self) -> None:
        """Should refuse to register a name twice."""
        registry = CheckerRegistry()
        registry.register("a", lambda: StaticCredentialChecker({}))

        with pytest.raises(ConfigurationError):
            registry.register("a", lambda: StaticCredentialChecker({}))

    def test_rejects_non_checker(self) -> None:
        """Should refuse factories returning objects that cannot check passwords."""
        registry = CheckerRegistry()
        registry.register("broken", object)

        with pytest.raises(ConfigurationError, match="does not support password checking"):
            registry.create("broken")

    def test_empty_chain(self) -> None:
        """Should build an empty chain from no names."""
        assert len(CheckerRegistry().build_chain([])) == 0


class TestCreateDefaultRegistry:
    """Tests for create_default_registry function."""

    def test_registers_bundled_checkers(self) -> None:
        """Should register the static and file checkers."""
        registry = create_default_registry(Settings())

        assert set(registry.names) == {"static", "file"}

    def test_static_uses_configured_users(self, hash_password: Callable[[str], str]) -> None:
        """Should feed auth.users to the static checker."""
        settings = Settings(auth=AuthSettings(users={"alice": hash_password("pw")}))

        checker = create_default_registry(settings).create("static")

        assert isinstance(checker, StaticCredentialChecker)
        assert checker.check_credentials("alice", "pw") == Decision.GRANTED

    def test_file_uses_configured_path(self, tmp_path: Path) -> None:
        """Should point the file checker at auth.user_file."""
        path = tmp_path / "users"
        settings = Settings(auth=AuthSettings(user_file=str(path)))

        checker = create_default_registry(settings).create("file")

        assert isinstance(checker, FileCredentialChecker)
        assert checker.path == path

    def test_file_requires_path(self) -> None:
        """Should fail when the file provider is used without a path."""
        registry = create_default_registry(Settings())

        with pytest.raises(ConfigurationError, match="auth.user_file"):
            registry.create("file")
