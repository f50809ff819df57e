"""Unit tests for layered configuration resolution.

Tests cover:
- Directory-over-server precedence per directive
- Empty values treated as unset, zero treated as set
- Defaults applied by resolve_effective
- Directory matching by path prefix
"""

from __future__ import annotations

import pytest
from pydantic import SecretStr, ValidationError

from authnz_jwt.auth.scope import (
    DEFAULT_EXP_DELAY,
    DEFAULT_LEEWAY,
    Directive,
    DirectoryScope,
    ScopeConfig,
    match_directory,
    resolve,
    resolve_effective,
)


pytestmark = pytest.mark.unit


# =============================================================================
# resolve
# =============================================================================


class TestResolve:
    """Tests for resolve function."""

    def test_directory_value_wins(self) -> None:
        """Should prefer the directory value over the server value."""
        server = ScopeConfig(issuer="server-iss")
        directory = DirectoryScope(path="/api", issuer="dir-iss")

        assert resolve(server, directory, Directive.ISSUER) == "dir-iss"

    def test_falls_back_to_server(self) -> None:
        """Should use the server value when the directory leaves it unset."""
        server = ScopeConfig(issuer="server-iss")
        directory = DirectoryScope(path="/api")

        assert resolve(server, directory, Directive.ISSUER) == "server-iss"

    def test_unset_everywhere_is_none(self) -> None:
        """Should return None when neither scope sets the directive."""
        assert resolve(ScopeConfig(), DirectoryScope(), Directive.AUDIENCE) is None

    def test_no_directory(self) -> None:
        """Should resolve from the server when no directory matches."""
        server = ScopeConfig(audience="aud")

        assert resolve(server, None, Directive.AUDIENCE) == "aud"

    def test_empty_string_counts_as_unset(self) -> None:
        """Should fall back to the server when the directory value is empty."""
        server = ScopeConfig(subject="server-sub")
        directory = DirectoryScope(subject="")

        assert resolve(server, directory, Directive.SUBJECT) == "server-sub"

    def test_empty_secret_counts_as_unset(self) -> None:
        """Should fall back to the server secret when the directory secret is empty."""
        server = ScopeConfig(signature_secret=SecretStr("server-secret"))
        directory = DirectoryScope(signature_secret=SecretStr(""))

        value = resolve(server, directory, Directive.SIGNATURE_SECRET)

        assert value.get_secret_value() == "server-secret"

    def test_zero_counts_as_set(self) -> None:
        """Should keep a directory leeway of 0 instead of the server value."""
        server = ScopeConfig(leeway=30)
        directory = DirectoryScope(leeway=0)

        assert resolve(server, directory, Directive.LEEWAY) == 0

    def test_accepts_directive_name(self) -> None:
        """Should accept the plain directive name."""
        server = ScopeConfig(exp_delay=60)

        assert resolve(server, None, "exp_delay") == 60

    def test_rejects_unknown_directive(self) -> None:
        """Should raise for names that are not directives."""
        with pytest.raises(ValueError):
            resolve(ScopeConfig(), None, "realm")


# =============================================================================
# resolve_effective
# =============================================================================


class TestResolveEffective:
    """Tests for resolve_effective function."""

    def test_applies_defaults(self) -> None:
        """Should default exp_delay and leeway but leave nbf_delay unset."""
        config = resolve_effective(ScopeConfig(), None)

        assert config.exp_delay == DEFAULT_EXP_DELAY == 3600
        assert config.leeway == DEFAULT_LEEWAY == 0
        assert config.nbf_delay is None
        assert config.signature_secret is None

    def test_directives_resolve_independently(self) -> None:
        """Should not gate one directive on another being set."""
        server = ScopeConfig(
            signature_algorithm="HS256",
            signature_secret=SecretStr("server-secret"),
            audience="server-aud",
            leeway=10,
        )
        directory = DirectoryScope(path="/api", signature_algorithm="HS512", issuer="dir-iss")

        config = resolve_effective(server, directory)

        assert config.signature_algorithm == "HS512"
        assert config.signature_secret is not None
        assert config.signature_secret.get_secret_value() == "server-secret"
        assert config.issuer == "dir-iss"
        assert config.audience == "server-aud"
        assert config.leeway == 10

    def test_directory_realm(self) -> None:
        """Should take the realm from the directory."""
        config = resolve_effective(
            ScopeConfig(),
            DirectoryScope(path="/api", realm="staff"),
            default_realm="default",
        )

        assert config.realm == "staff"

    def test_default_realm(self) -> None:
        """Should use the default realm when the directory has none."""
        config = resolve_effective(ScopeConfig(), DirectoryScope(path="/api"), default_realm="default")

        assert config.realm == "default"

    def test_missing_realm(self) -> None:
        """Should leave the realm unset when nothing provides one."""
        assert resolve_effective(ScopeConfig(), None).realm is None


# =============================================================================
# Models
# =============================================================================


class TestScopeModels:
    """Tests for ScopeConfig and DirectoryScope validation."""

    def test_scope_is_frozen(self) -> None:
        """Should not allow mutation after construction."""
        scope = ScopeConfig(issuer="iss")

        with pytest.raises(ValidationError):
            scope.issuer = "other"  # type: ignore[misc]

    def test_rejects_negative_delay(self) -> None:
        """Should reject negative delays."""
        with pytest.raises(ValidationError):
            ScopeConfig(exp_delay=-1)

    def test_rejects_unknown_directive(self) -> None:
        """Should reject misspelled directives."""
        with pytest.raises(ValidationError):
            ScopeConfig(isuer="typo")  # type: ignore[call-arg]

    def test_secret_hidden_in_repr(self) -> None:
        """Should never show the secret in the model repr."""
        scope = ScopeConfig(signature_secret=SecretStr("super-secret-value"))

        assert "super-secret-value" not in repr(scope)

    def test_strips_trailing_slash(self) -> None:
        """Should normalize the directory path."""
        assert DirectoryScope(path="/api/").path == "/api"
        assert DirectoryScope(path="/").path == "/"

    def test_requires_absolute_path(self) -> None:
        """Should reject relative directory paths."""
        with pytest.raises(ValidationError):
            DirectoryScope(path="api")


# =============================================================================
# match_directory
# =============================================================================


class TestMatchDirectory:
    """Tests for match_directory function."""

    def test_longest_prefix_wins(self) -> None:
        """Should pick the most specific directory."""
        api = DirectoryScope(path="/api")
        v1 = DirectoryScope(path="/api/v1")

        assert match_directory("/api/v1/auth/me", [api, v1]) is v1
        assert match_directory("/api/v2/items", [api, v1]) is api

    def test_exact_path(self) -> None:
        """Should match a path equal to the prefix."""
        api = DirectoryScope(path="/api")

        assert match_directory("/api", [api]) is api

    def test_segment_aligned(self) -> None:
        """Should not match a prefix that ends mid-segment."""
        api = DirectoryScope(path="/api")

        assert match_directory("/apiv2/items", [api]) is None

    def test_root_matches_everything(self) -> None:
        """Should use the root scope when nothing more specific matches."""
        root = DirectoryScope(path="/")
        api = DirectoryScope(path="/api")

        assert match_directory("/other", [root, api]) is root
        assert match_directory("/api/x", [root, api]) is api

    def test_last_declared_wins_on_tie(self) -> None:
        """Should prefer the later declaration of the same prefix."""
        first = DirectoryScope(path="/api", realm="first")
        second = DirectoryScope(path="/api", realm="second")

        assert match_directory("/api/x", [first, second]) is second

    def test_no_match(self) -> None:
        """Should return None when nothing matches."""
        assert match_directory("/api", []) is None
