"""Layered configuration resolution.

Every directive can be declared at two scopes: server-wide and per
directory (a URL prefix). For each request the directory scope matching the
request path is looked up and every directive is resolved independently:

1. the directory value, if it is set and non-empty
2. otherwise the server value, under the same rule
3. otherwise unset (``None``), or the directive's default

Both scopes are immutable pydantic models built once at startup and shared
read-only between requests. Nothing here is cached per request.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator


if TYPE_CHECKING:
    from collections.abc import Iterable


DEFAULT_EXP_DELAY: Final[int] = 3600
DEFAULT_LEEWAY: Final[int] = 0


class Directive(StrEnum):
    """Configurable directives, named after their ScopeConfig field."""

    SIGNATURE_ALGORITHM = "signature_algorithm"
    SIGNATURE_SECRET = "signature_secret"
    ISSUER = "issuer"
    SUBJECT = "subject"
    AUDIENCE = "audience"
    EXP_DELAY = "exp_delay"
    NBF_DELAY = "nbf_delay"
    LEEWAY = "leeway"


class ScopeConfig(BaseModel):
    """Directive values declared at one scope.

    ``None`` means the directive was not configured at this scope. A delay of
    ``0`` is a configured value and is distinct from ``None``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    signature_algorithm: str | None = None
    signature_secret: SecretStr | None = None
    issuer: str | None = None
    subject: str | None = None
    audience: str | None = None
    exp_delay: int | None = Field(default=None, ge=0)
    nbf_delay: int | None = Field(default=None, ge=0)
    leeway: int | None = Field(default=None, ge=0)


class DirectoryScope(ScopeConfig):
    """Directive values for a URL prefix, plus directory-only settings.

    Attributes:
        path: URL prefix this scope applies to.
        realm: Authentication realm announced in challenges.
        providers: Credential checker names, tried in this order on login.
    """

    path: str = "/"
    realm: str | None = None
    providers: tuple[str, ...] = ()

    @field_validator("path")
    @classmethod
    def _normalize_path(cls, v: str) -> str:
        if not v.startswith("/"):
            msg = f"Directory path must start with '/': {v!r}"
            raise ValueError(msg)
        return v.rstrip("/") or "/"


class EffectiveConfig(BaseModel):
    """Directives resolved for a single request."""

    model_config = ConfigDict(frozen=True)

    signature_algorithm: str | None = None
    signature_secret: SecretStr | None = None
    issuer: str | None = None
    subject: str | None = None
    audience: str | None = None
    exp_delay: int = DEFAULT_EXP_DELAY
    nbf_delay: int | None = None
    leeway: int = DEFAULT_LEEWAY
    realm: str | None = None


def _is_set(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, SecretStr):
        return value.get_secret_value() != ""
    if isinstance(value, str):
        return value != ""
    return True


def resolve(
    server: ScopeConfig | None,
    directory: ScopeConfig | None,
    directive: Directive | str,
) -> Any:
    """Resolve one directive across the two scopes.

    Args:
        server: Server-wide scope.
        directory: Directory scope matching the request, if any.
        directive: Directive to look up.

    Returns:
        The effective value, or None when unset at both scopes.
    """
    field = Directive(directive).value
    for scope in (directory, server):
        if scope is None:
            continue
        value = getattr(scope, field)
        if _is_set(value):
            return value
    return None


def resolve_effective(
    server: ScopeConfig | None,
    directory: DirectoryScope | None,
    *,
    default_realm: str | None = None,
) -> EffectiveConfig:
    """Resolve every directive for a request and apply defaults."""
    values = {directive.value: resolve(server, directory, directive) for directive in Directive}

    if values["exp_delay"] is None:
        values["exp_delay"] = DEFAULT_EXP_DELAY
    if values["leeway"] is None:
        values["leeway"] = DEFAULT_LEEWAY

    realm = directory.realm if directory is not None and directory.realm else default_realm
    return EffectiveConfig(**values, realm=realm or None)


def match_directory(
    path: str,
    directories: Iterable[DirectoryScope],
) -> DirectoryScope | None:
    """Find the directory scope for a request path.

    The longest ``path`` prefix matching on a segment boundary wins. When two
    scopes declare the same prefix, the one declared last wins.
    """
    best: DirectoryScope | None = None
    best_len = -1
    for scope in directories:
        prefix = scope.path
        matches = (
            prefix == "/"
            or path == prefix
            or path.startswith(prefix + "/")
        )
        if matches and len(prefix) >= best_len:
            best, best_len = scope, len(prefix)
    return best
