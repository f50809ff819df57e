"""Authentication orchestration.

Two independent flows share nothing but the immutable configuration:

- login: credentials -> provider chain -> signed token
- access: Authorization header -> token verification -> identity

Both return a decision object instead of raising, so the HTTP layer only
has to translate an Outcome into a status code and a challenge header.
"""

from __future__ import annotations

from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final

from fastapi import status
from pydantic import BaseModel, ConfigDict, Field

from authnz_jwt.auth.codec import check_key_length, issue_token, verify_token
from authnz_jwt.auth.exceptions import (
    ConfigurationError,
    MissingRealmError,
    MissingSecretError,
    MissingUserClaimError,
    TokenError,
    UnsupportedAlgorithmError,
)
from authnz_jwt.auth.providers import Decision, ProviderChain, create_default_registry
from authnz_jwt.auth.scope import (
    DirectoryScope,
    EffectiveConfig,
    ScopeConfig,
    match_directory,
    resolve_effective,
)
from authnz_jwt.observability.logging import bind_context, get_logger


if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from authnz_jwt.auth.providers import CheckerRegistry
    from authnz_jwt.core.config import Settings


logger = get_logger(__name__)

BEARER_SCHEME: Final[str] = "Bearer"
_BEARER_PREFIX: Final[str] = f"{BEARER_SCHEME} "

INVALID_REQUEST: Final[str] = "invalid_request"
INVALID_TOKEN: Final[str] = "invalid_token"


class Outcome(StrEnum):
    """Result of an authentication flow, mapped 1:1 to an HTTP status."""

    GRANTED = "granted"
    UNAUTHORIZED = "unauthorized"
    BAD_REQUEST = "bad_request"
    INTERNAL_ERROR = "internal_error"
    METHOD_NOT_ALLOWED = "method_not_allowed"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]


_STATUS_CODES: Final[dict[Outcome, int]] = {
    Outcome.GRANTED: status.HTTP_200_OK,
    Outcome.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    Outcome.BAD_REQUEST: status.HTTP_400_BAD_REQUEST,
    Outcome.INTERNAL_ERROR: status.HTTP_500_INTERNAL_SERVER_ERROR,
    Outcome.METHOD_NOT_ALLOWED: status.HTTP_405_METHOD_NOT_ALLOWED,
}


class Challenge(BaseModel):
    """Bearer challenge sent back with a rejection (RFC 6750 section 3)."""

    model_config = ConfigDict(frozen=True)

    scheme: str = BEARER_SCHEME
    realm: str
    error: str | None = None
    error_description: str | None = None

    def to_header(self) -> str:
        """Render the challenge as a WWW-Authenticate header value."""
        value = f"{self.scheme} realm={_quote(self.realm)}"
        if self.error:
            value += f", error={_quote(self.error)}"
        if self.error_description:
            value += f", error_description={_quote(self.error_description)}"
        return value


def _quote(value: str) -> str:
    """Render ``value`` as an RFC 7230 quoted-string."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


class LoginDecision(BaseModel):
    """Result of the login flow."""

    model_config = ConfigDict(frozen=True)

    outcome: Outcome
    token: str | None = None


class AccessDecision(BaseModel):
    """Result of the resource-access flow."""

    model_config = ConfigDict(frozen=True)

    outcome: Outcome
    user: str | None = None
    claims: dict[str, Any] = Field(default_factory=dict)
    challenge: Challenge | None = None


def _require_signing(config: EffectiveConfig) -> tuple[str, Any]:
    if config.signature_secret is None:
        msg = "You must specify a signature secret in configuration"
        raise MissingSecretError(msg)
    if config.signature_algorithm is None:
        msg = "No signature algorithm configured"
        raise UnsupportedAlgorithmError(msg)
    return config.signature_algorithm, config.signature_secret


def _require_realm(config: EffectiveConfig) -> str:
    if not config.realm:
        msg = "A realm (AuthName) is required to protect this path"
        raise MissingRealmError(msg)
    return config.realm


class AuthEngine:
    """Runs the login and resource-access flows.

    Attributes:
        server: Server-wide scope.
        directories: Directory scopes, in declaration order.
    """

    def __init__(
        self,
        server: ScopeConfig,
        directories: Sequence[DirectoryScope] = (),
        chains: Mapping[str, ProviderChain] | None = None,
        *,
        default_realm: str | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            server: Server-wide scope.
            directories: Directory scopes.
            chains: Provider chain for each directory, keyed by its path.
            default_realm: Realm used when a directory does not set one.
        """
        self.server = server
        self.directories: tuple[DirectoryScope, ...] = tuple(directories)
        self._chains: dict[str, ProviderChain] = dict(chains or {})
        self._default_realm = default_realm

    # -------------------------------------------------------------------------
    # Configuration lookup
    # -------------------------------------------------------------------------

    def directory_for(self, path: str) -> DirectoryScope | None:
        return match_directory(path, self.directories)

    def effective_config(self, path: str) -> EffectiveConfig:
        """Resolve the configuration that applies to a request path."""
        return resolve_effective(
            self.server,
            self.directory_for(path),
            default_realm=self._default_realm,
        )

    def chain_for(self, path: str) -> ProviderChain:
        """Return the provider chain for a request path (empty if none)."""
        directory = self.directory_for(path)
        if directory is None:
            return ProviderChain()
        return self._chains.get(directory.path, ProviderChain())

    # -------------------------------------------------------------------------
    # Token operations
    # -------------------------------------------------------------------------

    @staticmethod
    def issue(username: str, config: EffectiveConfig) -> str:
        """Issue a token for ``username`` under ``config``.

        Raises:
            ConfigurationError: If the secret or algorithm is missing or invalid.
        """
        algorithm, secret = _require_signing(config)
        return issue_token(
            username,
            algorithm,
            secret,
            exp_delay=config.exp_delay,
            nbf_delay=config.nbf_delay,
            issuer=config.issuer,
            subject=config.subject,
            audience=config.audience,
        )

    @staticmethod
    def verify(token: str, config: EffectiveConfig) -> dict[str, Any]:
        """Verify ``token`` under ``config`` and return its claims.

        Raises:
            ConfigurationError: If the secret or algorithm is missing or invalid.
            TokenError: If the token is rejected.
        """
        algorithm, secret = _require_signing(config)
        return verify_token(
            token,
            algorithm,
            secret,
            issuer=config.issuer,
            audience=config.audience,
            subject=config.subject,
            leeway=config.leeway,
        )

    # -------------------------------------------------------------------------
    # Flows
    # -------------------------------------------------------------------------

    def login(
        self,
        path: str,
        username: str | None,
        password: str | None,
        *,
        method: str = "POST",
    ) -> LoginDecision:
        """Authenticate credentials and issue a token.

        Args:
            path: Request path, used to pick the directory scope.
            username: Username from the login form, None if absent.
            password: Password from the login form, None if absent.
            method: HTTP method of the login request.

        Returns:
            LoginDecision carrying the token when the outcome is GRANTED.
        """
        if method.upper() != "POST":
            logger.error("The login handler only supports the POST method", method=method)
            return LoginDecision(outcome=Outcome.METHOD_NOT_ALLOWED)

        if username is None or password is None:
            logger.info("Login rejected, missing user or password field")
            return LoginDecision(outcome=Outcome.UNAUTHORIZED)

        decision = self.chain_for(path).authenticate(username, password)

        if decision == Decision.DENIED:
            logger.warning("Authentication failure, password mismatch", user=username)
            return LoginDecision(outcome=Outcome.UNAUTHORIZED)
        if decision == Decision.USER_NOT_FOUND:
            logger.warning("Authentication failure, user not found", user=username)
            return LoginDecision(outcome=Outcome.UNAUTHORIZED)
        if decision != Decision.GRANTED:
            return LoginDecision(outcome=Outcome.INTERNAL_ERROR)

        try:
            token = self.issue(username, self.effective_config(path))
        except ConfigurationError as e:
            logger.error("Cannot issue token", error=str(e))
            return LoginDecision(outcome=Outcome.INTERNAL_ERROR)

        logger.info("Token issued", user=username)
        return LoginDecision(outcome=Outcome.GRANTED, token=token)

    def authenticate(self, path: str, authorization: str | None) -> AccessDecision:
        """Authenticate a request from its Authorization header value.

        Args:
            path: Request path, used to pick the directory scope.
            authorization: Raw Authorization header value, None if absent.

        Returns:
            AccessDecision carrying the user and claims when GRANTED, or a
            challenge for client-side rejections.
        """
        config = self.effective_config(path)

        try:
            realm = _require_realm(config)
            _require_signing(config)
        except ConfigurationError as e:
            logger.error("Cannot protect path", path=path, error=str(e))
            return AccessDecision(outcome=Outcome.INTERNAL_ERROR)

        if authorization is None:
            return AccessDecision(
                outcome=Outcome.UNAUTHORIZED,
                challenge=Challenge(realm=realm),
            )

        if len(authorization) <= len(_BEARER_PREFIX) or not authorization.startswith(
            _BEARER_PREFIX
        ):
            logger.info("Authorization header does not use the Bearer scheme")
            return AccessDecision(
                outcome=Outcome.BAD_REQUEST,
                challenge=Challenge(
                    realm=realm,
                    error=INVALID_REQUEST,
                    error_description="Authentication type must be Bearer",
                ),
            )

        token = authorization[len(_BEARER_PREFIX) :]
        try:
            claims = self.verify(token, config)
            user = claims.get("user")
            if user is None:
                raise MissingUserClaimError
        except ConfigurationError as e:
            logger.error("Cannot verify token", error=str(e))
            return AccessDecision(outcome=Outcome.INTERNAL_ERROR)
        except TokenError as e:
            logger.warning("Token rejected", reason=e.reason.value)
            return AccessDecision(
                outcome=Outcome.UNAUTHORIZED,
                challenge=Challenge(
                    realm=realm,
                    error=INVALID_TOKEN,
                    error_description=e.description,
                ),
            )

        bind_context(user=str(user))
        return AccessDecision(outcome=Outcome.GRANTED, user=str(user), claims=claims)


def _check_scope(label: str, config: EffectiveConfig) -> None:
    """Log signing problems for a scope at startup.

    Requests under a misconfigured scope still fail one by one with an
    internal error; this only makes the problem visible before the first one.
    """
    try:
        algorithm, secret = _require_signing(config)
        check_key_length(secret, algorithm)
    except ConfigurationError as e:
        logger.error("Signing configuration is invalid", scope=label, error=str(e))


def build_engine(
    settings: Settings,
    registry: CheckerRegistry | None = None,
) -> AuthEngine:
    """Create the engine and every directory's provider chain.

    Args:
        settings: Application settings.
        registry: Checker registry. Defaults to the bundled checkers.

    Returns:
        Configured AuthEngine.

    Raises:
        UnknownProviderError: If a directory names an unregistered provider.
    """
    if registry is None:
        registry = create_default_registry(settings)

    directories = settings.auth.directories
    chains = {scope.path: registry.build_chain(scope.providers) for scope in directories}
    engine = AuthEngine(
        settings.server_scope,
        directories,
        chains,
        default_realm=settings.auth.realm,
    )

    _check_scope("server", resolve_effective(engine.server, None))
    for scope in directories:
        _check_scope(scope.path, resolve_effective(engine.server, scope))
        if not (scope.realm or settings.auth.realm):
            logger.warning("No realm configured for directory", scope=scope.path)

    logger.info(
        "Authentication engine ready",
        directories=[scope.path for scope in directories],
        providers={path: list(chain.names) for path, chain in chains.items()},
    )
    return engine


__all__ = [
    "BEARER_SCHEME",
    "AccessDecision",
    "AuthEngine",
    "Challenge",
    "LoginDecision",
    "Outcome",
    "build_engine",
]
