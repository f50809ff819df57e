"""Authentication exceptions.

The hierarchy separates operator faults from client faults:

- ConfigurationError: the deployment is wrong (missing secret, bad key
  length, unknown provider). Surfaces as a generic internal error.
- ProviderError: a credential backend malfunctioned. Internal error.
- CredentialError: the client sent bad or missing credentials.
- TokenError: the bearer token was rejected. Carries a reason code and a
  description that is safe to send back in the challenge.
"""

from __future__ import annotations

from enum import StrEnum


class AuthError(Exception):
    """Base exception for authentication errors."""


class ConfigurationError(AuthError):
    """Raised when authentication is misconfigured."""


class UnsupportedAlgorithmError(ConfigurationError):
    """Raised when the signature algorithm is not in the HMAC family."""


class KeyLengthError(ConfigurationError):
    """Raised when the secret length does not match the algorithm."""


class MissingSecretError(ConfigurationError):
    """Raised when no signature secret is configured for a scope."""


class MissingRealmError(ConfigurationError):
    """Raised when a protected scope has no realm name."""


class UnknownProviderError(ConfigurationError):
    """Raised when a scope names a credential provider that is not registered."""


class CredentialError(AuthError):
    """Raised when a username/password pair is missing or rejected."""


class ProviderError(AuthError):
    """Raised by a credential checker when its backend cannot be consulted."""


class TokenErrorReason(StrEnum):
    """Machine-readable reasons a bearer token is rejected."""

    MALFORMED = "malformed"
    ISSUER_MISMATCH = "issuer_mismatch"
    AUDIENCE_MISMATCH = "audience_mismatch"
    SUBJECT_MISMATCH = "subject_mismatch"
    MISSING_EXPIRY = "missing_expiry"
    EXPIRED = "expired"
    NOT_YET_VALID = "not_yet_valid"
    MISSING_USER = "missing_user"


class TokenError(AuthError):
    """Base exception for rejected bearer tokens.

    Attributes:
        reason: Machine-readable rejection reason.
        description: Human-readable text for the challenge header.
    """

    reason: TokenErrorReason = TokenErrorReason.MALFORMED
    description: str = "Token is malformed"

    def __init__(self, description: str | None = None) -> None:
        if description is not None:
            self.description = description
        super().__init__(self.description)


class MalformedTokenError(TokenError):
    """Raised when a token cannot be parsed or its signature does not verify."""

    reason = TokenErrorReason.MALFORMED
    description = "Token is malformed"


class IssuerMismatchError(TokenError):
    """Raised when the token issuer differs from the configured issuer."""

    reason = TokenErrorReason.ISSUER_MISMATCH
    description = "Issuer is not valid"


class AudienceMismatchError(TokenError):
    """Raised when the token audience differs from the configured audience."""

    reason = TokenErrorReason.AUDIENCE_MISMATCH
    description = "Audience is not valid"


class SubjectMismatchError(TokenError):
    """Raised when the token subject differs from the configured subject."""

    reason = TokenErrorReason.SUBJECT_MISMATCH
    description = "Subject is not valid"


class MissingExpiryError(TokenError):
    """Raised when a token carries no 'exp' claim."""

    reason = TokenErrorReason.MISSING_EXPIRY
    description = "Expiration is missing in token"


class TokenExpiredError(TokenError):
    """Raised when a token has expired."""

    reason = TokenErrorReason.EXPIRED
    description = "Token expired"


class TokenNotYetValidError(TokenError):
    """Raised when a token is used before its 'nbf' time."""

    reason = TokenErrorReason.NOT_YET_VALID
    description = "Token can't be processed now due to nbf field"


class MissingUserClaimError(TokenError):
    """Raised when a valid token does not name a user."""

    reason = TokenErrorReason.MISSING_USER
    description = "Username was not in token"
