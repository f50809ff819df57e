"""Signed token issuance and verification.

Tokens are compact JWS strings signed with a shared HMAC secret through
python-jose. Only the HMAC family is supported, and the secret must have the
exact length the algorithm expects before any signing or verification.

HS384 compatibility note:
    HS384 is accepted as a configured algorithm but signs with the HS256
    primitive and requires a 32-byte secret, not 48. Tokens already issued
    under an HS384 configuration carry ``"alg": "HS256"`` in their header
    and must keep verifying. Switching HS384 to a real SHA-384 signature
    invalidates every such token and needs a coordinated rollout.

Claims validation is done here rather than by python-jose so that the
rules stay exact: issuer/audience/subject are only compared when the token
states them, ``exp`` is mandatory, and the leeway shifts both time bounds.
"""

from __future__ import annotations

import re
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any, Final

from jose import jwt
from jose.constants import ALGORITHMS
from jose.exceptions import JWTError
from pydantic import SecretStr

from authnz_jwt.auth.exceptions import (
    AudienceMismatchError,
    IssuerMismatchError,
    KeyLengthError,
    MalformedTokenError,
    MissingExpiryError,
    SubjectMismatchError,
    TokenExpiredError,
    TokenNotYetValidError,
    UnsupportedAlgorithmError,
)
from authnz_jwt.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Mapping


logger = get_logger(__name__)


class SignatureAlgorithm(StrEnum):
    """Supported signature algorithms (symmetric HMAC only)."""

    HS256 = "HS256"
    HS384 = "HS384"
    HS512 = "HS512"


# Required secret length in bytes. HS384 is 32, see module docstring.
KEY_LENGTHS: Final[dict[SignatureAlgorithm, int]] = {
    SignatureAlgorithm.HS256: 32,
    SignatureAlgorithm.HS384: 32,
    SignatureAlgorithm.HS512: 64,
}

# Primitive actually used to sign. HS384 maps to HS256, see module docstring.
SIGNING_PRIMITIVES: Final[dict[SignatureAlgorithm, str]] = {
    SignatureAlgorithm.HS256: ALGORITHMS.HS256,
    SignatureAlgorithm.HS384: ALGORITHMS.HS256,
    SignatureAlgorithm.HS512: ALGORITHMS.HS512,
}

# Signature only; every claim is checked below.
_DECODE_OPTIONS: Final[dict[str, bool]] = {
    "verify_signature": True,
    "verify_aud": False,
    "verify_iat": False,
    "verify_exp": False,
    "verify_nbf": False,
    "verify_iss": False,
    "verify_sub": False,
    "verify_jti": False,
    "verify_at_hash": False,
}

_INTEGER_RE = re.compile(r"^-?\d+$")

Secret = str | bytes | SecretStr


def _secret_bytes(secret: Secret) -> bytes:
    if isinstance(secret, SecretStr):
        secret = secret.get_secret_value()
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return secret


def _now() -> int:
    return int(datetime.now(UTC).timestamp())


def check_key_length(secret: Secret, algorithm: str) -> SignatureAlgorithm:
    """Validate the algorithm name and the secret length for it.

    Args:
        secret: Signature secret. Its length is counted in UTF-8 bytes.
        algorithm: Configured algorithm name (case-sensitive).

    Returns:
        The parsed SignatureAlgorithm.

    Raises:
        UnsupportedAlgorithmError: If the algorithm is not HS256/HS384/HS512.
        KeyLengthError: If the secret length does not match the algorithm.
    """
    try:
        alg = SignatureAlgorithm(algorithm)
    except ValueError:
        msg = (
            "The only supported algorithms are HS256 (HMAC SHA256), "
            f"HS384 (HMAC SHA384) and HS512 (HMAC SHA512), got {algorithm!r}"
        )
        raise UnsupportedAlgorithmError(msg) from None

    expected = KEY_LENGTHS[alg]
    actual = len(_secret_bytes(secret))
    if actual != expected:
        msg = (
            f"The secret length must be {expected} with {alg.value} "
            f"(current length is {actual})"
        )
        raise KeyLengthError(msg)
    return alg


def issue_token(
    username: str,
    algorithm: str,
    secret: Secret,
    *,
    exp_delay: int | None = None,
    nbf_delay: int | None = None,
    issuer: str | None = None,
    subject: str | None = None,
    audience: str | None = None,
    now: int | None = None,
) -> str:
    """Build and sign a token for ``username``.

    ``exp`` and ``nbf`` are only added when their delay is configured and
    non-negative. ``iss``, ``sub`` and ``aud`` are only added when
    configured. ``iat`` and ``user`` are always present.

    Args:
        username: Identity stored in the ``user`` claim.
        algorithm: Configured algorithm name.
        secret: Signature secret.
        exp_delay: Seconds until expiry.
        nbf_delay: Seconds until the token becomes usable.
        issuer: Value for the ``iss`` claim.
        subject: Value for the ``sub`` claim.
        audience: Value for the ``aud`` claim.
        now: Issuance time in epoch seconds. Defaults to the current time.

    Returns:
        Compact serialized token.

    Raises:
        ConfigurationError: If the algorithm or secret is invalid.
    """
    alg = check_key_length(secret, algorithm)
    issued_at = _now() if now is None else now

    claims: dict[str, Any] = {}
    if exp_delay is not None and exp_delay >= 0:
        claims["exp"] = issued_at + exp_delay
    if nbf_delay is not None and nbf_delay >= 0:
        claims["nbf"] = issued_at + nbf_delay
    claims["iat"] = issued_at

    if issuer:
        claims["iss"] = issuer
    if subject:
        claims["sub"] = subject
    if audience:
        claims["aud"] = audience
    claims["user"] = username

    return jwt.encode(
        claims,
        _secret_bytes(secret),
        algorithm=SIGNING_PRIMITIVES[alg],
    )


def _int_claim(claims: Mapping[str, Any], name: str) -> int:
    """Read a time claim stored as a JSON integer or a decimal string."""
    value = claims[name]
    if isinstance(value, bool):
        raise MalformedTokenError
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and _INTEGER_RE.match(value.strip()):
        return int(value.strip())
    logger.warning("Time claim is not an integer", claim=name)
    raise MalformedTokenError


def verify_token(
    token: str,
    algorithm: str,
    secret: Secret,
    *,
    issuer: str | None = None,
    audience: str | None = None,
    subject: str | None = None,
    leeway: int = 0,
    now: int | None = None,
) -> dict[str, Any]:
    """Verify a token's signature and claims.

    Args:
        token: Compact serialized token (without the scheme prefix).
        algorithm: Configured algorithm name.
        secret: Signature secret.
        issuer: Expected ``iss``. Only checked when the token has one.
        audience: Expected ``aud``. Only checked when the token has one.
        subject: Expected ``sub``. Only checked when the token has one.
        leeway: Clock skew tolerance in seconds for ``exp`` and ``nbf``.
        now: Verification time in epoch seconds. Defaults to the current time.

    Returns:
        The full claim set.

    Raises:
        ConfigurationError: If the algorithm or secret is invalid.
        MalformedTokenError: If parsing or signature verification fails,
            or the token declares the "none" algorithm.
        IssuerMismatchError: If ``iss`` differs from ``issuer``.
        AudienceMismatchError: If ``aud`` differs from ``audience``.
        SubjectMismatchError: If ``sub`` differs from ``subject``.
        MissingExpiryError: If the token has no ``exp``.
        TokenExpiredError: If ``exp + leeway`` is in the past.
        TokenNotYetValidError: If ``nbf - leeway`` is in the future.
    """
    alg = check_key_length(secret, algorithm)

    try:
        header = jwt.get_unverified_header(token)
    except JWTError as e:
        raise MalformedTokenError from e

    # Unsigned tokens are refused here, whatever the decoder would do.
    if str(header.get("alg", "")).lower() == "none":
        logger.warning("Rejected unsigned token")
        raise MalformedTokenError

    try:
        claims: dict[str, Any] = jwt.decode(
            token,
            _secret_bytes(secret),
            algorithms=[SIGNING_PRIMITIVES[alg]],
            options=_DECODE_OPTIONS,
        )
    except JWTError as e:
        raise MalformedTokenError from e

    if issuer and "iss" in claims and claims["iss"] != issuer:
        raise IssuerMismatchError
    if audience and "aud" in claims and claims["aud"] != audience:
        raise AudienceMismatchError
    if subject and "sub" in claims and claims["sub"] != subject:
        raise SubjectMismatchError

    if "exp" not in claims:
        raise MissingExpiryError

    current = _now() if now is None else now
    exp = _int_claim(claims, "exp")
    if exp + leeway < current:
        raise TokenExpiredError

    if "nbf" in claims:
        nbf = _int_claim(claims, "nbf")
        if nbf - leeway > current:
            raise TokenNotYetValidError

    return claims
