"""In-memory credential checker.

Users are configured as a mapping of username to Argon2 hash, typically
under ``auth.users`` in the YAML configuration.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHash, VerifyMismatchError

from authnz_jwt.auth.exceptions import ProviderError
from authnz_jwt.auth.providers.models import Decision
from authnz_jwt.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Mapping


logger = get_logger(__name__)


def verify_password(hasher: PasswordHasher, stored_hash: str, password: str) -> bool:
    """Check ``password`` against an Argon2 hash.

    Raises:
        ProviderError: If the stored hash is not a valid Argon2 hash.
    """
    try:
        return hasher.verify(stored_hash, password)
    except VerifyMismatchError:
        return False
    except InvalidHash as e:
        msg = "Stored password hash is not a valid Argon2 hash"
        raise ProviderError(msg) from e


class StaticCredentialChecker:
    """Checks passwords against a fixed username -> hash mapping."""

    def __init__(
        self,
        users: Mapping[str, str],
        *,
        name: str = "static",
        hasher: PasswordHasher | None = None,
    ) -> None:
        self._users = dict(users)
        self._name = name
        self._hasher = hasher or PasswordHasher()

    @property
    def provider_name(self) -> str:
        return self._name

    def check_credentials(self, username: str, password: str) -> Decision:
        stored_hash = self._users.get(username)
        if stored_hash is None:
            return Decision.USER_NOT_FOUND

        if verify_password(self._hasher, stored_hash, password):
            return Decision.GRANTED

        logger.warning("Password mismatch", user=username)
        return Decision.DENIED
