"""File-backed credential checker.

Reads an htpasswd-style file with one ``username:hash`` entry per line,
where the hash is an Argon2 PHC string. Blank lines and lines starting
with ``#`` are ignored. The file is read on every check so edits apply
without a restart.
"""

from __future__ import annotations

from pathlib import Path

from argon2 import PasswordHasher

from authnz_jwt.auth.exceptions import ProviderError
from authnz_jwt.auth.providers.models import Decision
from authnz_jwt.auth.providers.static import verify_password
from authnz_jwt.observability.logging import get_logger


logger = get_logger(__name__)


class FileCredentialChecker:
    """Checks passwords against a ``username:hash`` file."""

    def __init__(
        self,
        path: Path | str,
        *,
        name: str = "file",
        hasher: PasswordHasher | None = None,
    ) -> None:
        self.path = Path(path)
        self._name = name
        self._hasher = hasher or PasswordHasher()

    @property
    def provider_name(self) -> str:
        return self._name

    def _lookup(self, username: str) -> str | None:
        """Return the stored hash for ``username`` or None."""
        try:
            with self.path.open(encoding="utf-8") as f:
                for raw_line in f:
                    line = raw_line.strip()
                    if not line or line.startswith("#"):
                        continue
                    user, sep, stored_hash = line.partition(":")
                    if sep and user == username:
                        return stored_hash
        except OSError as e:
            msg = f"Could not read user file {self.path}: {e.strerror}"
            raise ProviderError(msg) from e
        return None

    def check_credentials(self, username: str, password: str) -> Decision:
        stored_hash = self._lookup(username)
        if stored_hash is None:
            return Decision.USER_NOT_FOUND

        if verify_password(self._hasher, stored_hash, password):
            return Decision.GRANTED

        logger.warning("Password mismatch", user=username, path=str(self.path))
        return Decision.DENIED
