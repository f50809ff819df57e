"""Credential checker protocol definition.

Any object with a ``provider_name`` and a ``check_credentials`` method can
be placed in a ProviderChain. Checkers are registered by name at startup and
resolved into chains once, when configuration is loaded.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable


if TYPE_CHECKING:
    from authnz_jwt.auth.providers.models import Decision


@runtime_checkable
class CredentialChecker(Protocol):
    """Protocol for password-checking backends.

    Example implementation:
        class AlwaysDenied:
            @property
            def provider_name(self) -> str:
                return "always_denied"

            def check_credentials(self, username: str, password: str) -> Decision:
                return Decision.DENIED
    """

    @property
    def provider_name(self) -> str:
        """Return the provider name for logging and configuration."""
        ...

    def check_credentials(self, username: str, password: str) -> Decision:
        """Check a username/password pair.

        Implementations return USER_NOT_FOUND for users they do not know so
        that the chain moves on to the next provider.

        Raises:
            ProviderError: If the backing store cannot be consulted.
        """
        ...
