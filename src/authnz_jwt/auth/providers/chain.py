"""Ordered fallback across credential checkers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from authnz_jwt.auth.exceptions import ProviderError
from authnz_jwt.auth.providers.models import Decision
from authnz_jwt.observability.logging import bind_context, get_logger, unbind_context


if TYPE_CHECKING:
    from collections.abc import Iterable

    from authnz_jwt.auth.providers.protocol import CredentialChecker


logger = get_logger(__name__)


class ProviderChain:
    """Immutable, ordered list of credential checkers.

    ``authenticate`` asks each checker in turn and stops at the first answer
    other than USER_NOT_FOUND. A checker raising ProviderError ends the chain
    with ERROR; later checkers are not consulted.
    """

    def __init__(self, checkers: Iterable[CredentialChecker] = ()) -> None:
        self._checkers: tuple[CredentialChecker, ...] = tuple(checkers)

    @property
    def checkers(self) -> tuple[CredentialChecker, ...]:
        return self._checkers

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(checker.provider_name for checker in self._checkers)

    def __len__(self) -> int:
        return len(self._checkers)

    def __repr__(self) -> str:
        return f"ProviderChain({', '.join(self.names)})"

    def authenticate(self, username: str, password: str) -> Decision:
        """Check credentials against each provider in order.

        Args:
            username: Username as sent by the client.
            password: Password as sent by the client.

        Returns:
            The first decisive Decision, or USER_NOT_FOUND when the chain is
            empty or no provider knows the user.
        """
        if not self._checkers:
            logger.error("No credential provider configured")
            return Decision.USER_NOT_FOUND

        for checker in self._checkers:
            # Lets checkers and log lines see which provider is answering
            bind_context(auth_provider=checker.provider_name)
            try:
                decision = Decision(checker.check_credentials(username, password))
            except ProviderError as e:
                logger.error("Credential provider failed", error=str(e))
                return Decision.ERROR
            finally:
                unbind_context("auth_provider")

            if decision != Decision.USER_NOT_FOUND:
                logger.debug(
                    "Credential provider decided",
                    provider=checker.provider_name,
                    decision=decision.value,
                )
                return decision

        return Decision.USER_NOT_FOUND
