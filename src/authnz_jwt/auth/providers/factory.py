"""Credential checker registry.

Checkers are registered by name when the application starts. Directory
scopes list provider names; those names are resolved into ProviderChain
instances once, at configuration load. Nothing is looked up by name while
serving requests.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from authnz_jwt.auth.exceptions import ConfigurationError, UnknownProviderError
from authnz_jwt.auth.providers.chain import ProviderChain
from authnz_jwt.auth.providers.file import FileCredentialChecker
from authnz_jwt.auth.providers.protocol import CredentialChecker
from authnz_jwt.auth.providers.static import StaticCredentialChecker
from authnz_jwt.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from authnz_jwt.core.config import Settings

    CheckerFactory = Callable[[], CredentialChecker]


logger = get_logger(__name__)


class CheckerRegistry:
    """Maps provider names to checker factories."""

    def __init__(self) -> None:
        self._factories: dict[str, CheckerFactory] = {}

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._factories)

    def register(self, name: str, factory: CheckerFactory) -> None:
        """Register a checker factory under ``name``.

        Raises:
            ConfigurationError: If the name is already taken.
        """
        if name in self._factories:
            msg = f"Credential provider already registered: {name}"
            raise ConfigurationError(msg)
        self._factories[name] = factory

    def create(self, name: str) -> CredentialChecker:
        """Instantiate the checker registered under ``name``.

        Raises:
            UnknownProviderError: If nothing is registered under ``name``.
            ConfigurationError: If the factory returns something that is not
                a CredentialChecker.
        """
        try:
            factory = self._factories[name]
        except KeyError:
            msg = f"Unknown credential provider: {name}"
            raise UnknownProviderError(msg) from None

        checker = factory()
        if not isinstance(checker, CredentialChecker):
            msg = f"The '{name}' provider does not support password checking"
            raise ConfigurationError(msg)
        return checker

    def build_chain(self, names: Iterable[str]) -> ProviderChain:
        """Build an ordered chain from provider names."""
        return ProviderChain(self.create(name) for name in names)


def create_default_registry(settings: Settings) -> CheckerRegistry:
    """Create a registry with the bundled checkers.

    - ``static``: users from ``auth.users``
    - ``file``: users from the file at ``auth.user_file``
    """
    registry = CheckerRegistry()
    registry.register("static", lambda: StaticCredentialChecker(settings.auth.users))

    def _file_checker() -> CredentialChecker:
        if not settings.auth.user_file:
            msg = "auth.user_file is required for the 'file' credential provider"
            raise ConfigurationError(msg)
        return FileCredentialChecker(settings.auth.user_file)

    registry.register("file", _file_checker)

    logger.debug("Credential providers registered", providers=list(registry.names))
    return registry
