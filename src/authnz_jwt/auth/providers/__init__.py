"""Credential providers package.

Provides pluggable password-checking backends and the chain that tries
them in order.

Available checkers:
- StaticCredentialChecker: users configured in memory
- FileCredentialChecker: users read from an htpasswd-style file

Usage:
    from authnz_jwt.auth.providers import ProviderChain, StaticCredentialChecker

    chain = ProviderChain([StaticCredentialChecker(users)])
    decision = chain.authenticate("alice", "s3cret")
"""

from authnz_jwt.auth.providers.chain import ProviderChain
from authnz_jwt.auth.providers.factory import CheckerRegistry, create_default_registry
from authnz_jwt.auth.providers.file import FileCredentialChecker
from authnz_jwt.auth.providers.models import Decision
from authnz_jwt.auth.providers.protocol import CredentialChecker
from authnz_jwt.auth.providers.static import StaticCredentialChecker


__all__ = [
    "CheckerRegistry",
    "CredentialChecker",
    "Decision",
    "FileCredentialChecker",
    "ProviderChain",
    "StaticCredentialChecker",
    "create_default_registry",
]
