"""Authentication and authorization module.

This module provides:
- Layered directory-over-server configuration resolution
- Compact JWS token issuing and verification
- Pluggable credential checkers tried in order
- The engine running the login and resource-access flows
- FastAPI security dependencies
"""

from authnz_jwt.auth.codec import SignatureAlgorithm, issue_token, verify_token
from authnz_jwt.auth.dependencies import CurrentUser, get_auth_engine, require_user
from authnz_jwt.auth.engine import (
    AccessDecision,
    AuthEngine,
    Challenge,
    LoginDecision,
    Outcome,
    build_engine,
)
from authnz_jwt.auth.scope import DirectoryScope, EffectiveConfig, ScopeConfig


__all__ = [
    # Configuration
    "DirectoryScope",
    "EffectiveConfig",
    "ScopeConfig",
    # Tokens
    "SignatureAlgorithm",
    "issue_token",
    "verify_token",
    # Engine
    "AccessDecision",
    "AuthEngine",
    "Challenge",
    "LoginDecision",
    "Outcome",
    "build_engine",
    # Dependencies
    "CurrentUser",
    "get_auth_engine",
    "require_user",
]
