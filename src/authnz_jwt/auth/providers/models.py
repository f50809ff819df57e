"""Credential provider models."""

from __future__ import annotations

from enum import StrEnum


class Decision(StrEnum):
    """Outcome of checking a username/password pair.

    - GRANTED: the password matches.
    - DENIED: the user exists but the password does not match.
    - USER_NOT_FOUND: this provider does not know the user; the next
      provider in the chain is consulted.
    - ERROR: the provider could not answer.
    """

    GRANTED = "granted"
    DENIED = "denied"
    USER_NOT_FOUND = "user_not_found"
    ERROR = "error"
