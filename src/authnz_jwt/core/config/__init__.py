"""Configuration module with YAML and environment variable support."""

from .settings import AuthSettings, Settings, get_settings


__all__ = [
    "AuthSettings",
    "Settings",
    "get_settings",
]
