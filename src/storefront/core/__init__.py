"""Core configuration and error types."""

from .config import Settings
from .errors import (
    AppAssemblyError,
    AuthError,
    ComposeDomainsError,
    ConfigurationError,
    NotFoundError,
    StartupError,
)

__all__ = [
    "AppAssemblyError",
    "AuthError",
    "ComposeDomainsError",
    "ConfigurationError",
    "NotFoundError",
    "Settings",
    "StartupError",
]
