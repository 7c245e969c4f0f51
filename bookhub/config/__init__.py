"""Application configuration."""

from .settings import (
    DatabaseConfig,
    SecurityConfig,
    SeedConfig,
    Settings,
    get_settings,
)

__all__ = [
    "DatabaseConfig",
    "SecurityConfig",
    "SeedConfig",
    "Settings",
    "get_settings",
]
