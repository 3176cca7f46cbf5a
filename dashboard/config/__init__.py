"""Configuration package."""

from dashboard.config.settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
