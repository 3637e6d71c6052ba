"""Configuration package."""

from apexlens.config.settings import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
