"""Ambient infrastructure: settings, logging and monitoring."""

from .config import Settings, settings

__all__ = [
    "Settings",
    "settings",
]
