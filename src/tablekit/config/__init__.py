"""Configuration management for tablekit.

Usage:
    >>> from tablekit.config import get_settings
    >>> settings = get_settings()
    >>> settings.database_url
"""

from tablekit.config.settings import Settings, get_settings, normalize_database_url

__all__ = ["Settings", "get_settings", "normalize_database_url"]
