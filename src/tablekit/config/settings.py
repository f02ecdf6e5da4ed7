"""
Configuration management for tablekit.

Settings come from environment variables with the ``TABLEKIT_`` prefix, or
from a ``.env`` file in the working directory. For example,
``TABLEKIT_DATABASE_URL`` overrides ``database_url``.
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE_OVERRIDE = os.getenv("TABLEKIT_ENV_FILE")
SETTINGS_ENV_FILE = Path(ENV_FILE_OVERRIDE).expanduser() if ENV_FILE_OVERRIDE else Path(".env")


def normalize_database_url(url: str) -> str:
    """
    Rewrite the ``postgres://`` scheme, which SQLAlchemy no longer loads.

    Examples:
        >>> normalize_database_url("postgres://u@host/app")
        'postgresql://u@host/app'
    """
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql://", 1)
    return url


class Settings(BaseSettings):
    """
    Store and logging settings.

    Attributes:
        database_url: SQLAlchemy URL of the store
        dialect: SQL dialect override; inferred from ``database_url`` when unset
        echo: Have SQLAlchemy echo every statement
        log_level: Logging level name
        log_to_file: Also write logs to a daily rotating file
        log_file_dir: Directory for log files
    """

    model_config = SettingsConfigDict(
        env_prefix="TABLEKIT_",
        env_file=SETTINGS_ENV_FILE,
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(
        default="sqlite:///tablekit.db", description="SQLAlchemy database URL"
    )
    dialect: Optional[str] = Field(
        default=None, description="SQL dialect name (postgresql, sqlite)"
    )
    echo: bool = Field(default=False, description="Echo SQL through SQLAlchemy")

    log_level: str = Field(default="INFO", description="Logging level")
    log_to_file: bool = Field(default=False, description="Enable file logging")
    log_file_dir: str = Field(default="logs", description="Directory for log files")

    @field_validator("database_url")
    @classmethod
    def _normalize_postgres_scheme(cls, value: str) -> str:
        return normalize_database_url(value)

    @field_validator("log_level")
    @classmethod
    def _upper_log_level(cls, value: str) -> str:
        return value.upper()


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Tests that change ``TABLEKIT_*`` variables call ``get_settings.cache_clear()``.
    """
    return Settings()
