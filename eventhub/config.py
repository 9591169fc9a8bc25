"""Centralized configuration management using Pydantic Settings.

This module provides typed configuration for the data-access layer,
loaded from environment variables.

Usage:
    from eventhub.config import get_settings
    settings = get_settings()
    uri = settings.mongo.uri

``MONGODB_URI`` has no default. Building the settings without it raises a
``pydantic.ValidationError``, which callers treat as a fatal startup error.
"""

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class MongoSettings(BaseSettings):
    """MongoDB connection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="MONGODB_",
        extra="ignore",
        populate_by_name=True,
    )

    uri: str = Field(
        min_length=1,
        validation_alias="MONGODB_URI",
        description="MongoDB connection string",
    )
    database: str = Field(
        default="eventhub",
        validation_alias="MONGODB_DB",
        description="Database name used when the URI names none",
    )
    server_selection_timeout_ms: int = Field(
        default=5000, description="Server selection timeout in milliseconds"
    )
    app_name: str = Field(default="eventhub", description="Client app name reported to the server")

    @field_validator("uri")
    @classmethod
    def strip_uri(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("MONGODB_URI must not be blank")
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(extra="ignore", populate_by_name=True)

    level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    debug: bool = Field(default=False, validation_alias="DB_DEBUG")

    @field_validator("debug", mode="before")
    @classmethod
    def parse_debug(cls, v):
        if isinstance(v, str):
            return v.lower() in ("1", "true", "yes")
        return bool(v)

    @field_validator("level")
    @classmethod
    def upper_level(cls, v: str) -> str:
        return v.upper()


class Settings:
    """Main settings combining all configuration sections.

    Not a BaseSettings subclass, so each section keeps its own env prefix.
    """

    def __init__(self) -> None:
        self.mongo = MongoSettings()
        self.logging = LoggingSettings()


@lru_cache
def get_settings() -> Settings:
    """Get cached Settings instance (singleton pattern)."""
    return Settings()


def clear_settings_cache() -> None:
    """Clear cached settings (useful for testing)."""
    get_settings.cache_clear()
