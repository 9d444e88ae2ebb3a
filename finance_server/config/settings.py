"""
Configuration Management for the Finance Server

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
The store location (DB_PATH) is the setting most deployments touch;
the rest control logging and the on-disk formatting.
"""

import logging
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_DB_FILENAME = "mcp-finance-db.json"


class AppSettings(BaseSettings):
    """
    Main application settings.
    
    Loads configuration from environment variables and .env file.
    """
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )
    
    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    
    # Storage
    db_path: Path = Field(
        default_factory=lambda: Path.cwd() / DEFAULT_DB_FILENAME,
        validation_alias=AliasChoices("DB_PATH", "db_path"),
        description="Path to the JSON document holding users, categories and entries"
    )
    json_indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentation of the pretty-printed store"
    )
    
    # Logging
    log_level: str = Field(
        default="INFO",
        description="Standard library log level name"
    )
    
    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept level names the logging module knows."""
        level = v.strip().upper()
        if level not in logging.getLevelNamesMapping():
            raise ValueError(f"Unknown log level: {v}")
        return level
    
    @property
    def resolved_db_path(self) -> Path:
        """Absolute store path (relative paths resolve against the working directory)."""
        return self.db_path.expanduser().resolve()


@lru_cache()
def get_settings() -> AppSettings:
    """
    Get application settings (cached).
    
    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return AppSettings()
