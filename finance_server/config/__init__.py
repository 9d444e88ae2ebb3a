"""Configuration package."""

from finance_server.config.settings import (
    AppSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "get_settings",
]
