"""Input validation package."""

from finance_server.validation.timestamps import (
    format_timestamp,
    normalize_timestamp,
    parse_timestamp,
    utc_now,
)
from finance_server.validation.validator import InputValidator

__all__ = [
    "InputValidator",
    "format_timestamp",
    "normalize_timestamp",
    "parse_timestamp",
    "utc_now",
]
