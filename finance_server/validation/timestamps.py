"""
Timestamp parsing and normalization.

All timestamps are stored and compared in one canonical form:
UTC, millisecond precision, 'Z' suffix (e.g. 2024-05-01T10:00:00.000Z).
Two spellings of the same instant therefore normalize to the same string.
Inputs without an offset are read as UTC.
"""

from datetime import datetime, timezone

from finance_server.errors import DateParseError


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO-8601 date or date/time into an aware UTC datetime."""
    if not isinstance(value, str) or not value.strip():
        raise DateParseError(str(value))
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        raise DateParseError(value) from None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    try:
        return parsed.astimezone(timezone.utc)
    except OverflowError:
        # Offset pushes the instant outside years 1..9999
        raise DateParseError(value) from None


def format_timestamp(moment: datetime) -> str:
    """Render an aware datetime in the canonical form."""
    moment = moment.astimezone(timezone.utc)
    # strftime("%Y") does not zero-pad years below 1000
    return (
        f"{moment.year:04d}-{moment:%m-%dT%H:%M:%S}"
        f".{moment.microsecond // 1000:03d}Z"
    )


def normalize_timestamp(value: str) -> str:
    return format_timestamp(parse_timestamp(value))


def utc_now() -> str:
    """Current time in the canonical form."""
    return format_timestamp(datetime.now(timezone.utc))
