# ABOUTME: Normalizes the loose date strings found in ebook metadata.
# ABOUTME: Produces 'YYYY-MM-DD HH:MM:SS' timestamps as stored in the catalog.

import re
from datetime import UTC, datetime

DEFAULT_TIMESTAMP = "2000-01-01 00:00:00"

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
_YEAR_RE = re.compile(r"^\d{4}$")
_YEAR_MONTH_RE = re.compile(r"^\d{4}-\d{2}$")


def _parse(value: str) -> datetime:
    if _YEAR_RE.match(value):
        return datetime(int(value), 1, 1)
    if _YEAR_MONTH_RE.match(value):
        year, month = value.split("-")
        return datetime(int(year), int(month), 1)
    # fromisoformat accepts a trailing 'Z' from Python 3.11 on
    return datetime.fromisoformat(value)


def to_timestamp(value: str | None, default: str | None = None) -> str:
    """Normalize a metadata date string to the catalog timestamp format.

    Args:
        value: An ISO-8601 date or datetime, a bare year, or year-month.
        default: Used when value is empty. When both are empty the current
            UTC time is used.

    Returns:
        The timestamp as 'YYYY-MM-DD HH:MM:SS'. Offset-aware values are
        converted to UTC.

    Raises:
        ValueError: If the value cannot be parsed as a date.
    """
    text = (value or "").strip() or (default or "").strip()
    if not text:
        return datetime.now(UTC).strftime(_TIMESTAMP_FORMAT)

    try:
        parsed = _parse(text)
    except ValueError as exc:
        raise ValueError(f"Invalid date: {text!r}") from exc

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(UTC).replace(tzinfo=None)
    return parsed.strftime(_TIMESTAMP_FORMAT)
