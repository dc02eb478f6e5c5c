"""
Datetime utilities for the schedule.
The facility runs on naive local wall-clock time; no timezone conversion is
applied anywhere.
"""

from datetime import date, datetime
from typing import Any, Optional


def local_now() -> datetime:
    """
    Get current local wall-clock time, truncated to the second.

    Returns:
        Naive local datetime
    """
    return datetime.now().replace(microsecond=0)


def parse_iso_datetime(iso_string: str) -> datetime:
    """
    Parse an ISO format datetime string to a naive local datetime.
    Offsets (including a 'Z' suffix) are dropped, not converted.

    Args:
        iso_string: ISO format datetime string

    Returns:
        Naive datetime object

    Raises:
        ValueError: If datetime string cannot be parsed
    """
    normalized = iso_string.strip().replace("Z", "+00:00")

    try:
        dt = datetime.fromisoformat(normalized)
    except ValueError as e:
        raise ValueError(f"Invalid datetime string: {iso_string}") from e

    return dt.replace(tzinfo=None)


def parse_date(value: Any) -> date:
    """
    Parse a calendar date from a date, datetime or 'YYYY-MM-DD' string.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError as e:
            raise ValueError(f"Invalid date string: {value}") from e
    raise ValueError(f"Invalid date value: {value!r}")


def to_iso_string(dt: Optional[datetime]) -> Optional[str]:
    """
    Convert datetime to ISO format string.

    Args:
        dt: Naive datetime, or None

    Returns:
        ISO format string, or None
    """
    if dt is None:
        return None
    return dt.replace(tzinfo=None).isoformat()
