"""
Boundary normalization for values read from the spreadsheet data source.

The sheet hands back everything as text: court numbers with stray whitespace
or leading zeros, check-in flags as "TRUE"/"true", amounts as "12.00" or "".
These helpers turn them into proper Python values before they reach the
scheduling core.
"""

import re
from typing import Any, Optional

from utils.constants import MAX_NOTES_LENGTH, TRUTHY_VALUES


def parse_court_id(value: Any) -> int:
    """
    Parse a court number.

    Args:
        value: Court number as int or text (" 05", "5", "17")

    Returns:
        Court number as int

    Raises:
        ValueError: If the value is not a positive integer
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid court number: {value!r}")

    if isinstance(value, int):
        court = value
    elif isinstance(value, float) and value.is_integer():
        court = int(value)
    elif isinstance(value, str) and value.strip().isdigit():
        court = int(value.strip())
    else:
        raise ValueError(f"Invalid court number: {value!r}")

    if court <= 0:
        raise ValueError(f"Court number must be positive, got {court}")
    return court


def parse_bool(value: Any) -> bool:
    """
    Parse a sheet flag.

    Args:
        value: bool, or text such as "TRUE", "true", "1", "yes"

    Returns:
        True for recognised truthy values, False otherwise
    """
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUTHY_VALUES


def parse_amount(value: Any) -> Optional[float]:
    """
    Parse a currency amount.

    Args:
        value: Number or text ("12.00", "$12", "")

    Returns:
        Amount as float, or None when blank or unparseable
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value)

    cleaned = re.sub(r"[\s$,]", "", str(value))
    if not cleaned:
        return None
    try:
        return float(cleaned)
    except ValueError:
        return None


def validate_staff_id(staff_id: Optional[str]) -> bool:
    """
    Validate a staff identifier (initials or short code).

    Returns:
        True if valid format, False otherwise
    """
    if not staff_id or not isinstance(staff_id, str):
        return False
    return bool(re.match(r"^[A-Za-z0-9_-]{1,32}$", staff_id.strip()))


def blank_to_none(value: Any) -> Any:
    """Map empty sheet cells to None."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def sanitize_text(text: Optional[str], max_length: Optional[int] = MAX_NOTES_LENGTH) -> str:
    """
    Sanitize free text such as notes and customer names.

    Args:
        text: Input text
        max_length: Optional maximum length

    Returns:
        Sanitized text
    """
    if not text:
        return ""

    # Remove control characters except newlines and tabs
    sanitized = re.sub(r"[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F]", "", str(text))
    sanitized = sanitized.strip()

    if max_length and len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized
