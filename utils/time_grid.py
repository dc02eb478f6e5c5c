"""
Time grid primitives for the court schedule.

Courts are booked on a half-hour lattice within a single day. All values are
naive local wall-clock times: dates are ``datetime.date`` and times of day are
``datetime.time`` at minute granularity.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Any, List

from utils.exceptions import InvalidIntervalError

MINUTES_PER_DAY = 24 * 60

# Mon-Fri prime time window; weekends are prime all day
PRIME_START = time(17, 0)
PRIME_END = time(21, 0)

_HH_MM = re.compile(r"^(\d{1,2}):(\d{2})(?::(\d{2}))?$")
_AM_PM = re.compile(r"^(\d{1,2}):(\d{2})\s*([AaPp][Mm])$")


def to_minutes(value: time) -> int:
    """Minutes since midnight."""
    return value.hour * 60 + value.minute


def time_from_minutes(total_minutes: int) -> time:
    """
    Build a time of day from a minute count.

    Overflowing minute values roll into hours (``9 * 60 + 90`` is 10:30).

    Raises:
        ValueError: If the count falls outside a single day
    """
    if total_minutes < 0 or total_minutes >= MINUTES_PER_DAY:
        raise ValueError(f"Minutes out of range for a single day: {total_minutes}")
    hours, minutes = divmod(int(total_minutes), 60)
    return time(hours, minutes)


def _from_day_fraction(fraction: float) -> time:
    # Spreadsheets store times as a fraction of 24 hours (0.395833 == 09:30)
    return time_from_minutes(round(fraction * MINUTES_PER_DAY) % MINUTES_PER_DAY)


def normalize_time(value: Any) -> time:
    """
    Normalize any supported time value to a minute-granular ``time``.

    Accepts ``time`` and ``datetime`` objects, day fractions (``0 <= x < 1``),
    minutes since midnight, ``"H:MM"`` / ``"HH:MM:SS"`` strings, decimal
    strings and ``"9:30 AM"`` style strings.

    Raises:
        ValueError: If the value cannot be interpreted as a time of day
    """
    if isinstance(value, datetime):
        return time(value.hour, value.minute)

    if isinstance(value, time):
        return time(value.hour, value.minute)

    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid time value: {value!r}")

    if isinstance(value, (int, float)):
        if isinstance(value, float) and 0 <= value < 1:
            return _from_day_fraction(value)
        if 0 <= value < MINUTES_PER_DAY:
            return time_from_minutes(round(value))
        raise ValueError(f"Invalid time value: {value!r}")

    if isinstance(value, str):
        trimmed = value.strip()

        match = _HH_MM.match(trimmed)
        if match:
            hours, minutes = int(match.group(1)), int(match.group(2))
            if 0 <= hours < 24 and 0 <= minutes < 60:
                return time(hours, minutes)

        match = _AM_PM.match(trimmed)
        if match:
            hours, minutes = int(match.group(1)), int(match.group(2))
            period = match.group(3).upper()
            if period == "PM" and hours != 12:
                hours += 12
            if period == "AM" and hours == 12:
                hours = 0
            if 0 <= hours < 24 and 0 <= minutes < 60:
                return time(hours, minutes)

        try:
            decimal = float(trimmed)
        except ValueError:
            decimal = None
        if decimal is not None and 0 <= decimal < 1:
            return _from_day_fraction(decimal)

    raise ValueError(f"Invalid time value: {value!r}")


def format_time_display(value: time) -> str:
    """Format a time as ``9:30 AM``."""
    period = "PM" if value.hour >= 12 else "AM"
    hour = value.hour % 12 or 12
    return f"{hour}:{value.minute:02d} {period}"


def slot_lattice(start: time, end: time, step_minutes: int = 30) -> List[time]:
    """
    Slot boundaries from ``start`` (inclusive) up to ``end`` (exclusive).

    Raises:
        ValueError: If ``step_minutes`` is not positive
    """
    if step_minutes <= 0:
        raise ValueError(f"step_minutes must be positive, got {step_minutes}")

    end_minutes = to_minutes(end)
    return [
        time_from_minutes(minutes)
        for minutes in range(to_minutes(start), end_minutes, step_minutes)
    ]


def end_time_options(
    start: time, day_start: time, day_end: time, step_minutes: int = 30
) -> List[time]:
    """
    Valid end times for a booking starting at ``start``.

    Returns the lattice slots after ``start`` plus the end of the day, or an
    empty list when ``start`` is not on the lattice.
    """
    slots = slot_lattice(day_start, day_end, step_minutes)
    if start not in slots:
        return []

    options = slots[slots.index(start) + 1:]
    if day_end not in options:
        options.append(day_end)
    return options


def week_of(day: date) -> List[date]:
    """The seven dates of the Monday-first week containing ``day``."""
    monday = day - timedelta(days=day.weekday())
    return [monday + timedelta(days=offset) for offset in range(7)]


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def is_prime_time(day: date, at: time) -> bool:
    """Prime time is all of Saturday/Sunday and 17:00-21:00 on weekdays."""
    if is_weekend(day):
        return True
    return PRIME_START <= at < PRIME_END


def is_past(day: date, at: time, now: datetime) -> bool:
    """
    Whether a slot today has already started.

    Only slots on ``now``'s own date can be past; every other date returns
    False, including earlier dates.
    """
    if day != now.date():
        return False
    return at < now.time()


def validate_interval(start: time, end: time) -> None:
    """
    Raises:
        InvalidIntervalError: If ``end`` is not after ``start``
    """
    if end <= start:
        raise InvalidIntervalError(
            f"End time {end:%H:%M} must be after start time {start:%H:%M}"
        )


def duration_hours(start: time, end: time) -> float:
    """
    Length of ``[start, end)`` in hours.

    Raises:
        InvalidIntervalError: If ``end`` is not after ``start``
    """
    validate_interval(start, end)
    return (to_minutes(end) - to_minutes(start)) / 60


def hours_until(day: date, at: time, now: datetime) -> float:
    """Signed hours from ``now`` to ``day`` at ``at``; negative once passed."""
    target = datetime.combine(day, at)
    return (target - now).total_seconds() / 3600
