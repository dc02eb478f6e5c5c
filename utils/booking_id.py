"""
Booking identifiers.

Format: ``DDCC-HHMM``

- DD: day of month (01-31)
- CC: court number (01-17, 17 is the Stadium)
- HH: hour (24-hour)
- MM: minutes

Example: ``1605-0900`` is the 16th, Court 5, 9:00 AM. The month and year are
not part of the identifier, so the same day/court/start in different months
yields the same id.
"""

import random
import re
from datetime import date, time
from typing import Iterable, List, NamedTuple, Optional

from utils.constants import BOOKING_ID_LENGTH, STADIUM_COURT_NUMBER

_VALID_ID = re.compile(
    r"^(0[1-9]|[12][0-9]|3[01])(0[1-9]|1[0-7])-(0[89]|1[0-9]|2[01])(00|30)$"
)


class BookingIdParts(NamedTuple):
    day: int
    court: int
    time_start: time

    @property
    def court_name(self) -> str:
        if self.court == STADIUM_COURT_NUMBER:
            return "Stadium"
        return f"Court {self.court}"


def synthesize(day: date, court: int, time_start: time) -> str:
    """
    Build the identifier for a booking.

    Raises:
        ValueError: If the court number does not fit in two digits
    """
    if not 1 <= court <= 99:
        raise ValueError(f"Court number must be between 1 and 99, got {court}")
    return f"{day.day:02d}{court:02d}-{time_start.hour:02d}{time_start.minute:02d}"


def synthesize_many(day: date, courts: Iterable[int], time_start: time) -> List[str]:
    """Identifiers for a multi-court booking, one per court."""
    return [synthesize(day, court, time_start) for court in courts]


def parse_booking_id(booking_id: Optional[str]) -> Optional[BookingIdParts]:
    """Split an identifier into its parts, or None if it is malformed."""
    if not booking_id or len(booking_id) != BOOKING_ID_LENGTH:
        return None

    day_court, sep, hhmm = booking_id.partition("-")
    if sep != "-" or len(day_court) != 4 or len(hhmm) != 4:
        return None
    if not (day_court.isdigit() and hhmm.isdigit()):
        return None

    hour, minute = int(hhmm[:2]), int(hhmm[2:])
    if hour > 23 or minute > 59:
        return None

    return BookingIdParts(
        day=int(day_court[:2]),
        court=int(day_court[2:]),
        time_start=time(hour, minute),
    )


def is_valid_booking_id(booking_id: Optional[str]) -> bool:
    """Check an identifier against the facility's lattice (08:00-21:30)."""
    if not booking_id or not isinstance(booking_id, str):
        return False
    return bool(_VALID_ID.match(booking_id))


def same_time_slot(first_id: str, second_id: str) -> bool:
    """Whether two identifiers share day-of-month and start time."""
    first = parse_booking_id(first_id)
    second = parse_booking_id(second_id)
    if not first or not second:
        return False
    return first.day == second.day and first.time_start == second.time_start


def generate_group_id(day: date) -> str:
    """Group identifier for a multi-court booking: ``GRP-MMDD-XXX``."""
    suffix = random.randint(0, 999)
    return f"GRP-{day.month:02d}{day.day:02d}-{suffix:03d}"
