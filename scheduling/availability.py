"""
Availability queries over a snapshot of bookings.

Bookings occupy half-open intervals ``[time_start, time_end)`` on one court
and one date. Cancelled bookings never block a court. A booking ending
exactly when another starts is not an overlap. Closures block a court the
same way for the interval they cover.
"""

from datetime import date, time
from typing import Iterable, List, Optional

from models.booking import Booking, BookingStatus
from models.court import Closure
from utils.time_grid import validate_interval


def intervals_overlap(start: time, end: time, other_start: time, other_end: time) -> bool:
    """Half-open interval overlap."""
    return not (end <= other_start or start >= other_end)


def bookings_for_court_day(
    bookings: Iterable[Booking], day: date, court: int
) -> List[Booking]:
    """Non-cancelled bookings on one court for one date."""
    return [
        booking
        for booking in bookings
        if booking.date == day
        and booking.court == court
        and booking.status != BookingStatus.CANCELLED
    ]


def find_conflicts(
    bookings: Iterable[Booking],
    day: date,
    court: int,
    start: time,
    end: time,
    exclude_id: Optional[str] = None,
) -> List[Booking]:
    """
    Bookings that block ``[start, end)`` on a court.

    Args:
        bookings: Snapshot of bookings
        day: Date to check
        court: Court number
        start: Requested start time
        end: Requested end time
        exclude_id: Booking ID to ignore (the booking being edited)

    Returns:
        Conflicting bookings, in snapshot order

    Raises:
        InvalidIntervalError: If ``end`` is not after ``start``
    """
    validate_interval(start, end)

    return [
        booking
        for booking in bookings_for_court_day(bookings, day, court)
        if booking.id != exclude_id
        and intervals_overlap(start, end, booking.time_start, booking.time_end)
    ]


def is_available(
    bookings: Iterable[Booking],
    day: date,
    court: int,
    start: time,
    end: time,
    exclude_id: Optional[str] = None,
) -> bool:
    """
    Check whether a court is free for ``[start, end)``.

    Raises:
        InvalidIntervalError: If ``end`` is not after ``start``
    """
    return not find_conflicts(bookings, day, court, start, end, exclude_id)


def booking_at(
    bookings: Iterable[Booking], day: date, court: int, at: time
) -> Optional[Booking]:
    """The non-cancelled booking occupying a court at a point in time."""
    for booking in bookings_for_court_day(bookings, day, court):
        if booking.time_start <= at < booking.time_end:
            return booking
    return None


def find_closures(
    closures: Iterable[Closure], day: date, court: int, start: time, end: time
) -> List[Closure]:
    """
    Active closures overlapping ``[start, end)`` on a court.

    A closure for "all" courts applies to every court.

    Raises:
        InvalidIntervalError: If ``end`` is not after ``start``
    """
    validate_interval(start, end)

    return [
        closure
        for closure in closures
        if closure.applies_to(day, court)
        and intervals_overlap(start, end, closure.time_start, closure.time_end)
    ]


def is_closed(
    closures: Iterable[Closure], day: date, court: int, start: time, end: time
) -> bool:
    """Check whether any part of ``[start, end)`` falls in a closure."""
    return bool(find_closures(closures, day, court, start, end))


def closure_at(
    closures: Iterable[Closure], day: date, court: int, at: time
) -> Optional[Closure]:
    """The active closure covering a court at a point in time."""
    for closure in closures:
        if closure.applies_to(day, court) and closure.time_start <= at < closure.time_end:
            return closure
    return None
