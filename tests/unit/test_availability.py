"""
Unit tests for availability queries.
"""

from datetime import time

import pytest

from scheduling.availability import (
    booking_at,
    find_conflicts,
    intervals_overlap,
    is_available,
)
from tests.factories import MONDAY, TUESDAY, make_booking
from utils.exceptions import InvalidIntervalError


@pytest.fixture
def bookings():
    return [
        make_booking("1605-0900", court=5, start=time(9, 0), end=time(10, 0)),
        make_booking("1605-1200", court=5, start=time(12, 0), end=time(13, 30)),
        make_booking("1606-0900", court=6, start=time(9, 0), end=time(10, 0)),
        make_booking(
            "1605-1500",
            court=5,
            start=time(15, 0),
            end=time(16, 0),
            status="cancelled",
        ),
    ]


def test_intervals_overlap_is_half_open():
    assert intervals_overlap(time(9, 0), time(10, 0), time(9, 30), time(10, 30))
    assert not intervals_overlap(time(9, 0), time(10, 0), time(10, 0), time(11, 0))
    assert not intervals_overlap(time(10, 0), time(11, 0), time(9, 0), time(10, 0))


@pytest.mark.parametrize(
    "start,end,expected",
    [
        (time(9, 30), time(10, 30), False),
        (time(8, 30), time(9, 30), False),
        (time(8, 30), time(11, 0), False),
        (time(10, 0), time(11, 0), True),
        (time(8, 30), time(9, 0), True),
        (time(13, 30), time(15, 0), True),
    ],
)
def test_is_available(bookings, start, end, expected):
    assert is_available(bookings, MONDAY, 5, start, end) is expected


def test_cancelled_bookings_do_not_block(bookings):
    assert is_available(bookings, MONDAY, 5, time(15, 0), time(16, 0))


def test_other_courts_and_dates_do_not_block(bookings):
    assert is_available(bookings, MONDAY, 7, time(9, 0), time(10, 0))
    assert is_available(bookings, TUESDAY, 5, time(9, 0), time(10, 0))


def test_find_conflicts_lists_every_overlap(bookings):
    conflicts = find_conflicts(bookings, MONDAY, 5, time(9, 30), time(12, 30))

    assert [b.id for b in conflicts] == ["1605-0900", "1605-1200"]


def test_find_conflicts_excludes_booking_being_edited(bookings):
    assert find_conflicts(
        bookings, MONDAY, 5, time(9, 30), time(10, 30), exclude_id="1605-0900"
    ) == []


def test_is_available_rejects_inverted_interval(bookings):
    with pytest.raises(InvalidIntervalError):
        is_available(bookings, MONDAY, 5, time(10, 0), time(10, 0))


def test_booking_at(bookings):
    assert booking_at(bookings, MONDAY, 5, time(9, 30)).id == "1605-0900"
    assert booking_at(bookings, MONDAY, 5, time(10, 0)) is None
    assert booking_at(bookings, MONDAY, 5, time(15, 30)) is None
