"""
Unit tests for booking identifiers.
"""

import re
from datetime import date, time

import pytest

from tests.factories import MONDAY
from utils.booking_id import (
    generate_group_id,
    is_valid_booking_id,
    parse_booking_id,
    same_time_slot,
    synthesize,
    synthesize_many,
)


def test_synthesize():
    assert synthesize(MONDAY, 5, time(9, 0)) == "1605-0900"
    assert synthesize(date(2024, 12, 1), 17, time(14, 30)) == "0117-1430"


def test_synthesize_ignores_month_and_year():
    assert synthesize(date(2024, 11, 16), 5, time(9, 0)) == synthesize(MONDAY, 5, time(9, 0))


@pytest.mark.parametrize("court", [0, 100, -3])
def test_synthesize_rejects_out_of_range_court(court):
    with pytest.raises(ValueError):
        synthesize(MONDAY, court, time(9, 0))


def test_synthesize_many():
    assert synthesize_many(MONDAY, [1, 2, 3], time(18, 0)) == [
        "1601-1800",
        "1602-1800",
        "1603-1800",
    ]


def test_parse_booking_id():
    parts = parse_booking_id("0117-1430")

    assert parts.day == 1
    assert parts.court == 17
    assert parts.time_start == time(14, 30)
    assert parts.court_name == "Stadium"
    assert parse_booking_id("1605-0900").court_name == "Court 5"


@pytest.mark.parametrize(
    "value", [None, "", "1605-090", "16050900", "1605_0900", "ab05-0900", "1605-2575"]
)
def test_parse_booking_id_malformed(value):
    assert parse_booking_id(value) is None


@pytest.mark.parametrize(
    "value,expected",
    [
        ("1605-0900", True),
        ("3117-2130", True),
        ("1605-0915", False),
        ("1618-0900", False),
        ("3205-0900", False),
        ("1605-0700", False),
        ("1605-2200", False),
        (None, False),
    ],
)
def test_is_valid_booking_id(value, expected):
    assert is_valid_booking_id(value) is expected


def test_same_time_slot():
    assert same_time_slot("1605-0900", "1612-0900") is True
    assert same_time_slot("1605-0900", "1605-0930") is False
    assert same_time_slot("1605-0900", "bogus") is False


def test_generate_group_id():
    group_id = generate_group_id(MONDAY)

    assert re.fullmatch(r"GRP-1216-\d{3}", group_id)
