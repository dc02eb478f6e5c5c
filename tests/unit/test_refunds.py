"""
Unit tests for the cancellation policy.
"""

from datetime import datetime

import pytest

from models.booking import CancelReason
from models.pricing import RefundStatus
from pricing.refunds import (
    RefundPolicy,
    can_mark_no_show,
    cancel_reason_label,
    is_past_no_show_threshold,
    refund_status_label,
)
from tests.factories import make_booking


@pytest.fixture
def policy():
    return RefundPolicy()


@pytest.fixture
def booking():
    # Monday 2024-12-16, 9:00-10:00, paid $10
    return make_booking()


@pytest.mark.parametrize("reason", ["weather", CancelReason.FACILITY])
@pytest.mark.parametrize(
    "now",
    [
        datetime(2024, 12, 16, 8, 45),  # shortly before
        datetime(2024, 12, 16, 11, 0),  # after the booking
        datetime(2024, 11, 1, 9, 0),  # weeks ahead
    ],
)
def test_weather_and_facility_refund_in_full(policy, booking, reason, now):
    suggestion = policy.suggest_refund(booking, reason, now)

    assert suggestion.status == RefundStatus.FULL
    assert suggestion.amount == 10.0


def test_weather_description(policy, booking):
    suggestion = policy.suggest_refund(booking, "weather", datetime(2024, 12, 16, 8, 45))

    assert suggestion.description == "Weather cancellation - Full refund"


def test_no_show_gets_nothing(policy, booking):
    suggestion = policy.suggest_refund(booking, "no_show", datetime(2024, 12, 16, 10, 30))

    assert suggestion.status == RefundStatus.NONE
    assert suggestion.amount == 0


def test_customer_cancellation_at_window_boundary(policy, booking):
    suggestion = policy.suggest_refund(booking, "customer", datetime(2024, 12, 15, 9, 0))

    assert suggestion.status == RefundStatus.FULL
    assert suggestion.amount == 10.0
    assert suggestion.description == "Cancelled 24+ hours in advance - Full refund"


def test_customer_cancellation_25_hours_ahead(policy, booking):
    suggestion = policy.suggest_refund(booking, "customer", datetime(2024, 12, 15, 8, 0))

    assert suggestion.status == RefundStatus.FULL
    assert suggestion.amount == 10.0


def test_late_customer_cancellation(policy, booking):
    suggestion = policy.suggest_refund(booking, "customer", datetime(2024, 12, 15, 9, 1))

    assert suggestion.status == RefundStatus.NONE
    assert suggestion.amount == 0
    assert suggestion.description == "Cancelled less than 24 hours before - No refund"


def test_other_reason_is_staff_discretion(policy, booking):
    suggestion = policy.suggest_refund(booking, "other", datetime(2024, 12, 1, 9, 0))

    assert suggestion.status == RefundStatus.NONE
    assert suggestion.description == "Staff discretion"


def test_unpaid_booking_refunds_zero(policy):
    booking = make_booking(payment_amount=None)

    suggestion = policy.suggest_refund(booking, "weather", datetime(2024, 12, 16, 8, 0))

    assert suggestion.status == RefundStatus.FULL
    assert suggestion.amount == 0


def test_custom_window():
    policy = RefundPolicy(window_hours=48)

    suggestion = policy.suggest_refund(make_booking(), "customer", datetime(2024, 12, 15, 9, 0))

    assert suggestion.status == RefundStatus.NONE
    assert "48 hours" in suggestion.description


def test_no_show_threshold(booking):
    assert not is_past_no_show_threshold(booking, datetime(2024, 12, 16, 10, 15))
    assert is_past_no_show_threshold(booking, datetime(2024, 12, 16, 10, 16))


def test_can_mark_no_show(booking):
    assert not can_mark_no_show(booking, datetime(2024, 12, 16, 9, 0))
    assert can_mark_no_show(booking, datetime(2024, 12, 16, 9, 1))


def test_cannot_mark_checked_in_or_closed_booking_as_no_show():
    later = datetime(2024, 12, 16, 12, 0)

    assert not can_mark_no_show(make_booking(checked_in=True), later)
    assert not can_mark_no_show(make_booking(status="cancelled"), later)


def test_labels():
    assert cancel_reason_label("weather") == "Weather"
    assert cancel_reason_label(CancelReason.NO_SHOW) == "No-Show"
    assert refund_status_label("credit") == "Credit for Future"
    assert refund_status_label("mystery") == "mystery"
