"""
Cancellation policy.

Suggestions are advisory: staff confirm or override them before a
cancellation is recorded, and nothing here mutates a booking.
"""

from datetime import datetime, timedelta

from models.booking import Booking, BookingStatus, CancelReason
from models.pricing import RefundStatus, RefundSuggestion
from utils.constants import DEFAULT_NO_SHOW_GRACE_MINUTES, DEFAULT_REFUND_WINDOW_HOURS
from utils.time_grid import hours_until

CANCEL_REASON_LABELS = {
    CancelReason.CUSTOMER.value: "Customer Request",
    CancelReason.WEATHER.value: "Weather",
    CancelReason.FACILITY.value: "Facility Issue",
    CancelReason.NO_SHOW.value: "No-Show",
    CancelReason.OTHER.value: "Other",
}

REFUND_STATUS_LABELS = {
    RefundStatus.NONE.value: "No Refund",
    RefundStatus.PARTIAL.value: "Partial Refund",
    RefundStatus.FULL.value: "Full Refund",
    RefundStatus.CREDIT.value: "Credit for Future",
    RefundStatus.NA.value: "N/A",
}


class RefundPolicy:
    """Suggests refunds for cancellations."""

    def __init__(self, window_hours: float = DEFAULT_REFUND_WINDOW_HOURS):
        self.window_hours = window_hours

    def suggest_refund(self, booking: Booking, reason: str, now: datetime) -> RefundSuggestion:
        """
        Suggest a refund for cancelling ``booking``.

        Args:
            booking: The booking being cancelled
            reason: Cancel reason value
            now: Current local time

        Returns:
            RefundSuggestion
        """
        reason = getattr(reason, "value", reason)
        paid = booking.payment_amount or 0.0

        if reason == CancelReason.WEATHER.value:
            return RefundSuggestion(
                amount=paid,
                status=RefundStatus.FULL,
                description="Weather cancellation - Full refund",
            )

        if reason == CancelReason.NO_SHOW.value:
            return RefundSuggestion(
                status=RefundStatus.NONE, description="No-show - No refund"
            )

        if reason == CancelReason.CUSTOMER.value:
            lead_time = hours_until(booking.date, booking.time_start, now)
            if lead_time >= self.window_hours:
                return RefundSuggestion(
                    amount=paid,
                    status=RefundStatus.FULL,
                    description=(
                        f"Cancelled {self.window_hours:g}+ hours in advance - Full refund"
                    ),
                )
            return RefundSuggestion(
                status=RefundStatus.NONE,
                description=(
                    f"Cancelled less than {self.window_hours:g} hours before - No refund"
                ),
            )

        if reason == CancelReason.FACILITY.value:
            return RefundSuggestion(
                amount=paid,
                status=RefundStatus.FULL,
                description="Facility cancellation - Full refund",
            )

        return RefundSuggestion(status=RefundStatus.NONE, description="Staff discretion")


def is_past_no_show_threshold(
    booking: Booking,
    now: datetime,
    grace_minutes: int = DEFAULT_NO_SHOW_GRACE_MINUTES,
) -> bool:
    """Whether the booking ended more than ``grace_minutes`` ago."""
    ended = datetime.combine(booking.date, booking.time_end)
    return now > ended + timedelta(minutes=grace_minutes)


def can_mark_no_show(booking: Booking, now: datetime) -> bool:
    """An active, unchecked booking can be a no-show once its start has passed."""
    if booking.status != BookingStatus.ACTIVE:
        return False
    if booking.checked_in:
        return False
    return now > datetime.combine(booking.date, booking.time_start)


def cancel_reason_label(reason: str) -> str:
    return CANCEL_REASON_LABELS.get(getattr(reason, "value", reason), reason)


def refund_status_label(status: str) -> str:
    return REFUND_STATUS_LABELS.get(getattr(status, "value", status), status)
