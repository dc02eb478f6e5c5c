"""Pydantic models for data validation and serialization."""

from .booking import (
    Booking,
    BookingCreate,
    BookingStatus,
    BookingType,
    CancelReason,
    DailyStats,
    PaymentStatus,
)
from .court import Closure, Court, CourtStatus
from .pricing import (
    ContractorInvoice,
    PricingContext,
    RateQuote,
    RateSchedule,
    RefundStatus,
    RefundSuggestion,
)

__all__ = [
    "Booking",
    "BookingCreate",
    "BookingStatus",
    "BookingType",
    "CancelReason",
    "Closure",
    "DailyStats",
    "ContractorInvoice",
    "Court",
    "CourtStatus",
    "PaymentStatus",
    "PricingContext",
    "RateQuote",
    "RateSchedule",
    "RefundStatus",
    "RefundSuggestion",
]
