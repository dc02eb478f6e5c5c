"""Court availability, the booking ledger and its persistence service."""

from .availability import booking_at, closure_at, find_conflicts, is_available, is_closed
from .ledger import BookingLedger
from .service import BookingService

__all__ = [
    "BookingLedger",
    "BookingService",
    "booking_at",
    "closure_at",
    "find_conflicts",
    "is_available",
    "is_closed",
]
