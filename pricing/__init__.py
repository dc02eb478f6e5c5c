"""Court pricing and cancellation refunds."""

from .engine import PricingEngine
from .refunds import RefundPolicy, can_mark_no_show, is_past_no_show_threshold

__all__ = [
    "PricingEngine",
    "RefundPolicy",
    "can_mark_no_show",
    "is_past_no_show_threshold",
]
