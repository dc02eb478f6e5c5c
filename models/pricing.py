"""Pricing and refund models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class RefundStatus(str, Enum):
    """Refund disposition recorded on a cancelled booking."""

    NONE = "none"
    PARTIAL = "partial"
    FULL = "full"
    CREDIT = "credit"
    NA = "na"


class RateSchedule(BaseModel):
    """Facility rate card (USD)."""

    prime: float = Field(default=12.00, ge=0)
    non_prime: float = Field(default=10.00, ge=0)
    group_50: float = Field(default=4.00, ge=0, description="Per hour, 50+ hours")
    group_10: float = Field(default=4.50, ge=0, description="Per hour, 10+ hours")
    team_5: float = Field(default=50.00, ge=0, description="Flat, 5+ courts")
    team_3: float = Field(default=30.00, ge=0, description="Flat, 3+ courts")
    ball_machine: float = Field(default=10.00, ge=0, description="Per hour")

    # First block of an open-play booking, in hours
    standard_block_hours: float = Field(default=1.5, gt=0)

    model_config = {"frozen": True}


class PricingContext(BaseModel):
    """Optional inputs that change how a booking is priced."""

    court_count: Optional[int] = Field(default=None, ge=1)
    total_hours: Optional[float] = Field(default=None, ge=0)
    is_youth: bool = False


class RateQuote(BaseModel):
    """Result of pricing a booking request."""

    rate_per_block: float
    total: float
    description: str
    is_prime_time: bool = False
    duration: Optional[float] = None
    blended_total: Optional[float] = None


class RefundSuggestion(BaseModel):
    """Advisory refund disposition for a cancellation."""

    amount: float = 0.0
    status: RefundStatus
    description: str

    class Config:
        use_enum_values = True


class ContractorInvoice(BaseModel):
    """Estimated invoice for a contractor's bookings."""

    total_hours: float
    rate: float
    total: float
    booking_count: int
    tier: str
