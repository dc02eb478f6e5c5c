"""Booking models for court reservations."""

import datetime as dt
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from models.pricing import RefundStatus
from utils.time_grid import normalize_time
from utils.validation import parse_court_id


class BookingType(str, Enum):
    """Booking classification; drives pricing and display."""

    OPEN = "open"
    CONTRACTOR = "contractor"
    TEAM_USTA = "team_usta"
    TEAM_HS = "team_hs"
    TEAM_COLLEGE = "team_college"
    TEAM_OTHER = "team_other"
    TOURNAMENT = "tournament"
    MAINTENANCE = "maintenance"
    HOLD = "hold"

    @property
    def is_team(self) -> bool:
        return self.value.startswith("team_")

    @property
    def requires_entity(self) -> bool:
        return self is BookingType.CONTRACTOR or self.is_team


class BookingStatus(str, Enum):
    """Booking status. Everything but ACTIVE is terminal."""

    ACTIVE = "active"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    """Payment status."""

    PENDING = "pending"
    PAID = "paid"
    WAIVED = "waived"
    INVOICED = "invoiced"
    REFUNDED = "refunded"
    NA = "na"


class CancelReason(str, Enum):
    """Why a booking was cancelled."""

    CUSTOMER = "customer"
    WEATHER = "weather"
    FACILITY = "facility"
    NO_SHOW = "no_show"
    OTHER = "other"


class _BookingTimes(BaseModel):
    """Shared coercion for the date/court/time fields."""

    date: dt.date
    court: int = Field(..., ge=1, description="Court number")
    time_start: dt.time
    time_end: dt.time

    @field_validator("court", mode="before")
    @classmethod
    def _coerce_court(cls, value):
        return parse_court_id(value)

    @field_validator("time_start", "time_end", mode="before")
    @classmethod
    def _coerce_time(cls, value):
        return normalize_time(value)

    @model_validator(mode="after")
    def _check_interval(self):
        if self.time_end <= self.time_start:
            raise ValueError("time_end must be after time_start")
        return self


class Booking(_BookingTimes):
    """Booking model."""

    id: str = Field(..., description="DDCC-HHMM identifier")
    booking_type: str = BookingType.OPEN.value
    entity_id: Optional[str] = Field(None, description="Contractor or team ID")
    group_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    notes: Optional[str] = None

    status: BookingStatus = BookingStatus.ACTIVE

    payment_amount: Optional[float] = Field(None, ge=0)
    payment_status: PaymentStatus = PaymentStatus.PENDING
    payment_note: Optional[str] = None

    created_by: Optional[str] = None
    created_at: Optional[dt.datetime] = None
    modified_at: Optional[dt.datetime] = None

    # Cancellation
    cancelled_at: Optional[dt.datetime] = None
    cancelled_by: Optional[str] = None
    cancel_reason: Optional[str] = None
    refund_status: Optional[RefundStatus] = None
    refund_amount: Optional[float] = None
    refund_note: Optional[str] = None

    # Check-in
    checked_in: bool = False
    checked_in_at: Optional[dt.datetime] = None
    checked_in_by: Optional[str] = None

    class Config:
        use_enum_values = True
        json_schema_extra = {
            "example": {
                "id": "1605-0900",
                "date": "2024-12-16",
                "court": 5,
                "time_start": "09:00",
                "time_end": "10:00",
                "booking_type": "open",
                "status": "active",
                "payment_amount": 10.0,
                "payment_status": "pending",
            }
        }

    @property
    def is_active(self) -> bool:
        return self.status == BookingStatus.ACTIVE

    @property
    def is_cancelled(self) -> bool:
        return self.status == BookingStatus.CANCELLED

    @property
    def is_team(self) -> bool:
        return self.booking_type.startswith("team_")


class BookingCreate(_BookingTimes):
    """Booking creation request."""

    booking_type: BookingType = BookingType.OPEN
    entity_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_phone: Optional[str] = None
    notes: Optional[str] = None
    is_youth: bool = False
    total_hours: Optional[float] = Field(
        None, ge=0, description="Contractor's cumulative court hours"
    )
    payment_status: Optional[PaymentStatus] = None

    @model_validator(mode="after")
    def _check_entity(self) -> "BookingCreate":
        if self.booking_type.requires_entity and not self.entity_id:
            raise ValueError(
                f"entity_id is required for {self.booking_type.value} bookings"
            )
        if not self.booking_type.requires_entity and self.entity_id:
            raise ValueError(
                "entity_id is only allowed for contractor and team bookings"
            )
        return self


class DailyStats(BaseModel):
    """Booking counts and revenue for one date."""

    date: dt.date
    total: int = 0
    by_type: Dict[str, int] = Field(default_factory=dict)
    checked_in: int = 0
    pending: int = 0
    revenue: float = 0.0
