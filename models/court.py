"""Court and closure models."""

import datetime as dt
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator

from utils.constants import STADIUM_COURT_NUMBER
from utils.time_grid import normalize_time
from utils.validation import parse_court_id


class CourtStatus(str, Enum):
    """Known court statuses. Sheets may carry others; those are kept as text."""

    AVAILABLE = "available"
    OPEN = "open"
    MAINTENANCE = "maintenance"
    CLOSED = "closed"


BOOKABLE_STATUSES = frozenset({CourtStatus.AVAILABLE.value, CourtStatus.OPEN.value})


class Court(BaseModel):
    """Court model."""

    id: int = Field(..., ge=1, description="Court number (17 is the Stadium)")
    name: Optional[str] = None
    status: str = CourtStatus.AVAILABLE.value
    display_order: Optional[int] = None

    class Config:
        json_schema_extra = {
            "example": {
                "id": 5,
                "name": "Court 5",
                "status": "available",
                "display_order": 5,
            }
        }

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return parse_court_id(value)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value):
        value = getattr(value, "value", value)
        if value is None or not str(value).strip():
            return CourtStatus.AVAILABLE.value
        return str(value).strip().lower()

    @model_validator(mode="after")
    def _default_name(self) -> "Court":
        if not self.name:
            self.name = "Stadium" if self.is_stadium else f"Court {self.id}"
        return self

    @property
    def is_stadium(self) -> bool:
        return self.id == STADIUM_COURT_NUMBER

    @property
    def is_bookable(self) -> bool:
        return self.status in BOOKABLE_STATUSES


class Closure(BaseModel):
    """
    A scheduled closure of one court, or of every court when ``court`` is None.

    A closure covers ``[time_start, time_end)``; without times it covers the
    whole operating day.
    """

    date: dt.date
    court: Optional[int] = Field(None, description="Court number, None for all courts")
    time_start: dt.time = dt.time(0, 0)
    time_end: dt.time = dt.time(21, 0)
    reason: Optional[str] = None
    is_active: bool = True

    class Config:
        json_schema_extra = {
            "example": {
                "date": "2024-12-16",
                "court": "all",
                "time_start": "08:30",
                "time_end": "12:00",
                "reason": "Resurfacing",
                "is_active": True,
            }
        }

    @field_validator("court", mode="before")
    @classmethod
    def _coerce_court(cls, value):
        if value is None or str(value).strip().lower() in ("", "all"):
            return None
        return parse_court_id(value)

    @field_validator("time_start", "time_end", mode="before")
    @classmethod
    def _coerce_time(cls, value):
        return normalize_time(value)

    @model_validator(mode="after")
    def _check_interval(self) -> "Closure":
        if self.time_end <= self.time_start:
            raise ValueError("time_end must be after time_start")
        return self

    @property
    def label(self) -> str:
        return self.reason or "Closed"

    def applies_to(self, day: dt.date, court: int) -> bool:
        """Active, on ``day``, and covering ``court`` (directly or as "all")."""
        return self.is_active and self.date == day and self.court in (None, court)
