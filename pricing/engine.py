"""
Rate calculation for court bookings.

Rates come from an explicit ``RateSchedule`` so that each facility (and each
test) can price with its own rate card.
"""

from dataclasses import dataclass
from datetime import date, time
from typing import Iterable, Optional

from models.booking import Booking, BookingType
from models.pricing import ContractorInvoice, PricingContext, RateQuote, RateSchedule
from utils.constants import (
    GROUP_10_HOURS,
    GROUP_50_HOURS,
    TEAM_FIVE_COURTS,
    TEAM_THREE_COURTS,
)
from utils.time_grid import duration_hours, is_prime_time

_FREE_TYPES = {BookingType.MAINTENANCE.value, BookingType.HOLD.value}


@dataclass(frozen=True)
class PricingCase:
    """The booking type and context combination that selects a pricing rule."""

    kind: str
    court_count: int = 1


def classify(booking_type: str, context: PricingContext) -> PricingCase:
    """Map a booking type plus context to the rule that prices it."""
    if booking_type in _FREE_TYPES:
        return PricingCase("free")
    if context.is_youth:
        return PricingCase("youth")
    if booking_type.startswith("team_"):
        courts = context.court_count or 1
        if courts >= TEAM_FIVE_COURTS:
            return PricingCase("team_5", courts)
        if courts >= TEAM_THREE_COURTS:
            return PricingCase("team_3", courts)
        return PricingCase("team_fallback", courts)
    if booking_type == BookingType.CONTRACTOR.value:
        return PricingCase("contractor")
    if booking_type == BookingType.TOURNAMENT.value:
        return PricingCase("tournament")
    if booking_type == BookingType.OPEN.value:
        return PricingCase("open")
    return PricingCase("unknown")


class PricingEngine:
    """Prices booking requests against a rate schedule."""

    def __init__(self, schedule: Optional[RateSchedule] = None):
        self.schedule = schedule or RateSchedule()

    def standard_rate(self, day: date, start: time) -> float:
        """Prime or non-prime rate for a slot."""
        if is_prime_time(day, start):
            return self.schedule.prime
        return self.schedule.non_prime

    def contractor_rate(self, hours: float, day: date, start: time) -> float:
        """Volume-tiered hourly rate for contractors."""
        if hours >= GROUP_50_HOURS:
            return self.schedule.group_50
        if hours >= GROUP_10_HOURS:
            return self.schedule.group_10
        return self.standard_rate(day, start)

    def quote(
        self,
        booking_type: str,
        day: date,
        start: time,
        end: time,
        context: Optional[PricingContext] = None,
    ) -> RateQuote:
        """
        Price a booking request.

        Args:
            booking_type: Booking type value (unknown types price as open play)
            day: Booking date
            start: Start time
            end: End time
            context: Court count, cumulative hours and youth flag

        Returns:
            RateQuote for the request

        Raises:
            InvalidIntervalError: If ``end`` is not after ``start``
        """
        booking_type = getattr(booking_type, "value", booking_type)
        context = context or PricingContext()
        duration = duration_hours(start, end)
        prime = is_prime_time(day, start)

        case = classify(booking_type, context)

        if case.kind == "free":
            return RateQuote(
                rate_per_block=0, total=0, description="No charge", is_prime_time=prime
            )

        if case.kind == "youth":
            return RateQuote(
                rate_per_block=0,
                total=0,
                description="Youth (16 & under) - Free",
                is_prime_time=prime,
            )

        if case.kind in ("team_5", "team_3"):
            flat = self.schedule.team_5 if case.kind == "team_5" else self.schedule.team_3
            tier = 5 if case.kind == "team_5" else 3
            return RateQuote(
                rate_per_block=flat,
                total=flat,
                description=f"Team Tennis ({case.court_count} courts, {tier}-court rate)",
                is_prime_time=prime,
            )

        if case.kind == "contractor":
            hours = duration if context.total_hours is None else context.total_hours
            rate = self.contractor_rate(hours, day, start)
            return RateQuote(
                rate_per_block=rate,
                total=round(rate * duration, 2),
                description=f"Contractor rate: ${rate:.2f}/hr",
                is_prime_time=prime,
                duration=duration,
            )

        if case.kind == "tournament":
            return RateQuote(
                rate_per_block=0,
                total=0,
                description="Tournament - See contract",
                is_prime_time=prime,
            )

        if case.kind == "team_fallback":
            note = f"Team with {case.court_count} court(s) - open play rate"
        elif case.kind == "unknown":
            note = f"Unrecognized booking type '{booking_type}' - review pricing"
        else:  # open play
            note = None
        return self._block_quote(day, start, duration, note=note)

    def _block_quote(
        self, day: date, start: time, duration: float, note: Optional[str] = None
    ) -> RateQuote:
        # One flat block fee; the blended total is kept for reference only
        prime = is_prime_time(day, start)
        rate = self.schedule.prime if prime else self.schedule.non_prime

        block = self.schedule.standard_block_hours
        standard = min(duration, block)
        extra = max(0.0, duration - block)
        blended = (rate if standard > 0 else 0) + extra * rate / block

        description = "Prime Time Rate" if prime else "Non-Prime Rate"
        if note:
            description = f"{description} ({note})"

        return RateQuote(
            rate_per_block=rate,
            total=rate,
            description=description,
            is_prime_time=prime,
            duration=duration,
            blended_total=round(blended, 2),
        )

    def estimate_contractor_invoice(self, bookings: Iterable[Booking]) -> ContractorInvoice:
        """
        Estimate a contractor's invoice from their bookings.

        Small contractors (under 10 hours) are billed at the non-prime rate.
        """
        bookings = list(bookings)
        total_hours = sum(duration_hours(b.time_start, b.time_end) for b in bookings)

        if total_hours >= GROUP_50_HOURS:
            rate, tier = self.schedule.group_50, "50+ hours"
        elif total_hours >= GROUP_10_HOURS:
            rate, tier = self.schedule.group_10, "10+ hours"
        else:
            rate, tier = self.schedule.non_prime, "Standard"

        return ContractorInvoice(
            total_hours=total_hours,
            rate=rate,
            total=round(total_hours * rate, 2),
            booking_count=len(bookings),
            tier=tier,
        )
