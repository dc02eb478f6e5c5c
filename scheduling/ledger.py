"""
In-memory booking ledger.

The ledger owns the snapshot of bookings and applies the booking lifecycle:
create, update, check-in, cancel, no-show and complete. Bookings are never
removed; every change replaces the stored record with an updated copy.
Pricing, refund and availability rules are delegated to the pure engines.
"""

from datetime import date, datetime, time
from typing import Any, Dict, Iterable, List, Optional

from models.booking import (
    Booking,
    BookingCreate,
    BookingStatus,
    BookingType,
    CancelReason,
    DailyStats,
    PaymentStatus,
)
from models.court import Closure, Court
from models.pricing import PricingContext, RateQuote, RefundStatus, RefundSuggestion
from pricing.engine import PricingEngine
from pricing.refunds import RefundPolicy, can_mark_no_show, is_past_no_show_threshold
from scheduling import availability
from utils.booking_id import generate_group_id, synthesize
from utils.constants import DEFAULT_NO_SHOW_GRACE_MINUTES, TOTAL_COURTS
from utils.exceptions import (
    BookingConflictError,
    BookingNotFoundError,
    CourtClosedError,
    InvalidTransitionError,
    ValidationError,
)
from utils.logging_config import get_logger
from utils.time_grid import is_past, validate_interval
from utils.validation import validate_staff_id

logger = get_logger(__name__)

# Fields an update may touch; lifecycle fields go through their own operations
UPDATABLE_FIELDS = frozenset(
    {
        "date",
        "court",
        "time_start",
        "time_end",
        "customer_name",
        "customer_phone",
        "notes",
        "entity_id",
        "payment_amount",
        "payment_status",
        "payment_note",
    }
)
_SCHEDULE_FIELDS = frozenset({"date", "court", "time_start", "time_end"})


def default_payment_status(booking_type: BookingType, quote: RateQuote) -> PaymentStatus:
    """Initial payment status for a newly priced booking."""
    if booking_type in (BookingType.MAINTENANCE, BookingType.HOLD):
        return PaymentStatus.NA
    if booking_type in (BookingType.CONTRACTOR, BookingType.TOURNAMENT) or booking_type.is_team:
        return PaymentStatus.INVOICED
    if quote.total == 0:
        return PaymentStatus.WAIVED
    return PaymentStatus.PENDING


def _staff(staff_id: Optional[str]) -> str:
    """Staff initials recorded on a change; "unknown" when none were given."""
    if not staff_id:
        return "unknown"
    if not validate_staff_id(staff_id):
        raise ValidationError(f"Invalid staff id: {staff_id!r}")
    return staff_id.strip()


def _is_block(booking_type: Any) -> bool:
    """Maintenance and hold bookings are staff blocks, not customer play."""
    booking_type = getattr(booking_type, "value", booking_type)
    return booking_type in (BookingType.MAINTENANCE.value, BookingType.HOLD.value)


class BookingLedger:
    """The collection of bookings for the facility."""

    def __init__(
        self,
        bookings: Optional[Iterable[Booking]] = None,
        engine: Optional[PricingEngine] = None,
        refund_policy: Optional[RefundPolicy] = None,
        courts: Optional[Iterable[Court]] = None,
        total_courts: int = TOTAL_COURTS,
        closures: Optional[Iterable[Closure]] = None,
    ):
        self._bookings: List[Booking] = list(bookings or [])
        self.engine = engine or PricingEngine()
        self.refund_policy = refund_policy or RefundPolicy()
        self.courts: Dict[int, Court] = {court.id: court for court in courts or []}
        self.total_courts = total_courts
        self.closures: List[Closure] = [c for c in closures or [] if c.is_active]

    def __len__(self) -> int:
        return len(self._bookings)

    # ========== Snapshot ==========

    def all(self) -> List[Booking]:
        return list(self._bookings)

    def replace_all(self, bookings: Iterable[Booking]) -> None:
        """Swap in a freshly loaded snapshot."""
        self._bookings = list(bookings)

    def set_courts(self, courts: Iterable[Court]) -> None:
        self.courts = {court.id: court for court in courts}

    def set_closures(self, closures: Iterable[Closure]) -> None:
        """Swap in freshly loaded closures; inactive ones are dropped."""
        self.closures = [closure for closure in closures if closure.is_active]

    def _store(self, current: Booking, updated: Booking) -> None:
        for index, booking in enumerate(self._bookings):
            if booking is current:
                self._bookings[index] = updated
                return
        raise BookingNotFoundError(f"Booking {current.id} is no longer in the ledger")

    def restore(self, current: Booking, previous: Optional[Booking]) -> None:
        """
        Undo a local change: put ``previous`` back in place of ``current``,
        or drop ``current`` if it was newly added.

        If a snapshot reload has already replaced ``current`` there is nothing
        to undo; the reloaded snapshot reflects the store.
        """
        if previous is None:
            self._bookings = [b for b in self._bookings if b is not current]
            return

        try:
            self._store(current, previous)
        except BookingNotFoundError:
            logger.warning(
                f"Booking {current.id} was replaced by a snapshot reload; nothing to roll back"
            )

    # ========== Queries ==========

    def find(self, booking_id: str, day: Optional[date] = None) -> Optional[Booking]:
        """
        Look up a booking by identifier.

        Identifiers do not encode month or year, so ``day`` narrows the match;
        without it an active booking is preferred over a closed one.
        """
        matches = [
            b for b in self._bookings
            if b.id == booking_id and (day is None or b.date == day)
        ]
        if not matches:
            return None
        for booking in matches:
            if booking.is_active:
                return booking
        return matches[0]

    def get(self, booking_id: str, day: Optional[date] = None) -> Booking:
        booking = self.find(booking_id, day)
        if booking is None:
            raise BookingNotFoundError(f"Booking {booking_id} not found")
        return booking

    def for_date(self, day: date) -> List[Booking]:
        return [b for b in self._bookings if b.date == day and not b.is_cancelled]

    def for_court(self, court: int) -> List[Booking]:
        return [b for b in self._bookings if b.court == court]

    def for_date_and_court(self, day: date, court: int) -> List[Booking]:
        return availability.bookings_for_court_day(self._bookings, day, court)

    def for_date_range(self, start: date, end: date) -> List[Booking]:
        return [
            b for b in self._bookings
            if start <= b.date <= end and not b.is_cancelled
        ]

    def by_type(self, booking_type: str) -> List[Booking]:
        booking_type = getattr(booking_type, "value", booking_type)
        return [
            b for b in self._bookings
            if b.booking_type == booking_type and not b.is_cancelled
        ]

    def for_contractor(self, contractor_id: str) -> List[Booking]:
        return [
            b for b in self._bookings
            if b.entity_id == contractor_id
            and b.booking_type == BookingType.CONTRACTOR.value
            and not b.is_cancelled
        ]

    def for_team(self, team_id: str) -> List[Booking]:
        return [
            b for b in self._bookings
            if b.entity_id == team_id and b.is_team and not b.is_cancelled
        ]

    def is_available(
        self,
        day: date,
        court: int,
        start: time,
        end: time,
        exclude_id: Optional[str] = None,
    ) -> bool:
        return availability.is_available(self._bookings, day, court, start, end, exclude_id)

    def booking_at(self, day: date, court: int, at: time) -> Optional[Booking]:
        return availability.booking_at(self._bookings, day, court, at)

    def stats_for_date(self, day: date) -> DailyStats:
        """Counts by type, check-in progress and booked revenue for a date."""
        stats = DailyStats(date=day)
        for booking in self.for_date(day):
            stats.total += 1
            stats.by_type[booking.booking_type] = stats.by_type.get(booking.booking_type, 0) + 1
            if booking.checked_in:
                stats.checked_in += 1
            else:
                stats.pending += 1
            stats.revenue += booking.payment_amount or 0.0
        stats.revenue = round(stats.revenue, 2)
        return stats

    def closures_for_date(self, day: date) -> List[Closure]:
        return [closure for closure in self.closures if closure.date == day]

    def closure_at(self, day: date, court: int, at: time) -> Optional[Closure]:
        return availability.closure_at(self.closures, day, court, at)

    def is_closed(self, day: date, court: int, start: time, end: time) -> bool:
        return availability.is_closed(self.closures, day, court, start, end)

    def free_slots(self, day: date, court: int, slots: Iterable[time]) -> List[time]:
        """
        Slot starts on a court that nothing occupies.

        ``slots`` is a lattice from ``utils.time_grid.slot_lattice``; a slot
        is free when no non-cancelled booking and no closure covers its start.
        """
        bookings = self.for_date_and_court(day, court)
        closures = self.closures_for_date(day)
        return [
            slot for slot in slots
            if availability.booking_at(bookings, day, court, slot) is None
            and availability.closure_at(closures, day, court, slot) is None
        ]

    def no_show_candidates(
        self, now: datetime, grace_minutes: int = DEFAULT_NO_SHOW_GRACE_MINUTES
    ) -> List[Booking]:
        """Today's active, unchecked bookings that ended over ``grace_minutes`` ago."""
        return [
            b for b in self.for_date(now.date())
            if b.is_active
            and not b.checked_in
            and is_past_no_show_threshold(b, now, grace_minutes)
        ]

    # ========== Creation ==========

    def _check_court(self, court: int, booking_type: Any = None) -> None:
        """
        Maintenance and hold blocks may be placed on a court that is out of
        service; every other booking needs a bookable court.
        """
        if self.courts:
            if court not in self.courts:
                raise ValidationError(f"Unknown court {court}")
            info = self.courts[court]
            if not info.is_bookable and not _is_block(booking_type):
                raise ValidationError(f"Court {court} is not open for booking ({info.status})")
        elif not 1 <= court <= self.total_courts:
            raise ValidationError(
                f"Court must be between 1 and {self.total_courts}, got {court}"
            )

    def _check_open(
        self, day: date, court: int, start: time, end: time, booking_type: Any = None
    ) -> None:
        if _is_block(booking_type):
            return
        closures = availability.find_closures(self.closures, day, court, start, end)
        if closures:
            logger.warning(
                f"Court {court} on {day} {start:%H:%M}-{end:%H:%M} is closed: "
                f"{', '.join(c.label for c in closures)}"
            )
            raise CourtClosedError(
                f"Court {court} is closed on {day} between {start:%H:%M} and "
                f"{end:%H:%M}: {closures[0].label}",
                closures,
            )

    def _check_free(
        self,
        day: date,
        court: int,
        start: time,
        end: time,
        exclude_id: Optional[str] = None,
    ) -> None:
        conflicts = availability.find_conflicts(self._bookings, day, court, start, end, exclude_id)
        if conflicts:
            logger.warning(
                f"Court {court} on {day} {start:%H:%M}-{end:%H:%M} conflicts with "
                f"{', '.join(b.id for b in conflicts)}"
            )
            raise BookingConflictError(
                f"Court {court} is already booked on {day} between "
                f"{start:%H:%M} and {end:%H:%M}",
                conflicts,
            )

    def quote(self, request: BookingCreate, court_count: Optional[int] = None) -> RateQuote:
        """Price a creation request."""
        context = PricingContext(
            court_count=court_count,
            total_hours=request.total_hours,
            is_youth=request.is_youth,
        )
        return self.engine.quote(
            request.booking_type, request.date, request.time_start, request.time_end, context
        )

    def _build(
        self,
        request: BookingCreate,
        court: int,
        quote: RateQuote,
        staff_id: Optional[str],
        now: datetime,
        group_id: Optional[str] = None,
        amount: Optional[float] = None,
        note: Optional[str] = None,
    ) -> Booking:
        payment_status = request.payment_status or default_payment_status(
            request.booking_type, quote
        )
        return Booking(
            id=synthesize(request.date, court, request.time_start),
            date=request.date,
            court=court,
            time_start=request.time_start,
            time_end=request.time_end,
            booking_type=request.booking_type.value,
            entity_id=request.entity_id,
            group_id=group_id,
            customer_name=request.customer_name,
            customer_phone=request.customer_phone,
            notes=request.notes,
            status=BookingStatus.ACTIVE,
            payment_amount=quote.total if amount is None else amount,
            payment_status=payment_status,
            payment_note=note or quote.description,
            created_by=_staff(staff_id),
            created_at=now,
            modified_at=now,
        )

    def _check_not_elapsed(self, request: BookingCreate, now: datetime) -> None:
        if is_past(request.date, request.time_start, now):
            raise ValidationError(
                f"Slot {request.time_start:%H:%M} on {request.date} has already started"
            )

    def create(
        self, request: BookingCreate, staff_id: Optional[str], now: datetime
    ) -> Booking:
        """
        Create a booking for a single court.

        Raises:
            ValidationError: Unknown or out-of-service court, or a slot that
                already started today
            CourtClosedError: A closure covers part of the interval
            BookingConflictError: The court is taken for part of the interval
        """
        validate_interval(request.time_start, request.time_end)
        self._check_court(request.court, request.booking_type)
        self._check_not_elapsed(request, now)
        self._check_open(
            request.date, request.court, request.time_start, request.time_end, request.booking_type
        )
        self._check_free(request.date, request.court, request.time_start, request.time_end)

        booking = self._build(request, request.court, self.quote(request), staff_id, now)
        self._bookings.append(booking)

        logger.info(
            f"Booking {booking.id} created on {booking.date} court {booking.court} "
            f"({booking.booking_type}, ${booking.payment_amount:.2f}) by {booking.created_by}"
        )
        return booking

    def create_multi_court(
        self,
        request: BookingCreate,
        courts: Iterable[int],
        staff_id: Optional[str],
        now: datetime,
    ) -> List[Booking]:
        """
        Book the same interval on several courts under one group id.

        The request is priced once with the court count; the first booking of
        the group carries the total and the others record a zero amount. No
        booking is created unless every court is free.

        Raises:
            ValidationError: No courts, an unknown court, or an elapsed slot
            CourtClosedError: Any of the courts is closed for the interval
            BookingConflictError: Any of the courts is taken
        """
        courts = list(dict.fromkeys(courts))
        if not courts:
            raise ValidationError("At least one court is required")

        validate_interval(request.time_start, request.time_end)
        for court in courts:
            self._check_court(court, request.booking_type)
        self._check_not_elapsed(request, now)
        for court in courts:
            self._check_open(
                request.date, court, request.time_start, request.time_end, request.booking_type
            )

        conflicts = []
        for court in courts:
            conflicts.extend(
                availability.find_conflicts(
                    self._bookings, request.date, court, request.time_start, request.time_end
                )
            )
        if conflicts:
            logger.warning(
                f"Group booking on {request.date} blocked by {', '.join(b.id for b in conflicts)}"
            )
            raise BookingConflictError(
                f"{len(conflicts)} conflicting booking(s) on {request.date}", conflicts
            )

        quote = self.quote(request, court_count=len(courts))
        group_id = generate_group_id(request.date)
        lead_id = synthesize(request.date, courts[0], request.time_start)

        created = []
        for index, court in enumerate(courts):
            if index == 0:
                booking = self._build(request, court, quote, staff_id, now, group_id=group_id)
            else:
                booking = self._build(
                    request,
                    court,
                    quote,
                    staff_id,
                    now,
                    group_id=group_id,
                    amount=0.0,
                    note=f"Included in {lead_id} ({group_id})",
                )
            created.append(booking)

        self._bookings.extend(created)
        logger.info(
            f"Group {group_id} created: {len(created)} courts on {request.date}, "
            f"${quote.total:.2f}"
        )
        return created

    # ========== Lifecycle ==========

    def _active(self, booking_id: str, day: Optional[date], action: str) -> Booking:
        booking = self.get(booking_id, day)
        if not booking.is_active:
            raise InvalidTransitionError(
                f"Cannot {action} booking {booking_id}: status is {booking.status}"
            )
        return booking

    def update(
        self,
        booking_id: str,
        changes: Dict[str, Any],
        now: datetime,
        day: Optional[date] = None,
    ) -> Booking:
        """
        Edit an active booking.

        Moving a booking re-checks availability against everything but itself.
        The identifier is kept as created.

        Raises:
            ValidationError: Disallowed fields or invalid values
            CourtClosedError: The new slot falls in a closure
            BookingConflictError: The new slot is taken
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise ValidationError(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        current = self._active(booking_id, day, "update")
        data = current.model_dump()
        data.update(changes)
        data["modified_at"] = now
        try:
            updated = Booking.model_validate(data)
        except ValueError as e:
            raise ValidationError(f"Invalid update for booking {booking_id}: {e}") from e

        if _SCHEDULE_FIELDS & set(changes):
            self._check_court(updated.court, updated.booking_type)
            self._check_open(
                updated.date,
                updated.court,
                updated.time_start,
                updated.time_end,
                updated.booking_type,
            )
            others = [b for b in self._bookings if b is not current]
            conflicts = availability.find_conflicts(
                others, updated.date, updated.court, updated.time_start, updated.time_end
            )
            if conflicts:
                raise BookingConflictError(
                    f"Court {updated.court} is already booked on {updated.date} between "
                    f"{updated.time_start:%H:%M} and {updated.time_end:%H:%M}",
                    conflicts,
                )

        self._store(current, updated)
        logger.info(f"Booking {booking_id} updated: {', '.join(sorted(changes))}")
        return updated

    def check_in(
        self,
        booking_id: str,
        staff_id: Optional[str],
        now: datetime,
        day: Optional[date] = None,
    ) -> Booking:
        current = self._active(booking_id, day, "check in")
        if current.checked_in:
            raise InvalidTransitionError(f"Booking {booking_id} is already checked in")

        updated = current.model_copy(
            update={
                "checked_in": True,
                "checked_in_at": now,
                "checked_in_by": _staff(staff_id),
                "modified_at": now,
            }
        )
        self._store(current, updated)
        logger.info(f"Booking {booking_id} checked in by {updated.checked_in_by}")
        return updated

    def suggest_refund(
        self,
        booking_id: str,
        reason: str,
        now: datetime,
        day: Optional[date] = None,
    ) -> RefundSuggestion:
        return self.refund_policy.suggest_refund(self.get(booking_id, day), reason, now)

    def cancel(
        self,
        booking_id: str,
        staff_id: Optional[str],
        reason: str,
        now: datetime,
        refund_status: Optional[RefundStatus] = None,
        refund_amount: Optional[float] = None,
        refund_note: Optional[str] = None,
        day: Optional[date] = None,
    ) -> Booking:
        """
        Cancel an active booking.

        The refund defaults to the policy suggestion; any of status, amount
        and note given by the operator replace the suggested values.
        """
        current = self._active(booking_id, day, "cancel")
        reason = getattr(reason, "value", reason)
        suggestion = self.refund_policy.suggest_refund(current, reason, now)

        status = getattr(refund_status, "value", refund_status) or suggestion.status
        amount = suggestion.amount if refund_amount is None else refund_amount
        if amount < 0:
            raise ValidationError("Refund amount cannot be negative")

        updated = current.model_copy(
            update={
                "status": BookingStatus.CANCELLED.value,
                "cancelled_at": now,
                "cancelled_by": _staff(staff_id),
                "cancel_reason": reason,
                "refund_status": status,
                "refund_amount": amount,
                "refund_note": refund_note if refund_note is not None else suggestion.description,
                "modified_at": now,
            }
        )
        self._store(current, updated)
        logger.info(
            f"Booking {booking_id} cancelled ({reason}) by {updated.cancelled_by}; "
            f"refund {status} ${amount:.2f}"
        )
        return updated

    def mark_no_show(
        self,
        booking_id: str,
        staff_id: Optional[str],
        now: datetime,
        day: Optional[date] = None,
    ) -> Booking:
        """
        Raises:
            InvalidTransitionError: Booking not active, checked in, or not started
        """
        current = self.get(booking_id, day)
        if not can_mark_no_show(current, now):
            raise InvalidTransitionError(f"Booking {booking_id} cannot be marked as a no-show")

        updated = current.model_copy(
            update={
                "status": BookingStatus.NO_SHOW.value,
                "cancel_reason": CancelReason.NO_SHOW.value,
                "refund_status": RefundStatus.NONE.value,
                "refund_amount": 0.0,
                "cancelled_at": now,
                "cancelled_by": _staff(staff_id),
                "modified_at": now,
            }
        )
        self._store(current, updated)
        logger.info(f"Booking {booking_id} marked as no-show by {updated.cancelled_by}")
        return updated

    def complete(
        self, booking_id: str, now: datetime, day: Optional[date] = None
    ) -> Booking:
        current = self._active(booking_id, day, "complete")
        updated = current.model_copy(
            update={"status": BookingStatus.COMPLETED.value, "modified_at": now}
        )
        self._store(current, updated)
        logger.info(f"Booking {booking_id} completed")
        return updated
