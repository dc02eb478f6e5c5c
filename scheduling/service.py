"""
Booking service: keeps the ledger in step with the external booking store.

Each mutation is applied to the ledger first (optimistic update) and then
persisted. If persisting fails the local change is rolled back and the
error is raised. Concurrent writers are not reconciled; the store keeps
whichever write lands last.
"""

from datetime import date, datetime
from typing import List, Optional

from models.booking import Booking, BookingCreate
from models.court import Court
from models.pricing import RefundStatus, RefundSuggestion
from scheduling.ledger import BookingLedger
from utils.datetime_utils import local_now
from utils.exceptions import DataSourceError, SyncError
from utils.logging_config import get_logger

logger = get_logger(__name__)


class BookingService:
    """Async facade over the ledger and the booking store."""

    def __init__(self, client, ledger: Optional[BookingLedger] = None):
        """
        Args:
            client: Booking store client (see ``db.sheets_client.SheetsClient``)
            ledger: Ledger to operate on; a fresh one is created if omitted
        """
        self.client = client
        self.ledger = ledger or BookingLedger()
        self.last_updated: Optional[datetime] = None

    # ========== Snapshot ==========

    async def load(self, refresh: bool = False) -> List[Booking]:
        """Load courts, closures and bookings from the store into the ledger."""
        courts = await self.client.fetch_courts(refresh=refresh)
        closures = await self.client.fetch_closures(refresh=refresh)
        bookings = await self.client.fetch_bookings(refresh=refresh)

        self.ledger.set_courts(courts)
        self.ledger.set_closures(closures)
        self.ledger.replace_all(bookings)
        self.last_updated = local_now()

        logger.info(
            f"Loaded {len(bookings)} bookings, {len(courts)} courts "
            f"and {len(closures)} closures"
        )
        return bookings

    async def refresh(self) -> bool:
        """
        Reload the snapshot, bypassing the client cache.

        Returns:
            True if the snapshot was replaced, False if the fetch failed
        """
        try:
            await self.load(refresh=True)
            return True
        except DataSourceError as e:
            logger.error(f"Snapshot refresh failed, keeping previous data: {e}")
            return False

    def available_courts(self) -> List[Court]:
        """Courts currently open for booking, in display order."""
        courts = [court for court in self.ledger.courts.values() if court.is_bookable]
        return sorted(courts, key=lambda c: (c.display_order or c.id, c.id))

    # ========== Mutations ==========

    async def create_booking(
        self,
        request: BookingCreate,
        staff_id: Optional[str],
        now: Optional[datetime] = None,
    ) -> Booking:
        booking = self.ledger.create(request, staff_id, now or local_now())
        try:
            await self.client.create_booking(booking)
        except DataSourceError as e:
            self.ledger.restore(booking, None)
            logger.error(f"Failed to persist booking {booking.id}: {e}")
            raise SyncError(f"Booking {booking.id} was not saved: {e}") from e
        return booking

    async def create_group_booking(
        self,
        request: BookingCreate,
        courts: List[int],
        staff_id: Optional[str],
        now: Optional[datetime] = None,
    ) -> List[Booking]:
        bookings = self.ledger.create_multi_court(request, courts, staff_id, now or local_now())
        try:
            await self.client.create_bookings(bookings)
        except DataSourceError as e:
            for booking in bookings:
                self.ledger.restore(booking, None)
            logger.error(f"Failed to persist group {bookings[0].group_id}: {e}")
            raise SyncError(f"Group {bookings[0].group_id} was not saved: {e}") from e
        return bookings

    async def update_booking(
        self,
        booking_id: str,
        changes: dict,
        now: Optional[datetime] = None,
        day: Optional[date] = None,
    ) -> Booking:
        previous = self.ledger.get(booking_id, day)
        updated = self.ledger.update(booking_id, changes, now or local_now(), day)
        payload = {key: getattr(updated, key) for key in changes}
        payload["modified_at"] = updated.modified_at
        await self._persist(
            self.client.update_booking(booking_id, payload), updated, previous
        )
        return updated

    async def check_in(
        self,
        booking_id: str,
        staff_id: Optional[str],
        now: Optional[datetime] = None,
        day: Optional[date] = None,
    ) -> Booking:
        previous = self.ledger.get(booking_id, day)
        updated = self.ledger.check_in(booking_id, staff_id, now or local_now(), day)
        await self._persist(self.client.check_in(updated), updated, previous)
        return updated

    def suggest_refund(
        self,
        booking_id: str,
        reason: str,
        now: Optional[datetime] = None,
        day: Optional[date] = None,
    ) -> RefundSuggestion:
        return self.ledger.suggest_refund(booking_id, reason, now or local_now(), day)

    async def cancel_booking(
        self,
        booking_id: str,
        staff_id: Optional[str],
        reason: str,
        now: Optional[datetime] = None,
        refund_status: Optional[RefundStatus] = None,
        refund_amount: Optional[float] = None,
        refund_note: Optional[str] = None,
        day: Optional[date] = None,
    ) -> Booking:
        previous = self.ledger.get(booking_id, day)
        updated = self.ledger.cancel(
            booking_id,
            staff_id,
            reason,
            now or local_now(),
            refund_status=refund_status,
            refund_amount=refund_amount,
            refund_note=refund_note,
            day=day,
        )
        await self._persist(self.client.cancel_booking(updated), updated, previous)
        return updated

    async def mark_no_show(
        self,
        booking_id: str,
        staff_id: Optional[str],
        now: Optional[datetime] = None,
        day: Optional[date] = None,
    ) -> Booking:
        previous = self.ledger.get(booking_id, day)
        updated = self.ledger.mark_no_show(booking_id, staff_id, now or local_now(), day)
        await self._persist(self.client.mark_no_show(updated), updated, previous)
        return updated

    async def _persist(self, write, updated: Booking, previous: Booking) -> None:
        try:
            await write
        except DataSourceError as e:
            self.ledger.restore(updated, previous)
            logger.error(f"Failed to persist booking {updated.id}, change rolled back: {e}")
            raise SyncError(f"Booking {updated.id} was not saved: {e}") from e
