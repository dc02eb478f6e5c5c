"""
Spreadsheet-backed booking store.

Reads come from the published CSV export of each sheet tab; writes are JSON
POSTs to the Apps Script web app bound to the spreadsheet:

    POST {apps_script_url}
    {"action": "createBooking", "booking": {...}}

Everything read from the sheet is text. Rows are normalized here (court
numbers, flags, amounts, dates and times) so the scheduling core only ever
sees validated models. Rows that cannot be parsed are skipped and logged.
"""

import csv
import io
import re
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional, Tuple

import httpx
from pydantic import ValidationError as ModelValidationError

from config import settings
from models.booking import Booking, BookingType
from models.court import Closure, Court
from utils.constants import MAX_NAME_LENGTH
from utils.datetime_utils import local_now, parse_date, parse_iso_datetime, to_iso_string
from utils.exceptions import DataSourceError, SyncError
from utils.logging_config import get_logger
from utils.time_grid import normalize_time
from utils.validation import (
    blank_to_none,
    parse_amount,
    parse_bool,
    parse_court_id,
    sanitize_text,
)

logger = get_logger(__name__)

# Sheet column -> Booking field, where they differ
BOOKING_COLUMNS = {
    "booking_id": "id",
    "court_number": "court",
    "type": "booking_type",
}
COURT_COLUMNS = {
    "court_id": "id",
    "court_number": "id",
    "court_name": "name",
}
CLOSURE_COLUMNS = {
    "court_number": "court",
    "start_time": "time_start",
    "end_time": "time_end",
}
_DATETIME_FIELDS = ("created_at", "modified_at", "cancelled_at", "checked_in_at")


def normalize_header(header: str) -> str:
    """'Time Start' -> 'time_start'."""
    return re.sub(r"\s+", "_", header.strip().lower())


def parse_csv(text: str) -> List[Dict[str, str]]:
    """
    Parse CSV text into row dicts keyed by normalized header.

    Blank lines are skipped and missing trailing cells read as "".
    """
    reader = csv.reader(io.StringIO(text.strip()))
    try:
        headers = [normalize_header(h) for h in next(reader)]
    except StopIteration:
        return []

    rows = []
    for values in reader:
        if not any(value.strip() for value in values):
            continue
        padded = values + [""] * (len(headers) - len(values))
        rows.append({key: padded[i].strip() for i, key in enumerate(headers)})
    return rows


def _rename(row: Dict[str, Any], columns: Dict[str, str]) -> Dict[str, Any]:
    renamed = {}
    for key, value in row.items():
        renamed[columns.get(key, key)] = value
    return renamed


def row_to_booking(row: Dict[str, Any]) -> Booking:
    """
    Convert a bookings sheet row to a Booking.

    Raises:
        ValueError: If a required field is missing or invalid
    """
    item = {key: blank_to_none(value) for key, value in _rename(row, BOOKING_COLUMNS).items()}

    for field in ("id", "date", "court", "time_start", "time_end"):
        if item.get(field) is None:
            raise ValueError(f"missing {field}")

    item["date"] = parse_date(item["date"])
    item["court"] = parse_court_id(item["court"])
    item["time_start"] = normalize_time(item["time_start"])
    item["time_end"] = normalize_time(item["time_end"])
    item["booking_type"] = (item.get("booking_type") or BookingType.OPEN.value).strip().lower()
    item["status"] = (item.get("status") or "active").strip().lower()
    item["checked_in"] = parse_bool(item.get("checked_in"))
    item["payment_amount"] = parse_amount(item.get("payment_amount"))
    item["refund_amount"] = parse_amount(item.get("refund_amount"))
    item["payment_status"] = (item.get("payment_status") or "pending").strip().lower()
    if item.get("refund_status"):
        item["refund_status"] = item["refund_status"].strip().lower()

    for field in _DATETIME_FIELDS:
        if item.get(field):
            item[field] = parse_iso_datetime(item[field])

    if item.get("customer_name"):
        item["customer_name"] = sanitize_text(item["customer_name"], MAX_NAME_LENGTH)
    if item.get("notes"):
        item["notes"] = sanitize_text(item["notes"])

    return Booking.model_validate(item)


def row_to_court(row: Dict[str, Any]) -> Court:
    """
    Convert a courts sheet row to a Court.

    Raises:
        ValueError: If the court number is missing or invalid
    """
    item = {key: blank_to_none(value) for key, value in _rename(row, COURT_COLUMNS).items()}
    if item.get("id") is None:
        raise ValueError("missing court id")

    item["id"] = parse_court_id(item["id"])
    item["status"] = (item.get("status") or "available").strip().lower()
    if item.get("display_order") is not None:
        item["display_order"] = int(str(item["display_order"]).strip())
    return Court.model_validate(item)


def row_to_closure(row: Dict[str, Any]) -> Closure:
    """
    Convert a closures sheet row to a Closure.

    ``court`` is a court number or "all"; blank times cover the whole day.
    Only rows with a truthy ``is_active`` are active.

    Raises:
        ValueError: If the date is missing or a value is invalid
    """
    item = {key: blank_to_none(value) for key, value in _rename(row, CLOSURE_COLUMNS).items()}
    if item.get("date") is None:
        raise ValueError("missing date")

    item["date"] = parse_date(item["date"])
    item["is_active"] = parse_bool(item.get("is_active"))
    for field in ("time_start", "time_end"):
        if item.get(field) is None:
            item.pop(field, None)
    if item.get("reason"):
        item["reason"] = sanitize_text(item["reason"], MAX_NAME_LENGTH)
    return Closure.model_validate(item)


def booking_to_payload(booking: Booking) -> Dict[str, Any]:
    """Serialize a booking for the Apps Script endpoint (sheet column names)."""
    data = booking.model_dump(mode="json")
    data["booking_id"] = data.pop("id")
    data["time_start"] = f"{booking.time_start:%H:%M}"
    data["time_end"] = f"{booking.time_end:%H:%M}"
    data["checked_in"] = "TRUE" if booking.checked_in else "FALSE"
    for field in _DATETIME_FIELDS:
        data[field] = to_iso_string(getattr(booking, field))
    return data


class SheetsClient:
    """
    Client for the spreadsheet booking store.

    Keeps a short-lived in-memory cache of parsed snapshots so that repeated
    reads within ``cache_ttl_seconds`` do not hit the network.
    """

    def __init__(
        self,
        bookings_url: Optional[str] = None,
        courts_url: Optional[str] = None,
        closures_url: Optional[str] = None,
        apps_script_url: Optional[str] = None,
        timeout: Optional[float] = None,
        cache_ttl_seconds: Optional[int] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.bookings_url = bookings_url or settings.bookings_csv_url
        self.courts_url = courts_url or settings.courts_csv_url
        self.closures_url = closures_url or settings.closures_csv_url
        self.apps_script_url = apps_script_url or settings.apps_script_url
        self.http_client = http_client or httpx.AsyncClient(
            timeout=timeout or settings.http_timeout_seconds,
            follow_redirects=True,
        )

        # Format: {cache_key: (data, expiry_time)}
        self._cache: Dict[str, Tuple[Any, datetime]] = {}
        ttl = settings.cache_ttl_seconds if cache_ttl_seconds is None else cache_ttl_seconds
        self._cache_ttl = timedelta(seconds=ttl)

    async def close(self) -> None:
        await self.http_client.aclose()

    # ========== Cache Helpers ==========

    def _get_from_cache(self, key: str) -> Optional[Any]:
        """Get value from cache if not expired."""
        if key not in self._cache:
            return None

        data, expiry = self._cache[key]
        if local_now() > expiry:
            del self._cache[key]
            return None

        return data

    def _set_cache(self, key: str, value: Any) -> None:
        self._cache[key] = (value, local_now() + self._cache_ttl)

    def _clear_cache(self, key: Optional[str] = None) -> None:
        if key is None:
            self._cache.clear()
        else:
            self._cache.pop(key, None)

    # ========== Reads ==========

    async def _fetch_rows(self, url: Optional[str], name: str) -> List[Dict[str, str]]:
        if not url:
            raise DataSourceError(f"No CSV endpoint configured for {name}")

        try:
            response = await self.http_client.get(url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise DataSourceError(f"Failed to fetch {name}: {e}") from e

        rows = parse_csv(response.text)
        logger.debug(f"Fetched {len(rows)} {name} rows")
        return rows

    async def fetch_bookings(self, refresh: bool = False) -> List[Booking]:
        """Fetch and parse the bookings sheet."""
        if not refresh:
            cached = self._get_from_cache("bookings")
            if cached is not None:
                return cached

        rows = await self._fetch_rows(self.bookings_url, "bookings")
        bookings = []
        for line, row in enumerate(rows, start=2):
            try:
                bookings.append(row_to_booking(row))
            except (ValueError, ModelValidationError) as e:
                logger.warning(f"Skipping bookings row {line}: {e}")

        self._set_cache("bookings", bookings)
        return bookings

    async def fetch_courts(self, refresh: bool = False) -> List[Court]:
        """Fetch and parse the courts sheet."""
        if not refresh:
            cached = self._get_from_cache("courts")
            if cached is not None:
                return cached

        rows = await self._fetch_rows(self.courts_url, "courts")
        courts = []
        for line, row in enumerate(rows, start=2):
            try:
                courts.append(row_to_court(row))
            except (ValueError, ModelValidationError) as e:
                logger.warning(f"Skipping courts row {line}: {e}")

        self._set_cache("courts", courts)
        return courts

    async def fetch_closures(self, refresh: bool = False) -> List[Closure]:
        """
        Fetch and parse the closures sheet, keeping active closures only.

        The closures tab is optional; without an endpoint there are none.
        """
        if not self.closures_url:
            logger.debug("No closures endpoint configured")
            return []

        if not refresh:
            cached = self._get_from_cache("closures")
            if cached is not None:
                return cached

        rows = await self._fetch_rows(self.closures_url, "closures")
        closures = []
        for line, row in enumerate(rows, start=2):
            try:
                closure = row_to_closure(row)
            except (ValueError, ModelValidationError) as e:
                logger.warning(f"Skipping closures row {line}: {e}")
                continue
            if closure.is_active:
                closures.append(closure)

        self._set_cache("closures", closures)
        return closures

    # ========== Writes ==========

    async def _call(self, action: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Send a write action to the Apps Script endpoint.

        Returns:
            Parsed JSON response, or a simulated success when no endpoint
            is configured

        Raises:
            SyncError: On transport errors or an unsuccessful response
        """
        self._clear_cache("bookings")

        if not self.apps_script_url:
            logger.warning(f"Apps Script URL not configured; {action} simulated")
            return {"success": True, "simulated": True}

        try:
            response = await self.http_client.post(
                self.apps_script_url, json={"action": action, **payload}
            )
            response.raise_for_status()
            result = response.json()
        except httpx.HTTPError as e:
            raise SyncError(f"{action} failed: {e}") from e
        except ValueError as e:
            raise SyncError(f"{action} returned invalid JSON: {e}") from e

        if isinstance(result, dict) and result.get("success") is False:
            raise SyncError(f"{action} rejected: {result.get('error', 'unknown error')}")

        logger.info(f"{action} saved")
        return result

    async def create_booking(self, booking: Booking) -> Dict[str, Any]:
        return await self._call("createBooking", {"booking": booking_to_payload(booking)})

    async def create_bookings(self, bookings: List[Booking]) -> Dict[str, Any]:
        """Create a multi-court booking in one call."""
        return await self._call(
            "createBooking", {"booking": [booking_to_payload(b) for b in bookings]}
        )

    async def update_booking(self, booking_id: str, updates: Dict[str, Any]) -> Dict[str, Any]:
        serialized = {}
        for key, value in updates.items():
            if isinstance(value, datetime):
                serialized[key] = to_iso_string(value)
            elif hasattr(value, "isoformat"):
                serialized[key] = value.isoformat()
            else:
                serialized[key] = getattr(value, "value", value)
        return await self._call("updateBooking", {"bookingId": booking_id, "updates": serialized})

    async def check_in(self, booking: Booking) -> Dict[str, Any]:
        return await self._call(
            "checkIn",
            {
                "bookingId": booking.id,
                "staffInitials": booking.checked_in_by,
                "checkedInAt": to_iso_string(booking.checked_in_at),
            },
        )

    async def cancel_booking(self, booking: Booking) -> Dict[str, Any]:
        return await self._call(
            "cancelBooking",
            {
                "bookingId": booking.id,
                "cancelData": {
                    "reason": booking.cancel_reason,
                    "refund_status": booking.refund_status,
                    "refund_amount": booking.refund_amount,
                    "refund_note": booking.refund_note,
                    "cancelled_by": booking.cancelled_by,
                    "cancelled_at": to_iso_string(booking.cancelled_at),
                },
            },
        )

    async def mark_no_show(self, booking: Booking) -> Dict[str, Any]:
        return await self._call(
            "markNoShow",
            {
                "bookingId": booking.id,
                "staffInitials": booking.cancelled_by,
                "markedAt": to_iso_string(booking.cancelled_at),
            },
        )


# Global client instance
_db_client: Optional[SheetsClient] = None


def get_db_client() -> SheetsClient:
    """Get or create the booking store client."""
    global _db_client
    if _db_client is None:
        _db_client = SheetsClient()
    return _db_client
