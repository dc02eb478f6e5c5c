"""
Unit tests for application wiring.
"""

from datetime import datetime

from app import build_service, daily_summary
from config import Settings
from models.court import Closure, Court
from scheduling.ledger import BookingLedger
from scheduling.service import BookingService
from tests.factories import make_booking


def test_build_service_uses_settings():
    config = Settings(
        rate_prime=14.0,
        refund_window_hours=48,
        total_courts=12,
        bookings_csv_url="https://example.com/bookings.csv",
        courts_csv_url="https://example.com/courts.csv",
        closures_csv_url="https://example.com/closures.csv",
        cache_ttl_seconds=5,
    )

    service = build_service(config)

    assert service.ledger.engine.schedule.prime == 14.0
    assert service.ledger.refund_policy.window_hours == 48
    assert service.ledger.total_courts == 12
    assert service.client.bookings_url == "https://example.com/bookings.csv"
    assert service.client.closures_url == "https://example.com/closures.csv"
    assert service.client._cache_ttl.total_seconds() == 5


def test_daily_summary(mock_store):
    ledger = BookingLedger(
        [make_booking(), make_booking("1606-0900", court=6, checked_in=True)],
        courts=[Court(id=5), Court(id=6), Court(id=7, status="closed")],
        closures=[Closure(date="2024-12-16", court=6, time_start="20:00", reason="Clinic")],
    )
    service = BookingService(mock_store, ledger)

    summary = daily_summary(service, datetime(2024, 12, 16, 10, 30), Settings())

    assert summary["stats"].total == 2
    assert summary["stats"].checked_in == 1
    # 25 half-hour slots; each 9:00-10:00 booking takes two, the closure two more
    assert summary["open_slots"] == {5: 23, 6: 21}
    assert [c.reason for c in summary["closures"]] == ["Clinic"]
    assert [b.id for b in summary["no_show_candidates"]] == ["1605-0900"]
