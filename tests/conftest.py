"""
Pytest configuration and shared fixtures.
"""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from models.court import Court
from models.pricing import RateSchedule
from pricing.engine import PricingEngine
from pricing.refunds import RefundPolicy
from scheduling.ledger import BookingLedger


@pytest.fixture
def now():
    """A fixed 'now' the week before the sample bookings."""
    return datetime(2024, 12, 10, 12, 0)


@pytest.fixture
def engine():
    return PricingEngine(RateSchedule())


@pytest.fixture
def ledger(engine):
    return BookingLedger(engine=engine, refund_policy=RefundPolicy())


@pytest.fixture
def courts():
    return [Court(id=n) for n in range(1, 18)]


@pytest.fixture
def mock_store():
    """Mock booking store client."""
    client = MagicMock()
    client.fetch_bookings = AsyncMock(return_value=[])
    client.fetch_courts = AsyncMock(return_value=[])
    client.fetch_closures = AsyncMock(return_value=[])
    client.create_booking = AsyncMock(return_value={"success": True})
    client.create_bookings = AsyncMock(return_value={"success": True})
    client.update_booking = AsyncMock(return_value={"success": True})
    client.check_in = AsyncMock(return_value={"success": True})
    client.cancel_booking = AsyncMock(return_value={"success": True})
    client.mark_no_show = AsyncMock(return_value={"success": True})
    return client
