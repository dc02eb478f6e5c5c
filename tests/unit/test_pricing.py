"""
Unit tests for the pricing engine.
"""

from datetime import time

import pytest

from models.booking import BookingType
from models.pricing import PricingContext, RateSchedule
from pricing.engine import PricingCase, PricingEngine, classify
from tests.factories import MONDAY, SATURDAY, make_booking
from utils.exceptions import InvalidIntervalError


def test_open_play_non_prime(engine):
    quote = engine.quote("open", MONDAY, time(9, 0), time(10, 0))

    assert quote.total == 10.0
    assert quote.rate_per_block == 10.0
    assert quote.is_prime_time is False
    assert quote.description == "Non-Prime Rate"
    assert quote.duration == 1.0


def test_open_play_prime_evening(engine):
    quote = engine.quote(BookingType.OPEN, MONDAY, time(17, 0), time(18, 0))

    assert quote.total == 12.0
    assert quote.is_prime_time is True
    assert quote.description == "Prime Time Rate"


def test_open_play_weekend_is_prime(engine):
    assert engine.quote("open", SATURDAY, time(9, 0), time(10, 0)).total == 12.0


def test_open_play_charges_one_block_regardless_of_length(engine):
    quote = engine.quote("open", MONDAY, time(17, 0), time(19, 0))

    assert quote.total == 12.0
    # 12 for the first 1.5h block plus 0.5h at 12 per block
    assert quote.blended_total == 16.0


def test_youth_is_free(engine):
    quote = engine.quote(
        "open", SATURDAY, time(9, 0), time(10, 0), PricingContext(is_youth=True)
    )

    assert quote.total == 0
    assert quote.description == "Youth (16 & under) - Free"


@pytest.mark.parametrize("booking_type", ["maintenance", "hold"])
def test_free_types(engine, booking_type):
    quote = engine.quote(booking_type, MONDAY, time(9, 0), time(12, 0))

    assert quote.total == 0
    assert quote.description == "No charge"


@pytest.mark.parametrize(
    "courts,total",
    [(5, 50.0), (8, 50.0), (3, 30.0), (4, 30.0)],
)
def test_team_flat_rates(engine, courts, total):
    quote = engine.quote(
        "team_usta", MONDAY, time(18, 0), time(21, 0), PricingContext(court_count=courts)
    )

    assert quote.total == total
    assert f"{courts} courts" in quote.description


def test_team_on_few_courts_falls_back_to_open_play(engine):
    quote = engine.quote(
        "team_hs", MONDAY, time(9, 0), time(10, 0), PricingContext(court_count=2)
    )

    assert quote.total == 10.0
    assert quote.description.startswith("Non-Prime Rate (Team with 2 court(s)")


@pytest.mark.parametrize(
    "total_hours,expected",
    [(60, 8.0), (50, 8.0), (12, 9.0), (None, 20.0), (0, 20.0)],
)
def test_contractor_volume_tiers(engine, total_hours, expected):
    quote = engine.quote(
        "contractor",
        MONDAY,
        time(9, 0),
        time(11, 0),
        PricingContext(total_hours=total_hours),
    )

    assert quote.total == expected
    assert quote.description.startswith("Contractor rate: $")


def test_tournament_is_contract_priced(engine):
    quote = engine.quote("tournament", SATURDAY, time(8, 30), time(21, 0))

    assert quote.total == 0
    assert quote.description == "Tournament - See contract"


def test_unknown_type_priced_as_open_play_with_note(engine):
    quote = engine.quote("ball_machine", MONDAY, time(9, 0), time(10, 0))

    assert quote.total == 10.0
    assert "review pricing" in quote.description


def test_quote_rejects_inverted_interval(engine):
    with pytest.raises(InvalidIntervalError):
        engine.quote("open", MONDAY, time(10, 0), time(9, 0))


def test_custom_rate_schedule():
    engine = PricingEngine(RateSchedule(prime=15.0, non_prime=11.0))

    assert engine.quote("open", SATURDAY, time(9, 0), time(10, 0)).total == 15.0
    assert engine.quote("open", MONDAY, time(9, 0), time(10, 0)).total == 11.0


def test_classify_precedence():
    # Free types win over the youth flag; youth wins over team pricing
    assert classify("hold", PricingContext(is_youth=True)) == PricingCase("free")
    assert classify("team_usta", PricingContext(is_youth=True, court_count=5)) == PricingCase(
        "youth"
    )
    assert classify("team_usta", PricingContext()) == PricingCase("team_fallback", 1)


def test_estimate_contractor_invoice(engine):
    bookings = [
        make_booking(
            f"{day:02d}01-0900",
            day=MONDAY.replace(day=day),
            court=1,
            end=time(12, 0),
            booking_type="contractor",
            entity_id="C-1",
        )
        for day in range(16, 20)
    ]

    invoice = engine.estimate_contractor_invoice(bookings)

    assert invoice.total_hours == 12.0
    assert invoice.rate == 4.5
    assert invoice.total == 54.0
    assert invoice.booking_count == 4
    assert invoice.tier == "10+ hours"


def test_estimate_small_contractor_invoice(engine):
    invoice = engine.estimate_contractor_invoice(
        [make_booking(booking_type="contractor", entity_id="C-1")]
    )

    assert invoice.rate == 10.0
    assert invoice.total == 10.0
    assert invoice.tier == "Standard"


def test_tuesday_prime_boundary(engine):
    tuesday = MONDAY.replace(day=17)

    morning = engine.quote("open", tuesday, time(10, 0), time(11, 0))
    evening = engine.quote("open", tuesday, time(18, 0), time(19, 0))

    assert (morning.is_prime_time, morning.total) == (False, 10.0)
    assert (evening.is_prime_time, evening.total) == (True, 12.0)
