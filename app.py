"""
Main entry point for the Court Scheduler.
Loads the booking snapshot from the spreadsheet and keeps it fresh.
"""

import asyncio
import sys
from datetime import datetime
from typing import Any, Dict, Optional

from config import Settings, settings
from db.sheets_client import SheetsClient
from pricing.engine import PricingEngine
from pricing.refunds import RefundPolicy
from scheduler import setup_scheduler, shutdown_scheduler
from scheduling.ledger import BookingLedger
from scheduling.service import BookingService
from utils.datetime_utils import local_now
from utils.logging_config import setup_logging
from utils.time_grid import slot_lattice

logger = setup_logging(
    name=__name__,
    log_level=settings.log_level,
    log_file=settings.log_file or "scheduler.log",
    log_dir=settings.log_dir,
)


def build_service(config: Optional[Settings] = None) -> BookingService:
    """Wire the ledger, engines and sheet client from settings."""
    config = config or settings
    ledger = BookingLedger(
        engine=PricingEngine(config.rate_schedule()),
        refund_policy=RefundPolicy(window_hours=config.refund_window_hours),
        total_courts=config.total_courts,
    )
    client = SheetsClient(
        bookings_url=config.bookings_csv_url,
        courts_url=config.courts_csv_url,
        closures_url=config.closures_csv_url,
        apps_script_url=config.apps_script_url,
        timeout=config.http_timeout_seconds,
        cache_ttl_seconds=config.cache_ttl_seconds,
    )
    return BookingService(client, ledger)


def daily_summary(
    service: BookingService, now: datetime, config: Optional[Settings] = None
) -> Dict[str, Any]:
    """Today's stats, closures, open slots per bookable court and overdue check-ins."""
    config = config or settings
    today = now.date()
    slots = slot_lattice(config.day_start, config.day_end, config.slot_minutes)

    open_slots = {
        court.id: len(service.ledger.free_slots(today, court.id, slots))
        for court in service.available_courts()
    }
    no_shows = service.ledger.no_show_candidates(now, config.no_show_grace_minutes)
    closures = service.ledger.closures_for_date(today)

    stats = service.ledger.stats_for_date(today)
    logger.info(
        f"{config.facility_name} {today}: {stats.total} bookings, "
        f"{stats.checked_in} checked in, ${stats.revenue:.2f} booked"
    )
    for closure in closures:
        court = f"Court {closure.court}" if closure.court else "All courts"
        logger.info(
            f"{court} closed {closure.time_start:%H:%M}-{closure.time_end:%H:%M}: {closure.label}"
        )
    if no_shows:
        logger.warning(f"Possible no-shows: {', '.join(b.id for b in no_shows)}")

    return {
        "stats": stats,
        "closures": closures,
        "open_slots": open_slots,
        "no_show_candidates": no_shows,
    }


async def main() -> None:
    """Load the snapshot and keep it refreshed until stopped."""
    try:
        settings.validate_data_source()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    service = build_service()
    try:
        logger.info(f"Starting Court Scheduler ({settings.environment})...")
        await service.load()
        daily_summary(service, local_now())

        setup_scheduler(service)
        await asyncio.Event().wait()

    except asyncio.CancelledError:
        logger.info("Scheduler cancelled")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        raise  # Re-raise to ensure proper exit code
    finally:
        logger.info("Shutting down...")
        shutdown_scheduler()
        await service.client.close()
        logger.info("Shutdown complete")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(0)
