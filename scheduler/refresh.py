"""
Snapshot refresh using APScheduler.
Reloads bookings and courts from the sheet on a fixed interval so that
availability checks run against recent data.
"""

from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from config import settings
from scheduling.service import BookingService
from utils.logging_config import get_logger

logger = get_logger(__name__)

REFRESH_JOB_ID = "refresh_bookings"

scheduler = AsyncIOScheduler()

# Service instance - injected via setup_scheduler
_service: Optional[BookingService] = None


def set_service(service: BookingService) -> None:
    """Set the booking service whose snapshot gets refreshed."""
    global _service
    _service = service
    logger.info("Booking service set for scheduler")


async def refresh_snapshot() -> bool:
    """
    Reload the booking snapshot.

    Returns:
        True if the snapshot was refreshed, False otherwise
    """
    if not _service:
        logger.error("Booking service not available - cannot refresh")
        return False

    try:
        refreshed = await _service.refresh()
    except Exception as e:
        logger.error(f"Unexpected error refreshing bookings: {e}", exc_info=True)
        return False

    if refreshed:
        logger.debug(f"Snapshot refreshed: {len(_service.ledger)} bookings")
    return refreshed


def setup_scheduler(
    service: Optional[BookingService] = None, interval_seconds: Optional[int] = None
) -> None:
    """Setup and start the scheduler.

    Args:
        service: Optional service to inject. If None, must be set later via set_service()
        interval_seconds: Refresh interval; defaults to settings.refresh_interval_seconds
    """
    if service:
        set_service(service)

    seconds = interval_seconds or settings.refresh_interval_seconds
    scheduler.add_job(
        refresh_snapshot,
        trigger=IntervalTrigger(seconds=seconds),
        id=REFRESH_JOB_ID,
        name="Refresh booking snapshot",
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )

    scheduler.start()
    logger.info(f"Scheduler started (refresh every {seconds}s)")


def shutdown_scheduler() -> None:
    """Shutdown the scheduler if it is running."""
    if not scheduler.running:
        return
    scheduler.shutdown()
    logger.info("Scheduler stopped")
