"""Periodic refresh of the booking snapshot."""

from .refresh import refresh_snapshot, setup_scheduler, shutdown_scheduler

__all__ = ["setup_scheduler", "refresh_snapshot", "shutdown_scheduler"]
