"""
Custom exception classes for the scheduler.
Provides specific error types instead of generic exceptions.
"""


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass


class SchedulingError(Exception):
    """Base exception for booking lifecycle operations."""

    pass


class InvalidIntervalError(SchedulingError, ValidationError):
    """Raised when an end time is not after its start time."""

    pass


class BookingNotFoundError(SchedulingError):
    """Raised when a booking is not found."""

    pass


class BookingConflictError(SchedulingError):
    """Raised when a court is already booked for the requested time."""

    def __init__(self, message: str, conflicts=None):
        super().__init__(message)
        self.conflicts = list(conflicts or [])


class CourtClosedError(SchedulingError):
    """Raised when the requested time falls in a court closure."""

    def __init__(self, message: str, closures=None):
        super().__init__(message)
        self.closures = list(closures or [])


class InvalidTransitionError(SchedulingError):
    """Raised when a booking cannot move to the requested status."""

    pass


class DataSourceError(Exception):
    """Base exception for the external booking store."""

    pass


class SyncError(DataSourceError):
    """Raised when a change cannot be persisted to the booking store."""

    pass
