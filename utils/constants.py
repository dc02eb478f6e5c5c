"""
Application-wide constants.
Centralizes magic numbers and fixed values of the court schedule.
"""

# Courts
TOTAL_COURTS = 17
STADIUM_COURT_NUMBER = 17

# Booking identifiers (DDCC-HHMM)
BOOKING_ID_LENGTH = 9

# Team bookings: flat rates kick in at these court counts
TEAM_FIVE_COURTS = 5
TEAM_THREE_COURTS = 3

# Contractor volume tiers (court hours)
GROUP_50_HOURS = 50
GROUP_10_HOURS = 10

# Cancellation policy
DEFAULT_REFUND_WINDOW_HOURS = 24
DEFAULT_NO_SHOW_GRACE_MINUTES = 15

# Sheet parsing
TRUTHY_VALUES = frozenset({"true", "1", "yes", "y", "x"})
MAX_NOTES_LENGTH = 1000
MAX_NAME_LENGTH = 100
