"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

ROLLING_WINDOW_DAYS = 90
MAX_DISCIPLINE_POINTS = 18
AT_RISK_POINTS = 14
EXPIRING_SOON_DAYS = 30

DEFAULT_ACTION_LIST_LIMIT = 50
DEFAULT_HISTORY_LIMIT = 100
RECENT_HISTORY_LIMIT = 10
RECENT_ACTIONS_DAYS = 7

VOID_REASON_MIN_LENGTH = 10
SIGNATURE_DATA_PREFIX = "data:image/"

DEFAULT_CONSEQUENCES_TEXT = (
    "Further violations may result in additional disciplinary action up to and "
    "including termination of employment."
)

DEFAULT_SESSION_DAYS = 7
