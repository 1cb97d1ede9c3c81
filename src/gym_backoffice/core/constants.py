"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_CUTOFF_TIME = "23:59:59"

# Human-facing numbers below this bound are looked up by number; anything
# else is treated as an internal reference.
MAX_HUMAN_ID = 100000

IMPORT_ERROR_LIMIT = 50
DEFAULT_PLAN_DURATION_DAYS = 30
