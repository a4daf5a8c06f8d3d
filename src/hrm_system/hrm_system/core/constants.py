"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_TIMEZONE = "Asia/Dhaka"

# datetime.weekday(): Monday=0 ... Friday=4
WEEK_END_WEEKDAY = 4

WEEK_KEY_FORMAT = "%Y-%m-%d"
MONTH_KEY_FORMAT = "%Y-%m"

SCORE_DECIMALS = 2
MONEY_DECIMALS = 2

DEFAULT_MONTH_OPTIONS = 12
