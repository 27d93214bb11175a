"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

QUARTERS = (1, 2, 3, 4)
YEAR_END_KEY = "year-end"
ANY_QUARTER_KEY = "any"
DEFAULT_PERMISSION_LIST_LIMIT = 500
