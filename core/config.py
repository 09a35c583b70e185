"""
Configuration constants and environment setup.
"""

import os

from dotenv import load_dotenv

load_dotenv()


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, str(default))
    try:
        return int(raw)
    except ValueError as e:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from e


# =============================================================================
# CALENDAR CONFIGURATION
# =============================================================================

# pytz zone name used as the "local" calendar; empty means use the tzinfo of
# the datetimes passed in (naive datetimes stay naive)
TIMEZONE = os.environ.get("PLANNER_TIMEZONE", "")

# date.weekday() numbering: Monday=0 ... Sunday=6
WEEK_START = _env_int("PLANNER_WEEK_START", 6)

# =============================================================================
# CONFLICT DETECTION
# =============================================================================

DEFAULT_BUFFER_MINUTES = _env_int("PLANNER_BUFFER_MINUTES", 15)
HARD_OVERLAP_RATIO = 0.5

# =============================================================================
# SLOT SEARCH
# =============================================================================

SLOT_INCREMENT_MINUTES = 15
MAX_SLOT_SUGGESTIONS = 3
SUGGESTION_START_HOUR = 9
SUGGESTION_END_HOUR = 17
SEARCH_DAYS = 7
PREFERRED_START_HOUR = 8
PREFERRED_END_HOUR = 20

# =============================================================================
# QUICK ADD
# =============================================================================

DEFAULT_EVENT_DURATION_MINUTES = 60

# =============================================================================
# HIGHLIGHTS
# =============================================================================

STREAK_MILESTONES = (3, 7, 14, 30, 50, 100)
SEASONAL_BASE_THRESHOLD = 7  # randint(1, 10) <= threshold keeps the canonical prompt
RECENT_MOOD_WINDOW = 10

# =============================================================================
# LOGGING
# =============================================================================

LOG_LEVEL = os.environ.get("PLANNER_LOG_LEVEL", "WARNING")
