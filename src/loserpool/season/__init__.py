"""Season clock and derived season state."""

from .clock import SeasonClock, SeasonState, ensure_utc
from .service import CURRENT_WEEK_KEY, SEASON_START_KEY, SeasonService

__all__ = [
    "CURRENT_WEEK_KEY",
    "SEASON_START_KEY",
    "SeasonClock",
    "SeasonService",
    "SeasonState",
    "ensure_utc",
]
