"""Input adapters that normalize league vocabulary and team names.

The HTTP feed client lives in :mod:`loserpool.ingest.schedule`.
"""

from .teams import NFL_TEAM_ALIAS_GROUPS, canonical_team, same_team
from .vocabulary import (
    MATCHUP_STATUSES,
    espn_season_type,
    label_from_absolute_week,
    normalize_status,
    phase_from_espn_season_type,
    winner_side,
)

__all__ = [
    "MATCHUP_STATUSES",
    "NFL_TEAM_ALIAS_GROUPS",
    "canonical_team",
    "espn_season_type",
    "label_from_absolute_week",
    "normalize_status",
    "phase_from_espn_season_type",
    "same_team",
    "winner_side",
]
