"""Translate league and feed vocabulary into the pool's phase/week/status terms."""

from __future__ import annotations

import logging
from typing import Tuple, Union

from loserpool.config.weeks import Phase, get_phase, phase_rules
from loserpool.errors import ValidationError


logger = logging.getLogger(__name__)

MATCHUP_STATUSES = ("scheduled", "in_progress", "final")

# ESPN scoreboard ``seasontype`` query values.
ESPN_SEASON_TYPES: dict[Phase, int] = {Phase.PRE: 1, Phase.REG: 2, Phase.POST: 3}

_STATUS_ALIASES: dict[str, str] = {
    "pre": "scheduled",
    "scheduled": "scheduled",
    "status_scheduled": "scheduled",
    "postponed": "scheduled",
    "delayed": "scheduled",
    "suspended": "scheduled",
    "canceled": "scheduled",
    "cancelled": "scheduled",
    "in": "in_progress",
    "live": "in_progress",
    "inprogress": "in_progress",
    "in_progress": "in_progress",
    "status_in_progress": "in_progress",
    "halftime": "in_progress",
    "post": "final",
    "final": "final",
    "f/ot": "final",
    "status_final": "final",
    "closed": "final",
}


def normalize_status(raw: str | None) -> str:
    """Map a feed status word onto scheduled / in_progress / final."""

    if not raw:
        return "scheduled"
    key = raw.strip().lower().replace(" ", "")
    status = _STATUS_ALIASES.get(key)
    if status is None:
        logger.warning("Unknown game status %r; treating as scheduled", raw)
        return "scheduled"
    return status


def phase_from_espn_season_type(value: Union[int, str]) -> Phase:
    try:
        number = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Unknown ESPN season type {value!r}") from None
    for phase, code in ESPN_SEASON_TYPES.items():
        if code == number:
            return phase
    raise ValidationError(f"Unknown ESPN season type {value!r}")


def espn_season_type(phase: Union[str, Phase]) -> int:
    return ESPN_SEASON_TYPES[get_phase(phase)]


def label_from_absolute_week(week: int) -> Tuple[Phase, int]:
    """Map a season-wide week number onto (phase, week).

    Some schedule sources number weeks continuously: 1-3 are preseason, 4-21
    the regular season and 22-25 the postseason.
    """

    if isinstance(week, bool) or not isinstance(week, int) or week < 1:
        raise ValidationError(f"Absolute week must be a positive integer, got {week!r}")
    remaining = week
    for phase in (Phase.PRE, Phase.REG, Phase.POST):
        weeks = phase_rules(phase).weeks
        if remaining <= weeks:
            return phase, remaining
        remaining -= weeks
    raise ValidationError(f"Absolute week {week} is past the end of the season")


def winner_side(away_score: int | None, home_score: int | None) -> str | None:
    """Return ``"away"``, ``"home"``, ``"tie"`` or None when scores are missing."""

    if away_score is None or home_score is None:
        return None
    if away_score > home_score:
        return "away"
    if home_score > away_score:
        return "home"
    return "tie"
