"""Shared builders for pool tests.

The season starts Monday 2025-08-04, which puts REG7 at 2025-10-06 .. 10-12.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Optional

from loserpool.matchups import MatchupStore
from loserpool.models import ExternalGame
from loserpool.persistence import MatchupRecord, PoolStore


SEASON_START = date(2025, 8, 4)

# Tuesday of REG7, before any REG7 kickoff.
REG7_TUESDAY = datetime(2025, 10, 7, 12, 0, tzinfo=timezone.utc)
REG7_THURSDAY_KICKOFF = datetime(2025, 10, 10, 0, 15, tzinfo=timezone.utc)
REG7_SUNDAY_EARLY = datetime(2025, 10, 12, 17, 0, tzinfo=timezone.utc)
REG7_SUNDAY_LATE = datetime(2025, 10, 12, 20, 25, tzinfo=timezone.utc)
REG8_SUNDAY = datetime(2025, 10, 19, 17, 0, tzinfo=timezone.utc)


def game(
    away: str,
    home: str,
    kickoff: datetime,
    *,
    label: str = "REG7",
    away_spread: Optional[float] = None,
    status: str = "scheduled",
    **extra: Any,
) -> ExternalGame:
    return ExternalGame(
        away_team=away,
        home_team=home,
        kickoff=kickoff,
        status=status,
        away_spread=away_spread,
        home_spread=-away_spread if away_spread is not None else None,
        season_label=label,
        **extra,
    )


def reg7_games() -> list[ExternalGame]:
    return [
        game("NYJ", "MIA", REG7_THURSDAY_KICKOFF, away_spread=2.5),
        game("KC", "BUF", REG7_SUNDAY_EARLY, away_spread=-3.5),
        game("DAL", "PHI", REG7_SUNDAY_LATE, away_spread=6.5),
    ]


def seed_reg7(store: PoolStore) -> dict[str, MatchupRecord]:
    """Sync the REG7 slate and return matchups keyed by away team."""

    MatchupStore(store).sync(reg7_games(), "REG", 7)
    return {matchup.away_team: matchup for matchup in store.list_matchups(season_label="REG7")}


def set_pick_status(store: PoolStore, pick_id: str, status: str) -> None:
    with store.transaction() as conn:
        conn.execute("UPDATE picks SET status = ? WHERE id = ?", (status, pick_id))


def espn_event(
    event_id: str,
    away: str,
    home: str,
    kickoff: str,
    *,
    state: str = "pre",
    away_line: Optional[str] = None,
    home_line: Optional[str] = None,
    away_score: Optional[str] = None,
    home_score: Optional[str] = None,
    venue: str = "Stadium",
) -> dict:
    odds = []
    if away_line is not None or home_line is not None:
        odds.append(
            {
                "details": "",
                "pointSpread": {
                    "away": {"close": {"line": away_line}},
                    "home": {"close": {"line": home_line}},
                },
            }
        )
    return {
        "id": event_id,
        "date": kickoff,
        "competitions": [
            {
                "date": kickoff,
                "venue": {"fullName": venue},
                "status": {"type": {"state": state}},
                "odds": odds,
                "competitors": [
                    {"homeAway": "home", "team": {"abbreviation": home}, "score": home_score or "0"},
                    {"homeAway": "away", "team": {"abbreviation": away}, "score": away_score or "0"},
                ],
            }
        ],
    }
