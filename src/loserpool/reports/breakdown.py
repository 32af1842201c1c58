"""Per-team pick counts for one week."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from loserpool.config.weeks import slot_for_label
from loserpool.persistence import PoolStore


@dataclass(frozen=True)
class TeamPickCount:
    matchup_id: str
    team: str
    opponent: str
    total: int
    active: int
    eliminated: int
    defaults: int


def team_pick_breakdown(store: PoolStore, label: str) -> List[TeamPickCount]:
    """Count how many picks sit on each team of ``label``'s matchups.

    Teams nobody picked are listed with zero counts, most-picked first.
    """

    slot = slot_for_label(label)
    matchups = store.list_matchups(season_label=label)
    counts: Dict[Tuple[str, str], Dict[str, int]] = {}
    opponents: Dict[Tuple[str, str], str] = {}
    for matchup in matchups:
        for team, opponent in ((matchup.away_team, matchup.home_team), (matchup.home_team, matchup.away_team)):
            key = (matchup.matchup_id, team)
            counts[key] = {"total": 0, "active": 0, "eliminated": 0, "defaults": 0}
            opponents[key] = opponent

    for pick in store.list_picks():
        allocation = pick.allocations.get(slot)
        if allocation is None:
            continue
        entry = counts.get((allocation.matchup_id, allocation.team))
        if entry is None:
            continue
        entry["total"] += 1
        if pick.status in ("active", "eliminated"):
            entry[pick.status] += 1
        if allocation.is_default:
            entry["defaults"] += 1

    rows = [
        TeamPickCount(
            matchup_id=matchup_id,
            team=team,
            opponent=opponents[(matchup_id, team)],
            total=data["total"],
            active=data["active"],
            eliminated=data["eliminated"],
            defaults=data["defaults"],
        )
        for (matchup_id, team), data in counts.items()
    ]
    rows.sort(key=lambda row: (-row.total, row.team))
    return rows
