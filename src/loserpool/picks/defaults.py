"""Fill empty week slots once the weekly deadline has passed."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Union

from loserpool.config.weeks import Phase, get_phase, label_for, slot_for
from loserpool.errors import ValidationError
from loserpool.persistence import MatchupRecord, PoolStore
from loserpool.season import SeasonService, ensure_utc


logger = logging.getLogger("uvicorn.error")

DEFAULT_PICK_POLICIES = ("favorite", "underdog")
MARKER_PREFIX = "default_picks_assigned_"


@dataclass
class DefaultAssignmentResult:
    slot: str
    label: str
    picks_assigned: List[str] = field(default_factory=list)
    matchup_id: Optional[str] = None
    team: Optional[str] = None
    skipped_reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.skipped_reason is not None


def favored_team(matchup: MatchupRecord) -> str:
    """Team the line favors: away when the away spread is negative, else home."""

    away_line = matchup.away_spread
    if away_line is None and matchup.home_spread is not None:
        away_line = -matchup.home_spread
    if away_line is not None and away_line < 0:
        return matchup.away_team
    return matchup.home_team


def select_default_matchup(matchups: Sequence[MatchupRecord]) -> Optional[MatchupRecord]:
    """Largest absolute spread among scheduled games; earliest kickoff, then id, break ties."""

    candidates = [m for m in matchups if m.status == "scheduled" and m.has_spread]
    if not candidates:
        return None
    return min(candidates, key=lambda m: (-m.max_spread, m.kickoff, m.matchup_id))


class DefaultPickAssigner:
    def __init__(self, store: PoolStore, season: SeasonService, *, policy: str = "favorite"):
        if policy not in DEFAULT_PICK_POLICIES:
            raise ValidationError(f"Unknown default pick policy {policy!r}")
        self.store = store
        self.season = season
        self.policy = policy

    def team_for(self, matchup: MatchupRecord) -> str:
        favored = favored_team(matchup)
        if self.policy == "favorite":
            return favored
        return matchup.home_team if favored == matchup.away_team else matchup.away_team

    def assign_defaults(
        self,
        phase: Union[str, Phase, None] = None,
        week: Optional[int] = None,
        *,
        now: Optional[datetime] = None,
    ) -> DefaultAssignmentResult:
        now = ensure_utc(now or datetime.now(timezone.utc))
        if phase is None or week is None:
            state = self.season.current(now)
            phase = state.phase if phase is None else phase
            week = state.week if week is None else week
        resolved = get_phase(phase)
        label = label_for(resolved, week)
        slot = slot_for(resolved, week)
        result = DefaultAssignmentResult(slot=slot, label=label)

        matchups = self.store.list_matchups(season_label=label)
        if not matchups:
            result.skipped_reason = f"no matchups stored for {label}"
            return result
        scheduled = [matchup for matchup in matchups if matchup.status == "scheduled"]
        if not scheduled:
            result.skipped_reason = "no scheduled matchups left"
            return result
        # Games already under way or final no longer hold the deadline.
        deadline = min(matchup.kickoff for matchup in scheduled)
        if now < deadline:
            result.skipped_reason = "deadline not reached"
            return result
        chosen = select_default_matchup(scheduled)
        if chosen is None:
            result.skipped_reason = "no spreads available"
            return result

        team = self.team_for(chosen)
        result.matchup_id = chosen.matchup_id
        result.team = team
        with self.store.transaction() as conn:
            # Preseason is played by testers only.
            user_ids = self.store.users_with_completed_grants(
                testers_only=resolved is Phase.PRE,
                conn=conn,
            )
            result.picks_assigned = self.store.fill_empty_slot(
                conn,
                user_ids=user_ids,
                week_slot=slot,
                matchup_id=chosen.matchup_id,
                team=team,
                now=now,
            )
            self.store.set_setting(f"{MARKER_PREFIX}{slot}", now.isoformat(), conn=conn)

        logger.info(
            "Default picks for %s: %s pick(s) assigned to %s in %s@%s (%s policy)",
            label,
            len(result.picks_assigned),
            team,
            chosen.away_team,
            chosen.home_team,
            self.policy,
        )
        return result


__all__ = [
    "DEFAULT_PICK_POLICIES",
    "DefaultAssignmentResult",
    "DefaultPickAssigner",
    "MARKER_PREFIX",
    "favored_team",
    "select_default_matchup",
]
