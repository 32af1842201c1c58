"""Allocate, reallocate and clear a user's picks for the current week."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterable, List, Optional

from loserpool.errors import EliminatedPickError, LockedError, PartialBatchFailure, ValidationError
from loserpool.ingest.teams import same_team
from loserpool.models import AllocationToken
from loserpool.persistence import MatchupRecord, PickRecord, PoolStore
from loserpool.season import SeasonService, ensure_utc


logger = logging.getLogger("uvicorn.error")

GRANT_SOURCES = ("purchase", "free", "admin")


@dataclass
class AllocationResult:
    slot: str
    token: Optional[AllocationToken]
    updated_picks: List[str] = field(default_factory=list)
    unchanged_picks: List[str] = field(default_factory=list)
    message: str = ""


def _clean_names(pick_names: Iterable[str]) -> List[str]:
    names: List[str] = []
    for raw in pick_names or []:
        name = str(raw).strip()
        if name and name not in names:
            names.append(name)
    if not names:
        raise ValidationError("At least one pick name is required")
    return names


def _has_started(matchup: MatchupRecord, now: datetime) -> bool:
    return matchup.status != "scheduled" or now >= matchup.kickoff


class PickAllocationEngine:
    """Move picks between matchups for the caller's current week.

    Every precondition is checked inside the write transaction before the
    first write, so a rejected request leaves all picks untouched.
    """

    def __init__(self, store: PoolStore, season: SeasonService):
        self.store = store
        self.season = season

    def allocate(
        self,
        user_id: str,
        matchup_id: str,
        team: str,
        pick_names: Iterable[str],
        *,
        now: Optional[datetime] = None,
    ) -> AllocationResult:
        now = ensure_utc(now or datetime.now(timezone.utc))
        names = _clean_names(pick_names)

        matchup = self.store.get_matchup(matchup_id)
        if matchup is None:
            raise ValidationError(f"Unknown matchup {matchup_id}")
        team_code = self._team_in_matchup(matchup, team)

        state = self.season.for_user(user_id, now)
        if matchup.season_label != state.label:
            raise ValidationError(
                f"Matchup {matchup.matchup_id} is in {matchup.season_label}, current week is {state.label}"
            )
        if _has_started(matchup, now):
            raise LockedError(
                f"{matchup.away_team}@{matchup.home_team} kicked off at {matchup.kickoff.isoformat()}"
            )

        slot = state.slot
        token = AllocationToken(matchup_id=matchup.matchup_id, team=team_code)
        with self.store.transaction() as conn:
            picks = self._owned_picks(user_id, names, conn=conn)
            for name in names:
                current = picks[name].allocations.get(slot)
                if current is None or current.matchup_id == matchup.matchup_id:
                    continue
                previous = self.store.get_matchup(current.matchup_id, conn=conn)
                if previous is not None and _has_started(previous, now):
                    raise LockedError(f"{name} is already locked into {current.token.encode()} for {state.label}")

            applied: List[str] = []
            failed: List[str] = []
            for name in names:
                pick = picks[name]
                if not self.store.activate_pick(conn, pick.pick_id, now=now):
                    failed.append(name)
                    continue
                self.store.upsert_allocation(
                    conn,
                    pick_id=pick.pick_id,
                    week_slot=slot,
                    matchup_id=matchup.matchup_id,
                    team=team_code,
                    now=now,
                )
                applied.append(name)
            if failed:
                raise PartialBatchFailure(
                    f"Allocated {len(applied)} of {len(names)} picks; nothing was saved",
                    applied=applied,
                    failed=failed,
                )

        logger.info("User %s allocated %s to %s for %s", user_id, ", ".join(applied), token.encode(), slot)
        return AllocationResult(
            slot=slot,
            token=token,
            updated_picks=applied,
            message=f"Allocated {len(applied)} pick(s) to {team_code} for {state.display}",
        )

    def deallocate(
        self,
        user_id: str,
        pick_names: Iterable[str],
        *,
        now: Optional[datetime] = None,
    ) -> AllocationResult:
        now = ensure_utc(now or datetime.now(timezone.utc))
        names = _clean_names(pick_names)
        state = self.season.for_user(user_id, now)
        slot = state.slot

        cleared: List[str] = []
        untouched: List[str] = []
        with self.store.transaction() as conn:
            picks = self._owned_picks(user_id, names, conn=conn)
            for name in names:
                current = picks[name].allocations.get(slot)
                if current is None:
                    continue
                matchup = self.store.get_matchup(current.matchup_id, conn=conn)
                if matchup is not None and _has_started(matchup, now):
                    raise LockedError(f"{name} is locked into {current.token.encode()} for {state.label}")

            for name in names:
                pick = picks[name]
                if not self.store.delete_allocation(conn, pick_id=pick.pick_id, week_slot=slot):
                    untouched.append(name)
                    continue
                self.store.revert_to_pending_if_unallocated(conn, pick.pick_id, now=now)
                cleared.append(name)

        if cleared:
            logger.info("User %s cleared %s for %s", user_id, ", ".join(cleared), slot)
        return AllocationResult(
            slot=slot,
            token=None,
            updated_picks=cleared,
            unchanged_picks=untouched,
            message=f"Cleared {len(cleared)} pick(s) for {state.display}",
        )

    def grant_picks(self, user_id: str, picks_count: int, *, source: str = "purchase") -> List[PickRecord]:
        if not user_id or not str(user_id).strip():
            raise ValidationError("user_id is required")
        if isinstance(picks_count, bool) or not isinstance(picks_count, int) or picks_count < 1:
            raise ValidationError(f"picks_count must be a positive integer, got {picks_count!r}")
        if source not in GRANT_SOURCES:
            raise ValidationError(f"Unknown grant source {source!r}; expected one of {', '.join(GRANT_SOURCES)}")
        picks = self.store.grant_picks(user_id, picks_count, source=source)
        logger.info(
            "Granted %s pick(s) to %s (%s): %s",
            picks_count,
            user_id,
            source,
            ", ".join(pick.display_name for pick in picks),
        )
        return picks

    def picks_for(self, user_id: str) -> List[PickRecord]:
        return self.store.list_picks(user_id)

    def _team_in_matchup(self, matchup: MatchupRecord, team: str) -> str:
        if not team or not str(team).strip():
            raise ValidationError("team is required")
        for candidate in matchup.teams():
            if same_team(candidate, team):
                return candidate
        raise ValidationError(
            f"{team} is not playing in {matchup.away_team}@{matchup.home_team}"
        )

    def _owned_picks(self, user_id: str, names: List[str], *, conn) -> dict[str, PickRecord]:
        picks = self.store.picks_by_name(user_id, names, conn=conn)
        missing = [name for name in names if name not in picks]
        if missing:
            raise ValidationError(f"User {user_id} does not own: {', '.join(missing)}")
        eliminated = [name for name in names if picks[name].status == "eliminated"]
        if eliminated:
            raise EliminatedPickError(
                f"Eliminated picks cannot change: {', '.join(eliminated)}",
                pick_names=eliminated,
            )
        return picks


__all__ = ["AllocationResult", "GRANT_SOURCES", "PickAllocationEngine"]
