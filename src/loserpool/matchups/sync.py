"""Identity-preserving sync of feed games into stored matchups."""

from __future__ import annotations

import logging
import sqlite3
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union

from loserpool.config.weeks import Phase, get_phase, label_for
from loserpool.errors import PoolError, SyncConflict
from loserpool.ingest.schedule import ScheduleFeed
from loserpool.models import ExternalGame
from loserpool.persistence import MatchupRecord, PoolStore


logger = logging.getLogger("uvicorn.error")

# Fields the feed may omit once a game is under way; a missing value keeps
# whatever was stored.
_STICKY_FIELDS = {"away_spread", "home_spread", "away_score", "home_score", "venue", "external_id"}


@dataclass
class SyncResult:
    label: str
    created: int = 0
    updated: int = 0
    unchanged: int = 0
    not_processed: int = 0
    errors: List[str] = field(default_factory=list)
    preserved_ids: List[str] = field(default_factory=list)
    created_ids: List[str] = field(default_factory=list)

    @property
    def timed_out(self) -> bool:
        return self.not_processed > 0

    def as_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label,
            "created": self.created,
            "updated": self.updated,
            "unchanged": self.unchanged,
            "not_processed": self.not_processed,
            "timed_out": self.timed_out,
            "errors": list(self.errors),
            "preserved_ids": list(self.preserved_ids),
            "created_ids": list(self.created_ids),
        }


def _game_fields(game: ExternalGame) -> Dict[str, Any]:
    return {
        "kickoff": game.kickoff,
        "status": game.status,
        "away_spread": game.away_spread,
        "home_spread": game.home_spread,
        "away_score": game.away_score,
        "home_score": game.home_score,
        "venue": game.venue,
        "external_id": game.external_id,
    }


def _changed_fields(existing: MatchupRecord, game: ExternalGame) -> Dict[str, Any]:
    changes: Dict[str, Any] = {}
    for name, value in _game_fields(game).items():
        if value is None and name in _STICKY_FIELDS:
            continue
        current = getattr(existing, name)
        if name == "kickoff":
            if current.astimezone(timezone.utc) != value.astimezone(timezone.utc):
                changes[name] = value
        elif current != value:
            changes[name] = value
    return changes


class MatchupStore:
    """Upsert feed games while keeping stored matchup ids stable.

    Pick allocations reference matchups by id, so an existing row is always
    updated in place. Each game commits in its own transaction; a failure on
    one game is recorded on the result and the batch moves on.
    """

    def __init__(self, store: PoolStore, *, data_source: str = "espn"):
        self.store = store
        self.data_source = data_source

    def sync(
        self,
        games: Sequence[ExternalGame],
        phase: Union[str, Phase],
        week: int,
        *,
        budget_seconds: Optional[float] = None,
        now: Optional[datetime] = None,
    ) -> SyncResult:
        resolved = get_phase(phase)
        label = label_for(resolved, week)
        result = SyncResult(label=label)
        started = time.monotonic()

        for index, game in enumerate(games):
            if budget_seconds is not None and time.monotonic() - started > budget_seconds:
                result.not_processed = len(games) - index
                logger.warning(
                    "Matchup sync for %s stopped after %.1fs; %s games not processed",
                    label,
                    budget_seconds,
                    result.not_processed,
                )
                break
            try:
                outcome, matchup_id = self._sync_game(
                    game,
                    phase=resolved,
                    week=week,
                    label=label,
                    now=now or datetime.now(timezone.utc),
                )
            except SyncConflict as exc:
                logger.warning("Skipping %s@%s for %s: %s", game.away_team, game.home_team, label, exc.message)
                result.errors.append(f"{game.away_team}@{game.home_team}: {exc.message}")
                continue
            except (PoolError, sqlite3.Error) as exc:
                logger.warning("Failed to sync %s@%s for %s: %s", game.away_team, game.home_team, label, exc)
                result.errors.append(f"{game.away_team}@{game.home_team}: {exc}")
                continue

            if outcome == "created":
                result.created += 1
                result.created_ids.append(matchup_id)
            else:
                result.preserved_ids.append(matchup_id)
                if outcome == "updated":
                    result.updated += 1
                else:
                    result.unchanged += 1

        logger.info(
            "Matchup sync %s: created=%s updated=%s unchanged=%s errors=%s not_processed=%s",
            label,
            result.created,
            result.updated,
            result.unchanged,
            len(result.errors),
            result.not_processed,
        )
        return result

    def _sync_game(
        self,
        game: ExternalGame,
        *,
        phase: Phase,
        week: int,
        label: str,
        now: datetime,
    ) -> tuple[str, str]:
        if game.season_label is not None and game.season_label != label:
            raise SyncConflict(f"Feed labels the game {game.season_label}, expected {label}")

        with self.store.transaction() as conn:
            existing = self.store.find_matchup(label, game.away_team, game.home_team, conn=conn)
            if existing is None:
                swapped = self.store.find_matchup(label, game.home_team, game.away_team, conn=conn)
                if swapped is not None:
                    raise SyncConflict(
                        f"Stored matchup {swapped.matchup_id} has home and away reversed"
                    )
                try:
                    matchup_id = self.store.insert_matchup(
                        conn,
                        phase=phase.value,
                        week=week,
                        season_label=label,
                        away_team=game.away_team,
                        home_team=game.home_team,
                        fields=_game_fields(game),
                        data_source=self.data_source,
                        now=now,
                    )
                    return "created", matchup_id
                except sqlite3.IntegrityError:
                    # Another writer created the row first; update theirs.
                    existing = self.store.find_matchup(label, game.away_team, game.home_team, conn=conn)
                    if existing is None:
                        raise

            changes = _changed_fields(existing, game)
            if not changes:
                return "unchanged", existing.matchup_id
            self.store.update_matchup(conn, existing.matchup_id, changes=changes, now=now)
            return "updated", existing.matchup_id

    def sync_week(
        self,
        feed: ScheduleFeed,
        phase: Union[str, Phase],
        week: int,
        *,
        year: Optional[int] = None,
        budget_seconds: Optional[float] = None,
    ) -> SyncResult:
        """Fetch a week from the feed and sync it.

        Feed failures raise :class:`TransientSourceError` before anything is
        written.
        """

        games = feed.fetch_week(phase, week, year=year)
        return self.sync(games, phase, week, budget_seconds=budget_seconds)

    def matchups_for(self, phase: Union[str, Phase], week: int) -> List[MatchupRecord]:
        return self.store.list_matchups(season_label=label_for(phase, week))

    def matchup_by_id(self, matchup_id: str) -> Optional[MatchupRecord]:
        return self.store.get_matchup(matchup_id)


__all__ = ["MatchupStore", "SyncResult"]
