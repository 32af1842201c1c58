"""Turn final scores into pick eliminations."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional, Union

from loserpool.errors import ValidationError
from loserpool.ingest.vocabulary import winner_side
from loserpool.persistence import MatchupRecord, PoolStore


logger = logging.getLogger("uvicorn.error")


@dataclass
class EliminationResult:
    matchup_id: str
    winner: Optional[str]
    picks_eliminated: List[str] = field(default_factory=list)
    already_evaluated: bool = False
    tie: bool = False


@dataclass
class EvaluationSummary:
    results: List[EliminationResult] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    @property
    def picks_eliminated(self) -> int:
        return sum(len(result.picks_eliminated) for result in self.results)


class EliminationEvaluator:
    """Eliminate active picks that named a matchup's winner.

    Losing and tied teams keep their picks alive. Each matchup is evaluated at
    most once; ``evaluated_at`` is stamped in the same transaction as the
    status changes.
    """

    def __init__(self, store: PoolStore):
        self.store = store

    def evaluate(
        self,
        matchup: Union[MatchupRecord, str],
        *,
        now: Optional[datetime] = None,
    ) -> EliminationResult:
        now = now or datetime.now(timezone.utc)
        matchup_id = matchup if isinstance(matchup, str) else matchup.matchup_id
        record = self.store.get_matchup(matchup_id)
        if record is None:
            raise ValidationError(f"Unknown matchup {matchup_id}")
        if record.status != "final" or record.away_score is None or record.home_score is None:
            raise ValidationError(f"Matchup {matchup_id} has no final score yet")

        side = winner_side(record.away_score, record.home_score)
        winner = {"away": record.away_team, "home": record.home_team}.get(side or "")
        tie = side == "tie"
        if record.evaluated_at is not None:
            return EliminationResult(matchup_id=matchup_id, winner=winner, already_evaluated=True, tie=tie)

        with self.store.transaction() as conn:
            if not self.store.mark_evaluated(conn, matchup_id, now=now):
                return EliminationResult(matchup_id=matchup_id, winner=winner, already_evaluated=True, tie=tie)
            eliminated: List[str] = []
            if winner is not None:
                eliminated = self.store.eliminate_picks_on_team(
                    conn,
                    matchup_id=matchup_id,
                    week_slot=record.slot,
                    team=winner,
                    now=now,
                )

        if winner is None:
            logger.info(
                "%s@%s ended in a %s-%s tie; no picks eliminated",
                record.away_team,
                record.home_team,
                record.away_score,
                record.home_score,
            )
        else:
            logger.info(
                "%s won %s@%s; eliminated %s pick(s)",
                winner,
                record.away_team,
                record.home_team,
                len(eliminated),
            )
        return EliminationResult(matchup_id=matchup_id, winner=winner, picks_eliminated=eliminated, tie=tie)

    def evaluate_results(self, *, now: Optional[datetime] = None) -> EvaluationSummary:
        summary = EvaluationSummary()
        for matchup in self.store.list_unevaluated_finals():
            try:
                summary.results.append(self.evaluate(matchup, now=now))
            except ValidationError as exc:
                logger.warning("Skipping evaluation of %s: %s", matchup.matchup_id, exc.message)
                summary.errors.append(f"{matchup.matchup_id}: {exc.message}")
        return summary


__all__ = ["EliminationEvaluator", "EliminationResult", "EvaluationSummary"]
