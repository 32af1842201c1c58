"""Season lookups that need the store: start date, deadlines, user overrides."""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone
from typing import Optional

from loserpool.config.weeks import label_for, parse_label
from loserpool.errors import ValidationError
from loserpool.persistence import PoolStore
from loserpool.season.clock import SeasonClock, SeasonState, ensure_utc


logger = logging.getLogger("uvicorn.error")

SEASON_START_KEY = "season_start"
CURRENT_WEEK_KEY = "current_week"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class SeasonService:
    """Resolve season state against stored settings and matchups.

    A season start written to the store (``/admin/season-start``) takes
    precedence over the configured one.
    """

    def __init__(self, store: PoolStore, *, season_start: Optional[date] = None):
        self.store = store
        self._configured_start = season_start

    def season_start(self) -> date:
        stored = self.store.get_setting(SEASON_START_KEY)
        if stored:
            try:
                return date.fromisoformat(stored)
            except ValueError:
                logger.warning("Ignoring invalid stored season start %s", stored)
        if self._configured_start is None:
            raise ValidationError("Season start date is not configured")
        return self._configured_start

    def set_season_start(self, value: date) -> date:
        if isinstance(value, datetime):
            value = value.date()
        self.store.set_setting(SEASON_START_KEY, value.isoformat())
        logger.info("Season start set to %s", value.isoformat())
        return value

    def clock(self) -> SeasonClock:
        return SeasonClock(self.season_start())

    def first_kickoff(self, label: str) -> Optional[datetime]:
        """Earliest kickoff among the week's matchups, the allocation deadline."""

        matchups = self.store.list_matchups(season_label=label)
        if not matchups:
            return None
        return min(matchup.kickoff for matchup in matchups)

    def current(self, now: Optional[datetime] = None) -> SeasonState:
        now = ensure_utc(now or _utcnow())
        clock = self.clock()
        state = clock.resolve(now)
        return clock.resolve(now, first_kickoff=self.first_kickoff(state.label))

    def for_user(self, user_id: str, now: Optional[datetime] = None) -> SeasonState:
        now = ensure_utc(now or _utcnow())
        clock = self.clock()
        user = self.store.get_user(user_id)
        is_tester = bool(user and user.is_tester)
        pinned = user.pinned_week if user else None
        state = clock.resolve_for_user(now, is_tester=is_tester, pinned_label=pinned)
        return clock.resolve_for_user(
            now,
            is_tester=is_tester,
            pinned_label=pinned,
            first_kickoff=self.first_kickoff(state.label),
        )

    def set_tester(self, user_id: str, *, is_tester: bool, pinned_week: Optional[str] = None):
        if pinned_week:
            phase, week = parse_label(pinned_week.strip().upper())
            pinned_week = label_for(phase, week)
        return self.store.set_tester(user_id, is_tester=is_tester, pinned_week=pinned_week or None)

    def refresh_current_week(self, now: Optional[datetime] = None) -> SeasonState:
        """Write the clock's answer to the ``current_week`` setting for display."""

        state = self.current(now)
        previous = self.store.get_setting(CURRENT_WEEK_KEY)
        self.store.set_setting(CURRENT_WEEK_KEY, state.label)
        if previous != state.label:
            logger.info("Current week changed from %s to %s", previous or "unset", state.label)
        return state


__all__ = ["CURRENT_WEEK_KEY", "SEASON_START_KEY", "SeasonService"]
