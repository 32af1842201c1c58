"""Derive the current (phase, week) from wall-clock time."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Optional

from loserpool.config.weeks import (
    Phase,
    display_name,
    from_season_week_index,
    label_for,
    parse_label,
    slot_for,
)
from loserpool.errors import ValidationError


@dataclass(frozen=True)
class SeasonState:
    phase: Phase
    week: int
    label: str
    display: str
    season_start: date
    deadline_passed: bool = False

    @property
    def is_preseason(self) -> bool:
        return self.phase is Phase.PRE

    @property
    def is_regular_season(self) -> bool:
        return self.phase is Phase.REG

    @property
    def is_postseason(self) -> bool:
        return self.phase is Phase.POST

    @property
    def slot(self) -> str:
        return slot_for(self.phase, self.week)


def ensure_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""

    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class SeasonClock:
    """Single source of truth for "which week is it".

    Week boundaries fall every seven days from midnight UTC on
    ``season_start`` (the first preseason week). Three preseason weeks are
    followed by eighteen regular-season weeks and four postseason weeks; times
    outside the season clamp to PRE1 or POST4.
    """

    def __init__(self, season_start: Optional[date]):
        if season_start is None:
            raise ValidationError("Season start date is not configured")
        if isinstance(season_start, datetime):
            season_start = season_start.date()
        self.season_start = season_start
        self._origin = datetime.combine(season_start, time.min, tzinfo=timezone.utc)

    def resolve(self, now: datetime, *, first_kickoff: Optional[datetime] = None) -> SeasonState:
        now = ensure_utc(now)
        elapsed_days = (now - self._origin).days
        phase, week = from_season_week_index(elapsed_days // 7)
        return self._state(phase, week, now=now, first_kickoff=first_kickoff)

    def resolve_for_user(
        self,
        now: datetime,
        *,
        is_tester: bool = False,
        pinned_label: Optional[str] = None,
        first_kickoff: Optional[datetime] = None,
    ) -> SeasonState:
        """Resolve the week a given participant is playing.

        A pinned week (used for QA) wins over the clock without touching the
        global resolution. Preseason is tester-only, so everyone else sees
        REG1 until the regular season begins.
        """

        now = ensure_utc(now)
        if pinned_label:
            phase, week = parse_label(pinned_label)
            return self._state(phase, week, now=now, first_kickoff=first_kickoff)
        state = self.resolve(now, first_kickoff=first_kickoff)
        if state.is_preseason and not is_tester:
            return self._state(Phase.REG, 1, now=now, first_kickoff=first_kickoff)
        return state

    def _state(
        self,
        phase: Phase,
        week: int,
        *,
        now: datetime,
        first_kickoff: Optional[datetime],
    ) -> SeasonState:
        deadline_passed = first_kickoff is not None and now >= ensure_utc(first_kickoff)
        return SeasonState(
            phase=phase,
            week=week,
            label=label_for(phase, week),
            display=display_name(phase, week),
            season_start=self.season_start,
            deadline_passed=deadline_passed,
        )
