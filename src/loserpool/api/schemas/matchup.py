from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class MatchupResponse(BaseModel):
    matchup_id: str
    season_label: str
    week_slot: str
    away_team: str
    home_team: str
    kickoff: datetime
    status: str
    away_spread: Optional[float]
    home_spread: Optional[float]
    away_score: Optional[int]
    home_score: Optional[int]
    venue: Optional[str]
    external_id: Optional[str]
    last_api_update: Optional[datetime]
    api_update_count: int
    evaluated_at: Optional[datetime]


class MatchupListResponse(BaseModel):
    season_label: str
    display: str
    matchups: List[MatchupResponse]


class SeasonResponse(BaseModel):
    phase: str
    week: int
    label: str
    display: str
    week_slot: str
    season_start: str
    is_preseason: bool
    is_regular_season: bool
    is_postseason: bool
    deadline_passed: bool
