from __future__ import annotations

from datetime import date
from typing import List, Optional

from pydantic import BaseModel, Field


class WeekRequest(BaseModel):
    phase: Optional[str] = None
    week: Optional[int] = Field(default=None, ge=1)
    absolute_week: Optional[int] = Field(default=None, ge=1)
    year: Optional[int] = None


class SyncResponse(BaseModel):
    label: str
    created: int
    updated: int
    unchanged: int
    not_processed: int
    timed_out: bool
    errors: List[str]
    preserved_ids: List[str]
    created_ids: List[str]


class DefaultAssignmentResponse(BaseModel):
    label: str
    week_slot: str
    picks_assigned: int
    matchup_id: Optional[str]
    team: Optional[str]
    skipped_reason: Optional[str]


class EliminationResponse(BaseModel):
    matchup_id: str
    winner: Optional[str]
    tie: bool
    picks_eliminated: List[str]
    already_evaluated: bool


class EvaluationResponse(BaseModel):
    evaluated: int
    picks_eliminated: int
    results: List[EliminationResponse]
    errors: List[str]


class SeasonStartRequest(BaseModel):
    season_start: date


class TeamPickCountResponse(BaseModel):
    matchup_id: str
    team: str
    opponent: str
    total: int
    active: int
    eliminated: int
    defaults: int
