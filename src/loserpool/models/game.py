"""Normalized schedule/odds record produced by feed adapters."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.config import ConfigDict

from loserpool.config.weeks import label_for, parse_label
from loserpool.ingest.teams import canonical_team
from loserpool.ingest.vocabulary import normalize_status


class ExternalGame(BaseModel):
    """One real-world game as reported by the schedule feed."""

    away_team: str = Field(..., min_length=1)
    home_team: str = Field(..., min_length=1)
    kickoff: datetime
    status: str = "scheduled"
    away_spread: Optional[float] = None
    home_spread: Optional[float] = None
    away_score: Optional[int] = Field(default=None, ge=0)
    home_score: Optional[int] = Field(default=None, ge=0)
    venue: Optional[str] = None
    external_id: Optional[str] = None
    season_label: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @field_validator("away_team", "home_team")
    @classmethod
    def _canonical_team(cls, value: str) -> str:
        return canonical_team(value)

    @field_validator("kickoff")
    @classmethod
    def _utc_kickoff(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Optional[str]) -> str:
        return normalize_status(value)

    @field_validator("season_label")
    @classmethod
    def _valid_label(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        phase, week = parse_label(value)
        return label_for(phase, week)

    @model_validator(mode="after")
    def _distinct_teams(self) -> "ExternalGame":
        if self.away_team == self.home_team:
            raise ValueError(f"away and home team are both {self.away_team!r}")
        return self
