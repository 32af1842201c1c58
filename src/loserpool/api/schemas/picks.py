from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class GrantRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    picks_count: int = Field(..., ge=1)
    source: Literal["purchase", "free", "admin"] = "purchase"


class PickAllocationResponse(BaseModel):
    week_slot: str
    matchup_id: str
    team: str
    token: str
    is_default: bool
    allocated_at: datetime


class PickResponse(BaseModel):
    pick_id: str
    display_name: str
    number: int
    status: str
    allocations: Dict[str, PickAllocationResponse]


class UserPicksResponse(BaseModel):
    user_id: str
    current_week: Optional[str] = None
    picks: List[PickResponse]


class AllocateRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    matchup_id: str = Field(..., min_length=1)
    team: str = Field(..., min_length=1)
    pick_names: List[str] = Field(..., min_length=1)


class DeallocateRequest(BaseModel):
    user_id: str = Field(..., min_length=1)
    pick_names: List[str] = Field(..., min_length=1)


class AllocationResponse(BaseModel):
    week_slot: str
    token: Optional[str]
    updated_picks: List[str]
    unchanged_picks: List[str] = Field(default_factory=list)
    message: str


class TesterRequest(BaseModel):
    is_tester: bool
    pinned_week: Optional[str] = None


class TesterResponse(BaseModel):
    user_id: str
    is_tester: bool
    pinned_week: Optional[str]
