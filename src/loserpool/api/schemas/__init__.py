"""Pydantic models for API I/O."""

from .admin import (
    DefaultAssignmentResponse,
    EliminationResponse,
    EvaluationResponse,
    SeasonStartRequest,
    SyncResponse,
    TeamPickCountResponse,
    WeekRequest,
)
from .matchup import MatchupListResponse, MatchupResponse, SeasonResponse
from .picks import (
    AllocateRequest,
    AllocationResponse,
    DeallocateRequest,
    GrantRequest,
    PickAllocationResponse,
    PickResponse,
    TesterRequest,
    TesterResponse,
    UserPicksResponse,
)

__all__ = [
    "AllocateRequest",
    "AllocationResponse",
    "DeallocateRequest",
    "DefaultAssignmentResponse",
    "EliminationResponse",
    "EvaluationResponse",
    "GrantRequest",
    "MatchupListResponse",
    "MatchupResponse",
    "PickAllocationResponse",
    "PickResponse",
    "SeasonResponse",
    "SeasonStartRequest",
    "SyncResponse",
    "TeamPickCountResponse",
    "TesterRequest",
    "TesterResponse",
    "UserPicksResponse",
    "WeekRequest",
]
