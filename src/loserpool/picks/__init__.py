"""Pick allocation and default assignment."""

from .allocation import GRANT_SOURCES, AllocationResult, PickAllocationEngine
from .defaults import (
    DEFAULT_PICK_POLICIES,
    DefaultAssignmentResult,
    DefaultPickAssigner,
    favored_team,
    select_default_matchup,
)

__all__ = [
    "AllocationResult",
    "DEFAULT_PICK_POLICIES",
    "DefaultAssignmentResult",
    "DefaultPickAssigner",
    "GRANT_SOURCES",
    "PickAllocationEngine",
    "favored_team",
    "select_default_matchup",
]
