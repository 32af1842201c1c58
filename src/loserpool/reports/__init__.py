"""Read-only reports over picks and matchups."""

from .breakdown import TeamPickCount, team_pick_breakdown
from .export import export_picks_to_csv

__all__ = ["TeamPickCount", "export_picks_to_csv", "team_pick_breakdown"]
