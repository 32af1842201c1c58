"""Matchup sync and lookups."""

from .sync import MatchupStore, SyncResult

__all__ = ["MatchupStore", "SyncResult"]
