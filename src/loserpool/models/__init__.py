"""Canonical models shared across ingestion, storage and the API."""

from .game import ExternalGame
from .token import AllocationToken

__all__ = ["AllocationToken", "ExternalGame"]
