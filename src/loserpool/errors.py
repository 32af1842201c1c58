"""Error types raised by the pool core.

Every error is scoped to the single operation that raised it; callers decide
how to surface it (HTTP status, CLI exit code, log line).
"""

from __future__ import annotations

from typing import Sequence


class PoolError(Exception):
    """Base class for pool errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PoolError, ValueError):
    """Bad input: unknown matchup, team not in matchup, out-of-range week."""


class LockedError(PoolError):
    """The matchup (or the token being replaced) has already kicked off."""


class EliminatedPickError(PoolError):
    """One or more named picks are already eliminated and cannot be moved."""

    def __init__(self, message: str, pick_names: Sequence[str] = ()):
        super().__init__(message)
        self.pick_names = list(pick_names)


class PartialBatchFailure(PoolError):
    """A batch write touched only some of the requested picks.

    The transaction is rolled back before this is raised, so ``applied`` lists
    the picks that would have been written, not picks that were committed.
    """

    def __init__(self, message: str, applied: Sequence[str], failed: Sequence[str]):
        super().__init__(message)
        self.applied = list(applied)
        self.failed = list(failed)


class SyncConflict(PoolError):
    """The feed and the store disagree on a game's identity."""


class TransientSourceError(PoolError):
    """Network failure or timeout talking to the schedule feed; safe to retry."""


__all__ = [
    "PoolError",
    "ValidationError",
    "LockedError",
    "EliminatedPickError",
    "PartialBatchFailure",
    "SyncConflict",
    "TransientSourceError",
]
