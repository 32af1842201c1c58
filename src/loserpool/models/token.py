"""Allocation tokens: the (matchup, team) pair a pick holds for one week."""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic.config import ConfigDict

from loserpool.errors import ValidationError


class AllocationToken(BaseModel):
    matchup_id: str = Field(..., min_length=1)
    team: str = Field(..., min_length=1)

    model_config = ConfigDict(frozen=True)

    def encode(self) -> str:
        """Return the legacy ``"<matchupId>_<team>"`` string form."""

        return f"{self.matchup_id}_{self.team}"

    @classmethod
    def parse(cls, raw: str) -> "AllocationToken":
        # Matchup ids never contain underscores; team names might.
        matchup_id, sep, team = (raw or "").partition("_")
        if not sep or not matchup_id or not team:
            raise ValidationError(f"Allocation token must look like '<matchup>_<team>', got {raw!r}")
        return cls(matchup_id=matchup_id, team=team)

    def __str__(self) -> str:
        return self.encode()
