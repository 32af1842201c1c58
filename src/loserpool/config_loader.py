"""Load pool settings from the environment or a JSON profile."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, replace
from datetime import date
from pathlib import Path
from typing import Callable, Optional, TypeVar


logger = logging.getLogger("uvicorn.error")

_DB_PATH_ENV = "LOSERPOOL_DB_PATH"
_SEASON_START_ENV = "LOSERPOOL_SEASON_START"
_FEED_URL_ENV = "LOSERPOOL_FEED_URL"
_FEED_TIMEOUT_ENV = "LOSERPOOL_FEED_TIMEOUT"
_FEED_RETRIES_ENV = "LOSERPOOL_FEED_RETRIES"
_DEFAULT_POLICY_ENV = "LOSERPOOL_DEFAULT_PICK_POLICY"
_SYNC_BUDGET_ENV = "LOSERPOOL_SYNC_BUDGET"
_CRON_TOKEN_ENV = "LOSERPOOL_CRON_TOKEN"

DEFAULT_DB_PATH = Path("loserpool.sqlite")
DEFAULT_FEED_URL = "https://site.api.espn.com/apis/site/v2/sports/football/nfl"
DEFAULT_POLICIES = ("favorite", "underdog")

NumberT = TypeVar("NumberT", int, float)


def _env_number(
    name: str,
    default: Optional[NumberT],
    cast: Callable[[str], NumberT],
    *,
    minimum: Optional[NumberT] = None,
    maximum: Optional[NumberT] = None,
) -> Optional[NumberT]:
    """Read a numeric ``LOSERPOOL_*`` variable.

    Unset or blank keeps ``default``; a malformed value keeps it too, with a
    warning. Values outside ``minimum``/``maximum`` are pulled back in range.
    """

    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r; keeping %s", name, raw, default)
        return default
    if minimum is not None and value < minimum:
        logger.warning("%s=%s is below %s; using %s", name, raw, minimum, minimum)
        return minimum
    if maximum is not None and value > maximum:
        logger.warning("%s=%s is above %s; using %s", name, raw, maximum, maximum)
        return maximum
    return value


def _parse_date(raw: str | None, *, source: str) -> Optional[date]:
    if not raw:
        return None
    try:
        return date.fromisoformat(raw.strip())
    except ValueError:
        logger.warning("Invalid date for %s: %s; ignoring", source, raw)
        return None


def _parse_policy(raw: str | None, *, source: str) -> str:
    if not raw:
        return "favorite"
    value = raw.strip().lower()
    if value not in DEFAULT_POLICIES:
        logger.warning("Invalid default pick policy for %s: %s; using favorite", source, raw)
        return "favorite"
    return value


@dataclass
class PoolSettings:
    db_path: Path = DEFAULT_DB_PATH
    season_start: Optional[date] = None
    feed_base_url: str = DEFAULT_FEED_URL
    feed_timeout: float = 10.0
    feed_retries: int = 2
    default_pick_policy: str = "favorite"
    sync_budget_seconds: Optional[float] = None
    cron_token: Optional[str] = None

    @classmethod
    def from_env(cls, base: "PoolSettings | None" = None) -> "PoolSettings":
        """Overlay ``LOSERPOOL_*`` environment variables on ``base``."""

        settings = base or cls()
        # A zero budget means no limit.
        budget = _env_number(_SYNC_BUDGET_ENV, settings.sync_budget_seconds, float, minimum=0.0) or None
        return replace(
            settings,
            db_path=Path(os.getenv(_DB_PATH_ENV) or settings.db_path),
            season_start=_parse_date(os.getenv(_SEASON_START_ENV), source=_SEASON_START_ENV) or settings.season_start,
            feed_base_url=os.getenv(_FEED_URL_ENV) or settings.feed_base_url,
            feed_timeout=_env_number(_FEED_TIMEOUT_ENV, settings.feed_timeout, float, minimum=0.5, maximum=120.0),
            feed_retries=_env_number(_FEED_RETRIES_ENV, settings.feed_retries, int, minimum=0),
            default_pick_policy=_parse_policy(
                os.getenv(_DEFAULT_POLICY_ENV) or settings.default_pick_policy,
                source=_DEFAULT_POLICY_ENV,
            ),
            sync_budget_seconds=budget,
            cron_token=os.getenv(_CRON_TOKEN_ENV) or settings.cron_token,
        )

    @classmethod
    def load(cls, path: Path) -> "PoolSettings":
        data = json.loads(path.read_text(encoding="utf-8"))
        budget = data.get("sync_budget_seconds")
        return cls(
            db_path=Path(data.get("db_path", DEFAULT_DB_PATH)),
            season_start=_parse_date(data.get("season_start"), source=str(path)),
            feed_base_url=data.get("feed_base_url", DEFAULT_FEED_URL),
            feed_timeout=float(data.get("feed_timeout", 10.0)),
            feed_retries=int(data.get("feed_retries", 2)),
            default_pick_policy=_parse_policy(data.get("default_pick_policy"), source=str(path)),
            sync_budget_seconds=float(budget) if budget is not None else None,
            cron_token=data.get("cron_token"),
        )

    def save(self, path: Path) -> None:
        payload = asdict(self)
        payload["db_path"] = str(self.db_path)
        payload["season_start"] = self.season_start.isoformat() if self.season_start else None
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
