"""HTTP client for the external schedule/odds feed (ESPN scoreboard format)."""

from __future__ import annotations

import logging
import time
from datetime import datetime
from typing import Any, Iterable, List, Mapping, Optional, Union

import httpx
from pydantic import ValidationError as ModelValidationError

from loserpool.config.weeks import Phase, get_phase, label_for
from loserpool.errors import TransientSourceError, ValidationError
from loserpool.ingest.vocabulary import espn_season_type, phase_from_espn_season_type
from loserpool.models import ExternalGame


logger = logging.getLogger(__name__)

_RETRYABLE_STATUS = {429, 500, 502, 503, 504}


def _parse_line(raw: Any) -> Optional[float]:
    if raw in (None, ""):
        return None
    text = str(raw).strip().upper()
    if text in {"PK", "PICK", "EVEN", "EV"}:
        return 0.0
    try:
        return float(text)
    except ValueError:
        logger.warning("Ignoring unparseable spread %r", raw)
        return None


def _parse_score(raw: Any) -> Optional[int]:
    if raw in (None, ""):
        return None
    try:
        return int(float(raw))
    except (TypeError, ValueError):
        return None


def _parse_kickoff(raw: str) -> datetime:
    text = raw.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def _spreads_from_odds(odds: Iterable[Mapping[str, Any]], away: str, home: str) -> tuple[Optional[float], Optional[float]]:
    for entry in odds:
        point_spread = entry.get("pointSpread") or {}
        home_line = _parse_line(((point_spread.get("home") or {}).get("close") or {}).get("line"))
        away_line = _parse_line(((point_spread.get("away") or {}).get("close") or {}).get("line"))
        if home_line is not None or away_line is not None:
            if home_line is None:
                home_line = -away_line  # type: ignore[operator]
            if away_line is None:
                away_line = -home_line
            return away_line, home_line
        # Older payloads only carry "details" such as "KC -6.5".
        details = str(entry.get("details") or "").split()
        if len(details) == 2:
            line = _parse_line(details[1])
            if line is None:
                continue
            favorite = details[0].upper()
            if favorite == away.upper():
                return line, -line
            if favorite == home.upper():
                return -line, line
    return None, None


def parse_scoreboard(payload: Mapping[str, Any], *, phase: Union[str, Phase], week: int) -> List[ExternalGame]:
    """Convert an ESPN scoreboard payload into :class:`ExternalGame` records.

    Events without two competitors or without a kickoff are skipped with a
    warning; they cannot be matched to a stored matchup anyway. So are events
    whose ESPN season type belongs to another phase.
    """

    resolved = get_phase(phase)
    label = label_for(resolved, week)
    games: List[ExternalGame] = []
    for event in payload.get("events") or []:
        competitions = event.get("competitions") or []
        if not competitions:
            logger.warning("Skipping event %s without competitions", event.get("id"))
            continue
        season_type = (event.get("season") or {}).get("type")
        if season_type is not None:
            try:
                event_phase = phase_from_espn_season_type(season_type)
            except ValidationError:
                logger.warning("Skipping event %s with unknown season type %r", event.get("id"), season_type)
                continue
            if event_phase is not resolved:
                logger.warning("Skipping %s event %s while syncing %s", event_phase.value, event.get("id"), label)
                continue
        competition = competitions[0]
        competitors = competition.get("competitors") or []
        away = next((c for c in competitors if c.get("homeAway") == "away"), None)
        home = next((c for c in competitors if c.get("homeAway") == "home"), None)
        kickoff_raw = competition.get("date") or event.get("date")
        if away is None or home is None or not kickoff_raw:
            logger.warning("Skipping event %s with incomplete competitors or kickoff", event.get("id"))
            continue
        away_code = (away.get("team") or {}).get("abbreviation") or (away.get("team") or {}).get("name") or ""
        home_code = (home.get("team") or {}).get("abbreviation") or (home.get("team") or {}).get("name") or ""
        state = (((competition.get("status") or {}).get("type") or {}).get("state"))
        away_spread, home_spread = _spreads_from_odds(competition.get("odds") or [], away_code, home_code)
        try:
            game = ExternalGame(
                away_team=away_code,
                home_team=home_code,
                kickoff=_parse_kickoff(kickoff_raw),
                status=state,
                away_spread=away_spread,
                home_spread=home_spread,
                away_score=_parse_score(away.get("score")) if state in {"in", "post"} else None,
                home_score=_parse_score(home.get("score")) if state in {"in", "post"} else None,
                venue=(competition.get("venue") or {}).get("fullName"),
                external_id=str(event.get("id")) if event.get("id") is not None else None,
                season_label=label,
            )
        except (ModelValidationError, ValueError) as exc:
            logger.warning("Skipping event %s: %s", event.get("id"), exc)
            continue
        games.append(game)
    return games


class ScheduleFeed:
    """Fetch one week of games from the scoreboard API.

    Network errors, timeouts and 5xx/429 responses are retried up to
    ``retries`` times and then surface as :class:`TransientSourceError`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        retries: int = 2,
        backoff: float = 0.5,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.retries = max(0, retries)
        self.backoff = max(0.0, backoff)
        self._transport = transport

    def _client(self) -> httpx.Client:
        return httpx.Client(base_url=self.base_url, timeout=self.timeout, transport=self._transport)

    def fetch_payload(self, phase: Union[str, Phase], week: int, *, year: int | None = None) -> dict:
        resolved = get_phase(phase)
        label_for(resolved, week)
        params: dict[str, Any] = {"week": week, "seasontype": espn_season_type(resolved)}
        if year is not None:
            params["dates"] = year
        last_error: Exception | None = None
        for attempt in range(self.retries + 1):
            try:
                with self._client() as client:
                    resp = client.get("/scoreboard", params=params)
                if resp.status_code in _RETRYABLE_STATUS:
                    raise httpx.HTTPStatusError(
                        f"feed returned {resp.status_code}", request=resp.request, response=resp
                    )
                if resp.status_code >= 400:
                    raise ValidationError(f"Schedule feed rejected request: HTTP {resp.status_code}")
                try:
                    payload = resp.json()
                except ValueError:
                    raise ValidationError("Schedule feed returned invalid JSON") from None
                if not isinstance(payload, dict):
                    raise ValidationError("Schedule feed returned a non-object payload")
                return payload
            except (httpx.TimeoutException, httpx.TransportError, httpx.HTTPStatusError) as exc:
                last_error = exc
                logger.warning(
                    "Schedule feed attempt %s/%s failed for %s week %s: %s",
                    attempt + 1,
                    self.retries + 1,
                    resolved.value,
                    week,
                    exc,
                )
                if attempt < self.retries and self.backoff:
                    time.sleep(self.backoff * (attempt + 1))
        raise TransientSourceError(
            f"Schedule feed unavailable for {resolved.value} week {week}: {last_error}"
        ) from last_error

    def fetch_week(self, phase: Union[str, Phase], week: int, *, year: int | None = None) -> List[ExternalGame]:
        payload = self.fetch_payload(phase, week, year=year)
        games = parse_scoreboard(payload, phase=phase, week=week)
        logger.info("Fetched %s games for %s", len(games), label_for(phase, week))
        return games
