import httpx
import pytest

from loserpool.errors import TransientSourceError, ValidationError
from loserpool.ingest.schedule import ScheduleFeed, parse_scoreboard

from tests.helpers import espn_event


BASE_URL = "https://feed.test/nfl"


def _payload() -> dict:
    return {
        "events": [
            espn_event("401", "KC", "BUF", "2025-10-12T17:00Z", away_line="-3.5", home_line="+3.5"),
            espn_event(
                "402",
                "DAL",
                "PHI",
                "2025-10-12T20:25Z",
                state="post",
                away_line="6.5",
                away_score="17",
                home_score="24",
            ),
            {"id": "403", "competitions": []},
        ]
    }


def test_parse_scoreboard_normalizes_events():
    games = parse_scoreboard(_payload(), phase="REG", week=7)
    assert len(games) == 2
    kc, dal = games
    assert (kc.away_team, kc.home_team) == ("KC", "BUF")
    assert (kc.away_spread, kc.home_spread) == (-3.5, 3.5)
    assert kc.status == "scheduled"
    assert kc.away_score is None
    assert kc.season_label == "REG7"
    assert kc.external_id == "401"
    assert dal.status == "final"
    assert (dal.away_score, dal.home_score) == (17, 24)
    assert dal.home_spread == -6.5


def test_parse_scoreboard_falls_back_to_details_string():
    event = espn_event("404", "NYJ", "MIA", "2025-10-10T00:15Z")
    event["competitions"][0]["odds"] = [{"details": "MIA -2.5"}]
    (game,) = parse_scoreboard({"events": [event]}, phase="REG", week=7)
    assert (game.away_spread, game.home_spread) == (2.5, -2.5)


def test_parse_scoreboard_treats_pickem_as_zero():
    event = espn_event("405", "NYG", "NYJ", "2025-10-12T17:00Z", away_line="PK", home_line="PK")
    (game,) = parse_scoreboard({"events": [event]}, phase="REG", week=7)
    assert game.away_spread == 0.0


def test_parse_scoreboard_skips_events_from_another_phase():
    regular = espn_event("406", "KC", "BUF", "2025-10-12T17:00Z", away_line="-3.5")
    regular["season"] = {"type": 2, "year": 2025}
    playoff = espn_event("407", "DAL", "PHI", "2026-01-11T21:30Z", away_line="3.0")
    playoff["season"] = {"type": 3, "year": 2025}
    unknown = espn_event("408", "NYJ", "MIA", "2025-10-12T17:00Z")
    unknown["season"] = {"type": 9}

    games = parse_scoreboard({"events": [regular, playoff, unknown]}, phase="REG", week=7)

    assert [game.external_id for game in games] == ["406"]


def test_fetch_week_sends_espn_params():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen.update(request.url.params)
        return httpx.Response(200, json=_payload())

    feed = ScheduleFeed(BASE_URL, transport=httpx.MockTransport(handler), backoff=0)
    games = feed.fetch_week("POST", 1, year=2025)
    assert len(games) == 2
    assert games[0].season_label == "POST1"
    assert seen == {"week": "1", "seasontype": "3", "dates": "2025"}


def test_fetch_retries_server_errors_then_succeeds():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        if calls["count"] == 1:
            return httpx.Response(503)
        return httpx.Response(200, json=_payload())

    feed = ScheduleFeed(BASE_URL, transport=httpx.MockTransport(handler), retries=2, backoff=0)
    assert len(feed.fetch_week("REG", 7)) == 2
    assert calls["count"] == 2


def test_fetch_timeout_surfaces_as_transient_error():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        raise httpx.ConnectTimeout("timed out", request=request)

    feed = ScheduleFeed(BASE_URL, transport=httpx.MockTransport(handler), retries=1, backoff=0)
    with pytest.raises(TransientSourceError):
        feed.fetch_week("REG", 7)
    assert calls["count"] == 2


def test_fetch_client_errors_are_not_retried():
    calls = {"count": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["count"] += 1
        return httpx.Response(404)

    feed = ScheduleFeed(BASE_URL, transport=httpx.MockTransport(handler), retries=3, backoff=0)
    with pytest.raises(ValidationError):
        feed.fetch_week("REG", 7)
    assert calls["count"] == 1


def test_fetch_rejects_out_of_range_week_before_calling_feed():
    def handler(request: httpx.Request) -> httpx.Response:  # pragma: no cover
        raise AssertionError("feed should not be called")

    feed = ScheduleFeed(BASE_URL, transport=httpx.MockTransport(handler))
    with pytest.raises(ValidationError):
        feed.fetch_week("REG", 19)
