import itertools
from datetime import timedelta

import pytest

from loserpool.errors import TransientSourceError
from loserpool.matchups import MatchupStore

from tests.helpers import REG7_SUNDAY_EARLY, REG7_SUNDAY_LATE, game, reg7_games


def test_first_sync_creates_matchups(store):
    result = MatchupStore(store).sync(reg7_games(), "REG", 7)
    assert (result.created, result.updated, result.unchanged) == (3, 0, 0)
    assert not result.errors
    stored = store.list_matchups(season_label="REG7")
    assert [m.away_team for m in stored] == ["NYJ", "KC", "DAL"]
    assert all(m.api_update_count == 1 for m in stored)


def test_repeat_sync_is_idempotent_and_preserves_ids(store):
    matchups = MatchupStore(store)
    first = matchups.sync(reg7_games(), "REG", 7)
    second = matchups.sync(reg7_games(), "REG", 7)
    assert (second.created, second.updated, second.unchanged) == (0, 0, 3)
    assert sorted(second.preserved_ids) == sorted(first.created_ids)
    assert len(store.list_matchups(season_label="REG7")) == 3


def test_changed_line_updates_in_place(store):
    matchups = MatchupStore(store)
    matchups.sync(reg7_games(), "REG", 7)
    original = store.find_matchup("REG7", "KC", "BUF")

    moved = game("KC", "BUF", REG7_SUNDAY_EARLY + timedelta(hours=3), away_spread=-4.5)
    result = matchups.sync([moved], "REG", 7)

    assert result.updated == 1
    updated = matchups.matchup_by_id(original.matchup_id)
    assert updated.away_spread == -4.5
    assert updated.kickoff == REG7_SUNDAY_EARLY + timedelta(hours=3)
    assert updated.api_update_count == 2
    assert updated.last_api_update is not None


def test_missing_feed_values_do_not_clear_stored_ones(store):
    matchups = MatchupStore(store)
    matchups.sync(reg7_games(), "REG", 7)
    live = game("DAL", "PHI", REG7_SUNDAY_LATE, status="in_progress", away_score=7, home_score=3)
    matchups.sync([live], "REG", 7)
    stored = store.find_matchup("REG7", "DAL", "PHI")
    assert stored.status == "in_progress"
    assert stored.away_spread == 6.5
    assert (stored.away_score, stored.home_score) == (7, 3)


def test_swapped_home_and_away_is_a_conflict(store):
    matchups = MatchupStore(store)
    matchups.sync(reg7_games(), "REG", 7)
    swapped = game("BUF", "KC", REG7_SUNDAY_EARLY, away_spread=3.5)
    extra = game("SEA", "LAR", REG7_SUNDAY_LATE, away_spread=1.0)

    result = matchups.sync([swapped, extra], "REG", 7)

    assert result.created == 1
    assert len(result.errors) == 1
    assert "BUF@KC" in result.errors[0]
    assert store.find_matchup("REG7", "BUF", "KC") is None


def test_label_mismatch_is_skipped(store):
    stray = game("SEA", "LAR", REG7_SUNDAY_LATE, label="REG8")
    result = MatchupStore(store).sync([stray], "REG", 7)
    assert result.created == 0
    assert result.errors
    assert store.list_matchups() == []


def test_budget_stops_remaining_games(store, monkeypatch):
    ticks = itertools.chain([0.0, 0.0, 0.5], itertools.repeat(30.0))
    monkeypatch.setattr("loserpool.matchups.sync.time.monotonic", lambda: next(ticks))

    result = MatchupStore(store).sync(reg7_games(), "REG", 7, budget_seconds=10)

    assert result.created == 2
    assert result.not_processed == 1
    assert result.timed_out
    assert len(store.list_matchups()) == 2


def test_sync_week_feed_failure_leaves_store_untouched(store):
    matchups = MatchupStore(store)
    matchups.sync(reg7_games(), "REG", 7)

    class DownFeed:
        def fetch_week(self, phase, week, *, year=None):
            raise TransientSourceError("feed unavailable")

    with pytest.raises(TransientSourceError):
        matchups.sync_week(DownFeed(), "REG", 7)
    assert len(matchups.matchups_for("REG", 7)) == 3


def test_matchups_for_filters_by_week(store):
    matchups = MatchupStore(store)
    matchups.sync(reg7_games(), "REG", 7)
    matchups.sync([game("SEA", "LAR", REG7_SUNDAY_LATE + timedelta(days=7), label="REG8")], "REG", 8)
    assert len(matchups.matchups_for("REG", 7)) == 3
    assert [m.home_team for m in matchups.matchups_for("REG", 8)] == ["LAR"]
    assert matchups.matchup_by_id("missing") is None
