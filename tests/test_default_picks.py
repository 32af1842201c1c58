from datetime import datetime, timedelta, timezone

import pytest

from loserpool.errors import ValidationError
from loserpool.matchups import MatchupStore
from loserpool.picks import DefaultPickAssigner, PickAllocationEngine, favored_team, select_default_matchup

from tests.helpers import (
    REG7_SUNDAY_EARLY,
    REG7_SUNDAY_LATE,
    REG7_THURSDAY_KICKOFF,
    REG7_TUESDAY,
    game,
    seed_reg7,
    set_pick_status,
)


AFTER_THURSDAY = REG7_THURSDAY_KICKOFF + timedelta(minutes=30)


@pytest.fixture
def engine(store, season):
    return PickAllocationEngine(store, season)


@pytest.fixture
def assigner(store, season):
    return DefaultPickAssigner(store, season)


def _pick(store, user_id, name):
    return store.picks_by_name(user_id, [name])[name]


def test_nothing_assigned_before_deadline(assigner, engine, store):
    seed_reg7(store)
    engine.grant_picks("alice", 1)
    result = assigner.assign_defaults("REG", 7, now=REG7_TUESDAY)
    assert result.skipped_reason == "deadline not reached"
    assert _pick(store, "alice", "Pick 1").allocations == {}
    assert store.get_setting("default_picks_assigned_reg7") is None


def test_unallocated_picks_get_largest_spread_favorite(assigner, engine, store):
    slate = seed_reg7(store)
    engine.grant_picks("alice", 2)
    engine.grant_picks("bob", 1)
    engine.allocate("alice", slate["KC"].matchup_id, "BUF", ["Pick 1"], now=REG7_TUESDAY)

    result = assigner.assign_defaults("REG", 7, now=AFTER_THURSDAY)

    # DAL@PHI carries the biggest line (PHI -6.5).
    assert result.matchup_id == slate["DAL"].matchup_id
    assert result.team == "PHI"
    assert len(result.picks_assigned) == 2
    alice_two = _pick(store, "alice", "Pick 2")
    assert alice_two.status == "active"
    assert alice_two.allocations["reg7"].team == "PHI"
    assert alice_two.allocations["reg7"].is_default
    assert _pick(store, "bob", "Pick 1").allocations["reg7"].token.encode() == f"{slate['DAL'].matchup_id}_PHI"
    # The manual allocation is untouched.
    assert _pick(store, "alice", "Pick 1").allocations["reg7"].team == "BUF"
    assert store.get_setting("default_picks_assigned_reg7") is not None


def test_rerun_does_not_reassign(assigner, engine, store):
    seed_reg7(store)
    engine.grant_picks("alice", 1)
    first = assigner.assign_defaults("REG", 7, now=AFTER_THURSDAY)
    second = assigner.assign_defaults("REG", 7, now=AFTER_THURSDAY + timedelta(hours=1))
    assert len(first.picks_assigned) == 1
    assert second.picks_assigned == []


def test_defaults_use_current_week_when_not_given(assigner, engine, store):
    seed_reg7(store)
    engine.grant_picks("alice", 1)
    result = assigner.assign_defaults(now=AFTER_THURSDAY)
    assert result.label == "REG7"
    assert result.slot == "reg7"
    assert result.picks_assigned


def test_eliminated_picks_are_skipped(assigner, engine, store):
    seed_reg7(store)
    engine.grant_picks("alice", 2)
    set_pick_status(store, _pick(store, "alice", "Pick 1").pick_id, "eliminated")
    result = assigner.assign_defaults("REG", 7, now=AFTER_THURSDAY)
    assert result.picks_assigned == [_pick(store, "alice", "Pick 2").pick_id]
    assert _pick(store, "alice", "Pick 1").allocations == {}


def test_spread_ties_break_on_earliest_kickoff(store):
    MatchupStore(store).sync(
        [
            game("SEA", "LAR", REG7_SUNDAY_LATE, away_spread=-7.0),
            game("DEN", "LV", REG7_SUNDAY_EARLY, away_spread=7.0),
        ],
        "REG",
        7,
    )
    chosen = select_default_matchup(store.list_matchups(season_label="REG7"))
    assert chosen.away_team == "DEN"
    assert favored_team(chosen) == "LV"


def test_scheduled_game_at_kickoff_is_still_the_default(assigner, engine, store):
    MatchupStore(store).sync(
        [
            game("SEA", "LAR", REG7_THURSDAY_KICKOFF, away_spread=-10.0),
            game("DEN", "LV", REG7_SUNDAY_EARLY, away_spread=3.0),
        ],
        "REG",
        7,
    )
    engine.grant_picks("alice", 1)
    result = assigner.assign_defaults("REG", 7, now=REG7_THURSDAY_KICKOFF)
    assert result.skipped_reason is None
    assert result.team == "SEA"
    assert result.picks_assigned == [_pick(store, "alice", "Pick 1").pick_id]


def test_finished_games_do_not_count_toward_the_deadline(assigner, engine, store):
    MatchupStore(store).sync(
        [
            game(
                "NYJ",
                "MIA",
                REG7_THURSDAY_KICKOFF,
                away_spread=2.5,
                status="final",
                away_score=20,
                home_score=17,
            ),
            game("KC", "BUF", REG7_SUNDAY_EARLY, away_spread=-3.5),
            game("DAL", "PHI", REG7_SUNDAY_LATE, away_spread=6.5),
        ],
        "REG",
        7,
    )
    engine.grant_picks("alice", 1)
    friday = REG7_THURSDAY_KICKOFF + timedelta(days=1)

    result = assigner.assign_defaults("REG", 7, now=friday)
    assert result.skipped_reason == "deadline not reached"
    assert _pick(store, "alice", "Pick 1").allocations == {}

    result = assigner.assign_defaults("REG", 7, now=REG7_SUNDAY_EARLY)
    assert result.team == "PHI"
    assert len(result.picks_assigned) == 1


def test_favored_team_uses_home_line_when_away_missing(store):
    MatchupStore(store).sync([game("DEN", "LV", REG7_SUNDAY_EARLY)], "REG", 7)
    stored = store.find_matchup("REG7", "DEN", "LV")
    stored.home_spread = 4.0
    assert favored_team(stored) == "DEN"


def test_underdog_policy_takes_the_other_side(engine, store, season):
    slate = seed_reg7(store)
    engine.grant_picks("alice", 1)
    result = DefaultPickAssigner(store, season, policy="underdog").assign_defaults("REG", 7, now=AFTER_THURSDAY)
    assert result.matchup_id == slate["DAL"].matchup_id
    assert result.team == "DAL"


def test_unknown_policy_is_rejected(store, season):
    with pytest.raises(ValidationError):
        DefaultPickAssigner(store, season, policy="coin-flip")


def test_week_without_spreads_is_skipped(assigner, engine, store):
    MatchupStore(store).sync(
        [game("DEN", "LV", REG7_SUNDAY_EARLY), game("SEA", "LAR", REG7_SUNDAY_LATE)],
        "REG",
        7,
    )
    engine.grant_picks("alice", 1)
    result = assigner.assign_defaults("REG", 7, now=REG7_SUNDAY_EARLY + timedelta(minutes=5))
    assert result.skipped_reason == "no spreads available"


def test_week_fully_under_way_is_skipped(assigner, engine, store):
    MatchupStore(store).sync(
        [game("DEN", "LV", REG7_SUNDAY_EARLY, away_spread=-2.0, status="in_progress")],
        "REG",
        7,
    )
    engine.grant_picks("alice", 1)
    result = assigner.assign_defaults("REG", 7, now=REG7_SUNDAY_EARLY)
    assert result.skipped_reason == "no scheduled matchups left"


def test_week_without_matchups_is_skipped(assigner):
    result = assigner.assign_defaults("REG", 9, now=AFTER_THURSDAY)
    assert result.skipped
    assert "REG9" in result.skipped_reason


def test_preseason_defaults_only_reach_testers(assigner, engine, store, season):
    early = datetime(2025, 8, 8, 0, 0, tzinfo=timezone.utc)
    late = datetime(2025, 8, 9, 20, 0, tzinfo=timezone.utc)
    MatchupStore(store).sync(
        [
            game("DEN", "LV", early, label="PRE1", away_spread=-1.5),
            game("SEA", "LAR", late, label="PRE1", away_spread=-2.5),
        ],
        "PRE",
        1,
    )
    engine.grant_picks("alice", 1)
    engine.grant_picks("qa", 1)
    season.set_tester("qa", is_tester=True)

    result = assigner.assign_defaults("PRE", 1, now=early + timedelta(hours=1))

    assert result.team == "SEA"
    assert result.picks_assigned == [_pick(store, "qa", "Pick 1").pick_id]
    assert _pick(store, "alice", "Pick 1").allocations == {}
