import csv
from io import StringIO

from loserpool.picks import PickAllocationEngine
from loserpool.reports import export_picks_to_csv, team_pick_breakdown

from tests.helpers import REG7_TUESDAY, seed_reg7


def _allocate_sample(store, season):
    slate = seed_reg7(store)
    engine = PickAllocationEngine(store, season)
    engine.grant_picks("alice", 2)
    engine.grant_picks("bob", 1)
    engine.allocate("alice", slate["KC"].matchup_id, "KC", ["Pick 1", "Pick 2"], now=REG7_TUESDAY)
    engine.allocate("bob", slate["DAL"].matchup_id, "PHI", ["Pick 1"], now=REG7_TUESDAY)
    return slate


def test_team_breakdown_counts_picks_per_team(store, season):
    _allocate_sample(store, season)

    rows = team_pick_breakdown(store, "REG7")

    assert len(rows) == 6
    assert (rows[0].team, rows[0].total, rows[0].active) == ("KC", 2, 2)
    assert rows[0].opponent == "BUF"
    by_team = {row.team: row for row in rows}
    assert by_team["PHI"].total == 1
    assert by_team["MIA"].total == 0
    assert by_team["KC"].defaults == 0


def test_picks_csv_has_one_column_per_used_slot(store, season):
    slate = _allocate_sample(store, season)

    text = export_picks_to_csv(store.list_picks())

    rows = list(csv.reader(StringIO(text)))
    assert rows[0] == ["UserId", "Pick", "Status", "reg7"]
    assert rows[1] == ["alice", "Pick 1", "active", f"{slate['KC'].matchup_id}_KC"]
    assert rows[3] == ["bob", "Pick 1", "active", f"{slate['DAL'].matchup_id}_PHI"]


def test_picks_csv_with_explicit_slots(store, season):
    PickAllocationEngine(store, season).grant_picks("carol", 1)
    text = export_picks_to_csv(store.list_picks(), slots=["reg1", "reg2"])
    rows = list(csv.reader(StringIO(text)))
    assert rows == [["UserId", "Pick", "Status", "reg1", "reg2"], ["carol", "Pick 1", "pending", "", ""]]
