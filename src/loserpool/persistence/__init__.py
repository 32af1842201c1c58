"""Persistence layer for picks, week allocations and matchups."""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence
from uuid import uuid4

from loserpool.config.weeks import WEEK_SLOTS, slot_for_label
from loserpool.models import AllocationToken


MATCHUP_MUTABLE_FIELDS = (
    "kickoff",
    "status",
    "away_spread",
    "home_spread",
    "away_score",
    "home_score",
    "venue",
    "external_id",
)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


def _parse_ts(value: Optional[str]) -> Optional[datetime]:
    return datetime.fromisoformat(value) if value else None


@dataclass
class UserRecord:
    user_id: str
    is_tester: bool
    pinned_week: Optional[str]
    created_at: datetime
    updated_at: datetime


@dataclass
class GrantRecord:
    grant_id: str
    user_id: str
    picks_count: int
    source: str
    status: str
    created_at: datetime


@dataclass
class AllocationRecord:
    pick_id: str
    week_slot: str
    matchup_id: str
    team: str
    is_default: bool
    allocated_at: datetime

    @property
    def token(self) -> AllocationToken:
        return AllocationToken(matchup_id=self.matchup_id, team=self.team)


@dataclass
class PickRecord:
    pick_id: str
    user_id: str
    number: int
    display_name: str
    status: str
    picks_count: int
    created_at: datetime
    updated_at: datetime
    allocations: Dict[str, AllocationRecord] = field(default_factory=dict)

    def token_for(self, slot: str) -> Optional[AllocationToken]:
        allocation = self.allocations.get(slot)
        return allocation.token if allocation else None


@dataclass
class MatchupRecord:
    matchup_id: str
    phase: str
    week: int
    season_label: str
    away_team: str
    home_team: str
    kickoff: datetime
    status: str
    away_spread: Optional[float]
    home_spread: Optional[float]
    away_score: Optional[int]
    home_score: Optional[int]
    venue: Optional[str]
    external_id: Optional[str]
    data_source: Optional[str]
    last_api_update: Optional[datetime]
    api_update_count: int
    evaluated_at: Optional[datetime]
    created_at: datetime
    updated_at: datetime

    @property
    def slot(self) -> str:
        return slot_for_label(self.season_label)

    @property
    def max_spread(self) -> float:
        return max(abs(self.away_spread or 0.0), abs(self.home_spread or 0.0))

    @property
    def has_spread(self) -> bool:
        return self.away_spread is not None or self.home_spread is not None

    def teams(self) -> tuple[str, str]:
        return self.away_team, self.home_team


class PoolStore:
    """SQLite-backed store for the pool.

    Multi-statement writes go through :meth:`transaction`, which takes the
    database write lock up front (``BEGIN IMMEDIATE``) so concurrent writers
    serialize instead of interleaving.
    """

    def __init__(self, db_path: Path | str):
        self.db_path = Path(db_path)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, timeout=30.0)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    @contextmanager
    def _session(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        try:
            yield conn
            conn.commit()
        finally:
            conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        conn = self._connect()
        conn.isolation_level = None
        try:
            conn.execute("BEGIN IMMEDIATE")
            yield conn
            conn.execute("COMMIT")
        except BaseException:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    @contextmanager
    def _use(self, conn: Optional[sqlite3.Connection]) -> Iterator[sqlite3.Connection]:
        if conn is not None:
            yield conn
            return
        with self._session() as own:
            yield own

    def _ensure_schema(self) -> None:
        with self._session() as conn:
            self._create_schema(conn)

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        slot_list = ", ".join(f"'{slot}'" for slot in WEEK_SLOTS)
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS users (
                id TEXT PRIMARY KEY,
                is_tester INTEGER NOT NULL DEFAULT 0,
                pinned_week TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS grants (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL REFERENCES users(id),
                picks_count INTEGER NOT NULL CHECK (picks_count > 0),
                source TEXT NOT NULL,
                status TEXT NOT NULL,
                created_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS picks (
                id TEXT PRIMARY KEY,
                user_id TEXT NOT NULL REFERENCES users(id),
                number INTEGER NOT NULL,
                display_name TEXT NOT NULL,
                status TEXT NOT NULL CHECK (status IN ('pending', 'active', 'eliminated')),
                picks_count INTEGER NOT NULL DEFAULT 1,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                UNIQUE (user_id, number),
                UNIQUE (user_id, display_name)
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS matchups (
                id TEXT PRIMARY KEY,
                phase TEXT NOT NULL,
                week INTEGER NOT NULL,
                season_label TEXT NOT NULL,
                away_team TEXT NOT NULL,
                home_team TEXT NOT NULL,
                kickoff TEXT NOT NULL,
                status TEXT NOT NULL CHECK (status IN ('scheduled', 'in_progress', 'final')),
                away_spread REAL,
                home_spread REAL,
                away_score INTEGER,
                home_score INTEGER,
                venue TEXT,
                external_id TEXT,
                data_source TEXT,
                last_api_update TEXT,
                api_update_count INTEGER NOT NULL DEFAULT 0,
                evaluated_at TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                UNIQUE (season_label, away_team, home_team)
            )
            """
        )
        conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS pick_week_allocations (
                pick_id TEXT NOT NULL REFERENCES picks(id) ON DELETE CASCADE,
                week_slot TEXT NOT NULL CHECK (week_slot IN ({slot_list})),
                matchup_id TEXT NOT NULL REFERENCES matchups(id),
                team TEXT NOT NULL,
                is_default INTEGER NOT NULL DEFAULT 0,
                allocated_at TEXT NOT NULL,
                PRIMARY KEY (pick_id, week_slot)
            )
            """
        )
        conn.execute(
            "CREATE INDEX IF NOT EXISTS idx_allocations_matchup ON pick_week_allocations (matchup_id, team)"
        )
        conn.execute("CREATE INDEX IF NOT EXISTS idx_matchups_label ON matchups (season_label, kickoff)")
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS settings (
                key TEXT PRIMARY KEY,
                value TEXT,
                updated_at TEXT NOT NULL
            )
            """
        )

    # -- users -------------------------------------------------------------

    def ensure_user(self, user_id: str, *, conn: Optional[sqlite3.Connection] = None) -> None:
        now = _iso(_now())
        with self._use(conn) as db:
            db.execute(
                "INSERT OR IGNORE INTO users (id, is_tester, pinned_week, created_at, updated_at) VALUES (?, 0, NULL, ?, ?)",
                (user_id, now, now),
            )

    def get_user(self, user_id: str, *, conn: Optional[sqlite3.Connection] = None) -> Optional[UserRecord]:
        with self._use(conn) as db:
            row = db.execute("SELECT * FROM users WHERE id = ?", (user_id,)).fetchone()
        return self._row_to_user(row) if row else None

    def set_tester(self, user_id: str, *, is_tester: bool, pinned_week: Optional[str]) -> UserRecord:
        now = _iso(_now())
        with self.transaction() as conn:
            self.ensure_user(user_id, conn=conn)
            conn.execute(
                "UPDATE users SET is_tester = ?, pinned_week = ?, updated_at = ? WHERE id = ?",
                (1 if is_tester else 0, pinned_week, now, user_id),
            )
            user = self.get_user(user_id, conn=conn)
        if user is None:  # pragma: no cover
            raise KeyError(f"User {user_id} not found after update")
        return user

    # -- grants and picks --------------------------------------------------

    def grant_picks(self, user_id: str, picks_count: int, *, source: str) -> List[PickRecord]:
        """Record a completed grant and materialize its picks.

        New picks continue numbering from the user's highest existing pick.
        """

        now = _iso(_now())
        with self.transaction() as conn:
            self.ensure_user(user_id, conn=conn)
            conn.execute(
                """
                INSERT INTO grants (id, user_id, picks_count, source, status, created_at)
                VALUES (?, ?, ?, ?, 'completed', ?)
                """,
                (uuid4().hex, user_id, picks_count, source, now),
            )
            row = conn.execute(
                "SELECT COALESCE(MAX(number), 0) AS top FROM picks WHERE user_id = ?",
                (user_id,),
            ).fetchone()
            start = int(row["top"]) + 1
            pick_ids = []
            for number in range(start, start + picks_count):
                pick_id = uuid4().hex
                pick_ids.append(pick_id)
                conn.execute(
                    """
                    INSERT INTO picks (id, user_id, number, display_name, status, picks_count, created_at, updated_at)
                    VALUES (?, ?, ?, ?, 'pending', 1, ?, ?)
                    """,
                    (pick_id, user_id, number, f"Pick {number}", now, now),
                )
            picks = self._load_picks(conn, "SELECT * FROM picks WHERE id IN ({}) ORDER BY number", pick_ids)
        return picks

    def list_grants(self, user_id: str) -> List[GrantRecord]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM grants WHERE user_id = ? ORDER BY created_at",
                (user_id,),
            ).fetchall()
        return [self._row_to_grant(row) for row in rows]

    def users_with_completed_grants(
        self,
        *,
        testers_only: bool = False,
        conn: Optional[sqlite3.Connection] = None,
    ) -> List[str]:
        query = """
            SELECT DISTINCT g.user_id FROM grants g
            JOIN users u ON u.id = g.user_id
            WHERE g.status = 'completed'
        """
        if testers_only:
            query += " AND u.is_tester = 1"
        query += " ORDER BY g.user_id"
        with self._use(conn) as db:
            rows = db.execute(query).fetchall()
        return [row["user_id"] for row in rows]

    def get_pick(self, pick_id: str, *, conn: Optional[sqlite3.Connection] = None) -> Optional[PickRecord]:
        with self._use(conn) as db:
            picks = self._load_picks(db, "SELECT * FROM picks WHERE id IN ({})", [pick_id])
        return picks[0] if picks else None

    def list_picks(self, user_id: Optional[str] = None, *, conn: Optional[sqlite3.Connection] = None) -> List[PickRecord]:
        with self._use(conn) as db:
            if user_id is None:
                rows = db.execute("SELECT * FROM picks ORDER BY user_id, number").fetchall()
            else:
                rows = db.execute(
                    "SELECT * FROM picks WHERE user_id = ? ORDER BY number",
                    (user_id,),
                ).fetchall()
            return self._attach_allocations(db, rows)

    def picks_by_name(
        self,
        user_id: str,
        names: Sequence[str],
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Dict[str, PickRecord]:
        if not names:
            return {}
        placeholders = ", ".join("?" for _ in names)
        with self._use(conn) as db:
            rows = db.execute(
                f"SELECT * FROM picks WHERE user_id = ? AND display_name IN ({placeholders})",
                (user_id, *names),
            ).fetchall()
            picks = self._attach_allocations(db, rows)
        return {pick.display_name: pick for pick in picks}

    def activate_pick(self, conn: sqlite3.Connection, pick_id: str, *, now: datetime) -> bool:
        """Mark a non-eliminated pick active. Returns False if nothing changed hands."""

        cur = conn.execute(
            """
            UPDATE picks SET status = 'active', updated_at = ?
            WHERE id = ? AND status != 'eliminated'
            """,
            (_iso(now), pick_id),
        )
        return cur.rowcount == 1

    def revert_to_pending_if_unallocated(self, conn: sqlite3.Connection, pick_id: str, *, now: datetime) -> bool:
        cur = conn.execute(
            """
            UPDATE picks SET status = 'pending', updated_at = ?
            WHERE id = ? AND status = 'active'
              AND NOT EXISTS (SELECT 1 FROM pick_week_allocations WHERE pick_id = picks.id)
            """,
            (_iso(now), pick_id),
        )
        return cur.rowcount == 1

    # -- allocations -------------------------------------------------------

    def upsert_allocation(
        self,
        conn: sqlite3.Connection,
        *,
        pick_id: str,
        week_slot: str,
        matchup_id: str,
        team: str,
        now: datetime,
        is_default: bool = False,
    ) -> None:
        conn.execute(
            """
            INSERT INTO pick_week_allocations (pick_id, week_slot, matchup_id, team, is_default, allocated_at)
            VALUES (?, ?, ?, ?, ?, ?)
            ON CONFLICT (pick_id, week_slot) DO UPDATE SET
                matchup_id = excluded.matchup_id,
                team = excluded.team,
                is_default = excluded.is_default,
                allocated_at = excluded.allocated_at
            """,
            (pick_id, week_slot, matchup_id, team, 1 if is_default else 0, _iso(now)),
        )

    def delete_allocation(self, conn: sqlite3.Connection, *, pick_id: str, week_slot: str) -> bool:
        cur = conn.execute(
            "DELETE FROM pick_week_allocations WHERE pick_id = ? AND week_slot = ?",
            (pick_id, week_slot),
        )
        return cur.rowcount == 1

    def fill_empty_slot(
        self,
        conn: sqlite3.Connection,
        *,
        user_ids: Iterable[str],
        week_slot: str,
        matchup_id: str,
        team: str,
        now: datetime,
    ) -> List[str]:
        """Give every unallocated, non-eliminated pick of ``user_ids`` a default token.

        Picks that already hold a token for ``week_slot`` are left alone.
        """

        user_list = list(user_ids)
        if not user_list:
            return []
        placeholders = ", ".join("?" for _ in user_list)
        rows = conn.execute(
            f"""
            SELECT id FROM picks
            WHERE user_id IN ({placeholders})
              AND status != 'eliminated'
              AND NOT EXISTS (
                  SELECT 1 FROM pick_week_allocations a
                  WHERE a.pick_id = picks.id AND a.week_slot = ?
              )
            ORDER BY user_id, number
            """,
            (*user_list, week_slot),
        ).fetchall()
        assigned: List[str] = []
        stamp = _iso(now)
        for row in rows:
            cur = conn.execute(
                """
                INSERT OR IGNORE INTO pick_week_allocations
                    (pick_id, week_slot, matchup_id, team, is_default, allocated_at)
                VALUES (?, ?, ?, ?, 1, ?)
                """,
                (row["id"], week_slot, matchup_id, team, stamp),
            )
            if cur.rowcount == 1:
                conn.execute(
                    "UPDATE picks SET status = 'active', updated_at = ? WHERE id = ? AND status = 'pending'",
                    (stamp, row["id"]),
                )
                assigned.append(row["id"])
        return assigned

    def eliminate_picks_on_team(
        self,
        conn: sqlite3.Connection,
        *,
        matchup_id: str,
        week_slot: str,
        team: str,
        now: datetime,
    ) -> List[str]:
        rows = conn.execute(
            """
            SELECT p.id FROM picks p
            JOIN pick_week_allocations a ON a.pick_id = p.id
            WHERE a.matchup_id = ? AND a.week_slot = ? AND a.team = ? AND p.status = 'active'
            ORDER BY p.user_id, p.number
            """,
            (matchup_id, week_slot, team),
        ).fetchall()
        pick_ids = [row["id"] for row in rows]
        stamp = _iso(now)
        for pick_id in pick_ids:
            conn.execute(
                "UPDATE picks SET status = 'eliminated', updated_at = ? WHERE id = ? AND status = 'active'",
                (stamp, pick_id),
            )
        return pick_ids

    # -- matchups ----------------------------------------------------------

    def get_matchup(self, matchup_id: str, *, conn: Optional[sqlite3.Connection] = None) -> Optional[MatchupRecord]:
        if not matchup_id:
            return None
        with self._use(conn) as db:
            row = db.execute("SELECT * FROM matchups WHERE id = ?", (matchup_id,)).fetchone()
        return self._row_to_matchup(row) if row else None

    def find_matchup(
        self,
        season_label: str,
        away_team: str,
        home_team: str,
        *,
        conn: Optional[sqlite3.Connection] = None,
    ) -> Optional[MatchupRecord]:
        with self._use(conn) as db:
            row = db.execute(
                """
                SELECT * FROM matchups
                WHERE season_label = ? AND UPPER(away_team) = UPPER(?) AND UPPER(home_team) = UPPER(?)
                """,
                (season_label, away_team, home_team),
            ).fetchone()
        return self._row_to_matchup(row) if row else None

    def list_matchups(
        self,
        *,
        season_label: Optional[str] = None,
        status: Optional[str] = None,
        conn: Optional[sqlite3.Connection] = None,
    ) -> List[MatchupRecord]:
        query = "SELECT * FROM matchups"
        conditions: list[str] = []
        params: list[str] = []
        if season_label:
            conditions.append("season_label = ?")
            params.append(season_label)
        if status:
            conditions.append("status = ?")
            params.append(status)
        if conditions:
            query += " WHERE " + " AND ".join(conditions)
        query += " ORDER BY kickoff, id"
        with self._use(conn) as db:
            rows = db.execute(query, tuple(params)).fetchall()
        return [self._row_to_matchup(row) for row in rows]

    def list_unevaluated_finals(self) -> List[MatchupRecord]:
        with self._session() as conn:
            rows = conn.execute(
                "SELECT * FROM matchups WHERE status = 'final' AND evaluated_at IS NULL ORDER BY kickoff, id"
            ).fetchall()
        return [self._row_to_matchup(row) for row in rows]

    def insert_matchup(
        self,
        conn: sqlite3.Connection,
        *,
        phase: str,
        week: int,
        season_label: str,
        fields: Mapping[str, object],
        away_team: str,
        home_team: str,
        data_source: Optional[str],
        now: datetime,
    ) -> str:
        matchup_id = str(uuid4())
        stamp = _iso(now)
        kickoff = fields["kickoff"]
        conn.execute(
            """
            INSERT INTO matchups (
                id, phase, week, season_label, away_team, home_team, kickoff, status,
                away_spread, home_spread, away_score, home_score, venue, external_id,
                data_source, last_api_update, api_update_count, evaluated_at, created_at, updated_at
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, 1, NULL, ?, ?)
            """,
            (
                matchup_id,
                phase,
                week,
                season_label,
                away_team,
                home_team,
                _iso(kickoff) if isinstance(kickoff, datetime) else kickoff,
                fields.get("status", "scheduled"),
                fields.get("away_spread"),
                fields.get("home_spread"),
                fields.get("away_score"),
                fields.get("home_score"),
                fields.get("venue"),
                fields.get("external_id"),
                data_source,
                stamp,
                stamp,
                stamp,
            ),
        )
        return matchup_id

    def update_matchup(
        self,
        conn: sqlite3.Connection,
        matchup_id: str,
        *,
        changes: Mapping[str, object],
        now: datetime,
    ) -> None:
        unknown = set(changes) - set(MATCHUP_MUTABLE_FIELDS)
        if unknown:
            raise KeyError(f"Matchup fields are not updatable: {sorted(unknown)}")
        if not changes:
            return
        assignments = ", ".join(f"{name} = ?" for name in changes)
        values = [
            _iso(value) if isinstance(value, datetime) else value
            for value in changes.values()
        ]
        stamp = _iso(now)
        conn.execute(
            f"""
            UPDATE matchups
            SET {assignments},
                last_api_update = ?,
                api_update_count = api_update_count + 1,
                updated_at = ?
            WHERE id = ?
            """,
            (*values, stamp, stamp, matchup_id),
        )

    def mark_evaluated(self, conn: sqlite3.Connection, matchup_id: str, *, now: datetime) -> bool:
        cur = conn.execute(
            "UPDATE matchups SET evaluated_at = ? WHERE id = ? AND evaluated_at IS NULL",
            (_iso(now), matchup_id),
        )
        return cur.rowcount == 1

    # -- settings ----------------------------------------------------------

    def get_setting(self, key: str, *, conn: Optional[sqlite3.Connection] = None) -> Optional[str]:
        with self._use(conn) as db:
            row = db.execute("SELECT value FROM settings WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def set_setting(self, key: str, value: Optional[str], *, conn: Optional[sqlite3.Connection] = None) -> None:
        with self._use(conn) as db:
            db.execute(
                """
                INSERT INTO settings (key, value, updated_at) VALUES (?, ?, ?)
                ON CONFLICT (key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                """,
                (key, value, _iso(_now())),
            )

    # -- row mapping -------------------------------------------------------

    def _load_picks(self, conn: sqlite3.Connection, query: str, ids: Sequence[str]) -> List[PickRecord]:
        if not ids:
            return []
        placeholders = ", ".join("?" for _ in ids)
        rows = conn.execute(query.format(placeholders), tuple(ids)).fetchall()
        return self._attach_allocations(conn, rows)

    def _attach_allocations(self, conn: sqlite3.Connection, rows: Sequence[sqlite3.Row]) -> List[PickRecord]:
        picks = [self._row_to_pick(row) for row in rows]
        if not picks:
            return picks
        by_id = {pick.pick_id: pick for pick in picks}
        placeholders = ", ".join("?" for _ in by_id)
        alloc_rows = conn.execute(
            f"SELECT * FROM pick_week_allocations WHERE pick_id IN ({placeholders})",
            tuple(by_id),
        ).fetchall()
        for alloc_row in alloc_rows:
            allocation = self._row_to_allocation(alloc_row)
            by_id[allocation.pick_id].allocations[allocation.week_slot] = allocation
        return picks

    def _row_to_user(self, row: sqlite3.Row) -> UserRecord:
        return UserRecord(
            user_id=row["id"],
            is_tester=bool(row["is_tester"]),
            pinned_week=row["pinned_week"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_grant(self, row: sqlite3.Row) -> GrantRecord:
        return GrantRecord(
            grant_id=row["id"],
            user_id=row["user_id"],
            picks_count=row["picks_count"],
            source=row["source"],
            status=row["status"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )

    def _row_to_pick(self, row: sqlite3.Row) -> PickRecord:
        return PickRecord(
            pick_id=row["id"],
            user_id=row["user_id"],
            number=row["number"],
            display_name=row["display_name"],
            status=row["status"],
            picks_count=row["picks_count"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_allocation(self, row: sqlite3.Row) -> AllocationRecord:
        return AllocationRecord(
            pick_id=row["pick_id"],
            week_slot=row["week_slot"],
            matchup_id=row["matchup_id"],
            team=row["team"],
            is_default=bool(row["is_default"]),
            allocated_at=datetime.fromisoformat(row["allocated_at"]),
        )

    def _row_to_matchup(self, row: sqlite3.Row) -> MatchupRecord:
        return MatchupRecord(
            matchup_id=row["id"],
            phase=row["phase"],
            week=row["week"],
            season_label=row["season_label"],
            away_team=row["away_team"],
            home_team=row["home_team"],
            kickoff=datetime.fromisoformat(row["kickoff"]),
            status=row["status"],
            away_spread=row["away_spread"],
            home_spread=row["home_spread"],
            away_score=row["away_score"],
            home_score=row["home_score"],
            venue=row["venue"],
            external_id=row["external_id"],
            data_source=row["data_source"],
            last_api_update=_parse_ts(row["last_api_update"]),
            api_update_count=row["api_update_count"],
            evaluated_at=_parse_ts(row["evaluated_at"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


__all__ = [
    "AllocationRecord",
    "GrantRecord",
    "MATCHUP_MUTABLE_FIELDS",
    "MatchupRecord",
    "PickRecord",
    "PoolStore",
    "UserRecord",
]
