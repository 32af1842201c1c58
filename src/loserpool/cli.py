"""Command-line interface for the administrative triggers."""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path

from loserpool.config_loader import PoolSettings
from loserpool.errors import PoolError, ValidationError
from loserpool.ingest.schedule import ScheduleFeed
from loserpool.ingest.vocabulary import label_from_absolute_week
from loserpool.matchups import MatchupStore
from loserpool.persistence import PoolStore
from loserpool.picks import DefaultPickAssigner, PickAllocationEngine
from loserpool.results import EliminationEvaluator
from loserpool.season import SeasonService


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Loser pool administration")
    parser.add_argument("--load-profile", type=Path, default=None, help="Load settings JSON")
    parser.add_argument("--save-profile", type=Path, default=None, help="Save the resolved settings JSON")
    parser.add_argument("--db", type=Path, default=None, help="SQLite database path")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("current-week", help="Resolve and cache the current week")

    sync = sub.add_parser("sync-week", help="Fetch one week from the schedule feed and sync matchups")
    sync.add_argument("--phase", default=None, help="PRE, REG or POST (defaults to the current phase)")
    sync.add_argument("--week", type=int, default=None, help="Week within the phase")
    sync.add_argument(
        "--absolute-week",
        type=int,
        default=None,
        help="Season-wide week number (1-3 PRE, 4-21 REG, 22-25 POST)",
    )
    sync.add_argument("--year", type=int, default=None, help="Season year passed to the feed")

    defaults = sub.add_parser("assign-defaults", help="Fill empty slots after the weekly deadline")
    defaults.add_argument("--phase", default=None)
    defaults.add_argument("--week", type=int, default=None)
    defaults.add_argument("--absolute-week", type=int, default=None, help="Season-wide week number")

    sub.add_parser("evaluate-results", help="Eliminate picks on winning teams of final games")

    grant = sub.add_parser("grant", help="Grant picks to a user")
    grant.add_argument("user_id")
    grant.add_argument("picks_count", type=int)
    grant.add_argument("--source", default="admin", choices=("purchase", "free", "admin"))

    start = sub.add_parser("set-season-start", help="Store the season start date")
    start.add_argument("season_start", type=date.fromisoformat, help="YYYY-MM-DD")

    serve = sub.add_parser("serve", help="Run the API with uvicorn")
    serve.add_argument("--host", default="127.0.0.1")
    serve.add_argument("--port", type=int, default=8000)

    return parser.parse_args(argv)


def _resolve_settings(args: argparse.Namespace) -> PoolSettings:
    base = PoolSettings.load(args.load_profile) if args.load_profile else None
    settings = PoolSettings.from_env(base)
    if args.db is not None:
        settings.db_path = args.db
    if args.save_profile:
        settings.save(args.save_profile)
        print(f"Saved settings profile to {args.save_profile}")
    return settings


def _week_from_args(args: argparse.Namespace) -> tuple[str | None, int | None]:
    if args.absolute_week is None:
        return args.phase, args.week
    if args.phase is not None or args.week is not None:
        raise ValidationError("Give either --absolute-week or --phase/--week, not both")
    phase, week = label_from_absolute_week(args.absolute_week)
    return phase.value, week


def _run(args: argparse.Namespace, settings: PoolSettings) -> None:
    store = PoolStore(settings.db_path)
    season = SeasonService(store, season_start=settings.season_start)

    if args.command == "current-week":
        state = season.refresh_current_week()
        print(f"{state.label} ({state.display}), slot {state.slot}")
        if state.deadline_passed:
            print("Deadline has passed for this week")
        return

    if args.command == "sync-week":
        phase, week = _week_from_args(args)
        if phase is None or week is None:
            state = season.current()
            phase = phase or state.phase
            week = week or state.week
        feed = ScheduleFeed(settings.feed_base_url, timeout=settings.feed_timeout, retries=settings.feed_retries)
        result = MatchupStore(store).sync_week(
            feed,
            phase,
            week,
            year=args.year,
            budget_seconds=settings.sync_budget_seconds,
        )
        print(
            f"Synced {result.label}: {result.created} created, {result.updated} updated, "
            f"{result.unchanged} unchanged"
        )
        if result.not_processed:
            print(f"Stopped early; {result.not_processed} games not processed")
        for error in result.errors:
            print(f"Skipped {error}")
        return

    if args.command == "assign-defaults":
        assigner = DefaultPickAssigner(store, season, policy=settings.default_pick_policy)
        phase, week = _week_from_args(args)
        result = assigner.assign_defaults(phase, week)
        if result.skipped:
            print(f"No default picks for {result.label}: {result.skipped_reason}")
        else:
            print(f"Assigned {len(result.picks_assigned)} default pick(s) for {result.label} to {result.team}")
        return

    if args.command == "evaluate-results":
        summary = EliminationEvaluator(store).evaluate_results()
        print(f"Evaluated {len(summary.results)} matchup(s); eliminated {summary.picks_eliminated} pick(s)")
        for error in summary.errors:
            print(f"Skipped {error}")
        return

    if args.command == "grant":
        picks = PickAllocationEngine(store, season).grant_picks(args.user_id, args.picks_count, source=args.source)
        print(f"Granted {', '.join(pick.display_name for pick in picks)} to {args.user_id}")
        return

    if args.command == "set-season-start":
        season.set_season_start(args.season_start)
        print(f"Season start set to {args.season_start.isoformat()}")
        return


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    settings = _resolve_settings(args)

    if args.command == "serve":
        import uvicorn

        from loserpool.api import create_app

        uvicorn.run(create_app(settings), host=args.host, port=args.port)
        return 0

    try:
        _run(args, settings)
    except PoolError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
