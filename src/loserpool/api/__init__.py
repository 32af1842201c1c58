"""REST API for the loser pool."""

from __future__ import annotations

import hmac
from datetime import datetime, timezone
from typing import Callable, List, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import Response

from loserpool.api.schemas import (
    AllocateRequest,
    AllocationResponse,
    DeallocateRequest,
    DefaultAssignmentResponse,
    EliminationResponse,
    EvaluationResponse,
    GrantRequest,
    MatchupListResponse,
    MatchupResponse,
    PickAllocationResponse,
    PickResponse,
    SeasonResponse,
    SeasonStartRequest,
    SyncResponse,
    TeamPickCountResponse,
    TesterRequest,
    TesterResponse,
    UserPicksResponse,
    WeekRequest,
)
from loserpool.config.weeks import display_name, get_phase, label_for, parse_label
from loserpool.config_loader import PoolSettings
from loserpool.errors import (
    EliminatedPickError,
    LockedError,
    PartialBatchFailure,
    PoolError,
    TransientSourceError,
    ValidationError,
)
from loserpool.ingest.schedule import ScheduleFeed
from loserpool.ingest.vocabulary import label_from_absolute_week
from loserpool.matchups import MatchupStore
from loserpool.persistence import MatchupRecord, PickRecord, PoolStore
from loserpool.picks import AllocationResult, DefaultPickAssigner, PickAllocationEngine
from loserpool.reports import export_picks_to_csv, team_pick_breakdown
from loserpool.results import EliminationEvaluator, EliminationResult
from loserpool.season import SeasonService, SeasonState


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _http_error(exc: PoolError) -> HTTPException:
    if isinstance(exc, PartialBatchFailure):
        return HTTPException(
            status_code=409,
            detail={"message": exc.message, "applied": exc.applied, "failed": exc.failed},
        )
    if isinstance(exc, EliminatedPickError):
        return HTTPException(status_code=409, detail={"message": exc.message, "picks": exc.pick_names})
    if isinstance(exc, LockedError):
        return HTTPException(status_code=409, detail=exc.message)
    if isinstance(exc, TransientSourceError):
        return HTTPException(status_code=503, detail=exc.message)
    return HTTPException(status_code=400, detail=exc.message)


def matchup_to_response(matchup: MatchupRecord) -> MatchupResponse:
    return MatchupResponse(
        matchup_id=matchup.matchup_id,
        season_label=matchup.season_label,
        week_slot=matchup.slot,
        away_team=matchup.away_team,
        home_team=matchup.home_team,
        kickoff=matchup.kickoff,
        status=matchup.status,
        away_spread=matchup.away_spread,
        home_spread=matchup.home_spread,
        away_score=matchup.away_score,
        home_score=matchup.home_score,
        venue=matchup.venue,
        external_id=matchup.external_id,
        last_api_update=matchup.last_api_update,
        api_update_count=matchup.api_update_count,
        evaluated_at=matchup.evaluated_at,
    )


def pick_to_response(pick: PickRecord) -> PickResponse:
    return PickResponse(
        pick_id=pick.pick_id,
        display_name=pick.display_name,
        number=pick.number,
        status=pick.status,
        allocations={
            slot: PickAllocationResponse(
                week_slot=slot,
                matchup_id=allocation.matchup_id,
                team=allocation.team,
                token=allocation.token.encode(),
                is_default=allocation.is_default,
                allocated_at=allocation.allocated_at,
            )
            for slot, allocation in pick.allocations.items()
        },
    )


def season_to_response(state: SeasonState) -> SeasonResponse:
    return SeasonResponse(
        phase=state.phase.value,
        week=state.week,
        label=state.label,
        display=state.display,
        week_slot=state.slot,
        season_start=state.season_start.isoformat(),
        is_preseason=state.is_preseason,
        is_regular_season=state.is_regular_season,
        is_postseason=state.is_postseason,
        deadline_passed=state.deadline_passed,
    )


def _allocation_to_response(result: AllocationResult) -> AllocationResponse:
    return AllocationResponse(
        week_slot=result.slot,
        token=result.token.encode() if result.token else None,
        updated_picks=result.updated_picks,
        unchanged_picks=result.unchanged_picks,
        message=result.message,
    )


def _elimination_to_response(result: EliminationResult) -> EliminationResponse:
    return EliminationResponse(
        matchup_id=result.matchup_id,
        winner=result.winner,
        tie=result.tie,
        picks_eliminated=result.picks_eliminated,
        already_evaluated=result.already_evaluated,
    )


def create_app(
    settings: PoolSettings | None = None,
    *,
    store: PoolStore | None = None,
    feed: ScheduleFeed | None = None,
    now_provider: Callable[[], datetime] | None = None,
) -> FastAPI:
    settings = settings or PoolSettings.from_env()
    store = store or PoolStore(settings.db_path)
    feed = feed or ScheduleFeed(
        settings.feed_base_url,
        timeout=settings.feed_timeout,
        retries=settings.feed_retries,
    )
    now = now_provider or _utcnow

    season = SeasonService(store, season_start=settings.season_start)
    matchups = MatchupStore(store)
    engine = PickAllocationEngine(store, season)
    assigner = DefaultPickAssigner(store, season, policy=settings.default_pick_policy)
    evaluator = EliminationEvaluator(store)

    app = FastAPI(title="loserpool")
    app.state.settings = settings
    app.state.pool_store = store
    app.state.season = season

    def _require_cron_token(request: Request) -> None:
        if not settings.cron_token:
            return
        header = request.headers.get("authorization", "")
        scheme, _, token = header.partition(" ")
        if scheme.lower() != "bearer" or not hmac.compare_digest(token.strip(), settings.cron_token):
            raise HTTPException(status_code=401, detail="Invalid or missing cron token")

    def _resolve_week(
        phase: Optional[str],
        week: Optional[int],
        absolute_week: Optional[int] = None,
    ) -> tuple[str, int]:
        if absolute_week is not None:
            if phase is not None or week is not None:
                raise ValidationError("Give either absolute_week or phase and week, not both")
            resolved, week = label_from_absolute_week(absolute_week)
            return resolved.value, week
        if phase is not None and week is not None:
            resolved = get_phase(phase)
            label_for(resolved, week)
            return resolved.value, week
        state = season.current(now())
        return (get_phase(phase).value if phase else state.phase.value), (week or state.week)

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/season", response_model=SeasonResponse)
    async def current_season(user_id: str | None = None):
        try:
            state = season.for_user(user_id, now()) if user_id else season.current(now())
        except PoolError as exc:
            raise _http_error(exc) from exc
        return season_to_response(state)

    @app.get("/matchups", response_model=MatchupListResponse)
    async def list_matchups(label: str | None = None, phase: str | None = None, week: int | None = None):
        try:
            if label:
                phase_value, week_value = parse_label(label.strip().upper())
            else:
                phase_value, week_value = _resolve_week(phase, week)
            records = matchups.matchups_for(phase_value, week_value)
        except PoolError as exc:
            raise _http_error(exc) from exc
        return MatchupListResponse(
            season_label=label_for(phase_value, week_value),
            display=display_name(phase_value, week_value),
            matchups=[matchup_to_response(record) for record in records],
        )

    @app.get("/matchups/{matchup_id}", response_model=MatchupResponse)
    async def get_matchup(matchup_id: str):
        record = matchups.matchup_by_id(matchup_id)
        if record is None:
            raise HTTPException(status_code=404, detail="Matchup not found")
        return matchup_to_response(record)

    @app.post("/grants", response_model=List[PickResponse])
    async def grant(payload: GrantRequest):
        try:
            picks = engine.grant_picks(payload.user_id, payload.picks_count, source=payload.source)
        except PoolError as exc:
            raise _http_error(exc) from exc
        return [pick_to_response(pick) for pick in picks]

    @app.get("/users/{user_id}/picks", response_model=UserPicksResponse)
    async def user_picks(user_id: str):
        picks = engine.picks_for(user_id)
        try:
            current_week = season.for_user(user_id, now()).label
        except ValidationError:
            current_week = None
        return UserPicksResponse(
            user_id=user_id,
            current_week=current_week,
            picks=[pick_to_response(pick) for pick in picks],
        )

    @app.put("/users/{user_id}/tester", response_model=TesterResponse)
    async def set_tester(user_id: str, payload: TesterRequest):
        try:
            user = season.set_tester(user_id, is_tester=payload.is_tester, pinned_week=payload.pinned_week)
        except PoolError as exc:
            raise _http_error(exc) from exc
        return TesterResponse(user_id=user.user_id, is_tester=user.is_tester, pinned_week=user.pinned_week)

    @app.post("/picks/allocate", response_model=AllocationResponse)
    async def allocate(payload: AllocateRequest):
        try:
            result = engine.allocate(
                payload.user_id,
                payload.matchup_id,
                payload.team,
                payload.pick_names,
                now=now(),
            )
        except PoolError as exc:
            raise _http_error(exc) from exc
        return _allocation_to_response(result)

    @app.post("/picks/deallocate", response_model=AllocationResponse)
    async def deallocate(payload: DeallocateRequest):
        try:
            result = engine.deallocate(payload.user_id, payload.pick_names, now=now())
        except PoolError as exc:
            raise _http_error(exc) from exc
        return _allocation_to_response(result)

    @app.get("/reports/team-breakdown", response_model=List[TeamPickCountResponse])
    async def team_breakdown(label: str | None = None):
        try:
            target = label.strip().upper() if label else season.current(now()).label
            rows = team_pick_breakdown(store, target)
        except PoolError as exc:
            raise _http_error(exc) from exc
        return [
            TeamPickCountResponse(
                matchup_id=row.matchup_id,
                team=row.team,
                opponent=row.opponent,
                total=row.total,
                active=row.active,
                eliminated=row.eliminated,
                defaults=row.defaults,
            )
            for row in rows
        ]

    @app.get("/reports/picks.csv")
    async def picks_csv():
        csv_text = export_picks_to_csv(store.list_picks())
        return Response(
            content=csv_text,
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=picks.csv"},
        )

    @app.post("/admin/sync-week", response_model=SyncResponse)
    def sync_week(request: Request, payload: WeekRequest | None = None):
        _require_cron_token(request)
        payload = payload or WeekRequest()
        try:
            phase_value, week_value = _resolve_week(payload.phase, payload.week, payload.absolute_week)
            result = matchups.sync_week(
                feed,
                phase_value,
                week_value,
                year=payload.year,
                budget_seconds=settings.sync_budget_seconds,
            )
        except PoolError as exc:
            raise _http_error(exc) from exc
        return SyncResponse(**result.as_dict())

    @app.post("/admin/assign-defaults", response_model=DefaultAssignmentResponse)
    async def assign_defaults(request: Request, payload: WeekRequest | None = None):
        _require_cron_token(request)
        payload = payload or WeekRequest()
        try:
            phase_value, week_value = payload.phase, payload.week
            if payload.absolute_week is not None:
                phase_value, week_value = _resolve_week(payload.phase, payload.week, payload.absolute_week)
            result = assigner.assign_defaults(phase_value, week_value, now=now())
        except PoolError as exc:
            raise _http_error(exc) from exc
        return DefaultAssignmentResponse(
            label=result.label,
            week_slot=result.slot,
            picks_assigned=len(result.picks_assigned),
            matchup_id=result.matchup_id,
            team=result.team,
            skipped_reason=result.skipped_reason,
        )

    @app.post("/admin/evaluate-results", response_model=EvaluationResponse)
    async def evaluate_results(request: Request):
        _require_cron_token(request)
        summary = evaluator.evaluate_results(now=now())
        return EvaluationResponse(
            evaluated=len(summary.results),
            picks_eliminated=summary.picks_eliminated,
            results=[_elimination_to_response(result) for result in summary.results],
            errors=summary.errors,
        )

    @app.post("/admin/refresh-current-week", response_model=SeasonResponse)
    async def refresh_current_week(request: Request):
        _require_cron_token(request)
        try:
            state = season.refresh_current_week(now())
        except PoolError as exc:
            raise _http_error(exc) from exc
        return season_to_response(state)

    @app.post("/admin/season-start", response_model=SeasonResponse)
    async def set_season_start(request: Request, payload: SeasonStartRequest):
        _require_cron_token(request)
        season.set_season_start(payload.season_start)
        return season_to_response(season.current(now()))

    return app
