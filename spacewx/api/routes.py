"""REST API route handlers.

Every handler reads its collaborators from ``request.app.state``; nothing
here mutates published state directly.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response
from fastapi.responses import JSONResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from spacewx.api.schemas import (
    AlertItem,
    AlertsResponse,
    ErrorResponse,
    HealthResponse,
    RefreshAccepted,
    SettingsResponse,
    SettingsUpdate,
    StatusResponse,
)
from spacewx.settings import SettingsStore

router = APIRouter()


def _settings_response(settings: SettingsStore) -> SettingsResponse:
    config = settings.refresh_config()
    return SettingsResponse(
        api_key_set=bool(config.api_key) and config.api_key != "DEMO_KEY",
        refresh_minutes=config.refresh_minutes,
        alert_strong_flare=config.alert_strong_flare,
        alert_high_kp=config.alert_high_kp,
        kid_mode=settings.kid_mode,
    )


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    from spacewx import __version__

    return HealthResponse(version=__version__)


@router.get("/status", response_model=StatusResponse)
async def status(request: Request) -> StatusResponse:
    store = request.app.state.store
    scheduler = request.app.state.scheduler
    snapshot = store.snapshot
    return StatusResponse(
        status=store.status,
        scheduler_state=scheduler.state.value if scheduler is not None else "idle",
        interval_minutes=scheduler.interval_minutes if scheduler is not None else None,
        has_snapshot=snapshot is not None,
        refreshed_at=snapshot.refreshed_at.isoformat() if snapshot is not None else None,
    )


@router.get("/snapshot", response_model=None)
async def snapshot(request: Request) -> JSONResponse:
    current = request.app.state.store.snapshot
    if current is None:
        return JSONResponse(
            status_code=404,
            content=ErrorResponse(error="NO_SNAPSHOT", detail="No successful refresh yet.").model_dump(),
        )
    return JSONResponse(content=current.to_dict())


@router.get("/alerts", response_model=AlertsResponse)
async def alerts(request: Request) -> AlertsResponse:
    view = request.app.state.store.alerts()
    return AlertsResponse(
        alerts=[AlertItem(**record.to_dict()) for record in view.entries],
        last_alert_at=view.last_alert_at.isoformat() if view.last_alert_at else None,
    )


@router.post("/refresh", status_code=202, response_model=None)
async def refresh(request: Request) -> RefreshAccepted | JSONResponse:
    scheduler = request.app.state.scheduler
    if scheduler is None:
        return JSONResponse(
            status_code=503,
            content=ErrorResponse(error="SCHEDULER_UNAVAILABLE", detail="Refresh scheduler not running.").model_dump(),
        )
    try:
        scheduler.manual_trigger()
    except RuntimeError as exc:
        return JSONResponse(
            status_code=503,
            content=ErrorResponse(error="SCHEDULER_UNAVAILABLE", detail=str(exc)).model_dump(),
        )
    return RefreshAccepted()


@router.get("/settings", response_model=SettingsResponse)
async def get_settings(request: Request) -> SettingsResponse:
    return _settings_response(request.app.state.settings)


@router.put("/settings", response_model=SettingsResponse)
async def put_settings(request: Request, update: SettingsUpdate) -> SettingsResponse:
    settings: SettingsStore = request.app.state.settings
    if update.api_key is not None:
        settings.set_api_key(update.api_key)
    if update.refresh_minutes is not None:
        settings.set_refresh_minutes(update.refresh_minutes)
    if update.alert_strong_flare is not None:
        settings.set_alert_strong_flare(update.alert_strong_flare)
    if update.alert_high_kp is not None:
        settings.set_alert_high_kp(update.alert_high_kp)
    if update.kid_mode is not None:
        settings.set_kid_mode(update.kid_mode)
    return _settings_response(settings)


@router.get("/metrics")
async def metrics() -> Response:
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
