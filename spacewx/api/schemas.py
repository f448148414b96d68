"""Pydantic request/response schemas for the REST API."""

from __future__ import annotations

from pydantic import BaseModel, Field

from spacewx.models.config import MAX_REFRESH_MINUTES, MIN_REFRESH_MINUTES


class ErrorResponse(BaseModel):
    error: str
    detail: str


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str


class StatusResponse(BaseModel):
    status: str
    scheduler_state: str
    interval_minutes: int | None = None
    has_snapshot: bool
    refreshed_at: str | None = None


class AlertItem(BaseModel):
    alert_id: str
    rule: str
    message: str
    created_at: str


class AlertsResponse(BaseModel):
    alerts: list[AlertItem]
    last_alert_at: str | None = None


class RefreshAccepted(BaseModel):
    accepted: bool = True


class SettingsResponse(BaseModel):
    api_key_set: bool
    refresh_minutes: int
    alert_strong_flare: bool
    alert_high_kp: bool
    kid_mode: bool


class SettingsUpdate(BaseModel):
    """Partial settings update; omitted fields are left unchanged."""

    api_key: str | None = Field(default=None, max_length=256)
    refresh_minutes: int | None = Field(default=None, ge=MIN_REFRESH_MINUTES, le=MAX_REFRESH_MINUTES)
    alert_strong_flare: bool | None = None
    alert_high_kp: bool | None = None
    kid_mode: bool | None = None
