"""Configuration loading from environment variables."""

from __future__ import annotations

import os
import re
from datetime import timedelta

from spacewx.errors import InvalidIntervalError
from spacewx.models.config import (
    DEFAULT_REFRESH_MINUTES,
    MAX_REFRESH_MINUTES,
    MIN_REFRESH_MINUTES,
    AlertConfig,
    APIConfig,
    DonkiConfig,
    LogConfig,
    RefreshConfig,
    SpaceWxConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"SPACEWX_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _validate_time_window(value: str) -> str:
    if not re.match(r"^[0-9]+(m|h|d)$", value):
        raise ValueError(f"Invalid time window format: {value}")
    return value


def _validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def _validate_url(value: str) -> str:
    if not re.match(r"^https?://", value):
        raise ValueError(f"Invalid base URL: {value}")
    return value.rstrip("/")


def validate_refresh_minutes(minutes: int) -> int:
    """Reject refresh intervals outside 5-60 minutes."""
    if not MIN_REFRESH_MINUTES <= minutes <= MAX_REFRESH_MINUTES:
        raise InvalidIntervalError(minutes, MIN_REFRESH_MINUTES, MAX_REFRESH_MINUTES)
    return minutes


def parse_time_window(value: str) -> timedelta:
    """Convert a ``<n>(m|h|d)`` string into a timedelta."""
    _validate_time_window(value)
    amount = int(value[:-1])
    unit = value[-1]
    if unit == "d":
        return timedelta(days=amount)
    if unit == "h":
        return timedelta(hours=amount)
    return timedelta(minutes=amount)


def load_config() -> SpaceWxConfig:
    """Load configuration from SPACEWX_* environment variables."""
    return SpaceWxConfig(
        refresh=RefreshConfig(
            api_key=_env("API_KEY", "DEMO_KEY") or "DEMO_KEY",
            refresh_minutes=validate_refresh_minutes(int(_env("REFRESH_MINUTES", str(DEFAULT_REFRESH_MINUTES)))),
            alert_strong_flare=_env_bool("ALERT_STRONG_FLARE", True),
            alert_high_kp=_env_bool("ALERT_HIGH_KP", True),
        ),
        kid_mode=_env_bool("KID_MODE", True),
        donki=DonkiConfig(
            base_url=_validate_url(_env("DONKI_BASE_URL", "https://api.nasa.gov/DONKI")),
            timeout_seconds=_env_int("FETCH_TIMEOUT", 30, min_val=5, max_val=120),
            window_days=_env_int("WINDOW_DAYS", 30, min_val=1, max_val=30),
        ),
        alerts=AlertConfig(
            max_entries=_env_int("ALERT_LOG_MAX", 0, min_val=0),
            cooldown=_validate_time_window(_env("ALERT_COOLDOWN", "0m")),
        ),
        api=APIConfig(
            enabled=_env_bool("API_ENABLED", True),
            port=_env_int("API_PORT", 8080, min_val=1024, max_val=65535),
        ),
        log=LogConfig(
            level=_validate_log_level(_env("LOG_LEVEL", "info")),
        ),
    )
