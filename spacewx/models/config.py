"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field

MIN_REFRESH_MINUTES = 5
MAX_REFRESH_MINUTES = 60
DEFAULT_REFRESH_MINUTES = 10


@dataclass(frozen=True)
class RefreshConfig:
    """Per-cycle settings, handed to the engine by value.

    Owned by the settings store; the pipeline reads a fresh copy at the
    start of every cycle.
    """

    api_key: str = "DEMO_KEY"
    refresh_minutes: int = DEFAULT_REFRESH_MINUTES
    alert_strong_flare: bool = True
    alert_high_kp: bool = True


@dataclass
class DonkiConfig:
    """NASA DONKI provider configuration."""

    base_url: str = "https://api.nasa.gov/DONKI"
    timeout_seconds: int = 30
    window_days: int = 30


@dataclass
class AlertConfig:
    """Alert log configuration."""

    max_entries: int = 0  # 0 = unbounded
    cooldown: str = "0m"


@dataclass
class APIConfig:
    """REST API configuration."""

    enabled: bool = True
    port: int = 8080


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class SpaceWxConfig:
    """Top-level SpaceWx configuration."""

    refresh: RefreshConfig = field(default_factory=RefreshConfig)
    kid_mode: bool = True
    donki: DonkiConfig = field(default_factory=DonkiConfig)
    alerts: AlertConfig = field(default_factory=AlertConfig)
    api: APIConfig = field(default_factory=APIConfig)
    log: LogConfig = field(default_factory=LogConfig)
