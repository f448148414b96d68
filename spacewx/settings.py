"""In-process settings store.

Holds the user-editable values the engine consumes: the provider credential,
the refresh interval, the two alert toggles and the kid-mode display flag.
Persistence is left to whoever constructs the store; this class only keeps
values consistent and notifies listeners.

The engine never holds on to a RefreshConfig between cycles: it calls
``refresh_config()`` at the start of every cycle.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import replace

from spacewx.config import validate_refresh_minutes
from spacewx.models.config import RefreshConfig
from spacewx.observability.logging import get_logger

_log = get_logger("settings")

SettingsListener = Callable[[RefreshConfig, RefreshConfig], None]


class SettingsStore:
    """Thread-safe holder for RefreshConfig plus display preferences."""

    def __init__(self, initial: RefreshConfig | None = None, kid_mode: bool = True) -> None:
        self._lock = threading.Lock()
        self._config = initial or RefreshConfig()
        validate_refresh_minutes(self._config.refresh_minutes)
        self._kid_mode = kid_mode
        self._listeners: list[SettingsListener] = []

    def refresh_config(self) -> RefreshConfig:
        """Return the current settings by value."""
        with self._lock:
            return self._config

    # -- credential --------------------------------------------------------

    @property
    def api_key(self) -> str:
        return self.refresh_config().api_key

    def set_api_key(self, api_key: str) -> None:
        self._update(api_key=api_key.strip() or "DEMO_KEY")

    # -- interval ----------------------------------------------------------

    @property
    def refresh_minutes(self) -> int:
        return self.refresh_config().refresh_minutes

    def set_refresh_minutes(self, minutes: int) -> None:
        """Raises InvalidIntervalError and keeps the old value when out of range."""
        validate_refresh_minutes(minutes)
        self._update(refresh_minutes=minutes)

    # -- alert toggles -----------------------------------------------------

    @property
    def alert_strong_flare(self) -> bool:
        return self.refresh_config().alert_strong_flare

    def set_alert_strong_flare(self, enabled: bool) -> None:
        self._update(alert_strong_flare=enabled)

    @property
    def alert_high_kp(self) -> bool:
        return self.refresh_config().alert_high_kp

    def set_alert_high_kp(self, enabled: bool) -> None:
        self._update(alert_high_kp=enabled)

    # -- presentation ------------------------------------------------------

    @property
    def kid_mode(self) -> bool:
        with self._lock:
            return self._kid_mode

    def set_kid_mode(self, enabled: bool) -> None:
        with self._lock:
            self._kid_mode = enabled

    # -- listeners ---------------------------------------------------------

    def add_listener(self, listener: SettingsListener) -> None:
        """Register ``listener(old, new)``, called after every effective change."""
        self._listeners.append(listener)

    def _update(self, **changes: object) -> None:
        with self._lock:
            old = self._config
            new = replace(old, **changes)  # type: ignore[arg-type]
            if new == old:
                return
            self._config = new
        _log.info("settings_changed", fields=sorted(changes))
        for listener in list(self._listeners):
            try:
                listener(old, new)
            except Exception as exc:
                _log.error("settings_listener_error", error=str(exc))
