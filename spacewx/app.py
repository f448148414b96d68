"""Application bootstrap for SpaceWx.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config → logging → settings → state store → pipeline
              → scheduler → REST

Shutdown is graceful: components are stopped in reverse startup order.
Each component's stop error is caught and logged independently so that a
single failure does not prevent the rest from shutting down cleanly.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from spacewx.alerts.cooldown import AlertCooldown
from spacewx.alerts.log import AlertLog
from spacewx.config import load_config, parse_time_window
from spacewx.engine.pipeline import RefreshPipeline, donki_client_factory
from spacewx.engine.scheduler import RefreshScheduler
from spacewx.engine.store import StateStore
from spacewx.models.config import RefreshConfig, SpaceWxConfig
from spacewx.observability.logging import get_logger, setup_logging
from spacewx.settings import SettingsStore

if TYPE_CHECKING:
    import structlog

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class SpaceWxApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    Calling ``stop()`` on an app that was never started (or already stopped)
    is safe.
    """

    def __init__(self, config: SpaceWxConfig | None = None) -> None:
        self.config: SpaceWxConfig | None = config

        self.settings: SettingsStore | None = None
        self.store: StateStore | None = None
        self.pipeline: RefreshPipeline | None = None
        self.scheduler: RefreshScheduler | None = None
        self._rest_server: object | None = None

        # Background tasks that must be cancelled on shutdown
        self._background_tasks: list[asyncio.Task[None]] = []

        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        # --- 1. Configuration -------------------------------------------
        if self.config is None:
            self.config = load_config()

        # --- 2. Logging -------------------------------------------------
        setup_logging(self.config.log.level)
        self._log = get_logger("app")
        self._log.info("spacewx starting", version=_spacewx_version())

        # --- 3. Settings, store, pipeline --------------------------------
        self._start_engine()

        # --- 4. Scheduler ------------------------------------------------
        self._start_scheduler()

        # --- 5. REST API -------------------------------------------------
        await self._start_rest()

        self._running = True
        self._log.info("spacewx started", interval_minutes=self.config.refresh.refresh_minutes)

    def _start_engine(self) -> None:
        assert self._log is not None
        assert self.config is not None
        self._log.debug("starting engine")
        try:
            cfg = self.config
            self.settings = SettingsStore(initial=cfg.refresh, kid_mode=cfg.kid_mode)
            self.store = StateStore(alert_log=AlertLog(max_entries=cfg.alerts.max_entries or None))
            self.pipeline = RefreshPipeline(
                settings=self.settings,
                store=self.store,
                client_factory=donki_client_factory(
                    base_url=cfg.donki.base_url,
                    timeout=float(cfg.donki.timeout_seconds),
                ),
                cooldown=AlertCooldown(parse_time_window(cfg.alerts.cooldown)),
                window_days=cfg.donki.window_days,
            )
            self._log.info("engine started", base_url=cfg.donki.base_url)
        except Exception as exc:
            raise _ComponentError("engine", exc) from exc

    def _start_scheduler(self) -> None:
        assert self._log is not None
        assert self.settings is not None
        assert self.pipeline is not None
        self._log.debug("starting scheduler")
        try:
            scheduler = RefreshScheduler(run_cycle=self.pipeline.run_cycle, store=self.store)
            scheduler.configure(self.settings.refresh_minutes)
            self.settings.add_listener(self._on_settings_changed)
            # Populate the first snapshot without waiting a full interval.
            scheduler.manual_trigger()
            self.scheduler = scheduler
            self._log.info("scheduler started", interval_minutes=scheduler.interval_minutes)
        except Exception as exc:
            raise _ComponentError("scheduler", exc) from exc

    def _on_settings_changed(self, old: RefreshConfig, new: RefreshConfig) -> None:
        if self.scheduler is None or old.refresh_minutes == new.refresh_minutes:
            return
        self.scheduler.configure(new.refresh_minutes)

    async def _start_rest(self) -> None:
        """Start the uvicorn REST server. Non-fatal when it cannot start."""
        assert self._log is not None
        assert self.config is not None
        if not self.config.api.enabled:
            self._log.info("rest api disabled (api.enabled=false)")
            return
        self._log.debug("starting rest api")
        try:
            import uvicorn

            from spacewx.api import build_app

            fastapi_app = build_app(
                store=self.store,
                settings=self.settings,
                scheduler=self.scheduler,
            )
            uv_config = uvicorn.Config(
                app=fastapi_app,
                host="0.0.0.0",
                port=self.config.api.port,
                log_config=None,  # structlog handles all logging
                access_log=False,
            )
            server = uvicorn.Server(uv_config)
            task = asyncio.create_task(server.serve(), name="rest-server")
            self._background_tasks.append(task)
            self._rest_server = server
            self._log.info("rest api started", port=self.config.api.port)
        except Exception as exc:
            self._log.warning("rest api failed to start; running headless", error=str(exc))
            self._rest_server = None

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Gracefully stop all components in reverse startup order."""
        if not self._running and self._log is None:
            return

        log = self._log or get_logger("app")
        log.info("spacewx shutting down")

        self._running = False

        if self._rest_server is not None:
            self._rest_server.should_exit = True  # type: ignore[attr-defined]

        if self.scheduler is not None:
            try:
                await asyncio.wait_for(self.scheduler.shutdown(), timeout=_SHUTDOWN_GRACE_SECONDS)
            except TimeoutError:
                log.warning("component stop timed out", component="scheduler", timeout=_SHUTDOWN_GRACE_SECONDS)
            except Exception as exc:
                log.error("component stop raised an error", component="scheduler", error=str(exc))

        for task in reversed(self._background_tasks):
            if not task.done():
                task.cancel()
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
        self._background_tasks.clear()

        log.info("spacewx stopped")

    @property
    def running(self) -> bool:
        return self._running


def _spacewx_version() -> str:
    from spacewx import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main() -> None:
    """Create the app, register OS signals, run until shutdown is requested."""
    app = SpaceWxApp()
    loop = asyncio.get_running_loop()

    shutdown_triggered = False

    def _request_shutdown() -> None:
        nonlocal shutdown_triggered
        if shutdown_triggered:
            return
        shutdown_triggered = True
        asyncio.create_task(app.stop(), name="shutdown")

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, _request_shutdown)

    try:
        await app.start()
        while app.running:
            await asyncio.sleep(1)
    except _ComponentError as exc:
        log = get_logger("app")
        log.critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        await app.stop()
        raise SystemExit(1) from exc
    finally:
        if app.running:
            await app.stop()
