"""FastAPI application factory for SpaceWx.

Usage::

    from spacewx.api.app import create_app

    app = create_app(store=store, settings=settings, scheduler=scheduler)

The factory is used by both the production bootstrap (``spacewx.app``) and
unit tests.
"""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from spacewx.api.routes import router
from spacewx.api.schemas import ErrorResponse
from spacewx.errors import InvalidIntervalError

_log = structlog.get_logger(component="api.app")

_API_PREFIX = "/api/v1"


def create_app(
    store: Any,
    settings: Any,
    scheduler: Any = None,
) -> FastAPI:
    """Create and configure the SpaceWx FastAPI application.

    Args:
        store:     StateStore holding the published snapshot, alerts and status.
        settings:  SettingsStore backing ``/settings``.
        scheduler: Optional RefreshScheduler for manual refreshes and status.

    Returns:
        Configured FastAPI application, ready to be served by uvicorn.
    """
    from spacewx import __version__

    app = FastAPI(
        title="SpaceWx",
        summary="Space-weather refresh, analytics and alerting API",
        version=__version__,
        description=(
            "SpaceWx fetches NASA DONKI flare, geomagnetic storm and CME feeds, "
            "derives 30-day analytics and raises threshold alerts."
        ),
        docs_url="/api/v1/docs",
        redoc_url="/api/v1/redoc",
        openapi_url="/api/v1/openapi.json",
    )

    app.state.store = store
    app.state.settings = settings
    app.state.scheduler = scheduler

    app.include_router(router, prefix=_API_PREFIX)

    # -----------------------------------------------------------------------
    # Exception handlers
    # -----------------------------------------------------------------------

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        _request: Request,
        exc: RequestValidationError,
    ) -> JSONResponse:
        """Map Pydantic validation errors to our error envelope."""
        errors = exc.errors()
        first_field = ""
        first_msg = ""
        if errors:
            locs = errors[0].get("loc", ())
            first_field = str(locs[-1]) if locs else ""
            first_msg = str(errors[0].get("msg", ""))

        error_code = "INVALID_INTERVAL" if first_field == "refresh_minutes" else "INVALID_REQUEST"

        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=error_code, detail=first_msg).model_dump(),
        )

    @app.exception_handler(InvalidIntervalError)
    async def interval_exception_handler(
        _request: Request,
        exc: InvalidIntervalError,
    ) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error="INVALID_INTERVAL", detail=str(exc)).model_dump(),
        )

    @app.exception_handler(Exception)
    async def generic_exception_handler(
        request: Request,
        exc: Exception,
    ) -> JSONResponse:
        """Catch-all for unhandled exceptions -- never expose stack traces."""
        _log.error(
            "unhandled_exception",
            path=str(request.url.path),
            method=request.method,
            error=str(exc),
        )
        return JSONResponse(
            status_code=500,
            content=ErrorResponse(
                error="INTERNAL_ERROR",
                detail="An unexpected error occurred.",
            ).model_dump(),
        )

    return app
