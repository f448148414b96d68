"""REST API layer for SpaceWx.

Exposes:
    create_app -- FastAPI application factory.
    build_app  -- Alias for create_app (used by spacewx.app bootstrap).
"""

from spacewx.api.app import create_app

# The bootstrap in spacewx.app imports `build_app` from this package.
build_app = create_app

__all__ = ["build_app", "create_app"]
