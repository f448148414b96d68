"""Entry point for `python -m spacewx`.

Usage:
    python -m spacewx
    uv run python -m spacewx
"""

from __future__ import annotations

import asyncio

from spacewx.app import main

asyncio.run(main())
