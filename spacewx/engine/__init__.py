"""Refresh engine -- publication store, pipeline and scheduler."""

from spacewx.engine.pipeline import RefreshPipeline
from spacewx.engine.scheduler import RefreshScheduler, SchedulerState
from spacewx.engine.store import StateStore

__all__ = [
    "RefreshPipeline",
    "RefreshScheduler",
    "SchedulerState",
    "StateStore",
]
