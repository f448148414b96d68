"""Prometheus metrics for the refresh pipeline.

All collectors are registered on the default registry at import time and
exposed by the REST API at ``/api/v1/metrics``.
"""

from __future__ import annotations

from prometheus_client import Counter, Histogram

refresh_cycles_total = Counter(
    "spacewx_refresh_cycles_total",
    "Completed refresh cycles by outcome.",
    ["outcome"],
)

feed_fetch_failures_total = Counter(
    "spacewx_feed_fetch_failures_total",
    "Per-feed fetch failures (transport or decode).",
    ["feed"],
)

alerts_emitted_total = Counter(
    "spacewx_alerts_emitted_total",
    "Alerts appended to the alert log, by rule.",
    ["rule"],
)

alerts_suppressed_total = Counter(
    "spacewx_alerts_suppressed_total",
    "Alerts dropped by the per-rule cooldown.",
    ["rule"],
)

refresh_duration_seconds = Histogram(
    "spacewx_refresh_duration_seconds",
    "Wall-clock duration of a refresh cycle.",
    buckets=(0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

timestamp_parse_fallbacks_total = Counter(
    "spacewx_timestamp_parse_fallbacks_total",
    "Timestamps that could not be parsed and were replaced with the current instant.",
)
