"""Timestamp normalisation for provider feeds.

DONKI timestamps are nominally ISO-8601 with a trailing ``Z`` and minute
precision (``2024-05-10T06:27Z``), but explicit offsets and offset-free values
also occur.  Every accepted form is normalised to an aware UTC ``datetime``.

Two entry points:

    try_parse_timestamp  -- returns None when nothing matches, so callers can
                            skip or flag the value.
    parse_timestamp      -- never fails; substitutes the current instant.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, date, datetime

from spacewx.errors import TimestampParseError
from spacewx.observability.logging import get_logger
from spacewx.observability.metrics import timestamp_parse_fallbacks_total

_log = get_logger("timeutil")

DISPLAY_FORMAT = "%Y-%m-%d %H:%M UTC"
DATE_FORMAT = "%Y-%m-%d"


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


def try_parse_timestamp(value: str | None) -> datetime | None:
    """Parse *value* into an aware UTC datetime, or return None."""
    if not value:
        return None
    text = value.strip()
    if not text:
        return None

    # UTC-designated or explicit-offset forms; fromisoformat accepts "Z".
    try:
        zoned = datetime.fromisoformat(text)
    except ValueError:
        zoned = None
    if zoned is not None and zoned.tzinfo is not None:
        return zoned.astimezone(UTC)

    # Offset-free local date-time, read as UTC.
    try:
        local = datetime.fromisoformat(text.replace("Z", ""))
    except ValueError:
        return None
    if local.tzinfo is not None:
        return local.astimezone(UTC)
    return local.replace(tzinfo=UTC)


def parse_timestamp_strict(value: str | None) -> datetime:
    """Like try_parse_timestamp but raises TimestampParseError."""
    parsed = try_parse_timestamp(value)
    if parsed is None:
        raise TimestampParseError(f"Unparseable timestamp: {value!r}")
    return parsed


def parse_timestamp(value: str | None, now: Callable[[], datetime] = _utc_now) -> datetime:
    """Parse *value*, falling back to the current instant when it is unusable.

    The fallback keeps a single malformed record from failing a refresh cycle.
    It is counted in ``spacewx_timestamp_parse_fallbacks_total``.
    """
    parsed = try_parse_timestamp(value)
    if parsed is not None:
        return parsed
    timestamp_parse_fallbacks_total.inc()
    _log.debug("timestamp_parse_fallback", value=value)
    return now().astimezone(UTC)


def format_display(value: str | datetime | None) -> str:
    """Render a timestamp as ``YYYY-MM-DD HH:MM UTC``.

    Unparseable strings are returned unchanged; None or empty yields "".
    """
    if value is None:
        return ""
    if isinstance(value, datetime):
        moment = value if value.tzinfo is not None else value.replace(tzinfo=UTC)
        return moment.astimezone(UTC).strftime(DISPLAY_FORMAT)
    if not value:
        return ""
    parsed = try_parse_timestamp(value)
    if parsed is None:
        return value
    return parsed.strftime(DISPLAY_FORMAT)


def format_date(day: date) -> str:
    """Render a calendar date for provider query parameters."""
    return day.strftime(DATE_FORMAT)
