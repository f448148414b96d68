"""Exception hierarchy for SpaceWx.

SpaceWxError        -- root of every error raised by this package.
FeedError           -- one feed (FLR / GST / CME) failed to produce events.
  FeedTransportError  -- non-2xx status, connection error or timeout.
  FeedDecodeError     -- body is not a JSON array of the expected shape.
RefreshError        -- a refresh cycle failed as a unit; carries every FeedError.
InvalidIntervalError -- refresh interval outside the accepted range.
TimestampParseError -- strict timestamp parsing failed.
"""

from __future__ import annotations


class SpaceWxError(Exception):
    """Base class for SpaceWx errors."""


class FeedError(SpaceWxError):
    """A single feed request failed."""

    def __init__(self, feed: str, reason: str) -> None:
        super().__init__(f"{feed}: {reason}")
        self.feed = feed
        self.reason = reason


class FeedTransportError(FeedError):
    """Transport-level failure (HTTP status, connection, timeout)."""


class FeedDecodeError(FeedError):
    """Response body could not be decoded into events."""


class RefreshError(SpaceWxError):
    """Raised when any feed of a refresh cycle failed.

    No partial result is ever produced alongside this error.
    """

    def __init__(self, failures: list[FeedError]) -> None:
        if not failures:
            raise ValueError("RefreshError requires at least one failure")
        self.failures = list(failures)
        super().__init__("; ".join(str(f) for f in self.failures))

    @property
    def feeds(self) -> list[str]:
        return [f.feed for f in self.failures]


class InvalidIntervalError(SpaceWxError, ValueError):
    """Refresh interval is outside the accepted range."""

    def __init__(self, minutes: int, min_val: int, max_val: int) -> None:
        super().__init__(f"Refresh interval must be between {min_val} and {max_val} minutes, got {minutes}")
        self.minutes = minutes


class TimestampParseError(SpaceWxError, ValueError):
    """A timestamp string matched none of the accepted formats."""
