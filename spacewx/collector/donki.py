"""NASA DONKI client.

One refresh fetches three feeds for the same window:

    GET <base>/FLR?startDate=YYYY-MM-DD&endDate=YYYY-MM-DD&api_key=<key>
    GET <base>/GST?...
    GET <base>/CME?...

The requests run concurrently and are joined with a wait-for-all gather.
If any of them fails the whole fetch fails with a single RefreshError that
lists every failed feed; callers never see a partial result.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, TypeVar

import httpx

from spacewx.errors import FeedDecodeError, FeedError, FeedTransportError, RefreshError
from spacewx.models.events import CMEEvent, Feed, FlareEvent, GeomagneticStormEvent
from spacewx.models.snapshot import FetchWindow
from spacewx.observability.logging import get_logger
from spacewx.observability.metrics import feed_fetch_failures_total

_log = get_logger("collector.donki")

T = TypeVar("T")

DEFAULT_BASE_URL = "https://api.nasa.gov/DONKI"
DEFAULT_TIMEOUT_SECONDS = 30.0


@dataclass(frozen=True)
class FetchResult:
    """Decoded events for one window; only produced when all three feeds succeeded."""

    window: FetchWindow
    flares: tuple[FlareEvent, ...]
    storms: tuple[GeomagneticStormEvent, ...]
    cmes: tuple[CMEEvent, ...]


def decode_array(feed: Feed, body: str, decode: Callable[[Any], T]) -> tuple[T, ...]:
    """Decode a JSON array body, raising FeedDecodeError on any shape problem."""
    try:
        payload = json.loads(body) if body.strip() else []
    except json.JSONDecodeError as exc:
        raise FeedDecodeError(feed.value, f"invalid JSON: {exc.msg}") from exc
    if not isinstance(payload, list):
        raise FeedDecodeError(feed.value, f"expected JSON array, got {type(payload).__name__}")
    try:
        return tuple(decode(item) for item in payload)
    except (TypeError, ValueError) as exc:
        raise FeedDecodeError(feed.value, str(exc)) from exc


class DonkiClient:
    """Async DONKI client over a shared ``httpx.AsyncClient``.

    Args:
        api_key:   Provider credential, sent as ``api_key``.
        base_url:  Endpoint prefix; the feed name is appended.
        timeout:   Per-request timeout in seconds. Expiry is a feed failure.
        transport: Optional httpx transport (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    async def __aenter__(self) -> DonkiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def build_params(self, window: FetchWindow) -> dict[str, str]:
        return {**window.to_dict(), "api_key": self._api_key}

    async def fetch_flares(self, window: FetchWindow) -> tuple[FlareEvent, ...]:
        return await self._fetch(Feed.FLR, window, FlareEvent.from_json)

    async def fetch_storms(self, window: FetchWindow) -> tuple[GeomagneticStormEvent, ...]:
        return await self._fetch(Feed.GST, window, GeomagneticStormEvent.from_json)

    async def fetch_cmes(self, window: FetchWindow) -> tuple[CMEEvent, ...]:
        return await self._fetch(Feed.CME, window, CMEEvent.from_json)

    async def fetch_window(self, window: FetchWindow) -> FetchResult:
        """Fetch all three feeds concurrently; all succeed or RefreshError is raised."""
        results = await asyncio.gather(
            self.fetch_flares(window),
            self.fetch_storms(window),
            self.fetch_cmes(window),
            return_exceptions=True,
        )

        failures: list[FeedError] = []
        for feed, result in zip((Feed.FLR, Feed.GST, Feed.CME), results, strict=True):
            if isinstance(result, FeedError):
                failures.append(result)
            elif isinstance(result, BaseException):
                if isinstance(result, asyncio.CancelledError):
                    raise result
                failures.append(FeedTransportError(feed.value, f"{type(result).__name__}: {result}"))

        if failures:
            for failure in failures:
                feed_fetch_failures_total.labels(feed=failure.feed).inc()
            raise RefreshError(failures)

        flares, storms, cmes = results
        return FetchResult(
            window=window,
            flares=flares,  # type: ignore[arg-type]
            storms=storms,  # type: ignore[arg-type]
            cmes=cmes,  # type: ignore[arg-type]
        )

    async def _fetch(self, feed: Feed, window: FetchWindow, decode: Callable[[Any], T]) -> tuple[T, ...]:
        url = f"{self._base_url}/{feed.value}"
        try:
            response = await self._client.get(url, params=self.build_params(window))
        except httpx.TimeoutException as exc:
            _log.warning("feed_request_timeout", feed=feed.value)
            raise FeedTransportError(feed.value, "request timed out") from exc
        except httpx.HTTPError as exc:
            _log.warning("feed_http_error", feed=feed.value, error=str(exc))
            raise FeedTransportError(feed.value, str(exc) or type(exc).__name__) from exc

        if not response.is_success:
            _log.warning(
                "feed_non_2xx_response",
                feed=feed.value,
                status_code=response.status_code,
                body=response.text[:200],
            )
            raise FeedTransportError(feed.value, f"HTTP {response.status_code}")

        events = decode_array(feed, response.text, decode)
        _log.debug("feed_fetched", feed=feed.value, count=len(events))
        return events
