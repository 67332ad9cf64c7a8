"""Async HTTP fetcher with a body-size cap and linear-backoff retries."""

from __future__ import annotations

import asyncio
import logging

import httpx

from flowql.config import settings
from flowql.exceptions import NetworkError
from flowql.scraper.models import FetchResult

logger = logging.getLogger(__name__)

BROWSER_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/122.0.0.0 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}


class _OversizedBody(Exception):
    """Raised internally when a response body exceeds the byte cap."""


async def _read_capped(response: httpx.Response, max_bytes: int) -> bytes:
    """Read *response* fully, raising :class:`_OversizedBody` past *max_bytes*."""
    declared = response.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > max_bytes:
        raise _OversizedBody(f"declared body of {declared} bytes exceeds {max_bytes}")

    received = bytearray()
    async for chunk in response.aiter_bytes():
        received.extend(chunk)
        if len(received) > max_bytes:
            raise _OversizedBody(f"body exceeds {max_bytes} bytes")
    return bytes(received)


async def _fetch_once(client: httpx.AsyncClient, url: str) -> FetchResult:
    async with client.stream(
        "GET",
        url,
        headers=BROWSER_HEADERS,
        timeout=settings.fetch_timeout,
        follow_redirects=True,
    ) as response:
        if response.status_code < 200 or response.status_code >= 400:
            raise httpx.HTTPStatusError(
                f"HTTP {response.status_code} for {url}",
                request=response.request,
                response=response,
            )
        body = await _read_capped(response, settings.fetch_max_bytes)
        encoding = response.encoding or "utf-8"
        return FetchResult(
            url=url,
            status_code=response.status_code,
            body=body.decode(encoding, errors="replace"),
            headers=dict(response.headers),
        )


async def fetch_url(url: str, client: httpx.AsyncClient | None = None) -> FetchResult:
    """Fetch *url* and return a :class:`FetchResult`.

    The URL is used as given; callers normalise bare domains first.  Each
    failed attempt *i* is followed by a ``settings.fetch_backoff * i`` second
    pause before the next one.

    Raises:
        NetworkError: After ``settings.fetch_max_attempts`` failed attempts.
            The last underlying error is chained as ``__cause__``.
    """
    attempts = max(1, settings.fetch_max_attempts)
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient()

    last_exc: Exception | None = None
    try:
        for attempt in range(1, attempts + 1):
            try:
                result = await _fetch_once(client, url)
                logger.debug("[FETCH] %s -> HTTP %d (%d chars)", url, result.status_code, len(result.body))
                return result
            except (httpx.HTTPError, _OversizedBody) as exc:
                last_exc = exc
                logger.warning("[FETCH] attempt %d/%d failed for %s: %s", attempt, attempts, url, exc)
                if attempt < attempts:
                    await asyncio.sleep(settings.fetch_backoff * attempt)
    finally:
        if owns_client:
            await client.aclose()

    raise NetworkError(url, str(last_exc), attempts=attempts, cause=last_exc) from last_exc
