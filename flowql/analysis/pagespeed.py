"""Optional site-performance scores from the PageSpeed Insights API.

Skipped (returns ``None``) if ``settings.pagespeed_api_key`` is empty or the
call fails for any reason.
"""

from __future__ import annotations

import logging

import httpx

from flowql.analysis.models import PageSpeedResult
from flowql.config import settings

logger = logging.getLogger(__name__)

PAGESPEED_URL = "https://www.googleapis.com/pagespeedonline/v5/runPagespeed"
_CATEGORIES = ["performance", "accessibility", "best-practices", "seo"]


def _score(categories: dict, name: str) -> int:
    return round((categories.get(name, {}).get("score") or 0) * 100)


def _metric(audits: dict, name: str) -> float:
    return float(audits.get(name, {}).get("numericValue") or 0.0)


async def fetch_pagespeed(
    url: str,
    client: httpx.AsyncClient | None = None,
    strategy: str = "desktop",
) -> PageSpeedResult | None:
    """Return Lighthouse category scores (0-100) and core metrics for *url*."""
    api_key = settings.pagespeed_api_key
    if not api_key:
        logger.debug("[PAGESPEED] no API key configured; skipping")
        return None

    params = [("url", url), ("key", api_key), ("strategy", strategy)]
    params += [("category", c) for c in _CATEGORIES]

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient()
    try:
        resp = await client.get(PAGESPEED_URL, params=params, timeout=settings.pagespeed_timeout)
        resp.raise_for_status()
        lighthouse = resp.json()["lighthouseResult"]
        categories = lighthouse.get("categories", {})
        audits = lighthouse.get("audits", {})
    except (httpx.HTTPError, KeyError, ValueError) as exc:
        logger.warning("[PAGESPEED] request failed for %s: %s", url, exc)
        return None
    finally:
        if owns_client:
            await client.aclose()

    return PageSpeedResult(
        performance=_score(categories, "performance"),
        accessibility=_score(categories, "accessibility"),
        best_practices=_score(categories, "best-practices"),
        seo=_score(categories, "seo"),
        first_contentful_paint=_metric(audits, "first-contentful-paint"),
        largest_contentful_paint=_metric(audits, "largest-contentful-paint"),
        cumulative_layout_shift=_metric(audits, "cumulative-layout-shift"),
        speed_index=_metric(audits, "speed-index"),
    )
