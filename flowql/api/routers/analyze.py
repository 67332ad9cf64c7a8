"""Site analysis endpoint.

Routes
------
POST /analyze    Body: {"url": "example.com"}

Scrapes the site's key pages, summarises the business and returns basic
content statistics.  Invalid URLs answer 400 and an unreachable start URL
answers 502 (see the exception handlers in ``flowql.api.app``).
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any
from urllib.parse import urlparse

from fastapi import APIRouter, Request
from pydantic import BaseModel

from flowql.analysis.pagespeed import fetch_pagespeed
from flowql.analysis.stats import compute_stats
from flowql.analysis.summarizer import summarize
from flowql.pipeline import normalize_url
from flowql.scraper.resolver import resolve_and_extract

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class AnalyzeRequest(BaseModel):
    url: str


# ---------------------------------------------------------------------------
# Endpoint
# ---------------------------------------------------------------------------

@router.post("")
async def analyze(body: AnalyzeRequest, request: Request) -> dict[str, Any]:
    """Scrape *url* and return the business summary plus content stats."""
    url = normalize_url(body.url)
    client = request.app.state.http

    composite = await resolve_and_extract(url, client)
    stats = compute_stats(composite)
    summary = await summarize(composite.main_text)
    pagespeed = await fetch_pagespeed(url, client)

    parsed = urlparse(url)
    return {
        "success": True,
        "url": url,
        "favicon_url": f"{parsed.scheme}://{parsed.hostname}/favicon.ico",
        "scraped_content": {
            "title": composite.title,
            "description": composite.description,
            "pages": [p.url for p in composite.pages],
            "headings": composite.headings,
            "metadata": composite.metadata,
            "word_count": stats.word_count,
            "reading_time": stats.reading_time_minutes,
        },
        "stats": asdict(stats),
        "business_summary": summary.profile.to_dict(),
        "degraded_reason": summary.degraded_reason,
        "raw_content": composite.main_text,
        "is_content_truncated": stats.is_truncated,
        "content_analysis_flag": (
            "entire website not analyzed" if stats.is_truncated else "complete analysis"
        ),
        "pagespeed": asdict(pagespeed) if pagespeed else None,
    }
