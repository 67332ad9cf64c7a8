"""High-level runner for the citation-check pipeline.

``run_pipeline`` wires the stages together explicitly::

    URL → resolve_and_extract → summarize → generate_questions → verify

Only an invalid URL or a failed start-URL fetch is fatal; every other
failure degrades to sentinel values so the caller always gets a complete
(if partially empty) comparison matrix.
"""

from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional, Sequence
from urllib.parse import urlparse

import httpx

from flowql.analysis.models import ContentStats, PageSpeedResult, QuestionSet, SummaryResult
from flowql.analysis.pagespeed import fetch_pagespeed
from flowql.analysis.questions import generate_questions
from flowql.analysis.stats import compute_stats
from flowql.analysis.summarizer import summarize
from flowql.cache import NullCache, ResultCache
from flowql.exceptions import InvalidUrlError
from flowql.scraper.models import CompositePage
from flowql.scraper.resolver import resolve_and_extract
from flowql.verification.engines import ChatEngine
from flowql.verification.models import VerificationResult
from flowql.verification.verifier import verify

logger = logging.getLogger(__name__)

_HAS_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")

EventCallback = Callable[[str, Dict[str, Any]], None]


@dataclass
class PipelineResult:
    url: str
    composite: CompositePage
    stats: ContentStats
    summary: SummaryResult
    question_set: QuestionSet
    results: List[VerificationResult] = field(default_factory=list)
    pagespeed: Optional[PageSpeedResult] = None
    cached: bool = False

    def to_dict(self, include_pages: bool = False) -> Dict[str, Any]:
        """JSON-ready dict; constituent pages are omitted unless asked for."""
        data = asdict(self)
        if not include_pages:
            data["composite"].pop("pages", None)
        return data


def normalize_url(raw: str) -> str:
    """Return *raw* as an absolute http(s) URL.

    Bare domains get an ``https://`` prefix (``"example.com"`` ->
    ``"https://example.com"``).

    Raises:
        InvalidUrlError: If the input is empty or not a usable http(s) URL.
    """
    url = (raw or "").strip()
    if not url:
        raise InvalidUrlError(raw, "URL is required")
    if any(ch.isspace() for ch in url):
        raise InvalidUrlError(raw)
    if not _HAS_SCHEME.match(url):
        url = f"https://{url}"

    try:
        parsed = urlparse(url)
        hostname = parsed.hostname
    except ValueError as exc:
        raise InvalidUrlError(raw) from exc
    if parsed.scheme not in ("http", "https") or not hostname:
        raise InvalidUrlError(raw)
    if "." not in hostname and hostname != "localhost":
        raise InvalidUrlError(raw)
    return url


def _emit(on_event: EventCallback | None, stage: str, payload: Dict[str, Any]) -> None:
    if on_event is not None:
        on_event(stage, payload)


async def run_pipeline(
    url: str,
    *,
    cache: ResultCache | None = None,
    engines: Sequence[ChatEngine] | None = None,
    client: httpx.AsyncClient | None = None,
    llm: Any = None,
    on_event: EventCallback | None = None,
) -> PipelineResult:
    """Scrape *url*, profile the business and check four engines for citations.

    Args:
        url: Absolute URL or bare domain.
        cache: Result cache keyed by normalised URL; defaults to no caching.
        engines: Engines to verify against; defaults to all four.
        client: Shared HTTP client; one is created for the run if omitted.
        llm: LangChain chat model for summary and questions (tests inject a
            fake); defaults to the configured provider.
        on_event: Called with ``(stage, payload)`` after each stage.

    Raises:
        InvalidUrlError: If *url* cannot be normalised.
        NetworkError: If the start URL cannot be fetched.
    """
    normalized = normalize_url(url)
    cache = cache if cache is not None else NullCache()

    hit = cache.get(normalized)
    if hit is not None:
        logger.info("[PIPELINE] cache hit for %s", normalized)
        result = replace(hit, cached=True)
        _emit(on_event, "cached", {"url": normalized})
        return result

    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient()

    try:
        logger.info("[PIPELINE] scraping %s", normalized)
        composite = await resolve_and_extract(normalized, client)
        stats = compute_stats(composite)
        _emit(on_event, "scraped", {
            "pages": [p.url for p in composite.pages],
            "title": composite.title,
            "word_count": stats.word_count,
        })

        summary = await summarize(composite.main_text, llm)
        _emit(on_event, "summarized", {
            "profile": summary.profile.to_dict(),
            "degraded_reason": summary.degraded_reason,
        })

        question_set = await generate_questions(summary.profile, llm)
        _emit(on_event, "questions", {
            "questions": question_set.questions,
            "business_type": question_set.business_type.scope,
        })

        # The sentinel is not a name; with no name nothing can match.
        profile = summary.profile
        company_name = profile.company_name if profile.known("company_name") else ""
        results = await verify(
            question_set.questions,
            company_name,
            engines=engines,
            client=client,
            on_result=lambda row: _emit(on_event, "verified", asdict(row)),
        )

        pagespeed = await fetch_pagespeed(normalized, client)
    finally:
        if owns_client:
            await client.aclose()

    result = PipelineResult(
        url=normalized,
        composite=composite,
        stats=stats,
        summary=summary,
        question_set=question_set,
        results=results,
        pagespeed=pagespeed,
    )
    cache.set(normalized, result)
    return result
