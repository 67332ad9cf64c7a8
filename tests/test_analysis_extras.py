"""Tests for content statistics and the optional PageSpeed lookup."""

from __future__ import annotations

import asyncio

import httpx
import respx

from flowql.analysis.pagespeed import PAGESPEED_URL, fetch_pagespeed
from flowql.analysis.stats import compute_stats
from flowql.config import settings
from flowql.scraper.extractor import MAX_TEXT_CHARS, extract_content
from flowql.scraper.models import ExtractedPage
from flowql.scraper.resolver import combine_pages


class TestComputeStats:
    def test_counts(self) -> None:
        page = ExtractedPage(
            url="https://example.com",
            title="Acme",
            description="",
            main_text="one two three four five",
            headings=["H1", "H2"],
            links=["https://example.com/a"],
            paragraph_count=2,
        )
        stats = compute_stats(page)

        assert stats.word_count == 5
        assert stats.reading_time_minutes == 1
        assert stats.paragraph_count == 2
        assert stats.heading_count == 2
        assert stats.link_count == 1
        assert stats.has_title is True
        assert stats.has_description is False
        assert stats.title_length == 4
        assert stats.is_truncated is False

    def test_reading_time_rounds_up(self) -> None:
        page = ExtractedPage(url="u", title="", description="", main_text="w " * 201)
        assert compute_stats(page).reading_time_minutes == 2

    def test_truncation_flag_from_any_constituent(self) -> None:
        short = ExtractedPage(url="a", title="", description="", main_text="short")
        capped = ExtractedPage(url="b", title="", description="", main_text="x" * MAX_TEXT_CHARS)

        assert compute_stats(combine_pages("a", [short, capped])).is_truncated is True
        assert compute_stats(combine_pages("a", [short])).is_truncated is False

    def test_paragraphs_counted_from_markup_across_pages(self) -> None:
        home = extract_content(
            "<html><body><main><p>We fix boilers.</p><p>Same-day callouts.</p>"
            "<p>Fixed prices.</p><p>  </p></main></body></html>",
            "https://example.com/",
        )
        about = extract_content(
            "<html><body><p>Family run since 1998.</p></body></html>",
            "https://example.com/about",
        )

        stats = compute_stats(combine_pages("https://example.com/", [home, about]))

        assert home.paragraph_count == 3
        assert stats.paragraph_count == 4


class TestPageSpeed:
    def test_skipped_without_key(self) -> None:
        with respx.mock:
            assert asyncio.run(fetch_pagespeed("https://example.com")) is None

    def test_scores(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "pagespeed_api_key", "ps-key")
        payload = {
            "lighthouseResult": {
                "categories": {
                    "performance": {"score": 0.91},
                    "accessibility": {"score": 1},
                    "best-practices": {"score": 0.5},
                    "seo": {"score": None},
                },
                "audits": {"first-contentful-paint": {"numericValue": 812.5}},
            }
        }
        with respx.mock:
            route = respx.get(PAGESPEED_URL).mock(return_value=httpx.Response(200, json=payload))
            result = asyncio.run(fetch_pagespeed("https://example.com"))

        assert route.calls.last.request.url.params["url"] == "https://example.com"
        assert (result.performance, result.accessibility, result.best_practices, result.seo) == (
            91, 100, 50, 0,
        )
        assert result.first_contentful_paint == 812.5
        assert result.speed_index == 0.0

    def test_failure_returns_none(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "pagespeed_api_key", "ps-key")
        with respx.mock:
            respx.get(PAGESPEED_URL).mock(return_value=httpx.Response(429))
            assert asyncio.run(fetch_pagespeed("https://example.com")) is None
