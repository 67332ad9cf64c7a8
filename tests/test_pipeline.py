"""End-to-end tests for ``run_pipeline`` and URL normalisation.

The site is served by ``respx``, the summary/question model is a mock with
queued replies, and the engines run with a mocked OpenAI endpoint only (the
other three have no key and become ``fail`` cells).
"""

from __future__ import annotations

import asyncio
import json
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest
import respx

from flowql.cache import TTLCache
from flowql.config import settings
from flowql.exceptions import InvalidUrlError, NetworkError
from flowql.pipeline import normalize_url, run_pipeline
from flowql.scraper.resolver import ABOUT_PATHS
from flowql.verification.models import STATUS_FAIL, STATUS_OK

_SITE = """\
<html><head><title>Acme Corp | Widgets</title></head>
<body><main><p>Acme Corp builds precision widgets in Springfield for builders and
contractors. Every widget is machined, inspected and shipped within two days.</p></main>
</body></html>
"""

_PROFILE = {
    "companyName": "Acme Corp",
    "whatTheyDo": "Builds precision widgets",
    "whoTheyServe": "Builders and contractors",
    "cityAndCountry": "Springfield, USA",
    "servicesOffered": "Widget machining",
    "pricing": "Not found",
    "industry": "Manufacturing",
    "businessModel": "B2B",
}


def _fake_llm(profile: dict) -> MagicMock:
    replies = [
        json.dumps(profile),
        '{"type": "local", "reasoning": "single workshop"}',
        '["Who makes the best widgets in Springfield?", '
        '"Is Acme Corp reliable?", "Where can builders buy widgets?"]',
    ]
    llm = MagicMock()
    llm.ainvoke = AsyncMock(side_effect=[SimpleNamespace(content=r) for r in replies])
    return llm


def _serve_site() -> respx.Route:
    for path in ABOUT_PATHS:
        respx.head(f"https://example.com{path}").mock(return_value=httpx.Response(404))
    return respx.get("https://example.com/").mock(return_value=httpx.Response(200, text=_SITE))


# ---------------------------------------------------------------------------
# normalize_url
# ---------------------------------------------------------------------------

class TestNormalizeUrl:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("example.com", "https://example.com"),
            ("  example.com/about  ", "https://example.com/about"),
            ("http://example.com", "http://example.com"),
            ("https://sub.example.co.uk/x?y=1", "https://sub.example.co.uk/x?y=1"),
            ("localhost:8000", "https://localhost:8000"),
        ],
    )
    def test_valid(self, raw: str, expected: str) -> None:
        assert normalize_url(raw) == expected

    @pytest.mark.parametrize(
        "raw",
        ["", "   ", "not a url", "ftp://example.com", "https://", "nodots", "http://exa mple.com"],
    )
    def test_invalid(self, raw: str) -> None:
        with pytest.raises(InvalidUrlError):
            normalize_url(raw)

    def test_required_message(self) -> None:
        with pytest.raises(InvalidUrlError, match="URL is required"):
            normalize_url("")


# ---------------------------------------------------------------------------
# run_pipeline
# ---------------------------------------------------------------------------

class TestRunPipeline:
    def test_bare_domain_end_to_end(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "openai_api_key", "sk-test")
        events: list[str] = []

        with respx.mock:
            site = _serve_site()
            respx.post("https://api.openai.com/v1/chat/completions").mock(
                return_value=httpx.Response(
                    200, json={"choices": [{"message": {"content": "Try Acme Corp."}}]}
                )
            )
            result = asyncio.run(
                run_pipeline(
                    "example.com",
                    llm=_fake_llm(_PROFILE),
                    on_event=lambda stage, payload: events.append(stage),
                )
            )

        assert site.call_count == 1
        assert result.url == "https://example.com"
        assert result.cached is False
        assert result.summary.profile.company_name == "Acme Corp"
        assert len(result.question_set.questions) == 3
        assert all("Acme" not in q for q in result.question_set.questions)
        assert events == ["scraped", "summarized", "questions", "verified", "verified", "verified"]

        for row in result.results:
            assert [c.engine for c in row.results] == ["ChatGPT", "Claude", "Gemini", "Perplexity"]
            assert row.results[0].status == STATUS_OK
            assert row.results[0].matched is True
            assert [c.status for c in row.results[1:]] == [STATUS_FAIL] * 3
        assert result.pagespeed is None

    def test_unknown_company_never_matches(self, monkeypatch) -> None:
        monkeypatch.setattr(settings, "openai_api_key", "sk-test")
        profile = dict(_PROFILE, companyName="Not found")

        with respx.mock:
            _serve_site()
            respx.post("https://api.openai.com/v1/chat/completions").mock(
                return_value=httpx.Response(
                    200, json={"choices": [{"message": {"content": "Not found anywhere"}}]}
                )
            )
            result = asyncio.run(run_pipeline("example.com", llm=_fake_llm(profile)))

        assert all(not cell.matched for row in result.results for cell in row.results)

    def test_cache_hit_skips_network(self) -> None:
        cache = TTLCache(ttl_sec=60)
        events: list[str] = []

        with respx.mock:
            site = _serve_site()
            first = asyncio.run(run_pipeline("example.com", cache=cache))
            second = asyncio.run(
                run_pipeline(
                    "https://example.com",
                    cache=cache,
                    on_event=lambda stage, payload: events.append(stage),
                )
            )

        assert site.call_count == 1
        assert first.cached is False
        assert second.cached is True
        assert second.summary == first.summary
        assert events == ["cached"]

    def test_degraded_run_without_any_keys(self) -> None:
        with respx.mock:
            _serve_site()
            result = asyncio.run(run_pipeline("example.com"))

        assert result.summary.degraded_reason == "OPENAI_API_KEY is not set"
        assert result.summary.profile.is_empty()
        assert len(result.question_set.questions) == 3
        assert len(result.results) == 3
        assert all(c.status == STATUS_FAIL for row in result.results for c in row.results)

    def test_invalid_url_raises_before_any_request(self) -> None:
        with respx.mock:
            with pytest.raises(InvalidUrlError):
                asyncio.run(run_pipeline("not a url"))

    def test_unreachable_site_raises_network_error(self) -> None:
        with respx.mock:
            respx.get("https://example.com/").mock(side_effect=httpx.ConnectError("refused"))
            with pytest.raises(NetworkError):
                asyncio.run(run_pipeline("example.com"))

    def test_to_dict_is_json_ready(self) -> None:
        with respx.mock:
            _serve_site()
            result = asyncio.run(run_pipeline("example.com"))

        data = result.to_dict()
        assert "pages" not in data["composite"]
        assert json.loads(json.dumps(data))["url"] == "https://example.com"
        assert "pages" in result.to_dict(include_pages=True)["composite"]
