"""Shared fixtures: keep every test offline and independent of the local .env."""

from __future__ import annotations

import pytest

from flowql.config import settings

_KEY_FIELDS = [
    "openai_api_key",
    "anthropic_api_key",
    "google_api_key",
    "perplexity_api_key",
    "pagespeed_api_key",
]


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """No API keys, no retry pauses, OpenAI as the summary provider."""
    for name in _KEY_FIELDS:
        monkeypatch.setattr(settings, name, "")
    monkeypatch.setattr(settings, "llm_provider", "openai")
    monkeypatch.setattr(settings, "fetch_backoff", 0.0)


@pytest.fixture()
def all_engine_keys(monkeypatch):
    """Configure a fake key for each of the four citation engines."""
    monkeypatch.setattr(settings, "openai_api_key", "sk-test")
    monkeypatch.setattr(settings, "anthropic_api_key", "ant-test")
    monkeypatch.setattr(settings, "google_api_key", "goog-test")
    monkeypatch.setattr(settings, "perplexity_api_key", "pplx-test")
