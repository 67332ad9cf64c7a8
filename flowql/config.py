"""Centralised settings for the FlowQL pipeline.

All runtime configuration is resolved here in one place.  Values can be
overridden via environment variables or a `.env` file in the project root
(loaded automatically when this module is imported).
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (one level up from the package)
_env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_env_path, override=False)


@dataclass
class Settings:
    # ------------------------------------------------------------------
    # Summarizer / question-generator model
    # ------------------------------------------------------------------
    llm_provider: str = field(
        default_factory=lambda: os.environ.get("LLM_PROVIDER", "openai")
    )
    openai_chat_model: str = field(
        default_factory=lambda: os.environ.get("OPENAI_CHAT_MODEL", "gpt-4o-mini")
    )
    ollama_chat_model: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_CHAT_MODEL", "ministral-3:8b")
    )
    ollama_base_url: str = field(
        default_factory=lambda: os.environ.get("OLLAMA_BASE_URL", "http://localhost:11434")
    )
    summary_max_chars: int = field(
        default_factory=lambda: int(os.environ.get("SUMMARY_MAX_CHARS", "10000"))
    )

    # ------------------------------------------------------------------
    # Citation engines (keys are read per call so tests can monkeypatch)
    # ------------------------------------------------------------------
    openai_api_key: str = field(
        default_factory=lambda: os.environ.get("OPENAI_API_KEY", "")
    )
    anthropic_api_key: str = field(
        default_factory=lambda: os.environ.get("ANTHROPIC_API_KEY", "")
    )
    google_api_key: str = field(
        default_factory=lambda: os.environ.get("GOOGLE_API_KEY", "")
    )
    perplexity_api_key: str = field(
        default_factory=lambda: os.environ.get("PERPLEXITY_API_KEY", "")
    )
    openai_engine_model: str = field(
        default_factory=lambda: os.environ.get("OPENAI_ENGINE_MODEL", "gpt-4o-mini")
    )
    anthropic_engine_model: str = field(
        default_factory=lambda: os.environ.get(
            "ANTHROPIC_ENGINE_MODEL", "claude-3-5-haiku-latest"
        )
    )
    gemini_engine_model: str = field(
        default_factory=lambda: os.environ.get("GEMINI_ENGINE_MODEL", "gemini-1.5-flash")
    )
    perplexity_engine_model: str = field(
        default_factory=lambda: os.environ.get("PERPLEXITY_ENGINE_MODEL", "sonar")
    )
    engine_max_tokens: int = field(
        default_factory=lambda: int(os.environ.get("ENGINE_MAX_TOKENS", "500"))
    )
    engine_timeout: float = field(
        default_factory=lambda: float(os.environ.get("ENGINE_TIMEOUT", "60.0"))
    )

    # ------------------------------------------------------------------
    # Scraper
    # ------------------------------------------------------------------
    fetch_timeout: float = field(
        default_factory=lambda: float(os.environ.get("FETCH_TIMEOUT", "15.0"))
    )
    fetch_max_attempts: int = field(
        default_factory=lambda: int(os.environ.get("FETCH_MAX_ATTEMPTS", "3"))
    )
    fetch_backoff: float = field(
        default_factory=lambda: float(os.environ.get("FETCH_BACKOFF", "1.0"))
    )
    fetch_max_bytes: int = field(
        default_factory=lambda: int(os.environ.get("FETCH_MAX_BYTES", "2000000"))
    )
    about_probe_timeout: float = field(
        default_factory=lambda: float(os.environ.get("ABOUT_PROBE_TIMEOUT", "5.0"))
    )
    max_pages: int = field(
        default_factory=lambda: int(os.environ.get("MAX_PAGES", "3"))
    )

    # ------------------------------------------------------------------
    # Result cache / optional collaborators
    # ------------------------------------------------------------------
    cache_ttl: float = field(
        default_factory=lambda: float(os.environ.get("RESULT_CACHE_TTL", "3600"))
    )
    cache_max_entries: int = field(
        default_factory=lambda: int(os.environ.get("RESULT_CACHE_MAX_ENTRIES", "256"))
    )
    pagespeed_api_key: str = field(
        default_factory=lambda: os.environ.get("PAGESPEED_API_KEY", "")
    )
    pagespeed_timeout: float = field(
        default_factory=lambda: float(os.environ.get("PAGESPEED_TIMEOUT", "60.0"))
    )


# Module-level singleton; import this everywhere:
#   from flowql.config import settings
settings = Settings()
