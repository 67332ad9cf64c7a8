"""Hosted chat engines queried during citation verification.

Engines (in table column order):
  1. ChatGPT   : OpenAI chat completions; requires OPENAI_API_KEY.
  2. Claude    : Anthropic messages API; requires ANTHROPIC_API_KEY.
  3. Gemini    : Google generateContent; requires GOOGLE_API_KEY.
  4. Perplexity: Perplexity chat completions; requires PERPLEXITY_API_KEY.

All engines share a common interface: ``ask(client, question) -> str``.
Unlike the verifier, an engine *raises* on failure (missing key, non-2xx
response, malformed body, empty text); the verifier turns that into a
``fail`` cell.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

import httpx

from flowql.config import settings
from flowql.exceptions import EngineUnavailable


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class ChatEngine(ABC):
    """Abstract base class for a single hosted chat engine."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Display name used as the comparison-table column header."""

    @property
    @abstractmethod
    def api_key(self) -> str:
        """The configured API key, or an empty string."""

    @abstractmethod
    async def _request(self, client: httpx.AsyncClient, question: str) -> httpx.Response:
        """Send *question* and return the raw HTTP response."""

    @abstractmethod
    def _parse(self, data: Any) -> str:
        """Pull the answer text out of a decoded response body."""

    @property
    def available(self) -> bool:
        return bool(self.api_key)

    async def ask(self, client: httpx.AsyncClient, question: str) -> str:
        """Return the engine's raw answer text for *question*.

        Raises:
            EngineUnavailable: On a missing key, HTTP error, malformed body,
                or an empty answer.
        """
        if not self.available:
            raise EngineUnavailable(self.name, "API key not configured")
        try:
            resp = await self._request(client, question)
            resp.raise_for_status()
            text = self._parse(resp.json())
        except httpx.HTTPStatusError as exc:
            raise EngineUnavailable(self.name, f"HTTP {exc.response.status_code}") from exc
        except httpx.HTTPError as exc:
            raise EngineUnavailable(self.name, f"request failed: {exc}") from exc
        except (KeyError, IndexError, TypeError, ValueError, AttributeError) as exc:
            raise EngineUnavailable(self.name, f"malformed response: {exc!r}") from exc
        if not isinstance(text, str) or not text.strip():
            raise EngineUnavailable(self.name, "empty response")
        return text


# ---------------------------------------------------------------------------
# OpenAI
# ---------------------------------------------------------------------------

class OpenAIEngine(ChatEngine):
    @property
    def name(self) -> str:
        return "ChatGPT"

    @property
    def api_key(self) -> str:
        return settings.openai_api_key

    async def _request(self, client: httpx.AsyncClient, question: str) -> httpx.Response:
        return await client.post(
            "https://api.openai.com/v1/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "model": settings.openai_engine_model,
                "messages": [{"role": "user", "content": question}],
                "max_tokens": settings.engine_max_tokens,
                "temperature": 0.7,
            },
            timeout=settings.engine_timeout,
        )

    def _parse(self, data: Any) -> str:
        return data["choices"][0]["message"]["content"]


# ---------------------------------------------------------------------------
# Anthropic
# ---------------------------------------------------------------------------

class AnthropicEngine(ChatEngine):
    @property
    def name(self) -> str:
        return "Claude"

    @property
    def api_key(self) -> str:
        return settings.anthropic_api_key

    async def _request(self, client: httpx.AsyncClient, question: str) -> httpx.Response:
        return await client.post(
            "https://api.anthropic.com/v1/messages",
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": "2023-06-01",
            },
            json={
                "model": settings.anthropic_engine_model,
                "max_tokens": settings.engine_max_tokens,
                "messages": [{"role": "user", "content": question}],
            },
            timeout=settings.engine_timeout,
        )

    def _parse(self, data: Any) -> str:
        return "".join(
            block.get("text", "") for block in data["content"] if block.get("type") == "text"
        )


# ---------------------------------------------------------------------------
# Gemini
# ---------------------------------------------------------------------------

class GeminiEngine(ChatEngine):
    @property
    def name(self) -> str:
        return "Gemini"

    @property
    def api_key(self) -> str:
        return settings.google_api_key

    async def _request(self, client: httpx.AsyncClient, question: str) -> httpx.Response:
        model = settings.gemini_engine_model
        return await client.post(
            f"https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent",
            headers={"x-goog-api-key": self.api_key},
            json={
                "contents": [{"parts": [{"text": question}]}],
                "generationConfig": {"maxOutputTokens": settings.engine_max_tokens},
            },
            timeout=settings.engine_timeout,
        )

    def _parse(self, data: Any) -> str:
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)


# ---------------------------------------------------------------------------
# Perplexity
# ---------------------------------------------------------------------------

class PerplexityEngine(ChatEngine):
    @property
    def name(self) -> str:
        return "Perplexity"

    @property
    def api_key(self) -> str:
        return settings.perplexity_api_key

    async def _request(self, client: httpx.AsyncClient, question: str) -> httpx.Response:
        return await client.post(
            "https://api.perplexity.ai/chat/completions",
            headers={"Authorization": f"Bearer {self.api_key}"},
            json={
                "model": settings.perplexity_engine_model,
                "messages": [{"role": "user", "content": question}],
                "max_tokens": settings.engine_max_tokens,
                "temperature": 0.7,
            },
            timeout=settings.engine_timeout,
        )

    def _parse(self, data: Any) -> str:
        return data["choices"][0]["message"]["content"]


# ---------------------------------------------------------------------------
# Default engine set
# ---------------------------------------------------------------------------

def default_engines() -> list[ChatEngine]:
    """ChatGPT → Claude → Gemini → Perplexity (the comparison-table columns)."""
    return [OpenAIEngine(), AnthropicEngine(), GeminiEngine(), PerplexityEngine()]


def engine_by_name(name: str) -> ChatEngine | None:
    """Look up a default engine by display name (case-insensitive)."""
    for engine in default_engines():
        if engine.name.lower() == name.lower():
            return engine
    return None
