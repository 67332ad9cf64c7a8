"""LangChain chat-model factory and reply parsing shared by the analysis steps."""

from __future__ import annotations

import json
import re
from typing import Any

from flowql.config import settings

_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def llm_unavailable_reason() -> str | None:
    """Return why the configured model cannot be called, or ``None``."""
    if settings.llm_provider == "openai" and not settings.openai_api_key:
        return "OPENAI_API_KEY is not set"
    return None


def get_llm(temperature: float = 0.3, max_tokens: int | None = None) -> Any:
    """Return a configured LangChain chat model based on ``settings``."""
    if settings.llm_provider == "openai":
        from langchain_openai import ChatOpenAI

        return ChatOpenAI(
            model=settings.openai_chat_model,
            temperature=temperature,
            max_tokens=max_tokens,
            api_key=settings.openai_api_key,
        )

    from langchain_ollama import ChatOllama

    return ChatOllama(
        model=settings.ollama_chat_model,
        temperature=temperature,
        base_url=settings.ollama_base_url,
    )


def reply_text(response: Any) -> str:
    return response.content if hasattr(response, "content") else str(response)


def parse_json_reply(text: str) -> Any:
    """Decode a JSON reply, tolerating a Markdown code fence around it.

    Raises:
        ValueError: If no JSON value can be decoded.
    """
    cleaned = _FENCE.sub("", text.strip()).strip()
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError:
        # Models sometimes wrap the payload in prose; take the outermost span.
        for opener, closer in (("{", "}"), ("[", "]")):
            start, end = cleaned.find(opener), cleaned.rfind(closer)
            if start != -1 and end > start:
                try:
                    return json.loads(cleaned[start : end + 1])
                except json.JSONDecodeError:
                    continue
    raise ValueError(f"unparseable model reply: {text[:120]!r}")
