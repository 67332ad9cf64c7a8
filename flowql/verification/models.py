"""Data models for citation verification."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

STATUS_OK = "ok"
STATUS_FAIL = "fail"


@dataclass
class EngineResult:
    """One engine's answer to one question.

    ``status`` is ``"fail"`` whenever the call errored or returned no text,
    regardless of ``matched``.
    """

    engine: str
    response_text: str = ""
    matched: bool = False
    status: str = STATUS_FAIL
    error: str = ""


@dataclass
class VerificationResult:
    question: str
    results: List[EngineResult] = field(default_factory=list)
