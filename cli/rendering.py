"""Plain-text rendering of pipeline results for the CLI."""

from __future__ import annotations

from typing import List, Sequence

from flowql.analysis.models import BusinessProfile
from flowql.verification.models import STATUS_OK, EngineResult, VerificationResult

_PROFILE_LABELS = [
    ("company_name", "Company"),
    ("what_they_do", "What they do"),
    ("who_they_serve", "Who they serve"),
    ("city_and_country", "Location"),
    ("services_offered", "Services"),
    ("pricing", "Pricing"),
    ("industry", "Industry"),
    ("business_model", "Business model"),
]

_MAX_QUESTION_WIDTH = 60


def _cell(result: EngineResult) -> str:
    if result.status != STATUS_OK:
        return "Fail"
    return "✓" if result.matched else "✗"


def render_profile(profile: BusinessProfile) -> str:
    width = max(len(label) for _, label in _PROFILE_LABELS)
    return "\n".join(
        f"{label.ljust(width)} : {getattr(profile, name)}" for name, label in _PROFILE_LABELS
    )


def render_matrix(results: Sequence[VerificationResult]) -> str:
    """Render the comparison table: one row per question, one column per engine.

    Cells are ``✓`` (mentioned), ``✗`` (answered without the name) or
    ``Fail`` (the engine call failed).
    """
    if not results:
        return "(no questions)"

    engines = [cell.engine for cell in results[0].results]
    questions = [
        r.question if len(r.question) <= _MAX_QUESTION_WIDTH
        else r.question[: _MAX_QUESTION_WIDTH - 1] + "…"
        for r in results
    ]
    q_width = max(len("Query"), *(len(q) for q in questions))
    widths = [max(len(name), 4) for name in engines]

    def _row(first: str, cells: List[str]) -> str:
        padded = [c.center(w) for c, w in zip(cells, widths)]
        return f"{first.ljust(q_width)} | " + " | ".join(padded)

    lines = [_row("Query", engines)]
    lines.append("-" * q_width + "-+-" + "-+-".join("-" * w for w in widths))
    for question, row in zip(questions, results):
        lines.append(_row(question, [_cell(c) for c in row.results]))
    return "\n".join(lines)
