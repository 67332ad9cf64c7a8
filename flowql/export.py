"""CSV export of the verification matrix: one row per question, one column per engine."""

from __future__ import annotations

import csv
import io
from typing import List, Sequence

from flowql.verification.models import VerificationResult

PASS = "pass"
FAIL = "fail"


def engine_columns(results: Sequence[VerificationResult]) -> List[str]:
    """Engine names in column order, taken from the first row."""
    if not results:
        return []
    return [cell.engine for cell in results[0].results]


def results_to_rows(results: Sequence[VerificationResult]) -> List[List[str]]:
    """Header plus one ``[question, pass|fail, ...]`` row per question."""
    rows = [["Query", *engine_columns(results)]]
    for row in results:
        rows.append([row.question, *(PASS if cell.matched else FAIL for cell in row.results)])
    return rows


def results_to_csv(results: Sequence[VerificationResult]) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerows(results_to_rows(results))
    return buffer.getvalue()
