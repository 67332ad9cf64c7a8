"""Citation-check endpoints.

Routes
------
POST /citations              Body: {"questions": [...], "company_name": "..."}
POST /citations/export       Same body; answers ``text/csv``
GET  /citations/engines      Which engines have an API key configured
POST /citations/{engine}     Body: {"question": "...", "company_name": "..."}
"""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import Response
from pydantic import BaseModel, Field

from flowql.export import results_to_csv
from flowql.verification.verifier import check_engine, engine_availability, verify

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class CitationRequest(BaseModel):
    questions: list[str] = Field(min_length=1)
    company_name: str = Field(min_length=1)


class SingleEngineRequest(BaseModel):
    question: str = Field(min_length=1)
    company_name: str = Field(min_length=1)


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.post("")
async def citations(body: CitationRequest, request: Request) -> dict[str, Any]:
    """Return one row per question with one cell per engine."""
    results = await verify(body.questions, body.company_name, client=request.app.state.http)
    return {"success": True, "data": [asdict(r) for r in results]}


@router.post("/export")
async def export_citations(body: CitationRequest, request: Request) -> Response:
    """Run the check and return the matrix as a CSV download."""
    results = await verify(body.questions, body.company_name, client=request.app.state.http)
    return Response(
        content=results_to_csv(results),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="llm-comparison.csv"'},
    )


@router.get("/engines")
def engines() -> dict[str, Any]:
    """Report engine availability (never the key values)."""
    return {"engines": engine_availability()}


@router.post("/{engine}")
async def single_engine(engine: str, body: SingleEngineRequest, request: Request) -> dict[str, Any]:
    """Ask one engine one question."""
    try:
        cell = await check_engine(
            engine, body.question, body.company_name, client=request.app.state.http
        )
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=f"Unknown engine {engine!r}") from exc
    return asdict(cell)
