"""Question generation endpoint.

Routes
------
POST /questions    Body: {"business_summary": {"companyName": "...", ...}}
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from flowql.analysis.models import BusinessProfile
from flowql.analysis.questions import generate_questions

router = APIRouter()


class QuestionsRequest(BaseModel):
    # camelCase or snake_case profile keys are both accepted.
    business_summary: dict[str, Any]


@router.post("")
async def questions(body: QuestionsRequest) -> dict[str, Any]:
    """Return three redacted search questions and the detected business type."""
    if not body.business_summary:
        raise HTTPException(status_code=400, detail="Business summary is required")

    profile = BusinessProfile.from_mapping(body.business_summary)
    question_set = await generate_questions(profile)
    return {
        "questions": question_set.questions,
        "business_type": {
            "type": question_set.business_type.scope,
            "reasoning": question_set.business_type.reasoning,
        },
        "degraded_reason": question_set.degraded_reason,
    }
