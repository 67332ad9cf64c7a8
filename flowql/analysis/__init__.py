"""Analysis package: business summary, question generation, page stats."""

from flowql.analysis.models import (
    NOT_FOUND,
    BusinessProfile,
    BusinessType,
    ContentStats,
    PageSpeedResult,
    QuestionSet,
    SummaryResult,
)
from flowql.analysis.questions import classify_business, generate_questions, redact
from flowql.analysis.stats import compute_stats
from flowql.analysis.summarizer import summarize

__all__ = [
    "NOT_FOUND",
    "BusinessProfile",
    "BusinessType",
    "ContentStats",
    "PageSpeedResult",
    "QuestionSet",
    "SummaryResult",
    "summarize",
    "redact",
    "classify_business",
    "generate_questions",
    "compute_stats",
]
