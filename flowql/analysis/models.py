"""Data models for business summarisation and question generation."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field, fields
from typing import Any, List, Mapping, Optional

# A first-class value meaning "no data", not an error.
NOT_FOUND = "Not found"

# Reply keys requested from the model, mapped to dataclass field names.
PROFILE_KEYS = {
    "companyName": "company_name",
    "whatTheyDo": "what_they_do",
    "whoTheyServe": "who_they_serve",
    "cityAndCountry": "city_and_country",
    "servicesOffered": "services_offered",
    "pricing": "pricing",
    "industry": "industry",
    "businessModel": "business_model",
}


@dataclass
class BusinessProfile:
    """Business attributes inferred from a site's content."""

    company_name: str = NOT_FOUND
    what_they_do: str = NOT_FOUND
    who_they_serve: str = NOT_FOUND
    city_and_country: str = NOT_FOUND
    services_offered: str = NOT_FOUND
    pricing: str = NOT_FOUND
    industry: str = NOT_FOUND
    business_model: str = NOT_FOUND

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "BusinessProfile":
        """Build a profile from a model reply (camelCase or snake_case keys).

        Missing, empty or non-scalar values become :data:`NOT_FOUND`.
        """
        values: dict[str, str] = {}
        for camel, snake in PROFILE_KEYS.items():
            raw = data.get(camel, data.get(snake))
            if isinstance(raw, (str, int, float)) and str(raw).strip():
                values[snake] = str(raw).strip()
        return cls(**values)

    def to_dict(self) -> dict[str, str]:
        return asdict(self)

    def known(self, name: str) -> bool:
        """Return ``True`` when field *name* holds real data."""
        value = getattr(self, name)
        return bool(value) and value != NOT_FOUND

    def is_empty(self) -> bool:
        return not any(self.known(f.name) for f in fields(self))


@dataclass
class SummaryResult:
    """Outcome of a summarisation call.

    ``degraded_reason`` is ``None`` when the model produced the profile and
    otherwise names why the all-sentinel profile was substituted.
    """

    profile: BusinessProfile
    degraded_reason: Optional[str] = None

    @property
    def degraded(self) -> bool:
        return self.degraded_reason is not None


@dataclass
class BusinessType:
    scope: str = "national"  # local | national | online
    reasoning: str = ""


@dataclass
class QuestionSet:
    questions: List[str] = field(default_factory=list)
    business_type: BusinessType = field(default_factory=BusinessType)
    degraded_reason: Optional[str] = None


@dataclass
class ContentStats:
    word_count: int
    reading_time_minutes: int
    paragraph_count: int
    heading_count: int
    link_count: int
    image_count: int
    has_title: bool
    has_description: bool
    title_length: int
    description_length: int
    is_truncated: bool


@dataclass
class PageSpeedResult:
    performance: int
    accessibility: int
    best_practices: int
    seo: int
    first_contentful_paint: float = 0.0
    largest_contentful_paint: float = 0.0
    cumulative_layout_shift: float = 0.0
    speed_index: float = 0.0
