"""Search-question generation with company-name redaction.

The generated questions are later sent to third-party chat engines to see
whether they mention the company unprompted, so the company name (and its
common variants) is scrubbed from everything the question model sees and
from everything it returns.

Business-type classification (local / national / online) only steers the
phrasing guidance; nothing downstream depends on it.
"""

from __future__ import annotations

import logging
import re
from dataclasses import fields
from typing import Any, List

from langchain_core.messages import HumanMessage, SystemMessage

from flowql.analysis.llm import get_llm, llm_unavailable_reason, parse_json_reply, reply_text
from flowql.analysis.models import NOT_FOUND, BusinessProfile, BusinessType, QuestionSet

logger = logging.getLogger(__name__)

QUESTION_COUNT = 3
SCOPES = ("local", "national", "online")

_LEGAL_SUFFIX = re.compile(
    r"[\s,]+(?:incorporated|inc|llc|l\.l\.c|llp|ltd|limited|corp|corporation|"
    r"co|company|gmbh|plc|pty|pvt|ag|sa|bv|srl)\.?$",
    re.IGNORECASE,
)
_ONLINE_HINTS = re.compile(
    r"\b(?:online|saas|software|apps?|platform|digital|e-?commerce|marketplace|"
    r"cloud|web-based|subscription)\b",
    re.IGNORECASE,
)
_WHITESPACE = re.compile(r"\s+")
_CLAUSE_BREAK = re.compile(r"[,.;:(]")


# ---------------------------------------------------------------------------
# Redaction
# ---------------------------------------------------------------------------

def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def strip_legal_suffix(name: str) -> str:
    """``"Acme Widgets, Inc."`` -> ``"Acme Widgets"``."""
    stripped = name.strip()
    while True:
        shorter = _LEGAL_SUFFIX.sub("", stripped).strip()
        if shorter == stripped or not shorter:
            return stripped
        stripped = shorter


def name_variants(company_name: str) -> List[str]:
    """Return the strings to scrub for *company_name*, longest first.

    The full name, its legal-suffix-stripped form and (for multi-word names)
    its first token.  Single-character tokens are not used as variants.
    Names of two characters or fewer, and the sentinel, yield nothing.
    """
    name = _collapse(company_name or "")
    if len(name) <= 2 or name == NOT_FOUND:
        return []

    candidates = [name, strip_legal_suffix(name)]
    tokens = name.split(" ")
    if len(tokens) > 1:
        candidates.append(tokens[0].strip(",.;:!?\"'()"))

    seen: set[str] = set()
    variants: List[str] = []
    for candidate in candidates:
        key = candidate.lower()
        if len(candidate) > 1 and key not in seen:
            seen.add(key)
            variants.append(candidate)
    return sorted(variants, key=len, reverse=True)


def redact(text: str, company_name: str) -> str:
    """Remove every case-insensitive occurrence of *company_name*'s variants.

    Removal repeats until nothing matches, so joins created by a removal
    (``"AcAcmeme"``) are caught as well.  Whitespace is collapsed.
    """
    variants = name_variants(company_name)
    if not text or not variants:
        return text
    pattern = re.compile("|".join(re.escape(v) for v in variants), re.IGNORECASE)
    previous = None
    current = _collapse(text)
    while current != previous:
        previous = current
        current = _collapse(pattern.sub("", current))
    return current


def redact_profile(profile: BusinessProfile) -> BusinessProfile:
    """Return a copy of *profile* with the company name scrubbed from every field.

    ``company_name`` itself becomes the sentinel.
    """
    values = {}
    for f in fields(profile):
        if f.name == "company_name":
            values[f.name] = NOT_FOUND
            continue
        value = getattr(profile, f.name)
        if value == NOT_FOUND:
            values[f.name] = value
        else:
            values[f.name] = redact(value, profile.company_name) or NOT_FOUND
    return BusinessProfile(**values)


# ---------------------------------------------------------------------------
# Prompt helpers
# ---------------------------------------------------------------------------

def _summary_text(profile: BusinessProfile, scope: str | None = None) -> str:
    lines = [
        f"What they do: {profile.what_they_do}",
        f"Who they serve: {profile.who_they_serve}",
        f"Location: {profile.city_and_country}",
        f"Services: {profile.services_offered}",
        f"Industry: {profile.industry}",
        f"Business model: {profile.business_model}",
    ]
    if scope:
        lines.append(f"Business type: {scope}")
    return "\n".join(lines)


def _phrase(value: str, limit: int = 60) -> str:
    """First clause of *value*, lower-cased and bounded."""
    clause = _CLAUSE_BREAK.split(value, maxsplit=1)[0]
    clause = _collapse(clause)[:limit].strip()
    if clause and not clause.isupper():
        clause = clause[0].lower() + clause[1:]
    return clause


def _service_phrase(profile: BusinessProfile) -> str:
    for name in ("services_offered", "industry", "what_they_do"):
        if profile.known(name):
            phrase = _phrase(getattr(profile, name))
            if phrase:
                return phrase
    return "service"


_GUIDANCE = {
    "local": (
        'Generate questions like "Who is the top [service] company in [city]?" or '
        '"What are the best [service] providers near [location]?" Include the '
        "city/location when available."
    ),
    "online": (
        'Generate questions like "Who is the top online [service] provider?" or '
        '"What are the best digital [service] platforms?" Focus on online/digital aspects.'
    ),
    "national": (
        'Generate questions like "Who are the top [service] companies?" or '
        '"What are the leading [industry] providers?" Focus on national/major players.'
    ),
}

_CLASSIFY_PROMPT = """Analyze this business and classify it as one of three types:

1. "local" - Small local businesses that serve a specific geographic area (restaurants, plumbers, local retail, medical practices, etc.)
2. "national" - Large companies that operate across multiple regions/states (major brands, franchises, big corporations)
3. "online" - Digital-first businesses that primarily operate online (SaaS, fintech apps, e-commerce platforms, digital services)

Return ONLY a JSON object with this exact format:
{
  "type": "local|national|online",
  "reasoning": "brief explanation"
}"""


def _questions_prompt(scope: str) -> str:
    return (
        f"Based on this business information, generate exactly {QUESTION_COUNT} "
        "human-like questions that someone might ask when looking for similar services.\n\n"
        f"{_GUIDANCE[scope]}\n\n"
        "Make the questions natural and conversational. Focus on the type of "
        "service/industry rather than the specific company. Never mention any "
        "company or brand name.\n\n"
        f"Return ONLY a JSON array of {QUESTION_COUNT} strings, no other text.\n"
        'Example format: ["question 1", "question 2", "question 3"]'
    )


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def heuristic_business_type(profile: BusinessProfile) -> BusinessType:
    """Keyword classification used when the model is unavailable."""
    text = " ".join(
        getattr(profile, name)
        for name in ("what_they_do", "services_offered", "industry", "business_model")
        if profile.known(name)
    )
    if _ONLINE_HINTS.search(text):
        return BusinessType("online", "digital-first keywords in the profile")
    if profile.known("city_and_country"):
        return BusinessType("local", "profile names a specific location")
    return BusinessType("national", "no location or digital signals")


async def classify_business(profile: BusinessProfile, llm: Any = None) -> BusinessType:
    """Classify *profile* as local, national or online.

    Falls back to :func:`heuristic_business_type` on any model failure.
    """
    if llm is None and llm_unavailable_reason():
        return heuristic_business_type(profile)

    messages = [
        SystemMessage(content=_CLASSIFY_PROMPT),
        HumanMessage(content=f"Classify this business:\n{_summary_text(profile)}"),
    ]
    try:
        model = llm if llm is not None else get_llm(temperature=0.3, max_tokens=150)
        data = parse_json_reply(reply_text(await model.ainvoke(messages)))
        scope = str(data.get("type", "")).strip().lower()
        if scope not in SCOPES:
            raise ValueError(f"unknown business type {scope!r}")
        return BusinessType(scope, str(data.get("reasoning", "")))
    except Exception as exc:  # noqa: BLE001
        logger.warning("[QUESTIONS] classification failed, using heuristic: %s", exc)
        return heuristic_business_type(profile)


# ---------------------------------------------------------------------------
# Question generation
# ---------------------------------------------------------------------------

def fallback_questions(profile: BusinessProfile, scope: str) -> List[str]:
    """Deterministic template questions for *scope*."""
    service = _service_phrase(profile)
    audience = _phrase(profile.who_they_serve) if profile.known("who_they_serve") else ""
    for_audience = f" for {audience}" if audience else ""
    industry = _phrase(profile.industry) if profile.known("industry") else service

    if scope == "local" and profile.known("city_and_country"):
        location = _collapse(profile.city_and_country)
        return [
            f"Who is the top {service} company in {location}?",
            f"What are the best {service} providers near {location}?",
            f"Which {service} business in {location} would you recommend{for_audience}?",
        ]
    if scope == "online":
        return [
            f"Who is the top online {service} provider?",
            f"What are the best digital {service} platforms?",
            f"Which online {service} service would you recommend{for_audience}?",
        ]
    return [
        f"Who are the top {service} companies?",
        f"What are the leading {industry} providers?",
        f"Which {service} company would you recommend{for_audience}?",
    ]


_GENERIC_QUESTIONS = [
    "Which providers would you recommend for this kind of service?",
    "What should I look for when choosing a provider like this?",
    "Who are the most trusted providers in this field?",
]


def _finalise(candidates: List[str], company_name: str, padding: List[str]) -> List[str]:
    questions: List[str] = []
    for candidate in candidates + padding + _GENERIC_QUESTIONS:
        cleaned = redact(candidate, company_name)
        if cleaned and cleaned not in questions:
            questions.append(cleaned)
        if len(questions) == QUESTION_COUNT:
            break
    return questions


async def generate_questions(profile: BusinessProfile, llm: Any = None) -> QuestionSet:
    """Generate exactly three search questions for *profile*.

    The profile is redacted before anything is sent to the model, and the
    model's questions are redacted again.  A missing key or any model failure
    yields the template questions for the detected business type.
    """
    company_name = profile.company_name
    scrubbed = redact_profile(profile)
    business_type = await classify_business(scrubbed, llm)
    templates = fallback_questions(scrubbed, business_type.scope)

    reason = llm_unavailable_reason() if llm is None else None
    if reason:
        logger.warning("[QUESTIONS] using template questions: %s", reason)
        return QuestionSet(_finalise(templates, company_name, []), business_type, reason)

    messages = [
        SystemMessage(content=_questions_prompt(business_type.scope)),
        HumanMessage(
            content=(
                f"Generate {QUESTION_COUNT} contextual questions for this "
                f"{business_type.scope} business:\n{_summary_text(scrubbed, business_type.scope)}"
            )
        ),
    ]
    try:
        model = llm if llm is not None else get_llm(temperature=0.7, max_tokens=300)
        data = parse_json_reply(reply_text(await model.ainvoke(messages)))
        if not isinstance(data, list):
            raise ValueError("model reply was not a JSON array")
        candidates = [str(item) for item in data if isinstance(item, str) and item.strip()]
    except Exception as exc:  # noqa: BLE001
        logger.warning("[QUESTIONS] generation failed, using templates: %s", exc)
        return QuestionSet(
            _finalise(templates, company_name, []),
            business_type,
            f"question generation failed: {exc}",
        )

    questions = _finalise(candidates, company_name, templates)
    logger.info("[QUESTIONS] generated %d question(s) (%s)", len(questions), business_type.scope)
    return QuestionSet(questions, business_type)
