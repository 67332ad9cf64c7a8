"""Business summariser: turns merged site text into a :class:`BusinessProfile`.

A single model call, no retry.  Any failure (missing key, call error,
unparseable reply) degrades to the all-``"Not found"`` profile and records
the reason on the returned :class:`SummaryResult`.
"""

from __future__ import annotations

import logging
from typing import Any

from langchain_core.messages import HumanMessage, SystemMessage

from flowql.analysis.llm import get_llm, llm_unavailable_reason, parse_json_reply, reply_text
from flowql.analysis.models import NOT_FOUND, BusinessProfile, SummaryResult
from flowql.config import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = f"""You are a business analyst. Analyze the provided website content and extract key business information. Return ONLY a JSON object with these exact fields:
{{
  "companyName": "The exact name of the company",
  "whatTheyDo": "Brief description of what the company/entity does",
  "whoTheyServe": "Description of their target audience/customers",
  "cityAndCountry": "City and country where they are based",
  "servicesOffered": "Any services they offer",
  "pricing": "How much they charge for their services/products",
  "industry": "The industry the business operates in",
  "businessModel": "B2B, B2C, B2B2C, marketplace, non-profit or similar"
}}

If you cannot determine any field, use "{NOT_FOUND}" as the value."""


def _degraded(reason: str) -> SummaryResult:
    logger.warning("[SUMMARIZE] falling back to sentinel profile: %s", reason)
    return SummaryResult(profile=BusinessProfile(), degraded_reason=reason)


async def summarize(composite_text: str, llm: Any = None) -> SummaryResult:
    """Ask the model for a structured business profile of *composite_text*.

    Only the first ``settings.summary_max_chars`` characters are sent.  Never
    raises.

    Args:
        composite_text: Merged main text of the scraped pages.
        llm: Optional LangChain chat model; defaults to :func:`get_llm`.
    """
    if llm is None:
        reason = llm_unavailable_reason()
        if reason:
            return _degraded(reason)

    content = composite_text[: settings.summary_max_chars]
    messages = [
        SystemMessage(content=SYSTEM_PROMPT),
        HumanMessage(
            content=f"Analyze this website content and extract business information:\n\n{content}"
        ),
    ]

    try:
        model = llm if llm is not None else get_llm(temperature=0.3)
        response = await model.ainvoke(messages)
        data = parse_json_reply(reply_text(response))
    except Exception as exc:  # noqa: BLE001
        return _degraded(f"summary call failed: {exc}")

    if not isinstance(data, dict):
        return _degraded("model reply was not a JSON object")

    profile = BusinessProfile.from_mapping(data)
    logger.info("[SUMMARIZE] profile for %r", profile.company_name)
    return SummaryResult(profile=profile)
