"""Citation verifier: does each engine mention the company unprompted?

Questions are processed one after another; for each question every engine
is called concurrently and the calls are joined.  Each engine call is caught
on its own so a failure becomes a ``fail`` cell instead of cancelling the
row.  Peak concurrency is therefore the engine count.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Iterable, List, Sequence

import httpx

from flowql.exceptions import EngineUnavailable
from flowql.verification.engines import ChatEngine, default_engines, engine_by_name
from flowql.verification.models import STATUS_FAIL, STATUS_OK, EngineResult, VerificationResult

logger = logging.getLogger(__name__)


def mentions_company(response_text: str, company_name: str) -> bool:
    """Exact, case-sensitive substring test with no normalisation."""
    return bool(company_name) and company_name in response_text


async def _check(
    engine: ChatEngine,
    client: httpx.AsyncClient,
    question: str,
    company_name: str,
) -> EngineResult:
    try:
        text = await engine.ask(client, question)
    except EngineUnavailable as exc:
        logger.warning("[VERIFY] %s", exc)
        return EngineResult(engine=engine.name, status=STATUS_FAIL, error=exc.reason)
    except Exception as exc:  # noqa: BLE001
        logger.warning("[VERIFY] %s unexpected error: %r", engine.name, exc)
        return EngineResult(engine=engine.name, status=STATUS_FAIL, error=str(exc))

    matched = mentions_company(text, company_name)
    if matched:
        logger.info("[VERIFY] %s mentions %r for %r", engine.name, company_name, question)
    return EngineResult(engine=engine.name, response_text=text, matched=matched, status=STATUS_OK)


async def verify(
    questions: Iterable[str],
    company_name: str,
    engines: Sequence[ChatEngine] | None = None,
    client: httpx.AsyncClient | None = None,
    on_result: Callable[[VerificationResult], None] | None = None,
) -> List[VerificationResult]:
    """Ask every engine every question and record whether *company_name* appears.

    Every returned row has exactly one :class:`EngineResult` per engine, in
    engine order, even when engines fail.  *on_result* is called with each
    row as soon as its engines have all answered.
    """
    engines = list(engines) if engines is not None else default_engines()
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient()

    results: List[VerificationResult] = []
    try:
        for question in questions:
            row = await asyncio.gather(
                *(_check(engine, client, question, company_name) for engine in engines)
            )
            result = VerificationResult(question=question, results=list(row))
            results.append(result)
            if on_result is not None:
                on_result(result)
    finally:
        if owns_client:
            await client.aclose()

    logger.info("[VERIFY] checked %d question(s) against %d engine(s)", len(results), len(engines))
    return results


async def check_engine(
    engine_name: str,
    question: str,
    company_name: str,
    client: httpx.AsyncClient | None = None,
) -> EngineResult:
    """Run a single engine for a single question.

    Raises:
        KeyError: If *engine_name* is not one of the default engines.
    """
    engine = engine_by_name(engine_name)
    if engine is None:
        raise KeyError(engine_name)
    rows = await verify([question], company_name, engines=[engine], client=client)
    return rows[0].results[0]


def engine_availability(engines: Sequence[ChatEngine] | None = None) -> dict[str, bool]:
    """Map each engine name to whether its API key is configured."""
    engines = engines if engines is not None else default_engines()
    return {engine.name: engine.available for engine in engines}
