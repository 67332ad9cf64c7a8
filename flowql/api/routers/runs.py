"""Full-pipeline endpoint with Server-Sent Events (SSE) streaming.

Routes
------
POST /runs    Body: {"url": "example.com"}

The pipeline runs as a task on the event loop; each completed stage is
pushed onto a queue and forwarded as a separate SSE event so the client can
fill in the comparison table row by row.

SSE event format
----------------
Each event is a JSON-encoded object on the ``data:`` line::

    data: {"event": "stage", "stage": "scraped", ...}

    data: {"event": "done", "result": {...}}

    data: {"event": "error", "detail": "..."}
"""

from __future__ import annotations

import asyncio
import json
from typing import Any, AsyncIterator

from fastapi import APIRouter, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from flowql.exceptions import FlowQLError
from flowql.pipeline import normalize_url, run_pipeline

router = APIRouter()


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

class RunRequest(BaseModel):
    url: str


# ---------------------------------------------------------------------------
# SSE helpers
# ---------------------------------------------------------------------------

def _sse(payload: dict[str, Any]) -> str:
    """Format a payload dict as a single SSE ``data:`` line."""
    return f"data: {json.dumps(payload)}\n\n"


async def _run_sse_generator(url: str, request: Request) -> AsyncIterator[str]:
    """Yield SSE-formatted strings for the duration of a pipeline run."""
    queue: asyncio.Queue[str | None] = asyncio.Queue()

    def _on_event(stage: str, payload: dict[str, Any]) -> None:
        queue.put_nowait(_sse({"event": "stage", "stage": stage, **payload}))

    async def _run() -> None:
        try:
            result = await run_pipeline(
                url,
                cache=request.app.state.cache,
                client=request.app.state.http,
                on_event=_on_event,
            )
            queue.put_nowait(_sse({"event": "done", "result": result.to_dict()}))
        except FlowQLError as exc:
            queue.put_nowait(_sse({"event": "error", "detail": str(exc)}))
        except Exception as exc:  # noqa: BLE001
            queue.put_nowait(_sse({"event": "error", "detail": f"unexpected error: {exc}"}))
        finally:
            queue.put_nowait(None)  # sentinel

    task = asyncio.create_task(_run())
    try:
        while True:
            item = await queue.get()
            if item is None:
                break
            yield item
    finally:
        if not task.done():
            task.cancel()


# ---------------------------------------------------------------------------
# Route
# ---------------------------------------------------------------------------

@router.post("")
async def run(body: RunRequest, request: Request) -> StreamingResponse:
    """Run the whole pipeline for *url* and stream progress as SSE.

    The URL is validated before streaming starts, so a malformed URL answers
    400 instead of an ``error`` event.
    """
    url = normalize_url(body.url)
    return StreamingResponse(
        _run_sse_generator(url, request),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",   # disable nginx proxy buffering
        },
    )
