"""FastAPI application factory.

Lifespan
--------
On startup the app creates one shared ``httpx.AsyncClient`` and one
``TTLCache`` of pipeline results (both on ``request.app.state``).  On
shutdown the client is closed.

Routers
-------
    /analyze   : scrape a site and summarise the business
    /questions : generate search questions from a business profile
    /citations : ask the chat engines and check for the company name
    /runs      : the whole pipeline, streamed as Server-Sent Events
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from flowql import __version__
from flowql.cache import TTLCache
from flowql.config import settings
from flowql.exceptions import InvalidUrlError, NetworkError

from flowql.api.routers import analyze as analyze_router
from flowql.api.routers import citations as citations_router
from flowql.api.routers import questions as questions_router
from flowql.api.routers import runs as runs_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open the shared HTTP client on startup and close it on shutdown."""
    app.state.http = httpx.AsyncClient()
    app.state.cache = TTLCache(
        ttl_sec=settings.cache_ttl, max_entries=settings.cache_max_entries
    )
    try:
        yield
    finally:
        await app.state.http.aclose()


async def _invalid_url(request: Request, exc: InvalidUrlError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "Invalid URL format", "detail": str(exc)})


async def _network_error(request: Request, exc: NetworkError) -> JSONResponse:
    logger.warning("[API] %s", exc)
    return JSONResponse(
        status_code=502,
        content={"error": "Failed to analyze website", "detail": str(exc)},
    )


def create_app() -> FastAPI:
    """Return a fully-configured FastAPI application instance."""
    app = FastAPI(
        title="FlowQL API",
        description=(
            "Scrapes a business website, summarises the business, generates "
            "search questions and checks whether hosted LLMs mention the "
            "company in their answers."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    # Allow browser frontends on any origin (tighten for production).
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(InvalidUrlError, _invalid_url)
    app.add_exception_handler(NetworkError, _network_error)

    app.include_router(analyze_router.router, prefix="/analyze", tags=["analyze"])
    app.include_router(questions_router.router, prefix="/questions", tags=["questions"])
    app.include_router(citations_router.router, prefix="/citations", tags=["citations"])
    app.include_router(runs_router.router, prefix="/runs", tags=["runs"])

    return app


# Module-level instance used by uvicorn:
#   uvicorn flowql.api.app:app --reload
app = create_app()
