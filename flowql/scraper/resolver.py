"""Page-set resolution: start URL, site root and one "about" page.

Pages are fetched one after the other in a fixed priority order because the
about-page discovery may need the root page's HTML.  Only a failure on the
start URL is fatal; the root and about pages are best-effort.
"""

from __future__ import annotations

import logging
from typing import Dict, List
from urllib.parse import urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

from flowql.config import settings
from flowql.exceptions import NetworkError
from flowql.scraper.extractor import extract_content
from flowql.scraper.fetcher import BROWSER_HEADERS, fetch_url
from flowql.scraper.models import CompositePage, ExtractedPage

logger = logging.getLogger(__name__)

ABOUT_PATHS = [
    "/about",
    "/about-us",
    "/about-me",
    "/company",
    "/who-we-are",
    "/our-story",
    "/team",
    "/info",
]

_NAV_SELECTORS = ["nav", ".nav", ".navigation", ".menu", "header", ".header"]
_ABOUT_HINTS = ["about", "company", "who we are", "who-we-are", "our story", "our-story", "team"]


# ---------------------------------------------------------------------------
# URL helpers
# ---------------------------------------------------------------------------

def site_root(url: str) -> str:
    """Return ``scheme://host`` for *url*."""
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


def _same_origin(url: str, root: str) -> bool:
    a, b = urlparse(url), urlparse(root)
    return (a.scheme, a.netloc.lower()) == (b.scheme, b.netloc.lower())


def _same_page(a: str, b: str) -> bool:
    return a.rstrip("/") == b.rstrip("/")


# ---------------------------------------------------------------------------
# About-page discovery
# ---------------------------------------------------------------------------

async def _probe_about_paths(client: httpx.AsyncClient, root: str) -> str | None:
    for path in ABOUT_PATHS:
        candidate = f"{root}{path}"
        try:
            response = await client.head(
                candidate,
                headers=BROWSER_HEADERS,
                timeout=settings.about_probe_timeout,
                follow_redirects=True,
            )
        except httpx.HTTPError as exc:
            logger.debug("[RESOLVE] probe %s failed: %s", candidate, exc)
            continue
        if response.status_code == 200:
            return candidate
    return None


def _about_link_from_nav(root_html: str, root: str) -> str | None:
    soup = BeautifulSoup(root_html, "html.parser")
    for selector in _NAV_SELECTORS:
        for region in soup.select(selector):
            for anchor in region.find_all("a", href=True):
                href = anchor["href"].strip()
                text = anchor.get_text(separator=" ").lower()
                if not href or href.startswith("#"):
                    continue
                if not any(hint in text or hint in href.lower() for hint in _ABOUT_HINTS):
                    continue
                full_url = urljoin(f"{root}/", href)
                if _same_origin(full_url, root):
                    return full_url
    return None


async def find_about_page(
    root: str,
    client: httpx.AsyncClient,
    root_html: str | None = None,
    fetch_root: bool = True,
) -> str | None:
    """Locate an "about"-style page for the site at *root*.

    Common paths are probed first; if none answers 200 the navigation regions
    of the root page are scanned for a same-origin about/company/team link.
    *root_html* is reused when the caller already fetched the root page.  With
    *fetch_root* false and no *root_html*, the nav scan is skipped rather than
    loading the root again.
    """
    found = await _probe_about_paths(client, root)
    if found:
        logger.info("[RESOLVE] about page found by probe: %s", found)
        return found

    if root_html is None:
        if not fetch_root:
            return None
        try:
            root_html = (await fetch_url(root, client)).body
        except NetworkError as exc:
            logger.warning("[RESOLVE] could not load %s for nav scan: %s", root, exc)
            return None

    found = _about_link_from_nav(root_html, root)
    if found:
        logger.info("[RESOLVE] about page found in navigation: %s", found)
    return found


# ---------------------------------------------------------------------------
# Merge
# ---------------------------------------------------------------------------

def _union(lists: List[List[str]]) -> List[str]:
    seen: set[str] = set()
    merged: List[str] = []
    for values in lists:
        for value in values:
            if value not in seen:
                seen.add(value)
                merged.append(value)
    return merged


def combine_pages(primary_url: str, pages: List[ExtractedPage]) -> CompositePage:
    """Merge *pages* (already in priority order) into one :class:`CompositePage`.

    Scalars take the first non-empty value, list fields are an
    order-preserving union, and metadata keys keep their first-seen value.
    """
    metadata: Dict[str, str] = {}
    for page in pages:
        for key, value in page.metadata.items():
            metadata.setdefault(key, value)

    return CompositePage(
        primary_url=primary_url,
        pages=list(pages),
        title=next((p.title for p in pages if p.title), ""),
        description=next((p.description for p in pages if p.description), ""),
        main_text="\n\n".join(p.main_text for p in pages if p.main_text),
        headings=_union([p.headings for p in pages]),
        links=_union([p.links for p in pages]),
        images=_union([p.images for p in pages]),
        metadata=metadata,
    )


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

async def resolve_and_extract(
    start_url: str,
    client: httpx.AsyncClient | None = None,
) -> CompositePage:
    """Fetch and merge the start URL, the site root and an about page.

    Raises:
        NetworkError: Only when the start URL itself cannot be fetched.
    """
    owns_client = client is None
    if client is None:
        client = httpx.AsyncClient()

    try:
        root = site_root(start_url)
        pages: List[ExtractedPage] = []
        fetched: List[str] = []

        start = await fetch_url(start_url, client)
        pages.append(extract_content(start.body, start_url))
        fetched.append(start_url)

        root_html: str | None = start.body if _same_page(start_url, root) else None
        root_failed = False
        if root_html is None and len(fetched) < settings.max_pages:
            try:
                root_result = await fetch_url(root, client)
                root_html = root_result.body
                pages.append(extract_content(root_html, root))
                fetched.append(root)
            except NetworkError as exc:
                logger.warning("[RESOLVE] skipping site root %s: %s", root, exc)
                root_failed = True

        if len(fetched) < settings.max_pages:
            about = await find_about_page(
                root, client, root_html=root_html, fetch_root=not root_failed
            )
            if about and not any(_same_page(about, u) for u in fetched):
                try:
                    about_result = await fetch_url(about, client)
                    pages.append(extract_content(about_result.body, about))
                    fetched.append(about)
                except NetworkError as exc:
                    logger.warning("[RESOLVE] skipping about page %s: %s", about, exc)

        logger.info("[RESOLVE] merged %d page(s) for %s", len(pages), start_url)
        return combine_pages(start_url, pages)
    finally:
        if owns_client:
            await client.aclose()
