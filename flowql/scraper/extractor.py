"""Content extraction: turns raw HTML into an :class:`ExtractedPage`.

The main text comes from the first content region that holds enough text.
When that fails (typically a JavaScript-rendered page with almost no
server-side markup), a chain of looser strategies is tried in order.
Headings, links, images and the meta allow-list are always taken from the
unmodified document.
"""

from __future__ import annotations

import logging
import re
from typing import Callable, Dict, List, Tuple
from urllib.parse import urljoin

import trafilatura
from bs4 import BeautifulSoup

from flowql.scraper.models import ExtractedPage

logger = logging.getLogger(__name__)

MAX_TEXT_CHARS = 10_000
MAX_FOOTER_CHARS = 1_000
MAX_LINKS = 50
MAX_IMAGES = 20
MIN_CONTENT_CHARS = 100

FOOTER_LABEL = "FOOTER INFORMATION:"

# ---------------------------------------------------------------------------
# Selector tables
# ---------------------------------------------------------------------------
_STRIP_TAGS = ["script", "style", "noscript", "nav", "header", "aside"]
_STRIP_SELECTORS = ".advertisement, .ads, .ad-banner, .cookie, .cookie-banner, .popup, .modal"

# More specific regions first so navigation chrome is not mistaken for content.
_CONTENT_SELECTORS = [
    "main",
    "article",
    "[role='main']",
    ".content",
    "#content",
    ".main-content",
    "#main",
]

_FOOTER_SELECTORS = [
    "footer",
    ".footer",
    "#footer",
    ".site-footer",
    ".page-footer",
    "[role='contentinfo']",
]

_CONTAINER_HINT = re.compile(r"content|body|text|post|entry|page", re.IGNORECASE)
_DIV_MIN_CHARS = 20
_DIV_MAX_CHARS = 2_000

_META_NAMES = ["author", "keywords", "robots", "viewport"]
_SKIPPED_HREF_PREFIXES = ("#", "javascript:", "mailto:", "tel:")
_WHITESPACE = re.compile(r"\s+")


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _collapse(text: str) -> str:
    return _WHITESPACE.sub(" ", text).strip()


def _text_of(elements) -> str:
    return _collapse(" ".join(el.get_text(separator=" ") for el in elements))


def _extract_title(soup: BeautifulSoup) -> str:
    """Return the ``<title>`` text, falling back to the first ``<h1>``."""
    if soup.title and soup.title.get_text(strip=True):
        return _collapse(soup.title.get_text())
    h1 = soup.find("h1")
    if h1:
        return _collapse(h1.get_text(separator=" "))
    return ""


def _extract_description(soup: BeautifulSoup) -> str:
    tag = soup.find("meta", attrs={"name": "description"})
    if tag and tag.get("content"):
        return tag["content"].strip()
    return ""


def _extract_headings(soup: BeautifulSoup) -> List[str]:
    headings: List[str] = []
    for el in soup.find_all(["h1", "h2", "h3", "h4", "h5", "h6"]):
        text = _collapse(el.get_text(separator=" "))
        if text:
            headings.append(text)
    return headings


def _absolute_unique(values: List[str], base_url: str, limit: int) -> List[str]:
    """Resolve *values* against *base_url*, dedupe in order, cap at *limit*."""
    seen: set[str] = set()
    result: List[str] = []
    for value in values:
        value = value.strip()
        if not value or value.lower().startswith(_SKIPPED_HREF_PREFIXES):
            continue
        try:
            absolute = urljoin(base_url, value) if base_url else value
        except ValueError:
            continue
        if absolute not in seen:
            seen.add(absolute)
            result.append(absolute)
        if len(result) >= limit:
            break
    return result


def _extract_links(soup: BeautifulSoup, base_url: str) -> List[str]:
    hrefs = [a.get("href", "") for a in soup.find_all("a", href=True)]
    return _absolute_unique(hrefs, base_url, MAX_LINKS)


def _extract_images(soup: BeautifulSoup, base_url: str) -> List[str]:
    srcs = [img.get("src", "") for img in soup.find_all("img", src=True)]
    return _absolute_unique(srcs, base_url, MAX_IMAGES)


def _extract_metadata(soup: BeautifulSoup) -> Dict[str, str]:
    """Collect Open Graph, Twitter card and a fixed set of named meta tags."""
    metadata: Dict[str, str] = {}
    for tag in soup.find_all("meta"):
        content = tag.get("content")
        if not content:
            continue
        prop = tag.get("property") or ""
        name = tag.get("name") or ""
        if prop.startswith("og:"):
            metadata.setdefault(prop, content)
        elif name.startswith("twitter:"):
            metadata.setdefault(name, content)
        elif name in _META_NAMES:
            metadata.setdefault(name, content)
    return metadata


def _footer_text(soup: BeautifulSoup) -> str:
    for selector in _FOOTER_SELECTORS:
        elements = soup.select(selector)
        if elements:
            text = _text_of(elements)
            if len(text) > 10:
                return _collapse(text[:MAX_FOOTER_CHARS])
    return ""


def _strip_boilerplate(soup: BeautifulSoup) -> None:
    for tag in soup(_STRIP_TAGS):
        tag.decompose()
    for el in soup.select(_STRIP_SELECTORS):
        el.decompose()
    for selector in _FOOTER_SELECTORS:
        for el in soup.select(selector):
            el.decompose()


def _primary_text(soup: BeautifulSoup) -> str:
    """First content region above the threshold, else the whole body."""
    for selector in _CONTENT_SELECTORS:
        elements = soup.select(selector)
        if elements:
            text = _text_of(elements)
            if len(text) > MIN_CONTENT_CHARS:
                return text
    body = soup.body or soup
    return _collapse(body.get_text(separator=" "))


# ---------------------------------------------------------------------------
# Fallback strategies (tried in order when the primary text is too short)
# ---------------------------------------------------------------------------

def _readability_text(html: str, stripped: BeautifulSoup) -> str:
    text = trafilatura.extract(
        html,
        include_links=False,
        include_images=False,
        include_tables=True,
        no_fallback=False,
    )
    return _collapse(text or "")


def _container_text(html: str, stripped: BeautifulSoup) -> str:
    best = ""
    for el in stripped.find_all(["div", "section"]):
        hint = " ".join(el.get("class", [])) + " " + (el.get("id") or "")
        if not _CONTAINER_HINT.search(hint):
            continue
        text = _collapse(el.get_text(separator=" "))
        if len(text) > len(best):
            best = text
    return best


def _paragraph_text(html: str, stripped: BeautifulSoup) -> str:
    return _text_of(stripped.find_all("p"))


def _div_text(html: str, stripped: BeautifulSoup) -> str:
    seen: set[str] = set()
    parts: List[str] = []
    for el in stripped.find_all("div"):
        text = _collapse(el.get_text(separator=" "))
        if _DIV_MIN_CHARS <= len(text) <= _DIV_MAX_CHARS and text not in seen:
            seen.add(text)
            parts.append(text)
    return " ".join(parts)


def _raw_body_text(html: str, stripped: BeautifulSoup) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    # The footer is appended separately.
    for selector in _FOOTER_SELECTORS:
        for el in soup.select(selector):
            el.decompose()
    body = soup.body or soup
    return _collapse(body.get_text(separator=" "))


_FALLBACK_STRATEGIES: List[Callable[[str, BeautifulSoup], str]] = [
    _readability_text,
    _container_text,
    _paragraph_text,
    _div_text,
    _raw_body_text,
]


def _fallback_text(html: str, stripped: BeautifulSoup, current: str) -> str:
    best = current
    for strategy in _FALLBACK_STRATEGIES:
        try:
            text = strategy(html, stripped)
        except Exception as exc:  # noqa: BLE001
            logger.debug("[EXTRACT] %s failed: %s", strategy.__name__, exc)
            continue
        if len(text) > MIN_CONTENT_CHARS:
            logger.debug("[EXTRACT] fallback %s produced %d chars", strategy.__name__, len(text))
            return text
        if len(text) > len(best):
            best = text
    return best


def _with_footer(text: str, footer: str) -> str:
    return f"{text} {FOOTER_LABEL} {footer}" if footer else text


def _main_text(html: str) -> Tuple[str, int]:
    """Return the page's readable text and its paragraph count.

    Whitespace is flattened to single spaces, so the footer block is marked
    only by its inline ``FOOTER INFORMATION:`` label.  Paragraphs are counted
    on the stripped markup, before that flattening.
    """
    soup = BeautifulSoup(html, "html.parser")
    footer = _footer_text(soup)
    _strip_boilerplate(soup)
    paragraphs = sum(1 for p in soup.find_all("p") if p.get_text(strip=True))

    text = _primary_text(soup)
    if len(_with_footer(text, footer)) < MIN_CONTENT_CHARS:
        text = _fallback_text(html, soup, text)

    return _collapse(_with_footer(text, footer))[:MAX_TEXT_CHARS].strip(), paragraphs


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def extract_content(raw_html: str, url: str = "") -> ExtractedPage:
    """Extract readable text, headings, links, images and metadata.

    A pure function of its inputs: it performs no I/O and never raises.  A
    document that cannot be parsed yields an empty page for *url*.

    Args:
        raw_html: The HTML document.
        url: Base URL used to make links and image sources absolute.
    """
    html = raw_html or ""
    try:
        soup = BeautifulSoup(html, "html.parser")
        main_text, paragraph_count = _main_text(html)
        return ExtractedPage(
            url=url,
            title=_extract_title(soup),
            description=_extract_description(soup),
            main_text=main_text,
            headings=_extract_headings(soup),
            links=_extract_links(soup, url),
            images=_extract_images(soup, url),
            metadata=_extract_metadata(soup),
            paragraph_count=paragraph_count,
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("[EXTRACT] could not parse %s: %s", url or "document", exc)
        return ExtractedPage(url=url, title="", description="", main_text="")
