"""Data models for the scraper pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List


@dataclass
class FetchResult:
    """The raw HTTP response for a single URL fetch."""

    url: str
    status_code: int
    body: str
    headers: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ExtractedPage:
    """Readable content and metadata extracted from one HTML document."""

    url: str
    title: str
    description: str
    main_text: str
    headings: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)
    paragraph_count: int = 0


@dataclass
class CompositePage:
    """Up to three :class:`ExtractedPage` records merged in priority order.

    ``pages`` holds the constituents in the order they were merged
    (requested URL, site root, about page).
    """

    primary_url: str
    pages: List[ExtractedPage] = field(default_factory=list)
    title: str = ""
    description: str = ""
    main_text: str = ""
    headings: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)
    images: List[str] = field(default_factory=list)
    metadata: Dict[str, str] = field(default_factory=dict)
