"""Scraper package: fetch, extract and merge a site's key pages."""

from flowql.scraper.extractor import extract_content
from flowql.scraper.fetcher import fetch_url
from flowql.scraper.models import CompositePage, ExtractedPage, FetchResult
from flowql.scraper.resolver import combine_pages, find_about_page, resolve_and_extract

__all__ = [
    "fetch_url",
    "extract_content",
    "resolve_and_extract",
    "find_about_page",
    "combine_pages",
    "FetchResult",
    "ExtractedPage",
    "CompositePage",
]
