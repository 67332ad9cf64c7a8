"""Simple content statistics shown alongside the business summary."""

from __future__ import annotations

import math

from flowql.analysis.models import ContentStats
from flowql.scraper.extractor import MAX_TEXT_CHARS
from flowql.scraper.models import CompositePage, ExtractedPage

WORDS_PER_MINUTE = 200


def compute_stats(page: ExtractedPage | CompositePage) -> ContentStats:
    """Word count, reading time, structure and SEO basics for *page*.

    ``paragraph_count`` sums the ``<p>`` blocks each constituent page had
    before its text was flattened.  ``is_truncated`` is set when any
    constituent page hit the text cap, i.e. the whole site was not analysed.
    """
    word_count = len(page.main_text.split())

    constituents = page.pages if isinstance(page, CompositePage) else [page]
    truncated = any(len(p.main_text) >= MAX_TEXT_CHARS for p in constituents)

    return ContentStats(
        word_count=word_count,
        reading_time_minutes=math.ceil(word_count / WORDS_PER_MINUTE),
        paragraph_count=sum(p.paragraph_count for p in constituents),
        heading_count=len(page.headings),
        link_count=len(page.links),
        image_count=len(page.images),
        has_title=bool(page.title),
        has_description=bool(page.description),
        title_length=len(page.title),
        description_length=len(page.description),
        is_truncated=truncated,
    )
