"""Tests for HTML content extraction.

``extract_content`` is pure, so these tests feed it literal HTML.  The
readability strategy (``trafilatura.extract``) is patched out wherever a
test depends on which fallback wins.
"""

from __future__ import annotations

from unittest.mock import patch

from bs4 import BeautifulSoup

from flowql.scraper.extractor import (
    FOOTER_LABEL,
    MAX_IMAGES,
    MAX_LINKS,
    MAX_TEXT_CHARS,
    _extract_metadata,
    _extract_title,
    extract_content,
)

_LONG = (
    "We repair boilers, radiators and underfloor heating for homes across the "
    "county, with same-day callouts and fixed prices for every job we take on."
)

_PAGE = f"""\
<!DOCTYPE html>
<html>
<head>
  <title>Northside Heating</title>
  <meta name="description" content="Heating engineers in Leeds">
  <meta property="og:title" content="Northside Heating Ltd">
  <meta name="twitter:card" content="summary">
  <meta name="author" content="Northside">
  <meta name="generator" content="ignored">
</head>
<body>
  <nav><a href="/services">Services</a></nav>
  <script>var tracking = "do not index";</script>
  <main>
    <h1>Boiler repair</h1>
    <p>{_LONG}</p>
    <h2>Prices</h2>
    <a href="/contact">Contact</a>
    <a href="https://example.com/contact">Contact again</a>
    <a href="#top">Top</a>
    <a href="mailto:hi@example.com">Mail</a>
    <a href="tel:123">Call</a>
    <a href="javascript:void(0)">JS</a>
    <img src="/img/van.png">
  </main>
  <div class="cookie-banner">We use cookies to improve things for everyone.</div>
  <footer>Northside Heating, 1 Mill Lane, Leeds LS1 1AA</footer>
</body>
</html>
"""


class TestExtractContent:
    def test_basic_fields(self) -> None:
        page = extract_content(_PAGE, "https://example.com/")

        assert page.url == "https://example.com/"
        assert page.title == "Northside Heating"
        assert page.description == "Heating engineers in Leeds"
        assert _LONG in page.main_text
        assert page.headings == ["Boiler repair", "Prices"]

    def test_boilerplate_is_stripped(self) -> None:
        page = extract_content(_PAGE, "https://example.com/")

        assert "tracking" not in page.main_text
        assert "cookies" not in page.main_text

    def test_footer_is_appended_once(self) -> None:
        page = extract_content(_PAGE, "https://example.com/")

        assert f"{FOOTER_LABEL} Northside Heating, 1 Mill Lane" in page.main_text
        assert page.main_text.count("1 Mill Lane") == 1

    def test_footer_block_is_flattened_inline(self) -> None:
        page = extract_content(_PAGE, "https://example.com/")

        assert "\n" not in page.main_text
        assert page.main_text.endswith(f" {FOOTER_LABEL} Northside Heating, 1 Mill Lane, Leeds LS1 1AA")

    def test_links_are_absolute_filtered_and_deduplicated(self) -> None:
        page = extract_content(_PAGE, "https://example.com/")

        assert page.links == ["https://example.com/services", "https://example.com/contact"]

    def test_images_are_absolute(self) -> None:
        page = extract_content(_PAGE, "https://example.com/")

        assert page.images == ["https://example.com/img/van.png"]

    def test_metadata_allow_list(self) -> None:
        page = extract_content(_PAGE, "https://example.com/")

        assert page.metadata == {
            "og:title": "Northside Heating Ltd",
            "twitter:card": "summary",
            "author": "Northside",
        }

    def test_is_deterministic(self) -> None:
        assert extract_content(_PAGE, "https://example.com/") == extract_content(
            _PAGE, "https://example.com/"
        )

    def test_main_text_is_capped(self) -> None:
        html = f"<html><body><main><p>{'word ' * 5000}</p></main></body></html>"
        page = extract_content(html)

        assert len(page.main_text) <= MAX_TEXT_CHARS

    def test_link_and_image_caps(self) -> None:
        anchors = "".join(f'<a href="/p{i}">p</a>' for i in range(80))
        images = "".join(f'<img src="/i{i}.png">' for i in range(40))
        page = extract_content(f"<html><body>{anchors}{images}</body></html>", "https://x.io/")

        assert len(page.links) == MAX_LINKS
        assert len(page.images) == MAX_IMAGES
        assert page.links[0] == "https://x.io/p0"


class TestNeverRaises:
    def test_empty_document(self) -> None:
        page = extract_content("", "https://example.com/")

        assert page.url == "https://example.com/"
        assert page.title == ""
        assert page.links == []

    def test_malformed_markup(self) -> None:
        with patch("flowql.scraper.extractor.trafilatura.extract", return_value=None):
            page = extract_content("<<<div><p>unclosed <b>tags</div", "https://example.com/")
        assert "unclosed" in page.main_text

    def test_parser_failure_yields_empty_page(self) -> None:
        with patch("flowql.scraper.extractor._extract_title", side_effect=RuntimeError("boom")):
            page = extract_content(_PAGE, "https://example.com/")

        assert page.url == "https://example.com/"
        assert page.main_text == ""


class TestFallbacks:
    def test_text_hidden_in_header_recovered_from_raw_body(self) -> None:
        """A page whose only text sits in stripped chrome still yields that text."""
        html = f"<html><body><header><p>{_LONG}</p></header></body></html>"

        with patch("flowql.scraper.extractor.trafilatura.extract", return_value=None):
            page = extract_content(html)

        assert _LONG in page.main_text

    def test_readability_strategy_used_first(self) -> None:
        html = "<html><body><div id='root'></div></body></html>"

        with patch(
            "flowql.scraper.extractor.trafilatura.extract", return_value=_LONG
        ) as mock_extract:
            page = extract_content(html)

        mock_extract.assert_called_once()
        assert page.main_text == _LONG

    def test_short_page_keeps_best_effort_text(self) -> None:
        with patch("flowql.scraper.extractor.trafilatura.extract", return_value=None):
            page = extract_content("<html><body><div>Tiny</div></body></html>")

        assert page.main_text == "Tiny"

    def test_long_footer_on_short_page_appears_once(self) -> None:
        footer = (
            "Northside Heating Ltd, 1 Mill Lane, Leeds LS1 1AA. Registered in England "
            "and Wales. Gas Safe registered engineers, open seven days a week."
        )
        html = f"<html><body><div>Short intro</div><footer>{footer}</footer></body></html>"

        with patch("flowql.scraper.extractor.trafilatura.extract", return_value=None):
            page = extract_content(html)

        assert page.main_text.count("1 Mill Lane") == 1
        assert page.main_text == f"Short intro {FOOTER_LABEL} {footer}"

    def test_raw_body_fallback_leaves_out_footer(self) -> None:
        html = "<html><body><div>Short intro</div><footer>1 Mill Lane, Leeds</footer></body></html>"

        with patch("flowql.scraper.extractor.trafilatura.extract", return_value=None):
            page = extract_content(html)

        assert page.main_text == f"Short intro {FOOTER_LABEL} 1 Mill Lane, Leeds"


class TestHelpers:
    def test_title_falls_back_to_h1(self) -> None:
        soup = BeautifulSoup("<html><body><h1>Only heading</h1></body></html>", "html.parser")
        assert _extract_title(soup) == "Only heading"

    def test_first_meta_value_wins(self) -> None:
        soup = BeautifulSoup(
            '<meta property="og:site_name" content="First">'
            '<meta property="og:site_name" content="Second">',
            "html.parser",
        )
        assert _extract_metadata(soup) == {"og:site_name": "First"}
