"""Tests for the typer CLI."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

from typer.testing import CliRunner

from cli.main import app
from cli.rendering import render_matrix
from flowql.analysis.models import BusinessProfile, BusinessType, QuestionSet, SummaryResult
from flowql.analysis.stats import compute_stats
from flowql.exceptions import NetworkError
from flowql.pipeline import PipelineResult
from flowql.scraper.models import ExtractedPage
from flowql.scraper.resolver import combine_pages
from flowql.verification.models import STATUS_FAIL, STATUS_OK, EngineResult, VerificationResult

runner = CliRunner()


def _composite():
    page = ExtractedPage(
        url="https://example.com",
        title="Acme",
        description="",
        main_text="Acme builds widgets in Springfield.",
    )
    return combine_pages("https://example.com", [page])


def _rows() -> list[VerificationResult]:
    return [
        VerificationResult(
            question="Who makes widgets?",
            results=[
                EngineResult("ChatGPT", "Acme Corp", matched=True, status=STATUS_OK),
                EngineResult("Claude", "Globex", matched=False, status=STATUS_OK),
                EngineResult("Gemini", status=STATUS_FAIL, error="HTTP 500"),
            ],
        )
    ]


def _pipeline_result() -> PipelineResult:
    composite = _composite()
    return PipelineResult(
        url="https://example.com",
        composite=composite,
        stats=compute_stats(composite),
        summary=SummaryResult(BusinessProfile(company_name="Acme Corp")),
        question_set=QuestionSet(["Who makes widgets?"], BusinessType("local", "")),
        results=_rows(),
    )


class TestScrape:
    def test_prints_merged_text(self) -> None:
        with patch(
            "flowql.scraper.resolve_and_extract", new=AsyncMock(return_value=_composite())
        ) as mock_resolve:
            result = runner.invoke(app, ["scrape", "--url", "example.com"])

        assert result.exit_code == 0, result.output
        assert "Acme builds widgets in Springfield." in result.output
        assert mock_resolve.await_args.args[0] == "https://example.com"

    def test_invalid_url_exits_1(self) -> None:
        result = runner.invoke(app, ["scrape", "--url", "not a url"])

        assert result.exit_code == 1
        assert "[error]" in result.output

    def test_network_error_exits_1(self) -> None:
        error = NetworkError("https://example.com", "refused", attempts=3)
        with patch("flowql.scraper.resolve_and_extract", new=AsyncMock(side_effect=error)):
            result = runner.invoke(app, ["scrape", "--url", "example.com"])

        assert result.exit_code == 1
        assert "3 attempt(s)" in result.output


class TestAnalyze:
    def test_degraded_summary_is_reported(self) -> None:
        with patch("flowql.scraper.resolve_and_extract", new=AsyncMock(return_value=_composite())):
            result = runner.invoke(app, ["analyze", "--url", "example.com"])

        assert result.exit_code == 0, result.output
        assert "OPENAI_API_KEY is not set" in result.output
        assert "Not found" in result.output


class TestVerifyAndEngines:
    def test_verify_without_keys_shows_fail_cells(self) -> None:
        result = runner.invoke(app, ["verify", "--company", "Acme", "-q", "Who makes widgets?"])

        assert result.exit_code == 0, result.output
        assert "Who makes widgets?" in result.output
        assert result.output.count("Fail") == 4

    def test_engines(self) -> None:
        result = runner.invoke(app, ["engines"])

        assert result.exit_code == 0
        assert result.output.count("missing API key") == 4


class TestRun:
    def test_run_writes_csv(self, tmp_path) -> None:
        csv_path = tmp_path / "matrix.csv"
        with patch(
            "flowql.pipeline.run_pipeline", new=AsyncMock(return_value=_pipeline_result())
        ):
            result = runner.invoke(app, ["run", "--url", "example.com", "--csv", str(csv_path)])

        assert result.exit_code == 0, result.output
        assert "Acme Corp" in result.output
        assert csv_path.read_text(encoding="utf-8").splitlines() == [
            "Query,ChatGPT,Claude,Gemini",
            "Who makes widgets?,pass,fail,fail",
        ]

    def test_run_json(self) -> None:
        with patch(
            "flowql.pipeline.run_pipeline", new=AsyncMock(return_value=_pipeline_result())
        ):
            result = runner.invoke(app, ["run", "--url", "example.com", "--json"])

        assert result.exit_code == 0, result.output
        assert '"url": "https://example.com"' in result.output


class TestRenderMatrix:
    def test_cells(self) -> None:
        lines = render_matrix(_rows()).splitlines()

        assert lines[0].split(" | ")[1:] == ["ChatGPT", "Claude", "Gemini"]
        cells = [c.strip() for c in lines[2].split(" | ")[1:]]
        assert cells == ["✓", "✗", "Fail"]

    def test_empty(self) -> None:
        assert render_matrix([]) == "(no questions)"
