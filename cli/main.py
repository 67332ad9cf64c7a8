"""FlowQL CLI: entry-point for all pipeline operations.

Usage:
    python cli/main.py --help

Each sub-command maps to a pipeline stage:
    scrape     → fetch + extract + merge the site's key pages
    analyze    → scrape, then summarise the business
    questions  → analyze, then generate the search questions
    verify     → ask the chat engines about a company directly
    run        → the whole pipeline, with optional CSV export
    engines    → show which engine API keys are configured
"""

from __future__ import annotations

import sys
from pathlib import Path

# Ensure the project root is on sys.path so that `from flowql.xxx import ...`
# works when the CLI is invoked as `python cli/main.py` from any directory.
_ROOT = Path(__file__).resolve().parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

import asyncio
import json
import logging
from typing import List, Optional

import typer

from flowql.exceptions import FlowQLError

app = typer.Typer(
    name="flowql",
    help="FlowQL: check whether hosted LLMs cite a business.",
    no_args_is_help=True,
)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
) -> None:
    """Configure logging for every sub-command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _fail(exc: FlowQLError) -> None:
    typer.echo(f"[error] {exc}", err=True)
    raise typer.Exit(1)


# ---------------------------------------------------------------------------
# Scrape
# ---------------------------------------------------------------------------
@app.command("scrape")
def scrape(
    url: str = typer.Option(..., help="URL or bare domain to scrape."),
) -> None:
    """Scrape a site's key pages and print the merged text to stdout."""
    from flowql.pipeline import normalize_url
    from flowql.scraper import resolve_and_extract

    try:
        target = normalize_url(url)
        typer.echo(f"[scrape] Fetching {target!r} …")
        composite = asyncio.run(resolve_and_extract(target))
    except FlowQLError as exc:
        _fail(exc)

    typer.echo(f"[scrape] Pages  : {', '.join(p.url for p in composite.pages)}")
    typer.echo(f"[scrape] Title  : {composite.title or '(none)'}")
    typer.echo(f"[scrape] Words  : {len(composite.main_text.split())}")
    typer.echo(f"[scrape] Links  : {len(composite.links)}")
    typer.echo("")
    typer.echo(composite.main_text)


# ---------------------------------------------------------------------------
# Analyze / questions
# ---------------------------------------------------------------------------
async def _analyze(target: str):
    from flowql.analysis.summarizer import summarize
    from flowql.scraper import resolve_and_extract

    composite = await resolve_and_extract(target)
    return composite, await summarize(composite.main_text)


@app.command("analyze")
def analyze(
    url: str = typer.Option(..., help="URL or bare domain to analyze."),
) -> None:
    """Scrape a site and print the inferred business profile."""
    from cli.rendering import render_profile
    from flowql.pipeline import normalize_url

    try:
        target = normalize_url(url)
        typer.echo(f"[analyze] Analyzing {target!r} …")
        composite, summary = asyncio.run(_analyze(target))
    except FlowQLError as exc:
        _fail(exc)

    typer.echo(f"[analyze] Pages: {len(composite.pages)}")
    if summary.degraded:
        typer.echo(f"[analyze] Summary unavailable: {summary.degraded_reason}")
    typer.echo(render_profile(summary.profile))


@app.command("questions")
def questions(
    url: str = typer.Option(..., help="URL or bare domain to analyze."),
) -> None:
    """Analyze a site and print the generated search questions."""
    from flowql.analysis.questions import generate_questions
    from flowql.pipeline import normalize_url

    async def _run(target: str):
        _, summary = await _analyze(target)
        return await generate_questions(summary.profile)

    try:
        target = normalize_url(url)
        question_set = asyncio.run(_run(target))
    except FlowQLError as exc:
        _fail(exc)

    typer.echo(f"[questions] Business type: {question_set.business_type.scope}")
    if question_set.degraded_reason:
        typer.echo(f"[questions] Using template questions: {question_set.degraded_reason}")
    for i, question in enumerate(question_set.questions, start=1):
        typer.echo(f"  {i}. {question}")


# ---------------------------------------------------------------------------
# Verify / engines
# ---------------------------------------------------------------------------
@app.command("verify")
def verify_cmd(
    company: str = typer.Option(..., help="Exact company name to look for (case-sensitive)."),
    question: List[str] = typer.Option(..., "--question", "-q", help="Question to ask (repeatable)."),
) -> None:
    """Ask every engine each question and show whether the company is named."""
    from cli.rendering import render_matrix
    from flowql.verification.verifier import verify

    results = asyncio.run(verify(question, company))
    typer.echo(render_matrix(results))


@app.command("engines")
def engines() -> None:
    """List the citation engines and whether their API keys are configured."""
    from flowql.verification.verifier import engine_availability

    for name, available in engine_availability().items():
        typer.echo(f"  {name:<11} {'configured' if available else 'missing API key'}")


# ---------------------------------------------------------------------------
# Full pipeline
# ---------------------------------------------------------------------------
@app.command("run")
def run(
    url: str = typer.Option(..., help="URL or bare domain to check."),
    csv_path: Optional[Path] = typer.Option(None, "--csv", help="Write the matrix as CSV."),
    as_json: bool = typer.Option(False, "--json", help="Print the full result as JSON."),
) -> None:
    """Run the whole pipeline and print the comparison table."""
    from cli.rendering import render_matrix, render_profile
    from flowql.export import results_to_csv
    from flowql.pipeline import run_pipeline

    def _progress(stage: str, payload: dict) -> None:
        if not as_json:
            typer.echo(f"[run] {stage} …")

    try:
        result = asyncio.run(run_pipeline(url, on_event=_progress))
    except FlowQLError as exc:
        _fail(exc)

    if csv_path is not None:
        csv_path.write_text(results_to_csv(result.results), encoding="utf-8")

    if as_json:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    typer.echo("\n" + "=" * 72)
    typer.echo(render_profile(result.summary.profile))
    typer.echo("=" * 72)
    typer.echo(render_matrix(result.results))
    if csv_path is not None:
        typer.echo(f"\n[run] CSV written to {csv_path}")


# ---------------------------------------------------------------------------
# Entry-point
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    app()
