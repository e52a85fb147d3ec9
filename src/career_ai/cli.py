"""CLI interface using typer + rich."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

import typer
from pydantic import TypeAdapter, ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from career_ai.config import get_config
from career_ai.errors import CareerAIError
from career_ai.logging.models import OperationType
from career_ai.logging.usage_store import UsageStore
from career_ai.models.followup import ApplicationContext
from career_ai.models.match import JobDetails, UserProfile
from career_ai.models.notes import ApplicationNote
from career_ai.parsers.document_parser import extract_document_text, redact_pii
from career_ai.parsers.job_scraper import fetch_job_description
from career_ai.pipeline.followup_generator import generate_follow_up_suggestions
from career_ai.pipeline.match_adjuster import analyze_job_match
from career_ai.pipeline.notes_summarizer import summarize_application_notes
from career_ai.pipeline.resume_parser import parse_resume_text
from career_ai.rate_limit import RateLimiter

app = typer.Typer(
    name="career-ai",
    help="AI assistant for job applications: resume parsing, notes, follow-ups, match scoring",
    no_args_is_help=True,
)
console = Console()
logger = logging.getLogger("career_ai")

DEFAULT_USER = "local"
MIN_JOB_DESCRIPTION_CHARS = 50


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _run(coro, description: str):
    """Run an orchestrator coroutine behind a spinner, exiting 1 on domain errors."""
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(description, total=None)
        try:
            return asyncio.run(coro)
        except CareerAIError as exc:
            console.print(f"[red]{escape(exc.message)}[/red]")
            raise typer.Exit(1) from exc


def _read_json(path: Path):
    if not path.exists():
        console.print(f"[red]File not found: {path}[/red]")
        raise typer.Exit(1)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        console.print(f"[red]Invalid JSON in {path}: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc


@app.command("parse-resume")
def parse_resume(
    file: Path = typer.Argument(help="Resume file (PDF/DOCX/TXT/MD)"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u", help="User ID for quotas and usage"),
    output: Path = typer.Option(None, "--output", "-o", help="Write the parsed JSON here"),
) -> None:
    """Extract structured profile data from a resume."""
    if not file.exists():
        console.print(f"[red]Resume file not found: {file}[/red]")
        raise typer.Exit(1)
    try:
        text = extract_document_text(file)
    except CareerAIError as exc:
        console.print(f"[red]{escape(exc.message)}[/red]")
        raise typer.Exit(1) from exc
    logger.debug("Extracted resume text: %s", redact_pii(text[:500]))

    parsed = _run(parse_resume_text(text, user), "Parsing resume...")
    payload = parsed.model_dump_json(by_alias=True, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(payload, encoding="utf-8")
        console.print(f"[green]Saved: {output}[/green]")
    else:
        console.print_json(payload)


@app.command()
def summarize(
    notes_file: Path = typer.Argument(help="JSON list of {content, created_at} notes"),
    company: str = typer.Option(..., "--company", "-c"),
    position: str = typer.Option(..., "--position", "-p"),
    status: str = typer.Option("applied", "--status", "-s"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u"),
) -> None:
    """Summarize application notes into insights and action items."""
    try:
        notes = TypeAdapter(list[ApplicationNote]).validate_python(_read_json(notes_file))
    except ValidationError as exc:
        console.print(f"[red]Invalid notes file: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    application = ApplicationContext(company=company, position=position, status=status)
    result = _run(
        summarize_application_notes(notes, application, user), "Summarizing notes..."
    )
    summary = result.summary

    console.print(Panel(summary.summary, title=f"{company} - {position}"))
    for heading, items in (
        ("Insights", summary.insights),
        ("Action items", summary.action_items),
        ("Follow-up needs", summary.follow_up_needs),
    ):
        if items:
            console.print(f"\n[bold]{heading}[/bold]")
            for item in items:
                console.print(f"  - {item}")
    if result.truncated:
        console.print("\n[yellow]Older notes were left out to fit the prompt.[/yellow]")


@app.command()
def followups(
    company: str = typer.Option(..., "--company", "-c"),
    position: str = typer.Option(..., "--position", "-p"),
    status: str = typer.Option("applied", "--status", "-s"),
    applied_date: str = typer.Option(None, "--applied", help="Date applied (YYYY-MM-DD)"),
    notes_summary: str = typer.Option(None, "--notes-summary", help="Summary of notes so far"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u"),
) -> None:
    """Suggest follow-up actions for an application."""
    application = ApplicationContext(
        company=company,
        position=position,
        status=status,
        applied_date=applied_date,
        notes_summary=notes_summary,
    )
    result = _run(generate_follow_up_suggestions(application, user), "Generating follow-ups...")

    console.print(Panel(result.context_summary, title="Follow-up suggestions"))
    table = Table()
    table.add_column("Priority")
    table.add_column("Type")
    table.add_column("Action")
    table.add_column("Timing")
    colors = {"high": "red", "medium": "yellow", "low": "green"}
    for s in result.suggestions:
        color = colors[s.priority]
        table.add_row(f"[{color}]{s.priority}[/{color}]", s.type, s.action, s.timing)
    console.print(table)
    console.print(f"[dim]Next check: {result.next_check_date}[/dim]")


def _load_job_description(job: str, user: str) -> str:
    if job.startswith(("http://", "https://")):
        result = _run(fetch_job_description(job, user), "Fetching job posting...")
        if result.source != "scraped":
            message = result.error or "Could not fetch the job posting."
            console.print(f"[yellow]{escape(message)}[/yellow]")
            raise typer.Exit(1)
        description = result.description
    else:
        path = Path(job)
        if not path.exists():
            console.print(f"[red]Job description not found: {job}[/red]")
            raise typer.Exit(1)
        description = path.read_text(encoding="utf-8")

    if len(description.strip()) < MIN_JOB_DESCRIPTION_CHARS:
        console.print("[red]No job description available. Add a description or job URL.[/red]")
        raise typer.Exit(1)
    return description


@app.command()
def match(
    job: str = typer.Argument(help="Job description text file or job posting URL"),
    profile_file: Path = typer.Argument(help="User profile JSON"),
    location: str = typer.Option(None, "--location", "-l"),
    job_type: str = typer.Option(None, "--job-type", "-t"),
    salary_min: float = typer.Option(None, "--salary-min"),
    no_ai: bool = typer.Option(False, "--no-ai", help="Formula-based score only"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u"),
) -> None:
    """Score how well a profile fits a job (0-100)."""
    try:
        profile = UserProfile.model_validate(_read_json(profile_file))
    except ValidationError as exc:
        console.print(f"[red]Invalid profile file: {escape(str(exc))}[/red]")
        raise typer.Exit(1) from exc

    job_details = JobDetails(
        description=_load_job_description(job, user),
        location=location,
        job_type=job_type,
        salary_range={"min": salary_min} if salary_min is not None else None,
    )
    analysis = _run(
        analyze_job_match(job_details, profile, user, use_ai=not no_ai), "Scoring match..."
    )

    b = analysis.breakdown
    sign = "+" if analysis.adjustment >= 0 else ""
    console.print(
        Panel(
            f"Skills: {b.skills_score}/40 | Experience: {b.experience_score}/30 | "
            f"Education: {b.education_score}/15 | Other: {b.other_score}/15\n"
            f"Base: {analysis.base_score} | AI adjustment: {sign}{analysis.adjustment} | "
            f"[bold]Score: {analysis.adjusted_score}[/bold]",
            title="Match score",
        )
    )
    console.print(analysis.reasoning)
    console.print(f"\n[green]Matching:[/green] {', '.join(analysis.matching_skills) or '-'}")
    console.print(f"[yellow]Missing:[/yellow] {', '.join(analysis.missing_skills) or '-'}")
    for heading, items in (
        ("Strengths", analysis.strengths),
        ("Concerns", analysis.concerns),
        ("Recommendations", analysis.recommendations),
    ):
        if items:
            console.print(f"\n[bold]{heading}[/bold]")
            for item in items:
                console.print(f"  - {item}")


@app.command()
def quota(user: str = typer.Option(DEFAULT_USER, "--user", "-u")) -> None:
    """Show remaining hourly quota per operation."""
    config = get_config()
    limiter = RateLimiter(UsageStore(config.usage.resolved_db_path), config.rate_limits)

    table = Table(title=f"Hourly quota for {user}")
    table.add_column("Operation")
    table.add_column("Remaining", justify="right")
    table.add_column("Limit", justify="right")
    for op in OperationType:
        table.add_row(
            op.value,
            str(limiter.get_remaining_quota(user, op)),
            str(limiter.limit_for(op)),
        )
    console.print(table)


@app.command()
def usage(
    user: str = typer.Option(None, "--user", "-u", help="Filter by user (default: all)"),
    limit: int = typer.Option(10, "--limit", "-n", help="Recent calls to show"),
) -> None:
    """Show this month's AI usage and recent calls."""
    store = UsageStore(get_config().usage.resolved_db_path)
    stats = store.get_monthly_stats(user)

    console.print(
        Panel(
            f"Calls: {stats['total_calls']} | Success: {stats['success_rate']:.0f}%\n"
            f"Tokens: {stats['total_input_tokens']:,} in / {stats['total_output_tokens']:,} out\n"
            f"Cost: ${stats['total_cost_usd']:.4f} (all time ${store.get_total_cost(user):.4f}) | "
            f"Avg latency: {stats['avg_latency_ms'] or 0:.0f}ms",
            title=f"Usage {stats['month']}",
        )
    )

    logs = store.get_logs(user, limit=limit)
    if not logs:
        console.print("[dim]No calls recorded.[/dim]")
        return
    table = Table()
    table.add_column("Time")
    table.add_column("User")
    table.add_column("Operation")
    table.add_column("Model")
    table.add_column("Tokens", justify="right")
    table.add_column("OK")
    for log in logs:
        table.add_row(
            log.timestamp.astimezone().strftime("%Y-%m-%d %H:%M"),
            log.user_id,
            log.operation_type.value,
            log.model_version or "-",
            str(log.tokens_used),
            "[green]yes[/green]" if log.success else "[red]no[/red]",
        )
    console.print(table)


if __name__ == "__main__":
    app()
