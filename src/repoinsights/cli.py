"""CLI entry point for repoinsights."""

import asyncio
import json
import logging
from pathlib import Path

# Load .env file if it exists
from dotenv import load_dotenv
load_dotenv()

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import BarColumn, MofNCompleteColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from repoinsights.analyzers.github import GitHubFetcher
from repoinsights.analyzers.pipeline import AnalysisPipeline, AnalysisResult, save_results
from repoinsights.config import AnalysisInput, load_input_file, resolve_token

app = typer.Typer(help="GitHub repository health insights.")

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


@app.command()
def analyze(
    urls: list[str] | None = typer.Argument(None, help="GitHub repository URLs"),
    input_file: Path | None = typer.Option(
        None, "--input", "-i", help="JSON input file (repositoryUrls, analyzeDays, ...)"
    ),
    days: int | None = typer.Option(None, "--days", "-d", min=1, help="Analysis window in days"),
    no_code_quality: bool = typer.Option(False, "--no-code-quality", help="Skip code quality analysis"),
    no_contributors: bool = typer.Option(False, "--no-contributors", help="Skip contributor insights"),
    no_activity: bool = typer.Option(False, "--no-activity", help="Skip activity trends"),
    output: Path = typer.Option(Path("results.json"), "--output", "-o", help="Output JSON file"),
    token: str | None = typer.Option(None, "--token", "-t", help="GitHub token (default: GITHUB_TOKEN)"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Analyze one or more GitHub repositories and calculate health scores."""
    _configure_logging(verbose)

    try:
        settings = load_input_file(input_file) if input_file else AnalysisInput()
    except (OSError, json.JSONDecodeError, ValidationError) as e:
        console.print(f"[red]Invalid input file {input_file}: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    all_urls = list(settings.repository_urls) + list(urls or [])
    if not all_urls:
        console.print("[red]No repository URLs provided. Please add at least one GitHub repository URL.[/red]")
        raise typer.Exit(1)

    # Flags can only disable extractors
    options = settings.to_options().model_copy(
        update={
            "include_code_quality": settings.include_code_quality and not no_code_quality,
            "include_contributor_insights": settings.include_contributor_insights and not no_contributors,
            "include_activity_trends": settings.include_activity_trends and not no_activity,
            "analyze_days": days or settings.analyze_days,
        }
    )
    github_token = resolve_token(token or settings.github_token)

    results = asyncio.run(_analyze(all_urls, options, github_token))

    path = save_results(results, output)
    _print_results(results)
    console.print(f"\n[green]Saved to {path}[/green]")


async def _analyze(urls, options, github_token) -> list[AnalysisResult]:
    """Async implementation of analyze."""
    async with AnalysisPipeline(options=options, github_token=github_token) as pipeline:
        await pipeline.check_rate_limit()

        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            MofNCompleteColumn(),
            console=console,
        ) as progress:
            task = progress.add_task("Analyzing...", total=len(urls))

            def on_progress(current: int, total: int, url: str) -> None:
                progress.update(task, description=f"Analyzing {url}...", completed=current - 1)

            results = await pipeline.analyze_repositories(urls, progress_callback=on_progress)
            progress.update(task, completed=len(urls))

    return results


def _print_results(results: list[AnalysisResult]) -> None:
    table = Table(title="Repository Health")
    table.add_column("Repository", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Pop", justify="right", style="dim")
    table.add_column("Act", justify="right", style="dim")
    table.add_column("Mnt", justify="right", style="dim")
    table.add_column("Com", justify="right", style="dim")
    table.add_column("Qual", justify="right", style="dim")
    table.add_column("Tech Stack", max_width=40)

    errors = []
    for result in results:
        if not result.success:
            errors.append(result)
            continue

        breakdown = result.health_breakdown
        table.add_row(
            f"{result.owner}/{result.repo}",
            _score_text(result.health_score),
            str(breakdown.popularity.score),
            str(breakdown.activity.score),
            str(breakdown.maintenance.score),
            str(breakdown.community.score),
            str(breakdown.quality.score),
            ", ".join(result.tech_stack.languages[:3]) or "-",
        )

    console.print()
    console.print(table)

    succeeded = len(results) - len(errors)
    console.print(f"[bold green]Completed:[/bold green] {succeeded}/{len(results)} repositories analyzed")
    if errors:
        console.print(f"[bold red]Errors:[/bold red] {len(errors)} repositories failed")
        for failed in errors:
            console.print(f"  [red]x[/red] {failed.url}: {failed.error}")


def _score_text(score: int) -> str:
    color = "green" if score >= 70 else "yellow" if score >= 40 else "red"
    return f"[{color}]{score}[/{color}]"


@app.command()
def rate_limit(
    token: str | None = typer.Option(None, "--token", "-t", help="GitHub token (default: GITHUB_TOKEN)"),
) -> None:
    """Show remaining GitHub API quota."""
    rate = asyncio.run(GitHubFetcher(token=resolve_token(token)).fetch_rate_limit())

    console.print(f"GitHub API: [bold]{rate['remaining']}/{rate['limit']}[/bold] requests remaining")
    if rate["reset"]:
        console.print(f"[dim]Resets at {rate['reset'].isoformat()}[/dim]")


@app.command()
def version() -> None:
    """Show version information."""
    from repoinsights import __version__

    console.print(f"repoinsights v{__version__}")


if __name__ == "__main__":
    app()
