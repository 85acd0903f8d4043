"""
JobMatch Command Line Interface

Provides CLI commands for matching candidates to jobs, indexing job
postings into the configured vector store and searching them.
"""

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="jobmatch",
    help="JobMatch matching & search engine CLI",
    add_completion=False,
)
console = Console()

LEVEL_COLORS = {
    "excellent": "green",
    "good": "blue",
    "fair": "yellow",
    "poor": "red",
}


@app.callback()
def main():
    """Configure logging before any command runs."""
    from jobmatch.utils.logger import setup_logging

    setup_logging()


def _load_json(path: Path) -> Any:
    if not path.exists():
        console.print(f"[red]Error: File does not exist: {path}[/red]")
        raise typer.Exit(1)
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: {path} is not valid JSON: {e}[/red]")
        raise typer.Exit(1)


def _load_jobs(path: Path) -> list:
    from pydantic import ValidationError

    from jobmatch.data.models import JobPosting

    data = _load_json(path)
    if isinstance(data, dict):
        data = [data]
    try:
        return [JobPosting.model_validate(item) for item in data]
    except ValidationError as e:
        console.print(f"[red]Error: Invalid job posting in {path}:[/red]\n{e}")
        raise typer.Exit(1)


@app.command()
def version():
    """Show application version."""
    from jobmatch import __version__, __app_name__

    console.print(f"[bold blue]{__app_name__}[/bold blue] version [green]{__version__}[/green]")


@app.command()
def info():
    """Show configuration and the selected vector store backend."""
    from jobmatch.utils.config import get_settings

    settings = get_settings()
    backend = settings.resolve_vector_backend()

    table = Table(title="JobMatch Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Environment", settings.environment)
    table.add_row("Debug Mode", str(settings.debug))
    table.add_row("Vector Provider", settings.vector_store.provider)
    table.add_row("Vector Backend", backend.display_name)
    table.add_row("Embedding Model", settings.ml.embedding_model)
    table.add_row("ML Device", settings.ml.device)
    table.add_row(
        "Generative Model",
        settings.generative.model if settings.generative.is_configured else "not configured",
    )
    table.add_row("Log Level", settings.logging.level)

    console.print(table)


@app.command()
def match(
    candidate_file: Path = typer.Argument(..., help="Candidate profile JSON file"),
    job_file: Path = typer.Argument(..., help="Job posting JSON file"),
    algorithmic: bool = typer.Option(
        False, "--algorithmic", "-a", help="Skip the generative service"
    ),
):
    """Match a candidate profile against a job posting."""
    from pydantic import ValidationError

    from jobmatch.core.matching import MatchOrchestrator, get_matching_engine
    from jobmatch.data.models import CandidateProfile, JobPosting

    try:
        candidate = CandidateProfile.model_validate(_load_json(candidate_file))
        job = JobPosting.model_validate(_load_json(job_file))
    except ValidationError as e:
        console.print(f"[red]Error: Invalid input:[/red]\n{e}")
        raise typer.Exit(1)

    if algorithmic:
        result = get_matching_engine().score(candidate, job)
    else:
        orchestrator = MatchOrchestrator.from_settings()
        result = asyncio.run(orchestrator.generate_match(candidate, job))

    level = result.score_level.value
    color = LEVEL_COLORS[level]

    console.print(f"\n[bold]Match for {job.display_title}[/bold]")
    console.print(f"  Score: [{color}]{result.score}[/{color}] ({level.upper()})")
    console.print(f"  Confidence: {result.confidence_level:.2f}")
    console.print(f"  Source: [cyan]{result.source.value}[/cyan]")
    if result.skill_matches:
        console.print(f"  Matched skills: {', '.join(result.skill_matches)}")

    if result.breakdown:
        table = Table(title="Score Breakdown")
        table.add_column("Factor", style="cyan")
        table.add_column("Score", justify="right")
        table.add_row("Skills", f"{result.breakdown.skill_match:.0%}")
        table.add_row("Location", f"{result.breakdown.location_match:.0%}")
        table.add_row("Work Type", f"{result.breakdown.work_type_match:.0%}")
        table.add_row("Salary", f"{result.breakdown.salary_match:.0%}")
        console.print(table)

    if result.explanation:
        console.print(f"\n[bold]Explanation:[/bold]\n  {result.explanation}")


@app.command()
def index(
    jobs_file: Path = typer.Argument(..., help="JSON file with a job posting or a list of them"),
):
    """Index job postings into the configured vector store."""
    from jobmatch.ml.embeddings import create_vector_store
    from jobmatch.services import JobSearchService
    from jobmatch.utils.exceptions import JobMatchError

    jobs = _load_jobs(jobs_file)
    if not jobs:
        console.print("[yellow]No job postings found.[/yellow]")
        raise typer.Exit(0)

    console.print(f"[yellow]Indexing {len(jobs)} job posting(s)...[/yellow]")

    async def _index():
        async with create_vector_store() as store:
            ids = await JobSearchService(store).index_jobs(jobs)
            return ids, await store.stats()

    try:
        ids, stats = asyncio.run(_index())
    except JobMatchError as e:
        console.print(f"[red]Error indexing jobs: {e.message}[/red]")
        raise typer.Exit(1)

    console.print(f"  [green]✓[/green] Indexed {len(ids)} job(s) into {stats.backend_name}")
    console.print(f"  Documents in store: [cyan]{stats.document_count}[/cyan]")


@app.command()
def search(
    jobs_file: Path = typer.Argument(..., help="JSON file with the job postings to search"),
    query: str = typer.Argument(..., help="Search query"),
    top_k: int = typer.Option(10, "--top-k", "-k", help="Maximum number of results"),
    min_score: float = typer.Option(0.0, "--min-score", "-m", help="Minimum score threshold"),
    hybrid: bool = typer.Option(False, "--hybrid", help="Combine keyword and vector scores"),
):
    """Search job postings by semantic (or hybrid) similarity."""
    from jobmatch.ml.embeddings import create_vector_store
    from jobmatch.services import JobSearchService
    from jobmatch.utils.exceptions import JobMatchError

    jobs = _load_jobs(jobs_file)

    async def _search():
        async with create_vector_store() as store:
            service = JobSearchService(store)
            if hybrid:
                return await service.hybrid_search(query, jobs, top_k=top_k, min_score=min_score)
            await service.index_jobs(jobs)
            return await service.semantic_search(query, top_k=top_k, min_score=min_score)

    try:
        results = asyncio.run(_search())
    except JobMatchError as e:
        console.print(f"[red]Error searching jobs: {e.message}[/red]")
        raise typer.Exit(1)

    if not results:
        console.print("[yellow]No jobs matched the query.[/yellow]")
        raise typer.Exit(0)

    table = Table(title=f"Top {len(results)} Results for '{query}'")
    table.add_column("Rank", style="dim", width=4)
    table.add_column("Job", style="cyan")
    table.add_column("Company")
    table.add_column("Score", justify="right", style="green")

    for i, result in enumerate(results, 1):
        table.add_row(
            str(i),
            str(result.metadata.get("title", result.id)),
            str(result.metadata.get("company", "")),
            f"{result.score:.3f}",
        )

    console.print(table)


@app.command()
def stats():
    """Show vector store statistics."""
    from jobmatch.ml.embeddings import create_vector_store
    from jobmatch.utils.exceptions import JobMatchError

    async def _stats():
        async with create_vector_store() as store:
            return await store.stats()

    try:
        store_stats = asyncio.run(_stats())
    except JobMatchError as e:
        console.print(f"[red]Error reading store statistics: {e.message}[/red]")
        raise typer.Exit(1)

    table = Table(title="Vector Store")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", justify="right", style="green")
    table.add_row("Backend", store_stats.backend_name)
    table.add_row("External", str(store_stats.external))
    table.add_row("Documents", str(store_stats.document_count))

    console.print(table)


if __name__ == "__main__":
    app()
