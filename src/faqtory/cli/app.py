# src/faqtory/cli/app.py
"""Command-line interface for faqtory.

This module provides a thin Typer wrapper around the commands layer.
Each command:
1. Parses args (via Typer)
2. Creates progress callbacks (for Rich display)
3. Calls commands module functions
4. Renders results with Rich
"""

from __future__ import annotations

import logging
from typing import NoReturn

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from faqtory import __version__
from faqtory.commands import (
    ConfirmRequest,
    ProgressUpdate,
    backfill,
    faqs,
    generate,
    process,
    search,
    status,
    worker,
)
from faqtory.config import load_config, load_env_file, resolve_data_dir

app = typer.Typer(
    name="faqtory",
    help="faqtory - Turn customer questions into a searchable FAQ.",
    no_args_is_help=True,
)
faqs_app = typer.Typer(help="Inspect and manage FAQ groups")
app.add_typer(faqs_app, name="faqs")
console = Console()

DataDirOption = typer.Option(
    None, "--data-dir", "-d", help="Data directory (default: from settings)"
)
ConfigOption = typer.Option(None, "--config", "-c", help="Path to config file")
PlainOption = typer.Option(False, "--plain", help="Plain output (no colors/formatting)")


def setup_logging(verbose: bool) -> None:
    """Route library logging through Rich."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=verbose, show_path=verbose)],
        force=True,
    )
    if not verbose:
        # LiteLLM is chatty at INFO
        logging.getLogger("LiteLLM").setLevel(logging.WARNING)


def version_callback(value: bool) -> None:
    if value:
        console.print(f"faqtory {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: bool = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
) -> None:
    """faqtory - Turn customer questions into a searchable FAQ."""
    setup_logging(verbose)
    load_env_file()


def _fail(error: str | None, plain: bool) -> NoReturn:
    if plain:
        console.print(f"Error: {error}")
    else:
        console.print(f"[red]Error: {error}[/red]")
    raise typer.Exit(1)


@app.command(name="version")
def version_cmd() -> None:
    """Show version."""
    console.print(f"faqtory {__version__}")


@app.command(name="generate")
def generate_cmd(
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    min_questions: int = typer.Option(
        None, "--min-questions", "-m", help="Smallest cluster that becomes an FAQ"
    ),
    max_faqs: int = typer.Option(None, "--max-faqs", help="Most FAQs to assemble this run"),
    threshold: float = typer.Option(
        None, "--threshold", "-t", help="Similarity threshold for clustering (0-1)"
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Regenerate existing FAQ content"),
    plain: bool = PlainOption,
) -> None:
    """Cluster stored questions and assemble FAQ groups."""
    if plain or not console.is_terminal:
        result = generate.generate(
            data_dir, config_file, min_questions, max_faqs, threshold, force
        )
    else:
        with console.status("Generating FAQs..."):
            result = generate.generate(
                data_dir, config_file, min_questions, max_faqs, threshold, force
            )

    if not result.success:
        _fail(result.error, plain)

    if plain:
        console.print(
            f"Processed {result.processed} questions into {result.clusters} clusters "
            f"in {result.duration:.1f}s"
        )
        console.print(
            f"Generated {result.generated}, updated {result.updated}, "
            f"skipped {result.skipped}, errors {result.errors}"
        )
        return

    table = Table(title="FAQ Generation")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Questions considered", str(result.processed))
    table.add_row("Clusters", str(result.clusters))
    table.add_row("Generated", str(result.generated))
    table.add_row("Updated", str(result.updated))
    table.add_row("Skipped", str(result.skipped))
    table.add_row("Errors", f"[red]{result.errors}[/red]" if result.errors else "0")
    table.add_row("Duration", f"{result.duration:.1f}s")
    console.print(table)


@app.command(name="process")
def process_cmd(
    items: str = typer.Option(
        None, "--items", "-i", help="JSON or JSON Lines file of work items to submit first"
    ),
    limit: int = typer.Option(None, "--limit", "-n", help="Most pending items to process"),
    profile: str = typer.Option(
        None, "--profile", "-p", help="Processing profile: constrained or standard"
    ),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """Extract questions from pending work items."""
    if plain or not console.is_terminal:
        result = process.process(data_dir, config_file, items, limit, profile)
    else:
        with Progress(
            SpinnerColumn(),
            TextColumn("[bold]{task.fields[stage]:>12}", justify="right"),
            BarColumn(bar_width=20),
            TextColumn("{task.completed}/{task.total}", style="cyan"),
            console=console,
        ) as progress:
            task = progress.add_task("", total=None, stage="Starting")

            def on_progress(update: ProgressUpdate) -> None:
                progress.update(
                    task,
                    stage=update.stage.value,
                    completed=update.current,
                    total=update.total or None,
                )

            result = process.process(data_dir, config_file, items, limit, profile, on_progress)

    if result.error and result.status == "completed":
        _fail(result.error, plain)

    summary = (
        f"Processed {result.processed}/{result.total_items} items, "
        f"found {result.questions_found} questions, {result.errors} errors"
    )
    if plain:
        if result.submitted:
            console.print(f"Submitted {result.submitted} new items")
        console.print(summary)
        for item_id, error in result.failures:
            console.print(f"  {item_id}: {error}")
    else:
        if result.submitted:
            console.print(f"[dim]Submitted {result.submitted} new items[/dim]")
        console.print(f"[green]{summary}[/green]")
        for item_id, error in result.failures:
            console.print(f"  [red]{item_id}[/red]: {error}")

    if result.status != "completed":
        _fail(f"Run {result.status} ({result.stop_reason}): {result.error}", plain)


@app.command(name="backfill")
def backfill_cmd(
    batch_size: int = typer.Option(50, "--batch-size", "-b", help="Questions per batch"),
    max_batches: int = typer.Option(None, "--max-batches", help="Stop after this many batches"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """Embed stored questions that have no embedding."""
    result = backfill.backfill(data_dir, config_file, batch_size, max_batches)
    if not result.success:
        _fail(result.error, plain)
    if plain:
        console.print(f"Backfilled {result.updated} embeddings")
    else:
        console.print(f"[green]Backfilled {result.updated} embeddings[/green]")


@app.command(name="worker")
def worker_cmd(
    lanes: list[str] = typer.Option(
        None, "--lane", "-l", help="Lane to serve (repeatable, default: all)"
    ),
    enqueue: str = typer.Option(None, "--enqueue", "-e", help="Enqueue a job on this lane first"),
    payload: str = typer.Option(None, "--payload", help="JSON payload for the enqueued job"),
    inline: bool = typer.Option(
        False, "--inline", help="Run the enqueued job and its chain here, then exit"
    ),
    loglevel: str = typer.Option("INFO", "--loglevel", help="Celery worker log level"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """Run a Celery worker on the job lanes, or run an enqueued job inline."""
    result = worker.worker(
        lanes=lanes or None,
        data_dir=data_dir,
        config_path=config_file,
        enqueue=enqueue,
        payload=payload,
        inline=inline,
        loglevel=loglevel,
    )
    if not result.success:
        _fail(result.error, plain)

    if result.enqueued:
        console.print(f"Enqueued job {result.enqueued}")
    for lane, count in result.jobs_run.items():
        console.print(f"{lane}: {count} jobs" if plain else f"[cyan]{lane}[/cyan]: {count} jobs")


@app.command(name="status")
def status_cmd(
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """Show database statistics."""
    config = load_config(config_file)
    effective_data_dir = resolve_data_dir(data_dir, config)

    result = status.status(data_dir=data_dir, config_path=config_file)
    if not result.success:
        _fail(result.error, plain)

    if result.total_questions == 0 and result.total_groups == 0 and not result.items:
        if plain:
            console.print("No database found.")
        else:
            console.print("[dim]No data found. Run 'faqtory process' first.[/dim]")
        raise typer.Exit(0)

    pending = result.items.get("pending", 0)
    if plain:
        console.print("Database Status:")
        console.print(f"  Data directory: {effective_data_dir}")
        console.print(f"  Questions: {result.total_questions}")
        console.print(f"  Pending items: {pending}")
        console.print(f"  FAQ groups: {result.total_groups} ({result.published_groups} published)")
        console.print(f"  Grouped questions: {result.grouped_questions}")
        console.print(f"  Average group size: {result.avg_group_size}")
        console.print(f"  Near-duplicate pairs: {result.duplicate_pairs}")
        return

    table = Table(title="Database Status")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green", justify="right")
    table.add_row("Data directory", effective_data_dir)
    table.add_row("Questions", str(result.total_questions))
    for item_status, count in sorted(result.items.items()):
        table.add_row(f"Items ({item_status})", str(count))
    table.add_row("FAQ groups", str(result.total_groups))
    table.add_row("Published", str(result.published_groups))
    table.add_row("Grouped questions", str(result.grouped_questions))
    table.add_row("Average group size", str(result.avg_group_size))
    table.add_row("Near-duplicate pairs", str(result.duplicate_pairs))
    console.print(table)

    if any(result.similarity.values()):
        spread = Table(title="Question Similarity")
        spread.add_column("Range", style="cyan")
        spread.add_column("Pairs", justify="right", style="green")
        for bucket, count in result.similarity.items():
            spread.add_row(bucket, str(count))
        console.print(spread)

    if result.categories:
        categories = Table(title="FAQ Categories")
        categories.add_column("Category", style="cyan")
        categories.add_column("Groups", justify="right", style="green")
        for name, count in result.categories.items():
            categories.add_row(name, str(count))
        console.print(categories)

    active_lanes = {lane: c for lane, c in result.jobs.items() if any(c.values())}
    if active_lanes:
        jobs = Table(title="Jobs")
        jobs.add_column("Lane", style="cyan")
        for column in ("waiting", "active", "completed", "failed"):
            jobs.add_column(column.title(), justify="right")
        for lane, counts in active_lanes.items():
            jobs.add_row(
                lane,
                *(str(counts.get(c, 0)) for c in ("waiting", "active", "completed", "failed")),
            )
        console.print(jobs)


@app.command(name="search")
def search_cmd(
    query: str = typer.Argument(..., help="Text to search for"),
    limit: int = typer.Option(None, "--limit", "-k", help="Number of results"),
    min_similarity: float = typer.Option(
        None, "--min-similarity", help="Score floor (0-1)"
    ),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """Search published FAQs."""
    result = search.search(query, data_dir, config_file, limit, min_similarity)
    if not result.success:
        _fail(result.error, plain)

    if not result.results:
        console.print("No results found." if plain else "[yellow]No results found.[/yellow]")
        raise typer.Exit(0)

    for i, hit in enumerate(result.results, 1):
        if plain:
            console.print(f"[{i}] {hit.title} (score: {hit.score:.3f})")
            console.print(f"    {hit.answer}")
        else:
            console.print(
                Panel(
                    hit.answer,
                    title=f"[bold]{hit.title}[/bold]",
                    subtitle=f"[dim]score {hit.score:.3f} | {hit.category or 'Uncategorized'}[/dim]",
                )
            )


@faqs_app.command(name="list")
def faqs_list_cmd(
    page: int = typer.Option(1, "--page", help="Page number"),
    limit: int = typer.Option(20, "--limit", "-n", help="FAQs per page"),
    category: str = typer.Option(None, "--category", help="Only this category"),
    published: bool = typer.Option(
        None, "--published/--unpublished", help="Filter by publication state"
    ),
    query: str = typer.Option(None, "--search", "-s", help="Substring to match"),
    sort_by: str = typer.Option("frequency_score", "--sort", help="Column to sort by"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """List FAQ groups."""
    result = faqs.list_faqs(
        data_dir, config_file, page, limit, category, published, query, sort_by
    )
    if not result.success:
        _fail(result.error, plain)

    if not result.faqs:
        console.print("No FAQs found." if plain else "[dim]No FAQs found.[/dim]")
        raise typer.Exit(0)

    if plain:
        console.print(f"FAQs ({result.total} total, page {result.page}):")
        for faq in result.faqs:
            state = "published" if faq.is_published else "draft"
            console.print(f"  {faq.id}  {faq.title} ({faq.question_count} questions, {state})")
        return

    table = Table(title=f"FAQs ({result.total} total, page {result.page})")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Title", style="cyan")
    table.add_column("Category")
    table.add_column("Questions", justify="right", style="green")
    table.add_column("Score", justify="right")
    table.add_column("Published", justify="center")
    for faq in result.faqs:
        table.add_row(
            faq.id,
            faq.title,
            faq.category or "",
            str(faq.question_count),
            f"{faq.frequency_score:.2f}",
            "yes" if faq.is_published else "no",
        )
    console.print(table)


@faqs_app.command(name="show")
def faqs_show_cmd(
    faq_id: str = typer.Argument(..., help="FAQ group ID"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """Show an FAQ group and its questions."""
    result = faqs.show_faq(faq_id, data_dir, config_file)
    if not result.success or result.faq is None:
        _fail(result.error, plain)

    faq = result.faq
    if plain:
        console.print(f"{faq['title']}")
        console.print(f"Q: {faq['representative_question']}")
        console.print(f"A: {faq['consolidated_answer']}")
        console.print(f"Category: {faq['category']}  Tags: {', '.join(faq['tags'])}")
    else:
        console.print(
            Panel(
                f"[bold]Q:[/bold] {faq['representative_question']}\n\n"
                f"[bold]A:[/bold] {faq['consolidated_answer']}",
                title=f"[bold]{faq['title']}[/bold]",
                subtitle=f"[dim]{faq['category'] or 'Uncategorized'} | "
                f"{', '.join(faq['tags']) or 'no tags'}[/dim]",
            )
        )

    console.print(f"Questions ({len(result.members)}):")
    for member in result.members:
        marker = "*" if member.is_representative else "-"
        console.print(f"  {marker} {member.text} ({member.similarity_score:.2f})")


@faqs_app.command(name="publish")
def faqs_publish_cmd(
    faq_id: str = typer.Argument(..., help="FAQ group ID"),
    unpublish: bool = typer.Option(False, "--unpublish", help="Hide the FAQ from search"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """Publish (or unpublish) an FAQ group."""
    result = faqs.set_published(faq_id, not unpublish, data_dir, config_file)
    if not result.success:
        _fail(result.error, plain)
    state = "Published" if result.is_published else "Unpublished"
    console.print(f"{state} {faq_id}" if plain else f"[green]{state} {faq_id}[/green]")


@faqs_app.command(name="delete")
def faqs_delete_cmd(
    faq_id: str = typer.Argument(..., help="FAQ group ID"),
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation prompt"),
    data_dir: str = DataDirOption,
    config_file: str = ConfigOption,
    plain: bool = PlainOption,
) -> None:
    """Delete an FAQ group; its questions become available for regrouping."""

    def cli_confirm(request: ConfirmRequest) -> bool:
        console.print(request.message)
        if request.details:
            console.print(request.details if plain else f"[yellow]{request.details}[/yellow]")
        return typer.confirm("Continue?")

    result = faqs.delete_faq(
        faq_id, data_dir, config_file, on_confirm=None if force else cli_confirm
    )
    if not result.success:
        # Cancellation exits 0
        if result.error == "Cancelled.":
            console.print("Cancelled.")
            raise typer.Exit(0)
        _fail(result.error, plain)

    message = f"Deleted {faq_id}, released {result.questions_released} questions"
    console.print(message if plain else f"[green]{message}[/green]")
