"""
Command-line interface for graphweaver.

This module provides the main CLI entry point: ingesting text into a Turtle
file store, searching and exporting the store, and validating Turtle files.
"""

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from graphweaver.config import get_settings
from graphweaver.generator.validator import ShaclValidator
from graphweaver.models import SearchRequest
from graphweaver.pipeline import create_pipeline
from graphweaver.search.base import SearchServiceFactory
from graphweaver.store.persist import load_store, save_store
from graphweaver.utils.errors import GenerationExhaustedError, GraphweaverException
from graphweaver.utils.logging import setup_logging

load_dotenv()

# Initialize Typer app and Rich console
app = typer.Typer(
    name="graphweaver",
    help="Turn natural-language text into RDF merged into a knowledge graph",
    add_completion=False,
)
console = Console()


def _read_optional(path: Optional[Path]) -> Optional[str]:
    if path is None:
        return None
    return path.read_text(encoding="utf-8")


def _fail(message: str) -> None:
    console.print(f"[red]✗[/red] {message}")
    raise typer.Exit(1)


@app.command()
def ingest(
    text: str = typer.Argument(..., help="Text to turn into triples"),
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help="Turtle store file"),
    shapes_path: Optional[Path] = typer.Option(None, "--shapes", help="SHACL shapes file"),
    strategy: Optional[str] = typer.Option(
        None, "--strategy", help="Search strategy (occurrence, index)"
    ),
    interactive: bool = typer.Option(
        False, "--interactive", "-i", help="Pick candidate entities by hand"
    ),
    timestamp: Optional[str] = typer.Option(
        None, "--timestamp", help="Timestamp given to the model (defaults to now)"
    ),
):
    """Generate triples from text and merge them into the store."""

    async def _ingest():
        settings = get_settings()
        if strategy:
            settings.search_strategy = strategy
        path = store_path or settings.store_path

        shapes = _read_optional(shapes_path)
        store = load_store(path)
        pipeline = create_pipeline(settings, store=store, interactive=interactive)

        try:
            if interactive:
                result = await pipeline.run(text, shapes, timestamp or datetime.now().isoformat())
            else:
                with Progress(
                    SpinnerColumn(),
                    TextColumn("[progress.description]{task.description}"),
                    console=console,
                ) as progress:
                    progress.add_task("Generating graph...", total=None)
                    result = await pipeline.run(
                        text, shapes, timestamp or datetime.now().isoformat()
                    )
        finally:
            pipeline.close()

        save_store(store, path)
        return result, path

    try:
        result, path = asyncio.run(_ingest())
    except GenerationExhaustedError as e:
        console.print(f"[red]✗[/red] {e.message}")
        console.print(f"[dim]Last error: {e.last_error}[/dim]")
        raise typer.Exit(1)
    except (GraphweaverException, ValueError, OSError) as e:
        _fail(f"Ingestion failed: {e}")

    if result.resolved:
        table = Table(title="Resolved entities")
        table.add_column("Placeholder", style="dim")
        table.add_column("Name", style="cyan")
        table.add_column("Type")
        table.add_column("Subject", style="green")
        for link in result.resolved:
            table.add_row(link.entity.id, link.entity.name, link.entity.type, link.subject)
        console.print(table)

    console.print(
        f"[green]✓[/green] Added {result.triples_added} triples to {path}"
    )


@app.command()
def search(
    query: str = typer.Argument(..., help="Text to look for"),
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help="Turtle store file"),
    strategy: Optional[str] = typer.Option(
        None, "--strategy", help="Search strategy (occurrence, index)"
    ),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", min=1, help="Maximum results"),
):
    """Search the store for candidate subjects."""

    async def _search():
        settings = get_settings()
        store = load_store(store_path or settings.store_path)
        service = SearchServiceFactory.create(
            strategy or settings.search_strategy,
            store,
            limit=limit if limit is not None else settings.search_limit,
        )
        try:
            return await service.search(SearchRequest(text=query))
        finally:
            service.close()

    try:
        response = asyncio.run(_search())
    except (GraphweaverException, ValueError) as e:
        _fail(f"Search failed: {e}")

    if not response.hits:
        console.print("No matching subjects found")
        return

    table = Table(title=f"Results for '{response.text}' ({len(response.hits)} subjects)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Subject", style="cyan")
    table.add_column("Score", justify="right")
    for rank, hit in enumerate(response.hits, 1):
        table.add_row(str(rank), hit.subject, f"{hit.score:.3f}")
    console.print(table)


@app.command()
def export(
    store_path: Optional[Path] = typer.Option(None, "--store", "-s", help="Turtle store file"),
):
    """Print the whole store as Turtle."""
    try:
        store = load_store(store_path or get_settings().store_path)
    except GraphweaverException as e:
        _fail(f"Export failed: {e}")

    typer.echo(store.export_all())


@app.command()
def validate(
    file: Path = typer.Argument(..., help="Turtle file to validate"),
    shapes_path: Optional[Path] = typer.Option(None, "--shapes", help="SHACL shapes file"),
):
    """Check a Turtle file for syntax errors and SHACL conformance."""
    try:
        graph_text = file.read_text(encoding="utf-8")
        shapes = _read_optional(shapes_path)
        error = asyncio.run(ShaclValidator().validate(graph_text, shapes))
    except (GraphweaverException, OSError) as e:
        _fail(f"Validation could not run: {e}")

    if error is not None:
        console.print(f"[red]✗[/red] {file} is not valid")
        console.print(error, markup=False)
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] {file} is valid")


@app.callback()
def main(
    debug: bool = typer.Option(False, "--debug", help="Enable debug logging"),
):
    """graphweaver - Grow a knowledge graph from plain text."""
    log_level = "DEBUG" if debug else None
    setup_logging(log_level=log_level)


if __name__ == "__main__":
    app()
