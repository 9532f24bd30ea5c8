"""
CLI Main - Typer-based command-line interface.

Usage:
    docsift process path/to/report.pdf --output out/
    docsift process scan.png --tidy table-0 --output out/
    docsift parse table.csv
"""

from __future__ import annotations

import asyncio
import logging
import mimetypes
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from docsift.adapters.extraction_api import (
    ExtractionAPIClient,
    InMemoryExtractionService,
    TransformFailed,
)
from docsift.config import DocsiftError, Settings, get_settings
from docsift.domains.editing import EditSession, ExportedFile, Workspace
from docsift.domains.extraction import DocumentStatus, ExtractionOrchestrator
from docsift.domains.tabular import ParsedTable, parse_table

app = typer.Typer(
    name="docsift",
    help="docsift - Document extraction client",
    add_completion=False,
)
console = Console()


@app.callback()
def configure(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Configure logging for every command."""
    level = "DEBUG" if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def build_service(settings: Settings) -> ExtractionAPIClient | InMemoryExtractionService:
    """Remote client or in-memory double, per ``service_backend``."""
    if settings.service_backend == "memory":
        return InMemoryExtractionService()
    return ExtractionAPIClient(settings)


@app.command()
def process(
    path: Path = typer.Argument(..., help="PDF or image to extract"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Directory for results"),
    tidy: list[str] = typer.Option([], "--tidy", "-t", help="Table id to tidy before export"),
) -> None:
    """Upload a document and download its text and tables."""
    if not path.exists():
        console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(1)

    asyncio.run(_process_async(path, output, tidy))


async def _process_async(path: Path, output: Path | None, tidy: list[str]) -> None:
    """Async processing implementation."""
    settings = get_settings()
    service = build_service(settings)
    workspace = Workspace(ExtractionOrchestrator(service, settings), service)
    content_type = mimetypes.guess_type(path.name)[0]

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task(f"Processing {path.name}...", total=None)
            data = await asyncio.to_thread(path.read_bytes)
            document = await workspace.upload(data, path.name, content_type)

        session = workspace.session
        if document.status is DocumentStatus.ERROR or session is None:
            console.print(f"[red]Error:[/red] {document.error or 'Failed to process file'}")
            raise typer.Exit(1)

        console.print("\n[green]Extraction Complete[/green]\n")
        _print_summary(session)

        failed = False
        for table_id in tidy:
            try:
                outcome = await session.transform_table(table_id)
            except DocsiftError as e:
                console.print(f"[red]Error:[/red] {e.message}")
                failed = True
                continue
            if isinstance(outcome, TransformFailed):
                console.print(f"[yellow]{table_id}:[/yellow] {outcome.error}")
                failed = True
            else:
                console.print(f"[green]{table_id}:[/green] transformed to tidy form")
                _print_table(session.effective_table(table_id), title=table_id)

        if output:
            output.mkdir(parents=True, exist_ok=True)
            for exported in _exports(session):
                # names come from the service; keep writes inside --output
                target = output / Path(exported.filename).name
                target.write_bytes(exported.encode())
                console.print(f"[green]Saved:[/green] {target}")

        if failed:
            raise typer.Exit(1)
    finally:
        if isinstance(service, ExtractionAPIClient):
            await service.close()


def _exports(session: EditSession) -> list[ExportedFile]:
    files = [session.export_text()]
    files.extend(session.export_table(table_id) for table_id in session.table_ids())
    return files


def _print_summary(session: EditSession) -> None:
    document = session.document
    table = Table(title="Extraction Summary")
    table.add_column("Artifact", style="cyan")
    table.add_column("File", style="green")
    table.add_column("Size")

    if document.text is not None:
        table.add_row("text", document.text.filename, f"{len(document.text.content)} chars")
    for artifact in document.tables:
        size = f"{len(artifact.rows)} rows x {len(artifact.headers)} columns"
        table.add_row(artifact.id, artifact.filename, size)

    console.print(table)


def _print_table(parsed: ParsedTable, title: str, limit: int | None = None) -> None:
    table = Table(title=title)
    for header in parsed.headers:
        table.add_column(header)
    width = len(parsed.headers)
    for row in parsed.rows[:limit]:
        # rich needs one cell per column
        cells = (list(row) + [""] * width)[:width] if width else []
        table.add_row(*cells)
    console.print(table)


@app.command()
def parse(
    path: Path = typer.Argument(..., help="Comma-separated table file"),
    limit: int = typer.Option(20, "--limit", "-n", help="Rows to show"),
) -> None:
    """Parse a local table file the way downloaded tables are parsed."""
    if not path.exists():
        console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(1)

    parsed = parse_table(path.read_text(encoding="utf-8"))
    if parsed.is_empty:
        console.print("[yellow]No table found[/yellow]")
        return

    _print_table(parsed, title=path.name, limit=limit)
    console.print(
        f"[dim]{parsed.row_count} rows x {len(parsed.headers)} columns[/dim]"
    )


@app.command()
def version() -> None:
    """Show version information."""
    from docsift import __version__

    console.print(f"docsift v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
