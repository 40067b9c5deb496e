"""Organize command: rename managed images after the document structure."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from markimg.cli.callbacks import validate_align
from markimg.config import OrganizerConfig, get_settings
from markimg.document import StringDocument, apply_edits
from markimg.organize import OrganizeResult, organize_images
from markimg.organize.classifier import build_layout
from markimg.storage import LocalStorage, MemoryStorage, StorageProtocol
from markimg.utils.logging import get_logger, setup_task_logging

console = Console()
log = get_logger(__name__)


def organize(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="Markdown document to organize.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    location: Annotated[
        str | None,
        typer.Option("--location", "-l", help="Managed image directory, relative to the document."),
    ] = None,
    pattern: Annotated[
        str | None,
        typer.Option(
            "--pattern",
            "-p",
            help="Name pattern. Tokens: ${fileName}, ${h1Index}..${h6Index}, ${imgIndex}.",
        ),
    ] = None,
    align: Annotated[
        str | None,
        typer.Option(
            "--align",
            "-a",
            help="Image alignment: left, center, right.",
            callback=validate_align,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output."),
    ] = False,
    dry_run: Annotated[
        bool,
        typer.Option("--dry-run", help="Show the planned renames without touching any file."),
    ] = False,
) -> None:
    """Rename the images of a document and rewrite its references.

    The pass always runs when invoked from the command line, regardless of
    the auto_organize setting.

    Examples:
        markimg organize notes.md
        markimg organize notes.md --pattern '${fileName}-${imgIndex}' --dry-run
    """
    settings = get_settings()
    setup_task_logging(log_dir=settings.log_dir, prefix="organize", verbose=verbose)

    uploads = settings.uploads
    config = OrganizerConfig(
        auto_organize=True,
        location=location or uploads.location,
        pattern=pattern or uploads.pattern,
        align=align or uploads.align,  # type: ignore[arg-type]
    )
    log.info("Starting organize", input_file=str(input_file), dry_run=dry_run)

    document = StringDocument.from_file(input_file)
    storage: StorageProtocol = _snapshot_storage(document, config) if dry_run else LocalStorage()

    result = asyncio.run(organize_images(document, storage, config))
    _show_result(result)

    if dry_run or not result.edits:
        if not result.edits:
            console.print("[green]Document is already organized.[/green]")
        return

    try:
        text = apply_edits(document, result.edits)
        with open(input_file, "w", encoding="utf-8", newline="") as f:
            f.write(text)
    except Exception as e:
        log.error("Failed to write document", error=str(e), exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(f"[green]Updated {len(result.edits)} reference(s) in[/green] {input_file}")


def _snapshot_storage(document: StringDocument, config: OrganizerConfig) -> MemoryStorage:
    """Mirror the managed directory's file names in memory for a dry run."""
    storage = MemoryStorage()
    images_dir = build_layout(document.path, config.location).images_dir
    if images_dir.is_dir():
        storage.add_directory(images_dir)
        for path in images_dir.rglob("*"):
            if path.is_dir():
                storage.add_directory(path)
            else:
                storage.add_file(path)
    return storage


def _show_result(result: OrganizeResult) -> None:
    if result.operations:
        table = Table(title="Image Renames", show_header=True, header_style="bold")
        table.add_column("Reference", style="cyan")
        table.add_column("Source")
        table.add_column("Target", style="green")
        for op in result.operations:
            table.add_row(op.ref.original_path or op.ref.id, op.materialize_from.name, op.target_name)
        console.print(table)

    if result.skipped:
        table = Table(title="Skipped References", show_header=True, header_style="bold")
        table.add_column("Reference", style="cyan")
        table.add_column("Reason", style="dim")
        for ref in result.skipped:
            table.add_row(ref.original_path or "(empty)", ref.skip_reason or "")
        console.print(table)

    for failure in result.failures:
        console.print(f"[yellow]Warning:[/yellow] {failure}")
