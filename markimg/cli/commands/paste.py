"""Paste command: store an image in the pending area of a document."""

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from markimg.cli.callbacks import validate_placeholder
from markimg.config import get_settings
from markimg.document import StringDocument
from markimg.paste import store_pasted_image
from markimg.storage import LocalStorage
from markimg.utils.logging import get_logger, setup_task_logging

console = Console()
log = get_logger(__name__)


def paste(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="Markdown document the image belongs to.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    image: Annotated[
        Path,
        typer.Argument(
            help="Image file to store.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    placeholder: Annotated[
        str | None,
        typer.Option(
            "--placeholder",
            help="Placeholder (uploading-<digits>) whose timestamp names the file.",
            callback=validate_placeholder,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output."),
    ] = False,
) -> None:
    """Store an image next to a document and print the markup referencing it.

    Examples:
        markimg paste notes.md screenshot.png
        markimg paste notes.md screenshot.png --placeholder uploading-1700000000000
    """
    settings = get_settings()
    setup_task_logging(log_dir=settings.log_dir, prefix="paste", verbose=verbose)

    config = settings.uploads.to_organizer_config()
    document = StringDocument(input_file, "")

    try:
        result = asyncio.run(
            store_pasted_image(
                document, LocalStorage(), config, image.read_bytes(), placeholder=placeholder
            )
        )
    except Exception as e:
        log.error("Paste failed", error=str(e), exc_info=True)
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e

    console.print(f"[green]Stored image at:[/green] {result.path}")
    console.print(result.markup, markup=False, highlight=False)
