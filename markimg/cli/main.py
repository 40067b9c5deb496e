"""Main CLI application using Typer."""

from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from markimg import __version__
from markimg.cli.commands.config import config_app
from markimg.cli.commands.organize import organize
from markimg.cli.commands.paste import paste

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="markimg",
    help="Keep Markdown image files named and placed after the document structure.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()

# Register commands
app.command(name="organize", help="Rename and relocate the images of a document.")(organize)
app.command(name="paste", help="Store an image in the pending area of a document.")(paste)
app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]MarkImg[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """MarkImg - image organizer for Markdown documents.

    Renames images after the headings they appear under, collects pasted
    images from the pending area and rewrites the references in place.
    """
    pass


if __name__ == "__main__":
    app()
