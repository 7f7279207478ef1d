"""Main CLI application using Typer."""

from typing import Annotated

import typer
from dotenv import load_dotenv
from rich.console import Console

from markmail import __version__
from markmail.cli.commands.config import config_app
from markmail.cli.commands.convert import convert

# Load environment variables from .env file
load_dotenv()

app = typer.Typer(
    name="markmail",
    help="Bundle HTML documents and their images into multipart/related mail.",
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)

console = Console()

app.command(name="convert", help="Bundle a document into a mail message.")(convert)
app.add_typer(config_app, name="config")


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]MarkMail[/bold blue] version [green]{__version__}[/green]")
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
    """MarkMail - embed a document's images as Content-ID parts of one message."""
    pass


if __name__ == "__main__":
    app()
