"""Config command for configuration management."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from markmail.config import get_settings
from markmail.config.constants import CONFIG_LOCATIONS, DEFAULT_CONFIG_FILE

config_app = typer.Typer(help="Configuration management.")
console = Console()


@config_app.command("show")
def show() -> None:
    """Show current configuration."""
    settings = get_settings()

    console.print("\n[bold blue]Current Configuration[/bold blue]\n")

    table = Table(show_header=True, header_style="bold")
    table.add_column("Setting", style="cyan")
    table.add_column("Value")

    table.add_row("Log Level", settings.log_level)
    table.add_row("Log File", settings.log_file or "-")

    table.add_row("Boundary", settings.mail.boundary)
    table.add_row("Default From", settings.mail.sender or "-")
    table.add_row("Default Subject", settings.mail.subject or "-")
    table.add_row("CRLF Line Endings", str(settings.mail.crlf))

    table.add_row("Image Backend", settings.image.backend)
    table.add_row("Resample Filter", settings.image.resample)
    table.add_row("Image Workers", str(settings.concurrency.image_workers))

    table.add_row("Pandoc Path", settings.conversion.pandoc_path or "(PATH)")
    if settings.conversion.extra_args:
        table.add_row("Pandoc Extra Args", " ".join(settings.conversion.extra_args))

    console.print(table)
    console.print()


DEFAULT_CONFIG_TEMPLATE = """# MarkMail Configuration

log_level: "WARNING"  # DEBUG, INFO, WARNING, ERROR, CRITICAL
# log_file: ".logs/markmail.log"

mail:
  boundary: "markmail-related-boundary-0f9e8d7c"
  # sender: "Jane Doe <jane@example.com>"
  # subject: "Newsletter"
  crlf: false  # CRLF line endings for strict SMTP pipelines

image:
  backend: "pillow"  # pillow, magick
  resample: "lanczos"  # nearest, bilinear, bicubic, lanczos

concurrency:
  image_workers: 8  # Images processed at once

conversion:
  # pandoc_path: "/usr/local/bin/pandoc"
  extra_args: []
"""


@config_app.command("init")
def init(
    output: Annotated[
        Path | None,
        typer.Option("--output", "-o", help="Where to write the configuration file."),
    ] = None,
    force: Annotated[
        bool,
        typer.Option("--force", help="Overwrite an existing file."),
    ] = False,
) -> None:
    """Write a configuration template."""
    target = output or Path(DEFAULT_CONFIG_FILE)

    if target.exists() and not force:
        console.print(f"[yellow]Config file already exists:[/yellow] {target}")
        console.print("Use --force to overwrite.")
        raise typer.Exit(1)

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    console.print(f"[green]Configuration written to[/green] {target}")


@config_app.command("locations")
def locations() -> None:
    """List the places a configuration file is looked up."""
    for location in CONFIG_LOCATIONS:
        marker = "[green]found[/green]" if location.exists() else "[dim]missing[/dim]"
        console.print(f"  {location} {marker}")
