"""Convert command: bundle one document into a mail message."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

from markmail.config import MarkmailSettings, get_settings
from markmail.config.constants import IMAGE_BACKENDS
from markmail.exceptions import MarkmailError
from markmail.mail.headers import HeaderOptions
from markmail.utils.logging import get_logger, setup_logging

# Diagnostics go to stderr; stdout may carry the message itself
console = Console(stderr=True)
log = get_logger(__name__)


def convert(
    input_file: Annotated[
        Path,
        typer.Argument(
            help="HTML file, or any format pandoc can convert to HTML.",
            exists=True,
            file_okay=True,
            dir_okay=False,
            readable=True,
            resolve_path=True,
        ),
    ],
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Write the message to this file instead of standard output.",
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ] = None,
    sender: Annotated[
        str | None,
        typer.Option("--from", "-f", help="From: header."),
    ] = None,
    to: Annotated[
        list[str] | None,
        typer.Option("--to", "-t", help="To: recipient (repeatable)."),
    ] = None,
    cc: Annotated[
        list[str] | None,
        typer.Option("--cc", help="Cc: recipient (repeatable)."),
    ] = None,
    subject: Annotated[
        str | None,
        typer.Option("--subject", "-s", help="Subject: header."),
    ] = None,
    header: Annotated[
        list[str] | None,
        typer.Option("--header", "-H", help="Extra header as 'Name: value' (repeatable)."),
    ] = None,
    boundary: Annotated[
        str | None,
        typer.Option("--boundary", "-b", help="MIME boundary string."),
    ] = None,
    backend: Annotated[
        str | None,
        typer.Option(
            "--backend",
            help=f"Image tool backend. Options: {', '.join(IMAGE_BACKENDS)}",
        ),
    ] = None,
    workers: Annotated[
        int | None,
        typer.Option("--workers", "-w", min=1, help="Maximum images processed at once."),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose output."),
    ] = False,
) -> None:
    """Bundle a document and its images into a multipart/related message.

    Examples:
        markmail convert page.html -o page.eml
        markmail convert notes.md --to team@example.com -s "Weekly notes"
        markmail convert page.html -H "Reply-To: noreply@example.com" > page.eml
    """
    settings = get_settings()

    setup_logging(
        level="DEBUG" if verbose else settings.log_level,
        log_file=settings.log_file,
    )

    if backend and backend not in IMAGE_BACKENDS:
        console.print(
            f"[red]Error:[/red] Invalid backend '{backend}'. Options: {', '.join(IMAGE_BACKENDS)}"
        )
        raise typer.Exit(1)

    settings = _apply_overrides(settings, backend=backend, workers=workers)

    header_options = HeaderOptions(
        sender=sender or settings.mail.sender,
        to=to or [],
        cc=cc or [],
        subject=subject or settings.mail.subject,
        extra=header or [],
    )

    log.info(
        "Starting conversion",
        input_file=str(input_file),
        output=str(output) if output else "<stdout>",
        backend=settings.image.backend,
    )

    from markmail.core.pipeline import MailPipeline

    try:
        pipeline = MailPipeline(settings, boundary=boundary)
        result = pipeline.run(input_file, output_path=output, header_options=header_options)
    except MarkmailError as e:
        log.error("Conversion failed", error=str(e))
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1) from e
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted. Exiting...[/yellow]")
        raise typer.Exit(130) from None

    if output is not None:
        console.print("[bold green]Message written![/bold green]")
        console.print(f"  Output: {result.output_path}")
        console.print(f"  Images: {result.images_count}")


def _apply_overrides(
    settings: MarkmailSettings,
    backend: str | None,
    workers: int | None,
) -> MarkmailSettings:
    """Return a copy of ``settings`` with command-line overrides applied."""
    image = settings.image
    concurrency = settings.concurrency
    if backend:
        image = image.model_copy(update={"backend": backend})
    if workers:
        concurrency = concurrency.model_copy(update={"image_workers": workers})
    return settings.model_copy(update={"image": image, "concurrency": concurrency})
