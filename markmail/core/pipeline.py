"""End-to-end pipeline: source document to multipart/related message."""

import asyncio
import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO

from markmail.config.constants import HTML_EXTENSIONS
from markmail.config.settings import MarkmailSettings
from markmail.converters.base import BaseConverter
from markmail.converters.pandoc import PandocConverter
from markmail.core.coordinator import ImageCoordinator
from markmail.document.loader import load_document
from markmail.exceptions import ParseError
from markmail.image.backends import create_toolset
from markmail.image.protocols import ImageToolset
from markmail.image.resolver import ImageResolver
from markmail.image.transformer import ImageTransformer
from markmail.mail.assembler import MailAssembler
from markmail.mail.headers import HeaderOptions, build_headers, validate_boundary
from markmail.utils.fs import promote_file, staging_directory
from markmail.utils.logging import get_logger

log = get_logger(__name__)


@dataclass
class PipelineResult:
    """Result of a pipeline run."""

    output_path: Path | None  # None when written to a stream
    images_count: int
    size: int  # Bytes written


class MailPipeline:
    """Bundle a document and its images into one message.

    Flow:
    1. Convert non-HTML sources to HTML
    2. Parse and number the images
    3. Resolve and transform all images concurrently
    4. Assemble the message into the staging directory
    5. Promote it to the destination, or copy it to a stream

    The staging directory is removed however the run ends, and the
    destination is only written once the whole message exists.
    """

    def __init__(
        self,
        settings: MarkmailSettings,
        tools: ImageToolset | None = None,
        converter: BaseConverter | None = None,
        boundary: str | None = None,
    ) -> None:
        """Initialize the pipeline.

        Args:
            settings: Application settings
            tools: Image collaborators (default: built from settings.image)
            converter: Source converter (default: pandoc)
            boundary: Override for settings.mail.boundary

        Raises:
            ConfigurationError: If the boundary override is not a valid MIME boundary
        """
        self.settings = settings
        self.tools = tools or create_toolset(settings.image)
        self.converter = converter or PandocConverter(
            pandoc_path=settings.conversion.pandoc_path,
            extra_args=settings.conversion.extra_args,
        )
        self.boundary = (
            settings.mail.boundary if boundary is None else validate_boundary(boundary)
        )

    def run(
        self,
        input_file: Path,
        output_path: Path | None = None,
        header_options: HeaderOptions | None = None,
        stream: BinaryIO | None = None,
    ) -> PipelineResult:
        """Synchronous wrapper for run_async."""
        return asyncio.run(self.run_async(input_file, output_path, header_options, stream))

    async def run_async(
        self,
        input_file: Path,
        output_path: Path | None = None,
        header_options: HeaderOptions | None = None,
        stream: BinaryIO | None = None,
    ) -> PipelineResult:
        """Run the whole pipeline.

        Args:
            input_file: Source document
            output_path: Destination file; when None the message goes to ``stream``
            header_options: Message headers
            stream: Binary stream used when no output path is given (default: stdout)

        Raises:
            MarkmailError: Any failure; nothing is written to the destination
        """
        input_file = input_file.resolve()
        header_options = header_options or HeaderOptions(
            sender=self.settings.mail.sender,
            subject=self.settings.mail.subject,
        )
        headers = build_headers(header_options, self.boundary)

        log.info("Starting bundle", input_file=str(input_file), boundary=self.boundary)

        with staging_directory() as staging_dir:
            html_file = await self._ensure_html(input_file, staging_dir)
            try:
                markup = html_file.read_bytes()
            except OSError as e:
                raise ParseError(f"cannot read {html_file}: {e}", cause=e) from e

            # Images are relative to the source document, not the converted copy
            document = load_document(markup, input_file.parent)

            coordinator = ImageCoordinator(
                resolver=ImageResolver(document.base_dir, self.tools.media_types),
                transformer=ImageTransformer(self.tools),
                max_workers=self.settings.concurrency.image_workers,
            )
            parts = await coordinator.process(document.references, staging_dir)

            assembler = MailAssembler(self.boundary, crlf=self.settings.mail.crlf)
            staged_message = staging_dir / "message.eml"
            with open(staged_message, "wb") as out:
                assembler.assemble(headers, document.serialize(), parts, out)
            size = staged_message.stat().st_size

            if output_path is not None:
                promote_file(staged_message, output_path)
            else:
                target = stream if stream is not None else sys.stdout.buffer
                with open(staged_message, "rb") as src:
                    shutil.copyfileobj(src, target)
                target.flush()

        log.info(
            "Bundle complete",
            output=str(output_path) if output_path else "<stream>",
            images=len(parts),
            size=size,
        )
        return PipelineResult(output_path=output_path, images_count=len(parts), size=size)

    async def _ensure_html(self, input_file: Path, staging_dir: Path) -> Path:
        """Return an HTML version of ``input_file``, converting if needed."""
        if input_file.suffix.lower() in HTML_EXTENSIONS:
            return input_file

        converted_dir = staging_dir / "converted"
        converted_dir.mkdir()
        return await self.converter.convert(input_file, converted_dir)
