"""Pandoc-based conversion of source documents to HTML."""

import shutil
import subprocess
from pathlib import Path

import anyio

from markmail.config.constants import PANDOC_EXTENSIONS, PANDOC_MEDIA_READERS
from markmail.converters.base import BaseConverter
from markmail.exceptions import ConversionError
from markmail.utils.logging import get_logger

log = get_logger(__name__)


class PandocConverter(BaseConverter):
    """Convert Markdown, reStructuredText, docx and friends to standalone HTML5.

    Image references keep their original (relative) locations; the caller
    resolves them against the source document's directory.
    """

    name = "pandoc"
    supported_extensions = set(PANDOC_EXTENSIONS)

    def __init__(
        self,
        pandoc_path: str | None = None,
        extra_args: list[str] | None = None,
    ) -> None:
        """Initialize the Pandoc converter.

        Args:
            pandoc_path: Explicit pandoc binary (default: looked up in PATH)
            extra_args: Additional Pandoc arguments
        """
        self.extra_args = extra_args or []
        self._configured_path = pandoc_path
        self._pandoc_path: str | None = None

    async def convert(self, file_path: Path, target_dir: Path) -> Path:
        """Convert ``file_path`` to ``<target_dir>/<stem>.html``.

        Raises:
            ConversionError: Unsupported input, pandoc missing, or pandoc failed
        """
        if not await self.validate(file_path):
            raise ConversionError(file_path, "Invalid file or unsupported format")

        if not self._check_pandoc():
            raise ConversionError(file_path, "Pandoc is not installed or not found in PATH")

        log.info("Converting with Pandoc", file=str(file_path))

        try:
            return await anyio.to_thread.run_sync(  # type: ignore[attr-defined]
                self._convert_sync,
                file_path,
                target_dir,
            )
        except subprocess.CalledProcessError as e:
            log.error("Pandoc conversion failed", file=str(file_path), error=e.stderr)
            raise ConversionError(file_path, f"Pandoc error: {e.stderr}", cause=e) from e
        except OSError as e:
            log.error("Pandoc conversion failed", file=str(file_path), error=str(e))
            raise ConversionError(file_path, str(e), cause=e) from e

    def _check_pandoc(self) -> bool:
        """Check if Pandoc is available."""
        if self._pandoc_path is not None:
            return bool(self._pandoc_path)

        self._pandoc_path = shutil.which(self._configured_path or "pandoc") or ""
        if self._pandoc_path:
            log.debug("Found Pandoc", path=self._pandoc_path)
            return True

        log.warning("Pandoc not found in PATH")
        return False

    def _convert_sync(self, file_path: Path, target_dir: Path) -> Path:
        output_file = target_dir / f"{file_path.stem}.html"
        cmd = self._build_command(file_path, output_file)

        log.debug("Running Pandoc", command=" ".join(cmd))

        subprocess.run(
            cmd,
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=True,
        )

        if not output_file.exists():
            raise OSError(f"Pandoc produced no output for {file_path.name}")
        return output_file

    def _build_command(self, input_file: Path, output_file: Path) -> list[str]:
        """Build Pandoc command.

        Embedded media of container formats is extracted next to the output,
        so image links in the HTML are absolute paths into the staging area.
        """
        reader = PANDOC_EXTENSIONS[input_file.suffix.lower()]
        cmd = [
            self._pandoc_path or "pandoc",
            str(input_file),
            "-f",
            reader,
            "-t",
            "html5",
            "-s",
            "--metadata",
            f"pagetitle={input_file.stem}",
            "-o",
            str(output_file),
        ]
        if reader in PANDOC_MEDIA_READERS:
            cmd.extend(["--extract-media", str(output_file.parent.resolve())])
        cmd.extend(self.extra_args)
        return cmd
