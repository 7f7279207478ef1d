"""ImageMagick implementations of the image tools.

Each call spawns one process and waits for it. Failures surface as
``subprocess.CalledProcessError`` (non-zero exit) or ``FileNotFoundError``
(tool missing); the transformer turns them into TransformError.
"""

import shutil
import subprocess
from pathlib import Path

from markmail.utils.logging import get_logger

log = get_logger(__name__)


def find_magick(preferred: str | None = None) -> str:
    """Locate the ImageMagick convert binary.

    ImageMagick 7 ships ``magick``; version 6 only ``convert``.
    """
    for candidate in (preferred, "magick", "convert"):
        if candidate and shutil.which(candidate):
            return candidate
    raise FileNotFoundError("ImageMagick (magick/convert) not found in PATH")


def _run(cmd: list[str]) -> str:
    log.debug("Running image tool", command=" ".join(cmd))
    result = subprocess.run(
        cmd,
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        check=True,
    )
    return result.stdout


def resize_geometry(width: int | None, height: int | None) -> str:
    """Build an ImageMagick ``-resize`` geometry.

    ``WxH!`` forces the exact size; ``Wx`` and ``xH`` keep the aspect ratio.
    """
    if width is not None and height is not None:
        return f"{width}x{height}!"
    if width is not None:
        return f"{width}x"
    if height is not None:
        return f"x{height}"
    raise ValueError("A resize needs at least one of width or height")


class FileMediaTypeProber:
    """MIME type via ``file --brief --mime-type``."""

    def probe(self, path: Path) -> str:
        mime = _run(["file", "--brief", "--mime-type", str(path)]).strip()
        if not mime:
            raise ValueError(f"file(1) returned no media type for {path.name}")
        return mime


class MagickDimensionProber:
    """Natural size via ``identify``."""

    def __init__(self, identify: str = "identify") -> None:
        self.identify = identify

    def dimensions(self, path: Path) -> tuple[int, int]:
        # [0] restricts multi-frame images (GIF, TIFF) to the first frame
        output = _run([self.identify, "-format", "%w %h", f"{path}[0]"]).split()
        if len(output) != 2:
            raise ValueError(f"Unexpected identify output for {path.name}: {output!r}")
        return int(output[0]), int(output[1])


class MagickResizer:
    """Resize via ``magick``/``convert -resize``."""

    def __init__(self, binary: str | None = None) -> None:
        self._preferred = binary
        self._binary: str | None = None

    @property
    def binary(self) -> str:
        if self._binary is None:
            self._binary = find_magick(self._preferred)
        return self._binary

    def resize(
        self,
        path: Path,
        dest: Path,
        width: int | None = None,
        height: int | None = None,
    ) -> Path:
        _run([self.binary, str(path), "-resize", resize_geometry(width, height), str(dest)])
        return dest
