"""Protocol definitions for the external image tools.

The transformer only talks to these interfaces, so backends (Pillow,
ImageMagick) and test doubles can be swapped in freely. All methods are
blocking; callers run them in a worker thread.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Protocol


class MediaTypeProber(Protocol):
    """Determine the MIME type of an image file."""

    def probe(self, path: Path) -> str:
        """Return a MIME type such as ``image/png``."""
        ...


class DimensionProber(Protocol):
    """Read the natural pixel size of an image file."""

    def dimensions(self, path: Path) -> tuple[int, int]:
        """Return ``(width, height)`` in pixels."""
        ...


class Resizer(Protocol):
    """Write a resized copy of an image file."""

    def resize(
        self,
        path: Path,
        dest: Path,
        width: int | None = None,
        height: int | None = None,
    ) -> Path:
        """Resize ``path`` into ``dest``.

        With both dimensions the result is exactly ``width`` x ``height``.
        With one, the other is derived from the aspect ratio.

        Returns:
            Path of the written file
        """
        ...


class Encoder(Protocol):
    """Binary-to-text encode a file."""

    def encode(self, path: Path, dest: Path) -> Path:
        """Write the encoded form of ``path`` to ``dest`` and return it."""
        ...


@dataclass
class ImageToolset:
    """The collaborators an ImageTransformer needs."""

    media_types: MediaTypeProber
    dimensions: DimensionProber
    resizer: Resizer
    encoder: Encoder
