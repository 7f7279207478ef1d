"""Pillow implementations of the image tools."""

import mimetypes
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from markmail.utils.logging import get_logger

log = get_logger(__name__)

_RESAMPLE = {
    "nearest": Image.Resampling.NEAREST,
    "bilinear": Image.Resampling.BILINEAR,
    "bicubic": Image.Resampling.BICUBIC,
    "lanczos": Image.Resampling.LANCZOS,
}


def compute_target_size(
    natural: tuple[int, int],
    width: int | None,
    height: int | None,
) -> tuple[int, int]:
    """Work out the output size for a resize request.

    Both given: exact size. One given: the other follows the aspect ratio,
    rounded, never below 1 pixel.
    """
    natural_width, natural_height = natural

    if width is not None and height is not None:
        return width, height
    if width is not None:
        return width, max(1, round(natural_height * width / natural_width))
    if height is not None:
        return max(1, round(natural_width * height / natural_height)), height

    raise ValueError("A resize needs at least one of width or height")


class PillowMediaTypeProber:
    """Detect the MIME type from the image header, falling back to the extension."""

    def probe(self, path: Path) -> str:
        try:
            with Image.open(path) as img:
                mime = Image.MIME.get(img.format or "")
        except UnidentifiedImageError:
            # SVG and other formats Pillow cannot decode
            mime = None

        if mime is None:
            mime, _ = mimetypes.guess_type(path.name)

        if mime is None:
            raise ValueError(f"Unknown media type for {path.name}")
        return mime


class PillowDimensionProber:
    """Read the natural size with Pillow."""

    def dimensions(self, path: Path) -> tuple[int, int]:
        with Image.open(path) as img:
            return img.size


class PillowResizer:
    """Resize with Pillow, keeping the source format."""

    def __init__(self, resample: str = "lanczos") -> None:
        self.resample = _RESAMPLE[resample]

    def resize(
        self,
        path: Path,
        dest: Path,
        width: int | None = None,
        height: int | None = None,
    ) -> Path:
        with Image.open(path) as img:
            fmt = img.format
            size = compute_target_size(img.size, width, height)
            log.debug(
                "Resizing image",
                file=path.name,
                original=f"{img.size[0]}x{img.size[1]}",
                new=f"{size[0]}x{size[1]}",
            )
            resized = img.resize(size, self.resample)

        resized.save(dest, format=fmt)
        return dest
