"""Backend selection for the image tools."""

from markmail.config.settings import ImageConfig
from markmail.exceptions import ConfigurationError
from markmail.image.encoding import Base64Encoder
from markmail.image.magick_backend import (
    FileMediaTypeProber,
    MagickDimensionProber,
    MagickResizer,
)
from markmail.image.pillow_backend import (
    PillowDimensionProber,
    PillowMediaTypeProber,
    PillowResizer,
)
from markmail.image.protocols import ImageToolset


def create_toolset(config: ImageConfig | None = None) -> ImageToolset:
    """Build the image tools for the configured backend."""
    config = config or ImageConfig()

    if config.backend == "pillow":
        return ImageToolset(
            media_types=PillowMediaTypeProber(),
            dimensions=PillowDimensionProber(),
            resizer=PillowResizer(resample=config.resample),
            encoder=Base64Encoder(),
        )
    if config.backend == "magick":
        return ImageToolset(
            media_types=FileMediaTypeProber(),
            dimensions=MagickDimensionProber(),
            resizer=MagickResizer(binary=config.magick_binary),
            encoder=Base64Encoder(),
        )

    raise ConfigurationError(f"Unknown image backend: {config.backend}")
