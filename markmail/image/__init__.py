"""Image resolution and transformation for MarkMail."""

from markmail.image.backends import create_toolset
from markmail.image.encoding import Base64Encoder
from markmail.image.protocols import (
    DimensionProber,
    Encoder,
    ImageToolset,
    MediaTypeProber,
    Resizer,
)
from markmail.image.resolver import ImageResolver
from markmail.image.transformer import ImageTransformer

__all__ = [
    "ImageResolver",
    "ImageTransformer",
    "ImageToolset",
    "MediaTypeProber",
    "DimensionProber",
    "Resizer",
    "Encoder",
    "Base64Encoder",
    "create_toolset",
]
