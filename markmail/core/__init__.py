"""Core processing module for MarkMail."""

from markmail.core.models import (
    ExternalSource,
    ImagePart,
    ImageReference,
    ImageSource,
    InlineSource,
)

__all__ = [
    "ImageReference",
    "ImageSource",
    "InlineSource",
    "ExternalSource",
    "ImagePart",
]
