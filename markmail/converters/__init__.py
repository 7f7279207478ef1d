"""Source format converters for MarkMail."""

from markmail.converters.base import BaseConverter
from markmail.converters.pandoc import PandocConverter

__all__ = [
    "BaseConverter",
    "PandocConverter",
]
