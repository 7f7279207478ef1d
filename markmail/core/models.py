"""Data classes shared by the image pipeline."""

from dataclasses import dataclass
from pathlib import Path

from bs4 import Tag

from markmail.config.constants import CID_SCHEME, PART_ID_PREFIX


def make_identifier(index: int) -> str:
    """Return the part identifier for the image at scan position ``index``."""
    return f"{PART_ID_PREFIX}{index}"


@dataclass
class ImageReference:
    """An ``<img>`` node found while scanning the document."""

    identifier: str
    node: Tag
    width: int | None = None  # Requested pixel width
    height: int | None = None  # Requested pixel height

    @property
    def src(self) -> str:
        """The node's current ``src`` value."""
        return str(self.node.get("src", ""))

    def rewrite_src(self) -> None:
        """Point the node at its Content-ID part."""
        self.node["src"] = f"{CID_SCHEME}{self.identifier}"


@dataclass(frozen=True)
class InlineSource:
    """Image embedded in the document as a base64 data URI."""

    mime_type: str
    payload: str  # base64 text, whitespace removed


@dataclass(frozen=True)
class ExternalSource:
    """Image stored in a file next to the document."""

    path: Path  # Absolute
    mime_type: str


ImageSource = InlineSource | ExternalSource


@dataclass(frozen=True)
class ImagePart:
    """A finished MIME part, staged on disk as base64 text."""

    identifier: str
    filename: str
    mime_type: str
    content_path: Path

    @property
    def content_id(self) -> str:
        """Value for the ``Content-ID`` header."""
        return f"<{self.identifier}>"
