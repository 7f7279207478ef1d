"""HTML document loading and image discovery."""

import re
from dataclasses import dataclass, field
from pathlib import Path

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup
from bs4.dammit import EncodingDetector

from markmail.core.models import ImageReference, make_identifier
from markmail.exceptions import ParseError
from markmail.utils.logging import get_logger

log = get_logger(__name__)

# "120" or "120px"; percentages and other units are not pixel requests
_PIXEL_PATTERN = re.compile(r"^\s*(\d+)\s*(?:px)?\s*$", re.IGNORECASE)

_PARSER = "html.parser"


@dataclass
class LoadedDocument:
    """A parsed document and the images it references, in scan order."""

    tree: BeautifulSoup
    base_dir: Path
    references: list[ImageReference] = field(default_factory=list)

    def serialize(self) -> str:
        """Render the (possibly rewritten) tree back to HTML."""
        return self.tree.decode()


def parse_dimension(value: str | list[str] | None, attribute: str = "width") -> int | None:
    """Parse a ``width``/``height`` attribute into a pixel count.

    Returns None when the attribute is absent or not a positive pixel value.
    """
    if value is None:
        return None
    if isinstance(value, list):
        value = " ".join(value)

    match = _PIXEL_PATTERN.match(value)
    if not match or int(match.group(1)) <= 0:
        log.warning("Ignoring non-pixel image dimension", attribute=attribute, value=value)
        return None
    return int(match.group(1))


def decode_markup(data: bytes) -> str:
    """Decode HTML bytes strictly.

    The encoding comes from a byte order mark, then a ``<meta charset>``
    declaration, and is UTF-8 otherwise.

    Raises:
        ParseError: If the bytes are not valid in that encoding
    """
    data, encoding = EncodingDetector.strip_byte_order_mark(data)
    encoding = encoding or EncodingDetector.find_declared_encoding(data, is_html=True) or "utf-8"

    try:
        return data.decode(encoding)
    except (UnicodeDecodeError, LookupError) as e:
        raise ParseError(f"input is not valid {encoding}: {e}", cause=e) from e


def scan_images(tree: BeautifulSoup) -> list[ImageReference]:
    """Enumerate ``<img src>`` nodes in document order and number them."""
    references: list[ImageReference] = []

    for node in tree.find_all("img"):
        if not isinstance(node, Tag):
            continue
        if not node.get("src"):
            log.debug("Skipping image without src", node=str(node)[:120])
            continue

        references.append(
            ImageReference(
                identifier=make_identifier(len(references)),
                node=node,
                width=parse_dimension(node.get("width"), "width"),
                height=parse_dimension(node.get("height"), "height"),
            )
        )

    return references


def load_document(markup: str | bytes, base_dir: Path) -> LoadedDocument:
    """Parse HTML markup and collect its image references.

    Args:
        markup: HTML text, or raw bytes (see decode_markup)
        base_dir: Directory relative image paths are resolved against

    Returns:
        LoadedDocument with references numbered ``part-0``, ``part-1``, ...

    Raises:
        ParseError: If the markup cannot be decoded or parsed
    """
    if isinstance(markup, bytes):
        markup = decode_markup(markup)

    try:
        tree = BeautifulSoup(markup, _PARSER)
    except ParserRejectedMarkup as e:
        raise ParseError(str(e), cause=e) from e

    references = scan_images(tree)
    log.info("Document loaded", images=len(references), base_dir=str(base_dir))

    return LoadedDocument(tree=tree, base_dir=base_dir.resolve(), references=references)


def load_document_file(path: Path) -> LoadedDocument:
    """Load an HTML file, resolving images relative to its directory."""
    try:
        markup = path.read_bytes()
    except OSError as e:
        raise ParseError(f"cannot read {path}: {e}", cause=e) from e
    return load_document(markup, path.parent)
