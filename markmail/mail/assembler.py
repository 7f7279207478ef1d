"""Serialize the rewritten document and its image parts as multipart/related."""

import re
from collections.abc import Iterable
from typing import BinaryIO

from markmail.config.constants import (
    BASE64_LINE_LENGTH,
    HTML_CONTENT_TYPE,
    HTML_TRANSFER_ENCODING,
    IMAGE_TRANSFER_ENCODING,
)
from markmail.core.models import ImagePart
from markmail.exceptions import ConfigurationError
from markmail.image.encoding import wrap_base64
from markmail.utils.logging import get_logger

log = get_logger(__name__)

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


def split_lines(text: str) -> list[str]:
    """Split on CR, LF and CRLF only. A final line break ends the last line."""
    lines = _LINE_BREAK.split(text)
    if lines[-1] == "":
        lines.pop()
    return lines


class MailAssembler:
    """Write one ordered multipart/related byte stream.

    The output depends only on the headers, the document text and the parts
    (in the order given), never on how the parts were produced.
    """

    def __init__(self, boundary: str, crlf: bool = False) -> None:
        self.boundary = boundary
        self.newline = "\r\n" if crlf else "\n"

    def _write_lines(self, stream: BinaryIO, lines: Iterable[str]) -> None:
        for line in lines:
            stream.write(line.encode("utf-8"))
            stream.write(self.newline.encode("ascii"))

    def _delimiter(self) -> str:
        return f"--{self.boundary}"

    def assemble(
        self,
        headers: list[tuple[str, str]],
        document: str,
        parts: list[ImagePart],
        stream: BinaryIO,
    ) -> None:
        """Write the complete message to ``stream``.

        Args:
            headers: Top-level header lines, in order
            document: Serialized HTML body
            parts: Image parts in document scan order
            stream: Binary output

        Raises:
            ConfigurationError: If the boundary occurs in the document
        """
        if self._delimiter() in document:
            raise ConfigurationError(
                f"Boundary {self.boundary!r} occurs in the document body, choose another one"
            )

        self._write_lines(stream, (f"{name}: {value}" for name, value in headers))
        self._write_lines(stream, [""])

        self._write_lines(
            stream,
            [
                self._delimiter(),
                f"Content-Type: {HTML_CONTENT_TYPE}",
                f"Content-Transfer-Encoding: {HTML_TRANSFER_ENCODING}",
                "",
            ],
        )
        self._write_lines(stream, split_lines(document))

        for part in parts:
            self._write_part(stream, part)

        self._write_lines(stream, [f"{self._delimiter()}--"])
        log.info("Message assembled", parts=len(parts))

    def _write_part(self, stream: BinaryIO, part: ImagePart) -> None:
        self._write_lines(
            stream,
            [
                self._delimiter(),
                f"Content-Type: {part.mime_type}",
                f"Content-Transfer-Encoding: {IMAGE_TRANSFER_ENCODING}",
                f"Content-ID: {part.content_id}",
                f'Content-Disposition: inline; filename="{part.filename}"',
                "",
            ],
        )
        payload = part.content_path.read_text(encoding="ascii")
        self._write_lines(stream, wrap_base64(payload, BASE64_LINE_LENGTH))
