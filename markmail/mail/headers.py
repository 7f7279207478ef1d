"""Top-level header composition."""

import re
from dataclasses import dataclass, field
from email.header import Header

from markmail.config.constants import BOUNDARY_PATTERN
from markmail.exceptions import ConfigurationError

_HEADER_NAME = re.compile(r"^[!-9;-~]+$")  # RFC 5322 ftext
_BOUNDARY = re.compile(BOUNDARY_PATTERN)

# Headers MarkMail always writes itself
_RESERVED = {"mime-version", "content-type", "content-transfer-encoding"}


@dataclass
class HeaderOptions:
    """Caller-supplied message headers."""

    sender: str | None = None
    to: list[str] = field(default_factory=list)
    cc: list[str] = field(default_factory=list)
    subject: str | None = None
    extra: list[str] = field(default_factory=list)  # "Name: value" strings


def parse_header(raw: str) -> tuple[str, str]:
    """Split a ``Name: value`` string.

    Raises:
        ConfigurationError: If the name is malformed or reserved, or the value spans lines
    """
    name, sep, value = raw.partition(":")
    name = name.strip()
    if not sep or not _HEADER_NAME.match(name):
        raise ConfigurationError(f"Invalid header {raw!r}, expected 'Name: value'")
    if name.lower() in _RESERVED:
        raise ConfigurationError(f"Header {name} is set automatically and cannot be overridden")
    check_value(name, value)
    return name, value.strip()


def check_value(name: str, value: str) -> None:
    """Reject values that would end the header line early."""
    if "\r" in value or "\n" in value:
        raise ConfigurationError(f"Header {name} must not contain line breaks: {value!r}")


def validate_boundary(boundary: str) -> str:
    """Check ``boundary`` against the RFC 2046 boundary syntax.

    Raises:
        ConfigurationError: If the boundary is empty, too long or has invalid characters
    """
    if not _BOUNDARY.fullmatch(boundary):
        raise ConfigurationError(
            f"Invalid boundary {boundary!r}: use 1 to 70 letters, digits or '()+_,-./:=? "
            "characters, not ending in a space"
        )
    return boundary


def encode_value(value: str) -> str:
    """RFC 2047-encode a header value if it is not plain ASCII."""
    if value.isascii():
        return value
    return Header(value, "utf-8").encode()


def build_headers(options: HeaderOptions, boundary: str) -> list[tuple[str, str]]:
    """Compose the message header block.

    Addressing headers come first, in a fixed order and only when set, then
    any extra headers in the order given, then the MIME headers.
    """
    validate_boundary(boundary)
    headers: list[tuple[str, str]] = []

    def add(name: str, *values: str) -> None:
        for value in values:
            check_value(name, value)
        headers.append((name, ", ".join(encode_value(v) for v in values)))

    if options.sender:
        add("From", options.sender)
    if options.to:
        add("To", *options.to)
    if options.cc:
        add("Cc", *options.cc)
    if options.subject:
        add("Subject", options.subject)

    for raw in options.extra:
        add(*parse_header(raw))

    headers.append(("MIME-Version", "1.0"))
    headers.append(
        ("Content-Type", f'multipart/related; boundary="{boundary}"; type="text/html"')
    )
    return headers
