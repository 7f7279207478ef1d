"""Multipart mail output for MarkMail."""

from markmail.mail.assembler import MailAssembler
from markmail.mail.headers import HeaderOptions, build_headers, parse_header

__all__ = [
    "MailAssembler",
    "HeaderOptions",
    "build_headers",
    "parse_header",
]
