"""Document loading for MarkMail."""

from markmail.document.loader import (
    LoadedDocument,
    load_document,
    load_document_file,
    parse_dimension,
    scan_images,
)

__all__ = [
    "LoadedDocument",
    "load_document",
    "load_document_file",
    "parse_dimension",
    "scan_images",
]
