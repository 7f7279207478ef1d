"""Custom exceptions for MarkMail."""

from pathlib import Path


class MarkmailError(Exception):
    """Base exception class for MarkMail."""

    pass


class ParseError(MarkmailError):
    """The source document could not be parsed."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        self.cause = cause
        super().__init__(f"Failed to parse document: {message}")


class ConversionError(MarkmailError):
    """Error converting a source document to HTML."""

    def __init__(self, file_path: Path, message: str, cause: Exception | None = None) -> None:
        self.file_path = file_path
        self.cause = cause
        super().__init__(f"Conversion failed for {file_path}: {message}")


class UnsupportedEncodingError(MarkmailError):
    """An inline image uses an encoding other than base64."""

    def __init__(self, identifier: str, encoding: str) -> None:
        self.identifier = identifier
        self.encoding = encoding
        super().__init__(
            f"Unsupported inline image encoding for {identifier}: {encoding!r} (only base64)"
        )


class TransformError(MarkmailError):
    """Probing, resizing or encoding an image failed."""

    def __init__(self, identifier: str, message: str, cause: Exception | None = None) -> None:
        self.identifier = identifier
        self.cause = cause
        super().__init__(f"Image transform failed for {identifier}: {message}")


class ConfigurationError(MarkmailError):
    """Configuration error."""

    pass
