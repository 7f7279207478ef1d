"""MarkMail - Bundle HTML documents and their images into multipart/related mail."""

__version__ = "0.1.0"
