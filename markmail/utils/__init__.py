"""Utility module for MarkMail."""

from markmail.utils.fs import atomic_write, promote_file, staging_directory

__all__ = [
    "atomic_write",
    "promote_file",
    "staging_directory",
]
