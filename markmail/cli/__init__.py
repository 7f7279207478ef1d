"""Command-line interface for MarkMail."""
