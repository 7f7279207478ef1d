"""CLI commands for MarkMail."""
