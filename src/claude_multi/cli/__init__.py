"""Command-line interface for claude-multi."""

from claude_multi.cli.main import cli, main

__all__ = ["cli", "main"]
