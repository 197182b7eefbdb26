"""
Error handling utilities for CLI commands.
"""

import functools
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape

from claude_multi.core.exceptions import ClaudeMultiError
from claude_multi.utils.logging import get_logger

console = Console(stderr=True)
logger = get_logger(__name__)


def handle_errors(func):
    """Decorator to report errors at the command boundary and exit non-zero."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except ClaudeMultiError as e:
            logger.debug(f"{e.__class__.__name__}: {e.to_dict()}")
            console.print(f"[red]✗ Error: {escape(str(e))}[/red]")
            sys.exit(1)
        except (click.ClickException, click.Abort):
            raise
        except KeyboardInterrupt:
            console.print("\n[yellow]✗ Cancelled[/yellow]")
            sys.exit(130)
        except Exception as e:
            console.print(f"[red]✗ Unexpected error: {escape(str(e))}[/red]")
            if logging.getLogger().isEnabledFor(logging.DEBUG):
                console.print_exception()
            else:
                console.print("[dim]Use --debug for more details[/dim]")
            sys.exit(1)

    return wrapper
