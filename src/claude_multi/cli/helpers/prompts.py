"""
Interactive prompts used by CLI commands.
"""

from typing import Optional

from rich.console import Console
from rich.prompt import Prompt

console = Console()

COPY_NONE = "none"
COPY_SETTINGS = "settings"
COPY_ALL = "all"

COPY_CHOICES = {
    COPY_NONE: "Nothing - start fresh",
    COPY_SETTINGS: "Only settings.json",
    COPY_ALL: "All files (settings, CLAUDE.md, plugins, etc.)",
}


def prompt_copy_mode(default_dir: str) -> str:
    """Ask what to copy from the default Claude configuration."""
    console.print(f"\n[dim]Found existing Claude Code configuration at {default_dir}[/dim]")
    for key, title in COPY_CHOICES.items():
        console.print(f"  [cyan]{key:<9}[/cyan] {title}")

    return Prompt.ask(
        "What would you like to copy from default Claude?",
        choices=list(COPY_CHOICES),
        default=COPY_SETTINGS,
        console=console,
    )


def prompt_api_key(provider_name: str) -> Optional[str]:
    """Ask for a provider API key without echoing it."""
    key = Prompt.ask(f"API key for {provider_name}", password=True, console=console)
    return key.strip() or None
