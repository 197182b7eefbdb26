"""
Main CLI interface for claude-multi.

Sequences the core components: registry, launcher generation, config
copying, MCP merging and provider templates. Every command reports errors
through ``handle_errors`` and exits non-zero on failure.
"""

import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm

from claude_multi import __version__
from claude_multi.cli.commands import mcp_commands
from claude_multi.cli.helpers import (
    COPY_ALL,
    COPY_NONE,
    COPY_SETTINGS,
    handle_errors,
    instances_table,
    prompt_api_key,
    prompt_copy_mode,
    providers_table,
    show_instance_details,
)
from claude_multi.core.copier import copy_all_from_default, copy_settings_from_default, has_default_claude_config
from claude_multi.core.exceptions import ClaudeMultiError, DuplicateNameError, NotFoundError, ValidationError
from claude_multi.core.mcp_config import copy_mcp_from_default
from claude_multi.core.models import Instance
from claude_multi.core.registry import RegistryStore
from claude_multi.core.templates import (
    apply_provider_template,
    get_available_providers,
    get_provider_template,
    has_provider_template,
    write_provider_settings,
)
from claude_multi.core.version import check_for_updates, update_claude_code
from claude_multi.core.wrapper import create_wrapper, get_default_binary_path, get_default_config_dir, remove_wrapper
from claude_multi.utils.config import Settings, get_config
from claude_multi.utils.logging import get_logger, setup_logging
from claude_multi.utils.validators import find_delegate_binary, is_directory_on_path, validate_instance_name

console = Console(soft_wrap=True)
logger = get_logger(__name__)


class CLIContext:
    """CLI context for passing state between commands."""

    def __init__(self):
        self.settings: Optional[Settings] = None
        self.store: Optional[RegistryStore] = None

    def get_settings(self) -> Settings:
        """Get loaded settings."""
        if self.settings is None:
            self.settings = get_config()
        return self.settings

    def get_store(self) -> RegistryStore:
        """Get the instance registry."""
        if self.store is None:
            self.store = RegistryStore.from_settings(self.get_settings())
        return self.store

    def reset(self) -> None:
        """Forget cached settings and store."""
        self.settings = None
        self.store = None


# Global CLI context
cli_context = CLIContext()


def _absolute(path: str) -> str:
    return str(Path(path).expanduser().absolute())


@click.group()
@click.option("--debug", "-d", is_flag=True, help="Enable debug logging")
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output")
@click.version_option(version=__version__, prog_name="claude-multi")
def cli(debug: bool, verbose: bool):
    """
    Manage multiple Claude Code instances with different aliases.

    Each instance has its own configuration directory and a launcher
    named claude-<name> that runs the shared claude binary against it.
    """
    settings = cli_context.get_settings()

    console_level = "DEBUG" if debug else "INFO" if verbose else settings.logging.console_level
    setup_logging(
        enabled=settings.logging.enabled,
        level="DEBUG" if debug else settings.logging.level,
        console_level=console_level,
        log_file=settings.get_log_file(),
        format_type=settings.logging.format_type,
        enable_rich=settings.logging.enable_rich,
        max_bytes=settings.logging.max_bytes,
        backup_count=settings.logging.backup_count,
        force=True,
    )
    logger.debug("CLI initialized")


@cli.command()
@click.argument("name")
@click.option("--config", "-c", "config_dir", help="Config directory path (default: ~/.claude-<name>)")
@click.option("--binary", "-b", "binary_path", help="Binary path (default: ~/.local/bin/claude-<name>)")
@click.option("--copy-settings", is_flag=True, help="Copy settings.json from default Claude")
@click.option("--copy-all", is_flag=True, help="Copy all files from default Claude")
@click.option("--copy-mcp", is_flag=True, help="Copy MCP servers from default Claude")
@click.option("--provider", help="Apply a provider template (see 'claude-multi providers')")
@click.option("--api-key", help="API key for the provider template")
@click.option("--skip-prompts", is_flag=True, help="Skip interactive prompts (start fresh)")
@handle_errors
def add(
    name: str,
    config_dir: Optional[str],
    binary_path: Optional[str],
    copy_settings: bool,
    copy_all: bool,
    copy_mcp: bool,
    provider: Optional[str],
    api_key: Optional[str],
    skip_prompts: bool,
):
    """Add a new Claude Code instance."""
    validate_instance_name(name)

    settings = cli_context.get_settings()
    store = cli_context.get_store()
    default_dir = settings.get_default_config_dir()

    if store.get(name) is not None:
        raise DuplicateNameError(name)

    template = None
    if provider:
        if not has_provider_template(provider):
            available = ", ".join(t.name for t in get_available_providers())
            raise ValidationError(f"Unknown provider '{provider}'. Available: {available}")
        template = get_provider_template(provider)
        if not api_key:
            if skip_prompts:
                raise ValidationError(f"--api-key is required for provider '{template.name}'")
            api_key = prompt_api_key(template.display_name)
            if not api_key:
                raise ValidationError("An API key is required")

    copy_mode = COPY_NONE
    if copy_all:
        copy_mode = COPY_ALL
    elif copy_settings:
        copy_mode = COPY_SETTINGS
    elif not skip_prompts and not copy_mcp and has_default_claude_config(default_dir):
        copy_mode = prompt_copy_mode(str(default_dir))

    instance = Instance(
        name=name,
        config_dir=_absolute(config_dir or get_default_config_dir(name)),
        binary_path=_absolute(binary_path) if binary_path else get_default_binary_path(name),
    )

    store.add(instance)
    try:
        create_wrapper(instance.to_wrapper_options(settings.claude.binary))
    except ClaudeMultiError:
        store.remove(name)
        raise

    Path(instance.config_dir).mkdir(parents=True, exist_ok=True)

    if copy_mode == COPY_SETTINGS:
        copy_settings_from_default(Path(instance.config_dir), default_dir)
        console.print("[green]✓[/green] Copied settings.json")
    elif copy_mode == COPY_ALL:
        copy_all_from_default(Path(instance.config_dir), default_dir)
        console.print("[green]✓[/green] Copied all files from default Claude")

    if copy_mcp:
        result = copy_mcp_from_default(Path(instance.config_dir), default_dir)
        console.print(f"[green]✓[/green] Copied {len(result.servers)} MCP server(s)")

    if template is not None:
        write_provider_settings(Path(instance.config_dir), apply_provider_template(template, api_key))
        console.print(f"[green]✓[/green] Applied {escape(template.display_name)} provider settings")

    console.print(f"\n[green]✓ Instance '{escape(name)}' created successfully![/green]")
    console.print(f"[dim]  Binary: {escape(instance.binary_path)}[/dim]")
    console.print(f"[dim]  Config: {escape(instance.config_dir)}[/dim]")
    console.print()

    bin_dir = Path(instance.binary_path).parent
    if is_directory_on_path(bin_dir):
        console.print(f"[cyan]Run: {escape(Path(instance.binary_path).name)} --help[/cyan]")
    else:
        console.print(f"[yellow]⚠ Warning: {escape(str(bin_dir))} is not in your PATH[/yellow]")
        console.print("[dim]Add it to PATH in your shell profile, for example:[/dim]")
        console.print(f"[cyan]  export PATH=\"{escape(str(bin_dir))}:$PATH\"[/cyan]")
        console.print()
        console.print(f"[dim]Or run directly: {escape(instance.binary_path)} --help[/dim]")

    if find_delegate_binary(settings.claude.binary) is None:
        console.print()
        console.print(f"[yellow]⚠ '{escape(settings.claude.binary)}' was not found on PATH[/yellow]")
        console.print(f"[dim]Install it with: npm install -g {escape(settings.claude.package)}[/dim]")


@click.command()
@click.argument("name")
@click.option("--force", "-f", is_flag=True, help="Skip confirmation prompt")
@handle_errors
def remove(name: str, force: bool):
    """Remove a Claude Code instance."""
    store = cli_context.get_store()
    instance = store.get(name)
    if instance is None:
        raise NotFoundError(f"Instance '{name}' not found")

    if not force:
        console.print(f"[yellow]About to remove instance '{escape(name)}':[/yellow]")
        console.print(f"[dim]  Binary: {escape(instance.binary_path)}[/dim]")
        console.print(f"[dim]  Config: {escape(instance.config_dir)}[/dim]")
        console.print()
        console.print("[yellow]Note: Config directory will NOT be deleted automatically.[/yellow]")
        if not Confirm.ask("Remove this instance?", default=False, console=console):
            console.print("[yellow]✗ Cancelled[/yellow]")
            return

    store.remove(name)
    remove_wrapper(Path(instance.binary_path))

    console.print(f"[green]✓ Instance '{escape(name)}' removed successfully![/green]")
    console.print()
    console.print(f"[dim]To remove config files, run: rm -rf {escape(instance.config_dir)}[/dim]")


cli.add_command(remove)
cli.add_command(remove, name="rm")


@click.command(name="list")
@handle_errors
def list_cmd():
    """List all Claude Code instances."""
    instances = cli_context.get_store().list()

    if not instances:
        console.print("[yellow]No instances found.[/yellow]")
        console.print()
        console.print("[dim]Create one with: claude-multi add <name>[/dim]")
        return

    console.print(instances_table(instances))


cli.add_command(list_cmd)
cli.add_command(list_cmd, name="ls")


@cli.command()
@click.argument("name")
@handle_errors
def info(name: str):
    """Show details about a specific instance."""
    instance = cli_context.get_store().get(name)
    if instance is None:
        raise NotFoundError(f"Instance '{name}' not found")

    show_instance_details(instance)


@cli.command()
@handle_errors
def providers():
    """List bundled provider templates."""
    console.print(providers_table(get_available_providers()))
    console.print("\n[dim]Use with: claude-multi add <name> --provider <provider> --api-key <key>[/dim]")


@cli.command()
@handle_errors
def version():
    """Check Claude Code version and updates."""
    console.print("[dim]Checking for updates...[/dim]\n")

    version_info = check_for_updates(cli_context.get_settings().claude.package)

    if version_info.current:
        console.print(f"[dim]Installed:[/dim] [cyan]{version_info.current}[/cyan]")
    else:
        console.print("[yellow]Claude Code is not installed globally[/yellow]")

    console.print(f"[dim]Latest:[/dim]    [cyan]{version_info.latest}[/cyan]")
    console.print()

    if version_info.update_available:
        console.print(f"[yellow]⚠ Update available: {version_info.latest}[/yellow]")
        console.print("[dim]Run 'claude-multi update' to update[/dim]")
    elif version_info.current:
        console.print("[green]✓ You're up to date![/green]")


@cli.command()
@handle_errors
def update():
    """Update Claude Code to the latest version."""
    package = cli_context.get_settings().claude.package
    version_info = check_for_updates(package)

    if not version_info.update_available and version_info.current:
        console.print(f"[green]✓ Already up to date ({version_info.current})[/green]")
        return

    console.print(f"Updating {escape(package)}...")
    update_claude_code(package)
    console.print("[green]✓ Update completed successfully![/green]")


cli.add_command(mcp_commands(cli_context))


def main():
    """Main CLI entry point."""
    cli()


if __name__ == "__main__":
    sys.exit(main())
