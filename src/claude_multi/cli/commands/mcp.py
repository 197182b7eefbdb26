"""
MCP server commands for claude-multi CLI.
"""

from pathlib import Path
from typing import Optional

import click
from rich.console import Console
from rich.markup import escape

from claude_multi.cli.helpers import handle_errors, show_mcp_servers
from claude_multi.core.exceptions import NotFoundError
from claude_multi.core.mcp_config import copy_mcp_between_instances, copy_mcp_from_default, detect_mcp_config
from claude_multi.core.models import MCPCopyResult, MergePolicy

console = Console(soft_wrap=True)

POLICY_CHOICES = [policy.value for policy in MergePolicy]


def _report_copy(result: MCPCopyResult) -> None:
    console.print(f"[green]✓[/green] Wrote {len(result.servers)} MCP server(s) to {escape(str(result.written_to))}")
    if result.added:
        console.print(f"[dim]  Added:    {escape(', '.join(result.added))}[/dim]")
    if result.kept:
        console.print(f"[dim]  Kept:     {escape(', '.join(result.kept))} (already defined in target)[/dim]")
    if result.replaced:
        console.print(f"[dim]  Replaced: {escape(', '.join(result.replaced))}[/dim]")


def mcp_commands(cli_context):
    """Build the ``mcp`` command group."""

    @click.group(name="mcp")
    def mcp():
        """Inspect and copy MCP server configuration."""

    @mcp.command("list")
    @click.argument("name", required=False)
    @click.option("--default", "use_default", is_flag=True, help="Inspect the default Claude configuration")
    @handle_errors
    def list_mcp(name: Optional[str], use_default: bool):
        """List MCP servers configured for an instance."""
        if use_default == (name is not None):
            raise click.UsageError("Give either an instance NAME or --default")

        if use_default:
            config_dir = cli_context.get_settings().get_default_config_dir()
            label = "default Claude"
        else:
            instance = cli_context.get_store().get(name)
            if instance is None:
                raise NotFoundError(f"Instance '{name}' not found")
            config_dir = Path(instance.config_dir)
            label = f"instance '{name}'"

        source = detect_mcp_config(config_dir)
        if source is None:
            console.print(f"[yellow]No MCP servers configured for {escape(label)}[/yellow]")
            return

        show_mcp_servers(source)

    @mcp.command("copy")
    @click.argument("target")
    @click.option("--from", "source", help="Copy from this instance instead of the default Claude config")
    @click.option(
        "--policy",
        type=click.Choice(POLICY_CHOICES, case_sensitive=False),
        help="Conflict handling (default: keep-target from default config, replace between instances)",
    )
    @handle_errors
    def copy_mcp(target: str, source: Optional[str], policy: Optional[str]):
        """Copy MCP servers into instance TARGET."""
        store = cli_context.get_store()

        if source:
            result = copy_mcp_between_instances(
                store,
                source,
                target,
                policy=MergePolicy(policy) if policy else MergePolicy.REPLACE,
            )
        else:
            instance = store.get(target)
            if instance is None:
                raise NotFoundError(f"Instance '{target}' not found")
            result = copy_mcp_from_default(
                Path(instance.config_dir),
                default_dir=cli_context.get_settings().get_default_config_dir(),
                policy=MergePolicy(policy) if policy else MergePolicy.KEEP_TARGET,
            )

        _report_copy(result)

    return mcp
