"""
Display helper functions for CLI commands.
"""

from pathlib import Path
from typing import Any, Dict, List

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from claude_multi.core.mcp_config import detect_mcp_config, parse_mcp_servers, validate_mcp_servers
from claude_multi.core.models import Instance, MCPConfigSource, ProviderTemplate

console = Console(soft_wrap=True)


def show_instance_details(instance: Instance) -> None:
    """Print one instance with its launcher and MCP status."""
    launcher = Path(instance.binary_path)
    config_dir = Path(instance.config_dir)

    console.print(f"[bold]Instance:[/bold] [cyan]{escape(instance.name)}[/cyan]\n")
    console.print(f"[dim]Binary:[/dim]  {escape(instance.binary_path)}"
                  + ("" if launcher.exists() else " [yellow](missing)[/yellow]"))
    console.print(f"[dim]Config:[/dim]  {escape(instance.config_dir)}"
                  + ("" if config_dir.is_dir() else " [yellow](missing)[/yellow]"))
    console.print(f"[dim]Created:[/dim] {instance.created_at_display()}")

    source = detect_mcp_config(config_dir)
    if source is None:
        console.print("[dim]MCP:[/dim]     none configured")
    else:
        console.print(f"[dim]MCP:[/dim]     {len(source.servers)} server(s) in {escape(str(source.path))}")


def instances_table(instances: List[Instance]) -> Table:
    """Build the instance overview table."""
    table = Table(title=f"{len(instances)} instance(s)", show_header=True, header_style="bold magenta")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Binary", style="dim")
    table.add_column("Config", style="dim")
    table.add_column("Created", no_wrap=True)

    for instance in instances:
        table.add_row(
            escape(instance.name),
            escape(instance.binary_path),
            escape(instance.config_dir),
            instance.created_at_display(),
        )

    return table


def providers_table(templates: List[ProviderTemplate]) -> Table:
    """Build the provider template table."""
    table = Table(title="Provider templates", show_header=True, header_style="bold cyan")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Provider")
    table.add_column("Description", style="dim")
    table.add_column("Base URL", style="green")

    for template in templates:
        table.add_row(
            template.name,
            template.display_name,
            template.description,
            template.settings.env.get("ANTHROPIC_BASE_URL", ""),
        )

    return table


def show_mcp_servers(source: MCPConfigSource) -> int:
    """
    Print an MCP server map with any problems found.

    Returns:
        Number of servers with warnings
    """
    servers: Dict[str, Any] = source.servers
    warnings = validate_mcp_servers(servers)
    entries = parse_mcp_servers(servers)

    table = Table(title=f"MCP servers in {escape(str(source.path))}", show_header=True, header_style="bold blue")
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Type", justify="center", no_wrap=True)
    table.add_column("Target", style="dim")

    for name, entry in entries.items():
        status = " [yellow]⚠[/yellow]" if name in warnings else ""
        table.add_row(f"{escape(name)}{status}", escape(entry.type), escape(entry.summary()))

    console.print(table)

    for name, problems in warnings.items():
        for problem in problems:
            console.print(f"[yellow]⚠ {escape(name)}: {escape(problem)}[/yellow]")

    return len(warnings)
