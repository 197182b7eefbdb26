"""
CLI command modules for claude-multi.
"""

from .mcp import mcp_commands

__all__ = [
    'mcp_commands',
]
