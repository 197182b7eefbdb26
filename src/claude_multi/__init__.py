"""
claude-multi - run several isolated Claude Code instances side by side.

Each instance gets its own configuration directory and a small launcher
(``claude-<name>``) that points the shared ``claude`` binary at it.
"""

__version__ = "0.1.0"
__description__ = "Manage multiple Claude Code instances with separate configurations"

# Public API
from claude_multi.core.exceptions import ClaudeMultiError
from claude_multi.core.models import Instance, Registry
from claude_multi.core.registry import RegistryStore

__all__ = [
    "__version__",
    "__description__",
    "ClaudeMultiError",
    "Instance",
    "Registry",
    "RegistryStore",
]
