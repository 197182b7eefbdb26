"""Core claude-multi functionality."""

from claude_multi.core.exceptions import (
    ClaudeMultiError,
    ConfigIOError,
    DuplicateNameError,
    NotFoundError,
    SourceNotFoundError,
)
from claude_multi.core.models import Instance, MergePolicy, Registry
from claude_multi.core.registry import RegistryStore

__all__ = [
    "ClaudeMultiError",
    "ConfigIOError",
    "DuplicateNameError",
    "NotFoundError",
    "SourceNotFoundError",
    "Instance",
    "MergePolicy",
    "Registry",
    "RegistryStore",
]
