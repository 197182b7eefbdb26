"""Utility modules for claude-multi."""

from claude_multi.utils.config import Settings, get_config, load_config, reload_config
from claude_multi.utils.logging import get_logger, setup_logging
from claude_multi.utils.validators import (
    find_delegate_binary,
    is_directory_on_path,
    validate_instance_name,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "Settings",
    "get_config",
    "load_config",
    "reload_config",
    "validate_instance_name",
    "is_directory_on_path",
    "find_delegate_binary",
]
