"""
Validation utilities for claude-multi.

Instance names end up in file names (``claude-<name>``) and directory
names (``~/.claude-<name>``), so they are restricted to a portable set of
characters before anything is written.
"""

import os
import re
import shutil
from pathlib import Path
from typing import Optional

from claude_multi.core.exceptions import ValidationError
from claude_multi.utils.logging import get_logger

logger = get_logger(__name__)

INSTANCE_NAME_PATTERN = re.compile(r"[A-Za-z0-9][A-Za-z0-9_.-]*")

MAX_INSTANCE_NAME_LENGTH = 64


def validate_instance_name(name: str) -> bool:
    """
    Validate an instance name.

    Args:
        name: Instance name to validate

    Returns:
        True if valid

    Raises:
        ValidationError: If name is invalid
    """
    if not name or not name.strip():
        raise ValidationError("Instance name cannot be empty")

    if len(name) > MAX_INSTANCE_NAME_LENGTH:
        raise ValidationError(
            f"Instance name too long (max {MAX_INSTANCE_NAME_LENGTH} characters)"
        )

    if not INSTANCE_NAME_PATTERN.fullmatch(name):
        raise ValidationError(
            "Instance name can only contain letters, numbers, hyphens, underscores "
            "and dots, and must start with a letter or number"
        )

    return True


def is_directory_on_path(directory: Path, path_env: Optional[str] = None) -> bool:
    """Check whether a directory is listed in PATH."""
    if path_env is None:
        path_env = os.environ.get("PATH", "")

    target = os.path.normcase(os.path.normpath(str(directory)))
    for entry in path_env.split(os.pathsep):
        if entry and os.path.normcase(os.path.normpath(os.path.expanduser(entry))) == target:
            return True
    return False


def find_delegate_binary(binary: str) -> Optional[str]:
    """Resolve the shared Claude binary on PATH."""
    found = shutil.which(binary)
    if found is None:
        logger.debug(f"Delegate binary '{binary}' not found on PATH")
    return found
