"""
Bootstrap a new instance's configuration from the default Claude directory.

Two modes: copy only ``settings.json``, or copy the whole tree except
runtime state (history, caches, logs, sessions, snapshots, credentials).
"""

import shutil
from pathlib import Path
from typing import Iterable, List, Optional, Set

from claude_multi.core.exceptions import ConfigIOError, SourceNotFoundError
from claude_multi.utils.logging import get_logger

logger = get_logger(__name__)

SETTINGS_FILENAME = "settings.json"

# Skipped wherever they appear in the tree, not only at the top level
EXCLUDED_NAMES = frozenset({
    ".credentials.json",
    ".DS_Store",
    "cache",
    "debug",
    "file-history",
    "history.jsonl",
    "logs",
    "projects",
    "session-env",
    "shell-snapshots",
    "statsig",
    "todos",
})


def _resolve_default_dir(default_dir: Optional[Path]) -> Path:
    if default_dir is not None:
        return Path(default_dir)
    from claude_multi.utils.config import get_config
    return get_config().get_default_config_dir()


def has_default_claude_config(default_dir: Optional[Path] = None) -> bool:
    """Check whether the default Claude configuration directory exists."""
    return _resolve_default_dir(default_dir).is_dir()


def copy_settings_from_default(target_dir: Path, default_dir: Optional[Path] = None) -> Path:
    """
    Copy settings.json from the default configuration directory.

    Args:
        target_dir: Instance configuration directory (created if missing)
        default_dir: Source directory, defaults to the configured ~/.claude

    Returns:
        Path of the copied settings file

    Raises:
        SourceNotFoundError: If the default directory has no settings.json
        ConfigIOError: If the copy fails
    """
    source = _resolve_default_dir(default_dir) / SETTINGS_FILENAME
    if not source.is_file():
        raise SourceNotFoundError(
            f"No {SETTINGS_FILENAME} found in default Claude config ({source.parent})",
            details={"path": str(source)},
        )

    target_dir = Path(target_dir)
    destination = target_dir / SETTINGS_FILENAME
    try:
        target_dir.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, destination)
    except OSError as e:
        raise ConfigIOError(f"Failed to copy {source} to {destination}: {e}") from e

    logger.info(f"Copied {source} to {destination}")
    return destination


def _ignore_excluded(excluded: Set[str]):
    def ignore(directory: str, names: Iterable[str]) -> Set[str]:
        skipped = {name for name in names if name in excluded}
        if skipped:
            logger.debug(f"Skipping {sorted(skipped)} in {directory}")
        return skipped
    return ignore


def copy_all_from_default(
    target_dir: Path,
    default_dir: Optional[Path] = None,
    excluded: Optional[Iterable[str]] = None,
) -> List[Path]:
    """
    Recursively copy the default configuration directory, minus excluded names.

    Existing files in the target are overwritten.

    Args:
        target_dir: Instance configuration directory (created if missing)
        default_dir: Source directory, defaults to the configured ~/.claude
        excluded: Names to skip at every depth, defaults to EXCLUDED_NAMES

    Returns:
        Top-level entries that were copied into the target

    Raises:
        SourceNotFoundError: If the default directory does not exist
        ConfigIOError: If the copy fails
    """
    source = _resolve_default_dir(default_dir)
    if not source.is_dir():
        raise SourceNotFoundError(
            f"Default Claude config directory not found: {source}",
            details={"path": str(source)},
        )

    excluded_names = set(EXCLUDED_NAMES if excluded is None else excluded)
    target_dir = Path(target_dir)

    try:
        shutil.copytree(
            source,
            target_dir,
            ignore=_ignore_excluded(excluded_names),
            dirs_exist_ok=True,
        )
    except (shutil.Error, OSError) as e:
        raise ConfigIOError(f"Failed to copy {source} to {target_dir}: {e}") from e

    copied = sorted(
        target_dir / entry.name
        for entry in source.iterdir()
        if entry.name not in excluded_names
    )
    logger.info(f"Copied {len(copied)} entries from {source} to {target_dir}")
    return copied
