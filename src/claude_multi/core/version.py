"""
Version checks for the shared Claude Code install.

All lookups go through the npm CLI, so they see the same registry and
global prefix the user installs with.
"""

import json
import re
import subprocess
from typing import List, Optional

from pydantic import BaseModel, Field

from claude_multi.core.exceptions import VersionCheckError
from claude_multi.utils.config import get_config
from claude_multi.utils.logging import get_logger

logger = get_logger(__name__)


class VersionInfo(BaseModel):
    """Installed and latest versions of the Claude package."""

    current: Optional[str] = Field(default=None, description="Globally installed version")
    latest: str = Field(description="Latest published version")
    update_available: bool = Field(description="Installed and behind the registry")


def _npm(args: List[str], timeout: Optional[int] = None) -> subprocess.CompletedProcess:
    if timeout is None:
        timeout = get_config().claude.timeout
    return subprocess.run(
        ["npm"] + args,
        capture_output=True,
        text=True,
        timeout=timeout,
    )


def get_current_version(package: Optional[str] = None) -> Optional[str]:
    """
    Get the globally installed version of the Claude package.

    Returns:
        The version, or None if it is not installed or npm is unavailable
    """
    package = package or get_config().claude.package
    try:
        result = _npm(["list", "-g", package, "--json"])
        data = json.loads(result.stdout or "{}")
    except (subprocess.SubprocessError, OSError, json.JSONDecodeError) as e:
        logger.debug(f"Could not determine installed version of {package}: {e}")
        return None

    version = data.get("dependencies", {}).get(package, {}).get("version")
    return version or None


def get_latest_version(package: Optional[str] = None) -> str:
    """
    Get the latest published version of the Claude package.

    Raises:
        VersionCheckError: If the registry cannot be queried
    """
    package = package or get_config().claude.package
    try:
        result = _npm(["view", package, "version"])
    except (subprocess.SubprocessError, OSError) as e:
        raise VersionCheckError(f"Failed to fetch latest version from npm registry: {e}") from e

    version = result.stdout.strip()
    if result.returncode != 0 or not version:
        raise VersionCheckError(
            f"Failed to fetch latest version from npm registry: {result.stderr.strip() or 'no output'}"
        )
    return version


def check_for_updates(package: Optional[str] = None) -> VersionInfo:
    """Compare the installed version with the latest published one."""
    current = get_current_version(package)
    latest = get_latest_version(package)
    logger.debug(f"Installed: {current}, latest: {latest}")

    return VersionInfo(
        current=current,
        latest=latest,
        update_available=current is not None and compare_versions(current, latest) < 0,
    )


def _numeric(part: str) -> int:
    # "3-beta" counts as 3
    digits = re.match(r"\d*", part).group()
    return int(digits) if digits else 0


def compare_versions(v1: str, v2: str) -> int:
    """
    Compare two dotted numeric versions.

    Returns:
        -1 if v1 < v2, 0 if equal, 1 if v1 > v2
    """
    parts1 = [_numeric(p) for p in v1.split(".")]
    parts2 = [_numeric(p) for p in v2.split(".")]

    for i in range(max(len(parts1), len(parts2))):
        num1 = parts1[i] if i < len(parts1) else 0
        num2 = parts2[i] if i < len(parts2) else 0
        if num1 < num2:
            return -1
        if num1 > num2:
            return 1

    return 0


def update_claude_code(package: Optional[str] = None) -> None:
    """
    Install the latest Claude package globally, streaming npm's output.

    Raises:
        VersionCheckError: If npm fails
    """
    package = package or get_config().claude.package
    logger.info(f"Updating {package}")
    try:
        result = subprocess.run(["npm", "install", "-g", f"{package}@latest"])
    except OSError as e:
        raise VersionCheckError(f"Failed to update {package}: {e}") from e

    if result.returncode != 0:
        raise VersionCheckError(f"Failed to update {package}: npm exited with {result.returncode}")
