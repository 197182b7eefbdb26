"""
Launcher script generation.

A launcher sets CLAUDE_CONFIG_DIR to its instance's configuration
directory and hands every argument, the standard streams and the exit
code through to the shared Claude binary. POSIX systems get a small
Python script, Windows gets a batch file. Paths are embedded exactly as
given; validating them is up to the caller.
"""

import json
import os
import stat
import sys
from pathlib import Path, PureWindowsPath
from typing import Optional

from claude_multi.core.exceptions import ConfigIOError
from claude_multi.core.models import WrapperOptions
from claude_multi.utils.logging import get_logger

logger = get_logger(__name__)

CONFIG_DIR_ENV = "CLAUDE_CONFIG_DIR"

GENERATOR_NAME = "claude-multi"

EXECUTE_BITS = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def is_windows(platform: Optional[str] = None) -> bool:
    """Whether the given (or current) platform uses batch launchers."""
    return (platform or sys.platform) == "win32"


def generate_wrapper_script(options: WrapperOptions) -> str:
    """
    Render the POSIX launcher.

    The launcher looks the delegate up on PATH at run time, so updating the
    shared install never requires regenerating launchers.

    Args:
        options: Instance name, config directory and delegate binary

    Returns:
        Script text starting with a python3 interpreter line
    """
    config_dir = json.dumps(options.config_dir)
    delegate = json.dumps(options.delegate)

    return "\n".join([
        "#!/usr/bin/env python3",
        f"# Generated by {GENERATOR_NAME} for instance {json.dumps(options.name)}. Do not edit.",
        "import os",
        "import shutil",
        "import subprocess",
        "import sys",
        "",
        f'os.environ["{CONFIG_DIR_ENV}"] = {config_dir}',
        "",
        f"delegate = shutil.which({delegate})",
        "if delegate is None:",
        f'    sys.stderr.write("{GENERATOR_NAME}: cannot find " + {delegate} + " on PATH\\n")',
        "    sys.exit(127)",
        "",
        "try:",
        "    sys.exit(subprocess.call([delegate] + sys.argv[1:]))",
        "except KeyboardInterrupt:",
        "    sys.exit(130)",
        "",
    ])


def generate_windows_wrapper_script(options: WrapperOptions) -> str:
    """
    Render the Windows batch launcher.

    ``call`` is required so control returns to the launcher when the
    delegate is itself a .cmd shim, which lets the exit code propagate.
    """
    return "\r\n".join([
        "@echo off",
        f"REM Generated by {GENERATOR_NAME} for instance '{options.name}'. Do not edit.",
        "setlocal",
        f'set "{CONFIG_DIR_ENV}={options.config_dir}"',
        f'call "{options.delegate}" %*',
        "exit /b %ERRORLEVEL%",
        "",
    ])


def render_wrapper(options: WrapperOptions, platform: Optional[str] = None) -> str:
    """Render the launcher format for a platform."""
    if is_windows(platform):
        return generate_windows_wrapper_script(options)
    return generate_wrapper_script(options)


def create_wrapper(options: WrapperOptions, platform: Optional[str] = None) -> Path:
    """
    Write the launcher for an instance and make it executable.

    Args:
        options: Launcher options; ``binary_path`` is where it is written
        platform: Target platform, defaults to ``sys.platform``

    Returns:
        Path of the launcher

    Raises:
        ConfigIOError: If the launcher cannot be written
    """
    path = Path(options.binary_path)
    script = render_wrapper(options, platform)

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the batch file's CRLF line endings as rendered
        with open(path, "w", encoding="utf-8", newline="") as f:
            f.write(script)

        if not is_windows(platform):
            mode = path.stat().st_mode
            path.chmod(mode | EXECUTE_BITS)
    except OSError as e:
        raise ConfigIOError(f"Failed to write launcher {path}: {e}") from e

    logger.info(f"Created launcher for '{options.name}' at {path}")
    return path


def remove_wrapper(path: Path) -> bool:
    """
    Delete a launcher; a missing file is not an error.

    Returns:
        True if a file was deleted
    """
    path = Path(path)
    try:
        path.unlink()
    except FileNotFoundError:
        logger.debug(f"Launcher {path} already absent")
        return False
    except OSError as e:
        raise ConfigIOError(f"Failed to remove launcher {path}: {e}") from e

    logger.info(f"Removed launcher {path}")
    return True


def get_default_binary_path(name: str, platform: Optional[str] = None) -> str:
    """
    Default launcher location for an instance.

    ``~/.local/bin/claude-<name>`` on POSIX, ``%APPDATA%\\npm\\claude-<name>.cmd``
    on Windows, next to the shim npm installs for ``claude`` itself.
    """
    if is_windows(platform):
        appdata = os.environ.get("APPDATA") or str(Path.home() / "AppData" / "Roaming")
        return str(PureWindowsPath(appdata, "npm", f"claude-{name}.cmd"))
    return str(Path.home() / ".local" / "bin" / f"claude-{name}")


def get_default_config_dir(name: str) -> str:
    """Default configuration directory for an instance (``~/.claude-<name>``)."""
    return str(Path.home() / f".claude-{name}")
