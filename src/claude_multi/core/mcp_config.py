"""
MCP server configuration for instance directories.

Finds the ``mcpServers`` map of a configuration directory, merges maps
from the default config or another instance, and writes the result back
into settings.json or a standalone MCP file.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from claude_multi.core.copier import SETTINGS_FILENAME
from claude_multi.core.exceptions import ConfigIOError, NotFoundError
from claude_multi.core.models import MCPConfigSource, MCPCopyResult, MCPServerEntry, MergePolicy
from claude_multi.core.registry import RegistryStore, write_json_file
from claude_multi.utils.logging import get_logger

logger = get_logger(__name__)

MCP_SERVERS_KEY = "mcpServers"

STANDALONE_MCP_FILE = ".mcp.json"

# Tried in order after settings.json
STANDALONE_MCP_CANDIDATES = (STANDALONE_MCP_FILE, "mcp.json", "mcp_servers.json")


def _read_json_object(path: Path) -> Optional[Dict[str, Any]]:
    """Parse a file as a JSON object, or None if that is not possible."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.debug(f"Skipping unreadable MCP candidate {path}: {e}")
        return None
    if not isinstance(data, dict):
        logger.debug(f"Skipping MCP candidate {path}: top level is not an object")
        return None
    return data


def candidate_paths(config_dir: Path) -> List[Path]:
    """Files checked for MCP servers, in priority order."""
    config_dir = Path(config_dir)
    return [config_dir / SETTINGS_FILENAME] + [config_dir / name for name in STANDALONE_MCP_CANDIDATES]


def detect_mcp_config(config_dir: Path) -> Optional[MCPConfigSource]:
    """
    Locate the MCP server map of a configuration directory.

    The first candidate that parses and carries an object-valued
    ``mcpServers`` key wins. Candidates that are missing or malformed are
    skipped without error.

    Args:
        config_dir: Configuration directory to scan

    Returns:
        The source found, or None if no candidate has MCP servers
    """
    for path in candidate_paths(config_dir):
        if not path.is_file():
            continue
        data = _read_json_object(path)
        if data is None:
            continue
        servers = data.get(MCP_SERVERS_KEY)
        if isinstance(servers, dict):
            logger.debug(f"Found {len(servers)} MCP server(s) in {path}")
            return MCPConfigSource(path=path, servers=servers)

    logger.debug(f"No MCP configuration found in {config_dir}")
    return None


def merge_mcp_servers(
    target: Dict[str, Any],
    incoming: Dict[str, Any],
    policy: MergePolicy = MergePolicy.KEEP_TARGET,
) -> Tuple[Dict[str, Any], List[str], List[str], List[str]]:
    """
    Combine two server maps.

    Args:
        target: Servers already present in the destination
        incoming: Servers being copied in
        policy: Which side wins a name conflict, or REPLACE to drop the target map

    Returns:
        Tuple of (merged map, added names, kept target names, replaced target names)
    """
    if policy == MergePolicy.REPLACE:
        merged = dict(incoming)
        return merged, [name for name in incoming if name not in target], [], [
            name for name in incoming if name in target
        ]

    merged = dict(target)
    added, kept, replaced = [], [], []
    for name, entry in incoming.items():
        if name not in target:
            merged[name] = entry
            added.append(name)
        elif policy == MergePolicy.PREFER_SOURCE:
            merged[name] = entry
            replaced.append(name)
        else:
            kept.append(name)

    return merged, added, kept, replaced


def write_mcp_servers(config_dir: Path, servers: Dict[str, Any]) -> Path:
    """
    Write a server map into a configuration directory.

    If settings.json exists its ``mcpServers`` key is replaced and the file
    rewritten; if it cannot be parsed the map goes to the standalone
    MCP file instead, which is also used when there is no settings.json.

    Returns:
        Path of the file written

    Raises:
        ConfigIOError: If the file cannot be written
    """
    config_dir = Path(config_dir)
    settings_path = config_dir / SETTINGS_FILENAME

    if settings_path.exists():
        settings = _read_json_object(settings_path)
        if settings is not None:
            settings[MCP_SERVERS_KEY] = servers
            _write(settings_path, settings)
            logger.info(f"Wrote {len(servers)} MCP server(s) into {settings_path}")
            return settings_path
        logger.warning(
            f"{settings_path} could not be parsed, writing MCP servers to {STANDALONE_MCP_FILE} instead"
        )

    standalone_path = config_dir / STANDALONE_MCP_FILE
    _write(standalone_path, {MCP_SERVERS_KEY: servers})
    logger.info(f"Wrote {len(servers)} MCP server(s) to {standalone_path}")
    return standalone_path


def _write(path: Path, data: Dict[str, Any]) -> None:
    try:
        write_json_file(path, data)
    except OSError as e:
        raise ConfigIOError(f"Failed to write {path}: {e}") from e


def _copy_into(
    source: MCPConfigSource,
    target_dir: Path,
    policy: MergePolicy,
) -> MCPCopyResult:
    existing = detect_mcp_config(target_dir)
    target_servers = existing.servers if existing else {}

    merged, added, kept, replaced = merge_mcp_servers(target_servers, source.servers, policy)
    written_to = write_mcp_servers(target_dir, merged)

    return MCPCopyResult(
        source=source.path,
        written_to=written_to,
        servers=merged,
        added=added,
        kept=kept,
        replaced=replaced,
    )


def copy_mcp_from_default(
    target_dir: Path,
    default_dir: Optional[Path] = None,
    policy: MergePolicy = MergePolicy.KEEP_TARGET,
) -> MCPCopyResult:
    """
    Copy MCP servers from the default Claude configuration into a directory.

    By default servers already defined in the target win over same-named
    servers from the default configuration.

    Raises:
        NotFoundError: If the default configuration has no MCP servers
        ConfigIOError: If the result cannot be written
    """
    if default_dir is None:
        from claude_multi.utils.config import get_config
        default_dir = get_config().get_default_config_dir()

    source = detect_mcp_config(default_dir)
    if source is None:
        raise NotFoundError(
            f"No MCP configuration found in default Claude config ({default_dir})",
            details={"path": str(default_dir)},
        )

    result = _copy_into(source, Path(target_dir), policy)
    logger.info(
        f"Copied MCP servers from {source.path} to {result.written_to} "
        f"({len(result.added)} added, {len(result.kept)} kept)"
    )
    return result


def copy_mcp_between_instances(
    store: RegistryStore,
    source_name: str,
    target_name: str,
    policy: MergePolicy = MergePolicy.REPLACE,
) -> MCPCopyResult:
    """
    Copy MCP servers from one registered instance to another.

    Unlike copying from the default config, the source map replaces the
    target's map unless another policy is given.

    Raises:
        NotFoundError: If either instance is not registered, or the source
            instance has no MCP configuration
        ConfigIOError: If the registry or the result cannot be read or written
    """
    source_instance = store.get(source_name)
    if source_instance is None:
        raise NotFoundError(f"Source instance '{source_name}' not found", details={"name": source_name})

    target_instance = store.get(target_name)
    if target_instance is None:
        raise NotFoundError(f"Target instance '{target_name}' not found", details={"name": target_name})

    source = detect_mcp_config(Path(source_instance.config_dir))
    if source is None:
        raise NotFoundError(
            f"No MCP configuration found for instance '{source_name}'",
            details={"path": source_instance.config_dir},
        )

    result = _copy_into(source, Path(target_instance.config_dir), policy)
    logger.info(f"Copied MCP servers from '{source_name}' to '{target_name}' ({policy.value})")
    return result


def parse_mcp_servers(servers: Dict[str, Any]) -> Dict[str, MCPServerEntry]:
    """Parse a raw server map for display; unparseable entries become empty stdio entries."""
    parsed = {}
    for name, data in servers.items():
        if not isinstance(data, dict):
            data = {}
        try:
            parsed[name] = MCPServerEntry.model_validate(data)
        except PydanticValidationError as e:
            logger.debug(f"MCP server '{name}' has unexpected field types: {e}")
            parsed[name] = MCPServerEntry.model_construct(type=str(data.get("type", "stdio")))
    return parsed


def validate_mcp_servers(servers: Dict[str, Any]) -> Dict[str, List[str]]:
    """
    Check a raw server map for missing transport fields.

    Returns:
        Mapping of server name to warnings; servers without problems are omitted
    """
    warnings: Dict[str, List[str]] = {}
    for name, data in servers.items():
        if not isinstance(data, dict):
            warnings[name] = ["entry is not an object"]
            continue
        try:
            entry = MCPServerEntry.model_validate(data)
        except PydanticValidationError as e:
            warnings[name] = [f"invalid field: {err['loc'][0]}" for err in e.errors() if err.get("loc")]
            continue
        problems = entry.problems()
        if problems:
            warnings[name] = problems
    return warnings
