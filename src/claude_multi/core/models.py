"""
Data models for claude-multi.

Pydantic models for instance records, the registry document, MCP server
entries and provider templates. Models that are persisted keep the
camelCase keys of the on-disk JSON as aliases.
"""

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator

REGISTRY_VERSION = "1.0.0"

# Validation context flag for documents read back from the registry file
FROM_REGISTRY = "from_registry"

MCP_TRANSPORT_TYPES = ("stdio", "http", "sse")


def utc_timestamp() -> str:
    """ISO-8601 timestamp in UTC with millisecond precision, e.g. 2025-01-31T09:15:00.000Z."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class Instance(BaseModel):
    """A named Claude Code instance bound to its own configuration directory.

    Keys this model does not know are kept so that rewriting the registry
    never drops data written by other tools.
    """

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    name: str = Field(description="Unique instance name")
    config_dir: str = Field(alias="configDir", description="Directory the launcher points Claude at")
    binary_path: str = Field(alias="binaryPath", description="Path of the generated launcher")
    created_at: Optional[str] = Field(
        alias="createdAt",
        default=None,
        description="Creation time (ISO-8601), set once when the instance is created",
    )

    @model_validator(mode="before")
    @classmethod
    def stamp_created_at(cls, data: Any, info: ValidationInfo) -> Any:
        """Timestamp new instances; records read from the registry keep what they had."""
        if info.context and info.context.get(FROM_REGISTRY):
            return data
        if isinstance(data, dict) and "createdAt" not in data and "created_at" not in data:
            data = {**data, "createdAt": utc_timestamp()}
        return data

    def __str__(self) -> str:
        """String representation."""
        return f"{self.name} ({self.config_dir})"

    def created_at_display(self) -> str:
        """Creation time in local time, falling back to the raw value."""
        if not self.created_at:
            return "-"
        try:
            created = datetime.fromisoformat(self.created_at.replace("Z", "+00:00"))
        except ValueError:
            return self.created_at
        return created.astimezone().strftime("%Y-%m-%d %H:%M:%S")

    def to_wrapper_options(self, delegate: str = "claude") -> "WrapperOptions":
        """Build launcher options for this instance."""
        return WrapperOptions(
            name=self.name,
            config_dir=self.config_dir,
            binary_path=self.binary_path,
            delegate=delegate,
        )


class Registry(BaseModel):
    """The persisted root document listing all instances."""

    model_config = ConfigDict(extra="allow")

    instances: List[Instance] = Field(default_factory=list, description="Instances in insertion order")
    version: str = Field(default=REGISTRY_VERSION, description="Schema version")

    def get_by_name(self, name: str) -> Optional[Instance]:
        """Get the first instance with exactly this name."""
        for instance in self.instances:
            if instance.name == name:
                return instance
        return None

    def to_json_dict(self) -> Dict[str, Any]:
        """Serialize with the on-disk key names.

        Instance fields that were never set (a record read without
        ``createdAt``) stay absent instead of being written as null.
        """
        data = self.model_dump(by_alias=True)
        data["instances"] = [
            instance.model_dump(by_alias=True, exclude_unset=True)
            for instance in self.instances
        ]
        return data


class WrapperOptions(BaseModel):
    """Everything needed to render a launcher script."""

    name: str = Field(description="Instance name")
    config_dir: str = Field(description="Value for CLAUDE_CONFIG_DIR")
    binary_path: str = Field(description="Where the launcher is written")
    delegate: str = Field(default="claude", description="Shared binary the launcher runs")


class MCPServerEntry(BaseModel):
    """One entry of an ``mcpServers`` map.

    Unknown keys are kept so a parsed entry can be written back unchanged.
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="stdio", description="Transport: stdio, http or sse")
    command: Optional[str] = Field(default=None, description="Executable for stdio servers")
    args: List[str] = Field(default_factory=list, description="Arguments for stdio servers")
    url: Optional[str] = Field(default=None, description="Endpoint for http/sse servers")
    headers: Dict[str, str] = Field(default_factory=dict, description="HTTP headers")
    env: Dict[str, str] = Field(default_factory=dict, description="Environment overrides")

    def problems(self) -> List[str]:
        """Describe what is missing for this entry's transport type."""
        issues = []
        if self.type not in MCP_TRANSPORT_TYPES:
            issues.append(
                f"unknown type '{self.type}' (expected one of {', '.join(MCP_TRANSPORT_TYPES)})"
            )
        elif self.type == "stdio" and not self.command:
            issues.append("stdio server has no 'command'")
        elif self.type in ("http", "sse") and not self.url:
            issues.append(f"{self.type} server has no 'url'")
        return issues

    def summary(self) -> str:
        """Short human readable target of the server."""
        if self.type == "stdio":
            return " ".join([self.command or "?"] + self.args)
        return self.url or "?"


class MCPConfigSource(BaseModel):
    """Where an ``mcpServers`` map was found and what it contained."""

    path: Path = Field(description="File holding the map")
    servers: Dict[str, Any] = Field(description="Raw server map")


class MCPCopyResult(BaseModel):
    """Outcome of copying MCP servers into a configuration directory."""

    source: Path = Field(description="File the servers were read from")
    written_to: Path = Field(description="File the merged map was written to")
    servers: Dict[str, Any] = Field(description="Server map as written")
    added: List[str] = Field(default_factory=list, description="Names new to the target")
    kept: List[str] = Field(default_factory=list, description="Conflicting names where the target won")
    replaced: List[str] = Field(default_factory=list, description="Conflicting names where the source won")


class MergePolicy(str, Enum):
    """How to combine an incoming ``mcpServers`` map with the target's."""

    KEEP_TARGET = "keep-target"      # union, target wins conflicts
    PREFER_SOURCE = "prefer-source"  # union, incoming wins conflicts
    REPLACE = "replace"              # incoming map only


class ProviderSettings(BaseModel):
    """Settings overlay written into an instance's settings.json."""

    model_config = ConfigDict(populate_by_name=True)

    env: Dict[str, str] = Field(default_factory=dict, description="Environment overlay")
    include_co_authored_by: bool = Field(alias="includeCoAuthoredBy", default=False)
    always_thinking_enabled: bool = Field(alias="alwaysThinkingEnabled", default=False)


class ProviderTemplate(BaseModel):
    """A bundled backend provider for the Claude binary."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Lookup key")
    display_name: str = Field(description="Human readable name")
    description: str = Field(description="What the provider offers")
    settings: ProviderSettings = Field(description="Settings overlay")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Template names are lowercase lookup keys."""
        return v.strip().lower()
