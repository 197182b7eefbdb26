"""
Configuration management for claude-multi.

Settings come from pydantic models, layered as: defaults,
``CLAUDE_MULTI_*`` environment variables, TOML files and explicit
overrides (values passed to the model win over the environment).
"""

import os
from pathlib import Path
from typing import Any, List, Optional, Union

import toml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from claude_multi.utils.logging import get_logger

logger = get_logger(__name__)

REGISTRY_FILENAME = "config.json"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    enabled: bool = Field(default=True, description="Enable logging completely")
    level: str = Field(default="INFO", description="File logging level")
    console_level: str = Field(default="WARNING", description="Console logging level")
    format_type: str = Field(default="text", description="Log format (text/json)")
    file: Optional[str] = Field(default=None, description="Log file path")
    enable_rich: bool = Field(default=True, description="Enable Rich console output")
    max_bytes: int = Field(default=5 * 1024 * 1024, description="Max log file size")
    backup_count: int = Field(default=3, description="Number of backup files")

    @field_validator("level", "console_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        """Validate logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()

    @field_validator("format_type")
    @classmethod
    def validate_format_type(cls, v: str) -> str:
        """Validate format type."""
        if v not in ["text", "json"]:
            raise ValueError(f"Invalid format type: {v}")
        return v


class ClaudeConfig(BaseModel):
    """Where the shared Claude Code install and its default config live."""

    binary: str = Field(default="claude", description="Delegate binary launched by wrappers")
    default_config_dir: str = Field(
        default="~/.claude",
        description="Default Claude configuration directory used as copy source",
    )
    package: str = Field(
        default="@anthropic-ai/claude-code",
        description="npm package providing the Claude binary",
    )
    timeout: int = Field(default=60, description="Timeout for npm calls in seconds")

    @field_validator("binary")
    @classmethod
    def validate_binary(cls, v: str) -> str:
        """Validate delegate binary."""
        if not v.strip():
            raise ValueError("Delegate binary cannot be empty")
        return v.strip()


class Settings(BaseSettings):
    """Main configuration class."""

    debug: bool = Field(default=False, description="Enable debug mode")
    home_dir: str = Field(
        default="~/.claude-multi",
        description="Directory holding the instance registry",
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    claude: ClaudeConfig = Field(default_factory=ClaudeConfig)

    model_config = SettingsConfigDict(
        env_prefix="CLAUDE_MULTI_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    def get_home_dir(self) -> Path:
        """Get the metadata directory path."""
        return Path(os.path.expanduser(self.home_dir))

    def get_registry_path(self) -> Path:
        """Get the instance registry file path."""
        return self.get_home_dir() / REGISTRY_FILENAME

    def get_default_config_dir(self) -> Path:
        """Get the default Claude configuration directory."""
        return Path(os.path.expanduser(self.claude.default_config_dir))

    def get_log_file(self) -> Optional[Path]:
        """Get log file path."""
        if self.logging.file:
            log_path = Path(os.path.expanduser(self.logging.file))
            if not log_path.is_absolute():
                log_path = self.get_home_dir() / log_path
            return log_path
        return None


class ConfigManager:
    """Configuration manager with hierarchical loading."""

    DEFAULT_CONFIG_FILES = [
        "~/.config/claude-multi/config.toml",
        "./.claude-multi.toml",
    ]

    def __init__(self):
        self._config: Optional[Settings] = None

    def load_config(
        self,
        config_files: Optional[List[Union[str, Path]]] = None,
        **overrides: Any,
    ) -> Settings:
        """
        Load configuration from multiple sources.

        Later files win over earlier ones, overrides win over files.

        Args:
            config_files: List of configuration files to load
            **overrides: Configuration overrides

        Returns:
            Loaded configuration
        """
        if self._config is not None:
            return self._config

        if config_files is None:
            config_files = self.DEFAULT_CONFIG_FILES

        config_data: dict = {}

        for config_file in config_files:
            file_path = Path(os.path.expanduser(str(config_file)))
            if file_path.exists():
                try:
                    file_data = toml.load(file_path)
                    config_data.update(file_data)
                    logger.debug(f"Loaded configuration from {file_path}")
                except (toml.TomlDecodeError, OSError) as e:
                    logger.warning(f"Failed to load config from {file_path}: {e}")

        config_data.update(overrides)

        self._config = Settings(**config_data)

        return self._config

    def get_config(self) -> Settings:
        """Get current configuration."""
        if self._config is None:
            return self.load_config()
        return self._config

    def reload_config(self, **overrides: Any) -> Settings:
        """Reload configuration."""
        self._config = None
        return self.load_config(**overrides)


# Global configuration manager
_config_manager = ConfigManager()

# Convenience functions
load_config = _config_manager.load_config
get_config = _config_manager.get_config
reload_config = _config_manager.reload_config
