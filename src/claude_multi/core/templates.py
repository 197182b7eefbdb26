"""
Bundled provider templates.

A provider template points the Claude binary at an alternative
Anthropic-compatible backend by overlaying environment variables in an
instance's settings.json.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from claude_multi.core.copier import SETTINGS_FILENAME
from claude_multi.core.exceptions import ConfigIOError
from claude_multi.core.models import ProviderSettings, ProviderTemplate
from claude_multi.core.registry import write_json_file
from claude_multi.utils.logging import get_logger

logger = get_logger(__name__)

API_KEY_ENV = "ANTHROPIC_AUTH_TOKEN"

PROVIDER_TEMPLATES: Dict[str, ProviderTemplate] = {
    "glm": ProviderTemplate(
        name="glm",
        display_name="GLM (智谱AI)",
        description="GLM-4.5 and GLM-4.6 models via z.ai",
        settings=ProviderSettings(
            env={
                API_KEY_ENV: "",
                "ANTHROPIC_BASE_URL": "https://api.z.ai/api/anthropic",
                "API_TIMEOUT_MS": "3000000",
                "ANTHROPIC_DEFAULT_HAIKU_MODEL": "glm-4.5-air",
                "ANTHROPIC_DEFAULT_SONNET_MODEL": "glm-4.6",
                "ANTHROPIC_DEFAULT_OPUS_MODEL": "glm-4.6",
                "ANTHROPIC_MODEL": "glm-4.6",
                "ANTHROPIC_SMALL_FAST_MODEL": "glm-4.6-air",
                "ENABLE_THINKING": "true",
                "REASONING_EFFORT": "high",
                "MAX_THINKING_TOKENS": "8000",
                "ENABLE_STREAMING": "true",
                "MAX_OUTPUT_TOKENS": "64000",
            },
            include_co_authored_by=False,
            always_thinking_enabled=False,
        ),
    ),
    "minimax": ProviderTemplate(
        name="minimax",
        display_name="MiniMax",
        description="MiniMax-M2 model via minimax.io",
        settings=ProviderSettings(
            env={
                API_KEY_ENV: "",
                "ANTHROPIC_BASE_URL": "https://api.minimax.io/anthropic",
                "API_TIMEOUT_MS": "3000000",
                "CLAUDE_CODE_DISABLE_NONESSENTIAL_TRAFFIC": "1",
                "ANTHROPIC_MODEL": "MiniMax-M2",
                "ANTHROPIC_SMALL_FAST_MODEL": "MiniMax-M2",
                "ANTHROPIC_DEFAULT_SONNET_MODEL": "MiniMax-M2",
                "ANTHROPIC_DEFAULT_OPUS_MODEL": "MiniMax-M2",
                "ANTHROPIC_DEFAULT_HAIKU_MODEL": "MiniMax-M2",
            },
            include_co_authored_by=False,
            always_thinking_enabled=True,
        ),
    ),
}


def get_available_providers() -> List[ProviderTemplate]:
    """Get all bundled provider templates."""
    return list(PROVIDER_TEMPLATES.values())


def get_provider_template(name: str) -> Optional[ProviderTemplate]:
    """Get a provider template by case-insensitive name."""
    return PROVIDER_TEMPLATES.get(name.lower())


def has_provider_template(name: str) -> bool:
    """Check if a provider template exists."""
    return name.lower() in PROVIDER_TEMPLATES


def apply_provider_template(template: ProviderTemplate, api_key: str) -> Dict[str, Any]:
    """
    Produce settings for a provider with the API key filled in.

    The template itself is never modified.

    Returns:
        Deep copy of the template settings in settings.json layout
    """
    settings = template.settings.model_dump(by_alias=True)
    settings["env"][API_KEY_ENV] = api_key
    return settings


def write_provider_settings(config_dir: Path, settings: Dict[str, Any]) -> Path:
    """
    Merge a provider overlay into an instance's settings.json.

    Keys already in the file are kept unless the overlay sets them; ``env``
    is merged variable by variable.

    Returns:
        Path of the settings file

    Raises:
        ConfigIOError: If an existing settings.json cannot be parsed or the
            file cannot be written
    """
    path = Path(config_dir) / SETTINGS_FILENAME
    current: Dict[str, Any] = {}

    if path.exists():
        try:
            with open(path, "r", encoding="utf-8") as f:
                current = json.load(f)
        except (OSError, json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConfigIOError(f"Cannot update {path}: {e}") from e
        if not isinstance(current, dict):
            raise ConfigIOError(f"Cannot update {path}: top level is not an object")

    merged = dict(current)
    for key, value in settings.items():
        if key == "env" and isinstance(current.get("env"), dict):
            merged["env"] = {**current["env"], **value}
        else:
            merged[key] = value

    try:
        write_json_file(path, merged)
    except OSError as e:
        raise ConfigIOError(f"Failed to write {path}: {e}") from e

    logger.info(f"Applied provider settings to {path}")
    return path
