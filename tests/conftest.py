"""
Pytest configuration and fixtures for claude-multi testing.

Every test gets its own HOME, registry directory and default Claude
directory so nothing touches the real user configuration.
"""

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from claude_multi.core.models import Instance
from claude_multi.core.registry import RegistryStore
from claude_multi.utils.config import reload_config


class IsolatedEnvironment:
    """Filesystem layout for one test."""

    def __init__(self, root: Path):
        self.root = root
        self.home = root / "home"
        self.metadata_dir = self.home / ".claude-multi"
        self.default_claude_dir = self.home / ".claude"
        self.home.mkdir(parents=True, exist_ok=True)

    @property
    def registry_path(self) -> Path:
        return self.metadata_dir / "config.json"

    def write_json(self, path: Path, data: Any) -> Path:
        """Write JSON to a file, creating parents."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        return path

    def make_default_claude(self, settings: Dict[str, Any] = None) -> Path:
        """Create a default ~/.claude with a settings.json."""
        self.default_claude_dir.mkdir(parents=True, exist_ok=True)
        self.write_json(
            self.default_claude_dir / "settings.json",
            settings if settings is not None else {"theme": "dark"},
        )
        return self.default_claude_dir


@pytest.fixture
def isolated_environment(tmp_path, monkeypatch):
    """Provide completely isolated test environment."""
    env = IsolatedEnvironment(tmp_path)

    monkeypatch.setenv("HOME", str(env.home))
    monkeypatch.setenv("USERPROFILE", str(env.home))
    monkeypatch.setenv("CLAUDE_MULTI_HOME_DIR", str(env.metadata_dir))
    monkeypatch.setenv("CLAUDE_MULTI_CLAUDE__DEFAULT_CONFIG_DIR", str(env.default_claude_dir))
    monkeypatch.chdir(tmp_path)

    reload_config()

    from claude_multi.cli.main import cli_context
    cli_context.reset()

    yield env

    cli_context.reset()
    reload_config()


@pytest.fixture
def store(tmp_path) -> RegistryStore:
    """Registry store in a temporary directory."""
    return RegistryStore(tmp_path / "meta" / "config.json")


@pytest.fixture
def make_instance(tmp_path):
    """Factory for instances rooted in the temporary directory."""

    def _make(name: str, **overrides) -> Instance:
        data = {
            "name": name,
            "config_dir": str(tmp_path / f".claude-{name}"),
            "binary_path": str(tmp_path / "bin" / f"claude-{name}"),
            "created_at": "2025-01-01T00:00:00.000Z",
        }
        data.update(overrides)
        return Instance(**data)

    return _make


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
