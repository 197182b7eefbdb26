"""
Test CLI commands end to end against an isolated home directory.
"""

import json
import os
import stat
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from claude_multi.cli.main import cli
from claude_multi.core.models import Instance
from claude_multi.core.registry import RegistryStore
from claude_multi.core.version import VersionInfo


@pytest.mark.integration
class TestCLI:
    """Test CLI functionality."""

    @pytest.fixture(autouse=True)
    def _environment(self, isolated_environment):
        self.env = isolated_environment
        self.runner = CliRunner()

    def invoke(self, *args, **kwargs):
        return self.runner.invoke(cli, list(args), **kwargs)

    def registry(self) -> RegistryStore:
        return RegistryStore(self.env.registry_path)

    def add(self, name, *extra):
        result = self.invoke(
            "add", name,
            "--binary", str(self.env.root / "bin" / f"claude-{name}"),
            "--skip-prompts",
            *extra,
        )
        assert result.exit_code == 0, result.output
        return result

    def test_help(self):
        result = self.invoke("--help")

        assert result.exit_code == 0
        for command in ("add", "remove", "list", "info", "providers", "mcp", "version", "update"):
            assert command in result.output

    def test_version_option(self):
        result = self.invoke("--version")

        assert result.exit_code == 0
        assert "claude-multi" in result.output

    def test_add_creates_instance(self):
        """Add registers the instance, writes the launcher and the config dir."""
        result = self.add("work")

        assert "Instance 'work' created successfully!" in result.output

        instance = self.registry().get("work")
        assert instance.config_dir == str(self.env.home / ".claude-work")
        assert instance.binary_path == str(self.env.root / "bin" / "claude-work")

        launcher = Path(instance.binary_path)
        assert launcher.is_file()
        assert launcher.stat().st_mode & stat.S_IXUSR
        assert instance.config_dir in launcher.read_text(encoding="utf-8")
        assert Path(instance.config_dir).is_dir()

    def test_add_default_binary_path(self):
        """Without --binary the launcher goes to ~/.local/bin."""
        result = self.invoke("add", "work", "--skip-prompts")

        assert result.exit_code == 0, result.output
        assert (self.env.home / ".local" / "bin" / "claude-work").is_file()

    def test_add_custom_config_dir(self):
        config_dir = self.env.root / "configs" / "work"

        self.add("work", "--config", str(config_dir))

        assert self.registry().get("work").config_dir == str(config_dir)
        assert config_dir.is_dir()

    def test_add_warns_when_bin_dir_not_on_path(self):
        with patch.dict(os.environ, {"PATH": "/usr/bin"}):
            result = self.add("work")

        assert "is not in your PATH" in result.output

    def test_add_duplicate_fails(self):
        """Second add with the same name exits 1 and leaves the registry alone."""
        self.add("work")
        before = self.env.registry_path.read_bytes()

        result = self.invoke("add", "work", "--skip-prompts")

        assert result.exit_code == 1
        assert "already exists" in result.output
        assert self.env.registry_path.read_bytes() == before

    def test_add_invalid_name(self):
        result = self.invoke("add", "bad name", "--skip-prompts")

        assert result.exit_code == 1
        assert self.registry().list() == []

    def test_add_copy_settings(self):
        self.env.make_default_claude({"theme": "light"})

        self.add("work", "--copy-settings")

        settings = self.env.home / ".claude-work" / "settings.json"
        assert json.loads(settings.read_text(encoding="utf-8")) == {"theme": "light"}

    def test_add_copy_all_skips_runtime_state(self):
        default = self.env.make_default_claude()
        (default / "CLAUDE.md").write_text("# memory", encoding="utf-8")
        (default / "history.jsonl").write_text("{}\n", encoding="utf-8")

        self.add("work", "--copy-all")

        config_dir = self.env.home / ".claude-work"
        assert (config_dir / "CLAUDE.md").is_file()
        assert not (config_dir / "history.jsonl").exists()

    def test_add_prompts_for_copy_mode(self):
        """Interactive add asks what to copy when a default config exists."""
        self.env.make_default_claude({"theme": "light"})

        result = self.invoke(
            "add", "work", "--binary", str(self.env.root / "bin" / "claude-work"),
            input="settings\n",
        )

        assert result.exit_code == 0, result.output
        assert (self.env.home / ".claude-work" / "settings.json").is_file()

    def test_add_without_default_config_does_not_prompt(self):
        result = self.invoke("add", "work", "--binary", str(self.env.root / "bin" / "claude-work"))

        assert result.exit_code == 0, result.output
        assert list((self.env.home / ".claude-work").iterdir()) == []

    def test_add_copy_settings_without_default_fails_after_registering(self):
        """Missing source is reported; the instance itself was created."""
        result = self.invoke(
            "add", "work", "--binary", str(self.env.root / "bin" / "claude-work"), "--copy-settings"
        )

        assert result.exit_code == 1
        assert "settings.json" in result.output

    def test_add_copy_mcp(self):
        self.env.make_default_claude({"mcpServers": {"github": {"command": "npx"}}})

        result = self.add("work", "--copy-mcp")

        assert "Copied 1 MCP server(s)" in result.output
        mcp_file = self.env.home / ".claude-work" / ".mcp.json"
        assert json.loads(mcp_file.read_text(encoding="utf-8")) == {"mcpServers": {"github": {"command": "npx"}}}

    def test_add_with_provider(self):
        self.add("glm", "--provider", "GLM", "--api-key", "secret")

        settings = json.loads((self.env.home / ".claude-glm" / "settings.json").read_text(encoding="utf-8"))
        assert settings["env"]["ANTHROPIC_AUTH_TOKEN"] == "secret"
        assert settings["env"]["ANTHROPIC_BASE_URL"] == "https://api.z.ai/api/anthropic"

    def test_add_unknown_provider(self):
        result = self.invoke("add", "x", "--provider", "nope", "--api-key", "k", "--skip-prompts")

        assert result.exit_code == 1
        assert "Unknown provider" in result.output
        assert self.registry().list() == []

    def test_add_provider_requires_key_without_prompts(self):
        result = self.invoke("add", "x", "--provider", "glm", "--skip-prompts")

        assert result.exit_code == 1
        assert "--api-key" in result.output

    def test_add_rolls_back_when_launcher_cannot_be_written(self):
        blocker = self.env.root / "blocker"
        blocker.write_text("", encoding="utf-8")

        result = self.invoke("add", "work", "--binary", str(blocker / "claude-work"), "--skip-prompts")

        assert result.exit_code == 1
        assert self.registry().get("work") is None

    def test_list_empty(self):
        result = self.invoke("list")

        assert result.exit_code == 0
        assert "No instances found." in result.output

    def test_list_and_alias(self):
        self.add("alpha")
        self.add("beta")

        for command in ("list", "ls"):
            result = self.invoke(command)
            assert result.exit_code == 0
            assert "alpha" in result.output
            assert "beta" in result.output

    def test_info(self):
        self.add("work")

        result = self.invoke("info", "work")

        assert result.exit_code == 0
        assert "work" in result.output
        assert "MCP:" in result.output

    def test_info_unknown(self):
        result = self.invoke("info", "nope")

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_remove_with_force(self):
        self.add("work")
        launcher = self.env.root / "bin" / "claude-work"

        result = self.invoke("remove", "work", "--force")

        assert result.exit_code == 0
        assert "Instance 'work' removed successfully!" in result.output
        assert self.registry().get("work") is None
        assert not launcher.exists()
        assert (self.env.home / ".claude-work").is_dir()

    def test_rm_alias_with_confirmation(self):
        self.add("work")

        result = self.invoke("rm", "work", input="y\n")

        assert result.exit_code == 0
        assert self.registry().get("work") is None

    def test_remove_cancelled(self):
        self.add("work")

        result = self.invoke("remove", "work", input="n\n")

        assert result.exit_code == 0
        assert "Cancelled" in result.output
        assert self.registry().get("work") is not None

    def test_remove_tolerates_missing_launcher(self):
        self.add("work")
        (self.env.root / "bin" / "claude-work").unlink()

        result = self.invoke("remove", "work", "-f")

        assert result.exit_code == 0
        assert self.registry().get("work") is None

    def test_remove_unknown(self):
        result = self.invoke("remove", "nope", "--force")

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_providers(self):
        result = self.invoke("providers")

        assert result.exit_code == 0
        assert "glm" in result.output
        assert "minimax" in result.output

    def test_malformed_registry_reports_error(self):
        self.env.metadata_dir.mkdir(parents=True)
        self.env.registry_path.write_text("{oops", encoding="utf-8")

        result = self.invoke("list")

        assert result.exit_code == 1
        assert "Error" in result.output

    @patch("claude_multi.cli.main.check_for_updates")
    def test_version_command(self, mock_check):
        mock_check.return_value = VersionInfo(current="2.0.0", latest="2.1.0", update_available=True)

        result = self.invoke("version")

        assert result.exit_code == 0
        assert "Update available: 2.1.0" in result.output

    @patch("claude_multi.cli.main.update_claude_code")
    @patch("claude_multi.cli.main.check_for_updates")
    def test_update_when_current(self, mock_check, mock_update):
        mock_check.return_value = VersionInfo(current="2.1.0", latest="2.1.0", update_available=False)

        result = self.invoke("update")

        assert result.exit_code == 0
        assert "Already up to date" in result.output
        mock_update.assert_not_called()

    @patch("claude_multi.cli.main.update_claude_code")
    @patch("claude_multi.cli.main.check_for_updates")
    def test_update_runs_install(self, mock_check, mock_update):
        mock_check.return_value = VersionInfo(current="2.0.0", latest="2.1.0", update_available=True)

        result = self.invoke("update")

        assert result.exit_code == 0
        mock_update.assert_called_once_with("@anthropic-ai/claude-code")


@pytest.mark.integration
class TestMCPCommands:
    """Test the mcp command group."""

    @pytest.fixture(autouse=True)
    def _environment(self, isolated_environment):
        self.env = isolated_environment
        self.runner = CliRunner()
        self.store = RegistryStore(isolated_environment.registry_path)

    def register(self, name) -> Path:
        config_dir = self.env.root / f"cfg-{name}"
        config_dir.mkdir()
        self.store.add(Instance(
            name=name,
            config_dir=str(config_dir),
            binary_path=str(self.env.root / "bin" / f"claude-{name}"),
        ))
        return config_dir

    def test_list_requires_one_target(self):
        result = self.runner.invoke(cli, ["mcp", "list"])

        assert result.exit_code == 2

    def test_list_default(self):
        self.env.make_default_claude({"mcpServers": {"github": {"command": "npx"}, "broken": {"type": "http"}}})

        result = self.runner.invoke(cli, ["mcp", "list", "--default"])

        assert result.exit_code == 0
        assert "github" in result.output
        assert "http server has no 'url'" in result.output

    def test_list_instance_without_servers(self):
        self.register("work")

        result = self.runner.invoke(cli, ["mcp", "list", "work"])

        assert result.exit_code == 0
        assert "No MCP servers configured" in result.output

    def test_copy_from_default(self):
        self.env.make_default_claude({"mcpServers": {"github": {"command": "npx"}}})
        config_dir = self.register("work")
        (config_dir / "settings.json").write_text(json.dumps({"theme": "dark"}), encoding="utf-8")

        result = self.runner.invoke(cli, ["mcp", "copy", "work"])

        assert result.exit_code == 0, result.output
        assert "Wrote 1 MCP server(s)" in result.output
        data = json.loads((config_dir / "settings.json").read_text(encoding="utf-8"))
        assert data == {"theme": "dark", "mcpServers": {"github": {"command": "npx"}}}

    def test_copy_between_instances(self):
        source_dir = self.register("src")
        target_dir = self.register("dst")
        (source_dir / ".mcp.json").write_text(json.dumps({"mcpServers": {"a": {"command": "x"}}}), encoding="utf-8")
        (target_dir / ".mcp.json").write_text(json.dumps({"mcpServers": {"b": {"command": "y"}}}), encoding="utf-8")

        result = self.runner.invoke(cli, ["mcp", "copy", "dst", "--from", "src"])

        assert result.exit_code == 0, result.output
        data = json.loads((target_dir / ".mcp.json").read_text(encoding="utf-8"))
        assert data == {"mcpServers": {"a": {"command": "x"}}}

    def test_copy_between_instances_with_policy(self):
        source_dir = self.register("src")
        target_dir = self.register("dst")
        (source_dir / ".mcp.json").write_text(json.dumps({"mcpServers": {"a": {"command": "x"}}}), encoding="utf-8")
        (target_dir / ".mcp.json").write_text(json.dumps({"mcpServers": {"b": {"command": "y"}}}), encoding="utf-8")

        result = self.runner.invoke(cli, ["mcp", "copy", "dst", "--from", "src", "--policy", "keep-target"])

        assert result.exit_code == 0, result.output
        data = json.loads((target_dir / ".mcp.json").read_text(encoding="utf-8"))
        assert set(data["mcpServers"]) == {"a", "b"}

    def test_copy_unknown_source(self):
        self.register("dst")

        result = self.runner.invoke(cli, ["mcp", "copy", "dst", "--from", "nope"])

        assert result.exit_code == 1
        assert "Source instance 'nope' not found" in result.output
