"""
Test copying the default Claude configuration into new instances.
"""

import json

import pytest

from claude_multi.core.copier import (
    EXCLUDED_NAMES,
    copy_all_from_default,
    copy_settings_from_default,
    has_default_claude_config,
)
from claude_multi.core.exceptions import NotFoundError, SourceNotFoundError


@pytest.fixture
def default_dir(tmp_path):
    """A populated default Claude directory."""
    root = tmp_path / "default"
    (root / "plugins" / "demo").mkdir(parents=True)
    (root / "plugins" / "demo" / "plugin.json").write_text("{}", encoding="utf-8")
    (root / "settings.json").write_text(json.dumps({"theme": "dark"}), encoding="utf-8")
    (root / "CLAUDE.md").write_text("# memory", encoding="utf-8")

    # runtime state
    (root / "history.jsonl").write_text("{}\n", encoding="utf-8")
    (root / ".credentials.json").write_text("{}", encoding="utf-8")
    (root / "projects" / "p1").mkdir(parents=True)
    (root / "todos").mkdir()
    (root / "logs").mkdir()
    (root / "logs" / "run.log").write_text("x", encoding="utf-8")
    (root / "plugins" / "demo" / "cache").mkdir()
    (root / "plugins" / "demo" / "cache" / "blob").write_text("x", encoding="utf-8")
    (root / "plugins" / ".DS_Store").write_text("", encoding="utf-8")
    return root


@pytest.mark.unit
class TestCopySettings:
    """Copying settings.json only."""

    def test_copies_settings_only(self, tmp_path, default_dir):
        """Only settings.json lands in the target."""
        target = tmp_path / "instance"

        copied = copy_settings_from_default(target, default_dir)

        assert copied == target / "settings.json"
        assert json.loads(copied.read_text(encoding="utf-8")) == {"theme": "dark"}
        assert [p.name for p in target.iterdir()] == ["settings.json"]

    def test_missing_settings_raises(self, tmp_path):
        """Absent settings.json raises SourceNotFoundError."""
        empty = tmp_path / "default"
        empty.mkdir()

        with pytest.raises(SourceNotFoundError) as exc_info:
            copy_settings_from_default(tmp_path / "instance", empty)

        assert isinstance(exc_info.value, NotFoundError)
        assert not (tmp_path / "instance").exists()

    def test_overwrites_existing_settings(self, tmp_path, default_dir):
        """An existing target settings.json is replaced."""
        target = tmp_path / "instance"
        target.mkdir()
        (target / "settings.json").write_text('{"old": true}', encoding="utf-8")

        copy_settings_from_default(target, default_dir)

        assert json.loads((target / "settings.json").read_text(encoding="utf-8")) == {"theme": "dark"}


@pytest.mark.unit
class TestCopyAll:
    """Copying the whole tree minus runtime state."""

    def test_copies_configuration(self, tmp_path, default_dir):
        """Configuration files and nested directories are copied."""
        target = tmp_path / "instance"

        copied = copy_all_from_default(target, default_dir)

        assert (target / "settings.json").is_file()
        assert (target / "CLAUDE.md").read_text(encoding="utf-8") == "# memory"
        assert (target / "plugins" / "demo" / "plugin.json").is_file()
        assert [p.name for p in copied] == ["CLAUDE.md", "plugins", "settings.json"]

    def test_skips_excluded_names_at_top_level(self, tmp_path, default_dir):
        """Runtime state at the top level is not copied."""
        target = tmp_path / "instance"

        copy_all_from_default(target, default_dir)

        for name in ("history.jsonl", ".credentials.json", "projects", "todos", "logs"):
            assert not (target / name).exists(), name

    def test_skips_excluded_names_when_nested(self, tmp_path, default_dir):
        """Excluded names are skipped at every depth."""
        target = tmp_path / "instance"

        copy_all_from_default(target, default_dir)

        assert not (target / "plugins" / "demo" / "cache").exists()
        assert not (target / "plugins" / ".DS_Store").exists()

    def test_copies_into_existing_target(self, tmp_path, default_dir):
        """Existing target files are overwritten, others kept."""
        target = tmp_path / "instance"
        target.mkdir()
        (target / "settings.json").write_text("{}", encoding="utf-8")
        (target / "mine.txt").write_text("keep", encoding="utf-8")

        copy_all_from_default(target, default_dir)

        assert json.loads((target / "settings.json").read_text(encoding="utf-8")) == {"theme": "dark"}
        assert (target / "mine.txt").read_text(encoding="utf-8") == "keep"

    def test_custom_exclusions(self, tmp_path, default_dir):
        """Callers can pass their own exclusion set."""
        target = tmp_path / "instance"

        copy_all_from_default(target, default_dir, excluded={"CLAUDE.md"})

        assert not (target / "CLAUDE.md").exists()
        assert (target / "history.jsonl").exists()

    def test_missing_default_dir_raises(self, tmp_path):
        """Absent default directory raises SourceNotFoundError."""
        with pytest.raises(SourceNotFoundError):
            copy_all_from_default(tmp_path / "instance", tmp_path / "nope")

    def test_credentials_never_copied_by_default(self):
        """Credentials are part of the default exclusions."""
        assert ".credentials.json" in EXCLUDED_NAMES


@pytest.mark.unit
class TestDefaultDetection:
    """Detecting the default Claude directory."""

    def test_has_default_claude_config(self, tmp_path, default_dir):
        """Existing directory is detected."""
        assert has_default_claude_config(default_dir) is True
        assert has_default_claude_config(tmp_path / "nope") is False

    def test_uses_configured_default(self, isolated_environment):
        """Without an argument the configured directory is used."""
        assert has_default_claude_config() is False

        isolated_environment.make_default_claude()

        assert has_default_claude_config() is True
