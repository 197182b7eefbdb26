"""
Instance registry persisted as a single JSON document.

The file on disk is the only source of truth: every call re-reads it and
every mutation rewrites it whole. There is no locking, so two concurrent
invocations can still lose an update (last writer wins).
"""

import json
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

from claude_multi.core.exceptions import ConfigIOError, DuplicateNameError
from claude_multi.core.models import FROM_REGISTRY, Instance, Registry
from claude_multi.utils.logging import get_logger

logger = get_logger(__name__)


def write_json_file(path: Path, data: dict) -> None:
    """
    Write a JSON document pretty-printed, replacing the file atomically.

    The document goes to a temporary file in the same directory first and is
    then renamed over ``path``.

    Raises:
        OSError: If the directory or file cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


class RegistryStore:
    """Repository for instance records, parameterized only by its file path."""

    def __init__(self, path: Path):
        """
        Initialize the store.

        Args:
            path: Location of the registry JSON file
        """
        self.path = Path(path)

    @classmethod
    def from_settings(cls, settings=None) -> "RegistryStore":
        """Create a store at the registry path from settings."""
        if settings is None:
            from claude_multi.utils.config import get_config
            settings = get_config()
        return cls(settings.get_registry_path())

    def load(self) -> Registry:
        """
        Load the registry, creating an empty one on first use.

        Returns:
            The registry as currently stored

        Raises:
            ConfigIOError: If the file cannot be read or is not a valid registry
        """
        if not self.path.exists():
            registry = Registry()
            logger.debug(f"No registry at {self.path}, creating an empty one")
            self.save(registry)
            return registry

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConfigIOError(
                f"Registry file {self.path} is not valid JSON: {e}",
                details={"path": str(self.path)},
            ) from e
        except OSError as e:
            raise ConfigIOError(f"Failed to read registry {self.path}: {e}") from e

        try:
            return Registry.model_validate(data, context={FROM_REGISTRY: True})
        except PydanticValidationError as e:
            raise ConfigIOError(
                f"Registry file {self.path} has an invalid structure: {e}",
                details={"path": str(self.path)},
            ) from e

    def save(self, registry: Registry) -> None:
        """
        Persist the whole registry, overwriting any prior content.

        Raises:
            ConfigIOError: If the file cannot be written
        """
        try:
            write_json_file(self.path, registry.to_json_dict())
        except OSError as e:
            raise ConfigIOError(f"Failed to write registry {self.path}: {e}") from e
        logger.debug(f"Saved {len(registry.instances)} instance(s) to {self.path}")

    def add(self, instance: Instance) -> None:
        """
        Register a new instance.

        Args:
            instance: Instance to append

        Raises:
            DuplicateNameError: If an instance with the same name exists
            ConfigIOError: If the registry cannot be read or written
        """
        registry = self.load()

        if registry.get_by_name(instance.name) is not None:
            raise DuplicateNameError(instance.name)

        registry.instances.append(instance)
        self.save(registry)
        logger.info(f"Registered instance '{instance.name}'")

    def remove(self, name: str) -> Optional[Instance]:
        """
        Remove an instance by name.

        Returns:
            The removed instance, or None if no instance has that name
        """
        registry = self.load()

        for index, instance in enumerate(registry.instances):
            if instance.name == name:
                removed = registry.instances.pop(index)
                self.save(registry)
                logger.info(f"Removed instance '{name}' from registry")
                return removed

        logger.debug(f"Instance '{name}' not found in registry")
        return None

    def get(self, name: str) -> Optional[Instance]:
        """Get an instance by name, or None."""
        return self.load().get_by_name(name)

    def list(self) -> List[Instance]:
        """Get all instances in insertion order."""
        return self.load().instances
