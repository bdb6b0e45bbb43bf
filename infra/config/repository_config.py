"""
Repository configuration loading and management.

The config is stored at {storage_root}/config.yaml and contains:
- Tool executables (with env var expansion) and invocation timeout
- The image normalization profile
- Derivative defaults (language, version baseline, concurrency)
"""

from pathlib import Path
from typing import Any, Optional
import yaml

from .schemas import PagetextConfig


CONFIG_FILENAME = "config.yaml"


class ConfigManager:
    """
    Manages the repository-level configuration.

    Usage:
        manager = ConfigManager(storage_root)
        config = manager.load()  # Returns PagetextConfig
        manager.save(config)     # Persists to disk
    """

    def __init__(self, storage_root: Path):
        self.storage_root = Path(storage_root).expanduser().resolve()
        self.config_path = self.storage_root / CONFIG_FILENAME

    def exists(self) -> bool:
        return self.config_path.exists()

    def load(self) -> PagetextConfig:
        """
        Load config from disk.

        Returns PagetextConfig with defaults if file doesn't exist.
        """
        if not self.config_path.exists():
            return PagetextConfig.with_defaults()

        with open(self.config_path, "r") as f:
            data = yaml.safe_load(f) or {}

        return PagetextConfig.model_validate(data)

    def save(self, config: PagetextConfig) -> None:
        """
        Save config to disk.

        Creates storage_root directory if needed.
        """
        self.storage_root.mkdir(parents=True, exist_ok=True)

        data = config.model_dump(mode="json", exclude_none=True)

        with open(self.config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

    def init(self, force: bool = False) -> PagetextConfig:
        """Write a default config file unless one exists (or force is set)."""
        if self.exists() and not force:
            return self.load()

        config = PagetextConfig.with_defaults()
        self.save(config)
        return config

    def update(self, updates: dict) -> PagetextConfig:
        """
        Update specific fields in the config.

        Args:
            updates: Dict of fields to update (can be nested)

        Returns:
            Updated PagetextConfig
        """
        config = self.load()
        data = config.model_dump(mode="json")

        _deep_merge(data, updates)

        new_config = PagetextConfig.model_validate(data)
        self.save(new_config)
        return new_config

    def set(self, dotted_key: str, value: Any) -> PagetextConfig:
        """Set one value addressed as `section.field` (e.g. tools.tesseract)."""
        updates: dict = {}
        cursor = updates
        parts = dotted_key.split(".")
        for part in parts[:-1]:
            cursor = cursor.setdefault(part, {})
        cursor[parts[-1]] = value
        return self.update(updates)


def _deep_merge(base: dict, updates: dict) -> None:
    """
    Deep merge updates into base dict (mutates base).
    """
    for key, value in updates.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value


def load_config(storage_root: Path) -> PagetextConfig:
    """
    Convenience function to load the repository config.

    Args:
        storage_root: Root directory for the repository

    Returns:
        PagetextConfig instance
    """
    manager = ConfigManager(storage_root)
    return manager.load()
