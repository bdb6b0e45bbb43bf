"""
Configuration management for pagetext.

Config lives at {storage_root}/config.yaml.

Usage:
    from infra.config import ConfigManager, get_config

    manager = ConfigManager(storage_root)
    config = manager.load()

    # Process-wide, cached
    config = get_config()
"""

from .schemas import (
    ToolsConfig,
    NormalizationConfig,
    DerivativeDefaults,
    PagetextConfig,
    DEFAULT_CONVERT_ARGS,
    resolve_env_vars,
)

from .repository_config import (
    ConfigManager,
    load_config,
)

from .runtime import (
    get_storage_root,
    get_config,
    reload_config,
)


__all__ = [
    # Schemas
    "ToolsConfig",
    "NormalizationConfig",
    "DerivativeDefaults",
    "PagetextConfig",
    "DEFAULT_CONVERT_ARGS",
    "resolve_env_vars",
    # Manager
    "ConfigManager",
    "load_config",
    # Runtime
    "get_storage_root",
    "get_config",
    "reload_config",
]
