"""
Runtime configuration access.

Single source of truth: {storage_root}/config.yaml

The only environment variable read here is PAGETEXT_STORAGE_ROOT, to locate
the repository. Tool paths in config.yaml may reference other variables with
${ENV_VAR} syntax; a .env file in the working directory is loaded first.
"""

import os
from pathlib import Path
from functools import lru_cache

from dotenv import load_dotenv

from .schemas import PagetextConfig

load_dotenv()


def get_storage_root() -> Path:
    """Get the repository storage root from environment."""
    return Path(os.getenv('PAGETEXT_STORAGE_ROOT', '~/Documents/pagetext')).expanduser().resolve()


@lru_cache(maxsize=1)
def get_config() -> PagetextConfig:
    """
    Load and cache the repository configuration.

    Returns PagetextConfig with defaults if config.yaml doesn't exist.
    """
    from .repository_config import load_config
    return load_config(get_storage_root())


def reload_config() -> PagetextConfig:
    """Force reload of config (clears cache)."""
    get_config.cache_clear()
    return get_config()
