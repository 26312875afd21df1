"""Configuration management for an.

This package provides configuration loading, saving, and management for the an CLI.
The main entry points are:
- get_config(): Get the global configuration instance
- reset_config(): Clear the cached configuration
- load_config(): Load configuration from file
- save_config(): Save configuration to file
"""

from __future__ import annotations

# Re-export I/O functions
from .io import init_config, load_config, save_config

# Re-export models
from .models import (
    DEFAULT_AN_HOME,
    DEFAULT_CONFIG_YAML,
    DEFAULT_EDITOR,
    DEFAULT_VAULT_DIR,
    Config,
    IndexConfig,
)

# Re-export parsers
from .parsers import (
    ConfigError,
    expand_path,
    get_an_home,
    get_config_path,
    get_default_vault_dir,
)

# Singleton config instance
_config: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Loads config on first call, returns cached instance thereafter.
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Reset the cached configuration (useful for testing)."""
    global _config
    _config = None


__all__ = [
    "DEFAULT_AN_HOME",
    "DEFAULT_CONFIG_YAML",
    "DEFAULT_EDITOR",
    "DEFAULT_VAULT_DIR",
    # Models
    "Config",
    "ConfigError",
    "IndexConfig",
    # Parsers
    "expand_path",
    "get_an_home",
    # Singleton
    "get_config",
    "get_config_path",
    "get_default_vault_dir",
    # I/O
    "init_config",
    "load_config",
    "reset_config",
    "save_config",
]
