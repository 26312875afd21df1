"""Configuration parsing functions for an."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from .models import DEFAULT_AN_HOME, DEFAULT_VAULT_DIR, LOG_LEVELS, IndexConfig


class ConfigError(Exception):
    """Raised when the configuration file holds an invalid value."""

    pass


def expand_path(path: str | Path) -> Path:
    """Expand ~ and environment variables in a path."""
    path_str = str(path)
    # Expand environment variables
    path_str = os.path.expandvars(path_str)
    # Expand ~
    return Path(path_str).expanduser()


def get_an_home() -> Path:
    """Get the directory holding config.yaml and .env."""
    env_home = os.environ.get("AN_HOME")
    if env_home:
        return expand_path(env_home)
    return DEFAULT_AN_HOME


def get_default_vault_dir() -> Path:
    """Get the default vault directory."""
    # Check environment variable first
    env_vault = os.environ.get("AN_VAULT_DIR")
    if env_vault:
        return expand_path(env_vault)
    return DEFAULT_VAULT_DIR


def get_config_path(an_home: Path | None = None) -> Path:
    """Get the path to the config file."""
    if an_home is None:
        an_home = get_an_home()
    return an_home / "config.yaml"


def _parse_positive_int(value: Any, key: str) -> int:
    # bool is an int subclass but "max_tasks: true" is a mistake
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ConfigError(f"{key} must be a positive integer, got {value!r}")
    return value


def _parse_index_config(data: dict[str, Any] | None) -> IndexConfig:
    """Parse the index section."""
    if data is None:
        return IndexConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"index must be a mapping, got {data!r}")

    defaults = IndexConfig()
    ignore_dirs = data.get("ignore_dirs", defaults.ignore_dirs)
    if ignore_dirs is None:
        ignore_dirs = []
    if not isinstance(ignore_dirs, list):
        raise ConfigError(f"index.ignore_dirs must be a list, got {ignore_dirs!r}")

    return IndexConfig(
        max_tasks=_parse_positive_int(data.get("max_tasks", defaults.max_tasks), "index.max_tasks"),
        max_notes=_parse_positive_int(data.get("max_notes", defaults.max_notes), "index.max_notes"),
        ignore_dirs=[str(name) for name in ignore_dirs],
    )


def _parse_log_level(value: Any) -> str:
    level = str(value).upper()
    if level not in LOG_LEVELS:
        raise ConfigError(f"log_level must be one of {', '.join(LOG_LEVELS)}, got {value!r}")
    return level
