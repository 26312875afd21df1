"""Configuration I/O functions for an."""

from __future__ import annotations

import os
from dataclasses import asdict
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .models import DEFAULT_CONFIG_YAML, DEFAULT_EDITOR, Config
from .parsers import (
    ConfigError,
    _parse_index_config,
    _parse_log_level,
    expand_path,
    get_an_home,
    get_config_path,
    get_default_vault_dir,
)


def load_config(config_path: Path | None = None) -> Config:
    """Load configuration from YAML file.

    A missing file yields the defaults.

    Environment variables are loaded in this priority order (first wins):
    1. Shell environment variables (already set before an runs)
    2. The .env file beside config.yaml

    Raises:
        ConfigError: If the file is not valid YAML or holds an invalid value.
    """
    if config_path is None:
        config_path = get_config_path()
    an_home = config_path.parent

    # Using override=False means existing env vars are NOT overwritten
    env_file = an_home / ".env"
    if env_file.exists():
        load_dotenv(env_file, override=False)

    if config_path.exists():
        try:
            with config_path.open(encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
    else:
        data = {}

    if not isinstance(data, dict):
        raise ConfigError(f"{config_path} must contain a mapping")

    # If vault_dir not in config file, respect AN_VAULT_DIR via get_default_vault_dir()
    if data.get("vault_dir"):
        vault_dir = expand_path(data["vault_dir"])
    else:
        vault_dir = get_default_vault_dir()

    # Get editor: prefer $EDITOR environment variable
    editor = os.environ.get("EDITOR") or data.get("editor", DEFAULT_EDITOR)

    return Config(
        vault_dir=vault_dir,
        editor=editor,
        an_home=an_home,
        index=_parse_index_config(data.get("index")),
        log_level=_parse_log_level(data.get("log_level", "WARNING")),
    )


def save_config(config: Config) -> None:
    """Save configuration to YAML file."""
    data = {
        "vault_dir": str(config.vault_dir),
        "editor": config.editor,
        "index": asdict(config.index),
        "log_level": config.log_level,
    }

    config.config_path.parent.mkdir(parents=True, exist_ok=True)
    with config.config_path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False)


def init_config(vault_dir: Path | None = None, an_home: Path | None = None) -> Config:
    """Initialize configuration for first-time setup.

    Writes the default config file if there is none and creates the vault.
    """
    if an_home is None:
        an_home = get_an_home()
    if vault_dir is None:
        vault_dir = get_default_vault_dir()

    config_path = an_home / "config.yaml"
    an_home.mkdir(parents=True, exist_ok=True)

    if not config_path.exists():
        # Parse default config and update vault_dir to the actual path
        default_data = yaml.safe_load(DEFAULT_CONFIG_YAML)
        default_data["vault_dir"] = str(vault_dir)
        with config_path.open("w", encoding="utf-8") as f:
            f.write("# an configuration\n\n")
            yaml.safe_dump(default_data, f, default_flow_style=False, sort_keys=False)

    config = load_config(config_path)
    config.vault_dir.mkdir(parents=True, exist_ok=True)
    return config
