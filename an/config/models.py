"""Configuration dataclass models for an."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path


@dataclass
class IndexConfig:
    """Limits and exclusions for the task index."""

    max_tasks: int = 100_000  # Ceiling on indexed tasks
    max_notes: int = 10_000  # Ceiling on notes holding tasks
    ignore_dirs: list[str] = field(
        default_factory=lambda: [".git", ".obsidian", ".trash"]
    )


@dataclass
class Config:
    """Application configuration."""

    vault_dir: Path
    editor: str
    an_home: Path = field(default_factory=lambda: DEFAULT_AN_HOME)
    index: IndexConfig = field(default_factory=IndexConfig)
    log_level: str = "WARNING"

    @property
    def config_path(self) -> Path:
        """Return path to the config file."""
        return self.an_home / "config.yaml"

    @property
    def env_file(self) -> Path:
        """Return path to the .env file loaded beside the config."""
        return self.an_home / ".env"


# Default configuration values
DEFAULT_AN_HOME = Path.home() / ".an"
DEFAULT_VAULT_DIR = Path.home() / "notes"
DEFAULT_EDITOR = "vim"

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

DEFAULT_CONFIG_YAML = """\
# an configuration

# Root directory of the note vault
vault_dir: ~/notes

# Editor to use (uses $EDITOR if set, otherwise this value)
editor: vim

# Task index limits
index:
  max_tasks: 100000   # Fail instead of indexing more tasks than this
  max_notes: 10000    # Fail instead of tracking more notes than this
  ignore_dirs:        # Directory names skipped when walking the vault
    - .git
    - .obsidian
    - .trash

# Logging level: DEBUG, INFO, WARNING, ERROR
log_level: WARNING
"""
