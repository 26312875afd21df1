"""Shared utilities for CLI commands."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click
from rich.console import Console

from an.config import Config
from an.index.service import TaskIndexService
from an.utils.paths import vault_relative

# Main console for stdout (user-facing output)
console = Console(highlight=False)

# Stderr console for status messages (doesn't interfere with piped output)
stderr_console = Console(file=sys.stderr, highlight=False)


def get_cli_config(ctx: click.Context) -> Config:
    """Return the configuration prepared by the root command."""
    return ctx.find_root().obj["config"]


def require_vault(config: Config) -> Path:
    """Return the vault directory, exiting with an error if it is missing."""
    vault_dir = config.vault_dir
    if not vault_dir.is_dir():
        console.print(f"[red]Error: vault directory not found: {vault_dir}[/red]")
        console.print("[dim]Set vault_dir in the config file or pass --vault.[/dim]")
        raise SystemExit(1)
    return vault_dir


@contextmanager
def open_index(config: Config) -> Iterator[TaskIndexService]:
    """Open a task index over the configured vault, closing it afterwards."""
    index = TaskIndexService(
        config.vault_dir,
        max_tasks=config.index.max_tasks,
        max_notes=config.index.max_notes,
        ignore_dirs=config.index.ignore_dirs,
    )
    try:
        yield index
    finally:
        index.close()


def display_path(vault_dir: Path, path: Path | str) -> str:
    """Format a note path relative to the vault when possible."""
    try:
        return vault_relative(vault_dir, path)
    except ValueError:
        return str(path)
