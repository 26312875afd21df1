"""CLI package for an."""

from __future__ import annotations

import dataclasses
import logging
import sys
from pathlib import Path

# Ensure stdout handles Unicode when piped (e.g., `an tasks list | more`)
if hasattr(sys.stdout, "reconfigure"):
    sys.stdout.reconfigure(encoding="utf-8", errors="replace")

import click

from an import __version__
from an.cli.notes import register_note_commands
from an.cli.tags import register_tags_commands
from an.cli.tasks import register_task_commands
from an.cli.utils import console
from an.cli.watch import register_watch_commands
from an.config import ConfigError, expand_path, get_config

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"


def setup_logging(level: str, verbose: int) -> None:
    """Send log records to stderr at the configured level.

    Each -v lowers the threshold: one for INFO, two for DEBUG.
    """
    if verbose >= 2:
        level = "DEBUG"
    elif verbose == 1:
        level = "INFO"
    logging.basicConfig(
        level=getattr(logging, level, logging.WARNING),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


@click.group()
@click.version_option(version=__version__, prog_name="an")
@click.option(
    "--vault",
    type=click.Path(file_okay=False, path_type=Path),
    help="Vault directory (overrides the config file)",
)
@click.option("--verbose", "-v", count=True, help="Increase log output (-v info, -vv debug)")
@click.pass_context
def cli(ctx: click.Context, vault: Path | None, verbose: int) -> None:
    """Atomic notes: tasks, tags and links across a Markdown vault."""
    try:
        config = get_config()
    except ConfigError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    if vault is not None:
        config = dataclasses.replace(config, vault_dir=expand_path(vault))

    setup_logging(config.log_level, verbose)

    ctx.ensure_object(dict)
    ctx.obj["config"] = config


register_task_commands(cli)
register_tags_commands(cli)
register_note_commands(cli)
register_watch_commands(cli)


def main() -> None:
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
