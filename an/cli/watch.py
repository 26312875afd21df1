"""Live task index CLI command."""

from __future__ import annotations

import time

import click

from an.cli.utils import console, get_cli_config, open_index, require_vault, stderr_console
from an.index.errors import CapacityExceededError, TaskIndexError
from an.index.service import IndexState, TaskIndexService
from an.index.watcher import VaultWatcher


def register_watch_commands(cli: click.Group) -> None:
    """Register the watch command with the CLI."""
    cli.add_command(watch_cmd)


def _report(index: TaskIndexService) -> None:
    snapshot = index.acquire_snapshot()
    done = sum(1 for task in snapshot.tasks() if task.completed)
    console.print(
        f"[dim]{snapshot.created:%H:%M:%S}[/dim] "
        f"{len(snapshot)} tasks ({done} completed) in {len(snapshot.paths())} notes"
    )


@click.command("watch")
@click.option(
    "--interval",
    type=float,
    default=1.0,
    show_default=True,
    help="Seconds between checks for queued changes",
)
@click.pass_context
def watch_cmd(ctx: click.Context, interval: float) -> None:
    """Keep the task index live and report task counts as notes change.

    Press Ctrl-C to stop.
    """
    config = get_cli_config(ctx)
    vault_dir = require_vault(config)

    with open_index(config) as index:
        try:
            _report(index)
        except (TaskIndexError, OSError) as e:
            console.print(f"[red]Error: {e}[/red]")
            raise SystemExit(1) from None

        stderr_console.print(f"[dim]Watching {vault_dir} (Ctrl-C to stop)[/dim]")
        last_error = ""
        with VaultWatcher(index, vault_dir, config.index.ignore_dirs):
            try:
                while True:
                    time.sleep(interval)
                    if index.state is not IndexState.DIRTY:
                        continue
                    # Failed updates stay queued, so the next pass retries them
                    try:
                        _report(index)
                        last_error = ""
                    except (CapacityExceededError, OSError) as e:
                        if str(e) != last_error:
                            console.print(f"[red]Error: {e}[/red]")
                        last_error = str(e)
            except KeyboardInterrupt:
                stderr_console.print("[dim]Stopped.[/dim]")
