"""Note inspection CLI commands."""

from __future__ import annotations

from pathlib import Path

import click
from rich.table import Table

from an.cli.utils import console, display_path, get_cli_config, require_vault
from an.core.note_parser import find_by_fulfillment, find_orphans, list_notes


def register_note_commands(cli: click.Group) -> None:
    """Register all note-related commands with the CLI."""
    cli.add_command(notes_cmd)
    cli.add_command(orphans_cmd)
    cli.add_command(unfulfilled_cmd)


def _print_paths(vault_dir: Path, paths: list[Path], empty_message: str) -> None:
    if not paths:
        console.print(f"[dim]{empty_message}[/dim]")
        return
    for path in paths:
        console.print(display_path(vault_dir, path))


@click.command("orphans")
@click.pass_context
def orphans_cmd(ctx: click.Context) -> None:
    """List notes that do not link to any other note."""
    config = get_cli_config(ctx)
    vault_dir = require_vault(config)

    try:
        orphans = find_orphans(vault_dir, config.index.ignore_dirs)
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    _print_paths(vault_dir, orphans, "No orphan notes found.")


@click.command("unfulfilled")
@click.pass_context
def unfulfilled_cmd(ctx: click.Context) -> None:
    """List notes marked "fulfilled: false"."""
    config = get_cli_config(ctx)
    vault_dir = require_vault(config)

    try:
        notes = find_by_fulfillment(vault_dir, "false", config.index.ignore_dirs)
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    _print_paths(vault_dir, notes, "No unfulfilled notes found.")


@click.command("notes")
@click.option("--tag", "-t", "tag_filter", help="Only notes carrying this front matter tag")
@click.pass_context
def notes_cmd(ctx: click.Context, tag_filter: str | None) -> None:
    """List notes with their folder, title and front matter tags.

    \b
    Examples:
      an notes                 Every note in the vault
      an notes --tag weekly    Notes tagged "weekly"
    """
    config = get_cli_config(ctx)
    vault_dir = require_vault(config)

    try:
        entries = list_notes(vault_dir, config.index.ignore_dirs)
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    if tag_filter:
        entries = [entry for entry in entries if tag_filter in entry.tags]

    if not entries:
        console.print("[dim]No notes found.[/dim]")
        return

    table = Table(show_header=True, box=None, padding=(0, 1))
    table.add_column("Folder", style="cyan")
    table.add_column("Note")
    table.add_column("Title", style="bold")
    table.add_column("Tags")

    for entry in entries:
        tags = ", ".join(entry.tags) if entry.tags else "[dim]No tags[/dim]"
        table.add_row(entry.folder, entry.name, entry.title, tags)

    console.print(table)
    console.print(f"\n[dim]{len(entries)} notes[/dim]")
