"""Tag-related CLI commands."""

from __future__ import annotations

import click
from rich.table import Table

from an.cli.utils import console, get_cli_config, require_vault
from an.core.note_parser import NoteParser


def register_tags_commands(cli: click.Group) -> None:
    """Register all tag-related commands with the CLI."""
    cli.add_command(tags_cmd)


@click.command("tags")
@click.option(
    "--sort",
    type=click.Choice(["count", "alpha"]),
    default="count",
    help="Sort order (default: by count)",
)
@click.option(
    "--order",
    type=click.Choice(["asc", "desc"]),
    default=None,
    help="Sort direction (default: desc for count, asc for alpha)",
)
@click.option("--limit", "-l", type=int, help="Limit number of tags shown")
@click.pass_context
def tags_cmd(ctx: click.Context, sort: str, order: str | None, limit: int | None) -> None:
    """List tags with usage counts.

    Tags are the list items under a "tags:" label in a note, including
    a "tags:" list in front matter.

    \b
    Examples:
      an tags                   List all tags by count
      an tags --sort alpha      Alphabetical order
      an tags --limit 10        Top 10 tags
    """
    config = get_cli_config(ctx)
    vault_dir = require_vault(config)

    parser = NoteParser(vault_dir, ignore_dirs=config.index.ignore_dirs)
    try:
        parser.walk()
    except OSError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None

    handler = parser.tag_handler
    if not handler.tag_counts:
        console.print("[dim]No tags found.[/dim]")
        return

    if sort == "alpha":
        tag_stats = handler.alphabetical()
        if order == "desc":
            tag_stats.reverse()
    else:
        tag_stats = handler.sorted_tag_counts(order or "desc")

    # Apply limit
    if limit:
        tag_stats = tag_stats[:limit]

    console.print(f"[bold]Tags[/bold] ({len(handler)} total)\n")

    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column("Tag", style="cyan")
    table.add_column("Count", justify="right")
    for tag, count in tag_stats:
        table.add_row(tag, str(count))

    console.print(table)
