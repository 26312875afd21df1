"""Task-related CLI commands."""

from __future__ import annotations

import click
from rich.table import Table

from an.cli.utils import console, get_cli_config, open_index, require_vault
from an.core.tasks import SORT_ORDERS, SORT_TYPES
from an.index.errors import TaskIndexError
from an.models import TaskItem
from an.services.tasks import TaskService
from an.utils.dates import format_date


def register_task_commands(cli: click.Group) -> None:
    """Register all task-related commands with the CLI."""
    cli.add_command(tasks_group)


@click.group("tasks")
def tasks_group() -> None:
    """Work with the checkbox tasks in your notes."""


def _render_tasks(items: list[TaskItem]) -> None:
    table = Table(show_header=True, box=None, padding=(0, 1))
    table.add_column("ID", justify="right", style="dim")
    table.add_column("Status", no_wrap=True)
    table.add_column("Content")
    table.add_column("Due", no_wrap=True)
    table.add_column("Owner")
    table.add_column("Priority")
    table.add_column("Project")
    table.add_column("Path", style="dim")

    for item in items:
        status = "[green]checked[/green]" if item.completed else "[yellow]unchecked[/yellow]"
        table.add_row(
            str(item.id),
            status,
            item.content,
            format_date(item.due),
            item.owner,
            item.priority,
            item.project,
            f"{item.rel_path}:{item.line}",
        )

    console.print(table)


@tasks_group.command("list")
@click.option(
    "--sort",
    "sort_type",
    type=click.Choice(SORT_TYPES),
    default="id",
    help="Sort by task id or status (default: id)",
)
@click.option(
    "--order",
    type=click.Choice(SORT_ORDERS),
    default="asc",
    help="Sort direction (default: asc)",
)
@click.option(
    "--all/--open",
    "show_all",
    default=True,
    help="Show all tasks, or only unchecked ones",
)
@click.pass_context
def list_cmd(ctx: click.Context, sort_type: str, order: str, show_all: bool) -> None:
    """List tasks found across the vault.

    \b
    Examples:
      an tasks list                    All tasks in id order
      an tasks list --open             Only unchecked tasks
      an tasks list --sort status --order desc
                                       Unchecked first, then checked
    """
    config = get_cli_config(ctx)
    vault_dir = require_vault(config)

    with open_index(config) as index:
        try:
            items = TaskService(vault_dir, index).list(sort_type, order)
        except (TaskIndexError, OSError) as e:
            console.print(f"[red]Error: {e}[/red]")
            raise SystemExit(1) from None

    if not show_all:
        items = [item for item in items if not item.completed]

    if not items:
        console.print("[dim]No tasks found.[/dim]")
        return

    _render_tasks(items)
    done = sum(1 for item in items if item.completed)
    console.print(f"\n[dim]{len(items)} tasks, {done} completed[/dim]")


@tasks_group.command("toggle")
@click.argument("path")
@click.argument("line", type=int)
@click.pass_context
def toggle_cmd(ctx: click.Context, path: str, line: int) -> None:
    """Check or uncheck the task on LINE of the note at PATH.

    PATH may be absolute or relative to the vault. LINE is 1-based.
    """
    config = get_cli_config(ctx)
    vault_dir = require_vault(config)

    service = TaskService(vault_dir, None)
    try:
        completed = service.toggle(path, line)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None
    except OSError as e:
        console.print(f"[red]Error: cannot update {path}: {e}[/red]")
        raise SystemExit(1) from None

    if completed:
        console.print(f"[green]Checked[/green] {path}:{line}")
    else:
        console.print(f"[yellow]Unchecked[/yellow] {path}:{line}")


@tasks_group.command("open")
@click.argument("path")
@click.argument("line", type=int, required=False)
@click.option("--editor", "-e", help="Editor command (default: configured editor)")
@click.pass_context
def open_cmd(ctx: click.Context, path: str, line: int | None, editor: str | None) -> None:
    """Open the note at PATH in your editor, at LINE when given.

    \b
    Examples:
      an tasks open projects/launch.md 12
      an tasks open inbox.md -e "code --wait"
    """
    config = get_cli_config(ctx)
    vault_dir = require_vault(config)

    service = TaskService(vault_dir, None)
    location = f"{path}:{line}" if line else path
    console.print(f"[dim]Opening {location}...[/dim]")
    try:
        service.open(path, line=line, editor=editor or config.editor)
    except (RuntimeError, OSError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise SystemExit(1) from None
