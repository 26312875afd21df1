"""Task listing, toggling and editing on top of the task index."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from an.core.tasks import TaskHandler, toggle_task_in_file
from an.index.service import TaskIndexService, acquire_snapshot
from an.models import TaskItem
from an.utils.editor import open_in_editor
from an.utils.paths import normalize_path, vault_relative

_logger = logging.getLogger(__name__)


class TaskService:
    """Presents indexed tasks as display rows and edits them in place."""

    def __init__(self, vault_dir: Path | str, index: TaskIndexService | None) -> None:
        self.vault_dir = Path(normalize_path(os.path.abspath(vault_dir)))
        self.index = index

    def list(self, sort_type: str = "id", order: str = "asc") -> list[TaskItem]:
        """Return every indexed task as a display row.

        Ids number the tasks from 1 in snapshot order, before sorting.
        Status ordering keeps rows with the same status in id order.

        Raises:
            ValueError: If ``sort_type`` or ``order`` is not recognised.
        """
        snapshot = acquire_snapshot(self.index)

        handler = TaskHandler()
        for task in snapshot.tasks():
            handler.add_task(task.status, task.content, task.path, task.line, task.metadata)

        items = []
        for task_id, task in handler.sorted_tasks(sort_type, order):
            try:
                rel_path = vault_relative(self.vault_dir, task.path)
            except ValueError:
                rel_path = task.path
            items.append(
                TaskItem(
                    id=task_id,
                    content=task.content,
                    completed=task.completed,
                    path=task.path,
                    line=task.line,
                    rel_path=rel_path,
                    due=task.metadata.due_date,
                    scheduled=task.metadata.scheduled_date,
                    priority=task.metadata.priority,
                    owner=task.metadata.owner,
                    project=task.metadata.project,
                    references=list(task.metadata.references),
                )
            )
        return items

    def resolve(self, path: Path | str) -> Path:
        """Resolve a vault-relative or absolute note path."""
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.vault_dir / candidate
        return Path(normalize_path(candidate))

    def toggle(self, path: Path | str, line: int) -> bool:
        """Flip the task checkbox on ``line`` of ``path``.

        Returns:
            True if the task is now completed.

        Raises:
            ValueError: If the line is out of range or is not a task.
            OSError: If the note cannot be read or written.
        """
        note_path = self.resolve(path)
        completed = toggle_task_in_file(note_path, line)
        self._queue(note_path)
        return completed

    def open(self, path: Path | str, line: int | None = None, editor: str | None = None) -> bool:
        """Open a note in ``editor``, at ``line`` when the editor supports it.

        Blocks until the editor exits. A note whose modification time changed
        is queued for re-indexing.

        Returns:
            True if the note was modified.

        Raises:
            FileNotFoundError: If the note does not exist.
            RuntimeError: If the editor cannot be started or fails.
        """
        note_path = self.resolve(path)
        if not note_path.is_file():
            raise FileNotFoundError(f"Note not found: {note_path}")

        mtime_before = note_path.stat().st_mtime
        open_in_editor(note_path, line=line, editor=editor)

        try:
            modified = note_path.stat().st_mtime != mtime_before
        except FileNotFoundError:
            modified = True

        if modified:
            _logger.debug("Note changed in editor: %s", note_path)
            self._queue(note_path)
        return modified

    def _queue(self, note_path: Path) -> None:
        if self.index is not None:
            self.index.queue_update(vault_relative(self.vault_dir, note_path))
