"""Task recognition, bookkeeping and in-file toggling for an."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from an.core.task_metadata import extract_task_metadata
from an.models import Task, TaskMetadata, TaskStatus
from an.utils.patterns import CHECKBOX_PATTERN, TAGS_MARKER

_logger = logging.getLogger(__name__)

CHECKBOX_MARKERS = ("[ ]", "[x]")

SORT_ORDERS = ("asc", "desc")
SORT_TYPES = ("id", "status")


def _check_order(order: str) -> None:
    if order not in SORT_ORDERS:
        raise ValueError(
            f"Invalid sort order {order!r}. Use 'asc' for ascending or 'desc' for descending."
        )


class TaskHandler:
    """Collects tasks recognised while walking notes.

    Tasks are numbered from 1 in discovery order. ``today`` pins the
    reference date used for "today"/"tomorrow" metadata values.
    """

    def __init__(self, today: date | None = None) -> None:
        self.tasks: dict[int, Task] = {}
        self.next_id = 1
        self.today = today

    def parse_task(self, content: str, path: str = "", line: int = 0) -> Task | None:
        """Record ``content`` as a task if it is a non-empty checkbox item.

        ``content`` is the trimmed text of a list item. It is a task iff it
        starts with ``[ ]`` or ``[x]`` and has something besides whitespace
        after the marker. Items whose cleaned text is empty, or that are
        really a "tags:" label, are discarded.
        """
        if not content.startswith(CHECKBOX_MARKERS) or not content[3:].strip():
            return None

        status = TaskStatus.from_marker(content[:3])
        cleaned, metadata = extract_task_metadata(content[3:], today=self.today)
        if not cleaned:
            return None
        if cleaned.lower().startswith(TAGS_MARKER):
            return None

        return self.add_task(status, cleaned, path, line, metadata)

    def add_task(
        self,
        status: TaskStatus,
        content: str,
        path: str,
        line: int,
        metadata: TaskMetadata | None = None,
    ) -> Task:
        task = Task(
            path=path,
            line=line,
            status=status,
            content=content,
            metadata=metadata if metadata is not None else TaskMetadata(),
        )
        self.tasks[self.next_id] = task
        self.next_id += 1
        return task

    def sort_by_id(self, order: str = "asc") -> list[tuple[int, Task]]:
        """Return ``(id, task)`` pairs ordered by id."""
        _check_order(order)
        return sorted(self.tasks.items(), key=lambda item: item[0], reverse=order == "desc")

    def sort_by_status(self, order: str = "asc") -> list[tuple[int, Task]]:
        """Return ``(id, task)`` pairs ordered by status, ties broken by ascending id."""
        _check_order(order)
        by_id = sorted(self.tasks.items(), key=lambda item: item[0])
        # Stable sort keeps ascending ids within each status group
        return sorted(by_id, key=lambda item: item[1].status.value, reverse=order == "desc")

    def sorted_tasks(self, sort_type: str = "id", order: str = "asc") -> list[tuple[int, Task]]:
        if sort_type == "id":
            return self.sort_by_id(order)
        if sort_type == "status":
            return self.sort_by_status(order)
        raise ValueError(f"Invalid sort type {sort_type!r}. Use 'id' or 'status'.")


def toggle_task_in_file(path: Path, line_number: int) -> bool:
    """Flip the checkbox of the task on ``line_number`` (1-based).

    ``[ ]`` becomes ``[x]`` and vice versa. Line endings and every other
    line are written back untouched.

    Returns:
        True if the task is now checked, False if it is now unchecked.

    Raises:
        ValueError: If the line is out of range or holds no task checkbox.
        OSError: If the file cannot be read or written.
    """
    # newline="" keeps \r\n endings intact through the round trip
    with path.open(encoding="utf-8", newline="") as f:
        content = f.read()
    lines = content.split("\n")

    if line_number < 1 or line_number > len(lines):
        raise ValueError(f"line {line_number} out of range")

    target = lines[line_number - 1]
    match = CHECKBOX_PATTERN.match(target)
    if not match:
        raise ValueError(f"no markdown task found on line {line_number}")

    checked = match.group("state") != "x"
    marker = TaskStatus.CHECKED.marker if checked else TaskStatus.UNCHECKED.marker
    lines[line_number - 1] = match.group("prefix") + marker + target[match.end() :]

    with path.open("w", encoding="utf-8", newline="") as f:
        f.write("\n".join(lines))
    _logger.debug("Toggled %s:%d -> %s", path, line_number, marker)
    return checked
