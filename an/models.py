"""Data models for an."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from pathlib import Path


class TaskStatus(Enum):
    """Checkbox states recognised on a task list item."""

    UNCHECKED = "unchecked"  # [ ]
    CHECKED = "checked"  # [x]

    @classmethod
    def from_marker(cls, marker: str) -> TaskStatus:
        """Create TaskStatus from a ``[ ]`` / ``[x]`` checkbox marker."""
        if marker == "[x]":
            return cls.CHECKED
        return cls.UNCHECKED

    @property
    def marker(self) -> str:
        """Return the checkbox marker for this status."""
        return "[x]" if self is TaskStatus.CHECKED else "[ ]"


@dataclass
class TaskMetadata:
    """Inline annotations pulled out of a task body.

    Fields are populated from ``@key(value)`` tokens and ``[[Target]]``
    backlinks. ``raw_tokens`` keeps every token value keyed by its
    lower-cased name, including ones whose typed field failed to parse.
    """

    due_date: date | None = None
    scheduled_date: date | None = None
    priority: str = ""
    owner: str = ""
    project: str = ""
    references: list[str] = field(default_factory=list)
    raw_tokens: dict[str, str] = field(default_factory=dict)

    def clone(self) -> TaskMetadata:
        """Return a copy that shares no mutable state with this instance."""
        return TaskMetadata(
            due_date=self.due_date,
            scheduled_date=self.scheduled_date,
            priority=self.priority,
            owner=self.owner,
            project=self.project,
            references=list(self.references),
            raw_tokens=dict(self.raw_tokens),
        )


@dataclass
class Task:
    """A checkbox list item extracted from a note."""

    path: str  # Absolute, normalized path of the owning note
    line: int  # 1-based line where the item begins (0 if unknown)
    status: TaskStatus
    content: str  # Cleaned text without marker, tokens or backlinks
    metadata: TaskMetadata = field(default_factory=TaskMetadata)

    @property
    def completed(self) -> bool:
        return self.status is TaskStatus.CHECKED

    def clone(self) -> Task:
        return Task(
            path=self.path,
            line=self.line,
            status=self.status,
            content=self.content,
            metadata=self.metadata.clone(),
        )


@dataclass
class TaskItem:
    """A display row for a task, as consumed by tables and listings."""

    id: int
    content: str
    completed: bool
    path: str
    line: int
    rel_path: str
    due: date | None = None
    scheduled: date | None = None
    priority: str = ""
    owner: str = ""
    project: str = ""
    references: list[str] = field(default_factory=list)

    @property
    def status(self) -> str:
        return TaskStatus.CHECKED.value if self.completed else TaskStatus.UNCHECKED.value


@dataclass
class NoteEntry:
    """A note as shown in a vault listing."""

    path: Path
    folder: str  # first directory below the vault, "" for top-level notes
    name: str  # path below ``folder``
    title: str
    tags: list[str] = field(default_factory=list)
