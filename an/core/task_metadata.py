"""Inline metadata extraction for task bodies.

A task body may carry ``@key(value)`` tokens and ``[[Target]]`` backlinks::

    - [ ] review pull request @due(2024-12-01) @owner(Sam) [[Release Plan]]

Extraction is purely textual: it never touches the file system and never
raises. Tokens are matched in a single pass, recorded in ``raw_tokens`` and
then dispatched through ``METADATA_FIELDS`` to the typed field they feed.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from an.models import TaskMetadata
from an.utils.dates import parse_task_date
from an.utils.patterns import BACKLINK_PATTERN, METADATA_PATTERN


def _set_due(metadata: TaskMetadata, value: str, today: date | None) -> None:
    parsed = parse_task_date(value, today)
    if parsed is not None:
        metadata.due_date = parsed


def _set_scheduled(metadata: TaskMetadata, value: str, today: date | None) -> None:
    parsed = parse_task_date(value, today)
    if parsed is not None:
        metadata.scheduled_date = parsed


def _set_priority(metadata: TaskMetadata, value: str, today: date | None) -> None:
    metadata.priority = value.lower()


def _set_owner(metadata: TaskMetadata, value: str, today: date | None) -> None:
    metadata.owner = value


def _set_project(metadata: TaskMetadata, value: str, today: date | None) -> None:
    metadata.project = value


# Token key -> field setter. Keys not listed are still recorded in raw_tokens.
METADATA_FIELDS: dict[str, Callable[[TaskMetadata, str, date | None], None]] = {
    "due": _set_due,
    "scheduled": _set_scheduled,
    "schedule": _set_scheduled,
    "start": _set_scheduled,
    "priority": _set_priority,
    "owner": _set_owner,
    "assignee": _set_owner,
    "responsible": _set_owner,
    "project": _set_project,
    "group": _set_project,
}


def extract_references(content: str) -> list[str]:
    """Return the distinct backlink targets in ``content``, sorted."""
    refs = {match.group(1).strip() for match in BACKLINK_PATTERN.finditer(content)}
    refs.discard("")
    return sorted(refs)


def normalize_whitespace(content: str) -> str:
    """Collapse runs of spaces inside each line while keeping its indentation.

    Continuation lines of a multi-line task keep their leading whitespace;
    trailing whitespace is dropped and the result is stripped as a whole.
    """
    lines = []
    for line in content.split("\n"):
        body = line.lstrip(" \t")
        indent = line[: len(line) - len(body)]
        collapsed = " ".join(body.split())
        lines.append(indent + collapsed if collapsed else "")
    return "\n".join(lines).strip()


def extract_task_metadata(content: str, today: date | None = None) -> tuple[str, TaskMetadata]:
    """Split a task body into cleaned text and structured metadata.

    Args:
        content: Task body without its checkbox marker.
        today: Reference date for "today"/"tomorrow" (defaults to the local date).

    Returns:
        ``(cleaned, metadata)`` where ``cleaned`` has every ``@key(value)``
        token and backlink removed. Tokens are applied in encounter order,
        so a later owner/project/date token overwrites an earlier one.
        Unparseable dates leave the field unset but stay in ``raw_tokens``.
    """
    metadata = TaskMetadata()
    trimmed = content.strip()

    for match in METADATA_PATTERN.finditer(trimmed):
        key = match.group(1).strip().lower()
        value = match.group(2).strip()
        if not value:
            continue
        metadata.raw_tokens[key] = value
        setter = METADATA_FIELDS.get(key)
        if setter is not None:
            setter(metadata, value, today)

    metadata.references = extract_references(trimmed)

    cleaned = METADATA_PATTERN.sub("", trimmed)
    cleaned = BACKLINK_PATTERN.sub("", cleaned)
    return normalize_whitespace(cleaned), metadata
