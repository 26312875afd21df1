"""In-memory task index for a vault.

The index caches every task in the vault keyed by note path. It is built
lazily by walking the vault on the first snapshot request and patched
incrementally afterwards: callers report changed files with
``queue_update()`` and the next ``acquire_snapshot()`` re-parses just those
files (or rebuilds everything when a directory changed).

Snapshots are deep copies, so they can be kept and read after the index
has moved on. Both ceilings (tasks and tracked notes) are checked before a
new cache is committed; a rebuild or merge that would exceed them leaves
the previous cache in place and raises ``CapacityExceededError``.
"""

from __future__ import annotations

import logging
import os
import posixpath
import stat as stat_module
import threading
from collections.abc import Callable, Iterable
from datetime import datetime
from enum import Enum

from an.core.note_parser import NOTE_EXTENSION, NoteParser
from an.index.errors import (
    CapacityExceededError,
    IndexClosedError,
    IndexUnavailableError,
    TaskIndexError,
)
from an.models import Task
from an.utils.locks import ReadWriteLock
from an.utils.paths import is_within, normalize_path, vault_relative

_logger = logging.getLogger(__name__)

DEFAULT_MAX_TASKS = 100_000
DEFAULT_MAX_NOTES = 10_000

ParserFactory = Callable[[str], NoteParser]


class IndexState(Enum):
    """Lifecycle of a TaskIndexService."""

    UNINITIALIZED = "uninitialized"  # Nothing built yet
    FRESH = "fresh"  # Cache built, nothing queued
    DIRTY = "dirty"  # Cache built, updates queued
    CLOSED = "closed"


class Snapshot:
    """Point-in-time copy of the task index."""

    def __init__(self, tasks: dict[str, list[Task]], total: int, created: datetime) -> None:
        self._tasks = tasks
        self._total = total
        self._created = created

    @property
    def created(self) -> datetime:
        return self._created

    @property
    def total(self) -> int:
        return self._total

    def __len__(self) -> int:
        return self._total

    def paths(self) -> list[str]:
        """Return the note paths in the snapshot, sorted."""
        return sorted(path for path, entries in self._tasks.items() if entries)

    def tasks(self) -> list[Task]:
        """Return all tasks ordered by path, then line, then content.

        The returned tasks are copies; mutating them does not affect the
        snapshot.
        """
        ordered: list[Task] = []
        for path in sorted(self._tasks):
            entries = sorted(self._tasks[path], key=lambda task: (task.line, task.content))
            ordered.extend(task.clone() for task in entries)
        return ordered

    def tasks_for(self, path: str) -> list[Task]:
        entries = self._tasks.get(normalize_path(path), [])
        return [task.clone() for task in sorted(entries, key=lambda task: (task.line, task.content))]


class TaskIndexService:
    """Owns the task cache for one vault.

    Args:
        vault: Root directory of the vault.
        max_tasks: Ceiling on the number of indexed tasks.
        max_notes: Ceiling on the number of notes holding tasks.
        ignore_dirs: Directory names skipped during walks and updates.
        stat: File status primitive used for incremental updates.
        now: Clock used to stamp snapshots.
        parser_factory: Builds a NoteParser for a root path.

    Example:
        with TaskIndexService(vault_dir) as index:
            snapshot = index.acquire_snapshot()
            index.queue_update("projects/launch.md")
            snapshot = index.acquire_snapshot()
    """

    def __init__(
        self,
        vault: os.PathLike[str] | str,
        *,
        max_tasks: int = DEFAULT_MAX_TASKS,
        max_notes: int = DEFAULT_MAX_NOTES,
        ignore_dirs: Iterable[str] = (),
        stat: Callable[[str], os.stat_result] = os.stat,
        now: Callable[[], datetime] = datetime.now,
        parser_factory: ParserFactory | None = None,
    ) -> None:
        vault_path = os.fspath(vault)
        self.vault = normalize_path(os.path.abspath(vault_path)) if vault_path.strip() else ""
        self.max_tasks = max_tasks
        self.max_notes = max_notes
        self.ignore_dirs = frozenset(ignore_dirs)

        self._stat = stat
        self._now = now
        self._parser_factory = parser_factory or self._default_parser

        # Guards _cache, _total, _pending and _closed
        self._lock = ReadWriteLock()
        # One rebuild/merge pass at a time
        self._refresh_lock = threading.Lock()

        self._cache: dict[str, list[Task]] | None = None
        self._total = 0
        self._pending: set[str] = set()
        self._closed = False

    def _default_parser(self, root: str) -> NoteParser:
        return NoteParser(root, ignore_dirs=self.ignore_dirs)

    def __enter__(self) -> TaskIndexService:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def state(self) -> IndexState:
        with self._lock.read():
            if self._closed:
                return IndexState.CLOSED
            if self._cache is None:
                return IndexState.UNINITIALIZED
            if self._pending:
                return IndexState.DIRTY
            return IndexState.FRESH

    def pending(self) -> list[str]:
        """Return the queued relative paths, sorted."""
        with self._lock.read():
            return sorted(self._pending)

    def acquire_snapshot(self) -> Snapshot:
        """Bring the index up to date and return a copy of it.

        Raises:
            IndexClosedError: If the service has been closed.
            IndexUnavailableError: If the index could not be built.
            CapacityExceededError: If the vault exceeds a ceiling.
            OSError: If walking the vault or reading a queued file fails.
        """
        self._ensure_fresh()

        with self._lock.read():
            if self._closed:
                raise IndexClosedError()
            if self._cache is None:
                raise IndexUnavailableError()
            tasks = {path: [task.clone() for task in entries] for path, entries in self._cache.items()}
            total = self._total

        return Snapshot(tasks, total, self._now())

    def queue_update(self, rel: str) -> None:
        """Mark a vault-relative path for re-examination on the next snapshot."""
        trimmed = rel.strip() if rel else ""
        if not trimmed:
            return
        normalized = posixpath.normpath(trimmed.replace("\\", "/"))

        with self._lock.write():
            if self._closed:
                return
            self._pending.add(normalized)

    def close(self) -> None:
        """Drop the cache and pending updates. Safe to call more than once."""
        with self._lock.write():
            if self._closed:
                return
            self._closed = True
            self._cache = None
            self._pending = set()
            self._total = 0
        _logger.debug("Closed task index for %s", self.vault)

    # Freshness

    def _ensure_fresh(self) -> None:
        with self._refresh_lock:
            with self._lock.read():
                closed = self._closed
                needs_rebuild = self._cache is None

            if closed:
                raise IndexClosedError()

            if needs_rebuild:
                self._rebuild()

            self._apply_pending()

    def _consume_pending(self) -> set[str]:
        with self._lock.write():
            drained, self._pending = self._pending, set()
        return drained

    def _requeue(self, rels: Iterable[str]) -> None:
        with self._lock.write():
            if not self._closed:
                self._pending.update(rels)

    def _rebuild(self) -> None:
        # Everything queued so far is covered by the walk
        drained = self._consume_pending()
        try:
            cache, total = self._parse_vault()
        except (OSError, TaskIndexError):
            self._requeue(drained)
            raise

        with self._lock.write():
            if self._closed:
                raise IndexClosedError()
            self._cache = cache
            self._total = total

        _logger.debug("Rebuilt task index for %s: %d tasks in %d notes", self.vault, total, len(cache))

    def _apply_pending(self) -> None:
        rels = self._consume_pending()
        if not rels:
            return

        try:
            changes = self._collect_changes(rels)
        except (OSError, TaskIndexError):
            self._requeue(rels)
            raise

        if changes is None:
            _logger.debug("Directory change under %s, rebuilding task index", self.vault)
            try:
                self._rebuild()
            except (OSError, TaskIndexError):
                self._requeue(rels)
                raise
            return

        updates, removals = changes
        self._merge(rels, updates, removals)

    def _collect_changes(
        self, rels: Iterable[str]
    ) -> tuple[dict[str, list[Task]], list[str]] | None:
        """Re-parse the queued paths.

        Returns ``(updates, removals)``, or None when a queued path is a
        directory and only a full rebuild can reconcile it.
        """
        updates: dict[str, list[Task]] = {}
        removals: list[str] = []

        for rel in sorted(rels):
            path = normalize_path(os.path.join(self.vault, rel))
            if not path or not is_within(self.vault, path):
                _logger.debug("Ignoring update outside vault: %s", rel)
                continue
            if self._is_ignored(path):
                continue

            try:
                info = self._stat(path)
            except FileNotFoundError:
                removals.append(path)
                continue

            if stat_module.S_ISDIR(info.st_mode):
                return None

            if os.path.splitext(path)[1] != NOTE_EXTENSION:
                removals.append(path)
                continue

            try:
                updates[path] = self._parse_file(path)
            except FileNotFoundError:
                # Deleted between stat and read
                removals.append(path)

        return updates, removals

    def _merge(
        self,
        rels: set[str],
        updates: dict[str, list[Task]],
        removals: list[str],
    ) -> None:
        with self._lock.write():
            if self._closed:
                raise IndexClosedError()

            cache = dict(self._cache or {})
            total = self._total

            for path in removals:
                prefix = path + os.sep
                for key in [k for k in cache if k == path or k.startswith(prefix)]:
                    total -= len(cache.pop(key))

            for path, entries in updates.items():
                existing = cache.pop(path, None)
                if existing is not None:
                    total -= len(existing)
                if entries:
                    cache[path] = entries
                    total += len(entries)

            total = max(total, 0)

            try:
                self._check_capacity(total, len(cache))
            except CapacityExceededError:
                self._pending.update(rels)
                raise

            self._cache = cache
            self._total = total

        _logger.debug(
            "Applied %d updates and %d removals to task index (%d tasks)",
            len(updates),
            len(removals),
            total,
        )

    # Parsing

    def _parse_vault(self) -> tuple[dict[str, list[Task]], int]:
        if not self.vault:
            raise IndexUnavailableError("vault directory cannot be empty")

        parser = self._parser_factory(self.vault)
        parser.walk()

        cache: dict[str, list[Task]] = {}
        total = 0
        for task in parser.task_handler.tasks.values():
            entry = _to_index_task(task)
            cache.setdefault(entry.path, []).append(entry)
            total += 1
            if total > self.max_tasks:
                self._check_capacity(total, len(cache))

        self._check_capacity(total, len(cache))
        return cache, total

    def _parse_file(self, path: str) -> list[Task]:
        parser = self._parser_factory(path)
        parser.parse(path)
        return [
            _to_index_task(task)
            for task in parser.task_handler.tasks.values()
            if normalize_path(task.path) == path
        ]

    def _check_capacity(self, tasks: int, notes: int) -> None:
        if tasks > self.max_tasks:
            _logger.warning("Task index for %s exceeds %d tasks", self.vault, self.max_tasks)
            raise CapacityExceededError("tasks", tasks, self.max_tasks)
        if notes > self.max_notes:
            _logger.warning("Task index for %s exceeds %d notes", self.vault, self.max_notes)
            raise CapacityExceededError("notes", notes, self.max_notes)

    def _is_ignored(self, path: str) -> bool:
        if not self.ignore_dirs:
            return False
        parts = vault_relative(self.vault, path).split("/")
        return any(part in self.ignore_dirs for part in parts)


def _to_index_task(task: Task) -> Task:
    entry = task.clone()
    entry.path = normalize_path(task.path)
    return entry


def acquire_snapshot(service: TaskIndexService | None) -> Snapshot:
    """Take a snapshot from ``service``, failing cleanly when there is none."""
    if service is None:
        raise IndexUnavailableError()
    return service.acquire_snapshot()
