"""Feed filesystem changes in a vault into the task index."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable, Iterable
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from an.core.note_parser import NOTE_EXTENSION
from an.index.service import TaskIndexService
from an.utils.paths import is_within, normalize_path, vault_relative

_logger = logging.getLogger(__name__)


class VaultChangeHandler(FileSystemEventHandler):
    """Queue vault-relative paths on the index for every relevant change.

    Notes and directories are forwarded; a directory path makes the index
    rebuild on its next snapshot. Hidden directories and directories named
    in ``ignore_dirs`` are skipped.
    """

    def __init__(
        self,
        index: TaskIndexService,
        vault_dir: Path | str,
        ignore_dirs: Iterable[str] = (),
        on_change: Callable[[str], None] | None = None,
    ) -> None:
        super().__init__()
        self.index = index
        self.vault_dir = normalize_path(os.path.abspath(vault_dir))
        self.ignore_dirs = set(ignore_dirs)
        self.on_change = on_change

    def _relative(self, raw_path: str | bytes, is_directory: bool) -> str | None:
        path = normalize_path(os.fsdecode(raw_path))
        if not is_within(self.vault_dir, path):
            return None

        rel = vault_relative(self.vault_dir, path)
        if rel == ".":
            return None

        parts = rel.split("/")
        dirs = parts if is_directory else parts[:-1]
        if any(part.startswith(".") or part in self.ignore_dirs for part in dirs):
            return None
        if not is_directory and not rel.endswith(NOTE_EXTENSION):
            return None
        return rel

    def _queue(self, raw_path: str | bytes, is_directory: bool) -> None:
        rel = self._relative(raw_path, is_directory)
        if rel is None:
            return
        _logger.debug("Queueing %s", rel)
        self.index.queue_update(rel)
        if self.on_change is not None:
            self.on_change(rel)

    def on_created(self, event: FileSystemEvent) -> None:
        self._queue(event.src_path, event.is_directory)

    def on_modified(self, event: FileSystemEvent) -> None:
        # Directory mtimes change whenever a child does; the child has its own event
        if not event.is_directory:
            self._queue(event.src_path, False)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._queue(event.src_path, event.is_directory)

    def on_moved(self, event: FileSystemEvent) -> None:
        self._queue(event.src_path, event.is_directory)
        dest_path = getattr(event, "dest_path", "")
        if dest_path:
            self._queue(dest_path, event.is_directory)


class VaultWatcher:
    """Runs a watchdog observer over a vault for the lifetime of the watcher.

    Example:
        with TaskIndexService(vault) as index, VaultWatcher(index, vault):
            ...  # index stays current while the block runs
    """

    def __init__(
        self,
        index: TaskIndexService,
        vault_dir: Path | str,
        ignore_dirs: Iterable[str] = (),
        on_change: Callable[[str], None] | None = None,
    ) -> None:
        self.vault_dir = Path(vault_dir)
        self.handler = VaultChangeHandler(index, vault_dir, ignore_dirs, on_change)
        self._observer = None

    @property
    def running(self) -> bool:
        return self._observer is not None

    def start(self) -> None:
        if self._observer is not None:
            return
        observer = Observer()
        observer.schedule(self.handler, str(self.vault_dir), recursive=True)
        observer.start()
        self._observer = observer
        _logger.info("Watching: %s", self.vault_dir)

    def stop(self, timeout: float = 5.0) -> None:
        if self._observer is None:
            return
        observer, self._observer = self._observer, None
        observer.stop()
        observer.join(timeout)
        _logger.info("Stopped watching: %s", self.vault_dir)

    def __enter__(self) -> VaultWatcher:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
