"""Tests for an.index.watcher module."""

from __future__ import annotations

from pathlib import Path

import pytest
from watchdog.events import (
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from an.index.service import TaskIndexService
from an.index.watcher import VaultChangeHandler, VaultWatcher


@pytest.fixture
def index(vault: Path) -> TaskIndexService:
    return TaskIndexService(vault)


@pytest.fixture
def handler(index: TaskIndexService, vault: Path) -> VaultChangeHandler:
    return VaultChangeHandler(index, vault, ignore_dirs=["archive"])


class TestVaultChangeHandler:
    """Tests for VaultChangeHandler."""

    def test_note_events_are_queued(self, handler: VaultChangeHandler, index: TaskIndexService, vault: Path):
        handler.dispatch(FileCreatedEvent(str(vault / "new.md")))
        handler.dispatch(FileModifiedEvent(str(vault / "projects" / "plan.md")))
        handler.dispatch(FileDeletedEvent(str(vault / "old.md")))

        assert index.pending() == ["new.md", "old.md", "projects/plan.md"]

    def test_move_queues_both_sides(self, handler: VaultChangeHandler, index: TaskIndexService, vault: Path):
        handler.dispatch(FileMovedEvent(str(vault / "draft.md"), str(vault / "final.md")))
        assert index.pending() == ["draft.md", "final.md"]

    def test_move_out_of_markdown(self, handler: VaultChangeHandler, index: TaskIndexService, vault: Path):
        handler.dispatch(FileMovedEvent(str(vault / "notes.md"), str(vault / "notes.txt")))
        assert index.pending() == ["notes.md"]

    def test_non_markdown_files_ignored(self, handler: VaultChangeHandler, index: TaskIndexService, vault: Path):
        handler.dispatch(FileCreatedEvent(str(vault / "image.png")))
        handler.dispatch(FileModifiedEvent(str(vault / "notes.markdown")))
        assert index.pending() == []

    def test_hidden_and_ignored_dirs_skipped(
        self, handler: VaultChangeHandler, index: TaskIndexService, vault: Path
    ):
        handler.dispatch(FileModifiedEvent(str(vault / ".obsidian" / "workspace.md")))
        handler.dispatch(FileCreatedEvent(str(vault / "archive" / "2023.md")))
        handler.dispatch(DirCreatedEvent(str(vault / ".git")))
        assert index.pending() == []

    def test_outside_vault_skipped(
        self, handler: VaultChangeHandler, index: TaskIndexService, vault: Path, tmp_path: Path
    ):
        handler.dispatch(FileCreatedEvent(str(tmp_path / "elsewhere.md")))
        handler.dispatch(DirModifiedEvent(str(vault)))
        assert index.pending() == []

    def test_directory_events(self, handler: VaultChangeHandler, index: TaskIndexService, vault: Path):
        handler.dispatch(DirCreatedEvent(str(vault / "projects")))
        handler.dispatch(DirDeletedEvent(str(vault / "old")))
        handler.dispatch(DirMovedEvent(str(vault / "a"), str(vault / "b")))
        assert index.pending() == ["a", "b", "old", "projects"]

    def test_directory_modifications_ignored(
        self, handler: VaultChangeHandler, index: TaskIndexService, vault: Path
    ):
        handler.dispatch(DirModifiedEvent(str(vault / "projects")))
        assert index.pending() == []

    def test_on_change_callback(self, index: TaskIndexService, vault: Path):
        seen: list[str] = []
        handler = VaultChangeHandler(index, vault, on_change=seen.append)

        handler.dispatch(FileModifiedEvent(str(vault / "sub" / "note.md")))
        handler.dispatch(FileModifiedEvent(str(vault / "skip.txt")))

        assert seen == ["sub/note.md"]

    def test_queued_event_updates_snapshot(self, index: TaskIndexService, vault: Path, write_note):
        write_note("a.md", "- [ ] first\n")
        handler = VaultChangeHandler(index, vault)
        assert len(index.acquire_snapshot()) == 1

        note = write_note("b.md", "- [ ] second\n")
        handler.dispatch(FileCreatedEvent(str(note)))

        assert [task.content for task in index.acquire_snapshot().tasks()] == ["first", "second"]


class TestVaultWatcher:
    """Tests for VaultWatcher."""

    def test_start_and_stop(self, index: TaskIndexService, vault: Path):
        watcher = VaultWatcher(index, vault)
        assert not watcher.running

        with watcher:
            assert watcher.running
            watcher.start()  # Second start is a no-op
            assert watcher.running

        assert not watcher.running
        watcher.stop()
