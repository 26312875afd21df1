"""Shared fixtures for an tests."""

from __future__ import annotations

from collections.abc import Callable, Generator
from datetime import date
from pathlib import Path

import pytest
from click.testing import CliRunner

from an import config as config_module
from an.cli import utils as cli_utils
from an.config import Config, IndexConfig


@pytest.fixture
def vault(tmp_path: Path) -> Path:
    """Create an empty vault directory."""
    vault_dir = tmp_path / "vault"
    vault_dir.mkdir()
    return vault_dir


@pytest.fixture
def write_note(vault: Path) -> Callable[[str, str], Path]:
    """Factory fixture to create note files inside the vault."""

    def _write_note(rel_path: str, content: str) -> Path:
        note_path = vault / rel_path
        note_path.parent.mkdir(parents=True, exist_ok=True)
        note_path.write_text(content, encoding="utf-8")
        return note_path

    return _write_note


@pytest.fixture
def sample_note_content() -> str:
    """Sample note with front matter tags, tasks and links."""
    return """\
---
title: Release Plan
tags:
  - project/release
  - weekly
---

# Release Plan

Coordinate with [[Team Hub]] before shipping.

## Tasks

- [ ] review pull request @due(2024-12-01) @owner(Sam) [[Release Plan]]
- [x] tag the release @priority(high)
- [ ] update changelog
  @project(automation)
- [ ]

```markdown
- [ ] not a task, just an example
```
"""


@pytest.fixture
def vault_config(vault: Path, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Config]:
    """Install a configuration pointing at the temporary vault.

    Uses 'echo' as editor to avoid actually opening files.
    """
    cfg = Config(
        vault_dir=vault,
        editor="echo",  # No-op editor for testing
        an_home=tmp_path / ".an",
        index=IndexConfig(max_tasks=1_000, max_notes=100),
    )
    config_module.reset_config()
    monkeypatch.setattr(config_module, "_config", cfg)

    yield cfg

    # Reset global singletons after test to avoid interference
    config_module.reset_config()


@pytest.fixture
def cli_runner(monkeypatch: pytest.MonkeyPatch) -> CliRunner:
    """Create a Click CLI runner for testing commands.

    The console is widened so table cells are not wrapped mid-phrase.
    """
    monkeypatch.setattr(cli_utils.console, "width", 200)
    return CliRunner()


@pytest.fixture
def fixed_today(monkeypatch: pytest.MonkeyPatch) -> date:
    """Fix date.today() to a known value for deterministic tests."""
    fixed = date(2025, 11, 28)  # A Friday

    class MockDate(date):
        @classmethod
        def today(cls) -> date:
            return fixed

    monkeypatch.setattr("an.utils.dates.date", MockDate)
    return fixed
