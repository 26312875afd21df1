"""CLI tests for an commands."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest
from click.testing import CliRunner

from an import __version__
from an.cli import cli
from an.config import Config, ConfigError
from an.utils import editor as editor_module


@pytest.fixture
def task_vault(vault_config: Config, write_note) -> Config:
    """Vault with two notes holding three tasks."""
    write_note("alpha.md", "# Alpha\n\n- [ ] write draft @owner(Ann)\n- [x] pick topic\n")
    write_note("beta/beta.md", "- [ ] review draft @due(2024-05-20)\n")
    return vault_config


class TestCli:
    """Tests for the root command."""

    def test_version(self, cli_runner: CliRunner):
        result = cli_runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_missing_vault(self, cli_runner: CliRunner, vault_config: Config, tmp_path: Path):
        result = cli_runner.invoke(cli, ["--vault", str(tmp_path / "nowhere"), "tasks", "list"])
        assert result.exit_code == 1
        assert "vault directory not found" in result.output

    def test_config_error(self, cli_runner: CliRunner, monkeypatch: pytest.MonkeyPatch):
        def broken_config():
            raise ConfigError("log_level must be one of DEBUG, INFO")

        monkeypatch.setattr("an.cli.get_config", broken_config)
        result = cli_runner.invoke(cli, ["tags"])

        assert result.exit_code == 1
        assert "Error: log_level must be one of" in result.output

    def test_vault_override(self, cli_runner: CliRunner, vault_config: Config, tmp_path: Path):
        other = tmp_path / "other"
        other.mkdir()
        (other / "note.md").write_text("- [ ] elsewhere\n", encoding="utf-8")

        result = cli_runner.invoke(cli, ["--vault", str(other), "tasks", "list"])

        assert result.exit_code == 0
        assert "elsewhere" in result.output
        assert "1 tasks, 0 completed" in result.output


class TestTasksList:
    """Tests for 'an tasks list'."""

    def test_lists_all_tasks(self, cli_runner: CliRunner, task_vault: Config):
        result = cli_runner.invoke(cli, ["tasks", "list"])

        assert result.exit_code == 0
        assert "write draft" in result.output
        assert "pick topic" in result.output
        assert "review draft" in result.output
        assert "Ann" in result.output
        assert "3 tasks, 1 completed" in result.output

    def test_open_only(self, cli_runner: CliRunner, task_vault: Config):
        result = cli_runner.invoke(cli, ["tasks", "list", "--open"])

        assert result.exit_code == 0
        assert "pick topic" not in result.output
        assert "2 tasks, 0 completed" in result.output

    def test_sort_by_status(self, cli_runner: CliRunner, task_vault: Config):
        result = cli_runner.invoke(cli, ["tasks", "list", "--sort", "status"])

        assert result.exit_code == 0
        output = result.output
        assert output.index("pick topic") < output.index("write draft") < output.index("review draft")

    def test_sort_by_id_descending(self, cli_runner: CliRunner, task_vault: Config):
        result = cli_runner.invoke(cli, ["tasks", "list", "--order", "desc"])

        assert result.exit_code == 0
        output = result.output
        assert output.index("review draft") < output.index("pick topic") < output.index("write draft")

    def test_empty_vault(self, cli_runner: CliRunner, vault_config: Config):
        result = cli_runner.invoke(cli, ["tasks", "list"])

        assert result.exit_code == 0
        assert "No tasks found." in result.output

    def test_capacity_exceeded(self, cli_runner: CliRunner, task_vault: Config):
        task_vault.index.max_tasks = 2

        result = cli_runner.invoke(cli, ["tasks", "list"])

        assert result.exit_code == 1
        assert "exceeds maximum of 2" in result.output


class TestTasksToggle:
    """Tests for 'an tasks toggle'."""

    def test_toggle(self, cli_runner: CliRunner, task_vault: Config):
        result = cli_runner.invoke(cli, ["tasks", "toggle", "alpha.md", "3"])

        assert result.exit_code == 0
        assert "Checked alpha.md:3" in result.output
        note = task_vault.vault_dir / "alpha.md"
        assert "- [x] write draft" in note.read_text(encoding="utf-8")

        result = cli_runner.invoke(cli, ["tasks", "toggle", "alpha.md", "3"])
        assert "Unchecked alpha.md:3" in result.output
        assert "- [ ] write draft" in note.read_text(encoding="utf-8")

    def test_toggle_reflected_in_list(self, cli_runner: CliRunner, task_vault: Config):
        cli_runner.invoke(cli, ["tasks", "toggle", "beta/beta.md", "1"])

        result = cli_runner.invoke(cli, ["tasks", "list"])
        assert "3 tasks, 2 completed" in result.output

    def test_toggle_not_a_task(self, cli_runner: CliRunner, task_vault: Config):
        result = cli_runner.invoke(cli, ["tasks", "toggle", "alpha.md", "1"])

        assert result.exit_code == 1
        assert "no markdown task found on line 1" in result.output

    def test_toggle_missing_note(self, cli_runner: CliRunner, task_vault: Config):
        result = cli_runner.invoke(cli, ["tasks", "toggle", "missing.md", "1"])

        assert result.exit_code == 1
        assert "cannot update missing.md" in result.output


class TestTasksOpen:
    """Tests for 'an tasks open'."""

    @pytest.fixture
    def editor_calls(self, monkeypatch: pytest.MonkeyPatch) -> list[list[str]]:
        calls: list[list[str]] = []

        def fake_run(cmd, check=False):
            calls.append(cmd)
            return subprocess.CompletedProcess(cmd, 0)

        monkeypatch.setattr(editor_module.subprocess, "run", fake_run)
        return calls

    def test_uses_configured_editor(
        self, cli_runner: CliRunner, task_vault: Config, editor_calls: list[list[str]]
    ):
        result = cli_runner.invoke(cli, ["tasks", "open", "alpha.md", "3"])

        assert result.exit_code == 0
        assert "Opening alpha.md:3" in result.output
        assert editor_calls == [["echo", str(task_vault.vault_dir / "alpha.md")]]

    def test_editor_option_with_line(
        self, cli_runner: CliRunner, task_vault: Config, editor_calls: list[list[str]]
    ):
        result = cli_runner.invoke(cli, ["tasks", "open", "beta/beta.md", "1", "-e", "vim"])

        assert result.exit_code == 0
        note = task_vault.vault_dir / "beta" / "beta.md"
        assert editor_calls == [["vim", "+1", str(note)]]

    def test_missing_note(
        self, cli_runner: CliRunner, task_vault: Config, editor_calls: list[list[str]]
    ):
        result = cli_runner.invoke(cli, ["tasks", "open", "missing.md"])

        assert result.exit_code == 1
        assert "Note not found" in result.output
        assert editor_calls == []

    def test_editor_not_found(self, cli_runner: CliRunner, task_vault: Config):
        result = cli_runner.invoke(
            cli, ["tasks", "open", "alpha.md", "-e", "an-editor-that-does-not-exist"]
        )

        assert result.exit_code == 1
        assert "Editor not found" in result.output


class TestTags:
    """Tests for 'an tags'."""

    @pytest.fixture
    def tag_vault(self, vault_config: Config, write_note) -> Config:
        write_note("a.md", "---\ntags:\n  - weekly\n  - project/foo\n---\n\nBody\n")
        write_note("b.md", "tags:\n- weekly\n- zeta\n")
        return vault_config

    def test_by_count(self, cli_runner: CliRunner, tag_vault: Config):
        result = cli_runner.invoke(cli, ["tags"])

        assert result.exit_code == 0
        assert "Tags (3 total)" in result.output
        output = result.output
        assert output.index("weekly") < output.index("project/foo") < output.index("zeta")

    def test_alphabetical_with_limit(self, cli_runner: CliRunner, tag_vault: Config):
        result = cli_runner.invoke(cli, ["tags", "--sort", "alpha", "--limit", "2"])

        assert result.exit_code == 0
        assert "project/foo" in result.output
        assert "weekly" in result.output
        assert "zeta" not in result.output

    def test_no_tags(self, cli_runner: CliRunner, vault_config: Config, write_note):
        write_note("a.md", "No tags here.\n")

        result = cli_runner.invoke(cli, ["tags"])
        assert result.exit_code == 0
        assert "No tags found." in result.output


class TestNoteCommands:
    """Tests for 'an notes', 'an orphans' and 'an unfulfilled'."""

    def test_notes_listing(self, cli_runner: CliRunner, vault_config: Config, write_note):
        write_note("inbox.md", "---\ntitle: Inbox\ntags: [triage, weekly]\n---\n")
        write_note("projects/launch.md", "Plain note.\n")

        result = cli_runner.invoke(cli, ["notes"])

        assert result.exit_code == 0
        assert "Inbox" in result.output
        assert "triage, weekly" in result.output
        assert "projects" in result.output
        assert "launch.md" in result.output
        assert "No tags" in result.output
        assert "2 notes" in result.output

    def test_notes_tag_filter(self, cli_runner: CliRunner, vault_config: Config, write_note):
        write_note("inbox.md", "---\ntitle: Inbox\ntags: [weekly]\n---\n")
        write_note("launch.md", "---\ntitle: Launch\ntags: [release]\n---\n")

        result = cli_runner.invoke(cli, ["notes", "--tag", "release"])

        assert "Launch" in result.output
        assert "Inbox" not in result.output
        assert "1 notes" in result.output

    def test_no_notes(self, cli_runner: CliRunner, vault_config: Config):
        result = cli_runner.invoke(cli, ["notes"])
        assert "No notes found." in result.output

    def test_orphans(self, cli_runner: CliRunner, vault_config: Config, write_note):
        write_note("hub.md", "See [[Other]].\n")
        write_note("lonely.md", "Nothing to see.\n")

        result = cli_runner.invoke(cli, ["orphans"])

        assert result.exit_code == 0
        assert "lonely.md" in result.output
        assert "hub.md" not in result.output

    def test_no_orphans(self, cli_runner: CliRunner, vault_config: Config, write_note):
        write_note("hub.md", "See [[Other]].\n")

        result = cli_runner.invoke(cli, ["orphans"])
        assert "No orphan notes found." in result.output

    def test_unfulfilled(self, cli_runner: CliRunner, vault_config: Config, write_note):
        write_note("open.md", "fulfilled: false\n")
        write_note("done.md", "fulfilled: true\n")

        result = cli_runner.invoke(cli, ["unfulfilled"])

        assert result.exit_code == 0
        assert "open.md" in result.output
        assert "done.md" not in result.output

    def test_no_unfulfilled(self, cli_runner: CliRunner, vault_config: Config):
        result = cli_runner.invoke(cli, ["unfulfilled"])
        assert "No unfulfilled notes found." in result.output


class TestWatch:
    """Tests for 'an watch'."""

    def test_reports_then_stops_on_interrupt(
        self, cli_runner: CliRunner, task_vault: Config, monkeypatch: pytest.MonkeyPatch
    ):
        def interrupt(_seconds: float) -> None:
            raise KeyboardInterrupt

        monkeypatch.setattr("an.cli.watch.time.sleep", interrupt)

        result = cli_runner.invoke(cli, ["watch"])

        assert result.exit_code == 0
        assert "3 tasks (1 completed) in 2 notes" in result.output
