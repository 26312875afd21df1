"""Launching the user's editor on a note."""

from __future__ import annotations

import os
import shlex
import shutil
import subprocess
import sys
from pathlib import Path

# Editors that accept "+LINE FILE"
LINE_NUMBER_EDITORS = {
    "emacs",
    "gedit",
    "helix",
    "hx",
    "kate",
    "micro",
    "nano",
    "nvim",
    "vi",
    "vim",
}

# Editors that accept "--goto FILE:LINE"
GOTO_EDITORS = {"code", "codium", "cursor"}

FALLBACK_EDITORS = ["micro", "nano", "vim"]


def get_editor() -> str:
    """Pick an editor: $EDITOR, then $VISUAL, then the first fallback on PATH."""
    editor = os.environ.get("EDITOR") or os.environ.get("VISUAL")
    if editor:
        return editor

    for candidate in FALLBACK_EDITORS:
        if shutil.which(candidate):
            return candidate

    return "notepad" if sys.platform == "win32" else "vi"


def editor_name(editor: str) -> str:
    """Base command name of an editor string ("/usr/bin/nvim -p" -> "nvim")."""
    parts = shlex.split(editor)
    return Path(parts[0]).stem.lower() if parts else ""


def build_editor_command(editor: str, path: Path, line: int | None = None) -> list[str]:
    """Build the argv that opens ``path`` in ``editor``, at ``line`` when supported.

    ``editor`` may carry its own arguments, e.g. ``"code --wait"``.
    """
    cmd = shlex.split(editor)
    name = editor_name(editor)

    if line is not None and line > 0 and name in GOTO_EDITORS:
        cmd += ["--goto", f"{path}:{line}"]
    elif line is not None and line > 0 and name in LINE_NUMBER_EDITORS:
        cmd += [f"+{line}", str(path)]
    else:
        cmd.append(str(path))
    return cmd


def open_in_editor(path: Path, line: int | None = None, editor: str | None = None) -> None:
    """Open ``path`` in ``editor`` and wait for it to exit.

    Raises:
        RuntimeError: If the editor cannot be started or exits non-zero.
    """
    if not editor:
        editor = get_editor()

    cmd = build_editor_command(editor, path, line)
    if not cmd or not cmd[0]:
        raise RuntimeError(f"Invalid editor command: {editor!r}")

    try:
        subprocess.run(cmd, check=True)
    except FileNotFoundError:
        raise RuntimeError(f"Editor not found: {cmd[0]}")
    except subprocess.CalledProcessError as e:
        raise RuntimeError(f"Editor exited with error: {e.returncode}")
