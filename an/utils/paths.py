"""Path normalization helpers shared by the parser and the task index."""

from __future__ import annotations

import os
from pathlib import Path


def normalize_path(path: Path | str) -> str:
    """Normalize a path to a consistent string form.

    Windows separators are converted and redundant separators and ``.``/``..``
    segments are collapsed, so the same note always maps to the same key.
    An empty input stays empty.
    """
    text = os.fspath(path)
    if not text:
        return ""
    return os.path.normpath(text.replace("\\", "/"))


def vault_relative(vault_dir: Path | str, target: Path | str) -> str:
    """Return ``target`` relative to ``vault_dir`` using forward slashes.

    Raises:
        ValueError: If the paths cannot be related (e.g. different drives).
    """
    base = normalize_path(vault_dir)
    cleaned = normalize_path(target)
    return os.path.relpath(cleaned, base).replace(os.sep, "/")


def vault_relative_components(vault_dir: Path | str, target: Path | str) -> tuple[str, str]:
    """Split a vault-relative path into its first directory and the remainder.

    A file directly in the vault yields ``("", name)``; the vault itself
    yields ``("", "")``.
    """
    rel = vault_relative(vault_dir, target)
    rel = rel.removeprefix("./")
    if rel in (".", ""):
        return "", ""

    parts = rel.split("/")
    if len(parts) == 1:
        return "", parts[0]
    return parts[0], "/".join(parts[1:])


def is_within(vault_dir: Path | str, target: Path | str) -> bool:
    """Check whether ``target`` lies inside ``vault_dir`` (or is the vault itself)."""
    try:
        rel = vault_relative(vault_dir, target)
    except ValueError:
        return False
    return rel != ".." and not rel.startswith("../")
