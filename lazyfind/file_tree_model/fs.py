"""Ignore-aware directory walking.

Every path produced here is a posix string relative to the walk root. A
failure to read the walk root raises ``WalkError``; unreadable subtrees below
it are skipped silently because permission-mixed trees are normal.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import NamedTuple

from ..errors import WalkError
from .ignore import IgnoreRules


class WalkEntry(NamedTuple):
    """One walk result: root-relative path and whether it is a directory."""

    path: str
    is_dir: bool


def join_relative(parent: str, name: str) -> str:
    """Join a root-relative parent path and a child name."""
    return f"{parent}/{name}" if parent else name


def absolute_path(root: Path, rel_path: str) -> Path:
    return root / rel_path if rel_path else root


def _scan(directory: Path, rel_dir: str, rules: IgnoreRules) -> list[tuple[WalkEntry, bool]]:
    """Return ``(entry, descend)`` pairs for one directory; raises ``OSError``.

    ``descend`` is false for symlinked directories so recursive walks never
    follow a link back into an ancestor.
    """
    out: list[tuple[WalkEntry, bool]] = []
    with os.scandir(directory) as entries:
        for child in entries:
            rel_path = join_relative(rel_dir, child.name)
            try:
                is_dir = child.is_dir()
            except OSError:
                is_dir = False
            try:
                is_link = child.is_symlink()
            except OSError:
                is_link = False
            if rules.is_excluded(rel_path, is_dir):
                continue
            out.append((WalkEntry(rel_path, is_dir), is_dir and not is_link))
    return out


def list_directory(
    root: Path,
    rel_dir: str,
    show_hidden: bool,
    rules: IgnoreRules | None = None,
) -> list[WalkEntry]:
    """List the immediate children of ``rel_dir``.

    Directories come first, then files, each group ordered case-insensitively.
    """
    if rules is None:
        rules = IgnoreRules(root, show_hidden)
    directory = absolute_path(root, rel_dir)
    try:
        scanned = _scan(directory, rel_dir, rules)
    except OSError as exc:
        raise WalkError(f"cannot read {directory}: {exc.strerror or exc}") from exc

    children = [entry for entry, _descend in scanned]
    children.sort(
        key=lambda item: (
            not item.is_dir,
            item.path.rsplit("/", 1)[-1].casefold(),
            item.path,
        )
    )
    return children


def walk_tree(
    root: Path,
    show_hidden: bool,
    rules: IgnoreRules | None = None,
) -> list[WalkEntry]:
    """Recursively list every descendant of ``root``, sorted by path string."""
    if rules is None:
        rules = IgnoreRules(root, show_hidden)
    try:
        pending = _scan(root, "", rules)
    except OSError as exc:
        raise WalkError(f"cannot read {root}: {exc.strerror or exc}") from exc

    results: list[WalkEntry] = []
    while pending:
        entry, descend = pending.pop()
        results.append(entry)
        if not descend:
            continue
        try:
            pending.extend(_scan(root / entry.path, entry.path, rules))
        except OSError:
            continue

    results.sort(key=lambda item: item.path)
    return results


def collect_files(root: Path, show_hidden: bool) -> list[str]:
    """Return every non-directory path under ``root``, sorted by path string."""
    return [entry.path for entry in walk_tree(root, show_hidden) if not entry.is_dir]


__all__ = [
    "WalkEntry",
    "absolute_path",
    "collect_files",
    "join_relative",
    "list_directory",
    "walk_tree",
]
