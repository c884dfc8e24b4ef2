"""Datatypes for the lazily loaded directory tree."""

from __future__ import annotations

from dataclasses import dataclass

ROOT = ""


@dataclass(frozen=True)
class Entry:
    """One row of the flattened tree view."""

    path: str
    is_dir: bool
    depth: int

    @property
    def name(self) -> str:
        return self.path.rsplit("/", 1)[-1]


@dataclass(frozen=True)
class TreeNode:
    """Cached directory-tree node.

    ``children`` is meaningless until ``children_loaded`` is true. Files are
    created already loaded with no children.
    """

    is_dir: bool
    children: tuple[str, ...] = ()
    children_loaded: bool = False


def parent_path(path: str) -> str:
    """Return the root-relative parent of ``path`` (``""`` for top level)."""
    return path.rsplit("/", 1)[0] if "/" in path else ROOT


def path_depth(path: str) -> int:
    """Number of components in ``path``; the root has depth 0."""
    return path.count("/") + 1 if path else 0


__all__ = ["ROOT", "Entry", "TreeNode", "parent_path", "path_depth"]
