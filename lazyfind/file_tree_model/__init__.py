"""Filesystem tree model: walking, ignore rules, and the lazy tree index.

This package contains non-UI tree primitives:
- ignore-aware recursive and single-level directory walks
- tree node / visible row datatypes
- the lazily loaded tree index with its expanded set
"""

from __future__ import annotations

from .fs import WalkEntry, absolute_path, collect_files, join_relative, list_directory, walk_tree
from .ignore import IGNORE_FILENAME, RESERVED_VCS_DIR, IgnoreRules, is_hidden_name
from .index import LazyTreeIndex
from .types import ROOT, Entry, TreeNode, parent_path, path_depth

__all__ = [
    "ROOT",
    "Entry",
    "TreeNode",
    "parent_path",
    "path_depth",
    "WalkEntry",
    "absolute_path",
    "collect_files",
    "join_relative",
    "list_directory",
    "walk_tree",
    "IGNORE_FILENAME",
    "RESERVED_VCS_DIR",
    "IgnoreRules",
    "is_hidden_name",
    "LazyTreeIndex",
]
