"""Driver-owned index state: flat file list, lazy tree, and search mode.

Only the main loop mutates a ``FileIndex``. Background producers hand their
results to the loop, which applies them here.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from .errors import WalkError
from .file_tree_model import ROOT, Entry, LazyTreeIndex, absolute_path, parent_path
from .search import BROWSING, FlatFileIndex, FuzzyRanker, SearchMode, Searching, mode_for_query


class FileIndex:
    """Browse/search state for one root directory.

    With ``deferred=True`` the flat index starts empty and ``indexing`` is set
    until ``apply_index`` receives the background scan. The root's first
    level is always listed synchronously so an unreadable root fails here.
    """

    def __init__(self, root: Path, show_hidden: bool, deferred: bool = True) -> None:
        root = root.resolve()
        if not root.is_dir():
            raise WalkError(f"not a directory: {root}")
        self.root = root
        self.show_hidden = show_hidden
        self.flat = FlatFileIndex(root, show_hidden)
        self.tree = LazyTreeIndex(root, show_hidden)
        self.tree.load_children(ROOT)
        self.ranker = FuzzyRanker()
        self.mode: SearchMode = BROWSING
        self.indexing = deferred
        self._visible: list[Entry] | None = None
        if not deferred:
            self.flat.rescan()

    @property
    def search_active(self) -> bool:
        return isinstance(self.mode, Searching)

    @property
    def query(self) -> str:
        return self.mode.query if isinstance(self.mode, Searching) else ""

    def _invalidate_tree(self) -> None:
        self._visible = None

    def _reapply_query(self) -> None:
        self.ranker.reset()
        self.mode = mode_for_query(self.query, self.ranker, self.flat.files)

    def apply_index(self, files: Sequence[str]) -> None:
        """Install a completed background scan and re-run the current query."""
        self.flat.replace(files)
        self.indexing = False
        self._reapply_query()

    def refresh(self) -> None:
        """Full rescan of the flat index plus a reload of expanded tree nodes.

        Raises ``WalkError`` when the root itself cannot be read.
        """
        self.flat.rescan()
        self.tree.reload_expanded()
        self._invalidate_tree()
        self._reapply_query()

    def reload_tree(self) -> None:
        self.tree.reload_expanded()
        self._invalidate_tree()

    def toggle_hidden(self) -> None:
        """Flip hidden-file visibility and rebuild both indexes."""
        self.show_hidden = not self.show_hidden
        self.flat.show_hidden = self.show_hidden
        self._invalidate_tree()
        self.tree.rebuild(self.show_hidden)
        self.flat.rescan()
        self._reapply_query()

    def update_query(self, text: str) -> None:
        self.mode = mode_for_query(text, self.ranker, self.flat.files)

    def toggle_expanded(self, path: str) -> bool:
        try:
            return self.tree.toggle_expanded(path)
        finally:
            self._invalidate_tree()

    def visible_entries(self) -> list[Entry]:
        if self._visible is None:
            self._visible = self.tree.flatten()
        return self._visible

    def match_count(self) -> int:
        if isinstance(self.mode, Searching):
            return len(self.mode.matches)
        return len(self.visible_entries())

    def entry_at(self, index: int) -> Entry | None:
        entries = self.visible_entries()
        if 0 <= index < len(entries):
            return entries[index]
        return None

    def match_path_at(self, index: int) -> tuple[str, int] | None:
        """Return ``(relative path, score)`` of the ranked match at ``index``."""
        if not isinstance(self.mode, Searching):
            return None
        matches = self.mode.matches
        if not 0 <= index < len(matches):
            return None
        file_idx, score = matches[index]
        return self.flat.files[file_idx], score

    def open_target_at(self, index: int) -> Path | None:
        """Absolute path of the file under the cursor, or ``None`` for a directory."""
        if isinstance(self.mode, Searching):
            match = self.match_path_at(index)
            return absolute_path(self.root, match[0]) if match is not None else None
        entry = self.entry_at(index)
        if entry is None or entry.is_dir:
            return None
        return absolute_path(self.root, entry.path)

    def base_dir_at(self, index: int) -> str:
        """Directory new files are created in for the row at ``index``."""
        if isinstance(self.mode, Searching):
            match = self.match_path_at(index)
            if match is None:
                return ROOT
            return parent_path(match[0])
        entry = self.entry_at(index)
        if entry is None:
            return ROOT
        if entry.is_dir:
            return entry.path
        return parent_path(entry.path)


__all__ = ["FileIndex"]
