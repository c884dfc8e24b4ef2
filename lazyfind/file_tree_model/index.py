"""Sparse, lazily loaded directory tree.

Only directories the user has expanded are ever listed, so the cost of a
structural refresh scales with the number of expanded directories rather than
with the size of the tree on disk.
"""

from __future__ import annotations

from pathlib import Path

from ..errors import WalkError
from ..runtime_logging import get_runtime_logger
from .fs import list_directory
from .ignore import IgnoreRules
from .types import ROOT, Entry, TreeNode, parent_path, path_depth


class LazyTreeIndex:
    """Map of root-relative path to ``TreeNode`` plus the expanded set.

    The root (``""``) is always expanded. Nodes are replaced, never patched,
    and are only dropped by ``rebuild``.
    """

    def __init__(self, root: Path, show_hidden: bool) -> None:
        self.root = root
        self.show_hidden = show_hidden
        self.nodes: dict[str, TreeNode] = {ROOT: TreeNode(is_dir=True)}
        self.expanded: set[str] = {ROOT}

    def _rules(self) -> IgnoreRules:
        return IgnoreRules(self.root, self.show_hidden)

    def node(self, path: str) -> TreeNode | None:
        return self.nodes.get(path)

    def is_loaded(self, path: str) -> bool:
        node = self.nodes.get(path)
        return node is not None and node.children_loaded

    def is_expanded(self, path: str) -> bool:
        return path in self.expanded

    def load_children(self, path: str, rules: IgnoreRules | None = None) -> None:
        """Load ``path``'s children unless they are already loaded."""
        if self.is_loaded(path):
            return
        self.reload(path, rules)

    def reload(self, path: str, rules: IgnoreRules | None = None) -> None:
        """List ``path`` again and replace its child list.

        Children whose kind is unchanged keep their cached node, so expanded
        grandchildren survive a parent reload. Raises ``WalkError`` when the
        directory cannot be read.
        """
        children = list_directory(self.root, path, self.show_hidden, rules or self._rules())
        for child in children:
            existing = self.nodes.get(child.path)
            if existing is None or existing.is_dir != child.is_dir:
                self.nodes[child.path] = TreeNode(
                    is_dir=child.is_dir,
                    children_loaded=not child.is_dir,
                )
        self.nodes[path] = TreeNode(
            is_dir=True,
            children=tuple(child.path for child in children),
            children_loaded=True,
        )

    def toggle_expanded(self, path: str) -> bool:
        """Flip expansion of ``path`` and return the new state.

        The first expansion loads children; collapsing keeps the cached nodes
        so re-expanding is free. On load failure the directory stays collapsed
        and ``WalkError`` propagates.
        """
        if path == ROOT:
            return True
        if path in self.expanded:
            self.expanded.discard(path)
            return False
        node = self.nodes.get(path)
        if node is not None and not node.is_dir:
            return False
        self.load_children(path)
        self.expanded.add(path)
        return True

    def reload_expanded(self) -> list[str]:
        """Reload every expanded directory, parents first.

        A directory that can no longer be read is marked unloaded, which hides
        its subtree until a later reload succeeds. Returns the failed paths.
        """
        rules = self._rules()
        failed: list[str] = []
        for path in sorted(self.expanded, key=lambda item: (path_depth(item), item)):
            node = self.nodes.get(path)
            if node is None or not node.is_dir:
                continue
            try:
                self.reload(path, rules)
            except WalkError:
                self.nodes[path] = TreeNode(is_dir=True)
                failed.append(path)
        if failed:
            get_runtime_logger().debug("tree.reload_failed", paths=failed)
        return failed

    def rebuild(self, show_hidden: bool) -> None:
        """Drop every cached node and reload the expanded, reachable subtree.

        Raises ``WalkError`` only when the root itself cannot be read.
        """
        self.show_hidden = show_hidden
        self.nodes = {ROOT: TreeNode(is_dir=True)}
        rules = self._rules()
        for path in sorted(self.expanded, key=lambda item: (path_depth(item), item)):
            if path != ROOT:
                parent = self.nodes.get(parent_path(path))
                node = self.nodes.get(path)
                if parent is None or not parent.children_loaded or node is None or not node.is_dir:
                    continue
            try:
                self.reload(path, rules)
            except WalkError:
                if path == ROOT:
                    raise
                self.nodes[path] = TreeNode(is_dir=True)

    def flatten(self) -> list[Entry]:
        """Return visible rows in display order.

        A single top-down walk from the root's children; a directory's
        children are emitted only when it is expanded and loaded. Depth is the
        nesting level, with top-level entries at 0.
        """
        root_node = self.nodes.get(ROOT)
        if root_node is None or not root_node.children_loaded:
            return []

        entries: list[Entry] = []
        stack: list[tuple[str, int]] = [(child, 0) for child in reversed(root_node.children)]
        while stack:
            path, depth = stack.pop()
            node = self.nodes.get(path)
            if node is None:
                continue
            entries.append(Entry(path=path, is_dir=node.is_dir, depth=depth))
            if node.is_dir and node.children_loaded and path in self.expanded:
                stack.extend((child, depth + 1) for child in reversed(node.children))
        return entries


__all__ = ["LazyTreeIndex"]
