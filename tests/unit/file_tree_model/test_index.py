"""Tests for the lazily loaded tree index."""

from __future__ import annotations

import shutil
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from lazyfind.errors import WalkError
from lazyfind.file_tree_model import ROOT, Entry, LazyTreeIndex, TreeNode


def _make_tree(root: Path) -> None:
    (root / "a").mkdir()
    (root / "a" / "inner").mkdir()
    (root / "a" / "inner" / "deep.txt").write_text("", encoding="utf-8")
    (root / "a" / "b.txt").write_text("", encoding="utf-8")
    (root / "z.txt").write_text("", encoding="utf-8")
    (root / ".hidden").write_text("", encoding="utf-8")


class LazyTreeIndexTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        _make_tree(self.root)
        patcher = mock.patch("lazyfind.file_tree_model.ignore.get_gitignore_matcher", return_value=None)
        patcher.start()
        self.addCleanup(patcher.stop)
        self.addCleanup(self._tmp.cleanup)

    def test_load_children_lists_only_requested_level(self) -> None:
        tree = LazyTreeIndex(self.root, show_hidden=False)
        tree.load_children(ROOT)

        self.assertEqual(tree.node(ROOT).children, ("a", "z.txt"))
        self.assertFalse(tree.is_loaded("a"))
        self.assertTrue(tree.is_loaded("z.txt"))
        self.assertIsNone(tree.node("a/b.txt"))

    def test_load_children_is_idempotent(self) -> None:
        tree = LazyTreeIndex(self.root, show_hidden=False)
        tree.load_children(ROOT)
        first = dict(tree.nodes)

        with mock.patch("lazyfind.file_tree_model.index.list_directory") as list_directory:
            tree.load_children(ROOT)

        list_directory.assert_not_called()
        self.assertEqual(tree.nodes, first)

    def test_flatten_only_descends_into_expanded_directories(self) -> None:
        tree = LazyTreeIndex(self.root, show_hidden=False)
        tree.load_children(ROOT)

        collapsed = tree.flatten()
        self.assertEqual(collapsed, [Entry("a", True, 0), Entry("z.txt", False, 0)])

        self.assertTrue(tree.toggle_expanded("a"))
        expanded = tree.flatten()
        self.assertEqual(
            expanded,
            [
                Entry("a", True, 0),
                Entry("a/inner", True, 1),
                Entry("a/b.txt", False, 1),
                Entry("z.txt", False, 0),
            ],
        )
        self.assertTrue(set(collapsed) <= set(expanded))

    def test_collapse_keeps_cached_children(self) -> None:
        tree = LazyTreeIndex(self.root, show_hidden=False)
        tree.load_children(ROOT)
        tree.toggle_expanded("a")

        self.assertFalse(tree.toggle_expanded("a"))
        self.assertTrue(tree.is_loaded("a"))
        self.assertEqual([entry.path for entry in tree.flatten()], ["a", "z.txt"])

    def test_toggle_expanded_on_root_and_files(self) -> None:
        tree = LazyTreeIndex(self.root, show_hidden=False)
        tree.load_children(ROOT)

        self.assertTrue(tree.toggle_expanded(ROOT))
        self.assertTrue(tree.is_expanded(ROOT))
        self.assertFalse(tree.toggle_expanded("z.txt"))
        self.assertFalse(tree.is_expanded("z.txt"))

    def test_toggle_expanded_failure_leaves_directory_collapsed(self) -> None:
        tree = LazyTreeIndex(self.root, show_hidden=False)
        tree.load_children(ROOT)
        shutil.rmtree(self.root / "a")

        with self.assertRaises(WalkError):
            tree.toggle_expanded("a")
        self.assertFalse(tree.is_expanded("a"))

    def test_reload_expanded_picks_up_changes_and_keeps_grandchildren(self) -> None:
        tree = LazyTreeIndex(self.root, show_hidden=False)
        tree.load_children(ROOT)
        tree.toggle_expanded("a")
        tree.toggle_expanded("a/inner")
        (self.root / "a" / "new.txt").write_text("", encoding="utf-8")
        (self.root / "z.txt").unlink()

        failed = tree.reload_expanded()

        self.assertEqual(failed, [])
        self.assertEqual(
            [entry.path for entry in tree.flatten()],
            ["a", "a/inner", "a/inner/deep.txt", "a/b.txt", "a/new.txt"],
        )

    def test_reload_expanded_marks_vanished_directory_unloaded(self) -> None:
        tree = LazyTreeIndex(self.root, show_hidden=False)
        tree.load_children(ROOT)
        tree.toggle_expanded("a")
        tree.toggle_expanded("a/inner")
        shutil.rmtree(self.root / "a" / "inner")

        failed = tree.reload_expanded()

        self.assertEqual(failed, ["a/inner"])
        self.assertFalse(tree.is_loaded("a/inner"))
        self.assertEqual(tree.node("a/inner"), TreeNode(is_dir=True))
        self.assertNotIn("a/inner", [entry.path for entry in tree.flatten()])

    def test_rebuild_applies_hidden_toggle_and_keeps_expansion(self) -> None:
        tree = LazyTreeIndex(self.root, show_hidden=False)
        tree.load_children(ROOT)
        tree.toggle_expanded("a")

        tree.rebuild(show_hidden=True)

        paths = [entry.path for entry in tree.flatten()]
        self.assertEqual(paths, ["a", "a/inner", "a/b.txt", ".hidden", "z.txt"])
        self.assertTrue(tree.is_expanded("a"))

    def test_rebuild_raises_when_root_is_gone(self) -> None:
        tree = LazyTreeIndex(self.root, show_hidden=False)
        tree.load_children(ROOT)
        tree.root = self.root / "missing"

        with self.assertRaises(WalkError):
            tree.rebuild(show_hidden=False)


if __name__ == "__main__":
    unittest.main()
