"""Tests for the in-terminal text buffer."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path

from lazyfind.editor import PAGE_ROWS, TextBuffer
from lazyfind.errors import EditorError


class TextBufferTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.path = Path(self._tmp.name) / "notes.txt"
        self.path.write_text("alpha\nbeta\n", encoding="utf-8")

    def test_open_preserves_text_and_trailing_newline(self) -> None:
        buffer = TextBuffer.open(self.path)

        self.assertEqual(buffer.lines, ["alpha", "beta"])
        self.assertEqual(buffer.text, "alpha\nbeta\n")
        self.assertFalse(buffer.is_modified())
        self.assertEqual(buffer.filename, "notes.txt")

    def test_open_missing_file_raises_editor_error(self) -> None:
        with self.assertRaises(EditorError):
            TextBuffer.open(self.path.with_name("missing.txt"))

    def test_typing_marks_modified_and_undoing_clears_it(self) -> None:
        buffer = TextBuffer.open(self.path)

        buffer.handle_key("x")
        self.assertTrue(buffer.is_modified())
        self.assertEqual(buffer.lines[0], "xalpha")

        buffer.handle_key("BACKSPACE")
        self.assertFalse(buffer.is_modified())

    def test_enter_and_backspace_split_and_join_lines(self) -> None:
        buffer = TextBuffer.open(self.path)
        buffer.handle_key("END")

        buffer.handle_key("ENTER")
        self.assertEqual(buffer.lines, ["alpha", "", "beta"])
        self.assertEqual(buffer.cursor, (1, 0))

        buffer.handle_key("BACKSPACE")
        self.assertEqual(buffer.lines, ["alpha", "beta"])
        self.assertEqual(buffer.cursor, (0, 5))

    def test_delete_joins_with_next_line_at_end_of_line(self) -> None:
        buffer = TextBuffer.open(self.path)
        buffer.handle_key("END")

        buffer.handle_key("DELETE")

        self.assertEqual(buffer.lines, ["alphabeta"])

    def test_cursor_wraps_and_clamps(self) -> None:
        buffer = TextBuffer.open(self.path)

        buffer.handle_key("LEFT")
        self.assertEqual(buffer.cursor, (0, 0))
        buffer.handle_key("END")
        buffer.handle_key("RIGHT")
        self.assertEqual(buffer.cursor, (1, 0))
        buffer.handle_key("PAGE_DOWN")
        self.assertEqual(buffer.cursor, (1, 0))
        buffer.handle_key("PAGE_UP")
        self.assertEqual(buffer.cursor, (0, 0))

    def test_save_writes_and_clears_modified(self) -> None:
        buffer = TextBuffer.open(self.path)
        buffer.handle_key("TAB")

        buffer.save()

        self.assertFalse(buffer.is_modified())
        self.assertEqual(self.path.read_text(encoding="utf-8"), "    alpha\nbeta\n")

    def test_reload_replaces_content_and_clamps_cursor(self) -> None:
        buffer = TextBuffer.open(self.path)
        buffer.move(rows=1)
        buffer.handle_key("END")
        self.path.write_text("x\n", encoding="utf-8")

        buffer.reload()

        self.assertEqual(buffer.lines, ["x"])
        self.assertEqual(buffer.cursor, (0, 1))
        self.assertFalse(buffer.is_modified())

    def test_ensure_cursor_visible_scrolls_viewport(self) -> None:
        self.path.write_text("\n".join(str(i) for i in range(100)), encoding="utf-8")
        buffer = TextBuffer.open(self.path)
        buffer.handle_key("PAGE_DOWN")
        self.assertEqual(buffer.row, PAGE_ROWS)

        buffer.ensure_cursor_visible(10)
        self.assertEqual(buffer.top, PAGE_ROWS - 9)

        buffer.move(rows=-PAGE_ROWS)
        buffer.ensure_cursor_visible(10)
        self.assertEqual(buffer.top, 0)

    def test_unknown_key_is_not_consumed(self) -> None:
        buffer = TextBuffer.open(self.path)
        self.assertFalse(buffer.handle_key("CTRL_N"))

    def test_highlighted_lines_keep_line_count(self) -> None:
        self.path = self.path.with_name("mod.py")
        self.path.write_text("def f():\n    return 1\n", encoding="utf-8")
        buffer = TextBuffer.open(self.path)

        colored = buffer.highlighted_lines()
        plain = buffer.highlighted_lines(no_color=True)

        self.assertEqual(len(colored), 2)
        self.assertIn("\033[", colored[0])
        self.assertEqual(plain, ["def f():", "    return 1"])
        self.assertIs(buffer.highlighted_lines(), colored)


if __name__ == "__main__":
    unittest.main()
