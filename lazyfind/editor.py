"""In-terminal text buffer for the file that is currently open.

The index engine only relies on ``path``, ``is_modified()`` and ``reload()``;
the rest is the small editing surface driven by key tokens from
``lazyfind.input``.
"""

from __future__ import annotations

import hashlib
from pathlib import Path

from .errors import EditorError
from .highlight import DEFAULT_STYLE, colorize_lines, read_text, sanitize_terminal_text

PAGE_ROWS = 20


def _split_lines(content: str) -> tuple[list[str], bool]:
    trailing_newline = content.endswith("\n")
    lines = content.split("\n")
    if trailing_newline:
        lines.pop()
    return (lines or [""]), trailing_newline


class TextBuffer:
    """Line-based text buffer with a single cursor."""

    def __init__(self, path: Path, content: str) -> None:
        self.path = path
        self.lines, self._trailing_newline = _split_lines(content)
        self._original = content
        self._modified = False
        self.row = 0
        self.col = 0
        self.top = 0
        self._highlight_key: tuple[str, str] | None = None
        self._highlighted: list[str] = []

    @classmethod
    def open(cls, path: Path) -> TextBuffer:
        try:
            content = read_text(path)
        except OSError as exc:
            raise EditorError(f"cannot open {path}: {exc.strerror or exc}") from exc
        return cls(path, content)

    @property
    def text(self) -> str:
        body = "\n".join(self.lines)
        return body + "\n" if self._trailing_newline else body

    @property
    def filename(self) -> str:
        return self.path.name or "untitled"

    @property
    def cursor(self) -> tuple[int, int]:
        return self.row, self.col

    def is_modified(self) -> bool:
        return self._modified

    def _mark_edited(self) -> None:
        self._modified = self.text != self._original

    def _clamp_cursor(self) -> None:
        self.row = max(0, min(self.row, len(self.lines) - 1))
        self.col = max(0, min(self.col, len(self.lines[self.row])))

    def reload(self) -> None:
        """Replace the buffer with the file on disk, keeping the cursor if possible."""
        try:
            content = read_text(self.path)
        except OSError as exc:
            raise EditorError(f"cannot read {self.path}: {exc.strerror or exc}") from exc
        self.lines, self._trailing_newline = _split_lines(content)
        self._original = content
        self._modified = False
        self._clamp_cursor()

    def save(self) -> None:
        content = self.text
        try:
            self.path.write_text(content, encoding="utf-8")
        except OSError as exc:
            raise EditorError(f"cannot write {self.path}: {exc.strerror or exc}") from exc
        self._original = content
        self._modified = False

    def move(self, rows: int = 0, cols: int = 0) -> None:
        if cols:
            self.col += cols
            if self.col < 0 and self.row > 0:
                self.row -= 1
                self.col = len(self.lines[self.row])
            elif self.col > len(self.lines[self.row]) and self.row < len(self.lines) - 1:
                self.row += 1
                self.col = 0
        if rows:
            self.row += rows
        self._clamp_cursor()

    def scroll(self, rows: int) -> None:
        self.move(rows=rows)

    def insert(self, text: str) -> None:
        line = self.lines[self.row]
        self.lines[self.row] = line[: self.col] + text + line[self.col :]
        self.col += len(text)
        self._mark_edited()

    def newline(self) -> None:
        line = self.lines[self.row]
        self.lines[self.row] = line[: self.col]
        self.lines.insert(self.row + 1, line[self.col :])
        self.row += 1
        self.col = 0
        self._mark_edited()

    def backspace(self) -> None:
        if self.col > 0:
            line = self.lines[self.row]
            self.lines[self.row] = line[: self.col - 1] + line[self.col :]
            self.col -= 1
        elif self.row > 0:
            prev = self.lines[self.row - 1]
            self.lines[self.row - 1] = prev + self.lines.pop(self.row)
            self.row -= 1
            self.col = len(prev)
        else:
            return
        self._mark_edited()

    def delete(self) -> None:
        line = self.lines[self.row]
        if self.col < len(line):
            self.lines[self.row] = line[: self.col] + line[self.col + 1 :]
        elif self.row < len(self.lines) - 1:
            self.lines[self.row] = line + self.lines.pop(self.row + 1)
        else:
            return
        self._mark_edited()

    def handle_key(self, key: str) -> bool:
        """Apply one key token; return whether it was consumed."""
        if key == "UP":
            self.move(rows=-1)
        elif key == "DOWN":
            self.move(rows=1)
        elif key == "LEFT":
            self.move(cols=-1)
        elif key == "RIGHT":
            self.move(cols=1)
        elif key == "HOME":
            self.col = 0
        elif key == "END":
            self.col = len(self.lines[self.row])
        elif key == "PAGE_UP":
            self.move(rows=-PAGE_ROWS)
        elif key == "PAGE_DOWN":
            self.move(rows=PAGE_ROWS)
        elif key == "ENTER":
            self.newline()
        elif key == "BACKSPACE":
            self.backspace()
        elif key == "DELETE":
            self.delete()
        elif key == "TAB":
            self.insert("    ")
        elif len(key) == 1 and key.isprintable():
            self.insert(key)
        else:
            return False
        return True

    def ensure_cursor_visible(self, rows: int) -> None:
        rows = max(1, rows)
        if self.row < self.top:
            self.top = self.row
        elif self.row >= self.top + rows:
            self.top = self.row - rows + 1

    def highlighted_lines(self, style: str = DEFAULT_STYLE, no_color: bool = False) -> list[str]:
        """Rendered lines, re-highlighted only when the text changed."""
        if no_color:
            return [sanitize_terminal_text(line) for line in self.lines]
        digest = hashlib.blake2b(self.text.encode("utf-8", errors="surrogateescape"), digest_size=16)
        key = (digest.hexdigest(), style)
        if key != self._highlight_key:
            self._highlighted = colorize_lines(self.lines, self.path, style)
            self._highlight_key = key
        return self._highlighted


__all__ = ["TextBuffer"]
