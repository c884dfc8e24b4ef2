"""Width measurement for rows that mix SGR codes, tabs and wide glyphs."""

from __future__ import annotations

import re
import unicodedata
from collections.abc import Iterator

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8


def char_display_width(ch: str, col: int) -> int:
    """Cells taken by ``ch`` when drawn at visual column ``col``."""
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    return 2 if unicodedata.east_asian_width(ch) in {"W", "F"} else 1


def _segments(text: str) -> Iterator[tuple[bool, str]]:
    """Split ``text`` into ``(is_escape, chunk)`` pieces, preserving order."""
    pos = 0
    for match in ANSI_ESCAPE_RE.finditer(text):
        if match.start() > pos:
            yield False, text[pos : match.start()]
        yield True, match.group(0)
        pos = match.end()
    if pos < len(text):
        yield False, text[pos:]


def display_width(text: str) -> int:
    col = 0
    for is_escape, chunk in _segments(text):
        if is_escape:
            continue
        for ch in chunk:
            col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Cut ``text`` to ``max_cols`` cells.

    Escape codes before the cut are kept and cost nothing. Tabs become spaces
    so the clipped row lines up with what the terminal would draw.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    for is_escape, chunk in _segments(text):
        if is_escape:
            out.append(chunk)
            continue
        for ch in chunk:
            width = char_display_width(ch, col)
            if col + width > max_cols:
                return "".join(out)
            out.append(" " * width if ch == "\t" else ch)
            col += width
        if col >= max_cols:
            break
    return "".join(out)


__all__ = ["ANSI_ESCAPE_RE", "TAB_STOP", "char_display_width", "clip_ansi_line", "display_width"]
