"""Frame rendering for the browse list, create prompt, and editor view.

Functions here read ``AppState`` and return the text of one
full frame, which the runtime loop writes in a single call.
"""

from __future__ import annotations

from .ansi import clip_ansi_line, display_width
from .file_tree_model import Entry
from .highlight import DEFAULT_STYLE
from .state import INDEXING_STATUS, AppState

RESET = "\033[0m"
DIR_COLOR = "\033[1;34m"
FILE_COLOR = "\033[38;5;252m"
MARKER_COLOR = "\033[38;5;44m"
MATCH_COLOR = "\033[1;30;43m"
DIM_COLOR = "\033[2;38;5;250m"
PROMPT_COLOR = "\033[1;38;5;81m"
WARN_COLOR = "\033[1;38;5;214m"
GUTTER_COLOR = "\033[38;5;242m"

BROWSE_HINT = "Enter open · Tab hidden · Ctrl+N new · Esc quit"
EDIT_HINT = "Ctrl+S save · Ctrl+R reload · Esc back"


def _paint(color: str, text: str, no_color: bool) -> str:
    if no_color or not text:
        return text
    return f"{color}{text}{RESET}"


def selected_with_ansi(text: str) -> str:
    """Apply selection styling without discarding existing ANSI colors."""
    if not text:
        return text

    # Keep reverse video active even when the text contains internal resets.
    return "\033[7m" + text.replace("\033[0m", "\033[0;7m") + "\033[0m"


def list_rows_for_height(height: int) -> int:
    """Rows available to the list once the prompt and status rows are taken."""
    return max(1, height - 2)


def ensure_selection_visible(state: AppState) -> bool:
    """Scroll ``list_start`` so the cursor row is on screen; return whether it moved."""
    prev = state.list_start
    rows = max(1, state.list_rows)
    if state.selected_idx < state.list_start:
        state.list_start = state.selected_idx
    elif state.selected_idx >= state.list_start + rows:
        state.list_start = state.selected_idx - rows + 1
    max_start = max(0, state.index.match_count() - rows)
    state.list_start = max(0, min(state.list_start, max_start))
    return state.list_start != prev


def build_status_line(left_text: str, width: int, right_text: str = "") -> str:
    usable = max(1, width - 1)
    if usable <= len(right_text):
        return right_text[-usable:]
    left_limit = max(0, usable - len(right_text) - 1)
    left = left_text[:left_limit]
    gap = " " * (usable - len(left) - len(right_text))
    return f"{left}{gap}{right_text}"


def highlight_query(text: str, query: str, no_color: bool = False) -> str:
    """Mark the first case-insensitive occurrence of ``query`` in ``text``."""
    if not query or no_color:
        return text
    idx = text.casefold().find(query.casefold())
    if idx < 0:
        return text
    end = idx + len(query)
    return text[:idx] + MATCH_COLOR + text[idx:end] + RESET + text[end:]


def format_tree_row(entry: Entry, expanded: bool, no_color: bool = False) -> str:
    indent = "  " * entry.depth
    if entry.is_dir:
        marker = "▾ " if expanded else "▸ "
        name = f"{entry.name}/"
        return f"{indent}{_paint(MARKER_COLOR, marker, no_color)}{_paint(DIR_COLOR, name, no_color)}"
    return f"{indent}  {_paint(FILE_COLOR, entry.name, no_color)}"


def format_match_row(path: str, score: int, query: str, no_color: bool = False) -> str:
    label = _paint(DIM_COLOR, f"{score:>5} ", no_color)
    return f"{label}{highlight_query(path, query, no_color)}"


def _browse_status(state: AppState) -> str:
    if state.status_message:
        return state.status_message
    if state.index.indexing:
        return INDEXING_STATUS
    return ""


def render_browse_rows(state: AppState, width: int, height: int, no_color: bool = False) -> list[str]:
    index = state.index
    rows: list[str] = []

    if state.create_active:
        base = f"{state.create_base}/" if state.create_base else "./"
        prompt = f"{_paint(PROMPT_COLOR, 'new', no_color)} {base}{state.create_input}▏"
    else:
        counter = f"{index.match_count()}/{len(index.flat)}" if index.search_active else ""
        left = f"{_paint(PROMPT_COLOR, '>', no_color)} {state.query}"
        gap = max(1, width - display_width(left) - len(counter) - 1)
        prompt = f"{left}{' ' * gap}{_paint(DIM_COLOR, counter, no_color)}"
    rows.append(prompt)

    list_rows = list_rows_for_height(height)
    for offset in range(list_rows):
        idx = state.list_start + offset
        if index.search_active:
            match = index.match_path_at(idx)
            if match is None:
                rows.append("")
                continue
            text = format_match_row(match[0], match[1], index.query, no_color)
        else:
            entry = index.entry_at(idx)
            if entry is None:
                rows.append("")
                continue
            text = format_tree_row(entry, index.tree.is_expanded(entry.path), no_color)
        text = clip_ansi_line(text, max(1, width - 1))
        if idx == state.selected_idx:
            text = selected_with_ansi(text) if not no_color else f"> {text}"
        rows.append(text)

    hidden = "hidden:on" if index.show_hidden else "hidden:off"
    status = build_status_line(_browse_status(state), width, f"{hidden} · {BROWSE_HINT}")
    rows.append(_paint(DIM_COLOR, status, no_color))
    return rows


def render_editor_rows(
    state: AppState,
    width: int,
    height: int,
    style: str = DEFAULT_STYLE,
    no_color: bool = False,
) -> list[str]:
    editor = state.editor
    if editor is None:
        return render_browse_rows(state, width, height, no_color)

    text_rows = list_rows_for_height(height)
    editor.ensure_cursor_visible(text_rows)

    title = editor.filename
    if editor.is_modified():
        title += " [+]"
    if state.file_changed_externally:
        title += " " + _paint(WARN_COLOR, "[changed on disk]", no_color)
    row, col = editor.cursor
    position = f"Ln {row + 1}, Col {col + 1}"
    gap = max(1, width - display_width(title) - len(position) - 1)
    rows = [f"{_paint(PROMPT_COLOR, title, no_color)}{' ' * gap}{position}"]

    lines = editor.highlighted_lines(style, no_color)
    gutter_width = len(str(len(lines)))
    for offset in range(text_rows):
        line_idx = editor.top + offset
        if line_idx >= len(lines):
            rows.append(_paint(GUTTER_COLOR, "~", no_color))
            continue
        gutter = _paint(GUTTER_COLOR, f"{line_idx + 1:>{gutter_width}} ", no_color)
        text = clip_ansi_line(lines[line_idx], max(1, width - gutter_width - 2))
        rows.append(f"{gutter}{text}")

    status = build_status_line(state.status_message, width, EDIT_HINT)
    rows.append(_paint(DIM_COLOR, status, no_color))
    return rows


def cursor_position(state: AppState) -> tuple[int, int] | None:
    """1-based terminal (row, col) of the editor cursor, if it is on screen."""
    editor = state.editor
    if not state.editing or editor is None:
        return None
    gutter_width = len(str(len(editor.lines)))
    row = editor.row - editor.top + 2
    line = editor.lines[editor.row]
    col = display_width(line[: editor.col]) + gutter_width + 2
    return row, col


def render_frame(
    state: AppState,
    width: int,
    height: int,
    style: str = DEFAULT_STYLE,
    no_color: bool = False,
) -> str:
    """Build one full screen, cleared and drawn from the top-left corner."""
    if state.editing:
        rows = render_editor_rows(state, width, height, style, no_color)
    else:
        rows = render_browse_rows(state, width, height, no_color)
    out = ["\033[H\033[J", "\r\n".join(row + "\033[K" for row in rows[:height])]
    position = cursor_position(state)
    if position is not None:
        out.append(f"\033[{position[0]};{position[1]}H\033[?25h")
    else:
        out.append("\033[?25l")
    return "".join(out)


__all__ = [
    "build_status_line",
    "cursor_position",
    "ensure_selection_visible",
    "format_match_row",
    "format_tree_row",
    "highlight_query",
    "list_rows_for_height",
    "render_browse_rows",
    "render_editor_rows",
    "render_frame",
    "selected_with_ansi",
]
