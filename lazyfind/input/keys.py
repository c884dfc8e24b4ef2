"""Keyboard and mouse dispatch for browse, create, and edit modes.

Every handler returns whether the screen needs a redraw.
"""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from ..create import create_entry
from ..editor import TextBuffer
from ..errors import EditorError, WalkError
from ..runtime_logging import get_runtime_logger
from ..state import AppState, clamp_selection
from .key_registry import KeyComboBinding, KeyComboRegistry
from .mouse import WHEEL_STEP, clicked_list_index, wheel_direction


class FileWatchControl(Protocol):
    def watch_file(self, path: Path) -> str | None: ...

    def unwatch_file(self) -> None: ...

    def refresh_now(self) -> bool: ...


def _is_text_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


class KeyHandler:
    """Routes one decoded key token to the active mode."""

    def __init__(
        self,
        state: AppState,
        watch: FileWatchControl,
        save_show_hidden: Callable[[bool], None],
    ) -> None:
        self.state = state
        self.watch = watch
        self._save_show_hidden = save_show_hidden
        self._logger = get_runtime_logger()
        self._browse_keys = KeyComboRegistry().register_bindings(
            KeyComboBinding(("ESC", "CTRL_C"), self.quit),
            KeyComboBinding(("ENTER",), self.activate_selection),
            KeyComboBinding(("UP",), lambda: self.move_selection(-1)),
            KeyComboBinding(("DOWN",), lambda: self.move_selection(1)),
            KeyComboBinding(("PAGE_UP",), lambda: self.move_selection(-self.state.list_rows)),
            KeyComboBinding(("PAGE_DOWN",), lambda: self.move_selection(self.state.list_rows)),
            KeyComboBinding(("TAB",), self.toggle_hidden),
            KeyComboBinding(("CTRL_N",), self.start_create),
            KeyComboBinding(("BACKSPACE",), self.delete_query_char),
        )
        self._edit_keys = KeyComboRegistry().register_bindings(
            KeyComboBinding(("ESC",), self.close_editor),
            KeyComboBinding(("CTRL_S",), self.save_editor),
            KeyComboBinding(("CTRL_R",), self.reload_editor),
        )
        self._create_keys = KeyComboRegistry().register_bindings(
            KeyComboBinding(("ESC",), self.stop_create),
            KeyComboBinding(("ENTER",), self.submit_create),
            KeyComboBinding(("BACKSPACE",), self.delete_create_char),
        )

    def handle(self, key: str) -> bool:
        if not key:
            return False
        if key.startswith("MOUSE"):
            return self.handle_mouse(key)
        if self.state.editing:
            return self._handle_edit_key(key)
        if self.state.create_active:
            return self._handle_create_key(key)
        return self._handle_browse_key(key)

    def _handle_browse_key(self, key: str) -> bool:
        handled = self._browse_keys.dispatch(key)
        if handled is not None:
            return bool(handled)
        if _is_text_key(key):
            self.set_query(self.state.query + key)
            return True
        return False

    def _handle_create_key(self, key: str) -> bool:
        handled = self._create_keys.dispatch(key)
        if handled is not None:
            return bool(handled)
        if _is_text_key(key):
            self.state.create_input += key
            return True
        return False

    def _handle_edit_key(self, key: str) -> bool:
        handled = self._edit_keys.dispatch(key)
        if handled is not None:
            return bool(handled)
        editor = self.state.editor
        return editor is not None and editor.handle_key(key)

    # browse / search

    def quit(self) -> bool:
        self.state.should_quit = True
        return False

    def set_query(self, text: str) -> None:
        self.state.query = text
        self.state.index.update_query(text)
        self.state.selected_idx = 0
        self.state.list_start = 0

    def delete_query_char(self) -> bool:
        if not self.state.query:
            return False
        self.set_query(self.state.query[:-1])
        return True

    def move_selection(self, delta: int) -> bool:
        prev = self.state.selected_idx
        self.state.selected_idx += delta
        clamp_selection(self.state)
        return self.state.selected_idx != prev

    def toggle_hidden(self) -> bool:
        index = self.state.index
        try:
            index.toggle_hidden()
        except WalkError as exc:
            self.state.status_message = f"Refresh failed: {exc}"
            return True
        self._save_show_hidden(index.show_hidden)
        index.update_query(self.state.query)
        self.state.selected_idx = 0
        self.state.list_start = 0
        self.state.status_message = f"Hidden files: {'SHOWN' if index.show_hidden else 'HIDDEN'}"
        return True

    def activate_selection(self) -> bool:
        """Toggle the directory under the cursor or open the file."""
        index = self.state.index
        idx = self.state.selected_idx
        if not index.search_active:
            entry = index.entry_at(idx)
            if entry is None:
                return False
            if entry.is_dir:
                try:
                    index.toggle_expanded(entry.path)
                except WalkError as exc:
                    self.state.status_message = f"Expand failed: {exc}"
                clamp_selection(self.state)
                return True
        target = index.open_target_at(idx)
        if target is None:
            return False
        return self.open_file(target)

    def open_file(self, path: Path) -> bool:
        try:
            editor = TextBuffer.open(path)
        except EditorError as exc:
            self.state.status_message = str(exc)
            return True
        self.state.editor = editor
        self.state.view = "edit"
        self.state.file_changed_externally = False
        error = self.watch.watch_file(path)
        self.state.status_message = error if error is not None else "File watcher active"
        self._logger.info("editor.opened", path=str(path))
        return True

    # create

    def start_create(self) -> bool:
        self.state.create_active = True
        self.state.create_input = ""
        self.state.create_base = self.state.index.base_dir_at(self.state.selected_idx)
        return True

    def stop_create(self) -> bool:
        self.state.create_active = False
        self.state.create_input = ""
        return True

    def delete_create_char(self) -> bool:
        self.state.create_input = self.state.create_input[:-1]
        return True

    def submit_create(self) -> bool:
        result = create_entry(self.state.index.root, self.state.create_base, self.state.create_input)
        self.stop_create()
        if not result.message:
            return True
        if result.ok:
            self.watch.refresh_now()
            self._logger.info("create.applied", path=result.path)
        self.state.status_message = result.message
        return True

    # edit

    def save_editor(self) -> bool:
        editor = self.state.editor
        if editor is None:
            return False
        try:
            editor.save()
        except EditorError as exc:
            self.state.status_message = f"Save failed: {exc}"
            return True
        self.state.file_changed_externally = False
        self.state.status_message = f"Saved {editor.filename}"
        return True

    def reload_editor(self) -> bool:
        editor = self.state.editor
        if editor is None:
            return False
        try:
            editor.reload()
        except EditorError as exc:
            self.state.status_message = f"Reload failed: {exc}"
            return True
        self.state.file_changed_externally = False
        self.state.status_message = "File reloaded"
        return True

    def close_editor(self) -> bool:
        """Save pending edits, drop the file watcher, and return to the list."""
        editor = self.state.editor
        if editor is not None and editor.is_modified():
            try:
                editor.save()
            except EditorError as exc:
                self.state.status_message = f"Save failed: {exc}"
                return True
        self.watch.unwatch_file()
        self.state.editor = None
        self.state.view = "list"
        self.state.status_message = ""
        return True

    # mouse

    def handle_mouse(self, key: str) -> bool:
        direction = wheel_direction(key)
        if self.state.editing:
            if direction and self.state.editor is not None:
                self.state.editor.scroll(direction * WHEEL_STEP)
                return True
            return False
        if self.state.create_active:
            return False
        if direction:
            return self.move_selection(direction * WHEEL_STEP)
        clicked = clicked_list_index(key, self.state.list_start, self.state.list_rows)
        if clicked is None or clicked >= self.state.index.match_count():
            return False
        self.state.selected_idx = clicked
        self.activate_selection()
        return True


__all__ = ["FileWatchControl", "KeyHandler"]
