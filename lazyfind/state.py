from __future__ import annotations

from dataclasses import dataclass

from .editor import TextBuffer
from .file_index import FileIndex

INDEXING_STATUS = "Indexing..."


@dataclass
class AppState:
    index: FileIndex
    view: str = "list"
    editor: TextBuffer | None = None
    query: str = ""
    selected_idx: int = 0
    list_start: int = 0
    list_rows: int = 1
    status_message: str = ""
    file_changed_externally: bool = False
    create_active: bool = False
    create_input: str = ""
    create_base: str = ""
    should_quit: bool = False
    dirty: bool = True

    @property
    def editing(self) -> bool:
        return self.view == "edit" and self.editor is not None


def clamp_selection(state: AppState) -> None:
    """Keep the cursor inside the current list after it changed length."""
    last = max(0, state.index.match_count() - 1)
    if state.selected_idx > last:
        state.selected_idx = last
    if state.selected_idx < 0:
        state.selected_idx = 0
