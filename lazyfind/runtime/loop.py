"""Main interactive event loop for the terminal UI.

Each iteration waits up to one tick for input, dispatches it, runs the
refresh scheduler, and redraws when something changed.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..input import KeyHandler, read_key
from ..render import ensure_selection_visible, list_rows_for_height, render_frame
from ..state import AppState
from .refresh import TICK_SECONDS, RefreshScheduler
from .terminal import TerminalController


@dataclass(frozen=True)
class RuntimeLoopOptions:
    """Rendering options fixed for the whole session."""

    style: str
    no_color: bool = False


def run_main_loop(
    state: AppState,
    terminal: TerminalController,
    stdin_fd: int,
    scheduler: RefreshScheduler,
    keys: KeyHandler,
    options: RuntimeLoopOptions,
) -> None:
    """Run until a quit action occurs.

    Input is read with a timeout of one tick so watcher and indexer signals
    are applied even while the user is idle.
    """
    tick_ms = int(TICK_SECONDS * 1000)
    last_size: tuple[int, int] | None = None
    with terminal.raw_mode():
        while not state.should_quit:
            size = terminal.size()
            if size != last_size:
                last_size = size
                state.dirty = True
            width, height = size
            state.list_rows = list_rows_for_height(height)
            if ensure_selection_visible(state):
                state.dirty = True

            if state.dirty:
                terminal.write_frame(render_frame(state, width, height, options.style, options.no_color))
                state.dirty = False

            key = read_key(stdin_fd, timeout_ms=tick_ms)
            if key and keys.handle(key):
                state.dirty = True
            if state.should_quit:
                break
            if scheduler.tick():
                state.dirty = True
