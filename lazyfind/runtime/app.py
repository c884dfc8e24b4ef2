"""Runtime composition layer for lazyfind.

Builds initial state, starts the background indexer and root watcher, wires
key handling to the refresh scheduler, and runs the loop.
"""

from __future__ import annotations

import sys
from pathlib import Path

from ..errors import WatchError
from ..file_index import FileIndex
from ..input import KeyHandler
from ..runtime_logging import get_runtime_logger
from ..state import INDEXING_STATUS, AppState
from .config import save_show_hidden
from .index_warmup import BackgroundIndexer
from .loop import RuntimeLoopOptions, run_main_loop
from .refresh import RefreshScheduler
from .terminal import TerminalController
from .watchers import RootWatcher


def build_session(root: Path, show_hidden: bool) -> tuple[AppState, RefreshScheduler]:
    """Create the index, background scan, and watchers for ``root``.

    Raises ``WalkError`` when the root cannot be listed. A root watcher that
    fails to start is reported in the status line only.
    """
    logger = get_runtime_logger()
    index = FileIndex(root, show_hidden, deferred=True)
    state = AppState(index=index, status_message=INDEXING_STATUS)
    indexer = BackgroundIndexer(index.root, show_hidden)

    root_watcher: RootWatcher | None = None
    try:
        root_watcher = RootWatcher(index.root)
    except WatchError as exc:
        state.status_message = f"Root watcher failed: {exc}"

    scheduler = RefreshScheduler(state, root_watcher=root_watcher, indexer=indexer)
    logger.info("session.started", root=str(index.root), show_hidden=show_hidden)
    return state, scheduler


def run_app(
    root: Path,
    show_hidden: bool,
    style: str,
    no_color: bool = False,
    open_path: Path | None = None,
) -> None:
    """Run the interactive browser on ``root``, optionally opening ``open_path``."""
    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise SystemExit("lazyfind needs an interactive terminal (try --list or --query)")

    state, scheduler = build_session(root, show_hidden)
    keys = KeyHandler(state, scheduler, save_show_hidden)
    if open_path is not None:
        keys.open_file(open_path.resolve())

    stdin_fd = sys.stdin.fileno()
    terminal = TerminalController(stdin_fd, sys.stdout.fileno())
    try:
        run_main_loop(state, terminal, stdin_fd, scheduler, keys, RuntimeLoopOptions(style, no_color))
    finally:
        scheduler.close()
        get_runtime_logger().info("session.stopped", root=str(state.index.root))
