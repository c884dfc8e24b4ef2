"""Per-tick reconciliation of watcher and indexer signals.

The main loop calls ``RefreshScheduler.tick`` about every 100ms. Channels are
drained in a fixed order: open-file watcher, root watcher, background
indexer, then the debounced structural refresh.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

from ..errors import EditorError, WalkError, WatchError
from ..runtime_logging import get_runtime_logger
from ..state import INDEXING_STATUS, AppState, clamp_selection
from .index_warmup import BackgroundIndexer
from .watchers import FileWatcher, RootWatcher

TICK_SECONDS = 0.1
ROOT_REFRESH_DEBOUNCE_SECONDS = 0.3


class RefreshScheduler:
    """Apply filesystem changes to ``state`` from the driver thread only.

    Structural refreshes are throttled: one runs at most every
    ``ROOT_REFRESH_DEBOUNCE_SECONDS`` while signals keep arriving, and never
    while the initial index is running.
    """

    def __init__(
        self,
        state: AppState,
        root_watcher: RootWatcher | None = None,
        indexer: BackgroundIndexer | None = None,
        clock: Callable[[], float] = time.monotonic,
        file_watcher_factory: Callable[[Path], FileWatcher] = FileWatcher,
    ) -> None:
        self.state = state
        self.root_watcher = root_watcher
        self.indexer = indexer
        self.file_watcher: FileWatcher | None = None
        self._clock = clock
        self._file_watcher_factory = file_watcher_factory
        self._logger = get_runtime_logger()
        now = clock()
        self.root_refresh_pending = False
        self.last_root_refresh = now
        self.refresh_count = 0

    def watch_file(self, path: Path) -> str | None:
        """Attach the open-file watcher, replacing any previous one.

        Returns an error message when the watch cannot be established.
        """
        self.unwatch_file()
        try:
            self.file_watcher = self._file_watcher_factory(path)
        except WatchError as exc:
            return f"Watcher failed: {exc}"
        return None

    def unwatch_file(self) -> None:
        if self.file_watcher is not None:
            self.file_watcher.close()
            self.file_watcher = None
        self.state.file_changed_externally = False

    def close(self) -> None:
        self.unwatch_file()
        if self.root_watcher is not None:
            self.root_watcher.close()
            self.root_watcher = None

    def _check_file_changes(self) -> bool:
        if self.file_watcher is None:
            return False
        changed = self.file_watcher.drain()
        editor = self.state.editor
        if not changed or editor is None:
            return False

        if editor.is_modified():
            self.state.file_changed_externally = True
            self.state.status_message = "External change detected (unsaved edits)"
            self._logger.warning("reload.conflict", path=str(editor.path))
            return True
        try:
            editor.reload()
        except EditorError as exc:
            self.state.status_message = f"Reload failed: {exc}"
            return True
        self.state.file_changed_externally = False
        self.state.status_message = "File reloaded (external change)"
        self._logger.info("reload.applied", path=str(editor.path))
        return True

    def _check_root_changes(self) -> None:
        if self.root_watcher is None:
            return
        if self.root_watcher.drain():
            self.root_refresh_pending = True

    def _check_indexing(self, now: float) -> bool:
        if self.indexer is None:
            return False
        outcome = self.indexer.poll()
        if outcome is None:
            return False
        self.indexer = None
        index = self.state.index

        if outcome.files is not None:
            index.apply_index(outcome.files)
            if self.state.status_message == INDEXING_STATUS:
                self.state.status_message = ""
            # a full scan supersedes any structural change seen while it ran
            if self.root_refresh_pending:
                index.reload_tree()
                self.root_refresh_pending = False
                self.last_root_refresh = now
        else:
            index.indexing = False
            self.state.status_message = f"Indexing failed: {outcome.error}"
        clamp_selection(self.state)
        return True

    def refresh_now(self) -> bool:
        """Synchronous full rescan plus reload of expanded directories."""
        try:
            self.state.index.refresh()
        except WalkError as exc:
            self.state.status_message = f"Refresh failed: {exc}"
            self._logger.error("refresh.failed", error=str(exc))
            return False
        self.refresh_count += 1
        clamp_selection(self.state)
        self._logger.debug(
            "refresh.applied",
            file_count=len(self.state.index.flat),
            refresh_count=self.refresh_count,
        )
        return True

    def tick(self, now: float | None = None) -> bool:
        """Run one reconciliation pass; return whether the screen needs a redraw."""
        if now is None:
            now = self._clock()
        redraw = self._check_file_changes()
        self._check_root_changes()
        if self._check_indexing(now):
            redraw = True

        if (
            self.root_refresh_pending
            and not self.state.index.indexing
            and now - self.last_root_refresh >= ROOT_REFRESH_DEBOUNCE_SECONDS
        ):
            self.refresh_now()
            self.root_refresh_pending = False
            self.last_root_refresh = now
            if not self.state.editing:
                redraw = True
        return redraw


__all__ = ["ROOT_REFRESH_DEBOUNCE_SECONDS", "RefreshScheduler", "TICK_SECONDS"]
