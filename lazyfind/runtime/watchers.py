"""Filesystem change watchers backed by watchdog observers.

Each watcher owns one observer thread and one unbounded queue. The observer
thread only ever calls ``put_nowait``, so event delivery never blocks on the
UI loop. The loop drains the queue once per tick; any number of events in one
drain collapse into a single "changed" signal.
"""

from __future__ import annotations

import os
from collections.abc import Callable
from pathlib import Path
from queue import Empty, Queue
from typing import Any

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from ..errors import WatchError
from ..runtime_logging import get_runtime_logger

STRUCTURAL_EVENT_TYPES = frozenset({EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MOVED})
CONTENT_EVENT_TYPES = frozenset({EVENT_TYPE_MODIFIED, EVENT_TYPE_CREATED})


def _event_path(raw: Any) -> str:
    if not raw:
        return ""
    return os.path.normpath(os.fsdecode(raw))


class _ForwardingHandler(FileSystemEventHandler):
    """Forward accepted events into a queue without ever blocking."""

    def __init__(self, channel: Queue[str], accept: Callable[[FileSystemEvent], bool]) -> None:
        super().__init__()
        self._channel = channel
        self._accept = accept

    def on_any_event(self, event: FileSystemEvent) -> None:
        if not self._accept(event):
            return
        self._channel.put_nowait(event.event_type)


class _Watcher:
    kind = "watch"

    def __init__(
        self,
        watch_dir: Path,
        recursive: bool,
        observer_factory: Callable[[], Any] = Observer,
    ) -> None:
        self.watch_dir = watch_dir
        self.channel: Queue[str] = Queue()
        self.handler = _ForwardingHandler(self.channel, self.accepts)
        self.lost = False
        self._closed = False
        self._logger = get_runtime_logger()
        self._observer = observer_factory()
        try:
            self._observer.schedule(self.handler, str(watch_dir), recursive=recursive)
            self._observer.start()
        except (OSError, RuntimeError) as exc:
            self._stop_observer()
            self._logger.error(f"{self.kind}.failed", path=str(watch_dir), error=str(exc))
            raise WatchError(str(exc)) from exc
        self._logger.info(f"{self.kind}.attached", path=str(watch_dir), recursive=recursive)

    def accepts(self, event: FileSystemEvent) -> bool:
        raise NotImplementedError

    def drain(self) -> bool:
        """Empty the channel; return whether at least one event arrived."""
        changed = False
        while True:
            try:
                self.channel.get_nowait()
            except Empty:
                break
            changed = True
        if not changed and not self._closed and not self.lost and not self._observer.is_alive():
            self.lost = True
            self._logger.warning(f"{self.kind}.lost", path=str(self.watch_dir))
        return changed

    def _stop_observer(self) -> None:
        try:
            self._observer.stop()
            if self._observer.is_alive():
                self._observer.join(timeout=2)
        except RuntimeError:
            # join() on a never-started observer
            pass

    def close(self) -> None:
        """Unsubscribe, then discard anything still queued."""
        if self._closed:
            return
        self._closed = True
        self._stop_observer()
        while True:
            try:
                self.channel.get_nowait()
            except Empty:
                break
        self._logger.info(f"{self.kind}.detached", path=str(self.watch_dir))


class FileWatcher(_Watcher):
    """Signal content changes to one open file.

    Watches the parent directory non-recursively and keeps only events for
    the file itself, including a rename onto it (atomic-save editors).
    """

    kind = "watch.file"

    def __init__(self, path: Path, observer_factory: Callable[[], Any] = Observer) -> None:
        self.path = path.resolve()
        self._target = os.path.normpath(str(self.path))
        super().__init__(self.path.parent, recursive=False, observer_factory=observer_factory)

    def accepts(self, event: FileSystemEvent) -> bool:
        if event.is_directory:
            return False
        if event.event_type in CONTENT_EVENT_TYPES:
            return _event_path(event.src_path) == self._target
        if event.event_type == EVENT_TYPE_MOVED:
            return _event_path(getattr(event, "dest_path", "")) == self._target
        return False


class RootWatcher(_Watcher):
    """Signal structural changes (create, delete, rename) anywhere under the root."""

    kind = "watch.root"

    def __init__(self, root: Path, observer_factory: Callable[[], Any] = Observer) -> None:
        self.root = root.resolve()
        super().__init__(self.root, recursive=True, observer_factory=observer_factory)

    def accepts(self, event: FileSystemEvent) -> bool:
        return event.event_type in STRUCTURAL_EVENT_TYPES


__all__ = [
    "CONTENT_EVENT_TYPES",
    "FileWatcher",
    "RootWatcher",
    "STRUCTURAL_EVENT_TYPES",
]
