"""One-shot background scan that fills the flat file index at startup."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from queue import Empty, Queue

from ..file_tree_model import collect_files
from ..runtime_logging import get_runtime_logger


@dataclass(frozen=True)
class IndexOutcome:
    """Completed scan: either ``files`` or ``error`` is set."""

    files: tuple[str, ...] | None = None
    error: str | None = None
    disconnected: bool = False

    @property
    def ok(self) -> bool:
        return self.files is not None


PENDING = None
DISCONNECTED = IndexOutcome(error="worker disconnected", disconnected=True)


class BackgroundIndexer:
    """Run exactly one full scan on a daemon thread and hand back its result.

    ``poll`` never blocks. It returns ``PENDING`` while the worker runs, the
    ``IndexOutcome`` once, and ``PENDING`` forever after. A worker that exits
    without delivering is reported as ``DISCONNECTED``.
    """

    def __init__(
        self,
        root: Path,
        show_hidden: bool,
        collect: Callable[[Path, bool], list[str]] = collect_files,
    ) -> None:
        self.root = root
        self.show_hidden = show_hidden
        self._collect = collect
        self._results: Queue[IndexOutcome] = Queue(maxsize=1)
        self._done = False
        self._logger = get_runtime_logger()
        self._worker = threading.Thread(
            target=self._run,
            name="lazyfind-file-index",
            daemon=True,
        )
        self._logger.info("index.started", root=str(root), show_hidden=show_hidden)
        self._worker.start()

    def _run(self) -> None:
        try:
            with self._logger.timed("index.finished", root=str(self.root)) as result:
                files = self._collect(self.root, self.show_hidden)
                result["file_count"] = len(files)
        except Exception as exc:
            self._logger.error("index.failed", root=str(self.root), error=str(exc))
            self._results.put_nowait(IndexOutcome(error=str(exc)))
            return
        self._results.put_nowait(IndexOutcome(files=tuple(files)))

    @property
    def pending(self) -> bool:
        return not self._done

    def poll(self) -> IndexOutcome | None:
        if self._done:
            return PENDING
        try:
            outcome = self._results.get_nowait()
        except Empty:
            if self._worker.is_alive():
                return PENDING
            # the worker may have delivered between the two checks
            try:
                outcome = self._results.get_nowait()
            except Empty:
                self._logger.error("index.disconnected", root=str(self.root))
                outcome = DISCONNECTED
        self._done = True
        return outcome


__all__ = ["BackgroundIndexer", "DISCONNECTED", "IndexOutcome", "PENDING"]
