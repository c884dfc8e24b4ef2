"""Tests for per-tick reconciliation of watcher and indexer signals."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from types import SimpleNamespace
from unittest import mock

from lazyfind.editor import TextBuffer
from lazyfind.errors import WalkError, WatchError
from lazyfind.file_index import FileIndex
from lazyfind.runtime.index_warmup import DISCONNECTED, IndexOutcome
from lazyfind.runtime.refresh import ROOT_REFRESH_DEBOUNCE_SECONDS, RefreshScheduler
from lazyfind.state import INDEXING_STATUS, AppState


class FakeWatcher:
    """Watcher double whose ``drain`` reports queued signals."""

    def __init__(self) -> None:
        self.pending = False
        self.closed = False

    def signal(self) -> None:
        self.pending = True

    def drain(self) -> bool:
        changed = self.pending
        self.pending = False
        return changed

    def close(self) -> None:
        self.closed = True


class FakeIndexer:
    def __init__(self, outcome: IndexOutcome | None = None) -> None:
        self.outcome = outcome

    def poll(self) -> IndexOutcome | None:
        return self.outcome


class RefreshSchedulerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.root = Path(self._tmp.name).resolve()
        (self.root / "a").mkdir()
        (self.root / "a" / "b.txt").write_text("b\n", encoding="utf-8")
        (self.root / "a" / "c.txt").write_text("c\n", encoding="utf-8")
        patcher = mock.patch("lazyfind.file_tree_model.ignore.get_gitignore_matcher", return_value=None)
        patcher.start()
        self.addCleanup(patcher.stop)

    def make_state(self, deferred: bool = False) -> AppState:
        return AppState(index=FileIndex(self.root, show_hidden=False, deferred=deferred))


class RootRefreshDebounceTests(RefreshSchedulerTestCase):
    def test_burst_of_signals_yields_exactly_one_refresh(self) -> None:
        state = self.make_state()
        root_watcher = FakeWatcher()
        scheduler = RefreshScheduler(state, root_watcher=root_watcher, clock=lambda: 0.0)

        with mock.patch.object(state.index, "refresh", wraps=state.index.refresh) as refresh:
            now = 0.0
            for _ in range(5):
                now += 0.05
                root_watcher.signal()
                scheduler.tick(now)
            while now < 3.0:
                now += 0.1
                scheduler.tick(now)

        self.assertEqual(refresh.call_count, 1)
        self.assertEqual(scheduler.refresh_count, 1)
        self.assertFalse(scheduler.root_refresh_pending)

    def test_steady_signal_stream_still_refreshes_each_interval(self) -> None:
        state = self.make_state()
        root_watcher = FakeWatcher()
        scheduler = RefreshScheduler(state, root_watcher=root_watcher, clock=lambda: 0.0)
        (self.root / "a" / "new.txt").write_text("", encoding="utf-8")

        refresh_times: list[float] = []
        now = 0.0
        for step in range(1, 51):
            now = step * 0.1
            root_watcher.signal()
            before = scheduler.refresh_count
            scheduler.tick(now)
            if scheduler.refresh_count > before:
                refresh_times.append(now)

        self.assertIn("a/new.txt", state.index.flat.files)
        self.assertGreater(len(refresh_times), 1)
        self.assertLessEqual(refresh_times[0], ROOT_REFRESH_DEBOUNCE_SECONDS + 0.1)
        gaps = [later - earlier for earlier, later in zip(refresh_times, refresh_times[1:])]
        for gap in gaps:
            self.assertGreaterEqual(gap, ROOT_REFRESH_DEBOUNCE_SECONDS - 1e-9)
            self.assertLessEqual(gap, ROOT_REFRESH_DEBOUNCE_SECONDS + 0.1 + 1e-9)

    def test_refresh_is_throttled_after_previous_refresh(self) -> None:
        state = self.make_state()
        root_watcher = FakeWatcher()
        scheduler = RefreshScheduler(state, root_watcher=root_watcher, clock=lambda: 0.0)

        root_watcher.signal()
        scheduler.tick(1.0)
        self.assertEqual(scheduler.refresh_count, 1)

        root_watcher.signal()
        scheduler.tick(1.0 + ROOT_REFRESH_DEBOUNCE_SECONDS / 2)
        self.assertEqual(scheduler.refresh_count, 1)
        self.assertTrue(scheduler.root_refresh_pending)

        scheduler.tick(1.0 + ROOT_REFRESH_DEBOUNCE_SECONDS)
        self.assertEqual(scheduler.refresh_count, 2)
        self.assertFalse(scheduler.root_refresh_pending)

    def test_no_refresh_while_initial_index_runs(self) -> None:
        state = self.make_state(deferred=True)
        root_watcher = FakeWatcher()
        scheduler = RefreshScheduler(state, root_watcher=root_watcher, indexer=FakeIndexer(), clock=lambda: 0.0)

        root_watcher.signal()
        for step in range(1, 20):
            scheduler.tick(step * 0.1)

        self.assertEqual(scheduler.refresh_count, 0)
        self.assertTrue(scheduler.root_refresh_pending)

    def test_refresh_failure_sets_status(self) -> None:
        state = self.make_state()
        scheduler = RefreshScheduler(state, clock=lambda: 0.0)

        with mock.patch.object(state.index, "refresh", side_effect=WalkError("cannot read root")):
            self.assertFalse(scheduler.refresh_now())

        self.assertEqual(state.status_message, "Refresh failed: cannot read root")
        self.assertEqual(scheduler.refresh_count, 0)


class IndexingOutcomeTests(RefreshSchedulerTestCase):
    def test_success_installs_files_and_clears_indexing_status(self) -> None:
        state = self.make_state(deferred=True)
        state.status_message = INDEXING_STATUS
        indexer = FakeIndexer(IndexOutcome(files=("a/b.txt", "a/c.txt")))
        scheduler = RefreshScheduler(state, indexer=indexer, clock=lambda: 0.0)

        self.assertTrue(scheduler.tick(0.1))

        self.assertFalse(state.index.indexing)
        self.assertEqual(state.index.flat.files, ("a/b.txt", "a/c.txt"))
        self.assertEqual(state.status_message, "")
        self.assertIsNone(scheduler.indexer)

    def test_success_clears_pending_structural_refresh(self) -> None:
        state = self.make_state(deferred=True)
        root_watcher = FakeWatcher()
        indexer = FakeIndexer()
        scheduler = RefreshScheduler(state, root_watcher=root_watcher, indexer=indexer, clock=lambda: 0.0)
        root_watcher.signal()
        scheduler.tick(0.1)
        self.assertTrue(scheduler.root_refresh_pending)

        indexer.outcome = IndexOutcome(files=("a/b.txt",))
        with mock.patch.object(state.index, "reload_tree", wraps=state.index.reload_tree) as reload_tree:
            scheduler.tick(0.2)

        reload_tree.assert_called_once_with()
        self.assertFalse(scheduler.root_refresh_pending)
        self.assertEqual(scheduler.last_root_refresh, 0.2)

    def test_failure_reports_error_and_stops_indexing(self) -> None:
        state = self.make_state(deferred=True)
        scheduler = RefreshScheduler(state, indexer=FakeIndexer(IndexOutcome(error="boom")), clock=lambda: 0.0)

        scheduler.tick(0.1)

        self.assertFalse(state.index.indexing)
        self.assertEqual(state.status_message, "Indexing failed: boom")

    def test_disconnected_worker_is_reported(self) -> None:
        state = self.make_state(deferred=True)
        scheduler = RefreshScheduler(state, indexer=FakeIndexer(DISCONNECTED), clock=lambda: 0.0)

        scheduler.tick(0.1)

        self.assertEqual(state.status_message, "Indexing failed: worker disconnected")


class OpenFileWatchTests(RefreshSchedulerTestCase):
    def open_editor(self, state: AppState, scheduler: RefreshScheduler) -> tuple[TextBuffer, FakeWatcher]:
        path = self.root / "a" / "b.txt"
        editor = TextBuffer.open(path)
        state.editor = editor
        state.view = "edit"
        self.assertIsNone(scheduler.watch_file(path))
        return editor, scheduler.file_watcher

    def make_scheduler(self, state: AppState) -> RefreshScheduler:
        return RefreshScheduler(state, clock=lambda: 0.0, file_watcher_factory=lambda path: FakeWatcher())

    def test_clean_buffer_reloads_on_external_change(self) -> None:
        state = self.make_state()
        scheduler = self.make_scheduler(state)
        editor, watcher = self.open_editor(state, scheduler)

        (self.root / "a" / "b.txt").write_text("changed\n", encoding="utf-8")
        watcher.signal()

        self.assertTrue(scheduler.tick(0.1))
        self.assertEqual(editor.text, "changed\n")
        self.assertEqual(state.status_message, "File reloaded (external change)")
        self.assertFalse(state.file_changed_externally)

    def test_modified_buffer_is_never_overwritten(self) -> None:
        state = self.make_state()
        scheduler = self.make_scheduler(state)
        editor, watcher = self.open_editor(state, scheduler)
        editor.insert("local ")

        (self.root / "a" / "b.txt").write_text("changed\n", encoding="utf-8")
        watcher.signal()
        scheduler.tick(0.1)

        self.assertEqual(editor.text, "local b\n")
        self.assertTrue(editor.is_modified())
        self.assertTrue(state.file_changed_externally)
        self.assertEqual(state.status_message, "External change detected (unsaved edits)")

    def test_unwatch_closes_watcher_and_clears_conflict(self) -> None:
        state = self.make_state()
        scheduler = self.make_scheduler(state)
        _editor, watcher = self.open_editor(state, scheduler)
        state.file_changed_externally = True

        scheduler.unwatch_file()

        self.assertTrue(watcher.closed)
        self.assertIsNone(scheduler.file_watcher)
        self.assertFalse(state.file_changed_externally)

    def test_watch_failure_returns_message(self) -> None:
        state = self.make_state()

        def failing_factory(path: Path):
            raise WatchError("no inotify")

        scheduler = RefreshScheduler(state, clock=lambda: 0.0, file_watcher_factory=failing_factory)

        self.assertEqual(scheduler.watch_file(self.root / "a" / "b.txt"), "Watcher failed: no inotify")
        self.assertIsNone(scheduler.file_watcher)

    def test_close_releases_all_watchers(self) -> None:
        state = self.make_state()
        root_watcher = FakeWatcher()
        scheduler = RefreshScheduler(
            state,
            root_watcher=root_watcher,
            clock=lambda: 0.0,
            file_watcher_factory=lambda path: SimpleNamespace(close=mock.Mock(), drain=lambda: False),
        )
        scheduler.watch_file(self.root / "a" / "b.txt")
        file_watcher = scheduler.file_watcher

        scheduler.close()

        file_watcher.close.assert_called_once_with()
        self.assertTrue(root_watcher.closed)


if __name__ == "__main__":
    unittest.main()
