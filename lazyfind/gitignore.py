"""Ask git which paths under a walk root it ignores.

The answer covers nested ``.gitignore`` files, ``.git/info/exclude`` and the
user's global excludes. Matchers are cached per root and shared by the
background indexer and the driver loop, so the cache is lock-guarded.
"""

from __future__ import annotations

import shutil
import subprocess
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path

from .runtime_logging import get_runtime_logger

GITIGNORE_MATCHER_CACHE_MAX = 64
GITIGNORE_MATCHER_CACHE_TTL_SECONDS = 2.0


@dataclass(frozen=True)
class GitIgnoreMatcher:
    """Ignored paths under ``root``, as root-relative posix strings."""

    root: Path
    ignored_files: frozenset[str]
    ignored_dirs: frozenset[str]

    def is_ignored(self, rel_path: str) -> bool:
        """Return whether ``rel_path`` or any of its parent directories is ignored."""
        if not rel_path:
            return False
        if rel_path in self.ignored_files:
            return True
        parts = rel_path.split("/")
        return any("/".join(parts[:depth]) in self.ignored_dirs for depth in range(len(parts), 0, -1))


@dataclass(frozen=True)
class _CachedMatcher:
    matcher: GitIgnoreMatcher | None
    root_mtime_ns: int | None
    loaded_at: float


_GITIGNORE_MATCHER_CACHE: OrderedDict[str, _CachedMatcher] = OrderedDict()
_CACHE_LOCK = threading.Lock()


def clear_gitignore_cache() -> None:
    with _CACHE_LOCK:
        _GITIGNORE_MATCHER_CACHE.clear()


def _git_output(*args: str) -> bytes:
    """Run ``git`` and return stdout; raises ``OSError`` or ``CalledProcessError``."""
    return subprocess.run(
        ["git", *args],
        stdout=subprocess.PIPE,
        stderr=subprocess.DEVNULL,
        check=True,
    ).stdout


def _load_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Build a matcher for ``root``, or ``None`` when git cannot answer.

    That covers a missing ``git`` binary, a root outside any work tree, and
    failing git commands. Ignored paths outside ``root`` are dropped even when the
    repository starts higher up.
    """
    if shutil.which("git") is None:
        return None
    root = root.resolve()
    try:
        top_level = _git_output("-C", str(root), "rev-parse", "--show-toplevel").decode().strip()
    except (OSError, subprocess.CalledProcessError):
        return None
    if not top_level:
        return None
    repo_root = Path(top_level).resolve()
    if root != repo_root and repo_root not in root.parents:
        return None

    try:
        listing = _git_output(
            "-C", str(repo_root), "ls-files", "-z", "--others", "-i", "--exclude-standard", "--directory"
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        get_runtime_logger().warning("gitignore.query_failed", root=str(root), error=str(exc))
        return None

    files: set[str] = set()
    dirs: set[str] = set()
    for raw in listing.split(b"\x00"):
        repo_rel = raw.decode("utf-8", errors="replace")
        trailing_slash = repo_rel.endswith("/")
        repo_rel = repo_rel.rstrip("/")
        if not repo_rel:
            continue
        abs_path = repo_root / repo_rel
        if root not in abs_path.parents:
            continue
        rel = abs_path.relative_to(root).as_posix()
        if trailing_slash or abs_path.is_dir():
            dirs.add(rel)
        else:
            files.add(rel)
    return GitIgnoreMatcher(root=root, ignored_files=frozenset(files), ignored_dirs=frozenset(dirs))


def get_gitignore_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Return the matcher for ``root``, reloading it when stale.

    A cached entry is reused while the root's mtime is unchanged and it is
    younger than ``GITIGNORE_MATCHER_CACHE_TTL_SECONDS``. The git query runs
    outside the lock.
    """
    root = root.resolve()
    key = str(root)
    try:
        mtime_ns: int | None = root.stat().st_mtime_ns
    except OSError:
        mtime_ns = None
    now = time.monotonic()

    with _CACHE_LOCK:
        cached = _GITIGNORE_MATCHER_CACHE.get(key)
        if (
            cached is not None
            and cached.root_mtime_ns == mtime_ns
            and now - cached.loaded_at <= GITIGNORE_MATCHER_CACHE_TTL_SECONDS
        ):
            _GITIGNORE_MATCHER_CACHE.move_to_end(key)
            return cached.matcher

    matcher = _load_matcher(root)
    with _CACHE_LOCK:
        _GITIGNORE_MATCHER_CACHE[key] = _CachedMatcher(matcher, mtime_ns, now)
        _GITIGNORE_MATCHER_CACHE.move_to_end(key)
        while len(_GITIGNORE_MATCHER_CACHE) > GITIGNORE_MATCHER_CACHE_MAX:
            _GITIGNORE_MATCHER_CACHE.popitem(last=False)
    return matcher


__all__ = [
    "GITIGNORE_MATCHER_CACHE_MAX",
    "GITIGNORE_MATCHER_CACHE_TTL_SECONDS",
    "GitIgnoreMatcher",
    "clear_gitignore_cache",
    "get_gitignore_matcher",
]
