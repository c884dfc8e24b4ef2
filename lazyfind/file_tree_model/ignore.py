"""Exclusion rules shared by every directory walk.

Combines the hidden-file toggle, the reserved ``.git`` directory, git's own
ignore decisions, and plain ``.ignore`` files (gitignore syntax, honored with
or without a repository).
"""

from __future__ import annotations

from pathlib import Path

import pathspec

from ..gitignore import GitIgnoreMatcher, get_gitignore_matcher

RESERVED_VCS_DIR = ".git"
IGNORE_FILENAME = ".ignore"


def is_hidden_name(name: str) -> bool:
    return name.startswith(".")


class IgnoreRules:
    """Decide whether a root-relative path is excluded from walks.

    ``.ignore`` specs are loaded lazily per directory and cached for the
    lifetime of this object; build a fresh instance per scan to pick up edits.
    """

    def __init__(
        self,
        root: Path,
        show_hidden: bool,
        git_matcher: GitIgnoreMatcher | None = None,
        use_git: bool = True,
    ) -> None:
        self.root = root
        self.show_hidden = show_hidden
        if git_matcher is None and use_git:
            git_matcher = get_gitignore_matcher(root)
        self._git_matcher = git_matcher
        self._specs: dict[str, pathspec.PathSpec | None] = {}

    def _spec_for(self, rel_dir: str) -> pathspec.PathSpec | None:
        if rel_dir in self._specs:
            return self._specs[rel_dir]
        ignore_file = (self.root / rel_dir / IGNORE_FILENAME) if rel_dir else (self.root / IGNORE_FILENAME)
        spec: pathspec.PathSpec | None = None
        try:
            text = ignore_file.read_text(encoding="utf-8", errors="replace")
        except OSError:
            text = None
        if text is not None:
            patterns = [
                line.rstrip()
                for line in text.splitlines()
                if line.strip() and not line.lstrip().startswith("#")
            ]
            if patterns:
                spec = pathspec.PathSpec.from_lines("gitwildmatch", patterns)
        self._specs[rel_dir] = spec
        return spec

    def is_excluded(self, rel_path: str, is_dir: bool) -> bool:
        """Return whether ``rel_path`` should be left out of walk results."""
        name = rel_path.rsplit("/", 1)[-1]
        if name == RESERVED_VCS_DIR:
            return True
        if not self.show_hidden and is_hidden_name(name):
            return True
        if self._git_matcher is not None and self._git_matcher.is_ignored(rel_path):
            return True

        parts = rel_path.split("/")
        for split in range(len(parts)):
            spec = self._spec_for("/".join(parts[:split]))
            if spec is None:
                continue
            tail = "/".join(parts[split:])
            if spec.match_file(tail + "/" if is_dir else tail):
                return True
        return False


__all__ = [
    "IGNORE_FILENAME",
    "RESERVED_VCS_DIR",
    "IgnoreRules",
    "is_hidden_name",
]
