"""Fuzzy filename ranking over the flat file index."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from ..file_tree_model.fs import collect_files

WORD_BOUNDARY_CHARS = "/_- ."

MatchList = list[tuple[int, int]]


def fuzzy_score(query: str, candidate: str) -> int | None:
    """Score ``candidate`` against ``query``, or ``None`` when it does not match.

    Matching is a case-insensitive subsequence search. Contiguous runs,
    word-boundary hits, whole-substring hits and hits inside the basename
    raise the score; gaps and long candidates lower it.
    """
    if not query:
        return 0
    query_folded = query.casefold()
    candidate_folded = candidate.casefold()

    score = 0
    prev_idx = -1
    run = 0
    for needle in query_folded:
        idx = candidate_folded.find(needle, prev_idx + 1)
        if idx < 0:
            return None
        if idx == prev_idx + 1:
            run += 1
            score += 20 + min(16, run * 4)
        else:
            gap = idx - prev_idx - 1
            run = 0
            score -= min(40, gap * 2)
        if idx == 0 or candidate_folded[idx - 1] in WORD_BOUNDARY_CHARS:
            score += 35
        prev_idx = idx

    substring_idx = candidate_folded.find(query_folded)
    if substring_idx >= 0:
        score += 100
        basename_start = candidate_folded.rfind("/") + 1
        if substring_idx >= basename_start:
            score += 50
        if substring_idx == basename_start:
            score += 25

    score -= len(candidate_folded) // 5
    return score


class FuzzyRanker:
    """Rank a file list against a query, strictly descending by score.

    When a query extends the previous one over the same file list, only the
    previous matches are re-scored. Anything matching the longer query also
    matched the shorter one, so the result equals a full recomputation.
    """

    def __init__(self) -> None:
        self._last_files: Sequence[str] | None = None
        self._last_query = ""
        self._last_indices: list[int] = []

    def reset(self) -> None:
        self._last_files = None
        self._last_query = ""
        self._last_indices = []

    def rank(self, query: str, files: Sequence[str]) -> MatchList:
        if not query:
            self.reset()
            return [(idx, 0) for idx in range(len(files))]

        candidates: Sequence[int] = range(len(files))
        if (
            files is self._last_files
            and self._last_query
            and query.casefold().startswith(self._last_query.casefold())
        ):
            candidates = self._last_indices

        scored: MatchList = []
        for idx in candidates:
            score = fuzzy_score(query, files[idx])
            if score is not None:
                scored.append((idx, score))

        self._last_files = files
        self._last_query = query
        self._last_indices = [idx for idx, _score in scored]

        # sort is stable: equal scores keep index order
        scored.sort(key=lambda item: -item[1])
        return scored


@dataclass(frozen=True)
class Browsing:
    """Tree view is shown; the query is empty."""


@dataclass(frozen=True)
class Searching:
    """Ranked matches for a non-empty query are shown."""

    query: str
    matches: tuple[tuple[int, int], ...]


SearchMode = Browsing | Searching

BROWSING = Browsing()


def mode_for_query(query: str, ranker: FuzzyRanker, files: Sequence[str]) -> SearchMode:
    if not query:
        ranker.reset()
        return BROWSING
    return Searching(query=query, matches=tuple(ranker.rank(query, files)))


class FlatFileIndex:
    """Sorted tuple of every discovered file, replaced wholesale on rescan."""

    def __init__(self, root: Path, show_hidden: bool, files: Sequence[str] = ()) -> None:
        self.root = root
        self.show_hidden = show_hidden
        self.files: tuple[str, ...] = tuple(files)

    def __len__(self) -> int:
        return len(self.files)

    def rescan(self) -> None:
        """Walk the whole root again; raises ``WalkError`` if the root is unreadable."""
        self.files = tuple(collect_files(self.root, self.show_hidden))

    def replace(self, files: Sequence[str]) -> None:
        self.files = tuple(files)


__all__ = [
    "BROWSING",
    "Browsing",
    "FlatFileIndex",
    "FuzzyRanker",
    "MatchList",
    "SearchMode",
    "Searching",
    "WORD_BOUNDARY_CHARS",
    "fuzzy_score",
    "mode_for_query",
]
