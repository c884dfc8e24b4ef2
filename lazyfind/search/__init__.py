"""Flat file index and fuzzy ranking."""

from __future__ import annotations

from .fuzzy import (
    BROWSING,
    Browsing,
    FlatFileIndex,
    FuzzyRanker,
    MatchList,
    SearchMode,
    Searching,
    fuzzy_score,
    mode_for_query,
)

__all__ = [
    "BROWSING",
    "Browsing",
    "FlatFileIndex",
    "FuzzyRanker",
    "MatchList",
    "SearchMode",
    "Searching",
    "fuzzy_score",
    "mode_for_query",
]
