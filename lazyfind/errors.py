"""Exception types raised at the engine's recoverable boundaries.

Callers convert these into status-line text; none of them are fatal.
"""

from __future__ import annotations


class LazyfindError(Exception):
    """Base class for lazyfind errors."""


class WalkError(LazyfindError):
    """The root of a directory walk could not be read."""


class WatchError(LazyfindError):
    """A filesystem watch subscription could not be established."""


class EditorError(LazyfindError):
    """Opening, reloading, or saving an editor buffer failed."""


__all__ = ["LazyfindError", "WalkError", "WatchError", "EditorError"]
