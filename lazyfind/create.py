"""Create files and folders from the in-app prompt."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from .file_tree_model import absolute_path


@dataclass(frozen=True)
class CreateResult:
    """Outcome of one create request; ``message`` is status-line text."""

    ok: bool
    message: str
    path: str | None = None


def normalize_relative(path: PurePosixPath) -> str | None:
    """Collapse ``.`` and ``..`` without touching the filesystem.

    Returns ``None`` for absolute paths and for paths that climb above the
    root.
    """
    if path.is_absolute():
        return None
    parts: list[str] = []
    for part in path.parts:
        if part in ("", "."):
            continue
        if part == "..":
            if not parts:
                return None
            parts.pop()
            continue
        parts.append(part)
    return "/".join(parts)


def create_entry(root: Path, base: str, raw_input: str) -> CreateResult:
    """Create a file, or a folder when ``raw_input`` ends with a separator.

    ``raw_input`` is relative to ``base`` unless it already starts with it.
    Existing files are left untouched.
    """
    raw = raw_input.strip()
    if not raw:
        return CreateResult(ok=False, message="")

    is_dir = raw.endswith("/") or raw.endswith(os.sep)
    trimmed = raw.rstrip("/").rstrip(os.sep)
    if not trimmed:
        return CreateResult(ok=False, message="Invalid path")

    input_path = PurePosixPath(trimmed.replace(os.sep, "/"))
    if input_path.is_absolute():
        return CreateResult(ok=False, message="Absolute paths are not allowed")

    base_path = PurePosixPath(base) if base else PurePosixPath()
    if base and input_path.parts[: len(base_path.parts)] == base_path.parts:
        combined = input_path
    else:
        combined = base_path / input_path

    normalized = normalize_relative(combined)
    if normalized is None:
        return CreateResult(ok=False, message="Path escapes root")
    if not normalized:
        return CreateResult(ok=False, message="Invalid path")

    target = absolute_path(root, normalized)
    existed = target.exists()
    try:
        if is_dir:
            target.mkdir(parents=True, exist_ok=True)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            if not existed:
                target.touch()
    except OSError as exc:
        return CreateResult(ok=False, message=f"Create failed: {exc.strerror or exc}")

    if is_dir:
        message = f"Created folder: {normalized}"
    elif existed:
        message = f"File exists: {normalized}"
    else:
        message = f"Created file: {normalized}"
    return CreateResult(ok=True, message=message, path=normalized)


__all__ = ["CreateResult", "create_entry", "normalize_relative"]
