"""Mouse token parsing and list hit-testing."""

from __future__ import annotations

WHEEL_STEP = 3
# Row 1 is the query prompt; list rows start at terminal row 2.
LIST_FIRST_ROW = 2


def parse_mouse_col_row(mouse_key: str) -> tuple[int | None, int | None]:
    parts = mouse_key.split(":")
    if len(parts) < 3:
        return None, None
    try:
        return int(parts[1]), int(parts[2])
    except ValueError:
        return None, None


def wheel_direction(mouse_key: str) -> int:
    """Return -1 for wheel up, 1 for wheel down, 0 for anything else."""
    if mouse_key.startswith("MOUSE_WHEEL_UP:"):
        return -1
    if mouse_key.startswith("MOUSE_WHEEL_DOWN:"):
        return 1
    return 0


def clicked_list_index(mouse_key: str, list_start: int, list_rows: int) -> int | None:
    """Map a left-button press onto a list index, or ``None`` outside the list."""
    if not mouse_key.startswith("MOUSE_LEFT_DOWN:"):
        return None
    _col, row = parse_mouse_col_row(mouse_key)
    if row is None:
        return None
    offset = row - LIST_FIRST_ROW
    if offset < 0 or offset >= list_rows:
        return None
    return list_start + offset
