"""Input-layer public API for key decoding and interaction handlers.

Exports are split between low-level terminal decoding (`read_key`) and the
mode handlers used by the runtime loop.
"""

from .key_registry import KeyComboBinding, KeyComboRegistry
from .keys import FileWatchControl, KeyHandler
from .mouse import WHEEL_STEP, clicked_list_index, parse_mouse_col_row, wheel_direction
from .reader import ESC_SEQUENCE_TIMEOUT_MS, _PENDING_BYTES, read_key

__all__ = [
    "read_key",
    "_PENDING_BYTES",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "KeyComboBinding",
    "KeyComboRegistry",
    "FileWatchControl",
    "KeyHandler",
    "WHEEL_STEP",
    "clicked_list_index",
    "parse_mouse_col_row",
    "wheel_direction",
]
