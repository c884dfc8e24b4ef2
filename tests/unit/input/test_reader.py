"""Tests for raw terminal byte decoding."""

from __future__ import annotations

import os
import unittest

from lazyfind.input import _PENDING_BYTES, read_key


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        _PENDING_BYTES.clear()
        self.read_fd, self.write_fd = os.pipe()
        self.addCleanup(os.close, self.read_fd)
        self.addCleanup(os.close, self.write_fd)
        self.addCleanup(_PENDING_BYTES.clear)

    def feed(self, data: bytes) -> None:
        os.write(self.write_fd, data)

    def read(self) -> str:
        return read_key(self.read_fd, timeout_ms=50)

    def test_timeout_returns_empty_string(self) -> None:
        self.assertEqual(self.read(), "")

    def test_control_keys(self) -> None:
        self.feed(b"\t\x7f\r\n\x0e\x12\x13")
        self.assertEqual(
            [self.read() for _ in range(7)],
            ["TAB", "BACKSPACE", "ENTER", "ENTER", "CTRL_N", "CTRL_R", "CTRL_S"],
        )

    def test_arrow_and_navigation_sequences(self) -> None:
        self.feed(b"\x1b[A\x1b[B\x1b[C\x1b[D\x1b[H\x1b[F\x1b[3~\x1b[5~\x1b[6~\x1bOA")
        self.assertEqual(
            [self.read() for _ in range(10)],
            ["UP", "DOWN", "RIGHT", "LEFT", "HOME", "END", "DELETE", "PAGE_UP", "PAGE_DOWN", "UP"],
        )

    def test_lone_escape(self) -> None:
        self.feed(b"\x1b")
        self.assertEqual(self.read(), "ESC")

    def test_escape_followed_by_text_keeps_the_text(self) -> None:
        self.feed(b"\x1bq")
        self.assertEqual(self.read(), "ESC")
        self.assertEqual(self.read(), "q")

    def test_multibyte_utf8_character(self) -> None:
        self.feed("é".encode("utf-8"))
        self.assertEqual(self.read(), "é")

    def test_sgr_mouse_events(self) -> None:
        self.feed(b"\x1b[<64;10;5M\x1b[<65;10;5M\x1b[<0;3;4M\x1b[<0;3;4m")
        self.assertEqual(
            [self.read() for _ in range(4)],
            ["MOUSE_WHEEL_UP:10:5", "MOUSE_WHEEL_DOWN:10:5", "MOUSE_LEFT_DOWN:3:4", "MOUSE_LEFT_UP:3:4"],
        )


if __name__ == "__main__":
    unittest.main()
