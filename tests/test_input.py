"""Regression tests for raw-key decoding.

Covers ESC timing, arrow sequences, control keys, and UTF-8 text.
"""

import os
import time
import unittest

from folderjump import input as input_mod


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        input_mod._PENDING_BYTES.clear()

    def tearDown(self) -> None:
        input_mod._PENDING_BYTES.clear()

    def _read_all(self, data: bytes, count: int) -> list[str]:
        read_fd, write_fd = os.pipe()
        try:
            os.write(write_fd, data)
            return [input_mod.read_key(read_fd, timeout_ms=20) for _ in range(count)]
        finally:
            os.close(read_fd)
            os.close(write_fd)

    def test_single_escape_returns_esc_without_second_keypress(self) -> None:
        started = time.monotonic()
        keys = self._read_all(b"\x1b", 1)
        elapsed = time.monotonic() - started

        self.assertEqual(keys, ["ESC"])
        self.assertLess(elapsed, 0.2)

    def test_arrow_and_navigation_sequences(self) -> None:
        keys = self._read_all(b"\x1b[A\x1b[B\x1b[C\x1b[D\x1bOH\x1b[F\x1b[3~", 7)
        self.assertEqual(keys, ["UP", "DOWN", "RIGHT", "LEFT", "HOME", "END", "DELETE"])

    def test_escape_does_not_swallow_following_printable_key(self) -> None:
        keys = self._read_all(b"\x1ba", 2)
        self.assertEqual(keys, ["ESC", "a"])
        self.assertFalse(input_mod.has_pending_bytes())

    def test_control_keys(self) -> None:
        keys = self._read_all(b"\x12\x18\x0f\x19\x15\x7f\r\x03", 8)
        self.assertEqual(
            keys,
            ["CTRL_R", "CTRL_X", "CTRL_O", "CTRL_Y", "CTRL_U", "BACKSPACE", "ENTER", "CTRL_C"],
        )

    def test_utf8_character_is_decoded_whole(self) -> None:
        keys = self._read_all("é".encode("utf-8") + "中".encode("utf-8"), 2)
        self.assertEqual(keys, ["é", "中"])

    def test_timeout_returns_empty_token(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            key = input_mod.read_key(read_fd, timeout_ms=10)
        finally:
            os.close(read_fd)
            os.close(write_fd)
        self.assertEqual(key, "")


if __name__ == "__main__":
    unittest.main()
