"""Raw-key decoding through pipe file descriptors.

Covers ESC timing, cursor and tilde sequences, control keys, UTF-8 text and
SGR mouse reports.
"""

import os
import time
import unittest

from jjdag.input import reader


def _read_keys(data: bytes, count: int = 1) -> list[str]:
    read_fd, write_fd = os.pipe()
    try:
        os.write(write_fd, data)
        return [reader.read_key(read_fd, timeout_ms=20) for _ in range(count)]
    finally:
        os.close(read_fd)
        os.close(write_fd)


class ReadKeyTests(unittest.TestCase):
    def setUp(self) -> None:
        reader._PENDING_BYTES.clear()

    def tearDown(self) -> None:
        reader._PENDING_BYTES.clear()

    def test_single_escape_returns_esc_without_second_keypress(self) -> None:
        started = time.monotonic()
        keys = _read_keys(b"\x1b")
        elapsed = time.monotonic() - started

        self.assertEqual(keys, ["ESC"])
        self.assertLess(elapsed, 0.2)

    def test_escape_does_not_swallow_following_printable_key(self) -> None:
        self.assertEqual(_read_keys(b"\x1ba", count=2), ["ESC", "a"])

    def test_cursor_keys_in_csi_and_ss3_form(self) -> None:
        self.assertEqual(_read_keys(b"\x1b[A\x1b[B\x1bOC\x1b[D", count=4), ["UP", "DOWN", "RIGHT", "LEFT"])

    def test_modified_cursor_key_maps_to_plain_key(self) -> None:
        self.assertEqual(_read_keys(b"\x1b[1;5A"), ["UP"])

    def test_tilde_sequences(self) -> None:
        self.assertEqual(_read_keys(b"\x1b[5~\x1b[6~\x1b[3~", count=3), ["PGUP", "PGDN", "DELETE"])

    def test_control_keys(self) -> None:
        self.assertEqual(
            _read_keys(b"\x03\x12\t\r\x7f", count=5),
            ["CTRL_C", "CTRL_R", "TAB", "ENTER", "BACKSPACE"],
        )

    def test_utf8_character_is_read_whole(self) -> None:
        self.assertEqual(_read_keys("é".encode("utf-8")), ["é"])

    def test_mouse_reports(self) -> None:
        keys = _read_keys(b"\x1b[<0;10;5M\x1b[<0;10;5m\x1b[<64;3;4M\x1b[<65;3;4M\x1b[<2;1;2M", count=5)

        self.assertEqual(
            keys,
            [
                "MOUSE_LEFT_DOWN:10:5",
                "MOUSE_LEFT_UP:10:5",
                "MOUSE_WHEEL_UP:3:4",
                "MOUSE_WHEEL_DOWN:3:4",
                "MOUSE_RIGHT_DOWN:1:2",
            ],
        )

    def test_unrecognised_sequences_are_not_escape(self) -> None:
        self.assertEqual(
            _read_keys(b"\x1bOP\x1b[15~\x1b[1;5Qq", count=4),
            [reader.UNKNOWN_KEY, reader.UNKNOWN_KEY, reader.UNKNOWN_KEY, "q"],
        )

    def test_timeout_returns_empty_token(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            self.assertEqual(reader.read_key(read_fd, timeout_ms=10), "")
        finally:
            os.close(read_fd)
            os.close(write_fd)


if __name__ == "__main__":
    unittest.main()
