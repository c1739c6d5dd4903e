"""Width-aware helpers for styled terminal text."""

from __future__ import annotations

import unittest

from jjdag.ansi import RED, RESET, clip_ansi_line, display_width, pad_ansi_line, strip_ansi, styled


class AnsiHelperTests(unittest.TestCase):
    def test_strip_and_width_ignore_escapes(self) -> None:
        text = f"{RED}abc{RESET}"
        self.assertEqual(strip_ansi(text), "abc")
        self.assertEqual(display_width(text), 3)

    def test_wide_characters_and_tabs(self) -> None:
        self.assertEqual(display_width("日本"), 4)
        self.assertEqual(display_width("a\tb"), 9)

    def test_clip_keeps_trailing_reset(self) -> None:
        clipped = clip_ansi_line(f"{RED}abcdef{RESET}", 3)
        self.assertEqual(strip_ansi(clipped), "abc")
        self.assertTrue(clipped.endswith(RESET))

    def test_pad_to_exact_width(self) -> None:
        self.assertEqual(pad_ansi_line("ab", 4), "ab  ")
        self.assertEqual(display_width(pad_ansi_line("日本語", 5)), 5)

    def test_styled(self) -> None:
        self.assertEqual(styled("x"), "x")
        self.assertEqual(styled("x", RED), f"{RED}x{RESET}")


if __name__ == "__main__":
    unittest.main()
