"""ANSI-aware text measurement and line shaping utilities.

The engine emits colored output; these helpers strip, measure, clip and pad
it without breaking escape sequences or wide characters.
"""

from __future__ import annotations

import re
import unicodedata

ANSI_ESCAPE_RE = re.compile(r"\x1b\[[0-9;?]*[ -/]*[@-~]")
TAB_STOP = 8

RESET = "\033[0m"
BOLD = "\033[1m"
DIM = "\033[2m"
REVERSE = "\033[7m"
RED = "\033[31m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
BLUE = "\033[34m"
MAGENTA = "\033[35m"
CYAN = "\033[36m"
SAVED_BG = "\033[48;5;238m"


def strip_ansi(text: str) -> str:
    """Return ``text`` with all CSI escape sequences removed."""
    return ANSI_ESCAPE_RE.sub("", text)


def char_display_width(ch: str, col: int) -> int:
    """Return terminal column width for one character at visual column ``col``.

    Tabs expand to the next 8-column stop, combining marks consume no columns,
    and East Asian wide/fullwidth characters consume two.
    """
    if ch == "\t":
        return TAB_STOP - (col % TAB_STOP)
    if unicodedata.combining(ch):
        return 0
    if unicodedata.east_asian_width(ch) in {"W", "F"}:
        return 2
    return 1


def display_width(text: str) -> int:
    """Return the rendered column width of a possibly styled line."""
    col = 0
    for ch in strip_ansi(text):
        col += char_display_width(ch, col)
    return col


def clip_ansi_line(text: str, max_cols: int) -> str:
    """Trim a styled line to at most ``max_cols`` display columns.

    ANSI escape sequences are preserved verbatim and do not count toward width.
    Tabs are expanded into spaces so clipping aligns with rendered terminal cells.
    """
    if max_cols <= 0 or not text:
        return ""

    out: list[str] = []
    col = 0
    i = 0
    n = len(text)
    while i < n and col < max_cols:
        if text[i] == "\x1b":
            match = ANSI_ESCAPE_RE.match(text, i)
            if match:
                out.append(match.group(0))
                i = match.end()
                continue
        ch = text[i]
        w = char_display_width(ch, col)
        if col + w > max_cols:
            break
        out.append(" " * w if ch == "\t" else ch)
        col += w
        i += 1

    # Keep trailing escapes so a clipped line still closes its styling.
    while i < n:
        match = ANSI_ESCAPE_RE.match(text, i) if text[i] == "\x1b" else None
        if match:
            out.append(match.group(0))
            i = match.end()
        else:
            i += 1
    return "".join(out)


def pad_ansi_line(text: str, width: int) -> str:
    """Clip or right-pad a styled line so it spans exactly ``width`` columns."""
    clipped = clip_ansi_line(text, width)
    return clipped + " " * max(0, width - display_width(clipped))


def styled(text: str, *styles: str) -> str:
    """Wrap ``text`` in the given SGR sequences followed by a reset."""
    if not styles:
        return text
    return "".join(styles) + text + RESET
