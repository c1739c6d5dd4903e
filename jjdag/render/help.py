"""Grouped keybinding help and unbound-key diagnostics for the info panel.

Rendering helpers here are presentation-only and side-effect free.
"""

from __future__ import annotations

from ..ansi import BLUE, GREEN, RED, RESET, display_width

COL_WIDTH = 26
MAX_ENTRIES_PER_COL = 14
UNBOUND_PREFIX = " Unbound suffix: "

_KEY_LABELS = {
    "ENTER": "Enter",
    "TAB": "Tab",
    "ESC": "Esc",
    " ": "Spc",
    "BACKSPACE": "Bksp",
    "UP": "↑",
    "DOWN": "↓",
    "LEFT": "←",
    "RIGHT": "→",
}


def display_key(key: str) -> str:
    """Return the label shown for a key token in help and diagnostics."""
    return _KEY_LABELS.get(key, key)


def render_help_columns(groups: dict[str, list[tuple[str, str]]]) -> list[str]:
    """Lay help groups out as fixed-width columns.

    Each group becomes one column of at most ``MAX_ENTRIES_PER_COL`` entries
    below a header; longer groups continue in extra columns with a blank
    header. Rows are prefixed with one space.
    """
    columns: list[list[str]] = []
    for group, entries in groups.items():
        for chunk_idx in range(0, max(1, len(entries)), MAX_ENTRIES_PER_COL):
            chunk = entries[chunk_idx : chunk_idx + MAX_ENTRIES_PER_COL]
            header = group if chunk_idx == 0 else ""
            column = [f"{BLUE}{header.ljust(COL_WIDTH)}{RESET}"]
            for key, help_text in chunk:
                used = display_width(key) + 1 + display_width(help_text)
                padding = " " * max(0, COL_WIDTH - used)
                column.append(f"{GREEN}{key}{RESET} {help_text}{padding}")
            columns.append(column)

    if not columns:
        return []
    num_rows = max(len(column) for column in columns)
    blank = " " * COL_WIDTH
    return [
        " " + "".join(column[row] if row < len(column) else blank for column in columns)
        for row in range(num_rows)
    ]


def sorted_help_groups(groups: dict[str, list[tuple[str, str]]]) -> dict[str, list[tuple[str, str]]]:
    """Sort each group's entries case-insensitively by help text."""
    return {
        group: sorted(entries, key=lambda entry: (entry[1].lower(), entry[0].lower()))
        for group, entries in groups.items()
    }


def unbound_error_line(key: str) -> str:
    return f"{RED}{UNBOUND_PREFIX}{RESET}'{GREEN}{display_key(key)}{RESET}'"


def is_unbound_error_line(line: str) -> bool:
    return line.startswith(f"{RED}{UNBOUND_PREFIX}")


def with_unbound_error(info_lines: list[str] | None, key: str) -> list[str]:
    """Append (or replace) the unbound-key diagnostic below existing info.

    A previous diagnostic is replaced rather than stacked, and a blank line
    separates the diagnostic from help text above it.
    """
    error_line = unbound_error_line(key)
    if not info_lines:
        return [error_line]
    lines = list(info_lines)
    add_blank_line = not is_unbound_error_line(lines[0])
    if is_unbound_error_line(lines[-1]):
        lines.pop()
        if lines and lines[-1] == "":
            lines.pop()
    if add_blank_line:
        lines.append("")
    lines.append(error_line)
    return lines
