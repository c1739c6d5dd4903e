"""Centered popup and prompt boxes drawn over the log list."""

from __future__ import annotations

from ..ansi import BOLD, CYAN, DIM, RESET, REVERSE, display_width, pad_ansi_line
from ..runtime.modal import Popup, TextInput

POPUP_MAX_VISIBLE_ITEMS = 10
POPUP_MIN_WIDTH = 40
POPUP_FOOTER = "Enter: select | Esc: cancel | ↑↓: navigate"
PROMPT_FOOTER = "Enter: confirm | Esc: cancel"
SELECTED_MARKER = "▸ "


def render_input_with_cursor(buffer: str, cursor: int) -> str:
    """Show ``buffer`` with the character under ``cursor`` in reverse video."""
    under = buffer[cursor] if cursor < len(buffer) else " "
    return f"{buffer[:cursor]}{REVERSE}{under}{RESET}{buffer[cursor + 1 :]}"


def _box(title: str, body: list[str], inner_width: int) -> list[str]:
    title_text = f" {title} "
    top_fill = max(0, inner_width - display_width(title_text))
    lines = [f"{CYAN}┌{RESET}{BOLD}{title_text}{RESET}{CYAN}{'─' * top_fill}┐{RESET}"]
    for line in body:
        lines.append(f"{CYAN}│{RESET}{pad_ansi_line(line, inner_width)}{CYAN}│{RESET}")
    lines.append(f"{CYAN}└{'─' * inner_width}┘{RESET}")
    return lines


def _inner_width(contents: list[str], screen_width: int) -> int:
    widest = max((display_width(text) for text in contents), default=0)
    return max(1, min(screen_width - 4, max(POPUP_MIN_WIDTH, widest + 2)))


def _visible_window(count: int, selection: int, max_rows: int) -> tuple[int, int]:
    if count <= max_rows:
        return 0, count
    start = max(0, min(selection - max_rows // 2, count - max_rows))
    return start, start + max_rows


def popup_box_lines(popup: Popup, screen_width: int, screen_height: int) -> list[str]:
    items = popup.filtered_items()
    inner_width = _inner_width([popup.title + "  ", POPUP_FOOTER, *(SELECTED_MARKER + item for item in items)], screen_width)
    max_rows = max(1, min(POPUP_MAX_VISIBLE_ITEMS, screen_height - 6))
    start, end = _visible_window(len(items), popup.selection, max_rows)

    body = [f" > {popup.filter}{REVERSE} {RESET}", ""]
    for idx in range(start, end):
        if idx == popup.selection:
            body.append(f"{BOLD}{SELECTED_MARKER}{items[idx]}{RESET}")
        else:
            body.append(f"  {items[idx]}")
    if not items:
        body.append(f"{DIM}  no matches{RESET}")
    body += ["", f"{DIM} {POPUP_FOOTER}{RESET}"]
    return _box(popup.title, body, inner_width)


def prompt_box_lines(text_input: TextInput, screen_width: int) -> list[str]:
    inner_width = _inner_width([text_input.title + "  ", PROMPT_FOOTER, text_input.buffer + " "], screen_width)
    if text_input.buffer:
        entry = render_input_with_cursor(text_input.buffer, text_input.cursor)
    else:
        entry = f"{REVERSE} {RESET}{DIM}{text_input.placeholder}{RESET}"
    body = [f" {entry}", "", f"{DIM} {PROMPT_FOOTER}{RESET}"]
    return _box(text_input.title, body, inner_width)


def overlay_centered(rows: list[str], box: list[str], width: int) -> list[str]:
    """Replace the middle rows of ``rows`` with ``box`` lines."""
    if not rows:
        return rows
    box = box[: len(rows)]
    top = max(0, (len(rows) - len(box)) // 2)
    left = max(0, (width - display_width(box[0])) // 2) if box else 0
    out = list(rows)
    for offset, line in enumerate(box):
        out[top + offset] = pad_ansi_line(" " * left + line, width)
    return out
