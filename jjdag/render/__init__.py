"""Frame composition for the jjdag screen.

A frame is a header row, the log list, and an optional info panel below a
rule, with a popup or prompt box centered over the log list when active.
"""

from __future__ import annotations

import os
import re
from typing import TYPE_CHECKING

from ..ansi import BOLD, CYAN, DIM, MAGENTA, RESET, REVERSE, SAVED_BG, YELLOW, pad_ansi_line, strip_ansi
from ..runtime.modal import BOOKMARK, DESCRIPTION, PROMPT, REVSET
from .overlay import overlay_centered, popup_box_lines, prompt_box_lines, render_input_with_cursor

if TYPE_CHECKING:
    from ..runtime.model import Model

HEADER_ROWS = 1
MIN_LOG_ROWS = 3
INFO_RULE = "─"
GRAPH_PREFIX_RE = re.compile(r"^[\s│├┤┼─╭╮╯╰|/\\~:.*+xo@◆○×◉]*")


def info_panel_rows(info_list: list[str] | None, height: int) -> int:
    """Rows taken by the info panel, rule included."""
    if not info_list:
        return 0
    available = max(0, height - HEADER_ROWS - MIN_LOG_ROWS - 1)
    return min(len(info_list), available) + 1 if available else 0


def log_list_geometry(model: Model, height: int) -> tuple[int, int]:
    """Return ``(top row, row count)`` of the log list for a screen height."""
    rows = max(1, height - HEADER_ROWS - info_panel_rows(model.info_list, height))
    return HEADER_ROWS, rows


def highlight_line(text: str, sgr: str) -> str:
    """Apply ``sgr`` across a styled line, surviving embedded resets."""
    return sgr + text.replace(RESET, RESET + sgr) + RESET


def render_header(model: Model, width: int) -> str:
    text_input = model.text_input
    if text_input is not None and text_input.location == REVSET:
        revset = render_input_with_cursor(text_input.buffer, text_input.cursor)
    else:
        revset = f"{YELLOW}{model.revset or DIM + 'default'}{RESET}"
    header = f"{BOLD}repository:{RESET} {CYAN}{model.display_repository}{RESET}  {BOLD}revset:{RESET} {revset}"
    if model.global_args.ignore_immutable:
        header += f"  {MAGENTA}--ignore-immutable{RESET}"
    return pad_ansi_line(header, width)


def _graph_prefix(line: str) -> str:
    match = GRAPH_PREFIX_RE.match(strip_ansi(line))
    return match.group(0) if match else ""


def _edited_block(model: Model, block: list[str]) -> tuple[list[str], set[int]]:
    """Inject the inline bookmark or description editor into the selected block."""
    text_input = model.text_input
    if text_input is None or text_input.location not in (BOOKMARK, DESCRIPTION):
        return block, set()
    lines = list(block)
    entry = render_input_with_cursor(text_input.buffer, text_input.cursor)
    if text_input.location == BOOKMARK:
        lines[0] = f"{lines[0]} {MAGENTA}[{RESET}{entry}{MAGENTA}]{RESET}"
        return lines, {0}
    if len(lines) < 2:
        lines.append("")
    lines[1] = f"{_graph_prefix(lines[1])}{entry}"
    return lines, {1}


def render_log_rows(model: Model, width: int, rows: int) -> list[str]:
    out: list[str] = []
    saved_idx = model.get_saved_flat_idx()
    idx = model.log_list_offset
    while len(out) < rows and idx < len(model.log_list):
        block = model.log_list[idx]
        edited: set[int] = set()
        if idx == model.log_list_selected:
            block, edited = _edited_block(model, block)
        for line_idx, line in enumerate(block):
            if len(out) >= rows:
                break
            text = pad_ansi_line(line, width)
            if idx == model.log_list_selected:
                # The line being edited keeps its own cursor styling.
                if line_idx not in edited:
                    text = highlight_line(text, REVERSE)
            elif idx == saved_idx:
                text = highlight_line(text, SAVED_BG)
            out.append(text)
        idx += 1
    out.extend(" " * width for _ in range(rows - len(out)))
    return out


def render_info_rows(info_list: list[str], width: int, rows: int) -> list[str]:
    if rows <= 0:
        return []
    out = [f"{DIM}{INFO_RULE * width}{RESET}"]
    out.extend(pad_ansi_line(line, width) for line in info_list[: rows - 1])
    return out


def render_frame(model: Model, width: int, height: int) -> list[str]:
    """Compose every screen row for the current model state."""
    info_rows = info_panel_rows(model.info_list, height)
    _, log_rows = log_list_geometry(model, height)
    body = render_log_rows(model, width, log_rows)
    if model.popup is not None:
        body = overlay_centered(body, popup_box_lines(model.popup, width, log_rows), width)
    elif model.text_input is not None and model.text_input.location == PROMPT:
        body = overlay_centered(body, prompt_box_lines(model.text_input, width), width)
    rows = [render_header(model, width), *body]
    if model.info_list and info_rows:
        rows += render_info_rows(model.info_list, width, info_rows)
    return rows[:height]


def render_screen(model: Model, width: int, height: int, out_fd: int) -> None:
    top, rows = log_list_geometry(model, height)
    model.set_log_list_layout(top, rows, width)
    frame = render_frame(model, width, height)
    payload = "\033[H\033[J" + "\r\n".join(line + RESET for line in frame)
    os.write(out_fd, payload.encode("utf-8", errors="replace"))
