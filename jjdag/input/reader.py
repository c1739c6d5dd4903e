"""Low-level terminal input decoding.

Reads raw bytes from stdin and translates them into normalized key tokens.
Handles ESC-sequence timing, UTF-8 text, and SGR mouse events.
"""

from __future__ import annotations

import os
import select

ESC_SEQUENCE_TIMEOUT_MS = 25
_PENDING_BYTES: list[bytes] = []
# Escape sequences that decode to no known key (function keys, unknown finals).
UNKNOWN_KEY = "UNKNOWN"

_CONTROL_KEYS: dict[bytes, str] = {
    b"\x03": "CTRL_C",
    b"\x0e": "CTRL_N",
    b"\x10": "CTRL_P",
    b"\x12": "CTRL_R",
    b"\x15": "CTRL_U",
    b"\x01": "HOME",
    b"\x05": "END",
    b"\t": "TAB",
    b"\x08": "BACKSPACE",
    b"\x7f": "BACKSPACE",
    b"\r": "ENTER",
    b"\n": "ENTER",
}

_CSI_FINAL_KEYS: dict[bytes, str] = {
    b"A": "UP",
    b"B": "DOWN",
    b"C": "RIGHT",
    b"D": "LEFT",
    b"H": "HOME",
    b"F": "END",
    b"Z": "SHIFT_TAB",
}

_CSI_TILDE_KEYS: dict[str, str] = {
    "1": "HOME",
    "3": "DELETE",
    "4": "END",
    "5": "PGUP",
    "6": "PGDN",
    "7": "HOME",
    "8": "END",
}


def _read_ready_byte(fd: int, timeout_ms: int) -> bytes | None:
    ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
    if not ready:
        return None
    ch = os.read(fd, 1)
    if not ch:
        return None
    return ch


def _utf8_length(lead: int) -> int:
    if lead >> 5 == 0b110:
        return 2
    if lead >> 4 == 0b1110:
        return 3
    if lead >> 3 == 0b11110:
        return 4
    return 1


def _read_utf8_char(fd: int, lead: bytes) -> str:
    data = lead
    for _ in range(_utf8_length(lead[0]) - 1):
        nxt = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if nxt is None:
            break
        data += nxt
    return data.decode("utf-8", errors="replace")


def _decode_mouse(payload: bytes, final: bytes) -> str:
    """Decode an SGR mouse report ``btn;col;row`` ending in ``M`` or ``m``."""
    try:
        btn_s, col_s, row_s = payload.decode("ascii").split(";")
        btn = int(btn_s)
        col = int(col_s)
        row = int(row_s)
    except ValueError:
        return "ESC"
    button = btn & 0b11
    if btn & 0b0100_0000:
        if button == 0:
            return f"MOUSE_WHEEL_UP:{col}:{row}"
        if button == 1:
            return f"MOUSE_WHEEL_DOWN:{col}:{row}"
        return "MOUSE"
    if btn & 0b0010_0000:
        # Drag/motion reports are not used.
        return "MOUSE"
    suffix = "DOWN" if final == b"M" else "UP"
    if button == 0:
        return f"MOUSE_LEFT_{suffix}:{col}:{row}"
    if button == 2:
        return f"MOUSE_RIGHT_{suffix}:{col}:{row}"
    return "MOUSE"


def read_key(fd: int, timeout_ms: int | None = None) -> str:
    """Return the next key token, or ``""`` when ``timeout_ms`` elapses."""
    if _PENDING_BYTES:
        ch = _PENDING_BYTES.pop(0)
    else:
        if timeout_ms is not None:
            ready, _, _ = select.select([fd], [], [], max(0.0, timeout_ms / 1000.0))
            if not ready:
                return ""

        ch = os.read(fd, 1)
        if not ch:
            return ""

    control = _CONTROL_KEYS.get(ch)
    if control is not None:
        return control
    if ch != b"\x1b":
        if ch[0] >= 0x80:
            return _read_utf8_char(fd, ch)
        return ch.decode("utf-8", errors="replace")

    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq == b"O":
        # SS3 form sent by some terminals in application cursor mode.
        final = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
        if final is None:
            return "ESC"
        return _CSI_FINAL_KEYS.get(final, UNKNOWN_KEY)
    if seq != b"[":
        _PENDING_BYTES.append(seq)
        return "ESC"

    seq = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
    if seq is None:
        return "ESC"
    if seq in _CSI_FINAL_KEYS:
        return _CSI_FINAL_KEYS[seq]
    if seq == b"<":
        payload: list[bytes] = []
        while True:
            part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
            if part is None:
                return UNKNOWN_KEY
            if part in {b"M", b"m"}:
                return _decode_mouse(b"".join(payload), part)
            payload.append(part)
            if len(payload) > 64:
                return UNKNOWN_KEY
    if seq.isdigit():
        params = [seq]
        while True:
            part = _read_ready_byte(fd, ESC_SEQUENCE_TIMEOUT_MS)
            if part is None:
                return UNKNOWN_KEY
            if part == b"~":
                number = b"".join(params).decode("ascii").split(";", 1)[0]
                return _CSI_TILDE_KEYS.get(number, UNKNOWN_KEY)
            if part.isdigit() or part == b";":
                params.append(part)
                if len(params) > 16:
                    return UNKNOWN_KEY
                continue
            # Modified cursor keys such as ESC [ 1 ; 5 A.
            return _CSI_FINAL_KEYS.get(part, UNKNOWN_KEY)
    return UNKNOWN_KEY
