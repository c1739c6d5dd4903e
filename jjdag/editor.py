"""Editor launch helper for opening a file at a line.

Runs ``$EDITOR`` (``vi`` when unset) while the TUI is suspended.
Returns an error message string instead of raising for UI-friendly handling.
"""

from __future__ import annotations

import contextlib
import os
import shlex
import subprocess
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .runtime.terminal import TerminalController

DEFAULT_EDITOR = "vi"
# Editors that take ``path:line`` instead of ``+line path``.
COLON_LINE_EDITORS = {"hx", "helix", "subl", "zed"}


def editor_argv(editor_cmd: list[str], target: Path, line: int | None) -> list[str]:
    name = Path(editor_cmd[0]).name
    if line is None:
        return [*editor_cmd, str(target)]
    if name in COLON_LINE_EDITORS:
        return [*editor_cmd, f"{target}:{line}"]
    if name == "code":
        return [*editor_cmd, "--goto", f"{target}:{line}"]
    return [*editor_cmd, f"+{line}", str(target)]


def launch_editor(
    target: Path,
    line: int | None = None,
    terminal: TerminalController | None = None,
) -> str | None:
    editor_env = os.environ.get("EDITOR", "").strip() or DEFAULT_EDITOR
    cmd = shlex.split(editor_env)
    if not cmd:
        return "Cannot edit: $EDITOR is empty."

    suspended = terminal.suspended() if terminal is not None else contextlib.nullcontext()
    with suspended:
        try:
            subprocess.run(editor_argv(cmd, target, line), check=False)
        except OSError as exc:
            return f"Failed to launch editor: {exc}"
    return None
