"""Main interactive event loop.

Each iteration renders, runs at most one queued ``jj`` command, then waits
briefly for a key. The queue drains one command per frame so progress shows
between commands.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from ..input import read_key
from ..render import render_screen
from .model import QUIT, Model
from .terminal import TerminalController
from .update import handle_key


@dataclass(frozen=True)
class RuntimeLoopTiming:
    """Timing constants controlling interactive loop behavior."""

    key_poll_ms: int = 200


def run_main_loop(
    model: Model,
    terminal: TerminalController,
    timing: RuntimeLoopTiming = RuntimeLoopTiming(),
    read_key_fn: Callable[[int, int | None], str] = read_key,
    render_fn: Callable[[Model, int, int, int], None] = render_screen,
) -> None:
    """Run until the model reaches the quit state."""
    while model.state != QUIT:
        width, height = terminal.size()
        render_fn(model, width, height, terminal.stdout_fd)
        model.process_jj_command_queue()
        timeout_ms = 0 if model.queued_jj_commands else timing.key_poll_ms
        handle_key(model, read_key_fn(terminal.stdin_fd, timeout_ms))
