"""Engine invocation: building, describing and running ``jj`` commands.

Captured commands return their output or raise ``JjCommandFailed`` with the
engine's stderr. Interactive commands hand the terminal to ``jj`` for their
duration and only capture stderr.
"""

from __future__ import annotations

import contextlib
import logging
import shlex
import subprocess
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from .ansi import BOLD, GREEN, RESET, strip_ansi
from .errors import JjCommandFailed, JjCommandUnavailable

if TYPE_CHECKING:
    from .runtime.terminal import TerminalController

logger = logging.getLogger(__name__)

JJ_EXECUTABLE = "jj"
TUG_FROM_REVSET = "heads(::@- & bookmarks())"


@dataclass(frozen=True)
class GlobalArgs:
    """Flags passed to every invocation."""

    repository: str
    ignore_immutable: bool = False

    def to_argv(self) -> list[str]:
        argv = ["--repository", self.repository]
        if self.ignore_immutable:
            argv.append("--ignore-immutable")
        return argv


def _run_subprocess(argv: list[str], **kwargs) -> subprocess.CompletedProcess[str]:
    logger.debug("running %s", shlex.join(argv))
    try:
        return subprocess.run(
            argv,
            text=True,
            encoding="utf-8",
            errors="replace",
            check=False,
            **kwargs,
        )
    except OSError as exc:
        raise JjCommandUnavailable(f"Failed to run {argv[0]}: {exc}") from exc


def run_jj(global_args: GlobalArgs, args: list[str]) -> str:
    """Run ``jj`` with captured output and return stdout."""
    argv = [JJ_EXECUTABLE, "--no-pager", *global_args.to_argv(), *args]
    result = _run_subprocess(argv, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
    if result.returncode != 0:
        logger.info("jj exited %d: %s", result.returncode, result.stderr.strip())
        raise JjCommandFailed(result.stderr, result.returncode)
    return result.stdout


@dataclass(frozen=True)
class JjCommand:
    """One queued invocation.

    ``sync`` marks commands whose success requires reloading the log tree.
    ``interactive`` commands (editors, pagers, diff tools) get the terminal,
    suspended from the TUI through ``terminal`` when one is attached.
    """

    args: tuple[str, ...]
    global_args: GlobalArgs
    sync: bool = True
    interactive: bool = False
    terminal: TerminalController | None = field(default=None, compare=False)

    @property
    def description(self) -> str:
        return shlex.join([JJ_EXECUTABLE, *self.args])

    def to_lines(self) -> list[str]:
        return [f"{BOLD}{GREEN}${RESET} {BOLD}{self.description}{RESET}"]

    def run(self) -> str:
        if self.interactive:
            return self._run_interactive()
        argv = [JJ_EXECUTABLE, "--no-pager", "--color", "always", *self.global_args.to_argv(), *self.args]
        result = _run_subprocess(argv, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
        if result.returncode != 0:
            logger.info("%s failed: %s", self.description, result.stderr.strip())
            raise JjCommandFailed(result.stderr, result.returncode)
        # jj reports most status messages on stderr.
        return result.stdout + result.stderr

    def _run_interactive(self) -> str:
        argv = [JJ_EXECUTABLE, *self.global_args.to_argv(), *self.args]
        suspended = self.terminal.suspended() if self.terminal is not None else contextlib.nullcontext()
        with suspended:
            result = _run_subprocess(argv, stderr=subprocess.PIPE)
        if result.returncode != 0:
            logger.info("%s failed: %s", self.description, result.stderr.strip())
            raise JjCommandFailed(result.stderr, result.returncode)
        return result.stderr


LOCAL_BOOKMARK_TEMPLATE = 'if(remote, "", name ++ "\\n")'
REMOTE_BOOKMARK_TEMPLATE = 'if(remote, name ++ "@" ++ remote ++ "\\n")'
BOOKMARK_NAME_TEMPLATE = 'name ++ "\\n"'


def parse_unique_lines(output: str) -> list[str]:
    """Return stripped, non-empty, de-duplicated lines in first-seen order."""
    names: list[str] = []
    for raw_line in strip_ansi(output).splitlines():
        line = raw_line.strip()
        if line and line not in names:
            names.append(line)
    return names


def parse_remote_bookmarks(output: str) -> list[str]:
    """Return ``name@remote`` entries, skipping the colocated ``@git`` remote."""
    return [name for name in parse_unique_lines(output) if not name.endswith("@git")]


def parse_remote_names(output: str) -> list[str]:
    names: list[str] = []
    for raw_line in output.splitlines():
        parts = strip_ansi(raw_line).split()
        if parts and parts[0] not in names:
            names.append(parts[0])
    return names


def parse_workspace_names(output: str) -> list[str]:
    names: list[str] = []
    for raw_line in output.splitlines():
        name = strip_ansi(raw_line).split(":", 1)[0].strip()
        if name:
            names.append(name)
    return names


def parse_untracked_paths(status_output: str) -> list[str]:
    """Paths listed as ``? path`` in ``jj status`` output."""
    paths: list[str] = []
    for raw_line in strip_ansi(status_output).splitlines():
        line = raw_line.strip()
        if line.startswith("? "):
            paths.append(line[2:].strip())
    return paths
