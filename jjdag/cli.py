"""Command-line front door for jjdag.

Parses CLI options, configures logging, resolves the repository, and then
runs the interactive loop with the terminal in raw mode.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import __version__
from .config import load_default_revset, load_ignore_immutable, load_log_level
from .errors import EngineInvocationError, JjCommandError, JjCommandFailed
from .jj_command import GlobalArgs, run_jj
from .logging_setup import resolve_log_level, setup_logging

logger = logging.getLogger(__name__)

LOG_LEVEL_CHOICES = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="jjdag",
        description="Browse and rewrite a Jujutsu repository's revision graph in the terminal.",
    )
    parser.add_argument(
        "-R",
        "--repository",
        default=".",
        help="Path to the repository to operate on. Defaults to the current directory.",
    )
    parser.add_argument(
        "-r",
        "--revisions",
        dest="revset",
        default=None,
        help="Revset to show in the log. Defaults to the configured revset, else jj's default.",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVEL_CHOICES,
        default=None,
        help="Log file verbosity (also JJDAG_LOG).",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def _find_jj_subdirectory(directory: Path) -> Path | None:
    """Return the single immediate subdirectory holding a ``.jj`` dir."""
    try:
        candidates = [child for child in directory.iterdir() if (child / ".jj").is_dir()]
    except OSError:
        return None
    return candidates[0] if len(candidates) == 1 else None


def resolve_repository(repository: str, run=run_jj) -> str:
    """Return the workspace root for ``repository``.

    When the path is not inside a repository but has exactly one child
    workspace, that child is used instead.
    """
    try:
        return run(GlobalArgs(repository), ["root"]).strip()
    except JjCommandFailed as exc:
        subdirectory = _find_jj_subdirectory(Path(repository))
        if subdirectory is None:
            raise SystemExit(exc.stderr.strip() or f"Not a jj repository: {repository}") from exc
        logger.info("using workspace %s below %s", subdirectory, repository)
        return run(GlobalArgs(str(subdirectory)), ["root"]).strip()


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run jjdag until the user quits."""
    args = build_parser().parse_args(argv)
    log_path = setup_logging(resolve_log_level(args.log_level, load_log_level()))
    logger.debug("jjdag %s starting, log file %s", __version__, log_path)

    if not sys.stdin.isatty() or not sys.stdout.isatty():
        raise SystemExit("jjdag needs an interactive terminal.")

    from .runtime.model import Model
    from .runtime.terminal import TerminalController
    from .runtime import run_main_loop

    try:
        repository = resolve_repository(args.repository)
        revset = args.revset if args.revset is not None else load_default_revset()
        terminal = TerminalController(sys.stdin.fileno(), sys.stdout.fileno())
        model = Model(
            repository,
            revset,
            ignore_immutable=load_ignore_immutable(),
            terminal=terminal,
            persist_settings=True,
        )
        with terminal.raw_mode():
            run_main_loop(model, terminal)
    except (EngineInvocationError, JjCommandError, OSError) as exc:
        logger.exception("fatal error")
        raise SystemExit(f"jjdag: {exc}") from exc
    finally:
        logging.shutdown()