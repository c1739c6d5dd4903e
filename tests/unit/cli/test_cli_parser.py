"""CLI parsing, repository resolution and startup wiring."""

from __future__ import annotations

import tempfile
import unittest
from pathlib import Path
from unittest import mock

from jjdag import cli
from jjdag.errors import EngineInvocationError, JjCommandFailed


class ParserTests(unittest.TestCase):
    def test_defaults(self) -> None:
        args = cli.build_parser().parse_args([])
        self.assertEqual(args.repository, ".")
        self.assertIsNone(args.revset)
        self.assertIsNone(args.log_level)

    def test_short_flags_and_case_insensitive_log_level(self) -> None:
        args = cli.build_parser().parse_args(["-R", "/work/repo", "-r", "mine()", "--log-level", "debug"])
        self.assertEqual(args.repository, "/work/repo")
        self.assertEqual(args.revset, "mine()")
        self.assertEqual(args.log_level, "DEBUG")

    def test_unknown_log_level_is_rejected(self) -> None:
        with mock.patch("sys.stderr"), self.assertRaises(SystemExit):
            cli.build_parser().parse_args(["--log-level", "chatty"])


class ResolveRepositoryTests(unittest.TestCase):
    def test_returns_workspace_root(self) -> None:
        run = mock.Mock(return_value="/work/repo\n")

        self.assertEqual(cli.resolve_repository("/work/repo/src", run=run), "/work/repo")
        global_args, args = run.call_args.args
        self.assertEqual(global_args.repository, "/work/repo/src")
        self.assertEqual(args, ["root"])

    def test_falls_back_to_single_child_workspace(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            child = Path(tmp) / "project"
            (child / ".jj").mkdir(parents=True)
            (Path(tmp) / "other").mkdir()

            def run(global_args, args):
                if global_args.repository == tmp:
                    raise JjCommandFailed("Error: There is no jj repo in \".\"\n")
                return f"{global_args.repository}\n"

            self.assertEqual(cli.resolve_repository(tmp, run=run), str(child))

    def test_exits_with_jj_error_when_nothing_found(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            run = mock.Mock(side_effect=JjCommandFailed("Error: There is no jj repo\n"))

            with self.assertRaises(SystemExit) as ctx:
                cli.resolve_repository(tmp, run=run)

        self.assertEqual(ctx.exception.code, "Error: There is no jj repo")


def _tty(fd: int) -> mock.Mock:
    stream = mock.Mock()
    stream.isatty.return_value = True
    stream.fileno.return_value = fd
    return stream


class MainTests(unittest.TestCase):
    def setUp(self) -> None:
        patches = [
            mock.patch("jjdag.cli.setup_logging", return_value=None),
            mock.patch("jjdag.cli.load_log_level", return_value=None),
            mock.patch("jjdag.cli.load_default_revset", return_value="mine()"),
            mock.patch("jjdag.cli.load_ignore_immutable", return_value=True),
            mock.patch("jjdag.cli.resolve_repository", return_value="/work/repo"),
            mock.patch("jjdag.cli.logging.shutdown"),
        ]
        for patcher in patches:
            patcher.start()
            self.addCleanup(patcher.stop)

    def test_requires_a_terminal(self) -> None:
        stdin = _tty(0)
        stdin.isatty.return_value = False
        with mock.patch("jjdag.cli.sys.stdin", stdin), mock.patch("jjdag.cli.sys.stdout", _tty(1)):
            with self.assertRaises(SystemExit) as ctx:
                cli.main([])
        self.assertIn("interactive terminal", str(ctx.exception.code))

    def test_builds_model_from_config_and_runs_loop(self) -> None:
        with (
            mock.patch("jjdag.cli.sys.stdin", _tty(0)),
            mock.patch("jjdag.cli.sys.stdout", _tty(1)),
            mock.patch("jjdag.runtime.model.Model") as model_cls,
            mock.patch("jjdag.runtime.terminal.TerminalController") as terminal_cls,
            mock.patch("jjdag.runtime.loop.run_main_loop") as run_main_loop,
        ):
            cli.main([])

        terminal_cls.assert_called_once_with(0, 1)
        terminal = terminal_cls.return_value
        model_cls.assert_called_once_with(
            "/work/repo",
            "mine()",
            ignore_immutable=True,
            terminal=terminal,
            persist_settings=True,
        )
        run_main_loop.assert_called_once_with(model_cls.return_value, terminal)
        terminal.raw_mode.assert_called_once_with()

    def test_revset_flag_overrides_config(self) -> None:
        with (
            mock.patch("jjdag.cli.sys.stdin", _tty(0)),
            mock.patch("jjdag.cli.sys.stdout", _tty(1)),
            mock.patch("jjdag.runtime.model.Model") as model_cls,
            mock.patch("jjdag.runtime.terminal.TerminalController"),
            mock.patch("jjdag.runtime.loop.run_main_loop"),
        ):
            cli.main(["-r", "all()"])

        self.assertEqual(model_cls.call_args.args[1], "all()")

    def test_startup_failure_exits_with_message(self) -> None:
        with (
            mock.patch("jjdag.cli.sys.stdin", _tty(0)),
            mock.patch("jjdag.cli.sys.stdout", _tty(1)),
            mock.patch("jjdag.runtime.model.Model", side_effect=EngineInvocationError("bad revset")),
            mock.patch("jjdag.runtime.terminal.TerminalController"),
            mock.patch("jjdag.cli.logger"),
        ):
            with self.assertRaises(SystemExit) as ctx:
                cli.main([])

        self.assertEqual(ctx.exception.code, "jjdag: bad revset")

    def test_terminal_setup_error_exits_with_message(self) -> None:
        with (
            mock.patch("jjdag.cli.sys.stdin", _tty(0)),
            mock.patch("jjdag.cli.sys.stdout", _tty(1)),
            mock.patch("jjdag.runtime.model.Model"),
            mock.patch("jjdag.runtime.terminal.TerminalController") as terminal_cls,
            mock.patch("jjdag.runtime.loop.run_main_loop") as run_main_loop,
            mock.patch("jjdag.cli.logger"),
        ):
            terminal_cls.return_value.raw_mode.side_effect = OSError("Inappropriate ioctl for device")
            with self.assertRaises(SystemExit) as ctx:
                cli.main([])

        self.assertEqual(ctx.exception.code, "jjdag: Inappropriate ioctl for device")
        run_main_loop.assert_not_called()


class PackageEntryPointTests(unittest.TestCase):
    def test_package_main_delegates_to_cli(self) -> None:
        import jjdag

        with mock.patch("jjdag.cli.main", return_value=None) as cli_main:
            jjdag.main(["-r", "all()"])

        cli_main.assert_called_once_with(["-r", "all()"])


if __name__ == "__main__":
    unittest.main()
