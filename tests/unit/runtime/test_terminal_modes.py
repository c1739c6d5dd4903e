"""Raw-mode lifecycle and terminal hand-off to interactive commands."""

from __future__ import annotations

import termios
import unittest
from unittest import mock

from jjdag.runtime.terminal import ENTER_TUI_SEQUENCE, EXIT_TUI_SEQUENCE, TerminalController


def _controller() -> TerminalController:
    with mock.patch("jjdag.runtime.terminal.termios.tcgetattr", return_value=[0]):
        return TerminalController(stdin_fd=0, stdout_fd=1)


class TerminalControllerTests(unittest.TestCase):
    def test_enable_and_disable_use_alternate_screen_and_mouse_sequences(self) -> None:
        saved_state = [1, 2, 3]

        with mock.patch("jjdag.runtime.terminal.termios.tcgetattr", return_value=saved_state), mock.patch(
            "jjdag.runtime.terminal.tty.setraw"
        ) as setraw_mock, mock.patch("jjdag.runtime.terminal.os.write") as write_mock, mock.patch(
            "jjdag.runtime.terminal.termios.tcsetattr"
        ) as setattr_mock:
            controller = TerminalController(stdin_fd=0, stdout_fd=1)
            controller.enable_tui_mode()
            self.assertTrue(controller.tui_active)
            controller.disable_tui_mode()

        setraw_mock.assert_called_once_with(0, termios.TCSAFLUSH)
        self.assertEqual(write_mock.call_args_list, [mock.call(1, ENTER_TUI_SEQUENCE), mock.call(1, EXIT_TUI_SEQUENCE)])
        setattr_mock.assert_called_once_with(0, termios.TCSAFLUSH, saved_state)
        self.assertFalse(controller.tui_active)

    def test_raw_mode_restores_terminal_after_exception(self) -> None:
        controller = _controller()

        with mock.patch.object(controller, "enable_tui_mode") as enable_mock, mock.patch.object(
            controller, "disable_tui_mode"
        ) as disable_mock:
            with self.assertRaises(RuntimeError):
                with controller.raw_mode():
                    raise RuntimeError("boom")

        enable_mock.assert_called_once()
        disable_mock.assert_called_once()

    def test_suspended_leaves_and_re_enters_active_tui(self) -> None:
        controller = _controller()
        controller._tui_active = True
        calls: list[str] = []

        with mock.patch.object(controller, "enable_tui_mode", side_effect=lambda: calls.append("enable")), mock.patch.object(
            controller, "disable_tui_mode", side_effect=lambda: calls.append("disable")
        ):
            with controller.suspended():
                calls.append("child")

        self.assertEqual(calls, ["disable", "child", "enable"])

    def test_suspended_is_a_no_op_outside_tui(self) -> None:
        controller = _controller()

        with mock.patch.object(controller, "enable_tui_mode") as enable_mock, mock.patch.object(
            controller, "disable_tui_mode"
        ) as disable_mock:
            with controller.suspended():
                pass

        enable_mock.assert_not_called()
        disable_mock.assert_not_called()

    def test_size_falls_back_to_conventional_dimensions(self) -> None:
        controller = _controller()
        with mock.patch("jjdag.runtime.terminal.shutil.get_terminal_size", return_value=mock.Mock(columns=0, lines=30)):
            self.assertEqual(controller.size(), (1, 30))


if __name__ == "__main__":
    unittest.main()
