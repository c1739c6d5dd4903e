"""Main loop ordering: render, drain one queued command, read one key."""

from __future__ import annotations

import unittest

from jj_fixtures import FakeCommand, FakeJj
from jjdag.runtime.loop import RuntimeLoopTiming, run_main_loop
from jjdag.runtime.model import QUIT, Model


class _FakeTerminal:
    stdin_fd = 10
    stdout_fd = 11

    def size(self) -> tuple[int, int]:
        return 80, 24


class RunMainLoopTests(unittest.TestCase):
    def _run(self, model: Model, keys: list[str], timing: RuntimeLoopTiming = RuntimeLoopTiming()):
        events: list[tuple] = []
        pending = list(keys)

        def render_fn(m: Model, width: int, height: int, out_fd: int) -> None:
            events.append(("render", width, height, out_fd, list(m.info_list or [])))

        def read_key_fn(fd: int, timeout_ms: int | None) -> str:
            events.append(("read", fd, timeout_ms))
            return pending.pop(0) if pending else "q"

        run_main_loop(model, _FakeTerminal(), timing, read_key_fn=read_key_fn, render_fn=render_fn)
        return events

    def test_quits_on_q(self) -> None:
        model = Model("/repo", run=FakeJj())

        events = self._run(model, ["q"])

        self.assertEqual(model.state, QUIT)
        self.assertEqual(events, [("render", 80, 24, 11, []), ("read", 10, 200)])

    def test_queue_drains_one_command_per_frame_without_waiting(self) -> None:
        model = Model("/repo", run=FakeJj())
        first = FakeCommand("first", output="one\n", sync=False)
        second = FakeCommand("second", output="two\n", sync=False)
        model.queue_jj_commands([first, second])

        events = self._run(model, ["", "", "q"], RuntimeLoopTiming(key_poll_ms=50))

        reads = [event for event in events if event[0] == "read"]
        self.assertEqual([event[2] for event in reads], [0, 50, 50])
        renders = [event for event in events if event[0] == "render"]
        self.assertEqual(renders[0][4], ["$ first", "Running..."])
        self.assertEqual(renders[1][4], ["$ first", "one", "", "$ second", "Running..."])
        self.assertEqual(model.info_list, ["$ first", "one", "", "$ second", "two"])

    def test_keys_are_dispatched_between_frames(self) -> None:
        model = Model("/repo", run=FakeJj())

        self._run(model, ["j", "j", "q"])

        self.assertEqual(model.log_list_selected, 2)


if __name__ == "__main__":
    unittest.main()
