"""Interaction state for one jjdag session.

The model owns the cursor into the flattened log, the saved selection used by
two-phase commands, the pending key sequence, the command queue with its
accumulated output, and the active popup or text input.
"""

from __future__ import annotations

import dataclasses
import logging
import os
import time
from dataclasses import dataclass
from typing import Protocol

from ..actions import Action
from ..ansi import RED, RESET
from ..config import save_default_revset, save_ignore_immutable
from ..errors import EngineInvocationError, InvalidSelection, InvalidTreePosition, JjCommandFailed
from ..input.command_tree import CommandTree
from ..input.key_registry import KeyComboRegistry, build_global_registry
from ..jj_command import GlobalArgs, run_jj
from ..log_tree import (
    DOWN,
    UP,
    JjLog,
    TreePosition,
    line_dist_to_dest_node,
    next_sibling_position,
    parent_position,
    prev_sibling_position,
)
from ..render.help import with_unbound_error
from .modal import REVSET, Popup, TextInput
from .operations import JjOperations

logger = logging.getLogger(__name__)

RUNNING = "running"
QUIT = "quit"

DOUBLE_CLICK_SECONDS = 0.3
MOUSE_SCROLL_LINES = 3
RUNNING_MARKER = "Running..."


class QueuedCommand(Protocol):
    """What the queue needs from an invocation."""

    sync: bool

    def to_lines(self) -> list[str]: ...

    def run(self) -> str: ...


@dataclass
class LogListLayout:
    """Screen rows occupied by the log list, set by the renderer."""

    top: int = 1
    height: int = 20
    width: int = 80


def display_path(path: str) -> str:
    """Abbreviate the home directory as ``~`` for the header."""
    home = os.path.expanduser("~")
    absolute = os.path.abspath(os.path.expanduser(path))
    if absolute == home:
        return "~"
    if absolute.startswith(home + os.sep):
        return "~" + absolute[len(home) :]
    return absolute


class Model(JjOperations):
    def __init__(
        self,
        repository: str,
        revset: str = "",
        *,
        ignore_immutable: bool = False,
        run=run_jj,
        jj_log: JjLog | None = None,
        command_tree: CommandTree | None = None,
        terminal=None,
        persist_settings: bool = False,
    ) -> None:
        self.global_args = GlobalArgs(repository, ignore_immutable)
        self.display_repository = display_path(repository)
        self.revset = revset
        self.state = RUNNING
        self._run = run
        self.jj_log = jj_log if jj_log is not None else JjLog(run)
        self.command_tree = command_tree if command_tree is not None else CommandTree()
        self.global_keys: KeyComboRegistry = build_global_registry()
        self.terminal = terminal
        self.persist_settings = persist_settings

        self.command_keys: list[str] = []
        self.queued_jj_commands: list[QueuedCommand] = []
        self.accumulated_command_output: list[str] = []
        self.saved_change_id: str | None = None
        self.saved_file_path: str | None = None
        self.saved_tree_position: TreePosition | None = None

        self.log_list: list[list[str]] = []
        self.log_list_tree_positions: list[TreePosition] = []
        self.log_list_selected = 0
        self.log_list_offset = 0
        self.log_list_layout = LogListLayout()

        self.info_list: list[str] | None = None
        self.popup: Popup | None = None
        self.text_input: TextInput | None = None
        self.last_click_time: float | None = None
        self.last_click_pos: tuple[int, int] | None = None
        self.workspace_root: str | None = None

        self.sync()

    # Log tree synchronization

    def sync(self) -> None:
        self.jj_log.load_log_tree(self.global_args, self.revset)
        self.sync_log_list()
        self.reset_log_list_selection()

    def sync_log_list(self) -> None:
        self.log_list, self.log_list_tree_positions = self.jj_log.flatten_log()

    def reset_log_list_selection(self) -> None:
        """Select the working-copy commit (else the first) and unfold it."""
        current = self.jj_log.get_current_commit()
        self.log_select(current.flat_log_idx if current is not None else 0)
        self.log_list_offset = 0
        self.toggle_current_fold()

    def refresh(self) -> None:
        message = "Refreshed"
        if self.info_list and self.info_list[0].startswith("Refreshed"):
            message = self.info_list[0] + "."
        self.clear()
        self.sync()
        self.info_list = [message]

    def clear(self) -> None:
        """Drop pending keys, the saved selection, queue state and modals."""
        self.info_list = None
        self.saved_change_id = None
        self.saved_file_path = None
        self.saved_tree_position = None
        self.command_keys.clear()
        self.queued_jj_commands.clear()
        self.accumulated_command_output.clear()
        self.popup = None
        self.text_input = None

    def quit(self) -> None:
        self.state = QUIT

    # Inline messages

    def show_message(self, message: str) -> None:
        self.info_list = message.splitlines() or [""]

    def display_error_lines(self, text: str) -> None:
        self.info_list = [f"{RED}{line}{RESET}" for line in text.rstrip().splitlines()] or [""]

    def cancelled(self) -> None:
        self.show_message("Cancelled")

    def show_help(self) -> None:
        self.info_list = self.command_tree.get_root_help(self.global_keys.help_groups())

    # Selection accessors

    def log_select(self, idx: int) -> None:
        if not self.log_list:
            self.log_list_selected = 0
            return
        self.log_list_selected = max(0, min(idx, len(self.log_list) - 1))

    def get_selected_tree_position(self) -> TreePosition:
        return self.log_list_tree_positions[self.log_list_selected]

    def get_selected_change_id(self) -> str | None:
        if not self.log_list_tree_positions:
            return None
        commit = self.jj_log.get_tree_commit(self.get_selected_tree_position())
        return commit.change_id if commit is not None else None

    def get_selected_file_path(self) -> str | None:
        if not self.log_list_tree_positions:
            return None
        file_diff = self.jj_log.get_tree_file_diff(self.get_selected_tree_position())
        return file_diff.path if file_diff is not None else None

    def get_saved_change_id(self) -> str | None:
        return self.saved_change_id

    def get_saved_file_path(self) -> str | None:
        return self.saved_file_path

    def require_selected_change_id(self) -> str:
        change_id = self.get_selected_change_id()
        if change_id is None:
            raise InvalidSelection()
        return change_id

    def require_saved_change_id(self) -> str:
        if self.saved_change_id is None:
            raise InvalidSelection()
        return self.saved_change_id

    def get_saved_flat_idx(self) -> int | None:
        """Flat index of the saved node while it is still visible."""
        if self.saved_tree_position is None:
            return None
        try:
            node = self.jj_log.get_tree_node(self.saved_tree_position)
        except InvalidTreePosition:
            return None
        idx = node.flat_log_idx
        if idx >= len(self.log_list_tree_positions) or self.log_list_tree_positions[idx] != self.saved_tree_position:
            return None
        return idx

    def save_selection(self) -> None:
        change_id = self.get_selected_change_id()
        if change_id is None:
            self.clear()
            raise InvalidSelection()
        self.saved_change_id = change_id
        self.saved_file_path = self.get_selected_file_path()
        self.saved_tree_position = self.get_selected_tree_position()

    # Navigation

    def select_next_node(self) -> None:
        if self.log_list_selected < len(self.log_list) - 1:
            self.log_list_selected += 1

    def select_prev_node(self) -> None:
        if self.log_list_selected > 0:
            self.log_list_selected -= 1

    def select_current_working_copy(self) -> None:
        commit = self.jj_log.get_current_commit()
        if commit is not None:
            self.log_select(commit.flat_log_idx)

    def _select_position(self, position: TreePosition) -> None:
        self.log_select(self.jj_log.get_tree_node(position).flat_log_idx)

    def select_parent_node(self) -> None:
        position = self.get_selected_tree_position()
        if len(position) > 1:
            self._select_position(parent_position(position))

    def select_next_sibling_node(self) -> None:
        self._select_position(next_sibling_position(self.jj_log, self.get_selected_tree_position()))

    def select_prev_sibling_node(self) -> None:
        self._select_position(prev_sibling_position(self.jj_log, self.get_selected_tree_position()))

    def toggle_current_fold(self) -> None:
        if not self.log_list_tree_positions:
            return
        try:
            idx = self.jj_log.toggle_fold(self.global_args, self.get_selected_tree_position())
        except EngineInvocationError as exc:
            logger.warning("could not load diff: %s", exc)
            self.display_error_lines(str(exc))
            return
        self.sync_log_list()
        self.log_select(idx)

    def _line_counts(self) -> list[int]:
        return [len(block) for block in self.log_list]

    def line_dist_to_dest_node(self, line_dist: int, start: int, direction: str) -> int:
        return line_dist_to_dest_node(self._line_counts(), line_dist, start, direction)

    def set_log_list_layout(self, top: int, height: int, width: int) -> None:
        self.log_list_layout = LogListLayout(top=top, height=max(1, height), width=width)
        self.ensure_selection_visible()

    def ensure_selection_visible(self) -> None:
        """Scroll the offset so the whole selected block fits on screen."""
        if not self.log_list:
            self.log_list_offset = 0
            return
        self.log_list_offset = max(0, min(self.log_list_offset, len(self.log_list) - 1))
        if self.log_list_selected < self.log_list_offset:
            self.log_list_offset = self.log_list_selected
            return
        counts = self._line_counts()
        height = self.log_list_layout.height
        while (
            self.log_list_offset < self.log_list_selected
            and sum(counts[self.log_list_offset : self.log_list_selected + 1]) > height
        ):
            self.log_list_offset += 1

    def scroll_down_page(self) -> None:
        self.scroll_lines(self.log_list_layout.height, DOWN)

    def scroll_up_page(self) -> None:
        self.scroll_lines(self.log_list_layout.height, UP)

    def scroll_lines(self, num_lines: int, direction: str) -> None:
        if not self.log_list:
            return
        selected_dist_from_offset = self.log_list_selected - self.log_list_offset
        target_offset = self.line_dist_to_dest_node(num_lines, self.log_list_offset, direction)
        target_node = target_offset + selected_dist_from_offset
        if direction == DOWN and target_offset == len(self.log_list) - 1:
            target_node = target_offset
            target_offset = self.log_list_offset
        elif direction == UP and target_offset == 0 and self.log_list_offset == 0:
            target_node = 0
        self.log_select(target_node)
        self.log_list_offset = target_offset

    def node_at_row(self, row: int) -> int | None:
        """Flat index rendered at 0-based screen ``row``, if inside the list."""
        layout = self.log_list_layout
        if row < layout.top or row >= layout.top + layout.height or not self.log_list:
            return None
        line_dist = row - layout.top
        if sum(self._line_counts()[self.log_list_offset :]) <= line_dist:
            return None
        return self.line_dist_to_dest_node(line_dist, self.log_list_offset, DOWN)

    def handle_mouse_click(self, row: int, column: int, now: float | None = None) -> None:
        """Select the clicked node; a quick second click acts like Enter."""
        now = time.monotonic() if now is None else now
        is_double_click = (
            self.last_click_time is not None
            and now - self.last_click_time < DOUBLE_CLICK_SECONDS
            and self.last_click_pos == (row, column)
        )
        self.last_click_time = now
        self.last_click_pos = (row, column)
        if is_double_click:
            self.enter_pressed()
            return
        target = self.node_at_row(row)
        if target is not None:
            self.log_select(target)

    def handle_mouse_right_click(self, row: int) -> None:
        target = self.node_at_row(row)
        if target is None:
            return
        self.log_select(target)
        self.toggle_current_fold()

    # Command keys

    def has_pending_command_keys(self) -> bool:
        return bool(self.command_keys)

    def handle_command_key(self, key: str) -> Action | None:
        """Feed one key into the trie; return an action once one resolves."""
        self.command_keys.append(key)
        node = self.command_tree.get_node(self.command_keys)
        if node is None:
            self.command_keys.pop()
            self.info_list = with_unbound_error(self.info_list, key)
            self.command_keys.clear()
            return None
        if node.children is not None:
            self.info_list = node.children.get_help()
        if node.action is not None:
            if node.children is None:
                self.command_keys.clear()
            return node.action
        return None

    # Revset and global flags

    def set_revset(self) -> None:
        self.text_input = TextInput(REVSET, buffer=self.revset)

    def revset_edit_submit(self, revset: str) -> None:
        """Apply ``revset``; on failure keep the previous one and show why."""
        old_revset = self.revset
        self.revset = revset.strip()
        self.text_input = None
        try:
            self.sync()
        except EngineInvocationError as exc:
            logger.warning("revset %r rejected: %s", self.revset, exc)
            self.revset = old_revset
            self.display_error_lines(str(exc))
            return
        if self.persist_settings:
            save_default_revset(self.revset)
        self.show_message(f"Revset set to '{self.revset}'")

    def toggle_ignore_immutable(self) -> None:
        self.global_args = dataclasses.replace(self.global_args, ignore_immutable=not self.global_args.ignore_immutable)
        if self.persist_settings:
            save_ignore_immutable(self.global_args.ignore_immutable)
        state = "enabled" if self.global_args.ignore_immutable else "disabled"
        self.show_message(f"--ignore-immutable {state}")

    # Command queue

    def queue_jj_command(self, command: QueuedCommand) -> None:
        self.queue_jj_commands([command])

    def queue_jj_commands(self, commands: list[QueuedCommand]) -> None:
        self.accumulated_command_output.clear()
        self.queued_jj_commands = list(commands)
        if commands:
            self.info_list = [*commands[0].to_lines(), RUNNING_MARKER]

    def process_jj_command_queue(self) -> None:
        """Run the head of the queue; the last success may reload the tree.

        ``JjCommandFailed`` truncates the queue and never reloads. Any other
        error propagates to the event loop.
        """
        if not self.queued_jj_commands:
            return
        command = self.queued_jj_commands.pop(0)
        if self.accumulated_command_output:
            self.accumulated_command_output.append("")
        self.accumulated_command_output.extend(command.to_lines())

        try:
            output = command.run()
        except JjCommandFailed as exc:
            self.accumulated_command_output.extend(exc.stderr.rstrip("\n").splitlines())
            final_output = list(self.accumulated_command_output)
            self.clear()
            self.info_list = final_output
            return

        self.accumulated_command_output.extend(output.rstrip("\n").splitlines())
        if self.queued_jj_commands:
            self.info_list = [
                *self.accumulated_command_output,
                "",
                *self.queued_jj_commands[0].to_lines(),
                RUNNING_MARKER,
            ]
            return

        final_output = list(self.accumulated_command_output)
        self.clear()
        if command.sync:
            try:
                self.sync()
            except EngineInvocationError as exc:
                final_output += ["", f"{RED}{exc}{RESET}"]
        self.info_list = final_output
