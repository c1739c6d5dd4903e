"""Key routing and action dispatch.

Keys go to the active text input, then the active popup, then mouse handling,
then the global bindings, and finally the command trie. Resolved actions are
looked up by name in ``ACTION_HANDLERS``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..actions import Action
from ..errors import Cancelled, EngineInvocationError, InvalidSelection, JjCommandFailed
from ..input.reader import UNKNOWN_KEY
from ..log_tree import DOWN, UP
from .model import MOUSE_SCROLL_LINES, Model

logger = logging.getLogger(__name__)

ACTION_HANDLERS: dict[str, Callable[..., None]] = {
    # Navigation and general
    "quit": Model.quit,
    "clear": Model.clear,
    "refresh": Model.refresh,
    "show_help": Model.show_help,
    "toggle_fold": Model.toggle_current_fold,
    "scroll_down_page": Model.scroll_down_page,
    "scroll_up_page": Model.scroll_up_page,
    "select_next_node": Model.select_next_node,
    "select_prev_node": Model.select_prev_node,
    "select_next_sibling_node": Model.select_next_sibling_node,
    "select_prev_sibling_node": Model.select_prev_sibling_node,
    "select_parent_node": Model.select_parent_node,
    "select_current_working_copy": Model.select_current_working_copy,
    "set_revset": Model.set_revset,
    "toggle_ignore_immutable": Model.toggle_ignore_immutable,
    "save_selection": Model.save_selection,
    "enter_pressed": Model.enter_pressed,
    # Commands
    "abandon": Model.jj_abandon,
    "absorb": Model.jj_absorb,
    "bookmark_create_start": Model.jj_bookmark_create_start,
    "new_on_branch": Model.jj_new_on_branch,
    "bookmark_move": Model.jj_bookmark_move,
    "tug": Model.jj_tug,
    "bookmark_rename": Model.jj_bookmark_rename,
    "bookmark_track": Model.jj_bookmark_track,
    "bookmark_untrack": Model.jj_bookmark_untrack,
    "bookmark_delete": Model.jj_bookmark_delete,
    "bookmark_forget": Model.jj_bookmark_forget,
    "bookmark_set": Model.jj_bookmark_set,
    "commit": Model.jj_commit,
    "describe_start": Model.jj_describe_start,
    "duplicate": Model.jj_duplicate,
    "edit": Model.jj_edit,
    "evolog": Model.jj_evolog,
    "file_track": Model.jj_file_track,
    "file_untrack": Model.jj_file_untrack,
    "git_fetch": Model.jj_git_fetch,
    "git_push": Model.jj_git_push,
    "tug_and_git_push": Model.jj_tug_and_git_push,
    "interdiff": Model.jj_interdiff,
    "metaedit": Model.jj_metaedit,
    "new": Model.jj_new,
    "new_after_trunk_sync": Model.jj_new_after_trunk_sync,
    "next_prev": Model.jj_next_prev,
    "parallelize": Model.jj_parallelize,
    "squash": Model.jj_squash,
    "status": Model.jj_status,
    "split": Model.jj_split,
    "resolve": Model.jj_resolve,
    "sign": Model.jj_sign,
    "simplify_parents": Model.jj_simplify_parents,
    "rebase": Model.jj_rebase,
    "rebase_selected_branch_onto_trunk": Model.jj_rebase_selected_branch_onto_trunk,
    "restore": Model.jj_restore,
    "revert": Model.jj_revert,
    "view": Model.jj_view,
    "undo": Model.jj_undo,
    "redo": Model.jj_redo,
    "workspace_list": Model.jj_workspace_list,
    "workspace_root": Model.jj_workspace_root,
    "workspace_add_start": Model.jj_workspace_add_start,
    "workspace_forget": Model.jj_workspace_forget,
    "workspace_rename_start": Model.jj_workspace_rename_start,
    "workspace_update_stale": Model.jj_workspace_update_stale,
    # Modal submission
    "popup_submit": Model.popup_submit,
    "popup_cancel": Model.popup_cancel,
    "text_input_submit": Model.text_input_submit,
    "text_input_cancel": Model.text_input_cancel,
}


def run_guarded(model: Model, handler: Callable[..., None], **kwargs: object) -> None:
    """Run ``handler``, turning recoverable failures into inline messages."""
    try:
        handler(model, **kwargs)
    except InvalidSelection as exc:
        model.show_message(str(exc))
    except Cancelled:
        model.cancelled()
    except JjCommandFailed as exc:
        model.display_error_lines(exc.stderr)
    except EngineInvocationError as exc:
        model.display_error_lines(str(exc))


def handle_action(model: Model, resolved: Action) -> None:
    logger.debug("action %s", resolved)
    run_guarded(model, ACTION_HANDLERS[resolved.name], **resolved.kwargs)


def _is_text_key(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


def handle_text_input_key(model: Model, key: str) -> None:
    text_input = model.text_input
    assert text_input is not None
    if key == "ESC":
        run_guarded(model, Model.text_input_cancel)
    elif key == "ENTER":
        run_guarded(model, Model.text_input_submit)
    elif key == "BACKSPACE":
        text_input.backspace()
    elif key == "DELETE":
        text_input.delete()
    elif key == "LEFT":
        text_input.move_left()
    elif key == "RIGHT":
        text_input.move_right()
    elif key == "HOME":
        text_input.move_home()
    elif key == "END":
        text_input.move_end()
    elif key == "CTRL_U":
        text_input.clear()
    elif key == "CTRL_C":
        model.quit()
    elif _is_text_key(key):
        text_input.insert(key)


def handle_popup_key(model: Model, key: str) -> None:
    popup = model.popup
    assert popup is not None
    if key == "ESC":
        run_guarded(model, Model.popup_cancel)
    elif key == "ENTER":
        run_guarded(model, Model.popup_submit)
    elif key in ("UP", "CTRL_P", "MOUSE_WHEEL_UP"):
        popup.select_prev()
    elif key in ("DOWN", "CTRL_N", "TAB", "MOUSE_WHEEL_DOWN"):
        popup.select_next()
    elif key == "BACKSPACE":
        popup.backspace()
    elif key == "CTRL_C":
        model.quit()
    elif _is_text_key(key):
        popup.type_char(key)


def _parse_mouse_key(key: str) -> tuple[str, int, int] | None:
    kind, sep, rest = key.partition(":")
    if not sep:
        return None
    col_s, _, row_s = rest.partition(":")
    try:
        return kind, int(col_s), int(row_s)
    except ValueError:
        return None


def handle_mouse_key(model: Model, key: str) -> None:
    parsed = _parse_mouse_key(key)
    if parsed is None:
        return
    kind, col, row = parsed
    # Reports are 1-based.
    if kind == "MOUSE_WHEEL_DOWN":
        run_guarded(model, Model.scroll_lines, num_lines=MOUSE_SCROLL_LINES, direction=DOWN)
    elif kind == "MOUSE_WHEEL_UP":
        run_guarded(model, Model.scroll_lines, num_lines=MOUSE_SCROLL_LINES, direction=UP)
    elif kind == "MOUSE_LEFT_DOWN":
        run_guarded(model, Model.handle_mouse_click, row=row - 1, column=col - 1)
    elif kind == "MOUSE_RIGHT_DOWN":
        run_guarded(model, Model.handle_mouse_right_click, row=row - 1)


def handle_key(model: Model, key: str) -> None:
    if not key or key == UNKNOWN_KEY:
        return
    if model.text_input is not None:
        # Wheel events are meaningless for a single-line input.
        if not key.startswith("MOUSE"):
            handle_text_input_key(model, key)
        return
    if model.popup is not None:
        handle_popup_key(model, key.split(":", 1)[0] if key.startswith("MOUSE") else key)
        return
    if key.startswith("MOUSE"):
        handle_mouse_key(model, key)
        return
    if key == "ENTER" and not model.has_pending_command_keys():
        handle_action(model, Action("enter_pressed"))
        return
    resolved = model.global_keys.lookup(key)
    if resolved is None:
        resolved = model.handle_command_key(key)
    if resolved is not None:
        handle_action(model, resolved)
