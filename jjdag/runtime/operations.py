"""``jj`` operations triggered from the command trie, popups and prompts.

Every method reads the selection (and, for two-phase commands, the saved
selection) from the model, builds one or more ``JjCommand`` values and queues
them. Pickers query ``jj`` synchronously for their item lists.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from ..editor import launch_editor
from ..errors import InvalidSelection, JjCommandFailed
from ..jj_command import (
    BOOKMARK_NAME_TEMPLATE,
    LOCAL_BOOKMARK_TEMPLATE,
    REMOTE_BOOKMARK_TEMPLATE,
    TUG_FROM_REVSET,
    JjCommand,
    parse_remote_bookmarks,
    parse_remote_names,
    parse_unique_lines,
    parse_untracked_paths,
    parse_workspace_names,
)
from ..log_tree import COMMIT_IDX, DiffLineNode, HunkNode
from .modal import BOOKMARK, DESCRIPTION, PROMPT, REVSET, Popup, TextInput

logger = logging.getLogger(__name__)

TRUNK_REVSET = "trunk()"
CURRENT_REVSET = "@"

ABANDON_FLAGS = {
    "default": (),
    "retain-bookmarks": ("--retain-bookmarks",),
    "restore-descendants": ("--restore-descendants",),
}
GIT_FETCH_FLAGS = {
    "default": (),
    "all-remotes": ("--all-remotes",),
    "tracked": ("--tracked",),
}
GIT_PUSH_FLAGS = {
    "default": (),
    "all": ("--all",),
    "tracked": ("--tracked",),
    "deleted": ("--deleted",),
}
METAEDIT_FLAGS = {
    "update-change-id": "--update-change-id",
    "update-author-timestamp": "--update-author-timestamp",
    "update-author": "--update-author",
    "force-rewrite": "--force-rewrite",
}
NEXT_PREV_FLAGS = {
    "default": (),
    "edit": ("--edit",),
    "no-edit": ("--no-edit",),
    "conflict": ("--conflict",),
}
REBASE_SOURCE_FLAGS = {
    "branch": "--branch",
    "source": "--source",
    "revisions": "--revisions",
}
DESTINATION_FLAGS = {
    "onto": "--onto",
    "insert-after": "--insert-after",
    "insert-before": "--insert-before",
}

# Popup kinds
POPUP_BOOKMARK_RENAME = "bookmark_rename"
POPUP_BOOKMARK_TRACK = "bookmark_track"
POPUP_BOOKMARK_UNTRACK = "bookmark_untrack"
POPUP_BOOKMARK_DELETE = "bookmark_delete"
POPUP_BOOKMARK_FORGET = "bookmark_forget"
POPUP_BOOKMARK_SET = "bookmark_set"
POPUP_FILE_TRACK = "file_track"
POPUP_GIT_FETCH_REMOTE = "git_fetch_remote"
POPUP_GIT_FETCH_BRANCH = "git_fetch_branch"
POPUP_GIT_PUSH_BOOKMARK = "git_push_bookmark"
POPUP_WORKSPACE_FORGET = "workspace_forget"

# Prompt purposes, stored in ``TextInput.params["purpose"]``
PROMPT_NEXT_PREV_OFFSET = "next_prev_offset"
PROMPT_SET_AUTHOR = "set_author"
PROMPT_SET_AUTHOR_TIMESTAMP = "set_author_timestamp"
PROMPT_PARALLELIZE_REVSET = "parallelize_revset"
PROMPT_BOOKMARK_RENAME = "bookmark_rename"
PROMPT_GIT_PUSH_NAMED = "git_push_named"
PROMPT_WORKSPACE_ADD = "workspace_add"
PROMPT_WORKSPACE_RENAME = "workspace_rename"


def _with_file(args: list[str], file_path: str | None) -> list[str]:
    if file_path is not None:
        args.append(file_path)
    return args


class JjOperations:
    """Mixin for ``Model``; relies on its selection and queue state."""

    # Command building

    def _jj(self, *args: str, sync: bool = True, interactive: bool = False) -> JjCommand:
        return JjCommand(
            tuple(args),
            self.global_args,
            sync=sync,
            interactive=interactive,
            terminal=self.terminal if interactive else None,
        )

    def _query(self, *args: str) -> str:
        return self._run(self.global_args, list(args))

    def _destination(self, destination: str) -> str:
        if destination == "selection":
            return self.require_selected_change_id()
        if destination == "trunk":
            return TRUNK_REVSET
        if destination == "current":
            return CURRENT_REVSET
        if destination == "saved":
            return self.require_saved_change_id()
        raise ValueError(f"unknown destination: {destination}")

    def _tug_command(self) -> JjCommand:
        return self._jj("bookmark", "move", "--from", TUG_FROM_REVSET, "--to", "@-")

    # Popups and prompts

    def open_popup(self, kind: str, title: str, items: list[str], empty_message: str, **params: object) -> None:
        if not items:
            self.show_message(empty_message)
            return
        self.popup = Popup(kind, title, items, params=dict(params))

    def open_prompt(self, purpose: str, title: str, placeholder: str = "", buffer: str = "", **params: object) -> None:
        self.text_input = TextInput(
            PROMPT,
            buffer=buffer,
            title=title,
            placeholder=placeholder,
            params={"purpose": purpose, **params},
        )

    def _local_bookmarks(self) -> list[str]:
        return parse_unique_lines(self._query("bookmark", "list", "-T", LOCAL_BOOKMARK_TEMPLATE))

    # Commands

    def jj_abandon(self, mode: str) -> None:
        change_id = self.require_selected_change_id()
        self.queue_jj_command(self._jj("abandon", change_id, *ABANDON_FLAGS[mode]))

    def jj_absorb(self, mode: str) -> None:
        if mode == "into":
            args = ["absorb", "--from", self.require_saved_change_id(), "--into", self.require_selected_change_id()]
            _with_file(args, self.get_saved_file_path())
        else:
            args = _with_file(["absorb", "--from", self.require_selected_change_id()], self.get_selected_file_path())
        self.queue_jj_command(self._jj(*args))

    def jj_bookmark_create_start(self) -> None:
        change_id = self.require_selected_change_id()
        self.text_input = TextInput(BOOKMARK, params={"change_id": change_id})

    def jj_bookmark_create_submit(self, name: str, change_id: str) -> None:
        self.queue_jj_command(self._jj("bookmark", "create", name, "-r", change_id))

    def jj_new_on_branch(self) -> None:
        change_id = self.require_selected_change_id()
        self.queue_jj_commands([self._jj("new", change_id), self._tug_command()])

    def jj_bookmark_move(self, mode: str) -> None:
        to_change_id = self.require_selected_change_id()
        if mode == "tug":
            args = ["bookmark", "move", "--from", TUG_FROM_REVSET, "--to", to_change_id]
        else:
            args = ["bookmark", "move", "--from", self.require_saved_change_id(), "--to", to_change_id]
            if mode == "allow-backwards":
                args.append("--allow-backwards")
        self.queue_jj_command(self._jj(*args))

    def jj_tug(self) -> None:
        self.queue_jj_command(self._tug_command())

    def jj_bookmark_rename(self) -> None:
        self.open_popup(POPUP_BOOKMARK_RENAME, "Rename Bookmark", self._local_bookmarks(), "No bookmarks to rename")

    def jj_bookmark_track(self) -> None:
        items = parse_remote_bookmarks(self._query("bookmark", "list", "--all-remotes", "-T", REMOTE_BOOKMARK_TEMPLATE))
        self.open_popup(POPUP_BOOKMARK_TRACK, "Track Bookmark", items, "No remote bookmarks to track")

    def jj_bookmark_untrack(self) -> None:
        items = parse_remote_bookmarks(self._query("bookmark", "list", "--tracked", "-T", REMOTE_BOOKMARK_TEMPLATE))
        self.open_popup(POPUP_BOOKMARK_UNTRACK, "Untrack Bookmark", items, "No tracked bookmarks to untrack")

    def jj_bookmark_delete(self) -> None:
        self.open_popup(POPUP_BOOKMARK_DELETE, "Delete Bookmark", self._local_bookmarks(), "No bookmarks to delete")

    def jj_bookmark_forget(self, include_remotes: bool) -> None:
        items = parse_unique_lines(self._query("bookmark", "list", "--all-remotes", "-T", BOOKMARK_NAME_TEMPLATE))
        self.open_popup(
            POPUP_BOOKMARK_FORGET,
            "Forget Bookmark",
            items,
            "No bookmarks to forget",
            include_remotes=include_remotes,
        )

    def jj_bookmark_set(self) -> None:
        change_id = self.require_selected_change_id()
        self.open_popup(
            POPUP_BOOKMARK_SET,
            "Set Bookmark",
            self._local_bookmarks(),
            "No bookmarks to set",
            change_id=change_id,
        )

    def jj_commit(self) -> None:
        args = _with_file(["commit"], self.get_selected_file_path())
        self.queue_jj_command(self._jj(*args, interactive=True))

    def jj_describe_start(self, ignore_immutable: bool) -> None:
        change_id = self.require_selected_change_id()
        commit = self.jj_log.get_tree_commit(self.get_selected_tree_position())
        self.text_input = TextInput(
            DESCRIPTION,
            buffer=(commit.description_first_line or "") if commit is not None else "",
            params={"change_id": change_id, "ignore_immutable": ignore_immutable},
        )

    def jj_describe_submit(self, message: str, change_id: str, ignore_immutable: bool) -> None:
        args = ["describe", change_id, "-m", message]
        if ignore_immutable and not self.global_args.ignore_immutable:
            args.append("--ignore-immutable")
        self.queue_jj_command(self._jj(*args))

    def jj_duplicate(self, destination_type: str) -> None:
        if destination_type == "default":
            self.queue_jj_command(self._jj("duplicate", self.require_selected_change_id()))
            return
        source = self.require_saved_change_id()
        destination = self.require_selected_change_id()
        self.queue_jj_command(self._jj("duplicate", source, DESTINATION_FLAGS[destination_type], destination))

    def jj_edit(self, ignore_immutable: bool) -> None:
        args = ["edit", self.require_selected_change_id()]
        if ignore_immutable and not self.global_args.ignore_immutable:
            args.append("--ignore-immutable")
        self.queue_jj_command(self._jj(*args))

    def jj_evolog(self, patch: bool) -> None:
        args = ["evolog", "-r", self.require_selected_change_id()]
        if patch:
            args.append("--patch")
        self.queue_jj_command(self._jj(*args, sync=False, interactive=True))

    def jj_file_track(self) -> None:
        items = parse_untracked_paths(self._query("status"))
        self.open_popup(POPUP_FILE_TRACK, "Track File", items, "No untracked files")

    def jj_file_untrack(self) -> None:
        file_path = self.get_selected_file_path()
        commit = self.jj_log.get_tree_commit(self.get_selected_tree_position()) if self.log_list else None
        if file_path is None or commit is None or not commit.current_working_copy:
            raise InvalidSelection()
        self.queue_jj_command(self._jj("file", "untrack", file_path))

    def jj_git_fetch(self, mode: str) -> None:
        if mode in ("branch", "remote"):
            remotes = parse_remote_names(self._query("git", "remote", "list"))
            self.open_popup(
                POPUP_GIT_FETCH_REMOTE,
                "Fetch From Remote",
                remotes,
                "No remotes configured",
                select_branch=mode == "branch",
            )
            return
        self.queue_jj_command(self._jj("git", "fetch", *GIT_FETCH_FLAGS[mode]))

    def jj_git_push(self, mode: str) -> None:
        if mode == "revision":
            args = ["git", "push", "-r", self.require_selected_change_id()]
        elif mode == "change":
            args = ["git", "push", "-c", self.require_selected_change_id()]
        elif mode == "named":
            change_id = self.require_selected_change_id()
            self.open_prompt(PROMPT_GIT_PUSH_NAMED, "Enter New Bookmark Name", "bookmark-name", change_id=change_id)
            return
        elif mode == "bookmark":
            self.open_popup(POPUP_GIT_PUSH_BOOKMARK, "Push Bookmark", self._local_bookmarks(), "No bookmarks to push")
            return
        else:
            args = ["git", "push", *GIT_PUSH_FLAGS[mode]]
        self.queue_jj_command(self._jj(*args))

    def jj_tug_and_git_push(self) -> None:
        names = parse_unique_lines(self._query("bookmark", "list", "-r", TUG_FROM_REVSET, "-T", BOOKMARK_NAME_TEMPLATE))
        if not names:
            self.show_message("No bookmarks to push")
            return
        pushes = [self._jj("git", "push", "-b", name) for name in names]
        self.queue_jj_commands([self._tug_command(), *pushes])

    def jj_interdiff(self, mode: str) -> None:
        selected = self.require_selected_change_id()
        if mode == "to-selection":
            from_rev, to_rev, file_path = CURRENT_REVSET, selected, self.get_selected_file_path()
        elif mode == "from-selection":
            from_rev, to_rev, file_path = selected, CURRENT_REVSET, self.get_selected_file_path()
        else:
            from_rev, to_rev, file_path = self.require_saved_change_id(), selected, self.get_saved_file_path()
        args = _with_file(["interdiff", "--from", from_rev, "--to", to_rev], file_path)
        self.queue_jj_command(self._jj(*args, sync=False, interactive=True))

    def jj_metaedit(self, mode: str) -> None:
        change_id = self.require_selected_change_id()
        if mode == "set-author":
            self.open_prompt(PROMPT_SET_AUTHOR, "Set Author", "Name <email@example.com>", change_id=change_id)
            return
        if mode == "set-author-timestamp":
            self.open_prompt(
                PROMPT_SET_AUTHOR_TIMESTAMP,
                "Set Author Timestamp",
                "2000-01-23T01:23:45-08:00",
                change_id=change_id,
            )
            return
        self.queue_jj_command(self._jj("metaedit", change_id, METAEDIT_FLAGS[mode]))

    def jj_new(self, mode: str) -> None:
        if mode == "after-trunk":
            args = ["new", TRUNK_REVSET]
        elif mode == "insert-after":
            args = ["new", "--insert-after", self.require_selected_change_id()]
        elif mode == "insert-before":
            args = ["new", "--no-edit", "--insert-before", self.require_selected_change_id()]
        else:
            args = ["new", self.require_selected_change_id()]
        self.queue_jj_command(self._jj(*args))

    def jj_new_after_trunk_sync(self) -> None:
        self.queue_jj_commands([self._jj("git", "fetch"), self._jj("new", TRUNK_REVSET)])

    def jj_next_prev(self, direction: str, mode: str, offset: bool) -> None:
        if offset:
            self.open_prompt(
                PROMPT_NEXT_PREV_OFFSET,
                "Enter Offset",
                "positive integer",
                direction=direction,
                mode=mode,
            )
            return
        self.queue_jj_command(self._jj(direction, *NEXT_PREV_FLAGS[mode]))

    def jj_parallelize(self, source: str) -> None:
        if source == "revset":
            self.open_prompt(PROMPT_PARALLELIZE_REVSET, "Parallelize Revset", "revset")
            return
        selected = self.require_selected_change_id()
        if source == "range":
            revset = f"{self.require_saved_change_id()}::{selected}"
        else:
            revset = f"{selected}-::{selected}"
        self.queue_jj_command(self._jj("parallelize", revset))

    def jj_squash(self, mode: str) -> None:
        if mode == "into":
            args = ["squash", "--from", self.require_saved_change_id(), "--into", self.require_selected_change_id()]
            self.queue_jj_command(self._jj(*_with_file(args, self.get_saved_file_path()), interactive=True))
            return
        change_id = self.require_selected_change_id()
        commit = self.jj_log.get_tree_commit(self.get_selected_tree_position())
        args = _with_file(["squash", "-r", change_id], self.get_selected_file_path())
        # Without a description there is nothing to combine, so no editor.
        interactive = commit is not None and bool(commit.description_first_line)
        self.queue_jj_command(self._jj(*args, interactive=interactive))

    def jj_status(self) -> None:
        self.queue_jj_command(self._jj("status", sync=False))

    def jj_split(self) -> None:
        args = _with_file(["split", "-r", self.require_selected_change_id()], self.get_selected_file_path())
        self.queue_jj_command(self._jj(*args, interactive=True))

    def jj_resolve(self) -> None:
        args = _with_file(["resolve", "-r", self.require_selected_change_id()], self.get_selected_file_path())
        self.queue_jj_command(self._jj(*args, interactive=True))

    def jj_sign(self, sign_action: str, range: bool) -> None:
        selected = self.require_selected_change_id()
        revset = f"{self.require_saved_change_id()}::{selected}" if range else selected
        self.queue_jj_command(self._jj(sign_action, "-r", revset))

    def jj_simplify_parents(self, mode: str) -> None:
        flag = "-s" if mode == "source" else "-r"
        self.queue_jj_command(self._jj("simplify-parents", flag, self.require_selected_change_id()))

    def jj_rebase(self, source_type: str, destination_type: str, destination: str) -> None:
        source = self.require_saved_change_id()
        target = self._destination(destination)
        self.queue_jj_command(
            self._jj(
                "rebase",
                REBASE_SOURCE_FLAGS[source_type],
                source,
                DESTINATION_FLAGS[destination_type],
                target,
            )
        )

    def jj_rebase_selected_branch_onto_trunk(self, sync: bool) -> None:
        rebase = self._jj("rebase", "--branch", self.require_selected_change_id(), "--onto", TRUNK_REVSET)
        self.queue_jj_commands([self._jj("git", "fetch"), rebase] if sync else [rebase])

    def jj_undo(self) -> None:
        self.queue_jj_command(self._jj("undo"))

    def jj_redo(self) -> None:
        self.queue_jj_command(self._jj("redo"))

    def jj_restore(self, mode: str) -> None:
        selected = self.require_selected_change_id()
        file_path = self.get_selected_file_path()
        if mode == "changes-in":
            args = ["restore", "--changes-in", selected]
        elif mode == "changes-in-restore-descendants":
            args = ["restore", "--changes-in", selected, "--restore-descendants"]
        elif mode == "from-selection":
            args = ["restore", "--from", selected]
        elif mode == "into-selection":
            args = ["restore", "--into", selected]
        else:
            args = ["restore", "--from", self.require_saved_change_id(), "--into", selected]
            file_path = self.get_saved_file_path()
        self.queue_jj_command(self._jj(*_with_file(args, file_path)))

    def jj_revert(self, revision: str, destination_type: str, destination: str) -> None:
        revision_id = self._destination(revision)
        target = self._destination(destination)
        self.queue_jj_command(self._jj("revert", "-r", revision_id, DESTINATION_FLAGS[destination_type], target))

    def jj_view(self, mode: str) -> None:
        selected = self.require_selected_change_id()
        file_path = self.get_selected_file_path()
        if mode == "default":
            args = ["diff", "-r", selected] if file_path is not None else ["show", selected]
        elif mode == "from-selection":
            args = ["diff", "--from", selected, "--to", CURRENT_REVSET]
        elif mode == "from-trunk":
            args = ["diff", "--from", TRUNK_REVSET, "--to", selected]
        elif mode == "to-selection":
            args = ["diff", "--from", CURRENT_REVSET, "--to", selected]
        else:
            args = ["diff", "--from", self.require_saved_change_id(), "--to", selected]
            file_path = self.get_saved_file_path()
        self.queue_jj_command(self._jj(*_with_file(args, file_path), sync=False, interactive=True))

    def jj_workspace_list(self) -> None:
        self.queue_jj_command(self._jj("workspace", "list", sync=False))

    def jj_workspace_root(self) -> None:
        self.queue_jj_command(self._jj("workspace", "root", sync=False))

    def jj_workspace_add_start(self) -> None:
        root = Path(self._workspace_root())
        self.open_prompt(PROMPT_WORKSPACE_ADD, "Enter Workspace Path", "/path/to/workspace", buffer=f"{root.parent}{os.sep}")

    def jj_workspace_forget(self) -> None:
        workspaces = parse_workspace_names(self._query("workspace", "list"))
        self.open_popup(POPUP_WORKSPACE_FORGET, "Forget Workspace", workspaces, "No workspaces to forget")

    def jj_workspace_rename_start(self) -> None:
        self.open_prompt(PROMPT_WORKSPACE_RENAME, "Enter New Workspace Name", "workspace-name")

    def jj_workspace_update_stale(self) -> None:
        self.queue_jj_command(self._jj("workspace", "update-stale"))

    # Popup selection

    def popup_submit(self) -> None:
        popup = self.popup
        if popup is None:
            return
        item = popup.selected_item()
        self.popup = None
        if item is None:
            self.cancelled()
            return
        params = popup.params
        kind = popup.kind
        if kind == POPUP_BOOKMARK_RENAME:
            self.open_prompt(PROMPT_BOOKMARK_RENAME, "Enter New Bookmark Name", item, buffer=item, old_name=item)
        elif kind == POPUP_BOOKMARK_TRACK:
            self.queue_jj_command(self._jj("bookmark", "track", item))
        elif kind == POPUP_BOOKMARK_UNTRACK:
            self.queue_jj_command(self._jj("bookmark", "untrack", item))
        elif kind == POPUP_BOOKMARK_DELETE:
            self.queue_jj_command(self._jj("bookmark", "delete", item))
        elif kind == POPUP_BOOKMARK_FORGET:
            args = ["bookmark", "forget", item]
            if params.get("include_remotes"):
                args.append("--include-remotes")
            self.queue_jj_command(self._jj(*args))
        elif kind == POPUP_BOOKMARK_SET:
            self.queue_jj_command(self._jj("bookmark", "set", item, "-r", str(params["change_id"])))
        elif kind == POPUP_FILE_TRACK:
            self.queue_jj_command(self._jj("file", "track", item))
        elif kind == POPUP_GIT_FETCH_REMOTE:
            if params.get("select_branch"):
                branches = parse_unique_lines(
                    self._query("bookmark", "list", "--all-remotes", "--remote", item, "-T", BOOKMARK_NAME_TEMPLATE)
                )
                self.open_popup(
                    POPUP_GIT_FETCH_BRANCH,
                    f"Fetch Branch From {item}",
                    branches,
                    f"No branches found on remote '{item}'",
                    remote=item,
                )
            else:
                self.queue_jj_command(self._jj("git", "fetch", "--remote", item))
        elif kind == POPUP_GIT_FETCH_BRANCH:
            self.queue_jj_command(self._jj("git", "fetch", "--remote", str(params["remote"]), "--branch", item))
        elif kind == POPUP_GIT_PUSH_BOOKMARK:
            self.queue_jj_command(self._jj("git", "push", "-b", item))
        elif kind == POPUP_WORKSPACE_FORGET:
            self.queue_jj_command(self._jj("workspace", "forget", item))
        else:
            raise ValueError(f"unknown popup kind: {kind}")

    def popup_cancel(self) -> None:
        self.popup = None
        self.cancelled()

    # Text input submission

    def text_input_submit(self) -> None:
        text_input = self.text_input
        if text_input is None:
            return
        value = text_input.buffer.strip()
        location = text_input.location
        params = text_input.params
        if location == REVSET:
            self.revset_edit_submit(value)
            return
        self.text_input = None
        if location == BOOKMARK:
            if not value:
                self.cancelled()
                return
            self.jj_bookmark_create_submit(value, str(params["change_id"]))
        elif location == DESCRIPTION:
            self.jj_describe_submit(text_input.buffer, str(params["change_id"]), bool(params["ignore_immutable"]))
        else:
            self._prompt_submit(str(params["purpose"]), value, params)

    def text_input_cancel(self) -> None:
        self.text_input = None
        self.cancelled()

    def _prompt_submit(self, purpose: str, value: str, params: dict[str, object]) -> None:
        if not value:
            self.cancelled()
            return
        if purpose == PROMPT_NEXT_PREV_OFFSET:
            if not value.isdigit() or int(value) <= 0:
                self.show_message("Invalid offset")
                return
            direction = str(params["direction"])
            self.queue_jj_command(self._jj(direction, *NEXT_PREV_FLAGS[str(params["mode"])], value))
        elif purpose == PROMPT_SET_AUTHOR:
            self.queue_jj_command(self._jj("metaedit", str(params["change_id"]), "--author", value))
        elif purpose == PROMPT_SET_AUTHOR_TIMESTAMP:
            self.queue_jj_command(self._jj("metaedit", str(params["change_id"]), "--author-timestamp", value))
        elif purpose == PROMPT_PARALLELIZE_REVSET:
            self.queue_jj_command(self._jj("parallelize", value))
        elif purpose == PROMPT_BOOKMARK_RENAME:
            old_name = str(params["old_name"])
            if value == old_name:
                self.cancelled()
                return
            self.queue_jj_command(self._jj("bookmark", "rename", old_name, value))
        elif purpose == PROMPT_GIT_PUSH_NAMED:
            self.queue_jj_command(self._jj("git", "push", "--named", f"{value}={params['change_id']}"))
        elif purpose == PROMPT_WORKSPACE_ADD:
            self.queue_jj_command(self._jj("workspace", "add", value))
        elif purpose == PROMPT_WORKSPACE_RENAME:
            self.queue_jj_command(self._jj("workspace", "rename", value))
        else:
            raise ValueError(f"unknown prompt: {purpose}")

    # Opening files

    def _workspace_root(self) -> str:
        if self.workspace_root is None:
            self.workspace_root = self._query("workspace", "root").strip()
        return self.workspace_root

    def enter_pressed(self) -> None:
        """Edit a commit, or open the selected file/hunk/line in ``$EDITOR``."""
        if not self.log_list_tree_positions:
            return
        position = self.get_selected_tree_position()
        if len(position) == COMMIT_IDX + 1:
            self.jj_edit(ignore_immutable=False)
            return

        node = self.jj_log.get_tree_node(position)
        commit = self.jj_log.get_tree_commit(position)
        file_path = self.get_selected_file_path()
        if commit is None or file_path is None:
            raise InvalidSelection()
        if isinstance(node, DiffLineNode):
            line = node.line_number
        elif isinstance(node, HunkNode):
            line = node.new_start
        else:
            line = None

        if commit.current_working_copy:
            error = launch_editor(Path(self._workspace_root()) / file_path, line, self.terminal)
        else:
            error = self._edit_file_snapshot(commit.change_id, file_path, line)
        if error is not None:
            self.show_message(error)

    def _edit_file_snapshot(self, change_id: str, file_path: str, line: int | None) -> str | None:
        """Open a read-only copy of ``file_path`` as of ``change_id``."""
        try:
            content = self._query("file", "show", "-r", change_id, file_path)
        except JjCommandFailed as exc:
            return exc.stderr.strip() or f"Cannot show {file_path}"
        suffix = Path(file_path).suffix
        with tempfile.NamedTemporaryFile("w", suffix=suffix, prefix=f"{change_id}-", delete=False, encoding="utf-8") as handle:
            handle.write(content)
            temp_path = Path(handle.name)
        try:
            return launch_editor(temp_path, line, self.terminal)
        finally:
            try:
                temp_path.unlink()
            except OSError:
                logger.debug("could not remove %s", temp_path)
