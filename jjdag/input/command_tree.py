"""Keystroke-sequence dispatch trie and the command table it is built from.

Each table entry is ``(help group, help text, key sequence, node)``. Every key
but the last must already resolve to a node with children; the last key is
inserted under it and its help registered under ``help group``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from ..actions import SAVE_SELECTION, Action, action
from ..render.help import display_key, render_help_columns, sorted_help_groups

HelpGroups = dict[str, list[tuple[str, str]]]


@dataclass
class CommandTreeNodeChildren:
    nodes: dict[str, CommandTreeNode] = field(default_factory=dict)
    help: HelpGroups = field(default_factory=dict)

    def get_node(self, key: str) -> CommandTreeNode | None:
        return self.nodes.get(key)

    def add_child(self, help_group: str, help_text: str, key: str, node: CommandTreeNode) -> None:
        self.nodes[key] = node
        self.help.setdefault(help_group, []).append((display_key(key), help_text))

    def get_help_entries(self) -> HelpGroups:
        return sorted_help_groups(self.help)

    def get_help(self) -> list[str]:
        return render_help_columns(self.get_help_entries())


@dataclass
class CommandTreeNode:
    """A trie node: an action, further children, or both (a chained action)."""

    action: Action | None = None
    children: CommandTreeNodeChildren | None = None

    def __post_init__(self) -> None:
        if self.action is None and self.children is None:
            raise ValueError("command tree node needs an action or children")

    @classmethod
    def new_children(cls) -> CommandTreeNode:
        return cls(children=CommandTreeNodeChildren())

    @classmethod
    def new_action(cls, node_action: Action) -> CommandTreeNode:
        return cls(action=node_action)

    @classmethod
    def new_action_with_children(cls, node_action: Action) -> CommandTreeNode:
        return cls(action=node_action, children=CommandTreeNodeChildren())


TableEntry = tuple[str, str, tuple[str, ...], CommandTreeNode]


class CommandTree:
    def __init__(self, entries: Iterable[TableEntry] | None = None) -> None:
        self.root = CommandTreeNode.new_children()
        self.add_children(build_command_table() if entries is None else entries)

    def add_children(self, entries: Iterable[TableEntry]) -> None:
        for help_group, help_text, keys, node in entries:
            *rest, last_key = keys
            parent = self.get_node(rest)
            assert parent is not None and parent.children is not None, (
                f"command table entry {keys!r} has no parent menu"
            )
            parent.children.add_child(help_group, help_text, last_key, node)

    def get_node(self, keys: Iterable[str]) -> CommandTreeNode | None:
        node = self.root
        for key in keys:
            if node.children is None:
                return None
            child = node.children.get_node(key)
            if child is None:
                return None
            node = child
        return node

    def iter_actions(self) -> Iterable[tuple[tuple[str, ...], Action]]:
        """Yield every registered ``(key sequence, action)`` pair."""
        stack: list[tuple[tuple[str, ...], CommandTreeNode]] = [((), self.root)]
        while stack:
            keys, node = stack.pop()
            if node.action is not None:
                yield keys, node.action
            if node.children is not None:
                for key, child in node.children.nodes.items():
                    stack.append(((*keys, key), child))

    def get_root_help(self, extra_groups: HelpGroups) -> list[str]:
        """Root help: command groups followed by the global key groups."""
        assert self.root.children is not None
        groups = self.root.children.get_help_entries()
        groups.update(extra_groups)
        return render_help_columns(groups)


def _menu() -> CommandTreeNode:
    return CommandTreeNode.new_children()


def _act(name: str, **params: object) -> CommandTreeNode:
    return CommandTreeNode.new_action(action(name, **params))


def _save() -> CommandTreeNode:
    return CommandTreeNode.new_action_with_children(SAVE_SELECTION)


def _two_phase(
    group: str,
    help_text: str,
    keys: tuple[str, ...],
    dest_group: str,
    final: CommandTreeNode,
) -> list[TableEntry]:
    """Entries for "save selection, then pick a destination with Enter"."""
    return [
        (group, help_text, keys, _save()),
        (dest_group, "Select destination", (*keys, "ENTER"), final),
    ]


def _rebase_entries() -> list[TableEntry]:
    entries: list[TableEntry] = [
        ("Commands", "Rebase", ("r",), _menu()),
        ("Rebase", "Selected branch onto trunk", ("r", "m"), _act("rebase_selected_branch_onto_trunk", sync=False)),
        ("Rebase", "Selected branch onto trunk (sync)", ("r", "M"), _act("rebase_selected_branch_onto_trunk", sync=True)),
    ]
    sources = (("b", "branch", "Selected branch"), ("s", "source", "Selected source"), ("r", "revisions", "Selected revision"))
    dest_types = (("a", "insert-after", "Insert after", "after"), ("b", "insert-before", "Insert before", "before"), ("o", "onto", "Onto", "onto"))
    destinations = (("ENTER", "selection", "Select destination"), ("m", "trunk", "Trunk"), ("c", "current", "@"))
    for source_key, source_type, source_help in sources:
        noun = "revision" if source_type == "revisions" else source_type
        entries.append(("Rebase", source_help, ("r", source_key), _save()))
        for dest_key, dest_type, dest_help, dest_word in dest_types:
            entries.append((f"Rebase {noun}", dest_help, ("r", source_key, dest_key), _menu()))
            for final_key, destination, final_help in destinations:
                entries.append(
                    (
                        f"Rebase {noun} {dest_word}",
                        final_help,
                        ("r", source_key, dest_key, final_key),
                        _act("rebase", source_type=source_type, destination_type=dest_type, destination=destination),
                    )
                )
    return entries


def _next_prev_entries(direction: str, root_key: str, group: str, noun: str) -> list[TableEntry]:
    lower = noun.lower()
    key = root_key.lower()
    return [
        ("Commands", group, (root_key,), _menu()),
        (group, noun, (root_key, key), _act("next_prev", direction=direction, mode="default", offset=False)),
        (group, f"Nth {lower}", (root_key, root_key), _act("next_prev", direction=direction, mode="default", offset=True)),
        (group, f"{noun} (edit)", (root_key, "e"), _act("next_prev", direction=direction, mode="edit", offset=False)),
        (group, f"Nth {lower} (edit)", (root_key, "E"), _act("next_prev", direction=direction, mode="edit", offset=True)),
        (group, f"{noun} (no-edit)", (root_key, "x"), _act("next_prev", direction=direction, mode="no-edit", offset=False)),
        (group, f"Nth {lower} (no-edit)", (root_key, "X"), _act("next_prev", direction=direction, mode="no-edit", offset=True)),
        (group, f"{noun} conflict", (root_key, "c"), _act("next_prev", direction=direction, mode="conflict", offset=False)),
    ]


def build_command_table() -> list[TableEntry]:
    """Return the full command table in registration order."""
    entries: list[TableEntry] = [
        ("Commands", "Abandon", ("a",), _menu()),
        ("Abandon", "Selection", ("a", "a"), _act("abandon", mode="default")),
        ("Abandon", "Selection (retain bookmarks)", ("a", "b"), _act("abandon", mode="retain-bookmarks")),
        ("Abandon", "Selection (restore descendants)", ("a", "d"), _act("abandon", mode="restore-descendants")),
        ("Commands", "Absorb", ("A",), _menu()),
        ("Absorb", "From selection", ("A", "a"), _act("absorb", mode="default")),
        *_two_phase("Absorb", "From selection into destination", ("A", "i"), "Absorb into", _act("absorb", mode="into")),
        ("Commands", "Bookmark", ("b",), _menu()),
        ("Bookmark", "Create at selection (inline edit)", ("b", "c"), _act("bookmark_create_start")),
        ("Bookmark", "New revision and tug bookmark", ("b", "n"), _act("new_on_branch")),
        ("Bookmark", "Move", ("b", "m"), _menu()),
        *_two_phase(
            "Bookmark move",
            "Selected bookmark to destination",
            ("b", "m", "m"),
            "Move bookmark to",
            _act("bookmark_move", mode="default"),
        ),
        *_two_phase(
            "Bookmark move",
            "Selected bookmark to destination (allow backwards)",
            ("b", "m", "M"),
            "Move bookmark to, allowing backwards",
            _act("bookmark_move", mode="allow-backwards"),
        ),
        ("Bookmark move", "Tug to selection", ("b", "m", "t"), _act("bookmark_move", mode="tug")),
        ("Bookmark", "Tug ancestor to current", ("b", "T"), _act("tug")),
        ("Bookmark", "Rename", ("b", "r"), _act("bookmark_rename")),
        ("Bookmark", "Track", ("b", "t"), _act("bookmark_track")),
        ("Bookmark", "Untrack", ("b", "u"), _act("bookmark_untrack")),
        ("Bookmark", "Delete", ("b", "d"), _act("bookmark_delete")),
        ("Bookmark", "Forget", ("b", "f"), _act("bookmark_forget", include_remotes=False)),
        ("Bookmark", "Forget, including remotes", ("b", "F"), _act("bookmark_forget", include_remotes=True)),
        ("Bookmark", "Set to selection", ("b", "s"), _act("bookmark_set")),
        ("Commands", "Commit", ("c",), _menu()),
        ("Commit", "Selection", ("c", "c"), _act("commit")),
        ("Commands", "Describe", ("d",), _menu()),
        ("Describe", "Selection", ("d", "d"), _act("describe_start", ignore_immutable=False)),
        ("Describe", "Selection ignoring immutability", ("d", "i"), _act("describe_start", ignore_immutable=True)),
        ("Commands", "Duplicate", ("D",), _menu()),
        ("Duplicate", "Selection", ("D", "d"), _act("duplicate", destination_type="default")),
        *_two_phase("Duplicate", "Selection onto destination", ("D", "o"), "Duplicate onto", _act("duplicate", destination_type="onto")),
        *_two_phase(
            "Duplicate",
            "Selection insert after destination",
            ("D", "a"),
            "Duplicate insert after",
            _act("duplicate", destination_type="insert-after"),
        ),
        *_two_phase(
            "Duplicate",
            "Selection insert before destination",
            ("D", "b"),
            "Duplicate insert before",
            _act("duplicate", destination_type="insert-before"),
        ),
        ("Commands", "Edit", ("e",), _menu()),
        ("Edit", "Selection", ("e", "e"), _act("edit", ignore_immutable=False)),
        ("Edit", "Selection ignoring immutability", ("e", "i"), _act("edit", ignore_immutable=True)),
        ("Commands", "Evolog", ("E",), _menu()),
        ("Evolog", "Selection", ("E", "e"), _act("evolog", patch=False)),
        ("Evolog", "Selection (patch)", ("E", "E"), _act("evolog", patch=True)),
        ("Commands", "File", ("f",), _menu()),
        ("File", "Track (enter filepath)", ("f", "t"), _act("file_track")),
        ("File", "Untrack selection (must be ignored)", ("f", "u"), _act("file_untrack")),
        ("Commands", "Git", ("g",), _menu()),
        ("Git", "Fetch", ("g", "f"), _menu()),
        ("Git fetch", "Default", ("g", "f", "f"), _act("git_fetch", mode="default")),
        ("Git fetch", "All remotes", ("g", "f", "a"), _act("git_fetch", mode="all-remotes")),
        ("Git fetch", "Tracked bookmarks", ("g", "f", "t"), _act("git_fetch", mode="tracked")),
        ("Git fetch", "Branch by name", ("g", "f", "b"), _act("git_fetch", mode="branch")),
        ("Git fetch", "Remote by name", ("g", "f", "r"), _act("git_fetch", mode="remote")),
        ("Git", "Push", ("g", "p"), _menu()),
        ("Git push", "Default", ("g", "p", "p"), _act("git_push", mode="default")),
        ("Git push", "All bookmarks", ("g", "p", "a"), _act("git_push", mode="all")),
        ("Git push", "Bookmarks at selection", ("g", "p", "r"), _act("git_push", mode="revision")),
        ("Git push", "Tracked bookmarks", ("g", "p", "t"), _act("git_push", mode="tracked")),
        ("Git push", "Deleted bookmarks", ("g", "p", "d"), _act("git_push", mode="deleted")),
        ("Git push", "New bookmark for selection", ("g", "p", "c"), _act("git_push", mode="change")),
        ("Git push", "New named bookmark for selection", ("g", "p", "n"), _act("git_push", mode="named")),
        ("Git push", "Bookmark by name", ("g", "p", "b"), _act("git_push", mode="bookmark")),
        ("Git push", "Tug and push bookmark", ("g", "p", "T"), _act("tug_and_git_push")),
        ("Commands", "Interdiff", ("i",), _menu()),
        ("Interdiff", "From @ to selection", ("i", "t"), _act("interdiff", mode="to-selection")),
        ("Interdiff", "From selection to @", ("i", "f"), _act("interdiff", mode="from-selection")),
        *_two_phase("Interdiff", "From selection to destination", ("i", "i"), "Interdiff to destination", _act("interdiff", mode="range")),
        ("Commands", "Metaedit", ("m",), _menu()),
        ("Metaedit", "Update change-id", ("m", "c"), _act("metaedit", mode="update-change-id")),
        ("Metaedit", "Update author timestamp to now", ("m", "t"), _act("metaedit", mode="update-author-timestamp")),
        ("Metaedit", "Update author to configured user", ("m", "a"), _act("metaedit", mode="update-author")),
        ("Metaedit", "Set author", ("m", "A"), _act("metaedit", mode="set-author")),
        ("Metaedit", "Set author timestamp", ("m", "T"), _act("metaedit", mode="set-author-timestamp")),
        ("Metaedit", "Force rewrite", ("m", "r"), _act("metaedit", mode="force-rewrite")),
        ("Commands", "New", ("n",), _menu()),
        ("New", "After selection", ("n", "n"), _act("new", mode="default")),
        ("New", "After selection (rebase children)", ("n", "a"), _act("new", mode="insert-after")),
        ("New", "Before selection (rebase children)", ("n", "b"), _act("new", mode="insert-before")),
        ("New", "After trunk", ("n", "m"), _act("new", mode="after-trunk")),
        ("New", "After trunk (sync)", ("n", "M"), _act("new_after_trunk_sync")),
        *_next_prev_entries("next", "N", "Next", "Next"),
        ("Commands", "Parallelize", ("p",), _menu()),
        ("Parallelize", "Selection with parent", ("p", "p"), _act("parallelize", source="selection")),
        *_two_phase("Parallelize", "From selection to destination", ("p", "P"), "Parallelize range", _act("parallelize", source="range")),
        ("Parallelize", "Revset", ("p", "r"), _act("parallelize", source="revset")),
        *_next_prev_entries("prev", "P", "Previous", "Previous"),
        ("Commands", "Squash", ("s",), _menu()),
        ("Squash", "Selection into parent", ("s", "s"), _act("squash", mode="default")),
        *_two_phase("Squash", "Selection into destination", ("s", "i"), "Squash into", _act("squash", mode="into")),
        ("Commands", "Status", ("t",), _act("status")),
        ("Commands", "Split", ("/",), _act("split")),
        ("Commands", "Resolve", ("x",), _act("resolve")),
        ("Commands", "Sign", ("S",), _menu()),
        ("Sign", "Selection", ("S", "s"), _act("sign", sign_action="sign", range=False)),
        *_two_phase("Sign", "From selection to destination", ("S", "S"), "Sign range", _act("sign", sign_action="sign", range=True)),
        ("Sign", "Unsign selection", ("S", "u"), _act("sign", sign_action="unsign", range=False)),
        *_two_phase(
            "Sign",
            "Unsign from selection to destination",
            ("S", "U"),
            "Unsign range",
            _act("sign", sign_action="unsign", range=True),
        ),
        ("Commands", "Simplify parents", ("y",), _menu()),
        ("Simplify parents of", "Selection", ("y", "y"), _act("simplify_parents", mode="revisions")),
        ("Simplify parents of", "Selection with descendants", ("y", "Y"), _act("simplify_parents", mode="source")),
        *_rebase_entries(),
        ("Commands", "Restore", ("R",), _menu()),
        ("Restore", "Changes in selection", ("R", "r"), _act("restore", mode="changes-in")),
        ("Restore", "Changes in selection (restore descendants)", ("R", "d"), _act("restore", mode="changes-in-restore-descendants")),
        ("Restore", "From selection into @", ("R", "f"), _act("restore", mode="from-selection")),
        ("Restore", "From @ into selection", ("R", "i"), _act("restore", mode="into-selection")),
        *_two_phase("Restore", "From selection into destination", ("R", "R"), "Restore into", _act("restore", mode="range")),
        ("Commands", "View", ("v",), _menu()),
        ("View", "Selection", ("v", "v"), _act("view", mode="default")),
        ("View", "From selection to @", ("v", "f"), _act("view", mode="from-selection")),
        ("View", "From trunk to selection", ("v", "m"), _act("view", mode="from-trunk")),
        ("View", "From @ to selection", ("v", "t"), _act("view", mode="to-selection")),
        *_two_phase("View", "From selection to destination", ("v", "V"), "View to destination", _act("view", mode="range")),
        ("Commands", "Revert", ("V",), _menu()),
        (
            "Revert",
            "Selection onto @",
            ("V", "v"),
            _act("revert", revision="selection", destination_type="onto", destination="current"),
        ),
        *_two_phase(
            "Revert",
            "Selection onto destination",
            ("V", "o"),
            "Revert onto",
            _act("revert", revision="saved", destination_type="onto", destination="selection"),
        ),
        *_two_phase(
            "Revert",
            "Selection after destination",
            ("V", "a"),
            "Revert after",
            _act("revert", revision="saved", destination_type="insert-after", destination="selection"),
        ),
        *_two_phase(
            "Revert",
            "Selection before destination",
            ("V", "b"),
            "Revert before",
            _act("revert", revision="saved", destination_type="insert-before", destination="selection"),
        ),
        ("Commands", "Undo", ("u",), _menu()),
        ("Undo", "Undo last operation", ("u", "u"), _act("undo")),
        ("Undo", "Redo last operation", ("u", "r"), _act("redo")),
        ("Commands", "Workspace", ("w",), _menu()),
        ("Workspace", "List", ("w", "w"), _act("workspace_list")),
        ("Workspace", "Show root", ("w", "r"), _act("workspace_root")),
        ("Workspace", "Add (enter path)", ("w", "a"), _act("workspace_add_start")),
        ("Workspace", "Forget", ("w", "f"), _act("workspace_forget")),
        ("Workspace", "Rename current", ("w", "n"), _act("workspace_rename_start")),
        ("Workspace", "Update stale", ("w", "u"), _act("workspace_update_stale")),
    ]
    return entries
