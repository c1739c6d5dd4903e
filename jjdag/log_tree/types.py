"""Node types and position constants for the foldable log tree.

Nodes are plain dataclasses sharing ``kind``, ``lines``, ``children`` and
``flat_log_idx`` so flatten and navigation need only one traversal.
"""

from __future__ import annotations

from dataclasses import dataclass, field

TreePosition = tuple[int, ...]

COMMIT_IDX = 0
FILE_DIFF_IDX = 1
DIFF_HUNK_IDX = 2
DIFF_HUNK_LINE_IDX = 3

CHILD_INDENT = "    "


@dataclass
class LogTreeNode:
    """Shared shape of every node in the log tree."""

    kind = "node"

    lines: list[str] = field(default_factory=list)
    children: list[LogTreeNode] = field(default_factory=list)
    folded: bool = True
    flat_log_idx: int = 0

    @property
    def line_number(self) -> int | None:
        return None

    @property
    def line_count(self) -> int:
        return max(1, len(self.lines))


@dataclass
class CommitNode(LogTreeNode):
    """One revision as rendered by ``jj log``; children are loaded lazily."""

    kind = "commit"

    change_id: str = ""
    current_working_copy: bool = False
    description_first_line: str | None = None
    diff_loaded: bool = False


@dataclass
class FileDiffNode(LogTreeNode):
    kind = "file_diff"

    path: str = ""


@dataclass
class HunkNode(LogTreeNode):
    kind = "hunk"

    new_start: int = 1
    folded: bool = False


@dataclass
class DiffLineNode(LogTreeNode):
    kind = "line"

    number: int | None = None

    @property
    def line_number(self) -> int | None:
        return self.number


def parent_position(position: TreePosition) -> TreePosition:
    """Return ``position`` with its last component dropped (root stays root)."""
    if len(position) <= 1:
        return position
    return position[:-1]


def indent_for_depth(depth: int) -> str:
    return CHILD_INDENT * depth
