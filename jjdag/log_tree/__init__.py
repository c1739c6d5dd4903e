"""Foldable, position-addressed model of ``jj log`` output."""

from __future__ import annotations

from .jj_log import JjLog
from .navigation import DOWN, UP, line_dist_to_dest_node, next_sibling_position, prev_sibling_position
from .parse import LOG_TEMPLATE, parse_diff, parse_log
from .types import (
    COMMIT_IDX,
    DIFF_HUNK_IDX,
    DIFF_HUNK_LINE_IDX,
    FILE_DIFF_IDX,
    CommitNode,
    DiffLineNode,
    FileDiffNode,
    HunkNode,
    LogTreeNode,
    TreePosition,
    parent_position,
)

__all__ = [
    "COMMIT_IDX",
    "DIFF_HUNK_IDX",
    "DIFF_HUNK_LINE_IDX",
    "DOWN",
    "FILE_DIFF_IDX",
    "LOG_TEMPLATE",
    "UP",
    "CommitNode",
    "DiffLineNode",
    "FileDiffNode",
    "HunkNode",
    "JjLog",
    "LogTreeNode",
    "TreePosition",
    "line_dist_to_dest_node",
    "next_sibling_position",
    "parent_position",
    "parse_diff",
    "parse_log",
    "prev_sibling_position",
]
