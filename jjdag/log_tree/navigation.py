"""Tree-position arithmetic for sibling, parent and line-distance moves.

All functions are pure over a ``JjLog`` (or a list of block heights) so the
model only has to translate the resulting position back to a flat index.
"""

from __future__ import annotations

from .jj_log import JjLog
from .types import DIFF_HUNK_LINE_IDX, TreePosition

DOWN = "down"
UP = "up"


def next_sibling_position(jj_log: JjLog, position: TreePosition) -> TreePosition:
    """Return the next sibling, ascending out of exhausted parents.

    Diff lines are not siblings of each other, so a line first ascends to its
    hunk. At commit level the result clamps to the last commit.
    """
    if len(position) > DIFF_HUNK_LINE_IDX:
        position = position[:-1]
    while len(position) > 1:
        parent = position[:-1]
        sibling_count = len(jj_log.get_tree_node(parent).children)
        idx = position[-1]
        if idx < sibling_count - 1:
            return (*parent, idx + 1)
        position = parent
    return (min(position[0] + 1, len(jj_log.log_tree) - 1),)


def prev_sibling_position(jj_log: JjLog, position: TreePosition) -> TreePosition:
    """Return the previous sibling; the first child steps up to its parent."""
    if len(position) > DIFF_HUNK_LINE_IDX:
        return position[:-1]
    if len(position) > 1:
        idx = position[-1]
        if idx == 0:
            return position[:-1]
        return (*position[:-1], idx - 1)
    return (max(position[0] - 1, 0),)


def line_dist_to_dest_node(line_counts: list[int], line_dist: int, start: int, direction: str) -> int:
    """Return the node ``line_dist`` rendered lines away from ``start``.

    Walks node by node summing heights and stops at the node whose span covers
    the target line, or at either end of the list.
    """
    if not line_counts:
        return 0
    last = len(line_counts) - 1
    current = max(0, min(start, last))
    lines_traversed = 0
    while True:
        lines_traversed += line_counts[current]
        at_end = current == last if direction == DOWN else current == 0
        if at_end or lines_traversed > line_dist:
            return current
        current += 1 if direction == DOWN else -1
