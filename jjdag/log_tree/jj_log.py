"""The ``JjLog`` aggregate: commit tree, fold state and flattening."""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..errors import EngineInvocationError, InvalidTreePosition, JjCommandFailed
from ..jj_command import GlobalArgs, run_jj
from .parse import LOG_TEMPLATE, parse_diff, parse_log
from .types import (
    DIFF_HUNK_IDX,
    DIFF_HUNK_LINE_IDX,
    FILE_DIFF_IDX,
    CommitNode,
    FileDiffNode,
    LogTreeNode,
    TreePosition,
    indent_for_depth,
)

logger = logging.getLogger(__name__)

JjRunner = Callable[[GlobalArgs, list[str]], str]


class JjLog:
    """Owns the parsed commit tree and assigns flat display indices.

    ``run`` is the engine invocation used for ``jj log`` and ``jj diff``; tests
    substitute a fake that returns canned output.
    """

    def __init__(self, run: JjRunner = run_jj) -> None:
        self._run = run
        self.log_tree: list[CommitNode] = []

    def load_log_tree(self, global_args: GlobalArgs, revset: str) -> None:
        """Replace the tree with the commits matched by ``revset``.

        The previous tree is kept when the engine fails or the output cannot
        be parsed.
        """
        args = ["log", "--color", "always", "--template", LOG_TEMPLATE]
        if revset:
            args += ["--revisions", revset]
        try:
            output = self._run(global_args, args)
        except JjCommandFailed as exc:
            raise EngineInvocationError(exc.stderr.strip() or str(exc)) from exc
        commits = parse_log(output)
        if not commits:
            raise EngineInvocationError(f"No revisions match revset '{revset}'")
        logger.debug("loaded %d commits for revset %r", len(commits), revset)
        self.log_tree = commits

    def flatten_log(self) -> tuple[list[list[str]], list[TreePosition]]:
        """Return display blocks and positions for every visible node."""
        blocks: list[list[str]] = []
        positions: list[TreePosition] = []
        self._flatten_nodes(self.log_tree, (), blocks, positions)
        return blocks, positions

    def _flatten_nodes(
        self,
        nodes: list[LogTreeNode],
        prefix: TreePosition,
        blocks: list[list[str]],
        positions: list[TreePosition],
    ) -> None:
        indent = indent_for_depth(len(prefix))
        for idx, node in enumerate(nodes):
            position = (*prefix, idx)
            node.flat_log_idx = len(blocks)
            blocks.append([indent + line for line in node.lines] or [indent])
            positions.append(position)
            if not node.folded and node.children:
                self._flatten_nodes(node.children, position, blocks, positions)

    def toggle_fold(self, global_args: GlobalArgs, position: TreePosition) -> int:
        """Flip the fold flag of the node at ``position``.

        A diff line toggles its enclosing hunk. Returns the flat index the
        toggled node holds after re-flattening.
        """
        if len(position) > DIFF_HUNK_LINE_IDX:
            position = position[: DIFF_HUNK_IDX + 1]
        node = self.get_tree_node(position)
        if isinstance(node, CommitNode) and node.folded and not node.diff_loaded:
            self._load_commit_diff(global_args, node)
        node.folded = not node.folded
        self.flatten_log()
        return node.flat_log_idx

    def _load_commit_diff(self, global_args: GlobalArgs, commit: CommitNode) -> None:
        args = ["diff", "--color", "always", "--git", "--revisions", commit.change_id]
        try:
            output = self._run(global_args, args)
        except JjCommandFailed as exc:
            raise EngineInvocationError(exc.stderr.strip() or str(exc)) from exc
        commit.children = parse_diff(output)
        commit.diff_loaded = True
        logger.debug("loaded %d file diffs for %s", len(commit.children), commit.change_id)

    def get_tree_node(self, position: TreePosition) -> LogTreeNode:
        if not position:
            raise InvalidTreePosition("empty tree position")
        nodes: list[LogTreeNode] = list(self.log_tree)
        node: LogTreeNode | None = None
        for idx in position:
            if idx < 0 or idx >= len(nodes):
                raise InvalidTreePosition(f"no node at tree position {position}")
            node = nodes[idx]
            nodes = node.children
        assert node is not None
        return node

    def get_tree_commit(self, position: TreePosition) -> CommitNode | None:
        if not position or position[0] >= len(self.log_tree):
            return None
        return self.log_tree[position[0]]

    def get_tree_file_diff(self, position: TreePosition) -> FileDiffNode | None:
        if len(position) <= FILE_DIFF_IDX:
            return None
        try:
            node = self.get_tree_node(position[: FILE_DIFF_IDX + 1])
        except InvalidTreePosition:
            return None
        return node if isinstance(node, FileDiffNode) else None

    def get_current_commit(self) -> CommitNode | None:
        for commit in self.log_tree:
            if commit.current_working_copy:
                return commit
        return None
