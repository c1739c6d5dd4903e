"""Input-layer public API for key decoding and dispatch tables."""

from .command_tree import CommandTree, CommandTreeNode, CommandTreeNodeChildren, build_command_table
from .key_registry import KeyComboBinding, KeyComboRegistry, build_global_registry
from .reader import ESC_SEQUENCE_TIMEOUT_MS, UNKNOWN_KEY, read_key

__all__ = [
    "read_key",
    "ESC_SEQUENCE_TIMEOUT_MS",
    "UNKNOWN_KEY",
    "CommandTree",
    "CommandTreeNode",
    "CommandTreeNodeChildren",
    "build_command_table",
    "KeyComboBinding",
    "KeyComboRegistry",
    "build_global_registry",
]
