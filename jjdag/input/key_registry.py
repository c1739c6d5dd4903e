"""Single-key bindings that apply outside command sequences.

Each binding carries its help label so the root help listing is generated
from the same table that dispatches keys.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..actions import Action, action


@dataclass(frozen=True)
class KeyComboBinding:
    """Mapping from one or more key tokens to a single action."""

    combos: tuple[str, ...]
    action: Action
    group: str
    label: str
    help: str


class KeyComboRegistry:
    """Key-token to action table with grouped help entries."""

    def __init__(self) -> None:
        self._actions: dict[str, Action] = {}
        self._bindings: list[KeyComboBinding] = []

    def register_binding(self, binding: KeyComboBinding) -> KeyComboRegistry:
        """Register one binding, overwriting existing actions for same combos."""
        for combo in binding.combos:
            self._actions[combo] = binding.action
        self._bindings.append(binding)
        return self

    def register_bindings(self, *bindings: KeyComboBinding) -> KeyComboRegistry:
        for binding in bindings:
            self.register_binding(binding)
        return self

    def lookup(self, key: str) -> Action | None:
        return self._actions.get(key)

    def help_groups(self) -> dict[str, list[tuple[str, str]]]:
        groups: dict[str, list[tuple[str, str]]] = {}
        for binding in self._bindings:
            groups.setdefault(binding.group, []).append((binding.label, binding.help))
        return groups


NAVIGATION = "Navigation"
GENERAL = "General"

GLOBAL_BINDINGS: tuple[KeyComboBinding, ...] = (
    KeyComboBinding(("TAB",), action("toggle_fold"), NAVIGATION, "Tab", "Toggle folding"),
    KeyComboBinding(("PGDN",), action("scroll_down_page"), NAVIGATION, "PgDn", "Move down page"),
    KeyComboBinding(("PGUP",), action("scroll_up_page"), NAVIGATION, "PgUp", "Move up page"),
    KeyComboBinding(("j", "DOWN"), action("select_next_node"), NAVIGATION, "j/↓", "Move down"),
    KeyComboBinding(("k", "UP"), action("select_prev_node"), NAVIGATION, "k/↑", "Move up"),
    KeyComboBinding(("l", "RIGHT"), action("select_next_sibling_node"), NAVIGATION, "l/→", "Next sibling"),
    KeyComboBinding(("h", "LEFT"), action("select_prev_sibling_node"), NAVIGATION, "h/←", "Prev sibling"),
    KeyComboBinding(("K",), action("select_parent_node"), NAVIGATION, "K", "Select parent"),
    KeyComboBinding(("@",), action("select_current_working_copy"), NAVIGATION, "@", "Select @ change"),
    KeyComboBinding((" ", "CTRL_R"), action("refresh"), GENERAL, "Spc/Ctrl-r", "Refresh log tree"),
    KeyComboBinding(("ESC",), action("clear"), GENERAL, "Esc", "Clear app state"),
    KeyComboBinding(("L",), action("set_revset"), GENERAL, "L", "Set log revset"),
    KeyComboBinding(("I",), action("toggle_ignore_immutable"), GENERAL, "I", "Toggle --ignore-immutable"),
    KeyComboBinding(("?",), action("show_help"), GENERAL, "?", "Show help"),
    KeyComboBinding(("q", "CTRL_C"), action("quit"), GENERAL, "q", "Quit"),
)


def build_global_registry() -> KeyComboRegistry:
    return KeyComboRegistry().register_bindings(*GLOBAL_BINDINGS)
