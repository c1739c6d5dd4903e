"""Popup and text-input sub-states.

Both are small mutable dataclasses; the model owns at most one popup and one
text-input location at a time and routes every key to them while active.
"""

from __future__ import annotations

from dataclasses import dataclass, field

# Text input locations
REVSET = "revset"
BOOKMARK = "bookmark"
DESCRIPTION = "description"
PROMPT = "prompt"


@dataclass
class TextInput:
    """Editable single-line buffer with a character cursor.

    ``location`` decides where the buffer is drawn and what Enter does;
    ``params`` carries the context needed on submit (change id, old name).
    """

    location: str
    buffer: str = ""
    cursor: int | None = None
    title: str = ""
    placeholder: str = ""
    params: dict[str, object] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # Prefilled buffers start with the cursor at the end.
        if self.cursor is None:
            self.cursor = len(self.buffer)
        self.cursor = max(0, min(self.cursor, len(self.buffer)))

    def insert(self, text: str) -> None:
        self.buffer = self.buffer[: self.cursor] + text + self.buffer[self.cursor :]
        self.cursor += len(text)

    def backspace(self) -> None:
        if self.cursor == 0:
            return
        self.buffer = self.buffer[: self.cursor - 1] + self.buffer[self.cursor :]
        self.cursor -= 1

    def delete(self) -> None:
        if self.cursor >= len(self.buffer):
            return
        self.buffer = self.buffer[: self.cursor] + self.buffer[self.cursor + 1 :]

    def move_left(self) -> None:
        self.cursor = max(0, self.cursor - 1)

    def move_right(self) -> None:
        self.cursor = min(len(self.buffer), self.cursor + 1)

    def move_home(self) -> None:
        self.cursor = 0

    def move_end(self) -> None:
        self.cursor = len(self.buffer)

    def clear(self) -> None:
        self.buffer = ""
        self.cursor = 0


@dataclass
class Popup:
    """Filterable list picker.

    ``kind`` names what selecting an item does; ``params`` carries extra
    context (the remote for a branch list, push mode, ...).
    """

    kind: str
    title: str
    items: list[str]
    filter: str = ""
    selection: int = 0
    params: dict[str, object] = field(default_factory=dict)

    def filtered_items(self) -> list[str]:
        needle = self.filter.lower()
        if not needle:
            return list(self.items)
        return [item for item in self.items if needle in item.lower()]

    def _clamp(self) -> None:
        count = len(self.filtered_items())
        self.selection = max(0, min(self.selection, count - 1)) if count else 0

    def set_filter(self, text: str) -> None:
        self.filter = text
        self.selection = 0
        self._clamp()

    def type_char(self, ch: str) -> None:
        self.set_filter(self.filter + ch)

    def backspace(self) -> None:
        self.set_filter(self.filter[:-1])

    def select_next(self) -> None:
        self.selection += 1
        self._clamp()

    def select_prev(self) -> None:
        self.selection = max(0, self.selection - 1)

    def selected_item(self) -> str | None:
        items = self.filtered_items()
        if not items:
            return None
        return items[min(self.selection, len(items) - 1)]
