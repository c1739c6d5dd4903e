"""Resolved command descriptors produced by key dispatch.

An ``Action`` names a model operation plus its keyword parameters. The
dispatch table in ``jjdag.runtime.update`` maps each name to a handler.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Action:
    name: str
    params: tuple[tuple[str, object], ...] = ()

    @property
    def kwargs(self) -> dict[str, object]:
        return dict(self.params)

    def __str__(self) -> str:
        if not self.params:
            return self.name
        args = ", ".join(f"{key}={value!r}" for key, value in self.params)
        return f"{self.name}({args})"


def action(name: str, **params: object) -> Action:
    """Build an ``Action`` with parameters in a stable order."""
    return Action(name, tuple(sorted(params.items())))


SAVE_SELECTION = action("save_selection")
