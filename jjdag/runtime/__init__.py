"""Public runtime entry points.

Groups the interaction model, key dispatch and the event loop.
"""

from __future__ import annotations


def run_main_loop(*args, **kwargs):
    """Lazily import loop runner to avoid package-import cycles."""
    from .loop import run_main_loop as _run_main_loop

    return _run_main_loop(*args, **kwargs)


__all__ = ["run_main_loop"]
