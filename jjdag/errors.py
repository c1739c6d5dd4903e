"""Exception taxonomy shared by the log tree, command queue and key dispatch.

Recoverable errors are turned into inline status text at the action dispatch
boundary. Everything else unwinds out of the event loop.
"""

from __future__ import annotations


class JjdagError(Exception):
    """Base class for all jjdag errors."""


class EngineInvocationError(JjdagError):
    """Loading or parsing the log tree failed."""


class InvalidTreePosition(JjdagError, LookupError):
    """A tree position does not resolve to a node."""


class InvalidSelection(JjdagError):
    """The cursor or saved selection does not resolve to what a command needs."""

    def __init__(self, message: str = "Invalid selection") -> None:
        super().__init__(message)


class Cancelled(JjdagError):
    """The user backed out of a popup, prompt, or two-phase command."""

    def __init__(self, message: str = "Cancelled") -> None:
        super().__init__(message)


class JjCommandError(JjdagError):
    """Base class for engine invocation failures."""


class JjCommandFailed(JjCommandError):
    """The engine ran and exited non-zero."""

    def __init__(self, stderr: str, returncode: int = 1) -> None:
        self.stderr = stderr
        self.returncode = returncode
        super().__init__(stderr.strip() or f"jj exited with status {returncode}")


class JjCommandUnavailable(JjCommandError):
    """The engine process could not be started at all."""
