"""
brainf Errors

Every fault a run can end in. All are fatal: a run either completes or stops
with exactly one EngineError, carrying the source byte offset at which it
was detected. Exit codes follow the original command-line interpreter.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    SOURCE_UNAVAILABLE = 5
    UNMATCHED_OPEN = 2
    UNMATCHED_CLOSE = 3
    IO_FAULT = 4

    @property
    def exit_code(self) -> int:
        return self.value


MESSAGES = {
    ErrorKind.SOURCE_UNAVAILABLE: "Source file doesn't exist.",
    ErrorKind.UNMATCHED_OPEN: "Unmatched start loop encountered.",
    ErrorKind.UNMATCHED_CLOSE: "Unmatched end loop encountered.",
}


class EngineError(Exception):
    """A terminal run error at a source byte offset."""
    def __init__(self, kind: ErrorKind, offset: int, message: str = ""):
        self.kind = kind
        self.offset = offset
        self.message = message or MESSAGES.get(kind, kind.name)
        super().__init__(f"{kind.name} at byte {offset}: {self.message}")
