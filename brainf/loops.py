"""
brainf Loop Tracker

Loop boundaries are never precomputed. An entered loop is remembered only by
the source offset just past its opening bracket; the closing bracket seeks
back to that offset and the entry check runs again. A loop entered with a
zero cell is skipped by scanning the source forward for its matching close.

The frame stack answers two questions for the engine:
    - where does the innermost active loop start (for the backward jump)
    - is there any active loop at all (for unmatched-close detection)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

OPEN = ord("[")
CLOSE = ord("]")


@dataclass
class LoopFrame:
    """One entered loop: the source offset immediately after its '['."""
    start: int

    def __repr__(self) -> str:
        return f"<LoopFrame start={self.start}>"


class LoopTracker:
    """Stack of active loop frames, innermost on top."""

    def __init__(self) -> None:
        self._frames: list[LoopFrame] = []

    @property
    def top(self) -> Optional[LoopFrame]:
        return self._frames[-1] if self._frames else None

    @property
    def depth(self) -> int:
        return len(self._frames)

    def is_current(self, start: int) -> bool:
        """Whether the innermost frame belongs to the loop opening at `start`."""
        return bool(self._frames) and self._frames[-1].start == start

    def enter(self, start: int) -> bool:
        """Record entry into the loop opening at `start`.

        Returns True when a new frame was pushed, False when the loop was
        re-entered from its own backward jump and the top frame was reused.
        """
        if self.is_current(start):
            self._frames[-1].start = start
            return False
        self._frames.append(LoopFrame(start))
        return True

    def leave(self, start: int) -> bool:
        """Pop the innermost frame if it belongs to the loop at `start`."""
        if self.is_current(start):
            self._frames.pop()
            return True
        return False

    def __len__(self) -> int:
        return len(self._frames)

    def __bool__(self) -> bool:
        return bool(self._frames)

    def __repr__(self) -> str:
        starts = ", ".join(str(f.start) for f in self._frames)
        return f"<LoopTracker: [{starts}]>"


def scan_past_close(source) -> bool:
    """Advance `source` to just past the close matching an already-read '['.

    Nested pairs are counted; the frame stack plays no part. Returns False if
    the source ends before the matching close is found, leaving the source
    at its end.
    """
    nested = 0
    while True:
        char = source.read_one_byte()
        if char is None:
            return False
        if char == OPEN:
            nested += 1
        elif char == CLOSE:
            if nested == 0:
                return True
            nested -= 1
