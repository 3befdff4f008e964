"""
brainf Tape

An unbounded, bidirectionally-extensible row of integer cells with a cursor.

Cells are materialized lazily: the first visit to an offset creates a cell
holding 0. Storage is two Python lists, one for offsets >= 0 and one for
offsets < 0 (offset -1 is index 0 of the left list), so growth in either
direction is an amortized O(1) append.

Usage:
    tape = Tape(cell_bits=8)
    tape.increment()
    tape.move_left()
    tape.decrement()
    tape.value       # 255
    tape.position    # -1
"""

from __future__ import annotations


class Tape:
    """Growable cell tape addressed by a signed cursor."""

    def __init__(self, cell_bits: int = 8) -> None:
        self._mask = (1 << cell_bits) - 1
        self._right: list[int] = [0]
        self._left: list[int] = []
        self._cursor = 0

    # ------------------------------------------------------------------
    # Cursor movement
    # ------------------------------------------------------------------

    def move_right(self) -> None:
        self._cursor += 1
        if self._cursor >= len(self._right):
            self._right.append(0)

    def move_left(self) -> None:
        self._cursor -= 1
        if -self._cursor > len(self._left):
            self._left.append(0)

    # ------------------------------------------------------------------
    # Cell access
    # ------------------------------------------------------------------

    @property
    def value(self) -> int:
        """Raw value of the cell under the cursor, in [0, 2**bits)."""
        if self._cursor >= 0:
            return self._right[self._cursor]
        return self._left[-self._cursor - 1]

    @value.setter
    def value(self, new: int) -> None:
        new &= self._mask
        if self._cursor >= 0:
            self._right[self._cursor] = new
        else:
            self._left[-self._cursor - 1] = new

    def increment(self) -> None:
        self.value = self.value + 1

    def decrement(self) -> None:
        self.value = self.value - 1

    def read(self) -> int:
        """The cursor cell as a single output byte."""
        return self.value & 0xFF

    def write(self, byte: int) -> None:
        """Store an input byte (or the end-of-input sentinel) at the cursor."""
        self.value = byte

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def position(self) -> int:
        return self._cursor

    @property
    def span(self) -> tuple[int, int]:
        """Lowest and highest materialized offsets."""
        return -len(self._left), len(self._right) - 1

    def cell(self, offset: int) -> int:
        """Value at an arbitrary offset; unvisited offsets read as 0."""
        if offset >= 0:
            return self._right[offset] if offset < len(self._right) else 0
        index = -offset - 1
        return self._left[index] if index < len(self._left) else 0

    def window(self, radius: int = 8) -> list[tuple[int, int]]:
        """(offset, value) pairs around the cursor, clipped to visited cells."""
        low, high = self.span
        start = max(low, self._cursor - radius)
        end = min(high, self._cursor + radius)
        return [(i, self.cell(i)) for i in range(start, end + 1)]

    def __len__(self) -> int:
        return len(self._left) + len(self._right)

    def __repr__(self) -> str:
        low, high = self.span
        return f"<Tape: {len(self)} cells [{low}..{high}] cursor={self._cursor} value={self.value}>"
