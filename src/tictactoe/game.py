"""Board state and win detection for 3x3 tic-tac-toe."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Tuple


class Field(Enum):
    X = "X"
    O = "O"
    FREE = " "


Move = Tuple[int, int]  # (x, y)

SIZE = 3

# Cell indices (3 * y + x) of every line that wins the game.
WINNING_LINES: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)


def _index(x: int, y: int) -> int:
    if not (0 <= x < SIZE and 0 <= y < SIZE):
        raise ValueError(f"Coordinates out of range: x={x} y={y}")
    return SIZE * y + x


@dataclass
class Board:
    cells: List[Field] = field(default_factory=lambda: [Field.FREE] * 9)

    def __post_init__(self) -> None:
        self.cells = list(self.cells)
        if len(self.cells) != SIZE * SIZE:
            raise ValueError(f"A board has exactly 9 cells, got {len(self.cells)}")

    def __str__(self) -> str:
        marks = ["_" if c is Field.FREE else c.value for c in self.cells]
        return "\n".join(" ".join(marks[row : row + SIZE]) for row in (0, 3, 6))

    # ---- queries ----

    def get(self, x: int, y: int) -> Field:
        return self.cells[_index(x, y)]

    def is_full(self) -> bool:
        return all(c is not Field.FREE for c in self.cells)

    def get_free(self) -> List[Move]:
        """Free coordinates, ``x`` outer and ``y`` inner, both ascending.

        Search enumerates moves in this order, so it decides which of several
        equally good moves the AI picks.
        """
        return [
            (x, y)
            for x in range(SIZE)
            for y in range(SIZE)
            if self.cells[SIZE * y + x] is Field.FREE
        ]

    def has_won(self) -> Field:
        """Return the player owning a full line, or ``Field.FREE``.

        X is checked first, so a board where both players own a line (not
        reachable by alternating play) reports X.
        """
        for player in (Field.X, Field.O):
            if self._owns_line(player):
                return player
        return Field.FREE

    # ---- mutation ----

    def make_move(self, x: int, y: int, player: Field) -> bool:
        """Place ``player`` at (x, y); return False if the cell is taken."""
        if player is Field.FREE:
            raise ValueError("Only X or O can move")
        idx = _index(x, y)
        if self.cells[idx] is not Field.FREE:
            return False
        self.cells[idx] = player
        return True

    @contextmanager
    def trial(self, x: int, y: int, player: Field) -> Iterator[None]:
        """Place ``player`` for the duration of the block, then free the cell."""
        if not self.make_move(x, y, player):
            raise ValueError(f"Cell already occupied: x={x} y={y}")
        try:
            yield
        finally:
            self.cells[SIZE * y + x] = Field.FREE

    # ---- helpers ----

    def _owns_line(self, player: Field) -> bool:
        cells = self.cells
        return any(
            cells[a] is player and cells[b] is player and cells[c] is player
            for a, b, c in WINNING_LINES
        )
