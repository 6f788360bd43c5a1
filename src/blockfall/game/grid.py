from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence

import numpy as np

from .pieces import PALETTE, color_code

if TYPE_CHECKING:
    from .pieces import Piece


@dataclass(frozen=True)
class Cell:
    filled: bool = False
    color: Optional[str] = None


EMPTY_CELL = Cell()


class Board:
    """Fixed-size play field of R rows by C columns.

    Cells are stored as palette codes in an int8 matrix: 0 for empty,
    1..7 for a filled cell of that palette color. Row 0 is the top.
    """

    def __init__(self, rows: int, columns: int) -> None:
        if rows <= 0 or columns <= 0:
            raise ValueError(f"board dimensions must be positive, got {rows}x{columns}")
        self.rows = int(rows)
        self.columns = int(columns)
        self.grid = np.zeros((self.rows, self.columns), dtype=np.int8)

    @classmethod
    def create(cls, rows: int, columns: int) -> "Board":
        return cls(rows, columns)

    @classmethod
    def from_cells(cls, cells: Sequence[Sequence[Cell]]) -> "Board":
        rows = len(cells)
        columns = len(cells[0]) if rows else 0
        board = cls(rows, columns)
        for r, row in enumerate(cells):
            if len(row) != columns:
                raise ValueError(f"row {r} has {len(row)} cells, expected {columns}")
            for c, cell in enumerate(row):
                if cell.filled:
                    board.grid[r, c] = color_code(cell.color)
        return board

    def reset(self) -> None:
        self.grid.fill(0)

    def is_inside(self, row: int, column: int) -> bool:
        return 0 <= row < self.rows and 0 <= column < self.columns

    def is_occupied(self, row: int, column: int) -> bool:
        return self.is_inside(row, column) and self.grid[row, column] != 0

    def cell_blocks(self, row: int, column: int) -> bool:
        """True when a piece cell may not go here: off the board or filled."""
        return not self.is_inside(row, column) or self.grid[row, column] != 0

    def cell(self, row: int, column: int) -> Cell:
        code = int(self.grid[row, column])
        if code == 0:
            return EMPTY_CELL
        return Cell(True, PALETTE[code])

    def cells(self) -> List[List[Cell]]:
        return [[self.cell(r, c) for c in range(self.columns)] for r in range(self.rows)]

    def codes(self) -> np.ndarray:
        return self.grid.copy()

    def lock(self, piece: "Piece") -> None:
        """Write the piece's filled cells into the board; cells off the board are dropped."""
        code = color_code(piece.color)
        for row, column in piece.cells():
            if self.is_inside(row, column):
                self.grid[row, column] = code

    def clear_full_rows(self) -> int:
        full_rows = np.where(np.all(self.grid != 0, axis=1))[0]
        if full_rows.size == 0:
            return 0
        num = int(full_rows.size)
        # Remove full rows and add empty rows at the top
        kept = np.delete(self.grid, full_rows, axis=0)
        new_rows = np.zeros((num, self.columns), dtype=np.int8)
        self.grid = np.vstack((new_rows, kept))
        return num

    def filled_count(self) -> int:
        return int(np.count_nonzero(self.grid))

    def __repr__(self) -> str:
        return f"Board(rows={self.rows}, columns={self.columns}, filled={self.filled_count()})"
