from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import IntEnum
from typing import TYPE_CHECKING, Iterator, Optional, Tuple

import numpy as np

if TYPE_CHECKING:
    from .grid import Board


class TetrominoType(IntEnum):
    I = 1
    J = 2
    L = 3
    O = 4
    S = 5
    T = 6
    Z = 7


# Index 0 is the empty cell; the rest follow TetrominoType.
PALETTE: Tuple[Optional[str], ...] = (None, "cyan", "blue", "orange", "yellow", "green", "purple", "red")


def color_code(color: Optional[str]) -> int:
    if color is None or color not in PALETTE:
        raise ValueError(f"unknown piece color: {color!r}")
    return PALETTE.index(color)


Shape = np.ndarray


BASE_SHAPES = {
    TetrominoType.I: np.array([[1, 1, 1, 1], [0, 0, 0, 0], [0, 0, 0, 0], [0, 0, 0, 0]], dtype=np.int8),
    TetrominoType.J: np.array([[2, 0, 0], [2, 2, 2], [0, 0, 0]], dtype=np.int8),
    TetrominoType.L: np.array([[0, 0, 3], [3, 3, 3], [0, 0, 0]], dtype=np.int8),
    TetrominoType.O: np.array([[4, 4], [4, 4]], dtype=np.int8),
    TetrominoType.S: np.array([[0, 5, 5], [5, 5, 0], [0, 0, 0]], dtype=np.int8),
    TetrominoType.T: np.array([[0, 6, 0], [6, 6, 6], [0, 0, 0]], dtype=np.int8),
    TetrominoType.Z: np.array([[7, 7, 0], [0, 7, 7], [0, 0, 0]], dtype=np.int8),
}


def rotate_cw(shape: Shape) -> Shape:
    # transpose, then reverse each row
    return np.ascontiguousarray(shape.T[:, ::-1])


@dataclass(frozen=True)
class Position:
    row: int = 0
    column: int = 0

    def shifted(self, d_row: int = 0, d_column: int = 0) -> "Position":
        return Position(self.row + d_row, self.column + d_column)


SPAWN_POSITION = Position(0, 0)


@dataclass(eq=False)
class Piece:
    shape: Shape
    color: str
    position: Position = field(default_factory=Position)
    rotation_count: int = 0  # 0..3, cosmetic

    def __post_init__(self) -> None:
        color_code(self.color)

    @classmethod
    def of_type(cls, kind: TetrominoType, position: Optional[Position] = None) -> "Piece":
        kind = TetrominoType(kind)
        return cls(
            shape=BASE_SHAPES[kind].copy(),
            color=PALETTE[int(kind)],
            position=position or SPAWN_POSITION,
        )

    def cells_at(self, position: Position) -> Iterator[Tuple[int, int]]:
        rows, columns = np.nonzero(self.shape)
        for dr, dc in zip(rows.tolist(), columns.tolist()):
            yield position.row + dr, position.column + dc

    def cells(self) -> Iterator[Tuple[int, int]]:
        return self.cells_at(self.position)

    def cells_at_origin(self) -> Iterator[Tuple[int, int]]:
        return self.cells_at(SPAWN_POSITION)

    def fits_within(self, board: "Board", position: Optional[Position] = None) -> bool:
        target = self.position if position is None else position
        return not any(board.cell_blocks(r, c) for r, c in self.cells_at(target))

    def rotated_shape(self) -> Shape:
        return rotate_cw(self.shape)

    def rotate(self, board: "Board") -> bool:
        """Rotate clockwise in place if the result fits at the current position.

        There are no wall kicks: a blocked rotation leaves the piece untouched.
        """
        candidate = Piece(self.rotated_shape(), self.color, self.position, self.rotation_count)
        if not candidate.fits_within(board):
            return False
        self.shape = candidate.shape
        self.rotation_count = (self.rotation_count + 1) % 4
        return True

    def __repr__(self) -> str:
        return (
            f"Piece(color={self.color!r}, position=({self.position.row}, {self.position.column}), "
            f"rotation_count={self.rotation_count}, shape={self.shape.tolist()})"
        )


class PieceFactory:
    """Draws pieces uniformly at random; no bag or history is kept."""

    def __init__(self, random_seed: Optional[int] = None) -> None:
        self.rng = random.Random(random_seed)

    def seed(self, random_seed: Optional[int]) -> None:
        self.rng.seed(random_seed)

    def generate(self) -> Piece:
        kind = self.rng.choice(list(TetrominoType))
        return Piece.of_type(kind)
