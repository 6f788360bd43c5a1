from __future__ import annotations

from typing import Dict, Optional, Tuple

import numpy as np

from blockfall.game.grid import Board
from blockfall.game.pieces import PALETTE, Piece, color_code

RGB = Tuple[int, int, int]

BACKGROUND: RGB = (20, 20, 26)

COLOR_RGB: Dict[str, RGB] = {
    "cyan": (0, 240, 240),
    "blue": (0, 0, 240),
    "orange": (240, 160, 0),
    "yellow": (240, 240, 0),
    "green": (0, 240, 0),
    "purple": (160, 0, 240),
    "red": (240, 0, 0),
}

# Row i holds the RGB for palette code i
_CODE_RGB = np.array([BACKGROUND] + [COLOR_RGB[name] for name in PALETTE[1:]], dtype=np.uint8)


def rgb_for(color: Optional[str]) -> RGB:
    if color is None:
        return BACKGROUND
    return COLOR_RGB.get(color, (200, 200, 200))


def compose(board: Board, piece: Optional[Piece] = None) -> np.ndarray:
    """Board codes with the falling piece painted on top (cells off the board dropped)."""
    codes = board.codes()
    if piece is not None:
        code = color_code(piece.color)
        for row, column in piece.cells():
            if board.is_inside(row, column):
                codes[row, column] = code
    return codes


def rasterize(board: Board, piece: Optional[Piece] = None, cell_size: int = 12) -> np.ndarray:
    """Pixel image of shape (rows * cell_size, columns * cell_size, 3), uint8."""
    codes = compose(board, piece).astype(np.intp)
    img = _CODE_RGB[codes]
    return np.repeat(np.repeat(img, cell_size, axis=0), cell_size, axis=1)
