"""Game module for blockfall.

Exports the core game engine and supporting classes:
- Board, Cell: Grid representation, locking and line clearing
- Piece, PieceFactory, TetrominoType: Pieces, rotation and random generation
- ScoringRules: Line-clear table, levels and drop intervals
- GameEngine: State machine and command surface
"""

from .grid import Board, Cell, EMPTY_CELL
from .pieces import PALETTE, Piece, PieceFactory, Position, TetrominoType
from .rules import ScoringRules
from .timer import GravityTimer, ManualTimer
from .core import Command, GameConfig, GameEngine, RunState

__all__ = [
    "Board",
    "Cell",
    "EMPTY_CELL",
    "PALETTE",
    "Piece",
    "PieceFactory",
    "Position",
    "TetrominoType",
    "ScoringRules",
    "GravityTimer",
    "ManualTimer",
    "Command",
    "GameConfig",
    "GameEngine",
    "RunState",
]
