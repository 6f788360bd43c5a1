"""Persisted session record.

The record is a JSON object::

    {
      "gameBoard": [[{"isFilled": bool, "color": str | null}, ...], ...],
      "score": int, "level": int,
      "currentTetromino": {"shape": [[int]], "color": str,
                           "position": {"row": int, "column": int},
                           "rotations": int},
      "nextTetromino": {...}, "heldTetromino": {...} | null,
      "canHoldTetromino": bool
    }

Decoding checks every field explicitly and raises ``SessionDecodeError``
instead of trusting the stored shape.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import numpy as np

from blockfall.game.grid import Board, Cell, EMPTY_CELL
from blockfall.game.pieces import PALETTE, Piece, Position
from blockfall.game.rules import ScoringRules

logger = logging.getLogger(__name__)

SESSION_KEY = "savedGameSession"
HIGH_SCORE_KEY = "highScore"


class SessionDecodeError(ValueError):
    pass


@dataclass
class SessionRecord:
    board: Board
    score: int
    level: int
    current: Piece
    next: Piece
    held: Optional[Piece]
    can_hold: bool


# ---------- Encoding ----------
def encode_piece(piece: Optional[Piece]) -> Optional[Dict[str, Any]]:
    if piece is None:
        return None
    return {
        "shape": piece.shape.tolist(),
        "color": piece.color,
        "position": {"row": piece.position.row, "column": piece.position.column},
        "rotations": piece.rotation_count,
    }


def encode_board(board: Board) -> List[List[Dict[str, Any]]]:
    return [[{"isFilled": cell.filled, "color": cell.color} for cell in row] for row in board.cells()]


def encode_session(record: SessionRecord) -> Dict[str, Any]:
    return {
        "gameBoard": encode_board(record.board),
        "score": record.score,
        "level": record.level,
        "currentTetromino": encode_piece(record.current),
        "nextTetromino": encode_piece(record.next),
        "heldTetromino": encode_piece(record.held),
        "canHoldTetromino": record.can_hold,
    }


def dumps_session(record: SessionRecord) -> str:
    return json.dumps(encode_session(record))


# ---------- Decoding ----------
def _require_int(value: Any, name: str) -> int:
    # bool is an int subclass but never a valid count or coordinate here
    if isinstance(value, bool) or not isinstance(value, int):
        raise SessionDecodeError(f"{name} must be an integer, got {value!r}")
    return value


def _require_mapping(value: Any, name: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise SessionDecodeError(f"{name} must be an object, got {type(value).__name__}")
    return value


def _require_color(value: Any, name: str) -> str:
    if not isinstance(value, str) or value not in PALETTE:
        raise SessionDecodeError(f"{name} has unknown color {value!r}")
    return value


def decode_shape(value: Any, name: str) -> np.ndarray:
    if not isinstance(value, list) or not value:
        raise SessionDecodeError(f"{name}.shape must be a non-empty list of rows")
    width = None
    for r, row in enumerate(value):
        if not isinstance(row, list) or not row:
            raise SessionDecodeError(f"{name}.shape row {r} must be a non-empty list")
        if width is None:
            width = len(row)
        elif len(row) != width:
            raise SessionDecodeError(f"{name}.shape is not rectangular")
        for v in row:
            v = _require_int(v, f"{name}.shape cell")
            if not 0 <= v < len(PALETTE):
                raise SessionDecodeError(f"{name}.shape cell {v} out of range")
    shape = np.array(value, dtype=np.int8)
    if not shape.any():
        raise SessionDecodeError(f"{name}.shape has no filled cells")
    return shape


def decode_piece(value: Any, name: str) -> Piece:
    data = _require_mapping(value, name)
    shape = decode_shape(data.get("shape"), name)
    color = _require_color(data.get("color"), name)
    pos = _require_mapping(data.get("position"), f"{name}.position")
    position = Position(_require_int(pos.get("row"), f"{name}.position.row"),
                        _require_int(pos.get("column"), f"{name}.position.column"))
    rotations = data.get("rotations", 0)
    rotations = _require_int(rotations, f"{name}.rotations") % 4 if rotations is not None else 0
    return Piece(shape=shape, color=color, position=position, rotation_count=rotations)


def decode_board(value: Any, rows: int, columns: int) -> Board:
    if not isinstance(value, list) or len(value) != rows:
        raise SessionDecodeError(f"gameBoard must have {rows} rows")
    cells: List[List[Cell]] = []
    for r, row in enumerate(value):
        if not isinstance(row, list) or len(row) != columns:
            raise SessionDecodeError(f"gameBoard row {r} must have {columns} cells")
        decoded: List[Cell] = []
        for c, raw in enumerate(row):
            cell = _require_mapping(raw, f"gameBoard[{r}][{c}]")
            filled = cell.get("isFilled")
            if not isinstance(filled, bool):
                raise SessionDecodeError(f"gameBoard[{r}][{c}].isFilled must be a boolean")
            if filled:
                decoded.append(Cell(True, _require_color(cell.get("color"), f"gameBoard[{r}][{c}]")))
            else:
                decoded.append(EMPTY_CELL)
        cells.append(decoded)
    return Board.from_cells(cells)


def decode_session(data: Any, rows: int, columns: int,
                   rules: Optional[ScoringRules] = None) -> SessionRecord:
    rules = rules or ScoringRules()
    data = _require_mapping(data, "session")
    board = decode_board(data.get("gameBoard"), rows, columns)
    score = _require_int(data.get("score"), "score")
    if score < 0:
        raise SessionDecodeError(f"score must be non-negative, got {score}")
    level = rules.level_for_score(score)
    stored_level = data.get("level")
    if stored_level != level:
        logger.warning("Stored level %r does not match score %d; using %d", stored_level, score, level)
    current = decode_piece(data.get("currentTetromino"), "currentTetromino")
    next_piece = decode_piece(data.get("nextTetromino"), "nextTetromino")
    held_raw = data.get("heldTetromino")
    held = decode_piece(held_raw, "heldTetromino") if held_raw is not None else None
    can_hold = data.get("canHoldTetromino", True)
    if not isinstance(can_hold, bool):
        raise SessionDecodeError("canHoldTetromino must be a boolean")
    return SessionRecord(board, score, level, current, next_piece, held, can_hold)


def loads_session(text: str, rows: int, columns: int,
                  rules: Optional[ScoringRules] = None) -> SessionRecord:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise SessionDecodeError(f"session blob is not valid JSON: {exc}") from exc
    return decode_session(data, rows, columns, rules)


def decode_high_score(text: Optional[str]) -> int:
    if text is None:
        return 0
    try:
        value = json.loads(text)
    except json.JSONDecodeError:
        logger.warning("Ignoring unreadable high score %r", text)
        return 0
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        logger.warning("Ignoring invalid high score %r", value)
        return 0
    return value


def dumps_high_score(score: int) -> str:
    return json.dumps(int(score))
