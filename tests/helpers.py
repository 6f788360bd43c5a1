from __future__ import annotations

from typing import Optional, Sequence

from blockfall.game import (
    GameConfig, GameEngine, GravityTimer, ManualTimer, Piece, PieceFactory, RunState, TetrominoType,
)
from blockfall.session import BlobStore, MemoryStore


class ScriptedFactory(PieceFactory):
    """Hands out pieces in a fixed, repeating order."""

    def __init__(self, kinds: Sequence[TetrominoType]) -> None:
        super().__init__(0)
        self.kinds = list(kinds)
        self.generated = 0

    def generate(self) -> Piece:
        kind = self.kinds[self.generated % len(self.kinds)]
        self.generated += 1
        return Piece.of_type(kind)


def make_engine(kinds: Sequence[TetrominoType] = (TetrominoType.O,),
                store: Optional[BlobStore] = None,
                rows: int = 20, columns: int = 10,
                timer: Optional[GravityTimer] = None) -> GameEngine:
    factory = ScriptedFactory(kinds)
    engine = GameEngine(
        config=GameConfig(rows=rows, columns=columns),
        store=store if store is not None else MemoryStore(),
        timer=timer if timer is not None else ManualTimer(),
        factory=factory,
    )
    # new_game draws kinds[0] as current and kinds[1] as next
    factory.generated = 0
    return engine


def drop_until_locked(engine: GameEngine, soft: bool = True, limit: int = 100) -> int:
    """Step the current piece down until it locks; returns the rows cleared by the lock."""
    piece = engine.current
    for _ in range(limit):
        lines = engine.drop() if soft else engine.tick()
        if engine.current is not piece or engine.state is not RunState.PLAYING:
            return lines
    raise AssertionError("piece never locked")
