from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Callable, Dict, Optional

from blockfall.session import codec
from blockfall.session.store import BlobStore, MemoryStore

from .grid import Board
from .pieces import Piece, PieceFactory
from .rules import ScoringRules
from .timer import GravityTimer, ManualTimer

logger = logging.getLogger(__name__)


class RunState(str, Enum):
    GAME_OVER = "gameOver"
    PAUSED = "paused"
    PLAYING = "playing"


class Command(IntEnum):
    NEW_GAME = 0
    CONTINUE_GAME = 1
    PAUSE = 2
    RESUME = 3
    MOVE_LEFT = 4
    MOVE_RIGHT = 5
    HOLD = 6
    ROTATE = 7
    DROP = 8


@dataclass
class GameConfig:
    rows: int = 20
    columns: int = 10
    random_seed: Optional[int] = None


class GameEngine:
    """Authoritative game state and the command surface that mutates it.

    Commands and gravity ticks must be delivered one at a time from a single
    event loop; nothing here is reentrant. Every command is safe to send in
    any state: where it does not apply it is ignored.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        store: Optional[BlobStore] = None,
        timer: Optional[GravityTimer] = None,
        factory: Optional[PieceFactory] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.store = store if store is not None else MemoryStore()
        self.timer = timer if timer is not None else ManualTimer()
        self.factory = factory or PieceFactory(self.config.random_seed)

        self.board = Board.create(self.config.rows, self.config.columns)
        self.current: Piece = self.factory.generate()
        self.next: Piece = self.factory.generate()
        self.held: Optional[Piece] = None
        self.can_hold = True
        self.score = 0
        self.level = 1
        self.state = RunState.GAME_OVER
        self.high_score = codec.decode_high_score(self._read(codec.HIGH_SCORE_KEY))

        self._handlers: Dict[Command, Callable[[], object]] = {
            Command.NEW_GAME: self.new_game,
            Command.CONTINUE_GAME: self.continue_game,
            Command.PAUSE: self.pause,
            Command.RESUME: self.resume,
            Command.MOVE_LEFT: self.move_left,
            Command.MOVE_RIGHT: self.move_right,
            Command.HOLD: self.hold,
            Command.ROTATE: self.rotate,
            Command.DROP: self.drop,
        }

    # ---------- Command surface ----------
    def handle(self, command: Command) -> None:
        self._handlers[Command(command)]()

    def new_game(self) -> None:
        self._reset()
        self.state = RunState.PLAYING
        logger.info("New game (high score %d)", self.high_score)
        self._arm_timer()

    def continue_game(self) -> bool:
        """Restore the saved session. Returns False when there is nothing usable to load."""
        text = self._read(codec.SESSION_KEY)
        if text is None:
            return False
        try:
            record = codec.loads_session(text, self.config.rows, self.config.columns, self.rules)
        except codec.SessionDecodeError as exc:
            logger.warning("Ignoring saved session: %s", exc)
            return False
        self._restore(record)
        if not self.current.fits_within(self.board):
            logger.info("Saved session has no room for the current piece")
            self._game_over()
            return True
        self.state = RunState.PLAYING
        logger.info("Continued game at score %d, level %d", self.score, self.level)
        self._arm_timer()
        return True

    def pause(self) -> None:
        if self.state is not RunState.PLAYING:
            return
        self.state = RunState.PAUSED
        self.timer.stop()
        self.save_session()
        logger.info("Paused")

    def resume(self) -> None:
        if self.state is not RunState.PAUSED:
            return
        self.state = RunState.PLAYING
        logger.info("Resumed")
        self._arm_timer()

    def move_left(self) -> bool:
        return self._shift(-1)

    def move_right(self) -> bool:
        return self._shift(1)

    def rotate(self) -> bool:
        if self.state is not RunState.PLAYING:
            return False
        return self.current.rotate(self.board)

    def hold(self) -> bool:
        if self.state is not RunState.PLAYING or not self.can_hold:
            return False
        if self.held is None:
            self.held = self.current
            self._advance()
        else:
            incoming = self.held
            position = self.current.position
            # The swapped-in piece must fit where the outgoing one was
            if not incoming.fits_within(self.board, position):
                logger.debug("Hold swap blocked at (%d, %d)", position.row, position.column)
                return False
            incoming.position = position
            self.held, self.current = self.current, incoming
        self.can_hold = False
        return True

    def drop(self) -> int:
        return self.step(soft=True)

    def tick(self) -> int:
        return self.step(soft=False)

    # ---------- Gravity ----------
    def step(self, soft: bool = False) -> int:
        """Move the current piece down one row, locking it when it cannot move.

        Returns the number of rows cleared by this step.
        """
        if self.state is not RunState.PLAYING:
            return 0
        target = self.current.position.shifted(1, 0)
        lines = 0
        if self.current.fits_within(self.board, target):
            self.current.position = target
        else:
            lines = self._lock_current()
        if self.state is RunState.PLAYING:
            self._arm_timer(soft)
        return lines

    # ---------- Persistence ----------
    def snapshot(self) -> codec.SessionRecord:
        return codec.SessionRecord(
            board=self.board,
            score=self.score,
            level=self.level,
            current=self.current,
            next=self.next,
            held=self.held,
            can_hold=self.can_hold,
        )

    def save_session(self) -> None:
        self._write(codec.SESSION_KEY, codec.dumps_session(self.snapshot()))

    def has_saved_session(self) -> bool:
        return self._read(codec.SESSION_KEY) is not None

    # ---------- Internals ----------
    def _reset(self) -> None:
        self.board = Board.create(self.config.rows, self.config.columns)
        self.score = 0
        self.level = 1
        self.current = self.factory.generate()
        self.next = self.factory.generate()
        self.held = None
        self.can_hold = True

    def _restore(self, record: codec.SessionRecord) -> None:
        self.board = record.board
        self.score = record.score
        self.level = record.level
        self.current = record.current
        self.next = record.next
        self.held = record.held
        self.can_hold = record.can_hold
        if self.score > self.high_score:
            self._set_high_score(self.score)

    def _shift(self, d_column: int) -> bool:
        if self.state is not RunState.PLAYING:
            return False
        target = self.current.position.shifted(0, d_column)
        if not self.current.fits_within(self.board, target):
            return False
        self.current.position = target
        return True

    def _lock_current(self) -> int:
        self.board.lock(self.current)
        lines = self.board.clear_full_rows()
        logger.debug("Locked %s piece at (%d, %d), cleared %d",
                     self.current.color, self.current.position.row, self.current.position.column, lines)
        self._add_score(lines)
        self._advance()
        self.save_session()
        return lines

    def _add_score(self, lines: int) -> None:
        self.score += self.rules.score_for_lines(lines)
        self.level = self.rules.level_for_score(self.score)
        if self.score > self.high_score:
            self._set_high_score(self.score)

    def _set_high_score(self, score: int) -> None:
        self.high_score = score
        logger.info("New high score %d", score)
        self._write(codec.HIGH_SCORE_KEY, codec.dumps_high_score(score))

    def _advance(self) -> None:
        self.current = self.next
        self.next = self.factory.generate()
        self.can_hold = True
        if not self.current.fits_within(self.board):
            self._game_over()

    def _game_over(self) -> None:
        self.state = RunState.GAME_OVER
        self.timer.stop()
        logger.info("Game over with score %d", self.score)

    def _arm_timer(self, soft: bool = False) -> None:
        self.timer.start(self.rules.drop_interval_ms(self.level, soft))

    def _read(self, key: str) -> Optional[str]:
        try:
            return self.store.get(key)
        except OSError as exc:
            logger.warning("Could not read %s: %s", key, exc)
            return None

    def _write(self, key: str, value: str) -> None:
        try:
            self.store.set(key, value)
        except OSError as exc:
            logger.warning("Could not write %s: %s", key, exc)
