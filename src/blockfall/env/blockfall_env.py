from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, Optional, Tuple

import numpy as np
import gymnasium as gym
from gymnasium import spaces

from blockfall.game import Command, GameConfig, GameEngine, ManualTimer, PieceFactory, RunState, ScoringRules
from blockfall.game.pieces import PALETTE, color_code
from blockfall.session import MemoryStore
from blockfall.visualization.raster import rasterize


class AgentAction(IntEnum):
    NONE = 0
    MOVE_LEFT = 1
    MOVE_RIGHT = 2
    ROTATE = 3
    DROP = 4
    HOLD = 5


ACTION_TO_COMMAND = {
    AgentAction.MOVE_LEFT: Command.MOVE_LEFT,
    AgentAction.MOVE_RIGHT: Command.MOVE_RIGHT,
    AgentAction.ROTATE: Command.ROTATE,
    AgentAction.DROP: Command.DROP,
    AgentAction.HOLD: Command.HOLD,
}


class BlockFallEnv(gym.Env):
    """The engine's command surface as a discrete-action environment.

    Each step applies one command and then one gravity tick, standing in for
    the timer. The reward is the score gained during the step.
    """

    metadata = {"render_modes": ["rgb_array"], "render_fps": 30}

    def __init__(self, config: Optional[GameConfig] = None, rules: Optional[ScoringRules] = None,
                 render_mode: Optional[str] = None, cell_size: int = 12) -> None:
        super().__init__()
        self.config = config or GameConfig()
        self.render_mode = render_mode
        self.cell_size = int(cell_size)
        self.game = GameEngine(
            config=self.config,
            rules=rules,
            store=MemoryStore(),
            timer=ManualTimer(),
            factory=PieceFactory(self.config.random_seed),
        )

        rows, columns = self.config.rows, self.config.columns
        n_colors = len(PALETTE) - 1
        # Locked cells are positive codes, the falling piece is overlaid as negative codes
        self.observation_space = spaces.Dict(
            {
                "board": spaces.Box(low=-n_colors, high=n_colors, shape=(rows, columns), dtype=np.int8),
                "next": spaces.Discrete(n_colors + 1),
                "held": spaces.Discrete(n_colors + 1),
                "can_hold": spaces.Discrete(2),
            }
        )
        self.action_space = spaces.Discrete(len(AgentAction))
        self._steps = 0

    def _get_obs(self) -> Dict[str, Any]:
        board = self.game.board.codes()
        if self.game.state is not RunState.GAME_OVER:
            code = -color_code(self.game.current.color)
            for row, column in self.game.current.cells():
                if self.game.board.is_inside(row, column):
                    board[row, column] = code
        held = self.game.held
        return {
            "board": board,
            "next": color_code(self.game.next.color),
            "held": color_code(held.color) if held is not None else 0,
            "can_hold": int(self.game.can_hold),
        }

    def _get_info(self) -> Dict[str, Any]:
        return {
            "score": self.game.score,
            "level": self.game.level,
            "high_score": self.game.high_score,
            "steps": self._steps,
        }

    def reset(self, *, seed: Optional[int] = None,
              options: Optional[dict] = None) -> Tuple[Dict[str, Any], Dict[str, Any]]:
        super().reset(seed=seed)
        if seed is not None:
            self.game.factory.seed(seed)
        self.game.new_game()
        self._steps = 0
        return self._get_obs(), self._get_info()

    def step(self, action: int):
        action = AgentAction(int(action))
        score_before = self.game.score

        command = ACTION_TO_COMMAND.get(action)
        if command is not None:
            self.game.handle(command)
        if self.game.state is RunState.PLAYING:
            self.game.tick()
        self._steps += 1

        reward = float(self.game.score - score_before)
        terminated = self.game.state is RunState.GAME_OVER
        truncated = False
        return self._get_obs(), reward, terminated, truncated, self._get_info()

    def render(self) -> Optional[np.ndarray]:
        if self.render_mode == "rgb_array":
            piece = self.game.current if self.game.state is not RunState.GAME_OVER else None
            return rasterize(self.game.board, piece, self.cell_size)
        return None

    def close(self) -> None:
        pass
