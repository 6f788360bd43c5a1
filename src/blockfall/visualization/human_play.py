from __future__ import annotations

import argparse
import logging
from typing import Dict, Optional, Sequence

import pygame

from blockfall.game import Command, GameConfig, GameEngine, RunState
from blockfall.session import JsonFileStore
from .gravity import GRAVITY_EVENT, PygameGravityTimer
from .renderer import Renderer

logger = logging.getLogger(__name__)


KEY_TO_COMMAND: Dict[int, Command] = {
    pygame.K_LEFT: Command.MOVE_LEFT,
    pygame.K_RIGHT: Command.MOVE_RIGHT,
    pygame.K_UP: Command.ROTATE,
    pygame.K_DOWN: Command.DROP,
    pygame.K_SPACE: Command.HOLD,
    pygame.K_n: Command.NEW_GAME,
    pygame.K_c: Command.CONTINUE_GAME,
}


def toggle_pause(engine: GameEngine) -> None:
    if engine.state is RunState.PLAYING:
        engine.pause()
    elif engine.state is RunState.PAUSED:
        engine.resume()


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Play blockfall")
    p.add_argument("--save-dir", type=str, default="~/.blockfall",
                   help="Directory holding the saved session and high score")
    p.add_argument("--cell-size", type=int, default=28)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--log-level", type=str, default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def run(save_dir: str = "~/.blockfall", cell_size: int = 28, seed: Optional[int] = None) -> None:
    pygame.init()
    try:
        clock = pygame.time.Clock()
        engine = GameEngine(
            config=GameConfig(random_seed=seed),
            store=JsonFileStore(save_dir),
            timer=PygameGravityTimer(GRAVITY_EVENT),
        )
        renderer = Renderer(cell_size=cell_size)
        screen = pygame.display.set_mode(renderer.window_size(engine.config.rows, engine.config.columns))
        pygame.display.set_caption("blockfall")

        engine.new_game()

        running = True
        while running:
            # Commands and gravity share this queue, so they never interleave
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == GRAVITY_EVENT:
                    engine.tick()
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_p:
                        toggle_pause(engine)
                    else:
                        command = KEY_TO_COMMAND.get(event.key)
                        if command is not None:
                            engine.handle(command)

            renderer.draw(screen, engine)
            clock.tick(60)

        if engine.state is RunState.PLAYING:
            engine.pause()
    finally:
        pygame.quit()


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    logger.info("Saving sessions under %s", args.save_dir)
    run(save_dir=args.save_dir, cell_size=args.cell_size, seed=args.seed)


if __name__ == "__main__":  # pragma: no cover
    main()
