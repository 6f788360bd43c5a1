from __future__ import annotations

from typing import Optional

import pygame

from blockfall.game import GameEngine, Piece, RunState
from blockfall.game.pieces import PALETTE

from .raster import BACKGROUND, compose, rgb_for

PANEL_CELLS = 6
TEXT_COLOR = (220, 220, 230)
DIM_TEXT_COLOR = (150, 150, 170)


class Renderer:
    def __init__(self, cell_size: int = 30, margin: int = 20) -> None:
        self.cell_size = cell_size
        self.margin = margin
        self._font: Optional[pygame.font.Font] = None
        self._big_font: Optional[pygame.font.Font] = None

    def window_size(self, rows: int, columns: int) -> tuple[int, int]:
        width = self.margin * 3 + (columns + PANEL_CELLS) * self.cell_size
        height = self.margin * 2 + rows * self.cell_size
        return width, height

    def _fonts(self) -> tuple[pygame.font.Font, pygame.font.Font]:
        if self._font is None or self._big_font is None:
            self._font = pygame.font.SysFont(None, 24)
            self._big_font = pygame.font.SysFont(None, 40)
        return self._font, self._big_font

    def _grid_surface(self, engine: GameEngine) -> pygame.Surface:
        piece = engine.current if engine.state is not RunState.GAME_OVER else None
        codes = compose(engine.board, piece)
        h, w = codes.shape
        surf = pygame.Surface((w * self.cell_size, h * self.cell_size))
        surf.fill((30, 30, 36))
        for y in range(h):
            for x in range(w):
                color = rgb_for(PALETTE[int(codes[y, x])])
                rect = pygame.Rect(
                    x * self.cell_size,
                    y * self.cell_size,
                    self.cell_size - 1,
                    self.cell_size - 1,
                )
                pygame.draw.rect(surf, color, rect)
        return surf

    def _draw_preview(self, screen: pygame.Surface, piece: Optional[Piece], x0: int, y0: int) -> None:
        cell = max(8, self.cell_size * 3 // 4)
        frame = pygame.Rect(x0, y0, cell * 4 + 8, cell * 4 + 8)
        pygame.draw.rect(screen, (30, 30, 36), frame)
        pygame.draw.rect(screen, (70, 70, 90), frame, 1)
        if piece is None:
            return
        for row, column in piece.cells_at_origin():
            rect = pygame.Rect(x0 + 4 + column * cell, y0 + 4 + row * cell, cell - 1, cell - 1)
            pygame.draw.rect(screen, rgb_for(piece.color), rect)

    def _draw_panel(self, screen: pygame.Surface, engine: GameEngine) -> None:
        font, _ = self._fonts()
        x0 = self.margin * 2 + engine.board.columns * self.cell_size
        y = self.margin
        for label in (f"Score: {engine.score}", f"Level: {engine.level}", f"High: {engine.high_score}"):
            screen.blit(font.render(label, True, TEXT_COLOR), (x0, y))
            y += 26
        y += 10
        screen.blit(font.render("Next", True, TEXT_COLOR), (x0, y))
        self._draw_preview(screen, engine.next, x0, y + 22)
        y += 22 + self.cell_size * 3 + 20
        hold_label = "Hold" if engine.can_hold else "Hold (used)"
        screen.blit(font.render(hold_label, True, TEXT_COLOR), (x0, y))
        self._draw_preview(screen, engine.held, x0, y + 22)
        y += 22 + self.cell_size * 3 + 30
        for line in ("N new  C continue", "P pause/resume", "Arrows move/rotate", "Down drop  Space hold"):
            screen.blit(font.render(line, True, DIM_TEXT_COLOR), (x0, y))
            y += 22

    def _draw_banner(self, screen: pygame.Surface, engine: GameEngine) -> None:
        if engine.state is RunState.PLAYING:
            return
        _, big_font = self._fonts()
        text = "PAUSED" if engine.state is RunState.PAUSED else "GAME OVER"
        surf = big_font.render(text, True, (255, 255, 255))
        board_w = engine.board.columns * self.cell_size
        board_h = engine.board.rows * self.cell_size
        rect = surf.get_rect(center=(self.margin + board_w // 2, self.margin + board_h // 2))
        screen.blit(surf, rect)

    def draw(self, screen: pygame.Surface, engine: GameEngine) -> None:
        screen.fill(BACKGROUND)
        screen.blit(self._grid_surface(engine), (self.margin, self.margin))
        self._draw_panel(screen, engine)
        self._draw_banner(screen, engine)
        pygame.display.flip()
