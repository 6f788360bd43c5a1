from __future__ import annotations

from typing import Optional

import pygame

from blockfall.game import GravityTimer


GRAVITY_EVENT = pygame.USEREVENT + 1


class PygameGravityTimer(GravityTimer):
    """Posts ``GRAVITY_EVENT`` onto the pygame event queue every interval.

    ``pygame.time.set_timer`` replaces any timer already armed for the same
    event type, so restarting never leaves two periods live.
    """

    def __init__(self, event_type: int = GRAVITY_EVENT) -> None:
        self.event_type = event_type
        self.interval_ms: Optional[int] = None

    def start(self, interval_ms: float) -> None:
        self.stop()
        self.interval_ms = max(1, int(round(interval_ms)))
        pygame.time.set_timer(self.event_type, self.interval_ms)

    def stop(self) -> None:
        pygame.time.set_timer(self.event_type, 0)
        self.interval_ms = None

    @property
    def running(self) -> bool:
        return self.interval_ms is not None
