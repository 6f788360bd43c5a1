"""Gravity timers.

The engine holds at most one live timer. ``start`` always cancels the running
period before arming the new one, so a level change or a soft drop takes
effect on the very next tick. The pygame-backed timer lives in
``blockfall.visualization.gravity`` next to the front end that drives it.
"""

from __future__ import annotations

from typing import Optional


class GravityTimer:
    def start(self, interval_ms: float) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError

    @property
    def running(self) -> bool:
        raise NotImplementedError


class ManualTimer(GravityTimer):
    """Records the armed interval but never fires; callers tick the engine themselves."""

    def __init__(self) -> None:
        self.interval_ms: Optional[float] = None
        self.starts = 0
        self.stops = 0

    def start(self, interval_ms: float) -> None:
        self.stop()
        self.interval_ms = float(interval_ms)
        self.starts += 1

    def stop(self) -> None:
        if self.interval_ms is not None:
            self.stops += 1
        self.interval_ms = None

    @property
    def running(self) -> bool:
        return self.interval_ms is not None
