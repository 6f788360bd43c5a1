from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    line_clear_scores: tuple[int, int, int, int, int] = (0, 100, 300, 500, 800)
    points_per_level: int = 1000
    standard_drop_interval_ms: float = 700.0
    quick_drop_ratio: float = 0.1

    def score_for_lines(self, lines: int) -> int:
        if lines <= 0:
            return 0
        # Five or more rows at once score as a four-row clear
        return self.line_clear_scores[min(lines, len(self.line_clear_scores) - 1)]

    def level_for_score(self, score: int) -> int:
        return score // self.points_per_level + 1

    @property
    def quick_drop_interval_ms(self) -> float:
        return self.standard_drop_interval_ms * self.quick_drop_ratio

    def drop_interval_ms(self, level: int, soft: bool = False) -> float:
        if soft:
            return self.quick_drop_interval_ms
        return self.standard_drop_interval_ms / max(1, level)
