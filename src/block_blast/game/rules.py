from __future__ import annotations

from dataclasses import dataclass


@dataclass
class ScoringRules:
    placement_points: int = 1
    line_clear_points: int = 10

    def calculate_score(self, cells_placed: int, lines_cleared: int) -> int:
        """Points for one placement before the combo multiplier.

        The line bonus grows with the square of lines cleared at once:
        one line is +10, two lines +40, three lines +90.
        """
        score = cells_placed * self.placement_points
        if lines_cleared > 0:
            score += lines_cleared * self.line_clear_points * lines_cleared
        return score

    @staticmethod
    def combo_multiplier(streak: int) -> int:
        return max(1, streak)

    def turn_score(self, cells_placed: int, lines_cleared: int, streak: int) -> int:
        return self.calculate_score(cells_placed, lines_cleared) * self.combo_multiplier(streak)
