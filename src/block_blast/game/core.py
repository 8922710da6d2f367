from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, List, Optional, Tuple

import numpy as np

from .grid import GRID_SIZE, ClearResult, Coordinate, GameGrid, count_filled_cells, is_terminal
from .pieces import PIECES_PER_SET, Piece, PieceCatalog
from .rules import ScoringRules
from .storage import BestScoreStore, MemoryBestScoreStore


@dataclass
class GameConfig:
    grid_size: int = GRID_SIZE
    pieces_per_set: int = PIECES_PER_SET
    clear_delay_ms: int = 350
    random_seed: Optional[int] = None
    max_episode_steps: int = 10000


@dataclass(frozen=True)
class PendingClear:
    """Lines found by a placement that still have to be removed."""

    slot: int
    rows: FrozenSet[int]
    cols: FrozenSet[int]

    @property
    def lines(self) -> int:
        return len(self.rows) + len(self.cols)


@dataclass(frozen=True)
class PlacementOutcome:
    accepted: bool
    points: int = 0
    lines_cleared: int = 0
    pending: Optional[PendingClear] = None


REJECTED = PlacementOutcome(accepted=False)


@dataclass(frozen=True)
class Ghost:
    slot: int
    row: int
    col: int
    valid: bool
    cells: Tuple[Coordinate, ...] = ()


@dataclass(frozen=True, eq=False)
class SessionSnapshot:
    colors: np.ndarray
    clearing: np.ndarray
    pieces: Tuple[Optional[Piece], ...]
    score: int
    best_score: int
    combo: int
    game_over: bool
    is_clearing: bool
    last_points: Optional[int] = None
    ghost: Optional[Ghost] = None
    dragging: Optional[int] = None

    @property
    def is_new_best(self) -> bool:
        return self.score > 0 and self.score >= self.best_score


@dataclass
class _DragState:
    slot: int
    target: Optional[Coordinate] = None


class BlockBlastGame:
    """Session controller for the 3-piece block puzzle.

    A placement runs in two phases. `place_piece` writes the piece, scores the
    turn and, if lines are full, marks them and returns a `PendingClear`; the
    caller then waits for its clear animation and calls `resolve_clear`, which
    removes the lines, consumes the slot and checks for game over. While a clear
    is pending every input is rejected. Agents that do not animate can use
    `step`, which runs both phases at once.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        rules: Optional[ScoringRules] = None,
        store: Optional[BestScoreStore] = None,
        catalog: Optional[PieceCatalog] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.rules = rules or ScoringRules()
        self.store: BestScoreStore = store if store is not None else MemoryBestScoreStore()
        self.catalog = catalog or PieceCatalog(seed=self.config.random_seed)
        self.best_score = max(0, int(self.store.load()))

        self.grid = GameGrid.empty(self.config.grid_size)
        self.pieces: List[Optional[Piece]] = []
        self.score = 0
        self.combo = 0
        self.best_combo = 0
        self.game_over = False
        self.pending: Optional[PendingClear] = None
        self.last_points: Optional[int] = None
        self.total_lines_cleared = 0
        self.total_pieces_placed = 0
        self.step_count = 0
        self._drag: Optional[_DragState] = None
        self.reset()

    # ---------- Lifecycle ----------
    def reset(self, seed: Optional[int] = None) -> None:
        if seed is not None:
            self.catalog.seed(seed)
        self.grid = GameGrid.empty(self.config.grid_size)
        self.pieces = list(self.catalog.draw_piece_set(self.config.pieces_per_set))
        self.score = 0
        self.combo = 0
        self.best_combo = 0
        self.game_over = False
        self.pending = None
        self.last_points = None
        self.total_lines_cleared = 0
        self.total_pieces_placed = 0
        self.step_count = 0
        self._drag = None

    def restart(self) -> None:
        self.reset()

    @property
    def is_input_locked(self) -> bool:
        return self.game_over or self.pending is not None

    def _piece_at(self, slot: int) -> Optional[Piece]:
        if slot < 0 or slot >= len(self.pieces):
            return None
        return self.pieces[slot]

    # ---------- Placement ----------
    def place_piece(self, slot: int, row: int, col: int) -> PlacementOutcome:
        """First phase: validate, write the piece and score the turn."""
        if self.is_input_locked:
            return REJECTED
        piece = self._piece_at(slot)
        if piece is None or not self.grid.can_place(piece, row, col):
            return REJECTED

        placed = self.grid.place(piece, row, col)
        cells = count_filled_cells(piece)
        lines = placed.find_full_lines()
        self._drag = None
        self.total_pieces_placed += 1
        self.step_count += 1

        if lines:
            self.combo += 1
            self.best_combo = max(self.best_combo, self.combo)
            points = self.rules.turn_score(cells, lines.count, self.combo)
            self.grid = placed.mark_for_clearing(lines.rows, lines.cols)
            self.pending = PendingClear(slot=slot, rows=lines.rows, cols=lines.cols)
            self._award(points)
            return PlacementOutcome(True, points, lines.count, self.pending)

        self.combo = 0
        points = self.rules.calculate_score(cells, 0)
        self.grid = placed
        self._award(points)
        self._consume(slot)
        return PlacementOutcome(True, points, 0)

    def resolve_clear(self) -> ClearResult:
        """Second phase: remove the pending lines and consume the slot."""
        if self.pending is None:
            raise RuntimeError("resolve_clear called with no clear pending")
        pending = self.pending
        result = self.grid.clear(pending.rows, pending.cols)
        self.grid = result.grid
        self.pending = None
        self.total_lines_cleared += result.lines_cleared
        self._consume(pending.slot)
        return result

    def step(self, slot: int, row: int, col: int) -> Tuple[bool, int, int]:
        """Place and resolve in one go. Returns (success, points, lines)."""
        outcome = self.place_piece(slot, row, col)
        if outcome.pending is not None:
            self.resolve_clear()
        return outcome.accepted, outcome.points, outcome.lines_cleared

    def _award(self, points: int) -> None:
        self.score += points
        self.last_points = points
        if self.score > self.best_score:
            self.best_score = self.score
            self.store.submit(self.score)

    def _consume(self, slot: int) -> None:
        self.pieces[slot] = None
        if all(p is None for p in self.pieces):
            self.pieces = list(self.catalog.draw_piece_set(self.config.pieces_per_set))
        self.game_over = is_terminal(self.grid, self.pieces)

    # ---------- Drag commands ----------
    def begin_drag(self, slot: int) -> bool:
        if self.is_input_locked or self._piece_at(slot) is None:
            return False
        self._drag = _DragState(slot=slot)
        return True

    def update_drag_target(self, row: int, col: int) -> bool:
        """Move the ghost; returns whether the piece would fit there."""
        if self._drag is None:
            return False
        self._drag.target = (row, col)
        piece = self._piece_at(self._drag.slot)
        return piece is not None and not self.is_input_locked and self.grid.can_place(piece, row, col)

    def clear_drag_target(self) -> None:
        if self._drag is not None:
            self._drag.target = None

    def commit_drag(self) -> PlacementOutcome:
        drag, self._drag = self._drag, None
        if drag is None or drag.target is None:
            return REJECTED
        row, col = drag.target
        return self.place_piece(drag.slot, row, col)

    def cancel_drag(self) -> None:
        self._drag = None

    @property
    def dragging(self) -> Optional[int]:
        return self._drag.slot if self._drag is not None else None

    def ghost(self) -> Optional[Ghost]:
        if self._drag is None or self._drag.target is None:
            return None
        piece = self._piece_at(self._drag.slot)
        if piece is None:
            return None
        row, col = self._drag.target
        valid = not self.is_input_locked and self.grid.can_place(piece, row, col)
        return Ghost(slot=self._drag.slot, row=row, col=col, valid=valid, cells=tuple(piece.cells_at(row, col)))

    # ---------- Queries ----------
    def snapshot(self) -> SessionSnapshot:
        return SessionSnapshot(
            colors=self.grid.colors,
            clearing=self.grid.clearing,
            pieces=tuple(self.pieces),
            score=self.score,
            best_score=self.best_score,
            combo=self.combo,
            game_over=self.game_over,
            is_clearing=self.pending is not None,
            last_points=self.last_points,
            ghost=self.ghost(),
            dragging=self.dragging,
        )

    def get_current_piece_kinds(self) -> List[int]:
        return [int(p.kind) if p is not None else -1 for p in self.pieces]

    def get_valid_actions(self) -> List[Tuple[int, int, int]]:
        """List of (slot, row, col) placements currently accepted"""
        if self.is_input_locked:
            return []
        actions: List[Tuple[int, int, int]] = []
        for slot, piece in enumerate(self.pieces):
            if piece is None:
                continue
            for row, col in self.grid.valid_placements(piece):
                actions.append((slot, row, col))
        return actions

    def action_mask(self) -> np.ndarray:
        size = self.config.grid_size
        mask = np.zeros((self.config.pieces_per_set, size, size), dtype=np.bool_)
        for slot, row, col in self.get_valid_actions():
            mask[slot, row, col] = True
        return mask

    def get_game_stats(self) -> dict:
        return {
            "final_score": self.score,
            "best_score": self.best_score,
            "pieces_placed": self.total_pieces_placed,
            "lines_cleared": self.total_lines_cleared,
            "best_combo": self.best_combo,
            "steps_taken": self.step_count,
            "final_fill_ratio": self.grid.filled_ratio,
            "avg_score_per_piece": self.score / max(1, self.total_pieces_placed),
            "avg_lines_per_piece": self.total_lines_cleared / max(1, self.total_pieces_placed),
        }
