from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from .pieces import Piece


GRID_SIZE = 8

Coordinate = Tuple[int, int]


@dataclass(frozen=True)
class FullLines:
    rows: FrozenSet[int] = field(default_factory=frozenset)
    cols: FrozenSet[int] = field(default_factory=frozenset)

    @property
    def count(self) -> int:
        return len(self.rows) + len(self.cols)

    def __bool__(self) -> bool:
        return self.count > 0


@dataclass(frozen=True)
class ClearResult:
    grid: "GameGrid"
    lines_cleared: int
    cells_cleared: int


class GameGrid:
    """Immutable N x N board for block placement.

    `colors` holds 0 for empty cells and a 1-based palette index for occupied
    ones. `clearing` flags occupied cells that are about to be removed; it is
    only set between `mark_for_clearing` and `clear`. Both arrays are read-only,
    every operation returns a new grid.
    """

    def __init__(self, colors: np.ndarray, clearing: Optional[np.ndarray] = None) -> None:
        colors = np.array(colors, dtype=np.int8)
        if colors.ndim != 2 or colors.shape[0] != colors.shape[1]:
            raise ValueError(f"grid must be square, got shape {colors.shape}")
        if clearing is None:
            clearing = np.zeros(colors.shape, dtype=np.bool_)
        else:
            clearing = np.array(clearing, dtype=np.bool_)
            if clearing.shape != colors.shape:
                raise ValueError(f"clearing shape {clearing.shape} does not match grid shape {colors.shape}")
        colors.setflags(write=False)
        clearing.setflags(write=False)
        self.colors = colors
        self.clearing = clearing

    @classmethod
    def empty(cls, size: int = GRID_SIZE) -> "GameGrid":
        return cls(np.zeros((size, size), dtype=np.int8))

    @property
    def size(self) -> int:
        return int(self.colors.shape[0])

    @property
    def occupied(self) -> np.ndarray:
        return self.colors != 0

    def _covered(self, piece: Piece, row: int, col: int) -> Tuple[np.ndarray, np.ndarray]:
        rs, cs = np.nonzero(piece.shape)
        return rs + row, cs + col

    def can_place(self, piece: Piece, row: int, col: int) -> bool:
        """True iff every filled mask cell lands on an empty in-bounds cell."""
        rr, cc = self._covered(piece, row, col)
        if rr.min() < 0 or cc.min() < 0 or rr.max() >= self.size or cc.max() >= self.size:
            return False
        return not bool(self.colors[rr, cc].any())

    def place(self, piece: Piece, row: int, col: int) -> "GameGrid":
        """Return a new grid with the piece written in its color.

        Assumes the position was already validated with `can_place`.
        """
        rr, cc = self._covered(piece, row, col)
        colors = self.colors.copy()
        colors[rr, cc] = piece.color
        return GameGrid(colors, self.clearing)

    def find_full_lines(self) -> FullLines:
        occupied = self.occupied
        rows = np.flatnonzero(np.all(occupied, axis=1))
        cols = np.flatnonzero(np.all(occupied, axis=0))
        return FullLines(rows=frozenset(int(r) for r in rows), cols=frozenset(int(c) for c in cols))

    def _line_mask(self, rows: Iterable[int], cols: Iterable[int]) -> np.ndarray:
        mask = np.zeros(self.colors.shape, dtype=np.bool_)
        mask[np.array(sorted(rows), dtype=np.intp), :] = True
        mask[:, np.array(sorted(cols), dtype=np.intp)] = True
        return mask

    def mark_for_clearing(self, rows: Iterable[int], cols: Iterable[int]) -> "GameGrid":
        """Flag occupied cells of the listed lines as clearing; colors are kept."""
        mask = self._line_mask(rows, cols) & self.occupied
        return GameGrid(self.colors, self.clearing | mask)

    def clear(self, rows: Iterable[int], cols: Iterable[int]) -> ClearResult:
        """Empty every cell in the listed rows and columns.

        Cells at a row/column intersection are counted once in `cells_cleared`.
        """
        rows = frozenset(rows)
        cols = frozenset(cols)
        lines = len(rows) + len(cols)
        if lines == 0:
            return ClearResult(grid=self, lines_cleared=0, cells_cleared=0)
        mask = self._line_mask(rows, cols)
        colors = self.colors.copy()
        clearing = self.clearing.copy()
        colors[mask] = 0
        clearing[mask] = False
        return ClearResult(grid=GameGrid(colors, clearing), lines_cleared=lines, cells_cleared=int(mask.sum()))

    def valid_placements(self, piece: Piece) -> List[Coordinate]:
        """All (row, col) positions where the piece fits"""
        return [
            (row, col)
            for row in range(self.size)
            for col in range(self.size)
            if self.can_place(piece, row, col)
        ]

    def can_fit_anywhere(self, piece: Piece) -> bool:
        for row in range(self.size):
            for col in range(self.size):
                if self.can_place(piece, row, col):
                    return True
        return False

    @property
    def filled_ratio(self) -> float:
        return float(np.count_nonzero(self.colors)) / float(self.size * self.size)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, GameGrid):
            return NotImplemented
        return np.array_equal(self.colors, other.colors) and np.array_equal(self.clearing, other.clearing)

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"GameGrid(size={self.size}, filled={int(np.count_nonzero(self.colors))})"

    def __str__(self) -> str:
        return format_grid(self)


def count_filled_cells(piece: Piece) -> int:
    return int(np.count_nonzero(piece.shape))


def is_terminal(grid: GameGrid, pieces: Sequence[Optional[Piece]]) -> bool:
    """True iff some piece remains and none of the remaining pieces fits.

    An empty slot set (between consuming the last piece and refilling) is never
    terminal.
    """
    remaining = [p for p in pieces if p is not None]
    if not remaining:
        return False
    return all(not grid.can_fit_anywhere(piece) for piece in remaining)


def format_grid(grid: GameGrid) -> str:
    lines = []
    for r in range(grid.size):
        row = []
        for c in range(grid.size):
            if grid.clearing[r, c]:
                row.append("▒")
            elif grid.colors[r, c]:
                row.append("█")
            else:
                row.append("·")
        lines.append("".join(row))
    return "\n".join(lines)


def format_piece(piece: Piece) -> str:
    return "\n".join("".join("█" if cell else "·" for cell in row) for row in piece.shape)
