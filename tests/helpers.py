from __future__ import annotations

import itertools
from typing import Iterable, Tuple

import numpy as np

from block_blast.game import GameGrid, Piece, PieceCatalog, PieceKind

_ids = itertools.count(10_000)


def make_piece(kind: PieceKind, color: int = 1) -> Piece:
    return Piece(kind=kind, color=color, piece_id=next(_ids))


def fill_cells(grid: GameGrid, cells: Iterable[Tuple[int, int]], color: int = 2) -> GameGrid:
    colors = grid.colors.copy()
    for r, c in cells:
        colors[r, c] = color
    return GameGrid(colors)


def full_except(grid_size: int, holes: Iterable[Tuple[int, int]], color: int = 3) -> GameGrid:
    colors = np.full((grid_size, grid_size), color, dtype=np.int8)
    for r, c in holes:
        colors[r, c] = 0
    return GameGrid(colors)


class ScriptedCatalog(PieceCatalog):
    """Catalog that hands out a fixed sequence of kinds, then singles."""

    def __init__(self, kinds: Iterable[PieceKind], color: int = 1) -> None:
        super().__init__(seed=0)
        self.queue = list(kinds)
        self.color = color

    def draw_piece(self) -> Piece:
        kind = self.queue.pop(0) if self.queue else PieceKind.SINGLE
        return Piece(kind=kind, color=self.color, piece_id=next(self._ids))
