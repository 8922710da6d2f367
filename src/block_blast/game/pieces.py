from __future__ import annotations

import itertools
import random
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Tuple

import numpy as np


PIECES_PER_SET = 3

# Palette index 0 is reserved for empty board cells.
COLORS: Tuple[str, ...] = (
    "#FFB3BA",  # pink
    "#BAE1FF",  # blue
    "#BAFFC9",  # green
    "#FFE4BA",  # peach
    "#E8BAFF",  # lavender
    "#FFBAE1",  # rose
    "#BAF2FF",  # sky
    "#FFF1BA",  # lemon
    "#D4BAFF",  # violet
    "#FFD4BA",  # coral
)


class PieceKind(IntEnum):
    SINGLE = 0
    H2 = 1
    H3 = 2
    H4 = 3
    H5 = 4
    V2 = 5
    V3 = 6
    V4 = 7
    V5 = 8
    SQUARE2 = 9
    SQUARE3 = 10
    L = 11
    J = 12
    L_FLAT = 13
    J_FLAT = 14
    T = 15
    S = 16
    Z = 17
    CORNER_NW = 18
    CORNER_NE = 19
    CORNER_SW = 20
    CORNER_SE = 21
    PLUS = 22


Shape = np.ndarray


def _mask(rows: List[str]) -> Shape:
    shape = np.array([[ch == "#" for ch in row] for row in rows], dtype=np.bool_)
    shape.setflags(write=False)
    return shape


SHAPES: Dict[PieceKind, Shape] = {
    PieceKind.SINGLE: _mask(["#"]),
    PieceKind.H2: _mask(["##"]),
    PieceKind.H3: _mask(["###"]),
    PieceKind.H4: _mask(["####"]),
    PieceKind.H5: _mask(["#####"]),
    PieceKind.V2: _mask(["#", "#"]),
    PieceKind.V3: _mask(["#", "#", "#"]),
    PieceKind.V4: _mask(["#", "#", "#", "#"]),
    PieceKind.V5: _mask(["#", "#", "#", "#", "#"]),
    PieceKind.SQUARE2: _mask(["##", "##"]),
    PieceKind.SQUARE3: _mask(["###", "###", "###"]),
    PieceKind.L: _mask(["#.", "#.", "##"]),
    PieceKind.J: _mask([".#", ".#", "##"]),
    PieceKind.L_FLAT: _mask(["###", "#.."]),
    PieceKind.J_FLAT: _mask(["###", "..#"]),
    PieceKind.T: _mask(["###", ".#."]),
    PieceKind.S: _mask([".##", "##."]),
    PieceKind.Z: _mask(["##.", ".##"]),
    PieceKind.CORNER_NW: _mask(["##", "#."]),
    PieceKind.CORNER_NE: _mask(["##", ".#"]),
    PieceKind.CORNER_SW: _mask(["#.", "##"]),
    PieceKind.CORNER_SE: _mask([".#", "##"]),
    PieceKind.PLUS: _mask([".#.", "###", ".#."]),
}


def hex_to_rgb(value: str) -> Tuple[int, int, int]:
    value = value.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


@dataclass(frozen=True)
class Piece:
    """Immutable piece instance: a catalog shape, a palette color and an id.

    `color` is a 1-based palette index so it can be written straight into the
    board's color array (0 means empty there).
    """

    kind: PieceKind
    color: int
    piece_id: int

    @property
    def shape(self) -> Shape:
        return SHAPES[self.kind]

    @property
    def hex_color(self) -> str:
        return COLORS[self.color - 1]

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return hex_to_rgb(self.hex_color)

    @property
    def size(self) -> Tuple[int, int]:
        """(height, width) of the bounding box"""
        h, w = self.shape.shape
        return int(h), int(w)

    def cells_at(self, row: int, col: int) -> List[Tuple[int, int]]:
        rs, cs = np.nonzero(self.shape)
        return [(row + int(r), col + int(c)) for r, c in zip(rs, cs)]


class PieceCatalog:
    """Draws random pieces from the fixed shape table and palette.

    Pass a seeded `random.Random` (or a seed) for deterministic draws. Piece ids
    come from a counter owned by the catalog, so they stay unique for as long as
    the catalog lives, restarts included.
    """

    def __init__(self, rng: Optional[random.Random] = None, seed: Optional[int] = None) -> None:
        self.rng = rng if rng is not None else random.Random(seed)
        self._ids = itertools.count()

    def seed(self, seed: Optional[int]) -> None:
        self.rng.seed(seed)

    def draw_piece(self) -> Piece:
        kind = self.rng.choice(list(PieceKind))
        color = self.rng.randrange(len(COLORS)) + 1
        return Piece(kind=kind, color=color, piece_id=next(self._ids))

    def draw_piece_set(self, count: int = PIECES_PER_SET) -> List[Piece]:
        return [self.draw_piece() for _ in range(count)]
