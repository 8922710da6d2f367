"""Block Blast: an 8x8 block placement puzzle.

Place three pieces per set onto the board; full rows and columns clear and
score, with a combo multiplier for consecutive clearing turns.
"""

from .game import BlockBlastGame, GameConfig, GameGrid, Piece, PieceCatalog, ScoringRules

__all__ = [
    "BlockBlastGame",
    "GameConfig",
    "GameGrid",
    "Piece",
    "PieceCatalog",
    "ScoringRules",
]
