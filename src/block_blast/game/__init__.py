"""Game module for Block Blast.

Exports the core engine and supporting classes:
- GameGrid: Immutable 8x8 board with placement and row/column clearing
- Piece, PieceKind, PieceCatalog: Shape table, palette and random draws
- ScoringRules: Placement score and combo multiplier
- BlockBlastGame: Session state, two-phase placement and drag commands
- JsonBestScoreStore, MemoryBestScoreStore: Best score persistence
"""

from .grid import (
    GRID_SIZE,
    ClearResult,
    FullLines,
    GameGrid,
    count_filled_cells,
    format_grid,
    format_piece,
    is_terminal,
)
from .pieces import COLORS, PIECES_PER_SET, SHAPES, Piece, PieceCatalog, PieceKind
from .rules import ScoringRules
from .storage import BEST_SCORE_KEY, BestScoreStore, JsonBestScoreStore, MemoryBestScoreStore
from .core import (
    BlockBlastGame,
    GameConfig,
    Ghost,
    PendingClear,
    PlacementOutcome,
    SessionSnapshot,
)

__all__ = [
    "GRID_SIZE",
    "ClearResult",
    "FullLines",
    "GameGrid",
    "count_filled_cells",
    "format_grid",
    "format_piece",
    "is_terminal",
    "COLORS",
    "PIECES_PER_SET",
    "SHAPES",
    "Piece",
    "PieceCatalog",
    "PieceKind",
    "ScoringRules",
    "BEST_SCORE_KEY",
    "BestScoreStore",
    "JsonBestScoreStore",
    "MemoryBestScoreStore",
    "BlockBlastGame",
    "GameConfig",
    "Ghost",
    "PendingClear",
    "PlacementOutcome",
    "SessionSnapshot",
]
