import random

import numpy as np
import pytest

from block_blast.game import COLORS, SHAPES, PieceCatalog, PieceKind
from block_blast.game.grid import GRID_SIZE, count_filled_cells
from block_blast.game.pieces import hex_to_rgb
from tests.helpers import make_piece


def test_catalog_has_23_shapes_and_10_colors():
    assert len(PieceKind) == 23
    assert set(SHAPES) == set(PieceKind)
    assert len(COLORS) == 10


@pytest.mark.parametrize("kind", list(PieceKind))
def test_every_shape_is_a_valid_mask(kind):
    shape = SHAPES[kind]
    assert shape.dtype == np.bool_
    assert shape.any()
    h, w = shape.shape
    assert 1 <= h <= GRID_SIZE and 1 <= w <= GRID_SIZE
    # bounding boxes are tight
    assert shape.any(axis=1).all() and shape.any(axis=0).all()


def test_shapes_are_read_only():
    with pytest.raises(ValueError):
        SHAPES[PieceKind.SQUARE2][0, 0] = False


def test_known_cell_counts():
    assert count_filled_cells(make_piece(PieceKind.SINGLE)) == 1
    assert count_filled_cells(make_piece(PieceKind.H5)) == 5
    assert count_filled_cells(make_piece(PieceKind.SQUARE3)) == 9
    assert count_filled_cells(make_piece(PieceKind.PLUS)) == 5
    assert count_filled_cells(make_piece(PieceKind.CORNER_SE)) == 3


def test_plus_shape_layout():
    expected = np.array([[0, 1, 0], [1, 1, 1], [0, 1, 0]], dtype=bool)
    assert np.array_equal(SHAPES[PieceKind.PLUS], expected)


def test_draw_piece_gives_unique_ids_and_palette_colors():
    catalog = PieceCatalog(seed=7)
    pieces = [catalog.draw_piece() for _ in range(200)]
    assert len({p.piece_id for p in pieces}) == 200
    assert all(1 <= p.color <= len(COLORS) for p in pieces)
    assert all(p.hex_color in COLORS for p in pieces)


def test_same_seed_gives_same_draws():
    a = PieceCatalog(rng=random.Random(42))
    b = PieceCatalog(rng=random.Random(42))
    draws_a = [(p.kind, p.color) for p in a.draw_piece_set(30)]
    draws_b = [(p.kind, p.color) for p in b.draw_piece_set(30)]
    assert draws_a == draws_b


def test_reseeding_replays_the_sequence():
    catalog = PieceCatalog(seed=3)
    first = [(p.kind, p.color) for p in catalog.draw_piece_set()]
    catalog.seed(3)
    again = [(p.kind, p.color) for p in catalog.draw_piece_set()]
    assert first == again


def test_draw_piece_set_has_three_pieces():
    pieces = PieceCatalog(seed=1).draw_piece_set()
    assert len(pieces) == 3
    assert len({p.piece_id for p in pieces}) == 3


def test_all_kinds_and_colors_are_reachable():
    catalog = PieceCatalog(seed=0)
    pieces = [catalog.draw_piece() for _ in range(2000)]
    assert {p.kind for p in pieces} == set(PieceKind)
    assert {p.color for p in pieces} == set(range(1, 11))


def test_piece_geometry_helpers():
    piece = make_piece(PieceKind.L, color=4)
    assert piece.size == (3, 2)
    assert piece.cells_at(2, 5) == [(2, 5), (3, 5), (4, 5), (4, 6)]
    assert piece.rgb == hex_to_rgb(COLORS[3])
    assert hex_to_rgb("#FFB3BA") == (255, 179, 186)
