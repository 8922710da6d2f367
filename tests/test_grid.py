import itertools

import numpy as np
import pytest

from block_blast.game import GameGrid, PieceKind, count_filled_cells, format_grid, format_piece, is_terminal
from block_blast.game.grid import GRID_SIZE
from tests.helpers import fill_cells, full_except, make_piece

N = GRID_SIZE


def test_empty_grid():
    grid = GameGrid.empty()
    assert grid.size == N
    assert grid.colors.shape == (N, N)
    assert not grid.colors.any()
    assert not grid.clearing.any()
    assert grid.filled_ratio == 0.0


def test_grid_arrays_are_read_only():
    grid = GameGrid.empty()
    with pytest.raises(ValueError):
        grid.colors[0, 0] = 1


def test_non_square_grid_rejected():
    with pytest.raises(ValueError):
        GameGrid(np.zeros((3, 4)))


def test_clearing_shape_must_match_grid():
    with pytest.raises(ValueError):
        GameGrid(np.zeros((N, N)), np.zeros((N - 1, N), dtype=bool))


def test_can_place_on_empty_board_everywhere_in_bounds():
    grid = GameGrid.empty()
    piece = make_piece(PieceKind.SQUARE2)
    assert grid.can_place(piece, 0, 0)
    assert grid.can_place(piece, N - 2, N - 2)
    assert len(grid.valid_placements(piece)) == (N - 1) * (N - 1)


@pytest.mark.parametrize("row,col", [(-1, 0), (0, -1), (N - 1, 0), (0, N - 1), (N, N)])
def test_can_place_rejects_out_of_bounds(row, col):
    assert not GameGrid.empty().can_place(make_piece(PieceKind.SQUARE2), row, col)


def test_can_place_rejects_collision():
    grid = fill_cells(GameGrid.empty(), [(3, 3)])
    piece = make_piece(PieceKind.SQUARE2)
    assert not grid.can_place(piece, 2, 2)
    assert not grid.can_place(piece, 3, 3)
    assert grid.can_place(piece, 4, 4)


def test_can_place_only_checks_filled_mask_cells():
    # the empty corner of the plus may sit on an occupied cell
    grid = fill_cells(GameGrid.empty(), [(0, 0)])
    assert grid.can_place(make_piece(PieceKind.PLUS), 0, 0)


def test_place_writes_color_and_leaves_rest_untouched():
    before = fill_cells(GameGrid.empty(), [(7, 7), (0, 5)], color=9)
    piece = make_piece(PieceKind.T, color=4)
    after = before.place(piece, 2, 1)
    covered = set(piece.cells_at(2, 1))
    for r, c in itertools.product(range(N), range(N)):
        if (r, c) in covered:
            assert after.colors[r, c] == 4
        else:
            assert after.colors[r, c] == before.colors[r, c]
    # input board is not modified
    assert before.colors[2, 1] == 0


def test_count_filled_cells():
    assert count_filled_cells(make_piece(PieceKind.S)) == 4
    assert count_filled_cells(make_piece(PieceKind.V4)) == 4


def test_find_full_lines_empty_board():
    lines = GameGrid.empty().find_full_lines()
    assert lines.rows == frozenset()
    assert lines.cols == frozenset()
    assert not lines


def test_find_full_lines_row_three():
    grid = fill_cells(GameGrid.empty(), [(3, c) for c in range(N - 5)])
    grid = grid.place(make_piece(PieceKind.H5), 3, N - 5)
    lines = grid.find_full_lines()
    assert lines.rows == frozenset({3})
    assert lines.cols == frozenset()
    assert lines.count == 1


def test_find_full_lines_row_and_column():
    cells = [(0, c) for c in range(N)] + [(r, 6) for r in range(N)]
    lines = fill_cells(GameGrid.empty(), cells).find_full_lines()
    assert lines.rows == frozenset({0})
    assert lines.cols == frozenset({6})


def test_row_fills_regardless_of_placement_order():
    pieces = [(make_piece(PieceKind.H3), 0, 0), (make_piece(PieceKind.H3), 0, 3), (make_piece(PieceKind.H2), 0, 6)]
    for order in itertools.permutations(pieces):
        grid = GameGrid.empty()
        for i, (piece, row, col) in enumerate(order):
            assert grid.can_place(piece, row, col)
            grid = grid.place(piece, row, col)
            lines = grid.find_full_lines()
            if i < len(order) - 1:
                assert not lines
            else:
                assert lines.rows == frozenset({0})


def test_mark_for_clearing_keeps_colors():
    cells = [(3, c) for c in range(N)] + [(5, 5)]
    grid = fill_cells(GameGrid.empty(), cells, color=6)
    marked = grid.mark_for_clearing({3}, set())
    assert np.array_equal(marked.colors, grid.colors)
    assert marked.clearing[3].all()
    assert marked.clearing.sum() == N
    assert not marked.clearing[5, 5]


def test_mark_for_clearing_skips_empty_cells():
    grid = fill_cells(GameGrid.empty(), [(1, 1)])
    marked = grid.mark_for_clearing({1}, {4})
    assert marked.clearing.sum() == 1
    assert marked.clearing[1, 1]


def test_clear_single_row():
    cells = [(3, c) for c in range(N)] + [(0, 0), (6, 2)]
    grid = fill_cells(GameGrid.empty(), cells)
    result = grid.clear({3}, set())
    assert result.lines_cleared == 1
    assert result.cells_cleared == N
    assert not result.grid.colors[3].any()
    other = [r for r in range(N) if r != 3]
    assert np.array_equal(result.grid.colors[other], grid.colors[other])


def test_clear_row_and_column_counts_intersection_once():
    cells = [(2, c) for c in range(N)] + [(r, 5) for r in range(N)]
    grid = fill_cells(GameGrid.empty(), cells)
    result = grid.clear({2}, {5})
    assert result.lines_cleared == 2
    assert result.cells_cleared == 2 * N - 1
    assert not result.grid.colors.any()


def test_clear_nothing_returns_same_board():
    grid = fill_cells(GameGrid.empty(), [(1, 1)])
    result = grid.clear(set(), set())
    assert result.grid is grid
    assert result.lines_cleared == 0
    assert result.cells_cleared == 0


def test_clear_resets_clearing_flags():
    cells = [(4, c) for c in range(N)]
    grid = fill_cells(GameGrid.empty(), cells).mark_for_clearing({4}, set())
    result = grid.clear({4}, set())
    assert not result.grid.clearing.any()


def test_place_then_clear_restores_board_outside_cleared_lines():
    before = fill_cells(GameGrid.empty(), [(5, c) for c in range(N - 3)] + [(0, 0), (7, 7)])
    piece = make_piece(PieceKind.H3)
    placed = before.place(piece, 5, N - 3)
    lines = placed.find_full_lines()
    assert lines.rows == frozenset({5})
    after = placed.clear(lines.rows, lines.cols).grid
    keep = [r for r in range(N) if r != 5]
    assert np.array_equal(after.occupied[keep], before.occupied[keep])


def test_can_fit_anywhere_and_terminal():
    # only the bottom-right corner is free
    grid = full_except(N, [(N - 1, N - 1)])
    single = make_piece(PieceKind.SINGLE)
    domino = make_piece(PieceKind.H2)
    assert grid.can_fit_anywhere(single)
    assert not grid.can_fit_anywhere(domino)
    assert is_terminal(grid, [domino, None, make_piece(PieceKind.SQUARE3)])
    assert not is_terminal(grid, [domino, single, None])


def test_empty_piece_set_is_never_terminal():
    grid = full_except(N, [])
    assert not is_terminal(grid, [None, None, None])
    assert not is_terminal(grid, [])


def test_grid_equality_and_text():
    a = fill_cells(GameGrid.empty(), [(0, 0)])
    b = fill_cells(GameGrid.empty(), [(0, 0)])
    assert a == b
    assert a != GameGrid.empty()
    text = format_grid(a)
    assert text.splitlines()[0] == "█" + "·" * (N - 1)
    assert str(a) == text


def test_format_piece():
    assert format_piece(make_piece(PieceKind.PLUS)) == "·█·\n███\n·█·"
