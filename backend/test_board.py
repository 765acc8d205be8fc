"""Tests for the board model."""

from itertools import product

import pytest

from services.board import DRAW, Board, find_winner, winning_lines
from services.errors import InvalidStateError


@pytest.mark.parametrize("size", [3, 4])
def test_winning_lines_count(size):
    lines = winning_lines(size)
    assert len(lines) == 2 * size + 2
    assert all(len(line) == size for line in lines)


def test_winning_lines_diagonals_4x4():
    lines = winning_lines(4)
    assert (0, 5, 10, 15) in lines
    assert (3, 6, 9, 12) in lines


def test_winner_row_column_diagonal():
    row = Board.create(['X', 'X', 'X', 'O', 'O', None, None, None, None], 3)
    col = Board.create(['O', 'X', None, 'O', 'X', None, 'O', None, 'X'], 3)
    diag = Board.create(['X', 'O', None, None, 'X', 'O', None, None, 'X'], 3)
    assert row.winner() == 'X'
    assert col.winner() == 'O'
    assert diag.winner() == 'X'


def test_winner_in_progress_and_draw():
    in_progress = Board.create(['X', 'O', None, None, 'X', None, None, None, None], 3)
    draw = Board.create(['X', 'O', 'X', 'X', 'O', 'O', 'O', 'X', 'X'], 3)
    assert in_progress.winner() is None
    assert draw.winner() == DRAW


def test_full_boards_draw_iff_no_line_complete():
    for cells in product('XO', repeat=9):
        complete = any(len({cells[i] for i in line}) == 1 for line in winning_lines(3))
        winner = find_winner(cells, 3)
        assert (winner == DRAW) == (not complete)


def test_one_empty_cell_without_line_is_in_progress():
    for cells in product('XO', repeat=8):
        grid = list(cells) + [None]
        complete = any(
            None not in {grid[i] for i in line} and len({grid[i] for i in line}) == 1
            for line in winning_lines(3)
        )
        if not complete:
            assert Board.create(grid, 3).winner() is None


def test_4x4_winner_needs_four():
    grid = [None] * 16
    for i in (0, 1, 2):
        grid[i] = 'X'
    board = Board.create(grid, 4)
    assert board.winner() is None
    assert board.apply(3, 'X').winner() == 'X'


def test_empty_positions_ascending():
    board = Board.create([None, 'X', None, 'O', None, None, 'X', None, None], 3)
    assert board.empty_positions() == [0, 2, 4, 5, 7, 8]


def test_apply_returns_new_board():
    board = Board.empty(3)
    moved = board.apply(4, 'X')
    assert moved.grid[4] == 'X'
    assert board.grid[4] is None
    assert moved.size == 3


def test_center_and_corners():
    assert Board.empty(3).center() == 4
    assert Board.empty(3).corners() == [0, 2, 6, 8]
    assert Board.empty(4).center() == 8
    assert Board.empty(4).corners() == [0, 3, 12, 15]


@pytest.mark.parametrize("cells,size", [
    ([None] * 25, 5),
    ([None] * 4, 2),
    ([None] * 8, 3),
    ([None] * 9, 4),
])
def test_create_rejects_bad_shapes(cells, size):
    with pytest.raises(InvalidStateError):
        Board.create(cells, size)


def test_create_rejects_non_string_marks():
    with pytest.raises(InvalidStateError):
        Board.create([1] + [None] * 8, 3)
