"""Tests for the alpha-beta search."""

import math

import pytest

from services.board import DRAW, Board
from services.errors import ConfigurationError, InvalidStateError
from services.minimax_service import MinimaxService, check_depth


def full_minimax(board, depth, is_maximizing, ai, human, max_depth):
    """Plain minimax without pruning, used as the reference value."""
    winner = board.winner()
    if winner == ai:
        return 10 - depth
    if winner == human:
        return depth - 10
    if winner == DRAW or depth >= max_depth:
        return 0
    mark = ai if is_maximizing else human
    scores = [
        full_minimax(board.apply(move, mark), depth + 1, not is_maximizing, ai, human, max_depth)
        for move in board.empty_positions()
    ]
    return max(scores) if is_maximizing else min(scores)


@pytest.fixture
def searcher():
    return MinimaxService()


def test_takes_immediate_win(searcher):
    board = Board.create(['O', 'O', None, 'X', 'X', None, None, None, 'X'], 3)
    result = searcher.search(board, 9, 'O', 'X')
    assert result.move == 2
    assert result.score == 9


def test_blocks_immediate_threat(searcher):
    board = Board.create(['X', 'X', None, None, 'O', None, None, None, None], 3)
    assert searcher.search(board, 9, 'O', 'X').move == 2


def test_ties_go_to_lowest_index(searcher):
    result = searcher.search(Board.empty(3), 1, 'O', 'X')
    assert result.score == 0
    assert result.move == 0


@pytest.mark.parametrize("grid,max_depth", [
    (['X', None, None, None, None, None, None, None, None], 9),
    ([None, None, None, None, 'X', None, None, None, None], 9),
    (['X', None, None, None, 'O', None, None, None, 'X'], 9),
    (['X', 'O', None, None, 'X', None, None, None, None], 9),
    ([None, 'X', None, None, None, None, None, None, None], 3),
    (['X', 'X', None, 'O', None, None, None, None, None], 4),
])
def test_pruning_does_not_change_value(searcher, grid, max_depth):
    board = Board.create(grid, 3)
    pruned = searcher.search(board, max_depth, 'O', 'X')
    assert pruned.score == full_minimax(board, 0, True, 'O', 'X', max_depth)


def test_pruning_does_not_change_value_4x4(searcher):
    grid = [None] * 16
    for position, mark in ((0, 'X'), (5, 'O'), (1, 'X'), (10, 'O'), (2, 'X'), (15, 'X'), (4, 'O')):
        grid[position] = mark
    board = Board.create(grid, 4)
    pruned = searcher.search(board, 3, 'O', 'X')
    assert pruned.score == full_minimax(board, 0, True, 'O', 'X', 3)
    assert pruned.move == 3


@pytest.mark.parametrize("opening", range(9))
def test_perfect_play_draws(searcher, opening):
    board = Board.empty(3).apply(opening, 'X')
    turn, other = 'O', 'X'
    while board.winner() is None:
        move = searcher.search(board, 9, turn, other).move
        board = board.apply(move, turn)
        turn, other = other, turn
    assert board.winner() == DRAW


def test_prefers_faster_win(searcher):
    # O can win now at 2, or set up a slower win elsewhere
    board = Board.create(['O', 'O', None, 'X', None, None, 'X', None, None], 3)
    result = searcher.search(board, 9, 'O', 'X')
    assert result.move == 2
    assert result.score == 9


def test_search_full_board_raises(searcher):
    board = Board.create(['X', 'O', 'X', 'X', 'O', 'O', 'O', 'X', 'X'], 3)
    with pytest.raises(InvalidStateError):
        searcher.search(board, 9, 'O', 'X')


def test_search_won_board_raises(searcher):
    board = Board.create(['X', 'X', 'X', 'O', 'O', None, None, None, None], 3)
    with pytest.raises(InvalidStateError):
        searcher.search(board, 9, 'O', 'X')


@pytest.mark.parametrize("depth", [math.inf, 0, -1, 2.5, None, True])
def test_unbounded_or_bad_depth_rejected(searcher, depth):
    with pytest.raises(ConfigurationError):
        searcher.search(Board.empty(3), depth, 'O', 'X')


def test_check_depth_returns_value():
    assert check_depth(12) == 12
