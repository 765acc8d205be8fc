"""
Minimax Search Service

Depth-limited minimax with alpha-beta pruning over a Board.

Scoring from the maximizing player's point of view:
    win for the maximizer   ->  10 - depth   (faster wins score higher)
    win for the minimizer   ->  depth - 10   (slower losses score higher)
    draw or depth cutoff    ->  0

Moves are scanned in ascending index order and only a strictly better score
replaces the incumbent, so ties always go to the lowest index.

Usage:
    result = minimax_service.search(board, max_depth=9, ai_symbol='O', human_symbol='X')
    result.move, result.score
"""

import logging
import math
from typing import NamedTuple, Optional

from services.board import DRAW, Board
from services.errors import ConfigurationError, InvalidStateError

logger = logging.getLogger(__name__)

WIN_SCORE = 10


class SearchResult(NamedTuple):
    score: int
    move: Optional[int]


def check_depth(max_depth) -> int:
    """
    Make sure a depth budget is a finite positive int.

    Raises:
        ConfigurationError: For infinity, floats, None or anything below 1
    """
    if isinstance(max_depth, bool) or not isinstance(max_depth, int):
        if isinstance(max_depth, float) and math.isinf(max_depth):
            raise ConfigurationError(
                "Search depth must be finite; map unbounded depth to the configured cap"
            )
        raise ConfigurationError(f"Search depth must be an integer, got {max_depth!r}")
    if max_depth < 1:
        raise ConfigurationError(f"Search depth must be at least 1, got {max_depth}")
    return max_depth


class MinimaxService:
    """Stateless alpha-beta searcher. Safe to share between requests."""

    def search(self, board: Board, max_depth: int, ai_symbol: str, human_symbol: str) -> SearchResult:
        """
        Find the best move for `ai_symbol` within `max_depth` plies.

        Args:
            board (Board): Position to search from
            max_depth (int): Finite ply budget
            ai_symbol (str): Maximizing player's mark
            human_symbol (str): Minimizing player's mark

        Returns:
            SearchResult: Best score and the move that achieves it

        Raises:
            InvalidStateError: If the board has no empty cell or is already decided
            ConfigurationError: If the depth budget is not a finite positive int
        """
        check_depth(max_depth)
        if not board.empty_positions():
            raise InvalidStateError("Cannot search a board with no empty cells")
        if board.winner() is not None:
            raise InvalidStateError("Cannot search a board that already has a winner")

        result = self.minimax(board, 0, True, -math.inf, math.inf, ai_symbol, human_symbol, max_depth)
        logger.debug(f"Minimax depth {max_depth}: move {result.move} scored {result.score}")
        return result

    def minimax(self, board, depth, is_maximizing, alpha, beta, ai_symbol, human_symbol, max_depth):
        """
        Minimax algorithm with alpha-beta pruning.

        Args:
            board (Board): Current board state
            depth (int): Current depth in the game tree
            is_maximizing (bool): True if it is the maximizing player's turn
            alpha (float): Alpha value for pruning
            beta (float): Beta value for pruning
            ai_symbol (str): Maximizing player's mark
            human_symbol (str): Minimizing player's mark
            max_depth (int): Depth at which the search stops and scores 0

        Returns:
            SearchResult: (score, move) pair for the side to move
        """
        winner = board.winner()
        if winner == ai_symbol:
            return SearchResult(WIN_SCORE - depth, None)
        if winner == human_symbol:
            return SearchResult(depth - WIN_SCORE, None)
        if winner == DRAW or depth >= max_depth:
            return SearchResult(0, None)

        best_move = None
        if is_maximizing:
            best_score = -math.inf
            for move in board.empty_positions():
                score, _ = self.minimax(
                    board.apply(move, ai_symbol), depth + 1, False,
                    alpha, beta, ai_symbol, human_symbol, max_depth
                )
                if score > best_score:
                    best_score = score
                    best_move = move

                alpha = max(alpha, best_score)
                if beta <= alpha:
                    break
        else:
            best_score = math.inf
            for move in board.empty_positions():
                score, _ = self.minimax(
                    board.apply(move, human_symbol), depth + 1, True,
                    alpha, beta, ai_symbol, human_symbol, max_depth
                )
                if score < best_score:
                    best_score = score
                    best_move = move

                beta = min(beta, best_score)
                if beta <= alpha:
                    break

        return SearchResult(best_score, best_move)


# Create a singleton instance
minimax_service = MinimaxService()
