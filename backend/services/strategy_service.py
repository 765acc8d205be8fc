"""
Strategy Service

Non-exhaustive move selectors used when the AI does not play a full search.
Each strategy tag maps to a chain of heuristics, tried in order, until one
produces a position:

    basic          random empty cell
    pattern        win -> block -> centre -> random corner -> random
    trap           win -> block -> create fork -> block fork -> pattern
    defensive      win -> block -> create fork -> prevent fork -> shallow search -> pattern
    psychological  full search early, sometimes a disguised trap mid-game, else full search
"""

import logging
import random
from typing import List, NamedTuple, Optional

from services.board import Board
from services.minimax_service import MinimaxService, minimax_service

logger = logging.getLogger(__name__)

STRATEGIES = ('basic', 'pattern', 'trap', 'defensive', 'psychological')

DEFENSIVE_SEARCH_DEPTH = 3
OPENING_MOVES = 3
MIDGAME_MOVES = 6
DISGUISED_TRAP_CHANCE = 0.15


class StrategyMove(NamedTuple):
    position: int
    reasoning: str


def find_immediate_win(board: Board, player: str) -> Optional[int]:
    """First empty position that wins the game for `player`, or None."""
    for position in board.empty_positions():
        if board.apply(position, player).winner() == player:
            return position
    return None


def find_all_threats(board: Board, player: str) -> List[int]:
    """All empty positions that would win the game for `player`."""
    return [
        position for position in board.empty_positions()
        if board.apply(position, player).winner() == player
    ]


def find_fork(board: Board, player: str) -> Optional[int]:
    """First empty position that leaves `player` with two or more threats."""
    for position in board.empty_positions():
        if len(find_all_threats(board.apply(position, player), player)) >= 2:
            return position
    return None


def find_fork_setup(board: Board, opponent: str) -> Optional[int]:
    """
    First empty position from which `opponent` could go on to build a fork.

    Taking it ourselves denies them the setup.
    """
    for position in board.empty_positions():
        if find_fork(board.apply(position, opponent), opponent) is not None:
            return position
    return None


def find_disguised_trap(board: Board, ai_symbol: str, human_symbol: str) -> Optional[int]:
    """
    Find a move that looks like it concedes a threat but sets up a reply.

    The move must leave the opponent exactly one threat, and after the opponent
    takes it the AI must still have an immediate winning position.
    """
    for position in board.empty_positions():
        after_ai = board.apply(position, ai_symbol)
        threats = find_all_threats(after_ai, human_symbol)
        if len(threats) != 1:
            continue
        after_bait = after_ai.apply(threats[0], human_symbol)
        if find_immediate_win(after_bait, ai_symbol) is not None:
            return position
    return None


class StrategyService:
    """
    Picks heuristic moves for a strategy tag.

    Randomness comes from the injected `rng` so games can be replayed in tests.
    """

    def __init__(self, rng: Optional[random.Random] = None, searcher: Optional[MinimaxService] = None):
        self.rng = rng or random.Random()
        self.searcher = searcher or minimax_service
        self._strategies = {
            'basic': self.basic_move,
            'pattern': self.pattern_move,
            'trap': self.trap_move,
            'defensive': self.defensive_move,
            'psychological': self.psychological_move,
        }

    def get_move(self, strategy: str, board: Board, ai_symbol: str, human_symbol: str,
                 max_depth: int) -> StrategyMove:
        """
        Choose a move with the named strategy.

        Args:
            strategy (str): One of STRATEGIES
            board (Board): Current board, with at least one empty cell
            ai_symbol (str): Mark the AI plays
            human_symbol (str): Mark the opponent plays
            max_depth (int): Full-search depth for strategies that defer to search

        Returns:
            StrategyMove: Chosen position and a short reason

        Raises:
            ValueError: If the strategy tag is unknown
        """
        handler = self._strategies.get(strategy)
        if handler is None:
            raise ValueError(f"Unknown strategy: {strategy}. Must be one of {STRATEGIES}.")
        return handler(board, ai_symbol, human_symbol, max_depth)

    def random_move(self, board: Board) -> int:
        return self.rng.choice(board.empty_positions())

    def strategic_move(self, board: Board) -> StrategyMove:
        """Centre if free, else a random free corner, else any free cell."""
        center = board.center()
        if board.grid[center] is None:
            return StrategyMove(center, 'centre')

        corners = [pos for pos in board.corners() if board.grid[pos] is None]
        if corners:
            return StrategyMove(self.rng.choice(corners), 'corner')

        return StrategyMove(self.random_move(board), 'random')

    def basic_move(self, board, ai_symbol, human_symbol, max_depth):
        return StrategyMove(self.random_move(board), 'basic: random')

    def pattern_move(self, board, ai_symbol, human_symbol, max_depth):
        win = find_immediate_win(board, ai_symbol)
        if win is not None:
            return StrategyMove(win, 'pattern: win')

        block = find_immediate_win(board, human_symbol)
        if block is not None:
            return StrategyMove(block, 'pattern: block')

        fallback = self.strategic_move(board)
        return StrategyMove(fallback.position, f'pattern: {fallback.reasoning}')

    def trap_move(self, board, ai_symbol, human_symbol, max_depth):
        win = find_immediate_win(board, ai_symbol)
        if win is not None:
            return StrategyMove(win, 'trap: win')

        block = find_immediate_win(board, human_symbol)
        if block is not None:
            return StrategyMove(block, 'trap: block')

        fork = find_fork(board, ai_symbol)
        if fork is not None:
            return StrategyMove(fork, 'trap: fork')

        block_fork = find_fork(board, human_symbol)
        if block_fork is not None:
            return StrategyMove(block_fork, 'trap: block fork')

        fallback = self.strategic_move(board)
        return StrategyMove(fallback.position, f'trap: {fallback.reasoning}')

    def defensive_move(self, board, ai_symbol, human_symbol, max_depth):
        win = find_immediate_win(board, ai_symbol)
        if win is not None:
            return StrategyMove(win, 'defensive: win')

        # Blocking outranks everything except our own win.
        block = find_immediate_win(board, human_symbol)
        if block is not None:
            return StrategyMove(block, 'defensive: block')

        fork = find_fork(board, ai_symbol)
        if fork is not None:
            return StrategyMove(fork, 'defensive: fork')

        prevent = find_fork_setup(board, human_symbol)
        if prevent is not None:
            return StrategyMove(prevent, 'defensive: prevent fork')

        result = self.searcher.search(board, DEFENSIVE_SEARCH_DEPTH, ai_symbol, human_symbol)
        if result.move is not None:
            return StrategyMove(result.move, f'defensive: minimax depth {DEFENSIVE_SEARCH_DEPTH}')

        fallback = self.strategic_move(board)
        return StrategyMove(fallback.position, f'defensive: {fallback.reasoning}')

    def psychological_move(self, board, ai_symbol, human_symbol, max_depth):
        move_count = board.move_count()

        if move_count >= OPENING_MOVES and move_count < MIDGAME_MOVES:
            if self.rng.random() < DISGUISED_TRAP_CHANCE:
                trap = find_disguised_trap(board, ai_symbol, human_symbol)
                if trap is not None:
                    logger.debug(f"Playing disguised trap at {trap}")
                    return StrategyMove(trap, 'psychological: disguised trap')

        result = self.searcher.search(board, max_depth, ai_symbol, human_symbol)
        return StrategyMove(result.move, f'psychological: minimax depth {max_depth}')
