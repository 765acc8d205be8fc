"""
Difficulty Service

Decides, move by move, whether the AI searches exhaustively or falls back to
its level's heuristic strategy, and builds the AI configuration for a level
from the player's wins inside it.

Usage:
    config = difficulty_service.build_configuration(level=3, current_wins=1)
    ai_move = difficulty_service.choose_move(board, config, ai_symbol='O', human_symbol='X')
    ai_move.position
"""

import logging
import math
import os
import random
from dataclasses import dataclass
from typing import NamedTuple, Optional

from dotenv import load_dotenv

from services.board import Board
from services.errors import ConfigurationError, InvalidStateError
from services.levels import SEARCH_DEPTH_LIMITS, Level, get_level
from services.minimax_service import MinimaxService, check_depth, minimax_service
from services.strategy_service import STRATEGIES, StrategyService

logger = logging.getLogger(__name__)

load_dotenv()

DEFAULT_DEPTH_CAP = 12

STRATEGY_CONFIDENCE = {
    'basic': 0.2,
    'pattern': 0.5,
    'trap': 0.6,
    'defensive': 0.7,
    'psychological': 0.8,
}


@dataclass(frozen=True)
class AIConfiguration:
    """
    Per-game AI settings. Always holds a finite search depth.

    Raises:
        ConfigurationError: On construction, if any field is out of range
    """
    level: int
    optimal_play_percentage: int
    strategy: str
    max_depth: int
    current_wins: int = 0

    def __post_init__(self):
        if self.level < 1:
            raise ConfigurationError(f"Level must be at least 1, got {self.level}")
        if not 0 <= self.optimal_play_percentage <= 100:
            raise ConfigurationError(
                f"Optimal play percentage must be between 0 and 100, got {self.optimal_play_percentage}"
            )
        if self.strategy not in STRATEGIES:
            raise ConfigurationError(f"Unknown strategy: {self.strategy}. Must be one of {STRATEGIES}.")
        if self.current_wins < 0:
            raise ConfigurationError(f"Win count cannot be negative, got {self.current_wins}")
        check_depth(self.max_depth)


class AIMove(NamedTuple):
    position: int
    confidence: float
    reasoning: str


def _lerp(start: float, end: float, progress: float) -> int:
    return int(round(start + (end - start) * progress))


class DifficultyService:
    def __init__(self, rng: Optional[random.Random] = None, searcher: Optional[MinimaxService] = None,
                 strategies: Optional[StrategyService] = None, depth_cap: Optional[int] = None):
        if rng is None:
            seed = os.getenv("DOJO_RANDOM_SEED")
            rng = random.Random(int(seed)) if seed else random.Random()
        self.rng = rng
        self.searcher = searcher or minimax_service
        self.strategies = strategies or StrategyService(rng=self.rng, searcher=self.searcher)

        if depth_cap is None:
            raw_cap = os.getenv("DOJO_SEARCH_DEPTH_CAP", str(DEFAULT_DEPTH_CAP))
            try:
                depth_cap = int(raw_cap)
            except ValueError:
                raise ConfigurationError(f"DOJO_SEARCH_DEPTH_CAP must be an integer, got {raw_cap!r}")
        if depth_cap < 1:
            raise ConfigurationError(f"Search depth cap must be at least 1, got {depth_cap}")
        self.depth_cap = depth_cap

    def resolve_depth(self, depth, grid_size: Optional[int] = None) -> int:
        """
        Map an unbounded depth (None or infinity) to a finite one.

        That is the configured cap, lowered to the board size's search limit
        when one is known. Bounded depths pass through unchanged.
        """
        if depth is None or (isinstance(depth, float) and math.isinf(depth)):
            return min(self.depth_cap, SEARCH_DEPTH_LIMITS.get(grid_size, self.depth_cap))
        return check_depth(depth)

    def level_progress(self, level: Level, current_wins: int) -> float:
        """0.0 with no wins in the level, 1.0 on the last win before promotion."""
        if level.required_wins <= 1:
            return 0.0
        return min(current_wins / (level.required_wins - 1), 1.0)

    def build_configuration(self, level: int, current_wins: int = 0) -> AIConfiguration:
        """
        Build the AI configuration for a level and the player's wins in it.

        Scaling levels interpolate optimal-play percentage and depth between
        their base and cap values, and may switch strategy after enough wins.
        A level with a mercy rule may soften both values while the player has
        not won there yet.

        Args:
            level (int): 1-based level number
            current_wins (int): Player's wins inside this level

        Returns:
            AIConfiguration: Settings for the next game

        Raises:
            ConfigurationError: If the level or win count is invalid
        """
        if current_wins < 0:
            raise ConfigurationError(f"Win count cannot be negative, got {current_wins}")

        level_data = get_level(level)
        optimal = level_data.optimal_play_percentage
        depth = self.resolve_depth(level_data.ai_depth, level_data.grid_size)
        strategy = level_data.ai_strategy

        if level_data.scales:
            progress = self.level_progress(level_data, current_wins)
            optimal = _lerp(optimal, level_data.optimal_play_cap, progress)
            depth = _lerp(depth, self.resolve_depth(level_data.ai_depth_cap, level_data.grid_size), progress)
            if level_data.switch_strategy and current_wins >= level_data.switch_after_wins:
                strategy = level_data.switch_strategy

        mercy = level_data.mercy
        if mercy is not None and current_wins == 0 and self.rng.random() < mercy.chance:
            optimal = max(mercy.min_optimal, optimal - mercy.optimal_reduction)
            depth = max(mercy.min_depth, depth - mercy.depth_reduction)
            logger.debug(f"Mercy rule applied on level {level}: optimal {optimal}%, depth {depth}")

        return AIConfiguration(
            level=level,
            optimal_play_percentage=optimal,
            strategy=strategy,
            max_depth=depth,
            current_wins=current_wins,
        )

    def choose_move(self, board: Board, config: AIConfiguration, ai_symbol: str, human_symbol: str) -> AIMove:
        """
        Pick the AI's next move.

        Rolls against the configuration's optimal-play percentage: under it,
        run a full search at the configured depth; otherwise use the
        configured heuristic strategy.

        Args:
            board (Board): Current board
            config (AIConfiguration): Settings for this game
            ai_symbol (str): Mark the AI plays
            human_symbol (str): Mark the opponent plays

        Returns:
            AIMove: Position plus an informational confidence and reason

        Raises:
            InvalidStateError: If the board is finished or holds marks other than the two players'
        """
        if ai_symbol == human_symbol:
            raise InvalidStateError("AI and human symbols must be different")
        unknown = {cell for cell in board.grid if cell is not None} - {ai_symbol, human_symbol}
        if unknown:
            raise InvalidStateError(f"Board holds marks other than {ai_symbol} and {human_symbol}: {sorted(unknown)}")
        if not board.empty_positions():
            raise InvalidStateError("No empty cells left for the AI to play")
        if board.winner() is not None:
            raise InvalidStateError("Game is already over")

        roll = self.rng.random() * 100
        if roll < config.optimal_play_percentage:
            result = self.searcher.search(board, config.max_depth, ai_symbol, human_symbol)
            if result.move is None:
                position = self.strategies.random_move(board)
                logger.debug(f"Minimax returned no move, playing random {position}")
                return AIMove(position, 0.0, 'random fallback')

            confidence = 1.0 if result.score > 0 else (0.9 if result.score == 0 else 0.5)
            logger.debug(f"Level {config.level}: optimal move {result.move} (score {result.score})")
            return AIMove(result.move, confidence, f'minimax depth {config.max_depth}')

        move = self.strategies.get_move(config.strategy, board, ai_symbol, human_symbol, config.max_depth)
        logger.debug(f"Level {config.level}: {move.reasoning} -> {move.position}")
        return AIMove(move.position, STRATEGY_CONFIDENCE[config.strategy], move.reasoning)


# Create a singleton instance
difficulty_service = DifficultyService()
