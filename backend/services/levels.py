"""
Level table for the dojo.

Every per-level difference in AI strength lives here as data: the base
parameters, how they scale with the player's wins inside the level, and the
mercy rule for the final level. The difficulty service only interpolates.
"""

from dataclasses import dataclass
from typing import List, Optional

from services.errors import ConfigurationError

# Deepest search an unbounded level gets on each board size. A 3x3 game
# never lasts more than 9 plies.
SEARCH_DEPTH_LIMITS = {3: 9, 4: 8}


@dataclass(frozen=True)
class MercyRule:
    """Chance to soften the AI while the player has no win in the level."""
    chance: float
    optimal_reduction: int
    depth_reduction: int
    min_optimal: int
    min_depth: int


@dataclass(frozen=True)
class Level:
    level: int
    name: str
    difficulty: str
    description: str
    grid_size: int
    required_wins: int
    optimal_play_percentage: int
    ai_strategy: str
    # None means unbounded; the difficulty service maps it to the depth cap
    ai_depth: Optional[int]
    behavior_description: str
    # Values reached on the last win before promotion. None disables scaling.
    optimal_play_cap: Optional[int] = None
    ai_depth_cap: Optional[int] = None
    switch_strategy: Optional[str] = None
    switch_after_wins: Optional[int] = None
    mercy: Optional[MercyRule] = None

    @property
    def scales(self) -> bool:
        return self.optimal_play_cap is not None

    def to_dict(self) -> dict:
        return {
            'level': self.level,
            'name': self.name,
            'difficulty': self.difficulty,
            'description': self.description,
            'gridSize': self.grid_size,
            'requiredWins': self.required_wins,
            'optimalPlayPercentage': self.optimal_play_percentage,
            'aiStrategy': self.ai_strategy,
            'aiDepth': self.ai_depth,
            'behaviorDescription': self.behavior_description,
        }


GAME_LEVELS: List[Level] = [
    Level(
        level=1,
        name="Novice",
        difficulty='easy',
        description="Learn the basics against a beginner AI",
        grid_size=3,
        required_wins=1,
        optimal_play_percentage=30,
        ai_strategy='basic',
        ai_depth=2,
        behavior_description="Makes random moves 70% of the time, optimal moves 30% of the time",
    ),
    Level(
        level=2,
        name="Apprentice",
        difficulty='medium',
        description="Face an AI with pattern recognition",
        grid_size=3,
        required_wins=2,
        optimal_play_percentage=50,
        ai_strategy='pattern',
        ai_depth=4,
        behavior_description="Recognizes basic patterns and plays optimally 50% of the time",
    ),
    Level(
        level=3,
        name="Warrior",
        difficulty='hard',
        description="Battle an AI that sets tactical traps",
        grid_size=3,
        required_wins=3,
        optimal_play_percentage=70,
        ai_strategy='pattern',
        ai_depth=6,
        behavior_description="Starts with pattern play, sets up winning traps once you have a win",
        optimal_play_cap=85,
        ai_depth_cap=9,
        switch_strategy='trap',
        switch_after_wins=1,
    ),
    Level(
        level=4,
        name="Master",
        difficulty='impossible',
        description="Challenge an AI with defensive mastery on a 4x4 grid",
        grid_size=4,
        required_wins=2,
        optimal_play_percentage=85,
        ai_strategy='trap',
        ai_depth=6,
        behavior_description="Sets traps at first, then blocks every threat once you have beaten it",
        optimal_play_cap=92,
        ai_depth_cap=8,
        switch_strategy='defensive',
        switch_after_wins=1,
    ),
    Level(
        level=5,
        name="Grandmaster",
        difficulty='master',
        description="Face an AI with psychological warfare tactics",
        grid_size=4,
        required_wins=1,
        optimal_play_percentage=95,
        ai_strategy='psychological',
        ai_depth=None,
        behavior_description="Uses fake mistakes and mind games while playing optimally 95% of the time",
        mercy=MercyRule(
            chance=0.2,
            optimal_reduction=20,
            depth_reduction=6,
            min_optimal=60,
            min_depth=4,
        ),
    ),
]


def get_level(level: int) -> Level:
    """
    Look up a level by its 1-based number.

    Raises:
        ConfigurationError: If no such level exists
    """
    if not 1 <= level <= len(GAME_LEVELS):
        raise ConfigurationError(f"Unknown level: {level}. Must be between 1 and {len(GAME_LEVELS)}.")
    return GAME_LEVELS[level - 1]
