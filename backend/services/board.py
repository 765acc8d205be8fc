"""
Board Model

A board is a flat list of N*N cells (None for empty, otherwise a player mark)
plus its side length N. Winning lines are all rows, all columns and both
diagonals, so a board of side N has 2N + 2 of them.

Usage:
    board = Board.create([None] * 9, 3)
    board = board.apply(4, 'X')
    board.winner()            # None while the game is in progress
    board.empty_positions()   # [0, 1, 2, 3, 5, 6, 7, 8]
"""

from functools import lru_cache
from typing import List, NamedTuple, Optional, Sequence, Tuple

from services.errors import InvalidStateError

DRAW = 'DRAW'
SUPPORTED_SIZES = (3, 4)


@lru_cache(maxsize=None)
def winning_lines(size: int) -> Tuple[Tuple[int, ...], ...]:
    """
    Get every winning line for a board of the given side length.

    Computed once per size and cached.

    Args:
        size (int): Side length of the board

    Returns:
        tuple: Rows, then columns, then the two diagonals, as index tuples
    """
    rows = [tuple(r * size + c for c in range(size)) for r in range(size)]
    cols = [tuple(r * size + c for r in range(size)) for c in range(size)]
    diagonals = [
        tuple(i * size + i for i in range(size)),
        tuple(i * size + (size - 1 - i) for i in range(size)),
    ]
    return tuple(rows + cols + diagonals)


def find_winner(grid: Sequence[Optional[str]], size: int) -> Optional[str]:
    """
    Check a raw grid for a winner or a draw.

    Does not validate the grid, so the integrity validator can use it on
    whatever a client sent.

    Returns:
        The winning mark, DRAW when the grid is full, or None if in progress
    """
    for line in winning_lines(size):
        first = grid[line[0]] if line[0] < len(grid) else None
        if first is not None and all(
            i < len(grid) and grid[i] == first for i in line
        ):
            return first
    if all(cell is not None for cell in grid):
        return DRAW
    return None


class Board(NamedTuple):
    """An immutable N x N board. Use Board.create() to build a checked one."""

    grid: Tuple[Optional[str], ...]
    size: int

    @classmethod
    def create(cls, cells: Sequence[Optional[str]], size: int) -> 'Board':
        """
        Build a board after checking its shape.

        Raises:
            InvalidStateError: If the size is unsupported or the cell count is wrong
        """
        if size not in SUPPORTED_SIZES:
            raise InvalidStateError(
                f"Unsupported grid size: {size}. Must be one of {SUPPORTED_SIZES}."
            )
        if len(cells) != size * size:
            raise InvalidStateError(
                f"Board has {len(cells)} cells, expected {size * size} for a {size}x{size} grid"
            )
        for index, cell in enumerate(cells):
            if cell is not None and not isinstance(cell, str):
                raise InvalidStateError(f"Cell {index} holds an invalid mark: {cell!r}")
        return cls(tuple(cells), size)

    @classmethod
    def empty(cls, size: int = 3) -> 'Board':
        return cls.create([None] * (size * size), size)

    def empty_positions(self) -> List[int]:
        """Indices of empty cells in ascending order."""
        return [i for i, cell in enumerate(self.grid) if cell is None]

    def winner(self) -> Optional[str]:
        """The winning mark, DRAW, or None while the game is in progress."""
        return find_winner(self.grid, self.size)

    def apply(self, position: int, player: str) -> 'Board':
        """
        Return a new board with `position` taken by `player`.

        The position is assumed to be in range and empty.
        """
        grid = list(self.grid)
        grid[position] = player
        return Board(tuple(grid), self.size)

    def move_count(self) -> int:
        return sum(1 for cell in self.grid if cell is not None)

    def center(self) -> int:
        return (self.size * self.size) // 2

    def corners(self) -> List[int]:
        size = self.size
        return [0, size - 1, size * (size - 1), size * size - 1]
