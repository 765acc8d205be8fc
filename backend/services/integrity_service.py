"""
Integrity Service

Checks a finished game's recorded move history against its final board and
reports what looks wrong. Nothing here raises on bad history content: every
problem becomes a violation or a suspicious-activity entry with a risk-score
contribution, so callers can see how a game is inconsistent and not only that
it is.

Hard violations (make the game invalid):
    move count mismatch              +50
    turn out of order                +30 per move
    position out of range            +25 per move
    duplicate position               +40 per move
    board/replay mismatch            +35 per cell
    impossible mark balance          +45
    unsupported grid size            +50

Suspicious activity (score only):
    move faster than 100 ms          +10 per move
    identical timing on every move   +20
    play continued after a win       +15

The risk score is capped at 100. Turning it into accept/reject is up to the
caller.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Union

from services.board import DRAW, SUPPORTED_SIZES, find_winner

logger = logging.getLogger(__name__)

MAX_RISK_SCORE = 100
FAST_MOVE_MS = 100
TIMING_BUCKET_MS = 100
UNIFORM_TIMING_MIN_DELTAS = 3


@dataclass(frozen=True)
class MoveRecord:
    player: str
    position: int
    timestamp: Optional[Union[datetime, float]] = None
    move_number: int = 0
    client_id: str = ''


@dataclass
class IntegrityReport:
    is_valid: bool = True
    violations: List[str] = field(default_factory=list)
    suspicious_activity: List[str] = field(default_factory=list)
    risk_score: int = 0

    def violation(self, message: str, risk: int):
        self.violations.append(message)
        self.is_valid = False
        self.risk_score += risk

    def suspicious(self, message: str, risk: int):
        self.suspicious_activity.append(message)
        self.risk_score += risk

    def to_dict(self) -> dict:
        return {
            'isValid': self.is_valid,
            'violations': list(self.violations),
            'suspiciousActivity': list(self.suspicious_activity),
            'riskScore': self.risk_score,
        }


def _to_millis(timestamp) -> Optional[float]:
    if timestamp is None:
        return None
    if isinstance(timestamp, datetime):
        return timestamp.timestamp() * 1000
    return float(timestamp)


class IntegrityService:
    """Validates recorded games. Stateless; one instance can be shared."""

    def validate_game_integrity(
        self,
        grid: Sequence[Optional[str]],
        move_history: Sequence[MoveRecord],
        grid_size: int,
        first_player: str = 'X',
        second_player: str = 'O',
    ) -> IntegrityReport:
        """
        Validate a finished game.

        Args:
            grid (list): Final board as a flat list (None for empty cells)
            move_history (list): MoveRecords in the order they were played
            grid_size (int): Side length of the board
            first_player (str): Mark that moves first
            second_player (str): Mark that moves second

        Returns:
            IntegrityReport: Violations, suspicious activity and risk score
        """
        report = IntegrityReport()
        grid = list(grid)

        board_moves = sum(1 for cell in grid if cell is not None)
        if board_moves != len(move_history):
            report.violation(
                f"Move count mismatch: board has {board_moves} moves, history has {len(move_history)}",
                50,
            )

        for i, move in enumerate(move_history):
            expected = first_player if i % 2 == 0 else second_player
            if move.player != expected:
                report.violation(
                    f"Invalid player sequence at move {i + 1}: expected {expected}, got {move.player}",
                    30,
                )

        # An unknown size has no board to replay against
        if grid_size not in SUPPORTED_SIZES:
            report.violation(f"Unsupported grid size {grid_size}", 50)
            self.detect_duplicates(move_history, report)
            self.detect_timing_anomalies(move_history, report)
            return self.finish(report)

        cell_count = grid_size * grid_size
        for move in move_history:
            if not 0 <= move.position < cell_count:
                report.violation(f"Invalid position {move.position} in move {move.move_number}", 25)
        self.detect_duplicates(move_history, report)

        reconstructed = [None] * cell_count
        for move in move_history:
            if 0 <= move.position < cell_count:
                reconstructed[move.position] = move.player

        for i in range(max(len(grid), cell_count)):
            actual = grid[i] if i < len(grid) else None
            expected = reconstructed[i] if i < cell_count else None
            if actual != expected:
                report.violation(f"Grid mismatch at position {i}: expected {expected}, got {actual}", 35)

        self.detect_timing_anomalies(move_history, report)
        self.detect_impossible_states(grid, grid_size, report, first_player, second_player)
        return self.finish(report)

    def finish(self, report: IntegrityReport) -> IntegrityReport:
        report.risk_score = min(report.risk_score, MAX_RISK_SCORE)
        if not report.is_valid:
            logger.info(f"Integrity check failed: {len(report.violations)} violations, risk {report.risk_score}")
        return report

    def detect_duplicates(self, move_history: Sequence[MoveRecord], report: IntegrityReport):
        used_positions = set()
        for move in move_history:
            if move.position in used_positions:
                report.violation(f"Duplicate move at position {move.position}", 40)
            used_positions.add(move.position)

    def detect_timing_anomalies(self, move_history: Sequence[MoveRecord], report: IntegrityReport):
        """Flag moves under 100 ms apart and perfectly regular timing."""
        if len(move_history) < 2:
            return

        times = [_to_millis(move.timestamp) for move in move_history]
        deltas = [
            later - earlier
            for earlier, later in zip(times, times[1:])
            if earlier is not None and later is not None
        ]
        if not deltas:
            return

        fast_moves = sum(1 for delta in deltas if delta < FAST_MOVE_MS)
        if fast_moves:
            report.suspicious(
                f"{fast_moves} impossibly fast moves detected (< {FAST_MOVE_MS}ms)",
                fast_moves * 10,
            )

        buckets = {round(delta / TIMING_BUCKET_MS) * TIMING_BUCKET_MS for delta in deltas}
        if len(deltas) >= UNIFORM_TIMING_MIN_DELTAS and len(buckets) == 1:
            report.suspicious('Identical timing pattern suggests automated play', 20)

    def detect_impossible_states(self, grid, grid_size, report, first_player='X', second_player='O'):
        """Check the mark balance and whether play went on past a win."""
        first_count = sum(1 for cell in grid if cell == first_player)
        second_count = sum(1 for cell in grid if cell == second_player)

        # The first player always moves first
        if first_count < second_count or first_count > second_count + 1:
            report.violation(
                f"Invalid move count: {first_player}={first_count}, {second_player}={second_count}",
                45,
            )

        if grid_size < 1 or len(grid) < grid_size * grid_size:
            return

        winner = find_winner(grid, grid_size)
        if winner is None or winner == DRAW:
            return

        winner_count = sum(1 for cell in grid if cell == winner)
        other_count = second_count if winner == first_player else first_count
        if winner_count > grid_size and winner_count - other_count > 1:
            report.suspicious('Game may have continued after win condition was met', 15)


def detect_account_sharing(move_history: Sequence[MoveRecord]) -> List[str]:
    """Warn when one game's moves came from more than one client."""
    client_ids = list(dict.fromkeys(move.client_id for move in move_history if move.client_id))
    if len(client_ids) > 1:
        return [f"Multiple client IDs detected: {', '.join(client_ids)}"]
    return []


# Create a singleton instance
integrity_service = IntegrityService()
