"""
Game Rules
==========

Board validation, game-over detection and win conditions.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence

import numpy as np

from drop_number.engine.board import Board
from drop_number.engine.config_loader import GameConfig, get_config


@dataclass
class TerminationResult:
    """Result of termination check."""
    terminated: bool
    won: bool
    reason: str

    @staticmethod
    def none() -> "TerminationResult":
        return TerminationResult(False, False, "")

    @staticmethod
    def game_over(reason: str) -> "TerminationResult":
        return TerminationResult(True, False, reason)

    @staticmethod
    def victory(reason: str) -> "TerminationResult":
        return TerminationResult(False, True, reason)


def _is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def is_valid_tile(value: int, seed_pool: Sequence[int]) -> bool:
    """True if value is empty or a seed value times a power of two."""
    if value == 0:
        return True
    if value < 0:
        return False
    for seed in seed_pool:
        if value % seed == 0 and _is_power_of_two(value // seed):
            return True
    return False


def validate_board(
    board: Board,
    seed_pool: Sequence[int],
    shape: Optional[tuple] = None
) -> bool:
    """
    Structural board check shared by drop input and output.

    Args:
        board: Board to check.
        seed_pool: Generator seed values.
        shape: Required (rows, cols), or None to accept any shape.

    Returns:
        True if the board is a valid rectangular grid of valid tiles.
    """
    if not isinstance(board, Board):
        return False
    if shape is not None and board.shape != tuple(shape):
        return False

    cells = board.cells
    if (cells < 0).any():
        return False

    # Check each distinct value once
    for value in np.unique(cells):
        if not is_valid_tile(int(value), seed_pool):
            return False
    return True


def has_possible_merge(board: Board) -> bool:
    """True if any two 4-adjacent cells hold the same non-zero value."""
    cells = board.cells
    vertical = (cells[:-1, :] == cells[1:, :]) & (cells[:-1, :] != 0)
    horizontal = (cells[:, :-1] == cells[:, 1:]) & (cells[:, :-1] != 0)
    return bool(vertical.any() or horizontal.any())


def check_game_over(board: Board) -> bool:
    """
    True iff the board has no empty cell and no mergeable adjacent pair.

    Pure: the board is not modified.
    """
    return board.is_full() and not has_possible_merge(board)


def has_won(
    board: Board,
    score: int,
    tile_target: Optional[int] = None,
    score_target: Optional[int] = None
) -> bool:
    """Check the optional tile and score targets (None means no target)."""
    if tile_target is not None and board.max_tile() >= tile_target:
        return True
    if score_target is not None and score >= score_target:
        return True
    return False


def is_valid_move(board: Optional[Board], row: int, col: int) -> bool:
    """True if (row, col) is on the board and empty."""
    if board is None:
        return False
    return board.is_in_bounds(row, col) and board.get(row, col) == 0


def calculate_score(value: Optional[float]) -> float:
    """Points for a tile value; non-positive or missing values score 0."""
    if value is None or value <= 0:
        return 0
    return value


class GameRules:
    """
    Combined interface for all game rules bound to one configuration.
    """

    def __init__(self, config: Optional[GameConfig] = None):
        """
        Initialize game rules.

        Args:
            config: Game configuration. Uses default if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._tile_target = config.rules.tile_target
        self._score_target = config.rules.score_target

    def is_valid_board(self, board: Board) -> bool:
        """Structural validation against the configured shape and seed pool."""
        return validate_board(
            board,
            self._config.seed_pool,
            shape=(self._config.rows, self._config.cols)
        )

    def check_termination(self, board: Board, score: int) -> TerminationResult:
        """
        Check all end conditions after a drop.

        Game over takes precedence; winning does not end the game.

        Args:
            board: Board after the drop settled.
            score: Current total score.

        Returns:
            TerminationResult indicating game state.
        """
        if check_game_over(board):
            return TerminationResult.game_over("no_moves")

        if has_won(board, score, self._tile_target, self._score_target):
            if self._tile_target is not None and board.max_tile() >= self._tile_target:
                return TerminationResult.victory("tile_target")
            return TerminationResult.victory("score_target")

        return TerminationResult.none()
