"""
Gravity
=======

Compacts the non-zero tiles of a column toward the settling edge.
"""

from __future__ import annotations

import logging

import numpy as np

from drop_number.engine.board import Board
from drop_number.engine.config_loader import Direction

logger = logging.getLogger(__name__)


def apply_gravity(board: Board, column: int, direction: "Direction | str" = Direction.DOWN) -> None:
    """
    Pack one column's tiles against the settling edge, keeping their order.

    Mutates ``board`` in place; callers pass a clone. A bad column or a
    malformed board is logged and ignored, since this runs on every chain
    iteration.

    Args:
        board: Board to modify.
        column: Column index.
        direction: "down" packs toward the last row, "up" toward row 0.
    """
    if not isinstance(board, Board):
        logger.warning("apply_gravity: expected Board, got %s; skipping", type(board).__name__)
        return
    if not 0 <= column < board.cols:
        logger.warning("apply_gravity: column %d out of range [0, %d); skipping", column, board.cols)
        return
    direction = Direction.parse(direction)

    cells = board.cells
    col = cells[:, column]
    tiles = col[col != 0]
    if len(tiles) == 0 or len(tiles) == len(col):
        return

    packed = np.zeros_like(col)
    if direction is Direction.DOWN:
        packed[len(col) - len(tiles):] = tiles
    else:
        packed[:len(tiles)] = tiles
    cells[:, column] = packed


def apply_gravity_all(board: Board, direction: "Direction | str" = Direction.DOWN) -> None:
    """Apply gravity to every column of ``board`` in place."""
    if not isinstance(board, Board):
        logger.warning("apply_gravity_all: expected Board, got %s; skipping", type(board).__name__)
        return
    for column in range(board.cols):
        apply_gravity(board, column, direction)


def settling_edge(board: Board, direction: "Direction | str") -> int:
    """Row index tiles settle against."""
    return board.rows - 1 if Direction.parse(direction) is Direction.DOWN else 0


def entry_row(board: Board, direction: "Direction | str") -> int:
    """Row index where new tiles enter a column (opposite the settling edge)."""
    return 0 if Direction.parse(direction) is Direction.DOWN else board.rows - 1


def landing_row(board: Board, column: int, direction: "Direction | str") -> int:
    """
    First empty cell of a column scanning from the settling edge.

    Returns:
        Row index, or -1 if the column is full.
    """
    direction = Direction.parse(direction)
    row = settling_edge(board, direction)
    step = direction.step
    while 0 <= row < board.rows:
        if board.cells[row, column] == 0:
            return row
        row += step
    return -1
