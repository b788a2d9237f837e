"""
Merge System
============

Connected-component detection and merge resolution.

A component is the maximal 4-connected group of cells sharing one
non-zero value. Collapsing a component of n tiles of value v produces a
single tile of value v * 2**(n - 1).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from drop_number.engine.board import Board, Position, Tile
from drop_number.engine.config_loader import Direction

logger = logging.getLogger(__name__)

# Largest value an int64 board cell can hold
MAX_TILE_VALUE = int(np.iinfo(np.int64).max)

# up, down, left, right
_NEIGHBORS: Tuple[Tuple[int, int], ...] = ((-1, 0), (1, 0), (0, -1), (0, 1))


@dataclass
class MergeEvent:
    """Result of a single merge resolution."""
    merged: bool
    score: int = 0
    row: Optional[int] = None
    col: Optional[int] = None
    original_value: int = 0
    new_value: int = 0
    tiles_merged: int = 0
    sources: Tuple[Position, ...] = field(default_factory=tuple)

    @staticmethod
    def no_merge(tiles_found: int = 0, value: int = 0) -> "MergeEvent":
        return MergeEvent(merged=False, tiles_merged=tiles_found, original_value=value)

    @property
    def position(self) -> Optional[Position]:
        if not self.merged:
            return None
        return Position(self.row, self.col)

    def __repr__(self) -> str:
        if not self.merged:
            return "MergeEvent(no_merge)"
        return (f"MergeEvent({self.tiles_merged}x{self.original_value}->{self.new_value} "
                f"at ({self.row}, {self.col}))")


def merged_value(value: int, count: int) -> int:
    """Value of the tile produced by merging ``count`` tiles of ``value``."""
    return value * (2 ** (count - 1))


def find_connected_tiles(board: Board, row: int, col: int) -> List[Tile]:
    """
    Find the maximal 4-connected group of equal tiles containing (row, col).

    Iterative flood fill with an explicit stack, so component size is not
    bounded by recursion depth.

    Args:
        board: Board to search (not modified).
        row: Seed row.
        col: Seed column.

    Returns:
        Tiles in visit order, seed first. Empty if the seed is empty or
        out of bounds.
    """
    if not isinstance(board, Board) or not board.is_in_bounds(row, col):
        return []

    cells = board.cells
    target = int(cells[row, col])
    if target == 0:
        return []

    rows, cols = board.shape
    visited = np.zeros((rows, cols), dtype=bool)
    visited[row, col] = True
    stack = [(row, col)]
    tiles: List[Tile] = []

    while stack:
        r, c = stack.pop()
        tiles.append(Tile(r, c, target))
        for dr, dc in _NEIGHBORS:
            nr, nc = r + dr, c + dc
            if 0 <= nr < rows and 0 <= nc < cols and not visited[nr, nc] and cells[nr, nc] == target:
                visited[nr, nc] = True
                stack.append((nr, nc))

    return tiles


def _middle(tiles: List[Tile], key) -> Tile:
    return sorted(tiles, key=key)[1]


def choose_merge_position(
    tiles: List[Tile],
    preferred: Optional[Position] = None,
    direction: Direction = Direction.DOWN
) -> Position:
    """
    Pick where a component's merged tile lands.

    Priority:
        1. Two tiles and a preferred position: the preferred position.
        2. Preferred position inside the component: the preferred position.
        3. Three tiles: the middle of a straight line, else the tile
           nearest the centroid (Manhattan distance).
        4. Otherwise: the tile closest to the settling edge, ties broken
           by the greatest column.

    Up gravity mirrors down gravity on purpose: rule 4 picks the smallest
    row, and an occupied target slides toward higher rows. It does not
    keep the greatest-row choice of a bottom-settling board.

    Args:
        tiles: Component tiles (at least two).
        preferred: Caller-preferred position, e.g. the dropped tile.
        direction: Gravity direction defining the settling edge.

    Returns:
        Target position.
    """
    if preferred is not None:
        if len(tiles) == 2:
            return Position(*preferred)
        if any(t.row == preferred[0] and t.col == preferred[1] for t in tiles):
            return Position(*preferred)

    if len(tiles) == 3:
        if all(t.row == tiles[0].row for t in tiles):
            middle = _middle(tiles, key=lambda t: t.col)
            return middle.position
        if all(t.col == tiles[0].col for t in tiles):
            middle = _middle(tiles, key=lambda t: t.row)
            return middle.position

        avg_row = round(sum(t.row for t in tiles) / 3)
        avg_col = round(sum(t.col for t in tiles) / 3)
        closest = min(tiles, key=lambda t: abs(avg_row - t.row) + abs(avg_col - t.col))
        return closest.position

    direction = Direction.parse(direction)
    if direction is Direction.DOWN:
        best = max(tiles, key=lambda t: (t.row, t.col))
    else:
        best = max(tiles, key=lambda t: (-t.row, t.col))
    return best.position


def _place(board: Board, target: Position, value: int, direction: Direction) -> Position:
    """
    Write ``value`` at ``target``, sliding away from the settling edge past
    occupied cells so an unrelated tile is never overwritten.
    """
    cells = board.cells
    row, col = target
    step = direction.step
    r = row
    while 0 <= r < board.rows and cells[r, col] != 0:
        r += step
    if 0 <= r < board.rows:
        cells[r, col] = value
        return Position(r, col)

    # Column has no room beyond target; target itself was cleared as a source
    logger.warning("merge placement: no empty cell from (%d, %d); overwriting target", row, col)
    cells[row, col] = value
    return Position(row, col)


def merge_connected_tiles(
    board: Board,
    row: int,
    col: int,
    preferred_row: Optional[int] = None,
    preferred_col: Optional[int] = None,
    direction: "Direction | str" = Direction.DOWN
) -> MergeEvent:
    """
    Collapse the component at (row, col) into one tile, in place.

    Args:
        board: Board to modify (callers pass a clone).
        row: Seed row.
        col: Seed column.
        preferred_row: Optional preferred result row.
        preferred_col: Optional preferred result column.
        direction: Gravity direction, used for placement.

    Returns:
        MergeEvent; ``merged`` is False for empty seeds and lone tiles.
    """
    if not isinstance(board, Board):
        logger.warning("merge_connected_tiles: expected Board, got %s", type(board).__name__)
        return MergeEvent.no_merge()
    if not board.is_in_bounds(row, col):
        logger.warning("merge_connected_tiles: seed (%d, %d) out of bounds", row, col)
        return MergeEvent.no_merge()

    direction = Direction.parse(direction)
    tiles = find_connected_tiles(board, row, col)
    if len(tiles) < 2:
        return MergeEvent.no_merge(len(tiles), tiles[0].value if tiles else 0)

    value = tiles[0].value
    count = len(tiles)
    new_value = merged_value(value, count)
    if new_value > MAX_TILE_VALUE:
        # Checked before any source is cleared so the board stays intact
        logger.warning(
            "merge_connected_tiles: %d x %d overflows the tile grid; skipping",
            count, value
        )
        return MergeEvent.no_merge(count, value)

    preferred = None
    if preferred_row is not None and preferred_col is not None:
        if board.is_in_bounds(preferred_row, preferred_col):
            preferred = Position(preferred_row, preferred_col)
        else:
            logger.warning(
                "merge_connected_tiles: preferred (%d, %d) out of bounds; ignoring",
                preferred_row, preferred_col
            )

    target = choose_merge_position(tiles, preferred, direction)

    cells = board.cells
    for t in tiles:
        cells[t.row, t.col] = 0

    final = _place(board, target, new_value, direction)

    logger.debug("merged %d x %d -> %d at %s", count, value, new_value, tuple(final))

    return MergeEvent(
        merged=True,
        score=new_value,
        row=final.row,
        col=final.col,
        original_value=value,
        new_value=new_value,
        tiles_merged=count,
        sources=tuple(t.position for t in tiles)
    )


def find_first_mergeable(board: Board) -> Optional[Position]:
    """Row-major scan for the first cell whose component has two or more tiles."""
    rows, cols = board.shape
    cells = board.cells
    for r in range(rows):
        for c in range(cols):
            v = cells[r, c]
            if v == 0:
                continue
            # Cheap neighbor test before a full flood fill
            if ((r > 0 and cells[r - 1, c] == v) or (r + 1 < rows and cells[r + 1, c] == v)
                    or (c > 0 and cells[r, c - 1] == v) or (c + 1 < cols and cells[r, c + 1] == v)):
                return Position(r, c)
    return None
