"""
Drop Engine
===========

Entry point of the simulation: one drop, settled to a stable board.

Sequence for a successful drop:
    1. Clone the board and place the value at the column's landing cell.
    2. Apply gravity to every column.
    3. Merge the dropped tile's component (a two-tile merge stays at the
       dropped tile's position).
    4. Run chain reactions until stable.
    5. Add the chain completion bonus and validate the result.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

import numpy as np

from drop_number.engine.board import Board, Position
from drop_number.engine.chain import ChainResult, ChainStep, process_chain_reactions
from drop_number.engine.config_loader import Direction, GameConfig, get_config
from drop_number.engine.errors import InvalidBoardState, InvalidColumn, InvalidValue
from drop_number.engine.gravity import apply_gravity_all, entry_row, landing_row, settling_edge
from drop_number.engine.merge_system import (
    MAX_TILE_VALUE,
    MergeEvent,
    find_connected_tiles,
    merge_connected_tiles,
)
from drop_number.engine.rules import is_valid_tile, validate_board
from drop_number.engine.scoring import ScoreCalculator

logger = logging.getLogger(__name__)

# DropOutcome.reason values
REASON_COLUMN_FULL = "column_full"
REASON_COLUMN_FULL_NO_MERGE = "column_full_no_merge"
REASON_CORRUPTED = "corrupted_state"


@dataclass
class DropOutcome:
    """Result of one drop. ``board`` is always a fresh object."""
    board: Board
    score: int
    success: bool
    chain_reactions: int = 0
    iterations: int = 0
    reason: str = ""
    capped: bool = False
    landing: Optional[Position] = None
    events: List[MergeEvent] = field(default_factory=list)

    @staticmethod
    def rejected(board: Board, reason: str) -> "DropOutcome":
        return DropOutcome(board=board, score=0, success=False, reason=reason)

    @property
    def merges(self) -> int:
        """Merges performed, including the landing merge."""
        return len(self.events)


class DropEngine:
    """
    Stateless drop simulator bound to a configuration.

    Holds no board between calls; every call clones its input.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        on_step: Optional[Callable[[ChainStep], None]] = None
    ):
        """
        Args:
            config: Game configuration. Uses default if None.
            on_step: Optional callback receiving each chained merge.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._direction = config.gravity
        self._scorer = ScoreCalculator(config)
        self._iteration_cap = config.chain.iteration_cap
        self._full_column_merge = config.rules.full_column_merge
        self._on_step = on_step

    @property
    def config(self) -> GameConfig:
        return self._config

    @property
    def direction(self) -> Direction:
        return self._direction

    @property
    def scorer(self) -> ScoreCalculator:
        return self._scorer

    # Validation -------------------------------------------------------------

    def _coerce_board(self, board) -> Board:
        try:
            board = Board.coerce(board)
        except (TypeError, ValueError) as e:
            raise InvalidBoardState(f"Invalid board: {e}") from e
        if not validate_board(board, self._config.seed_pool):
            raise InvalidBoardState("Invalid board: cells must be empty or seed values times a power of two")
        return board

    def _check_value(self, value) -> int:
        if isinstance(value, bool) or not isinstance(value, (int, np.integer)) or value <= 0:
            raise InvalidValue(value)
        value = int(value)
        # Seed value times a power of two that fits a board cell
        if value > MAX_TILE_VALUE or not is_valid_tile(value, self._config.seed_pool):
            raise InvalidValue(value)
        return value

    # Public API -------------------------------------------------------------

    def drop_tile(
        self,
        board: "Board | Sequence[Sequence[int]]",
        value: int,
        column: int
    ) -> DropOutcome:
        """
        Drop ``value`` into ``column`` and resolve every resulting merge.

        Args:
            board: Current board (not modified). Nested lists are accepted.
            value: Positive tile value.
            column: Target column.

        Returns:
            DropOutcome. A full column gives ``success=False`` with the
            original board contents.

        Raises:
            InvalidBoardState: Board is empty, ragged or holds invalid tiles.
            InvalidColumn: Column outside the board.
            InvalidValue: Value is not a positive seed value times a power
                of two.
        """
        original = self._coerce_board(board)
        if isinstance(column, bool) or not isinstance(column, (int, np.integer)) \
                or not 0 <= column < original.cols:
            raise InvalidColumn(column, original.cols)
        column = int(column)
        value = self._check_value(value)

        work = original.clone()
        row = landing_row(work, column, self._direction)
        if row == -1:
            if self._full_column_merge:
                return self._drop_into_full_column(original, work, value, column)
            logger.debug("drop rejected: column %d is full", column)
            return DropOutcome.rejected(original.clone(), REASON_COLUMN_FULL)

        # Place and settle
        work.cells[row, column] = value
        settled = self._settled_row(work, column, row)
        apply_gravity_all(work, self._direction)

        events: List[MergeEvent] = []
        total = 0

        # Landing merge: a pair resolves onto the dropped tile
        if len(find_connected_tiles(work, settled, column)) == 2:
            initial = merge_connected_tiles(
                work, settled, column, settled, column, direction=self._direction
            )
        else:
            initial = merge_connected_tiles(work, settled, column, direction=self._direction)
        if initial.merged:
            total += self._scorer.merge_score(initial)
            events.append(initial)

        return self._finish(original, work, total, events, Position(settled, column))

    # Internals --------------------------------------------------------------

    def _settled_row(self, board: Board, column: int, row: int) -> int:
        """Row a tile placed at ``row`` occupies once its column settles."""
        edge = settling_edge(board, self._direction)
        step = self._direction.step
        col = board.cells[:, column]
        lo, hi = sorted((edge, row))
        # Tiles between the edge and the landing cell stay in front of it
        ahead = int(np.count_nonzero(col[lo:hi + 1])) - 1
        return edge + step * ahead

    def _drop_into_full_column(
        self,
        original: Board,
        work: Board,
        value: int,
        column: int
    ) -> DropOutcome:
        """
        Full-column merge rule: the dropped value merges directly with the
        column's entry tile or one of its neighbors.
        """
        cells = work.cells
        entry = entry_row(work, self._direction)
        # Neighbor toward the settling edge, then left, then right
        candidates = [
            (entry - self._direction.step, column),
            (entry, column - 1),
            (entry, column + 1),
        ]

        new_value = value * 2
        if new_value > MAX_TILE_VALUE:
            logger.warning("full-column merge of %d overflows the tile grid; rejecting", value)
            return DropOutcome.rejected(original.clone(), REASON_COLUMN_FULL_NO_MERGE)
        if cells[entry, column] == value:
            cells[entry, column] = new_value
            sources = (Position(entry, column),)
        else:
            match = next(
                ((r, c) for r, c in candidates
                 if work.is_in_bounds(r, c) and cells[r, c] == value),
                None
            )
            if match is None:
                logger.debug("drop rejected: column %d is full and nothing matches %d", column, value)
                return DropOutcome.rejected(original.clone(), REASON_COLUMN_FULL_NO_MERGE)
            cells[match] = 0
            cells[entry, column] = new_value
            sources = (Position(*match),)

        event = MergeEvent(
            merged=True,
            score=new_value,
            row=entry,
            col=column,
            original_value=value,
            new_value=new_value,
            tiles_merged=2,
            sources=sources
        )
        apply_gravity_all(work, self._direction)
        return self._finish(
            original, work, self._scorer.merge_score(event), [event], Position(entry, column)
        )

    def _finish(
        self,
        original: Board,
        work: Board,
        total: int,
        events: List[MergeEvent],
        landing: Position
    ) -> DropOutcome:
        """Run chain reactions, apply the completion bonus and validate."""
        chain: ChainResult = process_chain_reactions(
            work,
            direction=self._direction,
            scorer=self._scorer,
            iteration_cap=self._iteration_cap,
            on_step=self._on_step
        )
        total += chain.total_score
        total += self._scorer.completion_bonus(chain.chain_reaction_count)
        events.extend(chain.events)

        if not validate_board(work, self._config.seed_pool, shape=original.shape):
            logger.warning("drop produced an invalid board; discarding result")
            return DropOutcome.rejected(original.clone(), REASON_CORRUPTED)

        return DropOutcome(
            board=work,
            score=math.floor(total),
            success=True,
            chain_reactions=chain.chain_reaction_count,
            iterations=chain.iterations,
            capped=chain.capped,
            landing=landing,
            events=events
        )


def drop_tile(
    board: "Board | Sequence[Sequence[int]]",
    value: int,
    column: int,
    config: Optional[GameConfig] = None
) -> DropOutcome:
    """Drop a tile using a one-off DropEngine. See DropEngine.drop_tile."""
    return DropEngine(config).drop_tile(board, value, column)
