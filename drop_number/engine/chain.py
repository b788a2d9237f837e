"""
Chain Reactions
===============

Repeats gravity and merge passes after a drop until the board is stable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from drop_number.engine.board import Board
from drop_number.engine.config_loader import Direction
from drop_number.engine.gravity import apply_gravity_all
from drop_number.engine.merge_system import MergeEvent, find_first_mergeable, merge_connected_tiles
from drop_number.engine.scoring import ScoreCalculator

logger = logging.getLogger(__name__)

DEFAULT_ITERATION_CAP = 100


@dataclass(frozen=True)
class ChainStep:
    """One chained merge, reported to step callbacks."""
    iteration: int
    event: MergeEvent
    points: int
    board: Board  # read-only snapshot after the merge


@dataclass
class ChainResult:
    """Aggregate of every chained merge triggered by one drop."""
    total_score: int = 0
    chain_reaction_count: int = 0
    iterations: int = 0
    capped: bool = False
    events: List[MergeEvent] = field(default_factory=list)


def _snapshot(board: Board) -> Board:
    snap = board.clone()
    snap.cells.setflags(write=False)
    return snap


def process_chain_reactions(
    board: Board,
    direction: "Direction | str" = Direction.DOWN,
    scorer: Optional[ScoreCalculator] = None,
    iteration_cap: int = DEFAULT_ITERATION_CAP,
    on_step: Optional[Callable[[ChainStep], None]] = None
) -> ChainResult:
    """
    Settle and merge until no component of two or more tiles remains.

    Each iteration applies gravity to all columns, then merges the first
    mergeable component found in row-major order and starts over. At most
    one merge happens per iteration, so later merges always see a freshly
    settled board.

    Args:
        board: Board to modify in place (callers pass a clone).
        direction: Gravity direction.
        scorer: Score calculator; merges after the first iteration get the
            combo multiplier. Uses the default config if None.
        iteration_cap: Hard bound on passes. Reaching it is logged and
            reported through ``ChainResult.capped``.
        on_step: Optional callback invoked after each merge, in order.

    Returns:
        ChainResult with the floored total score.
    """
    if scorer is None:
        scorer = ScoreCalculator()
    direction = Direction.parse(direction)
    result = ChainResult()

    if not isinstance(board, Board):
        logger.warning("process_chain_reactions: expected Board, got %s", type(board).__name__)
        return result

    active = True
    while active and result.iterations < iteration_cap:
        active = False
        result.iterations += 1

        apply_gravity_all(board, direction)

        seed = find_first_mergeable(board)
        if seed is None:
            break

        event = merge_connected_tiles(board, seed.row, seed.col, direction=direction)
        if not event.merged:
            # Corrupted board, or a component too large for one cell
            logger.warning("chain: seed %s did not merge; stopping", tuple(seed))
            break

        points = scorer.merge_score(event, result.iterations)
        result.total_score += points
        result.chain_reaction_count += 1
        result.events.append(event)
        active = True

        if on_step is not None:
            on_step(ChainStep(result.iterations, event, points, _snapshot(board)))

    if active and result.iterations >= iteration_cap:
        # The last pass merged, so the board may still hold mergeable tiles
        apply_gravity_all(board, direction)
        if find_first_mergeable(board) is not None:
            result.capped = True
            logger.warning(
                "chain reaction hit iteration cap %d after %d merges",
                iteration_cap, result.chain_reaction_count
            )

    return result
