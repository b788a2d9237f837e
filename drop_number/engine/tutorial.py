"""
Tutorial Steps
==============

Pure lookups over a caller-supplied tutorial step table. Nothing here
holds state; the session or UI decides which step is active.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from drop_number.engine.board import Board
from drop_number.engine.config_loader import Direction
from drop_number.engine.gravity import settling_edge


@dataclass(frozen=True)
class TutorialStep:
    """
    One scripted tutorial drop.

    ``tiles`` are ``(depth, value)`` pairs stacked in the allowed lane,
    depth 0 being the cell on the settling edge. ``lane`` None means the
    center lane of the board.
    """
    step: int
    tiles: Tuple[Tuple[int, int], ...]
    shooter_value: int
    expected_score: int
    expected_tiles: Tuple[int, ...]
    step_text: str = ""
    success_text: str = ""
    lane: Optional[int] = None


# Expected results are what the engine produces with the default scoring
# config (combo 1.5, chain bonus 25).
DEFAULT_STEPS: Mapping[int, TutorialStep] = MappingProxyType({
    # 2 + 2 = 4
    1: TutorialStep(
        step=1,
        tiles=((0, 2),),
        shooter_value=2,
        expected_score=4,
        expected_tiles=(4,),
        step_text="Tap to drop!",
        success_text="Very nice!\nTry another one",
    ),
    # 2 + 2 = 4, then 4 + 4 = 8
    2: TutorialStep(
        step=2,
        tiles=((0, 4), (1, 2)),
        shooter_value=2,
        expected_score=12,
        expected_tiles=(8,),
        step_text="Drop here!",
        success_text="Very nice!\nTry another one",
    ),
    # 2 + 2 = 4, 4 + 4 = 8, 8 + 8 = 16
    3: TutorialStep(
        step=3,
        tiles=((0, 8), (1, 4), (2, 2)),
        shooter_value=2,
        expected_score=86,
        expected_tiles=(16,),
        step_text="Drop here!",
        success_text="Amazing!",
    ),
})


def center_lane(cols: int) -> int:
    """Middle column of a board with ``cols`` columns."""
    return cols // 2


def get_step(table: Mapping[int, TutorialStep], step: int) -> TutorialStep:
    """
    Look up a step definition.

    Raises:
        ValueError: If the table has no such step.
    """
    try:
        return table[step]
    except KeyError:
        raise ValueError(f"Invalid tutorial step: {step}") from None


def allowed_lane(definition: TutorialStep, cols: int) -> int:
    """Column the player must drop into for this step."""
    if definition.lane is None:
        return center_lane(cols)
    return definition.lane


def build_step_board(
    table: Mapping[int, TutorialStep],
    step: int,
    rows: int,
    cols: int,
    direction: "Direction | str" = Direction.DOWN
) -> Board:
    """
    Board a tutorial step starts from.

    Raises:
        ValueError: Unknown step, or the step's tiles do not fit the board.
    """
    definition = get_step(table, step)
    direction = Direction.parse(direction)
    lane = allowed_lane(definition, cols)

    board = Board.empty(rows, cols)
    edge = settling_edge(board, direction)
    for depth, value in definition.tiles:
        row = edge + direction.step * depth
        if not board.is_in_bounds(row, lane):
            raise ValueError(f"Tutorial step {step} does not fit a {rows}x{cols} board")
        board.set(row, lane, value)
    return board


def is_valid_tutorial_move(
    table: Mapping[int, TutorialStep],
    step: int,
    lane: int,
    cols: int
) -> bool:
    """True if ``lane`` is the lane this step allows."""
    return lane == allowed_lane(get_step(table, step), cols)


def validate_step_state(
    table: Mapping[int, TutorialStep],
    step: int,
    board: Board,
    score: int
) -> bool:
    """
    Check a board and score against a step's expected result.

    The score must reach the expected score and every expected tile value
    must be present on the board.
    """
    definition = get_step(table, step)
    if score < definition.expected_score:
        return False
    present = {tile.value for tile in Board.coerce(board).tiles()}
    return all(value in present for value in definition.expected_tiles)
