"""
Tests for column gravity.
"""

import pytest

from drop_number.engine.board import Board
from drop_number.engine.config_loader import Direction
from drop_number.engine.gravity import (
    apply_gravity,
    apply_gravity_all,
    entry_row,
    landing_row,
    settling_edge,
)


@pytest.fixture
def board():
    return Board.from_rows([
        [2, 0, 0],
        [0, 8, 0],
        [4, 0, 0],
        [0, 16, 0],
        [8, 0, 0],
    ])


class TestApplyGravity:
    """Test packing of a single column."""

    def test_down_packs_toward_last_row(self, board):
        """Tiles move to the bottom keeping their relative order."""
        apply_gravity(board, 0, Direction.DOWN)
        assert board.column(0).tolist() == [0, 0, 2, 4, 8]

    def test_up_packs_toward_row_zero(self, board):
        apply_gravity(board, 0, "up")
        assert board.column(0).tolist() == [2, 4, 8, 0, 0]

    def test_only_target_column_moves(self, board):
        apply_gravity(board, 0)
        assert board.column(1).tolist() == [0, 8, 0, 16, 0]

    def test_empty_and_full_columns_unchanged(self):
        board = Board.from_rows([[2, 0], [4, 0]])
        apply_gravity(board, 0)
        apply_gravity(board, 1)
        assert board == [[2, 0], [4, 0]]

    @pytest.mark.parametrize("column", [-1, 3, 100])
    def test_out_of_range_column_is_noop(self, board, column):
        """A bad column is logged and ignored rather than raised."""
        before = board.clone()
        apply_gravity(board, column)
        assert board == before

    def test_non_board_is_noop(self):
        apply_gravity([[2], [0]], 0)

    def test_unknown_direction_raises(self, board):
        with pytest.raises(ValueError):
            apply_gravity(board, 0, "sideways")

    def test_idempotent(self, board):
        apply_gravity_all(board)
        once = board.clone()
        apply_gravity_all(board)
        assert board == once


class TestApplyGravityAll:
    """Test whole-board settling."""

    def test_all_columns_settle(self, board):
        apply_gravity_all(board, Direction.DOWN)
        assert board == [
            [0, 0, 0],
            [0, 0, 0],
            [2, 0, 0],
            [4, 8, 0],
            [8, 16, 0],
        ]

    def test_all_columns_settle_up(self, board):
        apply_gravity_all(board, Direction.UP)
        assert board == [
            [2, 8, 0],
            [4, 16, 0],
            [8, 0, 0],
            [0, 0, 0],
            [0, 0, 0],
        ]


class TestEdges:
    """Test settling and entry edges and landing cells."""

    def test_edges(self, board):
        assert settling_edge(board, Direction.DOWN) == 4
        assert entry_row(board, Direction.DOWN) == 0
        assert settling_edge(board, Direction.UP) == 0
        assert entry_row(board, Direction.UP) == 4

    def test_landing_row_down(self):
        board = Board.from_rows([[0, 2], [0, 4], [2, 8]])
        assert landing_row(board, 0, Direction.DOWN) == 1
        assert landing_row(board, 1, Direction.DOWN) == -1

    def test_landing_row_up(self):
        board = Board.from_rows([[2, 0], [0, 0], [0, 0]])
        assert landing_row(board, 0, Direction.UP) == 1
        assert landing_row(board, 1, Direction.UP) == 0
