"""
Tests for the board model.
"""

import pytest
import numpy as np

from drop_number.engine.board import Board, Position, Tile, reset_board
from drop_number.engine.errors import InvalidBoardState, OutOfBoundsError


@pytest.fixture
def board():
    return Board.from_rows([
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 8, 0, 0],
        [2, 4, 0, 16],
    ])


class TestConstruction:
    """Test board creation and conversion."""

    def test_empty_board(self):
        """Empty board should be all zeros with the requested shape."""
        board = Board.empty(5, 4)

        assert board.shape == (5, 4)
        assert board.count_empty() == 20
        assert board.cells.dtype == np.int64

    def test_reset_board_helper(self):
        """reset_board should return a fresh empty board."""
        board = reset_board(3, 2)
        assert board == [[0, 0], [0, 0], [0, 0]]

    def test_from_rows_roundtrip(self, board):
        """to_list should return the rows the board was built from."""
        rows = board.to_list()
        assert Board.from_rows(rows) == board
        assert all(isinstance(v, int) for r in rows for v in r)

    @pytest.mark.parametrize("rows", [
        [],
        [[]],
        [[0, 0], [0]],
        [[0, 1.5]],
        [[True, 0]],
    ])
    def test_from_rows_rejects_malformed(self, rows):
        """Empty, ragged and non-integer grids are rejected."""
        with pytest.raises(InvalidBoardState):
            Board.from_rows(rows)

    def test_invalid_dimensions(self):
        """Zero-sized boards are rejected."""
        with pytest.raises(InvalidBoardState):
            Board.empty(0, 4)

    def test_coerce_keeps_board(self, board):
        """coerce returns Board instances untouched."""
        assert Board.coerce(board) is board

    def test_coerce_copies_arrays(self):
        """coerce copies numpy input so the caller's array is not shared."""
        arr = np.zeros((2, 2), dtype=np.int32)
        board = Board.coerce(arr)
        board.set(0, 0, 2)
        assert arr[0, 0] == 0


class TestAccess:
    """Test bounds-checked accessors."""

    def test_get_and_set(self, board):
        board.set(0, 0, 32)
        assert board.get(0, 0) == 32
        assert board.get(4, 3) == 16

    @pytest.mark.parametrize("row,col", [(-1, 0), (0, -1), (5, 0), (0, 4)])
    def test_out_of_bounds(self, board, row, col):
        """Negative indices never wrap around."""
        assert not board.is_in_bounds(row, col)
        with pytest.raises(OutOfBoundsError):
            board.get(row, col)
        with pytest.raises(IndexError):
            board.set(row, col, 2)

    def test_set_rejects_negative(self, board):
        with pytest.raises(ValueError):
            board.set(0, 0, -2)

    def test_column_is_copy(self, board):
        col = board.column(1)
        assert col.tolist() == [0, 0, 0, 8, 4]
        col[0] = 99
        assert board.get(0, 1) == 0

    def test_clone_is_independent(self, board):
        """Mutating a clone never touches the original."""
        copy = board.clone()
        copy.set(0, 0, 2)
        assert board.get(0, 0) == 0
        assert copy != board

    def test_reset_clears(self, board):
        board.reset()
        assert board.count_empty() == 20


class TestQueries:
    """Test derived board queries."""

    def test_max_tile(self, board):
        assert board.max_tile() == 16

    def test_is_full(self):
        assert Board.from_rows([[2, 4], [8, 16]]).is_full()
        assert not Board.from_rows([[2, 0], [8, 16]]).is_full()

    def test_is_column_full(self, board):
        assert not board.is_column_full(0)
        assert Board.from_rows([[2], [4]]).is_column_full(0)

    def test_tiles_row_major(self, board):
        """tiles() yields non-empty cells in row-major order."""
        assert list(board.tiles()) == [
            Tile(3, 1, 8),
            Tile(4, 0, 2),
            Tile(4, 1, 4),
            Tile(4, 3, 16),
        ]
        assert Tile(3, 1, 8).position == Position(3, 1)

    def test_render_marks_empty_cells(self, board):
        text = board.render()
        lines = text.splitlines()

        assert len(lines) == 7
        assert "." in lines[0]
        assert "16" in lines[4]
        assert lines[-1].split() == ["C0", "C1", "C2", "C3"]
