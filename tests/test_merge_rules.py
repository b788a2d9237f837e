"""
Tests for connected-component detection and merge resolution.
"""

import pytest

from drop_number.engine.board import Board, Position, Tile
from drop_number.engine.config_loader import Direction
from drop_number.engine.merge_system import (
    MergeEvent,
    choose_merge_position,
    find_connected_tiles,
    find_first_mergeable,
    merge_connected_tiles,
    merged_value,
)


@pytest.fixture
def board():
    return Board.from_rows([
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [2, 0, 0, 0],
        [2, 4, 0, 0],
        [2, 2, 8, 8],
    ])


class TestFindConnectedTiles:
    """Test iterative flood fill."""

    def test_component_is_maximal(self, board):
        """Every 4-connected equal tile is found, and nothing else."""
        tiles = find_connected_tiles(board, 2, 0)
        positions = {t.position for t in tiles}

        assert positions == {(2, 0), (3, 0), (4, 0), (4, 1)}
        assert all(t.value == 2 for t in tiles)

    def test_seed_first(self, board):
        tiles = find_connected_tiles(board, 4, 1)
        assert tiles[0] == Tile(4, 1, 2)

    def test_diagonal_not_connected(self):
        board = Board.from_rows([[2, 0], [0, 2]])
        assert len(find_connected_tiles(board, 0, 0)) == 1

    def test_lone_tile(self, board):
        assert find_connected_tiles(board, 3, 1) == [Tile(3, 1, 4)]

    def test_empty_seed(self, board):
        assert find_connected_tiles(board, 0, 0) == []

    @pytest.mark.parametrize("row,col", [(-1, 0), (0, 9), (5, 0)])
    def test_out_of_bounds_seed(self, board, row, col):
        assert find_connected_tiles(board, row, col) == []

    def test_large_component(self):
        """A full board of one value is a single component."""
        board = Board.from_rows([[2] * 8 for _ in range(8)])
        assert len(find_connected_tiles(board, 3, 3)) == 64

    def test_board_not_modified(self, board):
        before = board.clone()
        find_connected_tiles(board, 2, 0)
        assert board == before


class TestMergeValue:
    """Test the exponential merge rule."""

    @pytest.mark.parametrize("value,count,expected", [
        (2, 2, 4),
        (2, 3, 8),
        (4, 4, 32),
        (8, 2, 16),
        (2, 5, 32),
    ])
    def test_merged_value(self, value, count, expected):
        assert merged_value(value, count) == expected

    def test_three_twos_make_eight(self):
        board = Board.from_rows([
            [0, 0, 0],
            [2, 2, 2],
        ])
        event = merge_connected_tiles(board, 1, 0)

        assert event.merged
        assert event.new_value == 8
        assert event.score == 8
        assert event.tiles_merged == 3
        assert board == [[0, 0, 0], [0, 8, 0]]

    def test_four_fours_make_thirty_two(self):
        board = Board.from_rows([
            [4, 4],
            [4, 4],
        ])
        event = merge_connected_tiles(board, 0, 0)

        assert event.new_value == 32
        assert event.original_value == 4
        assert len(event.sources) == 4
        assert board.max_tile() == 32
        assert board.count_empty() == 3


class TestPlacement:
    """Test where the merged tile lands."""

    def test_pair_uses_preferred(self):
        """A two-tile merge goes to the preferred cell even outside the pair."""
        board = Board.from_rows([
            [0, 0],
            [2, 2],
        ])
        event = merge_connected_tiles(board, 1, 0, preferred_row=0, preferred_col=0)

        assert event.position == Position(0, 0)
        assert board == [[4, 0], [0, 0]]

    def test_preferred_inside_large_component(self):
        board = Board.from_rows([
            [0, 0, 0],
            [2, 2, 2],
            [2, 0, 0],
        ])
        event = merge_connected_tiles(board, 1, 0, preferred_row=1, preferred_col=2)

        assert event.new_value == 16
        assert event.position == Position(1, 2)

    def test_preferred_outside_large_component_ignored(self):
        tiles = [Tile(1, 0, 2), Tile(1, 1, 2), Tile(1, 2, 2)]
        target = choose_merge_position(tiles, Position(0, 0))
        assert target == Position(1, 1)

    def test_three_in_column_uses_middle_row(self):
        board = Board.from_rows([
            [2, 0],
            [2, 0],
            [2, 0],
        ])
        event = merge_connected_tiles(board, 0, 0)

        assert event.position == Position(1, 0)

    def test_three_bent_uses_nearest_centroid(self):
        """An L of three tiles resolves to the tile nearest the centroid."""
        tiles = [Tile(3, 0, 2), Tile(4, 0, 2), Tile(4, 1, 2)]
        assert choose_merge_position(tiles) == Position(4, 0)

    def test_four_tiles_closest_to_settling_edge(self):
        """Ties on the settling edge go to the greatest column."""
        tiles = [Tile(3, 0, 4), Tile(3, 1, 4), Tile(4, 0, 4), Tile(4, 1, 4)]
        assert choose_merge_position(tiles, direction=Direction.DOWN) == Position(4, 1)

    def test_four_tiles_up_gravity(self):
        tiles = [Tile(0, 0, 4), Tile(0, 1, 4), Tile(1, 0, 4), Tile(1, 1, 4)]
        assert choose_merge_position(tiles, direction=Direction.UP) == Position(0, 1)

    def test_pair_without_preference(self):
        """A vertical pair lands on the lower tile under down gravity."""
        board = Board.from_rows([
            [0],
            [4],
            [4],
        ])
        event = merge_connected_tiles(board, 1, 0)
        assert event.position == Position(2, 0)
        assert board == [[0], [0], [8]]

    def test_occupied_target_slides_away_from_edge(self):
        """An unrelated tile at the target is never overwritten."""
        board = Board.from_rows([
            [0, 0],
            [8, 0],
            [2, 0],
            [2, 0],
        ])
        event = merge_connected_tiles(board, 3, 0, preferred_row=1, preferred_col=0)

        assert event.position == Position(0, 0)
        assert board.get(1, 0) == 8
        assert board.get(0, 0) == 4


class TestNoMerge:
    """Test cases that must not merge."""

    def test_lone_tile(self, board):
        before = board.clone()
        event = merge_connected_tiles(board, 3, 1)

        assert not event.merged
        assert event.score == 0
        assert event.position is None
        assert board == before

    def test_empty_seed(self, board):
        assert merge_connected_tiles(board, 0, 0) == MergeEvent.no_merge()

    def test_out_of_bounds_seed(self, board):
        event = merge_connected_tiles(board, 9, 9)
        assert not event.merged

    def test_non_board(self):
        event = merge_connected_tiles([[2, 2]], 0, 0)
        assert not event.merged

    def test_overflowing_component_left_intact(self):
        """64 tiles of 2 would make 2**64, past what a cell can hold."""
        board = Board.from_rows([[2] * 8 for _ in range(8)])
        before = board.clone()

        event = merge_connected_tiles(board, 0, 0)

        assert not event.merged
        assert event.tiles_merged == 64
        assert event.original_value == 2
        assert board == before

    def test_largest_fitting_component_merges(self):
        board = Board.from_rows([[2] * 8 for _ in range(8)])
        board.set(0, 0, 0)
        board.set(0, 1, 0)

        event = merge_connected_tiles(board, 7, 7)

        assert event.merged
        assert event.new_value == 2 ** 62


class TestFindFirstMergeable:
    """Test the row-major mergeable scan."""

    def test_row_major_order(self, board):
        assert find_first_mergeable(board) == Position(2, 0)

    def test_none_when_stable(self):
        board = Board.from_rows([
            [2, 4],
            [4, 2],
        ])
        assert find_first_mergeable(board) is None
