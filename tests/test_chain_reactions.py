"""
Tests for the chain reaction loop.
"""

import pytest

from drop_number.engine.board import Board
from drop_number.engine.chain import ChainStep, process_chain_reactions
from drop_number.engine.config_loader import Direction, load_config
from drop_number.engine.scoring import ScoreCalculator


@pytest.fixture
def config():
    return load_config()


@pytest.fixture
def scorer(config):
    return ScoreCalculator(config)


class TestChainReactions:
    """Test gravity and merge passes until stable."""

    def test_stable_board_is_idempotent(self, scorer):
        """A settled board with no mergeable pair is left alone."""
        board = Board.from_rows([
            [0, 0, 0],
            [2, 0, 0],
            [4, 2, 4],
        ])
        before = board.clone()

        result = process_chain_reactions(board, Direction.DOWN, scorer)

        assert board == before
        assert result.total_score == 0
        assert result.chain_reaction_count == 0
        assert result.iterations == 1
        assert not result.capped

    def test_gravity_applied_before_scan(self, scorer):
        """Floating tiles fall before mergeable pairs are searched."""
        board = Board.from_rows([
            [4, 0],
            [0, 0],
            [4, 0],
        ])
        result = process_chain_reactions(board, Direction.DOWN, scorer)

        assert board == [[0, 0], [0, 0], [8, 0]]
        assert result.chain_reaction_count == 1
        assert result.total_score == 8

    def test_cascade_applies_combo(self, scorer):
        """Merges after the first iteration get the combo multiplier."""
        board = Board.from_rows([
            [0, 0, 0],
            [4, 0, 0],
            [0, 4, 8],
        ])
        result = process_chain_reactions(board, Direction.DOWN, scorer)

        # 4+4 -> 8 (8 points), then 8+8 -> 16 (16 * 1.5 = 24 points)
        assert result.chain_reaction_count == 2
        assert result.total_score == 32
        assert result.iterations == 3
        assert board == [[0, 0, 0], [0, 0, 0], [0, 0, 16]]
        assert [e.new_value for e in result.events] == [8, 16]

    def test_up_gravity(self, scorer):
        board = Board.from_rows([
            [2, 0],
            [0, 0],
            [2, 0],
        ])
        process_chain_reactions(board, Direction.UP, scorer)

        assert board == [[4, 0], [0, 0], [0, 0]]

    def test_iteration_cap(self, scorer):
        """Hitting the cap stops the loop and is reported, not raised."""
        board = Board.from_rows([
            [0, 0, 0],
            [4, 0, 0],
            [0, 4, 8],
        ])
        result = process_chain_reactions(board, Direction.DOWN, scorer, iteration_cap=1)

        assert result.iterations == 1
        assert result.chain_reaction_count == 1
        assert result.capped

    def test_cap_not_flagged_when_stable(self, scorer):
        board = Board.from_rows([[2], [2]])
        result = process_chain_reactions(board, Direction.DOWN, scorer, iteration_cap=1)

        assert result.chain_reaction_count == 1
        assert not result.capped

    def test_terminates_on_large_board(self, scorer):
        """A board full of equal tiles settles within the cap."""
        board = Board.from_rows([[2] * 6 for _ in range(6)])
        result = process_chain_reactions(board, Direction.DOWN, scorer)

        assert not result.capped
        assert result.iterations <= 100
        assert board.count_empty() == 35

    def test_overflowing_component_stops_chain(self, scorer):
        """A component too large for one cell ends the chain unmerged."""
        board = Board.from_rows([[2] * 8 for _ in range(8)])
        before = board.clone()

        result = process_chain_reactions(board, Direction.DOWN, scorer)

        assert board == before
        assert result.chain_reaction_count == 0
        assert result.total_score == 0
        assert not result.capped

    def test_on_step_receives_snapshots(self, scorer):
        """Step callbacks arrive in order with read-only snapshots."""
        steps = []
        board = Board.from_rows([
            [0, 0, 0],
            [4, 0, 0],
            [0, 4, 8],
        ])
        process_chain_reactions(board, Direction.DOWN, scorer, on_step=steps.append)

        assert [s.iteration for s in steps] == [1, 2]
        assert all(isinstance(s, ChainStep) for s in steps)
        assert [s.points for s in steps] == [8, 24]
        assert steps[0].board.get(2, 1) == 8
        with pytest.raises(ValueError):
            steps[0].board.cells[0, 0] = 2

    def test_non_board_is_noop(self, scorer):
        result = process_chain_reactions([[2, 2]], Direction.DOWN, scorer)
        assert result.iterations == 0
