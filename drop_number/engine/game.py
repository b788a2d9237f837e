"""
Core Game
=========

Game session combining the drop engine, tile generator, scoring and rules.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import numpy as np

from drop_number.engine.board import Board
from drop_number.engine.chain import ChainStep
from drop_number.engine.config_loader import GameConfig, get_config
from drop_number.engine.drop import DropEngine, DropOutcome
from drop_number.engine.errors import InvalidBoardState
from drop_number.engine.merge_system import MergeEvent
from drop_number.engine.rng import TileGenerator
from drop_number.engine.rules import GameRules, TerminationResult
from drop_number.engine.scoring import ScoreTracker


@dataclass
class StepResult:
    """Result of a single game step (one drop, settled)."""
    board: Board
    success: bool
    terminated: bool
    won: bool
    termination_reason: str
    delta_score: int
    value: int
    column: int
    chain_reactions: int = 0
    reason: str = ""
    merges: List[MergeEvent] = field(default_factory=list)


class _CallableSource:
    """Current/next preview over a plain zero-argument value callable."""

    def __init__(self, draw: Callable[[], int]):
        self._draw = draw
        self.current = int(draw())
        self.next = int(draw())

    def advance(self) -> int:
        consumed = self.current
        self.current = self.next
        self.next = int(self._draw())
        return consumed

    def reset(self, seed: Optional[int] = None) -> None:
        self.current = int(self._draw())
        self.next = int(self._draw())

    def set_state(self, current: int, next_value: int) -> None:
        self.current = int(current)
        self.next = int(next_value)


class DropGame:
    """
    Main game session.

    Orchestrates:
    - Board state between drops
    - Tile generation (current and next value)
    - Drop resolution through DropEngine
    - Scoring and termination rules

    One step = one drop, resolved until the board is stable.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None,
        tile_source: Optional[Callable[[], int]] = None,
        on_step: Optional[Callable[[ChainStep], None]] = None
    ):
        """
        Initialize game.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for the default tile generator.
            tile_source: Optional zero-argument callable producing drop
                values. Replaces the seeded TileGenerator.
            on_step: Optional callback receiving each chained merge.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._seed = seed

        self._engine = DropEngine(config, on_step=on_step)
        # Mask probes must not reach step callbacks
        self._probe_engine = DropEngine(config)
        self._rules = GameRules(config)
        self._scorer = ScoreTracker()
        if tile_source is None:
            self._source = TileGenerator(config, seed)
        else:
            self._source = _CallableSource(tile_source)

        self._board = Board.empty(config.rows, config.cols)
        self._drops_used: int = 0
        self._terminated: bool = False
        self._won: bool = False
        self._termination_reason: str = ""

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config

    @property
    def engine(self) -> DropEngine:
        return self._engine

    @property
    def board(self) -> Board:
        """Copy of the current board."""
        return self._board.clone()

    @property
    def score(self) -> int:
        """Current score."""
        return self._scorer.score

    @property
    def drops_used(self) -> int:
        """Number of successful drops."""
        return self._drops_used

    @property
    def current_value(self) -> int:
        """Value of the next tile to drop."""
        return self._source.current

    @property
    def next_value(self) -> int:
        """Value of the tile after the current one."""
        return self._source.next

    @property
    def is_over(self) -> bool:
        """True if game has ended."""
        return self._terminated

    @property
    def won(self) -> bool:
        """True once a configured tile or score target was reached."""
        return self._won

    @property
    def termination_reason(self) -> str:
        """Reason for game end, or empty string."""
        return self._termination_reason

    def reset(self, seed: Optional[int] = None) -> Board:
        """
        Reset game to initial state.

        Args:
            seed: New random seed. Keeps the current stream if None.

        Returns:
            The new empty board.
        """
        if seed is not None:
            self._seed = seed

        self._board = Board.empty(self._config.rows, self._config.cols)
        self._scorer.reset()
        self._source.reset(seed)

        self._drops_used = 0
        self._terminated = False
        self._won = False
        self._termination_reason = ""
        return self.board

    def valid_columns(self) -> List[int]:
        """Columns that currently accept a drop of the current value."""
        mask = self.action_mask()
        return [c for c in range(self._config.cols) if mask[c]]

    def action_mask(self) -> np.ndarray:
        """Boolean mask of columns where the current value can be dropped."""
        cells = self._board.cells
        mask = (cells == 0).any(axis=0)
        if self._config.rules.full_column_merge:
            # Probe full columns; the engine never mutates its input
            for c in np.nonzero(~mask)[0]:
                outcome = self._probe_engine.drop_tile(self._board, self._source.current, int(c))
                mask[c] = outcome.success
        return mask

    def step(self, column: int) -> StepResult:
        """
        Drop the current value into ``column``.

        A rejected drop (full column) leaves the board and the tile
        preview unchanged.

        Args:
            column: Target column.

        Returns:
            StepResult with new state and metadata.

        Raises:
            InvalidColumn: If ``column`` is outside the board.
        """
        value = self._source.current
        if self.is_over:
            return self._result(value, column, success=False, reason="game_over")

        outcome: DropOutcome = self._engine.drop_tile(self._board, value, column)
        if not outcome.success:
            return self._result(value, column, success=False, reason=outcome.reason)

        self._source.advance()
        self._board = outcome.board
        self._drops_used += 1
        self._scorer.apply_drop(outcome.score, outcome.merges, outcome.chain_reactions)

        term: TerminationResult = self._rules.check_termination(self._board, self._scorer.score)
        self._terminated = term.terminated
        if term.won and not self._won:
            self._won = True
            self._termination_reason = term.reason
        if term.terminated:
            self._termination_reason = term.reason

        return self._result(
            value, column,
            success=True,
            delta_score=outcome.score,
            chain_reactions=outcome.chain_reactions,
            merges=outcome.events
        )

    drop = step

    def _result(
        self,
        value: int,
        column: int,
        success: bool,
        reason: str = "",
        delta_score: int = 0,
        chain_reactions: int = 0,
        merges: Optional[List[MergeEvent]] = None
    ) -> StepResult:
        return StepResult(
            board=self.board,
            success=success,
            terminated=self._terminated,
            won=self._won,
            termination_reason=self._termination_reason,
            delta_score=delta_score,
            value=value,
            column=column,
            chain_reactions=chain_reactions,
            reason=reason,
            merges=merges or []
        )

    def get_info(self) -> Dict[str, Any]:
        """Get additional info dict for Gymnasium."""
        return {
            "score": self._scorer.score,
            "drops_used": self._drops_used,
            "merges": self._scorer.merges,
            "chain_reactions": self._scorer.chain_reactions,
            "best_chain": self._scorer.best_chain,
            "max_tile": self._board.max_tile(),
            "empty_cells": self._board.count_empty(),
            "won": self._won,
            "terminated_reason": self._termination_reason,
        }

    def get_state(self) -> Dict[str, Any]:
        """
        Plain-value snapshot for external persistence.

        Returns:
            Dict of board rows, score counters and tile preview.
        """
        return {
            "board": self._board.to_list(),
            "score": self._scorer.score,
            "merges": self._scorer.merges,
            "chain_reactions": self._scorer.chain_reactions,
            "best_chain": self._scorer.best_chain,
            "drops_used": self._drops_used,
            "current_value": self._source.current,
            "next_value": self._source.next,
            "won": self._won,
        }

    def load_state(self, state: Dict[str, Any]) -> None:
        """
        Restore a snapshot produced by get_state().

        Raises:
            InvalidBoardState: If the saved board does not fit this config.
        """
        board = Board.from_rows(state["board"])
        if not self._rules.is_valid_board(board):
            raise InvalidBoardState(
                f"Saved board does not match a {self._config.rows}x{self._config.cols} game"
            )

        self._board = board
        self._scorer.restore(
            state.get("score", 0),
            state.get("merges", 0),
            state.get("chain_reactions", 0),
            state.get("best_chain", 0)
        )
        self._drops_used = int(state.get("drops_used", 0))
        if "current_value" in state and "next_value" in state:
            self._source.set_state(state["current_value"], state["next_value"])

        term = self._rules.check_termination(self._board, self._scorer.score)
        self._terminated = term.terminated
        self._won = bool(state.get("won", False)) or term.won
        self._termination_reason = term.reason

    def render_text(self) -> str:
        """Text rendering of the board with score and preview."""
        return (
            f"{self._board.render()}\n"
            f"Score: {self.score}  Current: {self.current_value}  Next: {self.next_value}"
        )
