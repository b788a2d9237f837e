"""
Scoring System
==============

Converts merge events into points and tracks the session score.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from drop_number.engine.config_loader import GameConfig, ScoringConfig, get_config
from drop_number.engine.merge_system import MergeEvent


@dataclass
class ScoreEvent:
    """Record of a scoring event."""
    points: int
    base_points: int
    iteration: int
    is_chain_bonus: bool = False

    def __repr__(self) -> str:
        if self.is_chain_bonus:
            return f"ScoreEvent(chain_bonus={self.points})"
        return f"ScoreEvent(merge={self.points}, base={self.base_points}, iteration={self.iteration})"


class ScoreCalculator:
    """
    Pure score functions bound to a scoring configuration.

    - Base score of a merge is the merged tile's value.
    - Merges in chain iterations after the first are multiplied by
      ``combo_multiplier``.
    - Merges of four or more tiles are multiplied by
      ``large_merge_multiplier``.
    - A drop with more than one chained merge earns
      ``chain_count * chain_bonus_base``.

    Every result is floored to an int.
    """

    def __init__(self, config: "Optional[GameConfig | ScoringConfig]" = None):
        """
        Args:
            config: Game or scoring configuration. Uses default if None.
        """
        if config is None:
            config = get_config()
        if isinstance(config, GameConfig):
            config = config.scoring
        self._scoring = config

    @property
    def combo_multiplier(self) -> float:
        return self._scoring.combo_multiplier

    @property
    def chain_bonus_base(self) -> int:
        return self._scoring.chain_bonus_base

    def base_score(self, event: MergeEvent) -> int:
        """Points for a merge before bonuses."""
        if not event.merged:
            return 0
        return int(event.new_value)

    def merge_score(self, event: MergeEvent, iteration: int = 1) -> int:
        """
        Points for a merge, including combo and large-merge bonuses.

        Args:
            event: The merge.
            iteration: 1-based chain iteration the merge happened in; the
                initial landing merge counts as iteration 1.
        """
        if not event.merged:
            return 0
        points = float(event.new_value)
        if iteration > 1:
            points *= self._scoring.combo_multiplier
        if event.tiles_merged >= 4:
            points *= self._scoring.large_merge_multiplier
        return math.floor(points)

    chain_merge_score = merge_score

    def score_event(self, event: MergeEvent, iteration: int = 1) -> ScoreEvent:
        return ScoreEvent(
            points=self.merge_score(event, iteration),
            base_points=self.base_score(event),
            iteration=iteration
        )

    def completion_bonus(self, chain_count: int) -> int:
        """Flat bonus for a drop that chained more than one merge."""
        if chain_count <= 1:
            return 0
        return math.floor(chain_count * self._scoring.chain_bonus_base)


class ScoreTracker:
    """
    Tracks game score across drops.
    """

    def __init__(self):
        self._score: int = 0
        self._merges: int = 0
        self._chain_reactions: int = 0
        self._best_chain: int = 0

    @property
    def score(self) -> int:
        """Current total score."""
        return self._score

    @property
    def merges(self) -> int:
        """Total number of merges performed."""
        return self._merges

    @property
    def chain_reactions(self) -> int:
        """Total number of chained (non-landing) merges."""
        return self._chain_reactions

    @property
    def best_chain(self) -> int:
        """Longest chain produced by a single drop."""
        return self._best_chain

    def apply_drop(self, points: int, merges: int, chain_reactions: int) -> None:
        """
        Record the result of one drop.

        Args:
            points: Floored points earned by the drop.
            merges: Merges performed, including the landing merge.
            chain_reactions: Chained merges after the landing merge.
        """
        self._score += int(points)
        self._merges += merges
        self._chain_reactions += chain_reactions
        self._best_chain = max(self._best_chain, chain_reactions)

    def restore(self, score: int, merges: int = 0, chain_reactions: int = 0, best_chain: int = 0) -> None:
        """Restore counters from saved state."""
        self._score = int(score)
        self._merges = int(merges)
        self._chain_reactions = int(chain_reactions)
        self._best_chain = int(best_chain)

    def reset(self) -> None:
        """Reset score to zero."""
        self._score = 0
        self._merges = 0
        self._chain_reactions = 0
        self._best_chain = 0
