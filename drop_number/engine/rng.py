"""
RNG - Tile Generator
====================

Draws the values players drop. The engine never calls this directly; the
game session passes a generator (or any zero-argument callable) in.
"""

from __future__ import annotations

import random
from typing import List, Optional, Tuple

from drop_number.engine.config_loader import GameConfig, get_config


class TileGenerator:
    """
    Seeded source of drop values with a current/next preview.

    With probability ``small_value_bias`` a value is drawn uniformly from
    the first ``small_value_count`` seed values; otherwise uniformly from
    the whole seed pool.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        seed: Optional[int] = None
    ):
        """
        Initialize tile generator.

        Args:
            config: Game configuration. Uses default if None.
            seed: Random seed for reproducibility. Random if None.
        """
        if config is None:
            config = get_config()

        self._config = config
        self._pool: Tuple[int, ...] = config.rng.seed_pool
        self._small: Tuple[int, ...] = config.rng.small_values
        self._bias: float = config.rng.small_value_bias
        self._rng = random.Random(seed)

        self._current: int = self._draw()
        self._next: int = self._draw()

    def _draw(self) -> int:
        """Draw one value from the configured distribution."""
        if self._bias >= 1.0 or self._rng.random() < self._bias:
            return self._rng.choice(self._small)
        return self._rng.choice(self._pool)

    def __call__(self) -> int:
        return self.advance()

    @property
    def current(self) -> int:
        """Value that will drop next."""
        return self._current

    @property
    def next(self) -> int:
        """Value after the current one."""
        return self._next

    @property
    def values(self) -> Tuple[int, ...]:
        """Every value this generator can produce."""
        if self._bias >= 1.0:
            return self._small
        return self._pool

    def advance(self) -> int:
        """
        Consume the current value and shift the preview.

        Returns:
            The value that was current.
        """
        consumed = self._current
        self._current = self._next
        self._next = self._draw()
        return consumed

    def peek(self, count: int = 2) -> List[int]:
        """
        Peek at upcoming values without consuming.

        Only ``current`` and ``next`` are fixed; further values are drawn
        from a copy of the RNG so peeking never changes the sequence.

        Args:
            count: Number of upcoming values to peek.
        """
        result = [self._current, self._next][:count]
        if count > 2:
            saved = self._rng.getstate()
            result.extend(self._draw() for _ in range(count - 2))
            self._rng.setstate(saved)
        return result

    def reset(self, seed: Optional[int] = None) -> None:
        """
        Reset the generator with optional new seed.

        Args:
            seed: New random seed. Keeps the current RNG stream if None.
        """
        if seed is not None:
            self._rng = random.Random(seed)
        self._current = self._draw()
        self._next = self._draw()

    def get_state(self) -> Tuple[int, int]:
        """Preview values for checkpointing."""
        return (self._current, self._next)

    def set_state(self, current: int, next_value: int) -> None:
        """Restore preview values."""
        self._current = int(current)
        self._next = int(next_value)
