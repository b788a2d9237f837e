"""
Configuration Loader
====================

Loads and validates game_config.yaml, providing typed access to all parameters.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional, Tuple

import yaml


class Direction(str, Enum):
    """Edge of the board that tiles settle toward."""
    DOWN = "down"  # toward the last row
    UP = "up"      # toward row 0

    @classmethod
    def parse(cls, value: "str | Direction") -> "Direction":
        """Parse a direction string, raising ValueError on unknown values."""
        if isinstance(value, Direction):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(f"gravity must be 'down' or 'up', got '{value}'") from None

    @property
    def step(self) -> int:
        """Row delta moving away from the settling edge."""
        return -1 if self is Direction.DOWN else 1


@dataclass(frozen=True)
class BoardConfig:
    """Board geometry and gravity direction."""
    rows: int
    cols: int
    gravity: Direction


@dataclass(frozen=True)
class RngConfig:
    """Tile generator parameters."""
    seed_pool: Tuple[int, ...]
    small_value_count: int
    small_value_bias: float

    @property
    def small_values(self) -> Tuple[int, ...]:
        """Leading seed values favored by the generator."""
        return self.seed_pool[:self.small_value_count]


@dataclass(frozen=True)
class ScoringConfig:
    """Scoring parameters."""
    combo_multiplier: float
    chain_bonus_base: int
    large_merge_multiplier: float = 1.0


@dataclass(frozen=True)
class ChainConfig:
    """Chain reaction limits."""
    iteration_cap: int


@dataclass(frozen=True)
class RulesConfig:
    """Optional rule variants and win targets."""
    full_column_merge: bool
    tile_target: Optional[int]
    score_target: Optional[int]


@dataclass(frozen=True)
class GameConfig:
    """
    Complete game configuration loaded from YAML.

    All values are immutable so the engine can share one instance
    across calls without copying.
    """
    board: BoardConfig
    rng: RngConfig
    scoring: ScoringConfig
    chain: ChainConfig
    rules: RulesConfig

    @property
    def rows(self) -> int:
        return self.board.rows

    @property
    def cols(self) -> int:
        return self.board.cols

    @property
    def gravity(self) -> Direction:
        return self.board.gravity

    @property
    def seed_pool(self) -> Tuple[int, ...]:
        return self.rng.seed_pool


def _optional_int(value) -> Optional[int]:
    """Parse an optional integer target (null means no target)."""
    if value is None:
        return None
    return int(value)


def _validate_config(config: GameConfig) -> None:
    """Validate configuration consistency."""
    if config.board.rows < 1 or config.board.cols < 1:
        raise ValueError(
            f"Board must have positive dimensions, got {config.board.rows}x{config.board.cols}"
        )

    pool = config.rng.seed_pool
    if not pool:
        raise ValueError("rng.seed_pool must not be empty")
    if any(v <= 0 for v in pool):
        raise ValueError(f"rng.seed_pool values must be positive, got {list(pool)}")
    if any(b <= a for a, b in zip(pool, pool[1:])):
        raise ValueError(f"rng.seed_pool must be strictly increasing, got {list(pool)}")

    if not 1 <= config.rng.small_value_count <= len(pool):
        raise ValueError(
            f"small_value_count ({config.rng.small_value_count}) must be between "
            f"1 and seed_pool length ({len(pool)})"
        )
    if not 0.0 <= config.rng.small_value_bias <= 1.0:
        raise ValueError(
            f"small_value_bias must be in [0, 1], got {config.rng.small_value_bias}"
        )

    if config.scoring.combo_multiplier < 1.0:
        raise ValueError(
            f"combo_multiplier must be >= 1, got {config.scoring.combo_multiplier}"
        )
    if config.scoring.chain_bonus_base < 0:
        raise ValueError(
            f"chain_bonus_base must be >= 0, got {config.scoring.chain_bonus_base}"
        )
    if config.scoring.large_merge_multiplier < 1.0:
        raise ValueError(
            f"large_merge_multiplier must be >= 1, got {config.scoring.large_merge_multiplier}"
        )

    if config.chain.iteration_cap < 1:
        raise ValueError(f"iteration_cap must be >= 1, got {config.chain.iteration_cap}")


def parse_config(raw: dict) -> GameConfig:
    """
    Build a validated GameConfig from an already-parsed YAML mapping.

    Args:
        raw: Mapping with board/rng/scoring/chain/rules sections.

    Returns:
        Validated GameConfig instance.

    Raises:
        ValueError: If config validation fails.
    """
    board_data = raw["board"]
    board = BoardConfig(
        rows=int(board_data["rows"]),
        cols=int(board_data["cols"]),
        gravity=Direction.parse(board_data.get("gravity", "down"))
    )

    rng_data = raw["rng"]
    seed_pool = tuple(int(v) for v in rng_data["seed_pool"])
    rng = RngConfig(
        seed_pool=seed_pool,
        small_value_count=int(rng_data.get("small_value_count", len(seed_pool))),
        small_value_bias=float(rng_data.get("small_value_bias", 1.0))
    )

    scoring_data = raw["scoring"]
    scoring = ScoringConfig(
        combo_multiplier=float(scoring_data["combo_multiplier"]),
        chain_bonus_base=int(scoring_data["chain_bonus_base"]),
        large_merge_multiplier=float(scoring_data.get("large_merge_multiplier", 1.0))
    )

    chain_data = raw.get("chain", {})
    chain = ChainConfig(
        iteration_cap=int(chain_data.get("iteration_cap", 100))
    )

    # Rules section is optional
    rules_data = raw.get("rules") or {}
    rules = RulesConfig(
        full_column_merge=bool(rules_data.get("full_column_merge", False)),
        tile_target=_optional_int(rules_data.get("tile_target")),
        score_target=_optional_int(rules_data.get("score_target"))
    )

    config = GameConfig(
        board=board,
        rng=rng,
        scoring=scoring,
        chain=chain,
        rules=rules
    )

    _validate_config(config)
    return config


def load_config(config_path: Optional[str] = None) -> GameConfig:
    """
    Load and validate game configuration from YAML.

    Args:
        config_path: Path to game_config.yaml. If None, uses default location.

    Returns:
        Validated GameConfig instance.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config validation fails.
    """
    if config_path is None:
        config_path = os.path.join(
            os.path.dirname(os.path.dirname(__file__)),
            "game_config.yaml"
        )

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        raw = yaml.safe_load(f)

    return parse_config(raw)


# Module-level singleton for convenience
_cached_config: Optional[GameConfig] = None


def get_config() -> GameConfig:
    """Get the cached game configuration, loading if necessary."""
    global _cached_config
    if _cached_config is None:
        _cached_config = load_config()
    return _cached_config


def reload_config(config_path: Optional[str] = None) -> GameConfig:
    """Reload the configuration (useful for testing)."""
    global _cached_config
    _cached_config = load_config(config_path)
    return _cached_config
