"""
Gymnasium Environment Wrapper
=============================

Provides a standard Gymnasium interface to the drop game.
Reward is always 0.0 - agents compute their own from info.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

import gymnasium as gym
from gymnasium import spaces

from drop_number.engine.config_loader import GameConfig, load_config
from drop_number.engine.game import DropGame

logger = logging.getLogger(__name__)


class DropNumberEnv(gym.Env):
    """
    Drop-and-merge number game as a Gymnasium environment.

    Action Space:
        Discrete(cols). The column to drop the current value into.

    Observation Space:
        Dict with the board grid, current/next values, score, drops used
        and a boolean mask of columns that accept a drop.

    Reward:
        Always 0.0. Agents compute their own reward from the info dict.

    Info:
        Contains score, delta_score, drops_used, merges, success, etc.

    A rejected drop (full column) is not terminal; the board is unchanged
    and ``info["success"]`` is False.
    """

    metadata = {
        "render_modes": ["ansi"],
        "render_fps": 4,
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        config: Optional[GameConfig] = None,
        render_mode: Optional[str] = None,
    ):
        """
        Initialize environment.

        Args:
            config_path: Path to game_config.yaml. Uses default if None.
            config: Already loaded configuration; takes precedence over
                ``config_path``.
            render_mode: "ansi" for a text board, None for headless.
        """
        super().__init__()

        if render_mode is not None and render_mode not in self.metadata["render_modes"]:
            raise ValueError(f"Unsupported render_mode: {render_mode!r}")

        self._config = config if config is not None else load_config(config_path)
        self.render_mode = render_mode

        self._game = DropGame(config=self._config)

        self.action_space = spaces.Discrete(self._config.cols)
        self.observation_space = self._build_observation_space()

    def _build_observation_space(self) -> spaces.Dict:
        """Build the observation space definition."""
        rows, cols = self._config.rows, self._config.cols
        int_max = np.iinfo(np.int64).max

        return spaces.Dict({
            "board": spaces.Box(low=0, high=int_max, shape=(rows, cols), dtype=np.int64),
            "current_value": spaces.Box(low=0, high=int_max, shape=(), dtype=np.int64),
            "next_value": spaces.Box(low=0, high=int_max, shape=(), dtype=np.int64),
            "score": spaces.Box(low=0, high=int_max, shape=(), dtype=np.int64),
            "drops_used": spaces.Box(low=0, high=int_max, shape=(), dtype=np.int64),
            "action_mask": spaces.MultiBinary(cols),
        })

    def reset(
        self,
        *,
        seed: Optional[int] = None,
        options: Optional[Dict[str, Any]] = None
    ) -> Tuple[Dict[str, np.ndarray], Dict[str, Any]]:
        """
        Reset the environment.

        Args:
            seed: Random seed for reproducibility.
            options: Additional options (unused).

        Returns:
            (observation, info) tuple.
        """
        super().reset(seed=seed)

        self._game.reset(seed=seed)

        obs = self._get_obs()
        info = self._game.get_info()
        info["delta_score"] = 0
        info["success"] = True

        return obs, info

    def step(
        self,
        action: Union[int, np.integer, np.ndarray]
    ) -> Tuple[Dict[str, np.ndarray], float, bool, bool, Dict[str, Any]]:
        """
        Execute one drop.

        Args:
            action: Column index in [0, cols).

        Returns:
            (observation, reward, terminated, truncated, info) tuple.
            Reward is always 0.0.
        """
        if isinstance(action, np.ndarray):
            action = action.item()
        column = int(action)

        result = self._game.step(column)

        obs = self._get_obs()
        reward = 0.0

        info = self._game.get_info()
        info["delta_score"] = result.delta_score
        info["success"] = result.success
        info["reason"] = result.reason
        info["step_merges"] = len(result.merges)
        info["step_chain_reactions"] = result.chain_reactions

        if not result.success:
            logger.debug("step: column %d rejected (%s)", column, result.reason)

        return obs, reward, bool(result.terminated), False, info

    def _get_obs(self) -> Dict[str, np.ndarray]:
        game = self._game
        return {
            "board": game.board.cells,
            "current_value": np.array(game.current_value, dtype=np.int64),
            "next_value": np.array(game.next_value, dtype=np.int64),
            "score": np.array(game.score, dtype=np.int64),
            "drops_used": np.array(game.drops_used, dtype=np.int64),
            "action_mask": game.action_mask().astype(np.int8),
        }

    def render(self) -> Optional[str]:
        """
        Render the current game state.

        Returns:
            Text board if render_mode is "ansi", None otherwise.
        """
        if self.render_mode == "ansi":
            return self._game.render_text()
        return None

    def close(self) -> None:
        """Nothing to release; kept for the Gymnasium API."""

    @property
    def game(self) -> DropGame:
        """Access to underlying game (for debugging/tools)."""
        return self._game

    @property
    def config(self) -> GameConfig:
        """Game configuration."""
        return self._config
