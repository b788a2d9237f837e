"""
Drop Number Engine - The merge and chain-reaction simulation.

Main exports:
- drop_tile / DropEngine: Drop one value and resolve every merge
- DropGame: Game session with scoring, tile preview and game over
- DropNumberEnv: Gymnasium environment for agents
- Board: Grid model
- GameConfig: Configuration loaded from game_config.yaml
"""

from drop_number.engine.config_loader import (
    Direction,
    GameConfig,
    get_config,
    load_config,
    reload_config,
)
from drop_number.engine.errors import (
    EngineError,
    InvalidBoardState,
    InvalidColumn,
    InvalidValue,
    OutOfBoundsError,
)
from drop_number.engine.board import Board, Position, Tile, reset_board
from drop_number.engine.gravity import apply_gravity, apply_gravity_all
from drop_number.engine.merge_system import (
    MergeEvent,
    find_connected_tiles,
    merge_connected_tiles,
)
from drop_number.engine.scoring import ScoreCalculator, ScoreTracker
from drop_number.engine.chain import ChainResult, ChainStep, process_chain_reactions
from drop_number.engine.rules import (
    GameRules,
    check_game_over,
    has_possible_merge,
    has_won,
    validate_board,
)
from drop_number.engine.drop import DropEngine, DropOutcome, drop_tile
from drop_number.engine.rng import TileGenerator
from drop_number.engine.game import DropGame, StepResult
from drop_number.engine.env_gym import DropNumberEnv

__all__ = [
    "Direction",
    "GameConfig",
    "get_config",
    "load_config",
    "reload_config",
    "EngineError",
    "InvalidBoardState",
    "InvalidColumn",
    "InvalidValue",
    "OutOfBoundsError",
    "Board",
    "Position",
    "Tile",
    "reset_board",
    "apply_gravity",
    "apply_gravity_all",
    "MergeEvent",
    "find_connected_tiles",
    "merge_connected_tiles",
    "ScoreCalculator",
    "ScoreTracker",
    "ChainResult",
    "ChainStep",
    "process_chain_reactions",
    "GameRules",
    "check_game_over",
    "has_possible_merge",
    "has_won",
    "validate_board",
    "DropEngine",
    "DropOutcome",
    "drop_tile",
    "TileGenerator",
    "DropGame",
    "StepResult",
    "DropNumberEnv",
]
