"""
Performance Benchmark
=====================

Measures drop throughput of the engine, the game session and the
Gymnasium environment.

Usage:
    python -m tools.benchmark_speed [--steps S] [--quick]
"""

from __future__ import annotations

import argparse
import logging
import sys
import time

import numpy as np

from drop_number.engine.config_loader import load_config
from drop_number.engine.drop import DropEngine
from drop_number.engine.env_gym import DropNumberEnv
from drop_number.engine.game import DropGame
from drop_number.engine.rng import TileGenerator


def benchmark_engine(
    num_steps: int = 1000,
    seed: int = 42
) -> dict:
    """
    Benchmark raw DropEngine.drop_tile without session bookkeeping.

    Args:
        num_steps: Number of drops.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    config = load_config()
    engine = DropEngine(config)
    tiles = TileGenerator(config, seed=seed)
    rng = np.random.default_rng(seed)

    board = None
    start = time.perf_counter()

    for _ in range(num_steps):
        if board is None:
            board = [[0] * config.cols for _ in range(config.rows)]
        outcome = engine.drop_tile(board, tiles(), int(rng.integers(config.cols)))
        board = outcome.board
        if board.is_full():
            board = None

    elapsed = time.perf_counter() - start

    return {
        "mode": "engine",
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_game(
    num_steps: int = 1000,
    seed: int = 42
) -> dict:
    """
    Benchmark DropGame without Gym overhead.

    Args:
        num_steps: Number of drops.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    game = DropGame(config=load_config(), seed=seed)
    rng = np.random.default_rng(seed)

    # Warmup
    for _ in range(10):
        columns = game.valid_columns()
        game.drop(int(rng.choice(columns)))
        if game.is_over:
            game.reset()

    game.reset(seed=seed)
    start = time.perf_counter()

    for _ in range(num_steps):
        columns = game.valid_columns()
        game.drop(int(rng.choice(columns)))
        if game.is_over:
            game.reset()

    elapsed = time.perf_counter() - start

    return {
        "mode": "game",
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def benchmark_env(
    num_steps: int = 1000,
    seed: int = 42
) -> dict:
    """
    Benchmark the Gymnasium environment.

    Args:
        num_steps: Number of steps.
        seed: Random seed.

    Returns:
        Dict with timing results.
    """
    env = DropNumberEnv()
    rng = np.random.default_rng(seed)

    obs, _ = env.reset(seed=seed)
    start = time.perf_counter()

    for _ in range(num_steps):
        columns = np.flatnonzero(obs["action_mask"])
        obs, _, terminated, truncated, _ = env.step(int(rng.choice(columns)))
        if terminated or truncated:
            obs, _ = env.reset()

    elapsed = time.perf_counter() - start
    env.close()

    return {
        "mode": "gym_env",
        "num_steps": num_steps,
        "elapsed_seconds": elapsed,
        "steps_per_second": num_steps / elapsed,
        "ms_per_step": (elapsed * 1000) / num_steps
    }


def run_all_benchmarks(steps: int = 500) -> list:
    """Run every benchmark and print a summary table."""
    print("=" * 60)
    print("DROP NUMBER PERFORMANCE BENCHMARK")
    print("=" * 60)
    print()

    results = []
    for name, bench in (
        ("DropEngine (raw)", benchmark_engine),
        ("DropGame", benchmark_game),
        ("DropNumberEnv", benchmark_env),
    ):
        print(f"Benchmarking {name}...")
        result = bench(num_steps=steps)
        results.append(result)
        print(f"  Steps/sec: {result['steps_per_second']:.1f}")
        print(f"  ms/step:   {result['ms_per_step']:.3f}")
        print()

    print("=" * 60)
    print("SUMMARY")
    print("=" * 60)
    print()
    print(f"{'Mode':<20} {'Steps/s':>12} {'ms/step':>10}")
    print("-" * 44)

    for r in results:
        print(f"{r['mode']:<20} {r['steps_per_second']:>12.1f} {r['ms_per_step']:>10.3f}")

    return results


def main():
    parser = argparse.ArgumentParser(description="Benchmark drop engine performance")
    parser.add_argument("--steps", type=int, default=500, help="Drops per benchmark")
    parser.add_argument("--quick", action="store_true", help="Quick benchmark (fewer steps)")

    args = parser.parse_args()

    # Cap warnings would otherwise flood the timing output
    logging.basicConfig(level=logging.ERROR)

    steps = 100 if args.quick else args.steps
    run_all_benchmarks(steps=steps)

    return 0


if __name__ == "__main__":
    sys.exit(main())
