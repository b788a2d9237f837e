"""
Terminal Play Mode
==================

Play the drop game in a terminal, one column number per turn.

Controls:
    - 0..N-1: Drop the current value into that column
    - r: Restart game
    - q: Quit

Usage:
    python -m tools.play_terminal [--seed SEED] [--config PATH] [--verbose]
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional

from drop_number.engine.chain import ChainStep
from drop_number.engine.config_loader import load_config
from drop_number.engine.game import DropGame


def _print_step(step: ChainStep) -> None:
    """Show each chained merge as it resolves."""
    event = step.event
    print(f"  chain {step.iteration}: {event.tiles_merged} x {event.original_value} "
          f"-> {event.new_value} (+{step.points})")


def play(seed: Optional[int] = None, config_path: Optional[str] = None) -> int:
    """
    Run the interactive loop.

    Returns:
        Final score.
    """
    config = load_config(config_path)
    game = DropGame(config=config, seed=seed, on_step=_print_step)

    print(game.render_text())
    while True:
        try:
            command = input(f"Column [0-{config.cols - 1}], r, q > ").strip().lower()
        except EOFError:
            break

        if command == "q":
            break
        if command == "r":
            game.reset()
            print(game.render_text())
            continue
        if not command.isdigit() or not 0 <= int(command) < config.cols:
            print(f"Enter a column between 0 and {config.cols - 1}")
            continue

        result = game.drop(int(command))
        if not result.success:
            print(f"Cannot drop there: {result.reason}")
            continue

        print(game.render_text())
        if result.delta_score:
            print(f"+{result.delta_score} points")

        if game.is_over:
            print(f"GAME OVER - final score {game.score} after {game.drops_used} drops")
            answer = input("Play again? [y/N] ").strip().lower()
            if answer != "y":
                break
            game.reset()
            print(game.render_text())

    return game.score


def main():
    parser = argparse.ArgumentParser(description="Play the drop number game in a terminal")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("--config", type=str, default=None, help="Path to game_config.yaml")
    parser.add_argument("--verbose", action="store_true", help="Show engine debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    score = play(seed=args.seed, config_path=args.config)
    print(f"Final score: {score}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
