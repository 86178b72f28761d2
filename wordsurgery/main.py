"""
Main entry point for playing Word Surgery in a terminal.

Usage:
    python -m wordsurgery.main --words words.txt
    python -m wordsurgery.main --words words.txt --config config.yaml --script moves.txt
    python -m wordsurgery.main --words words.txt --output results/game.json --verbose
"""

import argparse
import json
import sys
from datetime import datetime
from pathlib import Path
from typing import Iterable, Optional

import yaml
from loguru import logger

from .commands import parse_command
from .dictionary import build_dictionary, load_word_list
from .session import GameSession, SessionConfig
from .utils.board_text import render_session


def load_config(config_path: str) -> SessionConfig:
    """Load session configuration from a YAML file."""
    path = Path(config_path)

    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path) as f:
        data = yaml.safe_load(f) or {}

    return SessionConfig(**data)


def configure_logging(verbose: bool) -> None:
    """Send log records to stderr, at DEBUG when verbose."""
    logger.remove()
    logger.add(sys.stderr, level="DEBUG" if verbose else "WARNING", format="{level}: {message}")


def play(session: GameSession, lines: Iterable[str], echo: bool = False) -> int:
    """
    Run commands against a session, printing the board after each one.

    Deferred word detection is flushed before every board is printed, so the
    numbers shown for ``harvest`` always match the current target. Lines are
    read until the input ends; once the game is over only ``reset`` and
    ``show`` have any effect.

    Args:
        session: The session to play
        lines: Command lines
        echo: Print each command before applying it

    Returns:
        Number of lines that failed to parse
    """
    failures = 0
    session.flush()
    print(render_session(session.state))

    for number, text in enumerate(lines, start=1):
        command, errors = parse_command(text, line=number)
        for err in errors:
            failures += 1
            print(f"Line {err.line}: {err.message}", file=sys.stderr)
        if command is None:
            continue

        if echo:
            print(f"\n> {text.strip()}")
        if command.name == "show":
            session.flush()
            print(render_session(session.state))
            continue

        was_active = session.is_active
        changed = session.execute(command)
        session.flush()
        if not changed and command.name != "detect":
            print("(no change)")
        print(render_session(session.state))

        if was_active and not session.is_active:
            if session.state.status == "completed":
                print("\n*** Game completed! ***")
            else:
                print("\n*** Time's up! ***")

    return failures


def save_result(session: GameSession, path: str | Path, started_at: datetime) -> None:
    """Save the final session summary to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    result = session.get_state()
    result["started_at"] = started_at.isoformat()
    result["ended_at"] = datetime.now().isoformat()
    result["config"] = session.state.config.model_dump()

    with open(path, "w") as f:
        json.dump(result, f, indent=2, default=str)


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Play Word Surgery from the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  insert POOL TARGET   place pool letter POOL at target slot TARGET
  drag POOL            start dragging pool letter POOL
  drop TARGET          drop the dragged letter at slot TARGET
  cancel               abort the drag
  tap TARGET           return an end letter of the chain to the pool
  harvest N            remove detected word number N
  undo | tick SECONDS | reset | detect | show

Example config.yaml:
  length_min: 5
  length_max: 8
  game_duration: 120
  seed: 42
        """
    )
    parser.add_argument(
        "--words", "-w",
        required=True,
        help="Path to a word list file (one word per line)"
    )
    parser.add_argument(
        "--config", "-c",
        help="Path to YAML configuration file"
    )
    parser.add_argument(
        "--script", "-s",
        help="Read commands from a file instead of stdin"
    )
    parser.add_argument(
        "--pair",
        nargs=2,
        metavar=("BACKBONE", "POOL"),
        help="Play a fixed word pair instead of a random one"
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed (overrides config)"
    )
    parser.add_argument(
        "--output", "-o",
        help="Path to save the final session summary as JSON"
    )
    parser.add_argument(
        "--throttle",
        action="store_true",
        help="Rate-limit word detection by the configured interval"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output to stderr"
    )

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config) if args.config else SessionConfig()
    except Exception as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1
    if args.seed is not None:
        config = config.model_copy(update={"seed": args.seed})

    try:
        words = load_word_list(args.words)
    except Exception as e:
        print(f"Error loading word list: {e}", file=sys.stderr)
        return 1

    session = GameSession.create(
        dictionary=build_dictionary(words),
        word_pool=words,
        config=config,
        throttled=args.throttle,
        pair=tuple(args.pair) if args.pair else None,
    )
    started_at = datetime.now()

    if args.script:
        try:
            lines = Path(args.script).read_text().splitlines()
        except OSError as e:
            print(f"Error reading script: {e}", file=sys.stderr)
            return 1
        failures = play(session, lines, echo=True)
    else:
        try:
            failures = play(session, sys.stdin)
        except KeyboardInterrupt:
            print("\nGame interrupted by user")
            failures = 0

    session.flush()

    if args.output:
        save_result(session, args.output, started_at)
        print(f"\nResults saved to: {args.output}")

    print()
    print("=== Game Summary ===")
    print(f"Status: {session.state.status}")
    print(f"Harvested: {', '.join(session.state.harvested_words) or 'none'}")

    return 1 if failures else 0


if __name__ == "__main__":
    sys.exit(main())
