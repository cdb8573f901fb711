"""Hot-seat command-line driver: two players share one terminal."""

from __future__ import annotations

import argparse
import logging
import string

from opentelemetry.instrumentation.logging import LoggingInstrumentor

from seabattle.config import GameConfig
from seabattle.engine.board import MAX_BOARD_SIZE
from seabattle.engine.errors import GameError
from seabattle.engine.game import GameState
from seabattle.engine.ship import Coordinate
from seabattle.service import BoardView, SessionRegistry, ShotResponse
from seabattle.telemetry import init_telemetry, install_root_handler

ROW_LABELS = string.ascii_uppercase[:MAX_BOARD_SIZE]


def _coordinate_from_input(text: str, size: int) -> Coordinate:
    """Parse ``A5`` (row letter, 1-based column) or ``x y`` (0-based)."""
    cleaned = text.strip().upper()
    if not cleaned:
        raise ValueError("Empty coordinate.")
    if cleaned[0].isalpha():
        if cleaned[0] not in ROW_LABELS[:size]:
            raise ValueError(f"Row must be between A and {ROW_LABELS[size - 1]}.")
        y = ROW_LABELS.index(cleaned[0])
        try:
            x = int(cleaned[1:]) - 1
        except ValueError as exc:
            raise ValueError(f"Column must be a number between 1 and {size}.") from exc
    else:
        parts = cleaned.split()
        if len(parts) != 2:
            raise ValueError("Use formats like A5 or '3 7'.")
        try:
            x, y = map(int, parts)
        except ValueError as exc:
            raise ValueError("Coordinates must be whole numbers.") from exc
    if x not in range(size) or y not in range(size):
        raise ValueError(f"Coordinates must be within the {size}x{size} board.")
    return Coordinate(x, y)


def _format_board(view: BoardView) -> str:
    header = "    " + " ".join(f"{x + 1:>2}" for x in range(view.size))
    rows = [header]
    for y in range(view.size):
        symbols = []
        for x in range(view.size):
            cell = view.cell(x, y)
            if cell.is_hit:
                symbol = "X"
            elif cell.is_miss:
                symbol = "o"
            else:
                symbol = "S" if cell.is_ship else "."
            symbols.append(f"{symbol:>2}")
        rows.append(f"{ROW_LABELS[y]} |" + " ".join(symbols))
    return "\n".join(rows)


def _describe_shot(name: str, coord: Coordinate, response: ShotResponse) -> str:
    label = f"{ROW_LABELS[coord.y]}{coord.x + 1}"
    if response.ship_type_sunk:
        outcome = f"sank the opponent's {response.ship_type_sunk.lower()}!"
    else:
        outcome = {"Water": "water", "Hit": "hit"}[response.result.value]
    return f"{name} fired at {label}: {outcome}"


def _prompt_for_coordinate(size: int) -> Coordinate:
    while True:
        raw = input("Enter target coordinate (e.g., A5) or 'q' to quit: ").strip()
        if raw.lower() == "q":
            raise SystemExit("Goodbye!")
        try:
            return _coordinate_from_input(raw, size)
        except ValueError as exc:
            print(f"Invalid input: {exc}")


def play_game(board_size: int | None = None, seed: int | None = None) -> None:
    print("Welcome to Sea Battle!\n")
    registry = SessionRegistry(GameConfig(rng_seed=seed))
    created = registry.create_local_game(board_size)
    game_id = created.game_id
    print(f"Hot-seat game on a {created.board_size}x{created.board_size} board.")

    status = registry.local_game_status(game_id)
    while status.state is GameState.IN_PROGRESS:
        shooter = status.current_player_name
        print(f"\n=== {shooter} ===")
        print("Your Board:")
        print(_format_board(status.current_player_board))
        print("\nEnemy Waters:")
        print(_format_board(status.opponent_board))

        coord = _prompt_for_coordinate(status.board_size)
        try:
            response = registry.local_shoot(game_id, coord.x, coord.y)
        except GameError as exc:
            print(f"Shot rejected: {exc}")
            continue
        print(_describe_shot(shooter, coord, response))

        status = registry.local_game_status(game_id)
        if status.state is GameState.IN_PROGRESS and status.current_player_name != shooter:
            input(f"Pass the terminal to {status.current_player_name} and press Enter...")

    print(f"\nCongratulations {status.current_player_name}, you sank the whole fleet!")


def main() -> None:
    parser = argparse.ArgumentParser(description="Play Sea Battle against a friend on one terminal.")
    parser.add_argument(
        "--size", type=int, default=None, help="Board side length; clamped into 10..20."
    )
    parser.add_argument(
        "--seed", type=int, default=None, help="Optional RNG seed for reproducible fleets."
    )
    parser.add_argument(
        "--log-level", default="WARNING", help="Console log level (engine events log at INFO)."
    )
    args = parser.parse_args()
    init_telemetry()
    LoggingInstrumentor().instrument()
    install_root_handler()
    logging.getLogger().setLevel(args.log_level.upper())
    play_game(board_size=args.size, seed=args.seed)


if __name__ == "__main__":
    main()
