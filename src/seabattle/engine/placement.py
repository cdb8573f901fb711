"""Randomised fleet placement.

Ships are placed one at a time, largest first, by drawing candidate footprints
at random and keeping the first one that fits. A candidate fits when every cell
is on the board and empty, and no cell touches (8-directionally) a cell of a
ship already on the board.
"""

from __future__ import annotations

import logging
import random
from typing import Iterable

from seabattle.telemetry import get_meter, get_tracer

from .board import Board, CellState
from .errors import PlacementExhausted
from .ship import Coordinate, Orientation, Ship, ShipType

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.placement")
meter = get_meter("seabattle.engine.placement")

PLACEMENT_COUNTER = meter.create_counter(
    "seabattle_engine_placement_attempts",
    unit="1",
    description="Candidate footprints drawn while placing ships",
)

DEFAULT_MAX_ATTEMPTS = 1000

# Hardest-to-fit first.
FLEET_COMPOSITION: tuple[ShipType, ...] = (
    ShipType.PLUS,
    ShipType.CROSS,
    ShipType.TRIPLE,
    ShipType.DOUBLE,
    ShipType.DOUBLE,
    ShipType.SINGLE,
    ShipType.SINGLE,
)

FLEET_CELL_COUNT = sum(ship_type.size for ship_type in FLEET_COMPOSITION)


def candidate_cells(ship_type: ShipType, board_size: int, rng: random.Random) -> list[Coordinate]:
    """Draw one random footprint for ``ship_type``.

    Straight ships get an anchor anywhere on the board and may hang off the
    edge; the validity check rejects those. Shaped ships draw their anchor only
    from positions that keep the whole shape on the board.
    """
    if ship_type.is_straight:
        anchor = Coordinate(rng.randrange(board_size), rng.randrange(board_size))
        orientation = rng.choice(list(Orientation))
        offsets = ship_type.offsets(orientation)
    else:
        offsets = ship_type.offsets()
        xs = [dx for dx, _ in offsets]
        ys = [dy for _, dy in offsets]
        anchor = Coordinate(
            rng.randint(-min(xs), board_size - 1 - max(xs)),
            rng.randint(-min(ys), board_size - 1 - max(ys)),
        )
    return [anchor.offset(dx, dy) for dx, dy in offsets]


def can_place(board: Board, cells: Iterable[Coordinate]) -> bool:
    """Check a candidate footprint against the board and its fleet."""
    footprint = set(cells)
    for coord in footprint:
        if not board.is_valid_coordinate(coord):
            return False
        if board.get_cell(coord).state is not CellState.EMPTY:
            return False
        for neighbour in coord.neighbours():
            if neighbour in footprint or not board.is_valid_coordinate(neighbour):
                continue
            if board.get_cell(neighbour).ship_id is not None:
                return False
    return True


def place_ship(
    board: Board,
    ship_type: ShipType,
    rng: random.Random,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> Ship:
    """Place a single ship, raising ``PlacementExhausted`` when no spot is found."""
    for attempt in range(1, max_attempts + 1):
        cells = candidate_cells(ship_type, board.size, rng)
        if not can_place(board, cells):
            continue
        ship = Ship(ship_type, tuple(cells))
        board.add_ship(ship)
        PLACEMENT_COUNTER.add(attempt, attributes={"ship_type": ship_type.value})
        logger.debug(
            "ship_placed",
            extra={"ship_type": ship_type.value, "attempts": attempt, "owner": board.owner},
        )
        return ship

    PLACEMENT_COUNTER.add(max_attempts, attributes={"ship_type": ship_type.value})
    logger.error(
        "ship_placement_exhausted",
        extra={"ship_type": ship_type.value, "attempts": max_attempts, "owner": board.owner},
    )
    raise PlacementExhausted(ship_type.value, max_attempts)


def place_fleet(
    board: Board,
    rng: random.Random,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
) -> list[Ship]:
    """Place the full fleet on an empty board."""
    with tracer.start_as_current_span("placement.place_fleet") as span:
        span.set_attribute("board.owner", board.owner)
        span.set_attribute("board.size", board.size)
        if board.ships:
            raise ValueError("Fleet can only be placed on an empty board.")
        placed = [place_ship(board, ship_type, rng, max_attempts) for ship_type in FLEET_COMPOSITION]
        logger.info(
            "fleet_placed",
            extra={"owner": board.owner, "board_size": board.size, "ships": len(placed)},
        )
        return placed
