"""Single-player board management for the Sea Battle engine."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from seabattle.telemetry import get_meter, get_tracer

from .errors import CellAlreadyTargeted, CoordinateOutOfRange, InvalidBoardSize
from .ship import Coordinate, Ship, ShipType

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.board")
meter = get_meter("seabattle.engine.board")

SHOT_COUNTER = meter.create_counter(
    "seabattle_engine_shots",
    unit="1",
    description="Shots received by a board",
)

MIN_BOARD_SIZE = 10
MAX_BOARD_SIZE = 20


class CellState(Enum):
    """State of a single board cell."""

    EMPTY = "empty"
    SHIP = "ship"
    HIT = "hit"
    MISS = "miss"


class ShotResult(Enum):
    """Outcome reported to the shooter."""

    WATER = "Water"
    HIT = "Hit"
    SUNK = "Sunk"


@dataclass
class Cell:
    """One square of the grid; the coordinate never changes."""

    coord: Coordinate
    state: CellState = CellState.EMPTY
    ship_id: str | None = None

    @property
    def x(self) -> int:
        return self.coord.x

    @property
    def y(self) -> int:
        return self.coord.y

    @property
    def targeted(self) -> bool:
        return self.state in (CellState.HIT, CellState.MISS)


@dataclass(frozen=True)
class ShotOutcome:
    """Result of resolving one shot against a board."""

    result: ShotResult
    coord: Coordinate
    ship: Ship | None = None

    @property
    def sunk_ship_type(self) -> ShipType | None:
        if self.result is ShotResult.SUNK and self.ship is not None:
            return self.ship.ship_type
        return None


@dataclass
class Board:
    """A square grid of cells and the fleet placed on it."""

    size: int = MIN_BOARD_SIZE
    owner: str = "unknown"
    ships: list[Ship] = field(default_factory=list)
    _cells: list[list[Cell]] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if not MIN_BOARD_SIZE <= self.size <= MAX_BOARD_SIZE:
            raise InvalidBoardSize(self.size)
        # Row-major: _cells[y][x].
        self._cells = [
            [Cell(Coordinate(x, y)) for x in range(self.size)] for y in range(self.size)
        ]

    def is_valid_coordinate(self, coord: Coordinate) -> bool:
        """Check whether a coordinate lies inside the board boundaries."""
        return 0 <= coord.x < self.size and 0 <= coord.y < self.size

    def get_cell(self, coord: Coordinate) -> Cell:
        if not self.is_valid_coordinate(coord):
            raise CoordinateOutOfRange(coord.x, coord.y, self.size)
        return self._cells[coord.y][coord.x]

    def iter_cells(self):
        """Yield every cell in row-major order."""
        for row in self._cells:
            yield from row

    def ship_by_id(self, ship_id: str) -> Ship:
        for ship in self.ships:
            if ship.id == ship_id:
                return ship
        raise KeyError(ship_id)

    def add_ship(self, ship: Ship) -> None:
        """Mark the ship's cells occupied and append it to the fleet.

        Callers are expected to have validated the cells first.
        """
        for coord in ship.cells:
            cell = self.get_cell(coord)
            cell.state = CellState.SHIP
            cell.ship_id = ship.id
        self.ships.append(ship)

    def receive_shot(self, coord: Coordinate) -> ShotOutcome:
        """Register a shot at this board and return its outcome."""
        with tracer.start_as_current_span("board.receive_shot") as span:
            span.set_attribute("shot.x", coord.x)
            span.set_attribute("shot.y", coord.y)
            span.set_attribute("board.owner", self.owner)
            if not self.is_valid_coordinate(coord):
                logger.warning(
                    "shot_out_of_bounds",
                    extra={"x": coord.x, "y": coord.y, "owner": self.owner},
                )
                raise CoordinateOutOfRange(coord.x, coord.y, self.size)
            cell = self._cells[coord.y][coord.x]
            if cell.targeted:
                logger.warning(
                    "shot_duplicate",
                    extra={"x": coord.x, "y": coord.y, "owner": self.owner},
                )
                raise CellAlreadyTargeted(coord.x, coord.y)

            if cell.state is CellState.SHIP and cell.ship_id is not None:
                ship = self.ship_by_id(cell.ship_id)
                cell.state = CellState.HIT
                ship.register_hit()
                result = ShotResult.SUNK if ship.is_sunk() else ShotResult.HIT
                outcome = ShotOutcome(result, coord, ship)
            else:
                cell.state = CellState.MISS
                outcome = ShotOutcome(ShotResult.WATER, coord)

            span.set_attribute("shot.outcome", outcome.result.value)
            SHOT_COUNTER.add(1, attributes={"outcome": outcome.result.value})
            logger.info(
                "shot_resolved",
                extra={
                    "x": coord.x,
                    "y": coord.y,
                    "result": outcome.result.value,
                    "owner": self.owner,
                },
            )
            return outcome

    def all_ships_sunk(self) -> bool:
        """Fleet destroyed: every placed ship is sunk."""
        return all(ship.is_sunk() for ship in self.ships)

    def occupied_cells(self) -> int:
        return sum(len(ship.cells) for ship in self.ships)
