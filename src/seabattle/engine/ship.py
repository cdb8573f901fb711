"""Ship domain model for the Sea Battle engine."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class Coordinate:
    """Immutable board coordinate; ``x`` is the column, ``y`` the row."""

    x: int
    y: int

    def offset(self, dx: int, dy: int) -> Coordinate:
        return Coordinate(self.x + dx, self.y + dy)

    def neighbours(self) -> list[Coordinate]:
        """Return the 8-neighbourhood of this coordinate (unbounded)."""
        return [
            Coordinate(self.x + dx, self.y + dy)
            for dy in (-1, 0, 1)
            for dx in (-1, 0, 1)
            if dx or dy
        ]


class Orientation(Enum):
    """Allowed orientations for straight ships."""

    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


Offsets = tuple[tuple[int, int], ...]

# Cross: centre plus one cell in each cardinal direction.
#     .X.
#     XXX
#     .X.
_CROSS: Offsets = ((0, -1), (-1, 0), (0, 0), (1, 0), (0, 1))

# Plus: a row of four with one cell below the second.
#     XXXX
#     .X..
_PLUS: Offsets = ((0, 0), (1, 0), (2, 0), (3, 0), (1, 1))


class ShipType(Enum):
    """The closed set of ship shapes a fleet is built from."""

    SINGLE = "Single"
    DOUBLE = "Double"
    TRIPLE = "Triple"
    CROSS = "Cross"
    PLUS = "Plus"

    @property
    def is_straight(self) -> bool:
        """Straight ships take an orientation; shaped ships have a fixed footprint."""
        return self in _STRAIGHT_LENGTHS

    @property
    def size(self) -> int:
        """Return the number of cells the ship occupies."""
        return len(self.offsets())

    def offsets(self, orientation: Orientation = Orientation.HORIZONTAL) -> Offsets:
        """Return the (dx, dy) offsets of each cell relative to the anchor."""
        if self is ShipType.CROSS:
            return _CROSS
        if self is ShipType.PLUS:
            return _PLUS
        length = _STRAIGHT_LENGTHS[self]
        if orientation is Orientation.HORIZONTAL:
            return tuple((step, 0) for step in range(length))
        return tuple((0, step) for step in range(length))


_STRAIGHT_LENGTHS = {
    ShipType.SINGLE: 1,
    ShipType.DOUBLE: 2,
    ShipType.TRIPLE: 3,
}


@dataclass
class Ship:
    """A single ship instance placed on a board."""

    ship_type: ShipType
    cells: tuple[Coordinate, ...]
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    hit_count: int = 0

    def __post_init__(self) -> None:
        if len(self.cells) != self.ship_type.size:
            raise ValueError(
                f"{self.ship_type.value} ship needs {self.ship_type.size} cells, got {len(self.cells)}."
            )

    def coordinates(self) -> list[Coordinate]:
        """Return the ordered list of coordinates occupied by this ship."""
        return list(self.cells)

    def register_hit(self) -> None:
        if self.hit_count >= len(self.cells):
            raise ValueError(f"Ship {self.id} is already sunk.")
        self.hit_count += 1

    def is_sunk(self) -> bool:
        return self.hit_count == len(self.cells)
