"""Tests for the Board mechanics and shot resolution."""

import pytest

from seabattle.engine.board import Board, CellState, ShotResult
from seabattle.engine.errors import (
    CellAlreadyTargeted,
    CoordinateOutOfRange,
    GameError,
    InvalidBoardSize,
)
from seabattle.engine.ship import Coordinate, Ship, ShipType


def _destroyer(board: Board) -> Ship:
    ship = Ship(ShipType.DOUBLE, (Coordinate(0, 0), Coordinate(1, 0)))
    board.add_ship(ship)
    return ship


def test_new_board_is_empty() -> None:
    board = Board(size=12)
    cells = list(board.iter_cells())
    assert len(cells) == 144
    assert all(cell.state is CellState.EMPTY for cell in cells)
    assert [(cell.x, cell.y) for cell in cells[:3]] == [(0, 0), (1, 0), (2, 0)]


@pytest.mark.parametrize("size", [9, 21, 0])
def test_board_rejects_unsupported_sizes(size: int) -> None:
    with pytest.raises(InvalidBoardSize):
        Board(size=size)


def test_add_ship_tags_cells() -> None:
    board = Board()
    ship = _destroyer(board)
    for coord in ship.cells:
        cell = board.get_cell(coord)
        assert cell.state is CellState.SHIP
        assert cell.ship_id == ship.id
    assert board.ships == [ship]
    assert board.occupied_cells() == 2


def test_board_shot_tracking() -> None:
    board = Board()
    ship = _destroyer(board)

    hit = board.receive_shot(Coordinate(0, 0))
    assert hit.result is ShotResult.HIT
    assert hit.ship is ship
    assert hit.sunk_ship_type is None
    assert ship.hit_count == 1
    assert board.get_cell(Coordinate(0, 0)).state is CellState.HIT
    assert not board.all_ships_sunk()

    miss = board.receive_shot(Coordinate(5, 5))
    assert miss.result is ShotResult.WATER
    assert miss.ship is None
    assert board.get_cell(Coordinate(5, 5)).state is CellState.MISS

    sunk = board.receive_shot(Coordinate(1, 0))
    assert sunk.result is ShotResult.SUNK
    assert sunk.sunk_ship_type is ShipType.DOUBLE
    assert board.all_ships_sunk()


@pytest.mark.parametrize("coord", [Coordinate(0, 0), Coordinate(5, 5)])
def test_repeat_shot_is_rejected_without_mutation(coord: Coordinate) -> None:
    board = Board()
    ship = _destroyer(board)
    board.receive_shot(coord)
    hits_before = ship.hit_count

    with pytest.raises(CellAlreadyTargeted):
        board.receive_shot(coord)
    assert ship.hit_count == hits_before


@pytest.mark.parametrize("coord", [Coordinate(-1, 0), Coordinate(0, 10), Coordinate(11, 11)])
def test_out_of_range_shot(coord: Coordinate) -> None:
    board = Board()
    with pytest.raises(CoordinateOutOfRange) as excinfo:
        board.receive_shot(coord)
    assert isinstance(excinfo.value, ValueError)
    assert isinstance(excinfo.value, GameError)
    assert all(cell.state is CellState.EMPTY for cell in board.iter_cells())


def test_ship_by_id_unknown() -> None:
    with pytest.raises(KeyError):
        Board().ship_by_id("missing")
