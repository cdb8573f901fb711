"""Wire-level result models returned by the session registry."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict

from seabattle.engine.board import Board, CellState, ShotResult
from seabattle.engine.game import GameState, ShotReport


class _Response(BaseModel):
    model_config = ConfigDict(frozen=True)


class CellView(_Response):
    x: int
    y: int
    is_hit: bool
    is_miss: bool
    is_ship: bool


class BoardView(_Response):
    """Viewer-scoped projection of a board, cells flattened row by row."""

    size: int
    cells: list[CellView]

    @classmethod
    def of(cls, board: Board, show_ships: bool) -> BoardView:
        """Project ``board``; ship positions appear only when ``show_ships``."""
        cells = [
            CellView(
                x=cell.x,
                y=cell.y,
                is_hit=cell.state is CellState.HIT,
                is_miss=cell.state is CellState.MISS,
                is_ship=show_ships and cell.state in (CellState.SHIP, CellState.HIT),
            )
            for cell in board.iter_cells()
        ]
        return cls(size=board.size, cells=cells)

    def cell(self, x: int, y: int) -> CellView:
        return self.cells[y * self.size + x]


class CreateGameResponse(_Response):
    game_id: str
    player_id: str
    board_size: int


class JoinGameResponse(_Response):
    game_id: str
    player_id: str
    game_started: bool


class ShotResponse(_Response):
    result: ShotResult
    game_over: bool
    winner_id: str | None = None
    ship_type_sunk: str | None = None

    @classmethod
    def from_report(cls, report: ShotReport) -> ShotResponse:
        sunk = report.outcome.sunk_ship_type
        return cls(
            result=report.result,
            game_over=report.game_over,
            winner_id=report.winner_id if report.game_over else None,
            ship_type_sunk=sunk.value if sunk is not None else None,
        )


class GameStatusResponse(_Response):
    game_id: str
    state: GameState
    current_player_id: str | None
    winner_id: str | None
    board_size: int
    is_your_turn: bool
    your_board: BoardView
    enemy_board: BoardView | None = None


class AvailableGame(_Response):
    game_id: str
    board_size: int
    created_at: datetime


class CreateLocalGameResponse(_Response):
    game_id: str
    player1_id: str
    player2_id: str
    board_size: int
    current_player_id: str


class LocalGameStatusResponse(_Response):
    game_id: str
    state: GameState
    current_player_id: str
    winner_id: str | None
    board_size: int
    current_player_name: str
    current_player_board: BoardView
    opponent_board: BoardView
