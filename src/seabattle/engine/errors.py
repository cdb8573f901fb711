"""Exceptions raised by the Sea Battle engine and session registry."""

from __future__ import annotations


class GameError(Exception):
    """Base class for rejections a caller can recover from."""


class GameNotFound(GameError, LookupError):
    def __init__(self, game_id: str) -> None:
        super().__init__(f"Game {game_id} not found.")
        self.game_id = game_id


class GameAlreadyFull(GameError):
    def __init__(self, game_id: str) -> None:
        super().__init__(f"Game {game_id} is already full.")
        self.game_id = game_id


class NotInProgress(GameError, RuntimeError):
    def __init__(self, game_id: str) -> None:
        super().__init__(f"Game {game_id} is not in progress.")
        self.game_id = game_id


class NotYourTurn(GameError, RuntimeError):
    def __init__(self, player_id: str) -> None:
        super().__init__(f"It is not player {player_id}'s turn.")
        self.player_id = player_id


class UnknownPlayer(GameError):
    def __init__(self, player_id: str) -> None:
        super().__init__(f"Player {player_id} holds no seat in this game.")
        self.player_id = player_id


class PlayerNotInGame(GameError):
    def __init__(self, player_id: str) -> None:
        super().__init__(f"Player {player_id} is not in this game.")
        self.player_id = player_id


class NotALocalGame(GameError):
    def __init__(self, game_id: str) -> None:
        super().__init__(f"Game {game_id} is not a local game.")
        self.game_id = game_id


class CellAlreadyTargeted(GameError, ValueError):
    def __init__(self, x: int, y: int) -> None:
        super().__init__(f"Cell ({x}, {y}) has already been targeted.")
        self.x = x
        self.y = y


class CoordinateOutOfRange(GameError, ValueError):
    def __init__(self, x: int, y: int, size: int) -> None:
        super().__init__(f"Coordinates ({x}, {y}) are outside the {size}x{size} board.")
        self.x = x
        self.y = y


class InvalidBoardSize(GameError, ValueError):
    def __init__(self, size: int) -> None:
        super().__init__(f"Board size {size} is outside the supported range.")
        self.size = size


class PlacementExhausted(RuntimeError):
    """No valid location was found for a ship within the retry budget.

    This is an internal fault, not a caller error: the fixed fleet always fits
    on supported board sizes.
    """

    def __init__(self, ship_type: str, attempts: int) -> None:
        super().__init__(f"Could not place ship of type {ship_type} after {attempts} attempts.")
        self.ship_type = ship_type
        self.attempts = attempts
