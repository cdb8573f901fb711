"""Session registry and the result models it hands to the transport layer."""

from .models import (
    AvailableGame,
    BoardView,
    CellView,
    CreateGameResponse,
    CreateLocalGameResponse,
    GameStatusResponse,
    JoinGameResponse,
    LocalGameStatusResponse,
    ShotResponse,
)
from .reaper import SessionReaper
from .registry import SessionRegistry

__all__ = [
    "AvailableGame",
    "BoardView",
    "CellView",
    "CreateGameResponse",
    "CreateLocalGameResponse",
    "GameStatusResponse",
    "JoinGameResponse",
    "LocalGameStatusResponse",
    "SessionReaper",
    "SessionRegistry",
    "ShotResponse",
]
