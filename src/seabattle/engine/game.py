"""Two-player game session state machine."""

from __future__ import annotations

import logging
import random
import threading
import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable

from seabattle.telemetry import get_meter, get_tracer

from .board import Board, ShotOutcome, ShotResult
from .errors import (
    GameAlreadyFull,
    NotALocalGame,
    NotInProgress,
    NotYourTurn,
    PlayerNotInGame,
    UnknownPlayer,
)
from .placement import DEFAULT_MAX_ATTEMPTS, place_fleet
from .ship import Coordinate

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.engine.game")
meter = get_meter("seabattle.engine.game")

MOVE_COUNTER = meter.create_counter(
    "seabattle_engine_moves",
    unit="1",
    description="Number of shots resolved by game sessions",
)

PLAYER1_NAME = "Player 1"
PLAYER2_NAME = "Player 2"


class GameMode(Enum):
    NETWORKED = "Networked"
    LOCAL = "Local"


class GameState(Enum):
    """High-level lifecycle of a session. No transition ever goes backwards."""

    WAITING_FOR_PLAYER = "WaitingForPlayer"
    IN_PROGRESS = "InProgress"
    FINISHED = "Finished"


@dataclass
class Player:
    """A seat in a session together with its fully placed board."""

    name: str
    board: Board
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @classmethod
    def with_fleet(
        cls,
        name: str,
        board_size: int,
        rng: random.Random,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> Player:
        """Create a player whose board already carries a complete fleet."""
        player_id = str(uuid.uuid4())
        board = Board(size=board_size, owner=player_id)
        place_fleet(board, rng, max_attempts)
        return cls(name=name, board=board, id=player_id)


@dataclass(frozen=True)
class ShotReport:
    """What a shot did to the session."""

    outcome: ShotOutcome
    shooter_id: str
    game_over: bool
    winner_id: str | None

    @property
    def result(self) -> ShotResult:
        return self.outcome.result


SeatResolver = Callable[["GameSession"], tuple[Player, Player]]


def by_identity(player_id: str) -> SeatResolver:
    """Seat the caller by identity; the shooter must hold the turn."""

    def resolve(session: GameSession) -> tuple[Player, Player]:
        seats = session.seats_of(player_id)
        if seats is None:
            raise UnknownPlayer(player_id)
        if session.current_player_id != player_id:
            raise NotYourTurn(player_id)
        return seats

    return resolve


def by_turn_pointer(session: GameSession) -> tuple[Player, Player]:
    """Seat whoever holds the turn; local sessions only."""
    if session.mode is not GameMode.LOCAL:
        raise NotALocalGame(session.id)
    return session.current_and_opponent()


@dataclass
class GameSession:
    """Owns both players, the turn pointer and the lifecycle state.

    A session is not thread-safe on its own: callers hold ``lock`` for the
    whole of any operation on it.
    """

    board_size: int
    player1: Player
    rng: random.Random = field(repr=False)
    mode: GameMode = GameMode.NETWORKED
    state: GameState = GameState.WAITING_FOR_PLAYER
    player2: Player | None = None
    current_player_id: str | None = None
    winner_id: str | None = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    last_activity: float = field(default_factory=time.monotonic)
    max_attempts: int = field(default=DEFAULT_MAX_ATTEMPTS, repr=False)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)
    evicted: bool = field(default=False, repr=False)

    @classmethod
    def create(
        cls,
        board_size: int,
        rng: random.Random,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> GameSession:
        """Open a networked session waiting for a second player."""
        with tracer.start_as_current_span("game.create") as span:
            player1 = Player.with_fleet(PLAYER1_NAME, board_size, rng, max_attempts)
            session = cls(board_size=board_size, player1=player1, rng=rng, max_attempts=max_attempts)
            span.set_attribute("game.id", session.id)
            logger.info(
                "game_created",
                extra={"game_id": session.id, "board_size": board_size, "mode": session.mode.value},
            )
            return session

    @classmethod
    def create_local(
        cls,
        board_size: int,
        rng: random.Random,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    ) -> GameSession:
        """Open a hot-seat session that starts immediately with both players."""
        with tracer.start_as_current_span("game.create_local") as span:
            player1 = Player.with_fleet(PLAYER1_NAME, board_size, rng, max_attempts)
            player2 = Player.with_fleet(PLAYER2_NAME, board_size, rng, max_attempts)
            session = cls(
                board_size=board_size,
                player1=player1,
                player2=player2,
                rng=rng,
                mode=GameMode.LOCAL,
                state=GameState.IN_PROGRESS,
                current_player_id=player1.id,
                max_attempts=max_attempts,
            )
            span.set_attribute("game.id", session.id)
            logger.info(
                "game_created",
                extra={"game_id": session.id, "board_size": board_size, "mode": session.mode.value},
            )
            return session

    @property
    def is_full(self) -> bool:
        return self.player2 is not None

    @property
    def is_local(self) -> bool:
        return self.mode is GameMode.LOCAL

    def touch(self, now: float | None = None) -> None:
        self.last_activity = time.monotonic() if now is None else now

    def join(self, player_name: str | None = None) -> Player:
        """Seat the second player and start the game."""
        if self.is_full:
            logger.warning("join_rejected_game_full", extra={"game_id": self.id})
            raise GameAlreadyFull(self.id)
        player2 = Player.with_fleet(player_name or PLAYER2_NAME, self.board_size, self.rng, self.max_attempts)
        self.player2 = player2
        self.state = GameState.IN_PROGRESS
        self.current_player_id = self.player1.id
        logger.info(
            "game_joined",
            extra={"game_id": self.id, "player_id": player2.id, "current_player": self.player1.id},
        )
        return player2

    def seats_of(self, player_id: str) -> tuple[Player, Player | None] | None:
        """Return (caller, opponent) for a seated player, or None."""
        if self.player1.id == player_id:
            return self.player1, self.player2
        if self.player2 is not None and self.player2.id == player_id:
            return self.player2, self.player1
        return None

    def current_and_opponent(self) -> tuple[Player, Player]:
        if self.player2 is None:
            raise NotInProgress(self.id)
        if self.current_player_id == self.player2.id:
            return self.player2, self.player1
        return self.player1, self.player2

    def player_view(self, player_id: str) -> tuple[Player, Player | None]:
        seats = self.seats_of(player_id)
        if seats is None:
            raise PlayerNotInGame(player_id)
        return seats

    def shoot(self, coord: Coordinate, seats: SeatResolver) -> ShotReport:
        """Resolve one shot; ``seats`` decides who is shooting at whom.

        A miss hands the turn to the target. A hit or a sinking keeps it with the
        shooter. Sinking the last ship finishes the game.
        """
        with tracer.start_as_current_span("game.shoot") as span:
            span.set_attribute("game.id", self.id)
            span.set_attribute("x", coord.x)
            span.set_attribute("y", coord.y)
            if self.state is not GameState.IN_PROGRESS:
                logger.warning(
                    "shot_rejected_game_not_in_progress",
                    extra={"game_id": self.id, "state": self.state.value},
                )
                raise NotInProgress(self.id)
            shooter, target = seats(self)
            span.set_attribute("shooter", shooter.id)

            outcome = target.board.receive_shot(coord)

            game_over = target.board.all_ships_sunk()
            if game_over:
                self.state = GameState.FINISHED
                self.winner_id = shooter.id
                span.set_attribute("game.winner", shooter.id)
                logger.info("game_finished", extra={"game_id": self.id, "winner": shooter.id})
            elif outcome.result is ShotResult.WATER:
                self.current_player_id = target.id
            span.set_attribute("next_player", self.current_player_id or "")

            MOVE_COUNTER.add(1, attributes={"result": outcome.result.value, "mode": self.mode.value})
            return ShotReport(
                outcome=outcome,
                shooter_id=shooter.id,
                game_over=game_over,
                winner_id=self.winner_id,
            )
