"""Concurrent store of live game sessions.

The registry is the only way to reach a session. Its index lock is held just
long enough to look up, insert or remove a session; each session's own lock is
held for the whole of any operation on that session, so a turn check and the
shot that follows it can never interleave with another shot.
"""

from __future__ import annotations

import logging
import random
import threading
import time
from typing import Callable, TypeVar

from seabattle.config import GameConfig, load_game_config
from seabattle.engine.errors import GameError, GameNotFound, NotALocalGame
from seabattle.engine.game import GameSession, GameState, by_identity, by_turn_pointer
from seabattle.engine.ship import Coordinate
from seabattle.telemetry import get_tracer, record_game_metric

from .models import (
    AvailableGame,
    BoardView,
    CreateGameResponse,
    CreateLocalGameResponse,
    GameStatusResponse,
    JoinGameResponse,
    LocalGameStatusResponse,
    ShotResponse,
)

logger = logging.getLogger(__name__)
tracer = get_tracer("seabattle.service.registry")

T = TypeVar("T")


class SessionRegistry:
    """Creates, looks up and serialises access to game sessions."""

    def __init__(
        self,
        config: GameConfig | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.config = config or load_game_config()
        self._clock = clock
        self._sessions: dict[str, GameSession] = {}
        self._lock = threading.Lock()
        self._seed_source = random.Random(self.config.rng_seed)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, game_id: object) -> bool:
        with self._lock:
            return game_id in self._sessions

    # -- internals -------------------------------------------------------

    def _spawn_rng(self) -> random.Random:
        with self._lock:
            return random.Random(self._seed_source.getrandbits(64))

    def _register(self, session: GameSession) -> None:
        session.touch(self._clock())
        with self._lock:
            self._sessions[session.id] = session
        record_game_metric("seabattle_sessions_created_total", 1, {"mode": session.mode.value})

    def _lookup(self, game_id: str) -> GameSession:
        with self._lock:
            session = self._sessions.get(game_id)
        if session is None:
            raise GameNotFound(game_id)
        return session

    def _with_session(self, operation: str, game_id: str, action: Callable[[GameSession], T]) -> T:
        """Run ``action`` on a session while holding that session's lock."""
        with tracer.start_as_current_span(f"registry.{operation}") as span:
            span.set_attribute("game.id", game_id)
            try:
                session = self._lookup(game_id)
                with session.lock:
                    if session.evicted:
                        raise GameNotFound(game_id)
                    result = action(session)
                    session.touch(self._clock())
                    return result
            except GameError as exc:
                span.set_attribute("error", True)
                record_game_metric(
                    "seabattle_rejected_operations_total",
                    1,
                    {"operation": operation, "reason": type(exc).__name__},
                )
                logger.warning(
                    "operation_rejected",
                    extra={"operation": operation, "game_id": game_id, "reason": str(exc)},
                )
                raise

    # -- networked sessions ----------------------------------------------

    def create_game(self, board_size: int | None = None) -> CreateGameResponse:
        """Open a networked game; the creator takes the first seat."""
        size = self.config.clamp_board_size(board_size)
        with tracer.start_as_current_span("registry.create_game") as span:
            span.set_attribute("board.size", size)
            session = GameSession.create(size, self._spawn_rng(), self.config.placement_max_attempts)
            self._register(session)
            return CreateGameResponse(
                game_id=session.id,
                player_id=session.player1.id,
                board_size=size,
            )

    def join_game(self, game_id: str, player_name: str | None = None) -> JoinGameResponse:
        def join(session: GameSession) -> JoinGameResponse:
            player = session.join(player_name)
            return JoinGameResponse(game_id=session.id, player_id=player.id, game_started=True)

        return self._with_session("join_game", game_id, join)

    def shoot(self, game_id: str, player_id: str, x: int, y: int) -> ShotResponse:
        """Fire as ``player_id``; the caller must hold the turn."""

        def shoot(session: GameSession) -> ShotResponse:
            report = session.shoot(Coordinate(x, y), by_identity(player_id))
            return ShotResponse.from_report(report)

        return self._with_session("shoot", game_id, shoot)

    def game_status(self, game_id: str, player_id: str) -> GameStatusResponse:
        def status(session: GameSession) -> GameStatusResponse:
            own, enemy = session.player_view(player_id)
            return GameStatusResponse(
                game_id=session.id,
                state=session.state,
                current_player_id=session.current_player_id,
                winner_id=session.winner_id,
                board_size=session.board_size,
                is_your_turn=session.current_player_id == player_id,
                your_board=BoardView.of(own.board, show_ships=True),
                enemy_board=BoardView.of(enemy.board, show_ships=False) if enemy else None,
            )

        return self._with_session("game_status", game_id, status)

    def available_games(self) -> list[AvailableGame]:
        """List networked games still waiting for a second player, oldest first."""
        with self._lock:
            sessions = list(self._sessions.values())
        available = []
        for session in sessions:
            with session.lock:
                if session.evicted or session.state is not GameState.WAITING_FOR_PLAYER:
                    continue
                available.append(
                    AvailableGame(
                        game_id=session.id,
                        board_size=session.board_size,
                        created_at=session.created_at,
                    )
                )
        return sorted(available, key=lambda game: game.created_at)

    # -- local (hot-seat) sessions ---------------------------------------

    def create_local_game(self, board_size: int | None = None) -> CreateLocalGameResponse:
        size = self.config.clamp_board_size(board_size)
        with tracer.start_as_current_span("registry.create_local_game") as span:
            span.set_attribute("board.size", size)
            session = GameSession.create_local(size, self._spawn_rng(), self.config.placement_max_attempts)
            self._register(session)
            player1, player2 = session.current_and_opponent()
            return CreateLocalGameResponse(
                game_id=session.id,
                player1_id=player1.id,
                player2_id=player2.id,
                board_size=size,
                current_player_id=player1.id,
            )

    def local_game_status(self, game_id: str) -> LocalGameStatusResponse:
        def status(session: GameSession) -> LocalGameStatusResponse:
            if not session.is_local:
                raise NotALocalGame(session.id)
            current, opponent = session.current_and_opponent()
            return LocalGameStatusResponse(
                game_id=session.id,
                state=session.state,
                current_player_id=current.id,
                winner_id=session.winner_id,
                board_size=session.board_size,
                current_player_name=current.name,
                current_player_board=BoardView.of(current.board, show_ships=True),
                opponent_board=BoardView.of(opponent.board, show_ships=False),
            )

        return self._with_session("local_game_status", game_id, status)

    def local_shoot(self, game_id: str, x: int, y: int) -> ShotResponse:
        """Fire on behalf of whoever holds the turn in a local game."""

        def shoot(session: GameSession) -> ShotResponse:
            if not session.is_local:
                raise NotALocalGame(session.id)
            report = session.shoot(Coordinate(x, y), by_turn_pointer)
            return ShotResponse.from_report(report)

        return self._with_session("local_shoot", game_id, shoot)

    # -- eviction ----------------------------------------------------------

    def evict_stale(self, now: float | None = None) -> list[str]:
        """Drop finished and abandoned waiting sessions past their idle TTL."""
        now = self._clock() if now is None else now
        ttl_by_state = {
            GameState.FINISHED: self.config.finished_ttl_seconds,
            GameState.WAITING_FOR_PLAYER: self.config.waiting_ttl_seconds,
        }
        evicted: list[str] = []
        with self._lock:
            for game_id, session in list(self._sessions.items()):
                with session.lock:
                    ttl = ttl_by_state.get(session.state)
                    if ttl is None or now - session.last_activity < ttl:
                        continue
                    session.evicted = True
                    del self._sessions[game_id]
                    evicted.append(game_id)
                    record_game_metric(
                        "seabattle_sessions_evicted_total", 1, {"state": session.state.value}
                    )
        if evicted:
            logger.info("sessions_evicted", extra={"count": len(evicted), "game_ids": evicted})
        return evicted
