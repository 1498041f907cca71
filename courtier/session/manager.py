"""
Game Manager - Runs games on top of a store.

LIFECYCLE:
1. Host creates a game -> room code, host seat, status waiting
2. Players join by room code until the table is full
3. Host starts the game -> round 1 dealt in join order
4. Each turn: current player draws, then plays
5. Round ends -> token awarded; host starts the next round, winner leads
6. First player to the token threshold wins -> status finished

CONCURRENCY:
- Every mutating call holds a lock keyed by game id from load to commit.
  Two plays on one game never interleave; different games never wait
  on each other.
- The reducer works on a copy, so a rejected request commits nothing.
- Reads take no lock and may return a state about to be superseded.
- Events are published after the commit, still under the game's lock,
  so subscribers see one game's events in commit order. A subscriber
  must not call a mutating method for the same game.
"""

from __future__ import annotations
from typing import Any, Sequence
import logging
import random
import threading
import time
import uuid

from ..engine_core.action import Action, ActionKind, ActionResult, ActionRecord
from ..engine_core.action_log import round_start_record
from ..engine_core.cards import Card, MIN_PLAYERS, MAX_PLAYERS, winning_tokens_for
from ..engine_core.errors import (
    ConsistencyError,
    GameAlreadyStarted,
    GameFull,
    GameNotFound,
    GameOver,
    IllegalAction,
    InvalidPlayerCount,
    PlayerNotInGame,
    RoundInProgress,
)
from ..engine_core.reducer import Reducer
from ..engine_core.setup import initialize_round
from ..engine_core.state import Game, GameStatus, GameTable, PlayerSeat, RoundState
from .events import EventBus, EventKind, GameEvent
from .store import GameStore, InMemoryGameStore
from .views import GameView, NarratedAction, build_view, narrate_action

logger = logging.getLogger(__name__)

ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
ROOM_CODE_LENGTH = 6
RECENT_ACTIONS = 10

# Record kind -> event kind published after commit
_EVENT_FOR_RECORD = {
    ActionKind.START_ROUND: EventKind.ROUND_STARTED,
    ActionKind.DRAW_CARD: EventKind.CARD_DRAWN,
    ActionKind.PLAY_CARD: EventKind.CARD_PLAYED,
    ActionKind.WIN_ROUND: EventKind.ROUND_ENDED,
    ActionKind.WIN_GAME: EventKind.GAME_FINISHED,
}


class GameManager:
    """
    Manages games.

    Responsibilities:
    - Lobby: create, join, start
    - Serialize draws and plays per game
    - Commit results to the store and publish events
    - Viewer-scoped reads
    """

    def __init__(
        self,
        store: GameStore | None = None,
        events: EventBus | None = None,
        rng: random.Random | None = None,
    ):
        self.store = store or InMemoryGameStore()
        self.events = events or EventBus()
        self.rng = rng or random.Random()
        self.reducer = Reducer(rng=self.rng)
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, game_id: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(game_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[game_id] = lock
            return lock

    # =========================================================================
    # Lobby
    # =========================================================================

    def create_game(self, host_id: str, host_name: str, max_players: int = MAX_PLAYERS) -> GameTable:
        """Create a waiting game with the caller seated as host."""
        if max_players < MIN_PLAYERS or max_players > MAX_PLAYERS:
            raise InvalidPlayerCount(
                f"max_players must be between {MIN_PLAYERS} and {MAX_PLAYERS}"
            )

        game = Game(
            game_id=str(uuid.uuid4()),
            room_code=self._unique_room_code(),
            created_by=host_id,
            max_players=max_players,
            winning_tokens=winning_tokens_for(max_players),
        )
        host = PlayerSeat(
            game_id=game.game_id,
            player_id=host_id,
            name=host_name,
            is_host=True,
            join_order=1,
        )
        self.store.save_game(game)
        self.store.save_player(host)

        logger.info("Game %s created by %s (room %s)", game.game_id, host_id, game.room_code)
        self.events.publish(GameEvent(
            kind=EventKind.GAME_CREATED,
            game_id=game.game_id,
            payload={"room_code": game.room_code, "host_id": host_id},
        ))
        return GameTable(game=game, players=[host])

    def join_game(self, room_code: str, player_id: str, name: str) -> GameTable:
        """Seat a player in a waiting game. Joining twice is a no-op."""
        game = self.store.find_game_by_room_code(room_code)
        if game is None:
            raise GameNotFound(f"No game with room code {room_code}")

        with self._lock_for(game.game_id):
            table = self._load(game.game_id)
            if table.get_player(player_id) is not None:
                return table
            if table.game.status != GameStatus.WAITING:
                raise GameAlreadyStarted()
            if len(table.players) >= table.game.max_players:
                raise GameFull()

            next_order = max((p.join_order for p in table.players), default=0) + 1
            seat = PlayerSeat(
                game_id=game.game_id,
                player_id=player_id,
                name=name,
                join_order=next_order,
            )
            self.store.save_player(seat)
            table.players.append(seat)

            logger.info("Player %s joined game %s as seat %d", player_id, game.game_id, next_order)
            self.events.publish(GameEvent(
                kind=EventKind.PLAYER_JOINED,
                game_id=game.game_id,
                payload={"player_id": player_id, "name": name, "join_order": next_order},
            ))
        return table

    def start_game(self, game_id: str, caller_id: str) -> ActionResult:
        """Host starts the game; round 1 is dealt in join order."""
        return self._apply(game_id, Action.start_game(caller_id))

    # =========================================================================
    # Rounds and turns
    # =========================================================================

    def initialize_round(
        self,
        game_id: str,
        round_number: int,
        ordered_player_ids: Sequence[str],
        deck: Sequence[Card] | None = None,
    ) -> RoundState:
        """
        Deal a round directly with an explicit turn order.

        Normal play goes through start_game and start_next_round; this is
        the raw entry point for hosts that manage ordering themselves.
        """
        with self._lock_for(game_id):
            table = self._load(game_id)
            if table.game.is_finished:
                raise GameOver()
            previous = table.round
            if previous is not None and not previous.is_over:
                raise RoundInProgress(f"Round {previous.round_number} is still being played")
            expected = previous.round_number + 1 if previous is not None else 1
            if round_number != expected:
                raise IllegalAction(f"Next round must be round {expected}, not {round_number}")

            state = initialize_round(
                game_id, round_number, ordered_player_ids, rng=self.rng, deck=deck,
            )
            for player_id in state.seat_order:
                if table.get_player(player_id) is None:
                    raise PlayerNotInGame(f"Player {player_id} is not seated in game {game_id}")
            game = table.game
            if game.status == GameStatus.WAITING:
                game.status = GameStatus.IN_PROGRESS
                game.winning_tokens = winning_tokens_for(len(state.seat_order))
                game.started_at = time.time()
            table.round = state
            game.current_round = round_number
            record = round_start_record(state, table.names())
            self.store.commit_table(table, [record])

            logger.info("Game %s round %d initialized", game_id, round_number)
            self._publish_records(game_id, [record])
        return state

    def draw_card(self, game_id: str, round_number: int | None, player_id: str) -> ActionResult:
        return self._apply(game_id, Action.draw(player_id, round_number=round_number))

    def play_card(
        self,
        game_id: str,
        card: Card,
        acting_player_id: str,
        target_player_id: str | None = None,
        guess_card: Card | None = None,
    ) -> ActionResult:
        return self._apply(
            game_id,
            Action.play(acting_player_id, card, target_player_id, guess_card),
        )

    def start_next_round(self, game_id: str, caller_id: str) -> ActionResult:
        return self._apply(game_id, Action.start_next_round(caller_id))

    def apply(self, game_id: str, action: Action) -> ActionResult:
        """Apply a prebuilt action (used by bots)."""
        return self._apply(game_id, action)

    # =========================================================================
    # Reads (lock-free)
    # =========================================================================

    def get_table(self, game_id: str) -> GameTable:
        return self._load(game_id)

    def get_view(self, game_id: str, viewer_id: str | None, recent: int = RECENT_ACTIONS) -> GameView:
        table = self._load(game_id)
        records = self.store.list_actions(game_id, limit=recent)
        return build_view(table, viewer_id, records)

    def list_actions(
        self,
        game_id: str,
        viewer_id: str | None,
        round_number: int | None = None,
        limit: int | None = None,
    ) -> list[NarratedAction]:
        self._load(game_id)
        records = self.store.list_actions(game_id, round_number=round_number, limit=limit)
        return [narrate_action(r, viewer_id) for r in records]

    # =========================================================================
    # Internals
    # =========================================================================

    def _load(self, game_id: str) -> GameTable:
        table = self.store.load_table(game_id)
        if table is None:
            raise GameNotFound(f"Game {game_id} not found")
        return table

    def _apply(self, game_id: str, action: Action) -> ActionResult:
        """Load, reduce, commit and publish under the game's lock."""
        with self._lock_for(game_id):
            try:
                table = self._load(game_id)
                result = self.reducer.apply(table, action)
            except ConsistencyError:
                logger.error("Inconsistent data for game %s during %s", game_id, action.action_type.value)
                raise
            if not result.success:
                return result
            self.store.commit_table(result.new_table, result.records)

            for record in result.records:
                logger.info("[%s] %s", game_id, record.message)
            self._publish_records(game_id, result.records)
        return result

    def _publish_records(self, game_id: str, records: list[ActionRecord]) -> None:
        for record in records:
            kind = _EVENT_FOR_RECORD.get(record.kind)
            if kind is None:
                continue
            self.events.publish(GameEvent(
                kind=kind,
                game_id=game_id,
                payload=self._event_payload(record),
            ))

    def _event_payload(self, record: ActionRecord) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "record_id": record.record_id,
            "round_number": record.round_number,
            "turn_number": record.turn_number,
            "player_id": record.player_id,
            "message": record.message,
        }
        if record.card_played is not None:
            payload["card_played"] = record.card_played.label
        if record.target_player_id is not None:
            payload["target_player_id"] = record.target_player_id
        return payload

    def _unique_room_code(self) -> str:
        while True:
            code = "".join(self.rng.choice(ROOM_CODE_ALPHABET) for _ in range(ROOM_CODE_LENGTH))
            if self.store.find_game_by_room_code(code) is None:
                return code
