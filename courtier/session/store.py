"""
Game Store - Keyed rows for games, seats, rounds, hands and actions.

The engine only needs point reads, point writes and range reads by game
id. GameStore is that contract; InMemoryGameStore is the reference
implementation used by the server and tests.

Rows are copied on the way in and on the way out, so a reader never
shares objects with a writer mid-request.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from copy import deepcopy
import threading

from ..engine_core.action import ActionRecord
from ..engine_core.errors import ConsistencyError
from ..engine_core.state import Game, GameTable, Hand, PlayerSeat, RoundState


class GameStore(ABC):
    """Persistence contract the session manager relies on."""

    @abstractmethod
    def save_game(self, game: Game) -> None:
        pass

    @abstractmethod
    def get_game(self, game_id: str) -> Game | None:
        pass

    @abstractmethod
    def find_game_by_room_code(self, room_code: str) -> Game | None:
        pass

    @abstractmethod
    def save_player(self, seat: PlayerSeat) -> None:
        pass

    @abstractmethod
    def list_players(self, game_id: str) -> list[PlayerSeat]:
        """Seats in join order."""
        pass

    @abstractmethod
    def save_round(self, state: RoundState) -> None:
        """Persist a round and its hands."""
        pass

    @abstractmethod
    def get_round(self, game_id: str, round_number: int) -> RoundState | None:
        pass

    @abstractmethod
    def latest_round_number(self, game_id: str) -> int | None:
        pass

    @abstractmethod
    def append_actions(self, game_id: str, records: list[ActionRecord]) -> None:
        pass

    @abstractmethod
    def list_actions(
        self,
        game_id: str,
        round_number: int | None = None,
        limit: int | None = None,
    ) -> list[ActionRecord]:
        """Actions oldest first; limit keeps the most recent ones."""
        pass

    def load_table(self, game_id: str) -> GameTable | None:
        """Assemble the game, its seats and its latest round."""
        game = self.get_game(game_id)
        if game is None:
            return None

        round_state = None
        round_number = self.latest_round_number(game_id)
        if round_number is not None:
            round_state = self.get_round(game_id, round_number)

        return GameTable(
            game=game,
            players=self.list_players(game_id),
            round=round_state,
        )

    def commit_table(self, table: GameTable, records: list[ActionRecord] | None = None) -> None:
        """Write every row of a table plus its new records."""
        self.save_game(table.game)
        for seat in table.players:
            self.save_player(seat)
        if table.round is not None:
            self.save_round(table.round)
        if records:
            self.append_actions(table.game_id, records)


class InMemoryGameStore(GameStore):
    """
    Dict-backed store.

    Rounds are kept without their hands; hands are separate rows keyed by
    (game, round, player) and reattached on read.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._games: dict[str, Game] = {}
        self._players: dict[str, dict[str, PlayerSeat]] = {}
        self._rounds: dict[tuple[str, int], RoundState] = {}
        self._hands: dict[tuple[str, int, str], Hand] = {}
        self._actions: dict[str, list[ActionRecord]] = {}

    def save_game(self, game: Game) -> None:
        with self._lock:
            self._games[game.game_id] = deepcopy(game)

    def get_game(self, game_id: str) -> Game | None:
        with self._lock:
            game = self._games.get(game_id)
            return deepcopy(game) if game else None

    def find_game_by_room_code(self, room_code: str) -> Game | None:
        code = room_code.strip().upper()
        with self._lock:
            for game in self._games.values():
                if game.room_code == code:
                    return deepcopy(game)
        return None

    def save_player(self, seat: PlayerSeat) -> None:
        with self._lock:
            self._players.setdefault(seat.game_id, {})[seat.player_id] = deepcopy(seat)

    def list_players(self, game_id: str) -> list[PlayerSeat]:
        with self._lock:
            seats = list(self._players.get(game_id, {}).values())
            return [deepcopy(s) for s in sorted(seats, key=lambda s: s.join_order)]

    def save_round(self, state: RoundState) -> None:
        row = deepcopy(state)
        hands = row.hands
        row.hands = {}
        with self._lock:
            self._rounds[(state.game_id, state.round_number)] = row
            for player_id, hand in hands.items():
                self._hands[(state.game_id, state.round_number, player_id)] = hand

    def get_round(self, game_id: str, round_number: int) -> RoundState | None:
        with self._lock:
            row = self._rounds.get((game_id, round_number))
            if row is None:
                return None
            state = deepcopy(row)
            for player_id in state.seat_order:
                hand = self._hands.get((game_id, round_number, player_id))
                if hand is None:
                    raise ConsistencyError(
                        f"Missing hand for {player_id} in game {game_id} round {round_number}"
                    )
                state.hands[player_id] = deepcopy(hand)
            return state

    def latest_round_number(self, game_id: str) -> int | None:
        with self._lock:
            numbers = [n for (gid, n) in self._rounds if gid == game_id]
            return max(numbers) if numbers else None

    def append_actions(self, game_id: str, records: list[ActionRecord]) -> None:
        with self._lock:
            self._actions.setdefault(game_id, []).extend(deepcopy(records))

    def list_actions(
        self,
        game_id: str,
        round_number: int | None = None,
        limit: int | None = None,
    ) -> list[ActionRecord]:
        with self._lock:
            records = self._actions.get(game_id, [])
            if round_number is not None:
                records = [r for r in records if r.round_number == round_number]
            if limit is not None:
                records = records[-limit:] if limit > 0 else []
            return deepcopy(records)
