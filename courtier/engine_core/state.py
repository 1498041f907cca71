"""
Game State - Entities the rules engine operates on.

Design principles:
- Round-scoped arena: every round gets fresh Hand records, so the
  elimination and protection flags can never leak from one round
  into the next.
- Serializable: plain dataclasses, deep-copied by clone() so a
  request can work on a scratch copy and commit only on success.
- Tokens are the only player field that survives across rounds.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from copy import deepcopy
from enum import Enum
import time

from .cards import Card, DECK_SIZE
from .errors import ConsistencyError


class GameStatus(Enum):
    """High-level game lifecycle."""
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


@dataclass
class Game:
    """
    A game: a lobby that becomes a series of rounds.

    current_round runs ahead of the latest RoundState's number once that
    round has a winner; this is the "awaiting next round" signal.
    """
    game_id: str
    room_code: str
    created_by: str
    status: GameStatus = GameStatus.WAITING
    max_players: int = 4
    winning_tokens: int = 4
    current_round: int = 0
    winner_id: str | None = None
    created_at: float = field(default_factory=time.time)
    started_at: float | None = None
    finished_at: float | None = None

    @property
    def is_finished(self) -> bool:
        return self.status == GameStatus.FINISHED


@dataclass
class PlayerSeat:
    """A player seated in a game. join_order fixes the seating baseline."""
    game_id: str
    player_id: str
    name: str
    is_host: bool = False
    tokens: int = 0
    join_order: int = 1
    joined_at: float = field(default_factory=time.time)


@dataclass
class Hand:
    """
    A player's hand for one round.

    Holds 0-2 cards: two only while its owner is deciding what to play.
    """
    player_id: str
    round_number: int
    cards: list[Card] = field(default_factory=list)
    is_protected: bool = False
    is_eliminated: bool = False

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def is_empty(self) -> bool:
        return len(self.cards) == 0

    def holds(self, card: Card) -> bool:
        return card in self.cards

    def remove(self, card: Card) -> None:
        """Remove a single copy of card."""
        self.cards.remove(card)

    def only_card(self) -> Card | None:
        """The single card held between turns, if any."""
        return self.cards[0] if self.cards else None


@dataclass
class RoundState:
    """
    Complete state of one round.

    The deck is drawn from the front. The discard pile is append-only;
    discards_by_player attributes every discarded card to the player
    whose hand it left, which the showdown tie-break sums.
    """
    game_id: str
    round_number: int
    seat_order: list[str]
    current_turn_player_id: str
    deck: list[Card] = field(default_factory=list)
    discard_pile: list[Card] = field(default_factory=list)
    set_aside: Card | None = None
    turn_number: int = 1
    hands: dict[str, Hand] = field(default_factory=dict)
    discards_by_player: dict[str, list[Card]] = field(default_factory=dict)
    round_winner_id: str | None = None
    created_at: float = field(default_factory=time.time)

    @property
    def is_over(self) -> bool:
        return self.round_winner_id is not None

    @property
    def deck_count(self) -> int:
        return len(self.deck)

    def hand(self, player_id: str) -> Hand:
        """Get a seated player's hand for this round."""
        hand = self.hands.get(player_id)
        if hand is None:
            raise ConsistencyError(
                f"No hand for player {player_id} in round {self.round_number}"
            )
        return hand

    def is_seated(self, player_id: str) -> bool:
        return player_id in self.hands

    def active_player_ids(self) -> list[str]:
        """Players still in the round, in seating order."""
        return [pid for pid in self.seat_order if not self.hand(pid).is_eliminated]

    def discard(self, player_id: str, card: Card) -> None:
        """Append card to the discard pile on behalf of player_id."""
        self.discard_pile.append(card)
        self.discards_by_player.setdefault(player_id, []).append(card)

    def eliminate(self, player_id: str) -> Card | None:
        """
        Knock a player out of the round.

        Their remaining cards are discarded face up. Returns the last card
        they held (the one exposed to the table), if any.
        """
        hand = self.hand(player_id)
        exposed = hand.cards[-1] if hand.cards else None
        for card in list(hand.cards):
            self.discard(player_id, card)
        hand.cards.clear()
        hand.is_eliminated = True
        hand.is_protected = False
        return exposed

    def discard_total(self, player_id: str) -> int:
        return sum(card.rank for card in self.discards_by_player.get(player_id, []))

    def card_count(self) -> int:
        """Cards accounted for across every zone; always DECK_SIZE."""
        in_hands = sum(hand.count for hand in self.hands.values())
        set_aside = 1 if self.set_aside is not None else 0
        return len(self.deck) + len(self.discard_pile) + set_aside + in_hands

    def is_conserved(self) -> bool:
        return self.card_count() == DECK_SIZE

    def clone(self) -> RoundState:
        """Deep copy the round."""
        return deepcopy(self)


@dataclass
class GameTable:
    """
    Everything one request needs: the game, its seats and the live round.

    Loaded from the store, mutated as a scratch copy, committed whole.
    """
    game: Game
    players: list[PlayerSeat] = field(default_factory=list)
    round: RoundState | None = None

    @property
    def game_id(self) -> str:
        return self.game.game_id

    @property
    def seating(self) -> list[PlayerSeat]:
        """Seats in join order."""
        return sorted(self.players, key=lambda p: p.join_order)

    @property
    def host(self) -> PlayerSeat | None:
        for p in self.players:
            if p.is_host:
                return p
        return None

    def get_player(self, player_id: str) -> PlayerSeat | None:
        """Get seat by player ID."""
        for p in self.players:
            if p.player_id == player_id:
                return p
        return None

    def names(self) -> dict[str, str]:
        return {p.player_id: p.name for p in self.players}

    def require_round(self) -> RoundState:
        if self.round is None:
            raise ConsistencyError(
                f"Game {self.game_id} is in progress but has no round state"
            )
        return self.round

    def clone(self) -> GameTable:
        """Deep copy the table."""
        return deepcopy(self)
