"""
Turn Sequencer - Whose turn it is and what they may do before playing.

Each turn is: draw one card, then play one of the two cards held.
The sequencer owns the pre-play checks and the hand-off to the next
player; the card effect itself belongs to the resolver.
"""

from __future__ import annotations

from .cards import Card, COUNTESS_COMPANIONS
from .errors import (
    NotYourTurn,
    MustDrawFirst,
    CountessForced,
    CardNotInHand,
    DeckEmpty,
    AlreadyDrawn,
    RoundOver,
)
from .state import RoundState


def ensure_turn(state: RoundState, player_id: str) -> None:
    """Reject requests from anyone but the current player."""
    if state.is_over:
        raise RoundOver()
    if player_id != state.current_turn_player_id:
        raise NotYourTurn()


def countess_forced(cards: list[Card]) -> bool:
    """True when the Countess shares a hand with the King or a Prince."""
    return Card.COUNTESS in cards and any(c in COUNTESS_COMPANIONS for c in cards)


def validate_play(state: RoundState, acting_player_id: str, card: Card) -> None:
    """
    Check a play request before anything is touched.

    Raises NotYourTurn, MustDrawFirst, CardNotInHand or CountessForced.
    """
    ensure_turn(state, acting_player_id)
    hand = state.hand(acting_player_id)

    if hand.count < 2:
        raise MustDrawFirst()

    if not hand.holds(card):
        raise CardNotInHand(f"{card.label} is not in your hand")

    if countess_forced(hand.cards) and card is not Card.COUNTESS:
        raise CountessForced()


def draw_card(state: RoundState, player_id: str) -> Card:
    """
    Move the top card of the deck into the current player's hand.

    The deck is consumed front to back and never reshuffled mid-round.
    """
    ensure_turn(state, player_id)
    hand = state.hand(player_id)

    if not state.deck:
        raise DeckEmpty()
    if hand.count >= 2:
        raise AlreadyDrawn()

    card = state.deck.pop(0)
    hand.cards.append(card)
    return card


def next_seat(state: RoundState, after_player_id: str) -> str | None:
    """
    Next player still in the round strictly after after_player_id,
    wrapping around the seating order. None if nobody else remains.
    """
    order = state.seat_order
    if after_player_id not in order:
        return None

    start = order.index(after_player_id)
    for offset in range(1, len(order)):
        candidate = order[(start + offset) % len(order)]
        if not state.hand(candidate).is_eliminated:
            return candidate
    return None


def advance_turn(state: RoundState) -> str | None:
    """
    Hand the turn to the next player and start their turn.

    Starting a turn ends that player's Handmaid protection. Returns the
    new current player, or None when the round has nobody left to pass
    to (callers check for round end first).
    """
    next_player_id = next_seat(state, state.current_turn_player_id)
    if next_player_id is None:
        return None

    state.hand(next_player_id).is_protected = False
    state.current_turn_player_id = next_player_id
    state.turn_number += 1
    return next_player_id
