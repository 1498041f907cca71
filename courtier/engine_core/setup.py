"""
Round Setup - Creates the initial state of a round.

This module handles:
- Building and shuffling the 16-card deck
- Setting one card aside face down
- Dealing one card to each player in turn order
- Fresh hands (unprotected, not eliminated) for every seat

The caller controls turn order: the first id leads.
"""

from __future__ import annotations
import random
from typing import Sequence

from .cards import Card, MIN_PLAYERS, MAX_PLAYERS, shuffled_deck
from .errors import InvalidPlayerCount
from .state import RoundState, Hand


def initialize_round(
    game_id: str,
    round_number: int,
    ordered_player_ids: Sequence[str],
    rng: random.Random | None = None,
    deck: Sequence[Card] | None = None,
) -> RoundState:
    """
    Set up a new round.

    Args:
        game_id: Owning game
        round_number: 1-based round number
        ordered_player_ids: Turn order; the first player leads
        rng: Random source for the shuffle
        deck: Pre-arranged deck (top card first), mostly for tests

    Returns:
        RoundState with hands dealt and the first player on turn
    """
    player_ids = list(ordered_player_ids)
    if len(player_ids) < MIN_PLAYERS or len(player_ids) > MAX_PLAYERS:
        raise InvalidPlayerCount(
            f"A round needs {MIN_PLAYERS}-{MAX_PLAYERS} players, got {len(player_ids)}"
        )
    if len(set(player_ids)) != len(player_ids):
        raise InvalidPlayerCount("Player ids must be unique")

    cards = list(deck) if deck is not None else shuffled_deck(rng)

    # Face-down card never re-enters the deck
    set_aside = cards.pop(0)

    hands = _deal_hands(player_ids, round_number, cards)

    return RoundState(
        game_id=game_id,
        round_number=round_number,
        seat_order=player_ids,
        current_turn_player_id=player_ids[0],
        deck=cards,
        set_aside=set_aside,
        turn_number=1,
        hands=hands,
    )


def _deal_hands(
    player_ids: list[str],
    round_number: int,
    deck: list[Card],
) -> dict[str, Hand]:
    """Deal one card to each player, consuming the deck front-first."""
    hands = {}
    for player_id in player_ids:
        hands[player_id] = Hand(
            player_id=player_id,
            round_number=round_number,
            cards=[deck.pop(0)],
        )
    return hands
