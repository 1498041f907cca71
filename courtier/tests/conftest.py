"""
Pytest fixtures for Courtier tests.
"""

import random
from collections import Counter

import pytest

from ..engine_core.cards import Card, DECK_COMPOSITION, build_deck, winning_tokens_for
from ..engine_core.setup import initialize_round
from ..engine_core.state import Game, GameStatus, GameTable, PlayerSeat
from ..session import GameManager


def arranged_deck(set_aside, hands, draws=()):
    """
    Build a full 16-card deck in dealing order.

    The first card is set aside, the next len(hands) cards are dealt one
    per player in turn order, then draws are the top of the draw pile.
    Unused cards follow in rank order.
    """
    chosen = [set_aside, *hands, *draws]
    remaining = Counter(DECK_COMPOSITION)
    remaining.subtract(chosen)
    if any(count < 0 for count in remaining.values()):
        raise ValueError(f"Deck has too many copies: {chosen}")

    rest = []
    for card in build_deck():
        if remaining[card] > 0:
            rest.append(card)
            remaining[card] -= 1
    return chosen + rest


def make_table(player_ids, deck=None, rng=None, tokens=None):
    """A game in progress with round 1 dealt in the given order."""
    game = Game(
        game_id="game-1",
        room_code="ABC234",
        created_by=player_ids[0],
        status=GameStatus.IN_PROGRESS,
        max_players=len(player_ids),
        winning_tokens=winning_tokens_for(len(player_ids)),
        current_round=1,
    )
    players = [
        PlayerSeat(
            game_id=game.game_id,
            player_id=pid,
            name=pid.capitalize(),
            is_host=(i == 0),
            tokens=(tokens or {}).get(pid, 0),
            join_order=i + 1,
        )
        for i, pid in enumerate(player_ids)
    ]
    state = initialize_round(game.game_id, 1, player_ids, rng=rng or random.Random(0), deck=deck)
    return GameTable(game=game, players=players, round=state)


@pytest.fixture
def two_player_ids():
    return ["alice", "bob"]


@pytest.fixture
def three_player_ids():
    return ["alice", "bob", "carol"]


@pytest.fixture
def two_player_round(two_player_ids):
    """alice holds Guard, bob holds Priest; alice draws Baron first."""
    deck = arranged_deck(Card.KING, [Card.GUARD, Card.PRIEST], [Card.BARON, Card.HANDMAID])
    return initialize_round("game-1", 1, two_player_ids, deck=deck)


@pytest.fixture
def manager():
    """Session manager with a fixed seed."""
    return GameManager(rng=random.Random(7))


@pytest.fixture
def lobby(manager, three_player_ids):
    """A waiting three-seat game: alice hosts, bob and carol joined."""
    table = manager.create_game("alice", "Alice", max_players=3)
    manager.join_game(table.game.room_code, "bob", "Bob")
    manager.join_game(table.game.room_code, "carol", "Carol")
    return manager.get_table(table.game_id)


@pytest.fixture
def recorded_events(manager):
    """Every event the manager publishes, in order."""
    events = []
    manager.events.subscribe(manager.events.ALL, events.append)
    return events
