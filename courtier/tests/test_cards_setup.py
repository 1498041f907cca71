"""
Tests for cards and round setup.

Tests:
- Deck composition and ranks
- Token thresholds
- Dealing order, set-aside card, conservation
- Player count validation
"""

import random

import pytest

from ..engine_core.cards import (
    Card,
    DECK_SIZE,
    GUARD_GUESSES,
    build_deck,
    shuffled_deck,
    winning_tokens_for,
)
from ..engine_core.errors import InvalidPlayerCount
from ..engine_core.setup import initialize_round
from .conftest import arranged_deck


class TestCards:
    """Tests for the card table."""

    def test_deck_has_sixteen_cards(self):
        deck = build_deck()
        assert len(deck) == DECK_SIZE == 16
        assert deck.count(Card.GUARD) == 5
        assert deck.count(Card.PRINCESS) == 1

    def test_ranks_run_one_to_eight(self):
        assert [c.rank for c in Card] == list(range(1, 9))

    def test_parse_is_case_insensitive(self):
        assert Card.parse("countess") is Card.COUNTESS
        assert Card.parse(" Baron ") is Card.BARON

    def test_parse_unknown_raises(self):
        with pytest.raises(ValueError):
            Card.parse("Jester")

    def test_guard_cannot_guess_guard(self):
        assert Card.GUARD not in GUARD_GUESSES
        assert len(GUARD_GUESSES) == 7

    def test_shuffle_is_seeded(self):
        assert shuffled_deck(random.Random(3)) == shuffled_deck(random.Random(3))
        assert sorted(shuffled_deck(random.Random(3)), key=lambda c: c.rank) == build_deck()

    @pytest.mark.parametrize("players,tokens", [(2, 7), (3, 5), (4, 4), (5, 3)])
    def test_winning_tokens(self, players, tokens):
        assert winning_tokens_for(players) == tokens


class TestInitializeRound:
    """Tests for dealing a round."""

    def test_set_aside_then_deal_in_order(self):
        deck = arranged_deck(Card.PRINCESS, [Card.GUARD, Card.PRIEST, Card.BARON])
        state = initialize_round("g", 1, ["a", "b", "c"], deck=deck)

        assert state.set_aside is Card.PRINCESS
        assert state.hand("a").cards == [Card.GUARD]
        assert state.hand("b").cards == [Card.PRIEST]
        assert state.hand("c").cards == [Card.BARON]
        assert state.deck_count == 16 - 1 - 3

    def test_first_player_leads(self):
        state = initialize_round("g", 1, ["b", "a"], rng=random.Random(1))
        assert state.current_turn_player_id == "b"
        assert state.turn_number == 1
        assert state.seat_order == ["b", "a"]

    def test_fresh_hands(self):
        state = initialize_round("g", 2, ["a", "b"], rng=random.Random(1))
        for hand in state.hands.values():
            assert not hand.is_protected
            assert not hand.is_eliminated
            assert hand.count == 1
            assert hand.round_number == 2

    def test_cards_conserved(self):
        state = initialize_round("g", 1, ["a", "b", "c", "d"], rng=random.Random(5))
        assert state.card_count() == DECK_SIZE
        assert state.is_conserved()
        assert state.discard_pile == []

    @pytest.mark.parametrize("ids", [["solo"], ["a", "b", "c", "d", "e"]])
    def test_rejects_bad_player_counts(self, ids):
        with pytest.raises(InvalidPlayerCount):
            initialize_round("g", 1, ids)

    def test_rejects_duplicate_ids(self):
        with pytest.raises(InvalidPlayerCount):
            initialize_round("g", 1, ["a", "a"])

    def test_arranged_deck_helper_is_complete(self):
        deck = arranged_deck(Card.KING, [Card.GUARD, Card.GUARD], [Card.PRINCESS])
        assert sorted(deck, key=lambda c: c.rank) == build_deck()
        assert deck[:4] == [Card.KING, Card.GUARD, Card.GUARD, Card.PRINCESS]
