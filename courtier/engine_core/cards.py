"""
Cards - The eight court cards and the round deck.

Card structure:
- Name (Guard .. Princess)
- Rank (1-8), used for every numeric comparison and tie-break
- Description (rules text shown to players)

The deck composition is fixed for the 2-4 player game:
5 Guard, 2 Priest, 2 Baron, 2 Handmaid, 2 Prince, 1 King, 1 Countess, 1 Princess.
"""

from __future__ import annotations
import random
from enum import Enum


class Card(Enum):
    """A court card. Immutable, compared by identity."""
    GUARD = "Guard"
    PRIEST = "Priest"
    BARON = "Baron"
    HANDMAID = "Handmaid"
    PRINCE = "Prince"
    KING = "King"
    COUNTESS = "Countess"
    PRINCESS = "Princess"

    @property
    def rank(self) -> int:
        """Integer value 1-8."""
        return CARD_RANKS[self]

    @property
    def description(self) -> str:
        return CARD_DESCRIPTIONS[self]

    @property
    def label(self) -> str:
        return self.value

    @classmethod
    def parse(cls, name: str) -> Card:
        """Parse a card from its display name (case-insensitive)."""
        for card in cls:
            if card.value.lower() == name.strip().lower():
                return card
        raise ValueError(f"Unknown card: {name}")


CARD_RANKS: dict[Card, int] = {
    Card.GUARD: 1,
    Card.PRIEST: 2,
    Card.BARON: 3,
    Card.HANDMAID: 4,
    Card.PRINCE: 5,
    Card.KING: 6,
    Card.COUNTESS: 7,
    Card.PRINCESS: 8,
}

CARD_DESCRIPTIONS: dict[Card, str] = {
    Card.GUARD: "Guess a player's card (not Guard). If correct, they are eliminated.",
    Card.PRIEST: "Look at another player's hand.",
    Card.BARON: "Compare hands with another player. Lower value is eliminated.",
    Card.HANDMAID: "You are protected until your next turn.",
    Card.PRINCE: "Choose a player (may be yourself) to discard and draw a new card.",
    Card.KING: "Trade hands with another player.",
    Card.COUNTESS: "Must discard if Prince or King is in your hand.",
    Card.PRINCESS: "If you discard this card, you are eliminated.",
}

DECK_COMPOSITION: dict[Card, int] = {
    Card.GUARD: 5,
    Card.PRIEST: 2,
    Card.BARON: 2,
    Card.HANDMAID: 2,
    Card.PRINCE: 2,
    Card.KING: 1,
    Card.COUNTESS: 1,
    Card.PRINCESS: 1,
}

DECK_SIZE = sum(DECK_COMPOSITION.values())

# Cards whose effect names another player
TARGETED_CARDS = frozenset({Card.GUARD, Card.PRIEST, Card.BARON, Card.PRINCE, Card.KING})

# Cards the Countess forces out of play
COUNTESS_COMPANIONS = frozenset({Card.KING, Card.PRINCE})

# Guard may never name a Guard
GUARD_GUESSES: tuple[Card, ...] = tuple(c for c in Card if c is not Card.GUARD)

MIN_PLAYERS = 2
MAX_PLAYERS = 4


def build_deck() -> list[Card]:
    """Build the unshuffled 16-card deck in rank order."""
    deck: list[Card] = []
    for card, count in DECK_COMPOSITION.items():
        deck.extend([card] * count)
    return deck


def shuffled_deck(rng: random.Random | None = None) -> list[Card]:
    """Build and shuffle a fresh deck."""
    deck = build_deck()
    (rng or random.Random()).shuffle(deck)
    return deck


def winning_tokens_for(player_count: int) -> int:
    """Tokens needed to win: 7/5/4 for 2/3/4 players, 3 for larger tables."""
    if player_count == 2:
        return 7
    elif player_count == 3:
        return 5
    elif player_count == 4:
        return 4
    return 3
