"""
Effect Resolver - Applies a played card to the round.

This module handles:
- Target and guess validation (before any mutation)
- Moving the played card from hand to discard pile
- Each card's effect on hands, deck, discard pile and protection
- A structured EffectOutcome for the log formatter

The resolver holds no per-request state. Everything a later step needs
(what the Priest saw, the Baron comparison, the card a Prince forced out)
travels in the returned EffectOutcome.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

from .cards import Card, TARGETED_CARDS
from .errors import InvalidGuess, InvalidTarget
from .state import RoundState


@dataclass
class Elimination:
    """A player knocked out of the round. The exposed card is public."""
    player_id: str
    exposed_card: Card | None
    cause: Card


@dataclass
class BaronComparison:
    """Both compared values; winner_id is None on a tie."""
    actor_card: Card
    target_card: Card
    winner_id: str | None


@dataclass
class EffectOutcome:
    """
    What a play did.

    Public-safe fields: card, actor, target, target_protected, no_target,
    guess, guess_correct, swapped, elimination.
    Participant-only fields: revealed_card (actor), comparison (actor and
    target), forced_discard (actor and target).
    """
    card: Card
    actor_id: str
    target_id: str | None = None
    target_protected: bool = False
    no_target: bool = False

    guess: Card | None = None
    guess_correct: bool | None = None

    revealed_card: Card | None = None
    comparison: BaronComparison | None = None
    forced_discard: Card | None = None
    drew_replacement: bool = False
    drew_set_aside: bool = False
    swapped: bool = False

    elimination: Elimination | None = None

    @property
    def participants(self) -> tuple[str, ...]:
        if self.target_id and self.target_id != self.actor_id:
            return (self.actor_id, self.target_id)
        return (self.actor_id,)

    @property
    def eliminated_player_id(self) -> str | None:
        return self.elimination.player_id if self.elimination else None


@dataclass
class EffectResolver:
    """
    Resolves card effects.

    Stateless - the round is passed in and mutated in place. Callers
    that need all-or-nothing semantics pass a scratch copy; in addition,
    every check runs before the first mutation.
    """

    def apply_card(
        self,
        card: Card,
        acting_player_id: str,
        state: RoundState,
        target_player_id: str | None = None,
        guess: Card | None = None,
    ) -> EffectOutcome:
        """
        Play card from the actor's hand and resolve its effect.

        Turn legality (whose turn, drawn first, Countess) is the
        sequencer's job and must already have been checked.
        """
        target_player_id = self._check_target(card, acting_player_id, state, target_player_id)
        if card is Card.GUARD and target_player_id is not None:
            self._check_guess(guess)

        # Played card leaves the hand before any card it forces out
        state.hand(acting_player_id).remove(card)
        state.discard(acting_player_id, card)

        outcome = EffectOutcome(
            card=card,
            actor_id=acting_player_id,
            target_id=target_player_id,
            guess=guess if card is Card.GUARD else None,
        )

        if card in TARGETED_CARDS:
            if target_player_id is None:
                outcome.no_target = True
                return outcome
            if target_player_id != acting_player_id and state.hand(target_player_id).is_protected:
                outcome.target_protected = True
                return outcome

        handler = self._get_handler(card)
        handler(state, outcome)
        return outcome

    def _get_handler(self, card: Card) -> Callable[[RoundState, EffectOutcome], None]:
        """Get the handler function for a card."""
        handlers = {
            Card.GUARD: self._resolve_guard,
            Card.PRIEST: self._resolve_priest,
            Card.BARON: self._resolve_baron,
            Card.HANDMAID: self._resolve_handmaid,
            Card.PRINCE: self._resolve_prince,
            Card.KING: self._resolve_king,
            Card.COUNTESS: self._resolve_countess,
            Card.PRINCESS: self._resolve_princess,
        }
        return handlers[card]

    # =========================================================================
    # Validation
    # =========================================================================

    def _check_target(
        self,
        card: Card,
        actor_id: str,
        state: RoundState,
        target_id: str | None,
    ) -> str | None:
        """
        Validate the target for card. Returns the target to use.

        A targeted card (other than the Prince) may go without a target
        only when every opponent is eliminated or protected.
        """
        if card not in TARGETED_CARDS:
            return None

        if target_id is None:
            if card is Card.PRINCE:
                raise InvalidTarget("The Prince needs a target (you may choose yourself)")
            if valid_opponents(state, actor_id):
                raise InvalidTarget(f"{card.label} needs a target")
            return None

        if not state.is_seated(target_id):
            raise InvalidTarget(f"Player {target_id} is not in this round")
        if state.hand(target_id).is_eliminated:
            raise InvalidTarget("That player has been eliminated this round")
        if target_id == actor_id and card is not Card.PRINCE:
            raise InvalidTarget(f"You cannot target yourself with the {card.label}")
        return target_id

    def _check_guess(self, guess: Card | None) -> None:
        if guess is None:
            raise InvalidGuess()

    # =========================================================================
    # Card effects
    # =========================================================================

    def _resolve_guard(self, state: RoundState, outcome: EffectOutcome) -> None:
        """Correct guess eliminates the target. Naming Guard always misses."""
        target_hand = state.hand(outcome.target_id)
        correct = outcome.guess is not Card.GUARD and target_hand.holds(outcome.guess)
        outcome.guess_correct = correct
        if correct:
            self._eliminate(state, outcome, outcome.target_id)

    def _resolve_priest(self, state: RoundState, outcome: EffectOutcome) -> None:
        """The actor privately sees the target's card."""
        outcome.revealed_card = state.hand(outcome.target_id).only_card()

    def _resolve_baron(self, state: RoundState, outcome: EffectOutcome) -> None:
        """Compare remaining cards; the lower one is out, ties do nothing."""
        actor_card = state.hand(outcome.actor_id).only_card()
        target_card = state.hand(outcome.target_id).only_card()

        winner_id = None
        loser_id = None
        if actor_card.rank > target_card.rank:
            winner_id, loser_id = outcome.actor_id, outcome.target_id
        elif target_card.rank > actor_card.rank:
            winner_id, loser_id = outcome.target_id, outcome.actor_id

        outcome.comparison = BaronComparison(
            actor_card=actor_card,
            target_card=target_card,
            winner_id=winner_id,
        )
        if loser_id is not None:
            self._eliminate(state, outcome, loser_id)

    def _resolve_handmaid(self, state: RoundState, outcome: EffectOutcome) -> None:
        state.hand(outcome.actor_id).is_protected = True

    def _resolve_prince(self, state: RoundState, outcome: EffectOutcome) -> None:
        """
        Target discards their card and draws a replacement.

        Discarding the Princess eliminates instead. With the deck empty the
        replacement is the set-aside card, which is not replenished.
        """
        target_id = outcome.target_id
        target_hand = state.hand(target_id)
        discarded = target_hand.only_card()
        if discarded is None:
            return

        target_hand.remove(discarded)
        state.discard(target_id, discarded)
        outcome.forced_discard = discarded

        if discarded is Card.PRINCESS:
            state.eliminate(target_id)
            outcome.elimination = Elimination(
                player_id=target_id,
                exposed_card=Card.PRINCESS,
                cause=Card.PRINCE,
            )
            return

        if state.deck:
            target_hand.cards.append(state.deck.pop(0))
            outcome.drew_replacement = True
        elif state.set_aside is not None:
            target_hand.cards.append(state.set_aside)
            state.set_aside = None
            outcome.drew_replacement = True
            outcome.drew_set_aside = True

    def _resolve_king(self, state: RoundState, outcome: EffectOutcome) -> None:
        """Trade remaining cards with the target."""
        actor_hand = state.hand(outcome.actor_id)
        target_hand = state.hand(outcome.target_id)
        actor_hand.cards, target_hand.cards = target_hand.cards, actor_hand.cards
        outcome.swapped = True

    def _resolve_countess(self, state: RoundState, outcome: EffectOutcome) -> None:
        pass

    def _resolve_princess(self, state: RoundState, outcome: EffectOutcome) -> None:
        """Discarding the Princess knocks the actor out."""
        self._eliminate(state, outcome, outcome.actor_id)
        if outcome.elimination.exposed_card is None:
            outcome.elimination.exposed_card = Card.PRINCESS

    def _eliminate(self, state: RoundState, outcome: EffectOutcome, player_id: str) -> None:
        exposed = state.eliminate(player_id)
        outcome.elimination = Elimination(
            player_id=player_id,
            exposed_card=exposed,
            cause=outcome.card,
        )


def valid_opponents(state: RoundState, actor_id: str) -> list[str]:
    """Opponents a targeted card can affect: in the round and unprotected."""
    return [
        pid for pid in state.active_player_ids()
        if pid != actor_id and not state.hand(pid).is_protected
    ]


def apply_card(
    card: Card,
    acting_player_id: str,
    state: RoundState,
    target_player_id: str | None = None,
    guess: Card | None = None,
) -> EffectOutcome:
    """
    Convenience function to apply a card.

    Creates an EffectResolver and applies the card.
    """
    return EffectResolver().apply_card(
        card, acting_player_id, state,
        target_player_id=target_player_id,
        guess=guess,
    )
