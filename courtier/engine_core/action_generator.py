"""
Action Generator - Generates the useful legal actions for a player.

The action generator is used by:
1. Bots to enumerate possible moves
2. UI to show available actions and targets

By default a targeted card is offered only against opponents who can be
affected: protected opponents are left out, though the resolver accepts
them as no-op targets. Set include_protected_targets to list those plays
too. A "Guard" guess is never offered.

Generates Action objects, not just card names, so every generated action
is fully specified.
"""

from __future__ import annotations
from dataclasses import dataclass

from .action import Action
from .cards import Card, GUARD_GUESSES, TARGETED_CARDS
from .effect_resolver import valid_opponents
from .state import RoundState
from .turn import countess_forced


@dataclass
class ActionGenerator:
    """Generates legal actions for the current round."""

    include_protected_targets: bool = False

    def generate(self, state: RoundState, player_id: str) -> list[Action]:
        """
        Generate the actions player_id may take now, skipping no-op plays
        against protected opponents unless include_protected_targets is set.

        Returns [] when it is not their turn or the round is over.
        """
        if state.is_over or player_id != state.current_turn_player_id:
            return []

        hand = state.hand(player_id)
        if hand.count < 2:
            if state.deck:
                return [Action.draw(player_id, round_number=state.round_number)]
            return []

        playable = list(dict.fromkeys(hand.cards))
        if countess_forced(hand.cards):
            playable = [Card.COUNTESS]

        actions = []
        for card in playable:
            actions.extend(self._generate_card_actions(state, player_id, card))
        return actions

    def _generate_card_actions(
        self,
        state: RoundState,
        player_id: str,
        card: Card,
    ) -> list[Action]:
        if card not in TARGETED_CARDS:
            return [Action.play(player_id, card)]

        targets = self._targets(state, player_id)
        if card is Card.PRINCE:
            targets = targets + [player_id]
        elif not targets:
            return [Action.play(player_id, card)]

        actions = []
        for target_id in targets:
            if card is Card.GUARD:
                for guess in GUARD_GUESSES:
                    actions.append(Action.play(player_id, card, target_id, guess))
            else:
                actions.append(Action.play(player_id, card, target_id))
        return actions

    def _targets(self, state: RoundState, player_id: str) -> list[str]:
        if self.include_protected_targets:
            return [pid for pid in state.active_player_ids() if pid != player_id]
        return valid_opponents(state, player_id)


def legal_actions(state: RoundState, player_id: str) -> list[Action]:
    """
    Convenience function to get legal actions.

    Creates an ActionGenerator and generates actions.
    """
    return ActionGenerator().generate(state, player_id)
