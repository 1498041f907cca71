"""
Bot Policy - Interface for bot decision-making.

A BotPolicy looks at a round from one seat and picks one of the legal
actions. Policies only see what their seat may see: their own hand and
the public parts of the round.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
import random

if TYPE_CHECKING:
    from ..engine_core.state import RoundState
    from ..engine_core.action import Action


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The action to take
    - Explanation (for UI/debugging)
    - Confidence in the decision
    """
    action: Action
    explanation: str = ""
    confidence: float = 1.0
    evaluated_actions: int = 0
    evaluation_details: dict[str, Any] = field(default_factory=dict)


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    Implementations can range from uniform random play to card
    counting.
    """

    @abstractmethod
    def select_action(
        self,
        state: RoundState,
        player_id: str,
        legal_actions: list[Action],
    ) -> BotDecision:
        """
        Select an action from the legal actions.

        Args:
            state: Current round
            player_id: Seat the bot is playing
            legal_actions: List of legal actions to choose from

        Returns:
            BotDecision with the selected action
        """
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - selects actions uniformly at random.

    Used for:
    - Testing
    - Baseline comparison
    - CLI simulations
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(
        self,
        state: RoundState,
        player_id: str,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        action = self.rng.choice(legal_actions)
        return BotDecision(
            action=action,
            explanation="Selected randomly",
            confidence=1.0 / len(legal_actions),
            evaluated_actions=len(legal_actions),
        )


class FirstLegalPolicy(BotPolicy):
    """
    First-legal policy - always selects the first legal action.

    Used for:
    - Deterministic testing
    - Baseline comparison
    """

    def select_action(
        self,
        state: RoundState,
        player_id: str,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        return BotDecision(
            action=legal_actions[0],
            explanation="Selected first legal action",
            evaluated_actions=1,
        )


class CautiousPolicy(BotPolicy):
    """
    Keeps the higher card, never throws the Princess voluntarily.

    Plays the lowest-ranked card it may legally play; among plays of
    that card it prefers targets it has not already hit this round.
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(
        self,
        state: RoundState,
        player_id: str,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        plays = [a for a in legal_actions if a.payload.card is not None]
        if not plays:
            return BotDecision(action=legal_actions[0], explanation="Draw", evaluated_actions=1)

        lowest = min(a.payload.card.rank for a in plays)
        candidates = [a for a in plays if a.payload.card.rank == lowest]
        action = self.rng.choice(candidates)
        return BotDecision(
            action=action,
            explanation=f"Played lowest card ({action.payload.card.label})",
            evaluated_actions=len(plays),
        )
