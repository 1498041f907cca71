"""
Engine Core - Rules for one game of Courtier.

The engine is the runtime that:
1. Sets up each round (deck, set-aside card, deal)
2. Sequences turns (whose turn, draw before play, Countess rule)
3. Resolves card effects
4. Ends rounds and games, awarding tokens
5. Logs every action with secrets scoped to the players involved
"""

from .cards import Card, DECK_COMPOSITION, DECK_SIZE, build_deck, winning_tokens_for
from .state import Game, GameStatus, GameTable, Hand, PlayerSeat, RoundState
from .action import (
    Action,
    ActionType,
    ActionPayload,
    ActionResult,
    ActionRecord,
    ActionKind,
    ActionDetails,
    Secret,
)
from .setup import initialize_round
from .effect_resolver import EffectResolver, EffectOutcome, Elimination, apply_card
from .lifecycle import RoundResult, RoundEndReason, check_round_end
from .reducer import Reducer, apply_action
from .action_generator import ActionGenerator, legal_actions
from .action_log import narrate, visible_details

__all__ = [
    "Card",
    "DECK_COMPOSITION",
    "DECK_SIZE",
    "build_deck",
    "winning_tokens_for",
    "Game",
    "GameStatus",
    "GameTable",
    "Hand",
    "PlayerSeat",
    "RoundState",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ActionRecord",
    "ActionKind",
    "ActionDetails",
    "Secret",
    "initialize_round",
    "EffectResolver",
    "EffectOutcome",
    "Elimination",
    "apply_card",
    "RoundResult",
    "RoundEndReason",
    "check_round_end",
    "Reducer",
    "apply_action",
    "ActionGenerator",
    "legal_actions",
    "narrate",
    "visible_details",
]
