"""
Action System - Requests, audit records, and results.

Actions represent:
1. Player requests (draw, play)
2. Host requests (start game, start next round)

Every applied action produces ActionRecords: the append-only audit log.
A record splits what the whole table may read (message, public facts)
from secrets that only named participants may read.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any
import time
import uuid

from .cards import Card


class ActionType(Enum):
    """Requests the reducer understands."""
    DRAW = "draw"
    PLAY = "play"
    START_GAME = "start_game"
    START_NEXT_ROUND = "start_next_round"


@dataclass
class ActionPayload:
    """
    Parameters for an action.

    Validation happens in the reducer, not here.
    """
    player_id: str | None = None
    card: Card | None = None
    target_player_id: str | None = None
    guess: Card | None = None
    round_number: int | None = None


@dataclass
class Action:
    """
    A request to be applied to a game table.

    Actions are validated before application and applied atomically.
    """
    action_type: ActionType
    payload: ActionPayload
    timestamp: float | None = None

    @classmethod
    def draw(cls, player_id: str, round_number: int | None = None) -> Action:
        """Factory for draw action."""
        return cls(
            action_type=ActionType.DRAW,
            payload=ActionPayload(player_id=player_id, round_number=round_number),
        )

    @classmethod
    def play(
        cls,
        player_id: str,
        card: Card,
        target_player_id: str | None = None,
        guess: Card | None = None,
    ) -> Action:
        """Factory for play action."""
        return cls(
            action_type=ActionType.PLAY,
            payload=ActionPayload(
                player_id=player_id,
                card=card,
                target_player_id=target_player_id,
                guess=guess,
            ),
        )

    @classmethod
    def start_game(cls, caller_id: str) -> Action:
        return cls(
            action_type=ActionType.START_GAME,
            payload=ActionPayload(player_id=caller_id),
        )

    @classmethod
    def start_next_round(cls, caller_id: str) -> Action:
        return cls(
            action_type=ActionType.START_NEXT_ROUND,
            payload=ActionPayload(player_id=caller_id),
        )


class ActionKind(Enum):
    """Kinds of audit records."""
    START_ROUND = "start_round"
    DRAW_CARD = "draw_card"
    PLAY_CARD = "play_card"
    WIN_ROUND = "win_round"
    WIN_GAME = "win_game"


@dataclass
class Secret:
    """
    A fact only some players may see.

    note is the bracketed text appended to the narrative for those
    players; value is the structured form for API clients.
    """
    key: str
    value: Any
    visible_to: tuple[str, ...]
    note: str

    def visible_for(self, viewer_id: str | None) -> bool:
        return viewer_id is not None and viewer_id in self.visible_to


@dataclass
class ActionDetails:
    """Public narrative, public facts and participant-only secrets."""
    message: str
    target_protected: bool = False
    guess: Card | None = None
    public: dict[str, Any] = field(default_factory=dict)
    secrets: list[Secret] = field(default_factory=list)

    def secrets_for(self, viewer_id: str | None) -> list[Secret]:
        return [s for s in self.secrets if s.visible_for(viewer_id)]


@dataclass
class ActionRecord:
    """An append-only audit entry."""
    game_id: str
    round_number: int
    turn_number: int
    player_id: str
    kind: ActionKind
    details: ActionDetails
    card_played: Card | None = None
    target_player_id: str | None = None
    record_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: float = field(default_factory=time.time)

    @property
    def message(self) -> str:
        return self.details.message


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - New table (if succeeded)
    - Errors (if failed)
    - Audit records and the structured effect outcome
    """
    success: bool
    new_table: Any | None = None  # GameTable
    error: str | None = None
    error_code: str | None = None

    records: list[ActionRecord] = field(default_factory=list)
    outcome: Any | None = None  # EffectOutcome
    round_result: Any | None = None  # RoundResult
    drawn_card: Card | None = None

    @property
    def record(self) -> ActionRecord | None:
        """The record for the requested action itself."""
        return self.records[0] if self.records else None

    @property
    def game_over(self) -> bool:
        return bool(self.new_table and self.new_table.game.is_finished)

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_table(
        cls,
        table: Any,
        records: list[ActionRecord] | None = None,
        **kwargs: Any,
    ) -> ActionResult:
        """Create a success result with the new table."""
        return cls(success=True, new_table=table, records=records or [], **kwargs)
