"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between clients and the engine.
Every response is viewer-scoped: a client only ever receives its own
hand and the secrets addressed to it.

Error Codes:
- NOT_YOUR_TURN, MUST_DRAW_FIRST, COUNTESS_FORCED, CARD_NOT_IN_HAND,
  INVALID_GUESS, INVALID_TARGET, DECK_EMPTY, ALREADY_DRAWN: turn rules
- NOT_HOST, NO_PREVIOUS_WINNER, ROUND_IN_PROGRESS, ROUND_OVER: round flow
- GAME_NOT_FOUND, GAME_FULL, GAME_ALREADY_STARTED, GAME_NOT_STARTED,
  GAME_OVER, PLAYER_NOT_IN_GAME, INVALID_PLAYER_COUNT: lobby and game
- INVALID_CARD: a card name that is not one of the eight cards
- CONSISTENCY_ERROR: stored data is missing or malformed
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field

from ..engine_core.cards import Card


# =============================================================================
# Enums
# =============================================================================

class CardName(str, Enum):
    """Card names as they appear on the wire."""
    GUARD = "Guard"
    PRIEST = "Priest"
    BARON = "Baron"
    HANDMAID = "Handmaid"
    PRINCE = "Prince"
    KING = "King"
    COUNTESS = "Countess"
    PRINCESS = "Princess"

    def to_card(self) -> Card:
        return Card(self.value)


class GameStatusName(str, Enum):
    WAITING = "waiting"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"


class ErrorCode(str, Enum):
    """Structured error codes."""
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    MUST_DRAW_FIRST = "MUST_DRAW_FIRST"
    COUNTESS_FORCED = "COUNTESS_FORCED"
    CARD_NOT_IN_HAND = "CARD_NOT_IN_HAND"
    INVALID_GUESS = "INVALID_GUESS"
    INVALID_TARGET = "INVALID_TARGET"
    DECK_EMPTY = "DECK_EMPTY"
    ALREADY_DRAWN = "ALREADY_DRAWN"
    NOT_HOST = "NOT_HOST"
    NO_PREVIOUS_WINNER = "NO_PREVIOUS_WINNER"
    INVALID_PLAYER_COUNT = "INVALID_PLAYER_COUNT"
    GAME_FULL = "GAME_FULL"
    GAME_ALREADY_STARTED = "GAME_ALREADY_STARTED"
    GAME_NOT_STARTED = "GAME_NOT_STARTED"
    GAME_OVER = "GAME_OVER"
    ROUND_OVER = "ROUND_OVER"
    ROUND_IN_PROGRESS = "ROUND_IN_PROGRESS"
    PLAYER_NOT_IN_GAME = "PLAYER_NOT_IN_GAME"
    GAME_NOT_FOUND = "GAME_NOT_FOUND"
    INVALID_CARD = "INVALID_CARD"
    ILLEGAL_ACTION = "ILLEGAL_ACTION"
    CONSISTENCY_ERROR = "CONSISTENCY_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    @classmethod
    def from_code(cls, code: Optional[str]) -> "ErrorCode":
        try:
            return cls(code)
        except ValueError:
            return cls.INTERNAL_ERROR


# HTTP status for each error code; anything unlisted is a 400
ERROR_STATUS: dict[ErrorCode, int] = {
    ErrorCode.GAME_NOT_FOUND: 404,
    ErrorCode.NOT_YOUR_TURN: 409,
    ErrorCode.MUST_DRAW_FIRST: 409,
    ErrorCode.ALREADY_DRAWN: 409,
    ErrorCode.GAME_FULL: 409,
    ErrorCode.GAME_ALREADY_STARTED: 409,
    ErrorCode.GAME_NOT_STARTED: 409,
    ErrorCode.GAME_OVER: 409,
    ErrorCode.ROUND_OVER: 409,
    ErrorCode.ROUND_IN_PROGRESS: 409,
    ErrorCode.NO_PREVIOUS_WINNER: 409,
    ErrorCode.CONSISTENCY_ERROR: 500,
    ErrorCode.INTERNAL_ERROR: 500,
}


# =============================================================================
# Shared Models
# =============================================================================

class PlayerInfo(BaseModel):
    """A seat as any player at the table sees it."""
    player_id: str
    name: str
    is_host: bool = False
    tokens: int = 0
    join_order: int = 1
    is_eliminated: bool = False
    is_protected: bool = False
    is_current_turn: bool = False
    card_count: int = 0

    model_config = {"from_attributes": True}


class RoundInfo(BaseModel):
    """Public state of the live round. Deck order and set-aside card are never sent."""
    round_number: int
    turn_number: int
    current_turn_player_id: str
    deck_count: int
    discard_pile: list[CardName] = Field(default_factory=list)
    round_winner_id: Optional[str] = None


class ActionInfo(BaseModel):
    """An audit record narrated for the requesting player."""
    record_id: str
    round_number: int
    turn_number: int
    player_id: str
    action_type: str = Field(description="start_round, draw_card, play_card, win_round, win_game")
    message: str
    card_played: Optional[CardName] = None
    target_player_id: Optional[str] = None
    details: dict[str, Any] = Field(default_factory=dict)
    created_at: float = 0.0


class LegalActionInfo(BaseModel):
    """A fully specified move the requesting player may make now."""
    action_type: str = Field(description="draw or play")
    card: Optional[CardName] = None
    card_description: Optional[str] = Field(None, description="What the played card does")
    target_player_id: Optional[str] = None
    guess_card: Optional[CardName] = None


# =============================================================================
# Request Models
# =============================================================================

class CreateGameRequest(BaseModel):
    """Request to open a new game lobby."""
    host_name: str = Field(..., min_length=1, max_length=40, description="Display name for the host")
    max_players: int = Field(4, ge=2, le=4, description="Seats at the table")


class JoinGameRequest(BaseModel):
    """Request to take a seat by room code."""
    room_code: str = Field(..., min_length=1, description="Code shared by the host")
    name: str = Field(..., min_length=1, max_length=40, description="Display name")


class DrawCardRequest(BaseModel):
    round_number: Optional[int] = Field(
        None, description="Round the client believes is live; stale requests are rejected"
    )


class PlayCardRequest(BaseModel):
    """Request to play one of the two cards in hand."""
    card: str = Field(..., description="Card name, e.g. \"Guard\" (case-insensitive)")
    target_player_id: Optional[str] = Field(None, description="Required for targeted cards")
    guess_card: Optional[str] = Field(None, description="Guard only: the card to name")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class GameStateResponse(BaseModel):
    """Complete game state as one player may see it."""
    game_id: str
    room_code: str
    status: GameStatusName
    max_players: int
    winning_tokens: int
    current_round: int
    winner_id: Optional[str] = None
    players: list[PlayerInfo] = Field(default_factory=list)
    round: Optional[RoundInfo] = None
    your_player_id: Optional[str] = None
    your_hand: Optional[list[CardName]] = None
    awaiting_next_round: bool = False
    recent_actions: list[ActionInfo] = Field(default_factory=list)
    api_version: str = "v1"


class ActionResultResponse(BaseModel):
    """Response after a draw, play or round start."""
    success: bool
    game_id: str
    actions: list[ActionInfo] = Field(default_factory=list)
    drawn_card: Optional[CardName] = None
    round_ended: bool = False
    game_over: bool = False
    game_state: Optional[GameStateResponse] = None
    api_version: str = "v1"


class ActionListResponse(BaseModel):
    game_id: str
    actions: list[ActionInfo] = Field(default_factory=list)
    count: int = 0


class LegalActionsResponse(BaseModel):
    game_id: str
    player_id: str
    legal_actions: list[LegalActionInfo] = Field(default_factory=list)


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
