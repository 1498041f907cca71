"""
API Module - Network interface.

Exposes the engine via REST and WebSocket. A client:
1. Creates or joins a game by room code
2. Draws and plays cards on its turn
3. Reads its own view of the table
4. Listens for events over a WebSocket

Player identity comes from the X-Player-Id header.
"""

from .schemas import (
    # Requests
    CreateGameRequest,
    JoinGameRequest,
    DrawCardRequest,
    PlayCardRequest,
    # Responses
    GameStateResponse,
    ActionResultResponse,
    ActionListResponse,
    LegalActionsResponse,
    ErrorResponse,
    HealthResponse,
    # Shared
    PlayerInfo,
    RoundInfo,
    ActionInfo,
    LegalActionInfo,
    CardName,
    ErrorCode,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateGameRequest",
    "JoinGameRequest",
    "DrawCardRequest",
    "PlayCardRequest",
    # Responses
    "GameStateResponse",
    "ActionResultResponse",
    "ActionListResponse",
    "LegalActionsResponse",
    "ErrorResponse",
    "HealthResponse",
    # Shared
    "PlayerInfo",
    "RoundInfo",
    "ActionInfo",
    "LegalActionInfo",
    "CardName",
    "ErrorCode",
    # Service
    "APIService",
    "create_app",
]
