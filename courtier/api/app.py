"""
FastAPI Application - REST API for game clients.

Endpoints:
    POST   /api/v1/games                    Create a game lobby
    POST   /api/v1/games/join               Join by room code
    POST   /api/v1/games/{id}/start         Host starts the game
    GET    /api/v1/games/{id}               Viewer-scoped game state
    POST   /api/v1/games/{id}/draw          Draw a card
    POST   /api/v1/games/{id}/play          Play a card
    POST   /api/v1/games/{id}/next-round    Host starts the next round
    GET    /api/v1/games/{id}/actions       Narrated action log
    GET    /api/v1/games/{id}/legal-actions Moves available to the caller
    WS     /api/v1/games/{id}/ws            Events for one game

The acting player is named by the X-Player-Id header. Authenticating
that id is the job of whatever sits in front of this app.

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Annotated, Optional, Union
import asyncio
import json
import logging
import os
import random

# Environment configuration
COURTIER_ENV = os.getenv("COURTIER_ENV", "development")
COURTIER_LOG_LEVEL = os.getenv("COURTIER_LOG_LEVEL", "INFO").upper()
COURTIER_SEED = os.getenv("COURTIER_SEED")
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "*").split(",")

logger = logging.getLogger(__name__)


def create_app(service=None):
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    try:
        from fastapi import FastAPI, Header, Query, WebSocket, WebSocketDisconnect
        from fastapi.middleware.cors import CORSMiddleware
        from fastapi.responses import JSONResponse
    except ImportError:
        raise ImportError(
            "FastAPI not installed. Install with: pip install fastapi uvicorn"
        )

    from ..session import GameManager
    from .service import APIService
    from .schemas import (
        # Request models
        CreateGameRequest,
        JoinGameRequest,
        DrawCardRequest,
        PlayCardRequest,
        # Response models
        GameStateResponse,
        ActionResultResponse,
        ActionListResponse,
        LegalActionsResponse,
        ErrorResponse,
        HealthResponse,
        ERROR_STATUS,
    )

    logging.basicConfig(
        level=getattr(logging, COURTIER_LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(
        title="Courtier API",
        description="""
Rules engine for a Love Letter-style card game of deduction and elimination.

## Turn Flow

1. `POST /draw` - the current player draws (their hand goes to two cards)
2. `POST /play` - they play one card, naming a target and, for the Guard, a guess
3. When a round ends the host calls `POST /next-round`; the round winner leads

Hidden information is scoped to the caller: you only ever receive your own
hand and the results addressed to you (what your Priest saw, your Baron
comparison, the card your Prince forced out).

## Error Codes

| Code | HTTP | Description |
|------|------|-------------|
| `NOT_YOUR_TURN` | 409 | Another player is on turn |
| `MUST_DRAW_FIRST` | 409 | Draw before playing |
| `COUNTESS_FORCED` | 400 | Countess must be played with King or Prince |
| `INVALID_TARGET` | 400 | Target missing, eliminated, or not allowed |
| `INVALID_GUESS` | 400 | Guard played without a guess |
| `INVALID_CARD` | 400 | Unknown card name |
| `GAME_NOT_FOUND` | 404 | Game does not exist |
| `CONSISTENCY_ERROR` | 500 | Stored game data is inconsistent |
        """,
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Service instance
    if service is None:
        rng = random.Random(int(COURTIER_SEED)) if COURTIER_SEED else random.Random()
        service = APIService(manager=GameManager(rng=rng))
    api_service = service

    logger.info("Courtier API starting (env=%s)", COURTIER_ENV)

    PlayerHeader = Annotated[str, Header(alias="X-Player-Id", description="Acting player id")]
    ViewerHeader = Annotated[
        Optional[str],
        Header(alias="X-Player-Id", description="Viewing player id; omit for a spectator view"),
    ]

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(error: ErrorResponse) -> JSONResponse:
        """Map an ErrorResponse to its HTTP status."""
        return JSONResponse(
            status_code=ERROR_STATUS.get(error.error_code, 400),
            content=error.model_dump(mode="json"),
        )

    def respond(response):
        if isinstance(response, ErrorResponse):
            return make_error_response(response)
        return response

    error_responses = {
        400: {"model": ErrorResponse, "description": "Illegal action"},
        404: {"model": ErrorResponse, "description": "Game not found"},
        409: {"model": ErrorResponse, "description": "Turn or state conflict"},
    }

    # =========================================================================
    # Lobby Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/games",
        response_model=GameStateResponse,
        status_code=201,
        responses=error_responses,
        tags=["Lobby"],
        summary="Create a new game",
    )
    async def create_game(
        body: CreateGameRequest,
        player_id: PlayerHeader,
    ) -> Union[GameStateResponse, JSONResponse]:
        """
        Open a lobby with the caller seated as host.

        Share the returned `room_code` with the other players.
        """
        return respond(api_service.create_game(player_id, body))

    @app.post(
        "/api/v1/games/join",
        response_model=GameStateResponse,
        responses=error_responses,
        tags=["Lobby"],
        summary="Join a game by room code",
    )
    async def join_game(
        body: JoinGameRequest,
        player_id: PlayerHeader,
    ) -> Union[GameStateResponse, JSONResponse]:
        """Take the next seat. Joining a game you are already in is a no-op."""
        return respond(api_service.join_game(player_id, body))

    @app.post(
        "/api/v1/games/{game_id}/start",
        response_model=ActionResultResponse,
        responses=error_responses,
        tags=["Lobby"],
        summary="Start the game (host only)",
    )
    async def start_game(
        game_id: str,
        player_id: PlayerHeader,
    ) -> Union[ActionResultResponse, JSONResponse]:
        """Close the lobby and deal round 1 in join order."""
        return respond(api_service.start_game(game_id, player_id))

    # =========================================================================
    # Game Endpoints
    # =========================================================================

    @app.get(
        "/api/v1/games/{game_id}",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get game state",
    )
    async def get_game(
        game_id: str,
        player_id: ViewerHeader = None,
    ) -> Union[GameStateResponse, JSONResponse]:
        """Game state as the caller may see it, with recent actions narrated for them."""
        return respond(api_service.get_game_state(game_id, player_id))

    @app.post(
        "/api/v1/games/{game_id}/draw",
        response_model=ActionResultResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Draw a card",
    )
    async def draw_card(
        game_id: str,
        player_id: PlayerHeader,
        body: Optional[DrawCardRequest] = None,
    ) -> Union[ActionResultResponse, JSONResponse]:
        """Draw the top card of the deck. Only the drawer learns which card it was."""
        return respond(api_service.draw_card(game_id, player_id, body))

    @app.post(
        "/api/v1/games/{game_id}/play",
        response_model=ActionResultResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Play a card",
    )
    async def play_card(
        game_id: str,
        body: PlayCardRequest,
        player_id: PlayerHeader,
    ) -> Union[ActionResultResponse, JSONResponse]:
        """
        Play one of your two cards.

        **Request Body:**
        ```json
        {"card": "Guard", "target_player_id": "p2", "guess_card": "Priest"}
        ```
        """
        return respond(api_service.play_card(game_id, player_id, body))

    @app.post(
        "/api/v1/games/{game_id}/next-round",
        response_model=ActionResultResponse,
        responses=error_responses,
        tags=["Game"],
        summary="Start the next round (host only)",
    )
    async def next_round(
        game_id: str,
        player_id: PlayerHeader,
    ) -> Union[ActionResultResponse, JSONResponse]:
        """Deal a fresh round. The previous round's winner goes first."""
        return respond(api_service.start_next_round(game_id, player_id))

    @app.get(
        "/api/v1/games/{game_id}/actions",
        response_model=ActionListResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get the action log",
    )
    async def list_actions(
        game_id: str,
        player_id: ViewerHeader = None,
        round_number: Annotated[Optional[int], Query(ge=1, description="Only this round")] = None,
        limit: Annotated[Optional[int], Query(ge=1, le=500, description="Most recent N")] = None,
    ) -> Union[ActionListResponse, JSONResponse]:
        """Actions oldest first, narrated for the caller."""
        return respond(api_service.list_actions(game_id, player_id, round_number, limit))

    @app.get(
        "/api/v1/games/{game_id}/legal-actions",
        response_model=LegalActionsResponse,
        responses=error_responses,
        tags=["Game"],
        summary="List the caller's legal moves",
    )
    async def get_legal_actions(
        game_id: str,
        player_id: PlayerHeader,
    ) -> Union[LegalActionsResponse, JSONResponse]:
        return respond(api_service.legal_actions(game_id, player_id))

    # =========================================================================
    # WebSocket Endpoint
    # =========================================================================

    @app.websocket("/api/v1/games/{game_id}/ws")
    async def websocket_endpoint(websocket: WebSocket, game_id: str):
        """
        WebSocket for real-time updates.

        Messages from server:
        - game_created, player_joined, round_started, card_drawn,
          card_played, round_ended, game_finished: committed changes
        - error: Error occurred

        Messages from client:
        - ping: Keep-alive
        """
        await websocket.accept()

        loop = asyncio.get_running_loop()
        queue: asyncio.Queue = asyncio.Queue()

        def on_event(event):
            loop.call_soon_threadsafe(queue.put_nowait, event.to_message())

        unsubscribe = api_service.manager.events.subscribe(game_id, on_event)

        async def forward_events():
            while True:
                message = await queue.get()
                await websocket.send_json(message)

        sender = asyncio.create_task(forward_events())
        try:
            while True:
                data = await websocket.receive_text()
                try:
                    message = json.loads(data)
                    if message.get("type") == "ping":
                        await websocket.send_json({"type": "pong"})
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "payload": {"message": "Invalid JSON"},
                    })
        except WebSocketDisconnect:
            logger.debug("WebSocket closed for game %s", game_id)
        finally:
            unsubscribe()
            sender.cancel()

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(
            status="healthy",
            service="courtier",
            version="1.0.0",
        )

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Courtier API",
            "version": "1.0.0",
            "docs": "/api/docs",
            "health": "/health",
        }

    return app


# For running directly: uvicorn courtier.api.app:app
app = None
try:
    app = create_app()
except ImportError:
    # FastAPI not installed
    pass
