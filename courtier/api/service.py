"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to session manager calls
2. Turns engine errors into ErrorResponse models
3. Narrates every record for the requesting player

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
import logging

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
    # Shared
    PlayerInfo,
    RoundInfo,
    ActionInfo,
    LegalActionInfo,
    # Enums
    CardName,
    ErrorCode,
    GameStatusName,
)
from ..engine_core.action import ActionResult
from ..engine_core.action_generator import legal_actions
from ..engine_core.cards import Card
from ..engine_core.errors import ConsistencyError, CourtierError, PlayerNotInGame
from ..engine_core.state import GameStatus
from ..session import GameManager, GameView, NarratedAction
from ..session.views import narrate_action

logger = logging.getLogger(__name__)


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        # Host opens a lobby
        state = service.create_game("host-1", CreateGameRequest(host_name="Ann"))

        # Guest joins by room code, host starts
        service.join_game("p2", JoinGameRequest(room_code=state.room_code, name="Bob"))
        service.start_game(state.game_id, "host-1")
    """
    manager: GameManager = field(default_factory=GameManager)

    # =========================================================================
    # Lobby
    # =========================================================================

    def create_game(
        self,
        host_id: str,
        request: CreateGameRequest,
    ) -> GameStateResponse | ErrorResponse:
        try:
            table = self.manager.create_game(host_id, request.host_name, request.max_players)
            return self._state_response(self.manager.get_view(table.game_id, host_id))
        except CourtierError as e:
            return self._error(e)

    def join_game(
        self,
        player_id: str,
        request: JoinGameRequest,
    ) -> GameStateResponse | ErrorResponse:
        try:
            table = self.manager.join_game(request.room_code, player_id, request.name)
            return self._state_response(self.manager.get_view(table.game_id, player_id))
        except CourtierError as e:
            return self._error(e)

    def start_game(self, game_id: str, caller_id: str) -> ActionResultResponse | ErrorResponse:
        try:
            result = self.manager.start_game(game_id, caller_id)
            return self._result_response(game_id, caller_id, result)
        except CourtierError as e:
            return self._error(e)

    # =========================================================================
    # Turns
    # =========================================================================

    def draw_card(
        self,
        game_id: str,
        player_id: str,
        request: DrawCardRequest | None = None,
    ) -> ActionResultResponse | ErrorResponse:
        round_number = request.round_number if request else None
        try:
            result = self.manager.draw_card(game_id, round_number, player_id)
            return self._result_response(game_id, player_id, result)
        except CourtierError as e:
            return self._error(e)

    def play_card(
        self,
        game_id: str,
        player_id: str,
        request: PlayCardRequest,
    ) -> ActionResultResponse | ErrorResponse:
        try:
            card = Card.parse(request.card)
            guess = Card.parse(request.guess_card) if request.guess_card else None
        except ValueError as e:
            return ErrorResponse(error=str(e), error_code=ErrorCode.INVALID_CARD)

        try:
            result = self.manager.play_card(
                game_id,
                card,
                player_id,
                target_player_id=request.target_player_id,
                guess_card=guess,
            )
            return self._result_response(game_id, player_id, result)
        except CourtierError as e:
            return self._error(e)

    def start_next_round(self, game_id: str, caller_id: str) -> ActionResultResponse | ErrorResponse:
        try:
            result = self.manager.start_next_round(game_id, caller_id)
            return self._result_response(game_id, caller_id, result)
        except CourtierError as e:
            return self._error(e)

    # =========================================================================
    # Reads
    # =========================================================================

    def get_game_state(self, game_id: str, viewer_id: Optional[str]) -> GameStateResponse | ErrorResponse:
        try:
            return self._state_response(self.manager.get_view(game_id, viewer_id))
        except CourtierError as e:
            return self._error(e)

    def list_actions(
        self,
        game_id: str,
        viewer_id: Optional[str],
        round_number: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> ActionListResponse | ErrorResponse:
        try:
            narrated = self.manager.list_actions(game_id, viewer_id, round_number, limit)
        except CourtierError as e:
            return self._error(e)
        actions = [self._action_info(a) for a in narrated]
        return ActionListResponse(game_id=game_id, actions=actions, count=len(actions))

    def legal_actions(self, game_id: str, player_id: str) -> LegalActionsResponse | ErrorResponse:
        """Moves player_id may make right now; empty when it is not their turn."""
        try:
            table = self.manager.get_table(game_id)
            if table.get_player(player_id) is None:
                raise PlayerNotInGame()
        except CourtierError as e:
            return self._error(e)

        moves: list[LegalActionInfo] = []
        state = table.round
        if table.game.status == GameStatus.IN_PROGRESS and state is not None:
            for action in legal_actions(state, player_id):
                payload = action.payload
                moves.append(LegalActionInfo(
                    action_type=action.action_type.value,
                    card=_card_name(payload.card),
                    card_description=payload.card.description if payload.card else None,
                    target_player_id=payload.target_player_id,
                    guess_card=_card_name(payload.guess),
                ))
        return LegalActionsResponse(game_id=game_id, player_id=player_id, legal_actions=moves)

    # =========================================================================
    # Helper methods
    # =========================================================================

    def _error(self, error: CourtierError) -> ErrorResponse:
        if isinstance(error, ConsistencyError):
            logger.error("Consistency error: %s", error)
            return ErrorResponse(error="Game data is inconsistent", error_code=ErrorCode.CONSISTENCY_ERROR)
        return ErrorResponse(error=str(error), error_code=ErrorCode.from_code(error.code))

    def _result_response(
        self,
        game_id: str,
        viewer_id: str,
        result: ActionResult,
    ) -> ActionResultResponse | ErrorResponse:
        if not result.success:
            return ErrorResponse(
                error=result.error or "Action rejected",
                error_code=ErrorCode.from_code(result.error_code),
            )

        actions = [self._action_info(narrate_action(r, viewer_id)) for r in result.records]
        return ActionResultResponse(
            success=True,
            game_id=game_id,
            actions=actions,
            drawn_card=_card_name(result.drawn_card),
            round_ended=result.round_result is not None,
            game_over=result.game_over,
            game_state=self._state_response(self.manager.get_view(game_id, viewer_id)),
        )

    def _state_response(self, view: GameView) -> GameStateResponse:
        game = view.table.game
        round_info = None
        if view.round is not None:
            round_info = RoundInfo(
                round_number=view.round.round_number,
                turn_number=view.round.turn_number,
                current_turn_player_id=view.round.current_turn_player_id,
                deck_count=view.round.deck_count,
                discard_pile=[_card_name(c) for c in view.round.discard_pile],
                round_winner_id=view.round.round_winner_id,
            )

        return GameStateResponse(
            game_id=game.game_id,
            room_code=game.room_code,
            status=GameStatusName(game.status.value),
            max_players=game.max_players,
            winning_tokens=game.winning_tokens,
            current_round=game.current_round,
            winner_id=game.winner_id,
            players=[PlayerInfo.model_validate(seat) for seat in view.seats],
            round=round_info,
            your_player_id=view.viewer_id,
            your_hand=[_card_name(c) for c in view.hand] if view.hand is not None else None,
            awaiting_next_round=view.awaiting_next_round,
            recent_actions=[self._action_info(a) for a in view.actions],
        )

    def _action_info(self, action: NarratedAction) -> ActionInfo:
        return ActionInfo(
            record_id=action.record_id,
            round_number=action.round_number,
            turn_number=action.turn_number,
            player_id=action.player_id,
            action_type=action.action_type,
            message=action.message,
            card_played=_card_name(action.card_played),
            target_player_id=action.target_player_id,
            details=action.details,
            created_at=action.created_at,
        )


def _card_name(card: Card | None) -> CardName | None:
    return CardName(card.value) if card is not None else None
