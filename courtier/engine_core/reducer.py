"""
Reducer - Applies actions to a game table.

The reducer is the single point of state mutation.
All state changes must go through apply_action().

Design principles:
- (table, action) -> ActionResult carrying a new table
- Works on a deep copy, so a rejected request leaves the input untouched
- Rule violations become failed results with a stable error code
- Consistency errors (missing rows) propagate to the caller
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random
import time

from .action import Action, ActionType, ActionResult, ActionRecord
from .action_log import (
    draw_record,
    game_win_record,
    play_record,
    round_start_record,
    round_win_record,
)
from .cards import MIN_PLAYERS, winning_tokens_for
from .effect_resolver import EffectResolver
from .errors import (
    IllegalAction,
    GameAlreadyStarted,
    GameNotStarted,
    GameOver,
    InvalidPlayerCount,
    NotHost,
    PlayerNotInGame,
    RoundOver,
)
from .lifecycle import award_round, check_round_end, next_round_order, previous_round_winner
from .setup import initialize_round
from .state import GameStatus, GameTable, RoundState
from . import turn

logger = logging.getLogger(__name__)


@dataclass
class Reducer:
    """
    Reducer applies actions to game tables.

    Stateless apart from the shuffle RNG.
    """
    rng: random.Random = field(default_factory=random.Random)
    resolver: EffectResolver = field(default_factory=EffectResolver)

    def apply(self, table: GameTable, action: Action) -> ActionResult:
        """
        Apply an action to the table.

        Returns ActionResult with the new table or error.
        """
        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
            )

        new_table = table.clone()
        try:
            return handler(new_table, action)
        except IllegalAction as e:
            logger.debug("Rejected %s on game %s: %s", action.action_type.value, table.game_id, e)
            return ActionResult.failure(str(e), error_code=e.code)

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.START_GAME: self._handle_start_game,
            ActionType.DRAW: self._handle_draw,
            ActionType.PLAY: self._handle_play,
            ActionType.START_NEXT_ROUND: self._handle_start_next_round,
        }
        return handlers.get(action_type)

    # =========================================================================
    # Handlers
    # =========================================================================

    def _handle_start_game(self, table: GameTable, action: Action) -> ActionResult:
        """Close the lobby and deal round 1 in join order."""
        game = table.game
        if game.status != GameStatus.WAITING:
            raise GameAlreadyStarted("Game has already started")

        caller = table.get_player(action.payload.player_id)
        if caller is None or not caller.is_host:
            raise NotHost()

        if len(table.players) < MIN_PLAYERS:
            raise InvalidPlayerCount("Need at least 2 players to start")

        game.status = GameStatus.IN_PROGRESS
        game.started_at = time.time()
        game.current_round = 1
        game.winning_tokens = winning_tokens_for(len(table.players))

        order = [p.player_id for p in table.seating]
        table.round = initialize_round(game.game_id, 1, order, rng=self.rng)

        return ActionResult.success_with_table(
            table,
            records=[round_start_record(table.round, table.names())],
        )

    def _handle_draw(self, table: GameTable, action: Action) -> ActionResult:
        """Current player takes the top card of the deck."""
        state = self._live_round(table, action.payload.player_id)
        requested_round = action.payload.round_number
        if requested_round is not None and requested_round != state.round_number:
            raise RoundOver(f"Round {requested_round} is not the current round")

        card = turn.draw_card(state, action.payload.player_id)
        record = draw_record(state, action.payload.player_id, card, table.names())
        return ActionResult.success_with_table(table, records=[record], drawn_card=card)

    def _handle_play(self, table: GameTable, action: Action) -> ActionResult:
        """
        Sequencer -> resolver -> lifecycle -> log, as one unit.
        """
        payload = action.payload
        state = self._live_round(table, payload.player_id)
        if payload.card is None:
            raise IllegalAction("No card given")

        turn.validate_play(state, payload.player_id, payload.card)
        turn_number = state.turn_number

        outcome = self.resolver.apply_card(
            payload.card,
            payload.player_id,
            state,
            target_player_id=payload.target_player_id,
            guess=payload.guess,
        )

        names = table.names()
        records: list[ActionRecord] = [play_record(state, outcome, names, turn_number)]

        result = check_round_end(state, table.players)
        if result is not None:
            records.extend(self._finish_round(table, state, result))
        else:
            turn.advance_turn(state)

        return ActionResult.success_with_table(
            table,
            records=records,
            outcome=outcome,
            round_result=result,
        )

    def _handle_start_next_round(self, table: GameTable, action: Action) -> ActionResult:
        """Host deals the next round; last round's winner leads."""
        leader_id = previous_round_winner(table, action.payload.player_id)
        order = next_round_order(table.players, leader_id)

        game = table.game
        table.round = initialize_round(game.game_id, game.current_round, order, rng=self.rng)

        return ActionResult.success_with_table(
            table,
            records=[round_start_record(table.round, table.names())],
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _live_round(self, table: GameTable, player_id: str | None) -> RoundState:
        """The round a player request acts on, if the game allows one."""
        game = table.game
        if game.status == GameStatus.WAITING:
            raise GameNotStarted()
        if game.status == GameStatus.FINISHED:
            raise GameOver()
        if player_id is None or table.get_player(player_id) is None:
            raise PlayerNotInGame()

        state = table.require_round()
        if state.is_over:
            raise RoundOver()
        return state

    def _finish_round(self, table: GameTable, state: RoundState, result) -> list[ActionRecord]:
        game_over = award_round(table, result)
        names = table.names()
        winner = table.get_player(result.winner_id)

        records = [round_win_record(state, result, names, winner.tokens)]
        if game_over:
            records.append(game_win_record(table.game, state, names, winner.tokens))
        return records


def apply_action(
    table: GameTable,
    action: Action,
    rng: random.Random | None = None,
) -> ActionResult:
    """
    Convenience function to apply an action.

    Creates a Reducer and applies the action.
    """
    reducer = Reducer(rng=rng) if rng is not None else Reducer()
    return reducer.apply(table, action)
