"""
Views - What one player is allowed to see of a game.

A view never contains another player's hand, the deck order or the
set-aside card. Actions are narrated for the viewer, so secrets appear
only for the players they were meant for.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any

from ..engine_core.action import ActionRecord
from ..engine_core.action_log import narrate, visible_details
from ..engine_core.cards import Card
from ..engine_core.state import GameTable


@dataclass
class SeatView:
    player_id: str
    name: str
    is_host: bool
    tokens: int
    join_order: int
    is_eliminated: bool = False
    is_protected: bool = False
    is_current_turn: bool = False
    card_count: int = 0


@dataclass
class RoundView:
    round_number: int
    turn_number: int
    current_turn_player_id: str
    deck_count: int
    discard_pile: list[Card] = field(default_factory=list)
    round_winner_id: str | None = None


@dataclass
class NarratedAction:
    record_id: str
    round_number: int
    turn_number: int
    player_id: str
    action_type: str
    message: str
    card_played: Card | None = None
    target_player_id: str | None = None
    details: dict[str, Any] = field(default_factory=dict)
    created_at: float = 0.0


@dataclass
class GameView:
    table: GameTable
    viewer_id: str | None
    seats: list[SeatView] = field(default_factory=list)
    round: RoundView | None = None
    hand: list[Card] | None = None
    actions: list[NarratedAction] = field(default_factory=list)

    @property
    def awaiting_next_round(self) -> bool:
        state = self.table.round
        return (
            state is not None
            and state.is_over
            and not self.table.game.is_finished
        )


def narrate_action(record: ActionRecord, viewer_id: str | None) -> NarratedAction:
    return NarratedAction(
        record_id=record.record_id,
        round_number=record.round_number,
        turn_number=record.turn_number,
        player_id=record.player_id,
        action_type=record.kind.value,
        message=narrate(record, viewer_id),
        card_played=record.card_played,
        target_player_id=record.target_player_id,
        details=visible_details(record, viewer_id),
        created_at=record.created_at,
    )


def build_view(
    table: GameTable,
    viewer_id: str | None,
    records: list[ActionRecord] | None = None,
) -> GameView:
    """Assemble the viewer-scoped view of a table."""
    state = table.round
    seats = []
    for seat in table.seating:
        view = SeatView(
            player_id=seat.player_id,
            name=seat.name,
            is_host=seat.is_host,
            tokens=seat.tokens,
            join_order=seat.join_order,
        )
        if state is not None and state.is_seated(seat.player_id):
            hand = state.hand(seat.player_id)
            view.is_eliminated = hand.is_eliminated
            view.is_protected = hand.is_protected
            view.card_count = hand.count
            view.is_current_turn = (
                not state.is_over and state.current_turn_player_id == seat.player_id
            )
        seats.append(view)

    round_view = None
    own_hand = None
    if state is not None:
        round_view = RoundView(
            round_number=state.round_number,
            turn_number=state.turn_number,
            current_turn_player_id=state.current_turn_player_id,
            deck_count=state.deck_count,
            discard_pile=list(state.discard_pile),
            round_winner_id=state.round_winner_id,
        )
        if viewer_id is not None and state.is_seated(viewer_id):
            own_hand = list(state.hand(viewer_id).cards)

    return GameView(
        table=table,
        viewer_id=viewer_id,
        seats=seats,
        round=round_view,
        hand=own_hand,
        actions=[narrate_action(r, viewer_id) for r in records or []],
    )
