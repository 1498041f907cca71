"""
Round/Game Lifecycle - Round end, showdown, tokens and game end.

A round ends when:
1. Exactly one player is left (elimination victory), or
2. The deck is empty after a play (showdown).

Showdown order of precedence:
1. Highest card held
2. Highest total rank of the cards that player discarded this round
3. Lowest join order (earliest seat)

Winning a round is worth one token. Reaching the game's threshold
finishes the game; otherwise the game waits for the host to start the
next round, led by the round's winner.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import time

from .cards import Card
from .errors import NotHost, NoPreviousWinner, GameOver, GameNotStarted, RoundInProgress
from .state import GameTable, GameStatus, PlayerSeat, RoundState


class RoundEndReason(Enum):
    ELIMINATION = "elimination"
    SHOWDOWN = "showdown"


class TieBreak(Enum):
    """How a showdown tie was settled."""
    DISCARDS = "discards"
    SEAT_ORDER = "seat_order"


@dataclass
class RoundResult:
    """The winner of a round and how they won."""
    winner_id: str
    reason: RoundEndReason
    survivors: list[str] = field(default_factory=list)
    final_cards: dict[str, Card] = field(default_factory=dict)
    discard_totals: dict[str, int] = field(default_factory=dict)
    tiebreak: TieBreak | None = None


def check_round_end(state: RoundState, players: list[PlayerSeat]) -> RoundResult | None:
    """
    Decide whether the round is over after a play.

    Returns None while the round continues.
    """
    survivors = state.active_player_ids()

    if len(survivors) == 1:
        return RoundResult(
            winner_id=survivors[0],
            reason=RoundEndReason.ELIMINATION,
            survivors=survivors,
        )

    if not state.deck:
        return resolve_showdown(state, players)

    return None


def resolve_showdown(state: RoundState, players: list[PlayerSeat]) -> RoundResult:
    """Compare survivors' cards; break ties on discards, then seat."""
    survivors = state.active_player_ids()
    join_order = {p.player_id: p.join_order for p in players}

    final_cards: dict[str, Card] = {}
    for pid in survivors:
        card = state.hand(pid).only_card()
        if card is not None:
            final_cards[pid] = card

    def card_rank(pid: str) -> int:
        card = final_cards.get(pid)
        return card.rank if card else 0

    best_rank = max(card_rank(pid) for pid in survivors)
    contenders = [pid for pid in survivors if card_rank(pid) == best_rank]
    discard_totals = {pid: state.discard_total(pid) for pid in survivors}

    tiebreak = None
    if len(contenders) > 1:
        tiebreak = TieBreak.DISCARDS
        best_total = max(discard_totals[pid] for pid in contenders)
        contenders = [pid for pid in contenders if discard_totals[pid] == best_total]

    if len(contenders) > 1:
        # TODO: some tables play shared round wins on a full tie; needs a
        # multi-winner RoundResult before it can be offered as an option.
        tiebreak = TieBreak.SEAT_ORDER
        contenders.sort(key=lambda pid: join_order.get(pid, len(join_order) + 1))

    return RoundResult(
        winner_id=contenders[0],
        reason=RoundEndReason.SHOWDOWN,
        survivors=survivors,
        final_cards=final_cards,
        discard_totals=discard_totals,
        tiebreak=tiebreak,
    )


def award_round(table: GameTable, result: RoundResult) -> bool:
    """
    Close the live round and credit the winner.

    Returns True if the token finishes the game.
    """
    state = table.require_round()
    state.round_winner_id = result.winner_id

    winner = table.get_player(result.winner_id)
    winner.tokens += 1

    game = table.game
    if winner.tokens >= game.winning_tokens:
        game.status = GameStatus.FINISHED
        game.winner_id = winner.player_id
        game.finished_at = time.time()
        return True

    game.current_round += 1
    return False


def next_round_order(players: list[PlayerSeat], leader_id: str) -> list[str]:
    """Seating order rotated so leader_id goes first."""
    seats = [p.player_id for p in sorted(players, key=lambda p: p.join_order)]
    if leader_id not in seats:
        return seats
    start = seats.index(leader_id)
    return seats[start:] + seats[:start]


def previous_round_winner(table: GameTable, caller_id: str) -> str:
    """
    Check the host may start the next round; return who leads it.

    Raises NotHost, NoPreviousWinner, GameOver or GameNotStarted.
    """
    game = table.game
    if game.status == GameStatus.FINISHED:
        raise GameOver()
    if game.status == GameStatus.WAITING:
        raise GameNotStarted()

    caller = table.get_player(caller_id)
    if caller is None or not caller.is_host:
        raise NotHost()

    state = table.round
    if state is None or state.round_winner_id is None:
        raise NoPreviousWinner()
    if state.round_number >= game.current_round:
        raise RoundInProgress()
    return state.round_winner_id
