"""
Action Log - Builds audit records and narrates them per viewer.

Every record carries a public message safe for the whole table. Hidden
card values travel as Secrets naming who may see them:
- Priest: the card seen, to the actor only
- Baron: both compared cards, to both players
- Prince: the forced discard, to actor and target (a discarded Princess
  is an elimination and therefore public)
- Draw: the drawn card, to the drawer only

Plays against a protected target carry no secrets at all.
"""

from __future__ import annotations
from typing import Any

from .action import ActionDetails, ActionKind, ActionRecord, Secret
from .cards import Card
from .effect_resolver import EffectOutcome
from .lifecycle import RoundEndReason, RoundResult, TieBreak
from .state import Game, RoundState


def _name(names: dict[str, str], player_id: str | None) -> str:
    if player_id is None:
        return "Unknown"
    return names.get(player_id, player_id)


# =============================================================================
# Record builders
# =============================================================================

def play_record(
    state: RoundState,
    outcome: EffectOutcome,
    names: dict[str, str],
    turn_number: int,
) -> ActionRecord:
    """Audit record for a resolved play."""
    message = describe_play(outcome, names)
    public: dict[str, Any] = {}
    secrets: list[Secret] = []

    if outcome.guess_correct is not None:
        public["guess_correct"] = outcome.guess_correct
    if outcome.no_target:
        public["no_target"] = True
    if outcome.swapped:
        public["swapped"] = True
    if outcome.elimination:
        public["eliminated_player_id"] = outcome.elimination.player_id
        if outcome.elimination.exposed_card:
            public["exposed_card"] = outcome.elimination.exposed_card.label
    if outcome.comparison and outcome.comparison.winner_id is None:
        public["tie"] = True
    if outcome.drew_set_aside:
        public["drew_set_aside"] = True

    if not outcome.target_protected:
        secrets = _play_secrets(outcome, names)

    return ActionRecord(
        game_id=state.game_id,
        round_number=state.round_number,
        turn_number=turn_number,
        player_id=outcome.actor_id,
        kind=ActionKind.PLAY_CARD,
        card_played=outcome.card,
        target_player_id=outcome.target_id,
        details=ActionDetails(
            message=message,
            target_protected=outcome.target_protected,
            guess=outcome.guess,
            public=public,
            secrets=secrets,
        ),
    )


def _play_secrets(outcome: EffectOutcome, names: dict[str, str]) -> list[Secret]:
    secrets = []

    if outcome.card is Card.PRIEST and outcome.revealed_card is not None:
        secrets.append(Secret(
            key="revealed_card",
            value=outcome.revealed_card.label,
            visible_to=(outcome.actor_id,),
            note=f"You saw: {outcome.revealed_card.label}",
        ))

    if outcome.comparison is not None:
        comparison = outcome.comparison
        secrets.append(Secret(
            key="baron_result",
            value={
                "actor_card": comparison.actor_card.label,
                "target_card": comparison.target_card.label,
                "winner_id": comparison.winner_id,
            },
            visible_to=outcome.participants,
            note=(
                f"{_name(names, outcome.actor_id)}: {comparison.actor_card.label}, "
                f"{_name(names, outcome.target_id)}: {comparison.target_card.label}"
            ),
        ))

    if outcome.forced_discard is not None and outcome.forced_discard is not Card.PRINCESS:
        secrets.append(Secret(
            key="discarded_card",
            value=outcome.forced_discard.label,
            visible_to=outcome.participants,
            note=f"Discarded: {outcome.forced_discard.label}",
        ))

    return secrets


def draw_record(
    state: RoundState,
    player_id: str,
    card: Card,
    names: dict[str, str],
) -> ActionRecord:
    """Audit record for a draw. Only the drawer learns the card."""
    return ActionRecord(
        game_id=state.game_id,
        round_number=state.round_number,
        turn_number=state.turn_number,
        player_id=player_id,
        kind=ActionKind.DRAW_CARD,
        details=ActionDetails(
            message=f"{_name(names, player_id)} drew a card",
            public={"deck_count": state.deck_count},
            secrets=[Secret(
                key="drawn_card",
                value=card.label,
                visible_to=(player_id,),
                note=f"You drew: {card.label}",
            )],
        ),
    )


def round_start_record(state: RoundState, names: dict[str, str]) -> ActionRecord:
    leader = state.current_turn_player_id
    return ActionRecord(
        game_id=state.game_id,
        round_number=state.round_number,
        turn_number=0,
        player_id=leader,
        kind=ActionKind.START_ROUND,
        details=ActionDetails(
            message=f"Round {state.round_number} begins. {_name(names, leader)} goes first.",
            public={"seat_order": list(state.seat_order), "deck_count": state.deck_count},
        ),
    )


def round_win_record(
    state: RoundState,
    result: RoundResult,
    names: dict[str, str],
    tokens: int,
) -> ActionRecord:
    """Round result. A showdown reveals every survivor's card to all."""
    winner = _name(names, result.winner_id)
    if result.reason == RoundEndReason.ELIMINATION:
        message = f"{winner} wins round {state.round_number} as the last player standing"
    else:
        reveals = ", ".join(
            f"{_name(names, pid)}: {card.label}" for pid, card in result.final_cards.items()
        )
        message = f"{winner} wins round {state.round_number} in the showdown ({reveals})"
        if result.tiebreak == TieBreak.DISCARDS:
            message += " - tie broken by discards"
        elif result.tiebreak == TieBreak.SEAT_ORDER:
            message += " - tie broken by seat order"

    return ActionRecord(
        game_id=state.game_id,
        round_number=state.round_number,
        turn_number=state.turn_number,
        player_id=result.winner_id,
        kind=ActionKind.WIN_ROUND,
        details=ActionDetails(
            message=message,
            public={
                "reason": result.reason.value,
                "final_cards": {pid: c.label for pid, c in result.final_cards.items()},
                "discard_totals": dict(result.discard_totals),
                "tiebreak": result.tiebreak.value if result.tiebreak else None,
                "tokens": tokens,
            },
        ),
    )


def game_win_record(
    game: Game,
    state: RoundState,
    names: dict[str, str],
    tokens: int,
) -> ActionRecord:
    return ActionRecord(
        game_id=game.game_id,
        round_number=state.round_number,
        turn_number=state.turn_number,
        player_id=game.winner_id,
        kind=ActionKind.WIN_GAME,
        details=ActionDetails(
            message=f"{_name(names, game.winner_id)} wins the game with {tokens} tokens!",
            public={"tokens": tokens},
        ),
    )


# =============================================================================
# Narrative
# =============================================================================

def describe_play(outcome: EffectOutcome, names: dict[str, str]) -> str:
    """Public narrative for a play. Never contains a hidden card."""
    actor = _name(names, outcome.actor_id)
    target = _name(names, outcome.target_id)
    card = outcome.card.label

    if outcome.no_target:
        return f"{actor} played {card} - No effect (no valid target)"
    if outcome.target_protected:
        return f"{actor} played {card} on {target} - No effect (protected)"

    if outcome.card is Card.GUARD:
        message = f"{actor} played Guard on {target}, guessed {outcome.guess.label}"
        if outcome.guess_correct:
            return f"{message} - Correct! {target} is eliminated"
        return f"{message} - Wrong guess"

    if outcome.card is Card.PRIEST:
        return f"{actor} played Priest on {target}"

    if outcome.card is Card.BARON:
        comparison = outcome.comparison
        if comparison.winner_id is None:
            return f"{actor} played Baron on {target} - Tie!"
        loser = outcome.elimination
        return (
            f"{actor} played Baron on {target} - {_name(names, comparison.winner_id)} wins, "
            f"{_name(names, loser.player_id)} is eliminated holding {loser.exposed_card.label}"
        )

    if outcome.card is Card.HANDMAID:
        return f"{actor} played Handmaid - Protected until next turn"

    if outcome.card is Card.PRINCE:
        if outcome.actor_id == outcome.target_id:
            message = f"{actor} played Prince on themselves"
        else:
            message = f"{actor} played Prince on {target}"
        if outcome.elimination:
            return f"{message} - {target} discarded the Princess and is eliminated"
        if outcome.drew_set_aside:
            return f"{message} - {target} discarded and drew the set-aside card"
        if outcome.drew_replacement:
            return f"{message} - {target} discarded and drew a new card"
        return message

    if outcome.card is Card.KING:
        return f"{actor} played King on {target} - Swapped hands"

    if outcome.card is Card.PRINCESS:
        exposed = outcome.elimination.exposed_card
        if exposed is not None and exposed is not Card.PRINCESS:
            return f"{actor} played Princess - Eliminated! (was also holding {exposed.label})"
        return f"{actor} played Princess - Eliminated!"

    return f"{actor} played {card}"


def narrate(record: ActionRecord, viewer_id: str | None = None) -> str:
    """The record's message plus every secret viewer_id may see."""
    message = record.details.message
    for secret in record.details.secrets_for(viewer_id):
        message += f" [{secret.note}]"
    return message


def visible_details(record: ActionRecord, viewer_id: str | None = None) -> dict[str, Any]:
    """Structured details with secrets filtered for viewer_id."""
    details: dict[str, Any] = dict(record.details.public)
    details["target_protected"] = record.details.target_protected
    if record.details.guess is not None:
        details["guess_card"] = record.details.guess.label
    for secret in record.details.secrets_for(viewer_id):
        details[secret.key] = secret.value
    return details
