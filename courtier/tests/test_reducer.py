"""
Tests for reducer action application.

Tests:
- Start game, draw and play through the reducer
- End-to-end rule scenarios
- Failed actions leave the input table untouched
- Round end awards tokens; the game ends at the threshold
"""

import random

import pytest

from ..engine_core.action import Action, ActionKind
from ..engine_core.cards import Card, DECK_SIZE
from ..engine_core.errors import ConsistencyError
from ..engine_core.lifecycle import RoundEndReason
from ..engine_core.reducer import Reducer, apply_action
from ..engine_core.state import Game, GameStatus, GameTable, PlayerSeat
from .conftest import arranged_deck, make_table


def trim_deck(state, keep):
    """Move all but the top `keep` deck cards to the discard pile."""
    state.discard_pile.extend(state.deck[keep:])
    del state.deck[keep:]


@pytest.fixture
def reducer():
    return Reducer(rng=random.Random(11))


class TestStartGame:
    """Tests for closing the lobby."""

    def _lobby(self, count):
        game = Game(game_id="g", room_code="ROOM22", created_by="p1", max_players=4)
        players = [
            PlayerSeat(game_id="g", player_id=f"p{i}", name=f"P{i}", is_host=(i == 1), join_order=i)
            for i in range(1, count + 1)
        ]
        return GameTable(game=game, players=players)

    def test_start_deals_round_one(self, reducer):
        result = reducer.apply(self._lobby(3), Action.start_game("p1"))

        assert result.success
        table = result.new_table
        assert table.game.status == GameStatus.IN_PROGRESS
        assert table.game.current_round == 1
        assert table.game.winning_tokens == 5
        assert table.game.started_at is not None
        assert table.round.seat_order == ["p1", "p2", "p3"]
        assert table.round.current_turn_player_id == "p1"
        assert result.record.kind == ActionKind.START_ROUND

    def test_only_host_starts(self, reducer):
        result = reducer.apply(self._lobby(3), Action.start_game("p2"))
        assert not result.success
        assert result.error_code == "NOT_HOST"

    def test_needs_two_players(self, reducer):
        result = reducer.apply(self._lobby(1), Action.start_game("p1"))
        assert result.error_code == "INVALID_PLAYER_COUNT"

    def test_cannot_start_twice(self, reducer):
        table = reducer.apply(self._lobby(2), Action.start_game("p1")).new_table
        result = reducer.apply(table, Action.start_game("p1"))
        assert result.error_code == "GAME_ALREADY_STARTED"


class TestDrawAndPlay:
    """Tests for the turn actions."""

    def test_draw_returns_card(self, reducer):
        table = make_table(["a", "b"], deck=arranged_deck(Card.KING, [Card.GUARD, Card.PRIEST], [Card.BARON]))
        result = reducer.apply(table, Action.draw("a", round_number=1))

        assert result.success
        assert result.drawn_card is Card.BARON
        assert result.new_table.round.hand("a").cards == [Card.GUARD, Card.BARON]
        assert result.record.kind == ActionKind.DRAW_CARD

    def test_input_table_untouched(self, reducer):
        table = make_table(["a", "b"], deck=arranged_deck(Card.KING, [Card.GUARD, Card.PRIEST], [Card.BARON]))
        reducer.apply(table, Action.draw("a"))
        assert table.round.hand("a").cards == [Card.GUARD]
        assert table.round.deck_count == DECK_SIZE - 3

    def test_stale_round_number(self, reducer):
        table = make_table(["a", "b"])
        result = reducer.apply(table, Action.draw("a", round_number=2))
        assert result.error_code == "ROUND_OVER"

    def test_stranger_cannot_act(self, reducer):
        table = make_table(["a", "b"])
        result = reducer.apply(table, Action.draw("zed"))
        assert result.error_code == "PLAYER_NOT_IN_GAME"

    def test_play_passes_turn(self, reducer):
        table = make_table(["a", "b", "c"], deck=arranged_deck(
            Card.KING, [Card.HANDMAID, Card.PRIEST, Card.GUARD], [Card.GUARD],
        ))
        table = reducer.apply(table, Action.draw("a")).new_table
        result = reducer.apply(table, Action.play("a", Card.HANDMAID))

        assert result.success
        state = result.new_table.round
        assert state.current_turn_player_id == "b"
        assert state.turn_number == 2
        assert state.hand("a").is_protected
        assert result.round_result is None

    def test_failed_play_commits_nothing(self, reducer):
        table = make_table(["a", "b"], deck=arranged_deck(Card.KING, [Card.GUARD, Card.PRIEST], [Card.BARON]))
        table = reducer.apply(table, Action.draw("a")).new_table
        before = table.clone()

        result = reducer.apply(table, Action.play("a", Card.GUARD, "b", None))

        assert not result.success
        assert result.error_code == "INVALID_GUESS"
        assert result.new_table is None
        assert table.round == before.round

    def test_game_not_started(self, reducer):
        table = make_table(["a", "b"])
        table.game.status = GameStatus.WAITING
        assert reducer.apply(table, Action.draw("a")).error_code == "GAME_NOT_STARTED"

    def test_game_over_blocks_actions(self, reducer):
        table = make_table(["a", "b"])
        table.game.status = GameStatus.FINISHED
        assert reducer.apply(table, Action.draw("a")).error_code == "GAME_OVER"

    def test_missing_round_is_a_consistency_error(self, reducer):
        table = make_table(["a", "b"])
        table.round = None
        with pytest.raises(ConsistencyError):
            reducer.apply(table, Action.draw("a"))

    def test_convenience_function(self):
        table = make_table(["a", "b"])
        result = apply_action(table, Action.draw("a"))
        assert result.success


class TestScenarios:
    """End-to-end rule scenarios."""

    def test_guard_miss_passes_turn(self, reducer):
        table = make_table(["a", "b"], deck=arranged_deck(Card.KING, [Card.GUARD, Card.GUARD], [Card.PRIEST]))
        table = reducer.apply(table, Action.draw("a")).new_table

        result = reducer.apply(table, Action.play("a", Card.GUARD, "b", Card.PRINCESS))

        assert result.success
        assert result.outcome.guess_correct is False
        state = result.new_table.round
        assert state.active_player_ids() == ["a", "b"]
        assert state.current_turn_player_id == "b"
        assert result.record.message == "A played Guard on B, guessed Princess - Wrong guess"

    def test_countess_forced(self, reducer):
        table = make_table(["a", "b"], deck=arranged_deck(Card.GUARD, [Card.COUNTESS, Card.PRIEST], [Card.KING]))
        table = reducer.apply(table, Action.draw("a")).new_table

        rejected = reducer.apply(table, Action.play("a", Card.KING, "b"))
        assert rejected.error_code == "COUNTESS_FORCED"

        accepted = reducer.apply(table, Action.play("a", Card.COUNTESS))
        assert accepted.success
        assert accepted.new_table.round.hand("a").cards == [Card.KING]

    def test_prince_on_self_with_princess(self, reducer):
        table = make_table(["a", "b"], deck=arranged_deck(Card.GUARD, [Card.PRINCE, Card.PRIEST], [Card.PRINCESS]))
        table = reducer.apply(table, Action.draw("a")).new_table
        deck_before = table.round.deck_count

        result = reducer.apply(table, Action.play("a", Card.PRINCE, "a"))

        state = result.new_table.round
        assert result.success
        assert state.hand("a").is_eliminated
        assert state.hand("a").is_empty
        assert state.deck_count == deck_before
        assert state.is_conserved()
        assert result.round_result.winner_id == "b"
        assert result.round_result.reason == RoundEndReason.ELIMINATION

    def test_empty_deck_showdown(self, reducer):
        table = make_table(["a", "b"], deck=arranged_deck(Card.GUARD, [Card.HANDMAID, Card.BARON], [Card.KING]))
        trim_deck(table.round, 1)
        table = reducer.apply(table, Action.draw("a")).new_table
        assert table.round.deck_count == 0

        result = reducer.apply(table, Action.play("a", Card.HANDMAID))

        assert result.success
        assert result.round_result.reason == RoundEndReason.SHOWDOWN
        assert result.round_result.winner_id == "a"
        new = result.new_table
        assert new.round.round_winner_id == "a"
        assert new.get_player("a").tokens == 1
        assert new.game.current_round == 2
        kinds = [r.kind for r in result.records]
        assert kinds == [ActionKind.PLAY_CARD, ActionKind.WIN_ROUND]

        # Round is closed to further requests
        assert reducer.apply(new, Action.draw("b")).error_code == "ROUND_OVER"


class TestRoundsAndGameEnd:
    """Tests for the next round and the last token."""

    def _won_round(self, reducer, tokens=None):
        table = make_table(["a", "b", "c"], deck=arranged_deck(
            Card.GUARD, [Card.PRINCESS, Card.PRIEST, Card.BARON], [Card.GUARD],
        ), tokens=tokens)
        table.round.eliminate("b")
        table = reducer.apply(table, Action.draw("a")).new_table
        # a throws the Princess; c is left standing
        return reducer.apply(table, Action.play("a", Card.PRINCESS))

    def test_next_round_led_by_winner(self, reducer):
        table = self._won_round(reducer).new_table
        assert table.round.round_winner_id == "c"

        result = reducer.apply(table, Action.start_next_round("a"))

        assert result.success
        state = result.new_table.round
        assert state.round_number == 2
        assert state.seat_order == ["c", "a", "b"]
        assert state.current_turn_player_id == "c"
        assert all(not h.is_eliminated for h in state.hands.values())
        assert state.is_conserved()

    def test_next_round_needs_host(self, reducer):
        table = self._won_round(reducer).new_table
        result = reducer.apply(table, Action.start_next_round("c"))
        assert result.error_code == "NOT_HOST"

    def test_last_token_ends_game(self, reducer):
        result = self._won_round(reducer, tokens={"c": 4})

        assert result.game_over
        table = result.new_table
        assert table.game.status == GameStatus.FINISHED
        assert table.game.winner_id == "c"
        assert [r.kind for r in result.records][-1] == ActionKind.WIN_GAME

        assert reducer.apply(table, Action.start_next_round("a")).error_code == "GAME_OVER"

    def test_unknown_action_type(self, reducer):
        table = make_table(["a", "b"])
        action = Action.draw("a")
        action.action_type = "teleport"
        result = reducer.apply(table, action)
        assert result.error_code == "NO_HANDLER"
