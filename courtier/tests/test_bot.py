"""
Tests for bot action selection and legality.

Tests:
- Legal action generation
- Bots select legal actions
- Whole bot games terminate with a winner
"""

import random

import pytest

from ..bots import BotPolicy, CautiousPolicy, FirstLegalPolicy, RandomPolicy
from ..cli import run_bot_game
from ..engine_core.action import ActionType
from ..engine_core.action_generator import ActionGenerator, legal_actions
from ..engine_core.cards import Card, GUARD_GUESSES
from ..engine_core.state import GameStatus
from ..engine_core import turn
from ..session import EventKind, GameManager
from .conftest import arranged_deck, make_table


def drawn_table(hands, draws, players=None, set_aside=Card.COUNTESS):
    """A round where the first player has already drawn."""
    players = players or ["a", "b", "c"][:len(hands)]
    table = make_table(players, deck=arranged_deck(set_aside, hands, draws))
    turn.draw_card(table.round, players[0])
    return table


class TestLegalActions:
    """Tests for enumerating legal moves."""

    def test_draw_before_play(self):
        table = make_table(["a", "b"])
        actions = legal_actions(table.round, "a")

        assert len(actions) == 1
        assert actions[0].action_type == ActionType.DRAW
        assert actions[0].payload.round_number == 1

    def test_nothing_off_turn(self):
        table = make_table(["a", "b"])
        assert legal_actions(table.round, "b") == []

    def test_guard_guesses_per_target(self):
        table = drawn_table([Card.GUARD, Card.PRIEST, Card.BARON], [Card.HANDMAID])
        guards = [a for a in legal_actions(table.round, "a") if a.payload.card is Card.GUARD]

        assert len(guards) == 2 * len(GUARD_GUESSES)
        assert {a.payload.target_player_id for a in guards} == {"b", "c"}
        assert Card.GUARD not in {a.payload.guess for a in guards}

    def test_countess_forced(self):
        table = drawn_table([Card.KING, Card.PRIEST], [Card.COUNTESS], players=["a", "b"], set_aside=Card.GUARD)

        actions = legal_actions(table.round, "a")

        assert [a.payload.card for a in actions] == [Card.COUNTESS]

    def test_prince_may_target_self(self):
        table = drawn_table([Card.PRINCE, Card.PRIEST], [Card.HANDMAID], players=["a", "b"])
        targets = [
            a.payload.target_player_id
            for a in legal_actions(table.round, "a")
            if a.payload.card is Card.PRINCE
        ]
        assert targets == ["b", "a"]

    def test_all_opponents_protected(self):
        table = drawn_table([Card.KING, Card.PRIEST], [Card.PRINCE], players=["a", "b"])
        table.round.hand("b").is_protected = True

        actions = legal_actions(table.round, "a")
        kings = [a for a in actions if a.payload.card is Card.KING]
        princes = [a for a in actions if a.payload.card is Card.PRINCE]

        assert len(kings) == 1
        assert kings[0].payload.target_player_id is None
        assert [a.payload.target_player_id for a in princes] == ["a"]

    def test_include_protected_targets(self):
        table = drawn_table([Card.KING, Card.PRIEST], [Card.GUARD], players=["a", "b"])
        table.round.hand("b").is_protected = True

        actions = ActionGenerator(include_protected_targets=True).generate(table.round, "a")
        kings = [a for a in actions if a.payload.card is Card.KING]

        assert [a.payload.target_player_id for a in kings] == ["b"]


class TestBotActionLegality:
    """Tests that bots only select legal actions."""

    @pytest.fixture
    def table(self):
        return drawn_table([Card.GUARD, Card.PRIEST, Card.BARON], [Card.HANDMAID])

    @pytest.mark.parametrize("policy", [RandomPolicy(seed=42), FirstLegalPolicy(), CautiousPolicy(seed=1)])
    def test_selects_legal(self, table, policy):
        legal = legal_actions(table.round, "a")

        for _ in range(10):
            decision = policy.select_action(table.round, "a", legal)
            assert decision.action in legal

    def test_first_legal_is_deterministic(self, table):
        legal = legal_actions(table.round, "a")
        policy = FirstLegalPolicy()

        assert policy.select_action(table.round, "a", legal).action is legal[0]
        assert policy.get_name() == "FirstLegalPolicy"

    def test_cautious_plays_lowest_card(self, table):
        legal = legal_actions(table.round, "a")
        decision = CautiousPolicy(seed=5).select_action(table.round, "a", legal)

        assert decision.action.payload.card is Card.GUARD
        assert "Guard" in decision.explanation

    def test_cautious_draws(self):
        table = make_table(["a", "b"])
        legal = legal_actions(table.round, "a")
        assert CautiousPolicy().select_action(table.round, "a", legal).action is legal[0]

    @pytest.mark.parametrize("policy", [RandomPolicy(), FirstLegalPolicy(), CautiousPolicy()])
    def test_no_legal_actions(self, table, policy):
        with pytest.raises(ValueError):
            policy.select_action(table.round, "a", [])

    def test_policy_is_abstract(self):
        with pytest.raises(TypeError):
            BotPolicy()


class TestBotGames:
    """Whole games between bots through the session manager."""

    @pytest.mark.parametrize("players,policy", [
        (2, RandomPolicy(seed=1)),
        (3, CautiousPolicy(seed=2)),
        (4, RandomPolicy(seed=3)),
    ])
    def test_game_finishes(self, players, policy):
        manager = GameManager(rng=random.Random(players))
        conserved = []

        def check_round(event):
            if event.kind == EventKind.ROUND_ENDED:
                conserved.append(manager.get_table(event.game_id).round.is_conserved())

        table = run_bot_game(manager, players, policy, on_event=check_round)

        assert table.game.status == GameStatus.FINISHED
        winner = table.get_player(table.game.winner_id)
        assert winner.tokens == table.game.winning_tokens
        assert all(seat.tokens < table.game.winning_tokens for seat in table.players if seat.player_id != winner.player_id)
        assert conserved and all(conserved)
        assert sum(seat.tokens for seat in table.players) == len(conserved)
