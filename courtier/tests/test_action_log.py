"""
Tests for audit records and per-viewer narration.

Tests:
- Public messages never contain hidden cards
- Secrets reach exactly the players involved
- Protected plays carry no secrets
- Round and game win records
"""

from ..engine_core.action import ActionKind
from ..engine_core.action_log import (
    draw_record,
    game_win_record,
    narrate,
    play_record,
    round_start_record,
    round_win_record,
    visible_details,
)
from ..engine_core.cards import Card
from ..engine_core.effect_resolver import EffectResolver
from ..engine_core.lifecycle import resolve_showdown
from ..engine_core.setup import initialize_round
from ..engine_core import turn
from .conftest import arranged_deck, make_table

NAMES = {"a": "Ann", "b": "Ben", "c": "Cat"}


def play(hands, draws, card, target=None, guess=None, protect=None):
    players = ["a", "b", "c"][:len(hands)]
    state = initialize_round("g", 1, players, deck=arranged_deck(Card.COUNTESS, hands, draws))
    turn.draw_card(state, "a")
    if protect:
        state.hand(protect).is_protected = True
    outcome = EffectResolver().apply_card(card, "a", state, target, guess)
    return play_record(state, outcome, NAMES, 1)


class TestPlayNarration:
    """Tests for play records."""

    def test_priest_secret_for_actor_only(self):
        record = play([Card.PRIEST, Card.KING, Card.GUARD], [Card.BARON], Card.PRIEST, "b")

        assert record.message == "Ann played Priest on Ben"
        assert narrate(record, "a") == "Ann played Priest on Ben [You saw: King]"
        assert narrate(record, "b") == "Ann played Priest on Ben"
        assert narrate(record, "c") == "Ann played Priest on Ben"
        assert narrate(record, None) == "Ann played Priest on Ben"

    def test_baron_secret_for_both(self):
        record = play([Card.BARON, Card.GUARD, Card.GUARD], [Card.PRIEST], Card.BARON, "b")

        note = "[Ann: Priest, Ben: Guard]"
        assert record.message == "Ann played Baron on Ben - Ann wins, Ben is eliminated holding Guard"
        assert narrate(record, "a").endswith(note)
        assert narrate(record, "b").endswith(note)
        assert note not in narrate(record, "c")
        assert visible_details(record, "b")["baron_result"]["winner_id"] == "a"
        assert "baron_result" not in visible_details(record, "c")

    def test_baron_tie_message(self):
        record = play([Card.BARON, Card.GUARD], [Card.GUARD], Card.BARON, "b")
        assert record.message == "Ann played Baron on Ben - Tie!"
        assert visible_details(record, "c")["tie"] is True

    def test_prince_discard_secret(self):
        record = play([Card.PRINCE, Card.PRIEST, Card.GUARD], [Card.GUARD, Card.KING], Card.PRINCE, "b")

        assert record.message == "Ann played Prince on Ben - Ben discarded and drew a new card"
        assert narrate(record, "b").endswith("[Discarded: Priest]")
        assert narrate(record, "a").endswith("[Discarded: Priest]")
        assert "Priest" not in narrate(record, "c")

    def test_prince_on_princess_is_public(self):
        record = play([Card.PRINCE, Card.PRINCESS], [Card.GUARD], Card.PRINCE, "b")

        assert record.message == "Ann played Prince on Ben - Ben discarded the Princess and is eliminated"
        assert record.details.secrets == []
        assert visible_details(record, None)["exposed_card"] == "Princess"

    def test_prince_on_self(self):
        record = play([Card.PRINCE, Card.PRIEST], [Card.GUARD, Card.BARON], Card.PRINCE, "a")
        assert record.message.startswith("Ann played Prince on themselves")

    def test_guard_messages(self):
        hit = play([Card.GUARD, Card.PRIEST], [Card.BARON], Card.GUARD, "b", Card.PRIEST)
        miss = play([Card.GUARD, Card.PRIEST], [Card.BARON], Card.GUARD, "b", Card.KING)

        assert hit.message == "Ann played Guard on Ben, guessed Priest - Correct! Ben is eliminated"
        assert miss.message == "Ann played Guard on Ben, guessed King - Wrong guess"
        assert visible_details(hit, None)["guess_card"] == "Priest"
        assert visible_details(hit, None)["eliminated_player_id"] == "b"

    def test_protected_play_has_no_secrets(self):
        record = play([Card.PRIEST, Card.KING], [Card.BARON], Card.PRIEST, "b", protect="b")

        assert record.message == "Ann played Priest on Ben - No effect (protected)"
        assert record.details.target_protected
        assert record.details.secrets == []
        assert narrate(record, "a") == record.message

    def test_no_target_message(self):
        record = play([Card.KING, Card.PRIEST], [Card.BARON], Card.KING, protect="b")
        assert record.message == "Ann played King - No effect (no valid target)"

    def test_princess_message(self):
        record = play([Card.PRINCESS, Card.PRIEST], [Card.GUARD], Card.PRINCESS)
        assert record.message == "Ann played Princess - Eliminated! (was also holding Guard)"

    def test_handmaid_and_king_messages(self):
        handmaid = play([Card.HANDMAID, Card.PRIEST], [Card.GUARD], Card.HANDMAID)
        king = play([Card.KING, Card.PRIEST], [Card.GUARD], Card.KING, "b")

        assert handmaid.message == "Ann played Handmaid - Protected until next turn"
        assert king.message == "Ann played King on Ben - Swapped hands"
        # Swapped cards stay hidden from everyone
        assert "Priest" not in narrate(king, "a")


class TestOtherRecords:
    """Tests for draw, round and game records."""

    def test_draw_record(self):
        state = initialize_round("g", 1, ["a", "b"], deck=arranged_deck(Card.KING, [Card.GUARD, Card.PRIEST], [Card.BARON]))
        card = turn.draw_card(state, "a")
        record = draw_record(state, "a", card, NAMES)

        assert record.kind == ActionKind.DRAW_CARD
        assert record.message == "Ann drew a card"
        assert narrate(record, "a") == "Ann drew a card [You drew: Baron]"
        assert narrate(record, "b") == "Ann drew a card"

    def test_round_start_record(self):
        state = initialize_round("g", 3, ["b", "a"])
        record = round_start_record(state, NAMES)

        assert record.kind == ActionKind.START_ROUND
        assert record.turn_number == 0
        assert record.message == "Round 3 begins. Ben goes first."

    def test_showdown_record_reveals_cards(self):
        table = make_table(["a", "b"])
        state = table.round
        state.hand("a").cards = [Card.KING]
        state.hand("b").cards = [Card.KING]
        state.discards_by_player = {"a": [Card.BARON], "b": [Card.GUARD]}
        result = resolve_showdown(state, table.players)

        record = round_win_record(state, result, NAMES, 1)

        assert record.kind == ActionKind.WIN_ROUND
        assert record.message == (
            "Ann wins round 1 in the showdown (Ann: King, Ben: King) - tie broken by discards"
        )
        assert record.details.public["reason"] == "showdown"
        assert record.details.public["discard_totals"] == {"a": 3, "b": 1}

    def test_game_win_record(self):
        table = make_table(["a", "b"])
        table.game.winner_id = "b"
        record = game_win_record(table.game, table.round, NAMES, 7)

        assert record.kind == ActionKind.WIN_GAME
        assert record.message == "Ben wins the game with 7 tokens!"
