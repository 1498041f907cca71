"""
Tests for the command-line interface.
"""

import pytest

from ..bots import CautiousPolicy, FirstLegalPolicy, RandomPolicy
from ..cli import main, make_policy


class TestSimulate:
    """Tests for `courtier simulate`."""

    def test_prints_narrative_and_tokens(self, capsys):
        assert main(["simulate", "--players", "2", "--seed", "3"]) == 0

        out = capsys.readouterr().out
        assert "Round 1 begins." in out
        assert "Bot 1 drew a card" in out or "Bot 2 drew a card" in out
        assert "Final tokens:" in out
        assert out.count("(winner)") == 1
        # Draw narration is public only
        assert "You drew" not in out

    def test_rejects_bad_player_count(self, capsys):
        with pytest.raises(SystemExit):
            main(["simulate", "--players", "5"])
        assert "--players" in capsys.readouterr().out

    def test_no_command_prints_help(self):
        with pytest.raises(SystemExit):
            main([])


class TestMakePolicy:
    def test_policies_by_name(self):
        assert isinstance(make_policy("random", 1), RandomPolicy)
        assert isinstance(make_policy("first"), FirstLegalPolicy)
        assert isinstance(make_policy("cautious", 1), CautiousPolicy)
