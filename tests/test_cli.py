"""Tests for terminal command parsing, table rendering and the play loop."""

import asyncio
import random
import threading
from unittest.mock import patch

import pytest

from liars_dice.core.game_config import GameConfig
from liars_dice.core.game_engine import GameEngine
from liars_dice.interface.cli import describe_result, parse_command, play, render_state
from liars_dice.interface.turn_scheduler import GameSession
from liars_dice.strategy.data_structures import Action
from liars_dice.utils.constants import AI_PLAYER_ID, HUMAN_PLAYER_ID, GamePhase


class TestParseCommand:
    @pytest.mark.parametrize("text,expected", [
        ("bet 3 5", ("bet", 3, 5)),
        ("b 2 6", ("bet", 2, 6)),
        ("  BET 4 2 ", ("bet", 4, 2)),
        ("challenge", ("challenge", 0, 0)),
        ("c", ("challenge", 0, 0)),
        ("liar", ("challenge", 0, 0)),
        ("quit", ("quit", 0, 0)),
        ("q", ("quit", 0, 0)),
    ])
    def test_valid(self, text, expected):
        assert parse_command(text) == expected

    @pytest.mark.parametrize("text", ["", "bet", "bet 3", "bet three 5", "raise 3 5", "c now"])
    def test_invalid(self, text):
        assert parse_command(text) is None

    def test_out_of_range_values_left_to_engine(self):
        assert parse_command("bet 0 9") == ("bet", 0, 9)


def _engine() -> GameEngine:
    engine = GameEngine(rng=random.Random(2))
    engine.start_game()
    return engine


class TestRenderState:
    def test_hides_opponent_dice_while_betting(self):
        state = _engine().get_state()
        text = "\n".join(render_state(state, HUMAN_PLAYER_ID))
        own = " ".join(str(v) for v in state.get_player(HUMAN_PLAYER_ID).dice_values)
        assert "Round 1" in text
        assert own in text
        assert "5 dice" in text
        assert "(none)" in text

    def test_shows_all_dice_after_challenge(self):
        engine = _engine()
        engine.place_bet(2, 3)
        state = engine.challenge()
        text = "\n".join(render_state(state, HUMAN_PLAYER_ID))
        theirs = " ".join(str(v) for v in state.get_player(AI_PLAYER_ID).dice_values)
        assert theirs in text
        assert "5 dice" not in text
        assert "2 x 3" in text


class TestDescribeResult:
    def test_mentions_loser(self):
        engine = _engine()
        engine.place_bet(2, 3)
        state = engine.challenge()
        line = describe_result(state)
        loser = state.display_names[state.round_loser]
        assert f"{loser} loses a die" in line
        assert f"{state.challenged_dice_count} dice match 3" in line


class OpeningOpponent:
    """Opens at 1 x 3 and challenges any existing bet."""

    def decide(self, state, player, difficulty):
        if state.current_bet is None:
            return Action.bet(1, 3)
        return Action.challenge()


class TestPlay:
    def test_prompts_run_off_the_event_loop(self):
        prompt_threads = []

        def fake_prompt(msg, default=""):
            prompt_threads.append(threading.current_thread())
            return "quit" if msg.startswith("Your move") else ""

        session = GameSession(
            GameConfig(restart_delay_seconds=0),
            opponent=OpeningOpponent(),
            rng=random.Random(4),
        )
        with patch("liars_dice.interface.cli._prompt", side_effect=fake_prompt) as prompt:
            asyncio.run(play(session))

        assert prompt.call_args.args[0].startswith("Your move")
        assert prompt_threads
        assert threading.main_thread() not in prompt_threads
        assert session.state.phase == GamePhase.BETTING
