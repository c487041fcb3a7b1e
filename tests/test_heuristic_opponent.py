"""Tests for the rule-based HeuristicOpponent."""

import random

import pytest

from liars_dice.core.bet import Bet, is_higher
from liars_dice.core.game_state import GameState, Player
from liars_dice.strategy.data_structures import OpponentProtocol, OpponentView
from liars_dice.strategy.heuristic_opponent import (
    HeuristicOpponent,
    best_face,
    effective_counts,
)
from liars_dice.utils.constants import AI_PLAYER_ID, HUMAN_PLAYER_ID, Difficulty, GamePhase
from liars_dice.utils.dice import Die, tally


def _make_state(own: list[int], other: list[int], bet: tuple[int, int] | None = None) -> GameState:
    """State where the automated player (holding `own`) is to act."""
    human = Player(
        id=HUMAN_PLAYER_ID, name="You",
        dice=tuple(Die(10 + i, v) for i, v in enumerate(other)),
    )
    ai = Player(
        id=AI_PLAYER_ID, name="Android",
        dice=tuple(Die(20 + i, v) for i, v in enumerate(own)),
        is_automated=True,
    )
    all_dice = human.dice + ai.dice
    current = Bet(HUMAN_PLAYER_ID, *bet) if bet else None
    return GameState(
        players=(human, ai),
        current_player_id=AI_PLAYER_ID,
        previous_player_id=HUMAN_PLAYER_ID if bet else None,
        current_bet=current,
        phase=GamePhase.BETTING,
        dice_count=tally(all_dice),
        total_dice_in_game=len(all_dice),
        round=1,
    )


def _decide(state: GameState, difficulty=Difficulty.MEDIUM, seed: int = 0):
    return HeuristicOpponent(random.Random(seed)).decide(
        state, state.get_player(AI_PLAYER_ID), difficulty,
    )


# ---------------------------------------------------------------------------
# Hand evaluation
# ---------------------------------------------------------------------------


class TestEffectiveCounts:
    def test_wilds_added_to_other_faces(self):
        counts = effective_counts([1, 1, 3])
        assert counts[3] == 3
        assert counts[5] == 2

    def test_wilds_not_added_to_themselves(self):
        assert effective_counts([1, 1, 3])[1] == 2

    def test_empty_hand(self):
        assert effective_counts([]) == {1: 0, 2: 0, 3: 0, 4: 0, 5: 0, 6: 0}


class TestBestFace:
    def test_strongest_face(self):
        assert best_face([1, 1, 3]) == (3, 3)

    def test_ties_go_to_higher_face(self):
        assert best_face([2, 2, 5, 5]) == (5, 2)

    def test_never_picks_ones(self):
        face, count = best_face([1, 1, 1])
        assert face == 6
        assert count == 3


# ---------------------------------------------------------------------------
# Challenge decision
# ---------------------------------------------------------------------------


class TestChallengeDecision:
    def test_never_challenges_without_bet(self):
        state = _make_state([2, 3, 4, 5, 6], [2, 3, 4, 5, 6])
        for seed in range(20):
            assert not _decide(state, seed=seed).is_challenge

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_wilds_support_bet_so_it_raises(self, difficulty):
        state = _make_state([1, 1, 3], [2, 5], bet=(2, 3))
        for seed in range(20):
            action = _decide(state, difficulty, seed)
            assert not action.is_challenge
            assert is_higher(action.as_bet(AI_PLAYER_ID), state.current_bet)

    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_challenges_wild_overbid(self, difficulty):
        state = _make_state([2, 3, 4], [2, 3, 4, 5, 6, 6, 6], bet=(8, 5))
        for seed in range(20):
            assert _decide(state, difficulty, seed).is_challenge

    def test_easy_challenges_more_than_hard(self):
        # Own [5, 5], 8 unseen: estimate is 2 + 2 = 4 matches
        state = _make_state([5, 5], [2, 3, 4, 6, 2, 3, 4, 6], bet=(4, 5))
        easy = sum(_decide(state, Difficulty.EASY, s).is_challenge for s in range(50))
        hard = sum(_decide(state, Difficulty.HARD, s).is_challenge for s in range(50))
        assert easy == 50
        assert hard == 0


# ---------------------------------------------------------------------------
# Betting
# ---------------------------------------------------------------------------


class TestOpeningBet:
    def test_opens_near_a_third_at_best_face(self):
        state = _make_state([5, 5, 2, 3, 4], [2, 3, 4, 6, 6, 6, 2])
        action = _decide(state, Difficulty.MEDIUM)
        assert action.quantity == 4
        assert action.value == 5

    def test_easy_opens_lower(self):
        state = _make_state([5, 5, 2, 3, 4], [2, 3, 4, 6, 6, 6, 2])
        action = _decide(state, Difficulty.EASY)
        assert action.quantity == 3

    def test_opening_at_least_one(self):
        state = _make_state([4], [])
        action = _decide(state)
        assert action.quantity >= 1
        assert 2 <= action.value <= 6

    def test_no_concentration_bets_random_non_wild_face(self):
        state = _make_state([2, 3, 4, 5, 6], [2, 3, 4, 5, 6])
        values = {_decide(state, seed=s).value for s in range(40)}
        assert values <= {2, 3, 4, 5, 6}
        assert len(values) > 1


class TestRaiseLegality:
    @pytest.mark.parametrize("difficulty", list(Difficulty))
    def test_every_raise_beats_current_bet(self, difficulty):
        rng = random.Random(7)
        opponent = HeuristicOpponent(random.Random(11))
        for _ in range(300):
            own = [rng.randint(1, 6) for _ in range(rng.randint(1, 5))]
            other = [rng.randint(1, 6) for _ in range(rng.randint(1, 5))]
            bet = (rng.randint(1, 4), rng.randint(1, 6))
            state = _make_state(own, other, bet)
            action = opponent.decide(state, state.get_player(AI_PLAYER_ID), difficulty)
            if not action.is_challenge:
                assert is_higher(action.as_bet(AI_PLAYER_ID), state.current_bet)

    def test_wraps_six_back_to_two(self):
        # Without concentration a face advance from 6 wraps to 2,
        # which must then carry a higher quantity
        state = _make_state([2, 3], [4, 5, 2, 3, 4, 5, 6, 6], bet=(1, 6))
        for seed in range(30):
            action = _decide(state, Difficulty.MEDIUM, seed)
            if not action.is_challenge:
                assert action.quantity >= 2


class TestHeuristicOpponent:
    def test_satisfies_protocol(self):
        assert isinstance(HeuristicOpponent(), OpponentProtocol)

    def test_seeded_decisions_repeat(self):
        state = _make_state([1, 4, 4, 6], [2, 2, 3], bet=(2, 4))
        a = [_decide(state, seed=3) for _ in range(5)]
        b = [_decide(state, seed=3) for _ in range(5)]
        assert a == b

    def test_ignores_other_players_dice(self):
        first = _make_state([1, 4, 4], [2, 2, 2, 2], bet=(3, 4))
        second = _make_state([1, 4, 4], [6, 6, 5, 5], bet=(3, 4))
        for seed in range(10):
            assert _decide(first, seed=seed) == _decide(second, seed=seed)

    def test_accepts_difficulty_string(self):
        state = _make_state([1, 4, 4], [2, 2], bet=(2, 4))
        assert _decide(state, "hard") == _decide(state, Difficulty.HARD)


class TestOpponentView:
    def test_only_own_values(self):
        state = _make_state([1, 4], [6, 6, 6])
        view = OpponentView.from_state(state, state.get_player(AI_PLAYER_ID))
        assert view.own_dice == (1, 4)
        assert view.opponent_dice_counts == {HUMAN_PLAYER_ID: 3}
        assert view.unseen_dice == 3
