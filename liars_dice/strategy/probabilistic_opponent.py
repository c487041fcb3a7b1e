"""Probability-driven automated opponent.

Scores a bet by the probability that it is true given the viewer's own
hand: each unseen die matches a face 2-6 with p = 1/3 (the face itself
or a wild 1) and matches a bet on 1s with p = 1/6. The number of
unseen matches is Binomial(unseen, p).
"""

from __future__ import annotations

import logging
from math import comb

import numpy as np

from liars_dice.core.bet import minimum_quantity
from liars_dice.core.game_state import GameState, Player
from liars_dice.strategy.data_structures import Action, OpponentView
from liars_dice.utils.constants import FACES, WILD_VALUE, Difficulty
from liars_dice.utils.dice import count_matching

logger = logging.getLogger("liars_dice.strategy.probabilistic")

# Call a bluff when the bet is less likely than this to be true
CHALLENGE_THRESHOLD: dict[Difficulty, float] = {
    Difficulty.EASY: 0.15,
    Difficulty.MEDIUM: 0.3,
    Difficulty.HARD: 0.4,
}


def match_probability(value: int) -> float:
    """Chance that one unseen die counts toward a bet on `value`."""
    return 1 / 6 if value == WILD_VALUE else 2 / 6


def binomial_tail(n: int, k: int, p: float) -> float:
    """P(X >= k) for X ~ Binomial(n, p).

    >>> binomial_tail(4, 0, 0.3)
    1.0
    >>> binomial_tail(2, 3, 0.5)
    0.0
    """
    if k <= 0:
        return 1.0
    if k > n:
        return 0.0
    i = np.arange(k, n + 1)
    coeffs = np.array([comb(n, int(j)) for j in i], dtype=float)
    terms = coeffs * np.power(p, i) * np.power(1.0 - p, n - i)
    return float(min(1.0, terms.sum()))


def bet_probability(
    quantity: int,
    value: int,
    own_dice: tuple[int, ...] | list[int],
    unseen_dice: int,
) -> float:
    """Probability that at least `quantity` dice match `value` overall."""
    needed = quantity - count_matching(own_dice, value)
    return binomial_tail(unseen_dice, needed, match_probability(value))


class ProbabilisticOpponent:
    """Opponent that challenges unlikely bets and makes the safest raise.

    Satisfies OpponentProtocol.
    """

    def decide(
        self,
        state: GameState,
        player: Player,
        difficulty: Difficulty = Difficulty.MEDIUM,
    ) -> Action:
        difficulty = Difficulty(difficulty)
        view = OpponentView.from_state(state, player)
        current = view.current_bet

        if current is not None:
            p_true = bet_probability(
                current.quantity, current.value, view.own_dice, view.unseen_dice,
            )
            logger.debug("P(%s is true) = %.3f for %s", current, p_true, view.player_id)
            if p_true < CHALLENGE_THRESHOLD[difficulty]:
                return Action.challenge()

        return self._safest_raise(view)

    def _safest_raise(self, view: OpponentView) -> Action:
        """Legal minimum raise on the face most likely to be true.

        Ties go to the larger quantity, then the higher face; 1s rank
        below every other face.
        """
        _, quantity, _, face = max(self._raise_key(view, face) for face in FACES)
        return Action.bet(quantity, face)

    def _raise_key(self, view: OpponentView, face: int) -> tuple[float, int, int, int]:
        """Sort key (prob, quantity, rank, face) for the cheapest bet on `face`."""
        if view.current_bet is None:
            quantity = max(1, count_matching(view.own_dice, face))
        else:
            quantity = minimum_quantity(face, view.current_bet)
        prob = bet_probability(quantity, face, view.own_dice, view.unseen_dice)
        rank = 0 if face == WILD_VALUE else face
        return (round(prob, 9), quantity, rank, face)
