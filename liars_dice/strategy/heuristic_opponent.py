"""Rule-based automated opponent.

Decision pipeline:
  OpponentView (own dice + public bet)
    -> challenge check (own matches + expected unseen matches vs claim)
    -> otherwise a raise built from the strongest face in hand
    -> legality guard (never returns a bet that fails is_higher)
"""

from __future__ import annotations

import logging
import math
import random

from liars_dice.core.bet import Bet, is_higher
from liars_dice.core.game_state import GameState, Player
from liars_dice.strategy.data_structures import Action, OpponentView
from liars_dice.utils.constants import MAX_FACE, WILD_VALUE, Difficulty
from liars_dice.utils.dice import count_matching

logger = logging.getLogger("liars_dice.strategy.heuristic")

# Scales the estimated true count before comparing it with the claim.
# Lower means the opponent calls bluffs more readily.
CHALLENGE_MULTIPLIER: dict[Difficulty, float] = {
    Difficulty.EASY: 0.8,
    Difficulty.MEDIUM: 1.0,
    Difficulty.HARD: 1.2,
}

# Chance of raising quantity rather than advancing the face
QUANTITY_RAISE_PROB: dict[Difficulty, float] = {
    Difficulty.EASY: 0.7,
    Difficulty.MEDIUM: 0.5,
    Difficulty.HARD: 0.35,
}

_JITTER = 0.2
_EASY_OPENING_SCALE = 0.75
_BET_FACES = range(2, MAX_FACE + 1)


def effective_counts(own_dice: tuple[int, ...] | list[int]) -> dict[int, int]:
    """Own count per face with wild 1s added to every other face.

    >>> effective_counts([1, 1, 3])[3]
    3
    >>> effective_counts([1, 1, 3])[1]
    2
    """
    raw = {face: 0 for face in range(1, MAX_FACE + 1)}
    for value in own_dice:
        raw[value] += 1
    wilds = raw[WILD_VALUE]
    return {
        face: count if face == WILD_VALUE else count + wilds
        for face, count in raw.items()
    }


def best_face(own_dice: tuple[int, ...] | list[int]) -> tuple[int, int]:
    """Face 2-6 with the highest effective count, ties toward the higher face.

    Returns:
        (face, effective_count)
    """
    counts = effective_counts(own_dice)
    face = max(_BET_FACES, key=lambda f: (counts[f], f))
    return face, counts[face]


class HeuristicOpponent:
    """Counts-and-odds opponent with a difficulty-dependent temperament.

    Satisfies OpponentProtocol. Pass a seeded ``random.Random`` for
    reproducible play.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def decide(
        self,
        state: GameState,
        player: Player,
        difficulty: Difficulty = Difficulty.MEDIUM,
    ) -> Action:
        difficulty = Difficulty(difficulty)
        view = OpponentView.from_state(state, player)

        if self.should_challenge(view, difficulty):
            logger.debug(
                "%s challenges %s holding %s",
                view.player_id, view.current_bet, list(view.own_dice),
            )
            return Action.challenge()

        action = self.choose_bet(view, difficulty)
        logger.debug(
            "%s %s over %s holding %s",
            view.player_id, action, view.current_bet, list(view.own_dice),
        )
        return action

    # --- Challenge ---

    def should_challenge(self, view: OpponentView, difficulty: Difficulty) -> bool:
        bet = view.current_bet
        if bet is None:
            return False

        self_matches = count_matching(view.own_dice, bet.value)
        # Each unseen die matches with probability 1/6 directly + 1/6 wild
        remaining_matches = math.floor(view.unseen_dice / 6 * 2)
        estimated_total = self_matches + remaining_matches

        threshold = estimated_total * CHALLENGE_MULTIPLIER[difficulty]
        threshold += self._rng.uniform(-_JITTER, _JITTER)
        return bet.quantity > threshold

    # --- Betting ---

    def choose_bet(self, view: OpponentView, difficulty: Difficulty) -> Action:
        face, count = best_face(view.own_dice)
        has_concentration = count >= 2
        current = view.current_bet

        if current is None:
            quantity = view.total_dice / 3
            if difficulty == Difficulty.EASY:
                quantity *= _EASY_OPENING_SCALE
            value = face if has_concentration else self._random_face()
            return Action.bet(max(1, round(quantity)), value)

        if self._rng.random() < QUANTITY_RAISE_PROB[difficulty]:
            value = face if has_concentration else self._random_face()
            candidate = Action.bet(current.quantity + 1, value)
        elif difficulty == Difficulty.HARD and has_concentration and face > current.value:
            candidate = Action.bet(current.quantity, face)
        else:
            candidate = Action.bet(current.quantity, self._next_face(current.value))

        return self._ensure_legal(candidate, current, view.player_id)

    @staticmethod
    def _next_face(value: int) -> int:
        """Next face up, wrapping 6 -> 2 (1 is never targeted)."""
        return value + 1 if value < MAX_FACE else 2

    def _random_face(self) -> int:
        return self._rng.randint(2, MAX_FACE)

    @staticmethod
    def _ensure_legal(candidate: Action, current: Bet, player_id: str) -> Action:
        if is_higher(candidate.as_bet(player_id), current):
            return candidate
        return Action.bet(current.quantity + 1, candidate.value)
