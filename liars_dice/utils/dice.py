"""Die type plus rolling and tallying helpers."""

from __future__ import annotations

import random
from collections.abc import Iterable
from dataclasses import dataclass

from liars_dice.utils.constants import (
    FACES,
    MAX_DICE_PER_PLAYER,
    MAX_FACE,
    MIN_FACE,
    WILD_VALUE,
)

_ID_STRIDE = MAX_DICE_PER_PLAYER + 1


@dataclass(frozen=True)
class Die:
    """A single six-sided die owned by one player."""

    id: int
    value: int
    revealed: bool = False

    def __str__(self) -> str:
        return str(self.value)

    def reveal(self) -> Die:
        """Return a copy of this die face up."""
        return Die(id=self.id, value=self.value, revealed=True)


def roll_die(die_id: int = 0, rng: random.Random | None = None) -> Die:
    """Roll a fresh, unrevealed die with a uniformly random face."""
    r = rng or random
    return Die(id=die_id, value=r.randint(MIN_FACE, MAX_FACE))


def roll_dice(
    count: int,
    owner_number: int,
    rng: random.Random | None = None,
) -> tuple[Die, ...]:
    """Roll `count` new dice for a player.

    Die ids are ``owner_number * 1000 + index`` so the two hands never
    collide (owner 1 -> 1000, 1001, ...; owner 2 -> 2000, 2001, ...).
    """
    return tuple(
        roll_die(owner_number * _ID_STRIDE + i, rng) for i in range(count)
    )


def tally(dice: Iterable[Die]) -> dict[int, int]:
    """Count dice by face value.

    Every face 1-6 is present in the result, with an explicit 0 for
    faces nobody rolled.

    >>> tally([])
    {1: 0, 2: 0, 3: 0, 4: 0, 5: 0, 6: 0}
    """
    counts = {face: 0 for face in FACES}
    for die in dice:
        counts[die.value] += 1
    return counts


def count_matching(dice: Iterable[Die | int], value: int) -> int:
    """Number of dice showing `value` or the wild face.

    Accepts Die objects or bare face values.
    """
    total = 0
    for die in dice:
        face = die.value if isinstance(die, Die) else die
        if face == value or face == WILD_VALUE:
            total += 1
    return total
