"""Bets and the total order that decides which bet beats another.

Face value 1 is wild when a challenge is resolved, but for ordering
bets it is simply the lowest face. The two rules are independent.
"""

from __future__ import annotations

from dataclasses import dataclass

from liars_dice.utils.constants import MAX_FACE, MIN_FACE


@dataclass(frozen=True)
class Bet:
    """A public claim: at least `quantity` dice show `value` (wilds included)."""

    player_id: str
    quantity: int
    value: int

    def __str__(self) -> str:
        return f"{self.quantity} x {self.value}"


def is_valid_face(value: object) -> bool:
    """Whether `value` is an integer face 1-6 (bools rejected)."""
    return (
        isinstance(value, int)
        and not isinstance(value, bool)
        and MIN_FACE <= value <= MAX_FACE
    )


def is_valid_quantity(quantity: object) -> bool:
    """Whether `quantity` is a positive integer (bools rejected)."""
    return (
        isinstance(quantity, int)
        and not isinstance(quantity, bool)
        and quantity >= 1
    )


def is_higher(candidate: Bet, reference: Bet | None) -> bool:
    """Whether `candidate` strictly beats `reference`.

    Any bet beats no bet. Otherwise a higher quantity wins, and on equal
    quantity a higher face wins.
    """
    if reference is None:
        return True
    if candidate.quantity > reference.quantity:
        return True
    return (
        candidate.quantity == reference.quantity
        and candidate.value > reference.value
    )


def minimum_quantity(value: int, reference: Bet | None) -> int:
    """Smallest quantity at `value` that beats `reference`.

    >>> minimum_quantity(5, Bet("ai", 3, 4))
    3
    >>> minimum_quantity(4, Bet("ai", 3, 4))
    4
    """
    if reference is None:
        return 1
    if value > reference.value:
        return reference.quantity
    return reference.quantity + 1
