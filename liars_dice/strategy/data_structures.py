"""Core data structures shared by every opponent policy.

Action: What a policy wants to do (bet or challenge).
OpponentView: The slice of a GameState a policy may look at.
OpponentProtocol: Interface any opponent backend must implement.
"""

from __future__ import annotations

from collections.abc import Awaitable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from liars_dice.core.bet import Bet
from liars_dice.utils.constants import ActionKind, Difficulty

if TYPE_CHECKING:
    from liars_dice.core.game_state import GameState, Player


@dataclass(frozen=True)
class Action:
    """A policy's chosen move.

    Attributes:
        kind: bet or challenge.
        quantity: Bet quantity (0 for a challenge).
        value: Bet face value (0 for a challenge).
    """

    kind: ActionKind
    quantity: int = 0
    value: int = 0

    @classmethod
    def bet(cls, quantity: int, value: int) -> Action:
        return cls(kind=ActionKind.BET, quantity=quantity, value=value)

    @classmethod
    def challenge(cls) -> Action:
        return cls(kind=ActionKind.CHALLENGE)

    @property
    def is_challenge(self) -> bool:
        return self.kind == ActionKind.CHALLENGE

    def as_bet(self, player_id: str) -> Bet:
        return Bet(player_id=player_id, quantity=self.quantity, value=self.value)

    def __str__(self) -> str:
        if self.is_challenge:
            return "challenge"
        return f"bet {self.quantity} x {self.value}"


# Fallback move whenever a policy cannot produce a usable decision
CHALLENGE = Action.challenge()


@dataclass(frozen=True)
class OpponentView:
    """What an automated player is allowed to know.

    Only the viewer's own dice values are copied in; every other player
    contributes just a dice count.
    """

    player_id: str
    own_dice: tuple[int, ...]
    opponent_dice_counts: dict[str, int]
    current_bet: Bet | None
    total_dice: int
    round: int

    @classmethod
    def from_state(cls, state: GameState, player: Player) -> OpponentView:
        me = state.get_player(player.id) or player
        return cls(
            player_id=me.id,
            own_dice=tuple(d.value for d in me.dice),
            opponent_dice_counts={
                p.id: p.dice_count for p in state.players if p.id != me.id
            },
            current_bet=state.current_bet,
            total_dice=state.total_dice_in_game,
            round=state.round,
        )

    @property
    def unseen_dice(self) -> int:
        return max(0, self.total_dice - len(self.own_dice))


@runtime_checkable
class OpponentProtocol(Protocol):
    """Interface that any opponent backend must implement.

    Implementations include HeuristicOpponent, ProbabilisticOpponent and
    the DelegatedOpponent (external predictor, returns an awaitable).

    Usage:
        action = opponent.decide(state, player, Difficulty.MEDIUM)
        if inspect.isawaitable(action):
            action = await action
    """

    def decide(
        self,
        state: GameState,
        player: Player,
        difficulty: Difficulty,
    ) -> Action | Awaitable[Action]: ...
