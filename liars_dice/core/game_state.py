"""Immutable game-state snapshots for a two-player Liar's Dice game.

Every transition in ``liars_dice.core.game_engine`` takes a GameState
and returns a new one; nothing here is mutated in place.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

from liars_dice.core.bet import Bet
from liars_dice.utils.constants import EventType, GamePhase
from liars_dice.utils.dice import Die, tally


@dataclass(frozen=True)
class Player:
    """One of the two players and the dice they currently hold."""

    id: str
    name: str
    dice: tuple[Die, ...] = ()
    is_automated: bool = False

    @property
    def dice_count(self) -> int:
        return len(self.dice)

    @property
    def is_eliminated(self) -> bool:
        return not self.dice

    @property
    def dice_values(self) -> list[int]:
        return [d.value for d in self.dice]


@dataclass(frozen=True)
class ChallengeResult:
    """Outcome of a challenge: whether it succeeded and the true count."""

    successful: bool
    dice_count: int


@dataclass(frozen=True)
class GameEvent:
    """A single entry in the append-only game history.

    Attributes:
        type: bet, challenge or result.
        player_id: The acting player (bettor or challenger).
        timestamp: Epoch seconds.
        bet: The bet placed (bet events only).
        target_player_id: The challenged bettor (challenge events only).
        result: The challenge outcome (result events only).
    """

    type: EventType
    player_id: str
    timestamp: float
    bet: Bet | None = None
    target_player_id: str | None = None
    result: ChallengeResult | None = None


def _empty_tally() -> Mapping[int, int]:
    return tally(())


@dataclass(frozen=True)
class GameState:
    """Complete state of one game at a single point in time."""

    players: tuple[Player, ...] = ()
    current_player_id: str = ""
    previous_player_id: str | None = None
    current_bet: Bet | None = None
    previous_bet: Bet | None = None
    phase: GamePhase = GamePhase.STARTING
    winner: str | None = None
    loser: str | None = None
    round_winner: str | None = None
    round_loser: str | None = None
    dice_count: Mapping[int, int] = field(default_factory=_empty_tally)
    total_dice_in_game: int = 0
    challenge_result: bool | None = None
    challenged_dice_count: int | None = None
    history: tuple[GameEvent, ...] = ()
    round: int = 0
    session_id: str | None = None

    def __post_init__(self) -> None:
        # Snapshots never share a mutable tally
        if not isinstance(self.dice_count, MappingProxyType):
            object.__setattr__(self, "dice_count", MappingProxyType(dict(self.dice_count)))

    def get_player(self, player_id: str | None) -> Player | None:
        """Look up a player by id, or None if there is no such player."""
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def other_player(self, player_id: str | None) -> Player | None:
        """The opponent of `player_id` in a two-player game."""
        for player in self.players:
            if player.id != player_id:
                return player
        return None

    @property
    def active_player(self) -> Player | None:
        return self.get_player(self.current_player_id)

    @property
    def all_dice(self) -> list[Die]:
        return [d for p in self.players for d in p.dice]

    @property
    def is_over(self) -> bool:
        return self.phase == GamePhase.ENDED

    @property
    def display_names(self) -> dict[str, str]:
        return {p.id: p.name for p in self.players}
