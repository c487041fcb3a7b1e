"""Turn scheduler: serialises human and automated actions on one engine.

GameSession is the single owner of a GameEngine. Every action goes
through an asyncio.Lock, so an awaited predictor call can never overlap
with another action on the same game. The automated opponent's action
is fed back through the same engine mutators a human action uses.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import random

from liars_dice.core.game_config import GameConfig, OpponentType
from liars_dice.core.game_engine import GameEngine, GameObserver
from liars_dice.core.game_state import GameState, Player
from liars_dice.strategy.data_structures import Action, OpponentProtocol
from liars_dice.strategy.external_opponent import DelegatedOpponent
from liars_dice.strategy.heuristic_opponent import HeuristicOpponent
from liars_dice.strategy.probabilistic_opponent import ProbabilisticOpponent
from liars_dice.utils.constants import Difficulty, GamePhase

logger = logging.getLogger("liars_dice.scheduler")

_MINIMUM_OPENING_BET = (1, 2)  # (quantity, value)


def create_opponent(
    opponent_type: OpponentType | str,
    rng: random.Random | None = None,
) -> OpponentProtocol:
    """Build the opponent backend named in the config.

    Raises:
        ValueError: For an unknown opponent type.
    """
    match OpponentType(opponent_type):
        case OpponentType.HEURISTIC:
            return HeuristicOpponent(rng)
        case OpponentType.PROBABILISTIC:
            return ProbabilisticOpponent()
        case OpponentType.EXTERNAL:
            return DelegatedOpponent()


class GameSession:
    """Coordinates one game between a human and an automated opponent.

    Usage:
        session = GameSession(config)
        session.start()
        while not session.state.is_over:
            if session.is_opponent_turn:
                await session.play_opponent_turn()
            ...
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        opponent: OpponentProtocol | None = None,
        engine: GameEngine | None = None,
        observers: list[GameObserver] | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._config = config or GameConfig()
        self._engine = engine or GameEngine(self._config, rng=rng)
        for observer in observers or []:
            self._engine.add_observer(observer)
        self._opponent = opponent or create_opponent(self._config.opponent_type, rng)
        self._difficulty = Difficulty(self._config.difficulty)
        self._lock = asyncio.Lock()

    @property
    def engine(self) -> GameEngine:
        return self._engine

    @property
    def opponent(self) -> OpponentProtocol:
        return self._opponent

    @property
    def difficulty(self) -> Difficulty:
        return self._difficulty

    @property
    def state(self) -> GameState:
        return self._engine.get_state()

    @property
    def human(self) -> Player | None:
        return next((p for p in self.state.players if not p.is_automated), None)

    @property
    def is_human_turn(self) -> bool:
        player = self._engine.get_active_player()
        return (
            self.state.phase == GamePhase.BETTING
            and player is not None
            and not player.is_automated
        )

    @property
    def is_opponent_turn(self) -> bool:
        player = self._engine.get_active_player()
        return (
            self.state.phase == GamePhase.BETTING
            and player is not None
            and player.is_automated
        )

    # --- Human actions ---

    def start(self) -> GameState:
        return self._engine.start_game()

    def human_bet(self, quantity: int, value: int) -> GameState:
        """Place a bet for the human; ignored when it is not their turn."""
        if self._lock.locked() or not self.is_human_turn:
            return self.state
        return self._engine.place_bet(quantity, value)

    def human_challenge(self) -> GameState:
        if self._lock.locked() or not self.is_human_turn:
            return self.state
        return self._engine.challenge()

    def next_round(self) -> GameState:
        if self._lock.locked():
            return self.state
        return self._engine.next_round()

    async def restart(self, delay: float | None = None) -> GameState:
        """Reset to the starting snapshot, pause, then deal a new game."""
        async with self._lock:
            self._engine.reset()
            delay = self._config.restart_delay_seconds if delay is None else delay
            if delay > 0:
                await asyncio.sleep(delay)
            return self._engine.start_game()

    # --- Automated opponent ---

    async def play_opponent_turn(self) -> Action | None:
        """Let the automated player act if it is their turn.

        Returns:
            The action that was applied, or None if it was not the
            opponent's turn.
        """
        async with self._lock:
            if not self.is_opponent_turn:
                return None

            state = self.state
            player = self._engine.get_active_player()
            action = self._opponent.decide(state, player, self._difficulty)
            if inspect.isawaitable(action):
                action = await action

            return apply_action(self._engine, action)


def apply_action(engine: GameEngine, action: Action) -> Action:
    """Feed an automated player's action into the engine.

    A rejected bet becomes a challenge. A challenge with nothing to
    challenge (no bet yet) becomes the minimum opening bet, so the game
    cannot stall on an automated player's turn.

    Returns:
        The action that was actually applied.
    """
    before = engine.get_state()
    if action.is_challenge:
        engine.challenge()
    else:
        engine.place_bet(action.quantity, action.value)
    if engine.get_state() is not before:
        return action

    if before.current_bet is not None:
        logger.warning(
            "Opponent action %s rejected over %s, challenging instead",
            action, before.current_bet,
        )
        engine.challenge()
        return Action.challenge()

    logger.warning("Opponent action %s rejected with no bet, opening at minimum", action)
    engine.place_bet(*_MINIMUM_OPENING_BET)
    return Action.bet(*_MINIMUM_OPENING_BET)
