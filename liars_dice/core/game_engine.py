"""Liar's Dice state machine.

Phases: starting -> betting -> revealing -> betting (next round) | ended.

The module-level functions are pure snapshot transitions: they take a
GameState and return a new one. An invalid call (wrong phase, bet not
higher than the current one) returns the *same* snapshot object and
never raises, so callers may call any mutator speculatively.

GameEngine wraps those transitions around a single owned snapshot and
publishes rolls and history events to registered observers (e.g. the
persistence recorder). Observer failures are logged and never affect
the game.
"""

from __future__ import annotations

import logging
import random
import time
import uuid
from dataclasses import replace
from typing import Protocol

from liars_dice.core.bet import Bet, is_higher, is_valid_face, is_valid_quantity
from liars_dice.core.game_config import GameConfig
from liars_dice.core.game_state import (
    ChallengeResult,
    GameEvent,
    GameState,
    Player,
)
from liars_dice.utils.constants import (
    AI_PLAYER_ID,
    HUMAN_PLAYER_ID,
    EventType,
    GamePhase,
)
from liars_dice.utils.dice import count_matching, roll_dice, tally

logger = logging.getLogger("liars_dice.engine")

# Owner numbers used for die ids (see roll_dice)
_OWNER_NUMBERS = {HUMAN_PLAYER_ID: 1, AI_PLAYER_ID: 2}


# ---------------------------------------------------------------------------
# Pure transitions
# ---------------------------------------------------------------------------


def reset_state() -> GameState:
    """The zeroed snapshot that exists before any game starts."""
    return GameState()


def start_game(
    config: GameConfig | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """Create a fresh game: two players, fresh dice, random first player."""
    config = config or GameConfig()
    r = rng or random

    human = Player(
        id=HUMAN_PLAYER_ID,
        name=config.human_name,
        dice=roll_dice(config.initial_dice, _OWNER_NUMBERS[HUMAN_PLAYER_ID], r),
        is_automated=False,
    )
    opponent = Player(
        id=AI_PLAYER_ID,
        name=config.opponent_name,
        dice=roll_dice(config.initial_dice, _OWNER_NUMBERS[AI_PLAYER_ID], r),
        is_automated=True,
    )
    players = (human, opponent)
    first_player_id = r.choice([HUMAN_PLAYER_ID, AI_PLAYER_ID])
    all_dice = human.dice + opponent.dice

    return GameState(
        players=players,
        current_player_id=first_player_id,
        phase=GamePhase.BETTING,
        dice_count=tally(all_dice),
        total_dice_in_game=len(all_dice),
        round=1,
        session_id=uuid.uuid4().hex,
    )


def restart_game(
    config: GameConfig | None = None,
    rng: random.Random | None = None,
) -> GameState:
    """Discard the current game and start a new one.

    The intermediate zeroed snapshot only matters to an owner that
    publishes it (see GameEngine.restart_game).
    """
    return start_game(config, rng)


def place_bet(
    state: GameState,
    quantity: int,
    value: int,
    timestamp: float | None = None,
) -> GameState:
    """Place a bet for the active player.

    No-op unless the phase is betting and the bet strictly beats the
    current bet. Structurally invalid bets (quantity < 1, face outside
    1-6) are no-ops too. The quantity is not bounded by the number of
    dice in play.
    """
    if state.phase != GamePhase.BETTING:
        logger.debug("Bet rejected: phase is %s", state.phase)
        return state
    if not is_valid_quantity(quantity) or not is_valid_face(value):
        logger.debug("Bet rejected: malformed bet %r x %r", quantity, value)
        return state

    bettor = state.active_player
    next_player = state.other_player(state.current_player_id)
    if bettor is None or next_player is None:
        return state

    bet = Bet(player_id=bettor.id, quantity=quantity, value=value)
    if not is_higher(bet, state.current_bet):
        logger.debug("Bet rejected: %s does not beat %s", bet, state.current_bet)
        return state

    event = GameEvent(
        type=EventType.BET,
        player_id=bettor.id,
        timestamp=time.time() if timestamp is None else timestamp,
        bet=bet,
    )
    return replace(
        state,
        current_bet=bet,
        previous_bet=state.current_bet,
        current_player_id=next_player.id,
        previous_player_id=bettor.id,
        history=state.history + (event,),
    )


def challenge(state: GameState, timestamp: float | None = None) -> GameState:
    """Challenge the current bet and reveal every die.

    The challenge succeeds when fewer dice than claimed show the bet's
    face or a wild 1. The successful side wins the round.
    """
    if state.phase != GamePhase.BETTING or state.current_bet is None:
        logger.debug("Challenge rejected: phase=%s bet=%s", state.phase, state.current_bet)
        return state

    challenger = state.active_player
    bettor = state.get_player(state.previous_player_id)
    if challenger is None or bettor is None:
        return state

    bet = state.current_bet
    matching = count_matching(state.all_dice, bet.value)
    successful = matching < bet.quantity

    round_winner = challenger.id if successful else bettor.id
    round_loser = bettor.id if successful else challenger.id

    ts = time.time() if timestamp is None else timestamp
    challenge_event = GameEvent(
        type=EventType.CHALLENGE,
        player_id=challenger.id,
        timestamp=ts,
        target_player_id=bettor.id,
    )
    result_event = GameEvent(
        type=EventType.RESULT,
        player_id=challenger.id,
        timestamp=ts,
        result=ChallengeResult(successful=successful, dice_count=matching),
    )

    players = tuple(
        replace(p, dice=tuple(d.reveal() for d in p.dice))
        for p in state.players
    )
    return replace(
        state,
        players=players,
        phase=GamePhase.REVEALING,
        challenge_result=successful,
        challenged_dice_count=matching,
        round_winner=round_winner,
        round_loser=round_loser,
        history=state.history + (challenge_event, result_event),
    )


def next_round(state: GameState, rng: random.Random | None = None) -> GameState:
    """Resolve the revealed round and either end the game or re-roll.

    The round loser gives up their last die. If that leaves them with
    none the game ends; otherwise every surviving die is re-rolled and
    the loser opens the next round.
    """
    if state.phase != GamePhase.REVEALING:
        logger.debug("Next round rejected: phase is %s", state.phase)
        return state

    players = tuple(
        replace(p, dice=p.dice[:-1]) if p.id == state.round_loser else p
        for p in state.players
    )

    eliminated = next((p for p in players if p.is_eliminated), None)
    if eliminated is not None:
        survivor = next(p for p in players if p.id != eliminated.id)
        all_dice = [d for p in players for d in p.dice]
        return replace(
            state,
            players=players,
            phase=GamePhase.ENDED,
            winner=survivor.id,
            loser=eliminated.id,
            dice_count=tally(all_dice),
            total_dice_in_game=len(all_dice),
        )

    r = rng or random
    players = tuple(
        replace(p, dice=roll_dice(p.dice_count, _OWNER_NUMBERS.get(p.id, i + 1), r))
        for i, p in enumerate(players)
    )
    all_dice = [d for p in players for d in p.dice]

    return replace(
        state,
        players=players,
        current_player_id=state.round_loser or players[0].id,
        previous_player_id=None,
        current_bet=None,
        previous_bet=None,
        phase=GamePhase.BETTING,
        round_winner=None,
        round_loser=None,
        challenge_result=None,
        challenged_dice_count=None,
        dice_count=tally(all_dice),
        total_dice_in_game=len(all_dice),
        round=state.round + 1,
    )


# ---------------------------------------------------------------------------
# Owning engine
# ---------------------------------------------------------------------------


class GameObserver(Protocol):
    """Receives game activity, e.g. to persist it.

    Calls are made synchronously after each transition; implementations
    must return quickly (queue the work) and may raise without affecting
    the game.
    """

    def on_round_started(self, state: GameState) -> None:
        """A game or round began with freshly rolled dice."""
        ...

    def on_event(self, state: GameState, event: GameEvent) -> None:
        """An event was appended to the history."""
        ...

    def on_game_ended(self, state: GameState) -> None:
        """A player ran out of dice."""
        ...


class GameEngine:
    """Single owner of the current game snapshot.

    Usage:
        engine = GameEngine(config)
        engine.start_game()
        engine.place_bet(3, 4)
        engine.challenge()
        engine.next_round()

    Every mutator returns the resulting snapshot; when the call is
    invalid that is the unchanged previous snapshot.
    """

    def __init__(
        self,
        config: GameConfig | None = None,
        rng: random.Random | None = None,
        observers: list[GameObserver] | None = None,
    ) -> None:
        self._config = config or GameConfig()
        self._rng = rng or random.Random()
        self._observers: list[GameObserver] = list(observers or [])
        self._state = reset_state()

    @property
    def config(self) -> GameConfig:
        return self._config

    def add_observer(self, observer: GameObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: GameObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    # --- Mutators ---

    def start_game(self) -> GameState:
        return self._commit(start_game(self._config, self._rng))

    def place_bet(self, quantity: int, value: int) -> GameState:
        return self._commit(place_bet(self._state, quantity, value))

    def challenge(self) -> GameState:
        return self._commit(challenge(self._state))

    def next_round(self) -> GameState:
        return self._commit(next_round(self._state, self._rng))

    def reset(self) -> GameState:
        """Return to the zeroed starting snapshot without a new game."""
        return self._commit(reset_state())

    def restart_game(self) -> GameState:
        self.reset()
        return self.start_game()

    # --- Queries ---

    def get_state(self) -> GameState:
        return self._state

    def get_active_player(self) -> Player | None:
        return self._state.active_player

    def get_player_display_names(self) -> dict[str, str]:
        return self._state.display_names

    # --- Internals ---

    def _commit(self, new_state: GameState) -> GameState:
        """Install `new_state` and notify observers of what changed."""
        old_state = self._state
        if new_state is old_state:
            return old_state
        self._state = new_state

        if new_state.phase == GamePhase.BETTING and (
            old_state.phase != GamePhase.BETTING
            or new_state.session_id != old_state.session_id
        ):
            logger.info(
                "Round %d started (%d dice in play, %s opens)",
                new_state.round,
                new_state.total_dice_in_game,
                new_state.current_player_id,
            )
            self._notify("on_round_started", new_state)

        if new_state.session_id == old_state.session_id:
            for event in new_state.history[len(old_state.history):]:
                logger.info("%s: %s", event.type, _describe_event(event))
                self._notify("on_event", new_state, event)

        if new_state.phase == GamePhase.ENDED and old_state.phase != GamePhase.ENDED:
            logger.info(
                "Game over after %d rounds: %s beats %s",
                new_state.round,
                new_state.winner,
                new_state.loser,
            )
            self._notify("on_game_ended", new_state)

        return new_state

    def _notify(self, method: str, *args) -> None:
        for observer in list(self._observers):
            try:
                getattr(observer, method)(*args)
            except Exception:
                logger.exception(
                    "Observer %r failed in %s, ignoring",
                    observer,
                    method,
                )


def _describe_event(event: GameEvent) -> str:
    if event.type == EventType.BET and event.bet is not None:
        return f"{event.player_id} bets {event.bet}"
    if event.type == EventType.CHALLENGE:
        return f"{event.player_id} challenges {event.target_player_id}"
    if event.result is not None:
        outcome = "succeeds" if event.result.successful else "fails"
        return f"challenge {outcome} ({event.result.dice_count} matching)"
    return event.player_id
