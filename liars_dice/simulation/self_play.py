"""Self-play game runner for simulation.

Drives a full game through the GameEngine with an opponent policy in
each seat, exactly as the turn scheduler would for an automated player.
"""

from __future__ import annotations

import asyncio
import inspect
import random
from dataclasses import dataclass

from liars_dice.core.game_config import GameConfig
from liars_dice.core.game_engine import GameEngine
from liars_dice.interface.turn_scheduler import apply_action
from liars_dice.strategy.data_structures import Action, OpponentProtocol
from liars_dice.utils.constants import (
    AI_PLAYER_ID,
    HUMAN_PLAYER_ID,
    Difficulty,
    EventType,
    GamePhase,
)

# Forces a challenge if a round somehow never resolves
_MAX_ACTIONS_PER_ROUND = 200


@dataclass
class GameRecord:
    """Record of a single simulated game."""

    game_number: int
    first_player_id: str
    winner_id: str
    rounds: int
    bets: int
    challenges: int
    successful_challenges: int
    actions_summary: list[str]


def _resolve(action) -> Action:
    if inspect.isawaitable(action):
        return asyncio.run(action)
    return action


def play_game(
    seat_one: OpponentProtocol,
    seat_two: OpponentProtocol,
    difficulties: tuple[Difficulty, Difficulty] = (Difficulty.MEDIUM, Difficulty.MEDIUM),
    rng: random.Random | None = None,
    config: GameConfig | None = None,
    game_number: int = 1,
) -> GameRecord:
    """Play one complete game between two policies.

    Seat one plays the "human" player id, seat two the "ai" id.
    """
    engine = GameEngine(config, rng=rng or random.Random())
    seats = {
        HUMAN_PLAYER_ID: (seat_one, difficulties[0]),
        AI_PLAYER_ID: (seat_two, difficulties[1]),
    }

    state = engine.start_game()
    first_player_id = state.current_player_id
    names = engine.get_player_display_names()
    summary: list[str] = []
    actions_this_round = 0

    while state.phase != GamePhase.ENDED:
        if state.phase == GamePhase.REVEALING:
            summary.append(
                f"--- round {state.round}: {names[state.round_loser]} loses a die "
                f"({state.challenged_dice_count} matched {state.current_bet})"
            )
            state = engine.next_round()
            actions_this_round = 0
            continue

        player = engine.get_active_player()
        policy, difficulty = seats[player.id]
        if actions_this_round >= _MAX_ACTIONS_PER_ROUND and state.current_bet:
            action = Action.challenge()
        else:
            action = _resolve(policy.decide(state, player, difficulty))

        action = apply_action(engine, action)
        state = engine.get_state()
        actions_this_round += 1
        summary.append(f"{names[player.id]}: {action}")

    bets = sum(1 for e in state.history if e.type == EventType.BET)
    results = [e.result for e in state.history if e.result is not None]
    return GameRecord(
        game_number=game_number,
        first_player_id=first_player_id,
        winner_id=state.winner,
        rounds=state.round,
        bets=bets,
        challenges=len(results),
        successful_challenges=sum(1 for r in results if r.successful),
        actions_summary=summary,
    )
