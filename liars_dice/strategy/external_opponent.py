"""DelegatedOpponent: hands the decision to an external predictor.

The predictor sees the public game state plus this opponent's own dice
(the other player's dice values are never serialised). Its free-text
reply is reduced to the first {...} block, parsed as JSON and validated.
Anything unusable (no bridge, timeout, malformed JSON, bad face value,
unknown action) becomes a challenge.
"""

from __future__ import annotations

import asyncio
import json
import logging
import re
import time

from liars_dice.core.bet import is_valid_face, is_valid_quantity
from liars_dice.core.game_state import GameState, Player
from liars_dice.strategy.data_structures import CHALLENGE, Action
from liars_dice.strategy.external.bridge import (
    Message,
    PredictorBridge,
    PredictorConfig,
    PredictorError,
    load_predictor_config,
)
from liars_dice.strategy.external.subprocess_predictor import SubprocessPredictorBridge
from liars_dice.utils.constants import ActionKind, Difficulty

logger = logging.getLogger("liars_dice.strategy.external_opponent")

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

SYSTEM_PROMPT = (
    "You are a Liar's Dice bot. Only respond with the correct JSON response "
    "according to user instructions. Never explain or add extra text."
)

_USER_PROMPT = """\
You are playing Liar's Dice as player "{name}". Decide your next move based on the game state below.

Rules summary:
- You can either "bet" (make a higher bet) or "challenge" (call bluff).
- A bet must have higher quantity or same quantity but higher value than the last bet.
- 1's are wild and count as any value.
- Respond ONLY with a valid JSON object in the form:
  {{"action": "bet", "bet": {{"quantity": X, "value": Y}}}}
  or
  {{"action": "challenge"}}

Game state:
{state}
Your decision:
"""


def serialize_state(state: GameState, player: Player, difficulty: Difficulty) -> dict:
    """Public game state as seen by `player`; only their own dice are listed."""

    def _bet(bet):
        if bet is None:
            return None
        return {"playerId": bet.player_id, "quantity": bet.quantity, "value": bet.value}

    return {
        "currentPlayerId": state.current_player_id,
        "previousPlayerId": state.previous_player_id,
        "currentBet": _bet(state.current_bet),
        "previousBet": _bet(state.previous_bet),
        "phase": str(state.phase),
        "players": [
            {
                "id": p.id,
                "name": p.name,
                "diceCount": p.dice_count,
                "isAI": p.is_automated,
                "isCurrentPlayer": p.id == state.current_player_id,
                "dice": p.dice_values if p.id == player.id else [],
            }
            for p in state.players
        ],
        "totalDiceInGame": state.total_dice_in_game,
        "round": state.round,
        "difficulty": str(difficulty),
    }


def build_messages(state: GameState, player: Player, difficulty: Difficulty) -> list[Message]:
    user_prompt = _USER_PROMPT.format(
        name=player.name,
        state=json.dumps(serialize_state(state, player, difficulty), indent=2),
    )
    return [
        {"role": "system", "content": SYSTEM_PROMPT},
        {"role": "user", "content": user_prompt},
    ]


def parse_action(reply: str) -> Action | None:
    """Extract and validate an action from predictor output.

    Returns:
        The Action, or None if the reply is not a well-formed action.
    """
    if not isinstance(reply, str):
        return None
    match = _JSON_BLOCK.search(reply)
    try:
        data = json.loads(match.group(0) if match else reply)
    except json.JSONDecodeError:
        return None
    if not isinstance(data, dict):
        return None

    kind = data.get("action")
    if kind == ActionKind.CHALLENGE:
        return Action.challenge()
    if kind != ActionKind.BET:
        return None

    bet = data.get("bet")
    if not isinstance(bet, dict):
        return None
    quantity = bet.get("quantity")
    value = bet.get("value")
    if not is_valid_quantity(quantity) or not is_valid_face(value):
        return None
    return Action.bet(quantity, value)


class DelegatedOpponent:
    """Opponent whose every move comes from an external predictor.

    Satisfies OpponentProtocol; ``decide`` is a coroutine and must be
    awaited before the action is applied.
    """

    def __init__(
        self,
        config: PredictorConfig | None = None,
        bridge: PredictorBridge | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        """Initialize with optional predictor config or pre-built bridge.

        Args:
            config: Predictor configuration. If None, attempts to load from
                ~/.liars_dice/predictor_config.json.
            bridge: Pre-built bridge instance (for testing). Takes
                priority over config if both are provided.
            timeout_seconds: Overall decision timeout; defaults to the
                config's timeout (10s without one).
        """
        self._bridge = bridge
        if self._bridge is None:
            config = config or load_predictor_config()
            if config is not None:
                self._bridge = SubprocessPredictorBridge(config)

        if timeout_seconds is None:
            timeout_seconds = config.timeout_seconds if config else 10.0
        self._timeout = timeout_seconds

    @property
    def has_bridge(self) -> bool:
        return self._bridge is not None

    async def decide(
        self,
        state: GameState,
        player: Player,
        difficulty: Difficulty = Difficulty.MEDIUM,
    ) -> Action:
        if self._bridge is None:
            logger.info("No predictor configured, challenging")
            return CHALLENGE

        if not self._bridge.is_available():
            logger.warning("Predictor not available (command missing or not executable)")
            return CHALLENGE

        messages = build_messages(state, player, Difficulty(difficulty))
        t0 = time.perf_counter()
        try:
            reply = await asyncio.wait_for(
                self._bridge.predict(messages), timeout=self._timeout,
            )
        except asyncio.TimeoutError:
            logger.error("Predictor timed out after %.1fs, challenging", self._timeout)
            return CHALLENGE
        except PredictorError as e:
            logger.error("Predictor failed: %s", e)
            return CHALLENGE
        except Exception:
            logger.exception("Unexpected error from predictor")
            return CHALLENGE

        action = parse_action(reply)
        elapsed_ms = (time.perf_counter() - t0) * 1000
        if action is None:
            logger.warning("Failed to parse predictor reply: %.200r", reply)
            return CHALLENGE

        logger.info("Predictor chose %s (%.1fms)", action, elapsed_ms)
        return action

    def cleanup(self) -> None:
        """Release predictor resources."""
        if self._bridge is not None:
            self._bridge.cleanup()
