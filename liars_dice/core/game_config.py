"""Game configuration: player names, dice, opponent settings.

Loaded from ~/.liars_dice/config.json when present; every field has a
default so a missing or partial file still yields a playable game.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, fields
from enum import StrEnum
from pathlib import Path

from liars_dice.utils.constants import (
    AI_PLAYER_NAME,
    HUMAN_PLAYER_NAME,
    INITIAL_DICE_COUNT,
    MAX_DICE_PER_PLAYER,
    Difficulty,
)

logger = logging.getLogger("liars_dice.config")

DATA_DIR = Path.home() / ".liars_dice"
_CONFIG_FILE = DATA_DIR / "config.json"
_DEFAULT_DB_FILE = DATA_DIR / "games.db"


class OpponentType(StrEnum):
    HEURISTIC = "heuristic"
    PROBABILISTIC = "probabilistic"
    EXTERNAL = "external"


@dataclass(frozen=True)
class GameConfig:
    """Everything needed to set up a game and its automated opponent."""

    human_name: str = HUMAN_PLAYER_NAME
    opponent_name: str = AI_PLAYER_NAME
    initial_dice: int = INITIAL_DICE_COUNT
    difficulty: Difficulty = Difficulty.MEDIUM
    opponent_type: OpponentType = OpponentType.HEURISTIC
    restart_delay_seconds: float = 0.5
    db_path: Path = _DEFAULT_DB_FILE

    def __post_init__(self) -> None:
        if self.initial_dice < 1:
            raise ValueError(
                f"initial_dice must be at least 1, got {self.initial_dice}"
            )
        if self.initial_dice > MAX_DICE_PER_PLAYER:
            raise ValueError(
                f"initial_dice must be at most {MAX_DICE_PER_PLAYER}, got {self.initial_dice}"
            )
        if self.restart_delay_seconds < 0:
            raise ValueError("restart_delay_seconds cannot be negative")

    @classmethod
    def from_dict(cls, data: dict) -> GameConfig:
        """Build a config from a JSON-style dict, ignoring unknown keys.

        Raises:
            ValueError: If a field has an invalid value (e.g. an unknown
                difficulty).
        """
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        if "difficulty" in kwargs:
            kwargs["difficulty"] = Difficulty(str(kwargs["difficulty"]).lower())
        if "opponent_type" in kwargs:
            kwargs["opponent_type"] = OpponentType(
                str(kwargs["opponent_type"]).lower()
            )
        if "db_path" in kwargs:
            kwargs["db_path"] = Path(kwargs["db_path"]).expanduser()
        if "initial_dice" in kwargs:
            kwargs["initial_dice"] = int(kwargs["initial_dice"])
        if "restart_delay_seconds" in kwargs:
            kwargs["restart_delay_seconds"] = float(kwargs["restart_delay_seconds"])
        return cls(**kwargs)


def load_game_config(config_path: Path | None = None) -> GameConfig:
    """Load the game configuration from JSON.

    Default path: ~/.liars_dice/config.json

    Falls back to ``GameConfig()`` when the file is missing, unreadable
    or holds invalid values; the problem is logged rather than raised.

    Expected JSON format:
        {
            "human_name": "Alice",
            "difficulty": "hard",
            "opponent_type": "probabilistic",
            "initial_dice": 5
        }
    """
    path = config_path or _CONFIG_FILE
    if not path.exists():
        return GameConfig()

    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to read game config at %s: %s", path, e)
        return GameConfig()

    if not isinstance(data, dict):
        logger.warning("Game config at %s is not a JSON object", path)
        return GameConfig()

    try:
        return GameConfig.from_dict(data)
    except (ValueError, TypeError) as e:
        logger.warning("Invalid game config at %s: %s", path, e)
        return GameConfig()
