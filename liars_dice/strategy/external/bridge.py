"""Abstract bridge interface for external decision providers.

An external predictor (a language-model relay, a trained model served
by another process, ...) receives the opponent's chat-style prompt and
replies with free text that should contain a JSON action. The bridge
only moves text; parsing and validation live in DelegatedOpponent.
"""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path

logger = logging.getLogger("liars_dice.strategy.external")

Message = dict[str, str]  # {"role": ..., "content": ...}


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PredictorConfig:
    """Configuration for an external predictor process."""

    command: tuple[str, ...]  # argv, e.g. ("python", "relay.py")
    timeout_seconds: float = 10.0
    model: str = ""
    working_dir: Path | None = None
    extra_options: dict[str, str] = field(default_factory=dict)


def load_predictor_config(config_path: Path | None = None) -> PredictorConfig | None:
    """Load predictor configuration from JSON file.

    Default path: ~/.liars_dice/predictor_config.json

    Returns None if the config file does not exist or is unusable,
    allowing the caller to fall back (the opponent then challenges).

    Expected JSON format:
        {
            "command": ["python", "/path/to/relay.py"],
            "timeout_seconds": 8,
            "model": "gpt-4o-mini"
        }
    """
    path = config_path or Path.home() / ".liars_dice" / "predictor_config.json"
    if not path.exists():
        return None

    try:
        with open(path) as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to read predictor config at %s: %s", path, e)
        return None

    command = data.get("command") if isinstance(data, dict) else None
    if isinstance(command, str):
        command = command.split()
    if not command or not all(isinstance(part, str) for part in command):
        logger.warning("Predictor config missing required key: command")
        return None

    extra_options = data.get("extra_options", {})
    if not isinstance(extra_options, dict):
        logger.warning("Predictor config extra_options must be an object")
        return None

    try:
        return PredictorConfig(
            command=tuple(command),
            timeout_seconds=float(data.get("timeout_seconds", 10.0)),
            model=str(data.get("model", "")),
            working_dir=Path(data["working_dir"]) if "working_dir" in data else None,
            extra_options=extra_options,
        )
    except (ValueError, TypeError) as e:
        logger.warning("Invalid predictor config at %s: %s", path, e)
        return None


# ---------------------------------------------------------------------------
# Error
# ---------------------------------------------------------------------------

class PredictorError(Exception):
    """Raised when the external predictor fails to produce a reply.

    DelegatedOpponent turns this into a challenge; it never reaches the
    game engine.
    """

    pass


# ---------------------------------------------------------------------------
# Abstract bridge
# ---------------------------------------------------------------------------

class PredictorBridge(ABC):
    """Abstract interface for external predictor backends.

    Implementations handle the backend-specific details of:
    - Checking the backend is reachable
    - Sending the prompt messages
    - Returning the raw reply text
    """

    @abstractmethod
    def is_available(self) -> bool:
        """Check if the predictor can be invoked at all."""
        ...

    @abstractmethod
    async def predict(self, messages: list[Message]) -> str:
        """Send the prompt and return the predictor's raw reply.

        Args:
            messages: Chat-style messages (system + user prompt).

        Returns:
            The reply text, expected to contain a JSON action.

        Raises:
            PredictorError: If the predictor fails for any reason.
        """
        ...

    def cleanup(self) -> None:
        """Release resources held by the bridge."""
        return None
