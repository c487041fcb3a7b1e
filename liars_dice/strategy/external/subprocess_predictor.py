"""Subprocess bridge: runs a predictor command per decision.

Invocation flow:
  1. Spawn the configured command
  2. Write {"model", "messages", ...options} as JSON to its stdin
  3. Read stdout: either {"result": "<reply text>"} or plain reply text

The process is killed if it outlives the configured timeout.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
from pathlib import Path

from liars_dice.strategy.external.bridge import (
    Message,
    PredictorBridge,
    PredictorConfig,
    PredictorError,
)

logger = logging.getLogger("liars_dice.strategy.external.subprocess")


class SubprocessPredictorBridge(PredictorBridge):
    """Stdin/stdout adapter for an external predictor program.

    Each prediction starts a fresh process that runs to completion and
    exits; no persistent process is kept.
    """

    def __init__(self, config: PredictorConfig) -> None:
        self._config = config

    @property
    def config(self) -> PredictorConfig:
        return self._config

    def is_available(self) -> bool:
        """Check the program exists (absolute path or on PATH) and is executable."""
        program = self._config.command[0]
        path = Path(program)
        if path.is_absolute() or os.sep in program:
            return path.exists() and os.access(path, os.X_OK)
        return shutil.which(program) is not None

    async def predict(self, messages: list[Message]) -> str:
        payload = {
            "model": self._config.model,
            "messages": messages,
            **self._config.extra_options,
        }
        cwd = str(self._config.working_dir) if self._config.working_dir else None

        try:
            proc = await asyncio.create_subprocess_exec(
                *self._config.command,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=cwd,
            )
        except (FileNotFoundError, PermissionError) as e:
            raise PredictorError(
                f"Predictor command not runnable: {self._config.command[0]}"
            ) from e

        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(json.dumps(payload).encode()),
                timeout=self._config.timeout_seconds,
            )
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise PredictorError(
                f"Predictor timed out after {self._config.timeout_seconds}s"
            ) from e

        if proc.returncode != 0:
            raise PredictorError(
                f"Predictor exited with code {proc.returncode}: "
                f"{stderr.decode(errors='replace')[:500]}"
            )

        text = stdout.decode(errors="replace").strip()
        logger.debug("Predictor replied with %d chars", len(text))
        return self._unwrap(text)

    @staticmethod
    def _unwrap(text: str) -> str:
        """Return the `result` field of a JSON envelope, else the text itself."""
        try:
            data = json.loads(text)
        except json.JSONDecodeError:
            return text
        if isinstance(data, dict) and isinstance(data.get("result"), str):
            return data["result"]
        return text
