"""Fire-and-forget persistence of game activity.

EventRecorder is a GameObserver: the engine calls it synchronously,
and it only enqueues the work. A daemon worker thread owns its own
EventLog connection and drains the queue, so slow or failing writes
never hold up or break a game.
"""

from __future__ import annotations

import logging
import queue
import threading
from collections.abc import Callable
from pathlib import Path

from liars_dice.core.game_state import GameEvent, GameState
from liars_dice.persistence.event_log import EventLog

logger = logging.getLogger("liars_dice.persistence")

_Job = Callable[[EventLog], None]
_STOP = object()


class EventRecorder:
    """Background writer that persists rolls, events and results.

    Usage:
        recorder = EventRecorder(db_path)
        engine.add_observer(recorder)
        ...
        recorder.close()   # drains pending writes
    """

    def __init__(
        self,
        db_path: Path | str | None = None,
        log_factory: Callable[[], EventLog] | None = None,
    ) -> None:
        self._log_factory = log_factory or (lambda: EventLog(db_path))
        self._queue: queue.Queue = queue.Queue()
        self._failures = 0
        self._closed = False
        self._thread = threading.Thread(
            target=self._run, name="liars-dice-recorder", daemon=True,
        )
        self._thread.start()

    @property
    def failures(self) -> int:
        """Number of writes that raised (each one is logged)."""
        return self._failures

    # --- GameObserver ---

    def on_round_started(self, state: GameState) -> None:
        def job(log: EventLog) -> None:
            log.start_session(state)
            for player in state.players:
                log.record_roll(state.session_id, state.round, player)

        self._submit(job)

    def on_event(self, state: GameState, event: GameEvent) -> None:
        self._submit(lambda log: log.record_event(state.session_id, state.round, event))

    def on_game_ended(self, state: GameState) -> None:
        self._submit(lambda log: log.end_session(state))

    # --- Lifecycle ---

    def flush(self) -> None:
        """Block until every queued write has been attempted."""
        self._queue.join()

    def close(self) -> None:
        """Drain pending writes and stop the worker thread."""
        if self._closed:
            return
        self._closed = True
        self._queue.put(_STOP)
        self._thread.join()

    def _submit(self, job: _Job) -> None:
        if self._closed:
            logger.warning("Recorder closed, dropping write")
            return
        self._queue.put(job)

    def _run(self) -> None:
        try:
            log = self._log_factory()
        except Exception:
            logger.exception("Could not open event log, persistence disabled")
            log = None

        while True:
            job = self._queue.get()
            try:
                if job is _STOP:
                    break
                if log is not None:
                    job(log)
            except Exception:
                self._failures += 1
                logger.exception("Failed to persist game activity")
            finally:
                self._queue.task_done()

        if log is not None:
            log.close()
