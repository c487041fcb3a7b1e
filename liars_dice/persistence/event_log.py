"""SQLite-backed log of played games for later analysis and training.

Stores one row per game session, one per history event and one per
player per dice roll in ~/.liars_dice/games.db (WAL mode).

Schema:
    game_sessions(session_id, started_at, ended_at, human_id, ai_id, winner_id, loser_id, rounds)
    game_events(id, session_id, round, event_type, player_id, target_player_id,
                bet_quantity, bet_value, successful, dice_count, timestamp)
    dice_rolls(id, session_id, round, player_id, dice)

Usage:
    log = EventLog()
    log.start_session(state)
    log.record_event(state.session_id, state.round, event)
    summary = log.training_summary()
"""

from __future__ import annotations

import json
import sqlite3
import time
from dataclasses import dataclass
from pathlib import Path

from liars_dice.core.game_config import DATA_DIR
from liars_dice.core.game_state import GameEvent, GameState, Player

_DEFAULT_DB_PATH = DATA_DIR / "games.db"

_CREATE_SESSIONS_TABLE = """\
CREATE TABLE IF NOT EXISTS game_sessions (
    session_id TEXT PRIMARY KEY,
    started_at REAL NOT NULL,
    ended_at   REAL,
    human_id   TEXT,
    ai_id      TEXT,
    winner_id  TEXT,
    loser_id   TEXT,
    rounds     INTEGER NOT NULL DEFAULT 0
);
"""

_CREATE_EVENTS_TABLE = """\
CREATE TABLE IF NOT EXISTS game_events (
    id               INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id       TEXT NOT NULL REFERENCES game_sessions(session_id),
    round            INTEGER NOT NULL,
    event_type       TEXT NOT NULL,
    player_id        TEXT NOT NULL,
    target_player_id TEXT,
    bet_quantity     INTEGER,
    bet_value        INTEGER,
    successful       INTEGER,
    dice_count       INTEGER,
    timestamp        REAL NOT NULL
);
"""

_CREATE_ROLLS_TABLE = """\
CREATE TABLE IF NOT EXISTS dice_rolls (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    session_id TEXT NOT NULL REFERENCES game_sessions(session_id),
    round      INTEGER NOT NULL,
    player_id  TEXT NOT NULL,
    dice       TEXT NOT NULL
);
"""

_CREATE_INDEX = """\
CREATE INDEX IF NOT EXISTS idx_events_session
    ON game_events(session_id, round);
"""

_INSERT_SESSION = """\
INSERT OR IGNORE INTO game_sessions (session_id, started_at, human_id, ai_id)
VALUES (?, ?, ?, ?);
"""

_INSERT_EVENT = """\
INSERT INTO game_events (
    session_id, round, event_type, player_id, target_player_id,
    bet_quantity, bet_value, successful, dice_count, timestamp
) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);
"""

_INSERT_ROLL = """\
INSERT INTO dice_rolls (session_id, round, player_id, dice)
VALUES (?, ?, ?, ?);
"""

_END_SESSION = """\
UPDATE game_sessions
SET ended_at = ?, winner_id = ?, loser_id = ?, rounds = ?
WHERE session_id = ?;
"""

_EVENT_COLUMNS = (
    "session_id", "round", "event_type", "player_id", "target_player_id",
    "bet_quantity", "bet_value", "successful", "dice_count", "timestamp",
)


@dataclass(frozen=True)
class TrainingSummary:
    """Aggregate statistics over the logged games.

    Attributes:
        games_analyzed: Sessions in the log.
        finished_games: Sessions with a recorded winner.
        bet_events: Bets placed in finished games.
        winning_moves: Bets placed by the eventual winner of their game.
    """

    games_analyzed: int
    finished_games: int
    bet_events: int
    winning_moves: int

    @property
    def win_rate(self) -> float:
        return self.winning_moves / self.bet_events if self.bet_events else 0.0


class EventLog:
    """Connection to the game history SQLite database."""

    def __init__(self, db_path: Path | str | None = None) -> None:
        self._path = Path(db_path) if db_path else _DEFAULT_DB_PATH
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._conn = sqlite3.connect(str(self._path))
        self._conn.execute("PRAGMA journal_mode=WAL;")
        self._conn.execute("PRAGMA foreign_keys=ON;")
        self._conn.execute(_CREATE_SESSIONS_TABLE)
        self._conn.execute(_CREATE_EVENTS_TABLE)
        self._conn.execute(_CREATE_ROLLS_TABLE)
        self._conn.execute(_CREATE_INDEX)
        self._conn.commit()

    @property
    def path(self) -> Path:
        return self._path

    # --- Writes ---

    def start_session(self, state: GameState, started_at: float | None = None) -> None:
        """Register a session; a no-op if it is already known."""
        human = next((p.id for p in state.players if not p.is_automated), None)
        ai = next((p.id for p in state.players if p.is_automated), None)
        self._conn.execute(
            _INSERT_SESSION,
            (state.session_id, started_at or time.time(), human, ai),
        )
        self._conn.commit()

    def record_roll(self, session_id: str, round_number: int, player: Player) -> None:
        self._conn.execute(
            _INSERT_ROLL,
            (session_id, round_number, player.id, json.dumps(player.dice_values)),
        )
        self._conn.commit()

    def record_event(self, session_id: str, round_number: int, event: GameEvent) -> None:
        bet = event.bet
        result = event.result
        self._conn.execute(
            _INSERT_EVENT,
            (
                session_id,
                round_number,
                str(event.type),
                event.player_id,
                event.target_player_id,
                bet.quantity if bet else None,
                bet.value if bet else None,
                int(result.successful) if result else None,
                result.dice_count if result else None,
                event.timestamp,
            ),
        )
        self._conn.commit()

    def end_session(self, state: GameState, ended_at: float | None = None) -> None:
        self._conn.execute(
            _END_SESSION,
            (ended_at or time.time(), state.winner, state.loser, state.round,
             state.session_id),
        )
        self._conn.commit()

    # --- Reads ---

    def get_session(self, session_id: str) -> dict | None:
        row = self._conn.execute(
            "SELECT session_id, started_at, ended_at, human_id, ai_id, "
            "winner_id, loser_id, rounds FROM game_sessions WHERE session_id = ?",
            (session_id,),
        ).fetchone()
        if row is None:
            return None
        keys = ("session_id", "started_at", "ended_at", "human_id", "ai_id",
                "winner_id", "loser_id", "rounds")
        return dict(zip(keys, row))

    def list_sessions(self) -> list[str]:
        """Session ids, oldest first."""
        rows = self._conn.execute(
            "SELECT session_id FROM game_sessions ORDER BY started_at"
        ).fetchall()
        return [r[0] for r in rows]

    def get_events(self, session_id: str | None = None) -> list[dict]:
        """Logged events in insertion order, optionally for one session."""
        sql = f"SELECT {', '.join(_EVENT_COLUMNS)} FROM game_events"
        params: tuple = ()
        if session_id is not None:
            sql += " WHERE session_id = ?"
            params = (session_id,)
        rows = self._conn.execute(sql + " ORDER BY id", params).fetchall()
        return [dict(zip(_EVENT_COLUMNS, r)) for r in rows]

    def get_rolls(self, session_id: str) -> list[tuple[int, str, list[int]]]:
        """(round, player_id, dice values) for every roll in a session."""
        rows = self._conn.execute(
            "SELECT round, player_id, dice FROM dice_rolls "
            "WHERE session_id = ? ORDER BY id",
            (session_id,),
        ).fetchall()
        return [(r[0], r[1], json.loads(r[2])) for r in rows]

    def training_summary(self) -> TrainingSummary:
        """Statistics a training pipeline starts from."""
        games = self._conn.execute("SELECT COUNT(*) FROM game_sessions").fetchone()[0]
        finished = self._conn.execute(
            "SELECT COUNT(*) FROM game_sessions WHERE winner_id IS NOT NULL"
        ).fetchone()[0]
        bets, winning = self._conn.execute(
            "SELECT COUNT(*), COALESCE(SUM(e.player_id = s.winner_id), 0) "
            "FROM game_events e JOIN game_sessions s ON e.session_id = s.session_id "
            "WHERE e.event_type = 'bet' AND s.winner_id IS NOT NULL"
        ).fetchone()
        return TrainingSummary(
            games_analyzed=games,
            finished_games=finished,
            bet_events=bets,
            winning_moves=winning,
        )

    def close(self) -> None:
        if self._conn:
            self._conn.close()
            self._conn = None  # type: ignore[assignment]
