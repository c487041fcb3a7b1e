#!/usr/bin/env python3
"""Export logged Liar's Dice games for offline training.

Reads the event log written by the terminal game (or any GameEngine
with an EventRecorder attached) and writes one CSV row per game event.

CSV columns:
    session_id, round, event_type, player_id, target_player_id,
    bet_quantity, bet_value, successful, dice_count, timestamp
    (plus winner_id when --with-winner is given)

Event types:
    bet        bet_quantity/bet_value set
    challenge  target_player_id is the challenged bettor
    result     successful (0/1) and dice_count (true matching dice)

Usage:
    # Dump every event to stdout
    python scripts/export_events.py

    # Write one session to a file
    python scripts/export_events.py --session 3f2a... -o events.csv

    # Use a custom database path
    python scripts/export_events.py --db data/games.db -o events.csv

    # Print aggregate statistics instead of rows
    python scripts/export_events.py --summary

    # List logged sessions
    python scripts/export_events.py --list
"""

from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path
from typing import TextIO

# Add project root to path so we can import liars_dice
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from liars_dice.persistence.event_log import EventLog


_EVENT_FIELDS = [
    "session_id", "round", "event_type", "player_id", "target_player_id",
    "bet_quantity", "bet_value", "successful", "dice_count", "timestamp",
]


def export_events(
    log: EventLog,
    out: TextIO,
    session_id: str | None = None,
    with_winner: bool = False,
) -> int:
    """Write events as CSV rows.

    Returns:
        Number of rows written.
    """
    fields = list(_EVENT_FIELDS)
    if with_winner:
        fields.append("winner_id")
    winners: dict[str, str | None] = {}

    writer = csv.DictWriter(out, fieldnames=fields)
    writer.writeheader()
    count = 0
    for event in log.get_events(session_id):
        row = dict(event)
        if with_winner:
            sid = row["session_id"]
            if sid not in winners:
                session = log.get_session(sid)
                winners[sid] = session["winner_id"] if session else None
            row["winner_id"] = winners[sid]
        writer.writerow(row)
        count += 1
    return count


def print_summary(log: EventLog) -> None:
    summary = log.training_summary()
    print(f"Database: {log.path}\n")
    print(f"  Games logged:    {summary.games_analyzed}")
    print(f"  Finished games:  {summary.finished_games}")
    print(f"  Bets (finished): {summary.bet_events}")
    print(f"  By the winner:   {summary.winning_moves} ({summary.win_rate:.1%})")


def list_sessions(log: EventLog) -> None:
    sessions = log.list_sessions()
    if not sessions:
        print("No games logged.")
        return

    print(f"{'Session':<34} {'Rounds':<8} {'Winner':<10}")
    print("-" * 54)
    for sid in sessions:
        session = log.get_session(sid) or {}
        winner = session.get("winner_id") or "(unfinished)"
        print(f"{sid:<34} {session.get('rounds', 0):<8} {winner:<10}")


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Export logged Liar's Dice events to CSV.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--db", type=Path, default=None,
        help="Path to the SQLite event log (default: ~/.liars_dice/games.db)",
    )
    parser.add_argument(
        "-o", "--output", type=Path, default=None,
        help="CSV file to write (default: stdout)",
    )
    parser.add_argument("--session", default=None, help="Export one session only")
    parser.add_argument(
        "--with-winner", action="store_true",
        help="Add the game's winner to every row",
    )
    parser.add_argument(
        "--summary", action="store_true",
        help="Print training statistics instead of exporting",
    )
    parser.add_argument("--list", action="store_true", help="List logged sessions")
    args = parser.parse_args()

    log = EventLog(db_path=args.db)

    try:
        if args.summary:
            print_summary(log)
        elif args.list:
            list_sessions(log)
        elif args.output:
            with open(args.output, "w", newline="") as f:
                rows = export_events(log, f, args.session, args.with_winner)
            print(f"Exported {rows} events to {args.output}")
        else:
            export_events(log, sys.stdout, args.session, args.with_winner)
    finally:
        log.close()


if __name__ == "__main__":
    main()
