"""Play Liar's Dice against the automated opponent in a terminal.

Usage:
    python -m liars_dice.interface.cli [--difficulty hard] [--opponent probabilistic]

Example session:
    ==================================================
      LIAR'S DICE: Round 1
    ==================================================
      Your dice:     3 1 5 5 2
      Android:       5 dice
      Current bet:   (none)
      Your move (bet Q V / challenge / quit): bet 3 5
      Android bets 4 x 5
      Your move (bet Q V / challenge / quit): challenge
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import random
from dataclasses import replace
from pathlib import Path

from liars_dice.core.game_config import OpponentType, load_game_config
from liars_dice.core.game_state import GameState
from liars_dice.interface.turn_scheduler import GameSession
from liars_dice.persistence.recorder import EventRecorder
from liars_dice.utils.constants import Difficulty, EventType, GamePhase


def _prompt(msg: str, default: str = "") -> str:
    """Print a prompt and read user input."""
    suffix = f" [{default}]" if default else ""
    try:
        val = input(f"  {msg}{suffix}: ").strip()
    except (EOFError, KeyboardInterrupt):
        print()
        return default
    return val if val else default


def parse_command(text: str) -> tuple[str, int, int] | None:
    """Parse a move: 'bet Q V', 'b Q V', 'challenge'/'c', 'quit'/'q'.

    Returns:
        (command, quantity, value), or None if the input is not a move.

    >>> parse_command("bet 3 5")
    ('bet', 3, 5)
    >>> parse_command("c")
    ('challenge', 0, 0)
    """
    tokens = text.lower().split()
    if not tokens:
        return None
    head = tokens[0]
    if head in ("c", "challenge", "liar") and len(tokens) == 1:
        return ("challenge", 0, 0)
    if head in ("q", "quit", "exit") and len(tokens) == 1:
        return ("quit", 0, 0)
    if head in ("b", "bet") and len(tokens) == 3:
        try:
            return ("bet", int(tokens[1]), int(tokens[2]))
        except ValueError:
            return None
    return None


def render_state(state: GameState, human_id: str) -> list[str]:
    """Lines describing the table from the human's point of view."""
    names = state.display_names
    lines = ["=" * 50, f"  LIAR'S DICE: Round {state.round}", "=" * 50]
    for player in state.players:
        if player.id == human_id or state.phase != GamePhase.BETTING:
            dice = " ".join(str(d) for d in player.dice) or "(none)"
            label = "Your dice:" if player.id == human_id else f"{player.name}:"
            lines.append(f"  {label:<14} {dice}")
        else:
            lines.append(f"  {player.name + ':':<14} {player.dice_count} dice")
    bet = state.current_bet
    bet_str = f"{bet} by {names.get(bet.player_id, bet.player_id)}" if bet else "(none)"
    lines.append(f"  {'Current bet:':<14} {bet_str}")
    return lines


def describe_result(state: GameState) -> str:
    """One-line summary of a resolved challenge."""
    names = state.display_names
    bet = state.current_bet
    outcome = "succeeds" if state.challenge_result else "fails"
    return (
        f"Challenge {outcome}: {state.challenged_dice_count} dice match "
        f"{bet.value if bet else '?'} (bet was {bet}). "
        f"{names.get(state.round_loser, '?')} loses a die."
    )


async def play(session: GameSession) -> None:
    """Run one interactive game loop until the human quits."""
    session.start()
    human = session.human
    human_id = human.id if human else ""
    names = session.state.display_names

    while True:
        state = session.state

        if state.phase == GamePhase.ENDED:
            print()
            print(f"  Game over: {names.get(state.winner, state.winner)} wins!")
            answer = await asyncio.to_thread(_prompt, "Play again? (y/n)", "n")
            if answer.lower().startswith("y"):
                await session.restart()
                continue
            return

        if state.phase == GamePhase.REVEALING:
            print()
            for line in render_state(state, human_id):
                print(line)
            print(f"  {describe_result(state)}")
            await asyncio.to_thread(_prompt, "Press enter for the next round")
            session.next_round()
            continue

        if session.is_opponent_turn:
            action = await session.play_opponent_turn()
            last = session.state.history[-1] if session.state.history else None
            if last is not None and last.type == EventType.BET:
                print(f"  {names.get(last.player_id)} bets {last.bet}")
            elif action is not None and action.is_challenge:
                print(f"  {names.get(session.state.current_player_id)} calls liar!")
            continue

        print()
        for line in render_state(state, human_id):
            print(line)
        reply = await asyncio.to_thread(_prompt, "Your move (bet Q V / challenge / quit)", "quit")
        parsed = parse_command(reply)
        if parsed is None:
            print("    Could not read that move.")
            continue
        command, quantity, value = parsed
        if command == "quit":
            return
        before = session.state
        if command == "challenge":
            after = session.human_challenge()
        else:
            after = session.human_bet(quantity, value)
        if after is before:
            print("    That move is not allowed right now.")


def main() -> None:
    parser = argparse.ArgumentParser(description="Play Liar's Dice in the terminal.")
    parser.add_argument(
        "--difficulty", choices=[d.value for d in Difficulty], default=None,
        help="Opponent difficulty (default: from config, else medium)",
    )
    parser.add_argument(
        "--opponent", choices=[t.value for t in OpponentType], default=None,
        help="Opponent backend (default: from config, else heuristic)",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to config JSON")
    parser.add_argument("--db", type=Path, default=None, help="Path to the game log database")
    parser.add_argument("--no-log", action="store_true", help="Do not record games")
    parser.add_argument("--seed", type=int, default=None, help="Random seed")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    config = load_game_config(args.config)
    overrides = {}
    if args.difficulty:
        overrides["difficulty"] = Difficulty(args.difficulty)
    if args.opponent:
        overrides["opponent_type"] = OpponentType(args.opponent)
    if args.db:
        overrides["db_path"] = args.db
    if overrides:
        config = replace(config, **overrides)

    rng = random.Random(args.seed)
    recorder = None if args.no_log else EventRecorder(config.db_path)
    session = GameSession(
        config,
        observers=[recorder] if recorder else None,
        rng=rng,
    )
    try:
        asyncio.run(play(session))
    finally:
        if recorder is not None:
            recorder.close()
    print("  Thanks for playing!")


if __name__ == "__main__":
    main()
