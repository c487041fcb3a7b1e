"""Run self-play simulations to compare opponent policies.

Plays N games between two policies and prints win rates (with a 95%
normal-approximation interval), game length and challenge statistics,
plus the longest game as an example.

Usage:
    python -m liars_dice.simulation.run_simulations --games 500 \
        --seat-one heuristic --seat-two probabilistic --difficulty hard
"""

from __future__ import annotations

import argparse
import logging
import random
from dataclasses import dataclass

import numpy as np

from liars_dice.core.game_config import GameConfig, OpponentType
from liars_dice.interface.turn_scheduler import create_opponent
from liars_dice.simulation.self_play import GameRecord, play_game
from liars_dice.utils.constants import HUMAN_PLAYER_ID, Difficulty


@dataclass
class SimulationSummary:
    """Aggregate statistics over a batch of simulated games."""

    num_games: int
    seat_one_wins: int
    win_rate: float
    win_rate_ci: tuple[float, float]
    mean_rounds: float
    std_rounds: float
    mean_bets: float
    challenge_success_rate: float
    first_mover_win_rate: float


def summarize(records: list[GameRecord]) -> SimulationSummary:
    """Aggregate game records with numpy."""
    if not records:
        return SimulationSummary(0, 0, 0.0, (0.0, 0.0), 0.0, 0.0, 0.0, 0.0, 0.0)

    wins = np.array([r.winner_id == HUMAN_PLAYER_ID for r in records], dtype=float)
    rounds = np.array([r.rounds for r in records], dtype=float)
    bets = np.array([r.bets for r in records], dtype=float)
    challenges = np.array([r.challenges for r in records], dtype=float)
    successes = np.array([r.successful_challenges for r in records], dtype=float)
    first_won = np.array(
        [r.winner_id == r.first_player_id for r in records], dtype=float,
    )

    n = len(records)
    p = float(wins.mean())
    half_width = float(1.96 * np.sqrt(p * (1 - p) / n))
    total_challenges = challenges.sum()

    return SimulationSummary(
        num_games=n,
        seat_one_wins=int(wins.sum()),
        win_rate=p,
        win_rate_ci=(max(0.0, p - half_width), min(1.0, p + half_width)),
        mean_rounds=float(rounds.mean()),
        std_rounds=float(rounds.std()),
        mean_bets=float(bets.mean()),
        challenge_success_rate=(
            float(successes.sum() / total_challenges) if total_challenges else 0.0
        ),
        first_mover_win_rate=float(first_won.mean()),
    )


def run_simulation(
    num_games: int = 200,
    seat_one: OpponentType = OpponentType.HEURISTIC,
    seat_two: OpponentType = OpponentType.PROBABILISTIC,
    difficulties: tuple[Difficulty, Difficulty] = (Difficulty.MEDIUM, Difficulty.MEDIUM),
    seed: int | None = None,
    config: GameConfig | None = None,
) -> tuple[SimulationSummary, list[GameRecord]]:
    """Play `num_games` games and return the summary and all records."""
    rng = random.Random(seed)
    first = create_opponent(seat_one, random.Random(rng.random()))
    second = create_opponent(seat_two, random.Random(rng.random()))

    records = [
        play_game(first, second, difficulties, rng=rng, config=config, game_number=i + 1)
        for i in range(num_games)
    ]
    return summarize(records), records


def print_report(
    summary: SimulationSummary,
    records: list[GameRecord],
    seat_one: str,
    seat_two: str,
) -> None:
    print("=" * 60)
    print(f"  LIAR'S DICE SIMULATION: {summary.num_games} games")
    print(f"  {seat_one} (seat one) vs {seat_two} (seat two)")
    print("=" * 60)
    print()
    lo, hi = summary.win_rate_ci
    print(f"  Seat one wins:     {summary.seat_one_wins} ({summary.win_rate:.1%}, 95% CI {lo:.1%}-{hi:.1%})")
    print(f"  Rounds per game:   {summary.mean_rounds:.1f} ± {summary.std_rounds:.1f}")
    print(f"  Bets per game:     {summary.mean_bets:.1f}")
    print(f"  Challenge success: {summary.challenge_success_rate:.1%}")
    print(f"  First mover wins:  {summary.first_mover_win_rate:.1%}")
    print()

    if records:
        longest = max(records, key=lambda r: r.bets)
        print("-" * 60)
        print(f"  Longest game (Game #{longest.game_number}, {longest.bets} bets)")
        for line in longest.actions_summary:
            print(f"    {line}")
        print()

    print("=" * 60)


def main() -> None:
    parser = argparse.ArgumentParser(description="Self-play Liar's Dice simulations.")
    parser.add_argument("--games", type=int, default=200, help="Number of games")
    types = [t.value for t in OpponentType if t != OpponentType.EXTERNAL]
    parser.add_argument("--seat-one", choices=types, default=OpponentType.HEURISTIC.value)
    parser.add_argument("--seat-two", choices=types, default=OpponentType.PROBABILISTIC.value)
    parser.add_argument(
        "--difficulty", choices=[d.value for d in Difficulty],
        default=Difficulty.MEDIUM.value, help="Difficulty for both seats",
    )
    parser.add_argument("--seed", type=int, default=None)
    args = parser.parse_args()

    logging.basicConfig(level=logging.WARNING)

    difficulty = Difficulty(args.difficulty)
    summary, records = run_simulation(
        num_games=args.games,
        seat_one=OpponentType(args.seat_one),
        seat_two=OpponentType(args.seat_two),
        difficulties=(difficulty, difficulty),
        seed=args.seed,
    )
    print_report(summary, records, args.seat_one, args.seat_two)


if __name__ == "__main__":
    main()
