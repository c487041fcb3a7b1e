"""Automated-opponent policies for Liar's Dice.

Every policy answers ``decide(state, player, difficulty) -> Action``
while looking only at its own dice and public information.

Key public API:
    OpponentProtocol      -- Interface for swappable opponent backends
    Action                -- A bet or a challenge
    HeuristicOpponent     -- Counts-and-odds rule-based policy
    ProbabilisticOpponent -- Binomial-probability policy
    DelegatedOpponent     -- External predictor with challenge fallback
"""

from liars_dice.strategy.data_structures import Action, OpponentProtocol, OpponentView
from liars_dice.strategy.external_opponent import DelegatedOpponent
from liars_dice.strategy.heuristic_opponent import HeuristicOpponent
from liars_dice.strategy.probabilistic_opponent import ProbabilisticOpponent

__all__ = [
    "Action",
    "OpponentProtocol",
    "OpponentView",
    "HeuristicOpponent",
    "ProbabilisticOpponent",
    "DelegatedOpponent",
]
