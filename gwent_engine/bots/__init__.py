"""
Bots module - Opponent AI implementations.

Provides:
- BotPolicy: Interface for bot decision-making
- BoardSnapshot: Read-only board view captured per decision
- AdvisorScores / ADVISORS: Ability advisors and their scores
- HeuristicOpponent: The opponent decision engine
"""

from .policy import BotPolicy, BotDecision, CardOption, RandomPolicy, FirstLegalPolicy
from .snapshot import BoardSnapshot
from .advisors import ADVISORS, AdvisorScores, collect_options
from .opponent import FALLBACK_TIERS, HeuristicOpponent, should_pass

__all__ = [
    "BotPolicy",
    "BotDecision",
    "CardOption",
    "RandomPolicy",
    "FirstLegalPolicy",
    "BoardSnapshot",
    "ADVISORS",
    "AdvisorScores",
    "collect_options",
    "FALLBACK_TIERS",
    "HeuristicOpponent",
    "should_pass",
]
