"""
Session Module - Runs matches.

A match is one play-through:
- Built from saved (or random) decks at START
- Driven by the PhaseScheduler, one tick at a time
- Dropped when it ends

Matches are EPHEMERAL:
- No mid-match persistence
- The only persistence is saved decks (see decks.storage)
"""

from .setup import build_match_state, build_side, deal_initial_hands, resolve_decks
from .scheduler import PhaseScheduler, Suspension, TickResult
from .manager import MatchManager, Match, MatchStatus

__all__ = [
    "build_match_state",
    "build_side",
    "deal_initial_hands",
    "resolve_decks",
    "PhaseScheduler",
    "Suspension",
    "TickResult",
    "MatchManager",
    "Match",
    "MatchStatus",
]
