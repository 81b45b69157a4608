"""
Engine Core - Match state management and rule resolution.

The engine is the runtime that:
1. Holds the Zone Store (MatchState)
2. Moves cards through the ZoneTransitionManager
3. Resolves abilities and recomputes strengths
4. Generates legal actions
5. Applies actions via the reducer
"""

from .state import (
    Card, CardKey, GamePhase, MatchResult, MatchState, RoundRecord, Side, SideBoard,
    Zone, ZoneKind,
)
from .action import Action, ActionType, ActionPayload, ActionResult
from .events import Banner, EventBus, EventType, GameEvent, SoundCue
from .zones import ZoneTransitionManager
from .abilities import AbilityResolver, ResolutionReport
from .reducer import Reducer, create_reducer
from .action_generator import ActionGenerator, legal_actions, is_legal
from .ordering import card_sort_key, sort_cards

__all__ = [
    "Card",
    "CardKey",
    "GamePhase",
    "MatchResult",
    "MatchState",
    "RoundRecord",
    "Side",
    "SideBoard",
    "Zone",
    "ZoneKind",
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "Banner",
    "EventBus",
    "EventType",
    "GameEvent",
    "SoundCue",
    "ZoneTransitionManager",
    "AbilityResolver",
    "ResolutionReport",
    "Reducer",
    "create_reducer",
    "ActionGenerator",
    "legal_actions",
    "is_legal",
    "card_sort_key",
    "sort_cards",
]
