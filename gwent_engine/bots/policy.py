"""
Bot Policy - Interface for bot decision-making.

A BotPolicy takes a match state and the legal actions of its side and
returns a decision.
Decisions include:
- Which action to take (play, play onto a row, pass, redraw)
- Explanation of the choice (for logs and diagnostics)
- The candidate options that were weighed
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
import random

if TYPE_CHECKING:
    from ..config import MatchSettings
    from ..engine_core.action import Action
    from ..engine_core.state import Card, MatchState, ZoneKind


@dataclass
class CardOption:
    """
    A candidate play weighed by the opponent.

    Recreated on every decision, never persisted. The reason string is
    for diagnostics only.
    """
    card: Card
    score: int
    reason: str
    target_card: Card | None = None
    target_row: ZoneKind | None = None

    def describe(self) -> dict[str, Any]:
        return {
            "card": self.card.name,
            "card_id": self.card.instance_id,
            "score": self.score,
            "reason": self.reason,
            "target_card": self.target_card.name if self.target_card else None,
            "target_row": self.target_row.value if self.target_row else None,
        }


@dataclass
class BotDecision:
    """
    A decision made by a bot.

    Contains:
    - The action to take
    - Explanation (for UI/debugging)
    - Confidence in the decision
    """
    action: Action
    explanation: str = ""
    confidence: float = 1.0

    # Evaluation details (for debugging)
    evaluated_actions: int = 0
    best_score: float = 0.0
    evaluation_details: dict[str, Any] = field(default_factory=dict)


class BotPolicy(ABC):
    """
    Abstract base class for bot policies.

    A policy defines how a bot selects actions.
    Implementations range from the baselines below to the heuristic
    opponent in bots/opponent.py.
    """

    @abstractmethod
    def select_action(
        self,
        state: MatchState,
        settings: MatchSettings,
        legal_actions: list[Action],
    ) -> BotDecision:
        """
        Select an action from the legal actions.

        Args:
            state: Current match state (read only)
            settings: Match settings
            legal_actions: List of legal actions to choose from

        Returns:
            BotDecision with the selected action
        """
        pass

    def get_name(self) -> str:
        """Get the bot's name/identifier."""
        return self.__class__.__name__


class RandomPolicy(BotPolicy):
    """
    Random policy - selects actions uniformly at random.

    Used for:
    - Testing
    - Simulated player side
    - Baseline comparison
    """

    def __init__(self, seed: int | None = None):
        self.rng = random.Random(seed)

    def select_action(
        self,
        state: MatchState,
        settings: MatchSettings,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        action = self.rng.choice(legal_actions)
        return BotDecision(
            action=action,
            explanation="Selected randomly",
            confidence=1.0 / len(legal_actions),
            evaluated_actions=len(legal_actions),
        )


class FirstLegalPolicy(BotPolicy):
    """
    First-legal policy - always selects the first legal action.

    Used for:
    - Deterministic testing
    - Baseline comparison
    """

    def select_action(
        self,
        state: MatchState,
        settings: MatchSettings,
        legal_actions: list[Action],
    ) -> BotDecision:
        if not legal_actions:
            raise ValueError("No legal actions available")

        return BotDecision(
            action=legal_actions[0],
            explanation="Selected first legal action",
            evaluated_actions=1,
        )
