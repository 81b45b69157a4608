"""
Action System - Actions, payloads, and results.

Actions represent what a side commits to:
1. Turn actions (play a card, play a card onto a chosen row, pass)
2. Redraw actions before the first round (redraw a card, finish)

All zone changes triggered by a side flow through an action.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .state import Side, ZoneKind


class ActionType(Enum):
    """Types of actions in the system."""
    # Turn actions
    PLAY_CARD = "play_card"
    PLAY_CARD_WITH_TARGET = "play_card_with_target"  # Horn / Mardroeme specials
    PASS = "pass"

    # Redraw phase
    REDRAW_CARD = "redraw_card"
    FINISH_REDRAW = "finish_redraw"


@dataclass
class ActionPayload:
    """
    Payload for an action - contains the action parameters.

    Cards are referenced by catalog id; the owner is the acting side.
    Validation happens in the reducer.
    """
    side: Side
    card_id: int | None = None

    # Secondary targets
    target_row: ZoneKind | None = None
    target_card_id: int | None = None
    target_side: Side | None = None

    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class Action:
    """
    A complete action to be applied to the match.

    Actions are:
    - Logged for diagnostics
    - Validated before application
    - Applied atomically by the reducer
    """
    action_type: ActionType
    payload: ActionPayload
    timestamp: float | None = None

    @classmethod
    def play(
        cls,
        side: Side,
        card_id: int,
        target_card_id: int | None = None,
        target_side: Side | None = None,
    ) -> Action:
        """Factory for playing a card from hand (optionally naming a card target)."""
        return cls(
            action_type=ActionType.PLAY_CARD,
            payload=ActionPayload(
                side=side,
                card_id=card_id,
                target_card_id=target_card_id,
                target_side=target_side,
            ),
        )

    @classmethod
    def play_on_row(cls, side: Side, card_id: int, row: ZoneKind) -> Action:
        """Factory for the two-step play of a special card onto a chosen row."""
        return cls(
            action_type=ActionType.PLAY_CARD_WITH_TARGET,
            payload=ActionPayload(side=side, card_id=card_id, target_row=row),
        )

    @classmethod
    def pass_round(cls, side: Side) -> Action:
        """Factory for pass action."""
        return cls(action_type=ActionType.PASS, payload=ActionPayload(side=side))

    @classmethod
    def redraw(cls, side: Side, card_id: int) -> Action:
        return cls(
            action_type=ActionType.REDRAW_CARD,
            payload=ActionPayload(side=side, card_id=card_id),
        )

    @classmethod
    def finish_redraw(cls, side: Side) -> Action:
        return cls(action_type=ActionType.FINISH_REDRAW, payload=ActionPayload(side=side))

    def __str__(self) -> str:
        parts = [self.action_type.value, self.payload.side.value]
        if self.payload.card_id is not None:
            parts.append(str(self.payload.card_id))
        if self.payload.target_row is not None:
            parts.append(f"row={self.payload.target_row.value}")
        if self.payload.target_card_id is not None:
            parts.append(f"target={self.payload.target_card_id}")
        return " ".join(parts)


@dataclass
class ActionResult:
    """
    Result of applying an action.

    Contains:
    - Whether action succeeded
    - The match state (if succeeded)
    - Errors (if failed)
    - Side effects (for UI updates)
    """
    success: bool
    new_state: Any | None = None  # MatchState
    error: str | None = None
    error_code: str | None = None

    # For UI/presentation
    state_changes: list[str] = field(default_factory=list)

    # For effect resolution
    effects_resolved: list[str] = field(default_factory=list)
    pacing: float = 0.0

    @classmethod
    def failure(cls, error: str, error_code: str | None = None) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def success_with_state(
        cls,
        state: Any,
        changes: list[str] | None = None,
        effects: list[str] | None = None,
        pacing: float = 0.0,
    ) -> ActionResult:
        """Create a success result with the updated state."""
        return cls(
            success=True,
            new_state=state,
            state_changes=changes or [],
            effects_resolved=effects or [],
            pacing=pacing,
        )
