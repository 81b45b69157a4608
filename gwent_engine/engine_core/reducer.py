"""
Reducer - Applies side actions to the match.

The reducer is the single entry point for side-initiated changes.
All actions go through apply().

Design principles:
- Validates before applying; a rejected action changes nothing
- Owns the ZoneTransitionManager and AbilityResolver for its match
- Returns ActionResult with success/failure, state change lines and
  the presentation delay requested by the resolved abilities
- A played card's whole ability chain completes inside apply()
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import random

from ..catalog.vocabulary import Ability, CardKind
from ..config import MatchSettings
from .abilities import AbilityResolver
from .action import Action, ActionType, ActionResult
from .events import Banner, EventBus, EventType, GameEvent
from .state import Card, GamePhase, MatchState, Side
from .zones import ZoneTransitionManager

logger = logging.getLogger(__name__)

TURN_PHASES = {GamePhase.PLAYER_TURN, GamePhase.OPPONENT_TURN}
ROW_TARGETED_ABILITIES = {Ability.HORN, Ability.MARDROEME}
CARD_TARGETED_ABILITIES = {Ability.MEDIC, Ability.DECOY}


def needs_target_row(card: Card) -> bool:
    """Horn and Mardroeme specials are played onto a chosen row."""
    return card.kind is CardKind.SPECIAL and card.ability in ROW_TARGETED_ABILITIES


@dataclass
class Reducer:
    """
    Reducer applies actions to a match.

    Usage:
        reducer = Reducer(state, settings, bus, rng)
        result = reducer.apply(Action.play(Side.PLAYER, 104))
        if not result.success:
            print(result.error)
    """
    state: MatchState
    settings: MatchSettings
    bus: EventBus = None  # type: ignore
    rng: random.Random = None  # type: ignore
    action_history: list[Action] = field(default_factory=list)

    def __post_init__(self):
        if self.bus is None:
            self.bus = EventBus()
        if self.rng is None:
            self.rng = random.Random()
        self.zones = ZoneTransitionManager(self.state, self.bus, self.rng)
        self.resolver = AbilityResolver(self.state, self.zones, self.settings, self.bus, self.rng)

    def apply(self, action: Action) -> ActionResult:
        """
        Apply an action to the match.

        Returns ActionResult with the state or an error.
        """
        validation_error = self._validate_action(action)
        if validation_error:
            logger.warning("Rejected %s: %s", action, validation_error)
            return ActionResult.failure(validation_error, error_code="INVALID_ACTION")

        handler = self._get_handler(action.action_type)
        if not handler:
            return ActionResult.failure(
                f"No handler for action type: {action.action_type}",
                error_code="NO_HANDLER",
            )

        events_mark = len(self.bus.history)
        reports_mark = len(self.resolver.reports)
        try:
            result = handler(action)
        except Exception as e:
            logger.exception("Handler failed for %s", action)
            return ActionResult.failure(str(e), error_code="HANDLER_ERROR")

        if result.success:
            self.action_history.append(action)
            result.state_changes = self.bus.messages(events_mark) + result.state_changes
            result.effects_resolved = [
                r.describe() for r in self.resolver.reports[reports_mark:]
            ]
            result.pacing = self.resolver.drain_pacing()
        else:
            logger.warning("Action %s failed: %s", action, result.error)
        return result

    def _validate_action(self, action: Action) -> str | None:
        """
        Validate that an action is legal in the current state.

        Returns error message if invalid, None if valid.
        """
        state = self.state
        side = action.payload.side

        if state.phase == GamePhase.GAME_OVER:
            return "Match is over - no actions allowed"

        if action.action_type in {ActionType.REDRAW_CARD, ActionType.FINISH_REDRAW}:
            if state.phase != GamePhase.REDRAW_HAND:
                return "Redraw is only allowed before the first round"
            if (
                action.action_type == ActionType.REDRAW_CARD
                and state.board(side).redraws_used >= self.settings.redraw_limit
            ):
                return "No redraws remaining"
            return None

        if state.phase not in TURN_PHASES:
            return f"Cannot act during {state.phase.value}"
        if side != state.turn_side:
            return f"Not {side.value}'s turn"
        if state.board(side).has_passed:
            return f"{side.value} has already passed this round"

        return None

    def _get_handler(self, action_type: ActionType):
        """Get the handler function for an action type."""
        handlers = {
            ActionType.PLAY_CARD: self._handle_play,
            ActionType.PLAY_CARD_WITH_TARGET: self._handle_play,
            ActionType.PASS: self._handle_pass,
            ActionType.REDRAW_CARD: self._handle_redraw,
            ActionType.FINISH_REDRAW: self._handle_finish_redraw,
        }
        return handlers.get(action_type)

    def _handle_play(self, action: Action) -> ActionResult:
        """Handle playing a card from hand."""
        side = action.payload.side
        board = self.state.board(side)
        card = self._find_in_hand(side, action.payload.card_id)
        if card is None:
            return ActionResult.failure(
                f"Card {action.payload.card_id} not in {side.value} hand",
                error_code="CARD_NOT_FOUND",
            )
        if card.kind is CardKind.LEADER:
            return ActionResult.failure("Leader cards cannot be played", error_code="INVALID_ACTION")

        row = action.payload.target_row
        if action.action_type == ActionType.PLAY_CARD_WITH_TARGET or needs_target_row(card):
            if row is None or not row.is_row:
                return ActionResult.failure(
                    f"{card.name} needs a target row",
                    error_code="MISSING_TARGET",
                )

        target = None
        if card.ability in CARD_TARGETED_ABILITIES and action.payload.target_card_id is not None:
            target = self._find_target(card, action)
            if target is None:
                return ActionResult.failure(
                    f"Target card {action.payload.target_card_id} not found",
                    error_code="CARD_NOT_FOUND",
                )
        elif action.payload.target_card_id is not None:
            logger.debug("%s takes no card target, ignoring %s", card, action.payload.target_card_id)

        previous_phase = self.state.phase
        previous_played = self.state.last_played
        self.state.last_played = card
        self.state.phase = GamePhase.RESOLVING_CARD
        self.resolver.set_target(card, target)
        placed = False
        try:
            if row is not None and needs_target_row(card):
                placed = self.zones.place_on_row(card, row, board.hand, actor=side)
            else:
                placed = self.zones.add_card_to_board(card, board.hand, actor=side)
        finally:
            self.resolver.pending_targets.pop(card.key, None)
            if not placed:
                self.state.phase = previous_phase
                self.state.last_played = previous_played

        if not placed:
            return ActionResult.failure(f"{card.name} could not be placed", error_code="INVALID_ACTION")

        return ActionResult.success_with_state(
            self.state,
            changes=[f"{side.value} played {card.name}"],
        )

    def _handle_pass(self, action: Action) -> ActionResult:
        """Handle pass: the side sits out the rest of the round."""
        side = action.payload.side
        self.state.board(side).has_passed = True
        self.bus.emit(GameEvent(
            event_type=EventType.SIDE_PASSED,
            side=side,
            banner=Banner.ROUND_PASSED,
            message=f"{side.value} passed",
        ))
        return ActionResult.success_with_state(self.state)

    def _handle_redraw(self, action: Action) -> ActionResult:
        """Handle swapping a hand card for a random deck card."""
        side = action.payload.side
        card = self._find_in_hand(side, action.payload.card_id)
        if card is None:
            return ActionResult.failure(
                f"Card {action.payload.card_id} not in {side.value} hand",
                error_code="CARD_NOT_FOUND",
            )
        replacement = self.zones.redraw(card, side)
        if replacement is None:
            return ActionResult.failure("Deck is empty", error_code="INVALID_ACTION")

        board = self.state.board(side)
        board.redraws_used += 1
        return ActionResult.success_with_state(
            self.state,
            changes=[f"{side.value} redrew {card.name} for {replacement.name}"],
        )

    def _handle_finish_redraw(self, action: Action) -> ActionResult:
        """Handle the end of the redraw phase for a side."""
        side = action.payload.side
        board = self.state.board(side)
        board.redraws_used = max(board.redraws_used, self.settings.redraw_limit)
        self.bus.emit(GameEvent(
            event_type=EventType.PHASE_CHANGED,
            side=side,
            phase=self.state.phase,
            message=f"{side.value} finished redrawing",
        ))
        return ActionResult.success_with_state(self.state)

    def _find_in_hand(self, side: Side, card_id: int | None) -> Card | None:
        if card_id is None:
            return None
        for card in self.state.board(side).hand:
            if card.matches_target(card_id):
                return card
        return None

    def _find_target(self, card: Card, action: Action) -> Card | None:
        """
        Resolve the secondary card target of a play.

        Medic looks in the actor's graveyard; Decoy looks on the board of
        target_side (the actor by default). The target id is the instance
        id, so a Neutral card held by both sides resolves to one copy.
        """
        target_id = action.payload.target_card_id
        side = action.payload.target_side or action.payload.side
        board = self.state.board(side)
        if card.ability is Ability.MEDIC:
            zones = [board.graveyard]
        else:
            zones = board.rows
        for zone in zones:
            for candidate in zone:
                if candidate.instance_id == target_id:
                    return candidate
        return None


def create_reducer(
    state: MatchState,
    settings: MatchSettings | None = None,
    bus: EventBus | None = None,
    seed: int | None = None,
) -> Reducer:
    """Convenience constructor with default settings."""
    return Reducer(
        state=state,
        settings=settings or MatchSettings(),
        bus=bus or EventBus(),
        rng=random.Random(seed),
    )
