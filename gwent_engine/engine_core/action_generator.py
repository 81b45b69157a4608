"""
Action Generator - Generates all legal actions from a match state.

The action generator is used by:
1. Bots to enumerate possible moves
2. The scheduler, to announce what the player may do
3. Validation (is this action in legal_actions?)

Design: Generates Action objects, not just action types.
Cards needing a second choice (row for Horn/Mardroeme specials, a
graveyard card for Medic, a board card for Decoy) get one action per
choice, so every generated action is fully specified.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..catalog.vocabulary import Ability, CardKind
from ..config import MatchSettings
from .action import Action
from .reducer import TURN_PHASES, needs_target_row
from .state import Card, GamePhase, MatchState, ROW_KINDS, Side


@dataclass
class ActionGenerator:
    """
    Generates legal actions for one side.

    Uses the MatchSettings to know the redraw limit.
    """
    settings: MatchSettings

    def generate(self, state: MatchState, side: Side) -> list[Action]:
        """
        Generate all legal actions for a side.

        Returns an empty list when the side cannot act right now.
        """
        if state.phase == GamePhase.GAME_OVER:
            return []

        if state.phase == GamePhase.REDRAW_HAND:
            return self._generate_redraw_actions(state, side)

        if state.phase not in TURN_PHASES or side != state.turn_side:
            return []

        board = state.board(side)
        if board.has_passed:
            return []

        actions = []
        for card in board.hand:
            actions.extend(self._generate_play_actions(state, side, card))

        # Pass action is always available
        actions.append(Action.pass_round(side))
        return actions

    def _generate_redraw_actions(self, state: MatchState, side: Side) -> list[Action]:
        board = state.board(side)
        actions = []
        if board.redraws_used < self.settings.redraw_limit and not board.deck.is_empty:
            actions.extend(Action.redraw(side, card.instance_id) for card in board.hand)
        actions.append(Action.finish_redraw(side))
        return actions

    def _generate_play_actions(self, state: MatchState, side: Side, card: Card) -> list[Action]:
        """Generate the play actions of one hand card."""
        if card.kind is CardKind.LEADER:
            return []

        if needs_target_row(card):
            return [Action.play_on_row(side, card.instance_id, row) for row in ROW_KINDS]

        actions = [Action.play(side, card.instance_id)]
        board = state.board(side)

        if card.ability is Ability.MEDIC:
            for target in board.graveyard:
                if target.is_standard:
                    actions.append(Action.play(side, card.instance_id, target.instance_id, side))

        elif card.ability is Ability.DECOY:
            for target in board.cards_on_board():
                if target.kind is not CardKind.HERO and target is not card:
                    actions.append(Action.play(side, card.instance_id, target.instance_id, side))

        return actions


def legal_actions(
    state: MatchState,
    side: Side,
    settings: MatchSettings | None = None,
) -> list[Action]:
    """
    Convenience function to get legal actions.

    Creates an ActionGenerator and generates actions.
    """
    generator = ActionGenerator(settings=settings or MatchSettings())
    return generator.generate(state, side)


def is_legal(state: MatchState, action: Action, settings: MatchSettings | None = None) -> bool:
    """Check if a specific action is legal."""
    legal = legal_actions(state, action.payload.side, settings)
    # Compare by type and key payload fields
    for a in legal:
        if (
            a.action_type == action.action_type
            and a.payload.card_id == action.payload.card_id
            and a.payload.target_row == action.payload.target_row
            and a.payload.target_card_id == action.payload.target_card_id
        ):
            return True
    return False
