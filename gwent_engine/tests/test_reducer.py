"""
Tests for the reducer (state transitions).

Tests:
- Action application
- State mutation correctness
- Validation
- Error handling
"""

from ..catalog.vocabulary import Ability, CardKind, CardRange
from ..engine_core.action import Action, ActionType
from ..engine_core.events import EventType
from ..engine_core.state import GamePhase, Side, ZoneKind
from .factories import make_card, make_special, put


class TestPlayAction:
    """Tests for playing a card."""

    def test_play_moves_card_to_row(self, state, reducer):
        """Playing moves the card from hand to its row."""
        card = put(state, make_card(119, card_range=CardRange.RANGED), ZoneKind.HAND)

        result = reducer.apply(Action.play(Side.PLAYER, 119))

        assert result.success
        assert result.new_state is state
        assert card in state.player.row(ZoneKind.RANGED)
        assert state.player.hand.is_empty
        assert any("played" in line for line in result.state_changes)
        assert reducer.action_history[-1].action_type == ActionType.PLAY_CARD

    def test_play_leaves_phase_for_scheduler(self, state, reducer):
        put(state, make_card(119), ZoneKind.HAND)

        reducer.apply(Action.play(Side.PLAYER, 119))

        assert state.phase == GamePhase.RESOLVING_CARD
        assert state.last_played.catalog_id == 119

    def test_wrong_side_fails(self, state, reducer):
        """Acting out of turn fails."""
        put(state, make_card(408, owner=Side.OPPONENT), ZoneKind.HAND)

        result = reducer.apply(Action.play(Side.OPPONENT, 1408))

        assert not result.success
        assert "turn" in result.error.lower()
        assert result.error_code == "INVALID_ACTION"

    def test_card_not_in_hand_fails(self, state, reducer):
        put(state, make_card(119), ZoneKind.DECK)

        result = reducer.apply(Action.play(Side.PLAYER, 119))

        assert not result.success
        assert result.error_code == "CARD_NOT_FOUND"
        assert state.phase == GamePhase.PLAYER_TURN

    def test_opponent_ids_are_offset(self, opponent_turn_state, reducer):
        """The opponent refers to its copies by their offset ids."""
        card = put(opponent_turn_state, make_card(408, owner=Side.OPPONENT), ZoneKind.HAND)

        result = reducer.apply(Action.play(Side.OPPONENT, card.instance_id))

        assert result.success
        assert card in opponent_turn_state.opponent.row(ZoneKind.MELEE)

    def test_leader_cannot_be_played(self, state, reducer):
        put(state, make_card(150, strength=0, kind=CardKind.LEADER), ZoneKind.HAND)

        result = reducer.apply(Action.play(Side.PLAYER, 150))

        assert not result.success

    def test_horn_special_needs_row(self, state, reducer):
        horn = put(state, make_special(8, Ability.HORN), ZoneKind.HAND)

        result = reducer.apply(Action.play(Side.PLAYER, 8))

        assert not result.success
        assert result.error_code == "MISSING_TARGET"
        assert horn in state.player.hand

    def test_horn_special_on_chosen_row(self, state, reducer):
        unit = put(state, make_card(119, strength=5, card_range=CardRange.RANGED), ZoneKind.RANGED)
        horn = put(state, make_special(8, Ability.HORN), ZoneKind.HAND)

        result = reducer.apply(Action.play_on_row(Side.PLAYER, 8, ZoneKind.RANGED))

        assert result.success
        assert horn in state.player.row(ZoneKind.RANGED)
        assert unit.current_strength == 10

    def test_effects_reported(self, state, reducer):
        put(state, make_card(107, strength=5, ability=Ability.SPY), ZoneKind.HAND)
        put(state, make_card(112), ZoneKind.DECK)

        result = reducer.apply(Action.play(Side.PLAYER, 107))

        assert any("spy" in line for line in result.effects_resolved)


class TestPassAction:
    """Tests for passing."""

    def test_pass_sets_flag(self, state, reducer, bus):
        result = reducer.apply(Action.pass_round(Side.PLAYER))

        assert result.success
        assert state.player.has_passed
        assert bus.history[-1].event_type == EventType.SIDE_PASSED

    def test_cannot_act_after_pass(self, state, reducer):
        put(state, make_card(119), ZoneKind.HAND)
        reducer.apply(Action.pass_round(Side.PLAYER))

        result = reducer.apply(Action.play(Side.PLAYER, 119))

        assert not result.success
        assert "passed" in result.error


class TestRedrawAction:
    """Tests for the redraw phase."""

    def test_redraw_swaps_card(self, state, reducer, settings):
        state.phase = GamePhase.REDRAW_HAND
        put(state, make_card(1), ZoneKind.HAND)
        put(state, make_card(2), ZoneKind.DECK)

        result = reducer.apply(Action.redraw(Side.PLAYER, 1))

        assert result.success
        assert [c.catalog_id for c in state.player.hand] == [2]
        assert state.player.redraws_used == 1

    def test_redraw_limit(self, state, reducer, settings):
        state.phase = GamePhase.REDRAW_HAND
        state.player.redraws_used = settings.redraw_limit
        put(state, make_card(1), ZoneKind.HAND)
        put(state, make_card(2), ZoneKind.DECK)

        result = reducer.apply(Action.redraw(Side.PLAYER, 1))

        assert not result.success
        assert "remaining" in result.error

    def test_redraw_with_empty_deck_fails(self, state, reducer):
        state.phase = GamePhase.REDRAW_HAND
        put(state, make_card(1), ZoneKind.HAND)

        result = reducer.apply(Action.redraw(Side.PLAYER, 1))

        assert not result.success
        assert state.player.redraws_used == 0

    def test_redraw_outside_redraw_phase_fails(self, state, reducer):
        put(state, make_card(1), ZoneKind.HAND)
        put(state, make_card(2), ZoneKind.DECK)

        result = reducer.apply(Action.redraw(Side.PLAYER, 1))

        assert not result.success

    def test_finish_redraw_uses_up_redraws(self, state, reducer, settings):
        state.phase = GamePhase.REDRAW_HAND

        result = reducer.apply(Action.finish_redraw(Side.PLAYER))

        assert result.success
        assert state.player.redraws_used == settings.redraw_limit


class TestGameOver:
    """No action is accepted once the match is over."""

    def test_actions_rejected_after_game_over(self, state, reducer):
        state.phase = GamePhase.GAME_OVER

        result = reducer.apply(Action.pass_round(Side.PLAYER))

        assert not result.success
        assert not state.player.has_passed


class TestPlayErrors:
    """A play that fails part-way leaves the turn playable."""

    def test_resolution_error_restores_turn_phase(self, state, reducer, monkeypatch):
        put(state, make_card(123), ZoneKind.HAND)

        def fail(card, actor=None):
            raise RuntimeError("resolution failed")

        monkeypatch.setattr(reducer.resolver, "resolve", fail)

        result = reducer.apply(Action.play(Side.PLAYER, 123))

        assert not result.success
        assert result.error_code == "HANDLER_ERROR"
        assert state.phase == GamePhase.PLAYER_TURN
        assert state.last_played is None
        assert reducer.apply(Action.pass_round(Side.PLAYER)).success

    def test_card_target_ignored_for_untargeted_cards(self, state, reducer):
        unit = put(state, make_card(123), ZoneKind.HAND)
        put(state, make_card(104), ZoneKind.MELEE)

        result = reducer.apply(Action.play(Side.PLAYER, 123, 104, Side.PLAYER))

        assert result.success
        assert unit in state.player.row(ZoneKind.MELEE)
        assert reducer.resolver.pending_targets == {}

    def test_failed_placement_drops_pending_target(self, state, reducer, monkeypatch):
        """A Medic that cannot be placed keeps no stale revive target."""
        put(state, make_card(118, card_range=CardRange.SIEGE, ability=Ability.MEDIC), ZoneKind.HAND)
        put(state, make_card(206, strength=10, card_range=CardRange.RANGED), ZoneKind.GRAVEYARD)
        monkeypatch.setattr(reducer.zones, "add_card_to_board", lambda *args, **kwargs: False)

        result = reducer.apply(Action.play(Side.PLAYER, 118, 206, Side.PLAYER))

        assert not result.success
        assert state.phase == GamePhase.PLAYER_TURN
        assert reducer.resolver.pending_targets == {}
