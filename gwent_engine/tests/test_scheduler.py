"""
Tests for the phase scheduler.

Tests:
- Tick-driven phase flow and suspensions
- Player submissions
- Round scoring and lives
- Full bot-vs-bot matches
"""

import random

import pytest

from ..bots import HeuristicOpponent, RandomPolicy
from ..config import MatchSettings
from ..engine_core.action import Action, ActionType
from ..engine_core.events import EventBus, EventType, SoundCue
from ..engine_core.state import GamePhase, MatchResult, Side, ZoneKind
from ..session import PhaseScheduler, Suspension
from .factories import make_card, put


def player_bot(seed: int = 1) -> HeuristicOpponent:
    return HeuristicOpponent(side=Side.PLAYER, rng=random.Random(seed))


class TestMatchStart:
    """Tests for START and the redraw phase."""

    def test_start_deals_hands(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)

        result = scheduler.tick(0.0)

        assert result.phase == GamePhase.REDRAW_HAND
        assert scheduler.state.player.hand.count == settings.initial_hand_size
        assert scheduler.state.opponent.hand.count == settings.initial_hand_size
        assert scheduler.state.player.leader.count == 1

    def test_redraw_awaits_player(self, catalog, settings):
        bus = EventBus()
        prompts = []
        bus.on_card_playable(lambda e: prompts.append(e.data["actions"]))
        scheduler = PhaseScheduler(catalog, settings, bus=bus, seed=3)

        result = scheduler.run_until_idle()

        assert result.suspension is Suspension.AWAITING_PLAYER_ACTION
        assert result.phase == GamePhase.REDRAW_HAND
        assert any(a.action_type == ActionType.FINISH_REDRAW for a in result.legal_actions)
        assert len(prompts) == 1
        assert SoundCue.REDRAW_CARDS_START in bus.cues()

    def test_redraw_then_first_turn(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)
        scheduler.run_until_idle()
        card_id = scheduler.state.player.hand.cards[0].instance_id

        assert scheduler.submit(Action.redraw(Side.PLAYER, card_id)).success
        scheduler.run_until_idle()
        assert scheduler.state.player.redraws_used == 1

        scheduler.submit(Action.finish_redraw(Side.PLAYER))
        result = scheduler.run_until_idle()

        assert result.phase == GamePhase.PLAYER_TURN
        assert result.suspension is Suspension.AWAITING_PLAYER_ACTION
        assert scheduler.state.round_number == 1
        assert SoundCue.COIN_FLIP in scheduler.bus.cues()

    def test_no_redraw_phase_without_limit(self, catalog):
        settings = MatchSettings(redraw_limit=0).without_delays()
        scheduler = PhaseScheduler(catalog, settings, seed=3)

        result = scheduler.tick(0.0)

        assert result.phase == GamePhase.ROUND_START

    def test_submit_rejected_before_start(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)

        result = scheduler.submit(Action.pass_round(Side.PLAYER))

        assert not result.success

    def test_submit_rejected_for_opponent(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)
        scheduler.run_until_idle()

        result = scheduler.submit(Action.finish_redraw(Side.OPPONENT))

        assert not result.success


class TestPresentationDelays:
    """The scheduler waits out delays by elapsed time, one step per tick."""

    def test_round_start_delay(self, catalog):
        settings = MatchSettings()
        scheduler = PhaseScheduler(catalog, settings, player_policy=player_bot(), seed=3)

        scheduler.tick(0.0)  # START
        scheduler.tick(0.0)  # redraw decision
        scheduler.tick(0.0)  # redraw finished
        result = scheduler.tick(0.0)  # ROUND_START

        assert result.suspension is Suspension.AWAITING_PRESENTATION_DELAY
        assert result.remaining == pytest.approx(settings.round_delay)

        result = scheduler.tick(1.0)

        assert result.suspension is Suspension.AWAITING_PRESENTATION_DELAY
        assert result.remaining == pytest.approx(settings.round_delay - 1.0)
        assert scheduler.remaining_delay == pytest.approx(settings.round_delay - 1.0)

    def test_elapsed_delay_runs_next_step(self, catalog):
        settings = MatchSettings()
        scheduler = PhaseScheduler(catalog, settings, player_policy=player_bot(), seed=3)
        for _ in range(4):
            scheduler.tick(0.0)
        phase = scheduler.phase

        result = scheduler.tick(settings.round_delay)

        assert phase in (GamePhase.PLAYER_TURN, GamePhase.OPPONENT_TURN)
        assert result.suspension is not Suspension.AWAITING_PLAYER_ACTION
        assert scheduler.clock == pytest.approx(settings.round_delay)


class TestTurns:
    """Tests for a single turn."""

    def test_awaits_player_once(self, catalog, settings, bus):
        scheduler = PhaseScheduler(catalog, settings, bus=bus, seed=3)
        state = scheduler.state
        state.phase = GamePhase.PLAYER_TURN
        put(state, make_card(119), ZoneKind.HAND)

        first = scheduler.tick(0.0)
        second = scheduler.tick(0.0)

        assert first.suspension is Suspension.AWAITING_PLAYER_ACTION
        assert second.suspension is Suspension.AWAITING_PLAYER_ACTION
        assert len(first.legal_actions) == 2
        playable = [e for e in bus.history if e.event_type == EventType.CARD_PLAYABLE]
        assert len(playable) == 1

    def test_submitted_play_resolves(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)
        state = scheduler.state
        state.phase = GamePhase.PLAYER_TURN
        card = put(state, make_card(119), ZoneKind.HAND)
        put(state, make_card(408, owner=Side.OPPONENT), ZoneKind.HAND)
        scheduler.tick(0.0)

        scheduler.submit(Action.play(Side.PLAYER, 119))
        result = scheduler.tick(0.0)

        assert result.action_results[-1].success
        assert result.phase == GamePhase.RESOLVING_CARD
        assert card in state.player.row(ZoneKind.MELEE)

        result = scheduler.tick(0.0)

        assert result.phase == GamePhase.OPPONENT_TURN

    def test_invalid_submission_keeps_turn(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)
        state = scheduler.state
        state.phase = GamePhase.PLAYER_TURN
        put(state, make_card(119), ZoneKind.HAND)

        scheduler.submit(Action.play(Side.PLAYER, 555))
        result = scheduler.tick(0.0)

        assert not result.action_results[0].success
        assert result.suspension is Suspension.AWAITING_PLAYER_ACTION
        assert state.phase == GamePhase.PLAYER_TURN

    def test_empty_hand_passes(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)
        state = scheduler.state
        state.phase = GamePhase.PLAYER_TURN
        put(state, make_card(408, owner=Side.OPPONENT), ZoneKind.HAND)

        scheduler.tick(0.0)

        assert state.player.has_passed
        assert state.phase == GamePhase.RESOLVING_CARD

        scheduler.tick(0.0)

        assert state.phase == GamePhase.OPPONENT_TURN

    def test_both_passed_ends_round(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)
        state = scheduler.state
        state.phase = GamePhase.OPPONENT_TURN
        state.is_player_turn = False
        state.player.has_passed = True

        scheduler.tick(0.0)  # opponent has no cards and passes
        scheduler.tick(0.0)

        assert state.phase == GamePhase.ROUND_END


class TestRoundEnd:
    """Round scoring: the lower side loses a life, a tie costs both."""

    def _score(self, scheduler, player=0, opponent=0):
        state = scheduler.state
        state.phase = GamePhase.ROUND_END
        state.round_number = 1
        if player:
            put(state, make_card(123, strength=player), ZoneKind.MELEE)
        if opponent:
            put(state, make_card(408, owner=Side.OPPONENT, strength=opponent), ZoneKind.MELEE)
        return scheduler.tick(0.0)

    def test_lower_side_loses_life(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)

        result = self._score(scheduler, player=7, opponent=5)

        state = scheduler.state
        assert (state.player.lives, state.opponent.lives) == (2, 1)
        assert state.round_history[-1].winner is Side.PLAYER
        assert state.phase == GamePhase.ROUND_START
        assert any(e.event_type == EventType.ROUND_ENDED for e in result.events)

    def test_tie_costs_both(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)

        self._score(scheduler, player=5, opponent=5)

        state = scheduler.state
        assert (state.player.lives, state.opponent.lives) == (1, 1)
        assert state.round_history[-1].winner is None

    def test_nilfgaard_wins_ties(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)
        scheduler.state.player.faction = "Nilfgaard"
        scheduler.state.opponent.faction = "Monsters"

        self._score(scheduler)

        assert (scheduler.state.player.lives, scheduler.state.opponent.lives) == (2, 1)

    def test_nilfgaard_mirror_is_a_tie(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)
        scheduler.state.player.faction = "Nilfgaard"
        scheduler.state.opponent.faction = "Nilfgaard"

        self._score(scheduler)

        assert (scheduler.state.player.lives, scheduler.state.opponent.lives) == (1, 1)

    def test_faction_ability_can_be_disabled(self, catalog):
        settings = MatchSettings(faction_ability_enabled=False).without_delays()
        scheduler = PhaseScheduler(catalog, settings, seed=3)
        scheduler.state.player.faction = "Nilfgaard"

        self._score(scheduler)

        assert (scheduler.state.player.lives, scheduler.state.opponent.lives) == (1, 1)

    def test_last_lives_end_the_game(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)
        scheduler.state.player.lives = 1
        scheduler.state.opponent.lives = 1

        self._score(scheduler, player=3, opponent=3)
        result = scheduler.tick(0.0)

        assert result.finished
        assert scheduler.state.result is MatchResult.DRAW

    def test_game_win(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, seed=3)
        scheduler.state.opponent.lives = 1

        self._score(scheduler, player=9, opponent=2)
        result = scheduler.tick(0.0)

        assert result.finished
        assert scheduler.state.result is MatchResult.WIN
        assert SoundCue.GAME_WIN in scheduler.bus.cues()


class TestFullMatch:
    """Bot-vs-bot matches run to completion."""

    @pytest.mark.parametrize("seed", [1, 7, 23])
    def test_match_finishes(self, catalog, settings, seed):
        scheduler = PhaseScheduler(catalog, settings, player_policy=player_bot(seed), seed=seed)

        result = scheduler.run_until_idle()

        state = scheduler.state
        assert result.finished
        assert state.result is not None
        assert 2 <= len(state.round_history) <= 3
        assert state.player.lives == 0 or state.opponent.lives == 0

    @pytest.mark.parametrize("seed", [2, 11])
    def test_lives_drop_at_most_one_per_round(self, catalog, settings, seed):
        scheduler = PhaseScheduler(catalog, settings, player_policy=RandomPolicy(seed=seed), seed=seed)

        scheduler.run_until_idle()

        player_lives = opponent_lives = 2
        for record in scheduler.state.round_history:
            if record.winner is not Side.PLAYER:
                player_lives -= 1
            if record.winner is not Side.OPPONENT:
                opponent_lives -= 1
        assert scheduler.state.player.lives == max(player_lives, 0)
        assert scheduler.state.opponent.lives == max(opponent_lives, 0)

    def test_every_card_in_one_zone(self, catalog, settings):
        scheduler = PhaseScheduler(catalog, settings, player_policy=player_bot(4), seed=4)

        scheduler.run_until_idle()

        cards = scheduler.state.all_cards()
        assert len(cards) == len({c.key for c in cards})

    def test_same_seed_same_match(self, catalog, settings):
        first = PhaseScheduler(catalog, settings, player_policy=player_bot(5), seed=5)
        second = PhaseScheduler(catalog, settings, player_policy=player_bot(5), seed=5)

        first.run_until_idle()
        second.run_until_idle()

        assert first.state.round_history == second.state.round_history

    def test_failed_play_does_not_stall_match(self, catalog, settings):
        """A play that errors mid-resolution falls back to a pass and the match goes on."""
        scheduler = PhaseScheduler(catalog, settings, player_policy=player_bot(6), seed=6)
        resolver = scheduler.reducer.resolver
        original = resolver.resolve
        failures = []

        def fail_once(card, actor=None):
            if not failures:
                failures.append(card)
                raise RuntimeError("resolution failed")
            return original(card, actor)

        resolver.resolve = fail_once

        result = scheduler.run_until_idle()

        assert failures
        assert result.finished
        assert scheduler.state.result is not None
