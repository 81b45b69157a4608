"""
Phase Scheduler - Drives a match through its phases.

The scheduler is the only driver of a match. It advances by explicit
elapsed time rather than waiting on a clock:

    scheduler = PhaseScheduler(catalog, settings, player_deck=deck)
    result = scheduler.tick(0.016)
    if result.suspension is Suspension.AWAITING_PLAYER_ACTION:
        scheduler.submit(Action.play(Side.PLAYER, 104))

Phase flow:
    START -> REDRAW_HAND -> ROUND_START -> {PLAYER_TURN <-> OPPONENT_TURN}
          -> ROUND_END -> (ROUND_START | GAME_OVER)

Every committed turn action (play or pass) goes through RESOLVING_CARD,
which waits out the presentation delay the action requested plus the
turn delay, then hands the turn on. One phase step runs per tick once
any pending delay has elapsed.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
import logging
import random
import uuid

from ..bots.opponent import HeuristicOpponent
from ..bots.policy import BotPolicy
from ..catalog.database import CardCatalog
from ..catalog.vocabulary import Faction
from ..config import MatchSettings
from ..decks.storage import SavedDeck
from ..engine_core.action import Action, ActionResult
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.events import Banner, EventBus, EventType, GameEvent, SoundCue
from ..engine_core.reducer import Reducer
from ..engine_core.state import GamePhase, MatchResult, MatchState, RoundRecord, Side
from .setup import build_side, deal_initial_hands, resolve_decks

logger = logging.getLogger(__name__)

# Remaining delays below this are treated as elapsed.
_EPSILON = 1e-9


class Suspension(Enum):
    """Why the scheduler stopped after a tick."""
    RUNNING = "running"
    AWAITING_PLAYER_ACTION = "awaiting_player_action"
    AWAITING_PRESENTATION_DELAY = "awaiting_presentation_delay"
    FINISHED = "finished"


@dataclass
class TickResult:
    """
    Result of one tick.

    Contains the phase after the tick, the reason the scheduler is
    suspended and everything that happened during the tick.
    """
    phase: GamePhase
    suspension: Suspension
    remaining: float = 0.0

    events: list[GameEvent] = field(default_factory=list)
    action_results: list[ActionResult] = field(default_factory=list)

    # Filled while the player side is awaited
    legal_actions: list[Action] = field(default_factory=list)

    @property
    def messages(self) -> list[str]:
        return [e.message for e in self.events if e.message]

    @property
    def finished(self) -> bool:
        return self.suspension is Suspension.FINISHED


class PhaseScheduler:
    """
    The turn/phase state machine of one match.

    Usage:
        scheduler = PhaseScheduler(catalog, settings, seed=7)
        result = scheduler.run_until_idle()
        while not result.finished:
            scheduler.submit(choose(result.legal_actions))
            result = scheduler.run_until_idle()
    """

    def __init__(
        self,
        catalog: CardCatalog,
        settings: MatchSettings | None = None,
        bus: EventBus | None = None,
        player_deck: SavedDeck | None = None,
        opponent_deck: SavedDeck | None = None,
        opponent_policy: BotPolicy | None = None,
        player_policy: BotPolicy | None = None,
        seed: int | None = None,
        match_id: str | None = None,
    ):
        self.catalog = catalog
        self.settings = settings or MatchSettings()
        self.bus = bus or EventBus()
        self.rng = random.Random(seed)
        self.player_deck = player_deck
        self.opponent_deck = opponent_deck

        self.state = MatchState(match_id=match_id or str(uuid.uuid4()))
        self.reducer = Reducer(self.state, self.settings, self.bus, self.rng)
        self.generator = ActionGenerator(self.settings)

        self.opponent_policy = opponent_policy or HeuristicOpponent(
            side=Side.OPPONENT, rng=random.Random(self.rng.random()),
        )
        self.player_policy = player_policy

        self.clock = 0.0
        self._delay = 0.0
        self._pending_action: Action | None = None
        self._turn_announced = False
        self._player_prompted = False
        self._redraw_announced = False

    # -------------------------------------------------------------------------
    # Driving
    # -------------------------------------------------------------------------

    @property
    def phase(self) -> GamePhase:
        return self.state.phase

    @property
    def remaining_delay(self) -> float:
        return max(self._delay, 0.0)

    def tick(self, dt: float = 0.0) -> TickResult:
        """
        Advance the match by dt seconds.

        Runs at most one phase step, and only once any pending
        presentation delay has elapsed.
        """
        self.clock += dt
        events_mark = len(self.bus.history)
        result = TickResult(phase=self.state.phase, suspension=Suspension.RUNNING)

        if self._delay > 0:
            self._delay -= dt
            if self._delay > _EPSILON:
                result.suspension = Suspension.AWAITING_PRESENTATION_DELAY
                result.remaining = self._delay
                return result
            self._delay = 0.0

        handler = self._get_handler(self.state.phase)
        result.suspension = handler(result)

        if result.suspension is Suspension.RUNNING and self._delay > _EPSILON:
            result.suspension = Suspension.AWAITING_PRESENTATION_DELAY
            result.remaining = self._delay
        result.phase = self.state.phase
        result.events = self.bus.history[events_mark:]
        return result

    def run_until_idle(self, max_steps: int = 10_000) -> TickResult:
        """
        Tick through every delay until the player must act or the match ends.

        Raises RuntimeError if the match does not settle within max_steps.
        """
        result = self.tick(0.0)
        events = list(result.events)
        actions = list(result.action_results)
        for _ in range(max_steps):
            if result.suspension in (Suspension.AWAITING_PLAYER_ACTION, Suspension.FINISHED):
                result.events = events
                result.action_results = actions
                return result
            result = self.tick(self.remaining_delay)
            events.extend(result.events)
            actions.extend(result.action_results)
        raise RuntimeError(f"Match did not settle within {max_steps} steps")

    def submit(self, action: Action) -> ActionResult:
        """
        Queue the human side's action for the next tick.

        Only accepted while the player is awaited in REDRAW_HAND or
        PLAYER_TURN; anything else is rejected.
        """
        if action.payload.side is not Side.PLAYER:
            return ActionResult.failure("Only the player side can submit actions", error_code="INVALID_ACTION")
        if self.state.phase not in (GamePhase.REDRAW_HAND, GamePhase.PLAYER_TURN):
            return ActionResult.failure(
                f"Cannot submit during {self.state.phase.value}",
                error_code="INVALID_ACTION",
            )
        self._pending_action = action
        return ActionResult(success=True, new_state=self.state, state_changes=[f"Queued {action}"])

    def legal_actions(self, side: Side = Side.PLAYER) -> list[Action]:
        return self.generator.generate(self.state, side)

    def _get_handler(self, phase: GamePhase):
        handlers = {
            GamePhase.START: self._handle_start,
            GamePhase.REDRAW_HAND: self._handle_redraw_hand,
            GamePhase.ROUND_START: self._handle_round_start,
            GamePhase.PLAYER_TURN: self._handle_turn,
            GamePhase.OPPONENT_TURN: self._handle_turn,
            GamePhase.RESOLVING_CARD: self._handle_resolving,
            GamePhase.ROUND_END: self._handle_round_end,
            GamePhase.GAME_OVER: self._handle_game_over,
        }
        return handlers[phase]

    def _set_phase(self, phase: GamePhase):
        if self.state.phase == phase:
            return
        logger.info("Phase %s -> %s", self.state.phase.value, phase.value)
        self.state.phase = phase

    def _emit(self, event_type: EventType, **kwargs):
        self.bus.emit(GameEvent(event_type=event_type, phase=self.state.phase, **kwargs))

    # -------------------------------------------------------------------------
    # Phase handlers
    # -------------------------------------------------------------------------

    def _handle_start(self, result: TickResult) -> Suspension:
        """Build both sides and deal the opening hands."""
        player_deck, opponent_deck = resolve_decks(
            self.catalog, self.settings, self.player_deck, self.opponent_deck, self.rng,
        )
        self.state.player = build_side(self.catalog, self.settings, Side.PLAYER, player_deck)
        self.state.opponent = build_side(self.catalog, self.settings, Side.OPPONENT, opponent_deck)
        logger.info(
            "Match %s: %s vs %s",
            self.state.match_id, self.state.player.faction, self.state.opponent.faction,
        )

        self._emit(EventType.PHASE_CHANGED, cue=SoundCue.START_GAME, message="Match started")
        deal_initial_hands(self.reducer.zones, self.settings)

        if self.settings.redraw_limit > 0:
            self._set_phase(GamePhase.REDRAW_HAND)
        else:
            self._set_phase(GamePhase.ROUND_START)
        return Suspension.RUNNING

    def _handle_redraw_hand(self, result: TickResult) -> Suspension:
        """The player may swap up to redraw_limit cards; the opponent keeps its hand."""
        board = self.state.player
        if not self._redraw_announced:
            self._redraw_announced = True
            self._emit(
                EventType.PHASE_CHANGED,
                side=Side.PLAYER,
                cue=SoundCue.REDRAW_CARDS_START,
                banner=Banner.PLAYER_TURN,
                message=f"Choose a card to redraw: 0/{self.settings.redraw_limit}",
            )

        if board.redraws_used >= self.settings.redraw_limit:
            self._emit(EventType.PHASE_CHANGED, side=Side.PLAYER, cue=SoundCue.REDRAW_CARDS_END)
            self._pending_action = None
            self._player_prompted = False
            self._set_phase(GamePhase.ROUND_START)
            return Suspension.RUNNING

        action = self._next_player_action(result)
        if action is None:
            return Suspension.AWAITING_PLAYER_ACTION

        action_result = self.reducer.apply(action)
        result.action_results.append(action_result)
        self._player_prompted = False
        if not action_result.success and self.player_policy is not None:
            logger.warning("Player policy redraw failed (%s), finishing redraw", action_result.error)
            result.action_results.append(self.reducer.apply(Action.finish_redraw(Side.PLAYER)))
        return Suspension.RUNNING

    def _handle_round_start(self, result: TickResult) -> Suspension:
        """Clear the board, release avengers and choose who goes first."""
        state = self.state
        state.round_number += 1
        state.player.has_passed = False
        state.opponent.has_passed = False

        self.reducer.resolver.reset_round()
        self.reducer.zones.clear_board()
        self.reducer.resolver.release_avengers()

        if state.round_number == 1:
            state.is_player_turn = self.rng.random() < 0.5
            self._emit(
                EventType.PHASE_CHANGED,
                cue=SoundCue.COIN_FLIP,
                banner=Banner.COIN_PLAYER if state.is_player_turn else Banner.COIN_OPPONENT,
                message="You will go first" if state.is_player_turn else "Your opponent will go first",
            )
        else:
            # The side that did not hold the last turn of the previous round starts.
            state.is_player_turn = not state.is_player_turn
            self._emit(
                EventType.PHASE_CHANGED,
                banner=Banner.PLAYER_TURN if state.is_player_turn else Banner.OPPONENT_TURN,
                message="Starting the next round...",
            )

        logger.info("Round %d starts, %s first", state.round_number, state.turn_side.value)
        self._delay = self.settings.round_delay + self.reducer.resolver.drain_pacing()
        self._set_phase(GamePhase.PLAYER_TURN if state.is_player_turn else GamePhase.OPPONENT_TURN)
        return Suspension.RUNNING

    def _handle_turn(self, result: TickResult) -> Suspension:
        """Collect exactly one committed action from the side on turn."""
        side = Side.PLAYER if self.state.phase == GamePhase.PLAYER_TURN else Side.OPPONENT
        self.state.is_player_turn = side is Side.PLAYER
        board = self.state.board(side)

        if board.has_passed:
            self._next_turn()
            return Suspension.RUNNING

        if not self._turn_announced:
            self._turn_announced = True
            self._announce_turn(side)
            if side is Side.OPPONENT and self.settings.ai_thinking_time > 0 and not board.hand.is_empty:
                self._delay = self.settings.ai_thinking_time
                return Suspension.RUNNING

        if board.hand.is_empty:
            logger.info("%s has no cards left, passing", side.value)
            action = Action.pass_round(side)
        elif side is Side.OPPONENT:
            action = self._bot_action(self.opponent_policy, side)
        else:
            action = self._next_player_action(result)
            if action is None:
                return Suspension.AWAITING_PLAYER_ACTION

        action_result = self.reducer.apply(action)
        if not action_result.success and (side is Side.OPPONENT or self.player_policy is not None):
            logger.warning("%s bot action %s failed (%s), passing", side.value, action, action_result.error)
            result.action_results.append(action_result)
            action_result = self.reducer.apply(Action.pass_round(side))
        result.action_results.append(action_result)

        if not action_result.success:
            # The human keeps the turn until a valid action arrives.
            self._player_prompted = False
            return Suspension.AWAITING_PLAYER_ACTION

        self._turn_announced = False
        self._player_prompted = False
        self._set_phase(GamePhase.RESOLVING_CARD)
        self._delay = action_result.pacing + self.settings.turn_delay
        return Suspension.RUNNING

    def _handle_resolving(self, result: TickResult) -> Suspension:
        """The played card's chain already ran; hand the turn on."""
        self.state.last_played = None
        self._next_turn()
        return Suspension.RUNNING

    def _handle_round_end(self, result: TickResult) -> Suspension:
        """Score the round; the lower side loses a life, a tie costs both."""
        state = self.state
        player_score = state.total_strength(Side.PLAYER)
        opponent_score = state.total_strength(Side.OPPONENT)
        winner = self._round_winner(player_score, opponent_score)

        if winner is Side.PLAYER:
            state.opponent.lives = max(state.opponent.lives - 1, 0)
            cue, banner, message = SoundCue.ROUND_WIN, Banner.ROUND_WIN, "You won the round"
        elif winner is Side.OPPONENT:
            state.player.lives = max(state.player.lives - 1, 0)
            cue, banner, message = SoundCue.ROUND_LOSS, Banner.ROUND_LOSS, "You lost the round"
        else:
            state.player.lives = max(state.player.lives - 1, 0)
            state.opponent.lives = max(state.opponent.lives - 1, 0)
            cue, banner, message = SoundCue.ROUND_DRAW, Banner.ROUND_DRAW, "You drew the round"

        record = RoundRecord(state.round_number, player_score, opponent_score, winner)
        state.round_history.append(record)
        logger.info(
            "Round %d: %d - %d, %s",
            state.round_number, player_score, opponent_score, winner.value if winner else "draw",
        )
        self._emit(
            EventType.ROUND_ENDED,
            side=winner,
            cue=cue,
            banner=banner,
            message=message,
            data={
                "round": state.round_number,
                "player_score": player_score,
                "opponent_score": opponent_score,
                "player_lives": state.player.lives,
                "opponent_lives": state.opponent.lives,
            },
        )

        self._delay = self.settings.round_delay
        if state.player.lives == 0 or state.opponent.lives == 0:
            self._set_phase(GamePhase.GAME_OVER)
        else:
            self._set_phase(GamePhase.ROUND_START)
        return Suspension.RUNNING

    def _handle_game_over(self, result: TickResult) -> Suspension:
        state = self.state
        if state.result is None:
            if state.player.lives == 0 and state.opponent.lives == 0:
                state.result = MatchResult.DRAW
                cue, message = SoundCue.ROUND_DRAW, "The game ends in a draw"
            elif state.opponent.lives == 0:
                state.result = MatchResult.WIN
                cue, message = SoundCue.GAME_WIN, "You win the game"
            else:
                state.result = MatchResult.LOSE
                cue, message = SoundCue.GAME_LOSS, "You lose the game"
            logger.info("Match %s over: %s", state.match_id, state.result.value)
            self._emit(EventType.GAME_OVER, cue=cue, message=message, data={"result": state.result.value})
        return Suspension.FINISHED

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _round_winner(self, player_score: int, opponent_score: int) -> Side | None:
        if player_score > opponent_score:
            return Side.PLAYER
        if opponent_score > player_score:
            return Side.OPPONENT

        if self.settings.faction_ability_enabled:
            nilfgaard = Faction.NILFGAARD.value
            player_ng = self.state.player.faction == nilfgaard
            opponent_ng = self.state.opponent.faction == nilfgaard
            if player_ng and not opponent_ng:
                return Side.PLAYER
            if opponent_ng and not player_ng:
                return Side.OPPONENT
        return None

    def _next_turn(self):
        """Transition after a committed action."""
        player_passed = self.state.player.has_passed
        opponent_passed = self.state.opponent.has_passed
        if player_passed and opponent_passed:
            self._set_phase(GamePhase.ROUND_END)
        elif player_passed:
            self._set_phase(GamePhase.OPPONENT_TURN)
        elif opponent_passed:
            self._set_phase(GamePhase.PLAYER_TURN)
        else:
            self._set_phase(GamePhase.OPPONENT_TURN if self.state.is_player_turn else GamePhase.PLAYER_TURN)

    def _announce_turn(self, side: Side):
        other_passed = self.state.board(side.other).has_passed
        if side is Side.PLAYER:
            cue, banner, message = SoundCue.TURN_PLAYER, Banner.PLAYER_TURN, "Your turn"
        else:
            cue, banner, message = SoundCue.TURN_OPPONENT, Banner.OPPONENT_TURN, "Opponent's turn"
        self._emit(
            EventType.PHASE_CHANGED,
            side=side,
            cue=None if other_passed else cue,
            banner=banner,
            message=message,
        )

    def _bot_action(self, policy: BotPolicy, side: Side) -> Action:
        legal = self.generator.generate(self.state, side)
        decision = policy.select_action(self.state, self.settings, legal)
        logger.debug("%s decided %s: %s", side.value, decision.action, decision.explanation)
        return decision.action

    def _next_player_action(self, result: TickResult) -> Action | None:
        """The player's policy decision, or the queued submission, or None."""
        if self.player_policy is not None:
            return self._bot_action(self.player_policy, Side.PLAYER)

        if self._pending_action is not None:
            action, self._pending_action = self._pending_action, None
            return action

        result.legal_actions = self.generator.generate(self.state, Side.PLAYER)
        if not self._player_prompted:
            self._player_prompted = True
            self._emit(
                EventType.CARD_PLAYABLE,
                side=Side.PLAYER,
                data={"actions": result.legal_actions},
            )
        return None
