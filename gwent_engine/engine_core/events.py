"""
Presentation Events - Observer interface between the engine and the UI.

The engine announces what happened with semantic events; renderers and
audio players subscribe. The engine never waits on a handler: handlers
run synchronously and a failing handler is logged without affecting
the match.

Vocabulary:
- EventType: what happened (card moved, weather shown, round ended, ...)
- SoundCue: fixed audio cue identifiers
- Banner: fixed banner identifiers shown between turns and rounds
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, TYPE_CHECKING
import logging

if TYPE_CHECKING:
    from .state import Card, Side, Zone, GamePhase

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Semantic presentation events."""
    CARD_MOVED = "card_moved"
    CARD_DISCARDED = "card_discarded"
    WEATHER_SHOWN = "weather_shown"
    WEATHER_CLEARED = "weather_cleared"
    ABILITY_TRIGGERED = "ability_triggered"
    STRENGTH_UPDATED = "strength_updated"
    CARD_PLAYABLE = "card_playable"
    PHASE_CHANGED = "phase_changed"
    SIDE_PASSED = "side_passed"
    ROUND_ENDED = "round_ended"
    GAME_OVER = "game_over"


class SoundCue(Enum):
    """Audio cue identifiers."""
    CARD_HERO = "CardHero"
    CARD_MELEE = "CardMelee"
    CARD_RANGED = "CardRanged"
    CARD_SIEGE = "CardSiege"
    CARD_SPY = "CardSpy"
    CARD_SUMMON = "CardSummon"
    COIN_FLIP = "CoinFlip"
    GAME_LOSS = "GameLoss"
    GAME_WIN = "GameWin"
    REDRAW_CARD = "RedrawCard"
    REDRAW_CARDS_END = "RedrawCardsEnd"
    REDRAW_CARDS_START = "RedrawCardsStart"
    ROUND_DRAW = "RoundDraw"
    ROUND_LOSS = "RoundLoss"
    ROUND_WIN = "RoundWin"
    START_GAME = "StartGame"
    TURN_OPPONENT = "TurnOpponent"
    TURN_PLAYER = "TurnPlayer"


class Banner(Enum):
    """Banner identifiers."""
    COIN_PLAYER = "CoinPlayer"
    COIN_OPPONENT = "CoinOpponent"
    PLAYER_TURN = "PlayerTurn"
    OPPONENT_TURN = "OpponentTurn"
    ROUND_PASSED = "RoundPassed"
    ROUND_WIN = "RoundWin"
    ROUND_DRAW = "RoundDraw"
    ROUND_LOSS = "RoundLoss"


@dataclass
class GameEvent:
    """
    A presentation event.

    Attributes:
        event_type: What happened.
        side: Side the event concerns, if any.
        card: Card involved, if any.
        from_zone / to_zone: Zones of a move.
        cue: Audio cue to play, if any.
        banner: Banner to show, if any.
        message: Human-readable description (also used as a state change line).
        data: Extra payload (legal actions, scores, ...).
    """
    event_type: EventType
    side: Side | None = None
    card: Card | None = None
    from_zone: Zone | None = None
    to_zone: Zone | None = None
    phase: GamePhase | None = None
    cue: SoundCue | None = None
    banner: Banner | None = None
    message: str = ""
    data: dict[str, Any] = field(default_factory=dict)


Handler = Callable[[GameEvent], None]

_ZONE_EVENTS = frozenset({
    EventType.CARD_MOVED,
    EventType.CARD_DISCARDED,
    EventType.WEATHER_SHOWN,
    EventType.WEATHER_CLEARED,
})


class EventBus:
    """
    Publish-subscribe bus for presentation events.

    Usage:
        bus = EventBus()
        bus.on_zone_changed(lambda e: renderer.refresh(e.to_zone))
        bus.on_card_playable(lambda e: ui.highlight(e.data["actions"]))
        bus.subscribe(audio.play_event, {EventType.ROUND_ENDED})
    """

    def __init__(self, keep_history: bool = True):
        self._handlers: list[tuple[frozenset[EventType] | None, Handler]] = []
        self.keep_history = keep_history
        self.history: list[GameEvent] = []

    def subscribe(self, handler: Handler, event_types: set[EventType] | None = None):
        """
        Register a handler, optionally restricted to some event types.

        Handlers are called in registration order.
        """
        types = frozenset(event_types) if event_types is not None else None
        self._handlers.append((types, handler))
        logger.debug("Subscribed %s to %s", getattr(handler, "__name__", handler), types or "all events")

    def unsubscribe(self, handler: Handler):
        self._handlers = [(t, h) for t, h in self._handlers if h is not handler]

    def on_zone_changed(self, handler: Handler):
        """Register for every zone mutation (moves, discards, weather)."""
        self.subscribe(handler, set(_ZONE_EVENTS))

    def on_card_playable(self, handler: Handler):
        """Register for 'player may act' notifications carrying the legal actions."""
        self.subscribe(handler, {EventType.CARD_PLAYABLE})

    def emit(self, event: GameEvent):
        """
        Deliver an event to all matching handlers.

        A handler raising an exception is logged and does not stop the others.
        """
        if self.keep_history:
            self.history.append(event)
        for types, handler in list(self._handlers):
            if types is not None and event.event_type not in types:
                continue
            try:
                handler(event)
            except Exception as e:
                logger.error("Error in event handler for %s: %s", event.event_type.name, e, exc_info=True)

    def messages(self, since: int = 0) -> list[str]:
        """Human-readable lines of the recorded events, from an index on."""
        return [e.message for e in self.history[since:] if e.message]

    def cues(self) -> list[SoundCue]:
        return [e.cue for e in self.history if e.cue is not None]

    def clear(self):
        """Drop all handlers and history (useful for testing)."""
        self._handlers.clear()
        self.history.clear()
