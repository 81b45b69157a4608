"""
Match Manager - Creates and tracks matches.

LIFECYCLE:
1. The manager is built once with its services (catalog, deck store,
   settings, event bus factory); nothing is a process-wide singleton
2. create_match() builds a PhaseScheduler and its own EventBus for one match
3. The caller drives the match through the scheduler
4. end_match() drops the match and its event history; nothing of it
   is persisted

PERSISTENCE RULES:
- Match state is in-memory only
- The only persistence is the DeckStore (saved deck compositions)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable
import logging
import time
import uuid

from ..bots.policy import BotPolicy
from ..catalog.database import CardCatalog
from ..config import MatchSettings
from ..decks.storage import DeckStore, SavedDeck
from ..engine_core.events import EventBus
from ..engine_core.state import GamePhase
from .scheduler import PhaseScheduler

logger = logging.getLogger(__name__)


class MatchStatus(Enum):
    """Status of a tracked match."""
    ACTIVE = "active"
    FINISHED = "finished"
    ABANDONED = "abandoned"


@dataclass
class Match:
    """
    One tracked match.

    Contains the scheduler driving it plus bookkeeping.
    """
    match_id: str
    scheduler: PhaseScheduler
    created_at: float
    status: MatchStatus = MatchStatus.ACTIVE
    metadata: dict[str, Any] = field(default_factory=dict)

    def is_active(self) -> bool:
        return self.status is MatchStatus.ACTIVE and self.scheduler.phase != GamePhase.GAME_OVER


class MatchManager:
    """
    Holds the engine services and the live matches.

    Responsibilities:
    - Inject the services into every new match
    - Track active matches
    - Clean up finished matches
    """

    def __init__(
        self,
        catalog: CardCatalog,
        deck_store: DeckStore | None = None,
        settings: MatchSettings | None = None,
        bus_factory: Callable[[], EventBus] | None = None,
    ):
        self.catalog = catalog
        self.deck_store = deck_store
        self.settings = settings or MatchSettings()
        self.bus_factory = bus_factory or EventBus
        self._matches: dict[str, Match] = {}

    def create_match(
        self,
        player_deck: SavedDeck | str | None = None,
        opponent_deck: SavedDeck | None = None,
        player_policy: BotPolicy | None = None,
        opponent_policy: BotPolicy | None = None,
        seed: int | None = None,
        settings: MatchSettings | None = None,
    ) -> Match:
        """
        Create a new match.

        Args:
            player_deck: A deck, or the name of a deck in the deck store
            opponent_deck: The opponent's deck (randomised when None)
            player_policy: Bot driving the player side (simulation)
            opponent_policy: Bot driving the opponent (default heuristic)
            seed: Seed for every random choice of the match
            settings: Overrides the manager's settings for this match

        Returns:
            New Match, in phase START
        """
        if isinstance(player_deck, str):
            name = player_deck
            player_deck = self.deck_store.load(name) if self.deck_store else None
            if player_deck is None:
                logger.warning("Saved deck %r not found, using a random deck", name)

        match_id = str(uuid.uuid4())
        scheduler = PhaseScheduler(
            catalog=self.catalog,
            settings=settings or self.settings,
            bus=self.bus_factory(),
            player_deck=player_deck,
            opponent_deck=opponent_deck,
            opponent_policy=opponent_policy,
            player_policy=player_policy,
            seed=seed,
            match_id=match_id,
        )
        match = Match(match_id=match_id, scheduler=scheduler, created_at=time.time())
        self._matches[match_id] = match
        logger.info("Created match %s", match_id)
        return match

    def get_match(self, match_id: str) -> Match | None:
        """Get a match by ID."""
        return self._matches.get(match_id)

    def end_match(self, match_id: str, reason: str = "completed") -> bool:
        """
        End a match and drop it.

        Returns False if no such match exists.
        """
        match = self._matches.pop(match_id, None)
        if match is None:
            return False
        match.status = MatchStatus.FINISHED if reason == "completed" else MatchStatus.ABANDONED
        match.scheduler.bus.history.clear()
        logger.info("Match %s ended (%s)", match_id, reason)
        return True

    def list_active_matches(self) -> list[str]:
        """List IDs of active matches."""
        return [mid for mid, match in self._matches.items() if match.is_active()]

    def cleanup_finished_matches(self) -> int:
        """Drop every match that reached GAME_OVER."""
        finished = [mid for mid, match in self._matches.items() if not match.is_active()]
        for match_id in finished:
            self.end_match(match_id)
        return len(finished)
