"""
Pytest fixtures for Gwent Engine tests.
"""

import random

import pytest

from ..catalog.database import CardCatalog
from ..config import MatchSettings
from ..engine_core.events import EventBus
from ..engine_core.reducer import Reducer
from ..engine_core.state import GamePhase, MatchState


@pytest.fixture(scope="session")
def catalog() -> CardCatalog:
    """The bundled card catalog."""
    return CardCatalog.load()


@pytest.fixture
def settings() -> MatchSettings:
    """Default settings without pacing delays."""
    return MatchSettings().without_delays()


@pytest.fixture
def rng() -> random.Random:
    return random.Random(42)


@pytest.fixture
def bus() -> EventBus:
    return EventBus()


@pytest.fixture
def state() -> MatchState:
    """An empty match on the player's turn of round 1."""
    state = MatchState(
        match_id="test_match",
        phase=GamePhase.PLAYER_TURN,
        is_player_turn=True,
        round_number=1,
    )
    state.player.faction = "Northern Realms"
    state.opponent.faction = "Monsters"
    return state


@pytest.fixture
def opponent_turn_state(state: MatchState) -> MatchState:
    """The same empty match, on the opponent's turn."""
    state.phase = GamePhase.OPPONENT_TURN
    state.is_player_turn = False
    return state


@pytest.fixture
def reducer(state: MatchState, settings: MatchSettings, bus: EventBus, rng: random.Random) -> Reducer:
    """Reducer wired to the empty match (transition manager and resolver included)."""
    return Reducer(state, settings, bus, rng)
