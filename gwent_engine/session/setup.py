"""
Match Setup - Builds the initial MatchState from saved decks.

Setup steps:
1. Resolve both decks (saved, or randomised when missing or configured)
2. Clone every catalog card into a match-local Card owned by its side
3. Fill each side's summon pool (Neutral summons and the side's own)
4. Place the leader when leader cards are enabled
5. Deal the initial hands through the transition manager
"""

from __future__ import annotations
import logging
import random
import uuid

from ..catalog.database import CardCatalog
from ..catalog.vocabulary import Faction
from ..config import MatchSettings
from ..decks.builder import randomise_deck
from ..decks.storage import SavedDeck
from ..engine_core.ordering import sort_zone_in_place
from ..engine_core.state import Card, MatchState, Side, SideBoard
from ..engine_core.zones import ZoneTransitionManager

logger = logging.getLogger(__name__)


def resolve_decks(
    catalog: CardCatalog,
    settings: MatchSettings,
    player_deck: SavedDeck | None,
    opponent_deck: SavedDeck | None,
    rng: random.Random,
) -> tuple[SavedDeck, SavedDeck]:
    """Pick the decks to play with, randomising where needed."""
    if player_deck is None or settings.randomise_player_deck:
        player_deck = randomise_deck(catalog, size=settings.randomise_deck_size, rng=rng)
    if opponent_deck is None:
        opponent_deck = randomise_deck(catalog, size=settings.randomise_deck_size, rng=rng)
    return player_deck, opponent_deck


def build_side(
    catalog: CardCatalog,
    settings: MatchSettings,
    side: Side,
    deck: SavedDeck,
) -> SideBoard:
    """Clone a saved deck into a side's zones."""
    board = SideBoard(side=side, faction=deck.faction)

    for card_id in deck.card_ids:
        definition = catalog.get_by_id(card_id)
        if definition is None:
            logger.warning("Deck card %s not in catalog, skipped", card_id)
            continue
        board.deck.add(Card.from_definition(definition, side))
    sort_zone_in_place(board.deck.cards)

    allowed = {Faction.NEUTRAL.value, deck.faction}
    for definition in catalog.get_summon_cards():
        if definition.faction in allowed:
            board.summon_pool.add(Card.from_definition(definition, side))
    sort_zone_in_place(board.summon_pool.cards)

    if settings.leader_cards_enabled:
        leader = _pick_leader(catalog, deck)
        if leader is not None:
            board.leader.add(Card.from_definition(leader, side))

    logger.debug(
        "%s: %s deck of %d cards, %d summons",
        side.value, deck.faction, board.deck.count, board.summon_pool.count,
    )
    return board


def build_match_state(
    catalog: CardCatalog,
    settings: MatchSettings,
    player_deck: SavedDeck | None = None,
    opponent_deck: SavedDeck | None = None,
    rng: random.Random | None = None,
    match_id: str | None = None,
) -> MatchState:
    """
    Create a match with both decks built and no cards dealt yet.

    Hands are dealt by deal_initial_hands once the match has its
    transition manager.
    """
    rng = rng or random.Random()
    player_deck, opponent_deck = resolve_decks(catalog, settings, player_deck, opponent_deck, rng)

    state = MatchState(
        match_id=match_id or str(uuid.uuid4()),
        player=build_side(catalog, settings, Side.PLAYER, player_deck),
        opponent=build_side(catalog, settings, Side.OPPONENT, opponent_deck),
    )
    logger.info(
        "Match %s: %s vs %s",
        state.match_id, state.player.faction, state.opponent.faction,
    )
    return state


def deal_initial_hands(zones: ZoneTransitionManager, settings: MatchSettings) -> None:
    """Draw initial_hand_size random cards for each side."""
    for side in (Side.PLAYER, Side.OPPONENT):
        drawn = zones.draw_random(side, settings.initial_hand_size)
        if len(drawn) < settings.initial_hand_size:
            logger.warning(
                "%s deck too small: dealt %d of %d cards",
                side.value, len(drawn), settings.initial_hand_size,
            )


def _pick_leader(catalog: CardCatalog, deck: SavedDeck):
    leaders = catalog.get_leaders(deck.faction)
    if deck.leader_id is not None:
        for leader in leaders:
            if leader.id == deck.leader_id:
                return leader
        logger.warning("Leader %s not found for %s", deck.leader_id, deck.faction)
    return leaders[0] if leaders else None
