"""
Deck Builder - Deck composition rules.

A deck belongs to one playable faction and may also hold Neutral and
Special cards. Each catalog card appears at most once. Summon cards and
leaders are never deck cards; a deck may name one leader of its faction.
"""

from __future__ import annotations
import logging
import random

from ..catalog.database import CardCatalog
from ..catalog.definitions import CardDefinition
from ..catalog.vocabulary import Faction, PLAYABLE_FACTIONS
from .storage import SavedDeck

logger = logging.getLogger(__name__)

SHARED_FACTIONS = {Faction.NEUTRAL.value, Faction.SPECIAL.value}


class DeckBuilder:
    """
    Builds and checks a deck against the catalog.

    Usage:
        builder = DeckBuilder(catalog, faction="Skellige")
        builder.add_card(500)
        deck = builder.to_saved_deck()
    """

    def __init__(self, catalog: CardCatalog, faction: Faction | str | None = None):
        self.catalog = catalog
        self.faction: str | None = None
        self.leader_id: int | None = None
        self.cards: list[CardDefinition] = []
        if faction is not None:
            self.set_faction(faction)

    @classmethod
    def from_saved(cls, catalog: CardCatalog, saved: SavedDeck) -> DeckBuilder:
        """Rebuild a deck from saved ids; unknown or invalid ids are skipped."""
        builder = cls(catalog, saved.faction)
        for card_id in saved.card_ids:
            builder.add_card(card_id)
        if saved.leader_id is not None:
            builder.set_leader(saved.leader_id)
        return builder

    def set_faction(self, faction: Faction | str) -> bool:
        """
        Choose the deck's faction.

        Only allowed while the deck holds no faction cards. Raises
        ValueError for a faction that is not playable.
        """
        value = faction.value if isinstance(faction, Faction) else str(faction)
        if value not in {f.value for f in PLAYABLE_FACTIONS}:
            raise ValueError(f"Unknown playable faction: {faction}")

        if self.faction == value:
            return True
        if any(c.faction not in SHARED_FACTIONS for c in self.cards):
            logger.info("Cannot change faction to %s, deck has %d cards", value, len(self.cards))
            return False
        self.faction = value
        self.leader_id = None
        return True

    def is_card_valid(self, card: CardDefinition) -> bool:
        """True if the card may go into a deck of this faction."""
        if self.catalog.is_summon_card(card.id) or card.type == "leader":
            return False
        return card.faction in SHARED_FACTIONS or card.faction == self.faction

    def add_card(self, card_id: int) -> bool:
        """Add a card if it is valid and not already included."""
        card = self.catalog.get_by_id(card_id)
        if card is None:
            logger.warning("Tried to add unknown card %s", card_id)
            return False
        if not self.is_card_valid(card):
            logger.info("Card %s doesn't belong to faction %s", card.name, self.faction)
            return False
        if card in self.cards:
            return False
        self.cards.append(card)
        return True

    def remove_card(self, card_id: int) -> bool:
        for card in self.cards:
            if card.id == card_id:
                self.cards.remove(card)
                return True
        return False

    def contains(self, card_id: int) -> bool:
        return any(c.id == card_id for c in self.cards)

    def set_leader(self, card_id: int) -> bool:
        """Choose the deck's leader among the faction's leaders."""
        if self.faction is None:
            return False
        if not any(leader.id == card_id for leader in self.catalog.get_leaders(self.faction)):
            logger.warning("Card %s is not a %s leader", card_id, self.faction)
            return False
        self.leader_id = card_id
        return True

    def clear(self):
        self.faction = None
        self.leader_id = None
        self.cards.clear()

    def validate(self) -> list[str]:
        """Problems with the current deck (empty list if none)."""
        errors = []
        if self.faction is None:
            errors.append("No faction selected")
        ids = [c.id for c in self.cards]
        if len(ids) != len(set(ids)):
            errors.append("Deck contains duplicate cards")
        for card in self.cards:
            if not self.is_card_valid(card):
                errors.append(f"{card.name} ({card.id}) is not allowed in a {self.faction} deck")
        return errors

    def to_saved_deck(self) -> SavedDeck:
        if self.faction is None:
            raise ValueError("Cannot save a deck without a faction")
        return SavedDeck(
            faction=self.faction,
            leader_id=self.leader_id,
            card_ids=[c.id for c in self.cards],
        )

    def __len__(self) -> int:
        return len(self.cards)


def randomise_deck(
    catalog: CardCatalog,
    faction: Faction | str | None = None,
    size: int = 25,
    rng: random.Random | None = None,
) -> SavedDeck:
    """
    Generate a random deck.

    Picks a random playable faction unless one is given, then draws up
    to `size` distinct cards from the faction, Neutral and Special pools.
    """
    rng = rng or random.Random()
    if faction is None:
        factions = catalog.playable_factions()
        if not factions:
            raise ValueError("No playable factions available for random deck")
        faction = rng.choice(factions)

    builder = DeckBuilder(catalog, faction)
    pool = [c for c in catalog.get_by_faction(faction) if builder.is_card_valid(c)]
    if not pool:
        logger.warning("No valid cards found for faction %s", builder.faction)

    for card in rng.sample(pool, min(size, len(pool))):
        builder.add_card(card.id)

    leaders = catalog.get_leaders(builder.faction or "")
    if leaders:
        builder.set_leader(rng.choice(leaders).id)

    logger.info("Generated a random %s deck with %d cards", builder.faction, len(builder))
    return builder.to_saved_deck()
