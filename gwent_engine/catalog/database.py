"""
Card Catalog - Loads faction data files and serves read-only lookups.

Loading rules:
- Every *.json file in the data directory is one faction file
- An unparsable file is logged and skipped; loading continues
- An invalid card entry is logged and skipped
- A duplicate card id is logged and skipped (first definition wins)
- Leaders are kept apart from the deck-building pool
- Summon-faction cards are kept apart; they only reach a match through
  the summon pool (Muster+ and Avenger)

The catalog is constructed once and passed to the services that need it.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path

from pydantic import ValidationError

from .definitions import CardDefinition, FactionFile
from .vocabulary import Faction, PLAYABLE_FACTIONS

logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).parent / "data"


class CardCatalog:
    """
    Immutable card definitions keyed by catalog id.

    Usage:
        catalog = CardCatalog.load()
        card = catalog.get_by_id(12)
        pool = catalog.get_by_faction(Faction.NILFGAARD)
    """

    def __init__(self):
        self._cards: dict[int, CardDefinition] = {}
        self._by_faction: dict[str, list[CardDefinition]] = {}
        self._leaders: dict[str, list[CardDefinition]] = {}
        self.skipped: list[str] = []

    @classmethod
    def load(cls, data_dir: str | Path | None = None) -> CardCatalog:
        """Load every faction file from a directory (bundled data by default)."""
        catalog = cls()
        directory = Path(data_dir) if data_dir is not None else DEFAULT_DATA_DIR
        if not directory.is_dir():
            logger.warning("Card data directory not found: %s", directory)
            return catalog

        for path in sorted(directory.glob("*.json")):
            catalog.load_file(path)

        logger.info(
            "Loaded %d cards from %s (%d entries skipped)",
            len(catalog._cards), directory, len(catalog.skipped),
        )
        return catalog

    def load_file(self, path: Path) -> None:
        """Load one faction file into the catalog."""
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Skipping unparsable card file %s: %s", path.name, e)
            self.skipped.append(f"{path.name}: {e}")
            return

        if not isinstance(raw, dict) or "faction" not in raw:
            logger.warning("Skipping card file %s: missing 'faction'", path.name)
            self.skipped.append(f"{path.name}: missing faction")
            return

        file_faction = str(raw["faction"])
        for entry in self._section(raw, "leaders", path.name):
            card = self._parse_entry(entry, path.name)
            if card is not None:
                self._leaders.setdefault(file_faction, []).append(card)

        for entry in self._section(raw, "cards", path.name):
            card = self._parse_entry(entry, path.name)
            if card is not None:
                self._by_faction.setdefault(file_faction, []).append(card)

    def add_faction_file(self, faction_file: FactionFile) -> None:
        """Register an already-parsed faction file (used by tools and tests)."""
        for card in faction_file.leaders:
            if self._register(card, "<memory>"):
                self._leaders.setdefault(faction_file.faction, []).append(card)
        for card in faction_file.cards:
            if self._register(card, "<memory>"):
                self._by_faction.setdefault(faction_file.faction, []).append(card)

    def _section(self, raw: dict, key: str, source: str) -> list:
        entries = raw.get(key)
        if entries is None:
            return []
        if not isinstance(entries, list):
            logger.warning("Skipping '%s' in %s: expected a list, got %s", key, source, type(entries).__name__)
            self.skipped.append(f"{source}: {key} is not a list")
            return []
        return entries

    def _parse_entry(self, entry: object, source: str) -> CardDefinition | None:
        try:
            card = CardDefinition.model_validate(entry)
        except ValidationError as e:
            logger.warning("Skipping invalid card entry in %s: %s", source, e.errors()[0]["msg"])
            self.skipped.append(f"{source}: invalid entry")
            return None
        return card if self._register(card, source) else None

    def _register(self, card: CardDefinition, source: str) -> bool:
        if card.id in self._cards:
            logger.warning(
                "Duplicate card id %d ('%s') in %s, keeping '%s'",
                card.id, card.name, source, self._cards[card.id].name,
            )
            self.skipped.append(f"{source}: duplicate id {card.id}")
            return False
        self._cards[card.id] = card
        return True

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def get_by_id(self, card_id: int) -> CardDefinition | None:
        """Get a definition by catalog id, or None if missing."""
        return self._cards.get(card_id)

    def get_by_faction(self, faction: Faction | str) -> list[CardDefinition]:
        """
        Get the deck-building pool for a faction.

        Playable factions include the Neutral and Special pools.
        Other factions return only their own cards.
        """
        key = _faction_key(faction)
        cards = list(self._by_faction.get(key, []))
        if key in {f.value for f in PLAYABLE_FACTIONS}:
            cards += self._by_faction.get(Faction.NEUTRAL.value, [])
            cards += self._by_faction.get(Faction.SPECIAL.value, [])
        return cards

    def get_leaders(self, faction: Faction | str) -> list[CardDefinition]:
        key = _faction_key(faction)
        return list(self._leaders.get(key, []))

    def get_summon_cards(self) -> list[CardDefinition]:
        return list(self._by_faction.get(Faction.SUMMON.value, []))

    def is_summon_card(self, card_id: int) -> bool:
        return any(c.id == card_id for c in self._by_faction.get(Faction.SUMMON.value, []))

    def playable_factions(self) -> list[Faction]:
        """Playable factions that have at least one card loaded."""
        return [f for f in PLAYABLE_FACTIONS if self._by_faction.get(f.value)]

    def all_cards(self) -> list[CardDefinition]:
        return list(self._cards.values())

    def __len__(self) -> int:
        return len(self._cards)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._cards


def _faction_key(faction: Faction | str) -> str:
    return faction.value if isinstance(faction, Faction) else str(faction)
