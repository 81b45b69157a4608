"""
Deck Store - Persists saved deck compositions.

The store:
- Keeps one JSON file per named deck
- Stores on local disk (~/.gwent_engine/decks by default)
- Is the ONLY persistence in the engine (no mid-match saves)

Design decisions:
- Simple file-based storage
- A deck is its faction, optional leader and the catalog ids it holds
- Unreadable files are reported and treated as missing
"""

from __future__ import annotations
import logging
import re
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

logger = logging.getLogger(__name__)

_SAFE_NAME = re.compile(r"[^A-Za-z0-9_.-]+")


class SavedDeck(BaseModel):
    """A saved deck: faction plus catalog ids, as written to disk."""
    model_config = {"populate_by_name": True}

    faction: str
    leader_id: int | None = Field(None, alias="leaderId")
    card_ids: list[int] = Field(default_factory=list, alias="cardIds")

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)


class DeckStore:
    """
    File-based store for saved decks.

    Usage:
        store = DeckStore(deck_dir="~/.gwent_engine/decks")
        store.save("northern", SavedDeck(faction="Northern Realms", card_ids=[100, 101]))
        deck = store.load("northern")
    """

    def __init__(self, deck_dir: str | Path | None = None):
        if deck_dir is None:
            deck_dir = Path.home() / ".gwent_engine" / "decks"
        self.deck_dir = Path(deck_dir).expanduser()

        # Ensure deck directory exists
        self.deck_dir.mkdir(parents=True, exist_ok=True)

    def save(self, name: str, deck: SavedDeck) -> Path:
        """Write a deck, replacing any deck of the same name."""
        path = self._get_deck_path(name)
        path.write_text(deck.to_json(), encoding="utf-8")
        logger.info("Deck %r saved (%d cards) for faction %s", name, len(deck.card_ids), deck.faction)
        return path

    def load(self, name: str) -> SavedDeck | None:
        """
        Load a saved deck.

        Returns None if the deck does not exist or cannot be parsed.
        """
        path = self._get_deck_path(name)
        if not path.exists():
            logger.info("No saved deck named %r", name)
            return None

        try:
            return SavedDeck.model_validate_json(path.read_text(encoding="utf-8"))
        except (ValidationError, ValueError) as e:
            logger.warning("Failed to parse saved deck %s: %s", path, e)
            return None

    def list(self) -> list[str]:
        """List the names of all saved decks."""
        if not self.deck_dir.exists():
            return []
        return sorted(f.stem for f in self.deck_dir.glob("*.json"))

    def delete(self, name: str) -> bool:
        """Remove a saved deck. Returns False if there was none."""
        path = self._get_deck_path(name)
        if not path.exists():
            return False
        path.unlink()
        logger.info("Deck %r deleted", name)
        return True

    def _get_deck_path(self, name: str) -> Path:
        """File path for a deck name (unsafe characters replaced)."""
        safe = _SAFE_NAME.sub("_", name).strip("._") or "deck"
        return self.deck_dir / f"{safe}.json"

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._get_deck_path(name).exists()
