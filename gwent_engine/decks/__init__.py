"""
Decks module - Deck building and saved decks.

Provides:
- SavedDeck / DeckStore: JSON persistence of deck compositions
- DeckBuilder / randomise_deck: deck rules against the catalog
"""

from .storage import SavedDeck, DeckStore
from .builder import DeckBuilder, randomise_deck

__all__ = [
    "SavedDeck",
    "DeckStore",
    "DeckBuilder",
    "randomise_deck",
]
