"""
Card Ordering - Canonical display order of a zone.

Order:
1. Regular cards, then faction special cards, then cards of the
   "Special" faction
2. Regular cards by descending strength, then range
   (melee < agile < ranged < siege < unresolved), then ascending id
3. Special cards by ascending id

The order is a pure function of the cards, so sorting an already
sorted zone leaves it unchanged.
"""

from __future__ import annotations
from typing import Iterable

from ..catalog.vocabulary import CardKind, CardRange, Faction
from .state import Card

RANGE_PRIORITY: dict[CardRange, int] = {
    CardRange.MELEE: 0,
    CardRange.AGILE: 1,
    CardRange.RANGED: 2,
    CardRange.SIEGE: 3,
}
UNRESOLVED_RANGE_PRIORITY = len(RANGE_PRIORITY)


def card_sort_key(card: Card) -> tuple[int, int, int, int]:
    """Sort key implementing the canonical order."""
    if card.kind is CardKind.SPECIAL:
        group = 2 if card.faction == Faction.SPECIAL.value else 1
        return (group, 0, 0, card.instance_id)

    range_priority = RANGE_PRIORITY.get(card.range, UNRESOLVED_RANGE_PRIORITY)
    return (0, -card.current_strength, range_priority, card.instance_id)


def sort_cards(cards: Iterable[Card]) -> list[Card]:
    """Return the cards in canonical order."""
    return sorted(cards, key=card_sort_key)


def sort_zone_in_place(cards: list[Card]) -> None:
    cards.sort(key=card_sort_key)
