"""
Card and zone builders for hand-made match states.
"""

from ..catalog.vocabulary import Ability, CardKind, CardRange
from ..engine_core.state import Card, MatchState, Side, ZoneKind


def make_card(
    catalog_id: int,
    owner: Side = Side.PLAYER,
    strength: int = 5,
    card_range: CardRange = CardRange.MELEE,
    kind: CardKind = CardKind.STANDARD,
    ability: Ability | None = None,
    targets: list[int] | None = None,
    faction: str = "Neutral",
    name: str | None = None,
) -> Card:
    """Build a card instance without going through the catalog."""
    return Card(
        catalog_id=catalog_id,
        owner=owner,
        name=name or f"Card {catalog_id}",
        faction=faction,
        base_strength=strength,
        kind=kind,
        range=card_range,
        ability=ability,
        target_ids=list(targets or []),
    )


def make_special(catalog_id: int, ability: Ability, owner: Side = Side.PLAYER, faction: str = "Special") -> Card:
    """Build a special card (weather, horn, decoy, scorch...)."""
    return make_card(
        catalog_id,
        owner=owner,
        strength=0,
        card_range=CardRange.UNKNOWN,
        kind=CardKind.SPECIAL,
        ability=ability,
        faction=faction,
    )


def put(state: MatchState, card: Card, kind: ZoneKind, side: Side | None = None) -> Card:
    """Place a card directly into a zone, bypassing the transition manager."""
    if kind is ZoneKind.WEATHER:
        state.weather.add(card)
    else:
        state.board(side or card.owner).zone(kind).add(card)
    return card


def zones_holding(state: MatchState, card: Card) -> list[str]:
    """Names of every zone that contains the card."""
    return [zone.name for zone in state.all_zones() if card in zone]
