"""
Strength Pipeline - Recomputes every card strength on the board.

Always a full recomputation over all six rows, never incremental:
1. Reset current strength to base strength
2. Weather: standard cards on affected rows are clamped to 1
3. Bond: standard Bond cards multiplied by (1 + matching partners on the row)
4. Morale: standard cards +1 per other Morale card on the row
5. Horn: standard cards doubled once if another card on the row has Horn

Only standard cards are modified. Running the pipeline twice in a row
gives the same result.
"""

from __future__ import annotations

from ..catalog.vocabulary import Ability
from .state import Card, MatchState, Zone, ZoneKind

# Weather abilities affecting each row.
ROW_WEATHER: dict[ZoneKind, frozenset[Ability]] = {
    ZoneKind.MELEE: frozenset({Ability.FROST, Ability.NATURE, Ability.WHITE_FROST}),
    ZoneKind.RANGED: frozenset({Ability.FOG, Ability.STORM, Ability.WHITE_FROST}),
    ZoneKind.SIEGE: frozenset({Ability.RAIN, Ability.STORM, Ability.NATURE}),
}


def active_weather(state: MatchState) -> set[Ability]:
    return {c.ability for c in state.weather if c.ability is not None}


def is_row_weathered(state: MatchState, row: ZoneKind) -> bool:
    return bool(active_weather(state) & ROW_WEATHER.get(row, frozenset()))


def recompute(state: MatchState) -> None:
    """Recompute current strength of every card on every row."""
    weather = active_weather(state)
    for row in state.all_rows():
        recompute_row(row, weather)


def recompute_row(row: Zone, weather: set[Ability]) -> None:
    """Run the pipeline for one row given the active weather abilities."""
    cards = row.cards

    for card in cards:
        card.reset_strength()

    if weather & ROW_WEATHER.get(row.kind, frozenset()):
        for card in cards:
            if card.is_standard:
                card.current_strength = 1

    for card in cards:
        if card.is_standard and card.ability is Ability.BOND:
            partners = sum(1 for other in cards if other is not card and _is_bond_partner(card, other))
            card.current_strength *= 1 + partners

    morale_sources = [c for c in cards if c.ability is Ability.MORALE]
    if morale_sources:
        for card in cards:
            if card.is_standard:
                card.current_strength += sum(1 for m in morale_sources if m is not card)

    horns = [c for c in cards if c.ability is Ability.HORN]
    if horns:
        for card in cards:
            if card.is_standard and any(h is not card for h in horns):
                card.current_strength *= 2


def _is_bond_partner(card: Card, other: Card) -> bool:
    """Other card is one of this card's targets, or a Bond card sharing a target."""
    if any(other.matches_target(t) for t in card.target_ids):
        return True
    if other.ability is Ability.BOND:
        return bool(set(card.target_ids) & set(other.target_ids))
    return False


def row_strength(row: Zone) -> int:
    return sum(c.current_strength for c in row)


def strength_snapshot(state: MatchState) -> dict[tuple, int]:
    """Current strengths keyed by (card key, row name), for comparisons."""
    return {(c.key, row.name): c.current_strength for row in state.all_rows() for c in row}
