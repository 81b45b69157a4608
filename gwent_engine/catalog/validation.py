"""
Catalog Validation - Integrity checks for loaded card data.

Validates that:
1. Names, types and ranges are recognised
2. Ability targets reference cards that exist
3. Muster+ and Avenger targets live in the Summon file
4. Weather cards are special cards
5. Each playable faction has enough cards for a random deck

The engine never refuses to start a match on bad data; this report is
for authors and for the `validate` CLI command.
"""

from __future__ import annotations
from dataclasses import dataclass

from .database import CardCatalog
from .definitions import CardDefinition
from .vocabulary import (
    Ability, CardKind, CardRange, WEATHER_ABILITIES,
)


class CatalogValidationError(Exception):
    """Raised when catalog validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


_SUMMONING_ABILITIES = {Ability.MUSTER_PLUS.value, Ability.AVENGER.value}
_TARGETED_ABILITIES = {
    Ability.MUSTER.value,
    Ability.MUSTER_PLUS.value,
    Ability.AVENGER.value,
    Ability.MORPH.value,
}


def validate_catalog(catalog: CardCatalog, min_deck_size: int = 25) -> ValidationResult:
    """
    Validate every definition in a catalog.

    Returns ValidationResult with errors and warnings.
    """
    errors: list[str] = []
    warnings: list[str] = []

    for skipped in catalog.skipped:
        warnings.append(f"Skipped during load: {skipped}")

    for card in catalog.all_cards():
        errors.extend(_validate_card(card, catalog))
        warnings.extend(_card_warnings(card))

    for faction in catalog.playable_factions():
        pool = catalog.get_by_faction(faction)
        if len(pool) < min_deck_size:
            warnings.append(
                f"Faction '{faction.value}' has {len(pool)} cards, "
                f"fewer than the random deck size {min_deck_size}"
            )
        if not catalog.get_leaders(faction):
            warnings.append(f"Faction '{faction.value}' has no leader cards")

    if not catalog.all_cards():
        warnings.append("No cards loaded - catalog may be incomplete")

    return ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )


def require_valid(catalog: CardCatalog, min_deck_size: int = 25) -> ValidationResult:
    """Validate and raise CatalogValidationError if there are errors."""
    result = validate_catalog(catalog, min_deck_size=min_deck_size)
    if not result.valid:
        raise CatalogValidationError(result.errors)
    return result


def _validate_card(card: CardDefinition, catalog: CardCatalog) -> list[str]:
    """Validate a single card definition against the catalog."""
    errors = []
    if not card.name:
        errors.append(f"Card {card.id} has empty name")

    ability = (card.ability or "").lower()
    if ability in _TARGETED_ABILITIES and not card.target:
        errors.append(f"Card {card.id} '{card.name}' has ability '{ability}' but no target")

    for target in card.target:
        target_card = catalog.get_by_id(target.id)
        if target_card is None:
            errors.append(f"Card {card.id} '{card.name}' targets unknown card {target.id}")
            continue
        if ability in _SUMMONING_ABILITIES and not catalog.is_summon_card(target.id):
            errors.append(
                f"Card {card.id} '{card.name}' summons card {target.id} "
                f"outside the summon pool"
            )

    return errors


def _card_warnings(card: CardDefinition) -> list[str]:
    """Non-fatal issues: values the engine will fall back on."""
    warnings = []
    kinds = {k.value for k in CardKind}
    ranges = {r.value for r in CardRange} - {CardRange.UNKNOWN.value}
    abilities = {a.value for a in Ability}

    if card.type.lower() not in kinds:
        warnings.append(f"Card {card.id} has unknown type '{card.type}' (treated as standard)")
    if card.range and card.range.lower() not in ranges:
        warnings.append(f"Card {card.id} has unknown range '{card.range}' (melee row)")
    if card.ability and card.ability.lower() not in abilities:
        warnings.append(f"Card {card.id} has unknown ability '{card.ability}' (no effect)")

    weather = {a.value for a in WEATHER_ABILITIES}
    if (card.ability or "").lower() in weather and card.type.lower() != CardKind.SPECIAL.value:
        warnings.append(f"Weather card {card.id} '{card.name}' is not a special card")

    return warnings
