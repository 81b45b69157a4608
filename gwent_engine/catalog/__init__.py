"""
Catalog module - Read-only card definitions.

Provides:
- CardDefinition / FactionFile: data file schema
- CardCatalog: loader and lookups by id or faction
- validate_catalog: integrity report for authored data
"""

from .vocabulary import (
    Faction, CardKind, CardRange, Ability, PLAYABLE_FACTIONS, WEATHER_ABILITIES,
)
from .definitions import CardDefinition, CardTarget, FactionFile
from .database import CardCatalog
from .validation import validate_catalog, ValidationResult, CatalogValidationError

__all__ = [
    "Faction",
    "CardKind",
    "CardRange",
    "Ability",
    "PLAYABLE_FACTIONS",
    "WEATHER_ABILITIES",
    "CardDefinition",
    "CardTarget",
    "FactionFile",
    "CardCatalog",
    "validate_catalog",
    "ValidationResult",
    "CatalogValidationError",
]
