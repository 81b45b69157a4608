"""
Card Vocabulary - Factions, kinds, ranges and ability tags.

Card data is externally authored JSON, so parsing is tolerant:
- Unknown ranges fall back to CardRange.UNKNOWN (placed on the melee row)
- Unknown abilities fall back to no ability
- Unknown kinds fall back to standard

Every fallback logs a warning and never raises.
"""

from __future__ import annotations
from enum import Enum
import logging

logger = logging.getLogger(__name__)


class Faction(str, Enum):
    """Card factions. Values match the faction strings used in data files."""
    NORTHERN_REALMS = "Northern Realms"
    NILFGAARD = "Nilfgaard"
    SCOIATAEL = "Scoiatael"
    MONSTERS = "Monsters"
    SKELLIGE = "Skellige"
    NEUTRAL = "Neutral"
    SPECIAL = "Special"
    SUMMON = "Summon"


PLAYABLE_FACTIONS: tuple[Faction, ...] = (
    Faction.NORTHERN_REALMS,
    Faction.NILFGAARD,
    Faction.SCOIATAEL,
    Faction.MONSTERS,
    Faction.SKELLIGE,
)


class CardKind(Enum):
    """Card type. Only standard cards are affected by modifiers."""
    STANDARD = "standard"
    HERO = "hero"
    SPECIAL = "special"
    LEADER = "leader"


class CardRange(Enum):
    """Combat range. Agile and unknown ranges are placed on the melee row."""
    MELEE = "melee"
    AGILE = "agile"
    RANGED = "ranged"
    SIEGE = "siege"
    UNKNOWN = "unknown"


class Ability(Enum):
    """Ability tags recognised by the resolver."""
    CLEAR = "clear"
    FROST = "frost"
    FOG = "fog"
    RAIN = "rain"
    STORM = "storm"
    NATURE = "nature"
    WHITE_FROST = "whitefrost"
    AVENGER = "avenger"
    BOND = "bond"
    DECOY = "decoy"
    DRAW_ENEMY_DISCARD = "drawenemydiscard"
    HORN = "horn"
    MARDROEME = "mardroeme"
    MEDIC = "medic"
    MORALE = "morale"
    MORPH = "morph"
    MUSTER = "muster"
    MUSTER_PLUS = "musterplus"
    SCORCH = "scorch"
    SCORCH_ROW = "scorchrow"
    SPY = "spy"

    @property
    def is_weather(self) -> bool:
        return self in WEATHER_ABILITIES


WEATHER_ABILITIES = frozenset({
    Ability.CLEAR,
    Ability.FROST,
    Ability.FOG,
    Ability.RAIN,
    Ability.STORM,
    Ability.NATURE,
    Ability.WHITE_FROST,
})


def parse_faction(value: str | None) -> Faction | None:
    """Parse a faction string. Returns None (with a warning) if unknown."""
    if value is None:
        return None
    try:
        return Faction(value)
    except ValueError:
        logger.warning("Unknown faction '%s'", value)
        return None


def parse_kind(value: str | None) -> CardKind:
    """Parse a card type string, defaulting to standard."""
    try:
        return CardKind((value or "").strip().lower())
    except ValueError:
        logger.warning("Unknown card type '%s', treating as standard", value)
        return CardKind.STANDARD


def parse_range(value: str | None) -> CardRange:
    """Parse a range string, defaulting to UNKNOWN (melee row)."""
    if not value:
        return CardRange.UNKNOWN
    try:
        return CardRange(value.strip().lower())
    except ValueError:
        logger.warning("Unknown range '%s', defaulting to melee row", value)
        return CardRange.UNKNOWN


def parse_ability(value: str | None) -> Ability | None:
    """Parse an ability string. Empty means no ability; unknown logs a warning."""
    if not value:
        return None
    try:
        return Ability(value.strip().lower())
    except ValueError:
        logger.warning("Unknown ability '%s', card will have no ability effect", value)
        return None
