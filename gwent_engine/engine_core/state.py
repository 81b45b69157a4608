"""
Match State - The Zone Store and match metadata.

Design principles:
- Mutable: zones are the authoritative collections, changed in place
- Single writer: only the ZoneTransitionManager moves cards between zones
- Identity by (catalog_id, owner): the same catalog card can be in both
  decks without clashing
- Observable: every mutation is announced on the EventBus by the writer
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, NamedTuple

from ..catalog.definitions import CardDefinition
from ..catalog.vocabulary import (
    Ability, CardKind, CardRange, parse_ability, parse_kind, parse_range,
)

# External ids of opponent copies are offset by this much.
OPPONENT_ID_OFFSET = 1000


class Side(Enum):
    """The two sides of a match."""
    PLAYER = "player"
    OPPONENT = "opponent"

    @property
    def other(self) -> Side:
        return Side.OPPONENT if self is Side.PLAYER else Side.PLAYER


class GamePhase(Enum):
    """Phases of the match state machine."""
    START = "start"
    REDRAW_HAND = "redraw_hand"
    ROUND_START = "round_start"
    PLAYER_TURN = "player_turn"
    OPPONENT_TURN = "opponent_turn"
    RESOLVING_CARD = "resolving_card"
    ROUND_END = "round_end"
    GAME_OVER = "game_over"


class ZoneKind(Enum):
    """Zone types. WEATHER is shared, all others belong to one side."""
    DECK = "deck"
    HAND = "hand"
    GRAVEYARD = "graveyard"
    MELEE = "melee"
    RANGED = "ranged"
    SIEGE = "siege"
    SUMMON_POOL = "summon_pool"
    LEADER = "leader"
    WEATHER = "weather"

    @property
    def is_row(self) -> bool:
        return self in ROW_KINDS


ROW_KINDS: tuple[ZoneKind, ...] = (ZoneKind.MELEE, ZoneKind.RANGED, ZoneKind.SIEGE)

# Membership scan order used to resolve a card's current zone.
SCAN_ORDER: tuple[ZoneKind, ...] = (
    ZoneKind.HAND,
    ZoneKind.DECK,
    ZoneKind.GRAVEYARD,
    ZoneKind.MELEE,
    ZoneKind.RANGED,
    ZoneKind.SIEGE,
    ZoneKind.SUMMON_POOL,
    ZoneKind.LEADER,
)


class MatchResult(Enum):
    """Final result, from the player's point of view."""
    WIN = "win"
    LOSE = "lose"
    DRAW = "draw"


def row_for_range(card_range: CardRange) -> ZoneKind:
    """Row a range is placed on. Agile and unknown ranges use melee."""
    if card_range is CardRange.RANGED:
        return ZoneKind.RANGED
    if card_range is CardRange.SIEGE:
        return ZoneKind.SIEGE
    return ZoneKind.MELEE


def catalog_id_from_instance(instance_id: int) -> int:
    """Recover the shared catalog id from an external instance id."""
    return instance_id - OPPONENT_ID_OFFSET if instance_id >= OPPONENT_ID_OFFSET else instance_id


class CardKey(NamedTuple):
    """Identity of a card instance within a match."""
    catalog_id: int
    owner: Side


@dataclass
class Card:
    """
    A card instance in a match.

    Note: This is a runtime clone, not the definition.
    The definition lives in the CardCatalog.
    """
    catalog_id: int
    owner: Side
    name: str = ""
    faction: str = ""
    base_strength: int = 0
    kind: CardKind = CardKind.STANDARD
    range: CardRange = CardRange.UNKNOWN
    ability: Ability | None = None
    target_ids: list[int] = field(default_factory=list)
    image_path: str = ""
    current_strength: int = -1

    def __post_init__(self):
        if self.current_strength < 0:
            self.current_strength = self.base_strength

    @classmethod
    def from_definition(cls, definition: CardDefinition, owner: Side) -> Card:
        """Clone a catalog definition into a match-local instance."""
        return cls(
            catalog_id=definition.id,
            owner=owner,
            name=definition.name,
            faction=definition.faction,
            base_strength=definition.strength,
            kind=parse_kind(definition.type),
            range=parse_range(definition.range),
            ability=parse_ability(definition.ability),
            target_ids=list(definition.target_ids),
            image_path=definition.image_path,
        )

    @property
    def key(self) -> CardKey:
        return CardKey(self.catalog_id, self.owner)

    @property
    def instance_id(self) -> int:
        """External id: opponent copies carry the id offset."""
        if self.owner is Side.OPPONENT:
            return self.catalog_id + OPPONENT_ID_OFFSET
        return self.catalog_id

    @property
    def is_standard(self) -> bool:
        return self.kind is CardKind.STANDARD

    @property
    def is_weather(self) -> bool:
        return self.ability is not None and self.ability.is_weather

    def has_ability(self, *abilities: Ability) -> bool:
        return self.ability in abilities

    def matches_target(self, target_id: int) -> bool:
        """True if a target id (catalog or instance form) refers to this card."""
        return self.catalog_id == catalog_id_from_instance(target_id)

    def reset_strength(self):
        self.current_strength = self.base_strength

    def __hash__(self):
        return hash(self.key)

    def __eq__(self, other):
        if not isinstance(other, Card):
            return False
        return self.key == other.key

    def __repr__(self):
        return f"Card({self.instance_id} {self.name!r} {self.current_strength})"


@dataclass(eq=False)
class Zone:
    """
    An ordered, duplicate-free collection of cards.

    Insertion order carries no meaning; the transition manager re-sorts
    the zone after every mutation.
    """
    kind: ZoneKind
    owner: Side | None = None
    cards: list[Card] = field(default_factory=list)

    @property
    def name(self) -> str:
        if self.owner is None:
            return self.kind.value
        return f"{self.owner.value}_{self.kind.value}"

    @property
    def count(self) -> int:
        return len(self.cards)

    @property
    def is_empty(self) -> bool:
        return len(self.cards) == 0

    @property
    def is_row(self) -> bool:
        return self.kind.is_row

    def add(self, card: Card) -> bool:
        """Add card if absent. Returns False if it was already present."""
        if card in self.cards:
            return False
        self.cards.append(card)
        return True

    def remove(self, card: Card) -> bool:
        """Remove card. Returns False if it was not present."""
        if card not in self.cards:
            return False
        self.cards.remove(card)
        return True

    def snapshot(self) -> list[Card]:
        """Copy of the contents, safe to iterate while moving cards."""
        return list(self.cards)

    def find(self, predicate: Callable[[Card], bool]) -> list[Card]:
        return [c for c in self.cards if predicate(c)]

    def with_ability(self, *abilities: Ability) -> list[Card]:
        return [c for c in self.cards if c.ability in abilities]

    def __contains__(self, card: object) -> bool:
        return card in self.cards

    def __iter__(self) -> Iterator[Card]:
        return iter(self.cards)

    def __len__(self) -> int:
        return len(self.cards)


@dataclass
class SideBoard:
    """All zones and counters of one side."""
    side: Side
    faction: str = ""
    lives: int = 2
    has_passed: bool = False
    redraws_used: int = 0
    zones: dict[ZoneKind, Zone] = field(default_factory=dict)

    def __post_init__(self):
        for kind in ZoneKind:
            if kind is not ZoneKind.WEATHER and kind not in self.zones:
                self.zones[kind] = Zone(kind=kind, owner=self.side)

    def zone(self, kind: ZoneKind) -> Zone:
        return self.zones[kind]

    @property
    def hand(self) -> Zone:
        return self.zones[ZoneKind.HAND]

    @property
    def deck(self) -> Zone:
        return self.zones[ZoneKind.DECK]

    @property
    def graveyard(self) -> Zone:
        return self.zones[ZoneKind.GRAVEYARD]

    @property
    def summon_pool(self) -> Zone:
        return self.zones[ZoneKind.SUMMON_POOL]

    @property
    def leader(self) -> Zone:
        return self.zones[ZoneKind.LEADER]

    def row(self, kind: ZoneKind) -> Zone:
        return self.zones[kind]

    @property
    def rows(self) -> list[Zone]:
        return [self.zones[k] for k in ROW_KINDS]

    def cards_on_board(self) -> list[Card]:
        return [c for row in self.rows for c in row]

    def row_strength(self, kind: ZoneKind) -> int:
        return sum(c.current_strength for c in self.zones[kind])

    @property
    def total_strength(self) -> int:
        return sum(self.row_strength(k) for k in ROW_KINDS)


@dataclass
class RoundRecord:
    """Scores of a finished round."""
    round_number: int
    player_score: int
    opponent_score: int
    winner: Side | None  # None = draw


@dataclass
class MatchState:
    """
    Complete match state.

    Created once per match by the scheduler at START, mutated
    throughout, discarded at GAME_OVER.
    """
    match_id: str
    player: SideBoard = field(default_factory=lambda: SideBoard(side=Side.PLAYER))
    opponent: SideBoard = field(default_factory=lambda: SideBoard(side=Side.OPPONENT))
    weather: Zone = field(default_factory=lambda: Zone(kind=ZoneKind.WEATHER))

    phase: GamePhase = GamePhase.START
    is_player_turn: bool = True
    round_number: int = 0
    round_history: list[RoundRecord] = field(default_factory=list)
    result: MatchResult | None = None
    last_played: Card | None = None

    def board(self, side: Side) -> SideBoard:
        return self.player if side is Side.PLAYER else self.opponent

    @property
    def turn_side(self) -> Side:
        return Side.PLAYER if self.is_player_turn else Side.OPPONENT

    @property
    def is_game_over(self) -> bool:
        return self.phase == GamePhase.GAME_OVER

    def row(self, side: Side, kind: ZoneKind) -> Zone:
        return self.board(side).row(kind)

    def all_rows(self) -> list[Zone]:
        return self.player.rows + self.opponent.rows

    def all_zones(self) -> list[Zone]:
        zones = list(self.player.zones.values()) + list(self.opponent.zones.values())
        zones.append(self.weather)
        return zones

    def all_cards(self) -> list[Card]:
        return [c for zone in self.all_zones() for c in zone]

    def row_strength(self, side: Side, kind: ZoneKind) -> int:
        return self.board(side).row_strength(kind)

    def total_strength(self, side: Side) -> int:
        return self.board(side).total_strength

    def find_zone(self, card: Card | None, side: Side) -> Zone | None:
        """
        Resolve the zone holding a card by membership scan.

        Scans the side's zones in SCAN_ORDER, then the weather zone.
        """
        if card is None:
            return None
        board = self.board(side)
        for kind in SCAN_ORDER:
            zone = board.zones[kind]
            if card in zone:
                return zone
        if card in self.weather:
            return self.weather
        return None

    def locate(self, card: Card | None) -> Zone | None:
        """Find a card anywhere: owner's zones first, then the other side's."""
        if card is None:
            return None
        zone = self.find_zone(card, card.owner)
        if zone is None:
            zone = self.find_zone(card, card.owner.other)
        return zone
