"""
Zone Transition Manager - The only writer of the Zone Store.

Every card movement goes through move(), which:
1. No-ops with a warning if the card is not in the zone it is believed to occupy
2. Removes the card, resets its strength, inserts it into the destination
3. Re-sorts the destination with the ordering policy
4. Recomputes strengths if a row or the weather zone changed
5. Emits a presentation event (with audio cue)
6. Invokes the AbilityResolver when the destination is a row

Placement rules:
- Row by range: melee and agile on melee, unknown on melee (warning)
- Spy cards land on the row of the side that did not play them
- Weather cards go to the shared weather zone (with clear/duplicate/
  blocking/override rules)
- Only standard cards reach a graveyard; others are discarded
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, TYPE_CHECKING
import logging
import random

from ..catalog.vocabulary import Ability, CardKind, CardRange
from . import strength
from .events import EventBus, EventType, GameEvent, SoundCue
from .ordering import sort_zone_in_place
from .state import Card, MatchState, Side, Zone, ZoneKind, row_for_range

if TYPE_CHECKING:
    from .abilities import AbilityResolver

logger = logging.getLogger(__name__)

# A new weather card is discarded if any of these is already active.
WEATHER_BLOCKERS: dict[Ability, frozenset[Ability]] = {
    Ability.FROST: frozenset({Ability.NATURE, Ability.WHITE_FROST}),
    Ability.FOG: frozenset({Ability.STORM, Ability.WHITE_FROST}),
    Ability.RAIN: frozenset({Ability.STORM, Ability.NATURE}),
}

# A new weather card removes these from the weather zone.
WEATHER_OVERRIDES: dict[Ability, frozenset[Ability]] = {
    Ability.STORM: frozenset({Ability.FOG, Ability.RAIN}),
    Ability.NATURE: frozenset({Ability.FROST, Ability.RAIN}),
    Ability.WHITE_FROST: frozenset({Ability.FROST, Ability.FOG}),
}

_ROW_CUES = {
    ZoneKind.MELEE: SoundCue.CARD_MELEE,
    ZoneKind.RANGED: SoundCue.CARD_RANGED,
    ZoneKind.SIEGE: SoundCue.CARD_SIEGE,
}


@dataclass
class ZoneTransitionManager:
    """
    Moves cards between zones and keeps derived state consistent.

    Usage:
        zones = ZoneTransitionManager(state, bus, rng)
        zones.attach_resolver(resolver)
        zones.add_card_to_board(card, actor=Side.PLAYER)
    """
    state: MatchState
    bus: EventBus
    rng: random.Random = None  # type: ignore
    resolver: AbilityResolver | None = None

    def __post_init__(self):
        if self.rng is None:
            self.rng = random.Random()

    def attach_resolver(self, resolver: AbilityResolver):
        self.resolver = resolver

    # -------------------------------------------------------------------------
    # Core move
    # -------------------------------------------------------------------------

    def move(
        self,
        card: Card | None,
        from_zone: Zone | None,
        to_zone: Zone,
        resolve: bool = True,
        actor: Side | None = None,
    ) -> bool:
        """
        Move a card between zones.

        `actor` is the side whose play caused the move; a card entering a
        row resolves its ability on behalf of that side (its owner by
        default).

        Returns False (and changes nothing) if the card is missing or is not
        in from_zone.
        """
        if card is None:
            logger.warning("Move requested with no card (to %s)", to_zone.name)
            return False
        if from_zone is None or card not in from_zone:
            logger.warning(
                "Card %s not found in %s, move to %s ignored",
                card, from_zone.name if from_zone else "any zone", to_zone.name,
            )
            return False

        from_zone.remove(card)
        card.reset_strength()
        to_zone.add(card)
        sort_zone_in_place(to_zone.cards)

        if _affects_strength(from_zone) or _affects_strength(to_zone):
            self.refresh_strengths()

        logger.debug("%s: %s -> %s", card, from_zone.name, to_zone.name)
        event_type = EventType.WEATHER_SHOWN if to_zone.kind is ZoneKind.WEATHER else EventType.CARD_MOVED
        self.bus.emit(GameEvent(
            event_type=event_type,
            side=card.owner,
            card=card,
            from_zone=from_zone,
            to_zone=to_zone,
            cue=_cue_for(card, to_zone),
            message=f"{card.name} moved to {to_zone.name}",
        ))

        if to_zone.is_row and resolve and self.resolver is not None:
            self.resolver.resolve(card, actor or card.owner)
        return True

    def discard(self, card: Card | None) -> bool:
        """Remove a card from every zone. It leaves the match."""
        if card is None:
            logger.warning("Discard requested with no card")
            return False

        removed_from = [zone for zone in self.state.all_zones() if zone.remove(card)]
        if not removed_from:
            logger.warning("Card %s not found in any zone, discard ignored", card)
            return False

        if any(_affects_strength(z) for z in removed_from):
            self.refresh_strengths()

        self.bus.emit(GameEvent(
            event_type=EventType.CARD_DISCARDED,
            side=card.owner,
            card=card,
            from_zone=removed_from[0],
            message=f"{card.name} discarded",
        ))
        return True

    def refresh_strengths(self):
        """Run the strength pipeline and re-sort the rows."""
        strength.recompute(self.state)
        for row in self.state.all_rows():
            sort_zone_in_place(row.cards)

    # -------------------------------------------------------------------------
    # Placement
    # -------------------------------------------------------------------------

    def target_row(self, card: Card, actor: Side | None = None) -> Zone:
        """Row a card is placed on when played without an explicit target."""
        if card.range is CardRange.UNKNOWN and card.kind is not CardKind.SPECIAL:
            logger.warning("Card %s has no usable range, placing on melee row", card)
        actor = actor or card.owner
        side = actor.other if card.ability is Ability.SPY else actor
        return self.state.row(side, row_for_range(card.range))

    def add_card_to_board(
        self,
        card: Card | None,
        source: Zone | None = None,
        actor: Side | None = None,
    ) -> bool:
        """
        Play a card: weather to the weather zone, everything else to its row.

        The actor defaults to the card's owner. The source zone defaults to
        a membership scan of the actor's zones, then the other side's.
        """
        if card is None:
            logger.warning("Play requested with no card")
            return False
        actor = actor or card.owner
        if source is None:
            source = self.state.find_zone(card, actor) or self.state.locate(card)
        if card.is_weather:
            return self.play_weather(card, source, actor)
        return self.move(card, source, self.target_row(card, actor), actor=actor)

    def place_on_row(
        self,
        card: Card,
        row: ZoneKind,
        source: Zone | None = None,
        actor: Side | None = None,
    ) -> bool:
        """Play a card onto an explicitly chosen row of the actor."""
        if not row.is_row:
            logger.warning("%s is not a row, %s not placed", row.value, card)
            return False
        actor = actor or card.owner
        if source is None:
            source = self.state.find_zone(card, actor) or self.state.locate(card)
        return self.move(card, source, self.state.row(actor, row), actor=actor)

    def play_weather(self, card: Card, source: Zone | None = None, actor: Side | None = None) -> bool:
        """
        Put a weather card into the shared weather zone.

        - Clear empties the weather zone, then is discarded itself
        - A weather ability that is already active is discarded
        - Blocked weather (see WEATHER_BLOCKERS) is discarded
        - Otherwise overridden weather is removed and the card is added
        """
        if source is None:
            source = self.state.find_zone(card, card.owner)
        if source is None or card not in source:
            logger.warning("Weather card %s not found, play ignored", card)
            return False

        weather = self.state.weather
        active = {w.ability for w in weather}

        if card.ability is Ability.CLEAR:
            for existing in weather.snapshot():
                self.discard(existing)
            self.bus.emit(GameEvent(
                event_type=EventType.WEATHER_CLEARED,
                side=actor or card.owner,
                card=card,
                message="Weather cleared",
            ))
            return self.discard(card)

        if card.ability in active:
            logger.debug("%s already active, discarding %s", card.ability.value, card)
            return self.discard(card)

        if WEATHER_BLOCKERS.get(card.ability, frozenset()) & active:
            logger.debug("%s blocked by active weather, discarding", card)
            return self.discard(card)

        overridden = WEATHER_OVERRIDES.get(card.ability, frozenset())
        for existing in weather.snapshot():
            if existing.ability in overridden:
                self.discard(existing)

        return self.move(card, source, weather, resolve=False)

    # -------------------------------------------------------------------------
    # Graveyard
    # -------------------------------------------------------------------------

    def send_to_graveyard(self, card: Card | None, side: Side | None = None) -> bool:
        """
        Send a card off the board.

        Avenger cards queue their summons and are discarded. Standard cards go
        to the graveyard of the side whose zone held them (or `side`). All
        other kinds are discarded.
        """
        zone = self.state.locate(card)
        if card is None or zone is None:
            logger.warning("Card %s not found, cannot send to graveyard", card)
            return False

        if card.ability is Ability.AVENGER:
            if self.resolver is not None:
                self.resolver.queue_avenger(card)
            return self.discard(card)

        if not card.is_standard:
            return self.discard(card)

        owner = side or zone.owner or card.owner
        return self.move(card, zone, self.state.board(owner).graveyard)

    def move_row_to_graveyard(self, side: Side, row: ZoneKind) -> int:
        """Clear one row. Iterates a snapshot of the row."""
        moved = 0
        for card in self.state.row(side, row).snapshot():
            if self.send_to_graveyard(card, side):
                moved += 1
        return moved

    def clear_board(self) -> int:
        """Send every row of both sides to the graveyards and clear weather."""
        moved = 0
        for side in (Side.PLAYER, Side.OPPONENT):
            for row in (ZoneKind.MELEE, ZoneKind.RANGED, ZoneKind.SIEGE):
                moved += self.move_row_to_graveyard(side, row)
        if not self.state.weather.is_empty:
            for card in self.state.weather.snapshot():
                self.discard(card)
            self.bus.emit(GameEvent(event_type=EventType.WEATHER_CLEARED, message="Weather cleared"))
        return moved

    # -------------------------------------------------------------------------
    # Drawing
    # -------------------------------------------------------------------------

    def draw_random(self, side: Side, count: int) -> list[Card]:
        """Draw up to `count` cards uniformly at random from the side's deck."""
        board = self.state.board(side)
        drawn = []
        for _ in range(count):
            if board.deck.is_empty:
                logger.debug("%s deck empty, drew %d of %d", side.value, len(drawn), count)
                break
            card = self.rng.choice(board.deck.cards)
            if self.move(card, board.deck, board.hand):
                drawn.append(card)
        return drawn

    def redraw(self, card: Card, side: Side) -> Card | None:
        """Swap a hand card for a random deck card."""
        board = self.state.board(side)
        if card not in board.hand:
            logger.warning("Card %s not in %s hand, redraw ignored", card, side.value)
            return None
        if board.deck.is_empty:
            logger.warning("%s deck empty, redraw ignored", side.value)
            return None
        replacement = self.rng.choice(board.deck.cards)
        self.move(replacement, board.deck, board.hand)
        self.move(card, board.hand, board.deck)
        return replacement

    # -------------------------------------------------------------------------
    # Target lookup
    # -------------------------------------------------------------------------

    @staticmethod
    def find_by_target(target_ids: Iterable[int], zones: Iterable[Zone]) -> list[Card]:
        """
        Distinct cards in the zones matching any target id.

        Target ids match on catalog id, so id 12 finds both the player's
        card 12 and the opponent's copy (external id 1012).
        """
        ids = list(target_ids)
        found: list[Card] = []
        for zone in zones:
            for card in zone.snapshot():
                if card not in found and any(card.matches_target(t) for t in ids):
                    found.append(card)
        return found


def _affects_strength(zone: Zone) -> bool:
    return zone.is_row or zone.kind is ZoneKind.WEATHER


def _cue_for(card: Card, zone: Zone) -> SoundCue | None:
    if zone.is_row:
        if card.kind is CardKind.HERO:
            return SoundCue.CARD_HERO
        return _ROW_CUES[zone.kind]
    if zone.kind is ZoneKind.DECK:
        return SoundCue.REDRAW_CARD
    return None
