"""
Ability Resolver - Triggered effects of cards entering a row.

Called by the ZoneTransitionManager once per card entering a row. The
whole chain started by one played card (muster summons resolving their
own musters, scorches, draws) runs synchronously to completion.

Ability effects:
- Spy / DrawEnemyDiscard: the acting side draws `spy_draw_amount` cards
- Muster: matching cards from hand and deck are played too
- Muster+: matching cards from the summon pool are played
- Scorch: every standard card at the global max strength is destroyed
- ScorchRow: max-strength standard cards of the opposing row are
  destroyed if that row is strong enough
- Medic: a chosen standard card from the graveyard is played again
- Decoy: the chosen target is recorded; no swap is performed
- Avenger: summons are queued when the card leaves the board and
  released at the next round start
- Bond / Horn / Morale / Mardroeme / Morph: strength pipeline only

A per-round guard keyed by (card, acting side) ensures each card
resolves at most once per round for a side.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable
import logging
import random

from ..catalog.vocabulary import Ability, CardKind
from ..config import MatchSettings
from .events import EventBus, EventType, GameEvent, SoundCue
from .state import Card, CardKey, MatchState, Side, ZoneKind, row_for_range
from .zones import ZoneTransitionManager

logger = logging.getLogger(__name__)


@dataclass
class ResolutionReport:
    """What one card's ability did."""
    card: Card
    ability: Ability
    actor: Side | None = None
    summoned: list[Card] = field(default_factory=list)
    destroyed: list[Card] = field(default_factory=list)
    drawn: list[Card] = field(default_factory=list)
    target: Card | None = None

    def describe(self) -> str:
        parts = [f"{self.card.name}: {self.ability.value}"]
        if self.summoned:
            parts.append(f"summoned {', '.join(c.name for c in self.summoned)}")
        if self.destroyed:
            parts.append(f"destroyed {', '.join(c.name for c in self.destroyed)}")
        if self.drawn:
            parts.append(f"drew {len(self.drawn)}")
        if self.target is not None:
            parts.append(f"target {self.target.name}")
        return " - ".join(parts)


@dataclass
class AbilityResolver:
    """
    Resolves card abilities.

    Usage:
        resolver = AbilityResolver(state, zones, settings, bus)
        resolver.set_target(medic_card, graveyard_card)
        zones.add_card_to_board(medic_card, actor=Side.PLAYER)  # triggers resolve()
        delay = resolver.drain_pacing()
    """
    state: MatchState
    zones: ZoneTransitionManager
    settings: MatchSettings
    bus: EventBus
    rng: random.Random = None  # type: ignore

    resolved: set[CardKey] = field(default_factory=set)
    queued_avengers: dict[Side, list[Card]] = field(
        default_factory=lambda: {Side.PLAYER: [], Side.OPPONENT: []}
    )
    pending_targets: dict[CardKey, Card] = field(default_factory=dict)
    reports: list[ResolutionReport] = field(default_factory=list)
    pacing: float = 0.0

    def __post_init__(self):
        if self.rng is None:
            self.rng = self.zones.rng
        self.zones.attach_resolver(self)

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def reset_round(self):
        """Clear the re-entrancy guard. Called once at each round start."""
        self.resolved.clear()

    def set_target(self, card: Card, target: Card | None):
        """Record the board or graveyard card chosen for a Medic or Decoy."""
        if target is not None:
            self.pending_targets[card.key] = target

    def drain_pacing(self) -> float:
        """Presentation delay requested since the last drain."""
        pacing, self.pacing = self.pacing, 0.0
        return pacing

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve(self, card: Card, actor: Side | None = None) -> ResolutionReport | None:
        """
        Resolve the ability of a card that just entered a row.

        The actor is the side that put the card there (its owner unless a
        Medic revived it from the other side's graveyard). Draws, summons
        and enemy rows are all taken from the actor's point of view.
        """
        if card.ability is None:
            return None
        actor = actor or card.owner
        guard = CardKey(card.catalog_id, actor)
        if guard in self.resolved:
            logger.debug("%s already resolved this round", card)
            return None
        self.resolved.add(guard)

        report = ResolutionReport(card=card, ability=card.ability, actor=actor)
        handler = self._get_handler(card.ability)
        if handler is not None:
            self.pacing += self.settings.ability_trigger_delay
            handler(card, actor, report)
            self.bus.emit(GameEvent(
                event_type=EventType.ABILITY_TRIGGERED,
                side=actor,
                card=card,
                cue=_ability_cue(card.ability),
                message=report.describe(),
                data={"ability": card.ability.value},
            ))
        self.reports.append(report)
        return report

    def _get_handler(self, ability: Ability) -> Callable[[Card, Side, ResolutionReport], None] | None:
        handlers = {
            Ability.SPY: self._handle_draw,
            Ability.DRAW_ENEMY_DISCARD: self._handle_draw,
            Ability.MUSTER: self._handle_muster,
            Ability.MUSTER_PLUS: self._handle_muster,
            Ability.SCORCH: self._handle_scorch,
            Ability.SCORCH_ROW: self._handle_scorch_row,
            Ability.MEDIC: self._handle_medic,
            Ability.DECOY: self._handle_decoy,
        }
        return handlers.get(ability)

    def _handle_draw(self, card: Card, actor: Side, report: ResolutionReport):
        report.drawn = self.zones.draw_random(actor, self.settings.spy_draw_amount)

    def _handle_muster(self, card: Card, actor: Side, report: ResolutionReport):
        board = self.state.board(actor)
        if card.ability is Ability.MUSTER_PLUS:
            allowed = {ZoneKind.SUMMON_POOL}
            search = [board.summon_pool]
        else:
            allowed = {ZoneKind.HAND, ZoneKind.DECK}
            search = [board.hand, board.deck]

        for target in self.zones.find_by_target(card.target_ids, search):
            # An earlier summon in this chain may already have moved it.
            source = self.state.find_zone(target, actor)
            if source is None or source.kind not in allowed:
                continue
            self.pacing += self.settings.card_summon_delay
            if self.zones.add_card_to_board(target, source, actor=actor):
                report.summoned.append(target)

    def _handle_scorch(self, card: Card, actor: Side, report: ResolutionReport):
        self.zones.refresh_strengths()
        candidates = [
            (side, c)
            for side in (Side.PLAYER, Side.OPPONENT)
            for row in self.state.board(side).rows
            for c in row
            if c.is_standard
        ]
        if candidates:
            highest = max(c.current_strength for _, c in candidates)
            if highest > 0:
                for side, victim in candidates:
                    if victim.current_strength == highest and self.zones.send_to_graveyard(victim, side):
                        report.destroyed.append(victim)

        if card.kind is CardKind.SPECIAL and self.state.locate(card) is not None:
            self.zones.discard(card)

    def _handle_scorch_row(self, card: Card, actor: Side, report: ResolutionReport):
        enemy = actor.other
        row = self.state.row(enemy, row_for_range(card.range))
        self.zones.refresh_strengths()

        total = sum(c.current_strength for c in row)
        if total < self.settings.scorch_row_threshold:
            logger.debug("%s row strength %d below %d, no effect", row.name, total, self.settings.scorch_row_threshold)
            return

        standard = [c for c in row if c.is_standard]
        if not standard:
            return
        highest = max(c.current_strength for c in standard)
        for victim in standard:
            if victim.current_strength == highest and self.zones.send_to_graveyard(victim, enemy):
                report.destroyed.append(victim)

    def _handle_medic(self, card: Card, actor: Side, report: ResolutionReport):
        target = self.pending_targets.pop(card.key, None)
        if target is None:
            logger.debug("%s played without a revive target", card)
            return
        graveyard = self.state.board(actor).graveyard
        if target not in graveyard or not target.is_standard:
            logger.warning("Medic target %s is not a standard card in the graveyard", target)
            return
        self.pacing += self.settings.card_summon_delay
        report.target = target
        if self.zones.add_card_to_board(target, graveyard, actor=actor):
            report.summoned.append(target)

    def _handle_decoy(self, card: Card, actor: Side, report: ResolutionReport):
        # Swap-with-hand is not automated; only the chosen target is recorded.
        report.target = self.pending_targets.pop(card.key, None)
        if report.target is not None:
            logger.info("Decoy %s targets %s (no swap performed)", card, report.target)

    # -------------------------------------------------------------------------
    # Avengers
    # -------------------------------------------------------------------------

    def queue_avenger(self, card: Card):
        """Queue the summons of an Avenger card leaving the board."""
        if not card.target_ids:
            logger.warning("Avenger %s has no target defined", card)
            return
        pool = self.state.board(card.owner).summon_pool
        targets = self.zones.find_by_target(card.target_ids, [pool])
        if not targets:
            logger.warning("Avenger %s targets not found in summon pool", card)
            return
        queue = self.queued_avengers[card.owner]
        for target in targets:
            if target not in queue:
                queue.append(target)
        logger.debug("Queued avenger summons %s", targets)

    def release_avengers(self) -> list[Card]:
        """Play every queued avenger summon (player first), then clear the queue."""
        released = []
        for side in (Side.PLAYER, Side.OPPONENT):
            for target in self.queued_avengers[side]:
                source = self.state.find_zone(target, target.owner)
                if source is None or source.kind is not ZoneKind.SUMMON_POOL:
                    continue
                self.pacing += self.settings.card_summon_delay
                if self.zones.add_card_to_board(target, source, actor=side):
                    released.append(target)
            self.queued_avengers[side].clear()
        if released:
            self.bus.emit(GameEvent(
                event_type=EventType.ABILITY_TRIGGERED,
                cue=SoundCue.CARD_SUMMON,
                message=f"Avengers summoned: {', '.join(c.name for c in released)}",
                data={"ability": Ability.AVENGER.value},
            ))
        return released


def _ability_cue(ability: Ability) -> SoundCue | None:
    if ability in (Ability.SPY, Ability.DRAW_ENEMY_DISCARD):
        return SoundCue.CARD_SPY
    if ability in (Ability.MUSTER, Ability.MUSTER_PLUS, Ability.MEDIC):
        return SoundCue.CARD_SUMMON
    return None
