"""
Ability Advisors - Candidate plays for the heuristic opponent.

Each advisor looks at one ability family in a BoardSnapshot and either
abstains (returns []) or proposes CardOptions with a score and a reason.
The opponent plays the best-scored option across all advisors.

Advisors:
- weather_clear: Clear when active weather hurts us more than the enemy
- weather_offense: a weather card that hurts the enemy more than us
- decoy: take back a spy, medic or scorch-row unit, or stall when low
- spy: draw cards while the deck has any
- medic: revive the strongest standard card in the graveyard
- avenger: play an Avenger while a later round can receive its summons
- scorch: global scorch when it kills more enemy strength than ours
- scorch_row: row scorch against a strong enough enemy row
- horn: double a row whose gain reaches the horn threshold
- mardroeme: Mardroeme on a row holding Morph units

Scores live in AdvisorScores so play styles can be tuned without
touching the advisors.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Callable
import logging
import random

from ..catalog.vocabulary import Ability, CardKind
from ..engine_core.state import Card, ROW_KINDS, ZoneKind, row_for_range
from ..engine_core.strength import ROW_WEATHER
from ..engine_core.zones import WEATHER_BLOCKERS, WEATHER_OVERRIDES
from .policy import CardOption
from .snapshot import BoardSnapshot

logger = logging.getLogger(__name__)


@dataclass
class AdvisorScores:
    """
    Scores and thresholds used by the advisors.

    Higher values = more urgent plays.
    """
    # Decoy
    decoy_spy: int = 100
    decoy_medic: int = 80
    decoy_scorch_row: int = 50
    decoy_low_hand: int = 30
    low_hand_size: int = 4  # Stall with a decoy below this many cards

    # Card advantage
    spy: int = 100
    medic: int = 70
    avenger: int = 25

    # Removal
    scorch: int = 60
    scorch_row: int = 55

    # Row buffs
    horn: int = 45
    horn_gain_threshold: int = 8  # Strength gained by doubling the row
    mardroeme: int = 10

    # Weather
    weather_clear: int = 65
    weather_offense: int = 40
    weather_gain_threshold: int = 5  # Net enemy strength lost to the weather


Advisor = Callable[[BoardSnapshot, AdvisorScores, random.Random], list[CardOption]]


# -------------------------------------------------------------------------
# Weather
# -------------------------------------------------------------------------

def _weather_loss(rows: dict[ZoneKind, tuple[Card, ...]], kinds: set[ZoneKind]) -> int:
    """Strength standard cards on the given rows lose to the weather clamp."""
    return sum(
        max(c.current_strength - 1, 0)
        for kind in kinds
        for c in rows[kind]
        if c.is_standard
    )


def _rows_hit_by(abilities: set[Ability]) -> set[ZoneKind]:
    return {kind for kind in ROW_KINDS if ROW_WEATHER[kind] & abilities}


def weather_clear(snapshot: BoardSnapshot, scores: AdvisorScores, rng: random.Random) -> list[CardOption]:
    clears = snapshot.hand_with(Ability.CLEAR)
    if not clears or not snapshot.active_weather:
        return []

    hit = _rows_hit_by(set(snapshot.active_weather))
    own_loss = _weather_loss(snapshot.own_rows, hit)
    enemy_loss = _weather_loss(snapshot.enemy_rows, hit)
    if own_loss <= enemy_loss:
        return []
    return [CardOption(
        rng.choice(clears),
        scores.weather_clear,
        f"Clear weather to win back {own_loss - enemy_loss} strength",
    )]


def weather_offense(snapshot: BoardSnapshot, scores: AdvisorScores, rng: random.Random) -> list[CardOption]:
    options = []
    active = set(snapshot.active_weather)
    for card in snapshot.hand:
        if not card.is_weather or card.ability is Ability.CLEAR:
            continue
        if card.ability in active or WEATHER_BLOCKERS.get(card.ability, frozenset()) & active:
            continue

        after = (active - WEATHER_OVERRIDES.get(card.ability, frozenset())) | {card.ability}
        hit = _rows_hit_by(after) - _rows_hit_by(active)
        gain = _weather_loss(snapshot.enemy_rows, hit) - _weather_loss(snapshot.own_rows, hit)
        if gain >= scores.weather_gain_threshold:
            options.append(CardOption(
                card,
                scores.weather_offense,
                f"{card.ability.value} costs the enemy {gain} more strength than us",
            ))
    return options


# -------------------------------------------------------------------------
# Card advantage
# -------------------------------------------------------------------------

def decoy(snapshot: BoardSnapshot, scores: AdvisorScores, rng: random.Random) -> list[CardOption]:
    decoys = snapshot.hand_with(Ability.DECOY)
    if not decoys:
        return []

    # Decoy cards are the same, so just use the first one
    card = decoys[0]
    targets = [c for c in snapshot.own_board if c.kind is not CardKind.HERO and c.ability is not Ability.DECOY]
    options = []

    def pick(ability: Ability | None) -> Card | None:
        pool = [c for c in targets if ability is None or (c.is_standard and c.ability is ability)]
        return rng.choice(pool) if pool else None

    if snapshot.has_standard_on_board(Ability.SPY) and snapshot.deck:
        options.append(CardOption(card, scores.decoy_spy, "Decoy a spy to draw more cards", pick(Ability.SPY)))

    if snapshot.has_standard_on_board(Ability.MEDIC) and snapshot.graveyard:
        options.append(CardOption(card, scores.decoy_medic, "Decoy a medic to play more cards", pick(Ability.MEDIC)))

    if snapshot.has_standard_on_board(Ability.SCORCH_ROW):
        options.append(CardOption(
            card, scores.decoy_scorch_row, "Decoy a scorch row to destroy enemy cards", pick(Ability.SCORCH_ROW),
        ))

    if (
        snapshot.own_total <= snapshot.enemy_total
        and len(snapshot.hand) < scores.low_hand_size
        and snapshot.own_lives == 2
    ):
        target = pick(None)
        if target is not None:
            options.append(CardOption(card, scores.decoy_low_hand, "Decoy a random card to use a turn", target))

    return options


def spy(snapshot: BoardSnapshot, scores: AdvisorScores, rng: random.Random) -> list[CardOption]:
    spies = snapshot.hand_with(Ability.SPY)
    if not spies or not snapshot.deck:
        return []
    return [CardOption(rng.choice(spies), scores.spy, "Spy to draw more cards")]


def medic(snapshot: BoardSnapshot, scores: AdvisorScores, rng: random.Random) -> list[CardOption]:
    medics = snapshot.hand_with(Ability.MEDIC)
    revivable = [c for c in snapshot.graveyard if c.is_standard]
    if not medics or not revivable:
        return []
    target = max(revivable, key=lambda c: (c.base_strength, -c.instance_id))
    return [CardOption(
        rng.choice(medics),
        scores.medic,
        f"Revive {target.name} ({target.base_strength})",
        target_card=target,
    )]


def avenger(snapshot: BoardSnapshot, scores: AdvisorScores, rng: random.Random) -> list[CardOption]:
    # Summons only arrive at the next round start.
    if snapshot.own_lives < 2 and snapshot.enemy_lives < 2:
        return []
    options = []
    for card in snapshot.hand_with(Ability.AVENGER):
        if any(s.matches_target(t) for s in snapshot.summon_pool for t in card.target_ids):
            options.append(CardOption(card, scores.avenger, "Avenger summons carry over to the next round"))
    return options


# -------------------------------------------------------------------------
# Removal
# -------------------------------------------------------------------------

def scorch(snapshot: BoardSnapshot, scores: AdvisorScores, rng: random.Random) -> list[CardOption]:
    scorches = snapshot.hand_with(Ability.SCORCH)
    if not scorches:
        return []

    standard = [c for c in snapshot.own_board + snapshot.enemy_board if c.is_standard]
    if not standard:
        return []
    highest = max(c.current_strength for c in standard)
    if highest <= 0:
        return []

    enemy_loss = sum(c.current_strength for c in snapshot.enemy_board if c.is_standard and c.current_strength == highest)
    own_loss = sum(c.current_strength for c in snapshot.own_board if c.is_standard and c.current_strength == highest)
    if enemy_loss <= own_loss:
        return []
    return [CardOption(
        rng.choice(scorches),
        scores.scorch,
        f"Scorch removes {enemy_loss} enemy strength for {own_loss} of ours",
    )]


def scorch_row(snapshot: BoardSnapshot, scores: AdvisorScores, rng: random.Random) -> list[CardOption]:
    options = []
    for card in snapshot.hand_with(Ability.SCORCH_ROW):
        kind = row_for_range(card.range)
        row = snapshot.enemy_rows[kind]
        if snapshot.enemy_row_strength(kind) < snapshot.scorch_row_threshold:
            continue
        if not any(c.is_standard for c in row):
            continue
        options.append(CardOption(card, scores.scorch_row, f"Scorch the enemy {kind.value} row"))
    return options


# -------------------------------------------------------------------------
# Row buffs
# -------------------------------------------------------------------------

def _horn_gain(row: tuple[Card, ...]) -> int:
    return sum(c.current_strength for c in row if c.is_standard)


def horn(snapshot: BoardSnapshot, scores: AdvisorScores, rng: random.Random) -> list[CardOption]:
    options = []
    for card in snapshot.hand_with(Ability.HORN):
        if card.kind is CardKind.SPECIAL:
            kinds = list(ROW_KINDS)
        else:
            kinds = [row_for_range(card.range)]

        for kind in kinds:
            row = snapshot.own_rows[kind]
            if any(c.ability is Ability.HORN for c in row):
                continue
            gain = _horn_gain(row)
            if gain < scores.horn_gain_threshold:
                continue
            options.append(CardOption(
                card,
                scores.horn,
                f"Horn doubles the {kind.value} row for +{gain}",
                target_row=kind if card.kind is CardKind.SPECIAL else None,
            ))
    return options


def mardroeme(snapshot: BoardSnapshot, scores: AdvisorScores, rng: random.Random) -> list[CardOption]:
    options = []
    for card in snapshot.hand_with(Ability.MARDROEME):
        if card.kind is not CardKind.SPECIAL:
            continue
        for kind in ROW_KINDS:
            if any(c.ability is Ability.MORPH for c in snapshot.own_rows[kind]):
                options.append(CardOption(
                    card, scores.mardroeme, f"Mardroeme on the {kind.value} row", target_row=kind,
                ))
    return options


ADVISORS: list[Advisor] = [
    weather_clear,
    weather_offense,
    decoy,
    spy,
    medic,
    avenger,
    scorch,
    scorch_row,
    horn,
    mardroeme,
]


def collect_options(
    snapshot: BoardSnapshot,
    scores: AdvisorScores,
    rng: random.Random,
    advisors: list[Advisor] | None = None,
) -> list[CardOption]:
    """Run every advisor and gather their options."""
    options: list[CardOption] = []
    for advisor in advisors or ADVISORS:
        found = advisor(snapshot, scores, rng)
        if found:
            logger.debug("%s proposed %s", advisor.__name__, [(o.card.name, o.score) for o in found])
        options.extend(found)
    return options
