"""
Board Snapshot - Read-only view of the match for one side.

The opponent never reads the live Zone Store while deciding. It captures
copies of the zone contents once per decision and reasons over those.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..catalog.vocabulary import Ability, CardKind, Faction
from ..config import MatchSettings
from ..engine_core import strength
from ..engine_core.state import Card, MatchState, ROW_KINDS, Side, ZoneKind


@dataclass(frozen=True)
class BoardSnapshot:
    """
    Copies of one side's view of the board.

    "own" is the deciding side, "enemy" the other side.
    """
    side: Side
    hand: tuple[Card, ...]
    deck: tuple[Card, ...]
    graveyard: tuple[Card, ...]
    summon_pool: tuple[Card, ...]
    own_rows: dict[ZoneKind, tuple[Card, ...]]
    enemy_rows: dict[ZoneKind, tuple[Card, ...]]
    weather: tuple[Card, ...]
    own_total: int
    enemy_total: int
    own_lives: int
    enemy_lives: int
    own_passed: bool
    enemy_passed: bool
    own_faction: str
    enemy_faction: str
    can_win_draws: bool
    scorch_row_threshold: int = 10
    active_weather: frozenset[Ability] = field(default_factory=frozenset)

    @classmethod
    def capture(cls, state: MatchState, side: Side, settings: MatchSettings) -> BoardSnapshot:
        own = state.board(side)
        enemy = state.board(side.other)
        # Leaders sit in their own zone and are never part of the playable hand.
        hand = tuple(c for c in own.hand if c.kind is not CardKind.LEADER)
        can_win_draws = (
            settings.faction_ability_enabled
            and own.faction == Faction.NILFGAARD.value
            and enemy.faction != Faction.NILFGAARD.value
        )
        return cls(
            side=side,
            hand=hand,
            deck=tuple(own.deck),
            graveyard=tuple(own.graveyard),
            summon_pool=tuple(own.summon_pool),
            own_rows={kind: tuple(own.row(kind)) for kind in ROW_KINDS},
            enemy_rows={kind: tuple(enemy.row(kind)) for kind in ROW_KINDS},
            weather=tuple(state.weather),
            own_total=own.total_strength,
            enemy_total=enemy.total_strength,
            own_lives=own.lives,
            enemy_lives=enemy.lives,
            own_passed=own.has_passed,
            enemy_passed=enemy.has_passed,
            own_faction=own.faction,
            enemy_faction=enemy.faction,
            can_win_draws=can_win_draws,
            scorch_row_threshold=settings.scorch_row_threshold,
            active_weather=frozenset(strength.active_weather(state)),
        )

    @property
    def own_board(self) -> list[Card]:
        return [c for kind in ROW_KINDS for c in self.own_rows[kind]]

    @property
    def enemy_board(self) -> list[Card]:
        return [c for kind in ROW_KINDS for c in self.enemy_rows[kind]]

    def hand_with(self, *abilities: Ability) -> list[Card]:
        return [c for c in self.hand if c.ability in abilities]

    def own_row_strength(self, kind: ZoneKind) -> int:
        return sum(c.current_strength for c in self.own_rows[kind])

    def enemy_row_strength(self, kind: ZoneKind) -> int:
        return sum(c.current_strength for c in self.enemy_rows[kind])

    def has_standard_on_board(self, ability: Ability) -> bool:
        return any(c.is_standard and c.ability is ability for c in self.own_board)

    def is_weathered(self, kind: ZoneKind) -> bool:
        return bool(self.active_weather & strength.ROW_WEATHER[kind])
