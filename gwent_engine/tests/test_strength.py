"""
Tests for the strength pipeline.

Tests:
- Weather clamp
- Bond, Morale and Horn modifiers
- Only standard cards are modified
- Idempotence
"""

from ..catalog.vocabulary import Ability, CardKind, CardRange
from ..engine_core import strength
from ..engine_core.state import Side, ZoneKind
from .factories import make_card, make_special, put


class TestWeather:
    """Tests for the weather clamp."""

    def test_frost_clamps_melee_standard_to_one(self, state):
        """Frost active, standard melee card of strength 5 becomes 1."""
        put(state, make_special(2, Ability.FROST), ZoneKind.WEATHER)
        unit = put(state, make_card(123, strength=5), ZoneKind.MELEE)

        strength.recompute(state)

        assert unit.current_strength == 1

    def test_frost_spares_heroes_and_other_rows(self, state):
        put(state, make_special(2, Ability.FROST), ZoneKind.WEATHER)
        hero = put(state, make_card(100, strength=10, kind=CardKind.HERO), ZoneKind.MELEE)
        archer = put(state, make_card(119, strength=5, card_range=CardRange.RANGED), ZoneKind.RANGED)

        strength.recompute(state)

        assert hero.current_strength == 10
        assert archer.current_strength == 5

    def test_weather_hits_both_sides(self, state):
        put(state, make_special(4, Ability.RAIN), ZoneKind.WEATHER)
        ours = put(state, make_card(112, strength=6, card_range=CardRange.SIEGE), ZoneKind.SIEGE)
        theirs = put(
            state,
            make_card(414, owner=Side.OPPONENT, strength=6, card_range=CardRange.SIEGE),
            ZoneKind.SIEGE,
        )

        strength.recompute(state)

        assert ours.current_strength == 1
        assert theirs.current_strength == 1

    def test_storm_covers_ranged_and_siege(self, state):
        put(state, make_special(5, Ability.STORM), ZoneKind.WEATHER)

        assert not strength.is_row_weathered(state, ZoneKind.MELEE)
        assert strength.is_row_weathered(state, ZoneKind.RANGED)
        assert strength.is_row_weathered(state, ZoneKind.SIEGE)


class TestBond:
    """Tests for the Bond multiplier."""

    def test_two_bond_cards_double(self, state):
        """Two Bond cards sharing a target: each is base x 2."""
        first = put(state, make_card(104, strength=4, ability=Ability.BOND, targets=[104, 105, 106]), ZoneKind.MELEE)
        second = put(state, make_card(105, strength=4, ability=Ability.BOND, targets=[104, 105, 106]), ZoneKind.MELEE)

        strength.recompute(state)

        assert first.current_strength == 8
        assert second.current_strength == 8

    def test_three_bond_cards_triple(self, state):
        cards = [
            put(state, make_card(cid, strength=4, ability=Ability.BOND, targets=[104, 105, 106]), ZoneKind.MELEE)
            for cid in (104, 105, 106)
        ]

        strength.recompute(state)

        assert [c.current_strength for c in cards] == [12, 12, 12]

    def test_bond_needs_partner_on_same_row(self, state):
        alone = put(state, make_card(110, strength=5, card_range=CardRange.RANGED, ability=Ability.BOND, targets=[110, 111]), ZoneKind.RANGED)
        put(state, make_card(111, strength=5, card_range=CardRange.RANGED, ability=Ability.BOND, targets=[110, 111]), ZoneKind.MELEE)

        strength.recompute(state)

        assert alone.current_strength == 5

    def test_bond_after_weather(self, state):
        put(state, make_special(2, Ability.FROST), ZoneKind.WEATHER)
        first = put(state, make_card(104, strength=4, ability=Ability.BOND, targets=[104, 105]), ZoneKind.MELEE)
        put(state, make_card(105, strength=4, ability=Ability.BOND, targets=[104, 105]), ZoneKind.MELEE)

        strength.recompute(state)

        assert first.current_strength == 2


class TestMoraleAndHorn:
    """Tests for Morale and Horn."""

    def test_horn_doubles_others_not_itself(self, state):
        """Horn card of strength 3 stays 3, a standard 4 becomes 8."""
        horn = put(state, make_card(24, strength=3, ability=Ability.HORN), ZoneKind.MELEE)
        unit = put(state, make_card(123, strength=4), ZoneKind.MELEE)

        strength.recompute(state)

        assert horn.current_strength == 3
        assert unit.current_strength == 8

    def test_two_horns_double_once(self, state):
        put(state, make_card(24, strength=2, ability=Ability.HORN), ZoneKind.MELEE)
        put(state, make_special(8, Ability.HORN), ZoneKind.MELEE)
        unit = put(state, make_card(123, strength=4), ZoneKind.MELEE)

        strength.recompute(state)

        assert unit.current_strength == 8

    def test_horn_special_leaves_heroes(self, state):
        put(state, make_special(8, Ability.HORN), ZoneKind.MELEE)
        hero = put(state, make_card(100, strength=10, kind=CardKind.HERO), ZoneKind.MELEE)

        strength.recompute(state)

        assert hero.current_strength == 10

    def test_morale_boosts_other_standard_cards(self, state):
        morale = put(state, make_card(116, strength=1, card_range=CardRange.SIEGE, ability=Ability.MORALE), ZoneKind.SIEGE)
        unit = put(state, make_card(112, strength=6, card_range=CardRange.SIEGE), ZoneKind.SIEGE)

        strength.recompute(state)

        assert morale.current_strength == 1
        assert unit.current_strength == 7

    def test_morale_then_horn(self, state):
        put(state, make_card(116, strength=1, card_range=CardRange.SIEGE, ability=Ability.MORALE), ZoneKind.SIEGE)
        put(state, make_special(8, Ability.HORN), ZoneKind.SIEGE)
        unit = put(state, make_card(112, strength=6, card_range=CardRange.SIEGE), ZoneKind.SIEGE)

        strength.recompute(state)

        assert unit.current_strength == 14


class TestIdempotence:
    """Recomputing twice gives the same strengths."""

    def test_recompute_twice(self, state):
        put(state, make_special(2, Ability.FROST), ZoneKind.WEATHER)
        put(state, make_card(104, strength=4, ability=Ability.BOND, targets=[104, 105]), ZoneKind.MELEE)
        put(state, make_card(105, strength=4, ability=Ability.BOND, targets=[104, 105]), ZoneKind.MELEE)
        put(state, make_card(24, strength=2, ability=Ability.HORN), ZoneKind.MELEE)
        put(state, make_card(116, strength=1, card_range=CardRange.SIEGE, ability=Ability.MORALE), ZoneKind.SIEGE)
        put(state, make_card(428, owner=Side.OPPONENT, strength=2), ZoneKind.MELEE)

        strength.recompute(state)
        first = strength.strength_snapshot(state)
        strength.recompute(state)

        assert strength.strength_snapshot(state) == first

    def test_totals(self, state):
        put(state, make_card(123, strength=5), ZoneKind.MELEE)
        put(state, make_card(119, strength=4, card_range=CardRange.RANGED), ZoneKind.RANGED)

        strength.recompute(state)

        assert state.total_strength(Side.PLAYER) == 9
        assert state.total_strength(Side.OPPONENT) == 0
