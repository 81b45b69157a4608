"""
Tests for the zone transition manager.

Tests:
- Moves keep every card in exactly one zone
- Row placement (range, spies)
- Weather rules
- Graveyard rules
- Drawing and target lookup
"""

from ..catalog.vocabulary import Ability, CardKind, CardRange
from ..engine_core.events import EventType, SoundCue
from ..engine_core.state import Side, ZoneKind
from .factories import make_card, make_special, put, zones_holding


class TestMove:
    """Tests for the core move."""

    def test_move_keeps_card_in_one_zone(self, state, reducer):
        card = put(state, make_card(123), ZoneKind.HAND)

        assert reducer.zones.move(card, state.player.hand, state.player.row(ZoneKind.MELEE))
        assert zones_holding(state, card) == ["player_melee"]

    def test_move_from_wrong_zone_is_ignored(self, state, reducer):
        """A card not in the source zone is not moved."""
        card = put(state, make_card(123), ZoneKind.DECK)

        moved = reducer.zones.move(card, state.player.hand, state.player.row(ZoneKind.MELEE))

        assert not moved
        assert zones_holding(state, card) == ["player_deck"]

    def test_move_none_is_ignored(self, state, reducer):
        assert not reducer.zones.move(None, state.player.hand, state.player.graveyard)

    def test_move_sorts_destination(self, state, reducer):
        put(state, make_card(1, strength=3), ZoneKind.MELEE)
        put(state, make_card(2, strength=7), ZoneKind.MELEE)
        card = put(state, make_card(3, strength=5), ZoneKind.HAND)

        reducer.zones.move(card, state.player.hand, state.player.row(ZoneKind.MELEE))

        assert [c.catalog_id for c in state.player.row(ZoneKind.MELEE)] == [2, 3, 1]

    def test_move_emits_row_cue(self, state, reducer, bus):
        card = put(state, make_card(112, card_range=CardRange.SIEGE), ZoneKind.HAND)

        reducer.zones.add_card_to_board(card)

        event = bus.history[-1]
        assert event.event_type == EventType.CARD_MOVED
        assert event.cue == SoundCue.CARD_SIEGE
        assert event.to_zone is state.player.row(ZoneKind.SIEGE)

    def test_zone_changed_observer(self, state, reducer, bus):
        seen = []
        bus.on_zone_changed(lambda e: seen.append(e.to_zone.name))
        card = put(state, make_card(123), ZoneKind.HAND)

        reducer.zones.add_card_to_board(card)

        assert seen == ["player_melee"]


class TestPlacement:
    """Tests for row placement."""

    def test_agile_goes_to_melee(self, state, reducer):
        card = put(state, make_card(304, card_range=CardRange.AGILE), ZoneKind.HAND)

        reducer.zones.add_card_to_board(card)

        assert card in state.player.row(ZoneKind.MELEE)

    def test_unknown_range_goes_to_melee(self, state, reducer):
        card = put(state, make_card(77, card_range=CardRange.UNKNOWN), ZoneKind.HAND)

        reducer.zones.add_card_to_board(card)

        assert card in state.player.row(ZoneKind.MELEE)

    def test_spy_lands_on_enemy_row(self, state, reducer):
        """Spies are placed on the row of the side that did not play them."""
        spy = put(state, make_card(109, strength=1, card_range=CardRange.SIEGE, ability=Ability.SPY), ZoneKind.HAND)

        reducer.zones.add_card_to_board(spy)

        assert spy in state.opponent.row(ZoneKind.SIEGE)
        assert spy.owner is Side.PLAYER

    def test_place_on_chosen_row(self, state, reducer):
        horn = put(state, make_special(8, Ability.HORN), ZoneKind.HAND)

        assert reducer.zones.place_on_row(horn, ZoneKind.RANGED)
        assert horn in state.player.row(ZoneKind.RANGED)

    def test_place_on_non_row_is_rejected(self, state, reducer):
        horn = put(state, make_special(8, Ability.HORN), ZoneKind.HAND)

        assert not reducer.zones.place_on_row(horn, ZoneKind.GRAVEYARD)
        assert horn in state.player.hand


class TestWeather:
    """Tests for the shared weather zone."""

    def test_weather_goes_to_shared_zone_and_clamps(self, state, reducer):
        unit = put(state, make_card(123, strength=5), ZoneKind.MELEE)
        frost = put(state, make_special(2, Ability.FROST), ZoneKind.HAND)

        reducer.zones.add_card_to_board(frost)

        assert zones_holding(state, frost) == ["weather"]
        assert unit.current_strength == 1

    def test_duplicate_weather_is_discarded(self, state, reducer):
        put(state, make_special(2, Ability.FROST), ZoneKind.WEATHER)
        second = put(state, make_special(2, Ability.FROST, owner=Side.OPPONENT), ZoneKind.HAND)

        reducer.zones.add_card_to_board(second)

        assert zones_holding(state, second) == []
        assert len(state.weather) == 1

    def test_clear_empties_weather_and_discards_itself(self, state, reducer, bus):
        unit = put(state, make_card(123, strength=5), ZoneKind.MELEE)
        put(state, make_special(2, Ability.FROST), ZoneKind.WEATHER)
        put(state, make_special(4, Ability.RAIN), ZoneKind.WEATHER)
        reducer.zones.refresh_strengths()
        clear = put(state, make_special(1, Ability.CLEAR), ZoneKind.HAND)

        reducer.zones.add_card_to_board(clear)

        assert state.weather.is_empty
        assert zones_holding(state, clear) == []
        assert unit.current_strength == 5
        assert any(e.event_type == EventType.WEATHER_CLEARED for e in bus.history)

    def test_blocked_weather_is_discarded(self, state, reducer):
        """Frost cannot be played while Nature's Wrath is active."""
        nature = put(state, make_special(6, Ability.NATURE), ZoneKind.WEATHER)
        frost = put(state, make_special(2, Ability.FROST), ZoneKind.HAND)

        reducer.zones.add_card_to_board(frost)

        assert list(state.weather) == [nature]
        assert zones_holding(state, frost) == []

    def test_override_removes_covered_weather(self, state, reducer):
        """White Frost replaces Frost and Fog but leaves Rain."""
        put(state, make_special(2, Ability.FROST), ZoneKind.WEATHER)
        rain = put(state, make_special(4, Ability.RAIN), ZoneKind.WEATHER)
        white_frost = put(state, make_special(7, Ability.WHITE_FROST), ZoneKind.HAND)

        reducer.zones.add_card_to_board(white_frost)

        assert set(c.catalog_id for c in state.weather) == {4, 7}
        assert rain in state.weather


class TestGraveyard:
    """Tests for sending cards off the board."""

    def test_standard_goes_to_graveyard(self, state, reducer):
        unit = put(state, make_card(123), ZoneKind.MELEE)

        reducer.zones.send_to_graveyard(unit)

        assert zones_holding(state, unit) == ["player_graveyard"]

    def test_hero_is_discarded(self, state, reducer):
        hero = put(state, make_card(100, strength=10, kind=CardKind.HERO), ZoneKind.MELEE)

        reducer.zones.send_to_graveyard(hero)

        assert zones_holding(state, hero) == []

    def test_special_is_discarded(self, state, reducer):
        horn = put(state, make_special(8, Ability.HORN), ZoneKind.RANGED)

        reducer.zones.send_to_graveyard(horn)

        assert zones_holding(state, horn) == []

    def test_spy_goes_to_row_holders_graveyard(self, state, reducer):
        spy = put(state, make_card(107, ability=Ability.SPY), ZoneKind.MELEE, side=Side.OPPONENT)

        reducer.zones.send_to_graveyard(spy)

        assert zones_holding(state, spy) == ["opponent_graveyard"]

    def test_clear_board(self, state, reducer):
        put(state, make_card(123), ZoneKind.MELEE)
        put(state, make_card(112, card_range=CardRange.SIEGE), ZoneKind.SIEGE)
        put(state, make_card(408, owner=Side.OPPONENT), ZoneKind.MELEE)
        put(state, make_special(2, Ability.FROST), ZoneKind.WEATHER)

        moved = reducer.zones.clear_board()

        assert moved == 3
        assert state.player.cards_on_board() == []
        assert state.opponent.cards_on_board() == []
        assert state.weather.is_empty
        assert state.player.graveyard.count == 2
        assert state.opponent.graveyard.count == 1


class TestDrawing:
    """Tests for random draws and redraws."""

    def test_draw_limited_by_deck(self, state, reducer):
        for cid in (1, 2, 3):
            put(state, make_card(cid), ZoneKind.DECK)

        drawn = reducer.zones.draw_random(Side.PLAYER, 5)

        assert len(drawn) == 3
        assert state.player.deck.is_empty
        assert state.player.hand.count == 3

    def test_redraw_swaps_with_deck(self, state, reducer):
        kept = put(state, make_card(1), ZoneKind.HAND)
        replacement = put(state, make_card(2), ZoneKind.DECK)

        assert reducer.zones.redraw(kept, Side.PLAYER) is replacement
        assert kept in state.player.deck
        assert replacement in state.player.hand


class TestTargetLookup:
    """Target ids match both copies of a catalog card."""

    def test_card_identity_includes_owner(self):
        ours = make_card(12)
        theirs = make_card(12, owner=Side.OPPONENT)

        assert ours != theirs
        assert ours.instance_id == 12
        assert theirs.instance_id == 1012

    def test_target_id_matches_by_search_context(self, state, reducer):
        """Target id 12 finds id 12 or id 1012 depending on the zones searched."""
        ours = put(state, make_card(12), ZoneKind.DECK)
        theirs = put(state, make_card(12, owner=Side.OPPONENT), ZoneKind.DECK)

        find = reducer.zones.find_by_target
        assert find([12], [state.player.deck]) == [ours]
        assert find([12], [state.opponent.deck]) == [theirs]
        assert find([1012], [state.opponent.deck]) == [theirs]
        assert find([12], [state.player.deck, state.opponent.deck]) == [ours, theirs]
