"""
Tests for the targeting gateway.
"""

import random

import pytest

from ..definitions.effect_dsl import EffectDefinition, EffectKind, TargetKind
from ..engine_core.targeting import TargetingGateway, requires_selection, selection_cap


@pytest.fixture
def gateway(catalog):
    return TargetingGateway(catalog, random.Random(3))


class TestClassification:
    """Tests for selection vs automatic target kinds."""

    @pytest.mark.parametrize("target", [
        TargetKind.HAND_CARD,
        TargetKind.HAND_TREASURE,
        TargetKind.HAND_POLLUTION,
        TargetKind.HAND_ACTION,
    ])
    def test_hand_targets_need_selection(self, target):
        assert requires_selection(target)

    @pytest.mark.parametrize("target", [
        TargetKind.NONE,
        TargetKind.SELF,
        TargetKind.ALL_HAND_TREASURE,
        TargetKind.ALL_HAND_POLLUTION,
        TargetKind.DECK_TOP,
        TargetKind.RANDOM,
    ])
    def test_other_targets_are_automatic(self, target):
        assert not requires_selection(target)

    def test_zero_max_targets_caps_at_candidates(self):
        """max_targets=0 with four candidates allows all four."""
        effect = EffectDefinition(kind=EffectKind.SETTLE_CARD, target=TargetKind.HAND_TREASURE)
        assert selection_cap(effect, 4) == 4

    def test_declared_cap(self):
        effect = EffectDefinition(kind=EffectKind.SETTLE_CARD, target=TargetKind.HAND_TREASURE, max_targets=2)
        assert selection_cap(effect, 4) == 2


class TestCandidates:
    """Tests for selectable hand cards."""

    def test_filters_by_type_in_hand_order(self, gateway, make_state):
        state = make_state(hand=["copper", "smelting", "silver", "curse"])
        effect = EffectDefinition(kind=EffectKind.SETTLE_CARD, target=TargetKind.HAND_TREASURE)
        candidates = gateway.selectable_cards(effect, state)
        assert [c.card_id for c in candidates] == ["copper", "silver"]

    def test_hand_card_takes_everything(self, gateway, make_state):
        state = make_state(hand=["copper", "smelting", "curse"])
        effect = EffectDefinition(kind=EffectKind.DESTROY_CARD, target=TargetKind.HAND_CARD)
        assert len(gateway.selectable_cards(effect, state)) == 3

    def test_upgrade_skips_temporary_cards(self, gateway, make_state):
        """Temporary treasures cannot be upgraded permanently."""
        state = make_state(hand=["copper"])
        temp = state.new_card("silver", is_temporary=True)
        state.hand.append(temp)

        upgrade = EffectDefinition(kind=EffectKind.PERMANENT_UPGRADE, target=TargetKind.HAND_TREASURE)
        boost = EffectDefinition(kind=EffectKind.BOOST_TREASURE, target=TargetKind.HAND_TREASURE)
        assert temp not in gateway.selectable_cards(upgrade, state)
        assert temp in gateway.selectable_cards(boost, state)

    def test_build_request(self, gateway, make_state):
        state = make_state(hand=["copper", "silver", "gold_coin", "emerald"])
        effect = EffectDefinition(kind=EffectKind.SETTLE_CARD, target=TargetKind.HAND_TREASURE)
        request = gateway.build_request(effect, gateway.selectable_cards(effect, state))
        assert request.max_selections == 4
        assert request.candidate_ids == [c.instance_id for c in state.hand]
        assert request.effect_kind == EffectKind.SETTLE_CARD


class TestAutoTargets:
    """Tests for automatically collected targets."""

    def test_all_hand_treasure(self, gateway, make_state):
        state = make_state(hand=["copper", "curse", "silver"])
        effect = EffectDefinition(kind=EffectKind.SETTLE_CARD, target=TargetKind.ALL_HAND_TREASURE)
        assert [c.card_id for c in gateway.auto_targets(effect, state, None)] == ["copper", "silver"]

    def test_self_is_source_card(self, gateway, make_state):
        state = make_state()
        source = state.new_card("smelting")
        effect = EffectDefinition(kind=EffectKind.DESTROY_CARD, target=TargetKind.SELF)
        assert gateway.auto_targets(effect, state, source) == [source]
        assert gateway.auto_targets(effect, state, None) == []

    def test_deck_top(self, gateway, make_state):
        state = make_state(deck=["silver", "copper"])
        effect = EffectDefinition(kind=EffectKind.DESTROY_CARD, target=TargetKind.DECK_TOP)
        assert gateway.auto_targets(effect, state, None) == [state.deck[0]]
        assert gateway.auto_targets(effect, make_state(), None) == []

    def test_random_picks_from_hand(self, gateway, make_state):
        state = make_state(hand=["copper", "silver", "curse"])
        effect = EffectDefinition(kind=EffectKind.DESTROY_CARD, target=TargetKind.RANDOM, max_targets=2)
        picked = gateway.auto_targets(effect, state, None)
        assert len(picked) == 2
        assert all(card in state.hand for card in picked)

    def test_none_has_no_targets(self, gateway, make_state):
        state = make_state(hand=["copper"])
        effect = EffectDefinition(kind=EffectKind.ADD_GOLD, value=1)
        assert gateway.auto_targets(effect, state, None) == []
