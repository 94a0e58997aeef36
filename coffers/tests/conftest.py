"""
Pytest fixtures for Coffers tests.
"""

import random

import pytest

from ..config import EngineConfig
from ..definitions.cards import CardCatalog
from ..engine_core.state import GameState, GrowthStage, HouseInstance, Job, UnitInstance
from ..engine_core.effect_resolver import EffectResolver
from ..engine_core.observers import RecordingObserver
from ..games.starter import create_starter_catalog


class ScriptedRandom(random.Random):
    """
    A Random whose randrange/randint answers come from a script.

    Falls back to the seeded generator once the script runs out.
    """

    def __init__(self, *answers: int):
        super().__init__(0)
        self.answers = list(answers)

    def randrange(self, *args, **kwargs):
        if self.answers:
            return self.answers.pop(0)
        return super().randrange(*args, **kwargs)

    def randint(self, a, b):
        if self.answers:
            return self.answers.pop(0)
        return super().randint(a, b)


@pytest.fixture
def catalog() -> CardCatalog:
    """The starter catalog."""
    return create_starter_catalog()


@pytest.fixture
def make_state():
    """
    Factory for game states with the given zones (card ids, top of deck first).
    """
    def _make(hand=(), deck=(), discard=(), gold=0, actions=1, units=0) -> GameState:
        state = GameState(game_id="test_game", gold=gold, actions_remaining=actions)
        state.hand = [state.new_card(card_id) for card_id in hand]
        state.deck = [state.new_card(card_id) for card_id in deck]
        state.discard_pile = [state.new_card(card_id) for card_id in discard]
        state.houses = [HouseInstance(house_id="house_1"), HouseInstance(house_id="house_2")]
        for i in range(units):
            unit = UnitInstance(
                unit_id=state.new_unit_id(),
                name=f"Unit {i + 1}",
                job=Job.PAWN,
                stage=GrowthStage.YOUNG,
            )
            unit.recalculate_combat_power()
            state.units.append(unit)
        return state

    return _make


@pytest.fixture
def make_resolver(catalog):
    """Factory for a resolver over a state, with an optional rng and config."""
    def _make(state: GameState, rng=None, **config) -> EffectResolver:
        return EffectResolver(
            state,
            catalog,
            config=EngineConfig(seed=7, **config),
            rng=rng,
        )

    return _make


@pytest.fixture
def observer() -> RecordingObserver:
    return RecordingObserver()
