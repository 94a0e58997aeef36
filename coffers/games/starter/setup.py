"""
Starter Game Setup - Creates the initial game state.

This module handles:
- Building the starting deck (seven coppers plus starter actions)
- Shuffling with a seed for determinism
- Dealing the opening hand
- Placing the starting units in the first house
"""

from __future__ import annotations
import random

from ...engine_core.state import GameState, GrowthStage, HouseInstance, Job, UnitInstance

STARTING_DECK: list[str] = ["copper"] * 7 + ["silver", "smelting", "appraisal"]
STARTING_HAND_SIZE = 5
STARTING_ACTIONS = 1
STARTING_HOUSES = 2


def setup_starter_game(
    random_seed: int | None = None,
    deck: list[str] | None = None,
    hand_size: int = STARTING_HAND_SIZE,
    gold: int = 0,
) -> GameState:
    """
    Set up a new starter game.

    Args:
        random_seed: Seed for deterministic shuffling
        deck: Card ids for the starting deck (defaults to STARTING_DECK)
        hand_size: Cards dealt into the opening hand
        gold: Starting gold

    Returns:
        Initial GameState ready for play
    """
    rng = random.Random(random_seed)

    state = GameState(
        game_id=f"starter_{random_seed if random_seed is not None else rng.randint(0, 999999)}",
        gold=gold,
        actions_remaining=STARTING_ACTIONS,
    )

    state.deck = [state.new_card(card_id) for card_id in (deck or STARTING_DECK)]
    rng.shuffle(state.deck)

    deal = min(hand_size, len(state.deck))
    state.hand = state.deck[:deal]
    del state.deck[:deal]

    state.houses = [HouseInstance(house_id=f"house_{i + 1}") for i in range(STARTING_HOUSES)]
    _add_starting_units(state)
    return state


def _add_starting_units(state: GameState) -> None:
    house = state.houses[0]
    for slot, name in (("adult_a", "Alden"), ("adult_b", "Brea")):
        unit = UnitInstance(
            unit_id=state.new_unit_id(),
            name=name,
            job=Job.PAWN,
            stage=GrowthStage.YOUNG,
            house_id=house.house_id,
        )
        unit.recalculate_combat_power()
        setattr(house, slot, unit.unit_id)
        state.units.append(unit)
