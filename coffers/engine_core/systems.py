"""
Collaborator systems the effect handlers call into.

Each concern (gold, cards, actions, units, houses) is an abstract base class
with the narrow interface the handlers need. The Reference* classes are
in-memory implementations operating directly on a GameState; hosts with
their own economy or deck rules can substitute their own.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
import logging
import math
import random

from ..definitions.cards import CardCatalog, PollutionType
from .state import CardInstance, GameState, GrowthStage, Job, UnitInstance
from .values import effective_gold_value

logger = logging.getLogger(__name__)


# =============================================================================
# Interfaces
# =============================================================================

class EconomySystem(ABC):
    """Gold and this turn's gold modifiers."""

    @abstractmethod
    def add_gold(self, amount: int, apply_modifiers: bool = True) -> int:
        """Add gold, returning the amount actually added."""

    @abstractmethod
    def subtract_gold(self, amount: int) -> None:
        ...

    @abstractmethod
    def can_afford(self, amount: int) -> bool:
        ...

    @abstractmethod
    def multiply_multiplier(self, factor: float) -> None:
        ...

    @abstractmethod
    def add_bonus(self, bonus: int) -> None:
        ...


class DeckSystem(ABC):
    """Card movement between deck, hand, discard pile and play area."""

    @abstractmethod
    def draw(self, count: int) -> list[CardInstance]:
        ...

    @abstractmethod
    def shuffle(self) -> None:
        ...

    @abstractmethod
    def destroy(self, card: CardInstance) -> bool:
        ...

    @abstractmethod
    def move_to_bottom(self, cards: list[CardInstance]) -> int:
        ...

    @abstractmethod
    def add_to_hand(self, card_id: str, is_temporary: bool = False) -> CardInstance:
        ...

    @abstractmethod
    def add_to_discard(self, card_id: str) -> CardInstance:
        ...

    @abstractmethod
    def settle(self, cards: list[CardInstance]) -> int:
        """Move treasures from hand to discard, returning their gold total."""

    @abstractmethod
    def reveal_top(self, count: int) -> list[CardInstance]:
        """Remove and return up to `count` cards from the top of the deck."""

    @abstractmethod
    def play(self, card: CardInstance) -> None:
        """Move a card from hand to the play area."""


class TurnSystem(ABC):

    @abstractmethod
    def add_actions(self, count: int) -> None:
        ...

    @abstractmethod
    def consume_action(self) -> bool:
        ...


class UnitSystem(ABC):

    @abstractmethod
    def create_unit(self, name: str, job: Job, stage: GrowthStage) -> UnitInstance:
        ...

    @abstractmethod
    def kill_unit(self, unit: UnitInstance) -> None:
        ...

    @abstractmethod
    def request_free_promotion(self, unit: UnitInstance) -> bool:
        ...

    @abstractmethod
    def set_promotion_level(self, unit: UnitInstance, level: int) -> None:
        """Change a unit's promotion level and recompute combat power."""


class HouseSystem(ABC):

    @abstractmethod
    def auto_place(self, unit: UnitInstance) -> bool:
        ...

    @abstractmethod
    def remove_unit(self, unit: UnitInstance) -> bool:
        ...


@dataclass
class Collaborators:
    """The systems one engine instance talks to."""
    economy: EconomySystem
    deck: DeckSystem
    turn: TurnSystem
    units: UnitSystem
    houses: HouseSystem


# =============================================================================
# Reference implementations
# =============================================================================

class ReferenceEconomy(EconomySystem):

    def __init__(self, state: GameState):
        self.state = state

    def add_gold(self, amount: int, apply_modifiers: bool = True) -> int:
        final = amount
        if apply_modifiers and self.state.gold_multiplier != 1.0:
            final = math.floor(final * self.state.gold_multiplier)
        if apply_modifiers and self.state.gold_bonus > 0:
            final += self.state.gold_bonus

        self.state.gold += final
        logger.debug("+%d gold (base %d, x%s) -> %d", final, amount, self.state.gold_multiplier, self.state.gold)
        return final

    def subtract_gold(self, amount: int) -> None:
        self.state.gold -= amount
        logger.debug("-%d gold -> %d", amount, self.state.gold)

    def can_afford(self, amount: int) -> bool:
        return self.state.gold >= amount

    def multiply_multiplier(self, factor: float) -> None:
        self.state.gold_multiplier *= factor

    def add_bonus(self, bonus: int) -> None:
        self.state.gold_bonus += bonus


class ReferenceDeck(DeckSystem):
    """
    Deck rules:
    - Drawing stops once the hand holds max_hand_size cards
    - Each damage pollution card in hand draws one card fewer
    - An empty deck is refilled by shuffling in the discard pile
    """

    def __init__(self, state: GameState, catalog: CardCatalog, rng: random.Random, max_hand_size: int = 10):
        self.state = state
        self.catalog = catalog
        self.rng = rng
        self.max_hand_size = max_hand_size

    def draw(self, count: int) -> list[CardInstance]:
        if len(self.state.hand) >= self.max_hand_size:
            logger.debug("Hand is full, draw skipped")
            return []

        penalty = self._damage_cards_in_hand()
        actual = max(0, count - penalty)
        if penalty:
            logger.debug("Damage penalty: draw %d -> %d", count, actual)

        drawn = []
        for _ in range(actual):
            if not self.state.deck:
                self._reshuffle_discard()
            if not self.state.deck:
                break
            card = self.state.deck.pop(0)
            self.state.hand.append(card)
            drawn.append(card)
        return drawn

    def shuffle(self) -> None:
        self.rng.shuffle(self.state.deck)

    def destroy(self, card: CardInstance) -> bool:
        for zone in (self.state.deck, self.state.hand, self.state.discard_pile, self.state.play_area):
            if card in zone:
                zone.remove(card)
                logger.debug("Destroyed %s", card.instance_id)
                return True
        logger.warning("Card to destroy not found: %s", card.instance_id)
        return False

    def move_to_bottom(self, cards: list[CardInstance]) -> int:
        moved = 0
        for card in cards:
            if card in self.state.hand:
                self.state.hand.remove(card)
                self.state.deck.append(card)
                moved += 1
        return moved

    def add_to_hand(self, card_id: str, is_temporary: bool = False) -> CardInstance:
        card = self.state.new_card(card_id, is_temporary=is_temporary)
        self.state.hand.append(card)
        return card

    def add_to_discard(self, card_id: str) -> CardInstance:
        card = self.state.new_card(card_id)
        self.state.discard_pile.append(card)
        return card

    def settle(self, cards: list[CardInstance]) -> int:
        total = 0
        for card in cards:
            definition = self.catalog.get_card(card.card_id)
            if definition is None or not definition.is_treasure:
                continue
            total += effective_gold_value(card, self.catalog)
            if card in self.state.hand:
                self.state.hand.remove(card)
                self.state.discard_pile.append(card)
        return total

    def reveal_top(self, count: int) -> list[CardInstance]:
        revealed = self.state.deck[:count]
        del self.state.deck[:count]
        return revealed

    def play(self, card: CardInstance) -> None:
        self.state.hand.remove(card)
        self.state.play_area.append(card)

    def _reshuffle_discard(self) -> None:
        if not self.state.discard_pile:
            return
        logger.debug("Shuffling %d discarded cards into the deck", len(self.state.discard_pile))
        self.state.deck.extend(self.state.discard_pile)
        self.state.discard_pile.clear()
        self.shuffle()

    def _damage_cards_in_hand(self) -> int:
        count = 0
        for card in self.state.hand:
            definition = self.catalog.get_card(card.card_id)
            if (definition is not None and definition.is_pollution
                    and definition.pollution_type == PollutionType.DAMAGE):
                count += 1
        return count


class ReferenceTurn(TurnSystem):

    def __init__(self, state: GameState):
        self.state = state

    def add_actions(self, count: int) -> None:
        self.state.actions_remaining += count

    def consume_action(self) -> bool:
        if self.state.actions_remaining <= 0:
            return False
        self.state.actions_remaining -= 1
        return True


class ReferenceUnits(UnitSystem):

    def __init__(self, state: GameState, houses: HouseSystem, max_promotion_level: int = 3):
        self.state = state
        self.houses = houses
        self.max_promotion_level = max_promotion_level
        self.pending_free_promotions: list[str] = []

    def create_unit(self, name: str, job: Job, stage: GrowthStage) -> UnitInstance:
        unit = UnitInstance(unit_id=self.state.new_unit_id(), name=name, job=job, stage=stage)
        unit.recalculate_combat_power()
        self.state.units.append(unit)
        logger.info("Unit created: %s (%s, %s)", name, job.value, stage.value)
        return unit

    def kill_unit(self, unit: UnitInstance) -> None:
        if unit.house_id:
            self.houses.remove_unit(unit)
        for zone in (self.state.deck, self.state.hand, self.state.discard_pile, self.state.play_area):
            zone[:] = [card for card in zone if card.owner_unit_id != unit.unit_id]
        if unit in self.state.units:
            self.state.units.remove(unit)
        logger.info("Unit died: %s", unit.name)

    def request_free_promotion(self, unit: UnitInstance) -> bool:
        if not unit.can_promote(self.max_promotion_level):
            logger.warning("Free promotion not possible for %s", unit.name)
            return False
        self.pending_free_promotions.append(unit.unit_id)
        return True

    def set_promotion_level(self, unit: UnitInstance, level: int) -> None:
        unit.promotion_level = level
        unit.recalculate_combat_power()


class ReferenceHouses(HouseSystem):
    """Children take child slots; adults take adult_a, then adult_b, house by house."""

    def __init__(self, state: GameState):
        self.state = state

    def auto_place(self, unit: UnitInstance) -> bool:
        for house in self.state.houses:
            if unit.stage == GrowthStage.CHILD:
                if house.has_child_slot:
                    house.child = unit.unit_id
                    unit.house_id = house.house_id
                    return True
                continue
            if house.has_adult_slot:
                if house.adult_a is None:
                    house.adult_a = unit.unit_id
                else:
                    house.adult_b = unit.unit_id
                unit.house_id = house.house_id
                return True

        logger.warning("No free slot for %s", unit.name)
        return False

    def remove_unit(self, unit: UnitInstance) -> bool:
        for house in self.state.houses:
            if house.house_id != unit.house_id:
                continue
            for slot in ("adult_a", "adult_b", "child"):
                if getattr(house, slot) == unit.unit_id:
                    setattr(house, slot, None)
                    unit.house_id = None
                    return True
        return False


def reference_collaborators(
    state: GameState,
    catalog: CardCatalog,
    rng: random.Random,
    max_hand_size: int = 10,
    max_promotion_level: int = 3,
) -> Collaborators:
    """Build the in-memory systems for a state."""
    houses = ReferenceHouses(state)
    return Collaborators(
        economy=ReferenceEconomy(state),
        deck=ReferenceDeck(state, catalog, rng, max_hand_size=max_hand_size),
        turn=ReferenceTurn(state),
        units=ReferenceUnits(state, houses, max_promotion_level=max_promotion_level),
        houses=houses,
    )
