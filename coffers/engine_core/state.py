"""
Game State - Mutable state container shared by the engine and its systems.

Design principles:
- Shared by reference: later effects observe earlier mutations
- Serializable: to_dict() produces a JSON-friendly summary for the API
- Definitions live in the CardCatalog; the state only holds instances
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..definitions.cards import TreasureGrade


class Job(Enum):
    NONE = "none"
    PAWN = "pawn"
    KNIGHT = "knight"
    BISHOP = "bishop"
    ROOK = "rook"
    QUEEN = "queen"


class GrowthStage(Enum):
    CHILD = "child"
    YOUNG = "young"
    MIDDLE = "middle"
    OLD = "old"


class PersistentEffectKind(Enum):
    """Effects the turn-advance collaborator applies on later turns."""
    DELAYED_GOLD = "delayed_gold"  # Gold once, after N turns
    GOLD_PER_TURN = "gold_per_turn"  # Gold each turn for N turns
    MAINTENANCE_INCREASE = "maintenance_increase"  # Upkeep change for N turns


JOB_BASE_COMBAT_POWER: dict[Job, int] = {
    Job.PAWN: 10,
    Job.KNIGHT: 30,
    Job.BISHOP: 15,
    Job.ROOK: 25,
    Job.QUEEN: 35,
}

PROMOTION_BONUS_PER_LEVEL = 10
OLD_AGE_MULTIPLIER = 0.75


@dataclass
class CardInstance:
    """
    A card instance in the game.

    Note: This is a runtime instance, not the definition.
    The definition lives in CardCatalog.cards.
    """
    card_id: str  # References CardDefinition.id
    instance_id: str  # Unique per copy
    owner_unit_id: str | None = None
    is_temporary: bool = False  # Removed at turn end

    # Boost applied this turn (treasures only)
    boosted_grade: TreasureGrade | None = None

    def __hash__(self):
        return hash(self.instance_id)

    def __eq__(self, other):
        if not isinstance(other, CardInstance):
            return False
        return self.instance_id == other.instance_id

    def to_dict(self) -> dict[str, Any]:
        return {
            "card_id": self.card_id,
            "instance_id": self.instance_id,
            "is_temporary": self.is_temporary,
            "boosted_grade": self.boosted_grade.name.lower() if self.boosted_grade else None,
        }


@dataclass
class UnitInstance:
    """A unit living in one of the houses."""
    unit_id: str
    name: str
    job: Job = Job.PAWN
    stage: GrowthStage = GrowthStage.YOUNG
    promotion_level: int = 0
    promoted_this_turn: bool = False
    has_disease: bool = False
    combat_power: int = 0
    house_id: str | None = None

    def can_promote(self, max_level: int = 3) -> bool:
        if self.stage not in (GrowthStage.YOUNG, GrowthStage.MIDDLE):
            return False
        if self.promoted_this_turn or self.has_disease:
            return False
        return self.promotion_level < max_level

    def recalculate_combat_power(self) -> int:
        if self.stage == GrowthStage.CHILD or self.job == Job.NONE:
            self.combat_power = 0
            return 0
        base = JOB_BASE_COMBAT_POWER[self.job] + self.promotion_level * PROMOTION_BONUS_PER_LEVEL
        factor = OLD_AGE_MULTIPLIER if self.stage == GrowthStage.OLD else 1.0
        self.combat_power = round(base * factor)
        return self.combat_power

    def to_dict(self) -> dict[str, Any]:
        return {
            "unit_id": self.unit_id,
            "name": self.name,
            "job": self.job.value,
            "stage": self.stage.value,
            "promotion_level": self.promotion_level,
            "combat_power": self.combat_power,
            "house_id": self.house_id,
        }


@dataclass
class HouseInstance:
    """A house with two adult slots and one child slot."""
    house_id: str
    adult_a: str | None = None
    adult_b: str | None = None
    child: str | None = None

    @property
    def has_adult_slot(self) -> bool:
        return self.adult_a is None or self.adult_b is None

    @property
    def has_child_slot(self) -> bool:
        return self.child is None


@dataclass
class PersistentEffect:
    effect_id: str
    kind: PersistentEffectKind
    value: int
    remaining_turns: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "effect_id": self.effect_id,
            "kind": self.kind.value,
            "value": self.value,
            "remaining_turns": self.remaining_turns,
        }


@dataclass
class GameState:
    """
    Complete game state for one session.

    Deck order: index 0 is the top of the deck.
    """
    game_id: str = "game"
    turn_number: int = 1

    gold: int = 0
    actions_remaining: int = 1

    # Card zones
    deck: list[CardInstance] = field(default_factory=list)
    hand: list[CardInstance] = field(default_factory=list)
    discard_pile: list[CardInstance] = field(default_factory=list)
    play_area: list[CardInstance] = field(default_factory=list)

    # Units and houses
    units: list[UnitInstance] = field(default_factory=list)
    houses: list[HouseInstance] = field(default_factory=list)

    # Effects applied on later turns
    active_effects: list[PersistentEffect] = field(default_factory=list)

    # Turn modifiers
    gold_multiplier: float = 1.0
    gold_bonus: int = 0
    pollution_ignored: bool = False
    promotion_discount: int = 0

    # Id counters
    _next_instance: int = 0
    _next_unit: int = 0
    _next_effect: int = 0

    @property
    def deck_top(self) -> CardInstance | None:
        return self.deck[0] if self.deck else None

    def new_card(self, card_id: str, is_temporary: bool = False) -> CardInstance:
        """Create a card instance with a fresh instance id."""
        self._next_instance += 1
        return CardInstance(
            card_id=card_id,
            instance_id=f"{card_id}#{self._next_instance}",
            is_temporary=is_temporary,
        )

    def new_unit_id(self) -> str:
        self._next_unit += 1
        return f"unit_{self._next_unit}"

    def new_effect_id(self) -> str:
        self._next_effect += 1
        return f"effect_{self._next_effect}"

    def find_in_hand(self, instance_id: str) -> CardInstance | None:
        for card in self.hand:
            if card.instance_id == instance_id:
                return card
        return None

    def all_cards(self) -> list[CardInstance]:
        """Deck, hand and discard pile (the player's whole deck)."""
        return self.deck + self.hand + self.discard_pile

    def to_dict(self) -> dict[str, Any]:
        return {
            "game_id": self.game_id,
            "turn_number": self.turn_number,
            "gold": self.gold,
            "actions_remaining": self.actions_remaining,
            "deck_count": len(self.deck),
            "hand": [c.to_dict() for c in self.hand],
            "discard_count": len(self.discard_pile),
            "play_area": [c.to_dict() for c in self.play_area],
            "units": [u.to_dict() for u in self.units],
            "active_effects": [e.to_dict() for e in self.active_effects],
            "gold_multiplier": self.gold_multiplier,
            "gold_bonus": self.gold_bonus,
            "pollution_ignored": self.pollution_ignored,
            "promotion_discount": self.promotion_discount,
        }
