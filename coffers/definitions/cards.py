"""
Card and event definitions.

Static data shared by every game session: card types, the treasure ladder,
card definitions carrying conditional effects, and random events.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from .effect_dsl import Condition, ConditionGroup


class CardType(Enum):
    """Card categories."""
    TREASURE = "treasure"  # Produces gold, costs no action
    ACTION = "action"  # Executes effects, costs one action
    POLLUTION = "pollution"  # Penalty card, unplayable


class TreasureGrade(Enum):
    """Treasure ladder, lowest to highest."""
    COPPER = 1
    SILVER = 2
    GOLD = 3
    EMERALD = 4
    SAPPHIRE = 5
    RUBY = 6
    DIAMOND = 7


class CardRarity(Enum):
    BASIC = "basic"
    ADVANCED = "advanced"
    RARE = "rare"
    SUPER_RARE = "super_rare"
    LEGENDARY = "legendary"


class PollutionType(Enum):
    """Pollution card penalties."""
    DEBT = "debt"  # Only occupies hand space
    CURSE = "curse"  # -2 gold at turn end
    DISEASE = "disease"  # Owning unit cannot promote
    DAMAGE = "damage"  # -1 draw this turn


# Gold value and card id for each grade
TREASURE_GOLD_VALUES: dict[TreasureGrade, int] = {
    TreasureGrade.COPPER: 1,
    TreasureGrade.SILVER: 2,
    TreasureGrade.GOLD: 4,
    TreasureGrade.EMERALD: 7,
    TreasureGrade.SAPPHIRE: 12,
    TreasureGrade.RUBY: 20,
    TreasureGrade.DIAMOND: 35,
}

TREASURE_CARD_IDS: dict[TreasureGrade, str] = {
    TreasureGrade.COPPER: "copper",
    TreasureGrade.SILVER: "silver",
    TreasureGrade.GOLD: "gold_coin",
    TreasureGrade.EMERALD: "emerald",
    TreasureGrade.SAPPHIRE: "sapphire",
    TreasureGrade.RUBY: "ruby",
    TreasureGrade.DIAMOND: "diamond",
}


def gold_value_of(grade: TreasureGrade) -> int:
    return TREASURE_GOLD_VALUES[grade]


def card_id_for_grade(grade: TreasureGrade) -> str:
    return TREASURE_CARD_IDS[grade]


def next_grade(grade: TreasureGrade) -> TreasureGrade | None:
    """Grade one step up the ladder, or None at the top."""
    if grade == TreasureGrade.DIAMOND:
        return None
    return TreasureGrade(grade.value + 1)


def boosted_grade(grade: TreasureGrade, steps: int) -> TreasureGrade:
    """Grade raised by `steps`, capped at diamond."""
    return TreasureGrade(min(grade.value + steps, TreasureGrade.DIAMOND.value))


@dataclass
class CardDefinition:
    """
    Static card definition.

    Note: This is the definition, not a runtime instance.
    Runtime copies live in GameState as CardInstance.
    """
    id: str
    name: str
    card_type: CardType
    description: str = ""
    rarity: CardRarity = CardRarity.BASIC

    # Treasure cards
    treasure_grade: TreasureGrade | None = None

    # Pollution cards
    pollution_type: PollutionType | None = None

    # Action cards
    job_pools: list[str] = field(default_factory=list)
    effects: list[ConditionGroup] = field(default_factory=list)

    @property
    def gold_value(self) -> int:
        if self.treasure_grade is None:
            return 0
        return gold_value_of(self.treasure_grade)

    @property
    def is_treasure(self) -> bool:
        return self.card_type == CardType.TREASURE

    @property
    def is_action(self) -> bool:
        return self.card_type == CardType.ACTION

    @property
    def is_pollution(self) -> bool:
        return self.card_type == CardType.POLLUTION


@dataclass
class EventChoice:
    """One option of a choice event."""
    choice_id: str
    text: str
    requirements: list[Condition] = field(default_factory=list)
    effects: list[ConditionGroup] = field(default_factory=list)


@dataclass
class EventDefinition:
    """
    A random event.

    `trigger_conditions` gate whether the event can fire at all. A plain
    event runs `effects` when it fires; a choice event runs only the
    selected choice's effects, each choice with its own requirements.
    """
    id: str
    name: str
    description: str = ""
    event_type: str = "positive"
    trigger_conditions: list[Condition] = field(default_factory=list)
    effects: list[ConditionGroup] = field(default_factory=list)
    choices: list[EventChoice] = field(default_factory=list)

    @property
    def has_choices(self) -> bool:
        return len(self.choices) > 0

    def get_choice(self, choice_id: str) -> EventChoice | None:
        for choice in self.choices:
            if choice.choice_id == choice_id:
                return choice
        return None


@dataclass
class CardCatalog:
    """
    All card and event definitions for a game.

    Lookup by id is the only thing the engine needs from it.
    """
    cards: dict[str, CardDefinition] = field(default_factory=dict)
    events: dict[str, EventDefinition] = field(default_factory=dict)

    def get_card(self, card_id: str) -> CardDefinition | None:
        return self.cards.get(card_id)

    def get_event(self, event_id: str) -> EventDefinition | None:
        return self.events.get(event_id)

    def has_card(self, card_id: str) -> bool:
        return card_id in self.cards

    def add_card(self, card: CardDefinition) -> None:
        self.cards[card.id] = card

    def add_event(self, event: EventDefinition) -> None:
        self.events[event.id] = event

    def treasure_card(self, grade: TreasureGrade) -> CardDefinition | None:
        return self.cards.get(card_id_for_grade(grade))
