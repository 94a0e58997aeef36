"""
Effect DSL - Conditional, data-driven effect definitions.

This module defines the data that cards and events carry:
- EffectDefinition: one effect (what to do, how much, to which targets)
- Condition: one predicate over game state or prior results
- ConditionGroup: AND-combined conditions guarding a then/else effect list
- DynamicValueSource: a magnitude computed from state at resolution time

Key design decisions:
- Definitions are immutable; the engine never mutates them
- Kinds are closed enums, but data may carry kinds this version does not
  know. Those are kept as raw strings and handled by the engine's
  permissive fallbacks instead of failing the load.
- Target selection is declared (TargetKind), never performed, here
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar

E = TypeVar("E", bound=Enum)


class EffectKind(Enum):
    """Types of effects a card or event can execute."""
    # Basic
    DRAW_CARD = "draw_card"
    ADD_ACTION = "add_action"
    ADD_GOLD = "add_gold"

    # Treasure
    CREATE_TEMP_TREASURE = "create_temp_treasure"
    BOOST_TREASURE = "boost_treasure"
    PERMANENT_UPGRADE = "permanent_upgrade"
    SETTLE_CARD = "settle_card"

    # Gold modifiers (this turn)
    GOLD_MULTIPLIER = "gold_multiplier"
    GOLD_BONUS = "gold_bonus"

    # Deck management
    DESTROY_CARD = "destroy_card"
    DESTROY_POLLUTION = "destroy_pollution"
    MOVE_TO_DECK_BOTTOM = "move_to_deck_bottom"
    SHUFFLE_DECK = "shuffle_deck"

    # Gambling / reveal
    GAMBLE = "gamble"
    REVEAL_AND_GAIN = "reveal_and_gain"

    # Persistent (applied by the turn-advance collaborator)
    DELAYED_GOLD = "delayed_gold"
    PERSISTENT_GOLD = "persistent_gold"
    PERSISTENT_MAINTENANCE = "persistent_maintenance"

    # Special
    DRAW_UNTIL = "draw_until"
    IGNORE_POLLUTION = "ignore_pollution"

    # Units (event effects)
    GAIN_UNIT = "gain_unit"
    REMOVE_UNIT = "remove_unit"
    FREE_PROMOTION = "free_promotion"
    ADD_PROMOTION_LEVEL = "add_promotion_level"

    # Whole-deck cards (event effects)
    ADD_CARD_TO_DECK = "add_card_to_deck"
    REMOVE_CARD_FROM_DECK = "remove_card_from_deck"
    UPGRADE_CARD_IN_DECK = "upgrade_card_in_deck"

    # Gold / turn modifiers (event effects)
    SPEND_GOLD_PERCENT = "spend_gold_percent"
    PROMOTION_DISCOUNT = "promotion_discount"
    MAINTENANCE_MODIFIER = "maintenance_modifier"


class TargetKind(Enum):
    """Which cards an effect acts on."""
    NONE = "none"
    SELF = "self"  # The card being played
    HAND_CARD = "hand_card"
    HAND_TREASURE = "hand_treasure"
    HAND_POLLUTION = "hand_pollution"
    HAND_ACTION = "hand_action"
    ALL_HAND_TREASURE = "all_hand_treasure"
    ALL_HAND_POLLUTION = "all_hand_pollution"
    DECK_TOP = "deck_top"
    RANDOM = "random"


class ConditionKind(Enum):
    """Types of conditions guarding a ConditionGroup."""
    NONE = "none"  # Always true

    # Gold
    GOLD_ABOVE = "gold_above"
    GOLD_BELOW = "gold_below"

    # Hand
    HAND_HAS_TREASURE = "hand_has_treasure"
    HAND_HAS_POLLUTION = "hand_has_pollution"
    HAND_HAS_ACTION = "hand_has_action"
    HAND_COUNT_ABOVE = "hand_count_above"
    HAND_COUNT_BELOW = "hand_count_below"

    # Deck
    DECK_TOP_IS_TREASURE = "deck_top_is_treasure"
    DECK_TOP_IS_POLLUTION = "deck_top_is_pollution"
    DECK_TOP_IS_ACTION = "deck_top_is_action"
    DECK_NOT_EMPTY = "deck_not_empty"

    # Units
    HAS_UNIT = "has_unit"
    HAS_MULTIPLE_UNITS = "has_multiple_units"
    HAS_PROMOTABLE_UNIT = "has_promotable_unit"

    # Previous effect
    PREVIOUS_EFFECT_SUCCEEDED = "previous_effect_succeeded"
    PREVIOUS_COUNT_ABOVE = "previous_count_above"

    # Whole deck (deck + hand + discard)
    HAS_COPPER_IN_DECK = "has_copper_in_deck"
    HAS_POLLUTION_IN_DECK = "has_pollution_in_deck"
    HAS_SPECIFIC_CARD_IN_DECK = "has_specific_card_in_deck"


class Comparison(Enum):
    """Comparison operators for conditions."""
    EQUAL = "=="
    NOT_EQUAL = "!="
    GREATER_THAN = ">"
    LESS_THAN = "<"
    GREATER_OR_EQUAL = ">="
    LESS_OR_EQUAL = "<="


class ValueSourceKind(Enum):
    """Where a dynamic magnitude comes from."""
    FIXED = "fixed"

    # Previous effect
    PREVIOUS_COUNT = "previous_count"
    PREVIOUS_VALUE = "previous_value"

    # Current state
    CURRENT_GOLD = "current_gold"
    CURRENT_GOLD_PERCENT = "current_gold_percent"
    HAND_COUNT = "hand_count"
    DECK_COUNT = "deck_count"
    UNIT_COUNT = "unit_count"

    # Cards
    DECK_TOP_GOLD_VALUE = "deck_top_gold_value"
    TARGET_GOLD_VALUE = "target_gold_value"

    # Random
    RANDOM_RANGE = "random_range"
    RANDOM_DICE = "random_dice"


def parse_kind(enum_cls: type[E], raw: E | str) -> E | str:
    """
    Convert a raw kind string to its enum member.

    Strings this version does not know are returned unchanged.
    """
    if isinstance(raw, enum_cls):
        return raw
    try:
        return enum_cls(raw)
    except ValueError:
        return raw


def kind_name(kind: Enum | str) -> str:
    """Wire name of a kind, whether known or not."""
    return kind.value if isinstance(kind, Enum) else str(kind)


@dataclass(frozen=True)
class DynamicValueSource:
    """
    A magnitude computed at resolution time.

    Final magnitude is round(base_result * multiplier), where base_result
    depends on kind. `base` doubles as the percent for CURRENT_GOLD_PERCENT
    and the die size for RANDOM_DICE; `min`/`max` bound RANDOM_RANGE.
    """
    kind: ValueSourceKind | str = ValueSourceKind.FIXED
    base: int = 0
    multiplier: float = 1.0
    min: int = 0
    max: int = 0

    @property
    def is_fixed(self) -> bool:
        return self.kind == ValueSourceKind.FIXED


@dataclass(frozen=True)
class Condition:
    """
    A condition evaluated against game state or the result stack.

    When comparison is None the kind's natural operator applies
    (gold_above uses >=, gold_below uses <, and so on).
    """
    kind: ConditionKind | str
    value: int = 0
    comparison: Comparison | None = None
    card_id: str | None = None  # For HAS_SPECIFIC_CARD_IN_DECK


@dataclass(frozen=True)
class EffectDefinition:
    """
    A single effect.

    `value` is the fixed magnitude, used unless `dynamic` names a non-fixed
    source. Gamble outcomes may each be fixed ints or dynamic sources.
    """
    kind: EffectKind | str
    value: int = 0
    dynamic: DynamicValueSource | None = None

    # Targeting
    target: TargetKind = TargetKind.NONE
    max_targets: int = 0  # 0 = every eligible candidate

    # Kind-specific parameters
    create_grade: int | None = None  # TreasureGrade value for CREATE_TEMP_TREASURE
    duration: int = 0  # Turns, for persistent effects
    success_chance: int = 0  # Percent, for GAMBLE
    success_value: int | DynamicValueSource = 0
    fail_value: int | DynamicValueSource = 0
    card_id: str | None = None
    card_rarity: str | None = None
    job_pool: str | None = None

    @property
    def has_dynamic_value(self) -> bool:
        return self.dynamic is not None and not self.dynamic.is_fixed


@dataclass(frozen=True)
class ConditionGroup:
    """
    Conditions combined with AND, guarding a then/else effect list.

    An empty condition list is always satisfied.
    """
    conditions: tuple[Condition, ...] = ()
    effects: tuple[EffectDefinition, ...] = ()
    else_effects: tuple[EffectDefinition, ...] = ()


# ============================================================================
# Factory functions for common effect patterns
# ============================================================================

def draw_effect(count: int = 1) -> EffectDefinition:
    """Create a draw effect."""
    return EffectDefinition(kind=EffectKind.DRAW_CARD, value=count)


def gold_effect(amount: int) -> EffectDefinition:
    """Create an add-gold effect."""
    return EffectDefinition(kind=EffectKind.ADD_GOLD, value=amount)


def chained_effect(
    kind: EffectKind,
    source: ValueSourceKind = ValueSourceKind.PREVIOUS_COUNT,
    multiplier: float = 1.0,
) -> EffectDefinition:
    """Create an effect whose magnitude reads the previous result."""
    return EffectDefinition(
        kind=kind,
        dynamic=DynamicValueSource(kind=source, multiplier=multiplier),
    )


def settle_effect(target: TargetKind = TargetKind.HAND_TREASURE, max_targets: int = 0) -> EffectDefinition:
    """Create a settle effect over selected (or all) hand treasures."""
    return EffectDefinition(
        kind=EffectKind.SETTLE_CARD,
        target=target,
        max_targets=max_targets,
    )


def gamble_effect(
    success_chance: int,
    success_value: int | DynamicValueSource,
    fail_value: int | DynamicValueSource = 0,
) -> EffectDefinition:
    """Create a gamble effect."""
    return EffectDefinition(
        kind=EffectKind.GAMBLE,
        success_chance=success_chance,
        success_value=success_value,
        fail_value=fail_value,
    )


def when(*conditions: Condition, then: list[EffectDefinition], otherwise: list[EffectDefinition] | None = None) -> ConditionGroup:
    """Create a conditional group."""
    return ConditionGroup(
        conditions=tuple(conditions),
        effects=tuple(then),
        else_effects=tuple(otherwise or ()),
    )


def always(*effects: EffectDefinition) -> ConditionGroup:
    """Create an unconditional group."""
    return ConditionGroup(effects=tuple(effects))
