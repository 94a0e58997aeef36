"""
Condition Evaluator - Boolean predicates over game state and prior results.

Every supported condition reads one integer quantity (gold, a card count,
1/0 for yes/no facts) and compares it against an operand. The comparison
declared on the condition wins; otherwise each kind has a natural default
(gold_above means gold >= value, hand_has_treasure means at least one).

Condition kinds this version does not support evaluate to True.
"""

from __future__ import annotations
from typing import Callable, Iterable
import logging

from ..definitions.effect_dsl import (
    Comparison,
    Condition,
    ConditionGroup,
    ConditionKind,
    kind_name,
    parse_kind,
)
from ..definitions.cards import CardCatalog, CardType, TreasureGrade, card_id_for_grade
from .state import CardInstance, GameState
from .results import ResultStack

logger = logging.getLogger(__name__)


def compare(left: int, op: Comparison, right: int) -> bool:
    """Apply a comparison operator."""
    if op == Comparison.EQUAL:
        return left == right
    if op == Comparison.NOT_EQUAL:
        return left != right
    if op == Comparison.GREATER_THAN:
        return left > right
    if op == Comparison.LESS_THAN:
        return left < right
    if op == Comparison.GREATER_OR_EQUAL:
        return left >= right
    if op == Comparison.LESS_OR_EQUAL:
        return left <= right
    raise ValueError(f"Unknown comparison: {op}")


# Natural operator and operand per kind. An operand of None means the
# condition's own value.
_DEFAULTS: dict[ConditionKind, tuple[Comparison, int | None]] = {
    ConditionKind.GOLD_ABOVE: (Comparison.GREATER_OR_EQUAL, None),
    ConditionKind.GOLD_BELOW: (Comparison.LESS_THAN, None),
    ConditionKind.HAND_HAS_TREASURE: (Comparison.GREATER_OR_EQUAL, 1),
    ConditionKind.HAND_HAS_POLLUTION: (Comparison.GREATER_OR_EQUAL, 1),
    ConditionKind.HAND_HAS_ACTION: (Comparison.GREATER_OR_EQUAL, 1),
    ConditionKind.HAND_COUNT_ABOVE: (Comparison.GREATER_OR_EQUAL, None),
    ConditionKind.HAND_COUNT_BELOW: (Comparison.LESS_THAN, None),
    ConditionKind.DECK_TOP_IS_TREASURE: (Comparison.GREATER_OR_EQUAL, 1),
    ConditionKind.DECK_TOP_IS_POLLUTION: (Comparison.GREATER_OR_EQUAL, 1),
    ConditionKind.DECK_TOP_IS_ACTION: (Comparison.GREATER_OR_EQUAL, 1),
    ConditionKind.DECK_NOT_EMPTY: (Comparison.GREATER_OR_EQUAL, 1),
    ConditionKind.HAS_UNIT: (Comparison.GREATER_OR_EQUAL, 1),
    ConditionKind.HAS_MULTIPLE_UNITS: (Comparison.GREATER_OR_EQUAL, None),
    ConditionKind.HAS_PROMOTABLE_UNIT: (Comparison.GREATER_OR_EQUAL, 1),
    ConditionKind.PREVIOUS_EFFECT_SUCCEEDED: (Comparison.GREATER_OR_EQUAL, 1),
    ConditionKind.PREVIOUS_COUNT_ABOVE: (Comparison.GREATER_OR_EQUAL, None),
    ConditionKind.HAS_COPPER_IN_DECK: (Comparison.GREATER_OR_EQUAL, 1),
    ConditionKind.HAS_POLLUTION_IN_DECK: (Comparison.GREATER_OR_EQUAL, 1),
    ConditionKind.HAS_SPECIFIC_CARD_IN_DECK: (Comparison.GREATER_OR_EQUAL, 1),
}


class ConditionEvaluator:
    """
    Evaluates conditions for the engine.

    Holds the card catalog (to classify cards by type) and the promotion
    cap; otherwise stateless.
    """

    def __init__(self, catalog: CardCatalog, max_promotion_level: int = 3):
        self.catalog = catalog
        self.max_promotion_level = max_promotion_level

        self._readers: dict[ConditionKind, Callable[[Condition, GameState, ResultStack], int]] = {
            ConditionKind.GOLD_ABOVE: lambda c, s, r: s.gold,
            ConditionKind.GOLD_BELOW: lambda c, s, r: s.gold,
            ConditionKind.HAND_HAS_TREASURE: lambda c, s, r: self._count_type(s.hand, CardType.TREASURE),
            ConditionKind.HAND_HAS_POLLUTION: lambda c, s, r: self._count_type(s.hand, CardType.POLLUTION),
            ConditionKind.HAND_HAS_ACTION: lambda c, s, r: self._count_type(s.hand, CardType.ACTION),
            ConditionKind.HAND_COUNT_ABOVE: lambda c, s, r: len(s.hand),
            ConditionKind.HAND_COUNT_BELOW: lambda c, s, r: len(s.hand),
            ConditionKind.DECK_TOP_IS_TREASURE: lambda c, s, r: self._deck_top_is(s, CardType.TREASURE),
            ConditionKind.DECK_TOP_IS_POLLUTION: lambda c, s, r: self._deck_top_is(s, CardType.POLLUTION),
            ConditionKind.DECK_TOP_IS_ACTION: lambda c, s, r: self._deck_top_is(s, CardType.ACTION),
            ConditionKind.DECK_NOT_EMPTY: lambda c, s, r: len(s.deck),
            ConditionKind.HAS_UNIT: lambda c, s, r: len(s.units),
            ConditionKind.HAS_MULTIPLE_UNITS: lambda c, s, r: len(s.units),
            ConditionKind.HAS_PROMOTABLE_UNIT: lambda c, s, r: self._count_promotable(s),
            ConditionKind.PREVIOUS_EFFECT_SUCCEEDED: lambda c, s, r: int(r.last_succeeded),
            ConditionKind.PREVIOUS_COUNT_ABOVE: lambda c, s, r: r.last_count,
            ConditionKind.HAS_COPPER_IN_DECK: lambda c, s, r: self._count_card_id(
                s.all_cards(), card_id_for_grade(TreasureGrade.COPPER)),
            ConditionKind.HAS_POLLUTION_IN_DECK: lambda c, s, r: self._count_type(s.all_cards(), CardType.POLLUTION),
            ConditionKind.HAS_SPECIFIC_CARD_IN_DECK: lambda c, s, r: self._count_card_id(s.all_cards(), c.card_id),
        }

    def evaluate(self, condition: Condition, state: GameState, results: ResultStack) -> bool:
        """Evaluate a single condition."""
        kind = parse_kind(ConditionKind, condition.kind)
        if kind == ConditionKind.NONE:
            return True

        reader = self._readers.get(kind) if isinstance(kind, ConditionKind) else None
        if reader is None:
            logger.warning("Unsupported condition kind %r, treating as satisfied", kind_name(kind))
            return True

        if kind == ConditionKind.HAS_SPECIFIC_CARD_IN_DECK and not condition.card_id:
            logger.warning("has_specific_card_in_deck without card_id, treating as satisfied")
            return True

        quantity = reader(condition, state, results)
        op, operand = self._operator_for(kind, condition)
        return compare(quantity, op, operand)

    def evaluate_all(self, conditions: Iterable[Condition], state: GameState, results: ResultStack) -> bool:
        """AND of all conditions, stopping at the first false one."""
        for condition in conditions:
            if not self.evaluate(condition, state, results):
                return False
        return True

    def group_satisfied(self, group: ConditionGroup, state: GameState, results: ResultStack) -> bool:
        """Whether a group's "then" branch applies. Empty groups always do."""
        return self.evaluate_all(group.conditions, state, results)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _operator_for(self, kind: ConditionKind, condition: Condition) -> tuple[Comparison, int]:
        if condition.comparison is not None:
            return condition.comparison, condition.value

        op, operand = _DEFAULTS[kind]
        if operand is not None:
            return op, operand
        if kind == ConditionKind.HAS_MULTIPLE_UNITS and condition.value <= 0:
            return op, 2
        return op, condition.value

    def _card_type(self, card: CardInstance) -> CardType | None:
        definition = self.catalog.get_card(card.card_id)
        if definition is None:
            logger.debug("Card %s has no definition", card.card_id)
            return None
        return definition.card_type

    def _count_type(self, cards: list[CardInstance], card_type: CardType) -> int:
        return sum(1 for card in cards if self._card_type(card) == card_type)

    def _deck_top_is(self, state: GameState, card_type: CardType) -> int:
        top = state.deck_top
        return int(top is not None and self._card_type(top) == card_type)

    def _count_promotable(self, state: GameState) -> int:
        return sum(1 for unit in state.units if unit.can_promote(self.max_promotion_level))

    @staticmethod
    def _count_card_id(cards: list[CardInstance], card_id: str | None) -> int:
        return sum(1 for card in cards if card.card_id == card_id)
